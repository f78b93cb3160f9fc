"""
Tests for the core exception hierarchy and field validators.
"""

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.validators import validate_no_html, validate_reference_code


class TestBaseApplicationError:
    def test_to_dict_includes_details_when_present(self):
        error = ValidationError("Bad amount", error_code="INVALID_AMOUNT", details={"amount_cents": 0})

        assert error.to_dict() == {
            "error": "Bad amount",
            "error_code": "INVALID_AMOUNT",
            "details": {"amount_cents": 0},
        }

    def test_to_dict_omits_empty_details(self):
        assert "details" not in NotFoundError("missing").to_dict()

    def test_default_error_code_used_when_none_given(self):
        assert ConflictError("busy").error_code == "CONFLICT"

    def test_str_includes_code(self):
        assert str(PermissionDeniedError("nope")) == "[PERMISSION_DENIED] nope"

    @pytest.mark.parametrize(
        "exc_class, status",
        [
            (BaseApplicationError, 400),
            (ValidationError, 400),
            (NotFoundError, 404),
            (PermissionDeniedError, 403),
            (ConflictError, 409),
        ],
    )
    def test_http_status_by_class(self, exc_class, status):
        assert exc_class("x").http_status == status


class TestValidators:
    def test_no_html_rejects_tags(self):
        with pytest.raises(DjangoValidationError):
            validate_no_html("<b>hi</b>")

    def test_no_html_accepts_plain_text(self):
        validate_no_html("Rent for March, 2 < 3")

    @pytest.mark.parametrize("value", ["1Z999AA10123456784", "TOPUP-2024", "bank_001", "9400 1000"])
    def test_reference_code_accepts(self, value):
        validate_reference_code(value)

    @pytest.mark.parametrize("value", ["<script>", "abc;drop", "-leading"])
    def test_reference_code_rejects(self, value):
        with pytest.raises(DjangoValidationError):
            validate_reference_code(value)
