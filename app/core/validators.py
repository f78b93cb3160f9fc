"""
Field validators for serializers and models.

Validators raise django.core.exceptions.ValidationError, which DRF
converts into a 400 field error.

Usage:
    from core.validators import validate_no_html, validate_reference_code

    memo = serializers.CharField(validators=[validate_no_html])
    tracking_number = serializers.CharField(validators=[validate_reference_code])
"""

from __future__ import annotations

import re

from django.core.exceptions import ValidationError

REFERENCE_CODE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 _-]*$")


def validate_no_html(value: str):
    """
    Reject strings containing HTML tags.

    Memos and descriptions are shown to other users.
    """
    if re.search(r"<[^>]+>", value):
        raise ValidationError("HTML tags are not allowed in this field.")


def validate_reference_code(value: str):
    """
    Accept codes made of letters, digits, spaces, hyphens and underscores.

    Used for tracking numbers, top-up codes and bank identifiers.
    """
    if value and not REFERENCE_CODE_PATTERN.match(value.strip()):
        raise ValidationError(
            "Only letters, numbers, spaces, hyphens and underscores are allowed."
        )
