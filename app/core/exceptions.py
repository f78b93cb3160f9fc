"""
Base exception classes for application-wide error handling.

Services raise these for business-rule failures; views render them with
to_dict() and the class's http_status, so every API error has the same
shape: {"error": ..., "error_code": ..., "details": {...}}.

Exception Hierarchy:
    BaseApplicationError (base, 400)
    ├── ValidationError - Bad input or violated business rule (400)
    ├── NotFoundError - Record lookup failed (404)
    ├── PermissionDeniedError - Actor may not perform the action (403)
    └── ConflictError - Record is not in the state the action needs (409)

Usage:
    from core.exceptions import ConflictError

    raise ConflictError(
        "Order already released",
        error_code="ALREADY_RELEASED",
        details={"order_id": str(order.id)},
    )

Note:
    DRF still handles API-layer failures (serializer errors,
    authentication). These exceptions are for the service layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional context (ids, amounts, current state)
        http_status: Status code views respond with
    """

    default_error_code: str = "APPLICATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Insufficient funds: required 5000 cents, available 1200 cents",
                "error_code": "INSUFFICIENT_FUNDS",
                "details": {"required_cents": 5000, "available_cents": 1200}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input fails a service-layer rule.

    Example:
        raise ValidationError("Cannot send money to yourself", error_code="SELF_TRANSFER")
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a single record that should exist cannot be found."""

    default_error_code: str = "NOT_FOUND"
    http_status: int = 404


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated actor may not perform an operation.

    Authentication failures (missing or invalid token) stay with DRF.
    """

    default_error_code: str = "PERMISSION_DENIED"
    http_status: int = 403


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with the current state of a record.

    Use for invalid state transitions, replayed one-shot actions and
    concurrent modifications detected under a row lock.
    """

    default_error_code: str = "CONFLICT"
    http_status: int = 409
