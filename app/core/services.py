"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Returned by orchestration services for expected
      failures (validation, business rules, replayed decisions)
    - Exceptions: Raised by lower layers (ledger, escrow) and for
      unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class TransferService(BaseService):
        @classmethod
        def send(cls, sender, receiver, amount_cents: int) -> ServiceResult[Transfer]:
            if sender.pk == receiver.pk:
                return ServiceResult.failure(
                    "Cannot send money to yourself",
                    error_code="SELF_TRANSFER",
                )

            try:
                with cls.atomic():
                    transfer = Transfer.objects.create(...)
                    ledger.debit(sender.pk, amount_cents)
            except InsufficientFunds as e:
                return ServiceResult.from_exception(e)

            return ServiceResult.ok(transfer)

    # In view
    result = TransferService.send(request.user, receiver, 500)
    if not result:
        return Response(result.to_response(), status=result.http_status)
    return Response(TransferSerializer(result.data).data, status=201)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        details: Additional context (ids, amounts, current state)
        http_status: Status code a view should respond with on failure

    Usage:
        # Success case
        return ServiceResult.ok(txn)

        # Failure case
        return ServiceResult.failure("A reason is required", "REASON_REQUIRED")

        # From a domain error raised by a lower layer
        except InsufficientFunds as e:
            return ServiceResult.from_exception(e)

        # Check result
        result = ApprovalGateway.decide(txn_id, admin, "approve")
        if result.success:
            txn = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    http_status: int = 200

    @classmethod
    def ok(cls, data: T) -> ServiceResult[T]:
        """Create a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        http_status: int = 400,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            details: Additional context for the client
            http_status: Status code for the API response (default 400)

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            details=details or {},
            http_status=http_status,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their error code, details and HTTP
        status; any other exception becomes a 500 named after its class.

        Example:
            try:
                ledger.debit(user.pk, amount)
            except InsufficientFunds as e:
                return ServiceResult.from_exception(e)
        """
        if isinstance(exc, BaseApplicationError):
            return cls.failure(
                exc.message,
                error_code=error_code or exc.error_code,
                details=exc.details,
                http_status=exc.http_status,
            )
        return cls.failure(
            str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
            http_status=500,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Failures render as {"error", "error_code", "details"}, the same
        shape BaseApplicationError.to_dict() produces.
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "error": self.error,
            "error_code": self.error_code,
        }
        if self.details:
            response["details"] = self.details
        return response

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = OrderService.confirm_payment(order_id, buyer)
            if result:  # Same as: if result.success
                print("Confirmed")
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception to result conversion

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
        - Convert lower-layer errors outside the atomic block, so the
          transaction has already rolled back
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named after the service class for easy filtering."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        A thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: BaseApplicationError,
        context: str = "",
        log_level: int = logging.WARNING,
    ) -> ServiceResult:
        """
        Convert a domain error to a failed ServiceResult with logging.

        Example:
            try:
                ...
            except BaseApplicationError as e:
                return cls.handle_exception(e, "transfer")
        """
        message = f"{context} failed: {exc}" if context else str(exc)
        cls.get_logger().log(
            log_level,
            message,
            extra={"error_code": exc.error_code, **_log_safe(exc.details)},
        )
        return ServiceResult.from_exception(exc)


def _log_safe(details: dict[str, Any]) -> dict[str, Any]:
    # LogRecord reserves some attribute names; prefix everything
    return {f"detail_{key}": value for key, value in details.items()}
