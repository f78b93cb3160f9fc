"""
Ledger-specific exceptions for wallet balance operations.

Exception Hierarchy:
    LedgerError (base)
    ├── InsufficientFunds - Debit would take a partition below zero
    └── InvalidAmount - Non-positive, non-integer or oversized amount

Usage:
    from wallets.ledger.exceptions import InsufficientFunds

    try:
        ledger.debit(user.id, 5000)
    except InsufficientFunds as e:
        print(f"Need {e.required}, have {e.available}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ValidationError

if TYPE_CHECKING:
    from typing import Any


class LedgerError(BaseApplicationError):
    """Base exception for all ledger operations."""

    default_error_code: str = "LEDGER_ERROR"


class InsufficientFunds(LedgerError):
    """
    Raised when a wallet partition cannot cover a debit.

    Attributes:
        user_id: Owner of the wallet that was short
        required: Amount (in cents) that was required
        available: Amount (in cents) the partition held
        bucket: Partition that was checked
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        user_id: Any,
        required: int,
        available: int,
        bucket: str = "available",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.user_id = user_id
        self.required = required
        self.available = available
        self.bucket = bucket

        message = (
            f"Insufficient funds: required {required} cents, "
            f"{bucket} {available} cents"
        )

        full_details = {
            "user_id": str(user_id),
            "required_cents": required,
            "available_cents": available,
            "bucket": str(bucket),
        }
        if details:
            full_details.update(details)

        super().__init__(
            message=message,
            error_code=error_code,
            details=full_details,
        )


class InvalidAmount(ValidationError):
    """Raised when an amount is not a positive integer of cents within limits."""

    default_error_code: str = "INVALID_AMOUNT"
