"""
Wallet domain exceptions.

Every error the ledger and escrow engine surfaces derives from the core
exception hierarchy. Orchestration services turn it into a failed
ServiceResult carrying its code, details and HTTP status.

Exception Hierarchy:
    InsufficientFunds - Wallet partition too small (wallets.ledger)
    InvalidTransition (ConflictError) - State precondition violated
    └── AlreadyProcessed - Decision or release was already applied
    NoHeldEscrow (ConflictError) - Escrow rows missing or already released
    NotAuthorized (PermissionDeniedError) - Actor does not own the record
    NotFound (NotFoundError) - Transaction, order or user lookup failed

Usage:
    from wallets.exceptions import InvalidTransition

    if order.status != OrderState.AWAITING_RELEASE:
        raise InvalidTransition(
            f"Cannot release order in '{order.status}' state",
            details={"order_id": str(order.id), "current_state": order.status},
        )
"""

from __future__ import annotations

from core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from wallets.ledger.exceptions import InsufficientFunds

__all__ = [
    "AlreadyProcessed",
    "InsufficientFunds",
    "InvalidTransition",
    "NoHeldEscrow",
    "NotAuthorized",
    "NotFound",
]


class InvalidTransition(ConflictError):
    """
    Raised when a record is not in the state an operation requires.

    Services check django-fsm's can_proceed() against the row they just
    locked and raise this instead of letting TransitionNotAllowed escape.
    """

    default_error_code: str = "INVALID_TRANSITION"


class AlreadyProcessed(InvalidTransition):
    """
    Raised when a one-shot decision or release is replayed.

    details carries the id and the terminal status the record already
    reached, so a retrying client sees the same outcome as the first call.
    """

    default_error_code: str = "ALREADY_PROCESSED"


class NoHeldEscrow(ConflictError):
    """Raised when an order has no complete, held escrow pair to release."""

    default_error_code: str = "NO_HELD_ESCROW"


class NotAuthorized(PermissionDeniedError):
    """Raised when the actor is not the buyer or seller an operation requires."""

    default_error_code: str = "NOT_AUTHORIZED"


class NotFound(NotFoundError):
    """Raised when a transaction, order or user cannot be found."""

    default_error_code: str = "NOT_FOUND"
