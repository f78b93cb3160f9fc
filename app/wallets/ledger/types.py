"""
Data types for ledger operations.

Types:
    BalanceSnapshot: Point-in-time read of a wallet's partitions
    EntryParams: Parameters for applying a credit or debit

Usage:
    from wallets.ledger.types import BalanceSnapshot

    snapshot = ledger.get_balance(user.id)
    snapshot.total_cents
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from .models import BalanceBucket, EntryType


@dataclass(frozen=True)
class BalanceSnapshot:
    """
    Point-in-time copy of a wallet's balances.

    A snapshot may be stale by the time it is used. Debits re-check the
    balance under a row lock, so snapshots are for display only.
    """

    user_id: Any
    available_cents: int = 0
    pending_cents: int = 0
    on_hold_cents: int = 0

    @property
    def total_cents(self) -> int:
        return self.available_cents + self.pending_cents + self.on_hold_cents

    def to_dict(self) -> dict[str, Any]:
        return {
            "available_cents": self.available_cents,
            "pending_cents": self.pending_cents,
            "on_hold_cents": self.on_hold_cents,
            "total_cents": self.total_cents,
        }


@dataclass
class EntryParams:
    """
    Parameters for a single credit or debit.

    Attributes:
        user_id: Owner of the wallet to change
        amount_cents: Positive amount in cents
        bucket: Wallet partition to change
        entry_type: Business category for the audit row
        idempotency_key: Unique key, generated when omitted
        reference_type: Optional type of related entity
        reference_id: Optional UUID of related entity
        description: Optional note
        created_by: Optional service/actor identifier
    """

    user_id: Any
    amount_cents: int
    bucket: BalanceBucket | str = BalanceBucket.AVAILABLE
    entry_type: EntryType | str = EntryType.ADJUSTMENT
    idempotency_key: str | None = None
    reference_type: str | None = None
    reference_id: uuid.UUID | None = None
    description: str | None = None
    created_by: str | None = None

    def __post_init__(self):
        """Normalize the bucket and fill in a key when none was given."""
        self.bucket = BalanceBucket(self.bucket)
        if not self.idempotency_key:
            self.idempotency_key = f"entry:{uuid.uuid4()}"
