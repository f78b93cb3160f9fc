"""
Ledger models for per-user wallet balances.

This module defines the balance store and its audit trail:
- Wallet: One row per user holding available/pending/on-hold partitions
- WalletEntry: Immutable record of every credit or debit applied to a wallet

Balances live on the Wallet row and are only changed through
LedgerService.credit/debit, which lock the row, apply a guarded F()
update and append a WalletEntry in the same database transaction.

Usage:
    from wallets.ledger.models import Wallet, WalletEntry, BalanceBucket

    wallet = Wallet.objects.get(user=user)
    wallet.available_cents  # spendable balance in cents
    wallet.total_cents      # available + pending + on_hold
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class BalanceBucket(models.TextChoices):
    """
    Partitions of a wallet balance.

    Values:
        AVAILABLE: Spendable funds
        PENDING: Funds expected but not yet settled
        ON_HOLD: Funds reserved by an open escrow
    """

    AVAILABLE = "available", "Available"
    PENDING = "pending", "Pending"
    ON_HOLD = "on_hold", "On Hold"

    @property
    def field_name(self) -> str:
        """Name of the Wallet column backing this partition."""
        return f"{self.value}_cents"


class EntryDirection(models.TextChoices):
    """Whether an entry added to or removed from a partition."""

    CREDIT = "credit", "Credit"
    DEBIT = "debit", "Debit"


class EntryType(models.TextChoices):
    """
    Business category of a wallet entry.

    Values:
        DEPOSIT: Funds loaded from a card, bank or alternative method
        TOPUP: Manual top-up (code redemption or admin funding)
        TRANSFER: Peer-to-peer transfer leg
        PAYOUT: Withdrawal to an external bank, fee included
        ESCROW_HOLD: Buyer funds moved into an order's escrow
        ESCROW_RELEASE: Escrowed funds released to the seller
        ADJUSTMENT: Manual correction
    """

    DEPOSIT = "deposit", "Deposit"
    TOPUP = "topup", "Top-up"
    TRANSFER = "transfer", "Transfer"
    PAYOUT = "payout", "Payout"
    ESCROW_HOLD = "escrow_hold", "Escrow Hold"
    ESCROW_RELEASE = "escrow_release", "Escrow Release"
    ADJUSTMENT = "adjustment", "Adjustment"


class Wallet(UUIDPrimaryKeyMixin, BaseModel):
    """
    A user's balance record.

    Created lazily on the first credit and never deleted. The three
    partitions are non-negative at all times, enforced both by the
    guarded updates in LedgerService and by database check constraints.

    Fields:
        id: UUID primary key (from UUIDPrimaryKeyMixin)
        user: Owner of this wallet
        available_cents: Spendable balance
        pending_cents: Incoming funds not yet settled
        on_hold_cents: Funds reserved by open escrows
        created_at, updated_at: From BaseModel

    Note:
        Never assign the balance fields directly. Use
        wallets.ledger.services.LedgerService.credit/debit.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="wallet",
        help_text="User who owns this wallet",
    )
    available_cents = models.BigIntegerField(
        default=0,
        help_text="Spendable balance in cents",
    )
    pending_cents = models.BigIntegerField(
        default=0,
        help_text="Incoming balance not yet settled, in cents",
    )
    on_hold_cents = models.BigIntegerField(
        default=0,
        help_text="Balance reserved by open escrows, in cents",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(available_cents__gte=0),
                name="wallet_available_cents_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(pending_cents__gte=0),
                name="wallet_pending_cents_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(on_hold_cents__gte=0),
                name="wallet_on_hold_cents_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Wallet({self.user_id}): {self.available_cents} cents available"

    @property
    def total_cents(self) -> int:
        """Sum of all three partitions."""
        return self.available_cents + self.pending_cents + self.on_hold_cents


class WalletEntry(UUIDPrimaryKeyMixin, models.Model):
    """
    Immutable audit record of a single balance change.

    Every credit or debit applied by LedgerService writes exactly one
    entry. Summing credits minus debits for a wallet partition yields the
    stored partition balance.

    Fields:
        wallet: Wallet that was changed
        direction: credit or debit
        bucket: Partition that was changed
        amount_cents: Amount moved (always positive)
        balance_after_cents: Partition balance right after this entry
        entry_type: Business category
        reference_type/reference_id: Related transaction or order
        description: Human-readable note
        created_by: Service or actor that applied the change
        idempotency_key: Unique key, replays return the original entry

    Constraints:
        - amount_cents must be positive
        - idempotency_key must be unique
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this entry was recorded",
    )
    wallet = models.ForeignKey(
        Wallet,
        on_delete=models.PROTECT,
        related_name="entries",
        help_text="Wallet this entry applies to",
    )
    direction = models.CharField(
        max_length=10,
        choices=EntryDirection.choices,
        help_text="Whether funds were added or removed",
    )
    bucket = models.CharField(
        max_length=20,
        choices=BalanceBucket.choices,
        default=BalanceBucket.AVAILABLE,
        help_text="Wallet partition that was changed",
    )
    amount_cents = models.PositiveBigIntegerField(
        help_text="Amount in cents (always positive)",
    )
    balance_after_cents = models.BigIntegerField(
        help_text="Partition balance immediately after this entry",
    )
    entry_type = models.CharField(
        max_length=30,
        choices=EntryType.choices,
        help_text="Business category of this entry",
    )
    reference_type = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Type of related entity (e.g., 'transaction', 'order')",
    )
    reference_id = models.UUIDField(
        null=True,
        blank=True,
        help_text="UUID of related entity",
    )
    description = models.TextField(
        null=True,
        blank=True,
        help_text="Human-readable description of this entry",
    )
    created_by = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Identifier of service/user that applied this entry",
    )
    idempotency_key = models.CharField(
        max_length=255,
        unique=True,
        help_text="Unique key to prevent duplicate application",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "wallet entries"
        indexes = [
            models.Index(fields=["reference_type", "reference_id"], name="wallet_entry_reference_idx"),
            models.Index(fields=["wallet", "bucket"], name="wallet_entry_bucket_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="wallet_entry_amount_cents_positive",
            )
        ]

    def __str__(self) -> str:
        return f"{self.get_direction_display()} {self.amount_cents} cents ({self.bucket})"
