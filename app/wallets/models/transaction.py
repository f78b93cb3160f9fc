"""
Transaction model for the money-movement journal.

A Transaction records one request to move money: a load, a payout, a
top-up or a peer transfer. Deferred transactions wait in the approval
queue with no ledger effect; the Approval Gateway moves them to a
terminal state exactly once. Instant transfers are written already
approved after their ledger effect has been applied.

Rows are never deleted and form the audit trail of every decision.

Usage:
    from wallets.models import Transaction
    from wallets.state_machines import TransactionType

    txn = Transaction.objects.create(
        type=TransactionType.CARD_LOAD,
        receiver=user,
        amount_cents=5000,
    )

    txn.approve(actor=admin)   # pending -> approved, status completed
    txn.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from wallets.state_machines import (
    ApprovalStatus,
    PayoutSpeed,
    TransactionStatus,
    TransactionType,
)


class Transaction(UUIDPrimaryKeyMixin, BaseModel):
    """
    One money-movement request and its approval outcome.

    State Flow:
        approval_status: PENDING -> APPROVED | REJECTED
        status:          PENDING -> COMPLETED | FAILED

    Fields:
        type: Kind of movement (load, payout, top-up, transfer)
        amount_cents: Amount moved, always positive
        fee_cents: Fee charged to the sender on top of the amount
        sender: User debited (payouts, transfers)
        receiver: User credited (loads, top-ups, transfers)
        status: Settlement status
        approval_status: FSM-managed approval state
        rejection_reason: Reason recorded on rejection
        memo: Free-form note shown in history
        payout_speed / bank_reference / estimated_arrival: Payout details
        approved_by / approved_at: Who decided and when
        version: Optimistic locking version

    Note:
        approval_status is protected; only approve()/reject() change it.
        Use Transaction.objects.get() instead of refresh_from_db() to
        reload an instance after a transition.
    """

    # ==========================================================================
    # Movement
    # ==========================================================================

    type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        db_index=True,
        help_text="Kind of money movement",
    )

    amount_cents = models.PositiveBigIntegerField(
        help_text="Amount in cents",
    )

    fee_cents = models.PositiveBigIntegerField(
        default=0,
        help_text="Fee in cents charged to the sender",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sent_transactions",
        help_text="User whose wallet is debited",
    )

    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="received_transactions",
        help_text="User whose wallet is credited",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
        db_index=True,
        help_text="Settlement status",
    )

    approval_status = FSMField(
        default=ApprovalStatus.PENDING,
        choices=ApprovalStatus.choices,
        db_index=True,
        protected=True,
        help_text="Administrative approval state (managed by FSM)",
    )

    rejection_reason = models.TextField(
        null=True,
        blank=True,
        help_text="Reason given when the transaction was rejected",
    )

    memo = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Note shown in transaction history",
    )

    # ==========================================================================
    # Payout Details
    # ==========================================================================

    payout_speed = models.CharField(
        max_length=20,
        choices=PayoutSpeed.choices,
        null=True,
        blank=True,
        help_text="Delivery speed for payouts",
    )

    bank_reference = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Identifier of the destination bank account for payouts",
    )

    estimated_arrival = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When payout funds are expected at the bank",
    )

    # ==========================================================================
    # Decision
    # ==========================================================================

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="decided_transactions",
        help_text="Administrator who approved or rejected this transaction",
    )

    approved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the approval decision was made",
    )

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["approval_status", "created_at"], name="txn_approval_created_idx"),
            models.Index(fields=["sender", "created_at"], name="txn_sender_created_idx"),
            models.Index(fields=["receiver", "created_at"], name="txn_receiver_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="transaction_amount_positive",
            ),
            models.CheckConstraint(
                condition=Q(sender__isnull=False) | Q(receiver__isnull=False),
                name="transaction_has_party",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"Transaction({self.id}, {self.type}, {self.amount_cents} cents, "
            f"{self.approval_status})"
        )

    def save(self, *args, **kwargs):
        """Save with version auto-increment for optimistic locking."""
        is_update = self.pk and not self._state.adding
        if is_update:
            self.version = F("version") + 1
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    @property
    def debit_total_cents(self) -> int:
        """Amount plus fee, the total taken from the sender."""
        return self.amount_cents + self.fee_cents

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=approval_status,
        source=ApprovalStatus.PENDING,
        target=ApprovalStatus.APPROVED,
    )
    def approve(self, actor=None):
        """
        Mark the transaction approved and completed.

        Transition: PENDING -> APPROVED

        Called after the ledger effect has been applied in the same
        database transaction.
        """
        self.status = TransactionStatus.COMPLETED
        self.approved_by = actor
        self.approved_at = timezone.now()

    @transition(
        field=approval_status,
        source=ApprovalStatus.PENDING,
        target=ApprovalStatus.REJECTED,
    )
    def reject(self, reason: str, actor=None):
        """
        Mark the transaction rejected and failed.

        Transition: PENDING -> REJECTED
        """
        self.status = TransactionStatus.FAILED
        self.rejection_reason = reason
        self.approved_by = actor
        self.approved_at = timezone.now()
