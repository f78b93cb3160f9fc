"""
State enums for wallet, transaction and order models.

This module defines all state enums used by wallet models with django-fsm.
These are Django TextChoices for database storage and admin integration.

State Machines Overview:

Transaction approval:
    pending → approved (ledger effect applied exactly once)
    pending → rejected (no ledger effect, reason required)

Order States:
    pending_payment → pending_shipment → awaiting_admin_approval → shipped
        → awaiting_release → completed
    pending_payment → awaiting_admin_approval (seller ships before payment confirmation)
    awaiting_admin_approval → pending_shipment (tracking rejected)
    any non-terminal → cancelled (reserved)

Escrow Holds:
    held → released
"""

from django.db import models


class TransactionType(models.TextChoices):
    """
    Kinds of money movement recorded in the transaction journal.

    Loads and top-ups credit the receiver, payouts debit the sender,
    and transfers move money from sender to receiver.
    """

    TRANSFER = "transfer", "Transfer"
    CARD_LOAD = "card_load", "Card Load"
    BANK_LOAD = "bank_load", "Bank Load"
    ZELLE_LOAD = "zelle_load", "Zelle Load"
    CASHAPP_LOAD = "cashapp_load", "Cash App Load"
    APPLEPAY_LOAD = "applepay_load", "Apple Pay Load"
    PAYOUT = "payout", "Payout"
    TOPUP = "topup", "Top-up"


class TransactionStatus(models.TextChoices):
    """
    Settlement status of a transaction.

    Terminal states: COMPLETED, FAILED
    """

    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class ApprovalStatus(models.TextChoices):
    """
    Administrative approval status of a transaction.

    State Flow:
        PENDING → APPROVED
        PENDING → REJECTED

    Instant transfers are created already APPROVED.
    """

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class DecisionAction(models.TextChoices):
    """Administrative decision on a pending transaction."""

    APPROVE = "approve", "Approve"
    REJECT = "reject", "Reject"


class LoadMethod(models.TextChoices):
    """Funding methods accepted by submit_load."""

    CARD = "card", "Card"
    BANK = "bank", "Bank"
    ZELLE = "zelle", "Zelle"
    CASHAPP = "cashapp", "Cash App"
    APPLEPAY = "applepay", "Apple Pay"
    TOPUP = "topup", "Top-up Code"


class PayoutSpeed(models.TextChoices):
    """
    Payout delivery speed.

    STANDARD arrives in two days, free by default.
    SAME_DAY arrives the same day for a flat fee.
    """

    STANDARD = "standard", "Standard"
    SAME_DAY = "same_day", "Same-Day ACH"


class OrderState(models.TextChoices):
    """
    States for the Order model lifecycle.

    Terminal states: COMPLETED, CANCELLED

    State Flow:
        PENDING_PAYMENT → PENDING_SHIPMENT → AWAITING_ADMIN_APPROVAL → SHIPPED
            → AWAITING_RELEASE → COMPLETED

    Tracking Rejection:
        AWAITING_ADMIN_APPROVAL → PENDING_SHIPMENT

    Cancellation (reserved, no refund path):
        any non-terminal → CANCELLED
    """

    PENDING_PAYMENT = "pending_payment", "Pending Payment"
    PENDING_SHIPMENT = "pending_shipment", "Pending Shipment"
    AWAITING_ADMIN_APPROVAL = "awaiting_admin_approval", "Awaiting Admin Approval"
    SHIPPED = "shipped", "Shipped"
    AWAITING_RELEASE = "awaiting_release", "Awaiting Release"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"

    @classmethod
    def terminal_states(cls) -> list[str]:
        """States from which no transition is allowed."""
        return [cls.COMPLETED, cls.CANCELLED]


class HoldStatus(models.TextChoices):
    """Status of an escrow hold row."""

    HELD = "held", "Held"
    RELEASED = "released", "Released"


class HoldSide(models.TextChoices):
    """Which party an escrow hold row is tagged to."""

    BUYER = "buyer", "Buyer"
    SELLER = "seller", "Seller"
