"""
Order, EscrowHold and Shipment models for escrow-backed purchases.

An Order tracks a goods purchase from payment through shipment
verification to the release of escrowed funds to the seller. Two
EscrowHold rows are written with every order, a negative one tagged to
the buyer and a positive one tagged to the seller. Shipment rows record
each carrier/tracking submission.

Usage:
    from wallets.models import Order, EscrowHold, Shipment

    order.submit_tracking(carrier="UPS", tracking_number="1Z999")
    order.save()

    order.holds.filter(status=HoldStatus.HELD).count()  # 2 until release
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from wallets.state_machines import HoldSide, HoldStatus, OrderState

NON_TERMINAL_ORDER_STATES = [
    OrderState.PENDING_PAYMENT,
    OrderState.PENDING_SHIPMENT,
    OrderState.AWAITING_ADMIN_APPROVAL,
    OrderState.SHIPPED,
    OrderState.AWAITING_RELEASE,
]


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A buyer/seller goods purchase backed by escrow.

    State Flow:
        PENDING_PAYMENT -> PENDING_SHIPMENT -> AWAITING_ADMIN_APPROVAL
            -> SHIPPED -> AWAITING_RELEASE -> COMPLETED

    Tracking Rejection:
        AWAITING_ADMIN_APPROVAL -> PENDING_SHIPMENT (tracking cleared)

    Cancellation (reserved):
        any non-terminal -> CANCELLED

    Fields:
        buyer / seller: Parties to the purchase
        amount_cents: Escrowed amount
        item_description: What was bought
        status: Current FSM state
        tracking_number / shipping_carrier: Latest shipment claim
        *_at timestamps: When each transition happened
        version: Optimistic locking version
    """

    # ==========================================================================
    # Parties & Amount
    # ==========================================================================

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="purchases",
        help_text="User paying for the goods",
    )

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
        help_text="User shipping the goods and receiving the funds",
    )

    amount_cents = models.PositiveBigIntegerField(
        help_text="Purchase amount held in escrow, in cents",
    )

    item_description = models.TextField(
        help_text="Description of the purchased item",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=OrderState.PENDING_PAYMENT,
        choices=OrderState.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the order (managed by FSM)",
    )

    # ==========================================================================
    # Shipment Claim
    # ==========================================================================

    tracking_number = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        help_text="Carrier tracking number submitted by the seller",
    )

    shipping_carrier = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Carrier name submitted by the seller",
    )

    # ==========================================================================
    # Concurrency Control
    # ==========================================================================

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    # ==========================================================================
    # State Timestamps
    # ==========================================================================

    paid_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the buyer confirmed payment",
    )

    shipped_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the seller submitted tracking",
    )

    delivered_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was treated as delivered",
    )

    release_approved_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When an administrator approved tracking or released funds",
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When escrow was released to the seller",
    )

    cancelled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the order was cancelled",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "shipped_at"], name="order_status_shipped_idx"),
            models.Index(fields=["status", "delivered_at"], name="order_status_delivered_idx"),
            models.Index(fields=["buyer", "created_at"], name="order_buyer_created_idx"),
            models.Index(fields=["seller", "created_at"], name="order_seller_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="order_amount_positive",
            ),
            models.CheckConstraint(
                condition=~Q(buyer=F("seller")),
                name="order_buyer_is_not_seller",
            ),
        ]

    def __str__(self) -> str:
        return f"Order({self.id}, {self.status}, {self.amount_cents} cents)"

    def save(self, *args, **kwargs):
        """Save with version auto-increment for optimistic locking."""
        is_update = self.pk and not self._state.adding
        if is_update:
            self.version = F("version") + 1
        super().save(*args, **kwargs)
        if is_update:
            self.refresh_from_db(fields=["version"])

    @property
    def is_terminal(self) -> bool:
        return self.status in OrderState.terminal_states()

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=OrderState.PENDING_PAYMENT,
        target=OrderState.PENDING_SHIPMENT,
    )
    def confirm_payment(self):
        """
        Record the buyer's payment confirmation.

        Transition: PENDING_PAYMENT -> PENDING_SHIPMENT
        """
        self.paid_at = timezone.now()

    @transition(
        field=status,
        source=[OrderState.PENDING_PAYMENT, OrderState.PENDING_SHIPMENT],
        target=OrderState.AWAITING_ADMIN_APPROVAL,
    )
    def submit_tracking(self, carrier: str, tracking_number: str):
        """
        Record the seller's shipment claim for administrative review.

        Transition: PENDING_PAYMENT | PENDING_SHIPMENT -> AWAITING_ADMIN_APPROVAL
        """
        self.shipping_carrier = carrier
        self.tracking_number = tracking_number
        self.shipped_at = timezone.now()

    @transition(
        field=status,
        source=OrderState.AWAITING_ADMIN_APPROVAL,
        target=OrderState.SHIPPED,
    )
    def approve_tracking(self):
        """
        Accept the shipment claim; the delivery clock keeps running from shipped_at.

        Transition: AWAITING_ADMIN_APPROVAL -> SHIPPED
        """
        self.release_approved_at = timezone.now()

    @transition(
        field=status,
        source=OrderState.AWAITING_ADMIN_APPROVAL,
        target=OrderState.PENDING_SHIPMENT,
    )
    def reject_tracking(self):
        """
        Discard the shipment claim so the seller can resubmit.

        Transition: AWAITING_ADMIN_APPROVAL -> PENDING_SHIPMENT
        """
        self.shipping_carrier = None
        self.tracking_number = None
        self.shipped_at = None

    @transition(
        field=status,
        source=OrderState.SHIPPED,
        target=OrderState.AWAITING_RELEASE,
    )
    def mark_delivered(self):
        """
        Treat the shipment as delivered.

        Transition: SHIPPED -> AWAITING_RELEASE
        """
        self.delivered_at = timezone.now()

    @transition(
        field=status,
        source=OrderState.AWAITING_RELEASE,
        target=OrderState.COMPLETED,
    )
    def complete(self):
        """
        Close the order once escrow has been released.

        Transition: AWAITING_RELEASE -> COMPLETED
        """
        self.completed_at = timezone.now()

    @transition(
        field=status,
        source=NON_TERMINAL_ORDER_STATES,
        target=OrderState.CANCELLED,
    )
    def cancel(self):
        """
        Cancel the order.

        Transition: any non-terminal -> CANCELLED

        Note:
            No workflow calls this yet and escrow is not refunded.
        """
        self.cancelled_at = timezone.now()


class EscrowHold(UUIDPrimaryKeyMixin, BaseModel):
    """
    One side of an order's zero-sum escrow pair.

    Every order has exactly two rows: the buyer side with a negative
    amount and the seller side with the matching positive amount. Both
    flip from held to released together, once.

    Fields:
        order: Order this hold belongs to
        user: Party this row is tagged to
        side: buyer or seller
        amount_cents: Negative for the buyer, positive for the seller
        status: held or released
        released_at: When the pair was released
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="holds",
        help_text="Order whose funds are held",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="escrow_holds",
        help_text="User this side of the hold is tagged to",
    )
    side = models.CharField(
        max_length=10,
        choices=HoldSide.choices,
        help_text="Whether this row is the buyer or seller side",
    )
    amount_cents = models.BigIntegerField(
        help_text="Signed amount in cents (buyer negative, seller positive)",
    )
    status = models.CharField(
        max_length=10,
        choices=HoldStatus.choices,
        default=HoldStatus.HELD,
        db_index=True,
        help_text="Whether the funds are still held",
    )
    released_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the hold was released",
    )

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "side"],
                name="escrow_hold_one_row_per_side",
            ),
            models.CheckConstraint(
                condition=(
                    Q(side=HoldSide.BUYER, amount_cents__lt=0)
                    | Q(side=HoldSide.SELLER, amount_cents__gt=0)
                ),
                name="escrow_hold_amount_sign_matches_side",
            ),
        ]

    def __str__(self) -> str:
        return f"EscrowHold({self.order_id}, {self.side}, {self.amount_cents}, {self.status})"


class Shipment(UUIDPrimaryKeyMixin, models.Model):
    """
    A carrier/tracking submission for an order.

    Informational only; it never moves funds. Rejected submissions are
    deleted together with the order's tracking fields.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When the tracking was submitted",
    )
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="shipments",
        help_text="Order this shipment belongs to",
    )
    carrier = models.CharField(
        max_length=50,
        help_text="Shipping carrier name",
    )
    tracking_number = models.CharField(
        max_length=100,
        help_text="Carrier tracking number",
    )
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="submitted_shipments",
        help_text="Seller who submitted the tracking",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Shipment({self.carrier} {self.tracking_number})"
