# Generated manually for the wallets schema

import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


TIMESTAMPS = [
    (
        "created_at",
        models.DateTimeField(
            auto_now_add=True,
            db_index=True,
            help_text="Timestamp when this record was created",
        ),
    ),
    (
        "updated_at",
        models.DateTimeField(
            auto_now=True,
            help_text="Timestamp when this record was last modified",
        ),
    ),
]


def uuid_pk():
    return (
        "id",
        models.UUIDField(
            default=uuid.uuid4,
            editable=False,
            primary_key=True,
            serialize=False,
            help_text="Unique identifier for this record",
        ),
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Wallet",
            fields=[
                uuid_pk(),
                *TIMESTAMPS,
                ("available_cents", models.BigIntegerField(default=0, help_text="Spendable balance in cents")),
                ("pending_cents", models.BigIntegerField(default=0, help_text="Incoming balance not yet settled, in cents")),
                ("on_hold_cents", models.BigIntegerField(default=0, help_text="Balance reserved by open escrows, in cents")),
                (
                    "user",
                    models.OneToOneField(
                        help_text="User who owns this wallet",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="wallet",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("available_cents__gte", 0)),
                        name="wallet_available_cents_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("pending_cents__gte", 0)),
                        name="wallet_pending_cents_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("on_hold_cents__gte", 0)),
                        name="wallet_on_hold_cents_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="WalletEntry",
            fields=[
                uuid_pk(),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this entry was recorded")),
                ("direction", models.CharField(choices=[("credit", "Credit"), ("debit", "Debit")], help_text="Whether funds were added or removed", max_length=10)),
                (
                    "bucket",
                    models.CharField(
                        choices=[("available", "Available"), ("pending", "Pending"), ("on_hold", "On Hold")],
                        default="available",
                        help_text="Wallet partition that was changed",
                        max_length=20,
                    ),
                ),
                ("amount_cents", models.PositiveBigIntegerField(help_text="Amount in cents (always positive)")),
                ("balance_after_cents", models.BigIntegerField(help_text="Partition balance immediately after this entry")),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("deposit", "Deposit"),
                            ("topup", "Top-up"),
                            ("transfer", "Transfer"),
                            ("payout", "Payout"),
                            ("escrow_hold", "Escrow Hold"),
                            ("escrow_release", "Escrow Release"),
                            ("adjustment", "Adjustment"),
                        ],
                        help_text="Business category of this entry",
                        max_length=30,
                    ),
                ),
                ("reference_type", models.CharField(blank=True, help_text="Type of related entity (e.g., 'transaction', 'order')", max_length=50, null=True)),
                ("reference_id", models.UUIDField(blank=True, help_text="UUID of related entity", null=True)),
                ("description", models.TextField(blank=True, help_text="Human-readable description of this entry", null=True)),
                ("created_by", models.CharField(blank=True, help_text="Identifier of service/user that applied this entry", max_length=255, null=True)),
                ("idempotency_key", models.CharField(help_text="Unique key to prevent duplicate application", max_length=255, unique=True)),
                (
                    "wallet",
                    models.ForeignKey(
                        help_text="Wallet this entry applies to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="entries",
                        to="wallets.wallet",
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "wallet entries",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["reference_type", "reference_id"], name="wallet_entry_reference_idx"),
                    models.Index(fields=["wallet", "bucket"], name="wallet_entry_bucket_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="wallet_entry_amount_cents_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
                uuid_pk(),
                *TIMESTAMPS,
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("transfer", "Transfer"),
                            ("card_load", "Card Load"),
                            ("bank_load", "Bank Load"),
                            ("zelle_load", "Zelle Load"),
                            ("cashapp_load", "Cash App Load"),
                            ("applepay_load", "Apple Pay Load"),
                            ("payout", "Payout"),
                            ("topup", "Top-up"),
                        ],
                        db_index=True,
                        help_text="Kind of money movement",
                        max_length=20,
                    ),
                ),
                ("amount_cents", models.PositiveBigIntegerField(help_text="Amount in cents")),
                ("fee_cents", models.PositiveBigIntegerField(default=0, help_text="Fee in cents charged to the sender")),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("completed", "Completed"), ("failed", "Failed")],
                        db_index=True,
                        default="pending",
                        help_text="Settlement status",
                        max_length=20,
                    ),
                ),
                (
                    "approval_status",
                    django_fsm.FSMField(
                        choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")],
                        db_index=True,
                        default="pending",
                        help_text="Administrative approval state (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("rejection_reason", models.TextField(blank=True, help_text="Reason given when the transaction was rejected", null=True)),
                ("memo", models.CharField(blank=True, default="", help_text="Note shown in transaction history", max_length=255)),
                (
                    "payout_speed",
                    models.CharField(
                        blank=True,
                        choices=[("standard", "Standard"), ("instant", "Instant")],
                        help_text="Delivery speed for payouts",
                        max_length=20,
                        null=True,
                    ),
                ),
                ("bank_reference", models.CharField(blank=True, help_text="Identifier of the destination bank account for payouts", max_length=255, null=True)),
                ("approved_at", models.DateTimeField(blank=True, help_text="When the approval decision was made", null=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Version for optimistic locking - incremented on each save")),
                (
                    "sender",
                    models.ForeignKey(
                        blank=True,
                        help_text="User whose wallet is debited",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sent_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "receiver",
                    models.ForeignKey(
                        blank=True,
                        help_text="User whose wallet is credited",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Administrator who approved or rejected this transaction",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="decided_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["approval_status", "created_at"], name="txn_approval_created_idx"),
                    models.Index(fields=["sender", "created_at"], name="txn_sender_created_idx"),
                    models.Index(fields=["receiver", "created_at"], name="txn_receiver_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="transaction_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("sender__isnull", False),
                            ("receiver__isnull", False),
                            _connector="OR",
                        ),
                        name="transaction_has_party",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                uuid_pk(),
                *TIMESTAMPS,
                ("amount_cents", models.PositiveBigIntegerField(help_text="Purchase amount held in escrow, in cents")),
                ("item_description", models.TextField(help_text="Description of the purchased item")),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending_payment", "Pending Payment"),
                            ("pending_shipment", "Pending Shipment"),
                            ("awaiting_admin_approval", "Awaiting Admin Approval"),
                            ("shipped", "Shipped"),
                            ("awaiting_release", "Awaiting Release"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="pending_payment",
                        help_text="Current state of the order (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                ("tracking_number", models.CharField(blank=True, help_text="Carrier tracking number submitted by the seller", max_length=100, null=True)),
                ("shipping_carrier", models.CharField(blank=True, help_text="Carrier name submitted by the seller", max_length=50, null=True)),
                ("version", models.PositiveIntegerField(default=1, help_text="Version for optimistic locking - incremented on each save")),
                ("paid_at", models.DateTimeField(blank=True, help_text="When the buyer confirmed payment", null=True)),
                ("shipped_at", models.DateTimeField(blank=True, help_text="When the seller submitted tracking", null=True)),
                ("delivered_at", models.DateTimeField(blank=True, help_text="When the order was treated as delivered", null=True)),
                ("release_approved_at", models.DateTimeField(blank=True, help_text="When an administrator approved tracking or released funds", null=True)),
                ("completed_at", models.DateTimeField(blank=True, help_text="When escrow was released to the seller", null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, help_text="When the order was cancelled", null=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        help_text="User paying for the goods",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        help_text="User shipping the goods and receiving the funds",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "shipped_at"], name="order_status_shipped_idx"),
                    models.Index(fields=["status", "delivered_at"], name="order_status_delivered_idx"),
                    models.Index(fields=["buyer", "created_at"], name="order_buyer_created_idx"),
                    models.Index(fields=["seller", "created_at"], name="order_seller_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_cents__gt", 0)),
                        name="order_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("buyer", models.F("seller")), _negated=True),
                        name="order_buyer_is_not_seller",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EscrowHold",
            fields=[
                uuid_pk(),
                *TIMESTAMPS,
                ("side", models.CharField(choices=[("buyer", "Buyer"), ("seller", "Seller")], help_text="Whether this row is the buyer or seller side", max_length=10)),
                ("amount_cents", models.BigIntegerField(help_text="Signed amount in cents (buyer negative, seller positive)")),
                (
                    "status",
                    models.CharField(
                        choices=[("held", "Held"), ("released", "Released")],
                        db_index=True,
                        default="held",
                        help_text="Whether the funds are still held",
                        max_length=10,
                    ),
                ),
                ("released_at", models.DateTimeField(blank=True, help_text="When the hold was released", null=True)),
                (
                    "order",
                    models.ForeignKey(
                        help_text="Order whose funds are held",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="holds",
                        to="wallets.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User this side of the hold is tagged to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="escrow_holds",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("order", "side"),
                        name="escrow_hold_one_row_per_side",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("amount_cents__lt", 0), ("side", "buyer")),
                            models.Q(("amount_cents__gt", 0), ("side", "seller")),
                            _connector="OR",
                        ),
                        name="escrow_hold_amount_sign_matches_side",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Shipment",
            fields=[
                uuid_pk(),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="When the tracking was submitted")),
                ("carrier", models.CharField(help_text="Shipping carrier name", max_length=50)),
                ("tracking_number", models.CharField(help_text="Carrier tracking number", max_length=100)),
                (
                    "order",
                    models.ForeignKey(
                        help_text="Order this shipment belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="shipments",
                        to="wallets.order",
                    ),
                ),
                (
                    "submitted_by",
                    models.ForeignKey(
                        help_text="Seller who submitted the tracking",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submitted_shipments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
