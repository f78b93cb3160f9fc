"""
Serializers for the wallets API.

Read serializers render ledger, journal and order records; input
serializers validate request payloads before they reach the services.
Amounts are always integer cents and must fit a signed 64-bit column;
per-operation limits are enforced by the services.

Serializer Hierarchy:
    BalanceSerializer: Wallet balance snapshot
    TransactionSerializer: Journal row
    OrderSerializer: Order with escrow holds and shipments

    LoadRequestSerializer / TransferRequestSerializer / PayoutRequestSerializer
    DecisionRequestSerializer / FundWalletRequestSerializer
    CreateOrderRequestSerializer / TrackingRequestSerializer / TrackingDecisionSerializer
"""

from __future__ import annotations

from rest_framework import serializers

from core.validators import validate_no_html, validate_reference_code
from wallets.ledger import MAX_AMOUNT_CENTS
from wallets.models import EscrowHold, Order, Shipment, Transaction
from wallets.services.transaction_service import BANK_ID_MAX_LENGTH
from wallets.state_machines import DecisionAction, LoadMethod, PayoutSpeed


# =============================================================================
# Read Serializers
# =============================================================================


class BalanceSerializer(serializers.Serializer):
    """Wallet balance partitions in cents."""

    available_cents = serializers.IntegerField()
    pending_cents = serializers.IntegerField()
    on_hold_cents = serializers.IntegerField()
    total_cents = serializers.IntegerField()


class TransactionSerializer(serializers.ModelSerializer):
    """Journal row as shown in history and the approval queue."""

    class Meta:
        model = Transaction
        fields = [
            "id",
            "type",
            "amount_cents",
            "fee_cents",
            "sender",
            "receiver",
            "status",
            "approval_status",
            "rejection_reason",
            "memo",
            "payout_speed",
            "bank_reference",
            "estimated_arrival",
            "approved_by",
            "approved_at",
            "created_at",
        ]
        read_only_fields = fields


class EscrowHoldSerializer(serializers.ModelSerializer):
    class Meta:
        model = EscrowHold
        fields = ["id", "user", "side", "amount_cents", "status", "released_at"]
        read_only_fields = fields


class ShipmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Shipment
        fields = ["id", "carrier", "tracking_number", "submitted_by", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order with its escrow pair and shipment submissions."""

    holds = EscrowHoldSerializer(many=True, read_only=True)
    shipments = ShipmentSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "buyer",
            "seller",
            "amount_cents",
            "item_description",
            "status",
            "tracking_number",
            "shipping_carrier",
            "paid_at",
            "shipped_at",
            "delivered_at",
            "release_approved_at",
            "completed_at",
            "holds",
            "shipments",
            "created_at",
        ]
        read_only_fields = fields


# =============================================================================
# Input Serializers
# =============================================================================


class LoadRequestSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=LoadMethod.choices)
    amount_cents = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT_CENTS)
    code = serializers.CharField(
        required=False, allow_blank=True, max_length=64, validators=[validate_reference_code]
    )
    memo = serializers.CharField(
        required=False, allow_blank=True, max_length=255, validators=[validate_no_html]
    )


class TransferRequestSerializer(serializers.Serializer):
    """Either receiver_id or receiver_handle identifies the recipient."""

    receiver_id = serializers.IntegerField(required=False)
    receiver_handle = serializers.CharField(required=False, max_length=31)
    amount_cents = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT_CENTS)
    memo = serializers.CharField(
        required=False, allow_blank=True, max_length=255, validators=[validate_no_html]
    )

    def validate(self, attrs):
        if not attrs.get("receiver_id") and not attrs.get("receiver_handle"):
            raise serializers.ValidationError(
                "Provide receiver_id or receiver_handle."
            )
        return attrs


class PayoutRequestSerializer(serializers.Serializer):
    bank_id = serializers.CharField(
        max_length=BANK_ID_MAX_LENGTH, validators=[validate_reference_code]
    )
    amount_cents = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT_CENTS)
    speed = serializers.ChoiceField(
        choices=PayoutSpeed.choices, default=PayoutSpeed.STANDARD
    )


class DecisionRequestSerializer(serializers.Serializer):
    """Reason is checked by the Approval Gateway so blank reasons fail there."""

    action = serializers.ChoiceField(choices=DecisionAction.choices)
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)


class FundWalletRequestSerializer(serializers.Serializer):
    handle = serializers.CharField(max_length=31)
    amount_cents = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT_CENTS)
    note = serializers.CharField(
        required=False, allow_blank=True, max_length=255, validators=[validate_no_html]
    )


class CreateOrderRequestSerializer(serializers.Serializer):
    seller_handle = serializers.CharField(max_length=31)
    amount_cents = serializers.IntegerField(min_value=1, max_value=MAX_AMOUNT_CENTS)
    item_description = serializers.CharField(
        max_length=2000, validators=[validate_no_html]
    )


class TrackingRequestSerializer(serializers.Serializer):
    carrier = serializers.CharField(max_length=50)
    tracking_number = serializers.CharField(
        max_length=100, validators=[validate_reference_code]
    )


class TrackingDecisionSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
