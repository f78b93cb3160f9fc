"""
Tests for EscrowService.

Escrow opening moves buyer funds from available to on-hold and writes
the zero-sum hold pair; release pays the seller exactly once.
"""

import uuid

import pytest
from django.db.models import Sum

from wallets.exceptions import InvalidTransition, NoHeldEscrow, NotFound
from wallets.ledger import BalanceBucket, InsufficientFunds, ledger
from wallets.models import EscrowHold, Order
from wallets.services import EscrowService, OrderService
from wallets.state_machines import HoldSide, HoldStatus, OrderState
from wallets.tests.factories import OrderFactory


def _hold_sum(order):
    return EscrowHold.objects.filter(order=order).aggregate(total=Sum("amount_cents"))["total"]


class TestOpenEscrow:
    def test_moves_buyer_funds_on_hold(self, funded_buyer, seller):
        """
        Given a buyer holding 5000 cents
        When escrow is opened for 5000 cents
        Then the buyer has 0 available, 5000 on hold and a held pair exists
        """
        # Act
        order = EscrowService.open_escrow(funded_buyer, seller, 5000, "Vintage camera")

        # Assert
        balance = ledger.get_balance(funded_buyer.pk)
        assert balance.available_cents == 0
        assert balance.on_hold_cents == 5000
        assert order.status == OrderState.PENDING_PAYMENT

        holds = {h.side: h for h in order.holds.all()}
        assert holds[HoldSide.BUYER].amount_cents == -5000
        assert holds[HoldSide.BUYER].user == funded_buyer
        assert holds[HoldSide.SELLER].amount_cents == 5000
        assert holds[HoldSide.SELLER].user == seller
        assert {h.status for h in holds.values()} == {HoldStatus.HELD}

    def test_hold_pair_sums_to_zero(self, funded_buyer, seller):
        order = EscrowService.open_escrow(funded_buyer, seller, 3000, "Lens")

        assert _hold_sum(order) == 0

    def test_seller_is_not_paid_on_open(self, funded_buyer, seller):
        EscrowService.open_escrow(funded_buyer, seller, 5000, "Lens")

        assert ledger.get_balance(seller.pk).available_cents == 0

    def test_insufficient_funds_writes_nothing(self, funded_buyer, seller):
        """Should leave no order, holds or balance change when the buyer is short."""
        with pytest.raises(InsufficientFunds):
            EscrowService.open_escrow(funded_buyer, seller, 5001, "Lens")

        assert not Order.objects.exists()
        assert not EscrowHold.objects.exists()
        balance = ledger.get_balance(funded_buyer.pk)
        assert balance.available_cents == 5000
        assert balance.on_hold_cents == 0

    def test_ledger_entries_reference_order(self, funded_buyer, seller):
        order = EscrowService.open_escrow(funded_buyer, seller, 5000, "Lens")

        keys = {e.idempotency_key for e in ledger.get_entries_by_reference("order", order.id)}
        assert keys == {
            f"order:{order.id}:escrow:debit",
            f"order:{order.id}:escrow:hold",
        }


class TestReleaseEscrow:
    def test_pays_seller_from_buyer_hold(self, awaiting_release_order, buyer, seller):
        order = EscrowService.release_escrow(awaiting_release_order.id)

        assert order.status == OrderState.COMPLETED
        assert order.completed_at is not None
        assert ledger.get_balance(seller.pk).available_cents == 5000
        assert ledger.get_balance(buyer.pk).on_hold_cents == 0
        assert ledger.get_balance(buyer.pk).available_cents == 0

    def test_flips_both_holds_to_released(self, awaiting_release_order):
        EscrowService.release_escrow(awaiting_release_order.id)

        holds = EscrowHold.objects.filter(order_id=awaiting_release_order.id)
        assert {h.status for h in holds} == {HoldStatus.RELEASED}
        assert all(h.released_at is not None for h in holds)
        assert _hold_sum(awaiting_release_order) == 0

    def test_manual_release_stamps_approval(self, awaiting_release_order, admin_user):
        order = EscrowService.release_escrow(awaiting_release_order.id, released_by=admin_user)

        assert order.release_approved_at is not None
        entries = ledger.get_entries_by_reference("order", order.id)
        release_entries = [e for e in entries if "release" in e.idempotency_key]
        assert {e.created_by for e in release_entries} == {f"admin:{admin_user.pk}"}

    def test_second_release_pays_once(self, awaiting_release_order, seller):
        """Should refuse a retried release and credit the seller exactly once."""
        EscrowService.release_escrow(awaiting_release_order.id)

        with pytest.raises(NoHeldEscrow):
            EscrowService.release_escrow(awaiting_release_order.id)

        assert ledger.get_balance(seller.pk).available_cents == 5000

    def test_wrong_state_is_invalid_transition(self, shipped_order, buyer, seller):
        with pytest.raises(InvalidTransition):
            EscrowService.release_escrow(shipped_order.id)

        assert ledger.get_balance(seller.pk).available_cents == 0
        assert ledger.get_balance(buyer.pk).on_hold_cents == 5000
        assert EscrowHold.objects.filter(
            order_id=shipped_order.id, status=HoldStatus.HELD
        ).count() == 2

    def test_order_without_holds(self, db):
        order = OrderFactory(status=OrderState.AWAITING_RELEASE)

        with pytest.raises(NoHeldEscrow):
            EscrowService.release_escrow(order.id)

    def test_unknown_order(self, db):
        with pytest.raises(NotFound):
            EscrowService.release_escrow(uuid.uuid4())

    def test_buyer_balance_stays_consistent(self, awaiting_release_order, buyer, seller):
        EscrowService.release_escrow(awaiting_release_order.id)

        for user in (buyer, seller):
            for bucket in (BalanceBucket.AVAILABLE, BalanceBucket.ON_HOLD):
                stored = getattr(ledger.get_balance(user.pk), bucket.field_name)
                assert ledger.entries_balance(user.pk, bucket) == stored


class TestEscrowThroughOrderService:
    def test_release_after_full_lifecycle_completes_order(self, awaiting_release_order, admin_user):
        result = OrderService.release_order(awaiting_release_order.id, actor=admin_user)

        assert result.success is True
        assert Order.objects.get(pk=result.data.pk).status == OrderState.COMPLETED
