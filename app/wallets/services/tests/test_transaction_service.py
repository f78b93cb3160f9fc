"""
Tests for TransactionService.

Covers payout terms, the deferred path (loads, top-ups, payouts), the
instant transfer path, administrative funding, per-operation limits and
history queries.
"""

from datetime import datetime, timezone as dt_timezone

import pytest
from django.test import override_settings
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from wallets.ledger import MAX_AMOUNT_CENTS, WalletEntry, ledger
from wallets.models import Transaction
from wallets.services import TransactionService
from wallets.services.transaction_service import BANK_ID_MAX_LENGTH
from wallets.state_machines import (
    ApprovalStatus,
    LoadMethod,
    PayoutSpeed,
    TransactionStatus,
    TransactionType,
)


@pytest.fixture
def user(db):
    return UserFactory(handle="maria")


@pytest.fixture
def friend(db):
    return UserFactory(handle="alice")


# =============================================================================
# Payout Terms
# =============================================================================


class TestCalculatePayoutFee:
    def test_standard_payout_is_free(self):
        assert TransactionService.calculate_payout_fee(PayoutSpeed.STANDARD) == 0

    def test_same_day_payout_charges_flat_fee(self):
        assert TransactionService.calculate_payout_fee(PayoutSpeed.SAME_DAY) == 300

    @override_settings(PAYOUT_STANDARD_FEE_CENTS=25, PAYOUT_SAME_DAY_FEE_CENTS=450)
    def test_fees_are_configurable(self):
        assert TransactionService.calculate_payout_fee(PayoutSpeed.STANDARD) == 25
        assert TransactionService.calculate_payout_fee("same_day") == 450


class TestEstimateArrival:
    def test_standard_arrives_in_two_days(self):
        submitted = datetime(2026, 3, 2, 9, 30, tzinfo=dt_timezone.utc)

        arrival = TransactionService.estimate_arrival(PayoutSpeed.STANDARD, submitted)

        assert arrival == datetime(2026, 3, 4, 9, 30, tzinfo=dt_timezone.utc)

    def test_same_day_arrives_on_submission_day(self):
        submitted = datetime(2026, 3, 2, 9, 30, tzinfo=dt_timezone.utc)

        arrival = TransactionService.estimate_arrival(PayoutSpeed.SAME_DAY, submitted)

        assert arrival == submitted

    @freeze_time("2026-03-02 09:30:00")
    def test_defaults_to_now(self):
        arrival = TransactionService.estimate_arrival("standard")

        assert arrival == datetime(2026, 3, 4, 9, 30, tzinfo=dt_timezone.utc)


# =============================================================================
# Deferred Path
# =============================================================================


class TestSubmitLoad:
    def test_creates_pending_load_without_ledger_effect(self, user):
        """Should queue the load for approval and leave the balance alone."""
        result = TransactionService.submit_load(user, LoadMethod.CARD, 5000)

        assert result.success is True
        txn = result.data
        assert txn.type == TransactionType.CARD_LOAD
        assert txn.receiver == user
        assert txn.sender is None
        assert txn.status == TransactionStatus.PENDING
        assert txn.approval_status == ApprovalStatus.PENDING
        assert ledger.get_balance(user.pk).available_cents == 0

    @pytest.mark.parametrize(
        "method,expected_type",
        [
            (LoadMethod.BANK, TransactionType.BANK_LOAD),
            (LoadMethod.ZELLE, TransactionType.ZELLE_LOAD),
            (LoadMethod.CASHAPP, TransactionType.CASHAPP_LOAD),
            (LoadMethod.APPLEPAY, TransactionType.APPLEPAY_LOAD),
        ],
    )
    def test_maps_method_to_type(self, user, method, expected_type):
        result = TransactionService.submit_load(user, method, 1000)

        assert result.data.type == expected_type

    def test_topup_requires_code(self, user):
        result = TransactionService.submit_load(user, LoadMethod.TOPUP, 1000, code="  ")

        assert result.success is False
        assert result.error_code == "TOPUP_CODE_REQUIRED"
        assert not Transaction.objects.exists()

    def test_topup_records_code_in_memo(self, user):
        result = TransactionService.submit_load(user, LoadMethod.TOPUP, 1000, code="GIFT-42")

        assert result.data.type == TransactionType.TOPUP
        assert result.data.memo == "Top-up code GIFT-42"

    def test_overlong_topup_code_is_rejected(self, user):
        result = TransactionService.submit_load(user, LoadMethod.TOPUP, 1000, code="G" * 65)

        assert result.success is False
        assert result.error_code == "INVALID_TOPUP_CODE"

    def test_unknown_method_is_rejected(self, user):
        result = TransactionService.submit_load(user, "crypto", 1000)

        assert result.success is False
        assert result.error_code == "INVALID_LOAD_METHOD"

    def test_non_positive_amount_is_rejected(self, user):
        result = TransactionService.submit_load(user, LoadMethod.CARD, 0)

        assert result.success is False
        assert result.error_code == "INVALID_AMOUNT"
        assert result.http_status == 400

    def test_load_at_limit_is_accepted(self, user):
        result = TransactionService.submit_load(user, LoadMethod.BANK, 5_000_000)

        assert result.success is True

    def test_load_above_limit_is_rejected(self, user):
        result = TransactionService.submit_load(user, LoadMethod.BANK, 5_000_001)

        assert result.success is False
        assert result.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert result.details["max_cents"] == 5_000_000
        assert not Transaction.objects.exists()

    def test_overlong_memo_is_rejected(self, user):
        result = TransactionService.submit_load(user, LoadMethod.CARD, 1000, memo="x" * 256)

        assert result.success is False
        assert result.error_code == "MEMO_TOO_LONG"


class TestSubmitPayout:
    @freeze_time("2026-03-02 09:30:00")
    def test_creates_pending_same_day_payout(self, user, fund):
        fund(user, 5000)

        result = TransactionService.submit_payout(user, "bank_001", 2000, PayoutSpeed.SAME_DAY)

        assert result.success is True
        txn = result.data
        assert txn.type == TransactionType.PAYOUT
        assert txn.sender == user
        assert txn.fee_cents == 300
        assert txn.payout_speed == PayoutSpeed.SAME_DAY
        assert txn.bank_reference == "bank_001"
        assert txn.estimated_arrival == datetime(2026, 3, 2, 9, 30, tzinfo=dt_timezone.utc)
        assert txn.approval_status == ApprovalStatus.PENDING
        assert ledger.get_balance(user.pk).available_cents == 5000

    @freeze_time("2026-03-02 09:30:00")
    def test_standard_payout_is_free_and_arrives_in_two_days(self, user, fund):
        fund(user, 2000)

        result = TransactionService.submit_payout(user, "bank_001", 2000)

        assert result.data.fee_cents == 0
        assert result.data.payout_speed == PayoutSpeed.STANDARD
        assert result.data.estimated_arrival == datetime(
            2026, 3, 4, 9, 30, tzinfo=dt_timezone.utc
        )

    def test_rejects_payout_the_user_cannot_afford(self, user, fund):
        """Should count the fee when checking the balance."""
        fund(user, 2000)

        result = TransactionService.submit_payout(user, "bank_001", 2000, PayoutSpeed.SAME_DAY)

        assert result.success is False
        assert result.error_code == "INSUFFICIENT_FUNDS"
        assert result.details["required_cents"] == 2300
        assert not Transaction.objects.exists()

    def test_requires_bank(self, user, fund):
        fund(user, 2000)

        result = TransactionService.submit_payout(user, "", 1000)

        assert result.error_code == "BANK_REQUIRED"

    def test_accepts_longest_bank_id(self, user, fund):
        """Memo built from the bank id still fits the memo column."""
        fund(user, 2000)
        bank_id = "b" * BANK_ID_MAX_LENGTH

        result = TransactionService.submit_payout(user, bank_id, 1000)

        assert result.success is True
        txn = Transaction.objects.get(pk=result.data.pk)
        assert txn.bank_reference == bank_id
        assert txn.memo == f"Payout to {bank_id}"
        assert len(txn.memo) <= Transaction._meta.get_field("memo").max_length

    def test_rejects_overlong_bank_id(self, user, fund):
        fund(user, 2000)

        result = TransactionService.submit_payout(user, "b" * (BANK_ID_MAX_LENGTH + 1), 1000)

        assert result.success is False
        assert result.error_code == "INVALID_BANK_ID"
        assert not Transaction.objects.exists()

    def test_unknown_speed_is_rejected(self, user, fund):
        fund(user, 2000)

        result = TransactionService.submit_payout(user, "bank_001", 1000, "instant")

        assert result.success is False
        assert result.error_code == "INVALID_PAYOUT_SPEED"

    def test_payout_above_limit_is_rejected(self, user, fund):
        fund(user, 3_000_000)

        result = TransactionService.submit_payout(user, "bank_001", 2_500_001)

        assert result.success is False
        assert result.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert result.details["max_cents"] == 2_500_000

    @override_settings(PAYOUT_MAX_CENTS=1000)
    def test_payout_limit_is_configurable(self, user, fund):
        fund(user, 5000)

        assert TransactionService.submit_payout(user, "bank_001", 1000).success is True
        assert TransactionService.submit_payout(user, "bank_001", 1001).success is False


# =============================================================================
# Instant Path
# =============================================================================


class TestSubmitTransfer:
    def test_moves_funds_immediately(self, user, friend, fund):
        # Arrange
        fund(user, 5000)

        # Act
        result = TransactionService.submit_transfer(user, 1500, receiver_handle="alice")

        # Assert
        assert result.success is True
        txn = result.data
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.approval_status == ApprovalStatus.APPROVED
        assert txn.approved_at is not None
        assert ledger.get_balance(user.pk).available_cents == 3500
        assert ledger.get_balance(friend.pk).available_cents == 1500

    def test_default_memo_names_receiver(self, user, friend, fund):
        fund(user, 100)

        result = TransactionService.submit_transfer(user, 100, receiver_handle="@Alice")

        assert result.data.memo == "Payment to @alice"

    def test_transfer_by_receiver_id(self, user, friend, fund):
        fund(user, 100)

        result = TransactionService.submit_transfer(
            user, 100, receiver_id=friend.pk, memo="Lunch"
        )

        assert result.data.receiver == friend
        assert result.data.memo == "Lunch"

    def test_insufficient_funds_leaves_no_trace(self, user, friend, fund):
        """
        Given a sender holding less than the transfer amount
        When the transfer is submitted
        Then nothing is credited and no transaction row exists
        """
        fund(user, 1000)

        result = TransactionService.submit_transfer(user, 1500, receiver_handle="alice")

        assert result.success is False
        assert result.error_code == "INSUFFICIENT_FUNDS"
        assert ledger.get_balance(user.pk).available_cents == 1000
        assert ledger.get_balance(friend.pk).available_cents == 0
        assert not Transaction.objects.exists()
        assert not WalletEntry.objects.filter(wallet__user=friend).exists()

    def test_unknown_receiver(self, user, fund):
        fund(user, 1000)

        result = TransactionService.submit_transfer(user, 100, receiver_handle="nobody")

        assert result.success is False
        assert result.error_code == "USER_NOT_FOUND"
        assert result.http_status == 404

    def test_inactive_receiver_is_not_found(self, user, fund):
        UserFactory(handle="gone", is_active=False)
        fund(user, 1000)

        result = TransactionService.submit_transfer(user, 100, receiver_handle="gone")

        assert result.http_status == 404

    def test_receiver_required(self, user):
        result = TransactionService.submit_transfer(user, 100)

        assert result.error_code == "RECEIVER_REQUIRED"

    def test_cannot_send_to_self(self, user, fund):
        fund(user, 1000)

        result = TransactionService.submit_transfer(user, 100, receiver_handle="maria")

        assert result.error_code == "SELF_TRANSFER"
        assert ledger.get_balance(user.pk).available_cents == 1000

    def test_amount_beyond_column_range_is_rejected(self, user, friend):
        result = TransactionService.submit_transfer(
            user, MAX_AMOUNT_CENTS + 1, receiver_handle="alice"
        )

        assert result.success is False
        assert result.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert not Transaction.objects.exists()

    @override_settings(TRANSFER_FEE_CENTS=25)
    def test_fee_is_debited_from_sender(self, user, friend, fund):
        fund(user, 1000)

        result = TransactionService.submit_transfer(user, 500, receiver_handle="alice")

        assert result.data.fee_cents == 25
        assert ledger.get_balance(user.pk).available_cents == 475
        assert ledger.get_balance(friend.pk).available_cents == 500


# =============================================================================
# Administrative Funding
# =============================================================================


class TestFundWallet:
    def test_credits_and_records_approved_topup(self, user, admin_user):
        result = TransactionService.fund_wallet(admin_user, "maria", 2500, note="Promo credit")

        assert result.success is True
        txn = result.data
        assert txn.type == TransactionType.TOPUP
        assert txn.approval_status == ApprovalStatus.APPROVED
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.approved_by == admin_user
        assert txn.memo == "Promo credit"
        assert ledger.get_balance(user.pk).available_cents == 2500

    def test_default_note(self, user, admin_user):
        result = TransactionService.fund_wallet(admin_user, "maria", 100)

        assert result.data.memo == "Admin deposit"

    def test_unknown_handle(self, admin_user):
        result = TransactionService.fund_wallet(admin_user, "nobody", 100)

        assert result.success is False
        assert result.http_status == 404
        assert not Transaction.objects.exists()

    def test_load_limit_applies(self, user, admin_user):
        result = TransactionService.fund_wallet(admin_user, "maria", 5_000_001)

        assert result.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert ledger.get_balance(user.pk).available_cents == 0


# =============================================================================
# Queries
# =============================================================================


class TestQueries:
    def test_list_for_user_includes_sent_and_received(self, user, friend, fund):
        fund(friend, 1000)
        with freeze_time("2026-03-01 10:00:00"):
            received = TransactionService.submit_transfer(
                friend, 100, receiver_handle="maria"
            ).data
        with freeze_time("2026-03-01 11:00:00"):
            load = TransactionService.submit_load(user, LoadMethod.CARD, 500).data
        TransactionService.submit_load(friend, LoadMethod.CARD, 500)

        history = list(TransactionService.list_for_user(user))

        assert history == [load, received]

    def test_list_pending_oldest_first(self, user, friend):
        with freeze_time("2026-03-01 10:00:00"):
            older = TransactionService.submit_load(user, LoadMethod.CARD, 500).data
        with freeze_time("2026-03-01 11:00:00"):
            newer = TransactionService.submit_load(friend, LoadMethod.BANK, 500).data

        assert list(TransactionService.list_pending()) == [older, newer]
