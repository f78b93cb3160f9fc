"""
Tests for LedgerService.

This module tests the credit/debit primitives, their idempotency and
their all-or-nothing behavior, plus balance and audit queries.
"""

import uuid

import pytest
from django.db import transaction
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from wallets.ledger.exceptions import InsufficientFunds, InvalidAmount
from wallets.ledger.models import BalanceBucket, EntryDirection, EntryType, Wallet, WalletEntry
from wallets.ledger.services import MAX_AMOUNT_CENTS, LedgerService, ledger


@pytest.fixture
def user(db):
    return UserFactory()


def _available(user):
    return Wallet.objects.get(user=user).available_cents


class TestCredit:
    """Tests for LedgerService.credit()."""

    def test_creates_wallet_on_first_credit(self, user):
        """Should create the wallet lazily and credit it."""
        assert LedgerService.get_wallet(user.pk) is None

        ledger.credit(user.pk, 5000, entry_type=EntryType.DEPOSIT)

        assert _available(user) == 5000

    def test_records_entry(self, user):
        entry = ledger.credit(
            user.pk,
            2500,
            entry_type=EntryType.DEPOSIT,
            description="Card load",
            created_by="tests",
        )

        assert entry.direction == EntryDirection.CREDIT
        assert entry.bucket == BalanceBucket.AVAILABLE
        assert entry.amount_cents == 2500
        assert entry.balance_after_cents == 2500
        assert entry.description == "Card load"
        assert entry.idempotency_key.startswith("entry:")

    def test_credits_requested_bucket_only(self, user):
        ledger.credit(user.pk, 700, bucket=BalanceBucket.ON_HOLD)

        wallet = Wallet.objects.get(user=user)
        assert wallet.on_hold_cents == 700
        assert wallet.available_cents == 0

    def test_replayed_key_applies_once(self, user):
        """Should return the original entry for a repeated idempotency key."""
        first = ledger.credit(user.pk, 1000, idempotency_key="deposit:abc")
        second = ledger.credit(user.pk, 1000, idempotency_key="deposit:abc")

        assert first.id == second.id
        assert _available(user) == 1000
        assert WalletEntry.objects.filter(idempotency_key="deposit:abc").count() == 1

    @pytest.mark.parametrize("amount", [0, -100, 10.5, "100", True, None])
    def test_rejects_invalid_amount(self, user, amount):
        with pytest.raises(InvalidAmount):
            ledger.credit(user.pk, amount)

        assert LedgerService.get_wallet(user.pk) is None

    def test_rejects_credit_that_would_overflow_balance(self, user):
        ledger.credit(user.pk, MAX_AMOUNT_CENTS)

        with pytest.raises(InvalidAmount) as exc_info:
            ledger.credit(user.pk, 1)

        assert exc_info.value.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert _available(user) == MAX_AMOUNT_CENTS
        assert WalletEntry.objects.filter(wallet__user=user).count() == 1


class TestDebit:
    """Tests for LedgerService.debit()."""

    def test_debits_available(self, user):
        ledger.credit(user.pk, 5000)

        entry = ledger.debit(user.pk, 1500, entry_type=EntryType.PAYOUT)

        assert entry.direction == EntryDirection.DEBIT
        assert entry.balance_after_cents == 3500
        assert _available(user) == 3500

    def test_debit_to_exactly_zero(self, user):
        ledger.credit(user.pk, 5000)

        ledger.debit(user.pk, 5000)

        assert _available(user) == 0

    def test_insufficient_funds_leaves_balance_unchanged(self, user):
        """Should refuse a debit larger than the balance without side effects."""
        ledger.credit(user.pk, 1000)

        with pytest.raises(InsufficientFunds) as exc_info:
            ledger.debit(user.pk, 1001)

        assert exc_info.value.required == 1001
        assert exc_info.value.available == 1000
        assert _available(user) == 1000
        assert WalletEntry.objects.filter(direction=EntryDirection.DEBIT).count() == 0

    def test_debit_without_wallet_is_insufficient(self, user):
        with pytest.raises(InsufficientFunds) as exc_info:
            ledger.debit(user.pk, 1)

        assert exc_info.value.available == 0
        assert LedgerService.get_wallet(user.pk) is None

    def test_checks_the_debited_bucket(self, user):
        """Should not let available funds cover an on-hold debit."""
        ledger.credit(user.pk, 5000)

        with pytest.raises(InsufficientFunds) as exc_info:
            ledger.debit(user.pk, 100, bucket=BalanceBucket.ON_HOLD)

        assert exc_info.value.bucket == BalanceBucket.ON_HOLD

    def test_replayed_debit_applies_once(self, user):
        ledger.credit(user.pk, 5000)

        ledger.debit(user.pk, 2000, idempotency_key="payout:1")
        ledger.debit(user.pk, 2000, idempotency_key="payout:1")

        assert _available(user) == 3000

    def test_failed_leg_rolls_back_enclosing_atomic_block(self, user):
        """
        Given a caller wrapping a credit and a debit in one atomic block
        When the debit fails for insufficient funds
        Then the credit is rolled back too
        """
        other = UserFactory()
        ledger.credit(user.pk, 100)

        with pytest.raises(InsufficientFunds):
            with transaction.atomic():
                ledger.credit(other.pk, 500)
                ledger.debit(user.pk, 500)

        assert LedgerService.get_wallet(other.pk) is None
        assert _available(user) == 100


class TestBalanceQueries:
    def test_get_balance_for_user_without_wallet(self, user):
        snapshot = ledger.get_balance(user.pk)

        assert snapshot.available_cents == 0
        assert snapshot.total_cents == 0

    def test_get_balance_snapshot(self, user):
        ledger.credit(user.pk, 5000)
        ledger.credit(user.pk, 1000, bucket=BalanceBucket.ON_HOLD)

        snapshot = ledger.get_balance(user.pk)

        assert snapshot.to_dict() == {
            "available_cents": 5000,
            "pending_cents": 0,
            "on_hold_cents": 1000,
            "total_cents": 6000,
        }

    def test_entries_balance_matches_stored_balance(self, user):
        """Stored balance should always equal credits minus debits."""
        # Arrange
        operations = [
            ("credit", 5000),
            ("debit", 1200),
            ("credit", 300),
            ("debit", 4100),
            ("credit", 999),
            ("debit", 1),
        ]

        # Act
        for kind, amount in operations:
            getattr(ledger, kind)(user.pk, amount)

        # Assert
        balance = _available(user)
        assert balance == 5000 - 1200 + 300 - 4100 + 999 - 1
        assert balance >= 0
        assert ledger.entries_balance(user.pk) == balance

    def test_entries_balance_after_rejected_debit(self, user):
        ledger.credit(user.pk, 500)
        with pytest.raises(InsufficientFunds):
            ledger.debit(user.pk, 600)

        assert ledger.entries_balance(user.pk) == 500

    def test_get_entries_newest_first(self, user):
        with freeze_time("2026-03-01 10:00:00"):
            first = ledger.credit(user.pk, 100)
        with freeze_time("2026-03-01 10:05:00"):
            second = ledger.credit(user.pk, 200)

        entries = ledger.get_entries(user.pk)

        assert [e.id for e in entries] == [second.id, first.id]

    def test_get_entries_by_reference(self, user):
        reference_id = uuid.uuid4()
        ledger.credit(user.pk, 100, reference_type="order", reference_id=reference_id)
        ledger.credit(user.pk, 200)

        entries = ledger.get_entries_by_reference("order", reference_id)

        assert len(entries) == 1
        assert entries[0].amount_cents == 100


class TestValidateAmount:
    def test_accepts_column_maximum(self):
        ledger.validate_amount(MAX_AMOUNT_CENTS)

    @pytest.mark.parametrize("amount", [MAX_AMOUNT_CENTS + 1, 10**20])
    def test_rejects_amount_beyond_column_range(self, amount):
        with pytest.raises(InvalidAmount) as exc_info:
            ledger.validate_amount(amount)

        assert exc_info.value.error_code == "AMOUNT_LIMIT_EXCEEDED"
        assert exc_info.value.details["max_cents"] == MAX_AMOUNT_CENTS

    def test_per_operation_limit(self):
        ledger.validate_amount(2_500_000, max_cents=2_500_000)

        with pytest.raises(InvalidAmount) as exc_info:
            ledger.validate_amount(2_500_001, max_cents=2_500_000)

        assert exc_info.value.details == {"amount_cents": 2_500_001, "max_cents": 2_500_000}

    def test_column_range_caps_a_larger_limit(self):
        with pytest.raises(InvalidAmount):
            ledger.validate_amount(MAX_AMOUNT_CENTS + 1, max_cents=10**30)


class TestLockWallets:
    def test_returns_wallets_keyed_by_user(self, user):
        other = UserFactory()
        ledger.credit(other.pk, 100)

        with transaction.atomic():
            wallets = ledger.lock_wallets(other.pk, user.pk)

        assert set(wallets) == {user.pk, other.pk}
        assert wallets[other.pk].available_cents == 100

    def test_creates_missing_wallets(self, user):
        with transaction.atomic():
            ledger.lock_wallets(user.pk)

        assert LedgerService.get_wallet(user.pk) is not None

    def test_locks_in_ascending_user_order(self, user):
        """Argument order must not change the lock order."""
        other = UserFactory()

        with transaction.atomic():
            forward = list(ledger.lock_wallets(user.pk, other.pk))
        with transaction.atomic():
            backward = list(ledger.lock_wallets(other.pk, user.pk))

        assert forward == backward == sorted([user.pk, other.pk])

    def test_ignores_missing_and_duplicate_ids(self, user):
        with transaction.atomic():
            wallets = ledger.lock_wallets(user.pk, None, user.pk)

        assert list(wallets) == [user.pk]
