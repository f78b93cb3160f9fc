"""
Transaction service for creating journal entries.

This module provides the TransactionService class which handles the two
creation paths of the transaction journal:

1. Deferred (loads, top-ups, payouts): the row is written PENDING with no
   ledger effect and waits for the Approval Gateway.
2. Instant (peer transfers): the ledger effect is applied first and the
   row is written already COMPLETED/APPROVED, both in one atomic unit.

It also provides administrative wallet funding and history queries.

Operations return a ServiceResult. Expected failures (bad input, limits,
insufficient funds, unknown receiver) come back as failed results carrying
the error code and HTTP status; nothing is written when a result fails.

Usage:
    from wallets.services import TransactionService

    result = TransactionService.submit_transfer(user, 1500, receiver_handle="alice")
    if result.success:
        txn = result.data
    elif result.error_code == "INSUFFICIENT_FUNDS":
        ...

    result = TransactionService.submit_payout(user, "bank_123", 2000, PayoutSpeed.SAME_DAY)
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult
from wallets.ledger import InsufficientFunds, ledger
from wallets.models import Transaction
from wallets.services.effects import apply_effect
from wallets.services.lookups import get_user_by_handle, get_user_by_id, handle_for
from wallets.state_machines import (
    ApprovalStatus,
    LoadMethod,
    PayoutSpeed,
    TransactionStatus,
    TransactionType,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

LOAD_METHOD_TYPES = {
    LoadMethod.CARD: TransactionType.CARD_LOAD,
    LoadMethod.BANK: TransactionType.BANK_LOAD,
    LoadMethod.ZELLE: TransactionType.ZELLE_LOAD,
    LoadMethod.CASHAPP: TransactionType.CASHAPP_LOAD,
    LoadMethod.APPLEPAY: TransactionType.APPLEPAY_LOAD,
    LoadMethod.TOPUP: TransactionType.TOPUP,
}

# Days until payout funds reach the bank
PAYOUT_ARRIVAL_DAYS = {
    PayoutSpeed.STANDARD: 2,
    PayoutSpeed.SAME_DAY: 0,
}

BANK_ID_MAX_LENGTH = 64
TOPUP_CODE_MAX_LENGTH = 64
MEMO_MAX_LENGTH = Transaction._meta.get_field("memo").max_length


def _memo_failure(memo: str) -> ServiceResult | None:
    if len(memo) > MEMO_MAX_LENGTH:
        return ServiceResult.failure(
            f"Memo must be at most {MEMO_MAX_LENGTH} characters",
            error_code="MEMO_TOO_LONG",
            details={"length": len(memo), "max_length": MEMO_MAX_LENGTH},
        )
    return None


class TransactionService(BaseService):
    """
    Service for creating and listing journal transactions.

    All methods are class or static methods - no instance state is maintained.
    """

    # =========================================================================
    # Payout Terms
    # =========================================================================

    @staticmethod
    def calculate_payout_fee(speed: PayoutSpeed | str) -> int:
        """
        Return the flat payout fee in cents for a speed.

        STANDARD charges PAYOUT_STANDARD_FEE_CENTS, SAME_DAY charges
        PAYOUT_SAME_DAY_FEE_CENTS.
        """
        if speed == PayoutSpeed.SAME_DAY:
            return settings.PAYOUT_SAME_DAY_FEE_CENTS
        return settings.PAYOUT_STANDARD_FEE_CENTS

    @staticmethod
    def estimate_arrival(speed: PayoutSpeed | str, submitted_at: datetime | None = None) -> datetime:
        """When a payout submitted at submitted_at should reach the bank."""
        submitted_at = submitted_at or timezone.now()
        return submitted_at + timedelta(days=PAYOUT_ARRIVAL_DAYS[PayoutSpeed(speed)])

    # =========================================================================
    # Deferred Path
    # =========================================================================

    @classmethod
    def submit_load(
        cls,
        user,
        method: LoadMethod | str,
        amount_cents: int,
        code: str | None = None,
        memo: str | None = None,
    ) -> ServiceResult[Transaction]:
        """
        Request funds be loaded into the user's wallet.

        Creates a PENDING transaction crediting the user once approved.
        Top-ups record their redemption code in the memo. A single load
        may not exceed LOAD_MAX_CENTS.

        Returns:
            ServiceResult with the pending Transaction, or a failure for an
            unknown method, a bad amount or a top-up without a valid code
        """
        try:
            ledger.validate_amount(amount_cents, max_cents=settings.LOAD_MAX_CENTS)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Load")

        try:
            transaction_type = LOAD_METHOD_TYPES[LoadMethod(method)]
        except ValueError:
            return ServiceResult.failure(
                f"Unsupported load method '{method}'",
                error_code="INVALID_LOAD_METHOD",
                details={"method": str(method)},
            )

        if transaction_type == TransactionType.TOPUP:
            code = (code or "").strip()
            if not code:
                return ServiceResult.failure(
                    "A top-up code is required", error_code="TOPUP_CODE_REQUIRED"
                )
            if len(code) > TOPUP_CODE_MAX_LENGTH:
                return ServiceResult.failure(
                    f"Top-up code must be at most {TOPUP_CODE_MAX_LENGTH} characters",
                    error_code="INVALID_TOPUP_CODE",
                )
            memo = memo or f"Top-up code {code}"

        memo = memo or ""
        invalid_memo = _memo_failure(memo)
        if invalid_memo:
            return invalid_memo

        txn = Transaction.objects.create(
            type=transaction_type,
            receiver=user,
            amount_cents=amount_cents,
            fee_cents=0,
            memo=memo,
        )

        logger.info(
            "Load submitted",
            extra={
                "transaction_id": str(txn.id),
                "user_id": str(user.pk),
                "type": transaction_type,
                "amount_cents": amount_cents,
            },
        )
        return ServiceResult.ok(txn)

    @classmethod
    def submit_payout(
        cls,
        user,
        bank_id: str,
        amount_cents: int,
        speed: PayoutSpeed | str = PayoutSpeed.STANDARD,
    ) -> ServiceResult[Transaction]:
        """
        Request a withdrawal to an external bank account.

        The flat fee and the estimated arrival depend on speed. A single
        payout may not exceed PAYOUT_MAX_CENTS. The balance is checked here
        so obviously unaffordable requests never reach the approval queue;
        the Approval Gateway re-checks it under lock when the payout is
        approved.

        Returns:
            ServiceResult with the pending Transaction, or a failure for a
            missing or overlong bank id, an unknown speed, a bad amount or
            an available balance below amount + fee
        """
        try:
            ledger.validate_amount(amount_cents, max_cents=settings.PAYOUT_MAX_CENTS)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Payout")

        bank_id = (bank_id or "").strip()
        if not bank_id:
            return ServiceResult.failure(
                "A bank account is required", error_code="BANK_REQUIRED"
            )
        if len(bank_id) > BANK_ID_MAX_LENGTH:
            return ServiceResult.failure(
                f"Bank id must be at most {BANK_ID_MAX_LENGTH} characters",
                error_code="INVALID_BANK_ID",
                details={"length": len(bank_id), "max_length": BANK_ID_MAX_LENGTH},
            )
        try:
            speed = PayoutSpeed(speed)
        except ValueError:
            return ServiceResult.failure(
                f"Unsupported payout speed '{speed}'",
                error_code="INVALID_PAYOUT_SPEED",
                details={"speed": str(speed)},
            )

        fee_cents = cls.calculate_payout_fee(speed)
        available = ledger.get_balance(user.pk).available_cents
        if available < amount_cents + fee_cents:
            return cls.handle_exception(
                InsufficientFunds(
                    user.pk, required=amount_cents + fee_cents, available=available
                ),
                "Payout",
            )

        txn = Transaction.objects.create(
            type=TransactionType.PAYOUT,
            sender=user,
            amount_cents=amount_cents,
            fee_cents=fee_cents,
            payout_speed=speed,
            bank_reference=bank_id,
            estimated_arrival=cls.estimate_arrival(speed),
            memo=f"Payout to {bank_id}",
        )

        logger.info(
            "Payout submitted",
            extra={
                "transaction_id": str(txn.id),
                "user_id": str(user.pk),
                "amount_cents": amount_cents,
                "fee_cents": fee_cents,
                "speed": speed.value,
                "estimated_arrival": txn.estimated_arrival.isoformat(),
            },
        )
        return ServiceResult.ok(txn)

    # =========================================================================
    # Instant Path
    # =========================================================================

    @classmethod
    def submit_transfer(
        cls,
        sender,
        amount_cents: int,
        receiver_id: Any = None,
        receiver_handle: str | None = None,
        memo: str | None = None,
    ) -> ServiceResult[Transaction]:
        """
        Send money to another user immediately.

        The debit, the credit and the journal row are written in a single
        database transaction. A short balance fails the whole operation
        before anything is credited or recorded.

        Returns:
            ServiceResult with the completed Transaction, or a failure when
            no receiver is given, the receiver is the sender or does not
            exist, or the sender cannot cover amount + fee
        """
        try:
            ledger.validate_amount(amount_cents)
            if receiver_id is not None:
                receiver = get_user_by_id(receiver_id)
            elif receiver_handle:
                receiver = get_user_by_handle(receiver_handle)
            else:
                return ServiceResult.failure(
                    "A receiver is required", error_code="RECEIVER_REQUIRED"
                )

            if receiver.pk == sender.pk:
                return ServiceResult.failure(
                    "Cannot send money to yourself", error_code="SELF_TRANSFER"
                )

            memo = memo or f"Payment to @{handle_for(receiver)}"
            invalid_memo = _memo_failure(memo)
            if invalid_memo:
                return invalid_memo

            txn = Transaction(
                id=uuid.uuid4(),
                type=TransactionType.TRANSFER,
                sender=sender,
                receiver=receiver,
                amount_cents=amount_cents,
                fee_cents=settings.TRANSFER_FEE_CENTS,
                memo=memo,
                status=TransactionStatus.COMPLETED,
                approval_status=ApprovalStatus.APPROVED,
                approved_at=timezone.now(),
            )

            with cls.atomic():
                apply_effect(txn, created_by=f"user:{sender.pk}")
                txn.save()
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Transfer")

        logger.info(
            "Transfer completed",
            extra={
                "transaction_id": str(txn.id),
                "sender_id": str(sender.pk),
                "receiver_id": str(receiver.pk),
                "amount_cents": amount_cents,
            },
        )
        return ServiceResult.ok(txn)

    # =========================================================================
    # Administrative Funding
    # =========================================================================

    @classmethod
    def fund_wallet(
        cls, admin, handle: str, amount_cents: int, note: str | None = None
    ) -> ServiceResult[Transaction]:
        """
        Credit a user's wallet directly as an administrator.

        Writes a TOPUP transaction approved by the admin in the same atomic
        unit as the credit, so every manual deposit is auditable. The load
        limit applies.

        Returns:
            ServiceResult with the approved Transaction, or a failure for an
            unknown handle or a bad amount
        """
        memo = (note or "").strip() or "Admin deposit"
        invalid_memo = _memo_failure(memo)
        if invalid_memo:
            return invalid_memo

        try:
            ledger.validate_amount(amount_cents, max_cents=settings.LOAD_MAX_CENTS)
            receiver = get_user_by_handle(handle)

            with cls.atomic():
                txn = Transaction.objects.create(
                    type=TransactionType.TOPUP,
                    receiver=receiver,
                    amount_cents=amount_cents,
                    memo=memo,
                )
                apply_effect(txn, created_by=f"admin:{admin.pk}")
                txn.approve(actor=admin)
                txn.save()
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Admin funding")

        logger.info(
            "Wallet funded by admin",
            extra={
                "transaction_id": str(txn.id),
                "admin_id": str(admin.pk),
                "receiver_id": str(receiver.pk),
                "amount_cents": amount_cents,
            },
        )
        return ServiceResult.ok(txn)

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def list_for_user(user) -> QuerySet[Transaction]:
        """Transactions the user sent or received, newest first."""
        return (
            Transaction.objects.filter(Q(sender=user) | Q(receiver=user))
            .select_related("sender", "receiver")
            .order_by("-created_at")
        )

    @staticmethod
    def list_pending() -> QuerySet[Transaction]:
        """The approval queue, oldest first."""
        return (
            Transaction.objects.filter(approval_status=ApprovalStatus.PENDING)
            .select_related("sender", "receiver")
            .order_by("created_at")
        )
