"""
Ledger service layer for wallet balances.

This module provides the LedgerService class, the only code allowed to
change a Wallet's balance partitions. Every change goes through credit()
or debit(), which:

1. Return the original entry when the idempotency key was already used
2. Lock the wallet row (select_for_update)
3. Re-check the partition balance under the lock (debits only)
4. Append a WalletEntry audit row
5. Apply a guarded F() update that can never take a partition below zero

All of this runs inside one database transaction, so callers that wrap
several primitives in their own transaction.atomic() block get all legs
or none.

Usage:
    from wallets.ledger.services import ledger

    ledger.credit(user.id, 5000, entry_type=EntryType.DEPOSIT)
    ledger.debit(user.id, 1500, idempotency_key=f"transaction:{txn.id}:debit")

    with transaction.atomic():
        ledger.lock_wallets(sender.id, receiver.id)
        ledger.debit(sender.id, 500)
        ledger.credit(receiver.id, 500)

    snapshot = ledger.get_balance(user.id)
    print(snapshot.available_cents)
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import IntegrityError, transaction
from django.db.models import F, Sum
from django.utils import timezone

from .exceptions import InsufficientFunds, InvalidAmount
from .models import BalanceBucket, EntryDirection, Wallet, WalletEntry
from .types import BalanceSnapshot, EntryParams

logger = logging.getLogger(__name__)

# Largest value a BigIntegerField balance or amount can hold
MAX_AMOUNT_CENTS = 2**63 - 1


class LedgerService:
    """
    Service class for wallet balance operations.

    All methods are static - no instance state is maintained.
    """

    @staticmethod
    def get_wallet(user_id: Any) -> Wallet | None:
        """Return the user's wallet, or None if it was never funded."""
        return Wallet.objects.filter(user_id=user_id).first()

    @staticmethod
    def get_or_create_wallet(user_id: Any) -> Wallet:
        """Return the user's wallet, creating an empty one if needed."""
        wallet, created = Wallet.objects.get_or_create(user_id=user_id)
        if created:
            logger.info("Wallet created", extra={"user_id": str(user_id)})
        return wallet

    @staticmethod
    def credit(user_id: Any, amount_cents: int, **kwargs) -> WalletEntry:
        """
        Add funds to a wallet partition.

        Creates the wallet on first credit. Idempotent on idempotency_key.

        Args:
            user_id: Owner of the wallet
            amount_cents: Positive amount in cents
            **kwargs: Optional EntryParams fields (bucket, entry_type,
                idempotency_key, reference_type, reference_id,
                description, created_by)

        Returns:
            The created (or previously recorded) WalletEntry

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
        """
        params = EntryParams(user_id=user_id, amount_cents=amount_cents, **kwargs)
        return LedgerService._apply(EntryDirection.CREDIT, params)

    @staticmethod
    def debit(user_id: Any, amount_cents: int, **kwargs) -> WalletEntry:
        """
        Remove funds from a wallet partition.

        The balance check is performed under the row lock, so a stale
        snapshot read earlier by the caller can never authorize a debit.

        Args:
            user_id: Owner of the wallet
            amount_cents: Positive amount in cents
            **kwargs: Optional EntryParams fields

        Returns:
            The created (or previously recorded) WalletEntry

        Raises:
            InvalidAmount: If amount_cents is not a positive integer
            InsufficientFunds: If the partition holds less than amount_cents
        """
        params = EntryParams(user_id=user_id, amount_cents=amount_cents, **kwargs)
        return LedgerService._apply(EntryDirection.DEBIT, params)

    @staticmethod
    def validate_amount(amount_cents: Any, max_cents: int | None = None) -> None:
        """
        Raise InvalidAmount unless amount_cents is a positive integer.

        Args:
            amount_cents: Amount to check
            max_cents: Optional per-operation limit; MAX_AMOUNT_CENTS always applies
        """
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise InvalidAmount(
                "Amount must be an integer number of cents",
                details={"amount_cents": repr(amount_cents)},
            )
        if amount_cents <= 0:
            raise InvalidAmount(
                "Amount must be positive",
                details={"amount_cents": amount_cents},
            )
        limit = MAX_AMOUNT_CENTS if max_cents is None else min(max_cents, MAX_AMOUNT_CENTS)
        if amount_cents > limit:
            raise InvalidAmount(
                f"Amount exceeds the maximum of {limit} cents",
                error_code="AMOUNT_LIMIT_EXCEEDED",
                details={"amount_cents": amount_cents, "max_cents": limit},
            )

    @staticmethod
    def lock_wallets(*user_ids: Any) -> dict[Any, Wallet]:
        """
        Lock several users' wallets in ascending user_id order.

        Operations that touch more than one wallet call this first, so
        two requests moving money in opposite directions always take the
        row locks in the same order. Missing wallets are created. Must be
        called inside transaction.atomic().

        Returns:
            Dict of user_id to locked Wallet
        """
        ids = sorted({user_id for user_id in user_ids if user_id is not None})
        for user_id in ids:
            LedgerService.get_or_create_wallet(user_id)
        return {
            wallet.user_id: wallet
            for wallet in Wallet.objects.select_for_update()
            .filter(user_id__in=ids)
            .order_by("user_id")
        }

    @staticmethod
    def _apply(direction: str, params: EntryParams) -> WalletEntry:
        LedgerService.validate_amount(params.amount_cents)
        bucket = params.bucket
        field = bucket.field_name
        amount = params.amount_cents

        with transaction.atomic():
            # Idempotency first: a replay must not touch the balance
            existing = WalletEntry.objects.filter(
                idempotency_key=params.idempotency_key
            ).first()
            if existing is not None:
                logger.info(
                    "Ledger entry already applied",
                    extra={"idempotency_key": params.idempotency_key},
                )
                return existing

            if direction == EntryDirection.CREDIT:
                LedgerService.get_or_create_wallet(params.user_id)

            wallet = (
                Wallet.objects.select_for_update()
                .filter(user_id=params.user_id)
                .first()
            )
            if wallet is None:
                raise InsufficientFunds(
                    params.user_id, required=amount, available=0, bucket=bucket
                )

            current = getattr(wallet, field)
            if direction == EntryDirection.DEBIT:
                if current < amount:
                    logger.warning(
                        "Debit rejected: insufficient funds",
                        extra={
                            "user_id": str(params.user_id),
                            "bucket": bucket.value,
                            "required_cents": amount,
                            "available_cents": current,
                        },
                    )
                    raise InsufficientFunds(
                        params.user_id,
                        required=amount,
                        available=current,
                        bucket=bucket,
                    )
                balance_after = current - amount
            else:
                if current > MAX_AMOUNT_CENTS - amount:
                    raise InvalidAmount(
                        "Credit would overflow the wallet balance",
                        error_code="AMOUNT_LIMIT_EXCEEDED",
                        details={
                            "user_id": str(params.user_id),
                            "bucket": bucket.value,
                            "amount_cents": amount,
                        },
                    )
                balance_after = current + amount

            try:
                with transaction.atomic():
                    entry = WalletEntry.objects.create(
                        wallet=wallet,
                        direction=direction,
                        bucket=bucket,
                        amount_cents=amount,
                        balance_after_cents=balance_after,
                        entry_type=params.entry_type,
                        reference_type=params.reference_type,
                        reference_id=params.reference_id,
                        description=params.description,
                        created_by=params.created_by,
                        idempotency_key=params.idempotency_key,
                    )
            except IntegrityError:
                # Another request recorded the same key first
                return WalletEntry.objects.get(idempotency_key=params.idempotency_key)

            queryset = Wallet.objects.filter(pk=wallet.pk)
            if direction == EntryDirection.DEBIT:
                updated = queryset.filter(**{f"{field}__gte": amount}).update(
                    **{field: F(field) - amount, "updated_at": timezone.now()}
                )
                if not updated:
                    raise InsufficientFunds(
                        params.user_id,
                        required=amount,
                        available=current,
                        bucket=bucket,
                    )
            else:
                queryset.update(
                    **{field: F(field) + amount, "updated_at": timezone.now()}
                )

        logger.info(
            f"Ledger {direction} applied",
            extra={
                "user_id": str(params.user_id),
                "bucket": bucket.value,
                "amount_cents": amount,
                "balance_after_cents": balance_after,
                "entry_type": str(params.entry_type),
                "reference_id": str(params.reference_id) if params.reference_id else None,
            },
        )
        return entry

    @staticmethod
    def get_balance(user_id: Any) -> BalanceSnapshot:
        """
        Read a snapshot of the user's balances.

        Users without a wallet read as all zeros.
        """
        wallet = LedgerService.get_wallet(user_id)
        if wallet is None:
            return BalanceSnapshot(user_id=user_id)
        return BalanceSnapshot(
            user_id=user_id,
            available_cents=wallet.available_cents,
            pending_cents=wallet.pending_cents,
            on_hold_cents=wallet.on_hold_cents,
        )

    @staticmethod
    def entries_balance(
        user_id: Any, bucket: BalanceBucket | str = BalanceBucket.AVAILABLE
    ) -> int:
        """
        Recompute a partition balance from the audit trail.

        Returns credits minus debits for the partition. For a consistent
        ledger this equals the stored balance.
        """
        totals = dict(
            WalletEntry.objects.filter(wallet__user_id=user_id, bucket=bucket)
            .order_by()
            .values("direction")
            .annotate(total=Sum("amount_cents"))
            .values_list("direction", "total")
        )
        return totals.get(EntryDirection.CREDIT, 0) - totals.get(
            EntryDirection.DEBIT, 0
        )

    @staticmethod
    def get_entries(user_id: Any, limit: int = 100, offset: int = 0) -> list[WalletEntry]:
        """Return the user's entries, newest first."""
        return list(
            WalletEntry.objects.filter(wallet__user_id=user_id).order_by(
                "-created_at"
            )[offset : offset + limit]
        )

    @staticmethod
    def get_entries_by_reference(reference_type: str, reference_id: Any) -> list[WalletEntry]:
        """Return all entries recorded for a transaction or order, oldest first."""
        return list(
            WalletEntry.objects.filter(
                reference_type=reference_type,
                reference_id=reference_id,
            ).order_by("created_at")
        )


# Singleton instance for convenience
# Usage: from wallets.ledger.services import ledger
ledger = LedgerService()
