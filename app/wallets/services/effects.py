"""
Ledger effects of approved transactions.

TRANSACTION_EFFECTS is the single mapping from a transaction type to the
ledger legs it produces: which party is debited, which is credited, and
whether the fee is taken on top of the amount. Both the instant transfer
path and the Approval Gateway apply effects through apply_effect(), so
no other code branches on transaction type to move money.

Usage:
    from wallets.services.effects import apply_effect

    with transaction.atomic():
        apply_effect(txn, created_by=f"admin:{admin.pk}")
        txn.approve(actor=admin)
        txn.save()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import transaction

from core.exceptions import ValidationError
from wallets.ledger import EntryType, ledger
from wallets.models import Transaction
from wallets.state_machines import TransactionType

logger = logging.getLogger(__name__)

SENDER = "sender"
RECEIVER = "receiver"


@dataclass(frozen=True)
class LedgerEffect:
    """
    Ledger legs produced by approving one transaction type.

    Attributes:
        debit_party: "sender", "receiver" or None
        credit_party: "sender", "receiver" or None
        charges_fee: Whether fee_cents is debited on top of amount_cents
        entry_type: Category recorded on the wallet entries
    """

    debit_party: str | None
    credit_party: str | None
    charges_fee: bool
    entry_type: str


_LOAD = LedgerEffect(
    debit_party=None,
    credit_party=RECEIVER,
    charges_fee=False,
    entry_type=EntryType.DEPOSIT,
)

TRANSACTION_EFFECTS: dict[str, LedgerEffect] = {
    TransactionType.CARD_LOAD: _LOAD,
    TransactionType.BANK_LOAD: _LOAD,
    TransactionType.ZELLE_LOAD: _LOAD,
    TransactionType.CASHAPP_LOAD: _LOAD,
    TransactionType.APPLEPAY_LOAD: _LOAD,
    TransactionType.TOPUP: LedgerEffect(
        debit_party=None,
        credit_party=RECEIVER,
        charges_fee=False,
        entry_type=EntryType.TOPUP,
    ),
    TransactionType.PAYOUT: LedgerEffect(
        debit_party=SENDER,
        credit_party=None,
        charges_fee=True,
        entry_type=EntryType.PAYOUT,
    ),
    TransactionType.TRANSFER: LedgerEffect(
        debit_party=SENDER,
        credit_party=RECEIVER,
        charges_fee=True,
        entry_type=EntryType.TRANSFER,
    ),
}


def effect_for(transaction_type: str) -> LedgerEffect:
    try:
        return TRANSACTION_EFFECTS[transaction_type]
    except KeyError:
        raise ValidationError(
            f"Unknown transaction type '{transaction_type}'",
            error_code="UNKNOWN_TRANSACTION_TYPE",
            details={"type": transaction_type},
        )


def _party_id(txn: Transaction, party: str):
    user_id = getattr(txn, f"{party}_id")
    if user_id is None:
        raise ValidationError(
            f"Transaction {txn.id} has no {party}",
            error_code="MISSING_PARTY",
            details={"transaction_id": str(txn.id), "party": party},
        )
    return user_id


def apply_effect(txn: Transaction, created_by: str | None = None) -> None:
    """
    Apply the ledger legs for txn in one atomic unit.

    When both parties are involved their wallets are locked up front in
    user_id order. The debit runs first so a short balance aborts before
    any credit. Wallet entries are keyed on the transaction id, so
    applying the same transaction twice never moves money twice.

    Raises:
        InsufficientFunds: If the debited party cannot cover amount (+ fee)
        ValidationError: If the party the effect needs is missing
    """
    effect = effect_for(txn.type)
    common = {
        "entry_type": effect.entry_type,
        "reference_type": "transaction",
        "reference_id": txn.id,
        "description": txn.memo or None,
        "created_by": created_by,
    }

    debit_id = _party_id(txn, effect.debit_party) if effect.debit_party else None
    credit_id = _party_id(txn, effect.credit_party) if effect.credit_party else None

    with transaction.atomic():
        if debit_id is not None and credit_id is not None:
            ledger.lock_wallets(debit_id, credit_id)
        if debit_id is not None:
            debit_cents = txn.amount_cents
            if effect.charges_fee:
                debit_cents += txn.fee_cents
            ledger.debit(
                debit_id,
                debit_cents,
                idempotency_key=f"transaction:{txn.id}:debit",
                **common,
            )
        if credit_id is not None:
            ledger.credit(
                credit_id,
                txn.amount_cents,
                idempotency_key=f"transaction:{txn.id}:credit",
                **common,
            )

    logger.info(
        "Transaction effect applied",
        extra={
            "transaction_id": str(txn.id),
            "type": txn.type,
            "amount_cents": txn.amount_cents,
            "fee_cents": txn.fee_cents,
        },
    )
