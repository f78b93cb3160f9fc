"""
Ledger - per-user wallet balances with atomic primitives.

Public API:
    Models:
        Wallet - Balance record (available / pending / on-hold)
        WalletEntry - Immutable audit row per balance change
        BalanceBucket, EntryDirection, EntryType - Enums

    Service:
        ledger - Singleton instance of LedgerService
        LedgerService - credit/debit/lock_wallets/get_balance and audit queries
        MAX_AMOUNT_CENTS - Largest amount or balance a wallet can hold

    Types:
        BalanceSnapshot - Point-in-time balance read
        EntryParams - Parameters for a credit or debit

    Exceptions:
        LedgerError - Base exception for ledger operations
        InsufficientFunds - Debit larger than the partition balance
        InvalidAmount - Non-positive, non-integer or oversized amount

Usage:
    from wallets.ledger import ledger, EntryType, InsufficientFunds

    ledger.credit(user.id, 5000, entry_type=EntryType.DEPOSIT)
    try:
        ledger.debit(user.id, 10000)
    except InsufficientFunds as e:
        print(f"Need {e.required}, have {e.available}")
"""

from .exceptions import InsufficientFunds, InvalidAmount, LedgerError
from .models import BalanceBucket, EntryDirection, EntryType, Wallet, WalletEntry
from .services import MAX_AMOUNT_CENTS, LedgerService, ledger
from .types import BalanceSnapshot, EntryParams

__all__ = [
    # Models
    "Wallet",
    "WalletEntry",
    "BalanceBucket",
    "EntryDirection",
    "EntryType",
    # Service
    "ledger",
    "LedgerService",
    "MAX_AMOUNT_CENTS",
    # Types
    "BalanceSnapshot",
    "EntryParams",
    # Exceptions
    "LedgerError",
    "InsufficientFunds",
    "InvalidAmount",
]
