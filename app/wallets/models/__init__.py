"""
Wallet domain models.

This module exports the journal and escrow models and re-exports the
balance models from wallets.ledger so Django registers them with the app.

Models:
    Wallet, WalletEntry: Balance record and its audit trail (wallets.ledger)
    Transaction: Money-movement request and its approval outcome
    Order: Escrow-backed goods purchase
    EscrowHold: One side of an order's zero-sum hold pair
    Shipment: Carrier/tracking submission for an order
"""

from wallets.ledger.models import Wallet, WalletEntry
from wallets.models.order import EscrowHold, Order, Shipment
from wallets.models.transaction import Transaction

__all__ = [
    "EscrowHold",
    "Order",
    "Shipment",
    "Transaction",
    "Wallet",
    "WalletEntry",
]
