"""
Wallet services coordinating ledger, journal and escrow operations.

This module provides:
- TransactionService: Loads, payouts, instant transfers, admin funding
- ApprovalGateway: Approves or rejects pending transactions once
- EscrowService: Opens and releases escrow hold pairs
- OrderService: Order state machine operations
- StatsService: Platform totals for the admin dashboard

Usage:
    from wallets.services import OrderService, ApprovalGateway

    order = OrderService.create_order(buyer, "seller", 5000, "Vintage camera").data
    result = ApprovalGateway.decide(txn_id, admin, "approve")
    if not result:
        print(result.error_code, result.error)
"""

from wallets.services.approval_gateway import ApprovalGateway
from wallets.services.effects import TRANSACTION_EFFECTS, LedgerEffect, apply_effect
from wallets.services.escrow_service import EscrowService
from wallets.services.order_service import OrderService
from wallets.services.stats_service import StatsService
from wallets.services.transaction_service import TransactionService

__all__ = [
    "ApprovalGateway",
    "EscrowService",
    "LedgerEffect",
    "OrderService",
    "StatsService",
    "TRANSACTION_EFFECTS",
    "TransactionService",
    "apply_effect",
]
