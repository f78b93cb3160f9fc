"""
Wallets app configuration.

This app provides the ledger and escrow engine:
- Per-user wallet balances with atomic credit/debit primitives
- Transaction journal gated by administrative approval
- Escrow-backed goods orders with shipment verification
- Scheduled delivery promotion and seller release
"""

from django.apps import AppConfig


class WalletsConfig(AppConfig):
    """Configuration for the wallets application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "wallets"
    verbose_name = "Wallets"
