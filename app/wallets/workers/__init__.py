"""
Workers for scheduled order processing.

Usage:
    from wallets.workers import sweep_deliveries, sweep_releases

    sweep_deliveries.delay()
    sweep_releases.delay()
"""

from wallets.workers.delivery_scheduler import sweep_deliveries, sweep_releases

__all__ = [
    "sweep_deliveries",
    "sweep_releases",
]
