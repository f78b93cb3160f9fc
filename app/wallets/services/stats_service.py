"""
Platform statistics for the admin dashboard.

Figures are cached in the default cache (Redis) for
PLATFORM_STATS_CACHE_SECONDS; the cache is a convenience only and a
cache outage falls back to computing the figures.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from wallets.ledger.models import Wallet
from wallets.models import EscrowHold, Transaction
from wallets.state_machines import HoldSide, HoldStatus, TransactionStatus

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "wallets:platform_stats"
VOLUME_WINDOW_DAYS = 30


class StatsService:
    """Read-only aggregates over wallets, transactions and escrow."""

    @staticmethod
    def platform_stats(use_cache: bool = True) -> dict:
        """
        Return platform-wide totals.

        Keys:
            total_users: Active user count
            total_available_cents: Sum of available balances
            volume_30d_cents: Completed transaction amount over 30 days
            active_today: Users with a transaction since midnight
            escrow_held_cents: Funds in held escrow pairs
        """
        if use_cache:
            cached = cache.get(STATS_CACHE_KEY)
            if cached is not None:
                return cached

        now = timezone.now()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        todays = Transaction.objects.filter(created_at__gte=start_of_day)
        active_today = len(
            {uid for uid in todays.values_list("sender_id", flat=True) if uid}
            | {uid for uid in todays.values_list("receiver_id", flat=True) if uid}
        )

        stats = {
            "total_users": get_user_model().objects.filter(is_active=True).count(),
            "total_available_cents": Wallet.objects.aggregate(
                total=Coalesce(Sum("available_cents"), 0)
            )["total"],
            "volume_30d_cents": Transaction.objects.filter(
                status=TransactionStatus.COMPLETED,
                created_at__gte=now - timedelta(days=VOLUME_WINDOW_DAYS),
            ).aggregate(total=Coalesce(Sum("amount_cents"), 0))["total"],
            "active_today": active_today,
            "escrow_held_cents": EscrowHold.objects.filter(
                side=HoldSide.SELLER, status=HoldStatus.HELD
            ).aggregate(total=Coalesce(Sum("amount_cents"), 0))["total"],
            "generated_at": now.isoformat(),
        }

        cache.set(STATS_CACHE_KEY, stats, timeout=settings.PLATFORM_STATS_CACHE_SECONDS)
        logger.debug("Platform stats computed", extra={"total_users": stats["total_users"]})
        return stats
