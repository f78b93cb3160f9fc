"""
Tests for StatsService.platform_stats().
"""

from datetime import timedelta

from django.core.cache import cache
from django.utils import timezone
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from wallets.services import StatsService, TransactionService
from wallets.services.stats_service import STATS_CACHE_KEY
from wallets.state_machines import LoadMethod


class TestPlatformStats:
    def test_empty_platform(self, db):
        stats = StatsService.platform_stats()

        assert stats["total_users"] == 0
        assert stats["total_available_cents"] == 0
        assert stats["volume_30d_cents"] == 0
        assert stats["active_today"] == 0
        assert stats["escrow_held_cents"] == 0

    def test_totals(self, pending_payment_order, buyer, seller, fund):
        """
        Given a funded seller, a pending load and an open escrow order
        When stats are computed
        Then balances, volume, activity and held escrow are summed
        """
        # Arrange
        fund(seller, 1200)
        TransactionService.submit_load(seller, LoadMethod.CARD, 700)
        TransactionService.submit_transfer(seller, 200, receiver_handle="buyer")

        # Act
        stats = StatsService.platform_stats(use_cache=False)

        # Assert
        assert stats["total_users"] == 2
        assert stats["total_available_cents"] == 1200
        assert stats["volume_30d_cents"] == 200
        assert stats["active_today"] == 2
        assert stats["escrow_held_cents"] == 5000

    def test_released_escrow_is_not_counted(self, completed_order):
        stats = StatsService.platform_stats(use_cache=False)

        assert stats["escrow_held_cents"] == 0
        assert stats["total_available_cents"] == 5000

    def test_volume_ignores_old_transactions(self, buyer, seller, fund):
        fund(buyer, 1000)
        with freeze_time(timezone.now() - timedelta(days=45)):
            TransactionService.submit_transfer(buyer, 300, receiver_handle="seller")
        TransactionService.submit_transfer(buyer, 100, receiver_handle="seller")

        stats = StatsService.platform_stats(use_cache=False)

        assert stats["volume_30d_cents"] == 100

    def test_inactive_users_not_counted(self, db):
        UserFactory()
        UserFactory(is_active=False)

        assert StatsService.platform_stats()["total_users"] == 1

    def test_result_is_cached(self, db):
        first = StatsService.platform_stats()
        UserFactory()

        assert StatsService.platform_stats() == first
        assert cache.get(STATS_CACHE_KEY) == first
        assert StatsService.platform_stats(use_cache=False)["total_users"] == 1
