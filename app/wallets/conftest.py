"""
Pytest fixtures for wallet tests.

This module provides users, API clients and orders in every state of the
order lifecycle. Order fixtures are built by walking the real services,
so each one carries its escrow pair, wallet entries and shipments.

Usage:
    def test_release(awaiting_release_order, admin_user):
        result = OrderService.release_order(awaiting_release_order.id, actor=admin_user)
        assert result.data.status == OrderState.COMPLETED
"""

import pytest
from rest_framework.test import APIClient

from authentication.tests.factories import StaffUserFactory, UserFactory
from wallets.ledger import EntryType, ledger
from wallets.services import OrderService

ORDER_AMOUNT_CENTS = 5000


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def buyer(db):
    """User paying for orders."""
    return UserFactory(handle="buyer")


@pytest.fixture
def seller(db):
    """User shipping orders and receiving escrow releases."""
    return UserFactory(handle="seller")


@pytest.fixture
def admin_user(db):
    """Staff user who decides transactions and tracking."""
    return StaffUserFactory(handle="ops")


@pytest.fixture
def fund(db):
    """
    Credit a user's available balance directly through the ledger.

    Usage:
        fund(buyer, 5000)
    """

    def _fund(user, amount_cents):
        return ledger.credit(
            user.pk,
            amount_cents,
            entry_type=EntryType.DEPOSIT,
            created_by="tests",
        )

    return _fund


@pytest.fixture
def funded_buyer(buyer, fund):
    """Buyer holding exactly one order's worth of funds."""
    fund(buyer, ORDER_AMOUNT_CENTS)
    return buyer


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def buyer_client(buyer):
    client = APIClient()
    client.force_authenticate(user=buyer)
    return client


@pytest.fixture
def seller_client(seller):
    client = APIClient()
    client.force_authenticate(user=seller)
    return client


@pytest.fixture
def staff_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


# =============================================================================
# Order State Fixtures
# =============================================================================


@pytest.fixture
def pending_payment_order(funded_buyer, seller):
    """Order just created; buyer funds are in escrow."""
    return OrderService.create_order(
        funded_buyer, seller.handle, ORDER_AMOUNT_CENTS, "Vintage film camera"
    ).data


@pytest.fixture
def pending_shipment_order(pending_payment_order, buyer):
    """Order whose payment the buyer confirmed."""
    return OrderService.confirm_payment(pending_payment_order.id, buyer).data


@pytest.fixture
def awaiting_approval_order(pending_shipment_order, seller):
    """Order with tracking waiting for admin review."""
    return OrderService.submit_tracking(
        pending_shipment_order.id, seller, "UPS", "1Z999AA10123456784"
    ).data


@pytest.fixture
def shipped_order(awaiting_approval_order, admin_user):
    """Order whose tracking an admin approved."""
    return OrderService.decide_tracking(
        awaiting_approval_order.id, admin_user, approved=True
    ).data


@pytest.fixture
def awaiting_release_order(shipped_order):
    """Order treated as delivered and eligible for release."""
    return OrderService.mark_delivered(shipped_order.id).data


@pytest.fixture
def completed_order(awaiting_release_order, admin_user):
    """Order whose escrow was released to the seller."""
    return OrderService.release_order(awaiting_release_order.id, actor=admin_user).data
