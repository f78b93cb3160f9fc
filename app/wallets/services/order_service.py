"""
Order service driving the order state machine.

Every transition follows the same pattern: lock the order row, verify
the actor, check the persisted state with can_proceed(), apply the
django-fsm transition and save, all inside one database transaction.
A state that changed since the caller last looked (a duplicate admin
click, an overlapping scheduler sweep) fails with INVALID_TRANSITION.

Operations return a ServiceResult. Domain errors raised while the row
is locked roll the transaction back and come back as failed results
with the error's code, details and HTTP status.

Both release paths, the admin action and the scheduled sweep, go
through release_order() and from there EscrowService.release_escrow().

Usage:
    from wallets.services import OrderService

    order = OrderService.create_order(buyer, "seller_handle", 5000, "Vintage camera").data
    OrderService.confirm_payment(order.id, buyer)
    OrderService.submit_tracking(order.id, seller, "UPS", "1Z999AA1")
    OrderService.decide_tracking(order.id, admin, approved=True)

    result = OrderService.release_order(order.id, actor=admin)
    if result.error_code == "ALREADY_PROCESSED":
        ...
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models import Q, QuerySet
from django_fsm import can_proceed

from core.exceptions import BaseApplicationError
from core.services import BaseService, ServiceResult
from wallets.exceptions import AlreadyProcessed, InvalidTransition, NotAuthorized, NotFound
from wallets.ledger import ledger
from wallets.models import Order, Shipment
from wallets.services.escrow_service import EscrowService
from wallets.services.lookups import get_user_by_handle
from wallets.state_machines import OrderState

logger = logging.getLogger(__name__)


def _lock_order(order_id: Any) -> Order:
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise NotFound(
            f"Order {order_id} not found",
            error_code="ORDER_NOT_FOUND",
            details={"order_id": str(order_id)},
        )
    return order


def _apply_transition(order: Order, name: str, *args) -> None:
    method = getattr(order, name)
    if not can_proceed(method):
        logger.warning(
            "Order transition rejected",
            extra={
                "order_id": str(order.id),
                "transition": name,
                "current_state": order.status,
            },
        )
        raise InvalidTransition(
            f"Cannot {name.replace('_', ' ')} for order in '{order.status}' state",
            details={
                "order_id": str(order.id),
                "current_state": order.status,
                "transition": name,
            },
        )
    method(*args)


def _require_party(order: Order, actor, field: str) -> None:
    if getattr(order, f"{field}_id") != actor.pk:
        raise NotAuthorized(
            f"Only the {field} can perform this action",
            details={"order_id": str(order.id), "required_role": field},
        )


class OrderService(BaseService):
    """Service for order lifecycle operations."""

    # =========================================================================
    # Buyer Actions
    # =========================================================================

    @classmethod
    def create_order(
        cls, buyer, seller_handle: str, amount_cents: int, item_description: str
    ) -> ServiceResult[Order]:
        """
        Start a purchase and move the buyer's funds into escrow.

        Returns:
            ServiceResult with the PENDING_PAYMENT order, or a failure when
            the seller is unknown, the buyer is the seller, the description
            is blank, the amount is bad or the buyer cannot cover it
        """
        item_description = (item_description or "").strip()
        if not item_description:
            return ServiceResult.failure(
                "An item description is required", error_code="DESCRIPTION_REQUIRED"
            )

        try:
            ledger.validate_amount(amount_cents)
            seller = get_user_by_handle(seller_handle)
            if seller.pk == buyer.pk:
                return ServiceResult.failure(
                    "Cannot buy from yourself", error_code="SELF_PURCHASE"
                )
            order = EscrowService.open_escrow(buyer, seller, amount_cents, item_description)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Order creation")

        return ServiceResult.ok(order)

    @classmethod
    def confirm_payment(cls, order_id: Any, actor) -> ServiceResult[Order]:
        """
        Buyer confirms payment. PENDING_PAYMENT -> PENDING_SHIPMENT.

        Fails with NOT_AUTHORIZED unless actor is the buyer, and with
        INVALID_TRANSITION unless the order is PENDING_PAYMENT.
        """
        try:
            with cls.atomic():
                order = _lock_order(order_id)
                _require_party(order, actor, "buyer")
                _apply_transition(order, "confirm_payment")
                order.save()
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Payment confirmation")

        logger.info("Order payment confirmed", extra={"order_id": str(order.id)})
        return ServiceResult.ok(order)

    # =========================================================================
    # Seller Actions
    # =========================================================================

    @classmethod
    def submit_tracking(
        cls, order_id: Any, actor, carrier: str, tracking_number: str
    ) -> ServiceResult[Order]:
        """
        Seller submits shipment tracking for admin review.

        Records a Shipment and moves the order to AWAITING_ADMIN_APPROVAL.
        Fails with TRACKING_REQUIRED for a blank carrier or number,
        NOT_AUTHORIZED unless actor is the seller, and INVALID_TRANSITION
        unless the order is PENDING_PAYMENT or PENDING_SHIPMENT.
        """
        carrier = (carrier or "").strip()
        tracking_number = (tracking_number or "").strip()
        if not carrier or not tracking_number:
            return ServiceResult.failure(
                "Carrier and tracking number are required",
                error_code="TRACKING_REQUIRED",
            )

        try:
            with cls.atomic():
                order = _lock_order(order_id)
                _require_party(order, actor, "seller")
                _apply_transition(order, "submit_tracking", carrier, tracking_number)
                order.save()
                Shipment.objects.create(
                    order=order,
                    carrier=carrier,
                    tracking_number=tracking_number,
                    submitted_by=actor,
                )
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Tracking submission")

        logger.info(
            "Tracking submitted",
            extra={
                "order_id": str(order.id),
                "carrier": carrier,
                "tracking_number": tracking_number,
            },
        )
        return ServiceResult.ok(order)

    # =========================================================================
    # Administrative Actions
    # =========================================================================

    @classmethod
    def decide_tracking(cls, order_id: Any, actor, approved: bool) -> ServiceResult[Order]:
        """
        Accept or reject the seller's tracking.

        Approval moves the order to SHIPPED. Rejection returns it to
        PENDING_SHIPMENT, clears the tracking fields and deletes the
        order's Shipment records so the seller can resubmit. Fails with
        INVALID_TRANSITION unless the order is AWAITING_ADMIN_APPROVAL.
        """
        try:
            with cls.atomic():
                order = _lock_order(order_id)
                if approved:
                    _apply_transition(order, "approve_tracking")
                    order.save()
                else:
                    _apply_transition(order, "reject_tracking")
                    order.save()
                    order.shipments.all().delete()
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Tracking decision")

        logger.info(
            f"Tracking {'approved' if approved else 'rejected'}",
            extra={"order_id": str(order.id), "actor_id": str(actor.pk)},
        )
        return ServiceResult.ok(order)

    @classmethod
    def release_order(cls, order_id: Any, actor=None) -> ServiceResult[Order]:
        """
        Release escrow to the seller. AWAITING_RELEASE -> COMPLETED.

        Shared by the admin release action (actor given) and the release
        sweep (actor None).

        Returns:
            ServiceResult with the completed order, or a failure with one of:
                ALREADY_PROCESSED: Order is already COMPLETED
                INVALID_TRANSITION: Order is in any other state
                NO_HELD_ESCROW: Hold pair missing or already released
        """
        try:
            with cls.atomic():
                order = _lock_order(order_id)
                if order.status == OrderState.COMPLETED:
                    raise AlreadyProcessed(
                        f"Order {order.id} was already released",
                        details={
                            "order_id": str(order.id),
                            "status": order.status,
                            "completed_at": order.completed_at.isoformat()
                            if order.completed_at
                            else None,
                        },
                    )
                if order.status != OrderState.AWAITING_RELEASE:
                    raise InvalidTransition(
                        f"Cannot release order in '{order.status}' state",
                        details={"order_id": str(order.id), "current_state": order.status},
                    )
                order = EscrowService.release_escrow(order.id, released_by=actor)
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Release")

        return ServiceResult.ok(order)

    # =========================================================================
    # Scheduler Actions
    # =========================================================================

    @classmethod
    def mark_delivered(cls, order_id: Any) -> ServiceResult[Order]:
        """
        Promote a shipped order to release-eligible. SHIPPED -> AWAITING_RELEASE.

        Fails with INVALID_TRANSITION once the order is no longer SHIPPED.
        """
        try:
            with cls.atomic():
                order = _lock_order(order_id)
                _apply_transition(order, "mark_delivered")
                order.save()
        except BaseApplicationError as e:
            return cls.handle_exception(e, "Delivery")

        logger.info("Order marked delivered", extra={"order_id": str(order.id)})
        return ServiceResult.ok(order)

    # =========================================================================
    # Queries
    # =========================================================================

    @staticmethod
    def list_for_user(user, role: str | None = None) -> QuerySet[Order]:
        """Orders the user bought or sold; role narrows to "buyer" or "seller"."""
        if role == "buyer":
            condition = Q(buyer=user)
        elif role == "seller":
            condition = Q(seller=user)
        else:
            condition = Q(buyer=user) | Q(seller=user)
        return (
            Order.objects.filter(condition)
            .select_related("buyer", "seller")
            .prefetch_related("holds", "shipments")
            .order_by("-created_at")
        )

    @staticmethod
    def list_pending_tracking() -> QuerySet[Order]:
        """Orders whose tracking awaits admin review, oldest submission first."""
        return (
            Order.objects.filter(status=OrderState.AWAITING_ADMIN_APPROVAL)
            .select_related("buyer", "seller")
            .prefetch_related("shipments")
            .order_by("shipped_at")
        )
