"""
Escrow Hold Ledger for order-backed purchases.

Opening escrow moves the buyer's funds from AVAILABLE to ON_HOLD and
writes the order together with its zero-sum hold pair (buyer negative,
seller positive). Releasing escrow pays the seller from the buyer's
ON_HOLD balance, flips both holds to released and completes the order.
Each operation is a single database transaction, so a failure at any
step leaves no debit without a hold and no hold without a debit.

Usage:
    from wallets.services import EscrowService

    order = EscrowService.open_escrow(buyer, seller, 5000, "Vintage camera")
    order = EscrowService.release_escrow(order.id)
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.db import transaction
from django.utils import timezone
from django_fsm import can_proceed

from wallets.exceptions import InvalidTransition, NoHeldEscrow, NotFound
from wallets.ledger import BalanceBucket, EntryType, ledger
from wallets.models import EscrowHold, Order
from wallets.state_machines import HoldSide, HoldStatus

logger = logging.getLogger(__name__)


class EscrowService:
    """Opens and releases escrow hold pairs. All methods are static."""

    @staticmethod
    def open_escrow(buyer, seller, amount_cents: int, item_description: str) -> Order:
        """
        Debit the buyer and write the order with its held escrow pair.

        Returns:
            The new Order in PENDING_PAYMENT

        Raises:
            InsufficientFunds: Buyer's available balance is below amount_cents
        """
        ledger.validate_amount(amount_cents)
        order_id = uuid.uuid4()
        common = {
            "reference_type": "order",
            "reference_id": order_id,
            "description": item_description[:255],
            "created_by": f"user:{buyer.pk}",
        }

        with transaction.atomic():
            ledger.debit(
                buyer.pk,
                amount_cents,
                bucket=BalanceBucket.AVAILABLE,
                entry_type=EntryType.ESCROW_HOLD,
                idempotency_key=f"order:{order_id}:escrow:debit",
                **common,
            )
            ledger.credit(
                buyer.pk,
                amount_cents,
                bucket=BalanceBucket.ON_HOLD,
                entry_type=EntryType.ESCROW_HOLD,
                idempotency_key=f"order:{order_id}:escrow:hold",
                **common,
            )

            order = Order.objects.create(
                id=order_id,
                buyer=buyer,
                seller=seller,
                amount_cents=amount_cents,
                item_description=item_description,
            )
            EscrowHold.objects.bulk_create(
                [
                    EscrowHold(
                        order=order,
                        user=buyer,
                        side=HoldSide.BUYER,
                        amount_cents=-amount_cents,
                    ),
                    EscrowHold(
                        order=order,
                        user=seller,
                        side=HoldSide.SELLER,
                        amount_cents=amount_cents,
                    ),
                ]
            )

        logger.info(
            "Escrow opened",
            extra={
                "order_id": str(order.id),
                "buyer_id": str(buyer.pk),
                "seller_id": str(seller.pk),
                "amount_cents": amount_cents,
            },
        )
        return order

    @staticmethod
    def release_escrow(order_id: Any, released_by=None) -> Order:
        """
        Pay the seller and complete the order.

        Requires both hold rows to exist, be held and sum to zero. The
        holds are flipped with a conditional update, so a concurrent or
        retried release can never pay the seller twice. Buyer and seller
        wallets are locked together in user_id order, the same order a
        transfer between the two takes.

        Args:
            order_id: Order whose escrow to release
            released_by: Administrator releasing manually, None for the scheduler

        Returns:
            The completed Order

        Raises:
            NotFound: Order does not exist
            NoHeldEscrow: Hold pair missing, unbalanced or already released
            InvalidTransition: Order is not AWAITING_RELEASE
        """
        with transaction.atomic():
            order = Order.objects.select_for_update().filter(pk=order_id).first()
            if order is None:
                raise NotFound(
                    f"Order {order_id} not found",
                    error_code="ORDER_NOT_FOUND",
                    details={"order_id": str(order_id)},
                )

            holds = {
                hold.side: hold
                for hold in EscrowHold.objects.select_for_update().filter(order=order)
            }
            buyer_hold = holds.get(HoldSide.BUYER)
            seller_hold = holds.get(HoldSide.SELLER)
            if (
                buyer_hold is None
                or seller_hold is None
                or buyer_hold.status != HoldStatus.HELD
                or seller_hold.status != HoldStatus.HELD
                or buyer_hold.amount_cents + seller_hold.amount_cents != 0
            ):
                raise NoHeldEscrow(
                    f"Order {order.id} has no held escrow to release",
                    details={
                        "order_id": str(order.id),
                        "holds": {
                            side: {"amount_cents": h.amount_cents, "status": h.status}
                            for side, h in holds.items()
                        },
                    },
                )

            if not can_proceed(order.complete):
                raise InvalidTransition(
                    f"Cannot release order in '{order.status}' state",
                    details={"order_id": str(order.id), "current_state": order.status},
                )

            amount = seller_hold.amount_cents
            common = {
                "entry_type": EntryType.ESCROW_RELEASE,
                "reference_type": "order",
                "reference_id": order.id,
                "created_by": f"admin:{released_by.pk}" if released_by else "scheduler",
            }
            ledger.lock_wallets(order.buyer_id, order.seller_id)
            ledger.debit(
                order.buyer_id,
                amount,
                bucket=BalanceBucket.ON_HOLD,
                idempotency_key=f"order:{order.id}:release:hold",
                **common,
            )
            ledger.credit(
                order.seller_id,
                amount,
                bucket=BalanceBucket.AVAILABLE,
                idempotency_key=f"order:{order.id}:release:credit",
                **common,
            )

            now = timezone.now()
            flipped = EscrowHold.objects.filter(
                order=order, status=HoldStatus.HELD
            ).update(status=HoldStatus.RELEASED, released_at=now, updated_at=now)
            if flipped != 2:
                raise NoHeldEscrow(
                    f"Order {order.id} escrow changed during release",
                    details={"order_id": str(order.id), "released_rows": flipped},
                )

            order.complete()
            if released_by is not None:
                order.release_approved_at = now
            order.save()

        logger.info(
            "Escrow released",
            extra={
                "order_id": str(order.id),
                "seller_id": str(order.seller_id),
                "amount_cents": amount,
                "released_by": str(released_by.pk) if released_by else "scheduler",
            },
        )
        return order
