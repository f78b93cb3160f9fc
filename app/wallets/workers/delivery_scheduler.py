"""
Delivery and release scheduler for escrow orders.

Two periodic Celery tasks advance orders without human input:

- sweep_deliveries: SHIPPED orders whose shipped_at is older than
  ORDER_DELIVERY_DELAY_HOURS become AWAITING_RELEASE.
- sweep_releases: AWAITING_RELEASE orders whose delivered_at is older
  than ORDER_RELEASE_DELAY_HOURS are released to the seller.

Each order is handled in its own database transaction through
OrderService, which re-checks the persisted state under a row lock.
Overlapping sweeps therefore skip orders another run already moved, and
a failure on one order never stops the rest of the batch.

Usage:
    from wallets.workers.delivery_scheduler import sweep_deliveries

    sweep_deliveries.delay()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from wallets.models import Order
from wallets.services import OrderService
from wallets.state_machines import OrderState

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


# Failure codes meaning another run or an admin moved the order first
SKIPPABLE_ERROR_CODES = frozenset({"INVALID_TRANSITION", "ALREADY_PROCESSED"})


def _run_sweep(name: str, order_ids: Iterable, handler: Callable) -> dict:
    """
    Apply handler to each order id, isolating per-order failures.

    Handlers return a ServiceResult. A failure whose error_code shows the
    order already moved on is counted as skipped; any other failure, or
    an unexpected exception, is counted as an error.

    Returns:
        Dict with processed, skipped and errors counts
    """
    processed = skipped = errors = 0

    for order_id in order_ids:
        try:
            result = handler(order_id)
        except Exception as e:
            errors += 1
            logger.error(
                f"{name} sweep failed for order: {e}",
                extra={"order_id": str(order_id), "error": str(e)},
                exc_info=True,
            )
            continue

        if result.success:
            processed += 1
        elif result.error_code in SKIPPABLE_ERROR_CODES:
            skipped += 1
            logger.info(
                f"{name} sweep skipped order: {result.error}",
                extra={"order_id": str(order_id), "error_code": result.error_code},
            )
        else:
            errors += 1
            logger.error(
                f"{name} sweep failed for order: {result.error}",
                extra={"order_id": str(order_id), "error_code": result.error_code},
            )

    logger.info(
        f"{name} sweep complete: processed {processed}, skipped {skipped}, errors {errors}",
        extra={"processed": processed, "skipped": skipped, "errors": errors},
    )
    return {"processed": processed, "skipped": skipped, "errors": errors}


# =============================================================================
# Periodic Tasks
# =============================================================================


@shared_task(bind=True)
def sweep_deliveries(self) -> dict:
    """
    Promote shipped orders past the delivery delay to AWAITING_RELEASE.

    Returns:
        Dict with processed, skipped and errors counts
    """
    cutoff = timezone.now() - timedelta(hours=settings.ORDER_DELIVERY_DELAY_HOURS)
    order_ids = list(
        Order.objects.filter(status=OrderState.SHIPPED, shipped_at__lt=cutoff)
        .order_by("shipped_at")
        .values_list("id", flat=True)[: settings.ORDER_SWEEP_BATCH_SIZE]
    )
    logger.info(
        "Starting delivery sweep",
        extra={"candidates": len(order_ids), "cutoff": cutoff.isoformat()},
    )
    return _run_sweep("Delivery", order_ids, OrderService.mark_delivered)


@shared_task(bind=True)
def sweep_releases(self) -> dict:
    """
    Release escrow for delivered orders past the release delay.

    Uses the same release path as the admin action.

    Returns:
        Dict with processed, skipped and errors counts
    """
    cutoff = timezone.now() - timedelta(hours=settings.ORDER_RELEASE_DELAY_HOURS)
    order_ids = list(
        Order.objects.filter(status=OrderState.AWAITING_RELEASE, delivered_at__lt=cutoff)
        .order_by("delivered_at")
        .values_list("id", flat=True)[: settings.ORDER_SWEEP_BATCH_SIZE]
    )
    logger.info(
        "Starting release sweep",
        extra={"candidates": len(order_ids), "cutoff": cutoff.isoformat()},
    )
    return _run_sweep("Release", order_ids, OrderService.release_order)
