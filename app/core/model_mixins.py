"""
Model mixins shared by domain models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use a UUID as primary key

Usage:
    class Transaction(UUIDPrimaryKeyMixin, BaseModel):
        ...
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use a random UUID as primary key.

    Ids are non-guessable and can be generated before insert, which lets
    services key ledger entries on a record id before the record exists.

    Usage:
        order_id = uuid.uuid4()
        ledger.debit(buyer.id, 5000, idempotency_key=f"order:{order_id}:escrow:debit")
        Order.objects.create(id=order_id, ...)
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True
