"""
Factory Boy factories for wallet journal and order models.

These write rows directly, without touching balances. Use them for
model, state machine and query tests; use the services (see the
fixtures in wallets/conftest.py) when balances and escrow must line up.

Usage:
    from wallets.tests.factories import OrderFactory, TransactionFactory

    txn = TransactionFactory()                                  # pending card load
    payout = TransactionFactory(payout=True, sender=user)
    order = OrderFactory(status=OrderState.SHIPPED)             # no escrow rows
"""

import factory

from authentication.tests.factories import UserFactory
from wallets.models import Order, Transaction
from wallets.state_machines import OrderState, PayoutSpeed, TransactionType


class TransactionFactory(factory.django.DjangoModelFactory):
    """
    Factory for Transaction.

    Default is a pending card load crediting a new user.

    Traits:
        payout: Pending standard payout debiting the sender
        transfer: Transfer between two new users
    """

    class Meta:
        model = Transaction
        skip_postgeneration_save = True

    type = TransactionType.CARD_LOAD
    receiver = factory.SubFactory(UserFactory)
    sender = None
    amount_cents = 5000
    fee_cents = 0
    memo = ""

    class Params:
        payout = factory.Trait(
            type=TransactionType.PAYOUT,
            receiver=None,
            sender=factory.SubFactory(UserFactory),
            payout_speed=PayoutSpeed.STANDARD,
            bank_reference="bank_001",
        )
        transfer = factory.Trait(
            type=TransactionType.TRANSFER,
            sender=factory.SubFactory(UserFactory),
        )


class OrderFactory(factory.django.DjangoModelFactory):
    """
    Factory for Order without escrow rows.

    status may be passed at creation to start in any state.
    """

    class Meta:
        model = Order
        skip_postgeneration_save = True

    buyer = factory.SubFactory(UserFactory)
    seller = factory.SubFactory(UserFactory)
    amount_cents = 5000
    item_description = factory.Sequence(lambda n: f"Item #{n}")
    status = OrderState.PENDING_PAYMENT
