"""
State machine enums for wallet models.

This module defines the state enums used by wallet models with django-fsm.
"""

from wallets.state_machines.states import (
    ApprovalStatus,
    DecisionAction,
    HoldSide,
    HoldStatus,
    LoadMethod,
    OrderState,
    PayoutSpeed,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "ApprovalStatus",
    "DecisionAction",
    "HoldSide",
    "HoldStatus",
    "LoadMethod",
    "OrderState",
    "PayoutSpeed",
    "TransactionStatus",
    "TransactionType",
]
