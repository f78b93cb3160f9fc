"""
Approval Gateway for pending transactions.

The gateway is the only place a deferred transaction leaves PENDING.
Each decision locks the transaction row, re-checks approval_status and
either applies the transaction's ledger effect and approves it, or
rejects it with a reason. Effect and status change commit together; if
the effect fails (for example a payout the sender can no longer afford)
the transaction stays PENDING and the failure is returned to the caller.

A decision on a transaction that was already decided always fails with
ALREADY_PROCESSED, whatever the replayed action and reason look like.

Usage:
    from wallets.services import ApprovalGateway
    from wallets.state_machines import DecisionAction

    result = ApprovalGateway.decide(txn.id, admin, DecisionAction.APPROVE)
    result = ApprovalGateway.decide(txn.id, admin, DecisionAction.REJECT, reason="Receipt unreadable")
    if not result:
        print(result.error_code)
"""

from __future__ import annotations

import logging
from typing import Any

from core.exceptions import BaseApplicationError, ValidationError
from core.services import BaseService, ServiceResult
from wallets.exceptions import AlreadyProcessed, NotFound
from wallets.models import Transaction
from wallets.services.effects import apply_effect
from wallets.state_machines import ApprovalStatus, DecisionAction

logger = logging.getLogger(__name__)


class ApprovalGateway(BaseService):
    """Administrative decision point for deferred transactions."""

    @classmethod
    def decide(
        cls,
        transaction_id: Any,
        actor,
        action: DecisionAction | str,
        reason: str | None = None,
    ) -> ServiceResult[Transaction]:
        """
        Approve or reject a pending transaction exactly once.

        Args:
            transaction_id: Transaction to decide
            actor: Administrator making the decision
            action: approve or reject
            reason: Required (non-blank) when rejecting

        Returns:
            ServiceResult with the transaction in its terminal state, or a
            failure with one of:
                INVALID_DECISION: Unknown action
                TRANSACTION_NOT_FOUND: No such transaction
                ALREADY_PROCESSED: Transaction was already decided
                REASON_REQUIRED: Rejecting a pending transaction without a reason
                INSUFFICIENT_FUNDS: Approving would overdraw the sender
        """
        try:
            action = DecisionAction(action)
        except ValueError:
            return ServiceResult.failure(
                f"Unknown decision '{action}'",
                error_code="INVALID_DECISION",
                details={"action": str(action)},
            )

        reason = (reason or "").strip()

        try:
            with cls.atomic():
                txn = (
                    Transaction.objects.select_for_update()
                    .filter(pk=transaction_id)
                    .first()
                )
                if txn is None:
                    raise NotFound(
                        f"Transaction {transaction_id} not found",
                        error_code="TRANSACTION_NOT_FOUND",
                        details={"transaction_id": str(transaction_id)},
                    )

                if txn.approval_status != ApprovalStatus.PENDING:
                    raise AlreadyProcessed(
                        f"Transaction {txn.id} was already {txn.approval_status}",
                        details={
                            "transaction_id": str(txn.id),
                            "approval_status": txn.approval_status,
                            "status": txn.status,
                        },
                    )

                if action == DecisionAction.APPROVE:
                    apply_effect(txn, created_by=f"admin:{actor.pk}")
                    txn.approve(actor=actor)
                else:
                    if not reason:
                        raise ValidationError(
                            "A reason is required to reject a transaction",
                            error_code="REASON_REQUIRED",
                            details={"transaction_id": str(txn.id)},
                        )
                    txn.reject(reason=reason, actor=actor)
                txn.save()
        except AlreadyProcessed as e:
            logger.info(
                "Decision replayed on a decided transaction",
                extra={"transaction_id": str(transaction_id), "action": action.value},
            )
            return ServiceResult.from_exception(e)
        except BaseApplicationError as e:
            # Rolled back: the transaction is still PENDING
            return cls.handle_exception(e, f"Decision on transaction {transaction_id}")

        outcome = "approved" if action == DecisionAction.APPROVE else "rejected"
        logger.info(
            f"Transaction {outcome}",
            extra={
                "transaction_id": str(txn.id),
                "actor_id": str(actor.pk),
                "type": txn.type,
                "amount_cents": txn.amount_cents,
                "approval_status": txn.approval_status,
            },
        )
        return ServiceResult.ok(txn)
