"""Node state machine.

Records one approver decision on one node and derives the node's new status
from the full decision set and the node's combination rule.
"""

from datetime import datetime, timezone
from typing import Optional

from leaveflow.common.logger import get_logger

from .errors import DuplicateDecision, NodeFinalized, NotEligible
from .models import ApprovalNode, NodeDecision
from .states import (
    ApprovalStatus,
    Decision,
    can_transition,
    get_transition_rule,
)

logger = get_logger("approval_machine")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_eligible(node: ApprovalNode, approver_id: str) -> bool:
    """Check if an approver may act on a node."""
    return node.is_eligible(approver_id)


class NodeStateMachine:
    """
    State machine for a single approval node.

    Wraps the node and mutates it in place:
    - Validation of eligibility, terminal state and duplicate decisions
    - Evaluation of the ANY / ALL combination rule
    - Finalization timestamps
    """

    def __init__(self, node: ApprovalNode):
        self.node = node

    @property
    def state(self) -> ApprovalStatus:
        """Current status of the node."""
        return self.node.status

    @property
    def is_terminal(self) -> bool:
        return self.node.is_terminal

    def can_record(self, approver_id: str, decision: Decision) -> bool:
        """Check if a decision would be accepted, without recording it."""
        return (
            is_eligible(self.node, approver_id)
            and can_transition(self.state, decision)
            and approver_id not in self.node.decisions
        )

    def record(
        self,
        approver_id: str,
        decision: Decision,
        *,
        now: Optional[datetime] = None,
        comment: Optional[str] = None,
    ) -> ApprovalStatus:
        """
        Record a decision and re-evaluate the node.

        Args:
            approver_id: Approver taking the action
            decision: Approve or reject
            now: Decision timestamp (defaults to current UTC time)
            comment: Optional free-text note stored with the decision

        Returns:
            The node status after the decision

        Raises:
            NotEligible: If the approver is not listed on the node
            NodeFinalized: If the node is already approved or rejected
            DuplicateDecision: If the approver already acted on the node
        """
        node = self.node

        if not is_eligible(node, approver_id):
            raise NotEligible(node.id, approver_id)

        rule = get_transition_rule(node.status, decision, node.combination_rule)
        if rule is None:
            raise NodeFinalized(node.id, node.status.value, approver_id=approver_id)

        previous = node.decisions.get(approver_id)
        if previous is not None:
            raise DuplicateDecision(node.id, approver_id, previous.decision.value)

        decided_at = now or utcnow()
        node.decisions[approver_id] = NodeDecision(
            approver_id=approver_id,
            decision=decision,
            decided_at=decided_at,
            comment=comment,
        )

        if rule.requires_unanimity and not self._unanimous():
            logger.debug(
                f"Node {node.id}: {approver_id} approved, "
                f"{len(node.decisions)}/{len(node.approvers)} decisions recorded"
            )
            return node.status

        node.status = rule.to_state
        if node.status == ApprovalStatus.APPROVED:
            node.approved_at = decided_at
            node.approved_by = approver_id
        elif node.status == ApprovalStatus.REJECTED:
            node.rejected_at = decided_at
            node.rejected_by = approver_id

        return node.status

    def _unanimous(self) -> bool:
        """Every listed approver has an approving decision."""
        for approver in self.node.approvers:
            entry = self.node.decisions.get(approver.id)
            if entry is None or entry.decision != Decision.APPROVED:
                return False
        return True


def record_decision(
    node: ApprovalNode,
    approver_id: str,
    decision: Decision,
    *,
    now: Optional[datetime] = None,
    comment: Optional[str] = None,
) -> ApprovalStatus:
    """Record a decision on a node in place and return its new status."""
    return NodeStateMachine(node).record(approver_id, decision, now=now, comment=comment)
