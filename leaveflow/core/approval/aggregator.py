"""Request-level status and level gating.

Pure read-only functions over an ``ApprovalRequest``. Gating compares node
``level`` values, never list positions, so the order in which storage hands
back nodes does not matter.
"""

from typing import List

from .machine import NodeStateMachine
from .models import ApprovalNode, ApprovalRequest
from .states import ApprovalStatus, Decision


def derive_request_status(request: ApprovalRequest) -> ApprovalStatus:
    """Compute the request status from its node statuses.

    A rejected node rejects the request; the remaining pending nodes are
    left as they are.
    """
    statuses = [node.status for node in request.nodes]

    if ApprovalStatus.REJECTED in statuses:
        return ApprovalStatus.REJECTED
    if statuses and all(s == ApprovalStatus.APPROVED for s in statuses):
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING


def lower_levels_approved(request: ApprovalRequest, node: ApprovalNode) -> bool:
    """Check that every node below ``node.level`` is approved."""
    return all(
        other.status == ApprovalStatus.APPROVED
        for other in request.nodes
        if other.level < node.level
    )


def is_actionable(request: ApprovalRequest, node_id: str) -> bool:
    """Check if the node may be approved now.

    True iff the node is pending and every lower level is approved. Unknown
    node ids are never actionable.
    """
    node = request.get_node(node_id)
    if node is None:
        return False
    return node.status == ApprovalStatus.PENDING and lower_levels_approved(request, node)


def actionable_nodes_for(request: ApprovalRequest, approver_id: str) -> List[ApprovalNode]:
    """Nodes of a pending request the approver can act on right now.

    Excludes nodes where the approver already recorded a decision (an ALL
    node still waiting for colleagues).
    """
    if request.status != ApprovalStatus.PENDING:
        return []

    return [
        node
        for node in sorted(request.nodes, key=lambda n: n.level)
        if NodeStateMachine(node).can_record(approver_id, Decision.APPROVED)
        and is_actionable(request, node.id)
    ]
