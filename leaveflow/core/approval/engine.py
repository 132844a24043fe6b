"""Approval workflow engine entry points.

``create_request`` builds a new aggregate from a workflow template and
``apply_action`` is the single write path for approver decisions. Both are
pure in-memory transitions: no locking and no I/O happen here (see
``ApprovalService`` for the guarded, persisted variant).
"""

import copy
import uuid
from datetime import date, datetime
from typing import Optional, Sequence

from leaveflow.common.logger import get_logger

from .aggregator import derive_request_status, is_actionable
from .errors import (
    InvalidRequest,
    InvalidTemplate,
    NodeFinalized,
    NodeNotActionable,
    NodeNotFound,
    RequestFinalized,
)
from .machine import record_decision, utcnow
from .models import ApprovalNode, ApprovalRequest, LevelTemplate
from .states import ApprovalStatus, Decision

logger = get_logger("approval_engine")


def validate_template(template: Sequence[LevelTemplate]) -> None:
    """
    Check that a workflow template can produce a valid node sequence.

    Raises:
        InvalidTemplate: On an empty template, an empty level or an
            approver listed twice on one level
    """
    if not template:
        raise InvalidTemplate("Workflow template has no levels")

    for level, entry in enumerate(template, start=1):
        if not entry.approvers:
            raise InvalidTemplate(f"Level {level} has no approvers")

        ids = [a.id for a in entry.approvers]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise InvalidTemplate(
                f"Level {level} lists approvers more than once: {', '.join(duplicates)}"
            )


def create_request(
    employee_name: str,
    request_type: str,
    start_date: date,
    end_date: date,
    reason: str,
    template: Sequence[LevelTemplate],
    *,
    employee_id: Optional[str] = None,
    now: Optional[datetime] = None,
    request_id: Optional[str] = None,
) -> ApprovalRequest:
    """
    Create a pending request with one pending node per template level.

    Levels are numbered 1..N in template order.

    Raises:
        InvalidTemplate: If the template is unusable
        InvalidRequest: If intake fields are blank or the dates are reversed
    """
    for field_name, value in (
        ("employee_name", employee_name),
        ("request_type", request_type),
        ("reason", reason),
    ):
        if not value or not value.strip():
            raise InvalidRequest(f"{field_name} must not be blank")

    if end_date < start_date:
        raise InvalidRequest(
            f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}"
        )

    validate_template(template)

    request_id = request_id or str(uuid.uuid4())
    nodes = [
        ApprovalNode(
            id=f"{request_id}-L{level}",
            level=level,
            approvers=tuple(entry.approvers),
            combination_rule=entry.rule,
        )
        for level, entry in enumerate(template, start=1)
    ]

    request = ApprovalRequest(
        id=request_id,
        employee_id=employee_id,
        employee_name=employee_name.strip(),
        request_type=request_type.strip(),
        start_date=start_date,
        end_date=end_date,
        reason=reason.strip(),
        created_at=now or utcnow(),
        nodes=nodes,
    )
    request.status = derive_request_status(request)

    logger.info(
        f"Created request {request.id} ({request.request_type}) "
        f"for {request.employee_name} with {len(nodes)} levels"
    )
    return request


def apply_action(
    request: ApprovalRequest,
    node_id: str,
    approver_id: str,
    decision: Decision,
    *,
    now: Optional[datetime] = None,
    comment: Optional[str] = None,
) -> ApprovalRequest:
    """
    Validate and apply one approver decision.

    The input request is left untouched; the decision is applied to a copy
    which is returned in full.

    Args:
        request: Current snapshot of the request
        node_id: Node the approver acts on
        approver_id: Acting approver
        decision: Approve or reject
        now: Decision timestamp (defaults to current UTC time)
        comment: Optional note stored with the decision

    Returns:
        Updated request snapshot

    Raises:
        NodeNotFound: If the node is not part of the request
        RequestFinalized: If the request is already approved or rejected
        NodeFinalized: If the node is already approved or rejected
        NodeNotActionable: If approving while a lower level is not approved
        NotEligible: If the approver is not listed on the node
        DuplicateDecision: If the approver already acted on the node
    """
    if request.get_node(node_id) is None:
        raise NodeNotFound(request.id, node_id)

    if request.status != ApprovalStatus.PENDING:
        raise RequestFinalized(request.id, request.status.value)

    # Rejections skip gating; the node itself still has to be pending
    if decision == Decision.APPROVED and not is_actionable(request, node_id):
        node = request.get_node(node_id)
        if node.is_terminal:
            raise NodeFinalized(node_id, node.status.value, approver_id=approver_id)
        raise NodeNotActionable(
            f"Node {node_id} (level {node.level}) is waiting for lower levels to be approved",
            request_id=request.id,
            node_id=node_id,
            approver_id=approver_id,
        )

    updated = copy.deepcopy(request)
    node = updated.get_node(node_id)

    node_status = record_decision(node, approver_id, decision, now=now, comment=comment)
    updated.status = derive_request_status(updated)

    logger.info(
        f"Request {updated.id}: {approver_id} {decision.value} node {node_id} "
        f"(level {node.level}) -> node {node_status.value}, request {updated.status.value}"
    )
    return updated
