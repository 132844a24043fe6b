"""SQLAlchemy-backed approval repository.

Maps ``ApprovalRequest`` snapshots to the ``approval_*`` tables and back.
Every write commits its own transaction; failures roll back before the
error propagates.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from leaveflow.common.logger import get_logger
from leaveflow.core.approval.errors import ConcurrentModification, RequestNotFound
from leaveflow.core.approval.models import (
    ApprovalNode,
    ApprovalRequest,
    Approver,
    NodeDecision,
)
from leaveflow.core.approval.repository import ApprovalRepository
from leaveflow.core.approval.states import ApprovalStatus, CombinationRule, Decision
from leaveflow.db.models import (
    ApprovalNodeRecord,
    ApprovalRequestRecord,
    NodeApproverRecord,
    NodeDecisionRecord,
)

logger = get_logger("approval_repository")


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAlchemyApprovalRepository(ApprovalRepository):
    """Approval repository on top of a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, request: ApprovalRequest) -> ApprovalRequest:
        record = ApprovalRequestRecord(
            id=request.id,
            employee_id=request.employee_id,
            employee_name=request.employee_name,
            request_type=request.request_type,
            start_date=request.start_date,
            end_date=request.end_date,
            reason=request.reason,
            status=request.status.value,
            created_at=request.created_at,
            updated_at=request.created_at,
            nodes=[self._node_record(node) for node in request.nodes],
        )

        self.db.add(record)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(record)
        return self._to_domain(record)

    def get(self, request_id: str, *, for_update: bool = False) -> Optional[ApprovalRequest]:
        query = self.db.query(ApprovalRequestRecord).filter(ApprovalRequestRecord.id == request_id)
        if for_update:
            query = query.with_for_update()

        record = query.first()
        return self._to_domain(record) if record else None

    def save(self, request: ApprovalRequest) -> ApprovalRequest:
        try:
            record = self.db.get(ApprovalRequestRecord, request.id)
            if record is None:
                raise RequestNotFound(request.id)
            if record.version != request.version:
                raise ConcurrentModification(request.id, request.version, record.version)

            record.status = request.status.value
            record.updated_at = datetime.now(timezone.utc)

            node_records = {n.id: n for n in record.nodes}
            for node in request.nodes:
                node_record = node_records[node.id]
                node_record.status = node.status.value
                node_record.approved_by = node.approved_by
                node_record.approved_at = node.approved_at
                node_record.rejected_by = node.rejected_by
                node_record.rejected_at = node.rejected_at

                # Decisions are append-only
                recorded = {d.approver_id for d in node_record.decisions}
                for decision in node.decisions.values():
                    if decision.approver_id not in recorded:
                        node_record.decisions.append(self._decision_record(decision))

            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"Stale write on request {request.id}: {e}")
            raise ConcurrentModification(request.id, request.version) from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(record)
        return self._to_domain(record)

    def list(self) -> List[ApprovalRequest]:
        records = (
            self.db.query(ApprovalRequestRecord)
            .order_by(ApprovalRequestRecord.created_at.desc())
            .all()
        )
        return [self._to_domain(r) for r in records]

    def rollback(self) -> None:
        # Ends the transaction opened by get(for_update=True) and its row lock
        self.db.rollback()

    def _node_record(self, node: ApprovalNode) -> ApprovalNodeRecord:
        return ApprovalNodeRecord(
            id=node.id,
            level=node.level,
            combination_rule=node.combination_rule.value,
            status=node.status.value,
            approved_by=node.approved_by,
            approved_at=node.approved_at,
            rejected_by=node.rejected_by,
            rejected_at=node.rejected_at,
            approvers=[
                NodeApproverRecord(
                    approver_id=approver.id,
                    name=approver.name,
                    role=approver.role,
                    position=position,
                )
                for position, approver in enumerate(node.approvers)
            ],
            decisions=[self._decision_record(d) for d in node.decisions.values()],
        )

    def _decision_record(self, decision: NodeDecision) -> NodeDecisionRecord:
        return NodeDecisionRecord(
            approver_id=decision.approver_id,
            decision=decision.decision.value,
            comment=decision.comment,
            decided_at=decision.decided_at,
        )

    def _to_domain(self, record: ApprovalRequestRecord) -> ApprovalRequest:
        nodes = []
        for node_record in sorted(record.nodes, key=lambda n: n.level):
            nodes.append(
                ApprovalNode(
                    id=node_record.id,
                    level=node_record.level,
                    approvers=tuple(
                        Approver(id=a.approver_id, name=a.name, role=a.role)
                        for a in node_record.approvers
                    ),
                    combination_rule=CombinationRule(node_record.combination_rule),
                    decisions={
                        d.approver_id: NodeDecision(
                            approver_id=d.approver_id,
                            decision=Decision(d.decision),
                            decided_at=_as_utc(d.decided_at),
                            comment=d.comment,
                        )
                        for d in node_record.decisions
                    },
                    status=ApprovalStatus(node_record.status),
                    approved_at=_as_utc(node_record.approved_at),
                    approved_by=node_record.approved_by,
                    rejected_at=_as_utc(node_record.rejected_at),
                    rejected_by=node_record.rejected_by,
                )
            )

        return ApprovalRequest(
            id=record.id,
            employee_id=record.employee_id,
            employee_name=record.employee_name,
            request_type=record.request_type,
            start_date=record.start_date,
            end_date=record.end_date,
            reason=record.reason,
            created_at=_as_utc(record.created_at),
            nodes=nodes,
            status=ApprovalStatus(record.status),
            version=record.version,
        )
