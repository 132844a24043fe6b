"""In-memory records handled by the approval engine.

These are plain dataclasses with no knowledge of storage or transport. The
``status``, ``decisions``, ``approved_*`` and ``rejected_*`` fields are
written only by the engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from .states import ApprovalStatus, CombinationRule, Decision, TERMINAL_STATES


@dataclass(frozen=True)
class Approver:
    """Identity of a person eligible to act on a node."""

    id: str
    name: str
    role: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "role": self.role}


@dataclass(frozen=True)
class LevelTemplate:
    """Who guards one level of a workflow, and how their approvals combine."""

    approvers: Tuple[Approver, ...]
    rule: CombinationRule = CombinationRule.ANY


@dataclass
class NodeDecision:
    """One approver's recorded action on one node."""

    approver_id: str
    decision: Decision
    decided_at: datetime
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "approver_id": self.approver_id,
            "decision": self.decision.value,
            "decided_at": self.decided_at.isoformat(),
            "comment": self.comment,
        }


@dataclass
class ApprovalNode:
    """One sequential gate of a request."""

    id: str
    level: int
    approvers: Tuple[Approver, ...]
    combination_rule: CombinationRule = CombinationRule.ANY
    decisions: Dict[str, NodeDecision] = field(default_factory=dict)
    status: ApprovalStatus = ApprovalStatus.PENDING
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def is_eligible(self, approver_id: str) -> bool:
        """Check if the approver is listed on this node."""
        return any(a.id == approver_id for a in self.approvers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "approvers": [a.to_dict() for a in self.approvers],
            "combination_rule": self.combination_rule.value,
            "decisions": [d.to_dict() for d in self.decisions.values()],
            "status": self.status.value,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "approved_by": self.approved_by,
            "rejected_at": self.rejected_at.isoformat() if self.rejected_at else None,
            "rejected_by": self.rejected_by,
        }


@dataclass
class ApprovalRequest:
    """A leave request and its ordered approval nodes (the aggregate root)."""

    id: str
    employee_name: str
    request_type: str
    start_date: date
    end_date: date
    reason: str
    created_at: datetime
    nodes: List[ApprovalNode] = field(default_factory=list)
    employee_id: Optional[str] = None
    status: ApprovalStatus = ApprovalStatus.PENDING
    # Persistence version, owned by the repository
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def get_node(self, node_id: str) -> Optional[ApprovalNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "request_type": self.request_type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "version": self.version,
            "nodes": [n.to_dict() for n in self.nodes],
        }
