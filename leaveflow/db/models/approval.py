"""Approval workflow database models.

Stores leave requests, their approval nodes, the approvers listed on each
node and every decision recorded against a node.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from leaveflow.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalRequestRecord(Base):
    """
    One leave request.

    ``version`` is managed by SQLAlchemy and guards against lost updates
    when two writers save the same request.
    """
    __tablename__ = "approval_requests"

    id = Column(String(64), primary_key=True)

    # Requester
    employee_id = Column(String(64), nullable=True, index=True)
    employee_name = Column(String(255), nullable=False)

    # Leave details
    request_type = Column(String(50), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)

    # Derived workflow state
    status = Column(String(20), nullable=False, default="pending", index=True)

    version = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    nodes = relationship(
        "ApprovalNodeRecord",
        back_populates="request",
        order_by="ApprovalNodeRecord.level",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<ApprovalRequestRecord {self.id} {self.request_type} [{self.status}]>"


class ApprovalNodeRecord(Base):
    """One approval level of a request."""
    __tablename__ = "approval_nodes"
    __table_args__ = (UniqueConstraint("request_id", "level", name="uq_approval_nodes_request_level"),)

    id = Column(String(128), primary_key=True)
    request_id = Column(String(64), ForeignKey("approval_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    level = Column(Integer, nullable=False)
    combination_rule = Column(String(10), nullable=False, default="any")

    status = Column(String(20), nullable=False, default="pending")

    # Finalizing decision
    approved_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(64), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    request = relationship("ApprovalRequestRecord", back_populates="nodes")
    approvers = relationship(
        "NodeApproverRecord",
        back_populates="node",
        order_by="NodeApproverRecord.position",
        cascade="all, delete-orphan",
    )
    decisions = relationship(
        "NodeDecisionRecord",
        back_populates="node",
        order_by="NodeDecisionRecord.decided_at",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ApprovalNodeRecord {self.id} L{self.level} [{self.status}]>"


class NodeApproverRecord(Base):
    """An approver listed on a node, denormalized from the directory at intake."""
    __tablename__ = "node_approvers"

    node_id = Column(String(128), ForeignKey("approval_nodes.id", ondelete="CASCADE"), primary_key=True)
    approver_id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    role = Column(String(100), nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)

    node = relationship("ApprovalNodeRecord", back_populates="approvers")


class NodeDecisionRecord(Base):
    """
    One approver's decision on one node.

    The composite primary key lets the database refuse a second decision
    from the same approver.
    """
    __tablename__ = "node_decisions"

    node_id = Column(String(128), ForeignKey("approval_nodes.id", ondelete="CASCADE"), primary_key=True)
    approver_id = Column(String(64), primary_key=True)
    decision = Column(String(20), nullable=False)
    comment = Column(Text, nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=False)

    node = relationship("ApprovalNodeRecord", back_populates="decisions")

    def __repr__(self) -> str:
        return f"<NodeDecisionRecord {self.approver_id} {self.decision} {self.node_id}>"
