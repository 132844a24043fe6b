"""Database models for leaveflow."""

from leaveflow.db.models.user import User
from leaveflow.db.models.approval import (
    ApprovalRequestRecord,
    ApprovalNodeRecord,
    NodeApproverRecord,
    NodeDecisionRecord,
)

__all__ = [
    "User",
    "ApprovalRequestRecord",
    "ApprovalNodeRecord",
    "NodeApproverRecord",
    "NodeDecisionRecord",
]
