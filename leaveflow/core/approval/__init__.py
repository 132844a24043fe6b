"""Approval workflow module for leaveflow.

Implements the node state machine, request aggregation and the single
action entry point for multi-level leave approvals.
"""

from .states import ApprovalStatus, CombinationRule, Decision, TERMINAL_STATES
from .models import Approver, ApprovalNode, ApprovalRequest, LevelTemplate, NodeDecision
from .errors import (
    ApprovalError,
    ConcurrentModification,
    DuplicateDecision,
    InvalidRequest,
    InvalidTemplate,
    NodeFinalized,
    NodeNotActionable,
    NodeNotFound,
    NotEligible,
    NotFound,
    RequestFinalized,
    RequestNotFound,
)
from .machine import NodeStateMachine, is_eligible, record_decision
from .aggregator import actionable_nodes_for, derive_request_status, is_actionable
from .engine import apply_action, create_request
from .catalog import WorkflowCatalog
from .locks import RequestLockRegistry
from .repository import ApprovalRepository, InMemoryApprovalRepository
from .service import ApprovalService

__all__ = [
    "ApprovalStatus",
    "CombinationRule",
    "Decision",
    "TERMINAL_STATES",
    "Approver",
    "ApprovalNode",
    "ApprovalRequest",
    "LevelTemplate",
    "NodeDecision",
    "ApprovalError",
    "ConcurrentModification",
    "DuplicateDecision",
    "InvalidRequest",
    "InvalidTemplate",
    "NodeFinalized",
    "NodeNotActionable",
    "NodeNotFound",
    "NotEligible",
    "NotFound",
    "RequestFinalized",
    "RequestNotFound",
    "NodeStateMachine",
    "is_eligible",
    "record_decision",
    "actionable_nodes_for",
    "derive_request_status",
    "is_actionable",
    "apply_action",
    "create_request",
    "WorkflowCatalog",
    "RequestLockRegistry",
    "ApprovalRepository",
    "InMemoryApprovalRepository",
    "ApprovalService",
]
