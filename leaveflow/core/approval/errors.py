"""Errors raised by the approval workflow engine.

None of them is fatal to the process. Each one carries the ids of the
entities involved so the caller can build a precise message.
"""

from typing import Any, Dict, Optional


class ApprovalError(Exception):
    """Base class for every refused engine operation."""

    code = "approval_error"

    def __init__(
        self,
        message: str,
        *,
        request_id: Optional[str] = None,
        node_id: Optional[str] = None,
        approver_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.node_id = node_id
        self.approver_id = approver_id

    def to_dict(self) -> Dict[str, Any]:
        """Error body for API responses."""
        data: Dict[str, Any] = {"error": self.code, "detail": self.message}
        for key in ("request_id", "node_id", "approver_id"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


class NotFound(ApprovalError):
    code = "not_found"


class RequestNotFound(NotFound):
    """No request with the given id."""

    code = "request_not_found"

    def __init__(self, request_id: str):
        super().__init__(f"Approval request {request_id} not found", request_id=request_id)


class NodeNotFound(NotFound):
    """The request has no node with the given id."""

    code = "node_not_found"

    def __init__(self, request_id: str, node_id: str):
        super().__init__(
            f"Node {node_id} not found in request {request_id}",
            request_id=request_id,
            node_id=node_id,
        )


class NotEligible(ApprovalError):
    """The approver is not listed on the node."""

    code = "not_eligible"

    def __init__(self, node_id: str, approver_id: str):
        super().__init__(
            f"Approver {approver_id} is not listed on node {node_id}",
            node_id=node_id,
            approver_id=approver_id,
        )


class NodeNotActionable(ApprovalError):
    """An earlier level has not been approved yet."""

    code = "node_not_actionable"


class NodeFinalized(NodeNotActionable):
    """The node is already approved or rejected."""

    code = "node_finalized"

    def __init__(self, node_id: str, status: str, *, approver_id: Optional[str] = None):
        super().__init__(
            f"Node {node_id} is already {status}",
            node_id=node_id,
            approver_id=approver_id,
        )
        self.status = status


class RequestFinalized(ApprovalError):
    """The request is already approved or rejected."""

    code = "request_finalized"

    def __init__(self, request_id: str, status: str):
        super().__init__(f"Request {request_id} is already {status}", request_id=request_id)
        self.status = status


class DuplicateDecision(ApprovalError):
    """The approver already acted on this node. Must not be retried."""

    code = "duplicate_decision"

    def __init__(self, node_id: str, approver_id: str, previous: str):
        super().__init__(
            f"Approver {approver_id} already {previous} node {node_id}",
            node_id=node_id,
            approver_id=approver_id,
        )
        self.previous = previous


class InvalidTemplate(ApprovalError, ValueError):
    """A workflow template cannot produce a valid node sequence."""

    code = "invalid_template"


class InvalidRequest(ApprovalError, ValueError):
    """Intake data for a new request is inconsistent."""

    code = "invalid_request"


class ConcurrentModification(ApprovalError):
    """The stored request changed between load and save."""

    code = "concurrent_modification"

    def __init__(self, request_id: str, expected_version: int, actual_version: Optional[int] = None):
        found = f", found {actual_version}" if actual_version is not None else ""
        super().__init__(
            f"Request {request_id} was modified concurrently "
            f"(expected version {expected_version}{found})",
            request_id=request_id,
        )
        self.expected_version = expected_version
        self.actual_version = actual_version
