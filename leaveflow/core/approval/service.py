"""Approval service for managing leave approval workflows.

Provides the high-level API used by collaborators (REST layer, scripts):
template resolution, persistence through a repository, and the per-request
critical section around load -> apply -> save.
"""

from datetime import date
from typing import List, Optional, Sequence

from leaveflow.common.logger import get_logger

from . import engine
from .aggregator import actionable_nodes_for
from .catalog import WorkflowCatalog
from .errors import ApprovalError, RequestNotFound
from .locks import RequestLockRegistry, default_registry
from .models import ApprovalRequest, LevelTemplate
from .repository import ApprovalRepository
from .states import Decision

logger = get_logger("approval_service")


class ApprovalService:
    """
    High-level service for leave request approvals.

    Handles:
    - Creating requests from the workflow catalog
    - Applying approver decisions under a per-request lock
    - Querying requests and what an approver can act on
    """

    def __init__(
        self,
        repository: ApprovalRepository,
        *,
        catalog: Optional[WorkflowCatalog] = None,
        locks: Optional[RequestLockRegistry] = None,
    ):
        """
        Initialize the approval service.

        Args:
            repository: Where request snapshots are loaded from and saved to
            catalog: Workflow templates per request type (built-in default if omitted)
            locks: Lock registry shared by every service touching the same store
        """
        self.repository = repository
        self.catalog = catalog if catalog is not None else WorkflowCatalog.default()
        self.locks = locks if locks is not None else default_registry

    def create_request(
        self,
        employee_name: str,
        request_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        *,
        employee_id: Optional[str] = None,
        template: Optional[Sequence[LevelTemplate]] = None,
    ) -> ApprovalRequest:
        """
        Create and store a new pending request.

        The template comes from the catalog unless one is passed explicitly.
        """
        if template is None:
            template = self.catalog.template_for(request_type)

        request = engine.create_request(
            employee_name,
            request_type,
            start_date,
            end_date,
            reason,
            template,
            employee_id=employee_id,
        )
        return self.repository.add(request)

    def get_request(self, request_id: str) -> ApprovalRequest:
        """Get a request by id.

        Raises:
            RequestNotFound: If the id is unknown
        """
        request = self.repository.get(request_id)
        if request is None:
            raise RequestNotFound(request_id)
        return request

    def list_requests(self) -> List[ApprovalRequest]:
        """All requests, newest first."""
        return self.repository.list()

    def list_actionable(self, approver_id: str) -> List[ApprovalRequest]:
        """Requests with at least one node the approver can act on now."""
        return [r for r in self.repository.list() if actionable_nodes_for(r, approver_id)]

    def apply_action(
        self,
        request_id: str,
        node_id: str,
        approver_id: str,
        decision: Decision,
        *,
        comment: Optional[str] = None,
    ) -> ApprovalRequest:
        """
        Apply one approver decision and persist the result.

        Load, apply and save all happen while the request's lock is held.
        The lock is dropped again once the id turns out to be unknown or the
        request is final, so the registry only keeps pending requests.

        Returns:
            The stored snapshot after the decision

        Raises:
            RequestNotFound: If the request id is unknown
            ApprovalError: Any refusal from the engine, or a
                ConcurrentModification from the repository
        """
        current: Optional[ApprovalRequest] = None
        try:
            with self.locks.hold(request_id):
                current = self.repository.get(request_id, for_update=True)
                if current is None:
                    self.repository.rollback()
                    raise RequestNotFound(request_id)

                try:
                    updated = engine.apply_action(
                        current, node_id, approver_id, decision, comment=comment
                    )
                except ApprovalError as e:
                    self.repository.rollback()
                    logger.warning(f"Refused {decision.value} by {approver_id} on {request_id}/{node_id}: {e}")
                    raise

                current = self.repository.save(updated)
        finally:
            if current is None or current.is_terminal:
                self.locks.discard(request_id)

        if current.is_terminal:
            logger.info(f"Request {request_id} finalized as {current.status.value}")

        return current

    def approve(self, request_id: str, node_id: str, approver_id: str, *, comment: Optional[str] = None) -> ApprovalRequest:
        return self.apply_action(request_id, node_id, approver_id, Decision.APPROVED, comment=comment)

    def reject(self, request_id: str, node_id: str, approver_id: str, *, comment: Optional[str] = None) -> ApprovalRequest:
        return self.apply_action(request_id, node_id, approver_id, Decision.REJECTED, comment=comment)
