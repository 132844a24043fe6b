"""Leave request approval API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from leaveflow.api.deps import get_approval_service
from leaveflow.api.schemas.approval import (
    ApprovalRequestCreate,
    ApprovalRequestListResponse,
    ApprovalRequestResponse,
    DecisionAction,
)
from leaveflow.api.schemas.common import ErrorResponse
from leaveflow.core.approval import ApprovalRequest, ApprovalService, Decision

router = APIRouter(
    prefix="/requests",
    tags=["approvals"],
    responses={
        403: {"model": ErrorResponse, "description": "Approver not listed on the node"},
        404: {"model": ErrorResponse, "description": "Unknown request or node"},
        409: {"model": ErrorResponse, "description": "Request or node state conflict"},
    },
)


def _response(request: ApprovalRequest) -> ApprovalRequestResponse:
    return ApprovalRequestResponse.model_validate(request.to_dict())


def _page(requests, page: int, per_page: int) -> ApprovalRequestListResponse:
    start = (page - 1) * per_page
    return ApprovalRequestListResponse(
        items=[_response(r) for r in requests[start:start + per_page]],
        total=len(requests),
        page=page,
        per_page=per_page,
    )


@router.get("", response_model=ApprovalRequestListResponse)
def list_requests(
    service: ApprovalService = Depends(get_approval_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
):
    """List leave requests, newest first."""
    requests = service.list_requests()
    if status_filter:
        requests = [r for r in requests if r.status.value == status_filter]
    return _page(requests, page, per_page)


@router.post("", response_model=ApprovalRequestResponse, status_code=status.HTTP_201_CREATED)
def create_request(
    payload: ApprovalRequestCreate,
    service: ApprovalService = Depends(get_approval_service),
):
    """Submit a leave request; its approval chain comes from the workflow catalog."""
    request = service.create_request(
        payload.employee_name,
        payload.request_type,
        payload.start_date,
        payload.end_date,
        payload.reason,
        employee_id=payload.employee_id,
    )
    return _response(request)


@router.get("/actionable", response_model=ApprovalRequestListResponse)
def list_actionable(
    approver_id: str = Query(..., min_length=1),
    service: ApprovalService = Depends(get_approval_service),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    """List requests waiting for a decision from the given approver."""
    return _page(service.list_actionable(approver_id), page, per_page)


@router.get("/{request_id}", response_model=ApprovalRequestResponse)
def get_request(
    request_id: str,
    service: ApprovalService = Depends(get_approval_service),
):
    """Get a specific leave request."""
    return _response(service.get_request(request_id))


@router.post("/{request_id}/nodes/{node_id}/approve", response_model=ApprovalRequestResponse)
def approve_node(
    request_id: str,
    node_id: str,
    action: DecisionAction,
    service: ApprovalService = Depends(get_approval_service),
):
    """Record an approval on one node."""
    request = service.apply_action(
        request_id, node_id, action.approver_id, Decision.APPROVED, comment=action.comment
    )
    return _response(request)


@router.post("/{request_id}/nodes/{node_id}/reject", response_model=ApprovalRequestResponse)
def reject_node(
    request_id: str,
    node_id: str,
    action: DecisionAction,
    service: ApprovalService = Depends(get_approval_service),
):
    """Record a rejection on one node; the whole request is rejected."""
    request = service.apply_action(
        request_id, node_id, action.approver_id, Decision.REJECTED, comment=action.comment
    )
    return _response(request)
