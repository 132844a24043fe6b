from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ApprovalRequestCreate(BaseModel):
    employee_name: str = Field(..., min_length=1, max_length=255)
    employee_id: Optional[str] = Field(None, max_length=64)
    request_type: str = Field(..., min_length=1, max_length=50)
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1)


class DecisionAction(BaseModel):
    approver_id: str = Field(..., min_length=1)
    comment: Optional[str] = None


class ApproverResponse(BaseModel):
    id: str
    name: str
    role: str

    class Config:
        from_attributes = True


class NodeDecisionResponse(BaseModel):
    approver_id: str
    decision: str
    decided_at: datetime
    comment: Optional[str] = None


class ApprovalNodeResponse(BaseModel):
    id: str
    level: int
    approvers: List[ApproverResponse]
    combination_rule: str
    decisions: List[NodeDecisionResponse]
    status: str
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_by: Optional[str] = None


class ApprovalRequestResponse(BaseModel):
    id: str
    employee_id: Optional[str]
    employee_name: str
    request_type: str
    start_date: date
    end_date: date
    reason: str
    status: str
    created_at: datetime
    version: int
    nodes: List[ApprovalNodeResponse]


class ApprovalRequestListResponse(BaseModel):
    items: List[ApprovalRequestResponse]
    total: int
    page: int
    per_page: int
