"""Common schemas for the leaveflow API."""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None
    node_id: Optional[str] = None
    approver_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
