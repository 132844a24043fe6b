"""Approver directory endpoints."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leaveflow.api.deps import get_db
from leaveflow.api.schemas.approval import ApproverResponse
from leaveflow.db.models import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[ApproverResponse])
def list_users(db: Session = Depends(get_db)):
    """List everyone who can be picked as an approver."""
    users = db.query(User).order_by(User.id).all()
    return [ApproverResponse.model_validate(u) for u in users]
