from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from leaveflow.core.approval import ApprovalService, WorkflowCatalog
from leaveflow.core.config import get_settings
from leaveflow.db.repository import SqlAlchemyApprovalRepository
from leaveflow.db.session import SessionLocal


def get_db() -> Generator:
    """Database session dependency."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@lru_cache
def get_catalog() -> WorkflowCatalog:
    """Workflow catalog from the configured YAML file, or the built-in default."""
    settings = get_settings()
    if settings.workflows_file:
        return WorkflowCatalog.from_file(settings.workflows_file)
    return WorkflowCatalog.default()


def get_approval_service(
    db: Session = Depends(get_db),
    catalog: WorkflowCatalog = Depends(get_catalog),
) -> ApprovalService:
    """Approval service bound to the request's database session."""
    return ApprovalService(SqlAlchemyApprovalRepository(db), catalog=catalog)
