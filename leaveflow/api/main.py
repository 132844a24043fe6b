from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leaveflow import __version__
from leaveflow.api.deps import get_catalog
from leaveflow.api.routers import approvals, health, users
from leaveflow.common.logger import setup_logger
from leaveflow.core.approval.errors import (
    ApprovalError,
    InvalidRequest,
    InvalidTemplate,
    NotEligible,
    NotFound,
)
from leaveflow.core.config import get_settings
from leaveflow.db.seed import init_db
from leaveflow.db.session import SessionLocal, engine

settings = get_settings()
logger = setup_logger(
    level=settings.log_level,
    log_dir=settings.log_dir,
    file_logging=settings.file_logging,
)

# Every other ApprovalError is a conflict with the current request state
ERROR_STATUS = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (NotEligible, status.HTTP_403_FORBIDDEN),
    (InvalidTemplate, 422),
    (InvalidRequest, 422),
]


def status_for(error: ApprovalError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return code
    return status.HTTP_409_CONFLICT


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = SessionLocal()
    try:
        approvers = get_catalog().approvers if settings.seed_default_users else []
        init_db(engine, db, approvers)
    finally:
        db.close()
    logger.info(f"{settings.app_name} {__version__} started")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Multi-level leave request approval workflow",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApprovalError)
async def approval_error_handler(request: Request, exc: ApprovalError):
    return JSONResponse(status_code=status_for(exc), content=exc.to_dict())


app.include_router(approvals.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(health.router)
