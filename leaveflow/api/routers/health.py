"""Health check endpoint."""

from fastapi import APIRouter

from leaveflow import __version__
from leaveflow.api.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(status="healthy", version=__version__)
