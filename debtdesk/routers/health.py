"""
DebtDesk - Health Check Router

GET /health - liveness probe: returns 200 while the process is up.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from .. import __version__
from ..core.config import get_settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    timestamp: str
    environment: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=get_settings().environment,
        version=__version__,
    )
