"""
Health check router.

Liveness and readiness probes for orchestrators and load balancers.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db, ping

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = settings.SERVICE_NAME
    version: str = settings.SERVICE_VERSION


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(status="healthy", timestamp=_now())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check if the database accepts queries",
)
async def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness check.

    Returns 200 if the database answers, 503 otherwise.
    """
    try:
        ping(db)
        checks = {"database": "healthy"}
    except SQLAlchemyError as e:
        logger.warning("Database not ready", error=str(e))
        checks = {"database": "unhealthy"}

    ready = all(check == "healthy" for check in checks.values())
    response = ReadinessResponse(ready=ready, checks=checks, timestamp=_now())
    if not ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
