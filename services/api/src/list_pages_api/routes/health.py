"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from list_pages_shared.db.connection import get_db
from list_pages_shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(BaseModel):
    """Health check response model."""

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        description="Overall health status"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Current server timestamp (UTC)",
    )
    version: str = Field(description="Service version")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual component health checks",
    )


class ReadinessStatus(BaseModel):
    """Readiness check response model."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="Current server timestamp (UTC)",
    )
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _database_reachable() -> bool:
    try:
        await get_db().connect()
    except (SQLAlchemyError, OSError, ValueError) as e:
        logger.warning("Database check failed", error=str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health Check",
    description="Check if the service is running and get version info",
)
async def health_check(request: Request) -> HealthStatus:
    """Liveness check with dependency status.

    The service reports ``degraded`` rather than failing when the database
    is unavailable, so list pages without a list still render.
    """
    checks = {
        "api": True,
        "database": getattr(request.app.state, "db_initialized", False),
        "facet_definitions": bool(getattr(request.app.state, "facet_definitions", None)),
    }
    overall_status = "healthy"

    if checks["database"]:
        checks["database_connection"] = await _database_reachable()
        if not checks["database_connection"]:
            overall_status = "degraded"
    else:
        overall_status = "degraded"

    return HealthStatus(
        status=overall_status,
        version=request.app.version,
        checks=checks,
    )


@router.get(
    "/health/ready",
    response_model=ReadinessStatus,
    summary="Readiness Check",
    description="Check if the service is ready to accept requests",
)
async def readiness_check(request: Request) -> ReadinessStatus:
    """Readiness check: the database must be initialized and reachable."""
    checks = {
        "api": True,
        "database_init": getattr(request.app.state, "db_initialized", False),
    }
    all_ready = checks["database_init"]

    if checks["database_init"]:
        checks["database_connection"] = await _database_reachable()
        all_ready = checks["database_connection"]

    return ReadinessStatus(ready=all_ready, checks=checks)


@router.get(
    "/health/live",
    summary="Liveness Check",
    description="Simple liveness check - returns 200 if service is alive",
)
async def liveness_check() -> dict[str, str]:
    return {"status": "ok"}
