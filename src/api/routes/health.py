"""
Health check endpoint with database and rating-mode checks.

The database pool is opened inside the check, not through ``Depends``,
so an unreachable Postgres reports ``unhealthy`` rather than failing
the request.
"""

import time

import structlog
from fastapi import APIRouter

from src.api import dependencies
from src.api.models import ComponentHealth, HealthResponse

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database() -> ComponentHealth:
    """Connect if needed, check connectivity and measure latency."""
    start = time.perf_counter()
    try:
        db = await dependencies.get_database()
        healthy = await db.health_check()
        latency_ms = (time.perf_counter() - start) * 1000
        return ComponentHealth(
            status="healthy" if healthy else "unhealthy",
            latency_ms=round(latency_ms, 2),
        )
    except Exception as e:
        latency_ms = (time.perf_counter() - start) * 1000
        logger.warning("Database health check failed", error=str(e))
        return ComponentHealth(
            status="unhealthy",
            latency_ms=round(latency_ms, 2),
            details={"error": str(e)},
        )


async def _read_rating_mode() -> str | None:
    try:
        setting_manager = await dependencies.get_setting_manager()
        return (await setting_manager.get_rating_mode()).value
    except Exception as e:
        logger.warning("Rating mode lookup failed", error=str(e))
        return None


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
    description="Database connectivity and the current local rating mode.",
)
async def health_check() -> HealthResponse:
    database = await _check_database()

    rating_mode: str | None = None
    if database.status == "healthy":
        rating_mode = await _read_rating_mode()

    overall = "healthy" if database.status == "healthy" else "unhealthy"
    if overall == "healthy" and rating_mode is None:
        overall = "degraded"

    return HealthResponse(
        status=overall,
        rating_mode=rating_mode,
        components={"database": database},
    )
