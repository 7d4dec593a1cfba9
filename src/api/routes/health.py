"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from src.application.dto.responses import HealthResponse
from src.config import get_logger, get_settings

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity and reports migrations not yet applied.
    """
    from src.infrastructure.storage.sqlite import get_connection
    from src.infrastructure.storage.sqlite.migrations import get_migration_status

    available = False
    pending: list[str] = []
    try:
        async with get_connection() as conn:
            await conn.execute("SELECT 1")
        available = True
        migration_status = await get_migration_status()
        pending = migration_status["pending_migrations"]
    except Exception as e:
        logger.warning("db_health_check_failed", error=str(e))

    if not available:
        status = "unhealthy"
    elif pending:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(
        status=status,
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        database=available,
        pending_migrations=pending,
    )
