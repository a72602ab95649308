"""Health check routes for the Therapy Slot Bot API."""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from src.models.db_factory import DatabaseFactory

router = APIRouter(tags=["health"])


def get_version() -> str:
    """
    Get application version from centralized source.

    Returns:
        Version string
    """
    from src import __version__

    return __version__


async def check_database() -> Dict[str, Any]:
    """
    Check database connectivity.

    Returns:
        Component status with pool statistics
    """
    try:
        db = DatabaseFactory.get_instance()
        healthy = await db.health_check()
        return {
            "status": "healthy" if healthy else "unhealthy",
            "pool": db.get_pool_stats(),
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """
    Health check endpoint for monitoring and container orchestration.

    Returns:
        Health status; 503 when the database is unreachable
    """
    database = await check_database()
    services = getattr(request.app.state, "booking_services", None)
    processor_running = bool(services and services.processor.is_running)

    healthy = database.get("status") == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": get_version(),
        "components": {
            "database": database,
            "reconciliation": {"running": processor_running},
        },
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


@router.get("/health/live")
async def liveness_probe() -> Dict[str, str]:
    """
    Liveness probe; always 200 while the process serves requests.

    Returns:
        Liveness status
    """
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}
