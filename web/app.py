"""FastAPI application for Therapy Slot Bot."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException

from src.core.config.settings import Settings, get_settings
from src.core.exceptions import BookingBotError
from src.models.db_factory import DatabaseFactory
from src.services.booking.service_context import BookingServiceFactory
from web.exception_handlers import (
    booking_bot_error_handler,
    http_exception_handler,
    validation_exception_handler,
)
from web.routes import appointments_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown.

    Handles:
    - Database connection and booking service wiring on startup
    - Database cleanup on shutdown
    """
    logger.info("FastAPI application starting up...")
    try:
        db = await DatabaseFactory.ensure_connected()
        app.state.booking_services = BookingServiceFactory.create(db)
        logger.info("Booking services initialized")
    except Exception as e:
        logger.error(f"Failed to initialize during startup: {e}")
        raise

    yield

    logger.info("FastAPI application shutting down...")
    try:
        await asyncio.wait_for(DatabaseFactory.close_instance(), timeout=10)
        logger.info("DatabaseFactory instance closed successfully")
    except asyncio.TimeoutError:
        logger.error("DatabaseFactory close timed out after 10s")
    except Exception as e:
        logger.error(f"Error closing DatabaseFactory: {e}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    is_dev = not settings.is_production()

    app = FastAPI(
        title="Therapy Slot Bot API",
        version=_get_version(),
        lifespan=lifespan,
        docs_url="/docs" if is_dev else None,
        redoc_url="/redoc" if is_dev else None,
        openapi_url="/openapi.json" if is_dev else None,
        description=(
            "Records therapy appointment booking attempts and re-attempts "
            "bookings whose outcome is still unknown."
        ),
        openapi_tags=[
            {"name": "appointments", "description": "Appointment records and booking"},
            {"name": "health", "description": "Health checks"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BookingBotError, booking_bot_error_handler)

    app.include_router(appointments_router)
    app.include_router(health_router)

    return app


def _get_version() -> str:
    from src import __version__

    return __version__


# Module-level app for uvicorn ("web.app:app")
app = create_app()
