"""Routes package for the Therapy Slot Bot API."""

from .appointments import router as appointments_router
from .health import router as health_router

__all__ = [
    "appointments_router",
    "health_router",
]
