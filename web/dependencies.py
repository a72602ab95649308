"""Shared dependencies for the Therapy Slot Bot API."""

from fastapi import HTTPException, Request

from src.services.booking.service_context import BookingServiceContext


def get_services(request: Request) -> BookingServiceContext:
    """
    Get the booking services built during application startup.

    Args:
        request: FastAPI request object

    Returns:
        BookingServiceContext

    Raises:
        HTTPException: 503 if startup has not completed
    """
    services = getattr(request.app.state, "booking_services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Booking services are not initialized")
    return services
