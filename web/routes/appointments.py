"""Appointment routes for the Therapy Slot Bot API."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from loguru import logger

from src.constants import Database as DatabaseConfig
from src.core.enums import BookingStatus
from src.models.schemas import AppointmentRecord
from src.services.booking.service_context import BookingServiceContext
from src.utils.helpers import require_booking_href
from web.dependencies import get_services
from web.models.appointments import (
    AppointmentSubmitRequest,
    ProcessingSummaryResponse,
    SubmissionResponse,
)

router = APIRouter(prefix="/api/appointments", tags=["appointments"])


@router.get("", response_model=List[AppointmentRecord])
async def list_appointments(
    limit: int = Query(DatabaseConfig.LIST_LIMIT, ge=1, le=5000),
    services: BookingServiceContext = Depends(get_services),
):
    """
    List all appointment records, newest first.

    Args:
        limit: Maximum number of records to return
        services: Booking services

    Returns:
        List of appointment records
    """
    return await services.store.list_all(limit=limit)


@router.get("/unknown", response_model=List[AppointmentRecord])
async def list_unknown_appointments(
    background_tasks: BackgroundTasks,
    services: BookingServiceContext = Depends(get_services),
):
    """
    List records whose outcome is still unknown and start a reconciliation run.

    The run happens in the background; if one is already active it is skipped.

    Returns:
        List of unknown appointment records, newest first
    """
    records = await services.store.find_all_by_status(BookingStatus.UNKNOWN)

    if services.processor.is_running:
        logger.info("Reconciliation already running, not scheduling another")
    else:
        background_tasks.add_task(services.processor.process_pending)

    return list(reversed(records))


@router.get("/lookup", response_model=AppointmentRecord)
async def lookup_appointment(
    href: str = Query(..., min_length=1),
    services: BookingServiceContext = Depends(get_services),
):
    """
    Get the record for a booking URL.

    Raises:
        ValidationError: 400 if ``href`` is not an absolute URL
        HTTPException: 404 if no record exists
    """
    record = await services.store.find(require_booking_href(href))
    if record is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return record


@router.post("/submit", response_model=SubmissionResponse)
async def submit_appointment(
    request: AppointmentSubmitRequest,
    services: BookingServiceContext = Depends(get_services),
):
    """
    Record the request and attempt to book the slot.

    Returns:
        Outcome of the booking attempt
    """
    result = await services.submitter.submit(request.patient, request.href)
    return SubmissionResponse(**result.to_dict())


@router.post("/process", response_model=ProcessingSummaryResponse)
async def process_appointments(services: BookingServiceContext = Depends(get_services)):
    """
    Run reconciliation of unknown appointments and wait for it to finish.

    Returns:
        Summary of the run (``skipped`` when another run is active)
    """
    summary = await services.processor.process_pending()
    return ProcessingSummaryResponse(**summary.to_dict())
