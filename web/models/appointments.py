"""Appointment models for the Therapy Slot Bot API."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from src.core.exceptions import ValidationError
from src.models.schemas import PatientInfo
from src.utils.helpers import require_booking_href


class AppointmentSubmitRequest(BaseModel):
    """Body of ``POST /api/appointments/submit``."""

    href: str = Field(..., min_length=1, description="Appointment booking URL")
    patient: PatientInfo = Field(default_factory=PatientInfo)

    @field_validator("href")
    @classmethod
    def validate_href(cls, v: str) -> str:
        """Only absolute http(s) booking URLs are accepted."""
        try:
            return require_booking_href(v)
        except ValidationError as e:
            raise ValueError(e.message)


class SubmissionResponse(BaseModel):
    """Outcome of a booking attempt."""

    success: bool
    message: str
    status: str
    already_booked: bool = False
    confirmation: Optional[str] = None
    error: Optional[str] = None


class ItemOutcomeResponse(BaseModel):
    """Outcome of one reconciled appointment."""

    href: str
    success: bool
    attempts: int
    status: str
    message: Optional[str] = None
    error: Optional[str] = None


class ProcessingSummaryResponse(BaseModel):
    """Summary of a reconciliation run."""

    total: int
    success: int
    failed: int
    details: List[ItemOutcomeResponse] = Field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None
