"""Pydantic models for the Therapy Slot Bot API."""

from .appointments import (
    AppointmentSubmitRequest,
    ItemOutcomeResponse,
    ProcessingSummaryResponse,
    SubmissionResponse,
)

__all__ = [
    "AppointmentSubmitRequest",
    "ItemOutcomeResponse",
    "ProcessingSummaryResponse",
    "SubmissionResponse",
]
