"""Repository pattern implementation."""

from .appointment_status_repository import AppointmentStatusRepository
from .base import BaseRepository
from .clinician_repository import ClinicianRepository

__all__ = [
    "AppointmentStatusRepository",
    "BaseRepository",
    "ClinicianRepository",
]
