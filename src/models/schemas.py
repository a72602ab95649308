"""Pydantic models for data validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.enums import BookingStatus, YesNo

# Patient fields persisted on the appointment record, in column order
PATIENT_FIELDS: Tuple[str, ...] = (
    "first_name",
    "middle_name",
    "last_name",
    "preferred_name",
    "date_of_birth",
    "phone",
    "email",
    "comments",
    "appointment_type",
    "appointment_date",
    "appointment_time",
    "insurance",
    "member_id",
    "previous_therapy",
    "taking_medication",
    "mental_health_diagnosis",
    "reason_for_therapy",
    "has_medication_history",
    "medication_history",
)


class PatientInfo(BaseModel):
    """Patient data supplied with a booking request.

    Every field is optional so partial updates can be merged onto an
    existing record; ``None`` means "not supplied".
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_name: Optional[str] = None
    date_of_birth: Optional[str] = Field(default=None, description="MM/DD/YYYY")
    phone: Optional[str] = None
    email: Optional[str] = None
    comments: Optional[str] = None

    appointment_type: Optional[str] = None
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None

    insurance: Optional[str] = None
    member_id: Optional[str] = None
    previous_therapy: Optional[YesNo] = None
    taking_medication: Optional[YesNo] = None
    mental_health_diagnosis: Optional[str] = None
    reason_for_therapy: Optional[str] = None
    has_medication_history: Optional[YesNo] = None
    medication_history: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        """Validate email format."""
        if v and "@" not in v:
            raise ValueError("Invalid email format")
        return v

    @field_validator("previous_therapy", "taking_medication", "has_medication_history", mode="before")
    @classmethod
    def normalize_yes_no(cls, v: Any) -> Any:
        """Accept booleans and mixed-case answers."""
        if isinstance(v, bool):
            return YesNo.YES if v else YesNo.NO
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    def to_db_values(self) -> Dict[str, Optional[str]]:
        """Column values for the appointment record; unsupplied fields stay ``None``."""
        values: Dict[str, Optional[str]] = {}
        for name in PATIENT_FIELDS:
            value = getattr(self, name)
            values[name] = value.value if isinstance(value, YesNo) else value
        return values


class ProcessingLogEntry(BaseModel):
    """One entry of an appointment's processing history."""

    status: BookingStatus
    timestamp: datetime
    message: Optional[str] = None


class AppointmentRecord(BaseModel):
    """Persisted booking attempt for one appointment URL."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    href: str
    clinician_id: str = ""
    clinician_name: str = ""
    status: BookingStatus = BookingStatus.UNKNOWN

    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    preferred_name: str = ""
    date_of_birth: str = ""
    phone: str = ""
    email: str = ""
    comments: str = ""

    appointment_type: Optional[str] = None
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None

    insurance: Optional[str] = None
    member_id: Optional[str] = None
    previous_therapy: Optional[str] = None
    taking_medication: Optional[str] = None
    mental_health_diagnosis: Optional[str] = None
    reason_for_therapy: Optional[str] = None
    has_medication_history: Optional[str] = None
    medication_history: Optional[str] = None

    last_error: Optional[str] = None
    submitted_at: Optional[datetime] = None
    last_attempt_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    processing_log: List[ProcessingLogEntry] = Field(default_factory=list)

    @property
    def is_booked(self) -> bool:
        """Whether the slot is recorded as booked."""
        return self.status == BookingStatus.BOOKED

    def to_patient_info(self) -> PatientInfo:
        """Rebuild the patient data stored on this record."""
        return PatientInfo(**{name: getattr(self, name) or None for name in PATIENT_FIELDS})
