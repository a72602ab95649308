"""Result objects returned by booking operations."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ...core.enums import BookingStatus


@dataclass
class SubmissionResult:
    """Outcome of one booking attempt."""

    success: bool
    message: str
    status: BookingStatus = BookingStatus.UNKNOWN
    already_booked: bool = False
    confirmation: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def booked_elsewhere(cls, message: str = "Appointment slot is already booked") -> "SubmissionResult":
        """Slot was already taken; nothing was submitted."""
        return cls(
            success=False,
            message=message,
            status=BookingStatus.BOOKED,
            already_booked=True,
        )

    @classmethod
    def failure(
        cls,
        message: str,
        error: Optional[str] = None,
        status: BookingStatus = BookingStatus.UNKNOWN,
    ) -> "SubmissionResult":
        """Attempt did not book the slot."""
        return cls(success=False, message=message, status=status, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class ItemOutcome:
    """Final outcome of reconciling one pending appointment."""

    href: str
    success: bool
    attempts: int
    status: BookingStatus = BookingStatus.UNKNOWN
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class ProcessingSummary:
    """Aggregate result of one reconciliation run."""

    total: int = 0
    success: int = 0
    failed: int = 0
    details: List[ItemOutcome] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None

    @classmethod
    def from_outcomes(cls, outcomes: List[ItemOutcome]) -> "ProcessingSummary":
        succeeded = sum(1 for o in outcomes if o.success)
        return cls(
            total=len(outcomes),
            success=succeeded,
            failed=len(outcomes) - succeeded,
            details=outcomes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "details": [d.to_dict() for d in self.details],
            "skipped": self.skipped,
            "error": self.error,
        }
