"""Centralized enum definitions for Therapy Slot Bot."""

from enum import Enum


class BookingStatus(str, Enum):
    """Status values for appointment status records.

    ``BOOKED`` and ``EXPIRED`` are terminal: no automated attempts follow.
    """

    UNKNOWN = "unknown"
    BOOKED = "booked"
    EXPIRED = "expired"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]

    @property
    def is_terminal(self) -> bool:
        """Whether automation should stop for a record in this status."""
        return self is not BookingStatus.UNKNOWN


class YesNo(str, Enum):
    """Yes/no answers on the intake form."""

    YES = "yes"
    NO = "no"
