"""Timing-related constants (timeouts, intervals, delays)."""

from typing import Final


class Timeouts:
    """Timeout values - MILLISECONDS for Playwright, SECONDS noted separately."""

    # Playwright timeouts (milliseconds)
    NAVIGATION: Final[int] = 30_000
    SELECTOR_PROBE: Final[int] = 5_000
    REQUEST_FORM: Final[int] = 10_000
    SUBMIT_SETTLE: Final[int] = 15_000

    # API/Service timeouts (seconds)
    DATABASE_CONNECTION_SECONDS: Final[float] = 30.0
    SHUTDOWN_TIMEOUT: Final[int] = 30


class Intervals:
    """Interval values in SECONDS."""

    RECONCILIATION_MIN: Final[int] = 30
    RECONCILIATION_DEFAULT: Final[int] = 300
    RECONCILIATION_MAX: Final[int] = 86_400


class Delays:
    """UI interaction delays in SECONDS."""

    AFTER_GUEST_CLICK: Final[float] = 1.0
    BETWEEN_FIELDS: Final[float] = 0.2
