"""Resilience-related constants (retries and queue concurrency)."""

from typing import Final


class Retries:
    """Retry configuration for reconciliation attempts."""

    MAX_ATTEMPTS: Final[int] = 3
    DELAY_SECONDS: Final[float] = 5.0


class Queue:
    """Reconciliation queue configuration."""

    CONCURRENCY: Final[int] = 5
