"""Unified constants and configuration values for Therapy Slot Bot.

All classes can be imported directly from this package:
    from src.constants import Timeouts, Retries, Queue
"""

from .database import Database
from .logging import LogEmoji
from .resilience import Queue, Retries
from .timing import Delays, Intervals, Timeouts

__all__ = [
    "Database",
    "Delays",
    "Intervals",
    "LogEmoji",
    "Queue",
    "Retries",
    "Timeouts",
]
