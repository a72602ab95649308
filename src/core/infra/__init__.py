"""Infrastructure utilities module."""

from .retry import RetryPolicy
from .shutdown import (
    SHUTDOWN_TIMEOUT,
    get_shutdown_event,
    safe_shutdown_cleanup,
    set_shutdown_event,
    setup_signal_handlers,
)

__all__ = [
    "RetryPolicy",
    "SHUTDOWN_TIMEOUT",
    "get_shutdown_event",
    "set_shutdown_event",
    "setup_signal_handlers",
    "safe_shutdown_cleanup",
]
