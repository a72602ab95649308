"""Core infrastructure module."""

from .config.settings import Settings, get_settings, reset_settings
from .enums import BookingStatus, YesNo
from .environment import Environment
from .exceptions import (
    # Base exception
    BookingBotError,
    # Configuration
    ConfigurationError,
    # Browser
    BrowserConnectionError,
    NavigationError,
    SelectorNotFoundError,
    # Database
    DatabaseError,
    DatabaseNotConnectedError,
    DatabasePoolTimeoutError,
    # Validation
    ValidationError,
)
from .infra.retry import RetryPolicy
from .infra.shutdown import (
    SHUTDOWN_TIMEOUT,
    get_shutdown_event,
    safe_shutdown_cleanup,
    set_shutdown_event,
    setup_signal_handlers,
)
from .logger import appointment_ctx, setup_structured_logging

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "BookingStatus",
    "YesNo",
    "Environment",
    "setup_structured_logging",
    "appointment_ctx",
    # Exceptions
    "BookingBotError",
    "ConfigurationError",
    "BrowserConnectionError",
    "NavigationError",
    "SelectorNotFoundError",
    "DatabaseError",
    "DatabaseNotConnectedError",
    "DatabasePoolTimeoutError",
    "ValidationError",
    # Retry
    "RetryPolicy",
    # Shutdown
    "SHUTDOWN_TIMEOUT",
    "get_shutdown_event",
    "set_shutdown_event",
    "setup_signal_handlers",
    "safe_shutdown_cleanup",
]
