"""Custom exception classes for Therapy Slot Bot."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class BookingBotError(Exception):
    """Base exception for Therapy Slot Bot."""

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize booking bot error.

        Args:
            message: Error message
            recoverable: Whether the error is recoverable with retry
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(BookingBotError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


# Browser Errors
class BrowserConnectionError(BookingBotError):
    """Could not connect to or launch the browser."""

    def __init__(self, message: str = "Browser connection failed", endpoint: Optional[str] = None):
        details = {"endpoint": endpoint} if endpoint else {}
        super().__init__(message, recoverable=True, details=details)


class NavigationError(BookingBotError):
    """Page navigation failed or timed out."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        message = f"Failed to load {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message, recoverable=True, details={"url": url})


class SelectorNotFoundError(BookingBotError):
    """Selector not found - website structure may have changed."""

    def __init__(self, selector_name: str, tried_selectors: Optional[List[str]] = None):
        """
        Initialize selector not found error.

        Args:
            selector_name: Name of the selector that was not found
            tried_selectors: List of selector strings that were tried
        """
        self.selector_name = selector_name
        self.tried_selectors = tried_selectors or []
        message = f"Selector '{selector_name}' not found."
        if self.tried_selectors:
            message += f" Tried: {', '.join(self.tried_selectors)}"
        super().__init__(message, recoverable=True)


# Database Errors
class DatabaseError(BookingBotError):
    """Base database error."""

    def __init__(
        self,
        message: str = "Database error occurred",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class DatabaseNotConnectedError(DatabaseError):
    """Database connection is not established."""

    def __init__(self, message: str = "Database connection is not established"):
        super().__init__(message, recoverable=True)


class DatabasePoolTimeoutError(DatabaseError):
    """Timed out waiting for a connection from the pool."""

    def __init__(self, timeout: float, pool_size: int):
        super().__init__(
            f"Database connection pool exhausted (timeout: {timeout}s, pool_size: {pool_size})",
            recoverable=True,
            details={"timeout": timeout, "pool_size": pool_size},
        )


# Validation Errors
class ValidationError(BookingBotError):
    """Input validation failed."""

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, recoverable=False, details=details)
