"""Browser session management.

Public API:
- BrowserManager: Browser lifecycle and scoped page sessions
"""

from .browser_manager import BLOCKED_RESOURCE_TYPES, BrowserManager

__all__ = [
    "BLOCKED_RESOURCE_TYPES",
    "BrowserManager",
]
