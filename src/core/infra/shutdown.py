"""
Shutdown and signal handling module.

Handles the shutdown event shared by long-running modes and resource cleanup.
"""

import asyncio
import signal
from typing import Optional

from loguru import logger

from src.constants import Timeouts

SHUTDOWN_TIMEOUT = Timeouts.SHUTDOWN_TIMEOUT

_shutdown_event: Optional[asyncio.Event] = None


def get_shutdown_event() -> Optional[asyncio.Event]:
    """Get the process-wide shutdown event, if one was installed."""
    return _shutdown_event


def set_shutdown_event(event: Optional[asyncio.Event]) -> None:
    """Install (or clear) the process-wide shutdown event."""
    global _shutdown_event
    _shutdown_event = event


def setup_signal_handlers(event: asyncio.Event) -> None:
    """
    Set the shutdown event on SIGINT/SIGTERM.

    Must be called from inside the running event loop.

    Args:
        event: Event the long-running loops watch
    """
    set_shutdown_event(event)
    loop = asyncio.get_running_loop()

    def handle_signal(signame: str) -> None:
        if event.is_set():
            logger.warning(f"Received {signame} again, shutdown already in progress")
            return
        logger.info(f"Received {signame}, initiating graceful shutdown...")
        event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, handle_signal, sig.name)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            signal.signal(sig, lambda signum, frame: event.set())


async def safe_shutdown_cleanup() -> None:
    """Close shared resources, bounded by SHUTDOWN_TIMEOUT."""
    from src.models.db_factory import DatabaseFactory

    try:
        await asyncio.wait_for(DatabaseFactory.close_instance(), timeout=SHUTDOWN_TIMEOUT)
    except asyncio.TimeoutError:
        logger.error(f"Database close timed out after {SHUTDOWN_TIMEOUT}s")
    except Exception as e:
        logger.error(f"Error closing database: {e}")
