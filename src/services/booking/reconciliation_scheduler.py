"""Periodic reconciliation loop."""

import asyncio
from typing import Optional

from loguru import logger

from ...constants import Intervals
from .reconciliation_processor import ReconciliationProcessor
from .results import ProcessingSummary


class ReconciliationScheduler:
    """Runs the reconciliation processor on an interval until shutdown."""

    def __init__(
        self,
        processor: ReconciliationProcessor,
        interval_seconds: float = Intervals.RECONCILIATION_DEFAULT,
        shutdown_event: Optional[asyncio.Event] = None,
    ):
        """
        Initialize scheduler.

        Args:
            processor: Processor to run each cycle
            interval_seconds: Pause between cycles
            shutdown_event: Event that stops the loop (created when omitted)
        """
        self.processor = processor
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event or asyncio.Event()
        self._trigger_event = asyncio.Event()
        self.cycles = 0
        self.last_summary: Optional[ProcessingSummary] = None

    def trigger(self) -> None:
        """Wake the loop for an immediate cycle."""
        self._trigger_event.set()

    def stop(self) -> None:
        """Ask the loop to exit after the current cycle."""
        self.shutdown_event.set()

    async def _wait_or_shutdown(self, seconds: float) -> bool:
        """
        Wait for the specified duration or until shutdown/trigger is requested.

        Args:
            seconds: Number of seconds to wait

        Returns:
            True if shutdown was requested during wait, False on timeout or trigger
        """
        if self.shutdown_event.is_set():
            return True
        shutdown_task = asyncio.create_task(self.shutdown_event.wait())
        trigger_task = asyncio.create_task(self._trigger_event.wait())

        try:
            done, pending = await asyncio.wait(
                {shutdown_task, trigger_task},
                timeout=seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            if shutdown_task in done:
                return True
            if trigger_task in done:
                self._trigger_event.clear()
            return False
        finally:
            for task in (shutdown_task, trigger_task):
                if not task.done():
                    task.cancel()

    async def run_once(self) -> Optional[ProcessingSummary]:
        """Run a single cycle; errors are logged and swallowed."""
        self.cycles += 1
        try:
            self.last_summary = await self.processor.process_pending()
        except Exception as e:
            logger.error(f"Reconciliation cycle {self.cycles} failed: {e}")
            return None
        return self.last_summary

    async def run(self) -> None:
        """Loop until the shutdown event is set."""
        logger.info(f"Reconciliation scheduler started (interval: {self.interval_seconds}s)")
        while not self.shutdown_event.is_set():
            await self.run_once()
            if await self._wait_or_shutdown(self.interval_seconds):
                break
        logger.info("Reconciliation scheduler stopped")
