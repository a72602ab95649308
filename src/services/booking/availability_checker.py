"""Slot availability check against the store and the live page."""

from typing import Optional

from loguru import logger

from ...constants import LogEmoji
from ...core.enums import BookingStatus
from ...core.logger import appointment_ctx
from ...repositories.appointment_status_repository import AppointmentStatusRepository
from ...utils.selectors import SelectorManager, get_selector_manager
from .page_inspector import PageInspector, SessionFactory


def default_session_factory() -> SessionFactory:
    """Session factory backed by a BrowserManager built from settings."""
    from ..bot.browser_manager import BrowserManager

    return BrowserManager.from_settings().session


class AvailabilityChecker:
    """Decides whether an appointment slot has already been taken."""

    def __init__(
        self,
        store: AppointmentStatusRepository,
        session_factory: Optional[SessionFactory] = None,
        selectors: Optional[SelectorManager] = None,
    ):
        """
        Initialize availability checker.

        Args:
            store: Appointment status store
            session_factory: Opens a page session per check
            selectors: Selector and phrase configuration
        """
        self.store = store
        self.session_factory = session_factory or default_session_factory()
        self.selectors = selectors or get_selector_manager()

    async def is_booked_on_page(self, page: PageInspector) -> Optional[str]:
        """
        Scan an already-loaded page for "slot taken" signals.

        Args:
            page: Inspector for the loaded appointment page

        Returns:
            The text that matched, or None if the slot looks available
        """
        return await page.find_phrase(
            self.selectors.get_list("availability.booked_phrases"),
            self.selectors.get_list("availability.banner_containers"),
            body_phrases=self.selectors.get_list("availability.booked_body_phrases"),
        )

    async def record_booked(self, href: str, evidence: str) -> None:
        """Persist the booked status; failures are logged, never raised."""
        try:
            await self.store.upsert(
                href, None, BookingStatus.BOOKED, message=f"Slot already booked: {evidence}"
            )
        except Exception as e:
            logger.error(f"Failed to record booked status for {href}: {e}")

    async def is_booked(self, href: str) -> bool:
        """
        Check whether the slot behind ``href`` is already booked.

        The store is consulted first; only records not yet known to be booked
        trigger a page load. Any page error is treated as "available".

        Args:
            href: Appointment booking URL

        Returns:
            True if the slot is booked
        """
        token = appointment_ctx.set(href)
        try:
            try:
                record = await self.store.find(href)
            except Exception as e:
                logger.warning(f"Status lookup failed, checking the website instead: {e}")
                record = None

            if record is not None and record.is_booked:
                logger.info("Appointment already marked as booked, skipping website check")
                return True

            logger.info(f"{LogEmoji.CALENDAR} Checking availability on the website")
            try:
                async with self.session_factory() as page:
                    if not await page.goto(href):
                        return False
                    evidence = await self.is_booked_on_page(page)
            except Exception as e:
                logger.error(f"Error checking appointment slot: {e}")
                return False

            if evidence is None:
                logger.info(f"{LogEmoji.SUCCESS} Appointment slot is available")
                return False

            logger.warning(f"{LogEmoji.WARNING} Appointment slot is already booked on the website")
            await self.record_booked(href, evidence)
            return True
        finally:
            appointment_ctx.reset(token)
