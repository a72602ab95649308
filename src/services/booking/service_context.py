"""
Service context and factory for booking dependencies.

Groups the store, browser session factory and booking services so that the
API, the CLI and the scheduler wire them the same way.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from ...core.config.settings import Settings, get_settings
from ...core.infra.retry import RetryPolicy
from ...models.database import Database
from ...repositories.appointment_status_repository import AppointmentStatusRepository
from ...repositories.clinician_repository import ClinicianRepository
from ...utils.selectors import SelectorManager
from ..bot.browser_manager import BrowserManager
from .availability_checker import AvailabilityChecker
from .form_filler import FormFiller
from .form_submitter import FormSubmitter
from .page_inspector import SessionFactory
from .reconciliation_processor import ReconciliationProcessor


@dataclass(frozen=True)
class BookingServiceContext:
    """
    Booking services sharing one store and one browser configuration.

    Attributes:
        store: Appointment status store
        checker: Availability checker
        submitter: Form submission driver
        processor: Reconciliation processor
    """

    store: AppointmentStatusRepository
    checker: AvailabilityChecker
    submitter: FormSubmitter
    processor: ReconciliationProcessor


class BookingServiceFactory:
    """Factory for BookingServiceContext."""

    @staticmethod
    def create(
        db: Database,
        settings: Optional[Settings] = None,
        session_factory: Optional[SessionFactory] = None,
        selectors: Optional[SelectorManager] = None,
    ) -> BookingServiceContext:
        """
        Build the booking services.

        Args:
            db: Connected database
            settings: Application settings (defaults to get_settings())
            session_factory: Page session factory (defaults to a BrowserManager)
            selectors: Selector configuration (defaults to settings.selectors_file)

        Returns:
            BookingServiceContext
        """
        settings = settings or get_settings()
        selectors = selectors or SelectorManager(settings.selectors_file)
        session_factory = session_factory or BrowserManager.from_settings(settings).session

        store = AppointmentStatusRepository(db, ClinicianRepository(db))
        checker = AvailabilityChecker(store, session_factory=session_factory, selectors=selectors)
        submitter = FormSubmitter(
            store,
            session_factory=session_factory,
            selectors=selectors,
            checker=checker,
            form_filler=FormFiller(selectors),
            navigation_timeout=settings.navigation_timeout_ms,
            selector_timeout=settings.selector_timeout_ms,
            settle_timeout=settings.submit_settle_timeout_ms,
        )
        processor = ReconciliationProcessor(
            store,
            submitter,
            concurrency=settings.queue_concurrency,
            retry_policy=RetryPolicy.from_settings(settings),
        )
        logger.debug(
            f"Booking services ready (concurrency={settings.queue_concurrency}, "
            f"max_attempts={settings.retry_max_attempts})"
        )
        return BookingServiceContext(
            store=store, checker=checker, submitter=submitter, processor=processor
        )
