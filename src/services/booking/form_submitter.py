"""Guest request-form submission for a single appointment slot."""

import asyncio
from typing import Any, Dict, Optional, Union

from loguru import logger

from ...constants import Delays, LogEmoji, Timeouts
from ...core.enums import BookingStatus
from ...core.exceptions import NavigationError, SelectorNotFoundError
from ...core.logger import appointment_ctx
from ...models.schemas import PatientInfo
from ...repositories.appointment_status_repository import AppointmentStatusRepository
from ...utils.helpers import mask_sensitive_data
from ...utils.masking import mask_name
from ...utils.selectors import SelectorManager, get_selector_manager
from .availability_checker import AvailabilityChecker, default_session_factory
from .form_filler import FormFiller
from .page_inspector import PageInspector, SessionFactory
from .results import SubmissionResult

MSG_ALREADY_BOOKED_RECORDS = "This appointment slot is already booked in our records"
MSG_ALREADY_BOOKED_WEBSITE = "This appointment slot is already booked on the website"
MSG_NAVIGATION_FAILED = "Failed to load the appointment page"
MSG_EXPIRED = "Appointment expired"
MSG_NO_CONTINUE_BUTTON = "Could not find continue button"
MSG_NO_SUBMIT_BUTTON = "Could not submit the form"
MSG_SUBMITTED = "Appointment request submitted successfully"
MSG_UNVERIFIED = "Could not verify if appointment was booked successfully"


class FormSubmitter:
    """Drives the guest booking flow for one appointment URL."""

    def __init__(
        self,
        store: AppointmentStatusRepository,
        session_factory: Optional[SessionFactory] = None,
        selectors: Optional[SelectorManager] = None,
        checker: Optional[AvailabilityChecker] = None,
        form_filler: Optional[FormFiller] = None,
        navigation_timeout: Optional[int] = None,
        selector_timeout: int = Timeouts.SELECTOR_PROBE,
        settle_timeout: int = Timeouts.SUBMIT_SETTLE,
        guest_click_delay: float = Delays.AFTER_GUEST_CLICK,
    ):
        """
        Initialize form submitter.

        Args:
            store: Appointment status store
            session_factory: Opens a page session per attempt
            selectors: Selector and phrase configuration
            checker: Availability checker sharing the same store
            form_filler: Request form filler
            navigation_timeout: Page load timeout in ms (inspector default when None)
            selector_timeout: Per-selector probe timeout in ms
            settle_timeout: Bounded wait for network settling after submit, in ms
            guest_click_delay: Pause after the guest button click, in seconds
        """
        self.store = store
        self.session_factory = session_factory or default_session_factory()
        self.selectors = selectors or get_selector_manager()
        self.checker = checker or AvailabilityChecker(
            store, session_factory=self.session_factory, selectors=self.selectors
        )
        self.form_filler = form_filler or FormFiller(self.selectors)
        self.navigation_timeout = navigation_timeout
        self.selector_timeout = selector_timeout
        self.settle_timeout = settle_timeout
        self.guest_click_delay = guest_click_delay

    @classmethod
    def from_settings(
        cls, store: AppointmentStatusRepository, settings: Optional[Any] = None
    ) -> "FormSubmitter":
        """Build a submitter with timeouts taken from application settings."""
        if settings is None:
            from ...core.config.settings import get_settings

            settings = get_settings()
        return cls(
            store,
            navigation_timeout=settings.navigation_timeout_ms,
            selector_timeout=settings.selector_timeout_ms,
            settle_timeout=settings.submit_settle_timeout_ms,
        )

    async def submit(
        self, patient: Union[PatientInfo, Dict[str, Any]], href: str
    ) -> SubmissionResult:
        """
        Attempt to book the slot behind ``href`` for ``patient``.

        Never raises: every failure is reported through the result.

        Args:
            patient: Patient data to record and enter on the form
            href: Appointment booking URL

        Returns:
            SubmissionResult describing the outcome
        """
        token = appointment_ctx.set(href)
        try:
            if not isinstance(patient, PatientInfo):
                patient = PatientInfo.model_validate(patient)
            return await self._submit(patient, href)
        except Exception as e:
            logger.error(f"{LogEmoji.ERROR} Error in form submission: {e}")
            return SubmissionResult.failure(f"Error submitting form: {e}", error=str(e))
        finally:
            appointment_ctx.reset(token)

    async def _submit(self, patient: PatientInfo, href: str) -> SubmissionResult:
        logger.info(
            f"{LogEmoji.START} Starting form submission for "
            f"{mask_name(patient.first_name, patient.last_name)}"
        )

        existing = await self.store.find(href)
        if existing is not None and existing.is_booked:
            logger.warning("Skipping automation: appointment already marked as booked")
            return SubmissionResult.booked_elsewhere(MSG_ALREADY_BOOKED_RECORDS)

        current_status = existing.status if existing is not None else BookingStatus.UNKNOWN
        await self.store.upsert(
            href,
            patient,
            current_status,
            message=None if existing is not None else "Appointment request recorded",
        )

        async with self.session_factory() as page:
            return await self._drive(page, patient, href)

    async def _drive(self, page: PageInspector, patient: PatientInfo, href: str) -> SubmissionResult:
        """Walk the page from load to outcome detection."""
        if not await page.goto(href, timeout=self.navigation_timeout):
            error = NavigationError(href, "page did not finish loading")
            return SubmissionResult.failure(MSG_NAVIGATION_FAILED, error=error.message)

        evidence = await self.checker.is_booked_on_page(page)
        if evidence is not None:
            logger.warning(f"{LogEmoji.WARNING} Slot is already booked on the website")
            await self.checker.record_booked(href, evidence)
            return SubmissionResult.booked_elsewhere(MSG_ALREADY_BOOKED_WEBSITE)

        gate_result = await self._pass_guest_gate(page, patient, href)
        if gate_result is not None:
            return gate_result

        await self.form_filler.wait_for_form(page)
        await self.form_filler.fill(page, patient)

        submit_selectors = self.selectors.get_with_fallback("submit.button")
        submit_selector = await page.find_first_matching(
            submit_selectors, timeout=self.selector_timeout
        )
        if submit_selector is None:
            error = SelectorNotFoundError("submit.button", submit_selectors)
            logger.error(f"{LogEmoji.ERROR} Form submission failed - {error.message}")
            return SubmissionResult.failure(MSG_NO_SUBMIT_BUTTON, error=error.message)

        try:
            logger.info(f"Clicking submit button with selector: {submit_selector}")
            await page.click(submit_selector, timeout=self.selector_timeout)
        except Exception as e:
            logger.error(f"Submit button click failed: {e}")
            return SubmissionResult.failure(MSG_NO_SUBMIT_BUTTON, error=str(e))

        if not await page.wait_for_network_idle(self.settle_timeout):
            logger.debug("Network did not settle after submit, checking outcome anyway")

        return await self._detect_outcome(page, patient, href)

    async def _pass_guest_gate(
        self, page: PageInspector, patient: PatientInfo, href: str
    ) -> Optional[SubmissionResult]:
        """
        Click through the "continue as guest" step.

        Returns:
            None when the gate was passed, otherwise the terminal result
        """
        guest_selectors = self.selectors.get_with_fallback("consent.guest_button")
        guest_selector = await page.find_first_matching(
            guest_selectors, timeout=self.selector_timeout
        )

        if guest_selector is None:
            expired_text = await page.find_phrase(
                self.selectors.get_list("consent.expired_phrases"),
                self.selectors.get_list("consent.expired_banner"),
                body_phrases=(),
            )
            if expired_text is not None:
                logger.warning(f"{LogEmoji.WARNING} Appointment expired")
                await self._record(href, patient, BookingStatus.EXPIRED, MSG_EXPIRED)
                return SubmissionResult.failure(MSG_EXPIRED, status=BookingStatus.EXPIRED)

            error = SelectorNotFoundError("consent.guest_button", guest_selectors)
            logger.error(f"{LogEmoji.ERROR} Continue button not found - {error.message}")
            return SubmissionResult.failure(MSG_NO_CONTINUE_BUTTON, error=error.message)

        try:
            logger.info(f"Clicking continue button with selector: {guest_selector}")
            await page.click(guest_selector, timeout=self.selector_timeout)
        except Exception as e:
            logger.error(f"Continue button click failed: {e}")
            return SubmissionResult.failure(MSG_NO_CONTINUE_BUTTON, error=str(e))

        if self.guest_click_delay:
            await asyncio.sleep(self.guest_click_delay)
        return None

    async def _detect_outcome(
        self, page: PageInspector, patient: PatientInfo, href: str
    ) -> SubmissionResult:
        confirmation = await page.find_phrase(
            self.selectors.get_list("submit.success_phrases"),
            self.selectors.get_list("submit.success_containers"),
        )
        if confirmation is not None:
            logger.info(f"{LogEmoji.SUCCESS} Form submission successful")
            await self._record(href, patient, BookingStatus.BOOKED, confirmation)
            return SubmissionResult(
                success=True,
                message=MSG_SUBMITTED,
                status=BookingStatus.BOOKED,
                confirmation=confirmation,
            )

        error_text = await page.first_text(self.selectors.get_list("submit.error_containers"))
        logger.warning(
            "Form submission completed but success confirmation not found"
            + (f": {mask_sensitive_data(error_text)}" if error_text else "")
        )
        return SubmissionResult.failure(MSG_UNVERIFIED, error=error_text)

    async def _record(
        self, href: str, patient: PatientInfo, status: BookingStatus, message: str
    ) -> None:
        """Persist a terminal status; the page outcome stands even if this fails."""
        try:
            await self.store.upsert(href, patient, status, message=message)
        except Exception as e:
            logger.error(f"Failed to record {status.value} status: {e}")
