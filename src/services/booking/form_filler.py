"""Form filling for the appointment request form."""

import asyncio
import logging
from typing import List, Optional, Tuple

from ...constants import Delays, Timeouts
from ...models.schemas import PatientInfo
from ...utils.selectors import SelectorManager, get_selector_manager
from .page_inspector import PageInspector

logger = logging.getLogger(__name__)

# Request-form inputs, in the order they appear on the page
FORM_FIELDS: Tuple[str, ...] = (
    "first_name",
    "middle_name",
    "last_name",
    "preferred_name",
    "date_of_birth",
    "phone",
    "email",
    "comments",
)


class FormFiller:
    """Fills the guest request form from patient data."""

    def __init__(
        self,
        selectors: Optional[SelectorManager] = None,
        field_delay: float = Delays.BETWEEN_FIELDS,
    ):
        """
        Initialize form filler.

        Args:
            selectors: Selector configuration
            field_delay: Pause between fields in seconds
        """
        self.selectors = selectors or get_selector_manager()
        self.field_delay = field_delay

    async def wait_for_form(self, page: PageInspector, timeout: int = Timeouts.REQUEST_FORM) -> bool:
        """
        Wait for the request form to appear.

        Args:
            page: Page inspector
            timeout: Maximum wait time in ms

        Returns:
            True if the form became visible
        """
        container = self.selectors.get("form.container")
        if not container:
            return False
        visible = await page.is_present(container, timeout=timeout)
        if not visible:
            logger.debug("Request form not visible, filling anyway")
        return visible

    async def fill(self, page: PageInspector, patient: PatientInfo) -> List[str]:
        """
        Fill every recognized field that has a non-empty value.

        A field that cannot be filled is logged and skipped.

        Args:
            page: Page inspector
            patient: Patient data

        Returns:
            Names of the fields that were filled
        """
        filled: List[str] = []
        for name in FORM_FIELDS:
            value = getattr(patient, name)
            if not value:
                continue
            selector = self.selectors.get(f"form.{name}")
            if not selector:
                logger.warning(f"No selector configured for field: {name}")
                continue
            try:
                await page.fill(selector, value)
                filled.append(name)
            except Exception as e:
                logger.warning(f"Could not fill field {name}: {e}")
                continue
            if self.field_delay:
                await asyncio.sleep(self.field_delay)

        logger.info(f"Filled {len(filled)} form field(s)")
        return filled
