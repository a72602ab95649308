"""DOM inspection primitives used by the booking state machine."""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Callable, List, Literal, Optional, Sequence

from loguru import logger
from playwright.async_api import Page

from ...constants import Timeouts
from ...utils.helpers import WaitUntil, normalize_text, safe_navigate

ElementState = Literal["attached", "visible"]


class PageInspector(ABC):
    """
    Minimal view of a browser page.

    Subclasses implement the primitives; the selector-probing and phrase
    matching built on top of them live here so that the booking flow can be
    driven against any implementation.
    """

    @abstractmethod
    async def goto(
        self, url: str, wait_until: WaitUntil = "networkidle", timeout: Optional[int] = None
    ) -> bool:
        """Navigate to ``url``; return False instead of raising on failure."""

    @abstractmethod
    async def is_present(
        self, selector: str, timeout: int = Timeouts.SELECTOR_PROBE, state: ElementState = "visible"
    ) -> bool:
        """Wait up to ``timeout`` ms for ``selector`` to reach ``state``."""

    @abstractmethod
    async def click(self, selector: str, timeout: int = Timeouts.SELECTOR_PROBE) -> None:
        """Click the first element matching ``selector``."""

    @abstractmethod
    async def fill(self, selector: str, value: str, timeout: int = Timeouts.SELECTOR_PROBE) -> None:
        """Fill the first input matching ``selector``."""

    @abstractmethod
    async def inner_texts(self, selector: str) -> List[str]:
        """Rendered text of every element matching ``selector``."""

    @abstractmethod
    async def body_text(self) -> str:
        """Whole visible page text."""

    @abstractmethod
    async def wait_for_network_idle(self, timeout: int) -> bool:
        """Wait for network settling; return False on timeout."""

    async def find_first_matching(
        self,
        selectors: Sequence[str],
        timeout: int = Timeouts.SELECTOR_PROBE,
        state: ElementState = "visible",
    ) -> Optional[str]:
        """
        Probe selectors in priority order.

        Args:
            selectors: Candidate selectors, highest priority first
            timeout: Per-selector timeout in ms
            state: Element state that counts as resolved

        Returns:
            The first selector that resolved, or None
        """
        for selector in selectors:
            try:
                if await self.is_present(selector, timeout=timeout, state=state):
                    return selector
            except Exception as e:
                logger.debug(f"Selector probe '{selector}' failed: {e}")
        return None

    async def find_phrase(
        self,
        phrases: Sequence[str],
        containers: Sequence[str] = (),
        body_phrases: Optional[Sequence[str]] = None,
    ) -> Optional[str]:
        """
        Look for a phrase in the containers, then in the page text.

        Matching is case-sensitive. Only the first element of each container
        selector is read, like ``document.querySelector``.

        Args:
            phrases: Phrases to look for inside the containers
            containers: Selectors of the elements to scan
            body_phrases: Phrases to look for in the whole visible text;
                defaults to ``phrases``, an empty sequence skips the page scan

        Returns:
            The text in which a phrase was found, or None
        """
        needles = [p for p in phrases if p]
        for container in containers:
            if not needles:
                break
            try:
                texts = await self.inner_texts(container)
            except Exception as e:
                logger.debug(f"Could not read '{container}': {e}")
                continue
            if texts and any(needle in texts[0] for needle in needles):
                return texts[0].strip()

        body_needles = needles if body_phrases is None else [p for p in body_phrases if p]
        if not body_needles:
            return None

        # Report the matching line rather than the whole page
        for line in (await self.body_text()).splitlines():
            if any(needle in line for needle in body_needles):
                return line.strip()
        return None

    async def contains_any_phrase(
        self,
        phrases: Sequence[str],
        containers: Sequence[str] = (),
        body_phrases: Optional[Sequence[str]] = None,
    ) -> bool:
        """Whether a phrase appears in the containers or the page text."""
        return await self.find_phrase(phrases, containers, body_phrases) is not None

    async def first_text(self, selectors: Sequence[str]) -> Optional[str]:
        """Text of the first non-empty element among ``selectors``."""
        for selector in selectors:
            try:
                texts = await self.inner_texts(selector)
            except Exception:
                continue
            for text in texts:
                if text.strip():
                    return normalize_text(text)
        return None


# Opens a page for one attempt and releases it on exit
SessionFactory = Callable[[], AsyncContextManager[PageInspector]]


class PlaywrightPageInspector(PageInspector):
    """PageInspector backed by a Playwright page."""

    def __init__(self, page: Page, navigation_timeout: int = Timeouts.NAVIGATION):
        """
        Initialize inspector.

        Args:
            page: Playwright page object
            navigation_timeout: Default navigation timeout in ms
        """
        self.page = page
        self.navigation_timeout = navigation_timeout

    async def goto(
        self, url: str, wait_until: WaitUntil = "networkidle", timeout: Optional[int] = None
    ) -> bool:
        return await safe_navigate(
            self.page, url, wait_until=wait_until, timeout=timeout or self.navigation_timeout
        )

    async def is_present(
        self, selector: str, timeout: int = Timeouts.SELECTOR_PROBE, state: ElementState = "visible"
    ) -> bool:
        try:
            await self.page.locator(selector).first.wait_for(state=state, timeout=timeout)
            return True
        except Exception:
            return False

    async def click(self, selector: str, timeout: int = Timeouts.SELECTOR_PROBE) -> None:
        await self.page.locator(selector).first.click(timeout=timeout)

    async def fill(self, selector: str, value: str, timeout: int = Timeouts.SELECTOR_PROBE) -> None:
        await self.page.locator(selector).first.fill(value, timeout=timeout)

    async def inner_texts(self, selector: str) -> List[str]:
        return await self.page.locator(selector).all_inner_texts()

    async def body_text(self) -> str:
        try:
            return await self.page.inner_text("body", timeout=Timeouts.SELECTOR_PROBE)
        except Exception as e:
            logger.debug(f"Could not read page text: {e}")
            return ""

    async def wait_for_network_idle(self, timeout: int) -> bool:
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout)
            return True
        except Exception:
            return False
