"""Browser lifecycle and page session management."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, FrozenSet, Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Route,
    async_playwright,
)

from ...constants import Timeouts
from ...core.exceptions import BrowserConnectionError
from ..booking.page_inspector import PlaywrightPageInspector

# Sub-resources that are never needed to read or submit the request form
BLOCKED_RESOURCE_TYPES: FrozenSet[str] = frozenset({"image", "font", "media"})

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/135.0.0.0 Safari/537.36"
)


async def _block_heavy_resources(route: Route) -> None:
    """Abort image, font and media requests; let everything else through."""
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class BrowserManager:
    """Connects to (or launches) Chromium and hands out scoped page sessions."""

    def __init__(
        self,
        ws_endpoint: Optional[str] = None,
        headless: bool = True,
        navigation_timeout: int = Timeouts.NAVIGATION,
        block_resources: bool = True,
    ):
        """
        Initialize browser manager.

        Args:
            ws_endpoint: Remote browser endpoint; a local Chromium is launched when None
            headless: Launch local browser headless
            navigation_timeout: Default navigation timeout in ms
            block_resources: Abort image/font/media requests
        """
        self.ws_endpoint = ws_endpoint
        self.headless = headless
        self.navigation_timeout = navigation_timeout
        self.block_resources = block_resources
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    @classmethod
    def from_settings(cls, settings: Optional[Any] = None) -> "BrowserManager":
        """Build a manager from application settings."""
        if settings is None:
            from ...core.config.settings import get_settings

            settings = get_settings()
        return cls(
            ws_endpoint=settings.browser_ws_endpoint,
            headless=settings.headless,
            navigation_timeout=settings.navigation_timeout_ms,
        )

    async def start(self) -> None:
        """Start Playwright and obtain a browser context."""
        if self.browser is not None:
            logger.warning("Browser already started")
            return

        try:
            self.playwright = await async_playwright().start()
            if self.ws_endpoint:
                self.browser = await self.playwright.chromium.connect_over_cdp(self.ws_endpoint)
                logger.debug("Connected to remote browser")
            else:
                self.browser = await self.playwright.chromium.launch(
                    headless=self.headless,
                    args=["--disable-blink-features=AutomationControlled"],
                )
                logger.debug("Launched local browser")

            context_options: Dict[str, Any] = {
                "viewport": {"width": 1366, "height": 900},
                "user_agent": DEFAULT_USER_AGENT,
                "ignore_https_errors": True,
            }
            self.context = await self.browser.new_context(**context_options)
            self.context.set_default_navigation_timeout(self.navigation_timeout)
        except Exception as e:
            await self.close()
            raise BrowserConnectionError(
                f"Browser start failed: {e}", endpoint=self.ws_endpoint
            ) from e

    async def close(self) -> None:
        """Clean up browser resources; safe to call more than once."""
        if self.context:
            try:
                await self.context.close()
            except Exception as e:
                logger.debug(f"Error closing browser context: {e}")
            self.context = None

        if self.browser:
            try:
                await self.browser.close()
            except Exception as e:
                logger.debug(f"Error closing browser: {e}")
            self.browser = None

        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

        logger.debug("Browser resources cleaned up")

    async def new_page(self) -> Page:
        """
        Create a new page, with sub-resource blocking when enabled.

        Returns:
            New Page instance

        Raises:
            RuntimeError: If browser context is not initialized
        """
        if self.context is None:
            raise RuntimeError("Browser context is not initialized. Call start() first.")

        page = await self.context.new_page()
        if self.block_resources:
            await page.route("**/*", _block_heavy_resources)
        return page

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PlaywrightPageInspector]:
        """
        Open a fresh browser session for one booking attempt.

        The browser is released on every exit path, including errors raised by
        the caller inside the ``async with`` block.

        Yields:
            Inspector bound to a new page

        Raises:
            BrowserConnectionError: If the browser cannot be started
        """
        manager = BrowserManager(
            ws_endpoint=self.ws_endpoint,
            headless=self.headless,
            navigation_timeout=self.navigation_timeout,
            block_resources=self.block_resources,
        )
        await manager.start()
        try:
            page = await manager.new_page()
            yield PlaywrightPageInspector(page, navigation_timeout=self.navigation_timeout)
        finally:
            await manager.close()

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
