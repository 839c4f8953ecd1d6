"""
Direct Playwright Client
========================

Launches Playwright in-process and owns the browser, context and default
page for one scenario.

Usage:
    from todo_suite.playwright_client import PlaywrightClient

    async with PlaywrightClient(headless=True) as client:
        await client.page.goto("https://app.test")
"""

import logging
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)

BROWSER_TYPES = ("chromium", "firefox", "webkit")


class PlaywrightClient:
    """
    Direct Playwright client with full API access (no server required).

    Example:
        async with PlaywrightClient() as client:
            page = client.page
            await page.goto("https://example.com")
    """

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: bool = True,
        timeout: int = 30000,
    ):
        """
        Initialize Playwright client.

        Args:
            browser_type: Browser to use (chromium, firefox, webkit)
            headless: Run in headless mode
            timeout: Default timeout in milliseconds for every page action
        """
        if browser_type not in BROWSER_TYPES:
            raise ValueError(f"Unsupported browser type: {browser_type} (expected one of {BROWSER_TYPES})")
        self.browser_type = browser_type
        self.headless = headless
        self.timeout = timeout

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self):
        """Launch the browser and open the default context and page."""
        self._playwright = await async_playwright().start()

        launcher = getattr(self._playwright, self.browser_type)
        self._browser = await launcher.launch(headless=self.headless)
        logger.info("Launched %s (headless=%s)", self.browser_type, self.headless)

        self._context = await self._browser.new_context()
        self._context.set_default_timeout(self.timeout)

        self._page = await self._context.new_page()

    async def close(self):
        """Close all connections and cleanup resources."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def page(self) -> Page:
        """Get the default page."""
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page
