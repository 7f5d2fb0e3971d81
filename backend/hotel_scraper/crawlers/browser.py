"""
Browser crawler for client-side rendered result pages.

Uses Playwright (headless Chromium) to load a page, wait until the
listing container is visible, scroll to trigger lazy-loaded cards and
return the rendered DOM.
"""

import asyncio
import os
from typing import Optional
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)
import logging

from ..base import FetchError, FetchTimeout

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

LAUNCH_ARGS = [
    '--disable-gpu',
    '--no-sandbox',
    '--disable-dev-shm-usage',
    '--disable-web-security',
    '--disable-notifications',
    '--disable-popup-blocking',
]


class BrowserCrawler:
    """
    Playwright crawler for JavaScript-rendered pages.

    The browser is launched lazily on the first fetch and one context is
    reused for the whole run; every fetch gets its own page, closed
    afterwards.
    """

    def __init__(
        self,
        timeout: float = 45.0,
        settle_time: float = 2.0,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initialize the browser crawler.

        Args:
            timeout: Seconds allowed per fetch (navigation + waiting for listings)
            settle_time: Seconds to wait after scrolling for lazy content
            headless: Run browser in headless mode
            user_agent: User agent string for the browser context
        """
        self.timeout = timeout
        self.settle_time = settle_time
        self.headless = headless
        self.user_agent = user_agent
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._playwright = None

    async def _init_browser(self):
        """Initialize browser and context if not already done."""
        if self._context is not None and self._browser is not None and self._browser.is_connected():
            return

        await self._cleanup()
        try:
            self._playwright = await async_playwright().start()

            chromium_path = self._playwright.chromium.executable_path
            if not chromium_path or not os.path.exists(chromium_path):
                raise FetchError("Chromium browser not found. Run: playwright install chromium")

            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )
            self._context = await self._browser.new_context(
                viewport={'width': 1920, 'height': 1080},
                user_agent=self.user_agent,
                locale='en-US',
                ignore_https_errors=True,
            )
        except PlaywrightError as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self._cleanup()
            raise FetchError(f"Browser could not be started: {e}") from e
        except FetchError:
            await self._cleanup()
            raise

    async def _cleanup(self):
        """Clean up browser resources with timeouts to prevent hanging."""
        cleanup_timeout = 2.0  # 2 second timeout per cleanup operation

        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except PlaywrightError as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    async def _render(self, page: Page, url: str, wait_selector: Optional[str]) -> str:
        timeout_ms = int(self.timeout * 1000)

        response = await page.goto(url, wait_until='domcontentloaded', timeout=timeout_ms)
        if response and response.status >= 400:
            raise FetchError(f"HTTP {response.status} for {url}")

        if wait_selector:
            await page.wait_for_selector(wait_selector, state='visible', timeout=timeout_ms)

        # Property cards below the fold are only rendered after scrolling
        await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")
        await asyncio.sleep(self.settle_time)

        return await page.content()

    async def fetch(self, url: str, wait_selector: Optional[str] = None) -> str:
        """
        Fetch a URL with the browser.

        Args:
            url: URL to fetch
            wait_selector: CSS selector that must become visible

        Returns:
            Rendered HTML content as string

        Raises:
            FetchTimeout: If the page or the selector did not load in time
            FetchError: On navigation failure or HTTP error status
        """
        await self._init_browser()
        logger.debug(f"BrowserCrawler fetching: {url}")

        page: Optional[Page] = None
        try:
            page = await self._context.new_page()
            # The per-call timeouts bound each step; this bounds the sum
            return await asyncio.wait_for(
                self._render(page, url, wait_selector),
                timeout=self.timeout + self.settle_time,
            )
        except (PlaywrightTimeoutError, asyncio.TimeoutError) as e:
            what = f"selector {wait_selector!r}" if wait_selector else "page"
            raise FetchTimeout(f"Timed out after {self.timeout:.0f}s waiting for {what} on {url}") from e
        except PlaywrightError as e:
            if not self._browser or not self._browser.is_connected():
                # Force a relaunch on the next fetch
                self._context = None
            raise FetchError(f"Navigation error for {url}: {e}") from e
        finally:
            if page is not None:
                try:
                    await page.close()
                except PlaywrightError:
                    pass  # Page already gone with its context

    async def close(self):
        """Close the browser and cleanup resources."""
        await self._cleanup()

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self._cleanup()
