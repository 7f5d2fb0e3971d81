"""
Static HTML crawler using httpx.

This crawler does not execute JavaScript. It is meant for static mirrors
or pre-rendered pages of a results site and is faster and lighter than
the Playwright-based crawler.
"""

from typing import Optional, Dict
from bs4 import BeautifulSoup
import httpx
import logging

from ..base import FetchError, FetchTimeout

logger = logging.getLogger(__name__)


class StaticCrawler:
    """
    Wrapper for fetching static HTML pages.

    Uses httpx for async HTTP requests and BeautifulSoup for the optional
    listing-container check. Retries are left to the control loop.
    """

    def __init__(
        self,
        timeout: float = 45.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the static crawler.

        Args:
            timeout: Request timeout in seconds
            headers: Custom HTTP headers
            transport: Optional httpx transport (e.g. httpx.MockTransport)
        """
        self.timeout = timeout
        self.headers = headers or {
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
            'Accept-Encoding': 'gzip, deflate',  # Some sites have issues with brotli
        }
        self.transport = transport
        # Reusable HTTP client with connection pooling
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client with connection pooling."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                follow_redirects=True,
                timeout=self.timeout,
                headers=self.headers,
                transport=self.transport,
                limits=httpx.Limits(
                    max_keepalive_connections=5,
                    max_connections=10,
                    keepalive_expiry=30.0
                )
            )
        return self._client

    async def close(self):
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, wait_selector: Optional[str] = None) -> str:
        """
        Fetch a URL and return HTML content.

        Args:
            url: URL to fetch
            wait_selector: CSS selector that must be present in the response;
                a static page cannot render it later, so absence is a timeout

        Returns:
            HTML content as string

        Raises:
            FetchTimeout: On request timeout or missing listing container
            FetchError: On connection failure or HTTP error status
        """
        logger.debug(f"StaticCrawler fetching: {url}")
        client = await self._get_client()

        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise FetchTimeout(f"Timed out after {self.timeout:.0f}s fetching {url}: {e}") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(f"HTTP {e.response.status_code} for {url}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Request failed for {url}: {e}") from e

        html = response.text
        if wait_selector and not BeautifulSoup(html, 'html.parser').select_one(wait_selector):
            raise FetchTimeout(f"Selector {wait_selector!r} not present in {url}")
        return html

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
