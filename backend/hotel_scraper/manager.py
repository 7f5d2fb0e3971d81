"""
Scraper Manager - drives the pagination loop.

Fetches result pages one at a time, merges each page into a bounded
collection and decides when to stop: target reached, a page without
listings, retries exhausted, or cancellation.
"""

import asyncio
import threading
from typing import Callable, Dict, Iterable, Optional, Tuple, Type
from datetime import datetime, timezone
import logging

from .base import (
    BaseScraper,
    Colors,
    EmptyResultError,
    FetchError,
    HotelRecord,
    LoopState,
    ParseError,
    RetryExhaustedError,
    ScrapeCancelledException,
    ScrapeResult,
    ScraperType,
    SiteConfig,
)
from .config import get_site_config
from .crawlers import BrowserCrawler, StaticCrawler
from .settings import Settings, settings as default_settings

# Import all implemented scrapers
from .sites.booking import BookingScraper

logger = logging.getLogger('scraper.manager')


# Registry of implemented scrapers
SCRAPER_REGISTRY: Dict[str, Type[BaseScraper]] = {
    'booking': BookingScraper,
}


class HotelCollection:
    """
    Ordered, append-only hotel list bounded at the run target.

    All reads and writes go through one lock, so a batch is truncated and
    appended atomically with respect to the target check.
    """

    def __init__(self, target: int):
        if target < 1:
            raise ValueError(f"target must be >= 1, got {target}")
        self.target = target
        self._hotels: list = []
        self._lock = threading.Lock()

    def add_batch(self, hotels: Iterable[HotelRecord]) -> int:
        """
        Append as many hotels as fit under the target.

        Returns:
            Number of hotels appended
        """
        with self._lock:
            remaining = self.target - len(self._hotels)
            if remaining <= 0:
                return 0
            batch = list(hotels)[:remaining]
            self._hotels.extend(batch)
            return len(batch)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hotels)

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._hotels) >= self.target

    def snapshot(self) -> Tuple[HotelRecord, ...]:
        with self._lock:
            return tuple(self._hotels)


class ScraperManager:
    """
    Runs one scraper page by page until the target is reached.

    Usage:
        scraper = get_scraper('booking', 'United States')
        manager = ScraperManager(scraper, target=200)
        try:
            result = await manager.run()
        finally:
            await scraper.close()

    Per-page fetch and parse errors are retried on the same page, waiting
    the polite delay between attempts, up to `max_page_retries` retries
    (0 retries forever). Only an empty final collection, exhausted
    retries and cancellation end the run with an exception.
    """

    def __init__(
        self,
        scraper: BaseScraper,
        target: int,
        page_delay: float = 5.0,
        max_page_retries: int = 5,
        retry_backoff: float = 1.0,
        max_pages: Optional[int] = None,
        deadline: Optional[float] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ):
        """
        Initialize the manager.

        Args:
            scraper: Page scraper for one site and query
            target: Maximum number of hotels to collect
            page_delay: Seconds to wait between page requests
            max_page_retries: Retries per page before giving up (0 = unlimited)
            retry_backoff: Delay multiplier per consecutive failed attempt
            max_pages: Stop after this many pages were consumed
            deadline: Cancel the run after this many seconds
            on_progress: Called with (collected, target) after each merge
        """
        if max_page_retries < 0:
            raise ValueError("max_page_retries must be >= 0")
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if deadline is not None and deadline <= 0:
            raise ValueError("deadline must be > 0")
        self.scraper = scraper
        self.collection = HotelCollection(target)
        self.page_delay = page_delay
        self.max_page_retries = max_page_retries
        self.retry_backoff = retry_backoff
        self.max_pages = max_pages
        self.deadline = deadline
        self.on_progress = on_progress
        self.state = LoopState.RUNNING
        self.result = ScrapeResult(
            source=scraper.config.short_name,
            query=scraper.query,
            target=target,
            started_at=datetime.now(timezone.utc),
        )
        self._cancel_event = asyncio.Event()

    @property
    def target(self) -> int:
        return self.collection.target

    def cancel(self):
        """Abort the run; a pending fetch or delay returns immediately."""
        if not self._cancel_event.is_set():
            logger.warning(Colors.yellow("Cancellation requested, stopping..."))
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def _until_cancelled(self, coro):
        """Await `coro` unless cancel() is called first."""
        if self.cancelled:
            coro.close()
            raise ScrapeCancelledException("Run cancelled")

        task = asyncio.ensure_future(coro)
        waiter = asyncio.ensure_future(self._cancel_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if task.cancelled():
            raise ScrapeCancelledException("Run cancelled")
        return task.result()

    async def _pause(self, seconds: float):
        """Sleep for `seconds` unless cancel() is called first."""
        if self.cancelled:
            raise ScrapeCancelledException("Run cancelled")
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise ScrapeCancelledException("Run cancelled")

    def _report_progress(self, count: int):
        logger.info(Colors.green(f"Total hotels found: {count}/{self.target}"))
        if self.on_progress is not None:
            self.on_progress(count, self.target)

    def _finish(self, state: LoopState):
        self.state = state
        self.result.state = state
        self.result.hotels = self.collection.snapshot()
        self.result.completed_at = datetime.now(timezone.utc)

    async def _loop(self):
        page_index = 0
        attempts = 0

        while not self.state.is_terminal:
            logger.info(Colors.cyan(f"Scraping page {page_index + 1}..."))

            try:
                hotels = await self._until_cancelled(self.scraper.scrape_page(page_index))
            except (FetchError, ParseError) as e:
                attempts += 1
                self.result.errors += 1
                self.result.error_details.append({
                    'page': page_index + 1,
                    'attempt': attempts,
                    'error': str(e),
                })
                logger.error(Colors.red(f"Error scraping page {page_index + 1}: {e}"))

                if self.max_page_retries and attempts > self.max_page_retries:
                    self.state = LoopState.FAILED
                    raise RetryExhaustedError(page_index, attempts, e) from e

                await self._pause(self.page_delay * (self.retry_backoff ** (attempts - 1)))
                continue

            attempts = 0
            self.result.pages += 1

            if not hotels:
                logger.info(Colors.yellow(f"No more hotels found on page {page_index + 1}. Stopping."))
                self.state = LoopState.STOPPED_EXHAUSTED
                break

            self.collection.add_batch(hotels)
            count = len(self.collection)
            self._report_progress(count)

            if count >= self.target:
                logger.info(Colors.yellow("Reached target number of hotels. Stopping."))
                self.state = LoopState.STOPPED_COMPLETE
                break

            if self.max_pages is not None and self.result.pages >= self.max_pages:
                logger.info(Colors.yellow(f"Reached page limit ({self.max_pages}). Stopping."))
                self.state = LoopState.STOPPED_EXHAUSTED
                break

            page_index += 1
            await self._pause(self.page_delay)

    async def run(self) -> ScrapeResult:
        """
        Main entry point - collect hotels until a stop condition.

        Returns:
            ScrapeResult in state STOPPED_COMPLETE or STOPPED_EXHAUSTED

        Raises:
            EmptyResultError: If no hotel was collected
            RetryExhaustedError: If one page kept failing
            ScrapeCancelledException: If cancel() was called or the deadline passed;
                `self.result` still holds the hotels collected so far
        """
        if self.state is not LoopState.RUNNING:
            raise RuntimeError(f"Manager already finished in state {self.state.value}")

        logger.info(
            f"Starting scrape for {self.scraper.config.name}: "
            f"{Colors.bold(self.scraper.query)} (target {self.target})"
        )
        self.result.started_at = datetime.now(timezone.utc)

        deadline_handle = None
        if self.deadline is not None:
            deadline_handle = asyncio.get_running_loop().call_later(self.deadline, self.cancel)

        try:
            await self._loop()
        except ScrapeCancelledException:
            self._finish(LoopState.CANCELLED)
            logger.warning(Colors.yellow(f"Scrape cancelled with {self.result.total} hotels collected"))
            raise
        except asyncio.CancelledError:
            self._finish(LoopState.CANCELLED)
            raise
        except Exception:
            self._finish(LoopState.FAILED)
            raise
        finally:
            if deadline_handle is not None:
                deadline_handle.cancel()

        self._finish(self.state)

        if self.result.total == 0:
            raise EmptyResultError("No hotels were found during scraping")

        duration = self.result.duration_seconds or 0
        logger.info(
            f"✅ Scrape complete in {duration:.1f}s: {self.result.total} hotels "
            f"from {self.result.pages} page(s), {self.result.errors} errors ({self.state.value})"
        )
        return self.result


# Factory helpers

def create_crawler(config: SiteConfig, app_settings: Optional[Settings] = None):
    """
    Build the page fetcher a site needs.

    Args:
        config: Site configuration
        app_settings: Settings (defaults to the global instance)

    Returns:
        StaticCrawler or BrowserCrawler
    """
    app_settings = app_settings or default_settings
    if app_settings.static or config.scraper_type == ScraperType.STATIC:
        return StaticCrawler(timeout=app_settings.fetch_timeout)
    return BrowserCrawler(
        timeout=app_settings.fetch_timeout,
        settle_time=app_settings.settle_time,
        headless=app_settings.headless,
        user_agent=app_settings.user_agent,
    )


def get_scraper(
    site_key: str,
    query: str,
    crawler=None,
    app_settings: Optional[Settings] = None,
) -> BaseScraper:
    """
    Get a scraper instance for a site.

    Args:
        site_key: Site identifier (e.g., 'booking')
        query: Country or region to search for
        crawler: Page fetcher to use (built from settings when omitted)
        app_settings: Settings (defaults to the global instance)

    Raises:
        ValueError: If the site is unknown or not implemented
    """
    config = get_site_config(site_key)
    if site_key not in SCRAPER_REGISTRY:
        raise ValueError(f"Scraper not implemented for site: {site_key}")

    scraper_class = SCRAPER_REGISTRY[site_key]
    if crawler is None:
        crawler = create_crawler(config, app_settings)
    return scraper_class(query, crawler, config=config)


def get_implemented_scrapers() -> list:
    """Get list of implemented scraper keys."""
    return list(SCRAPER_REGISTRY.keys())


# Convenience function for standalone usage

async def scrape_hotels(
    query: str,
    target: int,
    site_key: str = 'booking',
    crawler=None,
    app_settings: Optional[Settings] = None,
) -> ScrapeResult:
    """
    Scrape up to `target` hotels for `query` and close the crawler.

    Args:
        query: Country or region name
        target: Maximum number of hotels
        site_key: Site identifier
        crawler: Optional page fetcher
        app_settings: Settings (defaults to the global instance)

    Returns:
        ScrapeResult
    """
    app_settings = app_settings or default_settings
    scraper = get_scraper(site_key, query, crawler=crawler, app_settings=app_settings)
    manager = ScraperManager(
        scraper,
        target,
        page_delay=app_settings.page_delay,
        max_page_retries=app_settings.max_page_retries,
        retry_backoff=app_settings.retry_backoff,
        max_pages=app_settings.max_pages,
    )
    try:
        return await manager.run()
    finally:
        await scraper.close()
