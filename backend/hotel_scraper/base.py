"""
Base classes for the hotel scraper.

This module defines the abstract page scraper, the data structures shared
by the crawlers, site scrapers and the control loop, and the error types
they raise.
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Any, Tuple
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone
from urllib.parse import quote_plus
import logging

logger = logging.getLogger(__name__)

# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    # Colors
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def blue(text):
        return f"{Colors.BLUE}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


# ============================================================
# ERRORS
# ============================================================

class ScraperError(Exception):
    """Base class for all scraper errors."""


class FetchError(ScraperError):
    """Navigation or HTTP failure while fetching a page."""


class FetchTimeout(FetchError):
    """The page, or its listing container, did not load within the time budget."""


class ParseError(ScraperError):
    """Rendered markup could not be parsed."""


class EmptyResultError(ScraperError):
    """The run finished without collecting a single hotel."""


class RetryExhaustedError(ScraperError):
    """A page kept failing after the configured number of retries."""

    def __init__(self, page_index: int, attempts: int, last_error: Optional[BaseException] = None):
        self.page_index = page_index
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Page {page_index + 1} failed {attempts} time(s); giving up. Last error: {last_error}"
        )


class ExportError(ScraperError):
    """Writing the output file failed."""


class ScrapeCancelledException(ScraperError):
    """The run was cancelled by the caller (signal, deadline or cancel())."""


# ============================================================
# DATA STRUCTURES
# ============================================================

class ScraperType(Enum):
    """Types of page fetchers based on site requirements."""
    STATIC = "static"           # httpx, no JS rendering
    JAVASCRIPT = "javascript"   # Playwright (JS rendering)


class LoopState(Enum):
    """States of the pagination control loop."""
    RUNNING = "running"
    STOPPED_COMPLETE = "stopped_complete"    # target reached
    STOPPED_EXHAUSTED = "stopped_exhausted"  # a page returned zero listings
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not LoopState.RUNNING


@dataclass(frozen=True)
class FieldRule:
    """One candidate lookup for a record field: the CSS selector to read text from."""
    field: str
    selector: str


@dataclass
class SiteConfig:
    """Configuration for a search-results source."""
    name: str                           # Full display name
    short_name: str                     # Logger / registry identifier
    search_url: str                     # Search URL template with a {query} placeholder
    listing_selector: str               # CSS selector of one listing fragment
    scraper_type: ScraperType           # Which crawler to use
    page_size: int = 25                 # Listings per page (offset step and per-page cap)
    offset_param: str = 'offset'        # Query parameter carrying the page offset
    field_rules: Tuple[FieldRule, ...] = ()       # Ordered lookup rules, first match wins
    currency_prefixes: Tuple[str, ...] = ('US$',)  # Stripped from prices
    no_results_selector: Optional[str] = None     # Marker shown when a page has no listings
    rate_limit_seconds: float = 5.0     # Polite delay between pages
    enabled: bool = True                # Whether the site can be selected

    def page_url(self, query: str, page_index: int) -> str:
        """Build the URL of results page `page_index` (0-based) for `query`."""
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")
        base = self.search_url.format(query=quote_plus(query.strip()))
        separator = '&' if '?' in base else '?'
        return f"{base}{separator}{self.offset_param}={page_index * self.page_size}"

    @property
    def wait_selector(self) -> str:
        """Selector a crawler waits for before the page counts as loaded."""
        if self.no_results_selector:
            return f"{self.listing_selector}, {self.no_results_selector}"
        return self.listing_selector


@dataclass(frozen=True)
class HotelRecord:
    """One extracted hotel entry. Location and price may be empty strings."""
    name: str
    location: str = ''
    price: str = ''

    def as_row(self) -> List[str]:
        return [self.name, self.location, self.price]


@dataclass
class ScrapeResult:
    """Result of a scraping run."""
    source: str
    query: str
    target: int
    started_at: datetime
    completed_at: Optional[datetime] = None
    state: LoopState = LoopState.RUNNING
    pages: int = 0
    errors: int = 0
    error_details: List[Dict] = field(default_factory=list)
    hotels: Tuple[HotelRecord, ...] = ()

    @property
    def total(self) -> int:
        return len(self.hotels)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict:
        return {
            'source': self.source,
            'query': self.query,
            'target': self.target,
            'state': self.state.value,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
            'total': self.total,
            'pages': self.pages,
            'errors': self.errors,
            'error_details': self.error_details[:10],  # Limit error details
        }


class BaseScraper(ABC):
    """
    Abstract base class for search-results page scrapers.

    Subclasses must implement:
    - parse_page(): Turn one page of markup into hotel records (no I/O)

    The default scrape_page() builds the page URL, fetches it through the
    crawler and hands the markup to parse_page().
    """

    def __init__(self, config: SiteConfig, query: str, crawler):
        """
        Initialize the scraper.

        Args:
            config: Site configuration
            query: Free-text search term (country or region)
            crawler: Page fetcher exposing `async fetch(url, wait_selector=None) -> str`
        """
        if not query or not query.strip():
            raise ValueError("query must not be empty")
        self.config = config
        self.query = query.strip()
        self.crawler = crawler
        self.logger = logging.getLogger(f"scraper.{config.short_name.lower()}")

    def page_url(self, page_index: int) -> str:
        return self.config.page_url(self.query, page_index)

    @abstractmethod
    def parse_page(self, html: str, page_index: int) -> List[HotelRecord]:
        """
        Parse one results page.

        Args:
            html: Rendered page markup
            page_index: 0-based page index (for log messages)

        Returns:
            Hotel records in document order, capped at the page size

        Raises:
            ParseError: If the markup cannot be parsed
        """
        pass

    async def scrape_page(self, page_index: int) -> List[HotelRecord]:
        """
        Fetch and parse one results page.

        An empty list means the page had no listings; fetch and parse
        failures are raised as FetchError / FetchTimeout / ParseError.
        """
        url = self.page_url(page_index)
        self.logger.info(Colors.blue(f"Accessing URL: {url}"))
        html = await self.crawler.fetch(url, wait_selector=self.config.wait_selector)
        return self.parse_page(html, page_index)

    async def close(self):
        """Release the crawler's resources."""
        await self.crawler.close()

    def describe(self) -> Dict[str, Any]:
        return {
            'site': self.config.short_name,
            'query': self.query,
            'page_size': self.config.page_size,
            'first_page': self.page_url(0),
        }
