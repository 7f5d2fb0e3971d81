"""
Hotel listing scraper.

This package collects hotel listings (name, location, price) from a
paginated, JavaScript-rendered search-results site:
- Page fetchers (Playwright browser, httpx for static pages)
- Ordered, data-driven field extraction (BeautifulSoup)
- A bounded pagination loop with retry and cancellation
- CSV export
"""

from .base import (
    BaseScraper,
    HotelRecord,
    LoopState,
    ScrapeResult,
    ScraperType,
    SiteConfig,
    ScraperError,
    FetchError,
    FetchTimeout,
    ParseError,
    EmptyResultError,
    RetryExhaustedError,
    ExportError,
    ScrapeCancelledException,
)
from .config import SITES, get_site_config, get_enabled_sites
from .manager import HotelCollection, ScraperManager, get_scraper, scrape_hotels
from .exporters import save_to_csv

__version__ = '0.1.0'

__all__ = [
    'BaseScraper',
    'HotelRecord',
    'LoopState',
    'ScrapeResult',
    'ScraperType',
    'SiteConfig',
    'ScraperError',
    'FetchError',
    'FetchTimeout',
    'ParseError',
    'EmptyResultError',
    'RetryExhaustedError',
    'ExportError',
    'ScrapeCancelledException',
    'SITES',
    'get_site_config',
    'get_enabled_sites',
    'HotelCollection',
    'ScraperManager',
    'get_scraper',
    'scrape_hotels',
    'save_to_csv',
]
