"""
Pytest configuration and fixtures for hotel scraper tests.
"""

from typing import List, Optional

import pytest
from bs4 import BeautifulSoup

from hotel_scraper.base import BaseScraper, HotelRecord
from hotel_scraper.config import get_site_config


def make_card(name: str = "", location: str = "", price: str = "", fallback: bool = False) -> str:
    """Build one property card the way the results page renders it."""
    if fallback:
        parts = [
            f'<div class="a23c043802">{name}</div>' if name else '',
            f'<span class="f4bd0794db">{location}</span>' if location else '',
            f'<span class="fcab3ed991 fbd1d3018c">{price}</span>' if price else '',
        ]
    else:
        parts = [
            f'<div data-testid="title">{name}</div>' if name else '',
            f'<span data-testid="address">{location}</span>' if location else '',
            f'<span data-testid="price-and-discounted-price">{price}</span>' if price else '',
        ]
    return f'<div data-testid="property-card">{"".join(parts)}</div>'


def make_page(cards: List[str]) -> str:
    """Wrap cards in a results page."""
    return f'<html><body><div id="results">{"".join(cards)}</div></body></html>'


def hotels(count: int, prefix: str = "Hotel") -> List[HotelRecord]:
    return [HotelRecord(f"{prefix} {i}", "Somewhere", str(100 + i)) for i in range(count)]


class FakeCrawler:
    """Page fetcher returning queued markup (or raising queued errors)."""

    def __init__(self, responses=None, default: Optional[str] = None):
        self.responses = list(responses or [])
        self.default = default
        self.calls = []
        self.closed = False

    async def fetch(self, url: str, wait_selector: Optional[str] = None) -> str:
        self.calls.append((url, wait_selector))
        if self.responses:
            response = self.responses.pop(0)
        elif self.default is not None:
            response = self.default
        else:
            raise AssertionError(f"Unexpected fetch: {url}")
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True


class FakeScraper(BaseScraper):
    """Page scraper returning queued batches (or raising queued errors)."""

    def __init__(self, batches=None, query: str = "Portugal"):
        super().__init__(get_site_config('booking'), query, FakeCrawler())
        self.batches = list(batches or [])
        self.requested = []

    def parse_page(self, html, page_index):
        raise NotImplementedError

    async def scrape_page(self, page_index: int):
        self.requested.append(page_index)
        if not self.batches:
            return []
        batch = self.batches.pop(0)
        if isinstance(batch, BaseException):
            raise batch
        return list(batch)


@pytest.fixture
def soup_card():
    """Parse a single card and return its fragment."""
    def _parse(card_html: str):
        return BeautifulSoup(card_html, 'html.parser').select_one('div[data-testid="property-card"]')
    return _parse

