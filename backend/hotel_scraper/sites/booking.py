"""
Booking.com search-results scraper.

Site structure:
- Results page: `div[data-testid="property-card"]` per hotel, 25 per page,
  paginated with an `offset` query parameter
- Card fields: title, address and price spans, each with a data-testid
  selector and a generated class-name fallback (see config.py)
"""

from typing import List, Optional
from bs4 import BeautifulSoup

from ..base import BaseScraper, Colors, HotelRecord, ParseError, SiteConfig
from ..config import get_site_config
from ..utils.extractors import extract_listing, find_listings


def parse_html(html: str) -> BeautifulSoup:
    """
    Parse rendered markup.

    Raises:
        ParseError: If the markup is empty or the parser fails
    """
    if html is None or not html.strip():
        raise ParseError("Received empty markup")
    try:
        return BeautifulSoup(html, 'html.parser')
    except Exception as e:
        raise ParseError(f"Could not parse markup: {e}") from e


class BookingScraper(BaseScraper):
    """
    Scraper for Booking.com country search results.

    Each page is fetched through the configured crawler; the listing
    cards are run through the field extractor in document order.
    """

    def __init__(self, query: str, crawler, config: Optional[SiteConfig] = None):
        super().__init__(config or get_site_config('booking'), query, crawler)

    def parse_page(self, html: str, page_index: int) -> List[HotelRecord]:
        """Parse one results page into hotel records, capped at the page size."""
        soup = parse_html(html)
        cards = find_listings(soup, self.config.listing_selector)

        hotels: List[HotelRecord] = []
        for card in cards:
            # Don't add more hotels than the site shows per page
            if len(hotels) >= self.config.page_size:
                break

            hotel = extract_listing(
                card,
                rules=self.config.field_rules,
                currency_prefixes=self.config.currency_prefixes,
            )
            if not hotel.name:
                self.logger.debug(f"Skipping card without a name on page {page_index + 1}")
                continue

            hotels.append(hotel)
            self.logger.debug(Colors.green(f"Found hotel: {hotel.name}"))

        if hotels:
            self.logger.info(Colors.yellow(f"Found {len(hotels)} hotels on page {page_index + 1}"))
        else:
            self.logger.info(Colors.red(f"No hotels found on page {page_index + 1}"))

        return hotels
