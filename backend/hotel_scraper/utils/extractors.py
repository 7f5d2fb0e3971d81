"""
Data extraction utilities for scrapers.

These functions read hotel fields out of one listing fragment using
ordered CSS selector rules: the first rule that yields non-empty text
wins. Rules are plain data (see config.BOOKING_FIELD_RULES), so a new
fallback selector is a one-line config change.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..base import FieldRule, HotelRecord
from ..config import BOOKING_FIELD_RULES
from .normalizers import normalize_price, normalize_text

RECORD_FIELDS = ('name', 'location', 'price')


def select_text(fragment: Tag, selector: str) -> str:
    """
    Concatenated text of every element matching `selector`, stripped.

    Args:
        fragment: Listing fragment to search within
        selector: CSS selector

    Returns:
        Text content or '' if nothing matched
    """
    return ''.join(el.get_text() for el in fragment.select(selector)).strip()


def group_rules(rules: Iterable[FieldRule]) -> Dict[str, List[str]]:
    """Group rules by field, preserving rule order within each field."""
    grouped: Dict[str, List[str]] = {}
    for rule in rules:
        if rule.field not in RECORD_FIELDS:
            raise ValueError(f"Unknown field '{rule.field}' in rule {rule.selector!r}")
        grouped.setdefault(rule.field, []).append(rule.selector)
    return grouped


def extract_field(fragment: Tag, selectors: Sequence[str]) -> str:
    """
    Try each selector in order and return the first non-empty text.

    Args:
        fragment: Listing fragment
        selectors: Candidate selectors, most reliable first

    Returns:
        Text of the first matching selector or ''
    """
    for selector in selectors:
        text = select_text(fragment, selector)
        if text:
            return text
    return ''


def extract_listing(
    fragment: Tag,
    rules: Optional[Iterable[FieldRule]] = None,
    currency_prefixes: Optional[Iterable[str]] = None,
) -> HotelRecord:
    """
    Extract a hotel record from one listing fragment.

    Never raises for missing fields; a field that no rule matches is ''.
    Dropping records without a name is the caller's decision.

    Args:
        fragment: Listing fragment (e.g. one property card)
        rules: Ordered field rules (defaults to the booking.com rules)
        currency_prefixes: Prefixes stripped from the price

    Returns:
        HotelRecord with whatever was found
    """
    grouped = group_rules(rules if rules is not None else BOOKING_FIELD_RULES)

    name = normalize_text(extract_field(fragment, grouped.get('name', ())))
    location = normalize_text(extract_field(fragment, grouped.get('location', ())))
    price = normalize_price(
        extract_field(fragment, grouped.get('price', ())),
        currency_prefixes,
    )

    return HotelRecord(name=name, location=location, price=price)


def find_listings(soup: BeautifulSoup, listing_selector: str) -> List[Tag]:
    """Find all listing fragments in document order."""
    return soup.select(listing_selector)
