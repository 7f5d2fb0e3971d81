"""
Data normalization utilities for scrapers.

These functions standardize scraped data into consistent formats.
"""

import re
import unicodedata
from typing import Iterable, Optional

from ..config import CURRENCY_PREFIXES

# Thousands separators seen in rendered prices: comma, no-break space,
# narrow no-break space, thin space
THOUSANDS_SEPARATORS = (',', '\u00a0', '\u202f', '\u2009')

OUTPUT_SUFFIX = '_hotels.csv'


def normalize_text(text: str) -> str:
    """
    Collapse internal whitespace and trim.

    Examples:
        "  Hotel\\n  Lisboa " -> "Hotel Lisboa"
    """
    if not text:
        return ''
    return ' '.join(text.split())


def normalize_price(price_text: str, currency_prefixes: Optional[Iterable[str]] = None) -> str:
    """
    Strip a leading currency prefix and thousands separators from a price.

    Applying it twice gives the same result as applying it once.

    Examples:
        US$1,200 -> 1200
        US$ 1,200 -> 1200
        € 98 -> 98
        1200 -> 1200
    """
    if not price_text:
        return ''

    if currency_prefixes is None:
        currency_prefixes = CURRENCY_PREFIXES
    prefixes = sorted(currency_prefixes, key=len, reverse=True)
    price = price_text

    # Separators go first so a stripped result can never expose a new prefix
    for separator in THOUSANDS_SEPARATORS:
        price = price.replace(separator, '')

    stripped = True
    while stripped:
        price = price.strip()
        stripped = False
        for prefix in prefixes:
            if price.startswith(prefix):
                price = price[len(prefix):]
                stripped = True
                break

    return price


def output_filename(name: str, suffix: str = OUTPUT_SUFFIX) -> str:
    """
    Derive the CSV filename from a free-text country or region name.

    Trims and lowercases, folds accents, turns whitespace runs into a
    single underscore and drops anything outside [a-z0-9_-].

    Examples:
        United States -> united_states_hotels.csv
        Côte d'Ivoire -> cote_divoire_hotels.csv
        "  new   zealand " -> new_zealand_hotels.csv

    Raises:
        ValueError: If nothing usable is left of the name
    """
    folded = unicodedata.normalize('NFKD', name or '')
    folded = folded.encode('ascii', 'ignore').decode('ascii')
    slug = re.sub(r'\s+', '_', folded.strip().lower())
    slug = re.sub(r'[^a-z0-9_-]', '', slug)
    slug = slug.strip('_-')
    if not slug:
        raise ValueError(f"Cannot derive an output filename from {name!r}")
    return f"{slug}{suffix}"
