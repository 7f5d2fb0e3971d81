"""Shared utilities for scrapers."""

from .normalizers import (
    normalize_text,
    normalize_price,
    output_filename,
)
from .extractors import (
    select_text,
    extract_field,
    extract_listing,
    find_listings,
)

__all__ = [
    'normalize_text',
    'normalize_price',
    'output_filename',
    'select_text',
    'extract_field',
    'extract_listing',
    'find_listings',
]
