"""Site-specific scraper implementations."""

from .booking import BookingScraper

__all__ = ['BookingScraper']
