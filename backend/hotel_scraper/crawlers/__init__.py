"""Crawler implementations for different site types."""

from .static import StaticCrawler
from .browser import BrowserCrawler

__all__ = ['StaticCrawler', 'BrowserCrawler']
