"""Marketplace crawling and product title normalization.

This package provides:
- Text normalization for titles, prices and URLs
- Ordered-fallback extraction rules over rendered pages
- A base page crawler with pagination and per-product failure isolation
- The scrape orchestrator used by the CLI and services
"""

from .base import BasePageCrawler, ScrapedRecord
from .orchestrator import run, get_crawler_class, CRAWLERS

__all__ = [
    "BasePageCrawler",
    "ScrapedRecord",
    "run",
    "get_crawler_class",
    "CRAWLERS",
]
