"""Marketplace crawler implementations."""

from .tiki import TikiCrawler

__all__ = [
    "TikiCrawler",
]
