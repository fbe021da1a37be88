"""Scrape orchestration: query in, scraped records out.

This is the entry point callers use. It picks the crawler for a shop
domain, owns its lifecycle, and returns the records untouched; saving
them is the caller's job (see ProductService.save_scraped_products).
"""

from typing import Dict, List, Optional, Type

import structlog

from vnprice.config import settings
from vnprice.core.exceptions import UnsupportedShopError
from vnprice.scrapers.adapters.tiki import TikiCrawler
from vnprice.scrapers.base import BasePageCrawler, ScrapedRecord

logger = structlog.get_logger(__name__)

# shop domain -> crawler class
CRAWLERS: Dict[str, Type[BasePageCrawler]] = {
    TikiCrawler.shop_domain: TikiCrawler,
}


def get_crawler_class(shop_domain: str) -> Type[BasePageCrawler]:
    """Look up the crawler registered for a shop domain.

    Raises:
        UnsupportedShopError: If no crawler handles the domain
    """
    crawler_class = CRAWLERS.get(shop_domain)
    if crawler_class is None:
        raise UnsupportedShopError(shop_domain)
    return crawler_class


async def run(
    query: str,
    max_pages: int = 2,
    headless: bool = True,
    shop_domain: Optional[str] = None,
    crawler: Optional[BasePageCrawler] = None,
) -> List[ScrapedRecord]:
    """Crawl a marketplace search and return the scraped records.

    Args:
        query: Search query (e.g., "iPhone 13 Pro")
        max_pages: Maximum listing pages to visit (>= 1)
        headless: Run the browser without a window
        shop_domain: Marketplace domain, defaults to DEFAULT_SHOP_DOMAIN
        crawler: Pre-built crawler to use instead of the registered one

    Returns:
        Records in discovery order, possibly empty

    Raises:
        ValueError: If query is empty or max_pages < 1
        UnsupportedShopError: If the shop domain has no crawler
        SessionLaunchError: If the browser cannot be started
    """
    if not query or not query.strip():
        raise ValueError("Search query is required")
    if max_pages < 1:
        raise ValueError(f"max_pages must be >= 1, got {max_pages}")

    shop_domain = shop_domain or settings.DEFAULT_SHOP_DOMAIN
    if crawler is None:
        crawler_class = get_crawler_class(shop_domain)
        crawler = crawler_class(headless=headless, max_pages=max_pages)

    search_url = crawler.build_search_url(query)
    logger.info(
        "scrape_started",
        query=query,
        shop_domain=shop_domain,
        max_pages=max_pages,
        headless=headless,
    )

    async with crawler:
        records = await crawler.scrape_search_results(search_url)

    logger.info("scrape_finished", query=query, count=len(records))
    return records
