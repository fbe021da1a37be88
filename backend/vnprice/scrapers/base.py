"""Base page crawler.

Marketplace crawlers inherit from BasePageCrawler and declare their
extraction rules, base URL and search URL format. The crawl loop itself,
pagination and per-product failure isolation live here.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Set

import structlog
from playwright.async_api import Page

from vnprice.config import settings
from vnprice.core.exceptions import CrawlerNotInitializedError
from vnprice.scrapers.extraction import (
    FieldRules,
    HtmlDocument,
    QueryableDocument,
    collect_product_links,
    locate_field,
)
from vnprice.scrapers.utils.browser_manager import BrowserManager
from vnprice.scrapers.utils.normalizer import normalize_price, normalize_url

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScrapedRecord:
    """One product scraped from a detail page."""

    title: str
    price: int  # smallest currency unit (đồng)
    image_url: str
    product_url: str
    seller_name: str

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.title:
            raise ValueError("title is required")
        if self.price is None or self.price <= 0:
            raise ValueError("price must be a positive integer")


class BasePageCrawler(ABC):
    """Crawls a marketplace search: listing pages, then each product page.

    Lifecycle: ``init()`` launches the browser, ``scrape_search_results()``
    runs one crawl, ``close()`` releases the browser. ``async with`` does
    the init/close pair.
    """

    shop_domain: str = ""  # Must be overridden in subclass (e.g., "tiki.vn")
    shop_name: str = ""  # Fallback seller name when the page shows none
    base_url: str = ""
    product_path_marker: str = ""

    product_link_rules: FieldRules = ()
    title_rules: FieldRules = ()
    price_rules: FieldRules = ()
    image_rules: FieldRules = ()
    seller_rules: FieldRules = ()
    next_page_rules: FieldRules = ()

    def __init__(
        self,
        headless: Optional[bool] = None,
        timeout_ms: Optional[int] = None,
        max_pages: Optional[int] = None,
        delay_ms: Optional[int] = None,
        product_delay_ms: Optional[int] = None,
        settle_ms: Optional[int] = None,
        session: Optional[BrowserManager] = None,
    ):
        self.headless = settings.SCRAPER_HEADLESS if headless is None else headless
        self.timeout_ms = settings.SCRAPER_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self.max_pages = settings.SCRAPER_MAX_PAGES if max_pages is None else max_pages
        self.delay_ms = settings.SCRAPER_DELAY_MS if delay_ms is None else delay_ms
        self.product_delay_ms = (
            settings.SCRAPER_PRODUCT_DELAY_MS if product_delay_ms is None else product_delay_ms
        )
        self.settle_ms = settings.SCRAPER_SETTLE_MS if settle_ms is None else settle_ms
        self.session = session or BrowserManager(headless=self.headless)
        self._initialized = False
        self.logger = logger.bind(adapter=self.shop_domain)

    @abstractmethod
    def build_search_url(self, query: str, page: int = 1) -> str:
        """Build the marketplace search URL for a query."""
        pass

    async def init(self) -> None:
        """Launch the browser session.

        Raises:
            SessionLaunchError: If the browser cannot be started
        """
        await self.session.start()
        self._initialized = True

    async def close(self) -> None:
        """Release the browser session. Safe to call at any time."""
        self._initialized = False
        await self.session.stop()

    async def __aenter__(self) -> "BasePageCrawler":
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def scrape_search_results(self, search_url: str) -> List[ScrapedRecord]:
        """Crawl a search and return every valid record in discovery order."""
        records = [record async for record in self.iter_search_results(search_url)]
        self.logger.info("crawl_complete", url=search_url, count=len(records))
        return records

    async def iter_search_results(self, search_url: str) -> AsyncIterator[ScrapedRecord]:
        """Crawl a search, yielding each record as soon as it is extracted.

        Raises:
            CrawlerNotInitializedError: If called before init()
        """
        if not self._initialized:
            raise CrawlerNotInitializedError(type(self).__name__)

        async with self.session.page() as page:
            if not await self._open_listing(page, search_url):
                return

            seen: Set[str] = set()
            current_page = 1
            while current_page <= self.max_pages:
                self.logger.info("scraping_listing_page", page=current_page)
                links = await self._extract_product_links(page)
                self.logger.info("products_found", page=current_page, count=len(links))

                for product_url in links:
                    # Listings repeat products across pages; each URL is crawled once.
                    if product_url in seen:
                        self.logger.debug("product_already_seen", url=product_url)
                        continue
                    seen.add(product_url)
                    record = await self._scrape_product(product_url)
                    if record:
                        yield record
                    await self._sleep(self.product_delay_ms)

                if current_page >= self.max_pages:
                    break
                if not await self._go_to_next_page(page):
                    self.logger.info("no_more_pages", page=current_page)
                    break

                current_page += 1
                await self._sleep(self.delay_ms)

    async def _open_listing(self, page: Page, search_url: str) -> bool:
        self.logger.info("navigating", url=search_url)
        try:
            await page.goto(search_url, wait_until="networkidle")
        except Exception as e:
            self.logger.warning("listing_navigation_failed", url=search_url, error=str(e))
            return False
        await self._sleep(self.delay_ms)
        return True

    async def _extract_product_links(self, page: Page) -> List[str]:
        try:
            document = HtmlDocument(await page.content())
            return collect_product_links(
                document,
                self.product_link_rules,
                self.base_url,
                self.product_path_marker,
            )
        except Exception as e:
            self.logger.warning("product_links_failed", error=str(e))
            return []

    async def _scrape_product(self, product_url: str) -> Optional[ScrapedRecord]:
        """Scrape one detail page. Any failure drops only this product."""
        self.logger.info("scraping_product", url=product_url)
        try:
            async with self.session.page() as page:
                await page.goto(product_url, wait_until="networkidle", timeout=self.timeout_ms)
                await self._sleep(self.settle_ms)
                document = HtmlDocument(await page.content())
                return self.extract_record(document, product_url)
        except Exception as e:
            self.logger.warning("product_scrape_failed", url=product_url, error=str(e))
            return None

    def extract_record(
        self, document: QueryableDocument, product_url: str
    ) -> Optional[ScrapedRecord]:
        """Build a record from a detail page, or None when title/price is missing."""
        title = locate_field(document, self.title_rules)
        if not title:
            self.logger.info("product_title_missing", url=product_url)
            return None

        price = normalize_price(locate_field(document, self.price_rules))
        if price <= 0:
            self.logger.info("product_price_missing", url=product_url)
            return None

        image_url = normalize_url(locate_field(document, self.image_rules), product_url)
        seller_name = locate_field(document, self.seller_rules) or self.shop_name

        return ScrapedRecord(
            title=title,
            price=price,
            image_url=image_url,
            product_url=product_url,
            seller_name=seller_name,
        )

    async def _go_to_next_page(self, page: Page) -> bool:
        """Click the first enabled "next" control. False ends pagination."""
        try:
            document = HtmlDocument(await page.content())
            rule = document.find_control(self.next_page_rules)
            if rule is None:
                return False

            locator = page.locator(rule.selector)
            if rule.text:
                locator = locator.filter(has_text=rule.text)
            await locator.first.click()
            await page.wait_for_load_state("networkidle")
            return True
        except Exception as e:
            self.logger.warning("next_page_failed", error=str(e))
            return False

    @staticmethod
    async def _sleep(ms: int) -> None:
        if ms > 0:
            await asyncio.sleep(ms / 1000)
