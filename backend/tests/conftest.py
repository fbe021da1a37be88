"""Pytest configuration and shared fixtures.

The crawler tests run against FakeSite: a dict of URL -> HTML served through
fake page/session objects shaped like the Playwright ones the crawler uses.
"""

from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vnprice.models import Base
from vnprice.scrapers.adapters.tiki import TikiCrawler


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


# ============================================================================
# FAKE BROWSER
# ============================================================================

class FakeSite:
    """In-memory marketplace: pages, failures and pagination links."""

    def __init__(self):
        self.pages: Dict[str, str] = {}
        self.failures: Dict[str, Exception] = {}
        self.next_pages: Dict[str, str] = {}
        self.visits: List[str] = []
        self.clicks: List[str] = []


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, text: Optional[str] = None):
        self.page = page
        self.selector = selector
        self.text = text

    def filter(self, has_text: Optional[str] = None) -> "FakeLocator":
        return FakeLocator(self.page, self.selector, has_text)

    @property
    def first(self) -> "FakeLocator":
        return self

    async def click(self) -> None:
        site = self.page.site
        site.clicks.append(self.selector)
        self.page.url = site.next_pages[self.page.url]


class FakePage:
    def __init__(self, site: FakeSite):
        self.site = site
        self.url: Optional[str] = None
        self.closed = False
        self.goto_calls: List[dict] = []

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        self.site.visits.append(url)
        if url in self.site.failures:
            raise self.site.failures[url]
        self.url = url

    async def content(self) -> str:
        return self.site.pages.get(self.url, "<html><body></body></html>")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def wait_for_load_state(self, state: Optional[str] = None) -> None:
        return None

    async def close(self) -> None:
        self.closed = True


class FakeSession:
    """Stands in for BrowserManager."""

    def __init__(self, site: FakeSite, fail_start: Optional[Exception] = None):
        self.site = site
        self.fail_start = fail_start
        self.started = 0
        self.stopped = 0
        self.opened: List[FakePage] = []

    @property
    def is_running(self) -> bool:
        return self.started > self.stopped

    async def start(self) -> None:
        if self.fail_start:
            raise self.fail_start
        self.started += 1

    async def stop(self) -> None:
        self.stopped += 1

    async def new_page(self) -> FakePage:
        page = FakePage(self.site)
        self.opened.append(page)
        return page

    @asynccontextmanager
    async def page(self):
        page = await self.new_page()
        try:
            yield page
        finally:
            await page.close()


def listing_html(hrefs: List[str], next_control: str = "") -> str:
    items = "".join(
        f'<div class="product-item"><a href="{href}"><span>item</span></a></div>'
        for href in hrefs
    )
    return f"<html><body><div class='listing'>{items}</div>{next_control}</body></html>"


def product_html(
    title: str = "",
    price: str = "",
    image: str = "",
    seller: str = "",
) -> str:
    parts = []
    if title:
        parts.append(f'<h1 data-view-id="pdp_details_view_name">{title}</h1>')
    if price:
        parts.append(f'<div class="product-price__current-price">{price}</div>')
    if image:
        parts.append(f'<div class="product-image"><img src="{image}"></div>')
    if seller:
        parts.append(f'<div data-view-id="pdp_details_view_merchant"><a>{seller}</a></div>')
    return f"<html><body>{''.join(parts)}</body></html>"


NEXT_ENABLED = '<a aria-label="Next page" href="#">Tiếp</a>'
NEXT_DISABLED = '<a aria-label="Next page" class="disabled">Tiếp</a>'


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def session(site: FakeSite) -> FakeSession:
    return FakeSession(site)


@pytest.fixture
def make_crawler(session: FakeSession):
    """Build a TikiCrawler on the fake session with all delays disabled."""

    def _make(**kwargs) -> TikiCrawler:
        options = dict(delay_ms=0, product_delay_ms=0, settle_ms=0, max_pages=2, timeout_ms=5000)
        options.update(kwargs)
        return TikiCrawler(session=session, **options)

    return _make


# ============================================================================
# DATABASE
# ============================================================================

@pytest_asyncio.fixture
async def test_db():
    """Create an in-memory SQLite database for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    # pysqlite defers BEGIN, which breaks SAVEPOINT; take over transaction control
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with SessionLocal() as session:
        yield session

    await engine.dispose()
