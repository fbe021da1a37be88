"""Playwright browser lifecycle for a single crawl.

One BrowserManager owns exactly one Chromium process. It is started once,
hands out pages, and is stopped on every exit path of the crawl.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from playwright.async_api import async_playwright, Browser, Page, Playwright
from tenacity.wait import wait_base

from vnprice.config import settings
from vnprice.core.exceptions import SessionLaunchError
from vnprice.scrapers.utils.retry import launch_retry

logger = structlog.get_logger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


class BrowserManager:
    """Owns the Playwright driver and one browser for the crawl session."""

    def __init__(
        self,
        headless: bool = True,
        user_agent: Optional[str] = None,
        launch_attempts: Optional[int] = None,
        launch_wait: Optional[wait_base] = None,
    ):
        self._headless = headless
        self._user_agent = user_agent or settings.USER_AGENT
        self._launch_attempts = launch_attempts or settings.SCRAPER_LAUNCH_ATTEMPTS
        self._launch_wait = launch_wait
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch the browser.

        Raises:
            SessionLaunchError: If the browser still fails after all attempts
        """
        async with self._lock:
            if self._browser:
                return
            try:
                async for attempt in launch_retry(self._launch_attempts, self._launch_wait):
                    with attempt:
                        await self._launch()
            except Exception as e:
                logger.error("browser_launch_failed", error=str(e))
                await self._stop_driver()
                raise SessionLaunchError(str(e)) from e
            logger.info("browser_started", headless=self._headless)

    async def _launch(self) -> None:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._headless,
            args=LAUNCH_ARGS,
        )

    async def stop(self) -> None:
        """Close the browser and the driver. Safe to call repeatedly."""
        async with self._lock:
            if self._browser:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.warning("browser_close_failed", error=str(e))
                self._browser = None
                logger.info("browser_stopped")
            await self._stop_driver()

    async def _stop_driver(self) -> None:
        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning("playwright_stop_failed", error=str(e))
            self._playwright = None

    async def new_page(self) -> Page:
        """Open a page carrying the fixed user-agent header."""
        if not self._browser:
            raise RuntimeError("Browser is not running")
        page = await self._browser.new_page()
        await page.set_extra_http_headers({"User-Agent": self._user_agent})
        return page

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a page and close it however the block exits."""
        page = await self.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.debug("page_close_failed", error=str(e))
