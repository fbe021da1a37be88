"""Tests for the Playwright browser session lifecycle."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from tenacity import wait_none

from vnprice.core.exceptions import SessionLaunchError
from vnprice.scrapers.utils.browser_manager import LAUNCH_ARGS, BrowserManager


def mock_playwright(launch_side_effect=None):
    """Patchable stand-in for async_playwright() and the objects it returns."""
    page = MagicMock()
    page.set_extra_http_headers = AsyncMock()
    page.close = AsyncMock()

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser, side_effect=launch_side_effect)
    playwright.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    factory = MagicMock(return_value=starter)
    return factory, playwright, browser, page


class TestBrowserManager:
    async def test_start_launches_once(self):
        factory, playwright, browser, _ = mock_playwright()
        manager = BrowserManager(headless=False)

        with patch("vnprice.scrapers.utils.browser_manager.async_playwright", factory):
            await manager.start()
            await manager.start()

        assert manager.is_running
        playwright.chromium.launch.assert_awaited_once_with(headless=False, args=LAUNCH_ARGS)

    async def test_stop_is_idempotent(self):
        factory, playwright, browser, _ = mock_playwright()
        manager = BrowserManager()

        await manager.stop()
        with patch("vnprice.scrapers.utils.browser_manager.async_playwright", factory):
            await manager.start()
        await manager.stop()
        await manager.stop()

        assert not manager.is_running
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    async def test_launch_failure_raises_session_error(self):
        factory, playwright, _, _ = mock_playwright(launch_side_effect=RuntimeError("no chromium"))
        manager = BrowserManager(launch_attempts=2, launch_wait=wait_none())

        with patch("vnprice.scrapers.utils.browser_manager.async_playwright", factory):
            with pytest.raises(SessionLaunchError) as exc_info:
                await manager.start()

        assert "no chromium" in str(exc_info.value)
        assert playwright.chromium.launch.await_count == 2
        playwright.stop.assert_awaited_once()
        assert not manager.is_running

    async def test_launch_is_retried(self):
        browser = MagicMock()
        browser.close = AsyncMock()
        factory, playwright, _, _ = mock_playwright(
            launch_side_effect=[RuntimeError("flaky"), browser]
        )
        manager = BrowserManager(launch_attempts=2, launch_wait=wait_none())

        with patch("vnprice.scrapers.utils.browser_manager.async_playwright", factory):
            await manager.start()

        assert manager.is_running
        assert playwright.chromium.launch.await_count == 2

    async def test_page_sets_user_agent_and_closes(self):
        factory, _, _, page = mock_playwright()
        manager = BrowserManager(user_agent="TestAgent/1.0")

        with patch("vnprice.scrapers.utils.browser_manager.async_playwright", factory):
            await manager.start()

        with pytest.raises(ValueError):
            async with manager.page() as opened:
                assert opened is page
                raise ValueError("extraction blew up")

        page.set_extra_http_headers.assert_awaited_once_with({"User-Agent": "TestAgent/1.0"})
        page.close.assert_awaited_once()

    async def test_new_page_requires_running_browser(self):
        with pytest.raises(RuntimeError):
            await BrowserManager().new_page()
