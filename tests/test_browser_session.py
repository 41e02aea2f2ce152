"""Tests for the browser session."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from form_autofill.browser.agent import BrowserSession, create_browser_session
from form_autofill.browser.page import PlaywrightPage
from form_autofill.browser.stealth import StealthManager
from form_autofill.config import BrowserSettings


def playwright_mock():
    playwright = MagicMock()
    playwright.stop = AsyncMock()
    playwright.chromium.connect_over_cdp = AsyncMock()
    playwright.chromium.launch = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    return playwright, starter


def browser_mock(contexts=None):
    browser = MagicMock()
    browser.contexts = contexts if contexts is not None else [MagicMock()]
    browser.new_context = AsyncMock(return_value=MagicMock())
    browser.close = AsyncMock()
    return browser


class TestBrowserSession:
    """Test cases for BrowserSession."""

    @pytest.fixture
    def settings(self):
        return BrowserSettings(startup_wait_seconds=0, settle_seconds=0)

    def test_initialization(self, settings):
        session = create_browser_session(settings)
        assert session.settings is settings
        assert not session.is_connected
        assert session.browser is None

    @pytest.mark.asyncio
    async def test_attaches_to_running_chrome(self, settings):
        playwright, starter = playwright_mock()
        browser = browser_mock()
        playwright.chromium.connect_over_cdp.return_value = browser

        with patch("form_autofill.browser.agent.async_playwright", return_value=starter):
            session = BrowserSession(settings)
            assert await session.connect() is True

        playwright.chromium.connect_over_cdp.assert_awaited_once_with("http://localhost:9222")
        assert session.attached is True
        assert session.context is browser.contexts[0]

    @pytest.mark.asyncio
    async def test_starts_chrome_when_nothing_listens(self, settings):
        playwright, starter = playwright_mock()
        browser = browser_mock(contexts=[])
        playwright.chromium.connect_over_cdp.side_effect = [PlaywrightError("refused"), browser]

        with patch("form_autofill.browser.agent.async_playwright", return_value=starter), \
                patch("form_autofill.browser.agent.chrome.start_chrome_with_debugging",
                      new_callable=AsyncMock, return_value=True) as start:
            session = BrowserSession(settings)
            assert await session.connect() is True

        start.assert_awaited_once_with(settings)
        browser.new_context.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_gives_up_when_chrome_cannot_start(self, settings):
        playwright, starter = playwright_mock()
        playwright.chromium.connect_over_cdp.side_effect = PlaywrightError("refused")

        with patch("form_autofill.browser.agent.async_playwright", return_value=starter), \
                patch("form_autofill.browser.agent.chrome.start_chrome_with_debugging",
                      new_callable=AsyncMock, return_value=False):
            session = BrowserSession(settings)
            assert await session.connect() is False

        assert not session.is_connected

    @pytest.mark.asyncio
    async def test_launches_with_stealth_context(self):
        playwright, starter = playwright_mock()
        browser = browser_mock()
        playwright.chromium.launch.return_value = browser
        stealth = StealthManager()
        stealth.setup_stealth_context = AsyncMock()

        with patch("form_autofill.browser.agent.async_playwright", return_value=starter):
            session = BrowserSession(BrowserSettings(connect_to_existing=False, headless=True), stealth)
            assert await session.connect() is True

        assert playwright.chromium.launch.await_args.kwargs["headless"] is True
        browser.new_context.assert_awaited_once_with(viewport={"width": 1366, "height": 768})
        stealth.setup_stealth_context.assert_awaited_once_with(browser.new_context.return_value)

    @pytest.mark.asyncio
    async def test_open_form(self, settings):
        page = MagicMock()
        page.goto = AsyncMock()
        page.title = AsyncMock(return_value="Placement Drive")
        page.wait_for_selector = AsyncMock(side_effect=PlaywrightError("no form"))

        session = BrowserSession(settings)
        session.context = MagicMock()
        session.context.new_page = AsyncMock(return_value=page)

        form_page = await session.open_form("https://forms.gle/abc")

        assert isinstance(form_page, PlaywrightPage)
        page.goto.assert_awaited_once_with("https://forms.gle/abc", wait_until="networkidle", timeout=60000)
        page.set_default_timeout.assert_called_once_with(30000)
        assert session.current_url == "https://forms.gle/abc"

    @pytest.mark.asyncio
    async def test_close_leaves_attached_chrome_running(self, settings):
        session = BrowserSession(settings)
        session.browser = browser_mock()
        browser = session.browser
        session.playwright = MagicMock(stop=AsyncMock())
        playwright = session.playwright
        session.attached = True
        session.is_connected = True

        await session.close()

        browser.close.assert_not_awaited()
        playwright.stop.assert_awaited_once()
        assert not session.is_connected
