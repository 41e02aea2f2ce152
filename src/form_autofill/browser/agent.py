"""Browser session management using Playwright over the Chrome DevTools protocol."""

import asyncio
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from form_autofill.browser import chrome
from form_autofill.browser.page import PlaywrightPage
from form_autofill.browser.stealth import StealthManager
from form_autofill.config import BrowserSettings
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


class BrowserSession:
    """
    Owns the connection to Chrome for one fill pass.

    By default the session attaches to the user's running Chrome through its
    remote debugging port, starting Chrome with debugging enabled if nothing
    is listening. With `connect_to_existing` disabled it launches Playwright's
    bundled Chromium instead.
    """

    def __init__(
        self,
        browser_settings: Optional[BrowserSettings] = None,
        stealth_manager: Optional[StealthManager] = None
    ):
        """
        Initialize the browser session.

        Args:
            browser_settings: Connection and timeout settings
            stealth_manager: Applied to contexts of launched browsers
        """
        self.settings = browser_settings or BrowserSettings()
        self.stealth_manager = stealth_manager
        self.logger = logger.bind(component="browser_session")

        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

        self.is_connected = False
        self.attached = False
        self.current_url: Optional[str] = None

    async def connect(self) -> bool:
        """
        Obtain a browser.

        Returns:
            True if a browser is available, False otherwise
        """
        if self.is_connected:
            return True

        if self.playwright is None:
            self.playwright = await async_playwright().start()

        if self.settings.connect_to_existing:
            if await self._attach():
                return True

            self.logger.info("Will try to start Chrome with debugging")
            if not await chrome.start_chrome_with_debugging(self.settings):
                self._show_startup_instructions()
                return False

            if await self._attach():
                return True

            self._show_startup_instructions()
            return False

        return await self._launch()

    async def _attach(self) -> bool:
        url = chrome.debugging_url(self.settings.debugging_port)
        try:
            self.browser = await self.playwright.chromium.connect_over_cdp(url)
        except PlaywrightError as e:
            self.logger.info("Could not connect to existing Chrome", url=url, error=str(e))
            return False

        self.context = self.browser.contexts[0] if self.browser.contexts else await self.browser.new_context()
        self.is_connected = True
        self.attached = True
        self.logger.info("Connected to Chrome browser", url=url)
        return True

    async def _launch(self) -> bool:
        try:
            self.browser = await self.playwright.chromium.launch(
                headless=self.settings.headless,
                executable_path=self.settings.executable_path,
                args=["--disable-blink-features=AutomationControlled"]
            )
            if self.stealth_manager:
                self.context = await self.browser.new_context(viewport=self.stealth_manager.config.viewport)
                await self.stealth_manager.setup_stealth_context(self.context)
            else:
                self.context = await self.browser.new_context()
        except PlaywrightError as e:
            self.logger.error("Failed to launch browser", error=str(e))
            return False

        self.is_connected = True
        self.logger.info("Launched browser", headless=self.settings.headless)
        return True

    def _show_startup_instructions(self) -> None:
        self.logger.error(
            "Failed to obtain a Chrome session with debugging",
            instructions=chrome.startup_instructions(self.settings.debugging_port)
        )

    async def open_form(self, url: str) -> PlaywrightPage:
        """
        Open the form URL in a new tab and wait for it to settle.

        Args:
            url: Form URL

        Returns:
            Page handle for the loaded form
        """
        self.page = await self.context.new_page()
        self.page.set_default_timeout(self.settings.default_timeout_ms)
        self.page.on("pageerror", lambda err: self.logger.warning("Page error", error=str(err)))

        form_page = PlaywrightPage(self.page)
        await form_page.goto(url, self.settings.navigation_timeout_ms)
        self.current_url = url
        self.logger.info("Form loaded", url=url, title=await self.page.title())

        try:
            await self.page.wait_for_selector("form", timeout=self.settings.form_wait_timeout_ms)
        except PlaywrightError:
            self.logger.info("Form element not found, continuing anyway", url=url)

        await asyncio.sleep(self.settings.settle_seconds)
        return form_page

    async def close(self) -> None:
        """Disconnect. A Chrome we attached to keeps running with the form open."""
        try:
            if self.browser and not self.attached:
                await self.browser.close()

            if self.playwright:
                await self.playwright.stop()

            self.logger.info("Browser session closed", attached=self.attached)

        except PlaywrightError as e:
            self.logger.error(
                "Error closing browser session",
                error=str(e)
            )
        finally:
            self.playwright = None
            self.browser = None
            self.is_connected = False
            self.current_url = None


def create_browser_session(
    browser_settings: Optional[BrowserSettings] = None,
    stealth_manager: Optional[StealthManager] = None
) -> BrowserSession:
    """Factory function to create a browser session."""
    return BrowserSession(browser_settings=browser_settings, stealth_manager=stealth_manager)
