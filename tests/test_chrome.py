"""Tests for Chrome discovery and start-up."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from form_autofill.browser import chrome
from form_autofill.config import BrowserSettings


class TestFindChrome:
    """Test cases for locating the Chrome executable."""

    def test_linux_uses_path_lookup(self):
        with patch("form_autofill.browser.chrome.shutil.which", side_effect=lambda name: (
            "/usr/bin/chromium" if name == "chromium" else None
        )):
            assert chrome.find_chrome_executable("linux") == "/usr/bin/chromium"

    def test_windows_checks_known_paths(self):
        with patch("form_autofill.browser.chrome.os.path.exists", side_effect=lambda p: "(x86)" in p):
            assert chrome.find_chrome_executable("win32") == chrome.WINDOWS_CHROME_PATHS[1]

    def test_not_installed(self):
        with patch("form_autofill.browser.chrome.os.path.exists", return_value=False):
            assert chrome.find_chrome_executable("darwin") is None


class TestChromeCommand:
    """Test cases for building the start-up command."""

    def test_uses_users_profile_by_default(self):
        command = chrome.build_chrome_command("chrome", BrowserSettings(), platform="linux")
        assert command[:2] == ["chrome", "--remote-debugging-port=9222"]
        assert command[2].startswith("--user-data-dir=")
        assert command[2].endswith("google-chrome")

    def test_explicit_profile_directory(self):
        browser = BrowserSettings(debugging_port=9333, user_data_dir="/tmp/profile")
        assert chrome.build_chrome_command("chrome", browser) == [
            "chrome", "--remote-debugging-port=9333", "--user-data-dir=/tmp/profile",
        ]

    def test_fresh_profile(self):
        browser = BrowserSettings(use_existing_profile=False)
        assert chrome.build_chrome_command("chrome", browser) == ["chrome", "--remote-debugging-port=9222"]


class TestStartChrome:
    """Test cases for starting Chrome."""

    @pytest.mark.asyncio
    async def test_starts_process_and_waits(self):
        browser = BrowserSettings(executable_path="/opt/chrome", startup_wait_seconds=0)
        with patch("form_autofill.browser.chrome.subprocess.Popen") as popen:
            assert await chrome.start_chrome_with_debugging(browser) is True

        assert popen.call_args.args[0][0] == "/opt/chrome"

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with patch("form_autofill.browser.chrome.find_chrome_executable", return_value=None):
            assert await chrome.start_chrome_with_debugging(BrowserSettings()) is False

    @pytest.mark.asyncio
    async def test_process_failure(self):
        browser = BrowserSettings(executable_path="/opt/chrome", startup_wait_seconds=0)
        with patch("form_autofill.browser.chrome.subprocess.Popen", side_effect=OSError("denied")):
            assert await chrome.start_chrome_with_debugging(browser) is False


class TestDebuggingEndpoint:
    """Test cases for probing the DevTools endpoint."""

    @pytest.mark.asyncio
    async def test_endpoint_up(self):
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        client.get = AsyncMock(return_value=MagicMock(status_code=200))

        with patch("form_autofill.browser.chrome.httpx.AsyncClient", return_value=client):
            assert await chrome.is_debugging_endpoint_up(9222) is True
        client.get.assert_awaited_once_with("http://localhost:9222/json/version")

    @pytest.mark.asyncio
    async def test_endpoint_down(self):
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with patch("form_autofill.browser.chrome.httpx.AsyncClient", return_value=client):
            assert await chrome.is_debugging_endpoint_up(9222) is False

    def test_instructions_mention_port(self):
        steps = chrome.startup_instructions(9333)
        assert any("--remote-debugging-port=9333" in step for step in steps)
