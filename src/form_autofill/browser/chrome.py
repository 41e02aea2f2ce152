"""Locate Chrome and start it with a remote debugging endpoint."""

import asyncio
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from form_autofill.config import BrowserSettings
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


WINDOWS_CHROME_PATHS = [
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
]
MACOS_CHROME_PATH = "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"
LINUX_CHROME_NAMES = ["google-chrome", "google-chrome-stable", "chrome", "chromium", "chromium-browser"]


def _windows_candidates() -> List[str]:
    candidates = list(WINDOWS_CHROME_PATHS)
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        candidates.append(str(Path(local_app_data) / "Google" / "Chrome" / "Application" / "chrome.exe"))
    return candidates


def find_chrome_executable(platform: Optional[str] = None) -> Optional[str]:
    """
    Find the Chrome executable for the current platform.

    Args:
        platform: Override for `sys.platform`

    Returns:
        Path to the executable, or None if Chrome is not installed
    """
    platform = platform or sys.platform

    if platform == "win32":
        for candidate in _windows_candidates():
            if os.path.exists(candidate):
                return candidate
        return None

    if platform == "darwin":
        return MACOS_CHROME_PATH if os.path.exists(MACOS_CHROME_PATH) else None

    for name in LINUX_CHROME_NAMES:
        found = shutil.which(name)
        if found:
            return found
    return None


def default_user_data_dir(platform: Optional[str] = None) -> str:
    """The user's own Chrome profile directory."""
    platform = platform or sys.platform
    home = Path.home()

    if platform == "win32":
        return str(home / "AppData" / "Local" / "Google" / "Chrome" / "User Data")
    if platform == "darwin":
        return str(home / "Library" / "Application Support" / "Google" / "Chrome")
    return str(home / ".config" / "google-chrome")


def debugging_url(port: int) -> str:
    return f"http://localhost:{port}"


async def is_debugging_endpoint_up(port: int, timeout: float = 2.0) -> bool:
    """Probe Chrome's DevTools `/json/version` endpoint."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(f"{debugging_url(port)}/json/version")
        return response.status_code == 200
    except httpx.HTTPError:
        return False


def build_chrome_command(executable: str, browser: BrowserSettings, platform: Optional[str] = None) -> List[str]:
    command = [executable, f"--remote-debugging-port={browser.debugging_port}"]
    if browser.user_data_dir:
        command.append(f"--user-data-dir={browser.user_data_dir}")
    elif browser.use_existing_profile:
        command.append(f"--user-data-dir={default_user_data_dir(platform)}")
    return command


async def start_chrome_with_debugging(browser: BrowserSettings) -> bool:
    """
    Start Chrome with remote debugging enabled.

    Args:
        browser: Browser settings (port, executable, profile directory)

    Returns:
        True if a Chrome process was started, False otherwise
    """
    executable = browser.executable_path or find_chrome_executable()
    if not executable:
        logger.error("Chrome executable not found")
        return False

    command = build_chrome_command(executable, browser)
    logger.info("Starting Chrome with debugging", command=" ".join(command))

    try:
        subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        logger.error("Failed to start Chrome", error=str(e), executable=executable)
        return False

    # Give Chrome some time to open the debugging port
    await asyncio.sleep(browser.startup_wait_seconds)
    return True


def startup_instructions(port: int = 9222) -> List[str]:
    """Steps for starting Chrome by hand with a debugging port."""
    if sys.platform == "win32":
        launch = f'"{WINDOWS_CHROME_PATHS[0]}" --remote-debugging-port={port}'
    elif sys.platform == "darwin":
        launch = f'"{MACOS_CHROME_PATH}" --remote-debugging-port={port}'
    else:
        launch = f"google-chrome --remote-debugging-port={port}"

    return [
        "Close all Chrome windows.",
        f"Start Chrome with remote debugging: {launch}",
        f"Check that {debugging_url(port)}/json/version responds.",
        "Run form-autofill again; it will attach to that Chrome window.",
    ]
