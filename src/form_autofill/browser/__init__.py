"""Browser connection and page access for form filling."""

from form_autofill.browser.page import FormControl, FormPage, PlaywrightControl, PlaywrightPage
from form_autofill.browser.agent import BrowserSession, create_browser_session
from form_autofill.browser.stealth import StealthManager, StealthConfig

__all__ = [
    "FormControl", "FormPage",
    "PlaywrightControl", "PlaywrightPage",
    "BrowserSession", "create_browser_session",
    "StealthManager", "StealthConfig",
]
