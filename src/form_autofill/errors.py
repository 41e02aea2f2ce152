"""Exceptions raised by the form autofiller."""


class FormAutofillError(Exception):
    """Base class for all form autofill errors."""


class BrowserUnavailableError(FormAutofillError):
    """No browser session or page could be obtained; the fill pass cannot start."""


class ElementTimeoutError(FormAutofillError):
    """A bounded wait for a DOM element expired."""

    def __init__(self, selector: str, timeout_ms: int):
        super().__init__(f"Timed out after {timeout_ms} ms waiting for {selector!r}")
        self.selector = selector
        self.timeout_ms = timeout_ms


class ProfileLoadError(FormAutofillError):
    """The profile document is missing or does not match the profile schema."""
