"""
Narrow page/control capability interface used by the classifier and filler.

Core logic only talks to `FormPage` and `FormControl`. The Playwright
adapters below implement them over a live browser page; the test suite
implements them over an in-memory DOM.
"""

from typing import Any, List, Optional, Protocol, Sequence

from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from form_autofill.errors import ElementTimeoutError


class FormControl(Protocol):
    """A DOM node on the form page."""

    async def query(self, selector: str) -> Optional["FormControl"]: ...

    async def query_all(self, selector: str) -> List["FormControl"]: ...

    async def text(self) -> str: ...

    async def attribute(self, name: str) -> Optional[str]: ...

    async def click(self, click_count: int = 1) -> None: ...

    async def focus(self) -> None: ...

    async def set_value(self, value: str) -> None: ...

    async def dispatch_event(self, event: str) -> None: ...

    async def closest(self, selector: str) -> Optional["FormControl"]: ...

    async def parent(self) -> Optional["FormControl"]: ...

    async def same_node(self, other: "FormControl") -> bool: ...

    async def override_value(self, value: str) -> None: ...


class FormPage(Protocol):
    """The live form document plus keyboard input."""

    async def query(self, selector: str) -> Optional[FormControl]: ...

    async def query_all(self, selector: str) -> List[FormControl]: ...

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> FormControl: ...

    async def type(self, text: str, delay_ms: float = 0) -> None: ...

    async def press(self, key: str) -> None: ...

    async def blur_active(self) -> None: ...

    async def goto(self, url: str, timeout_ms: int) -> None: ...

    async def evaluate(self, script: str, arg: Any = None) -> Any: ...


async def dispatch_events(control: FormControl, events: Sequence[str]) -> None:
    """Dispatch a sequence of bubbling DOM events on a control."""
    for event in events:
        await control.dispatch_event(event)


class PlaywrightControl:
    """FormControl over a Playwright element handle."""

    def __init__(self, handle: ElementHandle):
        self.handle = handle

    @staticmethod
    def wrap(handle: Optional[Any]) -> Optional["PlaywrightControl"]:
        if handle is None:
            return None
        element = handle.as_element() if hasattr(handle, "as_element") else handle
        return PlaywrightControl(element) if element is not None else None

    async def query(self, selector: str) -> Optional["PlaywrightControl"]:
        return self.wrap(await self.handle.query_selector(selector))

    async def query_all(self, selector: str) -> List["PlaywrightControl"]:
        return [PlaywrightControl(h) for h in await self.handle.query_selector_all(selector)]

    async def text(self) -> str:
        return await self.handle.text_content() or ""

    async def attribute(self, name: str) -> Optional[str]:
        return await self.handle.get_attribute(name)

    async def click(self, click_count: int = 1) -> None:
        await self.handle.click(click_count=click_count)

    async def focus(self) -> None:
        await self.handle.focus()

    async def set_value(self, value: str) -> None:
        await self.handle.evaluate("(el, value) => { el.value = value; }", value)

    async def dispatch_event(self, event: str) -> None:
        await self.handle.dispatch_event(event)

    async def closest(self, selector: str) -> Optional["PlaywrightControl"]:
        return self.wrap(await self.handle.evaluate_handle("(el, s) => el.closest(s)", selector))

    async def parent(self) -> Optional["PlaywrightControl"]:
        return self.wrap(await self.handle.evaluate_handle("el => el.parentElement"))

    async def same_node(self, other: FormControl) -> bool:
        if not isinstance(other, PlaywrightControl):
            return False
        return await self.handle.evaluate("(a, b) => a === b", other.handle)

    async def override_value(self, value: str) -> None:
        await self.handle.evaluate(
            "(el, value) => Object.defineProperty(el, 'value', { writable: true, value })",
            value
        )


class PlaywrightPage:
    """FormPage over a Playwright page."""

    def __init__(self, page: Page):
        self.page = page

    async def query(self, selector: str) -> Optional[PlaywrightControl]:
        return PlaywrightControl.wrap(await self.page.query_selector(selector))

    async def query_all(self, selector: str) -> List[PlaywrightControl]:
        return [PlaywrightControl(h) for h in await self.page.query_selector_all(selector)]

    async def wait_for_selector(self, selector: str, timeout_ms: int) -> PlaywrightControl:
        try:
            handle = await self.page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementTimeoutError(selector, timeout_ms) from e
        if handle is None:
            raise ElementTimeoutError(selector, timeout_ms)
        return PlaywrightControl(handle)

    async def type(self, text: str, delay_ms: float = 0) -> None:
        await self.page.keyboard.type(text, delay=delay_ms)

    async def press(self, key: str) -> None:
        await self.page.keyboard.press(key)

    async def blur_active(self) -> None:
        await self.page.evaluate("() => document.activeElement && document.activeElement.blur()")

    async def goto(self, url: str, timeout_ms: int) -> None:
        await self.page.goto(url, wait_until="networkidle", timeout=timeout_ms)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self.page.evaluate(script, arg)


__all__ = [
    "FormControl",
    "FormPage",
    "PlaywrightControl",
    "PlaywrightPage",
    "dispatch_events",
]
