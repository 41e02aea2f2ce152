"""
Date field entry.

The form product's date widget ignores programmatic writes unless the
keystrokes arrive at a human-like pace, and its validation is inconsistent
between renders. Date-of-birth questions therefore go through an ordered list
of entry attempts, each checked against the question's validation alert,
until one leaves no error behind. Other date questions are typed once.
"""

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from form_autofill.browser.page import FormControl, FormPage, dispatch_events
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


QUESTION_CONTAINER = '[role="listitem"]'
VALIDATION_ALERT = '[role="alert"]'
CONFIRM_BUTTON_LABELS = ("OK", "Apply", "Done")
LITERAL_DATE_FORMAT = "%d-%m-%Y"
ALTERNATE_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%d.%m.%Y", "%Y/%m/%d")

TYPED = "typed"
DIRECT = "direct"


@dataclass(frozen=True)
class DateEntryAttempt:
    """One way of getting a date into the widget.

    ``typed`` attempts clear the control and send one keystroke at a time;
    ``direct`` attempts write the value property and dispatch events.
    """
    name: str
    mode: str
    text: str
    char_pause: float = 0.1
    separator_pause: float = 0.3
    triple_click: bool = False
    confirm_dialog: bool = False


_DOB = re.compile(r"\bdob\b|date of birth")


def is_date_of_birth_question(question_text: str) -> bool:
    return _DOB.search(question_text.lower()) is not None


def alternate_formats(literal: str) -> List[str]:
    """The literal date re-rendered in the other formats widgets commonly accept."""
    try:
        parsed = datetime.strptime(literal, LITERAL_DATE_FORMAT)
    except ValueError:
        return []
    return [parsed.strftime(fmt) for fmt in ALTERNATE_DATE_FORMATS]


def build_attempts(literal: str) -> List[DateEntryAttempt]:
    """Attempts in order: paced typing, slower typing with dialog confirmation, then direct formats."""
    attempts = [
        DateEntryAttempt("keystrokes", TYPED, literal),
        DateEntryAttempt(
            "slow_keystrokes",
            TYPED,
            literal,
            char_pause=0.2,
            separator_pause=0.3,
            triple_click=True,
            confirm_dialog=True
        ),
    ]
    for fmt in [literal] + alternate_formats(literal):
        attempts.append(DateEntryAttempt(f"direct:{fmt}", DIRECT, fmt))
    return attempts


async def validation_error(control: FormControl) -> Optional[str]:
    """Text of the validation alert in the control's question container, if shown."""
    container = await control.closest(QUESTION_CONTAINER)
    if container is None:
        return None
    alert = await container.query(VALIDATION_ALERT)
    if alert is None:
        return None
    message = (await alert.text()).strip()
    return message or None


class DateFieldStrategy:
    """Fills date questions; date-of-birth questions get the targeted routine."""

    def __init__(self, literal_date: str, attempts: Optional[List[DateEntryAttempt]] = None, pause_scale: float = 1.0):
        """
        Initialize the date strategy.

        Args:
            literal_date: Pre-formatted date typed into date-of-birth questions
            attempts: Entry attempts for the targeted routine, in order
            pause_scale: Multiplier applied to every pause
        """
        self.literal_date = literal_date
        self.attempts = attempts if attempts is not None else build_attempts(literal_date)
        self.pause_scale = pause_scale
        self.logger = logger.bind(component="date_strategy")

    async def _pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds * self.pause_scale)

    async def fill(self, page: FormPage, control: FormControl, question_text: str, value: str) -> bool:
        if is_date_of_birth_question(question_text):
            self.logger.info("Using targeted date-of-birth entry", question=question_text)
            return await self.fill_targeted(page, control)
        return await self.fill_standard(page, control, value)

    async def fill_standard(self, page: FormPage, control: FormControl, value: str) -> bool:
        await control.click(click_count=3)
        await page.press("Backspace")
        await self._pause(0.5)

        for char in value:
            await page.type(char)
            await self._pause(0.1)

        await page.press("Tab")
        self.logger.info("Completed standard date entry", value=value)
        return True

    async def fill_targeted(self, page: FormPage, control: FormControl) -> bool:
        """
        Run the entry attempts until the question shows no validation error.

        Returns:
            True once an attempt leaves no validation alert, False if every
            attempt (and the final value override) leaves one behind
        """
        for attempt in self.attempts:
            try:
                await self._run_attempt(page, control, attempt)
            except Exception as e:
                self.logger.warning("Date entry attempt failed", attempt=attempt.name, error=str(e))
                continue

            error = await validation_error(control)
            if error is None:
                self.logger.info("Date accepted", attempt=attempt.name)
                return True
            self.logger.info("Date rejected by form validation", attempt=attempt.name, message=error)

        await control.override_value(self.literal_date)
        error = await validation_error(control)
        if error is None:
            self.logger.info("Date accepted after value override")
            return True

        self.logger.error("Date field still invalid after all attempts", message=error)
        return False

    async def _run_attempt(self, page: FormPage, control: FormControl, attempt: DateEntryAttempt) -> None:
        if attempt.mode == DIRECT:
            await control.set_value("")
            await control.set_value(attempt.text)
            await dispatch_events(control, ("input", "change", "focus", "blur"))
            return

        if attempt.triple_click:
            await control.click(click_count=3)
            await self._pause(0.5)
            await page.press("Backspace")
        else:
            await control.focus()
            await control.set_value("")
        await self._pause(0.1)

        for char in attempt.text:
            await page.type(char)
            await self._pause(attempt.separator_pause if not char.isdigit() else attempt.char_pause)

        await page.press("Tab")
        await self._pause(0.2)

        await control.set_value(attempt.text)
        await dispatch_events(control, ("input", "change", "blur"))

        if attempt.confirm_dialog:
            await self._confirm_dialog(page)

    async def _confirm_dialog(self, page: FormPage) -> None:
        for button in await page.query_all("button"):
            label = await button.text()
            if any(word in label for word in CONFIRM_BUTTON_LABELS):
                self.logger.info("Clicking date dialog button", label=label.strip())
                await button.click()
                return
