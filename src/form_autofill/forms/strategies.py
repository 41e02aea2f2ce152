"""Per-modality fill strategies."""

from typing import List, Optional

from form_autofill.browser.page import FormControl, FormPage, dispatch_events
from form_autofill.core.models import NOT_APPLICABLE, ClassifiedField
from form_autofill.core.profile import Profile
from form_autofill.errors import FormAutofillError
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


OPTION = 'div[role="option"]'
AGREEMENT_KEYWORDS = ("undertaking", "agreement", "confirm", "acknowledge", "terms", "consent")


def _single(field: ClassifiedField) -> FormControl:
    controls = field.controls
    if not controls:
        raise FormAutofillError(f"No control bound to field: {field.question_text}")
    return controls[0]


async def option_label(control: FormControl, index: int) -> str:
    label = await control.attribute("aria-label") or await control.text()
    return label.strip() or f"Option {index + 1}"


class TextStrategy:
    """Single-line text and email inputs: keystrokes first, then a direct write."""

    def __init__(self, college_email_domain: str):
        self.college_email_domain = college_email_domain

    def prepare_value(self, question_text: str, value: str) -> str:
        """Append the institutional domain to a bare college-domain email."""
        if "college domain email" in question_text.lower() and "@" not in value:
            value = f"{value}@{self.college_email_domain}"
            logger.info("Added domain to college email", value=value)
        return value

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        control = _single(field)
        value = self.prepare_value(field.question_text, value)

        await control.click()
        await page.press("Control+A")
        await page.press("Backspace")
        await page.type(value)

        await control.set_value(value)
        await dispatch_events(control, ("input", "change", "blur"))

        logger.info("Filled text field", question=field.question_text, value=value)
        return True


class ParagraphStrategy:
    """Multi-line answers are written in one operation."""

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        control = _single(field)
        await control.set_value("")
        await control.set_value(value)
        await dispatch_events(control, ("input", "change"))
        logger.info("Filled paragraph field", question=field.question_text)
        return True


class RadioStrategy:
    """
    Single-choice groups.

    Gender questions select the option matching the profile; everything
    else selects the first option. An existing selection is never trusted.
    """

    def __init__(self, profile: Profile):
        self.profile = profile

    @property
    def gender(self) -> Optional[str]:
        return self.profile.identity.gender or self.profile.common_responses.gender

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        options = field.controls
        if not options:
            logger.warning("Radio group has no options", question=field.question_text)
            return False

        labels = [await option_label(option, index) for index, option in enumerate(options)]

        if "gender" in field.question_text.lower() and self.gender:
            index = self._match_gender(labels)
            if index is not None:
                await options[index].click()
                logger.info("Selected gender option", question=field.question_text, option=labels[index])
                return True
            logger.info("No option matches profile gender", question=field.question_text, gender=self.gender)

        logger.info("Available radio options", question=field.question_text, options=labels)
        await options[0].click()
        logger.info("Selected first radio option", question=field.question_text, option=labels[0])
        return True

    def _match_gender(self, labels: List[str]) -> Optional[int]:
        wanted = self.gender.lower()
        lowered = [label.lower() for label in labels]

        # "female" contains "male", so whole-label matches win
        for index, label in enumerate(lowered):
            if label == wanted:
                return index
        for index, label in enumerate(lowered):
            if wanted in label:
                return index
        return None


def is_agreement_question(question_text: str) -> bool:
    lowered = question_text.lower()
    return any(keyword in lowered for keyword in AGREEMENT_KEYWORDS)


async def _check_all(field: ClassifiedField) -> int:
    clicked = 0
    for checkbox in field.controls:
        if await checkbox.attribute("aria-checked") != "true":
            await checkbox.click()
            clicked += 1
    return clicked


class AgreementCheckboxStrategy:
    """Undertakings and consent boxes: every box is ticked."""

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        clicked = await _check_all(field)
        logger.info("Accepted agreement checkboxes", question=field.question_text, clicked=clicked)
        return True


class StandardCheckboxStrategy:
    """Ordinary multi-choice groups. Currently also ticks every box."""

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        clicked = await _check_all(field)
        logger.info("Selected all checkbox options", question=field.question_text, clicked=clicked)
        return True


class DropdownStrategy:
    """Listbox questions: substring match on option text, else the first option."""

    def __init__(self, options_timeout_ms: int = 5000, retry_timeout_ms: int = 2000):
        self.options_timeout_ms = options_timeout_ms
        self.retry_timeout_ms = retry_timeout_ms

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        listbox = _single(field)
        try:
            return await self._select(page, listbox, field, value)
        except Exception as e:
            logger.warning("Dropdown selection failed, retrying with first option", question=field.question_text, error=str(e))

        try:
            await listbox.click()
            first = await page.wait_for_selector(OPTION, self.retry_timeout_ms)
            await first.click()
            logger.info("Selected first option as fallback", question=field.question_text)
            return True
        except Exception as e:
            logger.error("Fallback dropdown selection also failed", question=field.question_text, error=str(e))
            return False

    async def _select(self, page: FormPage, listbox: FormControl, field: ClassifiedField, value: str) -> bool:
        await listbox.click()
        await page.wait_for_selector(OPTION, self.options_timeout_ms)

        options = await page.query_all(OPTION)
        if not options:
            logger.warning("No dropdown options found", question=field.question_text)
            return False

        if value and value != NOT_APPLICABLE:
            wanted = value.lower()
            for option in options:
                text = await option.text()
                if wanted in text.lower():
                    await option.click()
                    logger.info("Selected dropdown option", question=field.question_text, option=text.strip())
                    return True

        text = await options[0].text()
        await options[0].click()
        logger.info("Selected first dropdown option", question=field.question_text, option=text.strip())
        return True
