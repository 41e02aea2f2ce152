"""
Question discovery and modality classification for rendered forms.

Form products render questions with inconsistent, undocumented markup, so
discovery runs several independent passes and merges them:

1. question containers (``div[role="listitem"]``) in document order;
2. direct controls, only when no container was found;
3. controls carrying an ``aria-label`` or ``placeholder`` not seen yet;
4. the vendor question root class, as a last-resort net.

A question whose controls cannot be read degrades to ``unknown``; a failing
pass is logged and the remaining passes still run.
"""

import re
from typing import List, Optional, Sequence, Tuple, Union

from form_autofill.browser.page import FormControl, FormPage
from form_autofill.core.models import ClassifiedField, FieldModality
from form_autofill.utils.logging import get_logger, log_field_context

logger = get_logger(__name__)


Target = Union[FormControl, List[FormControl], None]

QUESTION_CONTAINER = 'div[role="listitem"]'
QUESTION_HEADING = 'div[role="heading"]'
RADIO = 'div[role="radio"]'
CHECKBOX = 'div[role="checkbox"]'
LISTBOX = 'div[role="listbox"]'
RADIO_GROUP = 'div[role="radiogroup"]'
CHECKBOX_GROUP = 'div[role="group"]'
FILE_UPLOAD_BUTTON = 'div[role="button"][data-id="fileUploadButton"]'
CALENDAR_MARKERS = (
    'i[class*="calendar"], svg[class*="calendar"], '
    'span[class*="calendar"], button[aria-label*="calendar"]'
)
VENDOR_QUESTION_ROOT = ".freebirdFormviewerComponentsQuestionBaseRoot"
VENDOR_QUESTION_HEADER = ".freebirdFormviewerComponentsQuestionBaseHeader"

DATE_PLACEHOLDER_PATTERNS = (
    re.compile(r"dd[-/]mm[-/]yyyy"),
    re.compile(r"mm[-/]dd[-/]yyyy"),
    re.compile(r"\d{1,2}[-/]\d{1,2}[-/]\d{4}"),
)

# Controls picked up by the attribute pass; modality comes from the control itself
ATTRIBUTE_SELECTORS = (
    "input[aria-label]",
    "textarea[aria-label]",
    "input[placeholder]",
    "textarea[placeholder]",
    'input[type="email"]',
)
NON_TEXT_INPUT_TYPES = {"radio", "checkbox", "file", "hidden", "submit", "button", "image", "reset"}


def is_percentage_question(question_text: str) -> bool:
    lowered = question_text.lower()
    return "percentage" in lowered or "%" in lowered


def is_date_placeholder(placeholder: str) -> bool:
    return any(pattern.search(placeholder) for pattern in DATE_PLACEHOLDER_PATTERNS)


async def _has_calendar_marker(control: FormControl) -> bool:
    parent = await control.parent()
    if parent is None:
        return False
    return await parent.query(CALENDAR_MARKERS) is not None


async def infer_modality(container: FormControl) -> Tuple[FieldModality, Target]:
    """
    Determine a question's modality from the controls inside its container.

    Precedence is fixed and the first match wins: date-like placeholder or
    calendar icon, text input, textarea, radio group, checkbox group,
    listbox, native date input, email input, file input, file upload button.

    Returns:
        The modality and the control(s) backing it; ``(UNKNOWN, None)`` when
        nothing matches or the container cannot be read
    """
    try:
        for control in await container.query_all("input"):
            placeholder = await control.attribute("placeholder") or ""
            if is_date_placeholder(placeholder):
                logger.debug("Detected date field by placeholder", placeholder=placeholder)
                return FieldModality.DATE, control
            if await _has_calendar_marker(control):
                logger.debug("Detected date field by calendar icon")
                return FieldModality.DATE, control

        text_input = await container.query('input[type="text"]')
        if text_input is not None:
            return FieldModality.TEXT, text_input

        textarea = await container.query("textarea")
        if textarea is not None:
            return FieldModality.PARAGRAPH, textarea

        radios = await container.query_all(RADIO)
        if radios:
            return FieldModality.RADIO, radios

        checkboxes = await container.query_all(CHECKBOX)
        if checkboxes:
            return FieldModality.CHECKBOX, checkboxes

        listbox = await container.query(LISTBOX)
        if listbox is not None:
            return FieldModality.DROPDOWN, listbox

        date_input = await container.query('input[type="date"]')
        if date_input is not None:
            return FieldModality.DATE, date_input

        email_input = await container.query('input[type="email"]')
        if email_input is not None:
            return FieldModality.EMAIL, email_input

        file_input = await container.query('input[type="file"]')
        if file_input is not None:
            return FieldModality.FILE, file_input

        upload_button = await container.query(FILE_UPLOAD_BUTTON)
        if upload_button is not None:
            return FieldModality.FILE_BUTTON, upload_button

    except Exception as e:
        logger.warning("Could not determine field type", error=str(e), error_type=type(e).__name__)

    return FieldModality.UNKNOWN, None


async def _heading_text(container: FormControl, selector: str) -> str:
    heading = await container.query(selector)
    if heading is None:
        return ""
    return (await heading.text()).strip()


async def _contains_control(fields: Sequence[ClassifiedField], control: FormControl) -> bool:
    for field in fields:
        for existing in field.controls:
            if await existing.same_node(control):
                return True
    return False


class QuestionClassifier:
    """Scans a rendered form and classifies every visible question."""

    def __init__(self):
        self.logger = logger.bind(component="question_classifier")

    async def classify(self, page: FormPage) -> List[ClassifiedField]:
        """
        Enumerate the questions on the page in order.

        Args:
            page: Live form page

        Returns:
            Classified fields, ``position`` counting from 0 in discovery order
        """
        self.logger.info("Identifying form fields")
        fields: List[ClassifiedField] = []

        fields.extend(await self._run_pass("question_containers", self._scan_containers(page)))

        if not fields:
            fields.extend(await self._run_pass("direct_controls", self._scan_direct_controls(page)))

        fields.extend(await self._run_pass("attributes", self._scan_attributes(page, fields)))
        fields.extend(await self._run_pass("vendor_classes", self._scan_vendor_roots(page, fields)))

        for field in fields:
            self.logger.info("Classified field", **log_field_context(field))
        self.logger.info("Identified form fields", count=len(fields))
        return fields

    async def _run_pass(self, name: str, scan) -> List[ClassifiedField]:
        try:
            found = await scan
        except Exception as e:
            self.logger.error("Field discovery pass failed", discovery_pass=name, error=str(e))
            return []
        self.logger.debug("Field discovery pass finished", discovery_pass=name, found=len(found))
        return found

    async def _scan_containers(self, page: FormPage) -> List[ClassifiedField]:
        containers = await page.query_all(QUESTION_CONTAINER)
        self.logger.debug("Found question containers", count=len(containers))

        fields = []
        for position, container in enumerate(containers):
            fields.append(await self._classify_container(position, container))
        return fields

    async def _classify_container(self, position: int, container: FormControl) -> ClassifiedField:
        question_text = ""
        try:
            question_text = await _heading_text(container, QUESTION_HEADING)

            # Percentages are always typed as plain text
            if is_percentage_question(question_text):
                first_input = await container.query("input")
                if first_input is not None:
                    self.logger.debug("Percentage field detected", question=question_text)
                    return ClassifiedField(position, question_text, FieldModality.TEXT, first_input)

            modality, target = await infer_modality(container)
            return ClassifiedField(position, question_text, modality, target)

        except Exception as e:
            self.logger.warning(
                "Classification failed, marking field unknown",
                position=position,
                question=question_text,
                error=str(e)
            )
            return ClassifiedField(position, question_text, FieldModality.UNKNOWN, None)

    async def _scan_direct_controls(self, page: FormPage) -> List[ClassifiedField]:
        self.logger.info("No question containers found, looking for direct controls")
        fields: List[ClassifiedField] = []

        for index, control in enumerate(await page.query_all('input[type="text"]')):
            label = await self._nearest_label(control) or f"Text Input {index + 1}"
            fields.append(ClassifiedField(len(fields), label, FieldModality.TEXT, control))

        for index, control in enumerate(await page.query_all('input[type="email"]')):
            label = await self._nearest_label(control) or f"Email {index + 1}"
            fields.append(ClassifiedField(len(fields), label, FieldModality.EMAIL, control))

        for index, group in enumerate(await page.query_all(RADIO_GROUP)):
            label = await self._container_heading(group) or f"Radio Group {index + 1}"
            fields.append(ClassifiedField(len(fields), label, FieldModality.RADIO, await group.query_all(RADIO)))

        for index, group in enumerate(await page.query_all(CHECKBOX_GROUP)):
            checkboxes = await group.query_all(CHECKBOX)
            if checkboxes:
                label = await self._container_heading(group) or f"Checkbox Group {index + 1}"
                fields.append(ClassifiedField(len(fields), label, FieldModality.CHECKBOX, checkboxes))

        for index, listbox in enumerate(await page.query_all(LISTBOX)):
            label = await self._container_heading(listbox) or f"Dropdown {index + 1}"
            fields.append(ClassifiedField(len(fields), label, FieldModality.DROPDOWN, listbox))

        return fields

    async def _nearest_label(self, control: FormControl) -> str:
        wrapper = await control.closest("div")
        if wrapper is None:
            return ""
        return await _heading_text(wrapper, f"label, {QUESTION_HEADING}")

    async def _container_heading(self, control: FormControl) -> str:
        container = await control.closest(QUESTION_CONTAINER)
        if container is None:
            return ""
        return await _heading_text(container, QUESTION_HEADING)

    async def _scan_attributes(self, page: FormPage, existing: List[ClassifiedField]) -> List[ClassifiedField]:
        fields: List[ClassifiedField] = []

        for selector in ATTRIBUTE_SELECTORS:
            for index, control in enumerate(await page.query_all(selector)):
                modality = await self._control_modality(control)
                if modality is None:
                    continue
                if await _contains_control(existing, control) or await _contains_control(fields, control):
                    continue

                label = (
                    await control.attribute("aria-label")
                    or await control.attribute("placeholder")
                    or f"{modality.value.capitalize()} {index + 1}"
                )
                fields.append(ClassifiedField(len(existing) + len(fields), label.strip(), modality, control))

        return fields

    @staticmethod
    async def _control_modality(control: FormControl) -> Optional[FieldModality]:
        if await control.closest("textarea") is not None:
            return FieldModality.PARAGRAPH

        input_type = (await control.attribute("type") or "text").lower()
        if input_type in NON_TEXT_INPUT_TYPES:
            return None
        if input_type == "email":
            return FieldModality.EMAIL
        if input_type == "date":
            return FieldModality.DATE
        return FieldModality.TEXT

    async def _scan_vendor_roots(self, page: FormPage, existing: List[ClassifiedField]) -> List[ClassifiedField]:
        roots = await page.query_all(VENDOR_QUESTION_ROOT)
        self.logger.debug("Found vendor question roots", count=len(roots))
        fields: List[ClassifiedField] = []

        for index, root in enumerate(roots):
            question_text = await _heading_text(root, VENDOR_QUESTION_HEADER) or f"Question {index + 1}"
            modality, target = await infer_modality(root)
            if target is None:
                continue

            first = target[0] if isinstance(target, list) else target
            if await _contains_control(existing, first) or await _contains_control(fields, first):
                continue

            fields.append(ClassifiedField(len(existing) + len(fields), question_text, modality, target))

        return fields


async def classify(page: FormPage) -> List[ClassifiedField]:
    """Classify every question on the page."""
    return await QuestionClassifier().classify(page)
