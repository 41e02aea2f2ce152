"""Form filling: resolve each classified question and apply its modality strategy."""

from typing import Dict, List, Optional

from form_autofill.browser.page import FormPage
from form_autofill.browser.stealth import StealthConfig, StealthManager
from form_autofill.config import Settings
from form_autofill.core.models import (
    ClassifiedField,
    FieldModality,
    FieldOutcome,
    FillReport,
    FillStatus,
)
from form_autofill.core.profile import Profile
from form_autofill.forms.dates import DateFieldStrategy
from form_autofill.forms.resolver import ValueResolver
from form_autofill.forms.strategies import (
    AgreementCheckboxStrategy,
    DropdownStrategy,
    ParagraphStrategy,
    RadioStrategy,
    StandardCheckboxStrategy,
    TextStrategy,
    is_agreement_question,
)
from form_autofill.utils.logging import get_logger, log_field_context

logger = get_logger(__name__)


class FieldFiller:
    """Fills classified fields one at a time with profile data."""

    def __init__(
        self,
        profile: Profile,
        settings: Optional[Settings] = None,
        stealth_manager: Optional[StealthManager] = None,
        resolver: Optional[ValueResolver] = None,
        date_strategy: Optional[DateFieldStrategy] = None
    ):
        """
        Initialize the field filler.

        Args:
            profile: Profile answering the questions
            settings: Application settings; defaults are used when omitted
            stealth_manager: Paces consecutive fields
            resolver: Question-to-value resolver
            date_strategy: Date entry strategy
        """
        self.settings = settings or Settings()
        self.profile = profile
        self.stealth_manager = stealth_manager or StealthManager(
            StealthConfig.from_field_delay(self.settings.field_delay)
        )
        self.resolver = resolver or ValueResolver(student_dob=self.settings.student_dob)
        self.date_strategy = date_strategy or DateFieldStrategy(self.settings.student_dob)
        self.logger = logger.bind(component="field_filler")

        text = TextStrategy(self.settings.college_email_domain)
        self.strategies: Dict[FieldModality, object] = {
            FieldModality.TEXT: text,
            FieldModality.EMAIL: text,
            FieldModality.PARAGRAPH: ParagraphStrategy(),
            FieldModality.RADIO: RadioStrategy(profile),
            FieldModality.DROPDOWN: DropdownStrategy(),
        }
        self.agreement_checkboxes = AgreementCheckboxStrategy()
        self.standard_checkboxes = StandardCheckboxStrategy()

    def strategy_for(self, field: ClassifiedField):
        if field.modality is FieldModality.CHECKBOX:
            if is_agreement_question(field.question_text):
                return self.agreement_checkboxes
            return self.standard_checkboxes
        return self.strategies.get(field.modality)

    async def fill(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        """
        Apply a value to one field.

        Never raises: strategy errors are logged and reported as False.

        Args:
            page: Live form page
            field: Classified field to fill
            value: Resolved value

        Returns:
            True if the field was filled
        """
        try:
            return await self._apply(page, field, value)
        except Exception as e:
            self.logger.error("Error filling field", error=str(e), **log_field_context(field))
            return False

    async def _apply(self, page: FormPage, field: ClassifiedField, value: str) -> bool:
        if not field.modality.fillable or not field.controls:
            self.logger.info("Skipping field", reason="not fillable", **log_field_context(field))
            return False

        if field.modality is FieldModality.DATE:
            return await self.date_strategy.fill(page, field.controls[0], field.question_text, value)

        strategy = self.strategy_for(field)
        if strategy is None:
            self.logger.warning("Unsupported field type", **log_field_context(field))
            return False
        return await strategy.fill(page, field, value)

    async def fill_all(self, page: FormPage, fields: List[ClassifiedField]) -> FillReport:
        """
        Fill every field in order, pacing between fields and continuing past failures.

        Args:
            page: Live form page
            fields: Classified fields in page order

        Returns:
            Report with one outcome per field
        """
        self.logger.info("Filling form fields", count=len(fields))
        report = FillReport()

        for field in fields:
            if not field.modality.fillable or not field.controls:
                self.logger.info("Skipping field", **log_field_context(field))
                report.record(self._outcome(field, FillStatus.SKIPPED))
                continue

            value = None
            try:
                value = self.resolver.resolve(field.question_text, self.profile)
                self.logger.info("Data to fill", question=field.question_text, value=value)

                if await self._apply(page, field, value):
                    report.record(self._outcome(field, FillStatus.FILLED, value))
                else:
                    report.record(self._outcome(field, FillStatus.FAILED, value))

            except Exception as e:
                self.logger.error("Error processing field", question=field.question_text, error=str(e))
                report.record(self._outcome(field, FillStatus.FAILED, value, error=str(e)))

            await self.stealth_manager.field_delay()

        report.finish()
        self.logger.info("Form filling completed", **report.summary())
        return report

    @staticmethod
    def _outcome(
        field: ClassifiedField,
        status: FillStatus,
        value: Optional[str] = None,
        error: Optional[str] = None
    ) -> FieldOutcome:
        return FieldOutcome(
            position=field.position,
            question_text=field.question_text,
            modality=field.modality,
            status=status,
            value=value,
            error=error
        )


def create_field_filler(
    profile: Profile,
    settings: Optional[Settings] = None,
    stealth_manager: Optional[StealthManager] = None
) -> FieldFiller:
    """Factory function to create a field filler."""
    return FieldFiller(profile, settings=settings, stealth_manager=stealth_manager)
