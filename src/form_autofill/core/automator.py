"""Top-level fill pass: connect, open, classify, fill, then hand over for review."""

from typing import Optional

from form_autofill.browser.agent import BrowserSession
from form_autofill.browser.stealth import StealthConfig, StealthManager
from form_autofill.config import Settings
from form_autofill.core.models import FillReport
from form_autofill.core.profile import Profile
from form_autofill.core.review import ReviewCheckpoint
from form_autofill.errors import BrowserUnavailableError
from form_autofill.forms.classifier import QuestionClassifier
from form_autofill.forms.filler import FieldFiller
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


class FormAutomator:
    """Runs one fill pass against a form URL. The form is never submitted."""

    def __init__(
        self,
        profile: Profile,
        settings: Optional[Settings] = None,
        session: Optional[BrowserSession] = None,
        classifier: Optional[QuestionClassifier] = None,
        filler: Optional[FieldFiller] = None
    ):
        self.settings = settings or Settings()
        self.profile = profile
        self.stealth_manager = StealthManager(StealthConfig.from_field_delay(self.settings.field_delay))
        self.session = session or BrowserSession(self.settings.browser, self.stealth_manager)
        self.classifier = classifier or QuestionClassifier()
        self.filler = filler or FieldFiller(profile, self.settings, self.stealth_manager)
        self.logger = logger.bind(component="form_automator")

    async def run(self, url: str, checkpoint: Optional[ReviewCheckpoint] = None) -> FillReport:
        """
        Fill the form at `url` and wait for manual review.

        Args:
            url: Form URL
            checkpoint: Awaited after filling; the pass returns once it is
                released. Without one the pass returns immediately.

        Returns:
            Report of the fill pass

        Raises:
            BrowserUnavailableError: If no browser session could be obtained
        """
        self.logger.info("Starting to fill form", url=url)
        if self.settings.auto_submit:
            self.logger.warning("auto_submit is set but forms are never submitted automatically")

        try:
            if not await self.session.connect():
                raise BrowserUnavailableError("Failed to connect to a browser, aborting form filling")

            page = await self.session.open_form(url)
            fields = await self.classifier.classify(page)
            report = await self.filler.fill_all(page, fields)

            self.logger.info(
                "FORM FILLING COMPLETED. The form has been filled but NOT submitted. "
                "Review the answers and submit manually.",
                url=url,
                **report.summary()
            )

            if checkpoint is not None:
                reason = await checkpoint.wait()
                self.logger.info("Review finished", reason=reason)

            return report

        finally:
            await self.session.close()


def create_form_automator(profile: Profile, settings: Optional[Settings] = None) -> FormAutomator:
    """Factory function to create a form automator."""
    return FormAutomator(profile, settings=settings)
