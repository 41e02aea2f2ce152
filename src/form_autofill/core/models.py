"""Core data models for a single form-fill pass."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from form_autofill.browser.page import FormControl


NOT_APPLICABLE = "Not applicable"


class FieldModality(str, Enum):
    """Input modality of a form question."""
    TEXT = "text"
    EMAIL = "email"
    PARAGRAPH = "paragraph"
    DATE = "date"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"
    FILE = "file"
    FILE_BUTTON = "fileButton"
    UNKNOWN = "unknown"

    @property
    def fillable(self) -> bool:
        return self not in SKIPPED_MODALITIES

    @property
    def grouped(self) -> bool:
        """Whether the field is backed by an ordered group of controls."""
        return self in (FieldModality.RADIO, FieldModality.CHECKBOX)


SKIPPED_MODALITIES = frozenset({FieldModality.FILE, FieldModality.FILE_BUTTON, FieldModality.UNKNOWN})


@dataclass
class ClassifiedField:
    """One question found on the page during a single scan."""
    position: int
    question_text: str
    modality: FieldModality
    target: Union[FormControl, Sequence[FormControl], None] = None

    @property
    def controls(self) -> List[FormControl]:
        """The backing controls as a list, whatever the modality."""
        if self.target is None:
            return []
        if isinstance(self.target, (list, tuple)):
            return list(self.target)
        return [self.target]


class FillStatus(str, Enum):
    FILLED = "filled"
    FAILED = "failed"
    SKIPPED = "skipped"


class FieldOutcome(BaseModel):
    """Result of processing one classified field."""
    position: int = Field(..., description="Position of the field on the page")
    question_text: str = Field(..., description="Question label")
    modality: FieldModality = Field(..., description="Classified modality")
    status: FillStatus = Field(..., description="What happened to the field")
    value: Optional[str] = Field(None, description="Resolved value, if any")
    error: Optional[str] = Field(None, description="Error message if the fill raised")


class FillReport(BaseModel):
    """Summary of a complete fill pass."""
    success: bool = Field(False, description="At least one field filled and nothing raised")
    filled_fields: List[str] = Field(default_factory=list)
    failed_fields: List[str] = Field(default_factory=list)
    skipped_fields: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    outcomes: List[FieldOutcome] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    def record(self, outcome: FieldOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status is FillStatus.FILLED:
            self.filled_fields.append(outcome.question_text)
        elif outcome.status is FillStatus.FAILED:
            self.failed_fields.append(outcome.question_text)
            if outcome.error:
                self.errors.append(f"{outcome.question_text}: {outcome.error}")
        else:
            self.skipped_fields.append(outcome.question_text)

    def finish(self) -> "FillReport":
        self.finished_at = datetime.now()
        self.success = bool(self.filled_fields) and not self.errors
        return self

    def summary(self) -> dict:
        return {
            "filled": len(self.filled_fields),
            "failed": len(self.failed_fields),
            "skipped": len(self.skipped_fields),
            "errors": len(self.errors),
        }
