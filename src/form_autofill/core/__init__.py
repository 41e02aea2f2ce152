"""Profile, fill-pass models and the review checkpoint."""

from form_autofill.core.models import (
    NOT_APPLICABLE,
    ClassifiedField,
    FieldModality,
    FieldOutcome,
    FillReport,
    FillStatus,
)
from form_autofill.core.profile import Profile, load_profile
from form_autofill.core.review import ReviewCheckpoint

__all__ = [
    "NOT_APPLICABLE",
    "ClassifiedField",
    "FieldModality",
    "FieldOutcome",
    "FillReport",
    "FillStatus",
    "Profile",
    "load_profile",
    "ReviewCheckpoint",
]
