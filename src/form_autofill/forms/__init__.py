"""Question classification, value resolution and field filling."""

from form_autofill.forms.classifier import QuestionClassifier, classify
from form_autofill.forms.filler import FieldFiller, create_field_filler
from form_autofill.forms.resolver import ValueResolver, resolve

__all__ = [
    "QuestionClassifier",
    "classify",
    "FieldFiller",
    "create_field_filler",
    "ValueResolver",
    "resolve",
]
