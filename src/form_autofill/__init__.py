"""
Form Autofill: fills Google Forms from a stored applicant profile.

The fill pass classifies every question on the rendered form, resolves each
question to a profile value through an ordered rule table, applies the value
with a strategy suited to the question's input type, and then leaves the form
open for a person to review and submit. Forms are never submitted
automatically.
"""

__version__ = "0.1.0"

from form_autofill.core.automator import FormAutomator
from form_autofill.core.profile import Profile, load_profile
from form_autofill.core.review import ReviewCheckpoint
from form_autofill.forms.classifier import QuestionClassifier
from form_autofill.forms.filler import FieldFiller
from form_autofill.forms.resolver import ValueResolver, resolve

__all__ = [
    "FormAutomator",
    "Profile",
    "load_profile",
    "ReviewCheckpoint",
    "QuestionClassifier",
    "FieldFiller",
    "ValueResolver",
    "resolve",
]
