"""Shared fixtures."""

import pytest

from form_autofill.browser.stealth import StealthConfig, StealthManager
from form_autofill.config import FieldDelay, Settings
from form_autofill.core.profile import load_profile


@pytest.fixture(scope="session")
def profile():
    """The bundled sample profile."""
    return load_profile()


@pytest.fixture
def fast_settings():
    """Settings with no pacing between fields."""
    return Settings(field_delay=FieldDelay(min_ms=0, max_ms=0))


@pytest.fixture
def no_delay_stealth():
    return StealthManager(StealthConfig(field_delay_min_ms=0, field_delay_max_ms=0))
