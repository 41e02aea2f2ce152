"""Tests for pacing between fields."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from hypothesis import given, settings, strategies as st

from form_autofill.browser.stealth import STEALTH_INIT_SCRIPT, StealthConfig, StealthManager
from form_autofill.config import FieldDelay


class TestStealthManager:
    """Test cases for StealthManager."""

    @given(
        min_ms=st.integers(min_value=0, max_value=2000),
        spread=st.integers(min_value=0, max_value=3000),
    )
    @settings(max_examples=50)
    def test_delay_within_configured_range(self, min_ms, spread):
        manager = StealthManager(StealthConfig(field_delay_min_ms=min_ms, field_delay_max_ms=min_ms + spread))

        for _ in range(10):
            delay = manager.next_field_delay_ms()
            assert min_ms <= delay <= min_ms + spread

    def test_field_delay_sleeps_and_counts(self):
        manager = StealthManager(StealthConfig(field_delay_min_ms=250, field_delay_max_ms=250))

        with patch("form_autofill.browser.stealth.asyncio.sleep", new_callable=AsyncMock) as sleep:
            delay = asyncio.run(manager.field_delay())

        sleep.assert_awaited_once_with(0.25)
        assert delay == 250
        assert manager.action_count == 1

    def test_config_from_field_delay(self):
        config = StealthConfig.from_field_delay(FieldDelay(min_ms=10, max_ms=20))
        assert (config.field_delay_min_ms, config.field_delay_max_ms) == (10, 20)
        assert all("Mozilla" in agent for agent in config.user_agents)

    def test_user_agents_are_not_shared_between_configs(self):
        first, second = StealthConfig(), StealthConfig()
        first.user_agents.append("custom")
        assert "custom" not in second.user_agents

    def test_viewport(self):
        config = StealthConfig(viewport_width=1280, viewport_height=720)
        assert config.viewport == {"width": 1280, "height": 720}

    @pytest.mark.asyncio
    async def test_setup_stealth_context(self):
        context = AsyncMock()
        await StealthManager().setup_stealth_context(context)

        context.add_init_script.assert_awaited_once_with(STEALTH_INIT_SCRIPT)
        headers = context.set_extra_http_headers.await_args.args[0]
        assert headers["User-Agent"] in StealthConfig().user_agents
