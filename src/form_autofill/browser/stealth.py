"""Human-like pacing between field fills and context masking for launched browsers."""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from playwright.async_api import BrowserContext

from form_autofill.config import FieldDelay
from form_autofill.utils.logging import get_logger

logger = get_logger(__name__)


DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
]


@dataclass
class StealthConfig:
    """Configuration for pacing and stealth operations (milliseconds)."""
    field_delay_min_ms: int = 500
    field_delay_max_ms: int = 1500
    viewport_width: int = 1366
    viewport_height: int = 768
    user_agents: List[str] = field(default_factory=lambda: list(DEFAULT_USER_AGENTS))

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    @classmethod
    def from_field_delay(cls, delay: FieldDelay) -> "StealthConfig":
        return cls(field_delay_min_ms=delay.min_ms, field_delay_max_ms=delay.max_ms)


STEALTH_INIT_SCRIPT = """
    // Override webdriver property
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });

    // Override languages
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en'],
    });
"""


class StealthManager:
    """Paces the fill pass so consecutive fields are not written back to back."""

    def __init__(self, config: Optional[StealthConfig] = None):
        self.config = config or StealthConfig()
        self.action_count = 0

    def next_field_delay_ms(self) -> float:
        """Draw the pause before the next field, uniform in the configured range."""
        return random.uniform(self.config.field_delay_min_ms, self.config.field_delay_max_ms)

    async def field_delay(self) -> float:
        """Sleep for a randomized inter-field delay and return it in milliseconds."""
        self.action_count += 1
        delay_ms = self.next_field_delay_ms()

        logger.debug("Pacing before next field", delay_ms=round(delay_ms, 1), action_count=self.action_count)
        await asyncio.sleep(delay_ms / 1000)
        return delay_ms

    async def setup_stealth_context(self, context: BrowserContext) -> None:
        """Configure a freshly launched browser context with stealth settings."""
        logger.info("Setting up stealth browser context")

        user_agent = random.choice(self.config.user_agents)
        await context.set_extra_http_headers({
            "User-Agent": user_agent,
            "Accept-Language": "en-US,en;q=0.5",
        })
        await context.add_init_script(STEALTH_INIT_SCRIPT)

