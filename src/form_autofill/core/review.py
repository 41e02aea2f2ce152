"""Human review checkpoint held open after the form has been filled."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class ReviewCheckpoint:
    """
    Keeps the filled form open until a person is done with it.

    Submission is never automated. Once filling finishes, the automator awaits
    this checkpoint; it resolves only when something outside the fill pass
    calls `release`, typically a signal handler or the caller's own shutdown.
    """

    def __init__(self):
        self._released = asyncio.Event()
        self.reason: Optional[str] = None
        self.opened_at: Optional[datetime] = None
        self.released_at: Optional[datetime] = None
        self.logger = logger.bind(component="review_checkpoint")

    @property
    def released(self) -> bool:
        return self._released.is_set()

    def release(self, reason: str = "released") -> None:
        """Let the waiting fill pass finish. Only the first reason is kept."""
        if self._released.is_set():
            return
        self.reason = reason
        self.released_at = datetime.now(timezone.utc)
        self._released.set()
        self.logger.info("Review checkpoint released", reason=reason)

    async def wait(self) -> str:
        """
        Block until released.

        Returns:
            The reason passed to `release`
        """
        self.opened_at = datetime.now(timezone.utc)
        self.logger.info("Waiting for manual review and submission")
        await self._released.wait()
        return self.reason
