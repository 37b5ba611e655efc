"""Bounded retry with a fixed delay schedule."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, Tuple

from .models import StatusResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry schedule.

    Delay i is waited after failed attempt i when another attempt remains,
    so with the defaults the waits are 5s then 10s. Delays past the end of
    the schedule reuse the last entry.
    """
    max_attempts: int = 3
    delays: Tuple[float, ...] = (5.0, 10.0, 20.0)

    @classmethod
    def from_timings(cls, attempts: int, delays: Sequence[float]) -> "RetryPolicy":
        return cls(max_attempts=attempts, delays=tuple(delays))

    def delay_after(self, attempt: int) -> float:
        """Delay following a failed 1-based attempt."""
        index = min(attempt, len(self.delays)) - 1
        return self.delays[index]

    async def run(
        self,
        operation: Callable[[], Awaitable[StatusResult]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        label: str = "operation",
    ) -> StatusResult:
        """
        Run operation until it succeeds or attempts run out.

        Args:
            operation: Coroutine function returning a StatusResult
            sleep: Awaitable sleep, injectable for tests
            label: Name used in log lines

        Returns:
            Final StatusResult with attempts set
        """
        result = StatusResult(ok=False, error="not attempted", attempts=0)
        for attempt in range(1, self.max_attempts + 1):
            result = await operation()
            result.attempts = attempt
            if result.ok:
                if attempt > 1:
                    logger.info(f"{label} succeeded on attempt {attempt}")
                return result

            if attempt < self.max_attempts:
                delay = self.delay_after(attempt)
                logger.warning(
                    f"{label} failed (attempt {attempt}/{self.max_attempts}): {result.error}; "
                    f"retrying in {delay:.0f}s"
                )
                await sleep(delay)

        logger.error(f"{label} failed after {self.max_attempts} attempts: {result.error}")
        return result
