"""Delayed callbacks on the asyncio event loop.

Every delay in the daemon (settle delays, the "safe to unplug" notice,
presence restore, sleep-inhibitor release) goes through Scheduler so tests
can substitute a recording implementation.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Set

logger = logging.getLogger(__name__)


class Scheduler:
    """Runs callbacks after a delay.

    Scheduled callbacks always fire while the daemon runs; pending timers
    are only cancelled by shutdown().
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.Task:
        """Schedule callback(*args) after delay seconds.

        Args:
            delay: Seconds to wait
            callback: Plain function or coroutine function

        Returns:
            The background task
        """
        task = asyncio.create_task(self._run_later(delay, callback, *args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def spawn(self, callback: Callable[..., Any], *args: Any) -> asyncio.Task:
        """Run callback in the background without delay (fire-and-forget)."""
        return self.call_later(0, callback, *args)

    async def _run_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        name = getattr(callback, "__qualname__", repr(callback))
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Scheduled callback {name} failed: {e}", exc_info=True)

    async def shutdown(self) -> None:
        """Cancel pending callbacks (daemon stop only)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} pending scheduled callback(s)")
