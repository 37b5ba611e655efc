"""
Event watchers.

- DisplayWatcher: reacts to the display count changing on output events
  (automatic EOD on unplug, automatic work on plug-in)
- WakeWatcher: reacts to system resume, screens waking and session unlock,
  and runs the one-shot startup check

Watcher state lives on a WatcherState object owned by the daemon and is
reset when the process restarts.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from .displays import DisplayQuery
from .models import Display, ModesConfig

logger = logging.getLogger(__name__)


class WakeEvent(str, Enum):
    """Signals that may mean the machine came back while docked."""
    SYSTEM_WAKE = "System wake"
    SCREENS_WAKE = "Screens wake"
    SCREEN_UNLOCKED = "Screen unlocked"


STARTUP_SOURCE = "Startup check"


@dataclass
class WatcherState:
    """Mutable state shared by the watchers."""
    previous_display_count: int = 0
    last_wake_check: Optional[float] = None
    output_dpms: Dict[str, bool] = field(default_factory=dict)


def _current_hour() -> int:
    return datetime.now().hour


class WakeWatcher:
    """Triggers automatic work setup after wake-like events."""

    def __init__(
        self,
        config: ModesConfig,
        displays: DisplayQuery,
        controller,
        scheduler,
        state: WatcherState,
        monotonic: Callable[[], float] = time.monotonic,
        hour: Callable[[], int] = _current_hour,
    ):
        self.config = config
        self.displays = displays
        self.controller = controller
        self.scheduler = scheduler
        self.state = state
        self.monotonic = monotonic
        self.hour = hour

    def on_wake_event(self, event: WakeEvent) -> None:
        """Schedule the auto-work check once displays and network settle."""
        logger.info(f"Wake event: {event.value}")
        self.scheduler.call_later(
            self.config.timings.wake_delay,
            self.check_and_trigger_auto_work,
            event.value,
        )

    def schedule_startup_check(self) -> None:
        """Run the check once shortly after start, if auto-work is enabled."""
        if not self.config.automation.auto_work_on_plug:
            return
        self.scheduler.call_later(
            self.config.timings.startup_delay,
            self.check_and_trigger_auto_work,
            STARTUP_SOURCE,
        )

    def observe_outputs(self, displays: Iterable[Display]) -> bool:
        """
        Track DPMS state and emit a screens-wake event on an off to on edge.

        Returns:
            True if any output woke
        """
        woke = []
        seen = {}
        for display in displays:
            seen[display.name] = display.dpms
            if display.dpms and self.state.output_dpms.get(display.name) is False:
                woke.append(display.name)
        self.state.output_dpms = seen

        if woke:
            logger.debug(f"Outputs woke: {', '.join(woke)}")
            self.on_wake_event(WakeEvent.SCREENS_WAKE)
            return True
        return False

    async def check_and_trigger_auto_work(self, source: str) -> bool:
        """
        Shared check for wake signals and startup.

        Debounces against the last check (the timestamp is updated before
        the feature toggle is consulted), then requires auto-work enabled,
        exactly the work display count, and the morning window if set.

        Returns:
            True if auto-work ran
        """
        now = self.monotonic()
        debounce = self.config.timings.wake_debounce
        if self.state.last_wake_check is not None and now - self.state.last_wake_check < debounce:
            elapsed = now - self.state.last_wake_check
            logger.info(f"Skipping {source} check - already checked {elapsed:.0f} seconds ago")
            return False
        self.state.last_wake_check = now

        automation = self.config.automation
        if not automation.auto_work_on_plug:
            return False

        required = self.config.displays.work
        count = await self.displays.count()
        logger.info(f"{source}: {count} displays detected")

        if count != required:
            logger.info(f"{source} with {count} displays - no auto-work needed")
            return False

        if automation.morning_only:
            if not automation.within_morning_window(self.hour()):
                logger.info("Outside morning window - skipping auto-work")
                return False
            logger.info("Within morning window - auto-work will trigger")

        logger.info(f"{source} with {count} displays - triggering automatic Work setup")
        await self.controller.auto_work()
        return True


class DisplayWatcher:
    """Display-count state machine driven by Sway output events."""

    def __init__(
        self,
        config: ModesConfig,
        displays: DisplayQuery,
        controller,
        scheduler,
        state: WatcherState,
        wake: Optional[WakeWatcher] = None,
        hour: Callable[[], int] = _current_hour,
    ):
        self.config = config
        self.displays = displays
        self.controller = controller
        self.scheduler = scheduler
        self.state = state
        self.wake = wake
        self.hour = hour

    async def seed(self) -> int:
        """Record the current display count and DPMS states."""
        displays = await self.displays.all()
        self.state.previous_display_count = len(displays)
        self.state.output_dpms = {d.name: d.dpms for d in displays}
        logger.info(f"Display watcher seeded with {len(displays)} display(s)")
        return len(displays)

    async def on_output(self, sway, event) -> None:
        """i3ipc output event handler."""
        try:
            displays = await self.displays.all()
            self.handle_display_change(len(displays))
            if self.wake is not None:
                self.wake.observe_outputs(displays)
        except Exception as e:
            logger.error(f"Error handling output event: {e}", exc_info=True)

    def handle_display_change(self, current: int) -> None:
        """
        Apply the plug/unplug transitions for a new display count.

        The previous count is always updated, whatever the outcome.
        """
        previous = self.state.previous_display_count
        automation = self.config.automation

        if current != previous:
            logger.info(f"Display change detected: {previous} -> {current} displays")

        if current < previous and current == 1 and automation.auto_eod_on_unplug:
            logger.info("Unplugging detected - triggering automatic EOD")
            self.scheduler.call_later(self.config.timings.unplug_delay, self.controller.eod)

        if current > previous and current == self.config.displays.work and automation.auto_work_on_plug:
            should_trigger = True
            if automation.morning_only:
                if automation.within_morning_window(self.hour()):
                    logger.info("Within morning window - auto-work will trigger")
                else:
                    logger.info("Outside morning window - skipping auto-work")
                    should_trigger = False

            if should_trigger:
                logger.info(f"Plugging into {current} displays detected - triggering automatic Work setup")
                self.scheduler.call_later(self.config.timings.plug_delay, self.controller.auto_work)

        self.state.previous_display_count = current
