"""
Mode controller.

The six user-facing procedures (work, home, meeting, eod, walk, lunch) and
the automatic work setup used by the watchers. Each procedure catches
and logs its own failures; a ModeResult reports what happened.
"""

import logging
from typing import Awaitable, Callable, Dict

from .displays import DisplayQuery
from .models import EjectMethod, Mode, ModeResult, ModesConfig, Presence
from .placer import WindowPlacer
from .slack import SlackNotifier
from .system import EjectOutcome, Notifier, ScreenLocker, SleepInhibitor, VolumeEjector

logger = logging.getLogger(__name__)


class ModeController:
    """Runs named mode procedures."""

    def __init__(
        self,
        config: ModesConfig,
        displays: DisplayQuery,
        placer: WindowPlacer,
        slack: SlackNotifier,
        notifier: Notifier,
        ejector: VolumeEjector,
        locker: ScreenLocker,
        inhibitor: SleepInhibitor,
        scheduler,
    ):
        self.config = config
        self.displays = displays
        self.placer = placer
        self.slack = slack
        self.notifier = notifier
        self.ejector = ejector
        self.locker = locker
        self.inhibitor = inhibitor
        self.scheduler = scheduler

    @property
    def handlers(self) -> Dict[Mode, Callable[[], Awaitable[ModeResult]]]:
        return {
            Mode.WORK: self.work,
            Mode.HOME: self.home,
            Mode.MEETING: self.meeting,
            Mode.EOD: self.eod,
            Mode.WALK: self.walk,
            Mode.LUNCH: self.lunch,
        }

    async def run(self, mode: Mode) -> ModeResult:
        """Run a mode by name, converting unexpected failures to a result."""
        logger.info(f"Running {mode.value} mode")
        try:
            return await self.handlers[mode]()
        except Exception as e:
            logger.error(f"{mode.value} mode failed: {e}", exc_info=True)
            return ModeResult(mode=mode.value, completed=False, message=str(e))

    async def _check_displays(self, mode: Mode, required: int):
        """Return the display count, or a failed ModeResult when too few."""
        count = await self.displays.count()
        if count < required:
            message = (
                f"Warning: Only {count} display(s) detected. "
                f"Expected {required} for {mode.value} setup."
            )
            logger.warning(message)
            await self.notifier.send("Display Arrangement", message)
            return ModeResult(mode=mode.value, completed=False, message=message)
        return count

    async def _arrange_mode(self, mode: Mode, required: int) -> ModeResult:
        checked = await self._check_displays(mode, required)
        if isinstance(checked, ModeResult):
            return checked

        placement = await self.placer.arrange(self.config.layout_for(mode))
        self.slack.set_status_async(self.config.status_for(mode))

        message = f"Arranged {placement.moved} window(s) across {checked} displays"
        await self.notifier.send(f"{mode.value.title()} Setup Complete", message)
        logger.info(
            f"{mode.value.title()} arrangement complete: "
            f"{placement.moved} moved, {placement.failed} failed"
        )
        return ModeResult(
            mode=mode.value,
            completed=True,
            moved=placement.moved,
            failed=placement.failed,
            message=message,
        )

    async def work(self) -> ModeResult:
        return await self._arrange_mode(Mode.WORK, self.config.displays.work)

    async def home(self) -> ModeResult:
        return await self._arrange_mode(Mode.HOME, self.config.displays.home)

    async def auto_work(self) -> ModeResult:
        """
        Work setup triggered by the watchers.

        Windows are arranged before any network call; the status update
        runs in the background with retries because the network may still
        be coming up.
        """
        checked = await self._check_displays(Mode.WORK, self.config.displays.work)
        if isinstance(checked, ModeResult):
            return checked

        placement = await self.placer.arrange(self.config.layout_for(Mode.WORK))
        logger.info(f"Work arrangement complete: {placement.moved} moved, {placement.failed} failed")

        message = f"Arranged {placement.moved} window(s) across {checked} displays"
        await self.notifier.send("Work Setup Complete", message)

        status = self.config.status_for(Mode.WORK)
        if status is not None:
            self.scheduler.spawn(self.slack.set_status_with_retry, status, self._on_auto_status)

        return ModeResult(
            mode=Mode.WORK.value,
            completed=True,
            moved=placement.moved,
            failed=placement.failed,
            message=message,
        )

    @staticmethod
    def _on_auto_status(success: bool) -> None:
        if success:
            logger.info("Slack status updated successfully")
        else:
            logger.warning("Slack status update failed after retries")

    async def meeting(self) -> ModeResult:
        moved = await self.placer.consolidate_to_primary()
        failed = 0

        layout = self.config.layout_for(Mode.MEETING)
        if layout:
            placement = await self.placer.arrange(layout)
            moved += placement.moved
            failed = placement.failed

        notes_app = self.config.meeting.notes_app
        if notes_app:
            self.scheduler.call_later(self.config.timings.meeting_focus_delay, self.placer.activate, notes_app)

        self.slack.set_status_async(self.config.status_for(Mode.MEETING))

        message = f"Ready for meeting - {notes_app or 'windows arranged'}"
        await self.notifier.send("Meeting Setup Complete", message)
        logger.info(f"Meeting arrangement complete: {moved} windows moved")
        return ModeResult(mode=Mode.MEETING.value, completed=True, moved=moved, failed=failed, message=message)

    async def _eject(self) -> None:
        eod = self.config.eod
        if eod.eject_method == EjectMethod.NONE:
            logger.info("Volume ejection disabled")
            return

        if eod.eject_method == EjectMethod.LAUNCHER:
            if not await self.ejector.run_external(eod.launcher_command):
                await self.notifier.send("EOD Setup", "Eject command failed - make sure backups are complete")
            return

        if not eod.volume_name:
            logger.debug("No volume configured for ejection")
            return

        logger.info(f"Attempting to eject {eod.volume_name}...")
        outcome = await self.ejector.eject(eod.volume_name)
        if outcome == EjectOutcome.EJECTED:
            logger.info(f"{eod.volume_name} ejected successfully")
        else:
            await self.notifier.send(
                "EOD Setup",
                f"Could not eject {eod.volume_name} - make sure backups are complete",
            )

    async def eod(self) -> ModeResult:
        await self._eject()

        moved = 0
        if self.config.eod.consolidate_windows:
            moved = await self.placer.consolidate_to_primary()

        self.slack.set_status_async(self.config.status_for(Mode.EOD))

        await self.notifier.send("EOD Setup", "Ejecting disks...")
        logger.info(f"EOD arrangement complete: {moved} windows moved to primary display")
        self.scheduler.call_later(self.config.timings.unplug_notice_delay, self._safe_to_unplug)
        return ModeResult(mode=Mode.EOD.value, completed=True, moved=moved, message="Safe to unplug shortly")

    async def _safe_to_unplug(self) -> None:
        logger.info("Disk ejection delay complete - safe to unplug")
        await self.notifier.send("EOD Setup Complete", "Safe to unplug!")

    async def _away(self, mode: Mode, default_minutes: int) -> ModeResult:
        """Shared walk/lunch procedure."""
        status = self.config.status_for(mode)
        minutes = default_minutes
        if status is not None and status.expiration_minutes:
            minutes = status.expiration_minutes
        seconds = minutes * 60

        if status is not None:
            self.slack.set_status_async(status, minutes)
            if status.presence == Presence.AWAY:
                self.scheduler.call_later(seconds, self._restore_presence, mode)

        await self.notifier.send(
            f"{mode.value.title()} Setup Complete",
            f"Screen will lock. Status clears in {minutes} min.",
        )

        await self.inhibitor.hold(seconds, why=f"{mode.value.title()} break")
        self.scheduler.call_later(self.config.timings.lock_delay, self.locker.lock)
        logger.info(f"{mode.value.title()} setup complete")
        return ModeResult(mode=mode.value, completed=True, message=f"Away for {minutes} min")

    async def _restore_presence(self, mode: Mode) -> None:
        logger.info(f"{mode.value.title()} timer expired - restoring presence to auto")
        await self.slack.set_presence(Presence.AUTO)

    async def walk(self) -> ModeResult:
        return await self._away(Mode.WALK, self.config.away.walk)

    async def lunch(self) -> ModeResult:
        return await self._away(Mode.LUNCH, self.config.away.lunch)
