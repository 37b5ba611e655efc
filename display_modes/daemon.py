"""
Display Modes Daemon

Connects to Sway, wires the mode controller to the display and wake
watchers, and serves mode requests over the IPC socket.
"""
# Module can be run with: python -m display_modes daemon

import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from i3ipc.aio import Connection

from .config import ConfigLoader
from .displays import DisplayQuery
from .errors import ModeError, SwayIPCError
from .ipc_server import IPCServer
from .login1 import Login1Watcher
from .models import ModesConfig
from .modes import ModeController
from .placer import WindowPlacer
from .retry import RetryPolicy
from .scheduler import Scheduler
from .slack import SlackNotifier
from .system import Notifier, ScreenLocker, SleepInhibitor, VolumeEjector
from .watchers import DisplayWatcher, WakeWatcher, WatcherState

logger = logging.getLogger(__name__)


class DisplayModesDaemon:
    """Main daemon for display mode automation."""

    def __init__(
        self,
        config: Optional[ModesConfig] = None,
        config_path: Optional[Path] = None,
        socket_path: Optional[Path] = None,
    ):
        """
        Initialize daemon.

        Args:
            config: Preloaded configuration (loaded from disk if None)
            config_path: Explicit config file for the loader
            socket_path: IPC socket override
        """
        self.config = config or ConfigLoader(config_path=config_path).load()
        self.socket_path = socket_path
        self.sway: Optional[Connection] = None
        self.running = False

        self.scheduler = Scheduler()
        self.state = WatcherState()
        self.notifier = Notifier()
        self.inhibitor = SleepInhibitor(self.scheduler)

        self.displays: Optional[DisplayQuery] = None
        self.placer: Optional[WindowPlacer] = None
        self.slack: Optional[SlackNotifier] = None
        self.controller: Optional[ModeController] = None
        self.display_watcher: Optional[DisplayWatcher] = None
        self.wake_watcher: Optional[WakeWatcher] = None
        self.login1: Optional[Login1Watcher] = None
        self.ipc_server: Optional[IPCServer] = None

    def build_components(self, sway) -> None:
        """Create the components around a Sway connection."""
        timings = self.config.timings
        self.displays = DisplayQuery(sway)
        self.placer = WindowPlacer(sway, self.displays)
        self.slack = SlackNotifier(
            self.config.slack,
            self.scheduler,
            notifier=self.notifier,
            retry=RetryPolicy.from_timings(timings.retry_attempts, timings.retry_delays),
        )
        self.controller = ModeController(
            config=self.config,
            displays=self.displays,
            placer=self.placer,
            slack=self.slack,
            notifier=self.notifier,
            ejector=VolumeEjector(),
            locker=ScreenLocker(),
            inhibitor=self.inhibitor,
            scheduler=self.scheduler,
        )

        automation = self.config.automation
        if automation.auto_work_on_plug:
            self.wake_watcher = WakeWatcher(
                self.config, self.displays, self.controller, self.scheduler, self.state
            )
        self.display_watcher = DisplayWatcher(
            self.config, self.displays, self.controller, self.scheduler, self.state, wake=self.wake_watcher
        )

    async def start(self):
        """Start the daemon and run until stopped."""
        logger.info("Starting Display Modes Daemon")

        try:
            self.sway = await Connection(auto_reconnect=True).connect()
            logger.info("Connected to Sway IPC")
        except Exception as e:
            raise SwayIPCError("connect", str(e))

        self.build_components(self.sway)

        await self.display_watcher.seed()
        await self._subscribe_events()
        self._start_wake_watcher()

        self.ipc_server = IPCServer(self, socket_path=self.socket_path)
        await self.ipc_server.start()

        self.running = True
        await self.notifier.send("Display Manager", f"Daemon loaded - {self.feature_summary()}")
        logger.info("Daemon started successfully")

        if self.wake_watcher is not None:
            self.wake_watcher.schedule_startup_check()

        await self._run_event_loop()

    async def stop(self):
        """Stop the daemon."""
        logger.info("Stopping daemon...")
        self.running = False

        if self.login1:
            self.login1.stop()

        if self.ipc_server:
            await self.ipc_server.stop()

        released = await self.inhibitor.release_all()
        if released:
            logger.info(f"Released {released} sleep inhibitor(s)")

        await self.scheduler.shutdown()

        if self.slack:
            await self.slack.close()

        if self.sway:
            self.sway.main_quit()

        logger.info("Daemon stopped")

    def feature_summary(self) -> str:
        automation = self.config.automation
        features = []
        if automation.auto_eod_on_unplug:
            features.append("Auto-EOD")
        if automation.auto_work_on_plug:
            features.append(f"Auto-Work({'AM' if automation.morning_only else 'always'})")
        return ", ".join(features) if features else "Manual mode"

    async def _subscribe_events(self):
        automation = self.config.automation
        if not automation.watcher_needed:
            logger.info("Screen watcher: DISABLED (no auto features enabled)")
            return

        self.sway.on("output", self.display_watcher.on_output)
        logger.info("Screen watcher: ENABLED")
        if automation.auto_eod_on_unplug:
            logger.info("  - Automatic EOD on unplug: ENABLED")
        if automation.auto_work_on_plug:
            window = (
                f"morning only ({automation.morning_window_start}:00-{automation.morning_window_end}:00)"
                if automation.morning_only else "any time"
            )
            logger.info(f"  - Automatic Work on plug-in: ENABLED ({window})")

    def _start_wake_watcher(self):
        if self.wake_watcher is None:
            return
        self.login1 = Login1Watcher(asyncio.get_running_loop(), self.wake_watcher.on_wake_event)
        if not self.login1.start():
            self.login1 = None

    async def _run_event_loop(self):
        """Run main event loop."""
        try:
            await self.sway.main()
        except asyncio.CancelledError:
            logger.info("Event loop cancelled")

    async def get_state(self) -> Dict[str, Any]:
        """Snapshot for the IPC state method."""
        return {
            "running": self.running,
            "features": self.feature_summary(),
            "previous_display_count": self.state.previous_display_count,
            "last_wake_check": self.state.last_wake_check,
            "wake_watcher": self.login1 is not None and self.login1.running,
            "pending_timers": self.scheduler.pending,
            "slack_enabled": self.slack.enabled if self.slack else False,
        }


async def main(config_path: Optional[Path] = None):
    """Main entry point."""
    try:
        daemon = DisplayModesDaemon(config_path=config_path)
    except ModeError as e:
        logger.error(f"Fatal error: {e.message}")
        sys.exit(1)

    # Setup signal handlers
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        await daemon.start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)
