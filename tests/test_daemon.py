"""Tests for daemon wiring and the scheduler."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from display_modes.daemon import DisplayModesDaemon
from display_modes.models import ModesConfig
from display_modes.scheduler import Scheduler


def make_daemon(**automation) -> DisplayModesDaemon:
    return DisplayModesDaemon(config=ModesConfig(automation=automation))


class TestDaemon:
    def test_feature_summary(self):
        assert make_daemon().feature_summary() == "Auto-EOD"
        assert make_daemon(auto_work_on_plug=True, morning_only=True).feature_summary() == "Auto-EOD, Auto-Work(AM)"
        assert make_daemon(auto_eod_on_unplug=False).feature_summary() == "Manual mode"

    def test_wake_watcher_only_with_auto_work(self, sway):
        daemon = make_daemon()
        daemon.build_components(sway)
        assert daemon.wake_watcher is None
        assert daemon.display_watcher.wake is None

        daemon = make_daemon(auto_work_on_plug=True)
        daemon.build_components(sway)
        assert daemon.display_watcher.wake is daemon.wake_watcher

    def test_retry_policy_from_timings(self, sway):
        daemon = DisplayModesDaemon(config=ModesConfig(timings={"retry_attempts": 2, "retry_delays": [1, 2]}))
        daemon.build_components(sway)
        assert daemon.slack.retry.max_attempts == 2
        assert daemon.slack.retry.delays == (1, 2)

    async def test_state_snapshot(self, sway):
        daemon = make_daemon()
        daemon.build_components(sway)
        daemon.state.previous_display_count = 3

        state = await daemon.get_state()

        assert state["previous_display_count"] == 3
        assert state["wake_watcher"] is False
        assert state["slack_enabled"] is False

    async def test_stop_releases_sleep_inhibitors(self):
        proc = SimpleNamespace(pid=77, returncode=None, terminate=Mock(), wait=AsyncMock(return_value=0))
        daemon = make_daemon()
        daemon.inhibitor._spawn = AsyncMock(return_value=proc)
        await daemon.inhibitor.hold(1800, why="Lunch break")

        await daemon.stop()

        proc.terminate.assert_called_once()
        proc.wait.assert_awaited_once()
        assert daemon.scheduler.pending == 0


class TestScheduler:
    async def test_call_later_runs_coroutines(self):
        scheduler = Scheduler()
        seen = []

        async def record(value):
            seen.append(value)

        task = scheduler.call_later(0.01, record, "late")
        scheduler.spawn(seen.append, "now")
        await task
        await asyncio.sleep(0)

        assert seen == ["now", "late"]
        assert scheduler.pending == 0

    async def test_callback_errors_are_contained(self):
        scheduler = Scheduler()

        def explode():
            raise RuntimeError("boom")

        await scheduler.spawn(explode)
        assert scheduler.pending == 0

    async def test_shutdown_cancels_pending(self):
        scheduler = Scheduler()
        seen = []
        scheduler.call_later(60, seen.append, "never")
        assert scheduler.pending == 1

        await scheduler.shutdown()

        assert seen == []
        assert scheduler.pending == 0
