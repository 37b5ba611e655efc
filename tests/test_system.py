"""Tests for housekeeping commands."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

from display_modes.system import (
    CommandResult,
    EjectOutcome,
    Notifier,
    ScreenLocker,
    SleepInhibitor,
    VolumeEjector,
    find_mounted_volume,
    run_command,
)

from .fakes import RecordingRunner


LSBLK = json.dumps({
    "blockdevices": [
        {"name": "nvme0n1", "path": "/dev/nvme0n1", "label": None, "mountpoint": None, "children": [
            {"name": "nvme0n1p1", "path": "/dev/nvme0n1p1", "label": "ROOT", "mountpoint": "/"},
        ]},
        {"name": "sda", "path": "/dev/sda", "label": None, "mountpoint": None, "children": [
            {"name": "sda1", "path": "/dev/sda1", "label": "Backup", "mountpoint": "/run/media/me/Backup"},
        ]},
        {"name": "sdb", "path": "/dev/sdb", "label": None, "mountpoint": None, "children": [
            {"name": "sdb1", "path": "/dev/sdb1", "label": "Photos", "mountpoint": None},
        ]},
    ]
})


def test_find_mounted_volume_returns_partition_and_disk():
    devices = json.loads(LSBLK)["blockdevices"]
    assert find_mounted_volume(devices, "Backup") == ("/dev/sda1", "/dev/sda")
    assert find_mounted_volume(devices, "Photos") is None
    assert find_mounted_volume(devices, "Missing") is None


class TestVolumeEjector:
    async def test_unmounts_and_powers_off(self):
        runner = RecordingRunner({("lsblk",): CommandResult(0, LSBLK)})

        outcome = await VolumeEjector(runner).eject("Backup")

        assert outcome == EjectOutcome.EJECTED
        assert runner.commands[1:] == [
            ["udisksctl", "unmount", "-b", "/dev/sda1"],
            ["udisksctl", "power-off", "-b", "/dev/sda"],
        ]

    async def test_unmounted_volume_is_not_found(self):
        runner = RecordingRunner({("lsblk",): CommandResult(0, LSBLK)})

        assert await VolumeEjector(runner).eject("Photos") == EjectOutcome.NOT_FOUND
        assert len(runner.commands) == 1

    async def test_unmount_failure(self):
        runner = RecordingRunner({
            ("lsblk",): CommandResult(0, LSBLK),
            ("udisksctl", "unmount"): CommandResult(1, "", "target is busy"),
        })

        assert await VolumeEjector(runner).eject("Backup") == EjectOutcome.FAILED
        assert not any("power-off" in cmd for cmd in runner.commands)

    async def test_lsblk_garbage(self):
        runner = RecordingRunner({("lsblk",): CommandResult(0, "not json")})
        assert await VolumeEjector(runner).eject("Backup") == EjectOutcome.FAILED

    async def test_run_external(self):
        runner = RecordingRunner({("false",): CommandResult(1)})
        ejector = VolumeEjector(runner)

        assert await ejector.run_external(["xdg-open", "launcher://eject-all"]) is True
        assert await ejector.run_external(["false"]) is False


async def test_notifier_builds_notify_send_command():
    runner = RecordingRunner()
    assert await Notifier(runner).send("EOD Setup", "Safe to unplug!") is True
    assert runner.commands == [["notify-send", "-u", "normal", "-a", "display-modes", "EOD Setup", "Safe to unplug!"]]


async def test_notifier_failure_is_logged_not_raised():
    runner = RecordingRunner({("notify-send",): CommandResult(127, "", "not found")})
    assert await Notifier(runner).send("x") is False


async def test_screen_locker():
    runner = RecordingRunner()
    assert await ScreenLocker(runner).lock() is True
    assert runner.commands == [["loginctl", "lock-session"]]


async def test_run_command_missing_binary():
    result = await run_command(["/nonexistent/display-modes-test-binary"])
    assert result.returncode == 127
    assert not result.ok


class TestSleepInhibitor:
    async def test_hold_schedules_release(self, scheduler):
        proc = SimpleNamespace(pid=99, returncode=None, terminate=Mock(), wait=AsyncMock(return_value=0))
        spawn = AsyncMock(return_value=proc)

        assert await SleepInhibitor(scheduler, spawn).hold(1800, why="Walk break") is True

        args = spawn.await_args.args
        assert args[0] == "systemd-inhibit"
        assert "--what=idle:sleep" in args
        assert "--why=Walk break" in args
        assert args[-2:] == ("sleep", "infinity")
        assert scheduler.delays == [1800]

        await scheduler.run_all()
        proc.terminate.assert_called_once()
        proc.wait.assert_awaited_once()

    async def test_release_skips_finished_process(self, scheduler):
        proc = SimpleNamespace(pid=99, returncode=0, terminate=Mock(), wait=AsyncMock())
        await SleepInhibitor(scheduler, AsyncMock(return_value=proc)).hold(60)

        await scheduler.run_all()
        proc.terminate.assert_not_called()

    async def test_spawn_failure(self, scheduler):
        spawn = AsyncMock(side_effect=FileNotFoundError("systemd-inhibit"))
        assert await SleepInhibitor(scheduler, spawn).hold(60) is False
        assert scheduler.calls == []

    async def test_release_all_terminates_held(self, scheduler):
        proc = SimpleNamespace(pid=99, returncode=None, terminate=Mock(), wait=AsyncMock(return_value=0))
        inhibitor = SleepInhibitor(scheduler, AsyncMock(return_value=proc))
        await inhibitor.hold(1800)

        assert await inhibitor.release_all() == 1
        proc.terminate.assert_called_once()

        # Timer firing afterwards finds nothing left to release
        proc.returncode = -15
        await scheduler.run_all()
        proc.terminate.assert_called_once()
        assert await inhibitor.release_all() == 0
