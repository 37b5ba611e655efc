"""
Housekeeping via desktop command line tools.

- Notifier: desktop notifications (notify-send)
- VolumeEjector: unmount and power off a labelled volume (lsblk, udisksctl)
- ScreenLocker: lock the session (loginctl)
- SleepInhibitor: timed idle/sleep inhibition (systemd-inhibit)

Every command runs as an async subprocess. Failures are logged and
reported through return values; nothing here raises to callers.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

APP_NAME = "display-modes"


@dataclass
class CommandResult:
    """Exit status and output of an external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


async def run_command(args: List[str], timeout: float = 30.0) -> CommandResult:
    """
    Run a command and capture its output.

    Args:
        args: Program and arguments
        timeout: Seconds before the process is killed

    Returns:
        CommandResult; a missing binary yields returncode 127
    """
    logger.debug(f"Running: {' '.join(args)}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.warning(f"Cannot run {args[0]}: {e}")
        return CommandResult(returncode=127, stderr=str(e))

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        logger.warning(f"{args[0]} timed out after {timeout}s")
        return CommandResult(returncode=124, stderr="timeout")

    return CommandResult(
        returncode=proc.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )


class Notifier:
    """Desktop notifications through notify-send."""

    def __init__(self, runner=run_command):
        self._run = runner

    async def send(self, title: str, body: str = "", urgency: str = "normal") -> bool:
        """Send a notification.

        Args:
            title: Notification title
            body: Notification body
            urgency: "low", "normal", or "critical"
        """
        result = await self._run(["notify-send", "-u", urgency, "-a", APP_NAME, title, body])
        if not result.ok:
            logger.warning(f"Failed to send notification '{title}': {result.stderr.strip()}")
            return False
        logger.debug(f"Notification sent: {title}")
        return True


class EjectOutcome(str, Enum):
    EJECTED = "ejected"
    NOT_FOUND = "not_found"
    FAILED = "failed"


def find_mounted_volume(devices: Iterable[Dict[str, Any]], label: str, parent: Optional[str] = None):
    """Search lsblk's device tree for a mounted filesystem with the label.

    Returns:
        (partition_path, disk_path) or None
    """
    for device in devices:
        path = device.get("path") or f"/dev/{device.get('name')}"
        disk = parent or path
        if device.get("label") == label and device.get("mountpoint"):
            return path, disk
        found = find_mounted_volume(device.get("children") or [], label, disk)
        if found:
            return found
    return None


class VolumeEjector:
    """Ejects a volume by label via udisks."""

    def __init__(self, runner=run_command):
        self._run = runner

    async def eject(self, label: str) -> EjectOutcome:
        """
        Unmount and power off the volume with the given label.

        Returns:
            EJECTED on success, NOT_FOUND if no such volume is mounted,
            FAILED if lsblk or udisksctl fails
        """
        listing = await self._run(["lsblk", "--json", "-o", "NAME,PATH,LABEL,MOUNTPOINT"])
        if not listing.ok:
            logger.error(f"lsblk failed: {listing.stderr.strip()}")
            return EjectOutcome.FAILED

        try:
            devices = json.loads(listing.stdout).get("blockdevices", [])
        except json.JSONDecodeError as e:
            logger.error(f"Cannot parse lsblk output: {e}")
            return EjectOutcome.FAILED

        found = find_mounted_volume(devices, label)
        if not found:
            logger.info(f"Volume '{label}' not mounted, eject skipped")
            return EjectOutcome.NOT_FOUND

        partition, disk = found
        unmount = await self._run(["udisksctl", "unmount", "-b", partition])
        if not unmount.ok:
            logger.error(f"Failed to unmount {partition}: {unmount.stderr.strip()}")
            return EjectOutcome.FAILED

        power_off = await self._run(["udisksctl", "power-off", "-b", disk])
        if not power_off.ok:
            logger.error(f"Unmounted {partition} but failed to power off {disk}: {power_off.stderr.strip()}")
            return EjectOutcome.FAILED

        logger.info(f"Ejected volume '{label}' ({partition})")
        return EjectOutcome.EJECTED

    async def run_external(self, command: List[str]) -> bool:
        """Hand ejection to an external command (e.g. a launcher deep link)."""
        result = await self._run(command)
        if not result.ok:
            logger.error(f"Eject command {command[0]} exited {result.returncode}: {result.stderr.strip()}")
            return False
        logger.info(f"Eject command {command[0]} completed")
        return True


class ScreenLocker:
    """Locks the current login session."""

    def __init__(self, runner=run_command):
        self._run = runner

    async def lock(self) -> bool:
        result = await self._run(["loginctl", "lock-session"])
        if not result.ok:
            logger.error(f"Screen lock failed: {result.stderr.strip()}")
            return False
        logger.info("Screen locked")
        return True


class SleepInhibitor:
    """Holds idle/sleep inhibitor locks for a fixed duration.

    Each hold is an independent systemd-inhibit process terminated by the
    scheduler once its duration elapses.
    """

    def __init__(self, scheduler, spawn=asyncio.create_subprocess_exec):
        self.scheduler = scheduler
        self._spawn = spawn
        self._held: List[Any] = []

    async def hold(self, seconds: float, why: str = "Away from desk") -> bool:
        """
        Prevent idle sleep for a number of seconds.

        Args:
            seconds: Hold duration
            why: Reason shown by systemd-inhibit --list
        """
        try:
            proc = await self._spawn(
                "systemd-inhibit",
                "--what=idle:sleep",
                f"--who={APP_NAME}",
                f"--why={why}",
                "--mode=block",
                "sleep", "infinity",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.error(f"Cannot start systemd-inhibit: {e}")
            return False

        self._held.append(proc)
        self.scheduler.call_later(seconds, self._release, proc)
        logger.info(f"Sleep inhibited for {seconds:.0f}s (pid {proc.pid})")
        return True

    async def _release(self, proc) -> None:
        self._held = [p for p in self._held if p is not proc]
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        await proc.wait()
        logger.info(f"Sleep inhibitor released (pid {proc.pid})")

    async def release_all(self) -> int:
        """Terminate every inhibitor still held (daemon stop).

        Returns:
            Number of inhibitors released
        """
        held = list(self._held)
        for proc in held:
            await self._release(proc)
        return len(held)
