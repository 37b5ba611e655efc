"""Launcher integration.

One XDG desktop entry per mode, so any launcher that reads .desktop files
(walker, rofi, fuzzel) can trigger a mode through the CLI.
"""

import logging
import os
from pathlib import Path
from typing import List, NamedTuple, Optional

from .models import Mode

logger = logging.getLogger(__name__)

ENTRY_PREFIX = "display-modes-"


class ModeCommand(NamedTuple):
    """Static launcher metadata for a mode."""

    mode: Mode
    title: str
    description: str
    icon: str


MODE_COMMANDS: List[ModeCommand] = [
    ModeCommand(
        Mode.WORK,
        "Work Display Setup",
        "Arrange windows for work setup (3 displays: laptop + 2 external monitors)",
        "video-display",
    ),
    ModeCommand(
        Mode.HOME,
        "Home Display Setup",
        "Arrange windows for home setup (2 displays: laptop + 1 external monitor)",
        "user-home",
    ),
    ModeCommand(
        Mode.MEETING,
        "Meeting Setup",
        "Consolidate to laptop, bring notes app to foreground, set Slack status",
        "accessories-text-editor",
    ),
    ModeCommand(
        Mode.EOD,
        "End of Day Setup",
        "Prepare for unplugging: eject backup disk, set Slack status",
        "media-eject",
    ),
    ModeCommand(
        Mode.WALK,
        "Walk Setup",
        "Set Slack status to walking, lock screen (auto-clears in 30 min)",
        "preferences-desktop-screensaver",
    ),
    ModeCommand(
        Mode.LUNCH,
        "Lunch Setup",
        "Set Slack status to lunch, lock screen (auto-clears in 1 hour)",
        "face-smile",
    ),
]


def default_applications_dir() -> Path:
    """$XDG_DATA_HOME/applications (defaults to ~/.local/share/applications)."""
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "applications"


def render_desktop_entry(command: ModeCommand, executable: str = "display-modes") -> str:
    return (
        "[Desktop Entry]\n"
        "Type=Application\n"
        f"Name={command.title}\n"
        f"Comment={command.description}\n"
        f"Exec={executable} run {command.mode.value}\n"
        f"Icon={command.icon}\n"
        "Terminal=false\n"
        "Categories=Utility;\n"
        "Keywords=display;mode;monitor;\n"
    )


def write_desktop_entries(directory: Optional[Path] = None, executable: str = "display-modes") -> List[Path]:
    """
    Write one desktop entry per mode.

    Args:
        directory: Target directory (defaults to the XDG applications dir)
        executable: Command placed in Exec=

    Returns:
        Paths written, in MODE_COMMANDS order
    """
    directory = directory or default_applications_dir()
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for command in MODE_COMMANDS:
        path = directory / f"{ENTRY_PREFIX}{command.mode.value}.desktop"
        path.write_text(render_desktop_entry(command, executable))
        written.append(path)
        logger.debug(f"Wrote {path}")

    logger.info(f"Wrote {len(written)} desktop entries to {directory}")
    return written
