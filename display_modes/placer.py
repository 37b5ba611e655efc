"""
Window placer for Sway.

Moves and resizes the windows of running applications onto ranked
displays according to a layout table. Every entry is attempted
independently; a missing app or display skips that entry only.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple, Union

from .displays import DisplayQuery
from .models import AbsoluteRect, Display, LayoutEntry, PlacementResult, PositionPreset

logger = logging.getLogger(__name__)

SCRATCHPAD_WORKSPACE = "__i3_scratch"


def get_window_class(container) -> str:
    """Get window class in a Sway/i3-compatible way.

    Checks app_id first (native Wayland), then window_class (XWayland/i3),
    then the raw window_properties dict.
    """
    if getattr(container, "app_id", None):
        return container.app_id

    if getattr(container, "window_class", None):
        return container.window_class

    properties = getattr(container, "window_properties", None)
    if isinstance(properties, dict):
        return properties.get("class", "unknown")

    return "unknown"


@dataclass
class WindowRef:
    """A standard window found in the Sway tree."""
    con_id: int
    app: str
    instance: str
    output: str
    workspace: str
    rect: Tuple[int, int, int, int]

    def matches(self, app_name: str) -> bool:
        """Exact match against app_id/class or instance."""
        return app_name in (self.app, self.instance)


def _is_standard_window(container) -> bool:
    ipc_data = getattr(container, "ipc_data", None) or {}
    if not (ipc_data.get("pid") or getattr(container, "window", None)):
        return False
    # Sway reports per-view visibility; i3 does not
    return bool(ipc_data.get("visible", True))


def iter_windows(container, output: str = "", workspace: str = "") -> Iterator[WindowRef]:
    """Walk the tree yielding standard, visible windows outside the scratchpad."""
    con_type = getattr(container, "type", None)
    if con_type == "output":
        output = container.name
    elif con_type == "workspace":
        workspace = container.name
        if workspace == SCRATCHPAD_WORKSPACE:
            return

    children = list(getattr(container, "nodes", []) or []) + list(getattr(container, "floating_nodes", []) or [])

    if not children and con_type in ("con", "floating_con") and _is_standard_window(container):
        rect = container.rect
        yield WindowRef(
            con_id=container.id,
            app=get_window_class(container),
            instance=getattr(container, "window_instance", None) or "",
            output=output,
            workspace=workspace,
            rect=(rect.x, rect.y, rect.width, rect.height),
        )
        return

    for child in children:
        yield from iter_windows(child, output, workspace)


def frame_for(
    position: Union[PositionPreset, AbsoluteRect],
    display: Display,
    window_size: Tuple[int, int],
) -> AbsoluteRect:
    """Compute the absolute frame for a position rule on a display.

    Args:
        position: Preset or absolute rect
        display: Target display (its working area is used)
        window_size: Current (width, height), used by CENTER

    Returns:
        Frame in global coordinates
    """
    if isinstance(position, AbsoluteRect):
        return position

    x, y = display.work_x, display.work_y
    w, h = display.work_width, display.work_height

    if position == PositionPreset.MAXIMIZED:
        return AbsoluteRect(x=x, y=y, width=w, height=h)
    if position == PositionPreset.LEFT_HALF:
        return AbsoluteRect(x=x, y=y, width=w // 2, height=h)
    if position == PositionPreset.RIGHT_HALF:
        return AbsoluteRect(x=x + w // 2, y=y, width=w // 2, height=h)
    if position == PositionPreset.TOP_HALF:
        return AbsoluteRect(x=x, y=y, width=w, height=h // 2)
    if position == PositionPreset.BOTTOM_HALF:
        return AbsoluteRect(x=x, y=y + h // 2, width=w, height=h // 2)
    if position == PositionPreset.CENTER:
        win_w, win_h = window_size
        return AbsoluteRect(x=x + (w - win_w) // 2, y=y + (h - win_h) // 2, width=win_w, height=win_h)

    raise ValueError(f"Unknown position: {position}")


def build_actions(
    display: Display,
    position: Optional[Union[PositionPreset, AbsoluteRect]],
    window_size: Tuple[int, int],
) -> List[str]:
    """Sway actions moving a window to a display and applying a position."""
    actions = [f'move container to output "{display.name}"']
    if position is None:
        return actions

    frame = frame_for(position, display, window_size)
    actions.extend([
        "floating enable",
        f"resize set width {frame.width} px height {frame.height} px",
        f"move absolute position {frame.x} px {frame.y} px",
    ])
    return actions


class WindowPlacer:
    """Applies layout tables via Sway IPC."""

    def __init__(self, sway, displays: Optional[DisplayQuery] = None):
        """
        Initialize window placer.

        Args:
            sway: Async i3ipc Connection
            displays: Display query (created from sway if None)
        """
        self.sway = sway
        self.displays = displays or DisplayQuery(sway)

    async def windows(self) -> List[WindowRef]:
        tree = await self.sway.get_tree()
        return list(iter_windows(tree))

    async def arrange(self, layout: List[LayoutEntry]) -> PlacementResult:
        """
        Move every matching window according to the layout.

        Args:
            layout: Layout entries for a mode

        Returns:
            PlacementResult with moved/failed counts and skipped entries
        """
        result = PlacementResult()
        if not layout:
            logger.info("Empty layout, nothing to arrange")
            return result

        displays = await self.displays.all()
        windows = await self.windows()

        for entry in layout:
            app_windows = [w for w in windows if w.matches(entry.app)]
            if not app_windows:
                logger.info(f"App not running: {entry.app}")
                result.skipped.append(entry.app)
                continue

            if entry.display > len(displays):
                logger.warning(
                    f"Display {entry.display} not found for {entry.app} "
                    f"({len(displays)} display(s) attached)"
                )
                result.skipped.append(entry.app)
                continue

            display = displays[entry.display - 1]
            for window in app_windows:
                actions = build_actions(display, entry.position, window.rect[2:])
                if await self._command(window.con_id, actions):
                    result.moved += 1
                    logger.info(f"Moved {entry.app} (con {window.con_id}) to display {entry.display}")
                else:
                    result.failed += 1
                    logger.warning(f"Failed to move {entry.app} (con {window.con_id})")

        return result

    async def consolidate_to_primary(self) -> int:
        """Move every standard window that is not on the primary display there.

        Returns:
            Number of windows moved
        """
        primary = await self.displays.primary()
        if primary is None:
            logger.warning("No active display found, cannot consolidate windows")
            return 0

        moved = 0
        for window in await self.windows():
            if window.output == primary.name:
                continue
            if await self._command(window.con_id, [f'move container to output "{primary.name}"']):
                moved += 1

        logger.info(f"Consolidated {moved} window(s) to {primary.name}")
        return moved

    async def activate(self, app_name: str) -> bool:
        """Focus the first window of an app.

        Returns:
            True if the app was found and focused
        """
        for window in await self.windows():
            if window.matches(app_name):
                if await self._command(window.con_id, ["focus"]):
                    logger.info(f"Brought {app_name} to foreground")
                    return True
                return False

        logger.info(f"App not running: {app_name}")
        return False

    async def _command(self, con_id: int, actions: List[str]) -> bool:
        command = f"[con_id={con_id}] " + ", ".join(actions)
        try:
            replies = await self.sway.command(command)
        except Exception as e:
            logger.error(f"Command failed for con {con_id}: {e}")
            return False

        for reply in replies or []:
            if not getattr(reply, "success", False):
                logger.error(f"Sway rejected '{command}': {getattr(reply, 'error', None)}")
                return False
        return True
