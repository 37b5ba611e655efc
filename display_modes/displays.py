"""Display query and ranking.

Displays are identified by their 1-based rank after sorting the active
Sway outputs left to right. Nothing is cached: every query asks Sway again,
so reordering or hot-plugging monitors changes ranks immediately.
"""

import logging
from typing import Any, Iterable, List, Optional

from .models import Display

logger = logging.getLogger(__name__)


def _is_real_output(output: Any) -> bool:
    name = getattr(output, "name", "") or ""
    # Skip internal outputs (e.g. __i3)
    return bool(name) and not name.startswith("__") and bool(getattr(output, "active", False))


def rank_outputs(outputs: Iterable[Any], workspaces: Iterable[Any] = ()) -> List[Display]:
    """Build ranked Display snapshots from i3ipc outputs.

    Args:
        outputs: i3ipc OutputReply objects from get_outputs()
        workspaces: i3ipc WorkspaceReply objects; the visible workspace rect
            of each output is used as its working area (excludes bars)

    Returns:
        Displays sorted left to right, rank 1 first
    """
    work_areas = {}
    for ws in workspaces:
        if getattr(ws, "visible", False) and getattr(ws, "output", None):
            work_areas[ws.output] = ws.rect

    active = sorted(
        (o for o in outputs if _is_real_output(o)),
        key=lambda o: (o.rect.x, o.rect.y, o.name),
    )

    displays = []
    for rank, output in enumerate(active, start=1):
        rect = output.rect
        work = work_areas.get(output.name, rect)
        displays.append(Display(
            name=output.name,
            rank=rank,
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            work_x=work.x,
            work_y=work.y,
            work_width=work.width,
            work_height=work.height,
            dpms=bool(getattr(output, "dpms", True)),
            primary=bool(getattr(output, "primary", False)),
        ))
    return displays


class DisplayQuery:
    """Reads the current displays from Sway."""

    def __init__(self, sway) -> None:
        """
        Args:
            sway: i3ipc.aio Connection
        """
        self.sway = sway

    async def all(self) -> List[Display]:
        outputs = await self.sway.get_outputs()
        workspaces = await self.sway.get_workspaces()
        return rank_outputs(outputs, workspaces)

    async def count(self) -> int:
        return len(await self.all())

    async def by_rank(self, rank: int) -> Optional[Display]:
        """Return the display at a 1-based rank, or None if out of range."""
        displays = await self.all()
        if 1 <= rank <= len(displays):
            return displays[rank - 1]
        return None

    async def primary(self) -> Optional[Display]:
        """The output flagged primary (i3), otherwise the leftmost display."""
        displays = await self.all()
        for display in displays:
            if display.primary:
                return display
        return displays[0] if displays else None
