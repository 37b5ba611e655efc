"""logind wake signals over D-Bus.

Subscribes to org.freedesktop.login1 for resume (PrepareForSleep(false))
and session unlock (the Unlock signal or LockedHint dropping to false).
pydbus dispatches signals on a GLib main loop, which runs in its own
thread; events are handed to the asyncio loop with call_soon_threadsafe.
"""

import asyncio
import logging
import os
import threading
from typing import Any, Callable, Dict, List, Optional

from .watchers import WakeEvent

logger = logging.getLogger(__name__)

# Import pydbus lazily to handle missing dependency gracefully
try:
    from pydbus import SystemBus
    from gi.repository import GLib
    PYDBUS_AVAILABLE = True
except ImportError:
    PYDBUS_AVAILABLE = False

LOGIN1_SERVICE = "org.freedesktop.login1"
LOGIN1_PATH = "/org/freedesktop/login1"
SESSION_INTERFACE = "org.freedesktop.login1.Session"


class Login1Watcher:
    """Bridges logind signals into WakeEvent callbacks on the asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, on_event: Callable[[WakeEvent], Any]):
        """
        Args:
            loop: Event loop that receives the callbacks
            on_event: Called with a WakeEvent on the event loop thread
        """
        self.loop = loop
        self.on_event = on_event
        self._glib_loop = None
        self._thread: Optional[threading.Thread] = None
        self._subscriptions: List[Any] = []

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """
        Subscribe to logind signals and start the GLib loop thread.

        Returns:
            False if pydbus is unavailable or the system bus cannot be used;
            the wake watcher is then disabled.
        """
        if not PYDBUS_AVAILABLE:
            logger.warning("pydbus not available - wake watcher disabled")
            return False

        try:
            bus = SystemBus()
            manager = bus.get(LOGIN1_SERVICE, LOGIN1_PATH)
            self._subscriptions.append(manager.PrepareForSleep.connect(self._on_prepare_for_sleep))
        except Exception as e:
            logger.warning(f"Cannot subscribe to logind - wake watcher disabled: {e}")
            return False

        session_path = self._session_path(bus, manager)
        if session_path:
            try:
                session = bus.get(LOGIN1_SERVICE, session_path)
                self._subscriptions.append(session.Unlock.connect(self._on_unlock))
                self._subscriptions.append(session.PropertiesChanged.connect(self._on_session_properties))
                logger.info(f"Watching unlock on session {session_path}")
            except Exception as e:
                logger.warning(f"Cannot subscribe to session unlock: {e}")
        else:
            logger.warning("No login session found - unlock events unavailable")

        self._glib_loop = GLib.MainLoop()
        self._thread = threading.Thread(target=self._glib_loop.run, name="login1-signals", daemon=True)
        self._thread.start()
        logger.info("Wake watcher: ENABLED (resume, screens wake, unlock)")
        return True

    def stop(self) -> None:
        for subscription in self._subscriptions:
            try:
                subscription.disconnect()
            except Exception as e:
                logger.debug(f"Signal disconnect failed: {e}")
        self._subscriptions.clear()

        if self._glib_loop is not None:
            self._glib_loop.quit()
            self._glib_loop = None
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None

    @staticmethod
    def _session_path(bus, manager) -> Optional[str]:
        session_id = os.environ.get("XDG_SESSION_ID")
        try:
            if session_id:
                return manager.GetSession(session_id)
            # Services under systemd --user have no session; use the user's display session
            user = manager.GetUser(os.getuid())
            _, path = bus.get(LOGIN1_SERVICE, user).Display
            return path if path and path != "/" else None
        except Exception as e:
            logger.debug(f"Session lookup failed: {e}")
            return None

    def _emit(self, event: WakeEvent) -> None:
        self.loop.call_soon_threadsafe(self.on_event, event)

    def _on_prepare_for_sleep(self, start: bool) -> None:
        if not start:
            self._emit(WakeEvent.SYSTEM_WAKE)

    def _on_unlock(self) -> None:
        self._emit(WakeEvent.SCREEN_UNLOCKED)

    def _on_session_properties(self, interface: str, changed: Dict[str, Any], invalidated: List[str]) -> None:
        if interface == SESSION_INTERFACE and changed.get("LockedHint") is False:
            self._emit(WakeEvent.SCREEN_UNLOCKED)
