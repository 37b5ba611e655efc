"""Tests for the logind signal bridge."""

from unittest.mock import Mock

import pytest

from display_modes import login1
from display_modes.login1 import SESSION_INTERFACE, Login1Watcher
from display_modes.watchers import WakeEvent


@pytest.fixture
def watcher():
    loop = Mock()
    # Run bridged callbacks inline
    loop.call_soon_threadsafe.side_effect = lambda callback, *args: callback(*args)
    events = []
    return Login1Watcher(loop, events.append), events


def test_resume_emits_system_wake(watcher):
    w, events = watcher
    w._on_prepare_for_sleep(True)
    w._on_prepare_for_sleep(False)
    assert events == [WakeEvent.SYSTEM_WAKE]


def test_unlock_signal(watcher):
    w, events = watcher
    w._on_unlock()
    assert events == [WakeEvent.SCREEN_UNLOCKED]


def test_locked_hint_cleared(watcher):
    w, events = watcher
    w._on_session_properties(SESSION_INTERFACE, {"LockedHint": True}, [])
    w._on_session_properties("org.freedesktop.DBus.Peer", {"LockedHint": False}, [])
    w._on_session_properties(SESSION_INTERFACE, {"LockedHint": False}, [])
    assert events == [WakeEvent.SCREEN_UNLOCKED]


def test_start_without_pydbus(watcher, monkeypatch):
    w, _ = watcher
    monkeypatch.setattr(login1, "PYDBUS_AVAILABLE", False)
    assert w.start() is False
    assert not w.running


def test_session_from_environment(monkeypatch):
    monkeypatch.setenv("XDG_SESSION_ID", "3")
    manager = Mock()
    manager.GetSession.return_value = "/org/freedesktop/login1/session/_33"

    assert Login1Watcher._session_path(Mock(), manager) == "/org/freedesktop/login1/session/_33"
    manager.GetSession.assert_called_once_with("3")


def test_session_from_user_display(monkeypatch):
    monkeypatch.delenv("XDG_SESSION_ID", raising=False)
    bus = Mock()
    bus.get.return_value.Display = ("2", "/org/freedesktop/login1/session/_32")

    assert Login1Watcher._session_path(bus, Mock()) == "/org/freedesktop/login1/session/_32"


def test_no_display_session(monkeypatch):
    monkeypatch.delenv("XDG_SESSION_ID", raising=False)
    bus = Mock()
    bus.get.return_value.Display = ("", "/")

    assert Login1Watcher._session_path(bus, Mock()) is None
