"""Pytest configuration and fixtures for display-modes tests."""

from pathlib import Path
from typing import Generator
import tempfile

import pytest

from display_modes.models import ModesConfig

from .fakes import RecordingScheduler, make_sway, three_outputs


@pytest.fixture
def temp_config_dir() -> Generator[Path, None, None]:
    """Temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def sway():
    """Mock Sway connection with three side-by-side outputs and no windows."""
    return make_sway(three_outputs())


@pytest.fixture
def config() -> ModesConfig:
    return ModesConfig(
        layouts={
            "work": {
                "firefox": {"display": 1, "position": "maximized"},
                "code": {"display": 2, "position": "left-half"},
                "Slack": {"display": 3},
            },
            "home": {
                "firefox": {"display": 1},
                "code": {"display": 2, "position": "right-half"},
            },
        },
        slack={
            "enabled": True,
            "statuses": {
                "work": {"text": "In the office", "emoji": ":office:"},
                "walk": {"text": "Walking", "emoji": [":walking:"], "expiration_minutes": 20, "presence": "away"},
                "lunch": {"text": "Lunch", "emoji": ":pizza:"},
            },
        },
    )
