"""Tests for the click CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from display_modes.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, args, result=None, error=None):
    with patch("display_modes.cli.DaemonClient.call") as call:
        if error is not None:
            call.side_effect = RuntimeError(error)
        else:
            call.return_value = result
        outcome = runner.invoke(cli, args, obj={})
    return outcome, call


def test_run_completed_mode(runner):
    outcome, call = invoke(runner, ["run", "work"], {"mode": "work", "completed": True, "message": "Arranged 5"})
    assert outcome.exit_code == 0
    assert "Arranged 5" in outcome.output
    call.assert_called_once_with("work")


def test_run_is_case_insensitive(runner):
    outcome, call = invoke(runner, ["run", "LUNCH"], {"mode": "lunch", "completed": True})
    assert outcome.exit_code == 0
    call.assert_called_once_with("lunch")


def test_incomplete_mode_exits_one(runner):
    outcome, _ = invoke(runner, ["work"], {"mode": "work", "completed": False, "message": "Only 2 display(s)"})
    assert outcome.exit_code == 1
    assert "Only 2 display(s)" in outcome.output


def test_shortcut_commands_exist(runner):
    outcome = runner.invoke(cli, ["--help"], obj={})
    for mode in ("work", "home", "meeting", "eod", "walk", "lunch"):
        assert mode in outcome.output


def test_daemon_unreachable_exits_two(runner):
    outcome, _ = invoke(runner, ["eod"], error="Daemon not running.")
    assert outcome.exit_code == 2
    assert "Daemon not running" in outcome.output


def test_unknown_mode_rejected(runner):
    outcome = runner.invoke(cli, ["run", "party"], obj={})
    assert outcome.exit_code != 0


def test_displays_json(runner):
    data = {"count": 1, "displays": [{
        "name": "eDP-1", "rank": 1, "x": 0, "y": 0, "width": 1920, "height": 1200,
        "work_x": 0, "work_y": 30, "work_width": 1920, "work_height": 1170, "dpms": True, "primary": True,
    }]}
    outcome, _ = invoke(runner, ["displays", "--json"], data)
    assert outcome.exit_code == 0
    assert json.loads(outcome.output) == data


def test_displays_table(runner):
    data = {"count": 1, "displays": [{
        "name": "eDP-1", "rank": 1, "x": 0, "y": 0, "width": 1920, "height": 1200,
        "work_x": 0, "work_y": 30, "work_width": 1920, "work_height": 1170, "dpms": True, "primary": False,
    }]}
    outcome, _ = invoke(runner, ["displays"], data)
    assert outcome.exit_code == 0
    assert "eDP-1" in outcome.output


def test_state(runner):
    outcome, call = invoke(runner, ["state", "--json"], {"running": True})
    assert json.loads(outcome.output) == {"running": True}
    call.assert_called_once_with("state")


def test_launchers_writes_entries(runner, tmp_path):
    outcome = runner.invoke(cli, ["launchers", "--dir", str(tmp_path)], obj={})
    assert outcome.exit_code == 0
    assert len(list(tmp_path.glob("display-modes-*.desktop"))) == 6
