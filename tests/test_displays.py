"""Tests for display ranking and queries."""

from display_modes.displays import DisplayQuery, rank_outputs

from .fakes import make_sway, output, workspace


def test_rank_sorts_left_to_right():
    outputs = [
        output("DP-2", 4480),
        output("eDP-1", 0),
        output("DP-1", 1920),
    ]
    ranked = rank_outputs(outputs)
    assert [d.name for d in ranked] == ["eDP-1", "DP-1", "DP-2"]
    assert [d.rank for d in ranked] == [1, 2, 3]


def test_rank_breaks_ties_by_y_then_name():
    outputs = [
        output("B", 0, 1080),
        output("C", 0, 0),
        output("A", 0, 0),
    ]
    assert [d.name for d in rank_outputs(outputs)] == ["A", "C", "B"]


def test_inactive_and_internal_outputs_skipped():
    outputs = [
        output("__i3", 0),
        output("HDMI-A-1", 1920, active=False),
        output("eDP-1", 0),
    ]
    ranked = rank_outputs(outputs)
    assert [d.name for d in ranked] == ["eDP-1"]


def test_working_area_from_visible_workspace():
    laptop = output("eDP-1", 0, 0, 1920, 1200)
    hidden = workspace("2", laptop, visible=False, bar=100)
    shown = workspace("1", laptop, visible=True, bar=30)

    display = rank_outputs([laptop], [hidden, shown])[0]

    assert (display.work_x, display.work_y) == (0, 30)
    assert (display.work_width, display.work_height) == (1920, 1170)
    assert (display.width, display.height) == (1920, 1200)


def test_working_area_defaults_to_output_rect():
    display = rank_outputs([output("eDP-1", 0, 0, 1920, 1200)])[0]
    assert display.work_height == 1200


async def test_query_is_never_cached():
    sway = make_sway([output("eDP-1", 0)])
    query = DisplayQuery(sway)
    assert await query.count() == 1

    sway.get_outputs.return_value = [output("eDP-1", 0), output("DP-1", 1920)]
    assert await query.count() == 2
    assert sway.get_outputs.await_count == 2


async def test_by_rank_out_of_range():
    query = DisplayQuery(make_sway([output("eDP-1", 0), output("DP-1", 1920)]))
    assert (await query.by_rank(2)).name == "DP-1"
    assert await query.by_rank(3) is None
    assert await query.by_rank(0) is None


async def test_primary_prefers_flagged_output():
    query = DisplayQuery(make_sway([output("eDP-1", 0), output("DP-1", 1920, primary=True)]))
    assert (await query.primary()).name == "DP-1"


async def test_primary_falls_back_to_leftmost():
    query = DisplayQuery(make_sway([output("DP-1", 1920), output("eDP-1", 0)]))
    assert (await query.primary()).name == "eDP-1"


async def test_primary_none_without_displays():
    assert await DisplayQuery(make_sway([])).primary() is None
