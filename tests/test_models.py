"""Tests for configuration models and validation rules."""

import random

import pytest
from pydantic import ValidationError

from display_modes.models import (
    AbsoluteRect,
    AutomationConfig,
    EodConfig,
    LayoutEntry,
    LiteralChoice,
    Mode,
    ModesConfig,
    PositionPreset,
    Presence,
    RandomChoice,
    StatusSpec,
)


class TestLayoutEntry:
    def test_preset_position(self):
        entry = LayoutEntry(app="firefox", display=1, position="left-half")
        assert entry.position == PositionPreset.LEFT_HALF

    def test_absolute_position_from_list(self):
        entry = LayoutEntry(app="Slack", display=3, position=[3840, -200, 1080, 1920])
        assert entry.position == AbsoluteRect(x=3840, y=-200, width=1080, height=1920)

    def test_absolute_position_from_short_keys(self):
        entry = LayoutEntry(app="Slack", display=2, position={"x": 10, "y": 20, "w": 300, "h": 400})
        assert entry.position.width == 300
        assert entry.position.height == 400

    def test_position_optional(self):
        assert LayoutEntry(app="code", display=2).position is None

    def test_display_rank_must_be_positive(self):
        with pytest.raises(ValidationError):
            LayoutEntry(app="code", display=0)

    def test_unknown_preset_rejected(self):
        with pytest.raises(ValidationError):
            LayoutEntry(app="code", display=1, position="fullscreen")

    def test_absolute_list_needs_four_values(self):
        with pytest.raises(ValidationError):
            LayoutEntry(app="code", display=1, position=[0, 0, 100])

    def test_entries_are_immutable(self):
        entry = LayoutEntry(app="code", display=1)
        with pytest.raises(ValidationError):
            entry.display = 2


class TestChoice:
    def test_string_becomes_literal(self):
        spec = StatusSpec(text="Lunch", emoji=":pizza:")
        assert isinstance(spec.text, LiteralChoice)
        assert spec.text.resolve(random.Random(0)) == "Lunch"

    def test_list_becomes_random(self):
        spec = StatusSpec(emoji=[":pizza:", ":taco:"])
        assert isinstance(spec.emoji, RandomChoice)

    def test_random_choice_uses_injected_rng(self):
        choice = RandomChoice(options=["a", "b", "c", "d"])
        picks_a = [choice.resolve(random.Random(7)) for _ in range(3)]
        picks_b = [choice.resolve(random.Random(7)) for _ in range(3)]
        assert picks_a == picks_b
        assert set(picks_a) <= {"a", "b", "c", "d"}

    def test_random_choice_needs_options(self):
        with pytest.raises(ValidationError):
            StatusSpec(emoji=[])

    def test_missing_text_is_empty_literal(self):
        assert StatusSpec().text.resolve(random.Random()) == ""


class TestStatusSpec:
    def test_active_is_alias_for_auto(self):
        assert StatusSpec(presence="active").presence == Presence.AUTO

    def test_negative_expiration_rejected(self):
        with pytest.raises(ValidationError):
            StatusSpec(expiration_minutes=-5)


class TestAutomationConfig:
    def test_defaults(self):
        automation = AutomationConfig()
        assert automation.auto_eod_on_unplug is True
        assert automation.auto_work_on_plug is False
        assert automation.watcher_needed is True

    @pytest.mark.parametrize("hour,expected", [(6, False), (7, True), (9, True), (10, False)])
    def test_morning_window_is_half_open(self, hour, expected):
        assert AutomationConfig().within_morning_window(hour) is expected

    def test_window_start_before_end(self):
        with pytest.raises(ValidationError):
            AutomationConfig(morning_window_start=10, morning_window_end=9)

    def test_watcher_not_needed_without_features(self):
        automation = AutomationConfig(auto_eod_on_unplug=False, auto_work_on_plug=False)
        assert automation.watcher_needed is False


class TestModesConfig:
    def test_defaults_match_fixed_delays(self):
        config = ModesConfig()
        assert config.timings.unplug_delay == 1.0
        assert config.timings.plug_delay == 3.0
        assert config.timings.wake_delay == 5.0
        assert config.timings.wake_debounce == 30.0
        assert config.timings.retry_delays == [5.0, 10.0, 20.0]
        assert config.displays.work == 3
        assert config.displays.home == 2
        assert config.eod.consolidate_windows is True

    def test_layout_table_form(self):
        config = ModesConfig(layouts={"work": {"firefox": {"display": 1, "position": "maximized"}}})
        layout = config.layout_for(Mode.WORK)
        assert layout == [LayoutEntry(app="firefox", display=1, position="maximized")]
        assert config.layout_for(Mode.HOME) == []

    def test_unknown_layout_rejected(self):
        with pytest.raises(ValidationError):
            ModesConfig(layouts={"walk": {"firefox": {"display": 1}}})

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            ModesConfig(automaton={})

    def test_status_for(self, config):
        assert config.status_for(Mode.WORK).text.value == "In the office"
        assert config.status_for(Mode.MEETING) is None

    def test_launcher_eject_needs_command(self):
        with pytest.raises(ValidationError):
            EodConfig(eject_method="launcher")


class TestMode:
    def test_from_str_case_insensitive(self):
        assert Mode.from_str("EOD") == Mode.EOD

    def test_from_str_invalid(self):
        with pytest.raises(ValueError, match="Invalid mode"):
            Mode.from_str("party")
