"""
Pydantic data models for display-modes.

Defines the configuration entities (layouts, status specs, feature toggles,
timings) with validation rules, plus the display snapshot and the result
records returned by placement, status updates and modes.
"""

import random
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)


# Enumerations

class Mode(str, Enum):
    """Named automation procedures."""
    WORK = "work"
    HOME = "home"
    MEETING = "meeting"
    EOD = "eod"
    WALK = "walk"
    LUNCH = "lunch"

    @classmethod
    def from_str(cls, value: str) -> "Mode":
        """Parse mode from string (case-insensitive).

        Raises:
            ValueError: If value is not a valid mode
        """
        try:
            return cls(value.lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid mode '{value}': must be one of {valid}")


class PositionPreset(str, Enum):
    """Named window positions relative to a display's working area."""
    MAXIMIZED = "maximized"
    LEFT_HALF = "left-half"
    RIGHT_HALF = "right-half"
    TOP_HALF = "top-half"
    BOTTOM_HALF = "bottom-half"
    CENTER = "center"


class Presence(str, Enum):
    """Slack presence values."""
    AUTO = "auto"
    AWAY = "away"


class EjectMethod(str, Enum):
    """How the EOD procedure ejects the backup volume."""
    SCRIPT = "script"
    LAUNCHER = "launcher"
    NONE = "none"


# Layout table

class AbsoluteRect(BaseModel):
    """Absolute window frame in global coordinates.

    Applied verbatim, never clamped, so frames may deliberately extend
    past the nominal display bounds (e.g. portrait-rotated displays).
    """

    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @model_validator(mode="before")
    @classmethod
    def coerce_shorthand(cls, data: Any) -> Any:
        """Accept [x, y, w, h] lists and {x, y, w, h} tables."""
        if isinstance(data, (list, tuple)):
            if len(data) != 4:
                raise ValueError("Absolute position list must have 4 elements: [x, y, w, h]")
            x, y, w, h = data
            return {"x": x, "y": y, "width": w, "height": h}
        if isinstance(data, dict):
            data = dict(data)
            if "w" in data:
                data["width"] = data.pop("w")
            if "h" in data:
                data["height"] = data.pop("h")
        return data


class LayoutEntry(BaseModel):
    """Target display rank and position for one application."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    app: str = Field(..., description="Exact application name (app_id or window class)")
    display: int = Field(..., ge=1, description="1-based display rank, left to right")
    position: Optional[Union[PositionPreset, AbsoluteRect]] = Field(
        None, description="Preset, absolute rect, or None to only retarget the display"
    )

    @field_validator("app")
    @classmethod
    def validate_app(cls, v: str) -> str:
        """Validate app name is non-empty."""
        if not v or not v.strip():
            raise ValueError("app cannot be empty")
        return v


# Status specs

class LiteralChoice(BaseModel):
    """A fixed value."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["literal"] = "literal"
    value: str = ""

    def resolve(self, rng: random.Random) -> str:
        return self.value


class RandomChoice(BaseModel):
    """One option picked uniformly at random on every resolution."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["random"] = "random"
    options: List[str] = Field(..., min_length=1)

    def resolve(self, rng: random.Random) -> str:
        return rng.choice(self.options)


Choice = Annotated[Union[LiteralChoice, RandomChoice], Field(discriminator="kind")]


def coerce_choice(value: Any) -> Any:
    """Turn a plain string into a literal and a list into a random choice."""
    if value is None:
        return {"kind": "literal", "value": ""}
    if isinstance(value, str):
        return {"kind": "literal", "value": value}
    if isinstance(value, (list, tuple, set, frozenset)):
        return {"kind": "random", "options": list(value)}
    return value


class StatusSpec(BaseModel):
    """Slack status to apply for a mode."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: Choice = Field(default_factory=LiteralChoice)
    emoji: Choice = Field(default_factory=LiteralChoice)
    expiration_minutes: Optional[int] = Field(None, ge=0, description="Expiry offset from send time")
    presence: Optional[Presence] = None

    @field_validator("text", "emoji", mode="before")
    @classmethod
    def validate_choice(cls, v: Any) -> Any:
        return coerce_choice(v)

    @field_validator("presence", mode="before")
    @classmethod
    def validate_presence(cls, v: Any) -> Any:
        """Accept 'active' as an alias of Slack's 'auto'."""
        if isinstance(v, str) and v.lower() == "active":
            return Presence.AUTO
        return v


# Configuration sections

class SlackConfig(BaseModel):
    """Slack integration settings."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    token: Optional[SecretStr] = Field(None, description="Bot/user token, normally loaded from secrets file")
    api_base: str = "https://slack.com/api"
    timeout_seconds: float = Field(10.0, gt=0)
    statuses: Dict[Mode, StatusSpec] = Field(default_factory=dict)

    @property
    def has_token(self) -> bool:
        return self.token is not None and bool(self.token.get_secret_value())


class AutomationConfig(BaseModel):
    """Feature toggles for automatic reactions."""

    model_config = ConfigDict(extra="forbid")

    auto_eod_on_unplug: bool = True
    auto_work_on_plug: bool = False
    morning_only: bool = False
    morning_window_start: int = Field(7, ge=0, le=23)
    morning_window_end: int = Field(10, ge=1, le=24)

    @model_validator(mode="after")
    def validate_window(self):
        if self.morning_window_start >= self.morning_window_end:
            raise ValueError("morning_window_start must be before morning_window_end")
        return self

    def within_morning_window(self, hour: int) -> bool:
        """Check hour against [start, end)."""
        return self.morning_window_start <= hour < self.morning_window_end

    @property
    def watcher_needed(self) -> bool:
        return self.auto_eod_on_unplug or self.auto_work_on_plug


class Timings(BaseModel):
    """Fixed delays, in seconds."""

    model_config = ConfigDict(extra="forbid")

    unplug_delay: float = Field(1.0, ge=0)
    plug_delay: float = Field(3.0, ge=0)
    wake_delay: float = Field(5.0, ge=0)
    startup_delay: float = Field(3.0, ge=0)
    wake_debounce: float = Field(30.0, ge=0)
    unplug_notice_delay: float = Field(10.0, ge=0)
    meeting_focus_delay: float = Field(0.5, ge=0)
    lock_delay: float = Field(1.0, ge=0)
    retry_attempts: int = Field(3, ge=1)
    retry_delays: List[float] = Field(default_factory=lambda: [5.0, 10.0, 20.0], min_length=1)


class DisplayRequirements(BaseModel):
    """Minimum display counts for the layout modes."""

    model_config = ConfigDict(extra="forbid")

    work: int = Field(3, ge=1)
    home: int = Field(2, ge=1)


class EodConfig(BaseModel):
    """End-of-day housekeeping."""

    model_config = ConfigDict(extra="forbid")

    volume_name: Optional[str] = Field(None, description="Label of the backup volume to eject")
    eject_method: EjectMethod = EjectMethod.SCRIPT
    launcher_command: List[str] = Field(default_factory=list)
    consolidate_windows: bool = True

    @model_validator(mode="after")
    def validate_launcher(self):
        if self.eject_method == EjectMethod.LAUNCHER and not self.launcher_command:
            raise ValueError("launcher_command required when eject_method=launcher")
        return self


class MeetingConfig(BaseModel):
    """Meeting mode settings."""

    model_config = ConfigDict(extra="forbid")

    notes_app: Optional[str] = None


class AwayDurations(BaseModel):
    """Default away durations in minutes when a status has no expiration."""

    model_config = ConfigDict(extra="forbid")

    walk: int = Field(30, gt=0)
    lunch: int = Field(60, gt=0)


class ModesConfig(BaseModel):
    """Top-level configuration."""

    model_config = ConfigDict(extra="forbid")

    layouts: Dict[str, List[LayoutEntry]] = Field(default_factory=dict)
    displays: DisplayRequirements = Field(default_factory=DisplayRequirements)
    automation: AutomationConfig = Field(default_factory=AutomationConfig)
    timings: Timings = Field(default_factory=Timings)
    eod: EodConfig = Field(default_factory=EodConfig)
    meeting: MeetingConfig = Field(default_factory=MeetingConfig)
    away: AwayDurations = Field(default_factory=AwayDurations)
    slack: SlackConfig = Field(default_factory=SlackConfig)

    @field_validator("layouts", mode="before")
    @classmethod
    def validate_layouts(cls, v: Any) -> Any:
        """Accept {mode: {app: {display, position}}} tables from TOML."""
        if not isinstance(v, dict):
            return v
        layouts = {}
        for mode_name, entries in v.items():
            if isinstance(entries, dict):
                entries = [
                    {"app": app, **target} if isinstance(target, dict) else target
                    for app, target in entries.items()
                ]
            layouts[mode_name] = entries
        return layouts

    @field_validator("layouts")
    @classmethod
    def validate_layout_names(cls, v: Dict[str, List[LayoutEntry]]) -> Dict[str, List[LayoutEntry]]:
        valid = {Mode.WORK.value, Mode.HOME.value, Mode.MEETING.value}
        for name in v:
            if name not in valid:
                raise ValueError(f"Unknown layout '{name}': must be one of {', '.join(sorted(valid))}")
        return v

    def layout_for(self, mode: Mode) -> List[LayoutEntry]:
        return self.layouts.get(mode.value, [])

    def status_for(self, mode: Mode) -> Optional[StatusSpec]:
        return self.slack.statuses.get(mode)


# Display snapshot

class Display(BaseModel):
    """A physical display at query time.

    Rank is 1-based after sorting active outputs left to right; it is
    never persisted.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    rank: int = Field(..., ge=1)
    x: int
    y: int
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    work_x: int
    work_y: int
    work_width: int = Field(..., gt=0)
    work_height: int = Field(..., gt=0)
    dpms: bool = True
    primary: bool = False


# Results

@dataclass
class PlacementResult:
    """Counts from one placement batch."""
    moved: int = 0
    failed: int = 0
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StatusResult:
    """Outcome of a Slack API call."""
    ok: bool
    error: Optional[str] = None
    attempts: int = 1


@dataclass
class ModeResult:
    """Outcome of a mode procedure."""
    mode: str
    completed: bool
    moved: int = 0
    failed: int = 0
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
