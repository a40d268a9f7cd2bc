from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

WIZARD_MIN_STEPS = 2
WIZARD_MAX_STEPS = 10

DEFAULT_WIZARD_STEPS = 3
DEFAULT_WIZARD_CURRENT_STEP = 1
DEFAULT_STEP_ITEMS = ("Step 1", "Step 2", "Step 3")
DEFAULT_TIMELINE_ITEMS = ("Event 1", "Event 2", "Event 3")
DEFAULT_ACHIEVEMENT_ITEMS = ("Achievement 1", "Achievement 2", "Achievement 3")
DEFAULT_STATS = (("Projects", "50+"), ("Clients", "30+"), ("Experience", "5y"))
DEFAULT_PROGRESS = (("Skill 1", 90), ("Skill 2", 75), ("Skill 3", 60))


class _Props(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StatItem(_Props):
    label: str = ""
    value: str = ""

    @field_validator("label", "value", mode="before")
    def coerce_text(cls, v):  # type: ignore
        return "" if v is None else str(v)


class ProgressItem(_Props):
    label: str = ""
    progress: int = 0

    @field_validator("label", mode="before")
    def coerce_label(cls, v):  # type: ignore
        return "" if v is None else str(v)

    @field_validator("progress", mode="before")
    def clamp_progress(cls, v):  # type: ignore
        return max(0, min(100, _to_int(v, 0)))


class WizardProps(_Props):
    kind: Literal["wizard"] = "wizard"
    steps: int = DEFAULT_WIZARD_STEPS
    current_step: int = Field(default=DEFAULT_WIZARD_CURRENT_STEP, alias="currentStep")

    @field_validator("steps", mode="before")
    def coerce_steps(cls, v):  # type: ignore
        steps = _to_int(v, 0)
        if steps <= 0:
            return DEFAULT_WIZARD_STEPS
        return max(WIZARD_MIN_STEPS, min(WIZARD_MAX_STEPS, steps))

    @field_validator("current_step", mode="before")
    def coerce_current_step(cls, v):  # type: ignore
        step = _to_int(v, 0)
        return step if step > 0 else DEFAULT_WIZARD_CURRENT_STEP

    @model_validator(mode="after")
    def clamp_current_step(self):  # type: ignore
        # steps + 1 means every step is completed
        if self.current_step > self.steps + 1:
            self.current_step = self.steps + 1
        return self

    def step_states(self) -> List[str]:
        states = []
        for number in range(1, self.steps + 1):
            if number < self.current_step:
                states.append("completed")
            elif number == self.current_step:
                states.append("active")
            else:
                states.append("pending")
        return states


class StepsProps(_Props):
    kind: Literal["steps"] = "steps"
    items: List[str] = Field(default_factory=lambda: list(DEFAULT_STEP_ITEMS))

    @field_validator("items", mode="before")
    def coerce_items(cls, v):  # type: ignore
        return _coerce_labels(v, DEFAULT_STEP_ITEMS)


class TimelineProps(_Props):
    kind: Literal["timeline"] = "timeline"
    items: List[str] = Field(default_factory=lambda: list(DEFAULT_TIMELINE_ITEMS))

    @field_validator("items", mode="before")
    def coerce_items(cls, v):  # type: ignore
        return _coerce_labels(v, DEFAULT_TIMELINE_ITEMS)


class AchievementsProps(_Props):
    kind: Literal["achievements"] = "achievements"
    items: List[str] = Field(default_factory=lambda: list(DEFAULT_ACHIEVEMENT_ITEMS))

    @field_validator("items", mode="before")
    def coerce_items(cls, v):  # type: ignore
        return _coerce_labels(v, DEFAULT_ACHIEVEMENT_ITEMS)


class StatsProps(_Props):
    kind: Literal["stats"] = "stats"
    stats: List[StatItem] = Field(
        default_factory=lambda: [StatItem(label=l, value=v) for l, v in DEFAULT_STATS]
    )

    @field_validator("stats", mode="before")
    def coerce_stats(cls, v):  # type: ignore
        if not isinstance(v, (list, tuple)):
            return [{"label": l, "value": val} for l, val in DEFAULT_STATS]
        return _coerce_records(v, StatItem)


class ProgressProps(_Props):
    kind: Literal["progress"] = "progress"
    items: List[ProgressItem] = Field(
        default_factory=lambda: [ProgressItem(label=l, progress=p) for l, p in DEFAULT_PROGRESS]
    )

    @field_validator("items", mode="before")
    def coerce_items(cls, v):  # type: ignore
        if not isinstance(v, (list, tuple)):
            return [{"label": l, "progress": p} for l, p in DEFAULT_PROGRESS]
        return _coerce_records(v, ProgressItem)


ElementProps = Annotated[
    Union[WizardProps, StepsProps, TimelineProps, StatsProps, AchievementsProps, ProgressProps],
    Field(discriminator="kind"),
]


def _to_int(value, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _coerce_labels(value, default):
    if not isinstance(value, (list, tuple)):
        return list(default)
    return [str(item) for item in value if item is not None]


def _coerce_records(value, model):
    records = []
    for item in value:
        if isinstance(item, model):
            records.append(item)
        elif isinstance(item, Mapping):
            records.append(dict(item))
    return records
