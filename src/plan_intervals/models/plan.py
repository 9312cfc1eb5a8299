"""Normalized training plan models.

Field names are snake_case in Python and camelCase on the wire so the models
read and write the JSON plan import format directly.
"""

import math
import random
import string
import time
from datetime import date, timedelta
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WorkoutType = Literal["run", "bike", "swim", "strength", "rest"]
IntensityLevel = Literal["easy", "moderate", "hard", "race"]
DurationType = Literal["time", "distance"]

WORKOUT_TYPES: tuple[str, ...] = ("run", "bike", "swim", "strength", "rest")
INTENSITY_LEVELS: tuple[str, ...] = ("easy", "moderate", "hard", "race")

_ID_ALPHABET = string.ascii_lowercase + string.digits


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ramp(_CamelModel):
    """Start/end targets of a ramp step, e.g. ``60%`` → ``80%``."""

    start: str
    end: str


class Interval(_CamelModel):
    """One repeatable work (+ optional recovery) step.

    ``duration`` and ``recovery`` are seconds for ``time`` steps and metres
    for ``distance`` steps. Recovery always uses the work step's unit.
    """

    repeat: int = Field(default=1, ge=1)
    duration: float = Field(default=0, ge=0, allow_inf_nan=False)
    duration_type: DurationType = "time"
    intensity: str = ""
    recovery: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    recovery_intensity: str | None = None
    ramp: Ramp | None = None


class Workout(_CamelModel):
    id: str
    date: str = Field(description="Calendar date, YYYY-MM-DD")
    type: WorkoutType
    name: str
    description: str = ""
    duration: float | None = Field(default=None, ge=0, allow_inf_nan=False, description="Minutes")
    distance: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Kilometres"
    )
    intensity: IntensityLevel | None = None
    intervals: list[Interval] | None = None
    notes: str | None = None


class TrainingPlan(_CamelModel):
    id: str
    name: str
    start_date: str
    end_date: str
    weeks: int = 0
    workouts: list[Workout] = Field(default_factory=list)
    source: str | None = Field(default=None, description="Original file name")

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_workout(self, workout: Workout | None = None) -> Workout:
        """Append a workout, or a placeholder run the day after the last one."""
        if workout is None:
            if self.workouts:
                last = date.fromisoformat(self.workouts[-1].date)
            else:
                last = date.today()
            workout = Workout(
                id=generate_workout_id(),
                date=(last + timedelta(days=1)).isoformat(),
                type="run",
                name="New Workout",
                description="Add workout details here",
            )
        self.workouts.append(workout)
        return workout

    def update_workout(self, workout: Workout) -> None:
        for index, existing in enumerate(self.workouts):
            if existing.id == workout.id:
                self.workouts[index] = workout
                return
        raise KeyError(workout.id)

    def delete_workout(self, workout_id: str) -> None:
        for index, existing in enumerate(self.workouts):
            if existing.id == workout_id:
                del self.workouts[index]
                return
        raise KeyError(workout_id)

    def rename(self, name: str) -> None:
        self.name = name

    def shift_start_date(self, new_start: str) -> None:
        """Move the plan to ``new_start``, shifting every workout by the same offset.

        The end date becomes the latest shifted workout date.
        """
        offset = date.fromisoformat(new_start) - date.fromisoformat(self.start_date)
        for workout in self.workouts:
            workout.date = (date.fromisoformat(workout.date) + offset).isoformat()

        self.start_date = new_start
        if self.workouts:
            self.end_date = max(w.date for w in self.workouts)
        else:
            self.end_date = new_start
        self.weeks = calculate_weeks(self.start_date, self.end_date)

    def to_import_json(self) -> dict[str, Any]:
        """Serialize to the JSON plan file format (re-importable)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _generate_id(prefix: str) -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def generate_workout_id() -> str:
    return _generate_id("workout")


def generate_plan_id() -> str:
    return _generate_id("plan")


def calculate_weeks(start_date: str, end_date: str) -> int:
    """Number of weeks spanned by two ISO dates (order-insensitive, rounded up)."""
    days = abs((date.fromisoformat(end_date) - date.fromisoformat(start_date)).days)
    return math.ceil(days / 7)
