"""Shape and range checks for workouts and training plans.

Both validators accept a model or a raw (possibly partial) mapping such as
freshly decoded JSON, run every rule and return all problems at once.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel

from plan_intervals.models.plan import INTENSITY_LEVELS, WORKOUT_TYPES

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def is_valid_workout_type(value: object) -> bool:
    return value in WORKOUT_TYPES


def is_valid_intensity(value: object) -> bool:
    return value in INTENSITY_LEVELS


def is_valid_iso_date(value: object) -> bool:
    """True for a ``YYYY-MM-DD`` string naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _as_mapping(candidate: BaseModel | Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump(by_alias=True)
    return candidate


def _get(data: Mapping[str, Any], camel: str, snake: str | None = None) -> Any:
    if camel in data:
        return data[camel]
    if snake is not None:
        return data.get(snake)
    return None


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_non_negative(value: object, label: str, errors: list[str]) -> None:
    if value is None:
        return
    if not _is_number(value):
        errors.append(f"{label} must be a number")
    elif value < 0:  # type: ignore[operator]
        errors.append(f"{label} must be non-negative")


def _validate_interval(interval: object) -> list[str]:
    if isinstance(interval, BaseModel):
        interval = interval.model_dump(by_alias=True)
    if not isinstance(interval, Mapping):
        return ["not an object"]

    errors: list[str] = []
    repeat = interval.get("repeat", 1)
    if not _is_number(repeat) or repeat < 1:
        errors.append("repeat must be at least 1")
    _check_non_negative(interval.get("duration"), "duration", errors)
    _check_non_negative(interval.get("recovery"), "recovery", errors)
    duration_type = _get(interval, "durationType", "duration_type")
    if duration_type is not None and duration_type not in ("time", "distance"):
        errors.append(f"invalid durationType: {duration_type}")
    return errors


def validate_workout(candidate: BaseModel | Mapping[str, Any]) -> ValidationResult:
    """Validate a single workout, collecting every violated rule."""
    workout = _as_mapping(candidate)
    errors: list[str] = []

    if not workout.get("id"):
        errors.append("Workout ID is required")

    workout_date = workout.get("date")
    if not workout_date:
        errors.append("Workout date is required")
    elif not is_valid_iso_date(workout_date):
        errors.append("Invalid date format. Use YYYY-MM-DD")

    workout_type = workout.get("type")
    if not workout_type:
        errors.append("Workout type is required")
    elif not is_valid_workout_type(workout_type):
        errors.append(f"Invalid workout type: {workout_type}")

    if not workout.get("name"):
        errors.append("Workout name is required")
    if not workout.get("description"):
        errors.append("Workout description is required")

    _check_non_negative(workout.get("duration"), "Duration", errors)
    _check_non_negative(workout.get("distance"), "Distance", errors)

    intensity = workout.get("intensity")
    if intensity and not is_valid_intensity(intensity):
        errors.append(f"Invalid intensity: {intensity}")

    intervals = workout.get("intervals")
    if intervals is not None:
        if not isinstance(intervals, list):
            errors.append("Intervals must be a list")
        else:
            for number, interval in enumerate(intervals, start=1):
                problems = _validate_interval(interval)
                if problems:
                    errors.append(f"Interval {number}: {', '.join(problems)}")

    return ValidationResult(valid=not errors, errors=errors)


def validate_training_plan(candidate: BaseModel | Mapping[str, Any]) -> ValidationResult:
    """Validate a plan and every workout in it.

    Workout problems are reported as one entry per workout, prefixed with
    its 1-based position.
    """
    plan = _as_mapping(candidate)
    errors: list[str] = []

    if not plan.get("id"):
        errors.append("Plan ID is required")
    if not plan.get("name"):
        errors.append("Plan name is required")

    start = _get(plan, "startDate", "start_date")
    end = _get(plan, "endDate", "end_date")
    if not start:
        errors.append("Start date is required")
    elif not is_valid_iso_date(start):
        errors.append("Invalid start date format")
    if not end:
        errors.append("End date is required")
    elif not is_valid_iso_date(end):
        errors.append("Invalid end date format")

    workouts = plan.get("workouts")
    if not isinstance(workouts, list):
        errors.append("Workouts array is required")
    elif not workouts:
        errors.append("Plan must have at least one workout")

    if is_valid_iso_date(start) and is_valid_iso_date(end):
        if date.fromisoformat(end) <= date.fromisoformat(start):
            errors.append("End date must be after start date")

    if isinstance(workouts, list):
        for number, workout in enumerate(workouts, start=1):
            if not isinstance(workout, (Mapping, BaseModel)):
                errors.append(f"Workout {number}: not an object")
                continue
            result = validate_workout(workout)
            if not result.valid:
                errors.append(f"Workout {number}: {', '.join(result.errors)}")

    return ValidationResult(valid=not errors, errors=errors)
