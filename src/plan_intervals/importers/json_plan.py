"""Direct import of plans already written in the JSON plan format.

    {
      "name": "10K Plan",
      "startDate": "2026-03-02",
      "endDate": "2026-04-26",
      "workouts": [
        {"date": "2026-03-02", "type": "run", "name": "Easy Run",
         "description": "...", "duration": 40, "distance": 7, "intensity": "easy"}
      ]
    }

Validation stops at the first problem and nothing is imported when any
workout is invalid.
"""

import json
import math
from collections.abc import Mapping
from datetime import date
from typing import Any

from pydantic import ValidationError

from plan_intervals.importers.base import PlanImporter, PlanImportError, assemble_plan
from plan_intervals.models.plan import INTENSITY_LEVELS, WORKOUT_TYPES, Interval, TrainingPlan
from plan_intervals.validator import is_valid_iso_date


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_workout(workout: object, index: int) -> Mapping[str, Any]:
    if not isinstance(workout, dict):
        raise PlanImportError(f"Workout at index {index} is not an object")

    workout_date = workout.get("date")
    if not workout_date or not isinstance(workout_date, str):
        raise PlanImportError(
            f"Workout at index {index} is missing a valid 'date' field "
            "(expected YYYY-MM-DD format)"
        )
    if not is_valid_iso_date(workout_date):
        raise PlanImportError(
            f"Workout at index {index} has invalid date format: {workout_date}. "
            "Expected YYYY-MM-DD"
        )

    workout_type = workout.get("type")
    if not workout_type or not isinstance(workout_type, str):
        raise PlanImportError(f"Workout at index {index} is missing a valid 'type' field")
    if workout_type not in WORKOUT_TYPES:
        raise PlanImportError(
            f"Workout at index {index} has invalid type: {workout_type}. "
            f"Expected one of: {', '.join(WORKOUT_TYPES)}"
        )

    name = workout.get("name")
    if not name or not isinstance(name, str):
        raise PlanImportError(f"Workout at index {index} is missing a valid 'name' field")

    for field, unit in (("duration", "minutes"), ("distance", "kilometres")):
        value = workout.get(field)
        if value is not None and (not _is_number(value) or value < 0):
            raise PlanImportError(
                f"Workout at index {index} has invalid {field}: {value}. "
                f"Expected a non-negative number of {unit}"
            )

    intensity = workout.get("intensity")
    if intensity and intensity not in INTENSITY_LEVELS:
        raise PlanImportError(
            f"Workout at index {index} has invalid intensity: {intensity}. "
            f"Expected one of: {', '.join(INTENSITY_LEVELS)}"
        )

    intervals = workout.get("intervals")
    if intervals is not None:
        if not isinstance(intervals, list):
            raise PlanImportError(f"Workout at index {index} has invalid intervals: expected a list")
        for interval in intervals:
            try:
                Interval.model_validate(interval)
            except ValidationError as exc:
                first = exc.errors()[0]
                location = ".".join(str(part) for part in first["loc"])
                raise PlanImportError(
                    f"Workout at index {index} has invalid intervals: "
                    f"{location} {first['msg']}".strip()
                ) from None

    return workout


class JsonPlanImporter(PlanImporter):
    """Import a plan from a JSON file, failing on the first invalid field."""

    suffixes = (".json",)
    max_size = 5 * 1024 * 1024

    def _extract(self, data: bytes, filename: str) -> TrainingPlan:
        try:
            payload = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise PlanImportError(
                "Failed to parse JSON file. Please ensure it is valid JSON."
            ) from None
        return self.plan_from_json(payload, source=filename)

    def plan_from_json(self, payload: object, source: str = "json-import") -> TrainingPlan:
        """Validate decoded JSON and build the plan."""
        if not isinstance(payload, dict):
            raise PlanImportError("Invalid JSON: expected an object")

        name = payload.get("name")
        if not name or not isinstance(name, str):
            raise PlanImportError("Missing required field: 'name' (string)")

        start = payload.get("startDate")
        if not start or not isinstance(start, str):
            raise PlanImportError("Missing required field: 'startDate' (YYYY-MM-DD format)")
        end = payload.get("endDate")
        if not end or not isinstance(end, str):
            raise PlanImportError("Missing required field: 'endDate' (YYYY-MM-DD format)")

        if not is_valid_iso_date(start):
            raise PlanImportError(f"Invalid startDate format: {start}. Expected YYYY-MM-DD")
        if not is_valid_iso_date(end):
            raise PlanImportError(f"Invalid endDate format: {end}. Expected YYYY-MM-DD")
        if date.fromisoformat(end) <= date.fromisoformat(start):
            raise PlanImportError("End date must be after start date")

        workouts = payload.get("workouts")
        if not isinstance(workouts, list):
            raise PlanImportError("Missing required field: 'workouts' (array)")
        if not workouts:
            raise PlanImportError("Workouts array is empty")

        checked = [_check_workout(workout, index) for index, workout in enumerate(workouts)]

        try:
            return assemble_plan(
                name, start, end, list(checked), source, infer_intervals=self.infer_intervals
            )
        except ValidationError as exc:
            raise PlanImportError(f"Invalid workout data: {exc}") from None
