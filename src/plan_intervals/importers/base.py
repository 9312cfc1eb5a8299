"""Common interface for training plan sources.

Every importer turns a file's bytes into a `TrainingPlan` or raises
`PlanImportError` with a message fit to show the user.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from plan_intervals.interval_parser import parse_interval_description
from plan_intervals.models.plan import (
    TrainingPlan,
    Workout,
    calculate_weeks,
    generate_plan_id,
    generate_workout_id,
)


class PlanImportError(Exception):
    """Raised when a file cannot be turned into a training plan."""


class PlanImporter(ABC):
    """Produce a training plan from a file, or fail with a descriptive error."""

    #: Accepted file name suffixes, lower case.
    suffixes: tuple[str, ...] = ()
    #: Largest accepted file, in bytes.
    max_size: int = 0

    def __init__(self, infer_intervals: bool = False) -> None:
        self.infer_intervals = infer_intervals

    def check_file(self, filename: str, data: bytes) -> None:
        """Reject files of the wrong kind or size before any parsing."""
        if not filename.lower().endswith(self.suffixes):
            raise PlanImportError(
                f"Unsupported file '{filename}'. Expected {' or '.join(self.suffixes)}."
            )
        if not data:
            raise PlanImportError("File is empty.")
        if len(data) > self.max_size:
            raise PlanImportError(
                f"File size exceeds {self.max_size // (1024 * 1024)}MB limit."
            )

    def import_bytes(self, data: bytes, filename: str) -> TrainingPlan:
        self.check_file(filename, data)
        plan = self._extract(data, filename)
        logger.info(
            "Imported '{}' from {}: {} workouts over {} weeks",
            plan.name,
            filename,
            len(plan.workouts),
            plan.weeks,
        )
        return plan

    def import_file(self, path: Path) -> TrainingPlan:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise PlanImportError(f"Failed to read file: {exc}") from exc
        return self.import_bytes(data, path.name)

    @abstractmethod
    def _extract(self, data: bytes, filename: str) -> TrainingPlan:
        """Parse validated file content into a plan."""


def assemble_plan(
    name: str,
    start_date: str,
    end_date: str,
    workouts: list[Mapping[str, Any]],
    source: str,
    infer_intervals: bool = False,
) -> TrainingPlan:
    """Build a plan with fresh plan and workout identifiers.

    Any ``id`` present in the input is replaced. Raises pydantic's
    ``ValidationError`` for workouts that do not fit the model.
    """
    built: list[Workout] = []
    for raw in workouts:
        fields = {k: v for k, v in raw.items() if v not in (None, "") and k != "id"}
        workout = Workout.model_validate({**fields, "id": generate_workout_id()})
        if infer_intervals and not workout.intervals and workout.description:
            workout.intervals = parse_interval_description(workout.description) or None
        built.append(workout)

    return TrainingPlan(
        id=generate_plan_id(),
        name=name,
        start_date=start_date,
        end_date=end_date,
        weeks=calculate_weeks(start_date, end_date),
        workouts=built,
        source=source,
    )
