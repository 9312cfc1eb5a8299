"""Sequential batch upload of workouts to Intervals.icu.

Workouts go up one request at a time, in order, with a fixed pause between
requests. A failed item is recorded and the batch carries on; items that
already succeeded are not rolled back.
"""

import time
from collections.abc import Callable, Sequence

import httpx
from loguru import logger

from plan_intervals.formatter import format_workout
from plan_intervals.intervals_client import IntervalsAPIError, IntervalsClient
from plan_intervals.models.intervals import IntervalsEvent
from plan_intervals.models.plan import TrainingPlan, Workout
from plan_intervals.models.results import UploadReport
from plan_intervals.pace import PaceMapping

UPLOAD_DELAY_SECONDS = 0.2

ProgressCallback = Callable[[int, int], None]

_SPORT_TYPES: dict[str, str] = {
    "run": "Run",
    "bike": "Ride",
    "swim": "Swim",
    "strength": "WeightTraining",
}


def build_event(workout: Workout, pace_mapping: PaceMapping | None = None) -> IntervalsEvent:
    """Map a workout onto an Intervals.icu event payload.

    Rest days become NOTE entries without a sport type.
    """
    is_rest = workout.type == "rest"
    start = workout.date if "T" in workout.date else f"{workout.date}T00:00:00"
    return IntervalsEvent(
        external_id=workout.id,
        category="NOTE" if is_rest else "WORKOUT",
        start_date_local=start,
        name=workout.name,
        description=format_workout(workout, pace_mapping),
        type=None if is_rest else _SPORT_TYPES.get(workout.type, "Run"),
        moving_time=round(workout.duration * 60) if workout.duration else None,
        distance=workout.distance * 1000 if workout.distance else None,
    )


def upload_workouts(
    workouts: Sequence[Workout],
    client: IntervalsClient,
    pace_mapping: PaceMapping | None = None,
    on_progress: ProgressCallback | None = None,
    delay: float = UPLOAD_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> UploadReport:
    """Upload workouts one at a time.

    Args:
        workouts: Workouts in upload order.
        client: Authenticated Intervals.icu client.
        pace_mapping: Intensity label overrides applied while formatting.
        on_progress: Called as ``on_progress(done, total)`` after every attempt.
        delay: Seconds to wait between consecutive uploads.
        sleep: Sleep function, replaceable in tests.

    Returns:
        Counts of succeeded/failed items plus one
        ``"<name> (<date>): <message>"`` string per failure.
    """
    report = UploadReport()
    total = len(workouts)

    for index, workout in enumerate(workouts):
        try:
            client.create_event(build_event(workout, pace_mapping))
        except (IntervalsAPIError, httpx.HTTPError) as exc:
            message = str(exc) or f"Failed to upload workout: {workout.name}"
            logger.warning("Upload failed for {} ({}): {}", workout.name, workout.date, message)
            report.failed += 1
            report.errors.append(f"{workout.name} ({workout.date}): {message}")
        else:
            report.succeeded += 1

        if on_progress is not None:
            on_progress(index + 1, total)

        if index < total - 1:
            sleep(delay)

    logger.info("Upload finished: {} succeeded, {} failed", report.succeeded, report.failed)
    return report


def upload_plan(
    plan: TrainingPlan,
    client: IntervalsClient,
    pace_mapping: PaceMapping | None = None,
    on_progress: ProgressCallback | None = None,
    delay: float = UPLOAD_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> UploadReport:
    """Upload every workout of ``plan`` in order. See `upload_workouts`."""
    return upload_workouts(
        plan.workouts,
        client,
        pace_mapping=pace_mapping,
        on_progress=on_progress,
        delay=delay,
        sleep=sleep,
    )
