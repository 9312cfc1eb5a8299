"""Tests for the training plan model and its edit operations."""

import re

import pytest

from plan_intervals.models.plan import (
    TrainingPlan,
    Workout,
    calculate_weeks,
    generate_plan_id,
    generate_workout_id,
)


def _plan() -> TrainingPlan:
    return TrainingPlan.model_validate(
        {
            "id": "p1",
            "name": "10K Plan",
            "startDate": "2026-03-02",
            "endDate": "2026-03-15",
            "weeks": 2,
            "workouts": [
                {"id": "a", "date": "2026-03-02", "type": "run", "name": "Easy"},
                {"id": "b", "date": "2026-03-08", "type": "rest", "name": "Rest"},
                {"id": "c", "date": "2026-03-15", "type": "run", "name": "Long Run"},
            ],
        }
    )


class TestIds:
    def test_workout_id_format(self) -> None:
        assert re.fullmatch(r"workout_\d+_[a-z0-9]{9}", generate_workout_id())

    def test_plan_id_format(self) -> None:
        assert re.fullmatch(r"plan_\d+_[a-z0-9]{9}", generate_plan_id())

    def test_ids_differ(self) -> None:
        assert len({generate_workout_id() for _ in range(50)}) == 50


class TestCalculateWeeks:
    @pytest.mark.parametrize(
        ("start", "end", "weeks"),
        [
            ("2026-03-02", "2026-03-02", 0),
            ("2026-03-02", "2026-03-03", 1),
            ("2026-03-02", "2026-03-09", 1),
            ("2026-03-02", "2026-03-10", 2),
            ("2026-03-02", "2026-04-26", 8),
        ],
    )
    def test_rounds_up(self, start: str, end: str, weeks: int) -> None:
        assert calculate_weeks(start, end) == weeks


class TestEdits:
    def test_add_placeholder_after_last(self) -> None:
        plan = _plan()
        added = plan.add_workout()
        assert plan.workouts[-1] is added
        assert added.date == "2026-03-16"
        assert added.type == "run"
        assert added.name == "New Workout"
        assert added.id.startswith("workout_")

    def test_add_given_workout(self) -> None:
        plan = _plan()
        workout = Workout(id="d", date="2026-03-20", type="swim", name="Swim")
        plan.add_workout(workout)
        assert [w.id for w in plan.workouts] == ["a", "b", "c", "d"]

    def test_update_replaces_by_id(self) -> None:
        plan = _plan()
        plan.update_workout(Workout(id="b", date="2026-03-08", type="bike", name="Spin"))
        assert plan.workouts[1].name == "Spin"
        assert len(plan.workouts) == 3

    def test_update_unknown_id(self) -> None:
        with pytest.raises(KeyError):
            _plan().update_workout(Workout(id="zzz", date="2026-03-08", type="run", name="x"))

    def test_delete(self) -> None:
        plan = _plan()
        plan.delete_workout("a")
        assert [w.id for w in plan.workouts] == ["b", "c"]

    def test_delete_unknown_id(self) -> None:
        with pytest.raises(KeyError):
            _plan().delete_workout("zzz")

    def test_rename(self) -> None:
        plan = _plan()
        plan.rename("Spring 10K")
        assert plan.name == "Spring 10K"


class TestShiftStartDate:
    def test_shifts_every_workout(self) -> None:
        plan = _plan()
        plan.shift_start_date("2026-04-06")
        assert [w.date for w in plan.workouts] == ["2026-04-06", "2026-04-12", "2026-04-19"]
        assert plan.start_date == "2026-04-06"
        assert plan.end_date == "2026-04-19"
        assert plan.weeks == 2

    def test_shift_backwards(self) -> None:
        plan = _plan()
        plan.shift_start_date("2026-02-23")
        assert plan.workouts[0].date == "2026-02-23"
        assert plan.end_date == "2026-03-08"

    def test_end_date_is_latest_workout(self) -> None:
        plan = _plan()
        plan.end_date = "2026-03-31"
        plan.shift_start_date("2026-03-02")
        assert plan.end_date == "2026-03-15"

    def test_no_workouts(self) -> None:
        plan = TrainingPlan(id="p", name="Empty", start_date="2026-03-02", end_date="2026-03-09")
        plan.shift_start_date("2026-05-01")
        assert plan.end_date == "2026-05-01"
        assert plan.weeks == 0

    def test_invalid_date(self) -> None:
        with pytest.raises(ValueError):
            _plan().shift_start_date("next monday")


class TestImportJson:
    def test_camel_case_and_no_nulls(self) -> None:
        data = _plan().to_import_json()
        assert data["startDate"] == "2026-03-02"
        assert data["endDate"] == "2026-03-15"
        assert "source" not in data
        assert data["workouts"][0] == {
            "id": "a",
            "date": "2026-03-02",
            "type": "run",
            "name": "Easy",
            "description": "",
        }

    def test_round_trip(self) -> None:
        plan = _plan()
        assert TrainingPlan.model_validate(plan.to_import_json()) == plan
