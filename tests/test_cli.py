"""Tests for the plan-intervals command line."""

import json
from pathlib import Path

import httpx
import pytest
from pytest_httpx import HTTPXMock
from typer.testing import CliRunner

from plan_intervals.cli import app
from plan_intervals.importers.pdf_plan import GeminiPlanImporter
from plan_intervals.models.results import Result

runner = CliRunner()

EVENTS_URL = "https://intervals.icu/api/v1/athlete/0/events"

PLAN = {
    "name": "Base Block",
    "startDate": "2026-03-02",
    "endDate": "2026-03-08",
    "workouts": [
        {
            "date": "2026-03-02",
            "type": "run",
            "name": "Easy Run",
            "description": "Easy 5k",
            "distance": 5,
            "intensity": "easy",
        },
        {
            "date": "2026-03-04",
            "type": "run",
            "name": "Reps",
            "description": "Warmup: 10 minutes easy\n6x400m at 5K pace\nCooldown: 5 minutes easy",
            "intervals": [
                {"repeat": 6, "duration": 400, "durationType": "distance",
                 "intensity": "5K pace", "recovery": 200}
            ],
        },
        {"date": "2026-03-05", "type": "rest", "name": "Rest", "description": "Rest day"},
    ],
}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PLAN_INTERVALS_STORE_PATH", str(tmp_path / "store.json"))
    monkeypatch.setenv("PLAN_INTERVALS_UPLOAD_DELAY_SECONDS", "0")
    monkeypatch.setenv("PLAN_INTERVALS_LOG_LEVEL", "ERROR")
    monkeypatch.delenv("PLAN_INTERVALS_INTERVALS_API_KEY", raising=False)
    monkeypatch.delenv("PLAN_INTERVALS_GOOGLE_AI_API_KEY", raising=False)
    monkeypatch.delenv("PLAN_INTERVALS_INTERVALS_ATHLETE_ID", raising=False)
    monkeypatch.delenv("PLAN_INTERVALS_INTERVALS_BASE_URL", raising=False)


@pytest.fixture()
def plan_file(tmp_path: Path) -> Path:
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(PLAN), encoding="utf-8")
    return path


class TestImport:
    def test_writes_normalized_plan(self, plan_file: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.json"
        result = runner.invoke(
            app, ["import", str(plan_file), "-o", str(out), "--start-date", "2026-04-06"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text())
        assert data["startDate"] == "2026-04-06"
        assert data["endDate"] == "2026-04-09"
        assert [w["date"] for w in data["workouts"]] == ["2026-04-06", "2026-04-08", "2026-04-09"]
        assert all(w["id"].startswith("workout_") for w in data["workouts"])

    def test_invalid_plan_exits(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({**PLAN, "workouts": []}))
        result = runner.invoke(app, ["import", str(path)])
        assert result.exit_code == 1

    def test_unsupported_file(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.txt"
        path.write_text("5x1km")
        result = runner.invoke(app, ["import", str(path)])
        assert result.exit_code == 1

    def test_bad_start_date(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["import", str(plan_file), "--start-date", "soon"])
        assert result.exit_code == 1


class TestPreview:
    def test_shows_workout_text(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["preview", str(plan_file), "--pace", "5K pace=4:10/km"])
        assert result.exit_code == 0, result.output
        assert "6x" in result.output
        assert "- 400m 4:10/km Pace" in result.output
        assert "- 5.0km Easy pace" in result.output

    def test_bad_pace_option(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["preview", str(plan_file), "--pace", "oops"])
        assert result.exit_code == 1


class TestUpload:
    def test_dry_run_sends_nothing(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["upload", str(plan_file), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output

    def test_requires_api_key(self, plan_file: Path) -> None:
        result = runner.invoke(app, ["upload", str(plan_file)])
        assert result.exit_code == 1

    def test_uploads_all_workouts(
        self, plan_file: Path, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        for i in range(3):
            httpx_mock.add_response(method="POST", url=EVENTS_URL, json={"id": i})

        result = runner.invoke(app, ["upload", str(plan_file)])

        assert result.exit_code == 0, result.output
        assert "Uploaded 3 workout(s)" in result.output
        categories = [json.loads(r.content)["category"] for r in httpx_mock.get_requests()]
        assert categories == ["WORKOUT", "WORKOUT", "NOTE"]

    def test_partial_failure_exits_nonzero(
        self, plan_file: Path, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(method="POST", url=EVENTS_URL, json={"id": 1})
        httpx_mock.add_response(method="POST", url=EVENTS_URL, status_code=500, text="boom")
        httpx_mock.add_response(method="POST", url=EVENTS_URL, json={"id": 3})

        result = runner.invoke(app, ["upload", str(plan_file)])

        assert result.exit_code == 1
        assert len(httpx_mock.get_requests()) == 3

    def test_uses_stored_key(
        self, plan_file: Path, httpx_mock: HTTPXMock, tmp_path: Path
    ) -> None:
        (tmp_path / "store.json").write_text(json.dumps({"intervals_icu_api_key": "stored"}))
        for i in range(3):
            httpx_mock.add_response(method="POST", url=EVENTS_URL, json={"id": i})

        result = runner.invoke(app, ["upload", str(plan_file)])

        assert result.exit_code == 0, result.output


class TestCheck:
    def test_valid_key(self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(
            method="GET", url="https://intervals.icu/api/v1/athlete/0", json={"id": "i1"}
        )
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 0, result.output
        assert "valid" in result.output

    def test_invalid_key(self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(
            method="GET", url="https://intervals.icu/api/v1/athlete/0", status_code=401
        )
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 1

    def test_google_key(self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(
            method="GET", url="https://intervals.icu/api/v1/athlete/0", json={"id": "i1"}
        )
        monkeypatch.setattr(
            GeminiPlanImporter, "validate_credentials", lambda self: Result.ok(True)
        )
        result = runner.invoke(app, ["check", "--google"])
        assert result.exit_code == 0, result.output
        assert "Google AI API key is valid" in result.output

    def test_google_key_missing(
        self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(
            method="GET", url="https://intervals.icu/api/v1/athlete/0", json={"id": "i1"}
        )
        result = runner.invoke(app, ["check", "--google"])
        assert result.exit_code == 1


class TestListEvents:
    def test_connection_error_exits_cleanly(
        self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        result = runner.invoke(
            app, ["list-events", "--start", "2026-03-01", "--end", "2026-03-31"]
        )
        assert result.exit_code == 1
        assert not isinstance(result.exception, httpx.HTTPError)

    def test_lists_events(self, httpx_mock: HTTPXMock, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLAN_INTERVALS_INTERVALS_API_KEY", "secret")
        httpx_mock.add_response(
            method="GET",
            url=f"{EVENTS_URL}?oldest=2026-03-01&newest=2026-03-31",
            json=[{"id": 7, "name": "Tempo", "start_date_local": "2026-03-04T00:00:00"}],
        )
        result = runner.invoke(
            app, ["list-events", "--start", "2026-03-01", "--end", "2026-03-31"]
        )
        assert result.exit_code == 0, result.output
        assert "Tempo" in result.output


class TestConfig:
    def test_saves_keys_and_preferences(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["config"], input="ikey\ngkey\nmi\n")
        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / "store.json").read_text())
        assert data["intervals_icu_api_key"] == "ikey"
        assert data["google_ai_api_key"] == "gkey"
        assert json.loads(data["user_preferences"]) == {"distance_unit": "mi"}

    def test_clear(self, tmp_path: Path) -> None:
        runner.invoke(app, ["config"], input="ikey\n\nkm\n")
        result = runner.invoke(app, ["config", "--clear"])
        assert result.exit_code == 0
        data = json.loads((tmp_path / "store.json").read_text())
        assert "intervals_icu_api_key" not in data
