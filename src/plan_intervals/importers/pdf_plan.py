"""AI-assisted import of PDF training plans via Google Gemini.

The PDF is sent inline with a fixed extraction prompt and a response schema;
the model's JSON answer is mapped onto the plan models. There are no retries.
"""

import json
import re
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from loguru import logger
from pydantic import SecretStr

from plan_intervals.importers.base import PlanImporter, PlanImportError, assemble_plan
from plan_intervals.models.plan import INTENSITY_LEVELS, WORKOUT_TYPES, TrainingPlan
from plan_intervals.models.results import Result

DEFAULT_MODEL = "gemini-2.5-flash"

RATE_LIMIT_HINT = (
    "Google AI rate limit exceeded. Please wait 25-60 seconds and try again, "
    "or try with a smaller PDF file."
)

_RATE_LIMIT_MARKERS = ("quota", "rate limit", "resource_exhausted")

_FENCED_JSON_RE = re.compile(r"^```(?:json)?\s*\n(.*?)\n```", re.DOTALL)

EXTRACTION_PROMPT = """\
You are a training plan extraction expert. Your task is to analyze the provided PDF training plan and extract all workouts in a structured format.

Extract the following information:
1. Plan name (e.g., "12-Week Marathon Training Plan")
2. Start date and end date (infer from the first and last workout dates if not explicitly stated)
3. All workouts with:
   - Date (YYYY-MM-DD format)
   - Type (run, bike, swim, strength, or rest)
   - Name (e.g., "Easy Run", "Tempo Run", "Long Run")
   - Description (full workout details, including pace, intervals, distance)
   - Duration in minutes (if specified)
   - Distance in kilometers (if specified, convert miles to km if needed: 1 mile = 1.60934 km)
   - Intensity (easy, moderate, hard, or race - infer from workout description)
   - Intervals (structured steps for complex workouts)

IMPORTANT for Structured Workouts:
For interval workouts (e.g. "5x1000m at 5K pace with 400m recovery"), extract the structure into the 'intervals' array:
- repeat: number of times to repeat
- duration: the value of the work interval
- durationType: 'distance' (for meters/km) or 'time' (for seconds/minutes)
  - ALWAYS convert time to SECONDS
  - ALWAYS convert distance to METERS
- intensity: target pace/heart rate zone/power (e.g. "5K pace", "Z4", "Threshold")
- recovery: duration of recovery, in the same unit as the work interval
- recoveryIntensity: usually "Easy" or "Z1"

IMPORTANT:
- Extract ALL workouts from the plan, including rest days
- Convert all distances to kilometers for the main workout object
- Use ISO 8601 date format (YYYY-MM-DD)
- For interval workouts, include the full description (e.g., "5x1000m at 5K pace with 400m jog recovery")
- If a workout has multiple components (e.g., warm-up + intervals + cool-down), put each on its own line in the description, starting with "Warmup:" or "Cooldown:" where applicable
- Infer workout intensity from keywords like "easy", "moderate", "tempo", "threshold", "intervals", "race"

Return a single JSON object with the fields name, startDate, endDate and workouts.
"""

_INTERVAL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "repeat": {"type": "INTEGER"},
        "duration": {"type": "NUMBER", "description": "Seconds or meters"},
        "durationType": {"type": "STRING", "enum": ["time", "distance"]},
        "intensity": {"type": "STRING"},
        "recovery": {"type": "NUMBER", "description": "Same unit as duration"},
        "recoveryIntensity": {"type": "STRING"},
    },
    "required": ["repeat", "duration", "durationType", "intensity"],
}

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING", "description": "Name of the training plan"},
        "startDate": {"type": "STRING", "description": "Plan start date, YYYY-MM-DD"},
        "endDate": {"type": "STRING", "description": "Plan end date, YYYY-MM-DD"},
        "workouts": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "date": {"type": "STRING", "description": "YYYY-MM-DD"},
                    "type": {"type": "STRING", "enum": list(WORKOUT_TYPES)},
                    "name": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "duration": {"type": "NUMBER", "description": "Minutes"},
                    "distance": {"type": "NUMBER", "description": "Kilometers"},
                    "intensity": {"type": "STRING", "enum": list(INTENSITY_LEVELS)},
                    "intervals": {"type": "ARRAY", "items": _INTERVAL_SCHEMA},
                },
                "required": ["date", "type", "name", "description"],
            },
        },
    },
    "required": ["name", "startDate", "workouts"],
}


def strip_code_fence(text: str) -> str:
    """Return the JSON inside a ```json fenced block, or the text unchanged."""
    text = text.strip()
    if text.startswith("```"):
        m = _FENCED_JSON_RE.match(text)
        if m:
            return m.group(1)
    return text


def _describe_failure(exc: Exception) -> str:
    message = str(exc) or "Unknown error occurred during extraction"
    if any(marker in message.lower() for marker in _RATE_LIMIT_MARKERS):
        return RATE_LIMIT_HINT
    return message


class GeminiPlanImporter(PlanImporter):
    """Extract a plan from a PDF with a Gemini model."""

    suffixes = (".pdf",)
    max_size = 10 * 1024 * 1024

    def __init__(
        self,
        api_key: SecretStr | None = None,
        model: str = DEFAULT_MODEL,
        client: genai.Client | None = None,
        infer_intervals: bool = False,
    ) -> None:
        super().__init__(infer_intervals=infer_intervals)
        self._api_key = api_key
        self._model = model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if self._api_key is None or not self._api_key.get_secret_value():
                raise PlanImportError(
                    "Google AI API key not found. Run `plan-intervals config` to add it."
                )
            self._client = genai.Client(api_key=self._api_key.get_secret_value())
        return self._client

    def validate_credentials(self) -> Result[bool]:
        """Probe the Google AI key with a one-word prompt. Never raises."""
        try:
            client = self._get_client()
            client.models.generate_content(model=self._model, contents="Hello")
        except PlanImportError as exc:
            return Result.fail(str(exc))
        except genai_errors.APIError as exc:
            logger.warning("Google AI key check failed: {}", exc)
            if getattr(exc, "code", None) in (400, 401, 403):
                return Result.fail("Invalid Google AI API key")
            return Result.fail(_describe_failure(exc))
        except httpx.HTTPError as exc:
            logger.warning("Google AI key check failed: {}", exc)
            return Result.fail(_describe_failure(exc))
        return Result.ok(True)

    def _request(self, data: bytes) -> str:
        client = self._get_client()
        logger.debug("Sending {} bytes of PDF to {}", len(data), self._model)
        response = client.models.generate_content(
            model=self._model,
            contents=[
                EXTRACTION_PROMPT,
                genai_types.Part.from_bytes(data=data, mime_type="application/pdf"),
            ],
            config=genai_types.GenerateContentConfig(
                temperature=0.1,
                response_mime_type="application/json",
                response_schema=EXTRACTION_SCHEMA,
            ),
        )
        if not response.text:
            raise PlanImportError("The model returned an empty response")
        return response.text

    def _extract(self, data: bytes, filename: str) -> TrainingPlan:
        try:
            text = self._request(data)
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            logger.error("Gemini extraction failed for {}: {}", filename, exc)
            raise PlanImportError(_describe_failure(exc)) from exc

        try:
            payload = json.loads(strip_code_fence(text))
            return self.plan_from_extraction(payload, source=filename)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Could not read model output for {}: {}", filename, exc)
            raise PlanImportError(
                f"Failed to extract a training plan from the PDF: {exc}"
            ) from exc

    def plan_from_extraction(self, payload: object, source: str) -> TrainingPlan:
        """Map the model's JSON onto a plan. End date defaults to the start date."""
        if not isinstance(payload, dict):
            raise ValueError("model response is not a JSON object")
        start = payload["startDate"]
        end = payload.get("endDate") or start
        workouts = payload.get("workouts") or []
        if not isinstance(workouts, list):
            raise TypeError("'workouts' is not a list")
        return assemble_plan(
            payload.get("name") or source,
            start,
            end,
            workouts,
            source,
            infer_intervals=self.infer_intervals,
        )
