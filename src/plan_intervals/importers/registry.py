"""Pick an importer for a file and run it."""

from pathlib import Path

from plan_intervals.config import Settings, resolve_api_key
from plan_intervals.importers.base import PlanImporter, PlanImportError
from plan_intervals.importers.json_plan import JsonPlanImporter
from plan_intervals.importers.pdf_plan import GeminiPlanImporter
from plan_intervals.models.plan import TrainingPlan
from plan_intervals.models.results import Result
from plan_intervals.store import KeyStore


def importer_for(
    path: Path,
    settings: Settings,
    store: KeyStore,
    infer_intervals: bool = False,
) -> PlanImporter:
    """Choose the importer matching the file suffix.

    Raises:
        PlanImportError: for unsupported file types.
    """
    suffix = path.suffix.lower()
    if suffix in JsonPlanImporter.suffixes:
        return JsonPlanImporter(infer_intervals=infer_intervals)
    if suffix in GeminiPlanImporter.suffixes:
        return GeminiPlanImporter(
            api_key=resolve_api_key(settings, store, "googleai"),
            model=settings.gemini_model,
            infer_intervals=infer_intervals,
        )
    raise PlanImportError(f"Unsupported file type '{suffix or path.name}'. Use a .pdf or .json file.")


def import_plan(
    path: Path,
    importer: PlanImporter,
    start_date: str | None = None,
) -> Result[TrainingPlan]:
    """Run ``importer`` on ``path``, optionally moving the plan to ``start_date``."""
    try:
        plan = importer.import_file(path)
    except PlanImportError as exc:
        return Result.fail(str(exc))

    if start_date:
        try:
            plan.shift_start_date(start_date)
        except ValueError:
            return Result.fail(f"Invalid start date: {start_date}. Expected YYYY-MM-DD")
    return Result.ok(plan)
