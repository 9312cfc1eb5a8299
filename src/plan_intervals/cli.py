"""CLI entry point for plan-intervals.

Usage:
    plan-intervals config                        # Save API keys and preferences
    plan-intervals check --google                # Verify the Intervals.icu (and Google AI) keys
    plan-intervals import plan.pdf -o plan.json  # Extract and save a normalized plan
    plan-intervals preview plan.json --pace "5K pace=4:10/km"
    plan-intervals upload plan.json --dry-run
    plan-intervals list-events --start 2026-01-01 --end 2026-01-31
"""

import json
from pathlib import Path
from typing import Annotated

import httpx
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from plan_intervals.config import Settings, resolve_api_key
from plan_intervals.formatter import format_workout
from plan_intervals.importers.base import PlanImportError
from plan_intervals.importers.pdf_plan import GeminiPlanImporter
from plan_intervals.importers.registry import import_plan, importer_for
from plan_intervals.intervals_client import IntervalsAPIError, IntervalsClient
from plan_intervals.logger import setup_logger
from plan_intervals.models.plan import TrainingPlan
from plan_intervals.pace import PaceMapping, collect_intensity_labels, parse_pace_options
from plan_intervals.store import KeyStore
from plan_intervals.uploader import upload_plan
from plan_intervals.validator import validate_training_plan

app = typer.Typer(
    name="plan-intervals",
    help="Import PDF or JSON training plans and sync them to Intervals.icu.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

_MI_TO_KM = 1.609344

PlanFile = Annotated[
    Path,
    typer.Argument(help="Training plan file (.pdf or .json).", exists=True, dir_okay=False),
]
StartDateOption = Annotated[
    str | None,
    typer.Option(
        "--start-date",
        help="Move the plan to start on this date (YYYY-MM-DD); workouts keep their spacing.",
    ),
]
InferOption = Annotated[
    bool,
    typer.Option(
        "--infer-intervals",
        help="Build interval steps from descriptions like '5x1000m at 5K pace with 400m easy'.",
    ),
]
PaceOption = Annotated[
    list[str] | None,
    typer.Option(
        "--pace",
        "-p",
        help="Map an intensity label to a target, e.g. --pace 'Easy=5:30-6:00/km'. Repeatable.",
    ),
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(1) from None
    setup_logger(settings.log_level)
    return settings


def _load_store(settings: Settings) -> KeyStore:
    return KeyStore.load(settings.store_path)


def _load_plan(
    path: Path,
    settings: Settings,
    store: KeyStore,
    start_date: str | None,
    infer_intervals: bool,
) -> TrainingPlan:
    try:
        importer = importer_for(path, settings, store, infer_intervals=infer_intervals)
    except PlanImportError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None

    if path.suffix.lower() == ".pdf":
        console.print("[dim]Extracting training plan with AI…[/dim]")
    result = import_plan(path, importer, start_date=start_date)
    if not result.success or result.data is None:
        err_console.print(f"[red]Import failed:[/red] {result.error}")
        raise typer.Exit(1)
    return result.data


def _report_validation(plan: TrainingPlan) -> bool:
    validation = validate_training_plan(plan)
    for error in validation.errors:
        err_console.print(f"[yellow]⚠ {error}[/yellow]")
    return validation.valid


def _pace_mapping(options: list[str] | None) -> PaceMapping:
    try:
        return parse_pace_options(options)
    except ValueError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from None


def _fmt_distance(km: float, distance_unit: str | None) -> str:
    if distance_unit == "mi":
        return f"{km / _MI_TO_KM:.1f} mi"
    return f"{km:g} km"


def _plan_table(plan: TrainingPlan, distance_unit: str | None = "km") -> Table:
    table = Table(
        title=f"{plan.name} ({plan.start_date} → {plan.end_date}, "
        f"{plan.weeks} week(s), {len(plan.workouts)} workout(s))"
    )
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Name", style="bold")
    table.add_column("Duration", justify="right")
    table.add_column("Distance", justify="right")
    table.add_column("Intensity")

    for workout in plan.workouts:
        table.add_row(
            workout.date,
            workout.type,
            workout.name,
            f"{workout.duration:g} min" if workout.duration else "",
            _fmt_distance(workout.distance, distance_unit) if workout.distance else "",
            workout.intensity or "",
        )
    return table


def _client(settings: Settings, store: KeyStore) -> IntervalsClient:
    api_key = resolve_api_key(settings, store, "intervals")
    if api_key is None:
        err_console.print(
            "[red]No Intervals.icu API key configured.[/red]\n"
            "Run [bold]plan-intervals config[/bold] or set PLAN_INTERVALS_INTERVALS_API_KEY."
        )
        raise typer.Exit(1)
    return IntervalsClient(
        api_key=api_key,
        athlete_id=settings.intervals_athlete_id,
        base_url=settings.intervals_base_url,
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def config(
    show: Annotated[
        bool,
        typer.Option("--show", help="Show which keys and preferences are stored."),
    ] = False,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Remove the stored API keys."),
    ] = False,
) -> None:
    """Save Intervals.icu and Google AI API keys and default preferences.

    Values are saved to the key store ([cyan]~/.config/plan-intervals/store.json[/cyan]
    unless PLAN_INTERVALS_STORE_PATH says otherwise).
    """
    settings = _get_settings()
    store = _load_store(settings)

    if clear:
        store.clear_api_keys()
        console.print("[green]✓ API keys removed.[/green]")
        return

    if show:
        present = store.has_api_keys()
        prefs = store.get_preferences()
        lines = [
            f"Intervals.icu key: {'set' if present['intervals'] else '[yellow]missing[/yellow]'}",
            f"Google AI key:     {'set' if present['googleai'] else '[yellow]missing[/yellow]'}",
            f"Preferences:       {prefs.model_dump_json(exclude_none=True)}",
        ]
        console.print(Panel("\n".join(lines), title=str(store.path), border_style="blue"))
        return

    console.print(
        Panel(
            "Find your [bold]Intervals.icu[/bold] API key at:\n"
            "  [cyan]https://intervals.icu[/cyan] → [bold]Settings[/bold] → "
            "[bold]Developer Settings[/bold] → Generate API Key\n\n"
            "A [bold]Google AI Studio[/bold] key is only needed for PDF import:\n"
            "  [cyan]https://aistudio.google.com/apikey[/cyan]",
            title="plan-intervals Setup",
            border_style="blue",
        )
    )

    intervals_key = typer.prompt("Intervals.icu API key", default="", show_default=False).strip()
    google_key = typer.prompt(
        "Google AI API key (blank to skip)", default="", show_default=False
    ).strip()
    distance_unit = typer.prompt("Distance unit (km/mi)", default="km").strip().lower()

    if intervals_key:
        store.save_api_key("intervals", intervals_key)
    if google_key:
        store.save_api_key("googleai", google_key)

    prefs = store.get_preferences()
    if distance_unit in ("km", "mi"):
        prefs.distance_unit = distance_unit  # type: ignore[assignment]
    else:
        err_console.print(f"[yellow]Unknown distance unit '{distance_unit}', keeping default.[/yellow]")
    store.save_preferences(prefs)

    console.print(f"[green]✓ Settings saved to {store.path}[/green]")


@app.command()
def check(
    google: Annotated[
        bool,
        typer.Option("--google", help="Also verify the Google AI key used for PDF import."),
    ] = False,
) -> None:
    """Verify the Intervals.icu API key, and optionally the Google AI key."""
    settings = _get_settings()
    store = _load_store(settings)
    with _client(settings, store) as client:
        result = client.validate_credentials()
    if not result.success:
        err_console.print(f"[red]✗ {result.error}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Intervals.icu API key is valid.[/green]")

    if not google:
        return
    importer = GeminiPlanImporter(
        api_key=resolve_api_key(settings, store, "googleai"),
        model=settings.gemini_model,
    )
    result = importer.validate_credentials()
    if not result.success:
        err_console.print(f"[red]✗ {result.error}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Google AI API key is valid.[/green]")


@app.command(name="import")
def import_(
    file: PlanFile,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the normalized plan as JSON."),
    ] = None,
    start_date: StartDateOption = None,
    infer_intervals: InferOption = False,
) -> None:
    """Import a PDF (via Gemini) or JSON training plan and show its workouts.

    With [bold]--output[/bold] the normalized plan is saved in the JSON plan
    format, ready to edit and pass to [bold]upload[/bold].
    """
    settings = _get_settings()
    store = _load_store(settings)
    plan = _load_plan(file, settings, store, start_date, infer_intervals)

    console.print(_plan_table(plan, store.get_preferences().distance_unit))
    _report_validation(plan)

    labels = collect_intensity_labels(plan)
    if labels:
        console.print(f"[dim]Intensity labels: {', '.join(labels)}[/dim]")

    if output is not None:
        output.write_text(json.dumps(plan.to_import_json(), indent=2), encoding="utf-8")
        console.print(f"[green]✓ Plan written to {output}[/green]")


@app.command()
def preview(
    file: PlanFile,
    pace: PaceOption = None,
    start_date: StartDateOption = None,
    infer_intervals: InferOption = False,
) -> None:
    """Show the Intervals.icu workout text each workout would be uploaded with."""
    settings = _get_settings()
    store = _load_store(settings)
    mapping = _pace_mapping(pace)
    plan = _load_plan(file, settings, store, start_date, infer_intervals)

    for workout in plan.workouts:
        console.print(
            Panel(
                format_workout(workout, mapping) or "[dim](no description)[/dim]",
                title=f"{workout.date} — {workout.name}",
                border_style="dim",
            )
        )

    unmapped = [label for label in collect_intensity_labels(plan) if label not in mapping]
    if unmapped:
        console.print(
            f"[dim]Labels without a --pace mapping: {', '.join(unmapped)}[/dim]"
        )


@app.command()
def upload(
    file: PlanFile,
    pace: PaceOption = None,
    start_date: StartDateOption = None,
    infer_intervals: InferOption = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Preview without uploading."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Upload even if the plan has validation errors."),
    ] = False,
) -> None:
    """Upload every workout of a plan to your Intervals.icu calendar.

    Workouts are sent one at a time with a short pause between requests. A
    failed workout does not stop the rest; failures are listed at the end.

    [dim]Examples:[/dim]
        plan-intervals upload plan.json --dry-run
        plan-intervals upload plan.pdf --start-date 2026-03-02
        plan-intervals upload plan.json --pace "Easy=5:30-6:00/km" --pace "5K pace=4:10/km"
    """
    settings = _get_settings()
    store = _load_store(settings)
    mapping = _pace_mapping(pace)
    plan = _load_plan(file, settings, store, start_date, infer_intervals)

    console.print(_plan_table(plan, store.get_preferences().distance_unit))
    if not _report_validation(plan) and not force:
        err_console.print("[red]Plan has validation errors.[/red] Fix them or pass --force.")
        raise typer.Exit(1)

    if dry_run:
        console.print("[yellow]Dry run — not uploading.[/yellow]")
        return

    with _client(settings, store) as client:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Uploading", total=len(plan.workouts))
            report = upload_plan(
                plan,
                client,
                pace_mapping=mapping,
                on_progress=lambda done, total: progress.update(task, completed=done),
                delay=settings.upload_delay_seconds,
            )

    if not report.success:
        for error in report.errors:
            err_console.print(f"[red]✗ {error}[/red]")
        err_console.print(
            f"[red]Uploaded {report.succeeded} workout(s), {report.failed} failed.[/red]"
        )
        raise typer.Exit(1)

    console.print(f"[green]✓ Uploaded {report.succeeded} workout(s) to Intervals.icu![/green]")


@app.command(name="list-events")
def list_events(
    start: Annotated[str, typer.Option("--start", help="Start date (YYYY-MM-DD).")],
    end: Annotated[str, typer.Option("--end", help="End date (YYYY-MM-DD).")],
) -> None:
    """List calendar events on Intervals.icu for a date range."""
    settings = _get_settings()
    store = _load_store(settings)
    with _client(settings, store) as client:
        try:
            events = client.get_events(start, end)
        except (IntervalsAPIError, httpx.HTTPError, ValueError) as exc:
            err_console.print(f"[red]Failed to fetch events:[/red] {exc}")
            raise typer.Exit(1) from None

    if not events:
        console.print(f"[yellow]No events found between {start} and {end}.[/yellow]")
        return

    table = Table(title=f"Intervals.icu Events: {start} → {end}")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("ID", style="dim")

    for ev in events:
        table.add_row(
            (ev.get("start_date_local") or "")[:10],
            ev.get("name") or "",
            ev.get("type") or "",
            ev.get("category") or "",
            str(ev.get("id") or ""),
        )

    console.print(table)


if __name__ == "__main__":
    app()
