from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from teaplan.assignment.aggregate import assignments_dataframe
from teaplan.assignment.predictor import EncodedModelPredictor
from teaplan.cli._utils import (
    QUALITY_CHOICE,
    assignments_table,
    field_summary_table,
    format_efficiency,
    parse_date_option,
    parse_quality_option,
)
from teaplan.cli.schedules import schedules_app
from teaplan.cli.telemetry import telemetry_app
from teaplan.core.errors import PredictorError, ValidationError
from teaplan.planning import GenerationConfig, generate_daily_schedule
from teaplan.plantation import RosterRepository
from teaplan.plantation.io import load_roster
from teaplan.storage import SQLiteScheduleStore
from teaplan.telemetry import GenerationTelemetryLogger

app = typer.Typer(add_completion=False, no_args_is_help=True)
app.add_typer(schedules_app, name="schedules")
app.add_typer(telemetry_app, name="telemetry")
console = Console()


def _load_roster_or_exit(roster_path: Path):
    try:
        return load_roster(roster_path)
    except (OSError, ValueError, KeyError) as exc:
        console.print(f"[red]Invalid roster {roster_path}:[/red] {exc}")
        raise typer.Exit(1)


@app.command()
def validate(roster: Path):
    """Validate a roster YAML and print summary."""
    rs = _load_roster_or_exit(roster)
    t = Table(title=f"Plantation: {rs.plantation_id}")
    t.add_column("Entities")
    t.add_column("Count")
    t.add_row("Workers", str(len(rs.workers)))
    t.add_row("Fields", str(len(rs.fields)))
    t.add_row("Quality", rs.quality.value)
    t.add_row("Date", rs.date.isoformat() if rs.date else "-")
    console.print(t)


@app.command()
def generate(
    roster: Path,
    date: str | None = typer.Option(
        None,
        "--date",
        "-d",
        callback=parse_date_option,
        help="Schedule date (YYYY-MM-DD). Defaults to the roster date, then today.",
    ),
    quality: str | None = typer.Option(
        None,
        "--quality",
        "-q",
        help="Leaf quality tier applied to every pairing (High|Medium|Low).",
        show_choices=True,
        click_type=QUALITY_CHOICE,
    ),
    model_dir: Path | None = typer.Option(
        None,
        "--model-dir",
        help="Directory with scaler_params.json, label_mappings.json and linear_model.json.",
        file_okay=False,
    ),
    store: Path | None = typer.Option(
        None,
        "--store",
        "-s",
        help="SQLite schedule store; the plantation-day schedule is created or replaced.",
        dir_okay=False,
    ),
    out_csv: Path | None = typer.Option(
        None, "--out-csv", help="Write assignments to a CSV file.", dir_okay=False
    ),
    telemetry_log: Path | None = typer.Option(
        None,
        "--telemetry-log",
        help="Append run telemetry to a JSONL file (e.g. telemetry/runs.jsonl); round logs land in telemetry/rounds/.",
        writable=True,
        dir_okay=False,
    ),
):
    """Generate the worker-field schedule of one plantation-day."""
    rs = _load_roster_or_exit(roster)
    config = GenerationConfig.from_roster(
        rs,
        date=date,
        quality=parse_quality_option(quality),
        model_dir=model_dir,
        store_path=store,
        telemetry_log=telemetry_log,
    )
    if config.model_dir is None:
        console.print(
            "[red]No model directory configured.[/red] Pass --model-dir or set model_dir in the roster."
        )
        raise typer.Exit(1)

    repository = RosterRepository([rs])
    predictor = EncodedModelPredictor(config.model_dir)
    schedule_store = SQLiteScheduleStore(config.store_path) if config.store_path else None
    telemetry_cm = (
        GenerationTelemetryLogger(
            log_path=config.telemetry_log,
            plantation_id=config.plantation_id,
            date=config.date,
            quality=config.quality.value,
            context={
                "source": "cli.generate",
                "roster_path": str(roster),
                "store_path": str(config.store_path) if config.store_path else None,
            },
        )
        if config.telemetry_log
        else nullcontext()
    )

    try:
        with telemetry_cm as telemetry:
            result = generate_daily_schedule(
                config.plantation_id,
                config.date,
                workers=repository,
                fields=repository,
                predictor=predictor,
                store=schedule_store,
                quality=config.quality,
                telemetry=telemetry,
            )
    except ValidationError as exc:
        console.print(f"[red]Cannot generate schedule:[/red] {exc}")
        raise typer.Exit(1)
    except PredictorError as exc:
        console.print(f"[red]Efficiency model failed:[/red] {exc}")
        raise typer.Exit(1)

    schedule = result.schedule
    console.print(
        assignments_table(
            schedule.assignments, title=f"Schedule: {config.plantation_id} {config.date}"
        )
    )
    console.print(field_summary_table(schedule.assignments))
    console.print(
        f"Workers: {schedule.total_workers}  Fields: {schedule.total_fields}  "
        f"Average kg/h: {format_efficiency(schedule.average_predicted_efficiency)}"
    )

    if out_csv:
        out_csv.parent.mkdir(parents=True, exist_ok=True)
        assignments_dataframe(schedule.assignments).to_csv(str(out_csv), index=False)
        console.print(f"Assignments saved to {out_csv}")

    if telemetry_log:
        console.print(f"[dim]Telemetry appended to {telemetry_log}.[/]")

    if result.save_error is not None:
        console.print(f"[red]Schedule generated but not saved:[/red] {result.save_error}")
        raise typer.Exit(1)
    if result.saved is not None:
        console.print(f"Saved schedule {result.saved.id} to {config.store_path}")


if __name__ == "__main__":
    app()
