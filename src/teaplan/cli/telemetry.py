"""Inspect and trim generation run telemetry."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from teaplan.cli._utils import format_efficiency, parse_date_option
from teaplan.telemetry import load_runs, prune_runs, run_matches

telemetry_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Generation telemetry utilities."
)
console = Console()

LOG_ARGUMENT = typer.Argument(
    Path("telemetry/runs.jsonl"),
    dir_okay=False,
    help="Run log written by `teaplan generate --telemetry-log`.",
)
PLANTATION_OPTION = typer.Option(None, "--plantation", "-p", help="Only runs for this plantation.")
STATUS_OPTION = typer.Option(
    None, "--status", help="Only runs with this status (ok, save_failed, error)."
)


def _require_log(telemetry_log: Path) -> None:
    if not telemetry_log.exists():
        console.print(f"No telemetry log found at {telemetry_log}.")
        raise typer.Exit(0)


@telemetry_app.command("runs")
def runs(
    telemetry_log: Path = LOG_ARGUMENT,
    plantation_id: str | None = PLANTATION_OPTION,
    status: str | None = STATUS_OPTION,
) -> None:
    """List generation runs, oldest first."""
    _require_log(telemetry_log)
    records = [
        record
        for record in load_runs(telemetry_log)
        if run_matches(record, plantation_id=plantation_id, status=status)
    ]
    table = Table(title=f"Runs: {telemetry_log.name}")
    table.add_column("Run")
    table.add_column("Plantation")
    table.add_column("Date", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Workers", justify="right")
    table.add_column("Avg kg/h", justify="right")
    for record in records:
        metrics = record.get("metrics") or {}
        average = metrics.get("average_efficiency")
        table.add_row(
            str(record.get("run_id", ""))[:8],
            str(record.get("plantation_id") or "-"),
            str(record.get("date") or "-"),
            str(record.get("status") or "-"),
            str(metrics.get("total_workers", "-")),
            format_efficiency(average) if isinstance(average, (int, float)) else "-",
        )
    console.print(table)
    console.print(f"{len(records)} run(s).")


@telemetry_app.command("prune")
def prune(
    telemetry_log: Path = LOG_ARGUMENT,
    plantation_id: str | None = PLANTATION_OPTION,
    status: str | None = STATUS_OPTION,
    before: str | None = typer.Option(
        None,
        "--before",
        callback=parse_date_option,
        help="Drop runs whose schedule date is earlier than this (YYYY-MM-DD).",
    ),
    rounds_dir: Path | None = typer.Option(
        None,
        "--rounds-dir",
        help="Directory holding round logs (defaults to <log>/../rounds).",
        file_okay=False,
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Report what would be removed without changing files."
    ),
) -> None:
    """Drop matching run records and their round logs."""
    if plantation_id is None and status is None and before is None:
        console.print("[red]Nothing selected.[/red] Pass --plantation, --status or --before.")
        raise typer.Exit(1)
    _require_log(telemetry_log)
    result = prune_runs(
        telemetry_log,
        plantation_id=plantation_id,
        status=status,
        before=before,
        rounds_dir=rounds_dir,
        dry_run=dry_run,
    )
    if dry_run:
        console.print(
            f"Dry run: would remove {result.removed} run(s) and keep {result.kept}."
        )
        return
    console.print(
        f"Removed {result.removed} run(s); kept {result.kept}. "
        f"Deleted {result.round_logs_removed} round log(s)."
    )


__all__ = ["telemetry_app"]
