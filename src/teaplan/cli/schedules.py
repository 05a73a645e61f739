"""Inspect and archive persisted schedules."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from teaplan.cli._utils import assignments_table, format_efficiency
from teaplan.core.errors import PersistenceError, ScheduleNotFoundError
from teaplan.storage import SavedSchedule, SQLiteScheduleStore

schedules_app = typer.Typer(
    add_completion=False, no_args_is_help=True, help="Inspect persisted schedules."
)
console = Console()

STORE_OPTION = typer.Option(
    ...,
    "--store",
    "-s",
    help="SQLite schedule store written by `teaplan generate --store`.",
    dir_okay=False,
)


def _open_store(store: Path) -> SQLiteScheduleStore:
    if not store.exists():
        console.print(f"[red]Schedule store not found:[/red] {store}")
        raise typer.Exit(1)
    return SQLiteScheduleStore(store)


def _print_saved(saved: SavedSchedule) -> None:
    console.print(
        f"[bold]{saved.plantation_id} {saved.date}[/bold] ({saved.status}) id={saved.id}"
    )
    console.print(
        f"Workers: {saved.total_workers}  Fields: {saved.total_fields}  "
        f"Average kg/h: {format_efficiency(saved.average_efficiency)}"
    )
    console.print(f"Updated: {saved.updated_at.isoformat(timespec='seconds')}")
    console.print(assignments_table(saved.assignments, title="Assignments"))


@schedules_app.command("latest")
def latest(plantation_id: str, store: Path = STORE_OPTION) -> None:
    """Show the most recent active schedule of a plantation."""
    try:
        saved = _open_store(store).get_latest_schedule(plantation_id)
    except PersistenceError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(1)
    if saved is None:
        console.print(f"No active schedule for {plantation_id}.")
        raise typer.Exit(1)
    _print_saved(saved)


@schedules_app.command("show")
def show(schedule_id: str, store: Path = STORE_OPTION) -> None:
    """Show one schedule by id (archived schedules included)."""
    try:
        saved = _open_store(store).get_schedule_by_id(schedule_id)
    except PersistenceError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(1)
    if saved is None:
        console.print(f"[red]Schedule '{schedule_id}' not found[/red]")
        raise typer.Exit(1)
    _print_saved(saved)


@schedules_app.command("recent")
def recent(
    plantation_id: str,
    store: Path = STORE_OPTION,
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Records to look back over."),
) -> None:
    """List a plantation's recent active schedules, newest date first."""
    try:
        items = _open_store(store).get_recent_schedules(plantation_id, limit=limit)
    except PersistenceError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(1)
    table = Table(title=f"Schedules: {plantation_id}")
    table.add_column("Date", no_wrap=True)
    table.add_column("Id")
    table.add_column("Workers", justify="right")
    table.add_column("Fields", justify="right")
    table.add_column("Avg kg/h", justify="right")
    for saved in items:
        table.add_row(
            saved.date,
            saved.id,
            str(saved.total_workers),
            str(saved.total_fields),
            format_efficiency(saved.average_efficiency),
        )
    console.print(table)


@schedules_app.command("archive")
def archive(schedule_id: str, store: Path = STORE_OPTION) -> None:
    """Archive a schedule (soft delete)."""
    try:
        archived = _open_store(store).delete_schedule(schedule_id)
    except ScheduleNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except PersistenceError as exc:
        console.print(f"[red]Store error:[/red] {exc}")
        raise typer.Exit(1)
    console.print(f"Archived schedule {archived.id} ({archived.plantation_id} {archived.date}).")


__all__ = ["schedules_app"]
