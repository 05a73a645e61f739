"""CLI helper utilities for teaplan."""

from __future__ import annotations

from collections.abc import Sequence

import click
import typer
from rich.table import Table

from teaplan.assignment.aggregate import field_summary_dataframe
from teaplan.assignment.models import WorkerAssignment
from teaplan.plantation.contract.models import QualityTier
from teaplan.storage.models import normalise_schedule_date

QUALITY_CHOICE = click.Choice([tier.value for tier in QualityTier], case_sensitive=False)


def parse_date_option(value: str | None) -> str | None:
    """Typer callback normalising ``--date`` to ``YYYY-MM-DD``."""
    if value is None:
        return None
    try:
        return normalise_schedule_date(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def parse_quality_option(value: str | None) -> QualityTier | None:
    if value is None:
        return None
    return QualityTier(value)


def format_efficiency(value: float) -> str:
    return f"{value:.2f}"


def assignments_table(assignments: Sequence[WorkerAssignment], *, title: str) -> Table:
    """Build a rich table listing assignments in creation order."""
    table = Table(title=title)
    table.add_column("Worker")
    table.add_column("Field")
    table.add_column("kg/h", justify="right")
    table.add_column("Status")
    for item in assignments:
        table.add_row(
            f"{item.worker_name} ({item.worker_id})",
            item.field_name,
            format_efficiency(item.predicted_efficiency),
            item.status,
        )
    return table


def field_summary_table(assignments: Sequence[WorkerAssignment]) -> Table:
    """Build a per-field summary table (workers and predicted efficiency)."""
    frame = field_summary_dataframe(assignments)
    table = Table(title="Fields")
    table.add_column("Field")
    table.add_column("Workers", justify="right")
    table.add_column("Total kg/h", justify="right")
    table.add_column("Mean kg/h", justify="right")
    for row in frame.itertuples(index=False):
        table.add_row(
            str(row.field_name),
            str(row.workers),
            format_efficiency(row.total_efficiency),
            format_efficiency(row.mean_efficiency),
        )
    return table


__all__ = [
    "QUALITY_CHOICE",
    "parse_date_option",
    "parse_quality_option",
    "format_efficiency",
    "assignments_table",
    "field_summary_table",
]
