"""Aggregation and reporting helpers for assignment lists."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from teaplan.assignment.models import ScheduleTotals, WorkerAssignment

__all__ = [
    "ASSIGNMENT_COLUMNS",
    "FIELD_SUMMARY_COLUMNS",
    "summarize_assignments",
    "assignments_by_field",
    "assignments_dataframe",
    "field_summary_dataframe",
]

ASSIGNMENT_COLUMNS = [
    "worker_id",
    "worker_name",
    "field_id",
    "field_name",
    "predicted_efficiency",
    "date",
    "status",
]

FIELD_SUMMARY_COLUMNS = [
    "field_id",
    "field_name",
    "workers",
    "total_efficiency",
    "mean_efficiency",
]


def summarize_assignments(assignments: Sequence[WorkerAssignment]) -> ScheduleTotals:
    """Return worker count, distinct field count and mean predicted efficiency.

    The optimizer never returns an empty list for valid inputs; an empty sequence still
    yields zero totals rather than a division error.
    """
    if not assignments:
        return ScheduleTotals(total_workers=0, total_fields=0, average_efficiency=0.0)
    total = sum(item.predicted_efficiency for item in assignments)
    return ScheduleTotals(
        total_workers=len(assignments),
        total_fields=len({item.field_id for item in assignments}),
        average_efficiency=total / len(assignments),
    )


def assignments_by_field(
    assignments: Sequence[WorkerAssignment],
) -> dict[str, list[WorkerAssignment]]:
    """Group assignments by field id, fields in order of first appearance."""
    grouped: dict[str, list[WorkerAssignment]] = {}
    for item in assignments:
        grouped.setdefault(item.field_id, []).append(item)
    return grouped


def assignments_dataframe(assignments: Sequence[WorkerAssignment]) -> pd.DataFrame:
    """Return assignments as a DataFrame in creation order."""
    rows = [item.model_dump() for item in assignments]
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)


def field_summary_dataframe(assignments: Sequence[WorkerAssignment]) -> pd.DataFrame:
    """Return per-field worker counts and efficiency totals."""
    rows = []
    for field_id, items in assignments_by_field(assignments).items():
        total = sum(item.predicted_efficiency for item in items)
        rows.append(
            {
                "field_id": field_id,
                "field_name": items[0].field_name,
                "workers": len(items),
                "total_efficiency": total,
                "mean_efficiency": total / len(items),
            }
        )
    return pd.DataFrame(rows, columns=FIELD_SUMMARY_COLUMNS)
