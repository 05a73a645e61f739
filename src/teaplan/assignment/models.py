"""Result models produced by the assignment optimizer."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

AssignmentStatus = Literal["pending", "approved", "rejected"]
ScheduleStatus = Literal["generated", "approved", "in_progress", "completed"]


class WorkerAssignment(BaseModel):
    """One worker placed on one field for a schedule date.

    Attributes
    ----------
    worker_id / worker_name:
        Worker identity copied from the roster.
    field_id / field_name:
        Field identity copied from the roster.
    predicted_efficiency:
        Model output for the pair, in kg/hour.
    date:
        Schedule date (``YYYY-MM-DD``); empty until the caller stamps it.
    status:
        Review state. Starts as ``pending``; only this field changes after creation.
    """

    model_config = ConfigDict(frozen=True)

    worker_id: str
    worker_name: str
    field_id: str
    field_name: str
    predicted_efficiency: float
    date: str = ""
    status: AssignmentStatus = "pending"

    def with_date(self, date: str) -> WorkerAssignment:
        """Return a copy stamped with ``date``."""
        return self.model_copy(update={"date": date})


class ScheduleTotals(BaseModel):
    """Summary statistics of an assignment list."""

    model_config = ConfigDict(frozen=True)

    total_workers: int
    total_fields: int
    average_efficiency: float

    @field_validator("total_workers", "total_fields")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Schedule totals must be non-negative")
        return value


class AssignmentSchedule(BaseModel):
    """Transient result of one generation run (before persistence).

    Attributes
    ----------
    id:
        Generation identifier, unrelated to the id a store assigns on save.
    date:
        Schedule date the assignments were generated for.
    assignments:
        Assignments in creation order (round by round, fields in roster order).
    total_workers / total_fields / average_predicted_efficiency:
        Aggregates computed by :func:`teaplan.assignment.aggregate.summarize_assignments`.
    created_at:
        UTC timestamp of generation.
    status:
        Lifecycle flag, ``generated`` on creation.
    """

    id: str
    date: str
    assignments: list[WorkerAssignment]
    total_workers: int
    total_fields: int
    average_predicted_efficiency: float
    created_at: datetime
    status: ScheduleStatus = "generated"

    def totals(self) -> ScheduleTotals:
        return ScheduleTotals(
            total_workers=self.total_workers,
            total_fields=self.total_fields,
            average_efficiency=self.average_predicted_efficiency,
        )


__all__ = [
    "AssignmentStatus",
    "ScheduleStatus",
    "WorkerAssignment",
    "ScheduleTotals",
    "AssignmentSchedule",
]
