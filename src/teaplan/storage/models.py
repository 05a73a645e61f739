"""Persisted schedule records."""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, field_validator

from teaplan.assignment.models import ScheduleTotals, WorkerAssignment

SavedStatus = Literal["active", "archived"]


def normalise_schedule_date(value: object) -> str:
    """Return ``value`` as a ``YYYY-MM-DD`` string, rejecting anything else."""
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text).isoformat()
        except ValueError as exc:
            raise ValueError(f"Schedule date must be YYYY-MM-DD (got '{value}')") from exc
    raise ValueError(f"Schedule date must be a date or YYYY-MM-DD string (got {value!r})")


class SavedSchedule(BaseModel):
    """The authoritative schedule of one plantation-day.

    Attributes
    ----------
    id:
        Store-assigned identifier, stable across regenerations for the same day.
    plantation_id / date:
        Plantation-day key. ``date`` is ``YYYY-MM-DD``.
    total_workers / total_fields / average_efficiency:
        Aggregates of ``assignments``.
    assignments:
        Assignments in creation order.
    created_at / updated_at:
        UTC timestamps. ``created_at`` is fixed at first save; ``updated_at`` moves on every
        regeneration or archive.
    status:
        ``active`` or ``archived``. Lookups only return active records (except by id).
    """

    id: str
    plantation_id: str
    date: str
    total_workers: int
    total_fields: int
    average_efficiency: float
    assignments: list[WorkerAssignment]
    created_at: dt.datetime
    updated_at: dt.datetime
    status: SavedStatus = "active"

    @field_validator("date", mode="before")
    @classmethod
    def _iso_date(cls, value: object) -> str:
        return normalise_schedule_date(value)

    def totals(self) -> ScheduleTotals:
        return ScheduleTotals(
            total_workers=self.total_workers,
            total_fields=self.total_fields,
            average_efficiency=self.average_efficiency,
        )


__all__ = ["SavedStatus", "SavedSchedule", "normalise_schedule_date"]
