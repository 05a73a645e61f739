"""Schedule store contract: one active schedule per plantation-day, upserted on save."""

from __future__ import annotations

import datetime as dt
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import timedelta, timezone
from uuid import uuid4

from teaplan.assignment.models import ScheduleTotals, WorkerAssignment
from teaplan.core.errors import ScheduleNotFoundError
from teaplan.storage.models import SavedSchedule, normalise_schedule_date

Clock = Callable[[], dt.datetime]

DEFAULT_SCAN_LIMIT = 50


def utc_now() -> dt.datetime:
    return dt.datetime.now(timezone.utc)


class ScheduleStore(ABC):
    """Upsert and lookup logic shared by every backend.

    Backends implement four primitives: find the active record for a plantation-day, fetch
    by id, list records newest date first, and write a record. Everything else (create vs.
    update, soft delete, in-application filtering for "latest") lives here.

    ``save_schedule`` is read-then-write and not transactional. Two concurrent saves for the
    same plantation-day can both miss the lookup and both create an active record; callers
    that generate concurrently must serialise saves per (plantation_id, date) themselves.

    Parameters
    ----------
    clock:
        Returns the current UTC time; injectable for tests.
    scan_limit:
        How many of the most recent records (any plantation) ``get_latest_schedule`` scans
        before filtering by plantation and status in Python.
    """

    def __init__(self, *, clock: Clock | None = None, scan_limit: int = DEFAULT_SCAN_LIMIT):
        if scan_limit < 1:
            raise ValueError("scan_limit must be >= 1")
        self._clock = clock or utc_now
        self.scan_limit = scan_limit

    # Backend primitives ------------------------------------------------------------------

    @abstractmethod
    def _find_active(self, plantation_id: str, date: str) -> SavedSchedule | None:
        """Return the active record for a plantation-day, if any."""

    @abstractmethod
    def _get(self, schedule_id: str) -> SavedSchedule | None:
        """Return the record with ``schedule_id`` regardless of status."""

    @abstractmethod
    def _recent(self, limit: int, plantation_id: str | None = None) -> list[SavedSchedule]:
        """Return up to ``limit`` records ordered by date descending (any status)."""

    @abstractmethod
    def _write(self, schedule: SavedSchedule) -> None:
        """Insert or overwrite ``schedule`` keyed by its id."""

    # Contract ----------------------------------------------------------------------------

    def new_id(self) -> str:
        return uuid4().hex

    def _now(self, previous: dt.datetime | None = None) -> dt.datetime:
        now = self._clock()
        # updated_at never moves backwards, even on coarse clocks
        if previous is not None and now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    def save_schedule(
        self,
        plantation_id: str,
        date: str | dt.date,
        totals: ScheduleTotals,
        assignments: Sequence[WorkerAssignment],
    ) -> SavedSchedule:
        """Create the plantation-day schedule, or update the active one in place.

        An existing active record keeps its id and ``created_at``; totals, assignments and
        ``updated_at`` are replaced. Otherwise a new active record is created with
        ``created_at == updated_at``.
        """
        day = normalise_schedule_date(date)
        existing = self._find_active(plantation_id, day)
        if existing is not None:
            merged = existing.model_copy(
                update={
                    "total_workers": totals.total_workers,
                    "total_fields": totals.total_fields,
                    "average_efficiency": totals.average_efficiency,
                    "assignments": list(assignments),
                    "updated_at": self._now(existing.updated_at),
                }
            )
            self._write(merged)
            return merged

        now = self._now()
        schedule = SavedSchedule(
            id=self.new_id(),
            plantation_id=plantation_id,
            date=day,
            total_workers=totals.total_workers,
            total_fields=totals.total_fields,
            average_efficiency=totals.average_efficiency,
            assignments=list(assignments),
            created_at=now,
            updated_at=now,
            status="active",
        )
        self._write(schedule)
        return schedule

    def get_schedule_by_date(self, plantation_id: str, date: str | dt.date) -> SavedSchedule | None:
        """Return the active schedule for a plantation-day, or ``None``."""
        return self._find_active(plantation_id, normalise_schedule_date(date))

    def get_latest_schedule(self, plantation_id: str) -> SavedSchedule | None:
        """Return the active schedule with the most recent date for ``plantation_id``.

        Only the ``scan_limit`` most recent records across all plantations are scanned; the
        plantation and status filters run here, not in the backend query.
        """
        for schedule in self._recent(self.scan_limit):
            if schedule.plantation_id == plantation_id and schedule.status == "active":
                return schedule
        return None

    def get_recent_schedules(self, plantation_id: str, limit: int = 10) -> list[SavedSchedule]:
        """Return up to ``limit`` of the plantation's most recent records that are active.

        The backend returns the ``limit`` newest records of the plantation; archived ones are
        dropped afterwards, so fewer than ``limit`` may come back.
        """
        if limit < 1:
            return []
        return [s for s in self._recent(limit, plantation_id) if s.status == "active"]

    def get_schedule_by_id(self, schedule_id: str) -> SavedSchedule | None:
        """Return a schedule by id, archived or not."""
        return self._get(schedule_id)

    def delete_schedule(self, schedule_id: str) -> SavedSchedule:
        """Archive a schedule (soft delete) and return the archived record."""
        existing = self._get(schedule_id)
        if existing is None:
            raise ScheduleNotFoundError(f"Schedule '{schedule_id}' not found")
        archived = existing.model_copy(
            update={"status": "archived", "updated_at": self._now(existing.updated_at)}
        )
        self._write(archived)
        return archived


__all__ = ["Clock", "DEFAULT_SCAN_LIMIT", "ScheduleStore", "utc_now"]
