"""Dictionary-backed schedule store with document-store query semantics."""

from __future__ import annotations

from teaplan.storage.base import ScheduleStore
from teaplan.storage.models import SavedSchedule


class InMemoryScheduleStore(ScheduleStore):
    """Keep schedules in a dict keyed by id.

    ``_find_active`` returns the first active record for the plantation-day in insertion
    order, so archived records for the same day are skipped rather than shadowing a newer
    active one.
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._documents: dict[str, SavedSchedule] = {}

    def __len__(self) -> int:
        return len(self._documents)

    def _find_active(self, plantation_id: str, date: str) -> SavedSchedule | None:
        for doc in self._documents.values():
            if doc.plantation_id == plantation_id and doc.date == date and doc.status == "active":
                return doc
        return None

    def _get(self, schedule_id: str) -> SavedSchedule | None:
        return self._documents.get(schedule_id)

    def _recent(self, limit: int, plantation_id: str | None = None) -> list[SavedSchedule]:
        docs = [
            doc
            for doc in self._documents.values()
            if plantation_id is None or doc.plantation_id == plantation_id
        ]
        docs.sort(key=lambda doc: (doc.date, doc.updated_at), reverse=True)
        return docs[:limit]

    def _write(self, schedule: SavedSchedule) -> None:
        self._documents[schedule.id] = schedule

    def all_schedules(self) -> list[SavedSchedule]:
        """Return every stored record in insertion order (test/debug helper)."""
        return list(self._documents.values())


__all__ = ["InMemoryScheduleStore"]
