"""Schedule persistence: one active schedule per plantation-day."""

from teaplan.storage.base import DEFAULT_SCAN_LIMIT, Clock, ScheduleStore, utc_now
from teaplan.storage.memory import InMemoryScheduleStore
from teaplan.storage.models import SavedSchedule, SavedStatus, normalise_schedule_date
from teaplan.storage.sqlite_store import SQLiteScheduleStore

__all__ = [
    "Clock",
    "DEFAULT_SCAN_LIMIT",
    "ScheduleStore",
    "utc_now",
    "InMemoryScheduleStore",
    "SQLiteScheduleStore",
    "SavedSchedule",
    "SavedStatus",
    "normalise_schedule_date",
]
