import datetime as dt
import sqlite3

import pytest

from teaplan.assignment.models import ScheduleTotals, WorkerAssignment
from teaplan.core.errors import PersistenceError, ScheduleNotFoundError
from teaplan.storage import InMemoryScheduleStore, SQLiteScheduleStore

from helpers import TickingClock


def _assignments(*pairs: tuple[str, str, float], date: str = "2026-03-02") -> list[WorkerAssignment]:
    return [
        WorkerAssignment(
            worker_id=worker,
            worker_name=f"Name {worker}",
            field_id=field,
            field_name=f"Field {field}",
            predicted_efficiency=value,
            date=date,
        )
        for worker, field, value in pairs
    ]


TOTALS = ScheduleTotals(total_workers=2, total_fields=2, average_efficiency=11.0)
ITEMS = _assignments(("W1", "F1", 12.0), ("W2", "F2", 10.0))


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    clock = TickingClock()
    if request.param == "memory":
        return InMemoryScheduleStore(clock=clock)
    return SQLiteScheduleStore(tmp_path / "schedules.sqlite", clock=clock)


def test_first_save_creates_active_record(store):
    saved = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    assert saved.status == "active"
    assert saved.created_at == saved.updated_at
    assert saved.date == "2026-03-02"
    fetched = store.get_schedule_by_date("estate-a", dt.date(2026, 3, 2))
    assert fetched == saved
    assert fetched.assignments == ITEMS
    assert fetched.totals() == TOTALS


def test_second_save_updates_in_place(store):
    first = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    replacement = _assignments(("W1", "F2", 14.0))
    totals = ScheduleTotals(total_workers=1, total_fields=1, average_efficiency=14.0)
    second = store.save_schedule("estate-a", "2026-03-02", totals, replacement)
    assert second.id == first.id
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert second.assignments == replacement
    current = store.get_schedule_by_date("estate-a", "2026-03-02")
    assert current.total_workers == 1
    assert current.average_efficiency == 14.0
    assert len(store.get_recent_schedules("estate-a")) == 1


def test_updated_at_moves_forward_with_frozen_clock(tmp_path):
    moment = dt.datetime(2026, 3, 1, tzinfo=dt.timezone.utc)
    store = InMemoryScheduleStore(clock=lambda: moment)
    first = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    second = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    assert second.updated_at > first.updated_at


def test_plantation_days_are_independent(store):
    a = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    b = store.save_schedule("estate-a", "2026-03-03", TOTALS, ITEMS)
    c = store.save_schedule("estate-b", "2026-03-02", TOTALS, ITEMS)
    assert len({a.id, b.id, c.id}) == 3
    assert store.get_schedule_by_date("estate-b", "2026-03-02").id == c.id
    assert store.get_schedule_by_date("estate-c", "2026-03-02") is None


def test_latest_schedule_by_date(store):
    store.save_schedule("estate-a", "2026-03-03", TOTALS, ITEMS)
    latest = store.save_schedule("estate-a", "2026-03-05", TOTALS, ITEMS)
    store.save_schedule("estate-a", "2026-03-04", TOTALS, ITEMS)
    store.save_schedule("estate-b", "2026-03-09", TOTALS, ITEMS)
    assert store.get_latest_schedule("estate-a").id == latest.id
    assert store.get_latest_schedule("estate-z") is None


def test_latest_schedule_skips_archived(store):
    older = store.save_schedule("estate-a", "2026-03-03", TOTALS, ITEMS)
    newer = store.save_schedule("estate-a", "2026-03-05", TOTALS, ITEMS)
    store.delete_schedule(newer.id)
    assert store.get_latest_schedule("estate-a").id == older.id


def test_latest_schedule_scan_window_is_bounded():
    store = InMemoryScheduleStore(clock=TickingClock(), scan_limit=2)
    store.save_schedule("estate-a", "2026-03-01", TOTALS, ITEMS)
    store.save_schedule("estate-b", "2026-03-10", TOTALS, ITEMS)
    store.save_schedule("estate-b", "2026-03-11", TOTALS, ITEMS)
    # estate-a's only record falls outside the two most recent records
    assert store.get_latest_schedule("estate-a") is None
    assert store.get_schedule_by_date("estate-a", "2026-03-01") is not None


def test_scan_limit_must_be_positive():
    with pytest.raises(ValueError):
        InMemoryScheduleStore(scan_limit=0)


def test_recent_schedules_newest_first(store):
    for day in ("2026-03-01", "2026-03-03", "2026-03-02"):
        store.save_schedule("estate-a", day, TOTALS, ITEMS)
    recent = store.get_recent_schedules("estate-a", limit=2)
    assert [s.date for s in recent] == ["2026-03-03", "2026-03-02"]
    assert store.get_recent_schedules("estate-a", limit=0) == []


def test_recent_schedules_drop_archived_after_limit(store):
    keep = store.save_schedule("estate-a", "2026-03-01", TOTALS, ITEMS)
    gone = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    store.delete_schedule(gone.id)
    assert [s.id for s in store.get_recent_schedules("estate-a", limit=1)] == []
    assert [s.id for s in store.get_recent_schedules("estate-a", limit=2)] == [keep.id]


def test_delete_is_soft_archive(store):
    saved = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    archived = store.delete_schedule(saved.id)
    assert archived.status == "archived"
    assert archived.updated_at > saved.updated_at
    assert store.get_schedule_by_date("estate-a", "2026-03-02") is None
    by_id = store.get_schedule_by_id(saved.id)
    assert by_id.status == "archived"
    assert by_id.assignments == ITEMS


def test_save_after_archive_creates_new_record(store):
    saved = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    store.delete_schedule(saved.id)
    fresh = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    assert fresh.id != saved.id
    assert fresh.status == "active"


def test_archived_record_does_not_shadow_active_one(store):
    archived = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    store.delete_schedule(archived.id)
    fresh = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    assert store.get_schedule_by_date("estate-a", "2026-03-02").id == fresh.id
    again = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS[:1])
    assert again.id == fresh.id
    assert again.assignments == ITEMS[:1]
    assert store.get_schedule_by_id(archived.id).status == "archived"


def test_delete_unknown_schedule(store):
    with pytest.raises(ScheduleNotFoundError, match="missing"):
        store.delete_schedule("missing")
    assert store.get_schedule_by_id("missing") is None


def test_invalid_date_rejected(store):
    with pytest.raises(ValueError):
        store.save_schedule("estate-a", "02/03/2026", TOTALS, ITEMS)


def test_upsert_race_can_leave_two_active_records():
    store = InMemoryScheduleStore(clock=TickingClock())
    # both writers looked up the plantation-day before either wrote
    store._find_active = lambda plantation_id, date: None
    first = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    second = store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    active = [s for s in store.all_schedules() if s.status == "active"]
    assert {s.id for s in active} == {first.id, second.id}


def test_sqlite_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "schedules.sqlite"
    saved = SQLiteScheduleStore(path).save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    reopened = SQLiteScheduleStore(path)
    fetched = reopened.get_schedule_by_id(saved.id)
    assert fetched == saved
    assert [a.worker_id for a in fetched.assignments] == ["W1", "W2"]
    with sqlite3.connect(path) as conn:
        count = conn.execute("SELECT COUNT(*) FROM schedule_assignments").fetchone()[0]
    assert count == 2


def test_sqlite_replaces_assignment_rows(tmp_path):
    path = tmp_path / "schedules.sqlite"
    store = SQLiteScheduleStore(path, clock=TickingClock())
    store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
    store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS[:1])
    with sqlite3.connect(path) as conn:
        count = conn.execute("SELECT COUNT(*) FROM schedule_assignments").fetchone()[0]
    assert count == 1


def test_sqlite_errors_become_persistence_errors(tmp_path):
    path = tmp_path / "schedules.sqlite"
    path.mkdir()
    store = SQLiteScheduleStore(path)
    with pytest.raises(PersistenceError):
        store.save_schedule("estate-a", "2026-03-02", TOTALS, ITEMS)
