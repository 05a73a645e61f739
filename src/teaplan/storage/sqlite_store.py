"""SQLite-backed schedule store."""

from __future__ import annotations

import datetime as dt
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from teaplan.assignment.models import WorkerAssignment
from teaplan.core.errors import PersistenceError
from teaplan.storage.base import ScheduleStore
from teaplan.storage.models import SavedSchedule

__all__ = ["SQLiteScheduleStore"]


_SCHEMA = """
PRAGMA foreign_keys = ON;
CREATE TABLE IF NOT EXISTS schedules (
    id TEXT PRIMARY KEY,
    plantation_id TEXT NOT NULL,
    date TEXT NOT NULL,
    total_workers INTEGER NOT NULL,
    total_fields INTEGER NOT NULL,
    average_efficiency REAL NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    status TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS schedule_assignments (
    schedule_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    worker_id TEXT NOT NULL,
    worker_name TEXT NOT NULL,
    field_id TEXT NOT NULL,
    field_name TEXT NOT NULL,
    predicted_efficiency REAL NOT NULL,
    date TEXT NOT NULL,
    status TEXT NOT NULL,
    PRIMARY KEY (schedule_id, position),
    FOREIGN KEY (schedule_id) REFERENCES schedules(id) ON DELETE CASCADE
);
"""

_SCHEDULE_COLUMNS = (
    "id, plantation_id, date, total_workers, total_fields, average_efficiency, "
    "created_at, updated_at, status"
)


class SQLiteScheduleStore(ScheduleStore):
    """Persist schedules to a SQLite file.

    Each operation opens its own connection, applies the schema and closes the connection;
    writes run inside a single transaction. ``sqlite3`` failures surface as
    :class:`~teaplan.core.errors.PersistenceError`.
    """

    def __init__(self, sqlite_path: str | Path, **kwargs) -> None:
        super().__init__(**kwargs)
        self.path = Path(sqlite_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            if not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceError(f"Cannot open schedule store {self.path}: {exc}") from exc
        try:
            conn.executescript(_SCHEMA)
            yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(f"Schedule store {self.path} failed: {exc}") from exc
        finally:
            conn.close()

    def _hydrate(self, conn: sqlite3.Connection, row: tuple) -> SavedSchedule:
        (
            schedule_id,
            plantation_id,
            date,
            total_workers,
            total_fields,
            average_efficiency,
            created_at,
            updated_at,
            status,
        ) = row
        assignment_rows = conn.execute(
            """
            SELECT worker_id, worker_name, field_id, field_name, predicted_efficiency, date, status
            FROM schedule_assignments
            WHERE schedule_id = ?
            ORDER BY position
            """,
            (schedule_id,),
        ).fetchall()
        assignments = [
            WorkerAssignment(
                worker_id=worker_id,
                worker_name=worker_name,
                field_id=field_id,
                field_name=field_name,
                predicted_efficiency=efficiency,
                date=assignment_date,
                status=assignment_status,
            )
            for (
                worker_id,
                worker_name,
                field_id,
                field_name,
                efficiency,
                assignment_date,
                assignment_status,
            ) in assignment_rows
        ]
        return SavedSchedule(
            id=schedule_id,
            plantation_id=plantation_id,
            date=date,
            total_workers=total_workers,
            total_fields=total_fields,
            average_efficiency=average_efficiency,
            assignments=assignments,
            created_at=dt.datetime.fromisoformat(created_at),
            updated_at=dt.datetime.fromisoformat(updated_at),
            status=status,
        )

    def _find_active(self, plantation_id: str, date: str) -> SavedSchedule | None:
        with self._connect() as conn:
            row = conn.execute(
                f"""
                SELECT {_SCHEDULE_COLUMNS} FROM schedules
                WHERE plantation_id = ? AND date = ? AND status = 'active'
                ORDER BY rowid
                LIMIT 1
                """,
                (plantation_id, date),
            ).fetchone()
            return self._hydrate(conn, row) if row is not None else None

    def _get(self, schedule_id: str) -> SavedSchedule | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_SCHEDULE_COLUMNS} FROM schedules WHERE id = ?",
                (schedule_id,),
            ).fetchone()
            return self._hydrate(conn, row) if row is not None else None

    def _recent(self, limit: int, plantation_id: str | None = None) -> list[SavedSchedule]:
        with self._connect() as conn:
            if plantation_id is None:
                rows = conn.execute(
                    f"""
                    SELECT {_SCHEDULE_COLUMNS} FROM schedules
                    ORDER BY date DESC, updated_at DESC
                    LIMIT ?
                    """,
                    (limit,),
                ).fetchall()
            else:
                rows = conn.execute(
                    f"""
                    SELECT {_SCHEDULE_COLUMNS} FROM schedules
                    WHERE plantation_id = ?
                    ORDER BY date DESC, updated_at DESC
                    LIMIT ?
                    """,
                    (plantation_id, limit),
                ).fetchall()
            return [self._hydrate(conn, row) for row in rows]

    def _write(self, schedule: SavedSchedule) -> None:
        with self._connect() as conn:
            with conn:
                conn.execute(
                    f"""
                    INSERT INTO schedules ({_SCHEDULE_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        plantation_id = excluded.plantation_id,
                        date = excluded.date,
                        total_workers = excluded.total_workers,
                        total_fields = excluded.total_fields,
                        average_efficiency = excluded.average_efficiency,
                        updated_at = excluded.updated_at,
                        status = excluded.status
                    """,
                    (
                        schedule.id,
                        schedule.plantation_id,
                        schedule.date,
                        schedule.total_workers,
                        schedule.total_fields,
                        schedule.average_efficiency,
                        schedule.created_at.isoformat(),
                        schedule.updated_at.isoformat(),
                        schedule.status,
                    ),
                )
                conn.execute(
                    "DELETE FROM schedule_assignments WHERE schedule_id = ?", (schedule.id,)
                )
                conn.executemany(
                    """
                    INSERT INTO schedule_assignments (
                        schedule_id, position, worker_id, worker_name, field_id, field_name,
                        predicted_efficiency, date, status
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            schedule.id,
                            position,
                            item.worker_id,
                            item.worker_name,
                            item.field_id,
                            item.field_name,
                            item.predicted_efficiency,
                            item.date,
                            item.status,
                        )
                        for position, item in enumerate(schedule.assignments)
                    ],
                )
