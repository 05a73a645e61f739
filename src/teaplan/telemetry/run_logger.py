"""Context manager recording one schedule generation run."""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from teaplan.telemetry.jsonl import append_jsonl


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(slots=True)
class GenerationTelemetryLogger(AbstractContextManager["GenerationTelemetryLogger"]):
    """Record telemetry for a generation run.

    Parameters
    ----------
    log_path:
        JSONL path where run records are appended.
    plantation_id:
        Plantation the schedule is generated for.
    date:
        Schedule date (``YYYY-MM-DD``).
    quality:
        Quality tier applied to the run.
    context:
        Extra metadata (source command, roster path, store path).
    log_rounds:
        When true, per-round allocation progress lands in ``rounds/<run_id>.jsonl`` next to
        ``log_path``.
    """

    log_path: Path
    plantation_id: str
    date: str | None = None
    quality: str | None = None
    context: Mapping[str, Any] | None = None
    log_rounds: bool = True
    schema_version: str = "1.0"
    run_id: str = field(default_factory=lambda: uuid4().hex, init=False)
    _start_time: float = field(default=0.0, init=False)
    _start_timestamp: str | None = field(default=None, init=False)
    _closed: bool = field(default=False, init=False)
    _rounds_path: Path | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.log_path = Path(self.log_path)
        if self.log_rounds:
            self._rounds_path = self.log_path.parent / "rounds" / f"{self.run_id}.jsonl"

    def __enter__(self) -> "GenerationTelemetryLogger":
        self._start_time = time.perf_counter()
        self._start_timestamp = _iso_now()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type:
            self._close(status="error", metrics=None, error=repr(exc))
            return False
        self._close(status="ok", metrics=None, error=None)
        return False

    def log_round(self, round_index: int, assigned_in_round: int, assigned_total: int) -> None:
        """Persist one allocation round (signature matches the optimizer's round hook)."""
        if not self._rounds_path:
            return
        record = {
            "record_type": "round",
            "schema_version": self.schema_version,
            "run_id": self.run_id,
            "timestamp": _iso_now(),
            "round": round_index,
            "assigned_in_round": assigned_in_round,
            "assigned_total": assigned_total,
        }
        append_jsonl(self._rounds_path, record)

    def elapsed(self) -> float:
        """Return the elapsed wall-clock seconds since the run started."""
        return time.perf_counter() - self._start_time

    @property
    def rounds_path(self) -> Path | None:
        return self._rounds_path

    def finalize(
        self,
        *,
        status: str = "ok",
        metrics: Mapping[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        """Write the terminal run record (later calls and ``__exit__`` become no-ops)."""
        self._close(status=status, metrics=metrics, error=error)

    def _close(self, *, status: str, metrics: Mapping[str, Any] | None, error: str | None) -> None:
        if self._closed:
            return
        duration = self.elapsed() if self._start_time else 0.0
        record = {
            "record_type": "run",
            "schema_version": self.schema_version,
            "run_id": self.run_id,
            "plantation_id": self.plantation_id,
            "date": self.date,
            "quality": self.quality,
            "status": status,
            "metrics": dict(metrics or {}),
            "context": dict(self.context or {}),
            "error": error,
            "started_at": self._start_timestamp,
            "finished_at": _iso_now(),
            "duration_seconds": round(duration, 3),
        }
        append_jsonl(self.log_path, record)
        self._closed = True


__all__ = ["GenerationTelemetryLogger"]
