"""Query and trim the generation run log written by :class:`GenerationTelemetryLogger`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from teaplan.telemetry.jsonl import read_jsonl, write_jsonl

RunRecord = dict[str, Any]


def load_runs(log_path: str | Path) -> list[RunRecord]:
    """Return the ``run`` records of a telemetry log in file order."""
    return [record for record in read_jsonl(log_path) if record.get("record_type") == "run"]


def run_matches(
    record: RunRecord,
    *,
    plantation_id: str | None = None,
    status: str | None = None,
    before: str | None = None,
) -> bool:
    """Return whether a run record passes every given filter.

    ``before`` is a ``YYYY-MM-DD`` schedule date; runs without a date never match it.
    """
    if plantation_id is not None and record.get("plantation_id") != plantation_id:
        return False
    if status is not None and record.get("status") != status:
        return False
    if before is not None:
        date = record.get("date")
        if not isinstance(date, str) or date >= before:
            return False
    return True


@dataclass(slots=True)
class PruneResult:
    kept: int
    removed: int
    removed_run_ids: list[str]
    round_logs_removed: int = 0


def prune_runs(
    log_path: str | Path,
    *,
    plantation_id: str | None = None,
    status: str | None = None,
    before: str | None = None,
    rounds_dir: str | Path | None = None,
    dry_run: bool = False,
) -> PruneResult:
    """Drop the run records matching the filters, and their round logs.

    At least one filter is required. Records other than ``run`` records and malformed lines
    are not carried over. With ``dry_run`` nothing is written or deleted.
    """
    if plantation_id is None and status is None and before is None:
        raise ValueError("prune_runs needs a plantation_id, status or before filter")
    log_path = Path(log_path)
    runs = load_runs(log_path)
    kept: list[RunRecord] = []
    removed: list[RunRecord] = []
    for record in runs:
        matched = run_matches(record, plantation_id=plantation_id, status=status, before=before)
        (removed if matched else kept).append(record)

    kept_ids = {str(record.get("run_id")) for record in kept}
    removed_ids = sorted(
        {str(record["run_id"]) for record in removed if record.get("run_id")} - kept_ids
    )
    result = PruneResult(kept=len(kept), removed=len(removed), removed_run_ids=removed_ids)
    if dry_run or not removed:
        return result

    write_jsonl(log_path, kept)
    rounds_root = Path(rounds_dir) if rounds_dir is not None else log_path.parent / "rounds"
    for run_id in removed_ids:
        round_path = rounds_root / f"{run_id}.jsonl"
        if round_path.exists():
            round_path.unlink()
            result.round_logs_removed += 1
    return result


__all__ = ["RunRecord", "PruneResult", "load_runs", "run_matches", "prune_runs"]
