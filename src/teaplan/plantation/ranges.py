"""Plausibility ranges for roster attributes."""

from __future__ import annotations

import json
from collections.abc import Mapping
from functools import cache
from importlib import resources
from typing import Any

from teaplan.plantation.contract.models import Field, Worker

RangePayload = Mapping[str, Any]
RangeEntry = Mapping[str, float]


@cache
def load_roster_ranges() -> RangePayload:
    """Return the observed attribute ranges as a nested mapping."""

    data_path = resources.files(__package__) / "_data" / "field_ranges.json"
    with resources.as_file(data_path) as path:
        return json.loads(path.read_text(encoding="utf-8"))


def _within(entry: RangeEntry, value: float) -> bool:
    lo = entry.get("min")
    hi = entry.get("max")
    if lo is None or hi is None:
        return True
    return lo <= value <= hi


def validate_field_ranges(field: Field) -> list[str]:
    """Return warnings when field attributes fall outside the usual ranges.

    Warnings never block scheduling; ``max_workers`` in particular is informational.
    """

    ranges = load_roster_ranges()["field"]
    warnings: list[str] = []
    slope = ranges["slope_degrees"]
    if not _within(slope, field.slope):
        warnings.append(
            f"Field {field.id}: slope={field.slope} outside [{slope['min']}, {slope['max']}]"
        )
    capacity = ranges["max_workers"]
    if field.max_workers and not _within(capacity, field.max_workers):
        warnings.append(
            f"Field {field.id}: max_workers={field.max_workers} outside "
            f"[{capacity['min']}, {capacity['max']}]"
        )
    return warnings


def validate_worker_ranges(worker: Worker) -> list[str]:
    """Return warnings when worker attributes fall outside the usual ranges."""

    age = load_roster_ranges()["worker"]["age_years"]
    if not _within(age, worker.age):
        return [f"Worker {worker.id}: age={worker.age} outside [{age['min']}, {age['max']}]"]
    return []


__all__ = ["load_roster_ranges", "validate_field_ranges", "validate_worker_ranges"]
