"""Roster loading utilities (YAML metadata + CSV tables)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import pandas as pd
import yaml
from pydantic import TypeAdapter

from teaplan.plantation.contract.models import Field, Roster, Worker
from teaplan.plantation.ranges import validate_field_ranges, validate_worker_ranges

__all__ = ["load_roster", "read_csv"]


def read_csv(path: Path) -> pd.DataFrame:
    """Load a CSV file using pandas with UTF-8 defaults."""
    return pd.read_csv(path, encoding="utf-8")


def _as_optional_string(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if pd.isna(cast("Any", value)):
        return None
    return str(value)


def _drop_missing(rows: list[dict[str, object]], optional_fields: tuple[str, ...]) -> None:
    for row in rows:
        for field in optional_fields:
            if field not in row:
                continue
            value = row[field]
            if isinstance(value, str):
                normalised = _as_optional_string(value)
                if normalised is None:
                    row.pop(field)
                else:
                    row[field] = normalised
            elif value is None or pd.isna(cast("Any", value)):
                row.pop(field)


_WORKER_OPTIONAL = ("worker_code", "birth_date", "experience", "plantation_id")
_FIELD_OPTIONAL = ("name", "max_workers", "location", "plantation_id")


def _table_rows(
    meta: dict[str, Any], data_section: dict[str, Any], root: Path, name: str
) -> list[dict[str, object]]:
    if name in data_section:
        candidate = root / data_section[name]
        if not candidate.exists():
            raise FileNotFoundError(candidate)
        return cast(list[dict[str, object]], read_csv(candidate).to_dict("records"))
    if name in meta:
        return [dict(row) for row in meta[name] or []]
    raise ValueError(f"Roster metadata must reference a '{name}' table or inline list")


def load_roster(yaml_path: str | Path) -> Roster:
    """Load a Roster from the YAML metadata + CSV bundle.

    Parameters
    ----------
    yaml_path:
        Path to the ``roster.yaml`` file. Workers and fields come either from CSV files listed
        under ``data`` (``workers``/``fields``) or from inline YAML lists of the same name.

    Returns
    -------
    Roster
        Validated roster. Row order of the CSV files is preserved because allocation
        tie-breaks depend on it.

    Notes
    -----
    Blank optional cells (``location``, ``worker_code``...) are dropped before validation,
    ``model_dir`` is re-rooted relative to the YAML file, and range warnings for slopes,
    capacities and ages are printed without failing the load.
    """
    base_path = Path(yaml_path).resolve()
    with base_path.open("r", encoding="utf-8") as handle:
        meta = yaml.safe_load(handle) or {}
    root = base_path.parent
    data_section = meta.get("data", {}) or {}

    worker_rows = _table_rows(meta, data_section, root, "workers")
    _drop_missing(worker_rows, _WORKER_OPTIONAL)
    field_rows = _table_rows(meta, data_section, root, "fields")
    _drop_missing(field_rows, _FIELD_OPTIONAL)

    workers = TypeAdapter(list[Worker]).validate_python(worker_rows)
    fields = TypeAdapter(list[Field]).validate_python(field_rows)

    model_dir = _as_optional_string(meta.get("model_dir"))
    if model_dir is not None and not Path(model_dir).is_absolute():
        model_dir = str(root / model_dir)

    payload: dict[str, Any] = {
        "plantation_id": meta["plantation_id"],
        "workers": workers,
        "fields": fields,
        "model_dir": model_dir,
    }
    if meta.get("date") is not None:
        payload["date"] = meta["date"]
    if meta.get("quality") is not None:
        payload["quality"] = meta["quality"]
    roster = Roster(**payload)

    _emit_range_warnings(roster)
    return roster


def _emit_range_warnings(roster: Roster) -> None:
    for worker in roster.workers:
        for msg in validate_worker_ranges(worker):
            print(f"[roster:{roster.plantation_id}] {msg}")
    for field in roster.fields:
        for msg in validate_field_ranges(field):
            print(f"[roster:{roster.plantation_id}] {msg}")
