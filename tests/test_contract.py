import datetime as dt

import pytest
from pydantic import ValidationError

from teaplan.plantation.contract.models import (
    Field,
    Gender,
    QualityTier,
    Roster,
    Worker,
    parse_experience_years,
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("5", 5),
        ("5 years", 5),
        (" 12yrs", 12),
        ("3.5", 3),
        ("none", 0),
        ("", 0),
        (None, 0),
        (7, 7),
        (4.9, 4),
        (float("nan"), 0),
    ],
)
def test_parse_experience_years(text, expected):
    assert parse_experience_years(text) == expected


def test_worker_coerces_numeric_csv_cells():
    worker = Worker(id=101, name="Kamala", age=30, experience=8.0, gender="Female")
    assert worker.id == "101"
    assert worker.experience == "8"
    assert worker.experience_years == 8
    assert worker.gender is Gender.FEMALE


def test_worker_rejects_negative_age_and_blank_name():
    with pytest.raises(ValidationError):
        Worker(id="W1", name="W", age=-1, gender="Male")
    with pytest.raises(ValidationError):
        Worker(id="W1", name="  ", age=20, gender="Male")


def test_worker_other_gender_is_accepted():
    worker = Worker(id="W1", name="Alex", age=30, gender="Other")
    assert worker.gender is Gender.OTHER


def test_field_name_defaults_to_id():
    field = Field(id="F7", slope=12.5)
    assert field.name == "F7"
    assert field.max_workers == 0


def test_field_rejects_negative_slope():
    with pytest.raises(ValidationError):
        Field(id="F1", slope=-1.0)


def _roster(**overrides) -> Roster:
    payload = {
        "plantation_id": "estate-a",
        "workers": [Worker(id="W1", name="A", age=30, gender="Male")],
        "fields": [Field(id="F1", slope=10.0)],
    }
    payload.update(overrides)
    return Roster(**payload)


def test_roster_fills_blank_affiliation_and_defaults():
    roster = _roster()
    assert roster.workers[0].plantation_id == "estate-a"
    assert roster.fields[0].plantation_id == "estate-a"
    assert roster.quality is QualityTier.HIGH
    assert roster.date is None
    assert roster.worker_ids() == ["W1"]
    assert roster.field_ids() == ["F1"]


def test_roster_parses_date_and_quality():
    roster = _roster(date="2026-03-02", quality="Low")
    assert roster.date == dt.date(2026, 3, 2)
    assert roster.quality is QualityTier.LOW


def test_roster_rejects_duplicate_ids():
    worker = Worker(id="W1", name="A", age=30, gender="Male")
    with pytest.raises(ValidationError, match="Duplicate worker id"):
        _roster(workers=[worker, worker])
    field = Field(id="F1", slope=10.0)
    with pytest.raises(ValidationError, match="Duplicate field id"):
        _roster(fields=[field, field])


def test_roster_rejects_foreign_entities():
    stranger = Worker(id="W9", name="B", age=30, gender="Female", plantation_id="estate-b")
    with pytest.raises(ValidationError, match="estate-b"):
        _roster(workers=[stranger])
