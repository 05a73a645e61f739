"""Pydantic models describing plantation roster inputs."""

from __future__ import annotations

import datetime as dt
import re
from enum import Enum

from pydantic import BaseModel, field_validator, model_validator

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class ScoringGender(str, Enum):
    """Gender values understood by the efficiency model."""

    MALE = "Male"
    FEMALE = "Female"


class QualityTier(str, Enum):
    """Leaf quality target applied uniformly to one generation run."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def parse_experience_years(text: object) -> int:
    """Return the leading integer of a free-text experience value (``0`` when absent).

    ``"5"``, ``"5 years"`` and ``" 12yrs"`` parse to 5, 5 and 12; text without a leading integer
    (``"none"``, ``""``) yields 0. Fractions are truncated (``"3.5"`` -> 3).
    """
    if text is None:
        return 0
    if isinstance(text, bool):
        return 0
    if isinstance(text, int):
        return text
    if isinstance(text, float):
        return int(text) if text == text else 0
    match = _LEADING_INT.match(str(text))
    if match is None:
        return 0
    return int(match.group(1))


def _coerce_text(value: object) -> object:
    # pandas hands numeric-looking CSV cells over as int/float
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return value


class Worker(BaseModel):
    """Plantation worker as seen by the scheduler.

    Attributes
    ----------
    id:
        Unique worker identifier (referenced by assignments).
    name:
        Display name copied onto assignments.
    worker_code:
        Optional employee number printed on worker cards.
    birth_date:
        Optional ISO birth date; informational only, ``age`` is what scoring uses.
    age:
        Age in whole years.
    experience:
        Free-text years of experience (``"5"``, ``"5 years"``); see :attr:`experience_years`.
    gender:
        One of :class:`Gender`. ``Other`` is passed to scoring unchanged.
    plantation_id:
        Plantation affiliation. Filled in from the roster when left blank.
    """

    id: str
    name: str
    worker_code: str | None = None
    birth_date: dt.date | None = None
    age: int
    experience: str = "0"
    gender: Gender
    plantation_id: str | None = None

    @field_validator("id", "name", "worker_code", "experience", "plantation_id", mode="before")
    @classmethod
    def _text_fields(cls, value: object) -> object:
        return _coerce_text(value)

    @field_validator("id", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Worker id/name must be non-empty")
        return value.strip()

    @field_validator("age")
    @classmethod
    def _age_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Worker.age must be non-negative")
        return value

    @property
    def experience_years(self) -> int:
        """Years of experience parsed from :attr:`experience`."""
        return parse_experience_years(self.experience)


class Field(BaseModel):
    """Harvestable tea field.

    Attributes
    ----------
    id:
        Field identifier, unique within a plantation. Some callers reuse the display name here,
        in which case names must be unique too.
    name:
        Display name (defaults to ``id``).
    slope:
        Mean slope in degrees.
    max_workers:
        Declared worker capacity. Recorded for reporting only; the allocator never reads it.
    location:
        Optional free-text location.
    plantation_id:
        Plantation affiliation. Filled in from the roster when left blank.
    """

    id: str
    name: str = ""
    slope: float
    max_workers: int = 0
    location: str | None = None
    plantation_id: str | None = None

    @field_validator("id", "name", "location", "plantation_id", mode="before")
    @classmethod
    def _text_fields(cls, value: object) -> object:
        return _coerce_text(value)

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Field.id must be non-empty")
        return value.strip()

    @field_validator("slope")
    @classmethod
    def _slope_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("Field.slope must be non-negative")
        return value

    @field_validator("max_workers")
    @classmethod
    def _capacity_non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("Field.max_workers must be non-negative")
        return value

    @model_validator(mode="after")
    def _default_name(self) -> Field:
        if not self.name or not self.name.strip():
            object.__setattr__(self, "name", self.id)
        return self


class Roster(BaseModel):
    """Workers and fields of one plantation, plus the generation defaults.

    The model is what :func:`teaplan.plantation.io.load_roster` returns. Once validated,
    callers can rely on unique worker ids, unique field ids and every entity carrying the
    roster's ``plantation_id``.

    Attributes
    ----------
    plantation_id:
        Plantation identifier; half of the plantation-day key.
    date:
        Optional default schedule date.
    quality:
        Quality tier applied to every scoring input of a run.
    model_dir:
        Optional directory holding efficiency model artifacts, relative paths resolved by the
        loader.
    workers / fields:
        Entities in repository order. That order decides allocation tie-breaks.
    """

    plantation_id: str
    date: dt.date | None = None
    quality: QualityTier = QualityTier.HIGH
    model_dir: str | None = None
    workers: list[Worker]
    fields: list[Field]

    @field_validator("plantation_id", mode="before")
    @classmethod
    def _plantation_text(cls, value: object) -> object:
        return _coerce_text(value)

    @field_validator("workers")
    @classmethod
    def _unique_workers(cls, value: list[Worker]) -> list[Worker]:
        seen: set[str] = set()
        for worker in value:
            if worker.id in seen:
                raise ValueError(f"Duplicate worker id '{worker.id}'")
            seen.add(worker.id)
        return value

    @field_validator("fields")
    @classmethod
    def _unique_fields(cls, value: list[Field]) -> list[Field]:
        seen: set[str] = set()
        for field in value:
            if field.id in seen:
                raise ValueError(f"Duplicate field id '{field.id}'")
            seen.add(field.id)
        return value

    @model_validator(mode="after")
    def _affiliation(self) -> Roster:
        for entity in [*self.workers, *self.fields]:
            if entity.plantation_id is None or not entity.plantation_id.strip():
                object.__setattr__(entity, "plantation_id", self.plantation_id)
            elif entity.plantation_id != self.plantation_id:
                kind = type(entity).__name__
                raise ValueError(
                    f"{kind} '{entity.id}' belongs to plantation '{entity.plantation_id}', "
                    f"not '{self.plantation_id}'"
                )
        return self

    def worker_ids(self) -> list[str]:
        """Return worker identifiers in roster order."""
        return [worker.id for worker in self.workers]

    def field_ids(self) -> list[str]:
        """Return field identifiers in roster order."""
        return [field.id for field in self.fields]


__all__ = [
    "Gender",
    "ScoringGender",
    "QualityTier",
    "Worker",
    "Field",
    "Roster",
    "parse_experience_years",
]
