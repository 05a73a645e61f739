"""Plantation contract models (Pydantic schemas, validators)."""

from .models import (
    Field,
    Gender,
    QualityTier,
    Roster,
    ScoringGender,
    Worker,
    parse_experience_years,
)

__all__ = [
    "Gender",
    "ScoringGender",
    "QualityTier",
    "Worker",
    "Field",
    "Roster",
    "parse_experience_years",
]
