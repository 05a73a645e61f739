"""Plantation inputs: roster contract, loaders, repositories."""

from .contract import Field, Gender, QualityTier, Roster, ScoringGender, Worker
from .repositories import FieldRepository, RosterRepository, WorkerRepository

__all__ = [
    "Gender",
    "ScoringGender",
    "QualityTier",
    "Worker",
    "Field",
    "Roster",
    "WorkerRepository",
    "FieldRepository",
    "RosterRepository",
]
