"""Worker x field combination generation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from teaplan.plantation.contract.models import Field, QualityTier, Worker


@dataclass(frozen=True, slots=True)
class ScoringInput:
    """Feature record handed to the efficiency predictor for one pair.

    ``gender`` holds the worker's value verbatim. The model only knows the
    :class:`~teaplan.plantation.contract.models.ScoringGender` labels; ``Other`` is passed
    through uncast and left to the model's encoder, which maps unknown labels to 0.
    """

    age: int
    gender: str
    years_of_experience: int
    field_slope: float
    quality: str
    field_id: str


@dataclass(frozen=True, slots=True)
class Combination:
    """A (worker, field) pair and its scoring input."""

    worker: Worker
    field: Field
    input: ScoringInput


def scoring_input(worker: Worker, field: Field, quality: QualityTier | str) -> ScoringInput:
    """Build the scoring input for one worker/field pair."""
    return ScoringInput(
        age=worker.age,
        gender=worker.gender.value,
        years_of_experience=worker.experience_years,
        field_slope=float(field.slope),
        quality=QualityTier(quality).value,
        field_id=field.id,
    )


def generate_combinations(
    workers: Sequence[Worker],
    fields: Sequence[Field],
    quality: QualityTier | str = QualityTier.HIGH,
) -> list[Combination]:
    """Return every worker/field pair, workers outer and fields inner.

    Iteration order follows the inputs exactly; the optimizer's tie-breaks depend on it.
    Empty inputs yield an empty list.
    """
    tier = QualityTier(quality)
    return [
        Combination(worker=worker, field=field, input=scoring_input(worker, field, tier))
        for worker in workers
        for field in fields
    ]


__all__ = ["ScoringInput", "Combination", "scoring_input", "generate_combinations"]
