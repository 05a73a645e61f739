"""Round-robin greedy assignment of workers to fields.

Every worker is scored against every field in one predictor batch. Candidates are then ranked
per field (descending efficiency, stable so equal scores keep worker order) and fields take
turns claiming their best unassigned worker, one per round, until a round claims nobody.
Field sizes therefore differ by at most one. ``Field.max_workers`` is not consulted.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from uuid import uuid4

from teaplan.assignment.aggregate import summarize_assignments
from teaplan.assignment.combinations import generate_combinations
from teaplan.assignment.models import AssignmentSchedule, WorkerAssignment
from teaplan.assignment.predictor import (
    EfficiencyPredictor,
    ScoredCandidate,
    ensure_ready,
    score_batch,
)
from teaplan.core.errors import NoFieldsError, NoWorkersError
from teaplan.plantation.contract.models import Field, QualityTier, Worker

RoundHook = Callable[[int, int, int], None]
"""Called after each productive round with (round, assigned_in_round, assigned_total)."""


def rank_candidates_by_field(
    candidates: Sequence[ScoredCandidate], fields: Sequence[Field]
) -> dict[str, list[ScoredCandidate]]:
    """Partition candidates by field id and sort each list by efficiency, best first.

    Keys follow ``fields`` order. The sort is stable, so ties keep the order in which the
    candidates were generated.
    """
    ranked: dict[str, list[ScoredCandidate]] = {field.id: [] for field in fields}
    for candidate in candidates:
        ranked.setdefault(candidate.field_id, []).append(candidate)
    for items in ranked.values():
        items.sort(key=lambda item: item.predicted_efficiency, reverse=True)
    return ranked


def allocate_round_robin(
    ranked: Mapping[str, Sequence[ScoredCandidate]],
    fields: Sequence[Field],
    *,
    date: str = "",
    on_round: RoundHook | None = None,
) -> list[WorkerAssignment]:
    """Assign each worker once, fields claiming their best free worker in turn.

    Returns assignments in creation order: grouped by round, fields in ``fields`` order
    within a round.
    """
    assigned: set[str] = set()
    assignments: list[WorkerAssignment] = []
    # per-field scan position; skipped workers stay assigned, so scans never rewind
    cursors: dict[str, int] = {}
    round_index = 0
    changed = True
    while changed:
        changed = False
        round_index += 1
        claimed = 0
        for field in fields:
            candidates = ranked.get(field.id, ())
            position = cursors.get(field.id, 0)
            while position < len(candidates) and candidates[position].worker_id in assigned:
                position += 1
            cursors[field.id] = position
            if position == len(candidates):
                continue
            best = candidates[position]
            assignments.append(
                WorkerAssignment(
                    worker_id=best.worker_id,
                    worker_name=best.worker_name,
                    field_id=best.field_id,
                    field_name=best.field_name,
                    predicted_efficiency=best.predicted_efficiency,
                    date=date,
                )
            )
            assigned.add(best.worker_id)
            changed = True
            claimed += 1
        if claimed and on_round is not None:
            on_round(round_index, claimed, len(assignments))
    return assignments


class AssignmentOptimizer:
    """Score and allocate workers to fields using an injected efficiency predictor.

    Parameters
    ----------
    predictor:
        Stateful scorer. It is initialised lazily, once, the first time it reports not ready.
    on_round:
        Optional hook receiving per-round progress (used by run telemetry).
    """

    def __init__(self, predictor: EfficiencyPredictor, *, on_round: RoundHook | None = None):
        self.predictor = predictor
        self.on_round = on_round

    def score(
        self,
        workers: Sequence[Worker],
        fields: Sequence[Field],
        quality: QualityTier | str = QualityTier.HIGH,
    ) -> list[ScoredCandidate]:
        """Validate inputs, make sure the predictor is ready and score all pairs in one batch."""
        if not workers:
            raise NoWorkersError("No workers found for this plantation")
        if not fields:
            raise NoFieldsError("No fields provided")
        ensure_ready(self.predictor)
        return score_batch(self.predictor, generate_combinations(workers, fields, quality))

    def optimize(
        self,
        workers: Sequence[Worker],
        fields: Sequence[Field],
        *,
        quality: QualityTier | str = QualityTier.HIGH,
        date: str = "",
    ) -> list[WorkerAssignment]:
        """Return one pending assignment per worker."""
        candidates = self.score(workers, fields, quality)
        ranked = rank_candidates_by_field(candidates, fields)
        return allocate_round_robin(ranked, fields, date=date, on_round=self.on_round)

    def generate(
        self,
        workers: Sequence[Worker],
        fields: Sequence[Field],
        *,
        quality: QualityTier | str = QualityTier.HIGH,
        date: str = "",
        schedule_id: str | None = None,
    ) -> AssignmentSchedule:
        """Optimise and wrap the result with its aggregates."""
        assignments = self.optimize(workers, fields, quality=quality, date=date)
        totals = summarize_assignments(assignments)
        return AssignmentSchedule(
            id=schedule_id or f"schedule_{uuid4().hex}",
            date=date,
            assignments=assignments,
            total_workers=totals.total_workers,
            total_fields=totals.total_fields,
            average_predicted_efficiency=totals.average_efficiency,
            created_at=datetime.now(timezone.utc),
        )


__all__ = [
    "RoundHook",
    "rank_candidates_by_field",
    "allocate_round_robin",
    "AssignmentOptimizer",
]
