"""Worker-to-field assignment: combinations, scoring, allocation, aggregation."""

from .aggregate import (
    assignments_by_field,
    assignments_dataframe,
    field_summary_dataframe,
    summarize_assignments,
)
from .combinations import Combination, ScoringInput, generate_combinations, scoring_input
from .models import AssignmentSchedule, ScheduleTotals, WorkerAssignment
from .optimizer import AssignmentOptimizer, allocate_round_robin, rank_candidates_by_field
from .predictor import (
    EfficiencyPredictor,
    EncodedModelPredictor,
    FeatureEncoder,
    LinearEfficiencyModel,
    ModelArtifacts,
    ScoredCandidate,
    ensure_ready,
    score_batch,
)

__all__ = [
    "ScoringInput",
    "Combination",
    "scoring_input",
    "generate_combinations",
    "EfficiencyPredictor",
    "EncodedModelPredictor",
    "FeatureEncoder",
    "LinearEfficiencyModel",
    "ModelArtifacts",
    "ScoredCandidate",
    "ensure_ready",
    "score_batch",
    "WorkerAssignment",
    "ScheduleTotals",
    "AssignmentSchedule",
    "AssignmentOptimizer",
    "rank_candidates_by_field",
    "allocate_round_robin",
    "summarize_assignments",
    "assignments_by_field",
    "assignments_dataframe",
    "field_summary_dataframe",
]
