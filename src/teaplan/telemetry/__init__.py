"""Generation run telemetry."""

from teaplan.telemetry.history import PruneResult, load_runs, prune_runs, run_matches
from teaplan.telemetry.jsonl import append_jsonl, read_jsonl, write_jsonl
from teaplan.telemetry.run_logger import GenerationTelemetryLogger

__all__ = [
    "append_jsonl",
    "read_jsonl",
    "write_jsonl",
    "GenerationTelemetryLogger",
    "PruneResult",
    "load_runs",
    "run_matches",
    "prune_runs",
]
