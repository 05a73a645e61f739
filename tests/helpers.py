"""Builders and fakes shared by the test suite."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from pathlib import Path

from teaplan.assignment.combinations import ScoringInput
from teaplan.plantation.contract.models import Field, Gender, Worker

FIXTURES = Path(__file__).parent / "fixtures"
ESTATE_A = FIXTURES / "rosters" / "estate_a" / "roster.yaml"
MODEL_DIR = FIXTURES / "model"


def make_workers(count: int, *, plantation_id: str = "estate-a") -> list[Worker]:
    return [
        Worker(
            id=f"W{i}",
            name=f"Worker {i}",
            age=25 + i,
            experience=str(i),
            gender=Gender.FEMALE if i % 2 else Gender.MALE,
            plantation_id=plantation_id,
        )
        for i in range(1, count + 1)
    ]


def make_fields(count: int, *, plantation_id: str = "estate-a") -> list[Field]:
    return [
        Field(id=f"F{i}", name=f"Field {i}", slope=5.0 + i, max_workers=4, plantation_id=plantation_id)
        for i in range(1, count + 1)
    ]


class TablePredictor:
    """Fake predictor scoring (age, field_id) pairs from a lookup table.

    Worker ages identify workers in the fixtures built by :func:`make_workers`; values missing
    from ``table`` score ``default``.
    """

    def __init__(
        self,
        table: Mapping[tuple[int, str], float] | None = None,
        *,
        default: float = 1.0,
        ready: bool = False,
        fail_init: Exception | None = None,
    ) -> None:
        self.table = dict(table or {})
        self.default = default
        self.ready = ready
        self.fail_init = fail_init
        self.initialize_calls = 0
        self.batches: list[list[ScoringInput]] = []

    def is_ready(self) -> bool:
        return self.ready

    def initialize(self) -> None:
        self.initialize_calls += 1
        if self.fail_init is not None:
            raise self.fail_init
        self.ready = True

    def predict_batch(self, inputs: Sequence[ScoringInput]) -> list[float]:
        self.batches.append(list(inputs))
        return [self.table.get((item.age, item.field_id), self.default) for item in inputs]


class SequencePredictor(TablePredictor):
    """Fake predictor returning a fixed list of values, one per input in order."""

    def __init__(self, values: Sequence[float], **kwargs) -> None:
        super().__init__(ready=True, **kwargs)
        self.values = list(values)

    def predict_batch(self, inputs: Sequence[ScoringInput]) -> list[float]:
        self.batches.append(list(inputs))
        return list(self.values)


class TickingClock:
    """Deterministic UTC clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        value = self.current
        self.current = value + timedelta(seconds=1)
        return value
