import datetime as dt
import json

import pytest

from teaplan.assignment.predictor import EncodedModelPredictor
from teaplan.core.errors import NoWorkersError, PersistenceError, PredictorInitializationError
from teaplan.planning import GenerationConfig, generate_daily_schedule
from teaplan.plantation import RosterRepository
from teaplan.plantation.contract.models import QualityTier
from teaplan.plantation.io import load_roster
from teaplan.storage import InMemoryScheduleStore
from teaplan.telemetry import GenerationTelemetryLogger, read_jsonl

from helpers import ESTATE_A, MODEL_DIR, TablePredictor, TickingClock


class BrokenStore(InMemoryScheduleStore):
    def _write(self, schedule):
        raise PersistenceError("disk full")


def _repository() -> RosterRepository:
    return RosterRepository([load_roster(ESTATE_A)])


def test_fixture_roster_end_to_end():
    repo = _repository()
    store = InMemoryScheduleStore(clock=TickingClock())
    result = generate_daily_schedule(
        "estate-a",
        "2026-03-02",
        workers=repo,
        fields=repo,
        predictor=EncodedModelPredictor(MODEL_DIR),
        store=store,
    )
    schedule = result.schedule
    assert [(a.worker_id, a.field_id) for a in schedule.assignments] == [
        ("W2", "F1"),
        ("W1", "F2"),
        ("W5", "F1"),
        ("W3", "F2"),
        ("W4", "F1"),
    ]
    assert [a.predicted_efficiency for a in schedule.assignments] == pytest.approx(
        [20.1, 18.4, 13.6, 13.4, 8.1]
    )
    assert schedule.average_predicted_efficiency == pytest.approx(14.72)
    assert schedule.total_fields == 2
    assert {a.date for a in schedule.assignments} == {"2026-03-02"}
    assert result.persisted
    assert result.save_error is None
    assert store.get_schedule_by_date("estate-a", "2026-03-02").id == result.saved.id


def test_regeneration_replaces_schedule():
    repo = _repository()
    store = InMemoryScheduleStore(clock=TickingClock())
    predictor = TablePredictor()
    first = generate_daily_schedule(
        "estate-a", "2026-03-02", workers=repo, fields=repo, predictor=predictor, store=store
    )
    second = generate_daily_schedule(
        "estate-a",
        dt.date(2026, 3, 2),
        workers=repo,
        fields=repo,
        predictor=predictor,
        store=store,
        quality=QualityTier.LOW,
    )
    assert second.saved.id == first.saved.id
    assert second.saved.updated_at > first.saved.updated_at
    assert len(store) == 1
    assert predictor.initialize_calls == 1
    assert {item.quality for item in predictor.batches[1]} == {"Low"}


def test_without_store_nothing_is_saved():
    repo = _repository()
    result = generate_daily_schedule(
        "estate-a", "2026-03-02", workers=repo, fields=repo, predictor=TablePredictor()
    )
    assert result.saved is None
    assert result.save_error is None
    assert not result.persisted


def test_save_failure_keeps_generated_schedule():
    repo = _repository()
    result = generate_daily_schedule(
        "estate-a",
        "2026-03-02",
        workers=repo,
        fields=repo,
        predictor=TablePredictor(),
        store=BrokenStore(),
    )
    assert len(result.schedule.assignments) == 5
    assert result.saved is None
    assert str(result.save_error) == "disk full"


def test_unknown_plantation_fails_validation():
    repo = _repository()
    store = InMemoryScheduleStore()
    predictor = TablePredictor()
    with pytest.raises(NoWorkersError):
        generate_daily_schedule(
            "estate-z", "2026-03-02", workers=repo, fields=repo, predictor=predictor, store=store
        )
    assert predictor.initialize_calls == 0
    assert len(store) == 0


def test_predictor_failure_persists_nothing():
    repo = _repository()
    store = InMemoryScheduleStore()
    with pytest.raises(PredictorInitializationError):
        generate_daily_schedule(
            "estate-a",
            "2026-03-02",
            workers=repo,
            fields=repo,
            predictor=TablePredictor(fail_init=RuntimeError("no weights")),
            store=store,
        )
    assert len(store) == 0


def test_telemetry_records_run_and_rounds(tmp_path):
    repo = _repository()
    log_path = tmp_path / "telemetry" / "runs.jsonl"
    with GenerationTelemetryLogger(
        log_path=log_path, plantation_id="estate-a", date="2026-03-02", quality="High"
    ) as telemetry:
        generate_daily_schedule(
            "estate-a",
            "2026-03-02",
            workers=repo,
            fields=repo,
            predictor=TablePredictor(),
            store=BrokenStore(),
            telemetry=telemetry,
        )
    runs = list(read_jsonl(log_path))
    assert len(runs) == 1
    run = runs[0]
    assert run["record_type"] == "run"
    assert run["status"] == "save_failed"
    assert run["error"] == "disk full"
    assert run["metrics"]["total_workers"] == 5
    assert run["metrics"]["saved_schedule_id"] is None
    rounds = list(read_jsonl(telemetry.rounds_path))
    assert [r["assigned_in_round"] for r in rounds] == [2, 2, 1]
    assert telemetry.rounds_path.parent.name == "rounds"


def test_telemetry_records_errors(tmp_path):
    repo = RosterRepository()
    log_path = tmp_path / "runs.jsonl"
    with pytest.raises(NoWorkersError):
        with GenerationTelemetryLogger(log_path=log_path, plantation_id="estate-a") as telemetry:
            generate_daily_schedule(
                "estate-a",
                "2026-03-02",
                workers=repo,
                fields=repo,
                predictor=TablePredictor(),
                telemetry=telemetry,
            )
    (run,) = list(read_jsonl(log_path))
    assert run["status"] == "error"
    assert "No workers found" in run["error"]


def test_generation_config_prefers_overrides(tmp_path):
    roster = load_roster(ESTATE_A)
    config = GenerationConfig.from_roster(roster)
    assert config.date == "2026-03-02"
    assert config.quality is QualityTier.HIGH
    assert config.model_dir.resolve() == MODEL_DIR.resolve()
    assert config.store_path is None

    override = GenerationConfig.from_roster(
        roster, date="2026-04-01", quality="Medium", model_dir=tmp_path, store_path="s.sqlite"
    )
    assert override.date == "2026-04-01"
    assert override.quality is QualityTier.MEDIUM
    assert override.model_dir == tmp_path
    assert str(override.store_path) == "s.sqlite"


def test_generation_config_defaults_to_today():
    roster = load_roster(ESTATE_A).model_copy(update={"date": None})
    config = GenerationConfig.from_roster(roster)
    assert config.date == dt.date.today().isoformat()


def test_jsonl_reader_skips_bad_lines(tmp_path):
    path = tmp_path / "runs.jsonl"
    path.write_text('{"a": 1}\n\nnot json\n[1, 2]\n' + json.dumps({"b": 2}) + "\n")
    assert list(read_jsonl(path)) == [{"a": 1}, {"b": 2}]
