"""Daily schedule generation: repositories in, persisted schedule out."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path

from teaplan.assignment.models import AssignmentSchedule
from teaplan.assignment.optimizer import AssignmentOptimizer
from teaplan.assignment.predictor import EfficiencyPredictor
from teaplan.core.errors import PersistenceError
from teaplan.plantation.contract.models import QualityTier, Roster
from teaplan.plantation.repositories import FieldRepository, WorkerRepository
from teaplan.storage.base import ScheduleStore
from teaplan.storage.models import SavedSchedule, normalise_schedule_date
from teaplan.telemetry.run_logger import GenerationTelemetryLogger


@dataclass(slots=True)
class GenerationConfig:
    """Effective settings for one generation (roster values overridden by CLI options)."""

    plantation_id: str
    date: str
    quality: QualityTier = QualityTier.HIGH
    model_dir: Path | None = None
    store_path: Path | None = None
    telemetry_log: Path | None = None

    @classmethod
    def from_roster(
        cls,
        roster: Roster,
        *,
        date: str | dt.date | None = None,
        quality: QualityTier | str | None = None,
        model_dir: str | Path | None = None,
        store_path: str | Path | None = None,
        telemetry_log: str | Path | None = None,
    ) -> GenerationConfig:
        """Merge explicit overrides with the roster defaults.

        The date falls back to the roster's ``date`` and then to today; the model directory
        to the roster's ``model_dir``.
        """
        day = date if date is not None else roster.date
        if day is None:
            day = dt.date.today()
        resolved_model = model_dir if model_dir is not None else roster.model_dir
        return cls(
            plantation_id=roster.plantation_id,
            date=normalise_schedule_date(day),
            quality=QualityTier(quality) if quality is not None else roster.quality,
            model_dir=Path(resolved_model) if resolved_model is not None else None,
            store_path=Path(store_path) if store_path is not None else None,
            telemetry_log=Path(telemetry_log) if telemetry_log is not None else None,
        )


@dataclass(slots=True)
class GenerationResult:
    """Outcome of :func:`generate_daily_schedule`.

    ``schedule`` is always present. ``saved`` is the persisted record when a store was given
    and the save succeeded; otherwise ``save_error`` carries the persistence failure.
    """

    schedule: AssignmentSchedule
    saved: SavedSchedule | None = None
    save_error: PersistenceError | None = None

    @property
    def persisted(self) -> bool:
        return self.saved is not None


def generate_daily_schedule(
    plantation_id: str,
    date: str | dt.date,
    *,
    workers: WorkerRepository,
    fields: FieldRepository,
    predictor: EfficiencyPredictor,
    store: ScheduleStore | None = None,
    quality: QualityTier | str = QualityTier.HIGH,
    telemetry: GenerationTelemetryLogger | None = None,
) -> GenerationResult:
    """Generate, aggregate and (optionally) persist the schedule of one plantation-day.

    Parameters
    ----------
    plantation_id:
        Plantation whose workers and fields are fetched.
    date:
        Schedule date; stamped onto every assignment and used as the store key.
    workers / fields:
        Repositories queried once each.
    predictor:
        Efficiency predictor, initialised on first use.
    store:
        Schedule store. When omitted the schedule is only returned.
    quality:
        Quality tier applied to all scoring inputs.
    telemetry:
        Open telemetry logger. Receives per-round records and the final run record.

    Returns
    -------
    GenerationResult
        Generation and persistence succeed or fail independently: a store failure is
        reported in ``save_error`` while the generated schedule is still returned.

    Raises
    ------
    NoWorkersError, NoFieldsError
        When the repositories return nothing; the predictor is not touched.
    PredictorError
        When initialisation or scoring fails. Nothing is persisted.
    """
    day = normalise_schedule_date(date)
    worker_list = workers.get_workers_by_plantation(plantation_id)
    field_list = fields.get_fields_by_plantation(plantation_id)

    optimizer = AssignmentOptimizer(
        predictor, on_round=telemetry.log_round if telemetry is not None else None
    )
    schedule = optimizer.generate(worker_list, field_list, quality=quality, date=day)

    result = GenerationResult(schedule=schedule)
    if store is not None:
        try:
            result.saved = store.save_schedule(
                plantation_id, day, schedule.totals(), schedule.assignments
            )
        except PersistenceError as exc:
            result.save_error = exc

    if telemetry is not None:
        metrics = {
            "total_workers": schedule.total_workers,
            "total_fields": schedule.total_fields,
            "average_efficiency": schedule.average_predicted_efficiency,
            "saved_schedule_id": result.saved.id if result.saved is not None else None,
        }
        if result.save_error is not None:
            telemetry.finalize(status="save_failed", metrics=metrics, error=str(result.save_error))
        else:
            telemetry.finalize(status="ok", metrics=metrics)
    return result


__all__ = ["GenerationConfig", "GenerationResult", "generate_daily_schedule"]
