"""Core utilities shared across teaplan modules."""

from .errors import (
    NoFieldsError,
    NoWorkersError,
    PersistenceError,
    PredictionError,
    PredictorError,
    PredictorInitializationError,
    PredictorNotReadyError,
    ScheduleNotFoundError,
    TeaplanError,
    TeaplanValueError,
    ValidationError,
)

__all__ = [
    "TeaplanError",
    "TeaplanValueError",
    "ValidationError",
    "NoWorkersError",
    "NoFieldsError",
    "PredictorError",
    "PredictorInitializationError",
    "PredictorNotReadyError",
    "PredictionError",
    "PersistenceError",
    "ScheduleNotFoundError",
]
