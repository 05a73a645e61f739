"""Common teaplan-specific exceptions."""


class TeaplanError(Exception):
    """Base class for errors raised by teaplan."""


class TeaplanValueError(TeaplanError, ValueError):
    """Raised when teaplan detects invalid user-provided data."""


class ValidationError(TeaplanValueError):
    """Raised when a generation request fails its preconditions."""


class NoWorkersError(ValidationError):
    """Raised when a plantation has no workers to assign."""


class NoFieldsError(ValidationError):
    """Raised when a plantation has no fields to assign workers to."""


class PredictorError(TeaplanError):
    """Base class for efficiency predictor failures."""


class PredictorInitializationError(PredictorError):
    """Raised when the efficiency predictor cannot be initialised."""


class PredictorNotReadyError(PredictorError):
    """Raised when a prediction is requested before initialisation."""


class PredictionError(PredictorError):
    """Raised when a batch prediction returns an unusable result."""


class PersistenceError(TeaplanError):
    """Raised when the schedule store cannot read or write a schedule."""


class ScheduleNotFoundError(PersistenceError):
    """Raised when a schedule id is unknown to the store."""


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
