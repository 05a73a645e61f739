"""Efficiency predictor contract, batch scoring, and the artifact-backed model adapter.

The statistical model itself is opaque to teaplan. What lives here is the contract the
optimizer relies on (``is_ready`` / ``initialize`` / ``predict_batch``), the single-call batch
scorer, and an adapter that reproduces the model's preprocessing: categorical label mappings
followed by standard scaling of the six-feature vector

``[age, gender, years_of_experience, field_slope, quality, field]``.

Artifacts are two JSON files in one directory::

    scaler_params.json   {"mean": [...6], "scale": [...6], "feature_names": [...6]}
    label_mappings.json  {"gender_mapping": {...}, "field_mapping": {...}, "quality_mapping": {...}}

An optional ``linear_model.json`` (``{"coefficients": [...6], "intercept": float}``) provides a
reference linear model so the pipeline runs end-to-end without a trained network.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import numpy as np

from teaplan.assignment.combinations import Combination, ScoringInput
from teaplan.core.errors import (
    PredictionError,
    PredictorInitializationError,
    PredictorNotReadyError,
)

FEATURE_NAMES: tuple[str, ...] = (
    "age",
    "gender",
    "years_of_experience",
    "field_slope",
    "quality",
    "field",
)

SCALER_FILENAME = "scaler_params.json"
MAPPINGS_FILENAME = "label_mappings.json"
LINEAR_MODEL_FILENAME = "linear_model.json"


@runtime_checkable
class EfficiencyPredictor(Protocol):
    """Stateful scorer: initialise once, then score batches in input order."""

    def is_ready(self) -> bool:  # pragma: no cover - interface only
        ...

    def initialize(self) -> None:  # pragma: no cover - interface only
        ...

    def predict_batch(self, inputs: Sequence[ScoringInput]) -> Sequence[float]:  # pragma: no cover
        ...


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A worker/field pair with its predicted efficiency (kg/hour)."""

    worker_id: str
    worker_name: str
    field_id: str
    field_name: str
    predicted_efficiency: float


def ensure_ready(predictor: EfficiencyPredictor) -> None:
    """Initialise ``predictor`` if it reports not ready.

    Any failure is re-raised as :class:`PredictorInitializationError` carrying the original
    message; no fallback scores are substituted.
    """
    if predictor.is_ready():
        return
    try:
        predictor.initialize()
    except PredictorInitializationError:
        raise
    except Exception as exc:
        raise PredictorInitializationError(str(exc)) from exc


def score_batch(
    predictor: EfficiencyPredictor, combinations: Sequence[Combination]
) -> list[ScoredCandidate]:
    """Score every combination with a single ``predict_batch`` call."""
    inputs = [combo.input for combo in combinations]
    predictions = list(predictor.predict_batch(inputs))
    if len(predictions) != len(inputs):
        raise PredictionError(
            f"Predictor returned {len(predictions)} value(s) for {len(inputs)} input(s)"
        )
    scored: list[ScoredCandidate] = []
    for combo, value in zip(combinations, predictions):
        pair = f"worker {combo.worker.id} on field {combo.field.id}"
        try:
            efficiency = float(value)
        except (TypeError, ValueError) as exc:
            raise PredictionError(f"Predictor returned non-numeric {value!r} for {pair}") from exc
        if math.isnan(efficiency):
            raise PredictionError(f"Predictor returned NaN for {pair}")
        scored.append(
            ScoredCandidate(
                worker_id=combo.worker.id,
                worker_name=combo.worker.name,
                field_id=combo.field.id,
                field_name=combo.field.name,
                predicted_efficiency=efficiency,
            )
        )
    return scored


def _read_json(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return payload


def _int_mapping(raw: Mapping[str, Any] | None) -> dict[str, int]:
    return {str(key): int(value) for key, value in (raw or {}).items()}


@dataclass(frozen=True)
class ModelArtifacts:
    """Preprocessing parameters shipped alongside the efficiency model.

    Attributes
    ----------
    mean / scale:
        Standard-scaler parameters, one entry per feature in :data:`FEATURE_NAMES` order.
        Zero scales are replaced by 1.0 so constant features encode to zero.
    feature_names:
        Feature labels recorded by the training pipeline.
    gender_mapping / field_mapping / quality_mapping:
        Label encodings for the categorical features. Unknown labels encode to 0.
    """

    mean: np.ndarray
    scale: np.ndarray
    feature_names: tuple[str, ...] = FEATURE_NAMES
    gender_mapping: dict[str, int] = field(default_factory=dict)
    field_mapping: dict[str, int] = field(default_factory=dict)
    quality_mapping: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        width = len(FEATURE_NAMES)
        if self.mean.shape != (width,) or self.scale.shape != (width,):
            raise ValueError(f"Scaler parameters must provide {width} mean/scale values")

    @classmethod
    def load(cls, directory: str | Path) -> ModelArtifacts:
        """Read ``scaler_params.json`` and ``label_mappings.json`` from ``directory``."""
        root = Path(directory)
        scaler = _read_json(root / SCALER_FILENAME)
        mappings = _read_json(root / MAPPINGS_FILENAME)
        mean = np.asarray(scaler["mean"], dtype=float)
        scale = np.asarray(scaler["scale"], dtype=float)
        scale = np.where(scale == 0.0, 1.0, scale)
        names = tuple(scaler.get("feature_names") or FEATURE_NAMES)
        return cls(
            mean=mean,
            scale=scale,
            feature_names=names,
            gender_mapping=_int_mapping(mappings.get("gender_mapping")),
            field_mapping=_int_mapping(mappings.get("field_mapping")),
            quality_mapping=_int_mapping(mappings.get("quality_mapping")),
        )


class FeatureEncoder:
    """Turn scoring inputs into the standardised feature matrix the model consumes."""

    def __init__(self, artifacts: ModelArtifacts) -> None:
        self.artifacts = artifacts

    def raw_features(self, item: ScoringInput) -> list[float]:
        art = self.artifacts
        return [
            float(item.age),
            float(art.gender_mapping.get(item.gender, 0)),
            float(item.years_of_experience),
            float(item.field_slope),
            float(art.quality_mapping.get(item.quality, 0)),
            float(art.field_mapping.get(item.field_id, 0)),
        ]

    def encode(self, inputs: Sequence[ScoringInput]) -> np.ndarray:
        """Return an ``(n, 6)`` array of scaled features in input order."""
        if not inputs:
            return np.empty((0, len(FEATURE_NAMES)), dtype=float)
        raw = np.asarray([self.raw_features(item) for item in inputs], dtype=float)
        return (raw - self.artifacts.mean) / self.artifacts.scale


@dataclass(frozen=True)
class LinearEfficiencyModel:
    """Reference linear model over the scaled features (kg/hour)."""

    coefficients: np.ndarray
    intercept: float = 0.0

    def __call__(self, features: np.ndarray) -> np.ndarray:
        return features @ self.coefficients + self.intercept

    @classmethod
    def load(cls, path: str | Path) -> LinearEfficiencyModel:
        payload = _read_json(Path(path))
        coefficients = np.asarray(payload["coefficients"], dtype=float)
        if coefficients.shape != (len(FEATURE_NAMES),):
            raise ValueError(f"linear model needs {len(FEATURE_NAMES)} coefficients")
        return cls(coefficients=coefficients, intercept=float(payload.get("intercept", 0.0)))


ModelFn = Callable[[np.ndarray], Any]


class EncodedModelPredictor:
    """Predictor adapter: load artifacts lazily, encode, and call an opaque model once per batch.

    Parameters
    ----------
    artifacts_dir:
        Directory holding ``scaler_params.json`` and ``label_mappings.json``.
    model:
        Callable mapping an ``(n, 6)`` feature array to ``n`` efficiencies. When omitted,
        :class:`LinearEfficiencyModel` is loaded from ``linear_model.json`` in the same directory.
    """

    def __init__(self, artifacts_dir: str | Path, model: ModelFn | None = None) -> None:
        self.artifacts_dir = Path(artifacts_dir)
        self._model = model
        self._encoder: FeatureEncoder | None = None

    def is_ready(self) -> bool:
        return self._encoder is not None and self._model is not None

    def initialize(self) -> None:
        artifacts = ModelArtifacts.load(self.artifacts_dir)
        if self._model is None:
            self._model = LinearEfficiencyModel.load(self.artifacts_dir / LINEAR_MODEL_FILENAME)
        self._encoder = FeatureEncoder(artifacts)

    def predict_batch(self, inputs: Sequence[ScoringInput]) -> list[float]:
        if self._encoder is None or self._model is None:
            raise PredictorNotReadyError("Model not initialized. Call initialize() first.")
        if not inputs:
            return []
        features = self._encoder.encode(inputs)
        output = np.asarray(self._model(features), dtype=float).reshape(-1)
        if output.shape[0] != len(inputs):
            raise PredictionError(
                f"Model returned {output.shape[0]} value(s) for {len(inputs)} input(s)"
            )
        return [float(value) for value in output]


__all__ = [
    "FEATURE_NAMES",
    "EfficiencyPredictor",
    "ScoredCandidate",
    "ensure_ready",
    "score_batch",
    "ModelArtifacts",
    "FeatureEncoder",
    "LinearEfficiencyModel",
    "EncodedModelPredictor",
]
