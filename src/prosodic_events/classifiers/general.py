"""Adapter from feature sets to arbitrary scikit-learn classifiers.

Each declared feature becomes one column of a dense matrix: nominal values
are replaced by their vocabulary index, numeric values are used as-is and
string values are indexed in a per-column table that grows during
training. Missing values (absent attributes, ``None`` or ``"?"``) become
NaN, so the wrapped estimator must tolerate missing values; the default
decision tree does.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from sklearn.base import ClassifierMixin, clone
from sklearn.ensemble import HistGradientBoostingClassifier, RandomForestClassifier
from sklearn.tree import DecisionTreeClassifier

from ..distribution import Distribution
from ..exceptions import FeatureEncodingError, TrainingError
from ..models import DataPoint, Feature, FeatureSet
from ..weighting import ClassWeightTrainer, WeightFunction, WeightType
from .base import Classifier, ClassifierRegistry

logger = logging.getLogger(__name__)

MISSING_VALUE = "?"

_ESTIMATORS: dict[str, type[ClassifierMixin]] = {
    "decision_tree": DecisionTreeClassifier,
    "random_forest": RandomForestClassifier,
    "hist_gradient_boosting": HistGradientBoostingClassifier,
}


@dataclass
class InstanceSchema:
    """Column layout of the instances handed to the estimator."""

    features: list[Feature]
    class_index: int
    string_values: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_feature_set(cls, feature_set: FeatureSet) -> InstanceSchema:
        """Locate the class column by name, falling back to the last feature."""
        features = list(feature_set.features)
        if not features:
            raise TrainingError("Feature set declares no features")
        class_index = len(features) - 1
        for i, f in enumerate(features):
            if f.name == feature_set.class_attribute:
                class_index = i
                break
        return cls(features=features, class_index=class_index)

    @property
    def class_feature(self) -> Feature:
        return self.features[self.class_index]

    @property
    def input_features(self) -> list[Feature]:
        return [f for i, f in enumerate(self.features) if i != self.class_index]

    def value(self, feature: Feature, raw: Any, grow: bool = False) -> float:
        """Numeric column value of *raw*, NaN when missing or unknown."""
        if raw is None or str(raw) == MISSING_VALUE:
            return math.nan
        if feature.is_nominal:
            index = feature.nominal_index(raw)
            return float(index) if index >= 0 else math.nan
        if feature.is_string:
            table = self.string_values.setdefault(feature.name, [])
            text = str(raw)
            if text not in table:
                if not grow:
                    return math.nan
                table.append(text)
            return float(table.index(text))
        try:
            return float(raw)
        except (TypeError, ValueError) as exc:
            raise FeatureEncodingError(f"Number expected, got {raw!r}", feature.name) from exc

    def row(self, point: DataPoint, grow: bool = False) -> list[float]:
        return [
            self.value(f, point.get_attribute(f.name), grow=grow) for f in self.input_features
        ]


def make_estimator(estimator: str | ClassifierMixin | None, **params: Any) -> ClassifierMixin:
    """Resolve an estimator name or instance to an unfitted estimator."""
    if estimator is None:
        estimator = "decision_tree"
    if isinstance(estimator, str):
        if estimator not in _ESTIMATORS:
            raise ValueError(
                f"Unknown estimator '{estimator}'. Available: {sorted(_ESTIMATORS)}"
            )
        return _ESTIMATORS[estimator](**params)
    if params:
        estimator.set_params(**params)
    return estimator


class GeneralModelClassifier(Classifier):
    """Wraps a scikit-learn classifier behind the classifier contract.

    Parameters
    ----------
    estimator:
        An estimator instance or one of ``"decision_tree"``,
        ``"random_forest"`` and ``"hist_gradient_boosting"``.
    **estimator_params:
        Passed to the estimator constructor (or ``set_params``).
    """

    def __init__(self, estimator: str | ClassifierMixin | None = None, **estimator_params: Any) -> None:
        self.estimator = make_estimator(estimator, **estimator_params)
        self.schema: InstanceSchema | None = None
        self.class_attribute: str | None = None
        self._trained = False

    @property
    def trained(self) -> bool:
        return self._trained

    @property
    def class_values(self) -> tuple[str, ...]:
        return self.schema.class_feature.values if self.schema is not None else ()

    def _weight_function(self, feature_set: FeatureSet) -> WeightFunction | None:
        return None

    def train(self, feature_set: FeatureSet) -> None:
        schema = InstanceSchema.from_feature_set(feature_set)
        class_feature = schema.class_feature
        if not class_feature.is_nominal or not class_feature.values:
            raise TrainingError(
                f"Class attribute '{class_feature.name}' has no declared nominal values"
            )
        weight_fn = self._weight_function(feature_set)

        rows: list[list[float]] = []
        labels: list[int] = []
        weights: list[float] = []
        for point in feature_set.data_points:
            label = class_feature.nominal_index(point.get_attribute(class_feature.name))
            if label < 0:
                logger.debug("Skipping %r: no usable class value", point)
                continue
            rows.append(schema.row(point, grow=True))
            labels.append(label)
            if weight_fn is not None:
                weights.append(weight_fn(point))

        if len(set(labels)) < 2:
            raise TrainingError(
                f"Training data must contain at least two classes, got {sorted(set(labels))}"
            )

        X = np.asarray(rows, dtype=np.float64).reshape(len(rows), len(schema.input_features))
        y = np.asarray(labels, dtype=np.int64)
        if weight_fn is not None:
            self.estimator.fit(X, y, sample_weight=np.asarray(weights, dtype=np.float64))
        else:
            self.estimator.fit(X, y)

        self.schema = schema
        self.class_attribute = class_feature.name
        self._trained = True

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        if not self._trained or self.schema is None:
            raise RuntimeError("Classifier has not been trained yet")
        X = np.asarray([self.schema.row(point)], dtype=np.float64)
        probabilities = self.estimator.predict_proba(X)[0]

        by_class = dict(zip(np.asarray(self.estimator.classes_).tolist(), probabilities))
        d = Distribution()
        for i, value in enumerate(self.class_values):
            d[value] = float(by_class.get(i, 0.0))
        return d

    def new_instance(self) -> GeneralModelClassifier:
        """Return a deep copy of the estimator and schema."""
        return copy.deepcopy(self)

    def get_params(self) -> dict[str, Any]:
        return {
            "type": "sklearn",
            "estimator": type(self.estimator).__name__,
            "estimator_params": {
                k: v for k, v in self.estimator.get_params(deep=False).items()
                if isinstance(v, (str, int, float, bool, type(None)))
            },
            "trained": self._trained,
            "classes": list(self.class_values),
        }

    def __str__(self) -> str:
        return str(self.estimator)


class ClassWeightedGeneralModelClassifier(GeneralModelClassifier):
    """General classifier trained with inverse class-frequency instance weights."""

    def _weight_function(self, feature_set: FeatureSet) -> WeightFunction:
        trainer = ClassWeightTrainer(feature_set.class_attribute, WeightType.LINEAR)
        return trainer.train_weight_function(feature_set.data_points)

    def new_instance(self) -> ClassWeightedGeneralModelClassifier:
        """Return an unfitted copy; weighted models are always retrained."""
        return ClassWeightedGeneralModelClassifier(clone(self.estimator))

    def get_params(self) -> dict[str, Any]:
        params = super().get_params()
        params["type"] = "weighted_sklearn"
        return params


ClassifierRegistry.register("sklearn", GeneralModelClassifier)
ClassifierRegistry.register("weighted_sklearn", ClassWeightedGeneralModelClassifier)
