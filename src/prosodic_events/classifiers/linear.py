"""L2-regularized logistic regression over sparse, standardized features.

Wraps scikit-learn's ``liblinear`` solver. Every declared feature except
the class attribute gets a column; values are z-scored with statistics
computed from the training data and stored on the classifier, so a single
word token can be classified later without access to the training set.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from sklearn.linear_model import LogisticRegression

from ..aggregation import Aggregation
from ..distribution import Distribution
from ..encoding import (
    FeatureIndexMap,
    build_aggregations,
    encode_feature_set,
    encode_point,
    normalize_vector,
    to_sparse_matrix,
)
from ..exceptions import TrainingError
from ..models import DataPoint, FeatureSet
from ..weighting import WeightType, class_weight_mapping
from .base import Classifier, ClassifierRegistry

logger = logging.getLogger(__name__)


def class_values_of(feature_set: FeatureSet) -> tuple[str, ...]:
    """Return the declared vocabulary of the class attribute."""
    class_feature = feature_set.class_feature
    if class_feature is None or not class_feature.is_nominal or not class_feature.values:
        raise TrainingError(
            f"Class attribute '{feature_set.class_attribute}' has no declared nominal values"
        )
    return class_feature.values


class OneVsRestLogistic:
    """One binary logistic regression per class, as liblinear trains them.

    In each binary problem only the positive class carries its class weight.
    Probabilities are the per-class sigmoid outputs rescaled to sum to one.
    """

    def __init__(self, classes: np.ndarray, estimators: list[LogisticRegression]) -> None:
        self.classes_ = classes
        self.estimators = estimators

    def predict_proba(self, X: Any) -> np.ndarray:
        scores = np.column_stack([e.predict_proba(X)[:, 1] for e in self.estimators])
        return scores / scores.sum(axis=1, keepdims=True)


def fit_liblinear(
    X: Any,
    y: np.ndarray,
    C: float,
    eps: float,
    max_iter: int,
    class_weight: dict[int, float] | None = None,
) -> LogisticRegression | OneVsRestLogistic:
    """Fit an L2-regularized logistic regression with the liblinear solver."""
    classes = np.unique(y)
    if len(classes) == 2:
        model = LogisticRegression(
            C=C, tol=eps, solver="liblinear", class_weight=class_weight, max_iter=max_iter,
        )
        return model.fit(X, y)

    estimators = []
    for c in classes:
        weight = None
        if class_weight is not None:
            weight = {1: class_weight.get(int(c), 1.0), 0: 1.0}
        binary = LogisticRegression(
            C=C, tol=eps, solver="liblinear", class_weight=weight, max_iter=max_iter,
        )
        estimators.append(binary.fit(X, (y == c).astype(np.int64)))
    return OneVsRestLogistic(classes, estimators)


class LinearModelClassifier(Classifier):
    """Logistic regression classifier with optional class weighting.

    Parameters
    ----------
    C:
        Inverse regularization strength.
    eps:
        Convergence tolerance of the solver.
    class_weighting:
        Weight each class by its inverse training frequency.
    """

    def __init__(
        self,
        C: float = 1.0,
        eps: float = 0.01,
        class_weighting: bool = False,
        max_iter: int = 100,
    ) -> None:
        self.C = C
        self.eps = eps
        self.class_weighting = class_weighting
        self.max_iter = max_iter

        self._model: LogisticRegression | OneVsRestLogistic | None = None
        self._feature_map: FeatureIndexMap | None = None
        self._aggregations: dict[str, Aggregation] = {}
        self.class_attribute: str | None = None
        self.class_values: tuple[str, ...] = ()

    @property
    def trained(self) -> bool:
        return self._model is not None

    @property
    def feature_map(self) -> FeatureIndexMap | None:
        return self._feature_map

    @property
    def aggregations(self) -> dict[str, Aggregation]:
        return self._aggregations

    def _labels(self, feature_set: FeatureSet, class_values: tuple[str, ...]) -> np.ndarray:
        labels = np.empty(feature_set.size, dtype=np.int64)
        for i, point in enumerate(feature_set.data_points):
            value = point.get_attribute(feature_set.class_attribute)
            if value is None or str(value) not in class_values:
                raise TrainingError(
                    f"{point!r} has class value {value!r} outside {list(class_values)}"
                )
            labels[i] = class_values.index(str(value))
        return labels

    def train(self, feature_set: FeatureSet) -> None:
        """Encode, standardize and fit the training points."""
        class_values = class_values_of(feature_set)
        y = self._labels(feature_set, class_values)
        if len(np.unique(y)) < 2:
            raise TrainingError(
                "Training data must contain at least two classes, "
                f"got {sorted({class_values[i] for i in y})}"
            )

        feature_map = FeatureIndexMap.from_feature_set(feature_set)
        aggregations = build_aggregations(feature_set)
        vectors = [
            normalize_vector(v, feature_map, aggregations)
            for v in encode_feature_set(feature_set, feature_map)
        ]
        X = to_sparse_matrix(vectors, len(feature_map))

        class_weight = None
        if self.class_weighting:
            weights = class_weight_mapping(
                feature_set.data_points, feature_set.class_attribute, WeightType.LINEAR
            )
            class_weight = {
                i: weights[value] for i, value in enumerate(class_values) if value in weights
            }

        model = fit_liblinear(X, y, self.C, self.eps, self.max_iter, class_weight)
        logger.debug(
            "Trained logistic regression on %d points, %d features",
            X.shape[0], X.shape[1],
        )

        self._model = model
        self._feature_map = feature_map
        self._aggregations = aggregations
        self.class_attribute = feature_set.class_attribute
        self.class_values = class_values

    def encode(self, point: DataPoint) -> list[tuple[int, float]]:
        """Return the standardized sparse vector the model sees for *point*."""
        if self._feature_map is None:
            raise RuntimeError("Classifier has not been trained yet")
        return normalize_vector(
            encode_point(point, self._feature_map), self._feature_map, self._aggregations
        )

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        if self._model is None or self._feature_map is None:
            raise RuntimeError("Classifier has not been trained yet")
        X = to_sparse_matrix([self.encode(point)], len(self._feature_map))
        probabilities = self._model.predict_proba(X)[0]

        by_class = dict(zip(self._model.classes_.tolist(), probabilities))
        d = Distribution()
        for i, value in enumerate(self.class_values):
            d[value] = float(by_class.get(i, 0.0))
        return d

    def _unfitted_copy(self) -> LinearModelClassifier:
        return type(self)(
            C=self.C, eps=self.eps, class_weighting=self.class_weighting, max_iter=self.max_iter,
        )

    def new_instance(self) -> LinearModelClassifier:
        """Return a clone sharing the fitted model but owning its own state."""
        c = self._unfitted_copy()
        if self.trained:
            c._model = self._model
            c._feature_map = self._feature_map.copy()
            c._aggregations = dict(self._aggregations)
            c.class_attribute = self.class_attribute
            c.class_values = tuple(self.class_values)
        return c

    def get_params(self) -> dict[str, Any]:
        return {
            "type": "liblinear",
            "C": self.C,
            "eps": self.eps,
            "class_weighting": self.class_weighting,
            "trained": self.trained,
            "classes": list(self.class_values),
        }


class ClassWeightedLinearModelClassifier(LinearModelClassifier):
    """Logistic regression with inverse-frequency class weights."""

    def __init__(
        self,
        C: float = 1.0,
        eps: float = 0.01,
        max_iter: int = 100,
    ) -> None:
        super().__init__(C=C, eps=eps, class_weighting=True, max_iter=max_iter)

    def _unfitted_copy(self) -> ClassWeightedLinearModelClassifier:
        return ClassWeightedLinearModelClassifier(C=self.C, eps=self.eps, max_iter=self.max_iter)

    def get_params(self) -> dict[str, Any]:
        params = super().get_params()
        params["type"] = "weighted_liblinear"
        return params


ClassifierRegistry.register("liblinear", LinearModelClassifier)
ClassifierRegistry.register("weighted_liblinear", ClassWeightedLinearModelClassifier)
