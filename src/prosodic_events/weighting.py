"""Class-based importance weights for imbalanced training data.

Two schemes are supported. ``LINEAR`` weights every class by its inverse
empirical probability, so each class contributes the same total weight.
``ENTROPY`` weights a class by its contribution ``-p ln p`` to the label
entropy, a gentler correction.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Protocol, Sequence

from .models import DataPoint
from .partition import attribute_distribution


class WeightType(str, Enum):
    LINEAR = "linear"
    ENTROPY = "entropy"


class WeightFunction(Protocol):
    """Maps a data point to a non-negative training weight."""

    def __call__(self, point: DataPoint) -> float: ...


class ClassWeightFunction:
    """Weight a data point by the value of its class attribute.

    Points without the class attribute, or with a value that has no
    weight, get weight 0.
    """

    def __init__(self, class_attribute: str, weights: dict[str, float]) -> None:
        self.class_attribute = class_attribute
        self._weights = dict(weights)

    @property
    def weights(self) -> dict[str, float]:
        return dict(self._weights)

    def __call__(self, point: DataPoint) -> float:
        if not point.has_attribute(self.class_attribute):
            return 0.0
        return self._weights.get(str(point.get_attribute(self.class_attribute)), 0.0)


def class_weight_mapping(
    points: Sequence[DataPoint],
    class_attribute: str,
    weight_type: WeightType = WeightType.LINEAR,
) -> dict[str, float]:
    """Compute a weight per class value from its empirical probability.

    Raises
    ------
    DistributionError
        If no point carries the class attribute.
    """
    distribution = attribute_distribution(points, class_attribute).normalize()

    weights: dict[str, float] = {}
    for label, p in distribution.items():
        if weight_type is WeightType.LINEAR:
            weights[label] = 1.0 / p
        elif weight_type is WeightType.ENTROPY:
            weights[label] = -p * math.log(p)
        else:
            raise ValueError(f"Unknown weight type: {weight_type!r}")
    return weights


class ClassWeightTrainer:
    """Builds a :class:`ClassWeightFunction` from labeled training points."""

    def __init__(
        self, class_attribute: str, weight_type: WeightType = WeightType.LINEAR
    ) -> None:
        self.class_attribute = class_attribute
        self.weight_type = WeightType(weight_type)

    def train_weight_function(self, points: Sequence[DataPoint]) -> ClassWeightFunction:
        weights = class_weight_mapping(points, self.class_attribute, self.weight_type)
        return ClassWeightFunction(self.class_attribute, weights)
