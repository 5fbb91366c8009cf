"""Classifier decorators that correct class imbalance by resampling.

Each decorator wraps any :class:`~prosodic_events.classifiers.base.Classifier`
(including another decorator) and changes only what the wrapped classifier
is trained on.

* :class:`UndersampledClassifier` shrinks the majority class to the size
  of the second largest class.
* :class:`EnsembleSampledClassifier` splits the majority class across
  ``k`` training sets that each keep every minority point, trains one
  classifier per set and combines them by product of experts.
* :class:`StratifiedEnsembleSampledClassifier` sizes ``k`` by the smallest
  class and deals every point into exactly one stratified fold.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any

from ..distribution import Distribution
from ..exceptions import TrainingError
from ..models import DataPoint, FeatureSet
from ..partition import (
    assign_fold_num,
    assign_stratified_fold_num,
    attribute_distribution,
    attribute_matching_points,
    majority_and_runner_up,
    undersample,
)
from .base import Classifier, ClassifierRegistry

logger = logging.getLogger(__name__)

FOLD_ATTRIBUTE = "ensemble_sampling_fold"


def _make_rng(seed: int | None, rng: random.Random | None) -> random.Random:
    if rng is not None:
        return rng
    return random.Random(seed)


def _require_classes(class_distribution: Distribution, class_attribute: str | None) -> None:
    if len(class_distribution) < 2:
        raise TrainingError(
            f"Resampling on '{class_attribute}' needs at least two classes, "
            f"got {dict(class_distribution)}"
        )


class UndersampledClassifier(Classifier):
    """Undersamples the majority class before training the wrapped classifier."""

    def __init__(
        self,
        classifier: Classifier,
        class_attribute: str | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.classifier = classifier
        self.class_attribute = class_attribute
        self._rng = _make_rng(seed, rng)

    def train(self, feature_set: FeatureSet) -> None:
        class_attribute = self.class_attribute or feature_set.class_attribute
        _require_classes(
            attribute_distribution(feature_set.data_points, class_attribute), class_attribute
        )
        undersampled = feature_set.new_instance()
        undersampled.data_points = undersample(feature_set.data_points, class_attribute, self._rng)
        self.classifier.train(undersampled)

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        return self.classifier.distribution_for_instance(point)

    def classify(self, point: DataPoint) -> str | None:
        return self.classifier.classify(point)

    def new_instance(self) -> UndersampledClassifier:
        return UndersampledClassifier(
            self.classifier.new_instance(),
            self.class_attribute,
            rng=random.Random(self._rng.getrandbits(64)),
        )

    def get_params(self) -> dict[str, Any]:
        return {
            "type": "undersampled",
            "class_attribute": self.class_attribute,
            "classifier": self.classifier.get_params(),
        }


def majority_partition_training_sets(
    training_set: FeatureSet, rng: random.Random
) -> list[FeatureSet]:
    """Split the majority class across ``floor(majority / second_largest)`` sets.

    Each majority point is assigned to one random set; every other point is
    copied into all of them. A fold that draws no majority points would
    train a member without the majority class, so it is skipped with a
    warning.
    """
    class_attribute = training_set.class_attribute
    class_distribution = attribute_distribution(training_set.data_points, class_attribute)
    _require_classes(class_distribution, class_attribute)

    majority_class, majority_size, second_size = majority_and_runner_up(class_distribution)
    num_folds = int(math.floor(majority_size / second_size))

    majority_points = attribute_matching_points(
        training_set.data_points, class_attribute, majority_class
    )
    try:
        assign_fold_num(majority_points, FOLD_ATTRIBUTE, num_folds, rng)
        occupied = {p.get_attribute(FOLD_ATTRIBUTE) for p in majority_points}
        training_sets = []
        for i in range(num_folds):
            if i not in occupied:
                logger.warning(
                    "Ensemble fold %d of %d drew no '%s' points; skipping it",
                    i, num_folds, majority_class,
                )
                continue
            sampled = training_set.new_instance()
            sampled.data_points = [
                p for p in training_set.data_points
                if not p.has_attribute(FOLD_ATTRIBUTE) or p.get_attribute(FOLD_ATTRIBUTE) == i
            ]
            training_sets.append(sampled)
    finally:
        for p in majority_points:
            p.remove_attribute(FOLD_ATTRIBUTE)

    logger.debug(
        "Built %d ensemble training sets from majority class '%s'",
        len(training_sets), majority_class,
    )
    return training_sets


def stratified_training_sets(training_set: FeatureSet) -> list[FeatureSet]:
    """Deal every point into one of ``floor(majority / smallest)`` stratified folds."""
    class_attribute = training_set.class_attribute
    class_distribution = attribute_distribution(training_set.data_points, class_attribute)
    _require_classes(class_distribution, class_attribute)

    majority_size = max(class_distribution.values())
    smallest_size = min(class_distribution.values())
    num_folds = int(math.floor(majority_size / smallest_size))

    try:
        assign_stratified_fold_num(
            training_set.data_points, FOLD_ATTRIBUTE, num_folds, class_attribute
        )
        training_sets = []
        for i in range(num_folds):
            sampled = training_set.new_instance()
            sampled.data_points = [
                p for p in training_set.data_points if p.get_attribute(FOLD_ATTRIBUTE) == i
            ]
            training_sets.append(sampled)
    finally:
        for p in training_set.data_points:
            p.remove_attribute(FOLD_ATTRIBUTE)

    logger.debug("Built %d stratified ensemble training sets", num_folds)
    return training_sets


def _train_members(prototype: Classifier, training_sets: list[FeatureSet]) -> list[Classifier]:
    members = []
    for fs in training_sets:
        c = prototype.new_instance()
        c.train(fs)
        members.append(c)
    return members


def _product_of_experts(members: list[Classifier], point: DataPoint) -> Distribution:
    if not members:
        raise RuntimeError("Classifier has not been trained yet")
    return Distribution.product([c.distribution_for_instance(point) for c in members])


class EnsembleSampledClassifier(Classifier):
    """Trains one classifier per majority-class partition.

    ``k = floor(majority_size / second_largest_size)``. Every majority
    point lands in one random training set; all other points appear in
    every set. Posteriors are multiplied across the ensemble and
    renormalized, favouring labels the members agree on.
    """

    def __init__(
        self,
        classifier: Classifier,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.classifier = classifier
        self.classifiers: list[Classifier] = []
        self._rng = _make_rng(seed, rng)

    def construct_training_sets(self, training_set: FeatureSet) -> list[FeatureSet]:
        return majority_partition_training_sets(training_set, self._rng)

    def train(self, feature_set: FeatureSet) -> None:
        self.classifiers = _train_members(self.classifier, self.construct_training_sets(feature_set))

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        return _product_of_experts(self.classifiers, point)

    def new_instance(self) -> EnsembleSampledClassifier:
        return EnsembleSampledClassifier(
            self.classifier.new_instance(), rng=random.Random(self._rng.getrandbits(64))
        )

    def get_params(self) -> dict[str, Any]:
        return {
            "type": "ensemble",
            "num_classifiers": len(self.classifiers),
            "classifier": self.classifier.get_params(),
        }


class StratifiedEnsembleSampledClassifier(Classifier):
    """Ensemble over stratified folds sized by the smallest class.

    ``k = floor(majority_size / smallest_size)``. Points of each class are
    dealt round-robin across the ``k`` folds, so every point, minority or
    not, trains exactly one member. Fold assignment is deterministic.
    """

    def __init__(self, classifier: Classifier) -> None:
        self.classifier = classifier
        self.classifiers: list[Classifier] = []

    def construct_training_sets(self, training_set: FeatureSet) -> list[FeatureSet]:
        return stratified_training_sets(training_set)

    def train(self, feature_set: FeatureSet) -> None:
        self.classifiers = _train_members(self.classifier, self.construct_training_sets(feature_set))

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        return _product_of_experts(self.classifiers, point)

    def new_instance(self) -> StratifiedEnsembleSampledClassifier:
        return StratifiedEnsembleSampledClassifier(self.classifier.new_instance())

    def get_params(self) -> dict[str, Any]:
        return {
            "type": "stratified_ensemble",
            "num_classifiers": len(self.classifiers),
            "classifier": self.classifier.get_params(),
        }


ClassifierRegistry.register("undersampled", UndersampledClassifier)
ClassifierRegistry.register("ensemble", EnsembleSampledClassifier)
ClassifierRegistry.register("stratified_ensemble", StratifiedEnsembleSampledClassifier)
