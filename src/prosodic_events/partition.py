"""Helpers for partitioning data points by attribute value and fold.

Covers fold assignment for cross validation and ensemble sampling, class
histograms, and majority-class undersampling. All random choices come from
an explicit :class:`random.Random` so callers can make them reproducible.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Sequence

from .distribution import Distribution
from .exceptions import PartitionError
from .models import DataPoint

logger = logging.getLogger(__name__)


def attribute_distribution(points: Sequence[DataPoint], attribute: str) -> Distribution:
    """Count the values of *attribute* across *points* (unnormalized)."""
    histogram = Distribution()
    for p in points:
        if p.has_attribute(attribute):
            histogram.add(str(p.get_attribute(attribute)))
    return histogram


def attribute_matching_points(
    points: Sequence[DataPoint], attribute: str, value: Any
) -> list[DataPoint]:
    """Return the points whose *attribute* equals *value* (compared as strings)."""
    return [
        p for p in points
        if p.has_attribute(attribute) and str(p.get_attribute(attribute)) == str(value)
    ]


def majority_and_runner_up(class_distribution: Distribution) -> tuple[str | None, float, float]:
    """Return ``(majority_label, majority_size, second_largest_size)``.

    Labels are scanned in insertion order; a later label only displaces an
    earlier one when its count is strictly greater.
    """
    majority_label = None
    majority_size = 0.0
    second_size = 0.0
    for label, count in class_distribution.items():
        if count > majority_size:
            second_size = majority_size
            majority_size = count
            majority_label = label
        elif count > second_size:
            second_size = count
    return majority_label, majority_size, second_size


def assign_fold_num(
    points: Sequence[DataPoint],
    attribute: str,
    num_folds: int,
    rng: random.Random | None = None,
) -> None:
    """Store a uniformly random fold id in ``[0, num_folds)`` on every point."""
    if num_folds < 1:
        raise PartitionError(f"The number of folds must be positive, got {num_folds}")
    rng = rng or random.Random()
    for p in points:
        p.set_attribute(attribute, rng.randrange(num_folds))


def assign_stratified_fold_num(
    points: Sequence[DataPoint],
    attribute: str,
    num_folds: int,
    class_attribute: str,
) -> None:
    """Assign fold ids round-robin within each class value.

    The points of every class receive folds ``0, 1, ..., num_folds - 1, 0,
    ...`` in encounter order, so each fold mirrors the class distribution as
    closely as possible.
    """
    if num_folds < 1:
        raise PartitionError(f"The number of folds must be positive, got {num_folds}")
    next_fold: dict[str, int] = {}
    for p in points:
        if not p.has_attribute(class_attribute):
            raise PartitionError(
                f"No class attribute '{class_attribute}' assigned on {p!r}"
            )
        key = str(p.get_attribute(class_attribute))
        fold = next_fold.get(key, 0)
        p.set_attribute(attribute, fold)
        next_fold[key] = (fold + 1) % num_folds


def split_data(
    points: Sequence[DataPoint], fold: int, fold_attribute: str
) -> tuple[list[DataPoint], list[DataPoint]]:
    """Split *points* into ``(training, testing)`` by fold assignment.

    Points assigned to *fold* form the testing set.
    """
    training: list[DataPoint] = []
    testing: list[DataPoint] = []
    for p in points:
        if not p.has_attribute(fold_attribute):
            raise PartitionError(
                f"{p!r} has no fold assignment stored in '{fold_attribute}'"
            )
        if p.get_attribute(fold_attribute) == fold:
            testing.append(p)
        else:
            training.append(p)
    return training, testing


def undersample(
    points: Sequence[DataPoint],
    class_attribute: str,
    rng: random.Random | None = None,
) -> list[DataPoint]:
    """Reduce the majority class to the size of the second largest class.

    Non-majority points are kept in input order. Majority points stream
    through a reservoir: the first ``target_size`` fill it, and each later
    point replaces a uniformly chosen slot with probability
    ``target_size / n``, where ``n`` stays at ``target_size`` once the
    reservoir is full. The result is the non-majority points followed by
    the reservoir.
    """
    rng = rng or random.Random()
    class_distribution = attribute_distribution(points, class_attribute)
    majority_label, majority_size, second_size = majority_and_runner_up(class_distribution)
    target_size = int(second_size)

    kept: list[DataPoint] = []
    reservoir: list[DataPoint] = []
    n = 0
    for p in points:
        if str(p.get_attribute(class_attribute)) != majority_label:
            kept.append(p)
            continue
        if len(reservoir) < target_size:
            reservoir.append(p)
            n += 1
        elif target_size > 0 and rng.random() < target_size / n:
            reservoir[rng.randrange(target_size)] = p

    logger.debug(
        "Undersampled class '%s' from %d to %d points",
        majority_label, int(majority_size), len(reservoir),
    )
    return kept + reservoir
