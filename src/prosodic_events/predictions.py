"""Batch prediction helpers that store hypotheses on data points.

A failure on one point never aborts the batch: the point receives the
caller's default value and the exception is logged as a warning.
"""

from __future__ import annotations

import logging

from .classifiers.base import Classifier
from .models import FeatureSet

logger = logging.getLogger(__name__)


def generate_predictions(
    classifier: Classifier,
    feature_set: FeatureSet,
    hyp_attribute: str,
    default_value: str,
) -> int:
    """Store ``classifier.classify(point)`` in *hyp_attribute* on every point.

    Returns the number of points that fell back to *default_value*.
    """
    failures = 0
    for point in feature_set.data_points:
        try:
            point.set_attribute(hyp_attribute, classifier.classify(point))
        except Exception:
            failures += 1
            point.set_attribute(hyp_attribute, default_value)
            logger.warning(
                "Classifier failed on %r; assigning default value %r",
                point, default_value, exc_info=True,
            )
    return failures


def generate_predictions_with_confidence(
    classifier: Classifier,
    feature_set: FeatureSet,
    hyp_attribute: str,
    conf_attribute: str,
    default_value: str,
    default_confidence: float = 0.5,
) -> int:
    """Store the best label and its posterior mass on every point.

    Returns the number of points that fell back to the defaults.
    """
    failures = 0
    for point in feature_set.data_points:
        try:
            dist = classifier.distribution_for_instance(point)
            label = dist.argmax()
            point.set_attribute(hyp_attribute, label)
            point.set_attribute(conf_attribute, dist[label] if label is not None else 0.0)
        except Exception:
            failures += 1
            point.set_attribute(hyp_attribute, default_value)
            point.set_attribute(conf_attribute, default_confidence)
            logger.warning(
                "Classifier failed on %r; assigning default value %r",
                point, default_value, exc_info=True,
            )
    return failures


def generate_prediction_distributions(
    classifier: Classifier,
    feature_set: FeatureSet,
    dist_attribute: str,
    default_value: str,
) -> int:
    """Store the full posterior distribution on every point."""
    failures = 0
    for point in feature_set.data_points:
        try:
            point.set_attribute(dist_attribute, classifier.distribution_for_instance(point))
        except Exception:
            failures += 1
            point.set_attribute(dist_attribute, default_value)
            logger.warning(
                "Classifier failed on %r; assigning default value %r",
                point, default_value, exc_info=True,
            )
    return failures
