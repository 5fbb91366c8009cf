"""Tests for batch prediction helpers."""

from __future__ import annotations

import logging

import pytest

from conftest import ACCENTED, DEACCENTED, FailingClassifier
from prosodic_events.classifiers.linear import LinearModelClassifier
from prosodic_events.distribution import Distribution
from prosodic_events.models import DataPoint, FeatureSet
from prosodic_events.predictions import (
    generate_prediction_distributions,
    generate_predictions,
    generate_predictions_with_confidence,
)


@pytest.fixture
def words() -> FeatureSet:
    return FeatureSet(data_points=[DataPoint(word=w) for w in ("she", "HAD", "your", "DARK")])


class TestGeneratePredictions:
    def test_stores_hypotheses(self, words):
        failures = generate_predictions(FailingClassifier(set()), words, "hyp", DEACCENTED)
        assert failures == 0
        assert [p.get_attribute("hyp") for p in words.data_points] == [ACCENTED] * 4

    def test_failures_get_default_and_warn(self, words, caplog):
        clf = FailingClassifier({"HAD", "DARK"})
        with caplog.at_level(logging.WARNING, logger="prosodic_events.predictions"):
            failures = generate_predictions(clf, words, "hyp", DEACCENTED)
        assert failures == 2
        assert [p.get_attribute("hyp") for p in words.data_points] == [
            ACCENTED, DEACCENTED, ACCENTED, DEACCENTED,
        ]
        assert caplog.text.count("Classifier failed") == 2
        assert "cannot classify HAD" in caplog.text

    def test_untrained_classifier_falls_back_everywhere(self, words):
        failures = generate_predictions(LinearModelClassifier(), words, "hyp", "NONE")
        assert failures == 4
        assert all(p.get_attribute("hyp") == "NONE" for p in words.data_points)


class TestGeneratePredictionsWithConfidence:
    def test_stores_label_and_confidence(self, words):
        generate_predictions_with_confidence(
            FailingClassifier(set()), words, "hyp", "conf", DEACCENTED
        )
        point = words.data_points[0]
        assert point.get_attribute("hyp") == ACCENTED
        assert point.get_attribute("conf") == pytest.approx(0.8)

    def test_default_confidence(self, words):
        clf = FailingClassifier({"she"})
        failures = generate_predictions_with_confidence(clf, words, "hyp", "conf", DEACCENTED)
        assert failures == 1
        assert words.data_points[0].get_attribute("hyp") == DEACCENTED
        assert words.data_points[0].get_attribute("conf") == 0.5

    def test_custom_default_confidence(self, words):
        clf = FailingClassifier({"she"})
        generate_predictions_with_confidence(
            clf, words, "hyp", "conf", DEACCENTED, default_confidence=0.0
        )
        assert words.data_points[0].get_attribute("conf") == 0.0


class TestGeneratePredictionDistributions:
    def test_stores_distributions(self, words):
        generate_prediction_distributions(FailingClassifier({"your"}), words, "dist", "none")
        dist = words.data_points[0].get_attribute("dist")
        assert isinstance(dist, Distribution)
        assert dist[ACCENTED] == pytest.approx(0.8)
        assert words.data_points[2].get_attribute("dist") == "none"
