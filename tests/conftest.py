"""Shared test fixtures for the prosodic_events test suite."""

from __future__ import annotations

import random
from typing import Any

import pytest

from prosodic_events.classifiers.base import Classifier
from prosodic_events.distribution import Distribution
from prosodic_events.models import DataPoint, Feature, FeatureSet

ACCENT = "accent"
ACCENTED = "ACCENTED"
DEACCENTED = "DEACCENTED"


def make_point(label: str | None = None, word: str = "w", **attributes: Any) -> DataPoint:
    """Build a data point carrying *label* under the ``accent`` attribute."""
    point = DataPoint(word=word, attributes=dict(attributes))
    if label is not None:
        point.set_attribute(ACCENT, label)
    return point


def labeled_set(counts: dict[str, int], class_attribute: str = ACCENT) -> FeatureSet:
    """A feature set with ``counts[label]`` points per label, labels in order."""
    features = [Feature.numeric("f0"), Feature.nominal(class_attribute, counts)]
    fs = FeatureSet(features=features, class_attribute=class_attribute)
    for label, n in counts.items():
        for i in range(n):
            fs.insert_data_point(
                DataPoint(word=f"{label}_{i}", attributes={"f0": float(i), class_attribute: label})
            )
    return fs


# ---------------------------------------------------------------------------
# Mock classifier for decorator tests
# ---------------------------------------------------------------------------


class RecordingClassifier(Classifier):
    """A fake classifier that records what it was trained on.

    ``new_instance`` clones share the ``created`` list, so a test can
    inspect every ensemble member through the prototype.
    """

    def __init__(self, posterior: dict[str, float] | None = None, created: list | None = None):
        self.posterior = posterior or {ACCENTED: 0.5, DEACCENTED: 0.5}
        self.created = created if created is not None else []
        self.trained_on: list[DataPoint] | None = None
        self.fold_values: list[Any] = []

    def train(self, feature_set: FeatureSet) -> None:
        self.trained_on = list(feature_set.data_points)
        self.fold_values = [p.get_attribute("ensemble_sampling_fold") for p in feature_set.data_points]

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        if self.trained_on is None:
            raise RuntimeError("Classifier has not been trained yet")
        return Distribution(self.posterior)

    def new_instance(self) -> RecordingClassifier:
        clone = RecordingClassifier(dict(self.posterior), self.created)
        self.created.append(clone)
        return clone

    def get_params(self) -> dict[str, Any]:
        return {"type": "recording", "posterior": self.posterior}


class FailingClassifier(Classifier):
    """Raises on every point whose ``word`` is in ``fail_on``."""

    def __init__(self, fail_on: set[str], label: str = ACCENTED):
        self.fail_on = fail_on
        self.label = label

    def train(self, feature_set: FeatureSet) -> None:
        pass

    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        if point.word in self.fail_on:
            raise ValueError(f"cannot classify {point.word}")
        d = Distribution()
        d[self.label] = 0.8
        d[DEACCENTED if self.label == ACCENTED else ACCENTED] = 0.2
        return d

    def new_instance(self) -> FailingClassifier:
        return FailingClassifier(set(self.fail_on), self.label)

    def get_params(self) -> dict[str, Any]:
        return {"type": "failing"}


# ---------------------------------------------------------------------------
# Feature set fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def accent_features() -> list[Feature]:
    return [
        Feature.numeric("f0_mean"),
        Feature.numeric("intensity"),
        Feature.nominal("pos", ["NOUN", "VERB", "FUNC"]),
        Feature.nominal(ACCENT, [ACCENTED, DEACCENTED]),
    ]


@pytest.fixture
def accent_feature_set(accent_features) -> FeatureSet:
    """40 word tokens; accented words have clearly higher pitch.

    30 DEACCENTED points, 10 ACCENTED points.
    """
    noise = random.Random(7)
    fs = FeatureSet(features=accent_features, class_attribute=ACCENT)
    for i in range(30):
        fs.insert_data_point(DataPoint(
            word=f"the_{i}", start=i * 0.5, end=i * 0.5 + 0.2,
            attributes={
                "f0_mean": 110.0 + noise.uniform(-10, 10),
                "intensity": 60.0 + noise.uniform(-3, 3),
                "pos": "FUNC" if i % 3 else "VERB",
                ACCENT: DEACCENTED,
            },
        ))
    for i in range(10):
        fs.insert_data_point(DataPoint(
            word=f"STRESSED_{i}", start=20 + i * 0.5, end=20 + i * 0.5 + 0.3,
            attributes={
                "f0_mean": 220.0 + noise.uniform(-10, 10),
                "intensity": 70.0 + noise.uniform(-3, 3),
                "pos": "NOUN",
                ACCENT: ACCENTED,
            },
        ))
    return fs


@pytest.fixture
def tone_feature_set() -> FeatureSet:
    """Three phrase-final tones separable on a single pitch slope feature."""
    noise = random.Random(11)
    fs = FeatureSet(
        features=[Feature.numeric("slope"), Feature.nominal("tone", ["L-L%", "L-H%", "H-H%"])],
        class_attribute="tone",
    )
    for tone, centre, n in (("L-L%", -5.0, 20), ("L-H%", 0.0, 10), ("H-H%", 5.0, 10)):
        for i in range(n):
            fs.insert_data_point(DataPoint(
                word=f"{tone}_{i}",
                attributes={"slope": centre + noise.uniform(-1, 1), "tone": tone},
            ))
    return fs
