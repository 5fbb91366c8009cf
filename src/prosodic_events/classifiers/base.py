"""Abstract classifier contract, persistence and classifier registry."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, TypeVar

import joblib

from ..distribution import Distribution
from ..exceptions import ClassifierLoadError
from ..models import DataPoint, FeatureSet

C = TypeVar("C", bound="Classifier")

MODEL_FILE = "model.joblib"
METADATA_FILE = "metadata.json"


class Classifier(ABC):
    """Abstract base class for all classifiers and classifier decorators.

    Subclasses implement training and posterior estimation; this class
    provides hard classification and checkpoint persistence.
    """

    @abstractmethod
    def train(self, feature_set: FeatureSet) -> None:
        """Fit the classifier to the labeled points of *feature_set*."""

    @abstractmethod
    def distribution_for_instance(self, point: DataPoint) -> Distribution:
        """Return the normalized posterior distribution for *point*."""

    @abstractmethod
    def new_instance(self) -> Classifier:
        """Return a copy that can be trained without touching this one."""

    @abstractmethod
    def get_params(self) -> dict[str, Any]:
        """Return classifier parameters as a serializable dictionary."""

    def classify(self, point: DataPoint) -> str | None:
        """Return the most probable label for *point*."""
        dist = self.distribution_for_instance(point)
        if dist is None:
            return None
        return dist.argmax()

    def save(self, path: str | Path) -> None:
        """Save the classifier checkpoint to a directory.

        Creates:
        - model.joblib: the serialized classifier
        - metadata.json: classifier type and parameters
        """
        path = Path(path)
        path.mkdir(parents=True, exist_ok=True)

        joblib.dump(self, path / MODEL_FILE)

        metadata = {
            "classifier_class": type(self).__name__,
            "params": self.get_params(),
        }
        with open(path / METADATA_FILE, "w") as f:
            json.dump(metadata, f, indent=2)

    @classmethod
    def load(cls: type[C], path: str | Path) -> C:
        """Load a classifier checkpoint from a directory.

        The stored object must be an instance of the class this is called on.
        """
        return load_classifier(Path(path) / MODEL_FILE, cls)


def save_classifier(classifier: Classifier, filename: str | Path) -> None:
    """Serialize *classifier* to a single file."""
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(classifier, filename)


def load_classifier(filename: str | Path, expected_type: type[C] = Classifier) -> C:  # type: ignore[assignment]
    """Restore a classifier written by :func:`save_classifier`.

    Raises
    ------
    ClassifierLoadError
        If the file is missing, cannot be deserialized, or does not hold an
        instance of *expected_type*.
    """
    filename = Path(filename)
    if not filename.exists():
        raise ClassifierLoadError(f"No classifier found at {filename}")

    try:
        obj = joblib.load(filename)
    except Exception as exc:
        raise ClassifierLoadError(f"Cannot read classifier from {filename}: {exc}") from exc

    if not isinstance(obj, expected_type):
        raise ClassifierLoadError(
            f"Loaded object is not a {expected_type.__name__}: {type(obj).__name__}"
        )
    return obj


class ClassifierRegistry:
    """Registry mapping classifier type strings to classifier classes."""

    _registry: dict[str, type[Classifier]] = {}

    @classmethod
    def register(cls, name: str, classifier_class: type[Classifier]) -> None:
        """Register a classifier class under a name."""
        cls._registry[name] = classifier_class

    @classmethod
    def create(cls, config: dict[str, Any]) -> Classifier:
        """Create a classifier from a config dict.

        Parameters
        ----------
        config:
            Must contain a 'type' key matching a registered name. All other
            keys are passed as constructor arguments; a nested 'classifier'
            dict is built first, so sampling decorators can wrap any
            registered classifier.
        """
        classifier_type = config.get("type")
        if classifier_type not in cls._registry:
            available = sorted(cls._registry.keys())
            raise ValueError(
                f"Unknown classifier type '{classifier_type}'. Available: {available}"
            )

        kwargs = {k: v for k, v in config.items() if k != "type"}
        if isinstance(kwargs.get("classifier"), dict):
            kwargs["classifier"] = cls.create(kwargs["classifier"])
        return cls._registry[classifier_type](**kwargs)

    @classmethod
    def available(cls) -> list[str]:
        """Return list of registered classifier type names."""
        return sorted(cls._registry.keys())
