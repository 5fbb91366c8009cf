"""Classifier contract, concrete classifiers and resampling decorators.

Importing this package registers every classifier type with
:class:`ClassifierRegistry`.
"""

from .base import Classifier, ClassifierRegistry, load_classifier, save_classifier
from .general import ClassWeightedGeneralModelClassifier, GeneralModelClassifier
from .linear import ClassWeightedLinearModelClassifier, LinearModelClassifier
from .sampling import (
    EnsembleSampledClassifier,
    StratifiedEnsembleSampledClassifier,
    UndersampledClassifier,
)

__all__ = [
    "Classifier",
    "ClassifierRegistry",
    "load_classifier",
    "save_classifier",
    "LinearModelClassifier",
    "ClassWeightedLinearModelClassifier",
    "GeneralModelClassifier",
    "ClassWeightedGeneralModelClassifier",
    "UndersampledClassifier",
    "EnsembleSampledClassifier",
    "StratifiedEnsembleSampledClassifier",
]
