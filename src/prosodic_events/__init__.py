"""prosodic_events -- classifying prosodic events on word tokens.

Public API re-exports for convenient access::

    from prosodic_events import FeatureSet, LinearModelClassifier, EnsembleSampledClassifier
"""

from ._version import __version__
from .aggregation import Aggregation
from .classifiers import (
    ClassWeightedGeneralModelClassifier,
    ClassWeightedLinearModelClassifier,
    Classifier,
    ClassifierRegistry,
    EnsembleSampledClassifier,
    GeneralModelClassifier,
    LinearModelClassifier,
    StratifiedEnsembleSampledClassifier,
    UndersampledClassifier,
    load_classifier,
    save_classifier,
)
from .datasets import load_feature_set, save_feature_set
from .distribution import Distribution
from .encoding import FeatureIndexMap
from .exceptions import (
    ClassifierLoadError,
    DatasetError,
    DistributionError,
    FeatureEncodingError,
    PartitionError,
    ProsodicEventsError,
    TrainingError,
)
from .models import DataPoint, Feature, FeatureSet, FeatureType
from .predictions import (
    generate_prediction_distributions,
    generate_predictions,
    generate_predictions_with_confidence,
)
from .weighting import ClassWeightTrainer, WeightType

__all__ = [
    "__version__",
    # Data model
    "DataPoint",
    "Feature",
    "FeatureSet",
    "FeatureType",
    "Distribution",
    "Aggregation",
    "FeatureIndexMap",
    # Classifiers
    "Classifier",
    "ClassifierRegistry",
    "LinearModelClassifier",
    "ClassWeightedLinearModelClassifier",
    "GeneralModelClassifier",
    "ClassWeightedGeneralModelClassifier",
    "UndersampledClassifier",
    "EnsembleSampledClassifier",
    "StratifiedEnsembleSampledClassifier",
    "ClassWeightTrainer",
    "WeightType",
    # Persistence
    "load_classifier",
    "save_classifier",
    "load_feature_set",
    "save_feature_set",
    # Predictions
    "generate_predictions",
    "generate_predictions_with_confidence",
    "generate_prediction_distributions",
    # Exceptions
    "ProsodicEventsError",
    "DistributionError",
    "FeatureEncodingError",
    "TrainingError",
    "PartitionError",
    "ClassifierLoadError",
    "DatasetError",
]
