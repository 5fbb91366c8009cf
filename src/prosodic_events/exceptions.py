"""Custom exception hierarchy for the prosodic_events package."""


class ProsodicEventsError(Exception):
    """Base exception for all prosodic_events errors."""


class DistributionError(ProsodicEventsError):
    """Raised when a distribution cannot be normalized (no mass assigned)."""


class FeatureEncodingError(ProsodicEventsError):
    """Raised when a feature value cannot be encoded for a classifier backend."""

    def __init__(self, message: str, feature: str | None = None) -> None:
        self.feature = feature
        location = f" (feature '{feature}')" if feature is not None else ""
        super().__init__(f"{message}{location}")


class TrainingError(ProsodicEventsError):
    """Raised when a classifier cannot be trained on the supplied data."""


class PartitionError(ProsodicEventsError):
    """Raised when data points cannot be assigned to folds."""


class ClassifierLoadError(ProsodicEventsError):
    """Raised when a stored classifier is missing, corrupt or of the wrong type."""


class DatasetError(ProsodicEventsError):
    """Raised when feature set loading or validation fails."""
