"""Data models for labeled word tokens and their declared feature schema.

A :class:`FeatureSet` pairs an ordered list of :class:`DataPoint` objects
with the :class:`Feature` descriptors that classifiers read from them and
the name of the class attribute holding the gold label.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable


class FeatureType(str, Enum):
    """Value type of a declared feature."""

    NUMERIC = "numeric"
    NOMINAL = "nominal"
    STRING = "string"


@dataclass(frozen=True)
class Feature:
    """A declared feature.

    Nominal features carry an ordered vocabulary in ``values``; a value is
    addressed by its position in that tuple.
    """

    name: str
    type: FeatureType = FeatureType.NUMERIC
    values: tuple[str, ...] = ()

    @classmethod
    def numeric(cls, name: str) -> Feature:
        return cls(name, FeatureType.NUMERIC)

    @classmethod
    def nominal(cls, name: str, values: Iterable[str]) -> Feature:
        return cls(name, FeatureType.NOMINAL, tuple(dict.fromkeys(str(v) for v in values)))

    @classmethod
    def string(cls, name: str) -> Feature:
        return cls(name, FeatureType.STRING)

    @classmethod
    def nominal_from_points(cls, name: str, points: Iterable[DataPoint]) -> Feature:
        """Build a nominal feature from the values observed on *points*.

        The vocabulary keeps encounter order. Points without the attribute
        are ignored.
        """
        observed = [
            str(p.get_attribute(name)) for p in points
            if p.get_attribute(name) is not None
        ]
        return cls.nominal(name, observed)

    @property
    def is_nominal(self) -> bool:
        return self.type is FeatureType.NOMINAL

    @property
    def is_numeric(self) -> bool:
        return self.type is FeatureType.NUMERIC

    @property
    def is_string(self) -> bool:
        return self.type is FeatureType.STRING

    def nominal_index(self, value: object) -> int:
        """Return the vocabulary index of *value*, or -1 if it is unknown."""
        try:
            return self.values.index(str(value))
        except ValueError:
            return -1


@dataclass(eq=False)
class DataPoint:
    """A word token with named attributes.

    Points compare by identity: the same token may appear in several
    resampled training sets and must stay recognizable as one object.
    """

    word: str = ""
    start: float = 0.0
    end: float = 0.0
    attributes: dict[str, Any] = field(default_factory=dict)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self.attributes.pop(name, None)

    def __repr__(self) -> str:
        return f"DataPoint({self.word!r}, {self.start}, {self.end})"


@dataclass
class FeatureSet:
    """Training or evaluation data with its declared features."""

    features: list[Feature] = field(default_factory=list)
    data_points: list[DataPoint] = field(default_factory=list)
    class_attribute: str | None = None

    @property
    def feature_names(self) -> list[str]:
        return [f.name for f in self.features]

    @property
    def class_feature(self) -> Feature | None:
        if self.class_attribute is None:
            return None
        return self.get_feature(self.class_attribute)

    @property
    def size(self) -> int:
        return len(self.data_points)

    def get_feature(self, name: str) -> Feature | None:
        """Return the declared feature called *name*, or ``None``."""
        for f in self.features:
            if f.name == name:
                return f
        return None

    def insert_data_point(self, point: DataPoint) -> None:
        self.data_points.append(point)

    def new_instance(self) -> FeatureSet:
        """Return an empty feature set sharing this set's schema."""
        return FeatureSet(
            features=list(self.features),
            data_points=[],
            class_attribute=self.class_attribute,
        )
