"""Sparse numeric encoding and z-score normalization of data points.

The linear backend sees every data point as a sparse vector of
``(index, value)`` pairs, where indices come from a :class:`FeatureIndexMap`
built once from the training schema. Values are then standardized with
per-feature :class:`~prosodic_events.aggregation.Aggregation` statistics
collected from the same training data.

Normalization is fail-soft: a value whose feature was never seen, has
fewer than two training observations or zero variance becomes 0 instead of
raising, so inference never fails on incomplete test-time attributes.
"""

from __future__ import annotations

import math
from typing import Iterator, Sequence

import numpy as np
from scipy.sparse import csr_matrix

from .aggregation import Aggregation
from .exceptions import FeatureEncodingError
from .models import DataPoint, Feature, FeatureSet

SparseVector = list[tuple[int, float]]


class FeatureIndexMap:
    """Bidirectional mapping between features and dense indices from 1."""

    def __init__(self, features: Sequence[Feature] = ()) -> None:
        self._by_feature: dict[Feature, int] = {}
        self._by_index: dict[int, Feature] = {}
        for f in features:
            if f not in self._by_feature:
                index = len(self._by_feature) + 1
                self._by_feature[f] = index
                self._by_index[index] = f

    @classmethod
    def from_feature_set(cls, feature_set: FeatureSet) -> FeatureIndexMap:
        """Index every declared feature except the class attribute."""
        return cls([f for f in feature_set.features if f.name != feature_set.class_attribute])

    def index_of(self, feature: Feature) -> int | None:
        return self._by_feature.get(feature)

    def feature_at(self, index: int) -> Feature | None:
        return self._by_index.get(index)

    def copy(self) -> FeatureIndexMap:
        return FeatureIndexMap(list(self._by_feature))

    def __len__(self) -> int:
        return len(self._by_feature)

    def __contains__(self, feature: object) -> bool:
        return feature in self._by_feature

    def __iter__(self) -> Iterator[tuple[int, Feature]]:
        return iter(self._by_index.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureIndexMap):
            return NotImplemented
        return self._by_feature == other._by_feature


def _numeric_value(feature: Feature, value: object) -> float | None:
    """Numeric encoding of one attribute value, ``None`` when it is dropped."""
    if feature.is_nominal:
        index = feature.nominal_index(value)
        return float(index) if index >= 0 else None
    if feature.is_string:
        raise FeatureEncodingError("Unsupported feature type: string", feature.name)
    try:
        x = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise FeatureEncodingError(
            f"Number expected, got {value!r}", feature.name
        ) from exc
    return None if math.isnan(x) else x


def encode_point(point: DataPoint, feature_map: FeatureIndexMap) -> SparseVector:
    """Encode *point* as ``(index, value)`` pairs in index order.

    Nominal values become their vocabulary index (values outside the
    vocabulary are dropped), numeric values are used as-is (NaN dropped)
    and absent attributes are omitted.

    Raises
    ------
    FeatureEncodingError
        If the point carries a value for a string feature, or a non-numeric
        value for a numeric feature.
    """
    vector: SparseVector = []
    for index, feature in feature_map:
        if not point.has_attribute(feature.name):
            continue
        value = point.get_attribute(feature.name)
        if value is None:
            continue
        x = _numeric_value(feature, value)
        if x is not None:
            vector.append((index, x))
    return vector


def encode_feature_set(feature_set: FeatureSet, feature_map: FeatureIndexMap) -> list[SparseVector]:
    return [encode_point(p, feature_map) for p in feature_set.data_points]


def build_aggregations(feature_set: FeatureSet) -> dict[str, Aggregation]:
    """Collect per-feature statistics over the training points.

    One aggregation is kept per declared non-class feature; string features
    contribute no observations.
    """
    aggregations: dict[str, Aggregation] = {}
    features = [f for f in feature_set.features if f.name != feature_set.class_attribute]
    for f in features:
        aggregations[f.name] = Aggregation(f.name)

    for point in feature_set.data_points:
        for f in features:
            if f.is_string or not point.has_attribute(f.name):
                continue
            value = point.get_attribute(f.name)
            if value is None:
                continue
            x = _numeric_value(f, value)
            if x is not None:
                aggregations[f.name].insert(x)
    return aggregations


def normalize_vector(
    vector: SparseVector,
    feature_map: FeatureIndexMap,
    aggregations: dict[str, Aggregation],
) -> SparseVector:
    """Z-score every entry of *vector* with the stored aggregations."""
    normalized: SparseVector = []
    for index, x in vector:
        feature = feature_map.feature_at(index)
        value = 0.0
        if feature is not None and feature.name in aggregations:
            agg = aggregations[feature.name]
            if agg.size >= 2 and agg.stdev > 0:
                value = (x - agg.mean) / agg.stdev
        if not math.isfinite(value):
            value = 0.0
        normalized.append((index, value))
    return normalized


def to_sparse_matrix(vectors: Sequence[SparseVector], n_features: int) -> csr_matrix:
    """Stack sparse vectors into a CSR matrix; index ``i`` maps to column ``i-1``."""
    rows: list[int] = []
    cols: list[int] = []
    data: list[float] = []
    for row, vector in enumerate(vectors):
        for index, value in vector:
            rows.append(row)
            cols.append(index - 1)
            data.append(value)
    return csr_matrix(
        (
            np.asarray(data, dtype=np.float64),
            (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64)),
        ),
        shape=(len(vectors), n_features),
    )
