"""Loading and saving feature sets as JSON documents.

A feature set file has the structure::

    {
      "class_attribute": "accent",
      "features": [
        {"name": "f0_mean", "type": "numeric"},
        {"name": "accent", "type": "nominal", "values": ["ACCENTED", "DEACCENTED"]}
      ],
      "points": [
        {"word": "hello", "start": 0.12, "end": 0.48,
         "attributes": {"f0_mean": 181.2, "accent": "ACCENTED"}}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .exceptions import DatasetError
from .models import DataPoint, Feature, FeatureSet, FeatureType


def _parse_feature(raw: Any) -> Feature:
    if not isinstance(raw, dict) or "name" not in raw:
        raise DatasetError(f"Feature declaration must be a mapping with a name: {raw!r}")
    try:
        feature_type = FeatureType(raw.get("type", "numeric"))
    except ValueError as exc:
        raise DatasetError(f"Unknown feature type for '{raw['name']}': {raw.get('type')!r}") from exc
    if feature_type is FeatureType.NOMINAL:
        return Feature.nominal(str(raw["name"]), raw.get("values", []))
    return Feature(str(raw["name"]), feature_type)


def _parse_point(raw: Any) -> DataPoint:
    if not isinstance(raw, dict):
        raise DatasetError(f"Data point must be a mapping: {raw!r}")
    attributes = raw.get("attributes", {})
    if not isinstance(attributes, dict):
        raise DatasetError(f"Point attributes must be a mapping: {attributes!r}")
    try:
        return DataPoint(
            word=str(raw.get("word", "")),
            start=float(raw.get("start", 0.0)),
            end=float(raw.get("end", 0.0)),
            attributes=dict(attributes),
        )
    except (TypeError, ValueError) as exc:
        raise DatasetError(f"Cannot parse data point {raw!r}: {exc}") from exc


def feature_set_from_dict(raw: dict[str, Any]) -> FeatureSet:
    """Build a :class:`FeatureSet` from its JSON representation."""
    if not isinstance(raw, dict):
        raise DatasetError(f"Feature set must be a JSON object, got {type(raw).__name__}")
    features = raw.get("features")
    if not isinstance(features, list) or not features:
        raise DatasetError("Feature set must declare a non-empty 'features' list")
    points = raw.get("points", [])
    if not isinstance(points, list):
        raise DatasetError("'points' must be a list")

    return FeatureSet(
        features=[_parse_feature(f) for f in features],
        data_points=[_parse_point(p) for p in points],
        class_attribute=raw.get("class_attribute"),
    )


def feature_set_to_dict(feature_set: FeatureSet) -> dict[str, Any]:
    features = []
    for f in feature_set.features:
        entry: dict[str, Any] = {"name": f.name, "type": f.type.value}
        if f.is_nominal:
            entry["values"] = list(f.values)
        features.append(entry)
    return {
        "class_attribute": feature_set.class_attribute,
        "features": features,
        "points": [
            {"word": p.word, "start": p.start, "end": p.end, "attributes": p.attributes}
            for p in feature_set.data_points
        ],
    }


def load_feature_set(path: str | Path) -> FeatureSet:
    """Load a feature set from a JSON file.

    Raises
    ------
    DatasetError
        If the file is missing, is not valid JSON or is malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise DatasetError(f"Feature set file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Invalid JSON in {path}: {exc}") from exc
    return feature_set_from_dict(raw)


def save_feature_set(feature_set: FeatureSet, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(feature_set_to_dict(feature_set), f, indent=2, default=str)
