"""YAML configuration loading and validation for training pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class TrainingConfig:
    """Parsed training configuration from a YAML file."""

    task: str
    description: str
    classifier: dict[str, Any]
    data: dict[str, Any]
    evaluation: dict[str, Any]
    output: dict[str, Any]
    raw: dict[str, Any] = field(repr=False, default_factory=dict)

    @property
    def classifier_type(self) -> str:
        return self.classifier.get("type", "unknown")

    @property
    def train_path(self) -> str:
        return self.data["train"]

    @property
    def test_path(self) -> str | None:
        return self.data.get("test")

    @property
    def default_label(self) -> str | None:
        return self.data.get("default_label")

    @property
    def hyp_attribute(self) -> str:
        return self.evaluation.get("hyp_attribute", "hyp")

    @property
    def conf_attribute(self) -> str:
        return self.evaluation.get("conf_attribute", "hyp_conf")

    @property
    def output_dir(self) -> str | None:
        return self.output.get("checkpoint_dir")


_REQUIRED_KEYS = {"task", "classifier", "data"}


def load_config(path: str | Path) -> TrainingConfig:
    """Load and validate a training configuration from a YAML file.

    Parameters
    ----------
    path:
        Path to the YAML configuration file.

    Returns
    -------
    TrainingConfig
        Parsed configuration object.

    Raises
    ------
    FileNotFoundError
        If the config file does not exist.
    ValueError
        If the config is missing required keys or is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(raw).__name__}")

    missing = _REQUIRED_KEYS - set(raw.keys())
    if missing:
        raise ValueError(f"Config missing required keys: {sorted(missing)}")

    if not isinstance(raw["classifier"], dict) or "type" not in raw["classifier"]:
        raise ValueError("'classifier' must be a mapping with a 'type' key")
    if not isinstance(raw["data"], dict) or "train" not in raw["data"]:
        raise ValueError("'data' must be a mapping with a 'train' key")

    return TrainingConfig(
        task=raw["task"],
        description=raw.get("description", ""),
        classifier=raw["classifier"],
        data=raw["data"],
        evaluation=raw.get("evaluation") or {},
        output=raw.get("output") or {},
        raw=raw,
    )
