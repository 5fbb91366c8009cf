#!/usr/bin/env python3
"""Unified training entry point.

Usage:
    python training/scripts/train.py \\
        --config training/configs/pitch_accent_detection.yaml \\
        --output training/checkpoints/accent_v1

    # Override the training data named in the config:
    python training/scripts/train.py \\
        --config training/configs/pitch_accent_detection.yaml \\
        --dataset data/burnc_accent_train.json \\
        --output training/checkpoints/accent_v1
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Allow imports from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))
sys.path.insert(0, str(_PROJECT_ROOT / "src"))

from prosodic_events.classifiers import Classifier, ClassifierRegistry
from prosodic_events.datasets import load_feature_set
from prosodic_events.models import FeatureSet
from training.config import TrainingConfig, load_config
from training.metrics import compute_metrics

logger = logging.getLogger(__name__)


def resolve_data_path(config_path: str | Path, data_path: str | Path) -> Path:
    """Resolve *data_path* relative to the directory holding the config."""
    data_path = Path(data_path)
    if data_path.is_absolute():
        return data_path
    return Path(config_path).resolve().parent / data_path


def load_split(
    config_path: str | Path, config: TrainingConfig, split: str
) -> FeatureSet | None:
    """Load the ``train`` or ``test`` feature set named in the config."""
    data_path = config.data.get(split)
    if data_path is None:
        return None
    return load_feature_set(resolve_data_path(config_path, data_path))


def score(classifier: Classifier, feature_set: FeatureSet, default_label: str | None) -> dict:
    """Classify every labeled point and return accuracy and macro F1."""
    y_true: list[str] = []
    y_pred: list[str] = []
    for point in feature_set.data_points:
        if not point.has_attribute(feature_set.class_attribute):
            continue
        label = classifier.classify(point)
        y_true.append(str(point.get_attribute(feature_set.class_attribute)))
        y_pred.append(str(label if label is not None else default_label))

    class_feature = feature_set.class_feature
    labels = list(class_feature.values) if class_feature is not None else None
    report = compute_metrics(y_true, y_pred, labels=labels or None)
    return {"accuracy": report.accuracy, "macro_f1": report.macro_f1}


def train(
    config_path: str | Path,
    dataset: str | Path | FeatureSet | None = None,
    output_dir: str | Path | None = None,
) -> dict:
    """Run the full training pipeline.

    Parameters
    ----------
    config_path:
        Path to the YAML training config.
    dataset:
        Training feature set, or a path to one, overriding ``data.train``.
    output_dir:
        Where to save the trained classifier checkpoint. Defaults to
        ``output.checkpoint_dir`` from the config; nothing is saved when
        neither is given.

    Returns
    -------
    dict
        Training results including metrics and output path.
    """
    config = load_config(config_path)

    if isinstance(dataset, FeatureSet):
        train_set = dataset
    elif dataset is not None:
        train_set = load_feature_set(dataset)
    else:
        train_set = load_split(config_path, config, "train")

    if train_set.size == 0:
        raise ValueError("Training set is empty")

    classifier = ClassifierRegistry.create(dict(config.classifier))

    start_time = time.time()
    classifier.train(train_set)
    elapsed = time.time() - start_time
    logger.info("Trained %s on %d points in %.3fs", config.classifier_type, train_set.size, elapsed)

    train_metrics = score(classifier, train_set, config.default_label)

    test_metrics = {}
    test_set = load_split(config_path, config, "test") if dataset is None else None
    if test_set is not None and test_set.size > 0:
        test_metrics = score(classifier, test_set, config.default_label)

    results = {
        "task": config.task,
        "classifier_type": config.classifier_type,
        "params": classifier.get_params(),
        "train_metrics": train_metrics,
        "test_metrics": test_metrics,
        "training_time_seconds": round(elapsed, 3),
        "train_samples": train_set.size,
    }

    if output_dir is None:
        output_dir = config.output_dir
    if output_dir is not None:
        output_path = Path(output_dir)
        classifier.save(output_path)
        results["checkpoint_path"] = str(output_path)

        with open(output_path / "training_results.json", "w") as f:
            json.dump(results, f, indent=2, default=str)

    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Train a prosodic event classifier")
    parser.add_argument("--config", required=True, help="Path to training config YAML")
    parser.add_argument("--dataset", help="Training feature set JSON (overrides data.train)")
    parser.add_argument("--output", help="Path to output checkpoint directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    results = train(config_path=args.config, dataset=args.dataset, output_dir=args.output)

    print(f"Training complete for task '{results['task']}'")
    print(f"  Classifier type: {results['classifier_type']}")
    print(f"  Training samples: {results['train_samples']}")
    print(f"  Training time: {results['training_time_seconds']}s")
    print(f"  Train accuracy: {results['train_metrics'].get('accuracy', 'N/A')}")
    if results["test_metrics"]:
        print(f"  Test accuracy: {results['test_metrics'].get('accuracy', 'N/A')}")
        print(f"  Test macro F1: {results['test_metrics'].get('macro_f1', 'N/A')}")
    print(f"  Checkpoint saved to: {results.get('checkpoint_path', 'N/A')}")


if __name__ == "__main__":
    main()
