#!/usr/bin/env python3
"""Evaluation and metric reporting.

Usage:
    python training/scripts/evaluate.py \\
        --checkpoint training/checkpoints/accent_v1 \\
        --dataset data/burnc_accent_test.json

    # Take the test set and prediction attributes from the training config:
    python training/scripts/evaluate.py \\
        --checkpoint training/checkpoints/accent_v1 \\
        --config training/configs/pitch_accent_detection.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow imports from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_PROJECT_ROOT))
sys.path.insert(0, str(_PROJECT_ROOT / "src"))

from prosodic_events.classifiers import Classifier
from prosodic_events.datasets import load_feature_set
from prosodic_events.models import FeatureSet
from prosodic_events.predictions import generate_predictions_with_confidence
from training.config import load_config
from training.metrics import EvaluationReport, evaluate_feature_set
from training.scripts.train import load_split

logger = logging.getLogger(__name__)


def evaluate(
    checkpoint_path: str | Path,
    dataset: str | Path | FeatureSet | None = None,
    config_path: str | Path | None = None,
) -> EvaluationReport:
    """Evaluate a trained classifier and produce a classification report.

    Parameters
    ----------
    checkpoint_path:
        Path to the classifier checkpoint directory.
    dataset:
        Evaluation feature set, or a path to one.
    config_path:
        Training config YAML. Supplies the test set when *dataset* is not
        given, plus the hypothesis attribute names and default label.

    Returns
    -------
    EvaluationReport
        Full evaluation report with per-class and aggregate metrics.
    """
    classifier = Classifier.load(checkpoint_path)

    hyp_attribute, conf_attribute, default_label = "hyp", "hyp_conf", ""
    config = None
    if config_path is not None:
        config = load_config(config_path)
        hyp_attribute = config.hyp_attribute
        conf_attribute = config.conf_attribute
        default_label = config.default_label or ""

    if isinstance(dataset, FeatureSet):
        feature_set = dataset
    elif dataset is not None:
        feature_set = load_feature_set(dataset)
    elif config is not None:
        feature_set = load_split(config_path, config, "test")
        if feature_set is None:
            raise ValueError("Config names no 'data.test' feature set")
    else:
        raise ValueError("Either --dataset or --config must be provided")

    if feature_set.size == 0:
        raise ValueError("Evaluation set is empty")

    failures = generate_predictions_with_confidence(
        classifier, feature_set, hyp_attribute, conf_attribute, default_label
    )
    if failures:
        logger.warning("%d of %d points fell back to the default label", failures, feature_set.size)

    return evaluate_feature_set(feature_set, hyp_attribute)


def main() -> None:
    parser = argparse.ArgumentParser(description="Evaluate a trained prosodic event classifier")
    parser.add_argument("--checkpoint", required=True, help="Path to classifier checkpoint")
    parser.add_argument("--dataset", help="Evaluation feature set JSON")
    parser.add_argument("--config", help="Path to training config (supplies data.test)")
    parser.add_argument("--output", help="Optional path to save evaluation report as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    report = evaluate(
        checkpoint_path=args.checkpoint,
        dataset=args.dataset,
        config_path=args.config,
    )

    print("\n" + report.format_table() + "\n")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"Report saved to: {output_path}")


if __name__ == "__main__":
    main()
