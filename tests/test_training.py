"""Tests for the training pipeline: config, metrics, train and evaluate scripts."""

from __future__ import annotations

import json

import pytest
import yaml

from prosodic_events.classifiers import Classifier, EnsembleSampledClassifier
from prosodic_events.datasets import save_feature_set
from prosodic_events.models import DataPoint
from training.config import TrainingConfig, load_config
from training.metrics import ClassMetrics, EvaluationReport, compute_metrics, evaluate_feature_set
from training.scripts.evaluate import evaluate
from training.scripts.train import resolve_data_path, train


def _write_config(path, **overrides) -> None:
    config = {
        "task": "pitch_accent_detection",
        "description": "test",
        "classifier": {"type": "ensemble", "seed": 0, "classifier": {"type": "liblinear"}},
        "data": {"train": "train.json", "test": "test.json", "default_label": "DEACCENTED"},
        "evaluation": {"hyp_attribute": "hyp_accent", "conf_attribute": "hyp_accent_conf"},
    }
    config.update(overrides)
    with open(path, "w") as f:
        yaml.safe_dump(config, f)


@pytest.fixture
def workspace(tmp_path, accent_feature_set):
    save_feature_set(accent_feature_set, tmp_path / "train.json")
    save_feature_set(accent_feature_set, tmp_path / "test.json")
    _write_config(tmp_path / "config.yaml")
    return tmp_path


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class TestConfig:
    def test_load(self, workspace):
        config = load_config(workspace / "config.yaml")
        assert isinstance(config, TrainingConfig)
        assert config.task == "pitch_accent_detection"
        assert config.classifier_type == "ensemble"
        assert config.train_path == "train.json"
        assert config.test_path == "test.json"
        assert config.default_label == "DEACCENTED"
        assert config.hyp_attribute == "hyp_accent"
        assert config.conf_attribute == "hyp_accent_conf"
        assert config.output_dir is None
        assert config.raw["description"] == "test"

    def test_defaults(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text(
            "task: t\nclassifier:\n  type: liblinear\ndata:\n  train: a.json\n"
        )
        config = load_config(path)
        assert config.description == ""
        assert config.test_path is None
        assert config.hyp_attribute == "hyp"
        assert config.evaluation == {}
        assert config.output == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)

    def test_missing_keys(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("task: t\n")
        with pytest.raises(ValueError, match="classifier"):
            load_config(path)

    def test_classifier_needs_type(self, tmp_path):
        path = tmp_path / "c.yaml"
        _write_config(path, classifier={"C": 1.0})
        with pytest.raises(ValueError, match="type"):
            load_config(path)

    def test_data_needs_train(self, tmp_path):
        path = tmp_path / "c.yaml"
        _write_config(path, data={"test": "x.json"})
        with pytest.raises(ValueError, match="train"):
            load_config(path)

    def test_relative_paths_resolve_against_config(self, tmp_path):
        config_path = tmp_path / "configs" / "c.yaml"
        assert resolve_data_path(config_path, "../data/a.json") == (
            config_path.resolve().parent / ".." / "data" / "a.json"
        )
        assert resolve_data_path(config_path, tmp_path / "b.json") == tmp_path / "b.json"


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


class TestMetrics:
    def test_compute_metrics(self):
        report = compute_metrics(["A", "A", "B", "B"], ["A", "B", "B", "B"], labels=["A", "B"])
        assert isinstance(report, EvaluationReport)
        assert report.accuracy == pytest.approx(0.75)
        assert report.per_class[0] == ClassMetrics("A", 1.0, 0.5, pytest.approx(2 / 3), 2)
        assert report.per_class[1].precision == pytest.approx(2 / 3)
        assert report.confusion == [[1, 1], [0, 2]]
        assert report.num_correct == 3

    def test_labels_derived_from_data(self):
        report = compute_metrics(["B", "A"], ["B", "C"])
        assert report.labels == ["A", "B", "C"]

    def test_empty(self):
        report = compute_metrics([], [], labels=["A"])
        assert report.total_samples == 0
        assert report.accuracy == 0.0
        assert report.confusion == [[0]]

    def test_to_dict_and_table(self):
        report = compute_metrics(["H*", "L*"], ["H*", "H*"])
        data = report.to_dict()
        assert data["accuracy"] == 0.5
        assert data["confusion"] == [[1, 0], [1, 0]]
        json.dumps(data)
        table = report.format_table()
        assert "macro avg" in table
        assert "true/hyp" in table

    def test_evaluate_feature_set(self, accent_feature_set):
        points = accent_feature_set.data_points
        for p in points:
            p.set_attribute("hyp", p.get_attribute("accent"))
        points[0].set_attribute("hyp", "ACCENTED")
        points[1].remove_attribute("hyp")
        report = evaluate_feature_set(accent_feature_set, "hyp")
        assert report.labels == ["ACCENTED", "DEACCENTED"]
        assert report.total_samples == 39
        assert report.confusion == [[10, 0], [1, 28]]


# ---------------------------------------------------------------------------
# Train and evaluate
# ---------------------------------------------------------------------------


class TestTrainScript:
    def test_trains_and_saves_checkpoint(self, workspace):
        results = train(workspace / "config.yaml", output_dir=workspace / "ckpt")

        assert results["task"] == "pitch_accent_detection"
        assert results["classifier_type"] == "ensemble"
        assert results["train_samples"] == 40
        assert results["train_metrics"]["accuracy"] > 0.9
        assert results["test_metrics"]["accuracy"] > 0.9
        assert (workspace / "ckpt" / "model.joblib").exists()
        assert (workspace / "ckpt" / "metadata.json").exists()
        with open(workspace / "ckpt" / "training_results.json") as f:
            saved = json.load(f)
        assert saved["params"]["type"] == "ensemble"
        assert isinstance(Classifier.load(workspace / "ckpt"), EnsembleSampledClassifier)

    def test_dataset_override(self, workspace, accent_feature_set):
        results = train(workspace / "config.yaml", dataset=accent_feature_set)
        assert results["train_samples"] == 40
        assert results["test_metrics"] == {}
        assert "checkpoint_path" not in results

    def test_dataset_path_override(self, workspace):
        results = train(workspace / "config.yaml", dataset=workspace / "train.json")
        assert results["train_samples"] == 40

    def test_output_dir_from_config(self, workspace):
        _write_config(workspace / "config.yaml", output={"checkpoint_dir": str(workspace / "out")})
        results = train(workspace / "config.yaml")
        assert results["checkpoint_path"] == str(workspace / "out")
        assert (workspace / "out" / "model.joblib").exists()

    def test_empty_training_set(self, workspace, accent_feature_set):
        with pytest.raises(ValueError, match="empty"):
            train(workspace / "config.yaml", dataset=accent_feature_set.new_instance())


class TestEvaluateScript:
    def test_evaluate_with_config(self, workspace):
        train(workspace / "config.yaml", output_dir=workspace / "ckpt")
        report = evaluate(workspace / "ckpt", config_path=workspace / "config.yaml")
        assert report.total_samples == 40
        assert report.labels == ["ACCENTED", "DEACCENTED"]
        assert report.accuracy > 0.9

    def test_evaluate_with_dataset(self, workspace, accent_feature_set):
        train(workspace / "config.yaml", output_dir=workspace / "ckpt")
        report = evaluate(workspace / "ckpt", dataset=accent_feature_set)
        assert report.total_samples == 40
        assert accent_feature_set.data_points[0].has_attribute("hyp")
        assert accent_feature_set.data_points[0].has_attribute("hyp_conf")

    def test_failures_fall_back_to_default_label(self, workspace, accent_feature_set):
        train(workspace / "config.yaml", output_dir=workspace / "ckpt")
        accent_feature_set.data_points[0].set_attribute("f0_mean", "not a number")
        evaluate(
            workspace / "ckpt", dataset=accent_feature_set, config_path=workspace / "config.yaml"
        )
        point = accent_feature_set.data_points[0]
        assert point.get_attribute("hyp_accent") == "DEACCENTED"
        assert point.get_attribute("hyp_accent_conf") == 0.5

    def test_requires_data(self, workspace):
        train(workspace / "config.yaml", output_dir=workspace / "ckpt")
        with pytest.raises(ValueError, match="--dataset or --config"):
            evaluate(workspace / "ckpt")

    def test_empty_evaluation_set(self, workspace, accent_feature_set):
        train(workspace / "config.yaml", output_dir=workspace / "ckpt")
        with pytest.raises(ValueError, match="empty"):
            evaluate(workspace / "ckpt", dataset=accent_feature_set.new_instance())
