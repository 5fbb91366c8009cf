"""Evaluation metrics for prosodic event classifiers.

Computes per-class and macro-averaged precision, recall and F1 together
with the confusion matrix of hypothesized against reference labels.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sklearn.metrics import confusion_matrix, precision_recall_fscore_support

from prosodic_events.models import FeatureSet


@dataclass
class ClassMetrics:
    """Metrics for a single class."""

    label: str
    precision: float
    recall: float
    f1: float
    support: int


@dataclass
class EvaluationReport:
    """Per-class and aggregate metrics plus the confusion matrix.

    ``confusion[i][j]`` counts points of true class ``labels[i]`` that were
    classified as ``labels[j]``.
    """

    per_class: list[ClassMetrics]
    macro_precision: float
    macro_recall: float
    macro_f1: float
    accuracy: float
    total_samples: int
    labels: list[str] = field(default_factory=list)
    confusion: list[list[int]] = field(default_factory=list)

    @property
    def num_correct(self) -> int:
        return sum(self.confusion[i][i] for i in range(len(self.confusion)))

    def to_dict(self) -> dict:
        """Convert report to a JSON-serializable dictionary."""
        return {
            "per_class": [
                {
                    "label": m.label,
                    "precision": round(m.precision, 4),
                    "recall": round(m.recall, 4),
                    "f1": round(m.f1, 4),
                    "support": m.support,
                }
                for m in self.per_class
            ],
            "macro": {
                "precision": round(self.macro_precision, 4),
                "recall": round(self.macro_recall, 4),
                "f1": round(self.macro_f1, 4),
            },
            "accuracy": round(self.accuracy, 4),
            "total_samples": self.total_samples,
            "labels": self.labels,
            "confusion": self.confusion,
        }

    def format_table(self) -> str:
        width = max([len(m.label) for m in self.per_class] + [12]) + 2
        header = f"{'Label':<{width}} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Support':>8}"
        rule = "-" * len(header)
        lines = [header, rule]
        for m in self.per_class:
            lines.append(
                f"{m.label:<{width}} {m.precision:>10.4f} {m.recall:>10.4f} "
                f"{m.f1:>10.4f} {m.support:>8d}"
            )
        lines.append(rule)
        lines.append(
            f"{'macro avg':<{width}} {self.macro_precision:>10.4f} "
            f"{self.macro_recall:>10.4f} {self.macro_f1:>10.4f} {self.total_samples:>8d}"
        )
        lines.append(
            f"{'accuracy':<{width}} {'':>10} {'':>10} {self.accuracy:>10.4f} "
            f"{self.total_samples:>8d}"
        )

        # confusion matrix, rows are true labels
        lines.append("")
        corner = "true/hyp"
        lines.append(f"{corner:<{width}} " + " ".join(f"{label:>10}" for label in self.labels))
        for label, row in zip(self.labels, self.confusion):
            lines.append(f"{label:<{width}} " + " ".join(f"{n:>10d}" for n in row))
        return "\n".join(lines)


def compute_metrics(
    y_true: list[str],
    y_pred: list[str],
    labels: list[str] | None = None,
) -> EvaluationReport:
    """Compute precision, recall and F1 per class and macro-averaged.

    Parameters
    ----------
    y_true:
        Reference labels.
    y_pred:
        Hypothesized labels.
    labels:
        Optional explicit label order. If None, derived from data.

    Returns
    -------
    EvaluationReport
        Complete evaluation report.
    """
    if labels is None:
        labels = sorted(set(y_true) | set(y_pred))
    if not y_true:
        return EvaluationReport(
            per_class=[ClassMetrics(label, 0.0, 0.0, 0.0, 0) for label in labels],
            macro_precision=0.0,
            macro_recall=0.0,
            macro_f1=0.0,
            accuracy=0.0,
            total_samples=0,
            labels=list(labels),
            confusion=[[0] * len(labels) for _ in labels],
        )

    precision, recall, f1, support = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, zero_division=0.0,
    )
    per_class = [
        ClassMetrics(label=label, precision=float(p), recall=float(r), f1=float(f), support=int(s))
        for label, p, r, f, s in zip(labels, precision, recall, f1, support)
    ]

    macro_p, macro_r, macro_f, _ = precision_recall_fscore_support(
        y_true, y_pred, labels=labels, average="macro", zero_division=0.0,
    )

    correct = sum(1 for t, p in zip(y_true, y_pred) if t == p)
    accuracy = correct / len(y_true) if y_true else 0.0

    matrix = confusion_matrix(y_true, y_pred, labels=labels)

    return EvaluationReport(
        per_class=per_class,
        macro_precision=float(macro_p),
        macro_recall=float(macro_r),
        macro_f1=float(macro_f),
        accuracy=accuracy,
        total_samples=len(y_true),
        labels=list(labels),
        confusion=[[int(n) for n in row] for row in matrix],
    )


def evaluate_feature_set(
    feature_set: FeatureSet,
    hyp_attribute: str,
    true_attribute: str | None = None,
    labels: list[str] | None = None,
) -> EvaluationReport:
    """Score the hypotheses stored on *feature_set* against reference labels.

    Points missing either attribute are left out. The reference attribute
    defaults to the feature set's class attribute, and the label order to
    the class vocabulary when one is declared.
    """
    true_attribute = true_attribute or feature_set.class_attribute
    if labels is None and feature_set.class_feature is not None:
        labels = list(feature_set.class_feature.values) or None

    y_true: list[str] = []
    y_pred: list[str] = []
    for point in feature_set.data_points:
        if not point.has_attribute(true_attribute) or not point.has_attribute(hyp_attribute):
            continue
        y_true.append(str(point.get_attribute(true_attribute)))
        y_pred.append(str(point.get_attribute(hyp_attribute)))

    return compute_metrics(y_true, y_pred, labels=labels)
