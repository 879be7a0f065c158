"""Metrics utilities for report evaluation (simple sklearn wrappers)."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
)


def _as_array(values: Iterable) -> np.ndarray:
    if isinstance(values, np.ndarray):
        return values
    if hasattr(values, "to_numpy"):
        return values.to_numpy()
    return np.asarray(list(values))


def accuracy(y_true: Iterable, y_pred: Iterable) -> float:
    """Fraction of predictions equal to the truth."""
    y_true_arr = _as_array(y_true)
    y_pred_arr = _as_array(y_pred)
    if y_true_arr.shape[0] != y_pred_arr.shape[0]:
        raise ValueError(f"length mismatch: y_true={y_true_arr.shape[0]} y_pred={y_pred_arr.shape[0]}")
    if y_true_arr.shape[0] == 0:
        raise ValueError("accuracy is undefined for empty inputs")
    return float(accuracy_score(y_true_arr, y_pred_arr))


def normalized_confusion(
    y_true: Iterable,
    y_pred: Iterable,
    labels: Optional[List] = None,
) -> np.ndarray:
    """Confusion matrix laid out predicted (rows) x actual (columns).

    Each column is divided by the number of rows of that actual class, so
    columns sum to 1.0. Classes with no actual rows give a zero column.
    """
    y_true_arr = _as_array(y_true)
    y_pred_arr = _as_array(y_pred)
    if labels is None:
        labels = sorted(set(y_true_arr.tolist()) | set(y_pred_arr.tolist()))

    # sklearn lays out actual x predicted
    counts = confusion_matrix(y_true_arr, y_pred_arr, labels=labels).T.astype(float)
    totals = counts.sum(axis=0, keepdims=True)
    return np.divide(counts, totals, out=np.zeros_like(counts), where=totals > 0)


def compute_metrics(
    y_true: Iterable,
    y_pred: Iterable,
    labels: Optional[List] = None,
) -> Dict[str, object]:
    """Compute classification metrics.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: Ordered label set; defaults to the sorted union of both inputs

    Returns:
        Dict with global and per-class metrics plus the normalized confusion
        matrix (predicted x actual) as nested lists.
    """
    y_true_arr = _as_array(y_true)
    y_pred_arr = _as_array(y_pred)

    if labels is None:
        labels = sorted(set(y_true_arr.tolist()) | set(y_pred_arr.tolist()))

    acc = accuracy(y_true_arr, y_pred_arr)
    bal_acc = float(balanced_accuracy_score(y_true_arr, y_pred_arr))
    macro_f1 = float(f1_score(y_true_arr, y_pred_arr, average="macro", labels=labels, zero_division=0))

    per_class_f1_vals = f1_score(y_true_arr, y_pred_arr, labels=labels, average=None, zero_division=0)
    per_class_precision_vals = precision_score(y_true_arr, y_pred_arr, labels=labels, average=None, zero_division=0)
    per_class_recall_vals = recall_score(y_true_arr, y_pred_arr, labels=labels, average=None, zero_division=0)
    support = confusion_matrix(y_true_arr, y_pred_arr, labels=labels).sum(axis=1)

    per_class = {}
    for i, lbl in enumerate(labels):
        per_class[str(lbl)] = {
            "f1": float(per_class_f1_vals[i]),
            "precision": float(per_class_precision_vals[i]),
            "recall": float(per_class_recall_vals[i]),
            "support": int(support[i]),
        }

    return {
        "acc": acc,
        "bal_acc": bal_acc,
        "macro_f1": macro_f1,
        "n_samples": int(y_true_arr.shape[0]),
        "per_class": per_class,
        "confusion": normalized_confusion(y_true_arr, y_pred_arr, labels=labels).tolist(),
        "labels": [str(l) for l in labels],
    }


def format_metrics_txt(metrics: Dict[str, object], prefix: str = "") -> str:
    """Serialize metrics dict to key=value tokens for metrics.txt lines."""

    tokens = []
    pre = f"{prefix}" if prefix else ""

    def add(k: str, v: object):
        key = f"{pre}{k}" if pre else k
        tokens.append(f"{key}={v}")

    add("acc", f"{metrics.get('acc', 0.0):.6f}")
    add("bal_acc", f"{metrics.get('bal_acc', 0.0):.6f}")
    add("macro_f1", f"{metrics.get('macro_f1', 0.0):.6f}")
    add("n_samples", metrics.get("n_samples", 0))

    per_class = metrics.get("per_class", {}) or {}
    for lbl, class_metrics in per_class.items():
        if isinstance(class_metrics, dict):
            add(f"{lbl}_f1", f"{class_metrics.get('f1', 0.0):.6f}")
            add(f"{lbl}_recall", f"{class_metrics.get('recall', 0.0):.6f}")
            add(f"{lbl}_support", class_metrics.get("support", 0))

    return " ".join(tokens)


def format_metrics_summary(metrics: Dict[str, object]) -> str:
    """One short line for the terminal."""
    return (
        f"acc={metrics.get('acc', 0.0):.4f} "
        f"bal_acc={metrics.get('bal_acc', 0.0):.4f} "
        f"macro_f1={metrics.get('macro_f1', 0.0):.4f} "
        f"n={metrics.get('n_samples', 0)}"
    )
