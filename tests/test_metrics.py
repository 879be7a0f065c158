"""Tests for the metrics module."""

import numpy as np
import pandas as pd
import pytest

from wle_har.utils.metrics import (
    accuracy,
    compute_metrics,
    format_metrics_summary,
    format_metrics_txt,
    normalized_confusion,
)


@pytest.fixture
def sample_predictions():
    """Labels A-E with roughly 80% correct predictions."""
    rng = np.random.RandomState(42)
    y_true = rng.choice(list("ABCDE"), size=500)
    y_pred = y_true.copy()
    wrong = rng.choice(500, size=100, replace=False)
    y_pred[wrong] = rng.choice(list("ABCDE"), size=100)
    return y_true, y_pred


class TestAccuracy:
    def test_perfect(self):
        assert accuracy(["A", "B", "C"], ["A", "B", "C"]) == 1.0

    def test_fraction_correct(self):
        assert accuracy(["A", "B", "C", "D"], ["A", "B", "E", "E"]) == 0.5

    def test_invariant_to_row_order(self, sample_predictions):
        y_true, y_pred = sample_predictions
        perm = np.random.RandomState(0).permutation(len(y_true))
        assert accuracy(y_true, y_pred) == accuracy(y_true[perm], y_pred[perm])

    def test_accepts_series(self):
        assert accuracy(pd.Series(["A", "B"]), np.array(["A", "A"])) == 0.5

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            accuracy([], [])

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="length mismatch"):
            accuracy(["A", "B"], ["A"])


class TestNormalizedConfusion:
    def test_columns_sum_to_one(self, sample_predictions):
        y_true, y_pred = sample_predictions
        cm = normalized_confusion(y_true, y_pred, labels=list("ABCDE"))
        np.testing.assert_allclose(cm.sum(axis=0), np.ones(5))

    def test_layout_is_predicted_by_actual(self):
        # two actual A: one predicted A, one predicted B
        cm = normalized_confusion(["A", "A", "B"], ["A", "B", "B"], labels=["A", "B"])
        np.testing.assert_allclose(cm, [[0.5, 0.0], [0.5, 1.0]])

    def test_absent_actual_class_gives_zero_column(self):
        cm = normalized_confusion(["A", "A"], ["A", "C"], labels=["A", "B", "C"])
        np.testing.assert_allclose(cm[:, 1], [0.0, 0.0, 0.0])
        np.testing.assert_allclose(cm[:, 0], [0.5, 0.0, 0.5])

    def test_default_labels_union(self):
        cm = normalized_confusion(["A", "B"], ["C", "B"])
        assert cm.shape == (3, 3)


class TestComputeMetrics:
    def test_keys_and_values(self, sample_predictions):
        y_true, y_pred = sample_predictions
        m = compute_metrics(y_true, y_pred, labels=list("ABCDE"))
        assert m["acc"] == pytest.approx(float((y_true == y_pred).mean()))
        assert 0.0 <= m["bal_acc"] <= 1.0
        assert m["n_samples"] == 500
        assert m["labels"] == list("ABCDE")
        assert sum(c["support"] for c in m["per_class"].values()) == 500
        assert np.allclose(np.asarray(m["confusion"]).sum(axis=0), 1.0)

    def test_format_txt_tokens(self, sample_predictions):
        y_true, y_pred = sample_predictions
        line = format_metrics_txt(compute_metrics(y_true, y_pred), prefix="val_")
        tokens = dict(t.split("=", 1) for t in line.split())
        assert "val_acc" in tokens
        assert "val_A_f1" in tokens
        assert tokens["val_n_samples"] == "500"

    def test_format_summary(self):
        line = format_metrics_summary({"acc": 0.5, "bal_acc": 0.25, "macro_f1": 0.1, "n_samples": 4})
        assert line == "acc=0.5000 bal_acc=0.2500 macro_f1=0.1000 n=4"
