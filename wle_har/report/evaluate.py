"""Evaluation utilities for fitted classifiers."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from wle_har.data.features import FeatureMask, apply_feature_mask
from wle_har.models.base import BaseClassifier, Model
from wle_har.utils.metrics import compute_metrics

logger = logging.getLogger(__name__)


def eval_partition(
    clf: BaseClassifier,
    model: Model,
    frame: pd.DataFrame,
    mask: FeatureMask,
    label_col: str,
    labels: Optional[List] = None,
) -> Dict[str, Any]:
    """Predict a labeled partition and compute metrics against its labels."""

    X = apply_feature_mask(frame, mask)
    y_true = frame[label_col].to_numpy()
    y_pred = clf.predict(model, X)
    return compute_metrics(y_true, y_pred, labels=labels)


def evaluate_classifier(
    clf: BaseClassifier,
    model: Model,
    partitions: Dict[str, pd.DataFrame],
    mask: FeatureMask,
    label_col: str,
    labels: Optional[List] = None,
) -> Dict[str, Dict[str, Any]]:
    results = {}
    for split, frame in partitions.items():
        if frame is None or frame.empty:
            continue
        results[split] = eval_partition(clf, model, frame, mask, label_col, labels=labels)
        logger.info("[eval] model=%s split=%s acc=%.4f n=%d", clf.name, split, results[split]["acc"], len(frame))
    return results


def predict_quiz(
    clf: BaseClassifier,
    model: Model,
    quiz: pd.DataFrame,
    mask: FeatureMask,
    id_col: Optional[str] = "problem_id",
) -> pd.DataFrame:
    """Predicted labels for the unlabeled quiz partition, one row per observation."""

    preds = np.asarray(clf.predict(model, apply_feature_mask(quiz, mask)))
    ids = quiz[id_col].to_numpy() if id_col and id_col in quiz.columns else np.arange(1, len(quiz) + 1)
    return pd.DataFrame({id_col or "problem_id": ids, clf.name: preds})


def importance_ranking(clf: BaseClassifier, model: Model) -> pd.DataFrame:
    imp = clf.get_feature_importance(model)
    df = pd.DataFrame({"feature": list(imp.keys()), "importance": list(imp.values())})
    df = df.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)
    df["rank"] = np.arange(1, len(df) + 1)
    return df
