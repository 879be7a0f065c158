from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from wle_har.utils.helpers import cfg_get

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partitions:
    train: pd.DataFrame
    validation: pd.DataFrame
    test: pd.DataFrame

    def items(self) -> Iterator[Tuple[str, pd.DataFrame]]:
        yield "train", self.train
        yield "validation", self.validation
        yield "test", self.test

    def sizes(self) -> Dict[str, int]:
        return {name: len(df) for name, df in self.items()}


def _check_stratifiable(labels: pd.Series, frac: float, what: str) -> None:
    """Raise if a stratified split at frac cannot give every class a row on both sides."""

    if not 0.0 < frac < 1.0:
        raise ValueError(f"{what} fraction must be in (0, 1), got {frac}")

    counts = labels.value_counts()
    n = len(labels)
    n_classes = len(counts)
    smallest = counts.idxmin()
    if counts.min() < 2:
        raise ValueError(
            f"{what}: class {smallest!r} has {counts.min()} row(s); stratified splitting needs at least 2 per class"
        )

    # train_test_split floors the train side and gives the rest to the other
    n_first = int(math.floor(frac * n))
    n_second = n - n_first
    if n_first < n_classes or n_second < n_classes:
        raise ValueError(
            f"{what}: fraction {frac} gives {n_first}/{n_second} rows for {n_classes} classes; "
            "each side needs at least one row per class"
        )


def stratified_partition(
    pool: pd.DataFrame,
    label_col: str,
    train_frac: float = 0.8,
    validation_frac: float = 0.5,
    seed: int = 0,
) -> Partitions:
    """Split pool into train / validation / test, preserving class proportions.

    First train_frac of the pool goes to train; the held-out remainder is then
    split validation_frac / (1 - validation_frac) into validation and test.
    The pool's index is kept, so partitions can be checked against the pool.
    """

    if label_col not in pool.columns:
        raise KeyError(f"label column {label_col!r} not in pool")
    labels = pool[label_col]
    if labels.isna().any():
        raise ValueError(f"label column {label_col!r} has {int(labels.isna().sum())} missing values")
    if not pool.index.is_unique:
        raise ValueError("pool index must be unique to track partition membership")

    _check_stratifiable(labels, train_frac, "train/holdout split")
    train, holdout = train_test_split(
        pool,
        train_size=train_frac,
        stratify=labels,
        random_state=seed,
        shuffle=True,
    )

    _check_stratifiable(holdout[label_col], validation_frac, "validation/test split")
    validation, test = train_test_split(
        holdout,
        train_size=validation_frac,
        stratify=holdout[label_col],
        random_state=seed,
        shuffle=True,
    )

    return Partitions(train=train, validation=validation, test=test)


def partition_from_cfg(pool: pd.DataFrame, cfg: Any) -> Partitions:
    label_col = cfg_get(cfg, ["data", "label_column"], "classe")
    return stratified_partition(
        pool,
        label_col,
        train_frac=float(cfg_get(cfg, ["splits", "train_frac"], 0.8)),
        validation_frac=float(cfg_get(cfg, ["splits", "validation_frac"], 0.5)),
        seed=int(cfg_get(cfg, ["splits", "seed"], cfg_get(cfg, ["seed"], 0))),
    )


def describe_partitions(parts: Partitions, label_col: str) -> Dict[str, Dict[str, Any]]:
    summary: Dict[str, Dict[str, Any]] = {}
    for name, df in parts.items():
        counts = df[label_col].value_counts().sort_index()
        summary[name] = {"rows": len(df), "classes": {str(k): int(v) for k, v in counts.items()}}
        logger.info("[split] split=%s rows=%d classes=%s", name, len(df), summary[name]["classes"])
    return summary
