"""Shared fixtures: a small pool/quiz pair shaped like the real exports."""

import numpy as np
import pandas as pd
import pytest

from wle_har.data.loaders import RawTables

CLASSES = ["A", "B", "C", "D", "E"]
N_INFORMATIVE = 10


def make_pool(n_per_class: int = 20, seed: int = 0) -> pd.DataFrame:
    rng = np.random.RandomState(seed)
    n = n_per_class * len(CLASSES)
    labels = np.repeat(CLASSES, n_per_class)
    class_idx = np.repeat(np.arange(len(CLASSES)), n_per_class)

    df = pd.DataFrame(
        {
            "X": np.arange(1, n + 1),
            "user_name": rng.choice(["adelmo", "carlitos", "pedro"], size=n),
            "raw_timestamp_part_1": 1322489729 + np.arange(n),
            "raw_timestamp_part_2": rng.randint(0, 999999, size=n),
            "cvtd_timestamp": ["28/11/2011 14:13"] * n,
            "new_window": ["no"] * n,
            "num_window": rng.randint(1, 800, size=n),
        }
    )
    for j in range(N_INFORMATIVE):
        df[f"sensor_{j}"] = class_idx * 3.0 + rng.normal(scale=0.5, size=n)

    # window aggregate: only filled on a handful of rows
    sparse = np.full(n, np.nan)
    sparse[:3] = [1.0, 2.0, 3.0]
    df["max_roll_belt"] = sparse
    df["amplitude_yaw_belt"] = 0.0
    df["kurtosis_yaw_belt"] = np.nan

    df["classe"] = labels
    # shuffle rows but keep a unique index
    return df.sample(frac=1.0, random_state=seed).reset_index(drop=True)


def make_quiz(pool: pd.DataFrame, n: int = 20, seed: int = 1) -> pd.DataFrame:
    quiz = pool.drop(columns=["classe"]).sample(n=n, random_state=seed).reset_index(drop=True)
    quiz["max_roll_belt"] = np.nan
    quiz["problem_id"] = np.arange(1, n + 1)
    return quiz


@pytest.fixture
def pool():
    return make_pool()


@pytest.fixture
def quiz(pool):
    return make_quiz(pool)


@pytest.fixture
def tables(pool, quiz):
    return RawTables(pool=pool, quiz=quiz, pool_path="pool.csv", quiz_path="quiz.csv")


@pytest.fixture
def small_cfg(tmp_path):
    """Config sized for the toy pool (fast forest, no network)."""
    return {
        "seed": 7,
        "paths": {"runs_root": str(tmp_path / "runs"), "data_root": str(tmp_path / "data")},
        "data": {"label_column": "classe", "quiz_id_column": "problem_id", "download": False},
        "splits": {"train_frac": 0.8, "validation_frac": 0.5, "seed": 7},
        "features": {"max_missing_frac": 0.95, "drop_missing_in_reference": True},
        "models": {
            "enabled": ["svm", "random_forest", "majority"],
            "svm": {"kernel": "rbf", "C": 1.0, "scale": True},
            "random_forest": {
                "n_estimators": 20,
                "cv_folds": 4,
                "max_features_grid": [2, "sqrt"],
                "oob_score": True,
                "n_jobs": 1,
            },
        },
        "report": {"top_n_importance": 5, "plots": True},
    }
