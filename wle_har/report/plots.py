"""Confusion-matrix and importance figures."""

from __future__ import annotations

from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402


def plot_confusion(
    matrix: Sequence[Sequence[float]],
    labels: Sequence[str],
    title: str,
    out_path: Optional[str] = None,
):
    """Heatmap of a column-normalized confusion matrix (predicted x actual)."""

    cm = np.asarray(matrix, dtype=float)
    fig, ax = plt.subplots(figsize=(6, 5))
    sns.heatmap(
        cm,
        annot=True,
        fmt=".2f",
        cmap="Blues",
        vmin=0.0,
        vmax=1.0,
        xticklabels=labels,
        yticklabels=labels,
        ax=ax,
    )
    ax.set_title(title)
    ax.set_xlabel("Actual")
    ax.set_ylabel("Predicted")
    fig.tight_layout()
    if out_path:
        fig.savefig(out_path, dpi=120)
        plt.close(fig)
    return fig


def plot_importance(ranking: pd.DataFrame, top_n: int = 20, out_path: Optional[str] = None):
    top = ranking.head(top_n).iloc[::-1]
    fig, ax = plt.subplots(figsize=(7, max(3, 0.3 * len(top))))
    ax.barh(top["feature"], top["importance"], color="steelblue")
    ax.set_xlabel("Mean decrease in impurity")
    ax.set_title(f"Top {len(top)} variables")
    fig.tight_layout()
    if out_path:
        fig.savefig(out_path, dpi=120)
        plt.close(fig)
    return fig
