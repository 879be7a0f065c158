"""Report I/O helpers: path resolution, metrics lines, summaries, tables."""

from __future__ import annotations

import json
import os
from typing import Any, Dict

import pandas as pd


def resolve_report_dir(run_dir: str, cfg: Any) -> Dict[str, str]:
    report_cfg = cfg.get("report", {}) if isinstance(cfg, dict) else getattr(cfg, "report", {})
    dirname = (report_cfg or {}).get("dirname", "report")
    base = os.path.join(run_dir, dirname)
    paths = {
        "base": base,
        "logs": os.path.join(base, "logs"),
        "metrics": os.path.join(base, "logs", "metrics.txt"),
        "summary": os.path.join(base, "summary.json"),
        "importance": os.path.join(base, "variable_importance.csv"),
        "importance_plot": os.path.join(base, "variable_importance.png"),
        "quiz": os.path.join(base, "quiz_predictions.csv"),
    }
    os.makedirs(paths["logs"], exist_ok=True)
    return paths


def confusion_plot_path(paths: Dict[str, str], model_name: str) -> str:
    return os.path.join(paths["base"], f"confusion_{model_name}.png")


def write_metrics_line(metrics_path: str, line: str):
    with open(metrics_path, "a", buffering=1) as f:
        f.write(line + "\n")


def write_summary(summary_path: str, summary: Dict[str, Any]):
    with open(summary_path, "w") as f:
        json.dump(summary, f, indent=2, default=str)


def write_table(path: str, df: pd.DataFrame):
    df.to_csv(path, index=False)
