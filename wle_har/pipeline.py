"""Report pipeline: load -> partition -> feature mask -> train -> evaluate."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pandas as pd

from wle_har.data.features import apply_feature_mask, mask_from_cfg
from wle_har.data.loaders import RawTables, load_tables
from wle_har.data.splits import describe_partitions, partition_from_cfg
from wle_har.models import build_classifier
from wle_har.report import plots
from wle_har.report.evaluate import evaluate_classifier, importance_ranking, predict_quiz
from wle_har.report.io import (
    confusion_plot_path,
    resolve_report_dir,
    write_metrics_line,
    write_summary,
    write_table,
)
from wle_har.utils.helpers import cfg_get
from wle_har.utils.metrics import format_metrics_summary, format_metrics_txt

try:
    import wandb
except ImportError:
    wandb = None

logger = logging.getLogger(__name__)


def _log_wandb(model_name: str, metrics: Dict[str, Dict[str, Any]], fit_info: Dict[str, Any]):
    if wandb is None or wandb.run is None:
        return
    wb = {}
    for split, m in metrics.items():
        wb.update({f"{model_name}/{split}/{k}": v for k, v in m.items() if isinstance(v, (int, float))})
    wb.update({f"{model_name}/fit/{k}": v for k, v in fit_info.items() if isinstance(v, (int, float))})
    wandb.log(wb)


def main(cfg: Any, run_dir: str, tables: Optional[RawTables] = None) -> Dict[str, Any]:
    label_col = cfg_get(cfg, ["data", "label_column"], "classe")
    quiz_id_col = cfg_get(cfg, ["data", "quiz_id_column"], "problem_id")
    model_names = cfg_get(cfg, ["models", "enabled"], ["svm", "random_forest"])
    confusion_split = cfg_get(cfg, ["report", "confusion_split"], "test")
    top_n = int(cfg_get(cfg, ["report", "top_n_importance"], 20))
    make_plots = bool(cfg_get(cfg, ["report", "plots"], True))

    paths = resolve_report_dir(run_dir, cfg)

    if tables is None:
        tables = load_tables(cfg)

    parts = partition_from_cfg(tables.pool, cfg)
    mask = mask_from_cfg(parts.train, cfg, reference=tables.quiz)
    if len(mask) == 0:
        raise ValueError("feature mask is empty; check features.* settings")

    labels = sorted(parts.train[label_col].unique().tolist())
    X_train = apply_feature_mask(parts.train, mask)
    y_train = parts.train[label_col]
    eval_parts = {"validation": parts.validation, "test": parts.test}

    summary: Dict[str, Any] = {
        "partitions": describe_partitions(parts, label_col),
        "features": {"n_kept": len(mask), "kept": list(mask.columns), "dropped": mask.drop_reasons()},
        "labels": [str(l) for l in labels],
        "models": {},
    }
    quiz_preds = None

    for name in model_names:
        clf = build_classifier(name, cfg)
        logger.info("[train] fitting %s on %d rows x %d features", name, X_train.shape[0], X_train.shape[1])
        model = clf.fit(X_train, y_train)

        metrics = evaluate_classifier(clf, model, eval_parts, mask, label_col, labels=labels)
        for split, m in metrics.items():
            write_metrics_line(paths["metrics"], f"model={name} split={split} " + format_metrics_txt(m))
            print(f"[report] model={name} split={split} {format_metrics_summary(m)}")
        for key in ("cv_accuracy", "oob_accuracy"):
            if key in clf.fit_info:
                print(f"[report] model={name} {key}={clf.fit_info[key]:.4f}")

        if make_plots and confusion_split in metrics:
            m = metrics[confusion_split]
            plots.plot_confusion(
                m["confusion"],
                m["labels"],
                title=f"{name} ({confusion_split}, acc={m['acc']:.3f})",
                out_path=confusion_plot_path(paths, name),
            )

        preds = predict_quiz(clf, model, tables.quiz, mask, id_col=quiz_id_col)
        quiz_preds = preds if quiz_preds is None else quiz_preds.merge(preds, on=quiz_id_col or "problem_id")

        model_summary: Dict[str, Any] = {"fit": clf.fit_info, "metrics": metrics}
        if name == "random_forest":
            ranking = importance_ranking(clf, model)
            write_table(paths["importance"], ranking)
            if make_plots:
                plots.plot_importance(ranking, top_n=top_n, out_path=paths["importance_plot"])
            print(f"[report] variable importance (top {min(top_n, len(ranking))}):")
            for row in ranking.head(top_n).itertuples(index=False):
                print(f"  {row.rank:>3d}. {row.feature:<30s} {row.importance:.4f}")
            model_summary["importance_top"] = ranking.head(top_n).to_dict("records")

        summary["models"][name] = model_summary
        _log_wandb(name, metrics, clf.fit_info)

    if quiz_preds is None:
        quiz_preds = pd.DataFrame({quiz_id_col or "problem_id": []})
    write_table(paths["quiz"], quiz_preds)
    summary["quiz_predictions"] = quiz_preds.to_dict("records")
    for row in summary["quiz_predictions"]:
        print("[report] quiz " + " ".join(f"{k}={v}" for k, v in row.items()))

    write_summary(paths["summary"], summary)
    logger.info("[report] summary written to %s", paths["summary"])
    return summary
