from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, List

from wle_har.data.features import DEFAULT_IDENTIFIER_COLUMNS
from wle_har.data.loaders import load_tables
from wle_har.utils.helpers import cfg_get, load_yaml

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


EXPECTED_LABELS: List[str] = ["A", "B", "C", "D", "E"]


def check_tables(cfg: Any) -> List[str]:
    """Return a list of problems found in the pool/quiz files (empty means OK)."""

    label_col = cfg_get(cfg, ["data", "label_column"], "classe")
    quiz_id_col = cfg_get(cfg, ["data", "quiz_id_column"], "problem_id")
    identifier_cols = cfg_get(cfg, ["features", "identifier_columns"], list(DEFAULT_IDENTIFIER_COLUMNS))

    tables = load_tables(cfg)
    pool, quiz = tables.pool, tables.quiz
    failures: List[str] = []

    missing_ids = [c for c in identifier_cols if c not in pool.columns]
    if missing_ids:
        failures.append(f"pool lacks identifier columns {missing_ids}")

    seen = sorted(pool[label_col].dropna().astype(str).unique().tolist())
    if EXPECTED_LABELS is not None and seen != EXPECTED_LABELS:
        failures.append(f"pool labels {seen} != expected {EXPECTED_LABELS}")
    logger.info("pool label counts: %s", pool[label_col].value_counts().sort_index().to_dict())

    if label_col in quiz.columns:
        failures.append(f"quiz unexpectedly carries the label column {label_col!r}")
    if quiz_id_col not in quiz.columns:
        failures.append(f"quiz lacks id column {quiz_id_col!r}")

    pool_feats = set(pool.columns) - {label_col}
    quiz_feats = set(quiz.columns) - {quiz_id_col}
    if pool_feats != quiz_feats:
        failures.append(
            f"schema mismatch: only in pool={sorted(pool_feats - quiz_feats)} only in quiz={sorted(quiz_feats - pool_feats)}"
        )

    all_missing = [c for c in quiz.columns if quiz[c].isna().all()]
    logger.info("quiz rows=%d, columns entirely missing=%d", len(quiz), len(all_missing))
    return failures


def main(cfg_path: str) -> int:
    cfg = load_yaml(cfg_path)
    failures = check_tables(cfg)
    if failures:
        for msg in failures:
            logger.error(msg)
        logger.error("Smoke check FAILED (%d problems)", len(failures))
        return 1
    logger.info("Smoke check PASSED")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke test the downloaded pool/quiz files")
    parser.add_argument("--cfg", default="configs/base.yaml", help="Path to YAML config")
    args = parser.parse_args()
    sys.exit(main(args.cfg))
