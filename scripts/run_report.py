"""Build the activity-quality report end to end.

Usage:
    python -m scripts.run_report \
        --config configs/base.yaml \
        --run my_report \
        --set models.random_forest.n_jobs=4
"""

from __future__ import annotations

import argparse
import logging

from wle_har import pipeline
from wle_har.utils.config import load_config, log_resolved, prepare_run_dir, seed_everything
from wle_har.utils.helpers import cfg_get

try:
    import wandb
except ImportError:
    wandb = None


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    logger = logging.getLogger(__name__)

    ap = argparse.ArgumentParser(description="Train SVM + random forest and report accuracy")
    ap.add_argument("--config", required=True, help="Base config YAML")
    ap.add_argument("--extra-config", action="append", default=[], help="Additional YAML merged over the base")
    ap.add_argument("--run", default=None, help="Run name under runs/<run> (default: timestamp)")
    ap.add_argument("--set", dest="overrides", action="append", default=[], help="Override key.path=value")
    args = ap.parse_args()

    try:
        cfg = load_config(args.config, args.extra_config, args.overrides)
    except (OSError, ValueError) as e:
        raise SystemExit(f"Bad config: {e}")

    seed_everything(int(cfg_get(cfg, ["seed"], 0)))
    run_dir = prepare_run_dir(cfg, args.run)
    log_resolved(cfg, run_dir)
    logger.info("[report] run dir %s", run_dir)

    wb_cfg = cfg.get("wandb", {}) or {}
    if wandb is not None and wb_cfg.get("enabled", False):
        try:
            wandb.init(
                project=wb_cfg.get("project", "wle-har"),
                entity=wb_cfg.get("entity", None),
                name=args.run,
                config=cfg,
                dir=run_dir,
            )
        except Exception as e:
            logger.warning("wandb init failed: %s", e)

    pipeline.main(cfg, run_dir)


if __name__ == "__main__":
    main()
