"""
config.py
----------
YAML load/merge, validation, run naming, seed, and path helpers.

Flow:
- load base.yaml + optional override configs; apply CLI key=value overrides
- validate required fields (paths, label column, split fractions, models)
- set seeds for random/numpy
- resolve run_name and create runs/<run_name> with subdirs (logs, report)
- emit resolved config for logging
"""

from __future__ import annotations

import json
import logging
import os
import random
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import yaml

from wle_har.utils.helpers import cfg_get, deep_update, load_yaml, set_path

logger = logging.getLogger(__name__)

KNOWN_MODELS = ("svm", "random_forest", "majority")

REQUIRED_FIELDS = (
    ("paths", "runs_root"),
    ("paths", "data_root"),
    ("data", "label_column"),
)


def parse_overrides(items: Optional[Iterable[str]]) -> Dict[str, Any]:
    """Turn ["a.b=1", "c=x"] into a nested dict; values are parsed as YAML scalars."""
    out: Dict[str, Any] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"override must look like key.path=value, got {item!r}")
        key, raw = item.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"override has an empty key: {item!r}")
        out = set_path(out, key.split("."), yaml.safe_load(raw))
    return out


def load_config(
    config_path: str,
    extra_paths: Optional[List[str]] = None,
    overrides: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """Load base config, merge extra YAML files in order, then CLI overrides."""
    cfg = load_yaml(config_path)
    for path in extra_paths or []:
        cfg = deep_update(cfg, load_yaml(path))
    cfg = deep_update(cfg, parse_overrides(overrides))
    validate_config(cfg)
    return cfg


def validate_config(cfg: Dict[str, Any]) -> None:
    missing = [".".join(p) for p in REQUIRED_FIELDS if cfg_get(cfg, p) is None]
    if missing:
        raise ValueError(f"config missing required fields: {', '.join(missing)}")

    for name in ("train_frac", "validation_frac"):
        frac = float(cfg_get(cfg, ["splits", name], 0.5))
        if not 0.0 < frac < 1.0:
            raise ValueError(f"splits.{name} must be in (0, 1), got {frac}")

    models = cfg_get(cfg, ["models", "enabled"], []) or []
    unknown = [m for m in models if m not in KNOWN_MODELS]
    if unknown:
        raise ValueError(f"unknown models in models.enabled: {unknown} (known: {list(KNOWN_MODELS)})")

    max_missing = float(cfg_get(cfg, ["features", "max_missing_frac"], 1.0))
    if not 0.0 <= max_missing <= 1.0:
        raise ValueError(f"features.max_missing_frac must be in [0, 1], got {max_missing}")


def seed_everything(seed: int) -> None:
    random.seed(seed)
    np.random.seed(seed)


def resolve_run_name(cfg: Dict[str, Any], run_name: Optional[str] = None) -> str:
    if run_name:
        return run_name
    configured = cfg_get(cfg, ["run", "name"], None)
    if configured:
        return str(configured)
    return datetime.now().strftime("report_%Y%m%d_%H%M%S")


def prepare_run_dir(cfg: Dict[str, Any], run_name: Optional[str] = None) -> str:
    """Create runs/<run_name>/{logs,report} and return the run dir."""
    runs_root = cfg_get(cfg, ["paths", "runs_root"], "runs")
    run_dir = os.path.join(runs_root, resolve_run_name(cfg, run_name))
    for sub in ("logs", "report"):
        os.makedirs(os.path.join(run_dir, sub), exist_ok=True)
    return run_dir


def log_resolved(cfg: Dict[str, Any], run_dir: str) -> str:
    log_path = os.path.join(run_dir, "logs", "stdout.log")
    os.makedirs(os.path.dirname(log_path), exist_ok=True)
    with open(log_path, "a") as f:
        f.write("# Resolved config\n")
        f.write(json.dumps(cfg, indent=2, default=str))
        f.write("\n")
    logger.info("[config] resolved config appended to %s", log_path)
    return log_path
