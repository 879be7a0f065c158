"""Classifier variants used by the report."""

from typing import Any

from wle_har.models.base import BaseClassifier
from wle_har.models.baseline import MajorityClassifier
from wle_har.models.forest import RandomForestCV
from wle_har.models.svm import SVMClassifier
from wle_har.utils.helpers import cfg_get

__all__ = ["BaseClassifier", "MajorityClassifier", "RandomForestCV", "SVMClassifier", "build_classifier"]


def build_classifier(name: str, cfg: Any = None) -> BaseClassifier:
    """Build a classifier from its config name, reading params from models.<name>."""
    params = cfg_get(cfg, ["models", name], {}) or {}
    seed = int(cfg_get(cfg, ["seed"], 0))
    if name == "svm":
        return SVMClassifier(params, seed=seed)
    elif name == "random_forest":
        return RandomForestCV(params, seed=seed)
    elif name == "majority":
        return MajorityClassifier(params, seed=seed)
    else:
        raise ValueError(f"Unknown model: {name}")
