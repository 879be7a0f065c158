from __future__ import annotations

"""Misc helpers."""

from typing import Any, Dict, Iterable

import yaml


def load_yaml(path: str) -> Dict[str, Any]:
    """Load a YAML file and return as dict (empty files give {})."""
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def deep_update(base: Dict[str, Any], upd: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge upd into base, returning new dict."""
    out = dict(base)
    for k, v in upd.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def cfg_get(cfg: Any, path: Iterable[str], default=None):
    """Navigate nested config (dict or object) by path."""
    cur = cfg
    for key in path:
        if cur is None:
            return default
        if isinstance(cur, dict):
            cur = cur.get(key, default)
        else:
            cur = getattr(cur, key, default)
    return cur if cur is not None else default


def set_path(cfg: Dict[str, Any], path: Iterable[str], value: Any) -> Dict[str, Any]:
    """Return a copy of cfg with value written at the nested path."""
    keys = list(path)
    if not keys:
        raise ValueError("empty config path")
    upd: Dict[str, Any] = {keys[-1]: value}
    for key in reversed(keys[:-1]):
        upd = {key: upd}
    return deep_update(cfg, upd)
