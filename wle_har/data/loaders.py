from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

try:  # required dependency for parquet IO
    import pyarrow.dataset as ds
except Exception as exc:  # pragma: no cover - hard fail
    raise ImportError("pyarrow is required for dataset loading") from exc

from wle_har.utils.helpers import cfg_get

logger = logging.getLogger(__name__)


# The raw exports write degenerate window aggregates as "#DIV/0!".
DEFAULT_NA_VALUES = ["NA", "#DIV/0!", ""]

DEFAULT_SOURCES = {
    "train": {
        "url": "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-training.csv",
        "filename": "pml-training.csv",
    },
    "quiz": {
        "url": "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-testing.csv",
        "filename": "pml-testing.csv",
    },
}


@dataclass(frozen=True)
class RawTables:
    pool: pd.DataFrame
    quiz: pd.DataFrame
    pool_path: str
    quiz_path: str


def download_file(url: str, dest: str, timeout: float = 60.0, chunk_size: int = 1 << 16) -> str:
    """Stream url to dest. HTTP errors propagate; partial files are removed."""

    os.makedirs(os.path.dirname(os.path.abspath(dest)), exist_ok=True)
    tmp_path = dest + ".part"
    logger.info("[data] downloading %s -> %s", url, dest)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(tmp_path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException:
        logger.error("[data] download failed for %s", url)
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    os.replace(tmp_path, dest)
    logger.info("[data] saved %s (%d bytes)", dest, os.path.getsize(dest))
    return dest


def ensure_local(source: Dict[str, Any], data_root: str, download: bool = True, timeout: float = 60.0) -> str:
    """Return a local path for a source, downloading it when missing."""

    path = source.get("path") or os.path.join(data_root, source["filename"])
    if os.path.exists(path):
        logger.info("[data] using cached %s", path)
        return path
    url = source.get("url")
    if not download or not url:
        raise FileNotFoundError(f"{path} not found and download is disabled or no url is configured")
    return download_file(url, path, timeout=timeout)


def read_table(path: str, na_values: Optional[List[str]] = None) -> pd.DataFrame:
    """Read a .csv or .parquet table into pandas."""

    if not os.path.exists(path):
        raise FileNotFoundError(path)
    if path.endswith(".parquet"):
        return ds.dataset(path, format="parquet").to_table().to_pandas()
    na = DEFAULT_NA_VALUES if na_values is None else na_values
    # low_memory=False keeps mostly-missing aggregate columns on one dtype
    return pd.read_csv(path, na_values=na, keep_default_na=True, low_memory=False)


def _source_cfg(cfg: Any, name: str) -> Dict[str, Any]:
    source = dict(DEFAULT_SOURCES[name])
    source.update(cfg_get(cfg, ["data", "sources", name], {}) or {})
    return source


def load_tables(cfg: Any) -> RawTables:
    """Fetch-if-missing and read the labeled pool and the unlabeled quiz set."""

    data_root = cfg_get(cfg, ["paths", "data_root"], "data")
    download = bool(cfg_get(cfg, ["data", "download"], True))
    timeout = float(cfg_get(cfg, ["data", "download_timeout_s"], 60.0))
    na_values = cfg_get(cfg, ["data", "na_values"], None)

    pool_path = ensure_local(_source_cfg(cfg, "train"), data_root, download=download, timeout=timeout)
    quiz_path = ensure_local(_source_cfg(cfg, "quiz"), data_root, download=download, timeout=timeout)

    pool = read_table(pool_path, na_values=na_values)
    quiz = read_table(quiz_path, na_values=na_values)
    logger.info("[data] pool rows=%d cols=%d | quiz rows=%d cols=%d", len(pool), pool.shape[1], len(quiz), quiz.shape[1])

    label_col = cfg_get(cfg, ["data", "label_column"], "classe")
    if label_col not in pool.columns:
        raise KeyError(f"label column {label_col!r} missing from {pool_path}")
    return RawTables(pool=pool, quiz=quiz, pool_path=pool_path, quiz_path=quiz_path)
