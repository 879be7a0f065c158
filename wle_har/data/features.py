"""Feature mask: which columns of the pool are model inputs.

The mask is derived from the training partition only and then applied
unchanged to validation, test and quiz frames.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from wle_har.utils.helpers import cfg_get

logger = logging.getLogger(__name__)


DEFAULT_IDENTIFIER_COLUMNS = (
    "X",
    "user_name",
    "raw_timestamp_part_1",
    "raw_timestamp_part_2",
    "cvtd_timestamp",
    "new_window",
    "num_window",
)


@dataclass(frozen=True)
class FeatureMask:
    columns: Tuple[str, ...]
    dropped: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.columns)

    def drop_reasons(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for reason in self.dropped.values():
            out[reason] = out.get(reason, 0) + 1
        return out


def build_feature_mask(
    train: pd.DataFrame,
    label_col: str,
    identifier_cols: Iterable[str] = DEFAULT_IDENTIFIER_COLUMNS,
    max_missing_frac: float = 1.0,
    reference: Optional[pd.DataFrame] = None,
    extra_exclude: Sequence[str] = (),
) -> FeatureMask:
    """Compute the feature mask from the training partition.

    Columns are dropped, in this order of precedence, as:
    - ``label``: the label column
    - ``identifier``: row id, subject, raw timestamps, window id
    - ``excluded``: anything listed in extra_exclude (e.g. the quiz key)
    - ``missing_in_reference``: entirely missing in the reference frame
    - ``missing_frac``: missing fraction on train above max_missing_frac
    - ``degenerate_variance``: variance undefined (fewer than two observed
      values) or zero on train

    Non-numeric candidate columns raise ValueError.
    """

    ids = set(identifier_cols)
    excluded = set(extra_exclude)
    dropped: Dict[str, str] = {}
    candidates = []

    for col in train.columns:
        if col == label_col:
            dropped[col] = "label"
        elif col in ids:
            dropped[col] = "identifier"
        elif col in excluded:
            dropped[col] = "excluded"
        elif reference is not None and (col not in reference.columns or reference[col].isna().all()):
            dropped[col] = "missing_in_reference"
        else:
            candidates.append(col)

    non_numeric = [c for c in candidates if not pd.api.types.is_numeric_dtype(train[c])]
    if non_numeric:
        raise ValueError(f"non-numeric feature columns: {non_numeric}")

    kept = []
    for col in candidates:
        values = train[col]
        missing = float(values.isna().mean()) if len(values) else 1.0
        if missing > max_missing_frac:
            dropped[col] = "missing_frac"
            continue
        var = values.var(skipna=True)
        if var is None or np.isnan(var) or var == 0:
            dropped[col] = "degenerate_variance"
            continue
        kept.append(col)

    mask = FeatureMask(columns=tuple(kept), dropped=dropped)
    logger.info("[features] kept=%d dropped=%d reasons=%s", len(mask), len(dropped), mask.drop_reasons())
    return mask


def apply_feature_mask(frame: pd.DataFrame, mask: FeatureMask) -> pd.DataFrame:
    """Select the masked columns in mask order. The label column need not be present."""

    missing = [c for c in mask.columns if c not in frame.columns]
    if missing:
        raise KeyError(f"frame lacks masked feature columns: {missing}")
    return frame.loc[:, list(mask.columns)]


def mask_from_cfg(train: pd.DataFrame, cfg: Any, reference: Optional[pd.DataFrame] = None) -> FeatureMask:
    label_col = cfg_get(cfg, ["data", "label_column"], "classe")
    identifier_cols = cfg_get(cfg, ["features", "identifier_columns"], list(DEFAULT_IDENTIFIER_COLUMNS))
    max_missing = float(cfg_get(cfg, ["features", "max_missing_frac"], 1.0))
    use_reference = bool(cfg_get(cfg, ["features", "drop_missing_in_reference"], True))
    extra = [c for c in [cfg_get(cfg, ["data", "quiz_id_column"], None)] if c]
    return build_feature_mask(
        train,
        label_col,
        identifier_cols=identifier_cols,
        max_missing_frac=max_missing,
        reference=reference if use_reference else None,
        extra_exclude=extra,
    )
