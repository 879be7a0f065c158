from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Union

import numpy as np
import pandas as pd
from sklearn.impute import SimpleImputer

Model = Any
AoD = Union[np.ndarray, pd.DataFrame]
AoS = Union[np.ndarray, pd.Series]


def to_numpy(values: Union[AoD, AoS]) -> np.ndarray:
    return values.to_numpy() if hasattr(values, "to_numpy") else np.asarray(values)


def make_imputer(strategy: str | None) -> SimpleImputer | None:
    """Median/mean imputer fitted with the model, or None when ``strategy`` is falsy."""
    if not strategy:
        return None
    # empty columns stay (as zeros) so importances line up with the mask
    return SimpleImputer(strategy=strategy, keep_empty_features=True)


class BaseClassifier(ABC):
    """Common classifier capability shared by the report's model variants.

    ``fit`` returns the fitted model object and ``predict`` takes it back, so
    one instance can be reused across partitions. ``fit_info`` holds whatever
    internal estimates the last fit produced (e.g. cross-validated accuracy).
    """

    name = "base"
    needs_holdout = True

    def __init__(self, params: Dict[str, Any] | None = None, seed: int = 0):
        self.params = dict(params or {})
        self.seed = seed
        self.feature_names: list[str] = []
        self.fit_info: Dict[str, Any] = {}

    @abstractmethod
    def fit(self, features: AoD, labels: AoS) -> Model:
        raise NotImplementedError

    def predict(self, model: Model, features: AoD) -> np.ndarray:
        return model.predict(to_numpy(features))

    def get_feature_importance(self, model: Model) -> Dict[str, float]:
        # models without a native importance report zeros so rankings still join
        return {name: 0.0 for name in self.feature_names}

    def _remember_features(self, features: AoD) -> None:
        if hasattr(features, "columns"):
            self.feature_names = [str(c) for c in features.columns]
        else:
            self.feature_names = [f"feature_{i}" for i in range(np.asarray(features).shape[1])]
