from __future__ import annotations

import logging
from typing import Union

from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC

from .base import AoD, AoS, BaseClassifier, make_imputer, to_numpy

logger = logging.getLogger(__name__)

SVMModel = Union[SVC, Pipeline]


class SVMClassifier(BaseClassifier):
    """Single SVC fit on the whole training partition.

    There is no internal resampling, so error estimates come from the
    validation/test partitions. Missing readings are imputed with training
    statistics before scaling (``impute``, default median).
    """

    name = "svm"
    needs_holdout = True

    def fit(self, features: AoD, labels: AoS) -> SVMModel:
        params = dict(self.params)
        scale = bool(params.pop("scale", True))
        impute = params.pop("impute", "median")
        params.setdefault("kernel", "rbf")
        params.setdefault("random_state", self.seed)

        self._remember_features(features)
        svc = SVC(**params)
        steps = [s for s in (make_imputer(impute), StandardScaler() if scale else None) if s is not None]
        model = make_pipeline(*steps, svc) if steps else svc
        model.fit(to_numpy(features), to_numpy(labels))
        self.fit_info = {"n_support": int(svc.n_support_.sum())}
        logger.info(
            "[train] svm kernel=%s impute=%s scale=%s support_vectors=%d",
            params["kernel"],
            impute,
            scale,
            self.fit_info["n_support"],
        )
        return model
