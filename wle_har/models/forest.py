from __future__ import annotations

import logging
from typing import Dict, Union

import numpy as np
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import GridSearchCV, StratifiedKFold
from sklearn.pipeline import Pipeline, make_pipeline

from .base import AoD, AoS, BaseClassifier, make_imputer, to_numpy

logger = logging.getLogger(__name__)

ForestModel = Union[RandomForestClassifier, Pipeline]


def _forest(model: ForestModel) -> RandomForestClassifier:
    return model[-1] if isinstance(model, Pipeline) else model


class RandomForestCV(BaseClassifier):
    """Random forest tuned by stratified k-fold cross-validation.

    The best mean fold accuracy is an out-of-sample estimate that does not
    need a validation partition; the winning setting is refit on all of the
    training data. Folds fan out over ``n_jobs`` workers while each forest
    grows its trees in a single process.
    """

    name = "random_forest"
    needs_holdout = False

    def fit(self, features: AoD, labels: AoS) -> ForestModel:
        params = dict(self.params)
        cv_folds = int(params.pop("cv_folds", 10))
        n_jobs = params.pop("n_jobs", None)
        grid = params.pop("max_features_grid", ["sqrt"])
        impute = params.pop("impute", "median")
        params.setdefault("n_estimators", 200)
        params.setdefault("oob_score", False)
        params["random_state"] = self.seed

        X = to_numpy(features)
        y = to_numpy(labels)
        self._remember_features(features)

        forest = RandomForestClassifier(n_jobs=1, **params)
        imputer = make_imputer(impute)
        if imputer is None:
            estimator, key = forest, "max_features"
        else:
            estimator, key = make_pipeline(imputer, forest), "randomforestclassifier__max_features"

        search = GridSearchCV(
            estimator,
            param_grid={key: list(grid)},
            scoring="accuracy",
            cv=StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=self.seed),
            n_jobs=n_jobs,
            refit=True,
        )
        search.fit(X, y)
        model = search.best_estimator_

        fold_scores = [
            float(search.cv_results_[f"split{i}_test_score"][search.best_index_]) for i in range(cv_folds)
        ]
        self.fit_info = {
            "cv_folds": cv_folds,
            "cv_accuracy": float(search.best_score_),
            "cv_fold_accuracy": fold_scores,
            "best_params": {k.split("__")[-1]: v for k, v in search.best_params_.items()},
        }
        if params.get("oob_score"):
            self.fit_info["oob_accuracy"] = float(_forest(model).oob_score_)
        logger.info(
            "[train] random_forest folds=%d best=%s cv_acc=%.4f (std=%.4f)",
            cv_folds,
            self.fit_info["best_params"],
            self.fit_info["cv_accuracy"],
            float(np.std(fold_scores)),
        )
        return model

    def get_feature_importance(self, model: ForestModel) -> Dict[str, float]:
        return {name: float(v) for name, v in zip(self.feature_names, _forest(model).feature_importances_)}
