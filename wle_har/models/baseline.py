from __future__ import annotations

from sklearn.dummy import DummyClassifier

from .base import AoD, AoS, BaseClassifier, to_numpy


class MajorityClassifier(BaseClassifier):
    """Always predicts the most frequent training label."""

    name = "majority"
    needs_holdout = True

    def fit(self, features: AoD, labels: AoS) -> DummyClassifier:
        self._remember_features(features)
        model = DummyClassifier(strategy="most_frequent")
        model.fit(to_numpy(features), to_numpy(labels))
        self.fit_info = {"majority_label": str(model.classes_[model.class_prior_.argmax()])}
        return model
