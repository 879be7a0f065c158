"""Tests for the feature mask."""

import numpy as np
import pandas as pd
import pytest

from wle_har.data.features import (
    DEFAULT_IDENTIFIER_COLUMNS,
    FeatureMask,
    apply_feature_mask,
    build_feature_mask,
    mask_from_cfg,
)
from wle_har.data.splits import stratified_partition

SENSORS = [f"sensor_{j}" for j in range(10)]


@pytest.fixture
def parts(pool):
    return stratified_partition(pool, "classe", seed=0)


class TestBuildFeatureMask:
    def test_keeps_informative_sensors_only(self, parts, quiz):
        mask = build_feature_mask(parts.train, "classe", reference=quiz, max_missing_frac=0.95)
        assert list(mask.columns) == SENSORS

    def test_identifiers_and_label_never_kept(self, parts):
        mask = build_feature_mask(parts.train, "classe", max_missing_frac=1.0)
        kept = set(mask.columns)
        assert "classe" not in kept
        assert kept.isdisjoint(DEFAULT_IDENTIFIER_COLUMNS)
        assert mask.dropped["classe"] == "label"
        assert all(mask.dropped[c] == "identifier" for c in DEFAULT_IDENTIFIER_COLUMNS)

    def test_zero_and_undefined_variance_dropped(self, parts):
        mask = build_feature_mask(parts.train, "classe", max_missing_frac=1.0)
        assert mask.dropped["amplitude_yaw_belt"] == "degenerate_variance"
        assert mask.dropped["kurtosis_yaw_belt"] == "degenerate_variance"

    def test_single_observed_value_is_degenerate(self):
        train = pd.DataFrame({"a": [1.0, np.nan, np.nan], "b": [1.0, 2.0, 3.0], "classe": list("ABC")})
        mask = build_feature_mask(train, "classe", identifier_cols=())
        assert mask.columns == ("b",)
        assert mask.dropped["a"] == "degenerate_variance"

    def test_missing_fraction_threshold(self, parts):
        mask = build_feature_mask(parts.train, "classe", max_missing_frac=0.5)
        assert mask.dropped["max_roll_belt"] == "missing_frac"
        assert mask.dropped["kurtosis_yaw_belt"] == "missing_frac"

    def test_reference_missing_columns_dropped(self, parts, quiz):
        mask = build_feature_mask(parts.train, "classe", reference=quiz, max_missing_frac=1.0)
        assert mask.dropped["max_roll_belt"] == "missing_in_reference"
        assert "max_roll_belt" not in mask.columns

    def test_non_numeric_column_raises(self, parts):
        train = parts.train.copy()
        train["free_text"] = "x"
        with pytest.raises(ValueError, match="non-numeric"):
            build_feature_mask(train, "classe")

    def test_computed_from_train_only(self, parts):
        # poisoning the other partitions must not change the mask
        before = build_feature_mask(parts.train, "classe", max_missing_frac=0.95)
        parts.validation.loc[:, "sensor_0"] = np.nan
        after = build_feature_mask(parts.train, "classe", max_missing_frac=0.95)
        assert before == after

    def test_drop_reasons_counts(self, parts, quiz):
        mask = build_feature_mask(parts.train, "classe", reference=quiz, max_missing_frac=0.95)
        reasons = mask.drop_reasons()
        assert reasons["identifier"] == len(DEFAULT_IDENTIFIER_COLUMNS)
        assert reasons["label"] == 1
        assert sum(reasons.values()) == len(mask.dropped)


class TestApplyFeatureMask:
    def test_same_columns_for_every_partition(self, parts, quiz):
        mask = build_feature_mask(parts.train, "classe", reference=quiz, max_missing_frac=0.95)
        frames = [parts.train, parts.validation, parts.test, quiz]
        cols = [list(apply_feature_mask(f, mask).columns) for f in frames]
        assert all(c == list(mask.columns) for c in cols)

    def test_quiz_without_label(self, parts, quiz):
        assert "classe" not in quiz.columns
        mask = build_feature_mask(parts.train, "classe", reference=quiz, max_missing_frac=0.95)
        X_quiz = apply_feature_mask(quiz, mask)
        assert "classe" not in X_quiz.columns
        assert len(X_quiz) == len(quiz)

    def test_missing_masked_column_raises(self, parts):
        mask = FeatureMask(columns=("sensor_0", "not_there"))
        with pytest.raises(KeyError, match="not_there"):
            apply_feature_mask(parts.test, mask)


class TestMaskFromConfig:
    def test_reference_filter_can_be_disabled(self, parts, quiz, small_cfg):
        small_cfg["features"] = {"max_missing_frac": 1.0, "drop_missing_in_reference": False}
        mask = mask_from_cfg(parts.train, small_cfg, reference=quiz)
        assert "missing_in_reference" not in mask.drop_reasons()

    def test_custom_identifier_columns(self, parts, small_cfg):
        small_cfg["features"]["identifier_columns"] = list(DEFAULT_IDENTIFIER_COLUMNS) + ["sensor_9"]
        mask = mask_from_cfg(parts.train, small_cfg)
        assert "sensor_9" not in mask.columns
        assert mask.dropped["sensor_9"] == "identifier"
