"""
Test Suite for Preprocessing Module
===================================

Tests for the weekday filter and the stratified train/test split.
"""

import math

import pytest
import numpy as np
import pandas as pd

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from newsshares.preprocessing import (
    Weekday,
    WEEKDAY_COLUMNS,
    filter_by_weekday,
    channel_labels,
    stratified_split,
    split_features_target,
    preprocess_pipeline,
    _quantile_groups,
)
from newsshares.exceptions import InvalidParameter, InsufficientData
from conftest import make_news_frame, DAYS, CHANNELS


class TestWeekday:
    """Tests for the weekday name mapping."""

    def test_all_days_mapped(self):
        assert len(WEEKDAY_COLUMNS) == 7
        for day in DAYS:
            assert Weekday.parse(day).column == f"weekday_is_{day}"

    def test_parse_case_insensitive(self):
        assert Weekday.parse("  Friday ") is Weekday.FRIDAY
        assert Weekday.parse(Weekday.SUNDAY) is Weekday.SUNDAY

    def test_parse_unknown(self):
        with pytest.raises(InvalidParameter, match="funday"):
            Weekday.parse("funday")

    def test_parse_rejects_expressions(self):
        """Names are looked up, never evaluated."""
        with pytest.raises(InvalidParameter):
            Weekday.parse("monday == 1 or True")


class TestFilterByWeekday:
    """Tests for filter_by_weekday."""

    @pytest.mark.parametrize("day", DAYS)
    def test_only_matching_rows(self, news_frame, day):
        filtered = filter_by_weekday(news_frame, day)

        expected_index = news_frame.index[news_frame[f"weekday_is_{day}"] == 1]
        assert list(filtered.index) == list(expected_index)

    def test_schema(self, news_frame):
        """Weekday, channel and non-predictive columns are all removed."""
        filtered = filter_by_weekday(news_frame, "monday")

        assert not any(col.startswith("weekday_is_") for col in filtered.columns)
        assert not any(col.startswith("data_channel_is_") for col in filtered.columns)
        for col in ("url", "timedelta", "is_weekend"):
            assert col not in filtered.columns
        assert "shares" in filtered.columns

    def test_channel_column(self):
        df = make_news_frame(n_rows=70, days=["monday"])
        filtered = filter_by_weekday(df, "monday")

        assert list(filtered['channel'].cat.categories) == CHANNELS + ["Other"]
        assert list(filtered['channel'].astype(str)) == list(channel_labels(df))
        assert channel_labels(filtered).iloc[6] == "Other"

    def test_input_unchanged(self, news_frame):
        original = news_frame.copy()
        filter_by_weekday(news_frame, "tuesday")

        pd.testing.assert_frame_equal(news_frame, original)

    def test_unknown_day(self, news_frame):
        with pytest.raises(InvalidParameter):
            filter_by_weekday(news_frame, "someday")

    def test_missing_indicator_column(self, news_frame):
        with pytest.raises(InvalidParameter, match="weekday_is_sunday"):
            filter_by_weekday(news_frame.drop(columns=["weekday_is_sunday"]), "sunday")

    def test_no_matching_rows(self):
        """Filtering a weekday with no articles is an error, not an empty result."""
        df = make_news_frame(n_rows=30, days=["monday"])

        with pytest.raises(InsufficientData, match="sunday"):
            filter_by_weekday(df, "sunday")

    def test_channel_labels(self):
        df = make_news_frame(n_rows=14)
        labels = channel_labels(df)

        assert labels.iloc[0] == "lifestyle"
        assert labels.iloc[5] == "world"
        assert labels.iloc[6] == "Other"


class TestStratifiedSplit:
    """Tests for stratified_split."""

    @pytest.fixture
    def filtered(self):
        df = make_news_frame(n_rows=200, days=["wednesday"], seed=3)
        return filter_by_weekday(df, "wednesday")

    def test_partition(self, filtered):
        split = stratified_split(filtered, train_fraction=0.7, seed=1)

        train_idx = set(split.train.index)
        test_idx = set(split.test.index)
        assert train_idx.isdisjoint(test_idx)
        assert train_idx | test_idx == set(filtered.index)
        assert split.n_train + split.n_test == len(filtered)

    def test_deterministic(self, filtered):
        first = stratified_split(filtered, train_fraction=0.7, seed=11)
        second = stratified_split(filtered, train_fraction=0.7, seed=11)

        pd.testing.assert_frame_equal(first.train, second.train)
        pd.testing.assert_frame_equal(first.test, second.test)

    def test_seed_changes_partition(self, filtered):
        first = stratified_split(filtered, seed=1)
        second = stratified_split(filtered, seed=2)

        assert list(first.train.index) != list(second.train.index)

    def test_each_group_sampled(self, filtered):
        """Every shares quantile group contributes its share of training rows."""
        split = stratified_split(filtered, train_fraction=0.3, seed=5)

        groups = pd.Series(_quantile_groups(filtered['shares'].to_numpy()), index=filtered.index)
        for group, members in groups.groupby(groups):
            n_train = members.index.isin(split.train.index).sum()
            assert abs(n_train - 0.3 * len(members)) <= 1

    @pytest.mark.parametrize("n_rows, n_groups", [(10, 2), (20, 4), (30, 5), (100, 5)])
    def test_group_count(self, n_rows, n_groups):
        groups = _quantile_groups(np.arange(n_rows, dtype=float))
        assert len(np.unique(groups)) == n_groups

    def test_constant_response_not_grouped(self):
        assert _quantile_groups(np.full(10, 5.0)) is None

    def test_ten_rows_stratified(self):
        """Ten rows form two groups and each gives half of the training rows."""
        df = pd.DataFrame({'shares': np.arange(10.0) * 100, 'x': np.arange(10.0)})
        split = stratified_split(df, train_fraction=0.6, seed=0)

        assert split.n_train == 6
        assert (split.train['shares'] < 450).sum() == 3

    def test_input_row_order(self, filtered):
        split = stratified_split(filtered, seed=8)

        assert split.train.index.is_monotonic_increasing
        assert split.test.index.is_monotonic_increasing

    def test_exact_fraction_rounding(self):
        """0.7 of a 10-row group is 7 rows, not 8."""
        df = pd.DataFrame({'shares': np.full(10, 100.0), 'x': np.arange(10.0)})
        split = stratified_split(df, train_fraction=0.7, seed=0)

        assert split.n_train == 7
        assert split.n_test == 3

    def test_records_seed_and_fraction(self, filtered):
        split = stratified_split(filtered, train_fraction=0.3, seed=99)

        assert split.seed == 99
        assert split.train_fraction == 0.3

    def test_too_few_rows(self, filtered):
        with pytest.raises(InsufficientData):
            stratified_split(filtered.head(5), seed=1)

    def test_empty_training_side(self, filtered):
        with pytest.raises(InsufficientData):
            stratified_split(filtered.head(10), train_fraction=0.05)


    @pytest.mark.parametrize("fraction", [0.0, 1.0, -0.2, 1.5])
    def test_invalid_fraction(self, filtered, fraction):
        with pytest.raises(InvalidParameter):
            stratified_split(filtered, train_fraction=fraction)


class TestPreprocessPipeline:
    """Tests for the preprocess_pipeline function."""

    def test_pipeline_returns_expected_keys(self, news_frame):
        result = preprocess_pipeline(news_frame, "friday", train_fraction=0.7, seed=3)

        expected_keys = [
            'weekday', 'filtered', 'split',
            'X_train', 'X_test', 'y_train', 'y_test', 'feature_names'
        ]
        for key in expected_keys:
            assert key in result, f"Missing key: {key}"

    def test_pipeline_shapes(self, news_frame):
        result = preprocess_pipeline(news_frame, "friday", seed=3)

        assert result['weekday'] is Weekday.FRIDAY
        assert len(result['X_train']) + len(result['X_test']) == 20
        assert 'shares' not in result['feature_names']
        assert result['X_train'].shape[1] == len(result['feature_names'])

    def test_channel_dummies(self):
        """The channel column becomes one indicator per channel, Other is the baseline."""
        df = make_news_frame(n_rows=70, days=["monday"], seed=4)
        result = preprocess_pipeline(df, "monday", seed=4)

        expected = [f"channel_{c}" for c in CHANNELS]
        for X in (result['X_train'], result['X_test']):
            assert [c for c in X.columns if c.startswith("channel_")] == expected
        assert "channel_Other" not in result['feature_names']
        assert "channel" not in result['feature_names']

    def test_unseen_channel_keeps_column(self):
        filtered = filter_by_weekday(make_news_frame(n_rows=70, days=["monday"]), "monday")

        X, _ = split_features_target(filtered[filtered['channel'] == "tech"])

        assert (X['channel_tech'] == 1.0).all()
        assert (X['channel_world'] == 0.0).all()



if __name__ == "__main__":
    pytest.main([__file__, "-v"])
