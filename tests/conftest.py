"""
Shared fixtures: synthetic article tables with the news dataset schema.
"""

import sys
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
CHANNELS = ["lifestyle", "entertainment", "bus", "socmed", "tech", "world"]


def make_news_frame(n_rows=140, days=None, seed=0, shares=None):
    """
    Build a synthetic article table.

    Rows cycle through `days` (default: all seven) and through the six
    channels plus "Other". `shares` may be an array overriding the
    default log-normal response.
    """
    rng = np.random.default_rng(seed)
    days = days or DAYS

    df = pd.DataFrame({
        'url': [f"http://example.com/article/{i}" for i in range(n_rows)],
        'timedelta': rng.integers(8, 731, n_rows).astype(float),
        'n_tokens_title': rng.integers(4, 20, n_rows).astype(float),
        'n_tokens_content': rng.integers(100, 2000, n_rows).astype(float),
        'num_imgs': rng.integers(0, 20, n_rows).astype(float),
        'num_videos': rng.integers(0, 5, n_rows).astype(float),
        'global_subjectivity': rng.uniform(0, 1, n_rows),
        'global_sentiment_polarity': rng.uniform(-0.5, 0.5, n_rows),
    })

    for i, channel in enumerate(CHANNELS):
        df[f"data_channel_is_{channel}"] = (np.arange(n_rows) % 7 == i).astype(float)

    day_of_row = [days[i % len(days)] for i in range(n_rows)]
    for day in DAYS:
        df[f"weekday_is_{day}"] = [1.0 if d == day else 0.0 for d in day_of_row]
    df['is_weekend'] = df['weekday_is_saturday'] + df['weekday_is_sunday']

    if shares is None:
        shares = np.round(np.exp(rng.normal(7, 1, n_rows)))
    df['shares'] = np.asarray(shares, dtype=float)
    return df


@pytest.fixture
def news_frame():
    """140 rows, 20 per weekday."""
    return make_news_frame()


@pytest.fixture
def linear_frame():
    """100 Monday rows with shares = 10 * x1 + small noise."""
    rng = np.random.default_rng(7)
    x1 = rng.uniform(1, 100, 100)
    shares = np.round(10 * x1 + rng.normal(0, 1, 100))
    df = make_news_frame(n_rows=100, days=["monday"], seed=7, shares=shares)
    df.insert(2, 'x1', x1)
    return df


@pytest.fixture
def fast_config():
    """Configuration with small cross-validation budgets."""
    return {
        'data': {'target': 'shares'},
        'split': {'train_fraction': 0.7, 'seed': 42, 'min_rows': 10},
        'tree': {'cv_folds': 5, 'min_samples_split': 10, 'min_samples_leaf': 5},
        'boosting': {
            'grid': {
                'n_estimators': [50, 100, 150],
                'interaction_depth': [1, 2, 3],
                'shrinkage': [0.1],
                'min_samples_leaf': [10],
            },
            'cv_folds': 3,
            'cv_repeats': 1,
            'subsample': 0.5,
        },
        'linear': {'strict_collinearity': False},
        'eda': {'predictors': ['n_tokens_title', 'num_imgs']},
    }
