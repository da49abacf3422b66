"""
Data Preprocessing Module
=========================

Turns the raw article table into modeling inputs for one weekday.

Functions:
    - Weekday: explicit weekday name to indicator column mapping
    - filter_by_weekday: Keep one weekday's rows, drop non-predictive columns
    - stratified_split: Train/test split preserving the shares distribution
    - split_features_target: Separate predictors from the response
    - preprocess_pipeline: Filter + split in one call
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional, Tuple, Union

import pandas as pd
import numpy as np
from sklearn.model_selection import train_test_split

from .data_loader import (
    TARGET_COLUMN,
    ID_COLUMNS,
    WEEKEND_COLUMN,
    CHANNEL_PREFIX,
    weekday_columns,
    channel_columns,
)
from .exceptions import InvalidParameter, InsufficientData

logger = logging.getLogger(__name__)

OTHER_CHANNEL = "Other"
CHANNEL_COLUMN = "channel"


class Weekday(str, Enum):
    """Weekday parameter values accepted by the pipeline."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def column(self) -> str:
        """Indicator column selecting this weekday's rows."""
        return WEEKDAY_COLUMNS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, name: Union[str, "Weekday"]) -> "Weekday":
        """
        Resolve a weekday name (case-insensitive).

        Raises:
            InvalidParameter: If the name is not a weekday
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for day in cls:
            if day.value == key:
                return day
        raise InvalidParameter(
            f"Unknown weekday '{name}'. Choose from: {', '.join(d.value for d in cls)}"
        )


WEEKDAY_COLUMNS: Dict[Weekday, str] = {
    Weekday.MONDAY: "weekday_is_monday",
    Weekday.TUESDAY: "weekday_is_tuesday",
    Weekday.WEDNESDAY: "weekday_is_wednesday",
    Weekday.THURSDAY: "weekday_is_thursday",
    Weekday.FRIDAY: "weekday_is_friday",
    Weekday.SATURDAY: "weekday_is_saturday",
    Weekday.SUNDAY: "weekday_is_sunday",
}


@dataclass(frozen=True)
class SplitResult:
    """Disjoint train/test partition of a filtered dataset."""

    train: pd.DataFrame
    test: pd.DataFrame
    train_fraction: float
    seed: int

    @property
    def n_train(self) -> int:
        return len(self.train)

    @property
    def n_test(self) -> int:
        return len(self.test)


def filter_by_weekday(
    df: pd.DataFrame,
    day: Union[str, Weekday]
) -> pd.DataFrame:
    """
    Select the rows published on one weekday.

    The returned frame drops every weekday indicator, the weekend flag,
    the non-predictive columns (url, timedelta) and the channel indicator
    flags. The channel flags are collapsed into a single categorical
    `channel` column. The input frame is left untouched.

    Args:
        df: Article table
        day: Weekday name or Weekday member

    Returns:
        Filtered copy of df

    Raises:
        InvalidParameter: If the weekday is unknown or its column is absent
        InsufficientData: If no row matches the weekday
    """
    weekday = Weekday.parse(day)
    column = weekday.column

    if column not in df.columns:
        raise InvalidParameter(f"Indicator column '{column}' not found in dataset")

    rows = df.loc[df[column] == 1]
    if rows.empty:
        raise InsufficientData(f"No articles found for {weekday.value}")

    chan_cols = channel_columns(df)
    drop_cols = weekday_columns(df) + chan_cols + [WEEKEND_COLUMN, *ID_COLUMNS]
    filtered = rows.drop(columns=[c for c in drop_cols if c in df.columns])

    categories = [col[len(CHANNEL_PREFIX):] for col in chan_cols] + [OTHER_CHANNEL]
    filtered = filtered.assign(
        **{CHANNEL_COLUMN: pd.Categorical(channel_labels(rows), categories=categories)}
    )

    logger.info(
        f"Filtered {weekday.value}: {len(filtered)} of {len(df)} rows, "
        f"{filtered.shape[1]} columns kept"
    )
    return filtered


def channel_labels(df: pd.DataFrame) -> pd.Series:
    """
    Channel name per row.

    Reads the `channel` column of a filtered frame, or collapses the
    channel indicator flags of a raw frame. Rows with no channel flag
    set are labelled "Other".
    """
    if CHANNEL_COLUMN in df.columns:
        return df[CHANNEL_COLUMN].astype(str)

    labels = pd.Series(OTHER_CHANNEL, index=df.index, dtype=object)
    for col in channel_columns(df):
        labels[df[col] == 1] = col[len(CHANNEL_PREFIX):]
    return labels


def _quantile_groups(y: np.ndarray, max_groups: int = 5) -> Optional[np.ndarray]:
    """
    Bin a numeric response into quantile groups for stratification.

    Uses between 2 and max_groups groups, about one group per five rows,
    as caret's createDataPartition does. Tied quantiles merge groups.
    Returns None for a constant response.
    """
    if np.unique(y).size < 2:
        return None
    n_groups = min(max(len(y) // 5, 2), max_groups)
    groups = pd.qcut(y, q=n_groups, labels=False, duplicates="drop")
    return np.asarray(groups, dtype=int)


def stratified_split(
    df: pd.DataFrame,
    train_fraction: float = 0.7,
    seed: int = 42,
    target: str = TARGET_COLUMN,
    min_rows: int = 10
) -> SplitResult:
    """
    Split rows into training and test sets, stratified on the response.

    The response is cut into quantile groups (pd.qcut) and the groups are
    passed to train_test_split as strata. If the groups are too small to
    stratify, the split falls back to plain random sampling. The same
    frame, seed and fraction always give the same partition.

    Args:
        df: Filtered dataset
        train_fraction: Fraction of rows assigned to training
        seed: random_state of the split
        target: Response column used for stratification
        min_rows: Minimum rows required to split

    Returns:
        SplitResult with train/test frames in input row order

    Raises:
        InvalidParameter: If train_fraction is outside (0, 1)
        InsufficientData: If there are too few rows or a side ends up empty
    """
    if not 0 < train_fraction < 1:
        raise InvalidParameter(f"train_fraction must be in (0, 1), got {train_fraction}")

    n_rows = len(df)
    if n_rows < max(min_rows, 2):
        raise InsufficientData(f"Need at least {max(min_rows, 2)} rows to split, got {n_rows}")

    # round() guards against 0.7 * 10 == 7.000000000000001
    n_train = int(math.floor(round(train_fraction * n_rows, 10)))
    if n_train == 0 or n_train == n_rows:
        raise InsufficientData(
            f"Split of {n_rows} rows at train_fraction={train_fraction} leaves an empty side"
        )

    groups = _quantile_groups(df[target].to_numpy(dtype=float))
    positions = np.arange(n_rows)
    try:
        train_pos, test_pos = train_test_split(
            positions, train_size=n_train, random_state=seed, stratify=groups
        )
    except ValueError as e:
        logger.warning(f"Cannot stratify {n_rows} rows ({e}); using a random split")
        groups = None
        train_pos, test_pos = train_test_split(
            positions, train_size=n_train, random_state=seed
        )

    train = df.iloc[np.sort(train_pos)]
    test = df.iloc[np.sort(test_pos)]

    n_groups = 1 if groups is None else len(np.unique(groups))
    logger.info(
        f"Stratified split (seed={seed}, train_fraction={train_fraction}): "
        f"{len(train)} train rows, {len(test)} test rows, {n_groups} groups"
    )
    return SplitResult(train=train, test=test, train_fraction=train_fraction, seed=seed)


def split_features_target(
    df: pd.DataFrame,
    target: str = TARGET_COLUMN
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Separate the numeric predictors from the response column.

    The `channel` column is one-hot encoded with "Other" as the reference
    level. Its categories are fixed by filter_by_weekday, so train and test
    frames get the same dummy columns.
    """
    features = df.drop(columns=[target])
    if CHANNEL_COLUMN in features.columns:
        features = pd.get_dummies(features, columns=[CHANNEL_COLUMN], dtype=float)
        features = features.drop(columns=[f"{CHANNEL_COLUMN}_{OTHER_CHANNEL}"], errors="ignore")
    X = features.select_dtypes(include=[np.number])
    y = df[target].astype(float)
    return X, y


def preprocess_pipeline(
    df: pd.DataFrame,
    day: Union[str, Weekday],
    train_fraction: float = 0.7,
    seed: int = 42,
    target: str = TARGET_COLUMN,
    min_rows: int = 10
) -> Dict[str, Any]:
    """
    Filter one weekday and split it into modeling inputs.

    Args:
        df: Raw article table
        day: Weekday to keep
        train_fraction: Fraction of rows assigned to training
        seed: Split seed
        target: Response column
        min_rows: Minimum filtered rows required to split

    Returns:
        Dictionary containing:
            - weekday: Resolved Weekday
            - filtered: Filtered DataFrame
            - split: SplitResult
            - X_train, X_test, y_train, y_test: Modeling arrays
            - feature_names: Predictor column names
    """
    weekday = Weekday.parse(day)

    logger.info("=" * 60)
    logger.info(f"STARTING DATA PREPROCESSING ({weekday.value})")
    logger.info("=" * 60)

    filtered = filter_by_weekday(df, weekday)
    split = stratified_split(
        filtered,
        train_fraction=train_fraction,
        seed=seed,
        target=target,
        min_rows=min_rows
    )

    X_train, y_train = split_features_target(split.train, target)
    X_test, y_test = split_features_target(split.test, target)

    result = {
        'weekday': weekday,
        'filtered': filtered,
        'split': split,
        'X_train': X_train,
        'X_test': X_test,
        'y_train': y_train,
        'y_test': y_test,
        'feature_names': list(X_train.columns)
    }

    logger.info("=" * 60)
    logger.info("PREPROCESSING COMPLETE")
    logger.info(f"  Training samples: {len(X_train)}")
    logger.info(f"  Test samples: {len(X_test)}")
    logger.info(f"  Predictors: {X_train.shape[1]}")
    logger.info("=" * 60)

    return result


def print_preprocessing_summary(result: Dict[str, Any]) -> None:
    """
    Print a summary of the preprocessing results.

    Args:
        result: Dictionary from preprocess_pipeline
    """
    split: SplitResult = result['split']
    print("\n" + "=" * 50)
    print(f"PREPROCESSING SUMMARY ({result['weekday'].label})")
    print("=" * 50)
    print(f"Filtered rows: {len(result['filtered'])}")
    print(f"Training samples: {split.n_train}")
    print(f"Test samples: {split.n_test}")
    print(f"Predictors: {len(result['feature_names'])}")
    print(f"\nTrain fraction: {split.train_fraction}")
    print(f"Seed: {split.seed}")
    print("=" * 50 + "\n")
