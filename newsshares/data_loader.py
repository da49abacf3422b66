"""
Data Loader Module
==================

Handles CSV ingestion, configuration loading and dataset validation.

Functions:
    - load_config: Load YAML configuration file
    - load_data: Load the news article CSV
    - validate_data: Check the dataset schema and one-hot invariants
    - get_data_summary: Generate basic statistics
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple, Union

import pandas as pd
import numpy as np
import yaml

from .exceptions import DataValidationError

logger = logging.getLogger(__name__)

TARGET_COLUMN = "shares"
ID_COLUMNS = ("url", "timedelta")
WEEKEND_COLUMN = "is_weekend"
WEEKDAY_PREFIX = "weekday_is_"
CHANNEL_PREFIX = "data_channel_is_"


def load_config(config_path: Union[str, Path] = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    logger.info(f"Loaded configuration from {config_path}")
    return config or {}


def load_data(
    file_path: Union[str, Path],
    target: str = TARGET_COLUMN,
    sep: str = ","
) -> pd.DataFrame:
    """
    Load the article table from a delimited file with a header row.

    Header names are stripped of surrounding whitespace; the published
    Online News Popularity CSV prefixes every name after the first with
    a space.

    Args:
        file_path: Path to the CSV file
        target: Name of the response column
        sep: Field delimiter

    Returns:
        DataFrame containing the loaded data

    Raises:
        FileNotFoundError: If data file doesn't exist
        DataValidationError: If the response column is missing
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Data file not found: {file_path}")

    df = pd.read_csv(file_path, sep=sep, skipinitialspace=True)
    df.columns = [str(col).strip() for col in df.columns]
    logger.info(f"Loaded data from {file_path}: {df.shape[0]} rows × {df.shape[1]} columns")

    if target not in df.columns:
        raise DataValidationError(
            f"Response column '{target}' not found. Columns: {list(df.columns)}"
        )

    return df


def weekday_columns(df: pd.DataFrame) -> list:
    """Return the weekday indicator columns present in df."""
    return [col for col in df.columns if col.startswith(WEEKDAY_PREFIX)]


def channel_columns(df: pd.DataFrame) -> list:
    """Return the channel indicator columns present in df."""
    return [col for col in df.columns if col.startswith(CHANNEL_PREFIX)]


def validate_data(
    df: pd.DataFrame,
    target: str = TARGET_COLUMN,
    strict: bool = True
) -> Tuple[bool, Dict[str, Any]]:
    """
    Validate the article table.

    Checks:
        - Response column present, numeric and non-negative
        - Exactly one weekday flag set per row
        - At most one channel flag set per row
        - No missing values
        - No duplicate rows

    Args:
        df: DataFrame to validate
        target: Name of the response column
        strict: If True, raise errors on validation failure

    Returns:
        Tuple of (is_valid, validation_report)
    """
    report = {
        "total_rows": len(df),
        "total_columns": len(df.columns),
        "column_names": list(df.columns),
        "issues": []
    }

    # Check 1: Response column
    if target not in df.columns:
        report["issues"].append(f"Response column '{target}' missing")
    elif not pd.api.types.is_numeric_dtype(df[target]):
        report["issues"].append(f"Response column '{target}' is not numeric")
    elif (df[target] < 0).any():
        n_negative = int((df[target] < 0).sum())
        report["issues"].append(f"Response column '{target}' has {n_negative} negative values")

    # Check 2: Weekday one-hot encoding
    day_cols = weekday_columns(df)
    if day_cols:
        flags_per_row = df[day_cols].sum(axis=1)
        bad_rows = int((flags_per_row != 1).sum())
        if bad_rows > 0:
            report["issues"].append(
                f"{bad_rows} rows do not have exactly one weekday flag set"
            )
    else:
        report["issues"].append("No weekday indicator columns found")

    # Check 3: Channel flags are mutually exclusive ("Other" when none set)
    chan_cols = channel_columns(df)
    if chan_cols:
        bad_rows = int((df[chan_cols].sum(axis=1) > 1).sum())
        if bad_rows > 0:
            report["issues"].append(f"{bad_rows} rows have more than one channel flag set")

    # Check 4: Missing values
    missing_counts = df.isnull().sum()
    total_missing = missing_counts.sum()
    if total_missing > 0:
        missing_pct = (total_missing / (df.shape[0] * df.shape[1])) * 100
        report["issues"].append(f"Missing values: {total_missing} ({missing_pct:.2f}%)")
        report["missing_by_column"] = missing_counts[missing_counts > 0].to_dict()

    # Check 5: Duplicate rows
    duplicates = int(df.duplicated().sum())
    if duplicates > 0:
        report["issues"].append(f"Duplicate rows found: {duplicates}")

    for issue in report["issues"]:
        logger.warning(issue)

    is_valid = len(report["issues"]) == 0
    report["is_valid"] = is_valid

    if strict and not is_valid:
        raise DataValidationError(f"Data validation failed: {report['issues']}")

    return is_valid, report


def get_data_summary(df: pd.DataFrame, columns: Optional[list] = None) -> Dict[str, Any]:
    """
    Generate summary statistics for the dataset.

    Args:
        df: DataFrame to summarize
        columns: Columns to describe (default: all numeric)

    Returns:
        Dictionary containing summary statistics
    """
    if columns is None:
        columns = df.select_dtypes(include=[np.number]).columns.tolist()

    summary = {
        "shape": df.shape,
        "columns": list(df.columns),
        "memory_usage_mb": df.memory_usage(deep=True).sum() / 1024 / 1024,
        "statistics": {}
    }

    for col in columns:
        summary["statistics"][col] = {
            "count": int(df[col].count()),
            "mean": float(df[col].mean()),
            "std": float(df[col].std()),
            "min": float(df[col].min()),
            "25%": float(df[col].quantile(0.25)),
            "50%": float(df[col].quantile(0.50)),
            "75%": float(df[col].quantile(0.75)),
            "max": float(df[col].max()),
            "skew": float(df[col].skew()),
            "kurtosis": float(df[col].kurtosis())
        }

    return summary


def print_data_summary(df: pd.DataFrame, target: str = TARGET_COLUMN) -> None:
    """
    Print a formatted summary of the dataset to console.

    Args:
        df: DataFrame to summarize
        target: Name of the response column
    """
    print("\n" + "=" * 60)
    print("DATASET SUMMARY")
    print("=" * 60)
    print(f"Shape: {df.shape[0]} rows × {df.shape[1]} columns")
    print(f"Memory Usage: {df.memory_usage(deep=True).sum() / 1024:.2f} KB")

    day_cols = weekday_columns(df)
    if day_cols:
        print("\nArticles per weekday:")
        print("-" * 40)
        for col in day_cols:
            print(f"  {col[len(WEEKDAY_PREFIX):]:<12} {int(df[col].sum())}")

    if target in df.columns:
        print(f"\n'{target}' statistics:")
        print("-" * 40)
        print(df[target].describe().round(2).to_string())
    print("=" * 60 + "\n")
