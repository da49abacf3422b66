"""
Exploratory Data Analysis (EDA) Module
======================================

Descriptive statistics and plots of share counts for one weekday.

Functions:
    - summarize_shares: Summary statistics of the response
    - channel_share_table: Mean/median shares per data channel
    - plot_shares_distribution: Histogram of log shares with normality test
    - plot_channel_shares: Bar chart of shares per channel
    - plot_predictor_scatter: Shares against selected predictors
    - plot_correlation_matrix: Correlation heatmap
    - generate_eda_report: Full EDA report with all visualizations
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple, Union

import pandas as pd
import numpy as np
import matplotlib.pyplot as plt
import seaborn as sns
from scipy import stats

from .data_loader import TARGET_COLUMN
from .preprocessing import channel_labels

logger = logging.getLogger(__name__)

# Set style for all plots
plt.style.use('seaborn-v0_8-whitegrid')
sns.set_palette("husl")

DEFAULT_PREDICTORS = [
    'n_tokens_title',
    'n_tokens_content',
    'num_imgs',
    'num_videos',
    'global_subjectivity',
    'global_sentiment_polarity',
]


def summarize_shares(df: pd.DataFrame, target: str = TARGET_COLUMN) -> Dict[str, float]:
    """Summary statistics of the response column."""
    shares = df[target].astype(float)
    return {
        "count": int(shares.count()),
        "mean": float(shares.mean()),
        "std": float(shares.std()),
        "min": float(shares.min()),
        "25%": float(shares.quantile(0.25)),
        "50%": float(shares.quantile(0.50)),
        "75%": float(shares.quantile(0.75)),
        "max": float(shares.max()),
        "skew": float(shares.skew()),
        "kurtosis": float(shares.kurtosis())
    }


def channel_share_table(df: pd.DataFrame, target: str = TARGET_COLUMN) -> pd.DataFrame:
    """
    Aggregate shares per data channel.

    Returns:
        DataFrame indexed by channel with count, mean and median shares,
        sorted by descending mean
    """
    grouped = df[target].astype(float).groupby(channel_labels(df))
    table = grouped.agg(['count', 'mean', 'median'])
    table.index.name = 'channel'
    return table.sort_values('mean', ascending=False)


def plot_shares_distribution(
    df: pd.DataFrame,
    target: str = TARGET_COLUMN,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Histogram of log(1 + shares) with KDE and a normality test.

    Args:
        df: Filtered dataset
        target: Response column
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    log_shares = np.log1p(df[target].astype(float))

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(log_shares, kde=True, ax=ax, bins=50, alpha=0.7)

    mean_val = log_shares.mean()
    median_val = log_shares.median()
    ax.axvline(mean_val, color='red', linestyle='--', label=f'Mean: {mean_val:.2f}')
    ax.axvline(median_val, color='green', linestyle='--', label=f'Median: {median_val:.2f}')

    title = 'Distribution of log(1 + shares)'
    if len(log_shares) >= 8:
        _, p_value = stats.normaltest(log_shares)
        normality = "Normal" if p_value > 0.05 else "Non-Normal"
        title += f' ({normality}, p={p_value:.3f})'

    ax.set_xlabel('log(1 + shares)')
    ax.set_title(title, fontsize=12, fontweight='bold')
    ax.legend(fontsize=8)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Shares distribution saved to {save_path}")

    return fig


def plot_channel_shares(
    table: pd.DataFrame,
    figsize: Tuple[int, int] = (10, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of mean and median shares per channel.

    Args:
        table: Output of channel_share_table
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    x = np.arange(len(table))
    width = 0.4
    ax.bar(x - width / 2, table['mean'], width, color='steelblue', alpha=0.8, label='Mean')
    ax.bar(x + width / 2, table['median'], width, color='coral', alpha=0.8, label='Median')

    ax.set_xticks(x)
    ax.set_xticklabels(table.index, rotation=30, ha='right')
    ax.set_xlabel('Data channel')
    ax.set_ylabel('Shares')
    ax.set_title('Shares by Data Channel', fontsize=12, fontweight='bold')
    ax.legend()
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Channel shares plot saved to {save_path}")

    return fig


def plot_predictor_scatter(
    df: pd.DataFrame,
    predictors: List[str],
    target: str = TARGET_COLUMN,
    figsize: Tuple[int, int] = (14, 10),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Scatter plots of shares against each predictor with Spearman's rho.

    Args:
        df: Filtered dataset
        predictors: Predictor columns to plot
        target: Response column
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    n_cols = len(predictors)
    n_rows = max((n_cols + 1) // 2, 1)

    fig, axes = plt.subplots(n_rows, 2, figsize=figsize, squeeze=False)
    axes = axes.flatten()

    for idx, col in enumerate(predictors):
        ax = axes[idx]
        ax.scatter(df[col], df[target], alpha=0.3, s=8)
        ax.set_yscale('symlog')

        rho, _ = stats.spearmanr(df[col], df[target])
        ax.set_title(f'{col} (Spearman ρ={rho:.3f})', fontsize=10, fontweight='bold')
        ax.set_xlabel(col)
        ax.set_ylabel(target)

    # Hide unused subplots
    for idx in range(n_cols, len(axes)):
        axes[idx].set_visible(False)

    plt.suptitle('Shares vs Selected Predictors', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Predictor scatter plots saved to {save_path}")

    return fig


def plot_correlation_matrix(
    df: pd.DataFrame,
    method: str = 'spearman',
    figsize: Tuple[int, int] = (10, 8),
    save_path: Optional[str] = None
) -> Tuple[plt.Figure, pd.DataFrame]:
    """
    Create a correlation heatmap for all numerical columns.

    Args:
        df: DataFrame with numerical data
        method: Correlation method ('pearson', 'spearman', 'kendall')
        figsize: Figure size (width, height)
        save_path: Path to save the figure (optional)

    Returns:
        Tuple of (Figure, correlation matrix DataFrame)
    """
    corr_matrix = df.select_dtypes(include=[np.number]).corr(method=method)

    fig, ax = plt.subplots(figsize=figsize)

    mask = np.triu(np.ones_like(corr_matrix, dtype=bool), k=1)
    sns.heatmap(
        corr_matrix,
        mask=mask,
        annot=True,
        fmt='.2f',
        cmap='RdYlBu_r',
        center=0,
        square=True,
        linewidths=0.5,
        cbar_kws={"shrink": 0.8, "label": "Correlation"},
        ax=ax,
        vmin=-1,
        vmax=1
    )

    ax.set_title(f'Correlation Matrix ({method.capitalize()})',
                 fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Correlation matrix saved to {save_path}")

    return fig, corr_matrix


def generate_eda_report(
    df: pd.DataFrame,
    output_dir: Optional[Union[str, Path]] = "reports/figures/",
    predictors: Optional[List[str]] = None,
    target: str = TARGET_COLUMN,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Generate the descriptive statistics and figures for one weekday.

    Args:
        df: Filtered dataset (or its training subset)
        output_dir: Directory to save figures (None: no figures saved)
        predictors: Predictors for scatter/correlation plots
        target: Response column
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary containing statistics, channel table and figure names
    """
    if output_dir is not None:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    if predictors is None:
        predictors = DEFAULT_PREDICTORS
    missing = [col for col in predictors if col not in df.columns]
    if missing:
        logger.warning(f"Skipping predictors not in dataset: {missing}")
    predictors = [col for col in predictors if col in df.columns]

    logger.info("=" * 60)
    logger.info("STARTING EXPLORATORY DATA ANALYSIS")
    logger.info("=" * 60)

    report = {
        "data_shape": df.shape,
        "figures": [],
        "shares_statistics": summarize_shares(df, target),
        "channel_table": channel_share_table(df, target),
        "correlation_with_shares": {}
    }

    def figure_path(name: str) -> Optional[str]:
        if output_dir is None:
            return None
        report["figures"].append(name)
        return str(output_dir / name)

    logger.info("Plotting shares distribution...")
    plot_shares_distribution(df, target, save_path=figure_path("01_shares_distribution.png"))

    logger.info("Plotting shares by channel...")
    plot_channel_shares(report["channel_table"], save_path=figure_path("02_channel_shares.png"))

    if predictors:
        logger.info("Plotting shares against predictors...")
        plot_predictor_scatter(
            df, predictors, target,
            save_path=figure_path("03_predictor_scatter.png")
        )

        logger.info("Computing correlation matrix...")
        _, corr_matrix = plot_correlation_matrix(
            df[predictors + [target]],
            save_path=figure_path("04_correlation_matrix.png")
        )
        report["correlation_with_shares"] = {
            col: float(corr_matrix.loc[col, target]) for col in predictors
        }

    if show_plots:
        plt.show()
    else:
        plt.close('all')

    logger.info("=" * 60)
    if output_dir is not None:
        logger.info("EDA COMPLETE - All figures saved to: %s", output_dir)
    else:
        logger.info("EDA COMPLETE - figures not saved")
    logger.info("=" * 60)

    return report


def print_correlation_insights(correlations: Dict[str, float], threshold: float = 0.1) -> None:
    """
    Print predictors whose correlation with shares passes a threshold.

    Args:
        correlations: Mapping of predictor to correlation with shares
        threshold: Minimum absolute correlation to report
    """
    print("\n" + "=" * 50)
    print("CORRELATION WITH SHARES")
    print("=" * 50)

    strong = {col: r for col, r in correlations.items() if abs(r) >= threshold}
    if strong:
        for col, r in sorted(strong.items(), key=lambda item: abs(item[1]), reverse=True):
            direction = "positive" if r > 0 else "negative"
            print(f"  • {col}: {r:.3f} ({direction})")
    else:
        print(f"\nNo predictor reaches |r| >= {threshold}")
        print("  - Shares are weakly related to each selected predictor on its own")

    print("=" * 50 + "\n")
