"""
Model Evaluation Module
=======================

Scores fitted models on the held-out test set.

Features:
    - Strict RMSE: every test row scored, undefined predictions are fatal
    - MAE and R² alongside RMSE
    - Actual vs Predicted plots per model
    - RMSE comparison chart and JSON metrics export
"""

import logging
import json
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score

from .exceptions import PredictionFailure
from .model import FittedModel

logger = logging.getLogger(__name__)

MODEL_LABELS = {
    'regression_tree': 'Regression tree',
    'boosted_ensemble': 'Boosted ensemble',
    'linear_model': 'Linear model',
}


def rmse(y_true: Union[np.ndarray, pd.Series], y_pred: Union[np.ndarray, pd.Series]) -> float:
    """
    Root mean squared error over every row.

    Raises:
        PredictionFailure: If inputs are empty, differ in length or hold
            non-finite values
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)

    if y_true.shape != y_pred.shape:
        raise PredictionFailure(
            f"{len(y_pred)} predictions for {len(y_true)} actual values"
        )
    if y_true.size == 0:
        raise PredictionFailure("Cannot compute RMSE on an empty test set")
    if not np.isfinite(y_pred).all():
        raise PredictionFailure(
            f"{int((~np.isfinite(y_pred)).sum())} predictions are undefined"
        )
    if not np.isfinite(y_true).all():
        raise PredictionFailure("Actual values contain non-finite entries")

    return float(np.sqrt(mean_squared_error(y_true, y_pred)))


def calculate_metrics(y_true: np.ndarray, y_pred: np.ndarray) -> Dict[str, float]:
    """
    Calculate evaluation metrics for one model.

    Args:
        y_true: Actual shares
        y_pred: Predicted shares

    Returns:
        Dictionary with rmse, mae, r2 and error statistics
    """
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    errors = y_true - y_pred

    return {
        'rmse': rmse(y_true, y_pred),
        'mae': float(mean_absolute_error(y_true, y_pred)),
        'r2': float(r2_score(y_true, y_pred)) if len(y_true) > 1 else float('nan'),
        'mean_error': float(np.mean(errors)),
        'std_error': float(np.std(errors)),
        'max_error': float(np.max(np.abs(errors))),
        'n_samples': int(len(y_true))
    }


def evaluate_model(
    model: FittedModel,
    X_test: pd.DataFrame,
    y_test: Union[pd.Series, np.ndarray]
) -> Dict[str, Any]:
    """
    Predict every test row and compute the test metrics.

    Args:
        model: Fitted model
        X_test: Test predictors
        y_test: Actual test shares

    Returns:
        Dictionary with 'kind', 'metrics' and 'predictions'

    Raises:
        PredictionFailure: If any row cannot be scored
    """
    if len(X_test) != len(y_test):
        raise PredictionFailure(f"X_test has {len(X_test)} rows but y_test has {len(y_test)}")

    predictions = model.predict(X_test)
    metrics = calculate_metrics(np.asarray(y_test, dtype=float), predictions)
    logger.info(f"{model.kind}: test RMSE={metrics['rmse']:.4f}, MAE={metrics['mae']:.4f}")

    return {
        'kind': model.kind,
        'metrics': metrics,
        'predictions': predictions
    }


def plot_actual_vs_predicted(
    y_true: np.ndarray,
    predictions: Dict[str, np.ndarray],
    figsize: Tuple[int, int] = (15, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Create actual vs predicted scatter plots, one panel per model.

    Args:
        y_true: Actual shares
        predictions: Mapping of model kind to predictions
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    y_true = np.asarray(y_true, dtype=float)
    n_models = len(predictions)
    fig, axes = plt.subplots(1, n_models, figsize=figsize, squeeze=False)
    axes = axes.flatten()

    for ax, (kind, y_pred) in zip(axes, predictions.items()):
        ax.scatter(y_true, y_pred, alpha=0.4, s=12)

        min_val = min(y_true.min(), y_pred.min())
        max_val = max(y_true.max(), y_pred.max())
        ax.plot([min_val, max_val], [min_val, max_val], 'r--', linewidth=2, label='Perfect')

        ax.set_xscale('symlog')
        ax.set_yscale('symlog')
        ax.set_xlabel('Actual shares')
        ax.set_ylabel('Predicted shares')
        ax.set_title(
            f"{MODEL_LABELS.get(kind, kind)}\nRMSE={rmse(y_true, y_pred):.1f}",
            fontsize=10, fontweight='bold'
        )
        ax.legend(loc='upper left', fontsize=8)

    plt.suptitle('Actual vs Predicted Shares (Test Set)', fontsize=14, fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"Actual vs Predicted plot saved to {save_path}")

    return fig


def plot_rmse_comparison(
    comparison: pd.DataFrame,
    figsize: Tuple[int, int] = (8, 5),
    save_path: Optional[str] = None
) -> plt.Figure:
    """
    Bar chart of test RMSE per model.

    Args:
        comparison: Table from compare_models
        figsize: Figure size
        save_path: Path to save the figure

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    labels = [MODEL_LABELS.get(kind, kind) for kind in comparison['model']]
    sns.barplot(x=labels, y=comparison['rmse'].to_numpy(), ax=ax, color='steelblue')
    for idx, value in enumerate(comparison['rmse']):
        ax.text(idx, value, f"{value:.1f}", ha='center', va='bottom', fontsize=9)

    ax.set_xlabel('Model')
    ax.set_ylabel('Test RMSE')
    ax.set_title('Test RMSE by Model', fontweight='bold')
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')
        logger.info(f"RMSE comparison plot saved to {save_path}")

    return fig


def compare_models(
    models: Dict[str, FittedModel],
    X_test: pd.DataFrame,
    y_test: Union[pd.Series, np.ndarray],
    output_dir: Optional[Union[str, Path]] = None,
    show_plots: bool = False
) -> Dict[str, Any]:
    """
    Evaluate every model on the test set and write figures and metrics.

    Args:
        models: Mapping of model kind to FittedModel
        X_test: Test predictors
        y_test: Actual test shares
        output_dir: Directory for figures/ and metrics/ (optional)
        show_plots: Whether to display plots interactively

    Returns:
        Dictionary containing per-model results, the comparison table,
        figure names and the metrics file path
    """
    logger.info("=" * 60)
    logger.info("STARTING MODEL EVALUATION")
    logger.info("=" * 60)

    results = {kind: evaluate_model(model, X_test, y_test) for kind, model in models.items()}

    comparison = pd.DataFrame([
        {'model': kind, **result['metrics']} for kind, result in results.items()
    ])

    figures: List[str] = []
    metrics_file = None

    if output_dir is not None:
        output_dir = Path(output_dir)
        figures_dir = output_dir / "figures"
        metrics_dir = output_dir / "metrics"
        figures_dir.mkdir(parents=True, exist_ok=True)
        metrics_dir.mkdir(parents=True, exist_ok=True)

        metrics_file = metrics_dir / "evaluation_metrics.json"
        with open(metrics_file, 'w') as f:
            json.dump({kind: result['metrics'] for kind, result in results.items()}, f, indent=2)
        logger.info(f"Metrics saved to {metrics_file}")

        plot_actual_vs_predicted(
            np.asarray(y_test, dtype=float),
            {kind: result['predictions'] for kind, result in results.items()},
            save_path=str(figures_dir / "eval_actual_vs_predicted.png")
        )
        figures.append("eval_actual_vs_predicted.png")

        plot_rmse_comparison(
            comparison,
            save_path=str(figures_dir / "eval_rmse_comparison.png")
        )
        figures.append("eval_rmse_comparison.png")

        if show_plots:
            plt.show()
        else:
            plt.close('all')

    logger.info("=" * 60)
    logger.info("EVALUATION COMPLETE")
    for row in comparison.itertuples():
        logger.info(f"  {row.model}: RMSE={row.rmse:.4f}")
    logger.info("=" * 60)

    return {
        'results': results,
        'comparison': comparison,
        'figures': figures,
        'metrics_file': str(metrics_file) if metrics_file else None
    }


def print_evaluation_report(comparison: pd.DataFrame) -> None:
    """
    Print a formatted evaluation report to console.

    Args:
        comparison: Table from compare_models
    """
    print("\n" + "=" * 70)
    print("MODEL EVALUATION REPORT")
    print("=" * 70)
    print(f"{'Model':<20} {'RMSE':<14} {'MAE':<14} {'R²':<12}")
    print("-" * 70)

    for row in comparison.itertuples():
        label = MODEL_LABELS.get(row.model, row.model)
        print(f"{label:<20} {row.rmse:<14.4f} {row.mae:<14.4f} {row.r2:<12.4f}")

    print("-" * 70)
    best = comparison.loc[comparison['rmse'].idxmin()]
    print(f"\nLowest test RMSE: {MODEL_LABELS.get(best['model'], best['model'])} ({best['rmse']:.4f})")
    print("=" * 70 + "\n")
