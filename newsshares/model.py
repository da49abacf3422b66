"""
Model Training Module
=====================

Fits the three share-count models for one weekday.

Models:
    - Regression tree, pruned by cross-validated cost-complexity deviance
    - Gradient-boosted tree ensemble, tuned by repeated k-fold grid search
    - Multiple linear regression (ordinary least squares)

Features:
    - Explicit seeds, no ambient random state
    - Per-cell failure isolation in the boosting grid search
    - Cooperative cancellation between cross-validation folds
    - Model persistence (save/load)
"""

import itertools
import logging
import threading
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, List, Sequence, Tuple, Union

import numpy as np
import pandas as pd
import joblib
from sklearn.base import clone
from sklearn.ensemble import GradientBoostingRegressor
from sklearn.linear_model import LinearRegression
from sklearn.metrics import mean_squared_error, mean_absolute_error, r2_score
from sklearn.model_selection import KFold, LeaveOneOut, RepeatedKFold
from sklearn.tree import DecisionTreeRegressor

from .exceptions import (
    InsufficientData,
    ModelFitFailure,
    PredictionFailure,
    TrainingCancelled,
)

logger = logging.getLogger(__name__)

REGRESSION_TREE = "regression_tree"
BOOSTED_ENSEMBLE = "boosted_ensemble"
LINEAR_MODEL = "linear_model"
MODEL_KINDS = (REGRESSION_TREE, BOOSTED_ENSEMBLE, LINEAR_MODEL)


class CancellationToken:
    """Thread-safe flag checked by the trainers between folds."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "training") -> None:
        if self._event.is_set():
            raise TrainingCancelled(f"{stage} cancelled")


def _check_cancel(token: Optional[CancellationToken], stage: str) -> None:
    if token is not None:
        token.raise_if_cancelled(stage)


class FittedModel:
    """
    A fitted share-count model.

    Wraps the scikit-learn estimator together with the predictor names it
    was trained on, so scoring always uses the training column order.
    """

    def __init__(
        self,
        kind: str,
        estimator: Any,
        feature_names: Sequence[str],
        training_info: Optional[Dict[str, Any]] = None
    ):
        if kind not in MODEL_KINDS:
            raise ValueError(f"Unknown model kind: {kind}")
        self.kind = kind
        self.estimator = estimator
        self.feature_names = list(feature_names)
        self.training_info: Dict[str, Any] = training_info or {}

    def __repr__(self) -> str:
        return f"FittedModel(kind={self.kind!r}, n_features={len(self.feature_names)})"

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """
        Predict shares for every row of X.

        Args:
            X: Frame containing at least the training predictors

        Returns:
            Predictions array of shape (n_samples,)

        Raises:
            PredictionFailure: If predictors are missing, non-finite,
                or a prediction is undefined
        """
        missing = [col for col in self.feature_names if col not in X.columns]
        if missing:
            raise PredictionFailure(f"Missing predictor columns: {missing}")

        data = X[self.feature_names].to_numpy(dtype=float)
        bad_rows = ~np.isfinite(data).all(axis=1)
        if bad_rows.any():
            raise PredictionFailure(
                f"{int(bad_rows.sum())} rows have non-finite predictor values"
            )

        predictions = np.asarray(self.estimator.predict(data), dtype=float)
        if not np.isfinite(predictions).all():
            raise PredictionFailure(f"{self.kind} produced non-finite predictions")
        return predictions

    def save(self, filepath: Union[str, Path]) -> None:
        """
        Save the fitted model to disk.

        Args:
            filepath: Path to save the model
        """
        state = {
            'kind': self.kind,
            'estimator': self.estimator,
            'feature_names': self.feature_names,
            'training_info': self.training_info
        }
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(state, filepath)
        logger.info(f"Model saved to {filepath}")

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'FittedModel':
        """
        Load a fitted model from disk.

        Args:
            filepath: Path to the saved model

        Returns:
            Loaded FittedModel instance
        """
        state = joblib.load(filepath)
        model = cls(
            kind=state['kind'],
            estimator=state['estimator'],
            feature_names=state['feature_names'],
            training_info=state['training_info']
        )
        logger.info(f"Model loaded from {filepath}")
        return model


def _as_arrays(X: pd.DataFrame, y: Union[pd.Series, np.ndarray]) -> Tuple[np.ndarray, np.ndarray]:
    X_arr = X.to_numpy(dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if len(X_arr) != len(y_arr):
        raise ValueError(f"X has {len(X_arr)} rows but y has {len(y_arr)}")
    if not np.isfinite(X_arr).all() or not np.isfinite(y_arr).all():
        raise ModelFitFailure("Training data contains non-finite values")
    return X_arr, y_arr


# ---------------------------------------------------------------------------
# Regression tree
# ---------------------------------------------------------------------------

def fit_regression_tree(
    X: pd.DataFrame,
    y: Union[pd.Series, np.ndarray],
    cv_folds: Optional[int] = None,
    min_samples_split: int = 10,
    min_samples_leaf: int = 5,
    seed: int = 42,
    cancel_token: Optional[CancellationToken] = None
) -> FittedModel:
    """
    Fit a regression tree and prune it to the size with the lowest
    cross-validated deviance.

    The full tree's cost-complexity pruning path gives one candidate
    subtree per alpha. Each candidate's deviance (sum of squared
    held-out errors) is estimated by cross-validation; the smallest tree
    among those with minimal deviance is refitted on all rows.

    Args:
        X: Training predictors
        y: Training response
        cv_folds: Number of folds, or None for leave-one-out
        min_samples_split: Minimum rows in a node to attempt a split
        min_samples_leaf: Minimum rows in a leaf
        seed: Seed for fold shuffling and tie-breaking between features
        cancel_token: Optional token checked between folds

    Returns:
        FittedModel wrapping the pruned DecisionTreeRegressor

    Raises:
        InsufficientData: If there are fewer rows than folds
        TrainingCancelled: If cancel_token is set during tuning
    """
    start_time = datetime.now()
    X_arr, y_arr = _as_arrays(X, y)
    n_samples = len(y_arr)

    if cv_folds is None:
        if n_samples < 2:
            raise InsufficientData("Leave-one-out needs at least 2 rows")
        splitter = LeaveOneOut()
        cv_label = "leave-one-out"
    else:
        if n_samples < cv_folds or cv_folds < 2:
            raise InsufficientData(f"Cannot run {cv_folds}-fold CV on {n_samples} rows")
        splitter = KFold(n_splits=cv_folds, shuffle=True, random_state=seed)
        cv_label = f"{cv_folds}-fold"

    logger.info("=" * 60)
    logger.info("FITTING REGRESSION TREE")
    logger.info("=" * 60)
    logger.info(f"Training data shape: X={X_arr.shape}, CV: {cv_label}")

    base = DecisionTreeRegressor(
        criterion="squared_error",
        min_samples_split=min_samples_split,
        min_samples_leaf=min_samples_leaf,
        random_state=seed
    )

    path = base.cost_complexity_pruning_path(X_arr, y_arr)
    alphas = np.unique(np.clip(path.ccp_alphas, 0.0, None))
    sizes = np.array([
        clone(base).set_params(ccp_alpha=alpha).fit(X_arr, y_arr).get_n_leaves()
        for alpha in alphas
    ])
    logger.info(f"Pruning path: {len(alphas)} candidate subtrees, sizes {sizes.max()} → {sizes.min()}")

    deviances = np.zeros(len(alphas))
    for train_idx, test_idx in splitter.split(X_arr):
        _check_cancel(cancel_token, "regression tree cross-validation")
        for i, alpha in enumerate(alphas):
            tree = clone(base).set_params(ccp_alpha=alpha)
            tree.fit(X_arr[train_idx], y_arr[train_idx])
            residuals = tree.predict(X_arr[test_idx]) - y_arr[test_idx]
            deviances[i] += float(np.sum(residuals ** 2))

    best_deviance = deviances.min()
    tied = np.flatnonzero(np.isclose(deviances, best_deviance, rtol=1e-9, atol=1e-12))
    # Ties go to the smaller tree
    best = tied[np.lexsort((-alphas[tied], sizes[tied]))[0]]
    best_alpha = float(alphas[best])

    final = clone(base).set_params(ccp_alpha=best_alpha).fit(X_arr, y_arr)

    training_info = {
        'cv': cv_label,
        'candidate_alphas': alphas.tolist(),
        'candidate_sizes': sizes.tolist(),
        'cv_deviance': deviances.tolist(),
        'selected_alpha': best_alpha,
        'selected_size': int(final.get_n_leaves()),
        'unpruned_size': int(sizes.max()),
        'pruned': bool(best_alpha > 0 and final.get_n_leaves() < sizes.max()),
        'n_samples': n_samples,
        'training_duration_seconds': (datetime.now() - start_time).total_seconds()
    }

    logger.info(
        f"Selected tree with {training_info['selected_size']} leaves "
        f"(alpha={best_alpha:.6g}, CV deviance={best_deviance:.6g})"
    )
    return FittedModel(REGRESSION_TREE, final, X.columns, training_info)


# ---------------------------------------------------------------------------
# Boosted ensemble
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoostingParams:
    """One cell of the boosting hyperparameter grid."""

    n_estimators: int
    interaction_depth: int
    shrinkage: float
    min_samples_leaf: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HyperparameterGrid:
    """
    Candidate values for the boosted ensemble.

    cells() enumerates the cartesian product with tree count outermost
    and minimum leaf size innermost; that order breaks RMSE ties.
    """

    n_estimators: Tuple[int, ...] = (50, 100, 150)
    interaction_depth: Tuple[int, ...] = (1, 2, 3)
    shrinkage: Tuple[float, ...] = (0.1,)
    min_samples_leaf: Tuple[int, ...] = (10,)

    def cells(self) -> List[BoostingParams]:
        return [
            BoostingParams(int(n), int(d), float(s), int(m))
            for n, d, s, m in itertools.product(
                self.n_estimators,
                self.interaction_depth,
                self.shrinkage,
                self.min_samples_leaf
            )
        ]

    def __len__(self) -> int:
        return (len(self.n_estimators) * len(self.interaction_depth)
                * len(self.shrinkage) * len(self.min_samples_leaf))

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'HyperparameterGrid':
        defaults = cls()
        return cls(
            n_estimators=tuple(config.get('n_estimators', defaults.n_estimators)),
            interaction_depth=tuple(config.get('interaction_depth', defaults.interaction_depth)),
            shrinkage=tuple(config.get('shrinkage', defaults.shrinkage)),
            min_samples_leaf=tuple(config.get('min_samples_leaf', defaults.min_samples_leaf))
        )


@dataclass
class TuningResult:
    """Cross-validated grid search outcome."""

    table: pd.DataFrame
    selected: BoostingParams
    selected_index: int
    seed: int
    cv_folds: int
    cv_repeats: int

    @property
    def n_viable(self) -> int:
        return int(self.table['viable'].sum())


def _make_booster(params: BoostingParams, seed: int, subsample: float) -> GradientBoostingRegressor:
    # interaction depth d means d splits per tree, grown best-first
    return GradientBoostingRegressor(
        loss="squared_error",
        n_estimators=params.n_estimators,
        learning_rate=params.shrinkage,
        max_leaf_nodes=params.interaction_depth + 1,
        max_depth=None,
        min_samples_leaf=params.min_samples_leaf,
        subsample=subsample,
        random_state=seed
    )


def tune_boosted_ensemble(
    X: pd.DataFrame,
    y: Union[pd.Series, np.ndarray],
    grid: Optional[HyperparameterGrid] = None,
    cv_folds: int = 10,
    cv_repeats: int = 5,
    seed: int = 42,
    subsample: float = 0.5,
    cancel_token: Optional[CancellationToken] = None
) -> TuningResult:
    """
    Score every grid cell by repeated k-fold cross-validation.

    Cells that differ only in tree count share one fit per fold; the
    smaller counts are read off staged_predict. A cell whose fit fails
    on any fold is marked non-viable and skipped for the remaining folds.

    Args:
        X: Training predictors
        y: Training response
        grid: Hyperparameter grid (default: 9-cell grid)
        cv_folds: Folds per repeat
        cv_repeats: Number of repeats
        seed: Seed for fold assignment and boosting subsampling
        subsample: Fraction of rows drawn for each tree
        cancel_token: Optional token checked between folds

    Returns:
        TuningResult with per-cell mean/sd of RMSE, R² and MAE

    Raises:
        InsufficientData: If there are fewer rows than folds
        ModelFitFailure: If no cell is viable
        TrainingCancelled: If cancel_token is set during tuning
    """
    grid = grid or HyperparameterGrid()
    cells = grid.cells()
    X_arr, y_arr = _as_arrays(X, y)

    if cv_folds < 2 or len(y_arr) < cv_folds:
        raise InsufficientData(f"Cannot run {cv_folds}-fold CV on {len(y_arr)} rows")

    logger.info(
        f"Tuning boosted ensemble: {len(cells)} cells, "
        f"{cv_folds}-fold CV repeated {cv_repeats} times"
    )

    families: Dict[Tuple[int, float, int], List[int]] = {}
    for idx, cell in enumerate(cells):
        key = (cell.interaction_depth, cell.shrinkage, cell.min_samples_leaf)
        families.setdefault(key, []).append(idx)

    scores: Dict[int, Dict[str, List[float]]] = {
        idx: {'rmse': [], 'r2': [], 'mae': []} for idx in range(len(cells))
    }
    errors: Dict[int, str] = {}

    folds = RepeatedKFold(n_splits=cv_folds, n_repeats=cv_repeats, random_state=seed)
    for fold_no, (train_idx, test_idx) in enumerate(folds.split(X_arr), start=1):
        _check_cancel(cancel_token, "boosted ensemble grid search")
        X_tr, y_tr = X_arr[train_idx], y_arr[train_idx]
        X_te, y_te = X_arr[test_idx], y_arr[test_idx]

        for members in families.values():
            live = [idx for idx in members if idx not in errors]
            if not live:
                continue
            wanted = {cells[idx].n_estimators for idx in live}
            largest = max(live, key=lambda idx: cells[idx].n_estimators)
            try:
                booster = _make_booster(cells[largest], seed, subsample).fit(X_tr, y_tr)
                staged = {
                    stage: pred
                    for stage, pred in enumerate(booster.staged_predict(X_te), start=1)
                    if stage in wanted
                }
                fold_scores = {}
                for idx in live:
                    pred = staged[cells[idx].n_estimators]
                    if not np.isfinite(pred).all():
                        raise ModelFitFailure("non-finite fold predictions")
                    fold_scores[idx] = (
                        float(np.sqrt(mean_squared_error(y_te, pred))),
                        float(r2_score(y_te, pred)) if len(y_te) > 1 else np.nan,
                        float(mean_absolute_error(y_te, pred))
                    )
            except (ValueError, ArithmeticError) as exc:
                for idx in live:
                    errors[idx] = str(exc)
                logger.warning(
                    f"Fold {fold_no}: cells {[cells[i].as_dict() for i in live]} "
                    f"marked non-viable: {exc}"
                )
                continue

            for idx, (rmse_val, r2_val, mae_val) in fold_scores.items():
                scores[idx]['rmse'].append(rmse_val)
                scores[idx]['r2'].append(r2_val)
                scores[idx]['mae'].append(mae_val)

    rows = []
    for idx, cell in enumerate(cells):
        viable = idx not in errors
        cell_scores = scores[idx]
        rows.append({
            **cell.as_dict(),
            'rmse': float(np.mean(cell_scores['rmse'])) if viable else np.nan,
            'rmse_sd': float(np.std(cell_scores['rmse'], ddof=1)) if viable and len(cell_scores['rmse']) > 1 else np.nan,
            'r2': float(np.nanmean(cell_scores['r2'])) if viable and not np.all(np.isnan(cell_scores['r2'])) else np.nan,
            'mae': float(np.mean(cell_scores['mae'])) if viable else np.nan,
            'viable': viable,
            'error': errors.get(idx)
        })
    table = pd.DataFrame(rows)

    viable_table = table[table['viable']]
    if viable_table.empty:
        raise ModelFitFailure(f"No viable boosting grid cell: {sorted(set(errors.values()))}")

    # idxmin returns the first minimum, i.e. the earliest cell in grid order
    selected_index = int(viable_table['rmse'].idxmin())
    selected = cells[selected_index]

    logger.info(
        f"Selected cell {selected.as_dict()} "
        f"(CV RMSE={table.loc[selected_index, 'rmse']:.4f}, "
        f"{int(table['viable'].sum())}/{len(cells)} cells viable)"
    )
    return TuningResult(
        table=table,
        selected=selected,
        selected_index=selected_index,
        seed=seed,
        cv_folds=cv_folds,
        cv_repeats=cv_repeats
    )


def fit_boosted_ensemble(
    X: pd.DataFrame,
    y: Union[pd.Series, np.ndarray],
    grid: Optional[HyperparameterGrid] = None,
    cv_folds: int = 10,
    cv_repeats: int = 5,
    seed: int = 42,
    subsample: float = 0.5,
    cancel_token: Optional[CancellationToken] = None
) -> FittedModel:
    """
    Tune the boosted ensemble and refit the winning cell on all rows.

    Args:
        X: Training predictors
        y: Training response
        grid: Hyperparameter grid (default: 9-cell grid)
        cv_folds: Folds per repeat
        cv_repeats: Number of repeats
        seed: Seed for fold assignment and boosting subsampling
        subsample: Fraction of rows drawn for each tree
        cancel_token: Optional token checked between folds

    Returns:
        FittedModel wrapping the GradientBoostingRegressor; the
        TuningResult is stored under training_info['tuning']
    """
    start_time = datetime.now()

    logger.info("=" * 60)
    logger.info("FITTING BOOSTED ENSEMBLE")
    logger.info("=" * 60)

    tuning = tune_boosted_ensemble(
        X, y,
        grid=grid,
        cv_folds=cv_folds,
        cv_repeats=cv_repeats,
        seed=seed,
        subsample=subsample,
        cancel_token=cancel_token
    )
    _check_cancel(cancel_token, "boosted ensemble refit")

    X_arr, y_arr = _as_arrays(X, y)
    try:
        booster = _make_booster(tuning.selected, seed, subsample).fit(X_arr, y_arr)
    except ValueError as exc:
        raise ModelFitFailure(f"Boosted ensemble refit failed: {exc}") from exc

    training_info = {
        'tuning': tuning,
        'selected_params': tuning.selected.as_dict(),
        'subsample': subsample,
        'seed': seed,
        'n_samples': len(y_arr),
        'training_duration_seconds': (datetime.now() - start_time).total_seconds()
    }
    return FittedModel(BOOSTED_ENSEMBLE, booster, X.columns, training_info)


# ---------------------------------------------------------------------------
# Linear model
# ---------------------------------------------------------------------------

def _independent_columns(X_arr: np.ndarray) -> List[int]:
    """
    Indices of predictors that are not linear combinations of the
    intercept and earlier predictors, scanning in column order.
    """
    norms = np.linalg.norm(X_arr, axis=0)
    design = np.ones((len(X_arr), 1)) / np.sqrt(max(len(X_arr), 1))
    rank = 1
    kept = []
    for j in range(X_arr.shape[1]):
        if norms[j] == 0:
            continue
        candidate = np.column_stack([design, X_arr[:, j] / norms[j]])
        candidate_rank = np.linalg.matrix_rank(candidate)
        if candidate_rank > rank:
            design = candidate
            rank = candidate_rank
            kept.append(j)
    return kept


def fit_linear_model(
    X: pd.DataFrame,
    y: Union[pd.Series, np.ndarray],
    strict: bool = False
) -> FittedModel:
    """
    Fit ordinary least squares of shares on all predictors.

    Perfectly collinear predictors (constant columns included) are
    aliased and dropped, keeping the earliest column of each dependent set.

    Args:
        X: Training predictors
        y: Training response
        strict: Raise instead of dropping aliased predictors

    Returns:
        FittedModel wrapping LinearRegression

    Raises:
        ModelFitFailure: If no predictor is usable, or strict and
            predictors are collinear
    """
    start_time = datetime.now()
    X_arr, y_arr = _as_arrays(X, y)

    logger.info("=" * 60)
    logger.info("FITTING LINEAR MODEL")
    logger.info("=" * 60)

    kept = _independent_columns(X_arr)
    names = list(X.columns)
    aliased = [names[j] for j in range(len(names)) if j not in set(kept)]

    if aliased:
        if strict:
            raise ModelFitFailure(f"Collinear predictors: {aliased}")
        logger.warning(f"Dropping {len(aliased)} aliased predictors: {aliased}")

    if not kept:
        raise ModelFitFailure("No linearly independent predictors to fit")

    kept_names = [names[j] for j in kept]
    ols = LinearRegression(fit_intercept=True).fit(X_arr[:, kept], y_arr)

    training_info = {
        'intercept': float(ols.intercept_),
        'coefficients': dict(zip(kept_names, map(float, ols.coef_))),
        'aliased': aliased,
        'train_r2': float(ols.score(X_arr[:, kept], y_arr)),
        'n_samples': len(y_arr),
        'training_duration_seconds': (datetime.now() - start_time).total_seconds()
    }
    logger.info(f"OLS fitted on {len(kept_names)} predictors, train R²={training_info['train_r2']:.4f}")
    return FittedModel(LINEAR_MODEL, ols, kept_names, training_info)


# ---------------------------------------------------------------------------
# Config-driven entry point
# ---------------------------------------------------------------------------

def _tree_folds(value: Any) -> Optional[int]:
    if value is None or str(value).lower() == "loo":
        return None
    return int(value)


def train_models(
    X_train: pd.DataFrame,
    y_train: Union[pd.Series, np.ndarray],
    config: Dict[str, Any],
    seed: int = 42,
    cancel_token: Optional[CancellationToken] = None,
    save_dir: Optional[Union[str, Path]] = None
) -> Dict[str, FittedModel]:
    """
    Train all three models using configuration parameters.

    Args:
        X_train: Training predictors
        y_train: Training response
        config: Full configuration dictionary
        seed: Seed passed to every trainer
        cancel_token: Optional token forwarded to the tuned trainers
        save_dir: Directory to save fitted models (optional)

    Returns:
        Mapping of model kind to FittedModel
    """
    tree_cfg = config.get('tree', {})
    boost_cfg = config.get('boosting', {})
    linear_cfg = config.get('linear', {})

    models = {
        REGRESSION_TREE: fit_regression_tree(
            X_train, y_train,
            cv_folds=_tree_folds(tree_cfg.get('cv_folds', 'loo')),
            min_samples_split=tree_cfg.get('min_samples_split', 10),
            min_samples_leaf=tree_cfg.get('min_samples_leaf', 5),
            seed=seed,
            cancel_token=cancel_token
        ),
        BOOSTED_ENSEMBLE: fit_boosted_ensemble(
            X_train, y_train,
            grid=HyperparameterGrid.from_config(boost_cfg.get('grid', {})),
            cv_folds=boost_cfg.get('cv_folds', 10),
            cv_repeats=boost_cfg.get('cv_repeats', 5),
            seed=seed,
            subsample=boost_cfg.get('subsample', 0.5),
            cancel_token=cancel_token
        ),
        LINEAR_MODEL: fit_linear_model(
            X_train, y_train,
            strict=linear_cfg.get('strict_collinearity', False)
        )
    }

    if save_dir:
        for kind, model in models.items():
            model.save(Path(save_dir) / f"{kind}.joblib")

    return models


def print_model_summary(models: Dict[str, FittedModel]) -> None:
    """
    Print a summary of the fitted models.

    Args:
        models: Mapping of model kind to FittedModel
    """
    print("\n" + "=" * 50)
    print("MODEL SUMMARY")
    print("=" * 50)

    tree = models.get(REGRESSION_TREE)
    if tree is not None:
        info = tree.training_info
        print("Regression tree:")
        print(f"  - CV: {info['cv']}")
        print(f"  - Unpruned leaves: {info['unpruned_size']}")
        print(f"  - Selected leaves: {info['selected_size']} (alpha={info['selected_alpha']:.6g})")

    boosted = models.get(BOOSTED_ENSEMBLE)
    if boosted is not None:
        tuning: TuningResult = boosted.training_info['tuning']
        print("Boosted ensemble:")
        print(f"  - Viable cells: {tuning.n_viable}/{len(tuning.table)}")
        for key, value in tuning.selected.as_dict().items():
            print(f"  - {key}: {value}")

    linear = models.get(LINEAR_MODEL)
    if linear is not None:
        info = linear.training_info
        print("Linear model:")
        print(f"  - Predictors: {len(linear.feature_names)}")
        print(f"  - Aliased: {len(info['aliased'])}")
        print(f"  - Train R²: {info['train_r2']:.4f}")

    print("=" * 50 + "\n")
