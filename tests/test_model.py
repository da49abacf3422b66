"""
Test Suite for Model Module
===========================

Tests for the regression tree, boosted ensemble and linear model trainers.
"""

import pytest
import numpy as np
import pandas as pd

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from newsshares.model import (
    BoostingParams,
    CancellationToken,
    FittedModel,
    HyperparameterGrid,
    fit_regression_tree,
    fit_boosted_ensemble,
    fit_linear_model,
    tune_boosted_ensemble,
    train_models,
    REGRESSION_TREE,
    BOOSTED_ENSEMBLE,
    LINEAR_MODEL,
)
from newsshares.exceptions import (
    InsufficientData,
    ModelFitFailure,
    PredictionFailure,
    TrainingCancelled,
)


@pytest.fixture
def regression_data():
    """80 rows, shares driven by two of four predictors."""
    rng = np.random.default_rng(42)
    X = pd.DataFrame({
        'a': rng.uniform(0, 10, 80),
        'b': rng.uniform(0, 10, 80),
        'c': rng.normal(0, 1, 80),
        'd': rng.normal(0, 1, 80),
    })
    y = pd.Series(200 * X['a'] + 50 * X['b'] + rng.normal(0, 20, 80), name='shares')
    return X, y


class TestRegressionTree:
    """Tests for fit_regression_tree."""

    def test_constant_response(self, regression_data):
        """Zero-variance shares give a single leaf predicting the mean."""
        X, _ = regression_data
        y = pd.Series(np.full(len(X), 1400.0))

        model = fit_regression_tree(X, y)

        assert model.kind == REGRESSION_TREE
        assert model.estimator.get_n_leaves() == 1
        assert model.training_info['selected_size'] == 1
        assert min(model.training_info['cv_deviance']) == 0.0
        np.testing.assert_allclose(model.predict(X), 1400.0)

    def test_unpruned_tree_kept(self):
        """When the full tree cross-validates best, no pruning happens."""
        rng = np.random.default_rng(0)
        X = pd.DataFrame({'x': rng.uniform(0, 1, 40)})
        y = np.where(X['x'] > 0.5, 5000.0, 100.0)

        model = fit_regression_tree(X, y)

        assert model.training_info['selected_size'] == 2
        assert model.training_info['selected_alpha'] == 0.0
        assert model.training_info['pruned'] is False

    def test_selects_minimal_deviance(self, regression_data):
        X, y = regression_data
        model = fit_regression_tree(X, y, cv_folds=5)
        info = model.training_info

        deviances = np.array(info['cv_deviance'])
        sizes = np.array(info['candidate_sizes'])
        best = deviances.min()
        tied_sizes = sizes[np.isclose(deviances, best, rtol=1e-9, atol=1e-12)]

        assert info['selected_size'] == tied_sizes.min()
        assert info['selected_size'] <= info['unpruned_size']
        assert info['cv'] == "5-fold"

    def test_leave_one_out_default(self, regression_data):
        X, y = regression_data
        model = fit_regression_tree(X.head(30), y.head(30))

        assert model.training_info['cv'] == "leave-one-out"

    def test_too_few_rows_for_folds(self, regression_data):
        X, y = regression_data
        with pytest.raises(InsufficientData):
            fit_regression_tree(X.head(3), y.head(3), cv_folds=5)

    def test_cancelled(self, regression_data):
        X, y = regression_data
        token = CancellationToken()
        token.cancel()

        with pytest.raises(TrainingCancelled):
            fit_regression_tree(X, y, cv_folds=5, cancel_token=token)


class TestHyperparameterGrid:
    """Tests for HyperparameterGrid."""

    def test_default_grid(self):
        grid = HyperparameterGrid()
        cells = grid.cells()

        assert len(grid) == 9
        assert len(cells) == 9
        assert cells[0] == BoostingParams(50, 1, 0.1, 10)
        assert cells[1] == BoostingParams(50, 2, 0.1, 10)
        assert cells[-1] == BoostingParams(150, 3, 0.1, 10)

    def test_from_config(self):
        grid = HyperparameterGrid.from_config({'n_estimators': [10, 20], 'interaction_depth': [2]})

        assert len(grid) == 2
        assert grid.shrinkage == (0.1,)


class TestBoostedEnsemble:
    """Tests for tune_boosted_ensemble and fit_boosted_ensemble."""

    def test_selected_cell_in_grid(self, regression_data):
        X, y = regression_data
        grid = HyperparameterGrid()

        model = fit_boosted_ensemble(X, y, grid=grid, cv_folds=3, cv_repeats=1, seed=7)
        tuning = model.training_info['tuning']

        assert model.kind == BOOSTED_ENSEMBLE
        assert tuning.selected in grid.cells()
        assert len(tuning.table) == 9
        assert tuning.n_viable == 9
        assert tuning.table.loc[tuning.selected_index, 'rmse'] == tuning.table['rmse'].min()
        assert model.estimator.n_estimators == tuning.selected.n_estimators

    def test_reproducible(self, regression_data):
        """The same seed gives the same cell and the same predictions."""
        X, y = regression_data

        first = fit_boosted_ensemble(X, y, cv_folds=3, cv_repeats=2, seed=123)
        second = fit_boosted_ensemble(X, y, cv_folds=3, cv_repeats=2, seed=123)

        assert first.training_info['tuning'].selected == second.training_info['tuning'].selected
        np.testing.assert_allclose(first.predict(X), second.predict(X))

    def test_failing_cells_excluded(self, regression_data):
        """A cell whose fit raises is marked non-viable, the others still compete."""
        X, y = regression_data
        grid = HyperparameterGrid(
            n_estimators=(50,),
            interaction_depth=(1, 2),
            min_samples_leaf=(0, 10),
        )

        tuning = tune_boosted_ensemble(X, y, grid=grid, cv_folds=3, cv_repeats=1)

        table = tuning.table
        assert not table.loc[table['min_samples_leaf'] == 0, 'viable'].any()
        assert table.loc[table['min_samples_leaf'] == 10, 'viable'].all()
        assert tuning.selected.min_samples_leaf == 10

    def test_no_viable_cell(self, regression_data):
        X, y = regression_data
        grid = HyperparameterGrid(n_estimators=(50,), interaction_depth=(1,), min_samples_leaf=(0,))

        with pytest.raises(ModelFitFailure):
            tune_boosted_ensemble(X, y, grid=grid, cv_folds=3, cv_repeats=1)

    def test_cancelled(self, regression_data):
        X, y = regression_data
        token = CancellationToken()
        token.cancel()

        with pytest.raises(TrainingCancelled):
            fit_boosted_ensemble(X, y, cv_folds=3, cv_repeats=1, cancel_token=token)

    def test_too_few_rows(self, regression_data):
        X, y = regression_data
        with pytest.raises(InsufficientData):
            tune_boosted_ensemble(X.head(5), y.head(5), cv_folds=10)


class TestLinearModel:
    """Tests for fit_linear_model."""

    def test_recovers_coefficients(self, regression_data):
        X, y = regression_data
        model = fit_linear_model(X, y)

        coefs = model.training_info['coefficients']
        assert coefs['a'] == pytest.approx(200, rel=0.05)
        assert coefs['b'] == pytest.approx(50, rel=0.2)
        assert model.training_info['aliased'] == []

    def test_collinear_predictors_aliased(self, regression_data):
        X, y = regression_data
        X = X.assign(a_twice=2 * X['a'], constant=1.0)

        model = fit_linear_model(X, y)

        assert model.training_info['aliased'] == ['a_twice', 'constant']
        assert 'a_twice' not in model.feature_names
        assert np.isfinite(model.predict(X)).all()

    def test_collinear_strict(self, regression_data):
        X, y = regression_data
        X = X.assign(a_plus_b=X['a'] + X['b'])

        with pytest.raises(ModelFitFailure, match="a_plus_b"):
            fit_linear_model(X, y, strict=True)

    def test_no_usable_predictor(self):
        X = pd.DataFrame({'zero': np.zeros(10)})
        with pytest.raises(ModelFitFailure):
            fit_linear_model(X, np.arange(10.0))


class TestFittedModel:
    """Tests for FittedModel scoring and persistence."""

    def test_missing_column(self, regression_data):
        X, y = regression_data
        model = fit_linear_model(X, y)

        with pytest.raises(PredictionFailure, match="Missing"):
            model.predict(X.drop(columns=['a']))

    def test_non_finite_row(self, regression_data):
        X, y = regression_data
        model = fit_linear_model(X, y)
        X_bad = X.copy()
        X_bad.loc[0, 'b'] = np.nan

        with pytest.raises(PredictionFailure):
            model.predict(X_bad)

    def test_column_order_ignored(self, regression_data):
        X, y = regression_data
        model = fit_linear_model(X, y)

        np.testing.assert_allclose(model.predict(X[X.columns[::-1]]), model.predict(X))

    def test_save_load(self, regression_data, tmp_path):
        X, y = regression_data
        model = fit_regression_tree(X, y, cv_folds=5)

        path = tmp_path / "models" / "tree.joblib"
        model.save(path)
        loaded = FittedModel.load(path)

        assert loaded.kind == model.kind
        assert loaded.feature_names == model.feature_names
        np.testing.assert_allclose(loaded.predict(X), model.predict(X))


class TestTrainModels:
    """Tests for the config-driven train_models entry point."""

    def test_trains_all_three(self, regression_data, fast_config, tmp_path):
        X, y = regression_data

        models = train_models(X, y, fast_config, seed=1, save_dir=tmp_path)

        assert set(models) == {REGRESSION_TREE, BOOSTED_ENSEMBLE, LINEAR_MODEL}
        assert models[REGRESSION_TREE].training_info['cv'] == "5-fold"
        for kind in models:
            assert (tmp_path / f"{kind}.joblib").exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
