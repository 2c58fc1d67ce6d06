# tests/test_bootstrap.py
"""
Tests for the residual bootstrap: block index construction, reproducibility
of the draw matrix, the refit engine and the result container.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal
from hypothesis import given, settings, strategies as st

from hacreg import (
    BlockBootstrap, IIDBootstrap, block_bootstrap_indices, bootstrap_block, bootstrap_iid,
    fit_ols, summarize_draws
)
from hacreg.core.config import set_config
from hacreg.core.exceptions import (
    DimensionError, DimensionMismatchError, InvalidBandwidthError, NotFittedError,
    NumericWarning, ParameterError, RankDeficiencyError
)
from hacreg.models.bootstrap.utils import compute_confidence_interval, resolve_random_state
from tests.conftest import ScriptedGenerator


@pytest.fixture
def iid_fit(iid_regression):
    X = iid_regression["X"]
    result = fit_ols(iid_regression["y"], X)
    return result.coefficients, result.residuals, X, result


@pytest.fixture
def ar1_fit(ar1_regression):
    X = ar1_regression["X"]
    result = fit_ols(ar1_regression["y"], X)
    return result.coefficients, result.residuals, X, result


@pytest.fixture
def system_fit(system_regression):
    X = system_regression["X"]
    result = fit_ols(system_regression["Y"], X)
    return result.coefficients, result.residuals, X


class TestBlockIndices:
    """Tests for block_bootstrap_indices."""

    def test_example(self):
        assert_array_equal(block_bootstrap_indices(np.array([3, 0]), 2, 4), [3, 0, 0, 1])

    def test_block_longer_than_sample_wraps(self):
        assert_array_equal(block_bootstrap_indices(np.array([2]), 7, 5), [2, 3, 4, 0, 1])

    def test_truncated_to_sample_size(self):
        idx = block_bootstrap_indices(np.array([0, 5, 9]), 4, 10)
        assert_array_equal(idx, [0, 1, 2, 3, 5, 6, 7, 8, 9, 0])

    def test_several_draws(self):
        starts = np.array([[0, 2], [1, 3]])
        idx = block_bootstrap_indices(starts, 2, 4)
        assert_array_equal(idx, [[0, 1, 2, 3], [1, 2, 3, 0]])

    def test_invalid_inputs(self):
        with pytest.raises(InvalidBandwidthError):
            block_bootstrap_indices(np.array([0]), 0, 4)
        with pytest.raises(ParameterError):
            block_bootstrap_indices(np.array([0, 4]), 2, 4)
        with pytest.raises(ParameterError):
            block_bootstrap_indices(np.array([-1, 0]), 2, 4)
        with pytest.raises(DimensionError):
            block_bootstrap_indices(np.array([0]), 2, 4)

    @settings(max_examples=100, deadline=None)
    @given(data=st.data())
    def test_indices_in_range_and_contiguous(self, data):
        T = data.draw(st.integers(min_value=1, max_value=60))
        L = data.draw(st.integers(min_value=1, max_value=80))
        n_blocks = -(-T // L)
        starts = np.array(data.draw(
            st.lists(st.integers(min_value=0, max_value=T - 1),
                     min_size=n_blocks, max_size=n_blocks)
        ))

        idx = block_bootstrap_indices(starts, L, T)

        assert idx.shape == (T,)
        assert idx.min() >= 0
        assert idx.max() < T
        for p in range(T):
            k, j = divmod(p, L)
            assert idx[p] == (starts[k] + j) % T


class TestRandomState:
    """Tests for generator resolution."""

    def test_generator_passed_through(self):
        gen = np.random.default_rng(0)
        assert resolve_random_state(gen) is gen

    def test_duck_typed_generator(self, zero_generator):
        assert resolve_random_state(zero_generator) is zero_generator

    def test_seed_creates_generator(self):
        gen = resolve_random_state(7)
        assert_array_equal(gen.integers(0, 100, size=5),
                           np.random.default_rng(7).integers(0, 100, size=5))

    @pytest.mark.parametrize("state", ["seed", 1.5, True, -1])
    def test_invalid(self, state):
        with pytest.raises(ParameterError):
            resolve_random_state(state)


class TestReproducibility:
    """Fixed seed and inputs give bit-identical draws."""

    def test_iid_same_seed(self, iid_fit):
        b, u, X, _ = iid_fit
        first = bootstrap_iid(b, u, X, 50, seed=11)
        second = bootstrap_iid(b, u, X, 50, seed=11)
        assert_array_equal(first, second)
        assert not np.array_equal(first, bootstrap_iid(b, u, X, 50, seed=12))

    def test_block_same_seed(self, ar1_fit):
        b, u, X, _ = ar1_fit
        first = bootstrap_block(b, u, X, 8, 50, seed=3)
        second = bootstrap_block(b, u, X, 8, 50, seed=3)
        assert_array_equal(first, second)

    @pytest.mark.parametrize("n_jobs", [2, 4])
    def test_independent_of_thread_count(self, iid_fit, n_jobs):
        b, u, X, _ = iid_fit
        assert_array_equal(bootstrap_iid(b, u, X, 40, seed=5, n_jobs=1),
                           bootstrap_iid(b, u, X, 40, seed=5, n_jobs=n_jobs))
        assert_array_equal(bootstrap_block(b, u, X, 6, 40, seed=5, n_jobs=1),
                           bootstrap_block(b, u, X, 6, 40, seed=5, n_jobs=n_jobs))

    def test_seed_and_generator_agree(self, iid_fit):
        b, u, X, _ = iid_fit
        assert_array_equal(bootstrap_iid(b, u, X, 20, seed=9),
                           bootstrap_iid(b, u, X, 20, seed=np.random.default_rng(9)))

    def test_indices_drawn_in_order(self, iid_fit):
        b, u, X, _ = iid_fit
        T = X.shape[0]
        bootstrap = IIDBootstrap(n_bootstraps=3, random_state=21)
        bootstrap.fit((b, u, X))

        gen = np.random.default_rng(21)
        expected = np.vstack([gen.integers(0, T, size=T) for _ in range(3)])
        assert_array_equal(bootstrap.bootstrap_indices, expected)

    def test_block_starts_drawn_in_order(self, iid_fit):
        b, u, X, _ = iid_fit
        T = X.shape[0]
        bootstrap = BlockBootstrap(7, n_bootstraps=3, random_state=21)
        bootstrap.fit((b, u, X))

        gen = np.random.default_rng(21)
        n_blocks = -(-T // 7)
        starts = np.vstack([gen.integers(0, T, size=n_blocks) for _ in range(3)])
        assert_array_equal(bootstrap.bootstrap_indices, block_bootstrap_indices(starts, 7, T))


class TestRefit:
    """Tests for the refit engine."""

    def test_single_full_block_reproduces_fit(self, iid_fit, zero_generator):
        b, u, X, _ = iid_fit
        T = X.shape[0]
        draws = bootstrap_block(b, u, X, T, 1, seed=zero_generator)
        assert draws.shape == (1, 2)
        assert_allclose(draws[0], b, atol=1e-10)
        assert zero_generator.calls == [(0, T, 1)]

    def test_zero_indices_shift_intercept(self, iid_fit, zero_generator):
        b, u, X, _ = iid_fit
        draws = bootstrap_iid(b, u, X, 2, seed=zero_generator)
        # every y* is X b + u[0], so only the intercept moves
        expected = b + np.array([u[0], 0.0])
        assert_allclose(draws, np.vstack([expected, expected]), atol=1e-10)

    def test_system_draws_are_stacked(self, system_fit, zero_generator):
        B, U, X = system_fit
        T = X.shape[0]
        draws = bootstrap_block(B, U, X, T, 1, seed=zero_generator)
        assert draws.shape == (1, 6)
        assert_allclose(draws[0], B.reshape(-1, order="F"), atol=1e-10)

    def test_system_residual_rows_move_together(self, system_fit, zero_generator):
        B, U, X = system_fit
        draws = bootstrap_iid(B, U, X, 1, seed=zero_generator)
        shifted = B.copy()
        shifted[0] += U[0]
        assert_allclose(draws[0], shifted.reshape(-1, order="F"), atol=1e-10)

    def test_shapes(self, iid_fit, system_fit):
        b, u, X, _ = iid_fit
        assert bootstrap_iid(b, u, X, 7, seed=0).shape == (7, 2)
        B, U, Xs = system_fit
        assert bootstrap_block(B, U, Xs, 5, 7, seed=0).shape == (7, 6)

    def test_iid_std_close_to_classical(self, iid_fit):
        b, u, X, result = iid_fit
        draws = bootstrap_iid(b, u, X, 500, seed=2024)
        _, std = summarize_draws(draws)
        assert_allclose(std, result.std_errors, rtol=0.15)

    def test_block_std_exceeds_classical_and_iid_under_autocorrelation(self, ar1_fit):
        b, u, X, result = ar1_fit
        _, std_block = summarize_draws(bootstrap_block(b, u, X, 10, 500, seed=2024))
        _, std_iid = summarize_draws(bootstrap_iid(b, u, X, 500, seed=2024))
        assert std_block[1] > result.std_errors[1]
        assert std_block[1] > std_iid[1]

    def test_block_longer_than_sample_warns(self, small_regression):
        fit = fit_ols(small_regression["y"], small_regression["X"])
        with pytest.warns(NumericWarning):
            draws = bootstrap_block(fit.coefficients, fit.residuals, small_regression["X"], 8, 3, seed=1)
        assert draws.shape == (3, 2)

    def test_validation(self, iid_fit):
        b, u, X, _ = iid_fit
        with pytest.raises(ParameterError):
            bootstrap_iid(b, u, X, 0, seed=1)
        with pytest.raises(InvalidBandwidthError):
            bootstrap_block(b, u, X, 0, 10, seed=1)
        with pytest.raises(InvalidBandwidthError):
            bootstrap_block(b, u, X, 2.5, 10, seed=1)
        with pytest.raises(DimensionMismatchError):
            bootstrap_iid(b, u[:-1], X, 10, seed=1)
        with pytest.raises(DimensionMismatchError):
            bootstrap_iid(np.ones(3), u, X, 10, seed=1)
        with pytest.raises(DimensionMismatchError):
            bootstrap_iid(b, np.column_stack([u, u]), X, 10, seed=1)
        with pytest.raises(ParameterError):
            bootstrap_iid(b, u, X, 10, seed="not a seed")

    def test_rank_deficient_regressors_rejected(self):
        t = np.arange(6.0)
        X = np.column_stack([np.ones(6), t, 2 * t])
        b = np.array([1.0, 0.5, 0.0])
        u = np.linspace(-0.5, 0.5, 6)
        with pytest.raises(RankDeficiencyError):
            bootstrap_iid(b, u, X, 3, seed=1)
        with pytest.raises(RankDeficiencyError):
            bootstrap_block(b, u, X, 2, 3, seed=1)

    def test_fewer_observations_than_regressors_rejected(self):
        X = np.eye(2, 3)
        b = np.array([1.0, -1.0, 0.5])
        u = np.array([0.1, -0.1])
        with pytest.raises(RankDeficiencyError):
            bootstrap_iid(b, u, X, 2, seed=1)
        with pytest.raises(RankDeficiencyError):
            bootstrap_block(b, u, X, 1, 2, seed=1)
        with pytest.raises(RankDeficiencyError):
            BlockBootstrap(1, n_bootstraps=2, random_state=1).fit((b, u, X))


class TestBootstrapClasses:
    """Tests for the bootstrap classes and their results."""

    def test_defaults_from_config(self):
        set_config("bootstrap", "n_bootstraps", 25)
        set_config("performance", "max_workers", 3)
        bootstrap = IIDBootstrap()
        assert bootstrap.n_bootstraps == 25
        assert bootstrap.params.n_jobs == 3

    def test_block_length_validated_at_construction(self):
        with pytest.raises(InvalidBandwidthError):
            BlockBootstrap(0)
        assert BlockBootstrap(4.0).block_length == 4

    def test_draws_before_fit(self):
        with pytest.raises(NotFittedError):
            IIDBootstrap(n_bootstraps=5).draws

    def test_fit_requires_triple(self, iid_fit):
        b, u, X, _ = iid_fit
        with pytest.raises(TypeError):
            IIDBootstrap(n_bootstraps=5).fit((b, u))

    def test_result(self, ar1_fit):
        b, u, X, _ = ar1_fit
        bootstrap = BlockBootstrap(5, n_bootstraps=200, random_state=1)
        result = bootstrap.fit((b, u, X))

        assert result.method == "block"
        assert result.block_length == 5
        assert result.n_bootstraps == 200
        assert_array_equal(result.original_coefficients, b)
        assert_allclose(result.mean, result.draws.mean(axis=0))
        assert_allclose(result.std, result.draws.std(axis=0, ddof=0))
        assert bootstrap.draws is result.draws

        ci = result.confidence_interval(0.9)
        assert ci.shape == (2, 2)
        assert np.all(ci[:, 0] <= ci[:, 1])
        assert_allclose(ci[:, 0], np.percentile(result.draws, 5, axis=0))

        df = result.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert df.shape == (200, 2)
        assert list(df.columns) == ["b0", "b1"]

        text = result.summary()
        assert "Method: block (block length 5)" in text
        assert "Draws: 200" in text

    def test_fit_overrides(self, iid_fit):
        b, u, X, _ = iid_fit
        bootstrap = IIDBootstrap(n_bootstraps=10, random_state=1)
        first = bootstrap.fit((b, u, X), random_state=2).draws
        assert_array_equal(first, bootstrap_iid(b, u, X, 10, seed=2))

    def test_plot(self, iid_fit):
        import matplotlib.pyplot as plt

        b, u, X, _ = iid_fit
        result = IIDBootstrap(n_bootstraps=50, random_state=0).fit((b, u, X))
        fig = result.plot(bins=10)
        assert len(fig.axes) == 2
        plt.close(fig)


class TestSummaries:
    """Tests for draw summaries."""

    def test_summarize_draws_population_std(self):
        draws = np.array([[1.0, 10.0], [3.0, 10.0]])
        mean, std = summarize_draws(draws)
        assert_allclose(mean, [2.0, 10.0])
        assert_allclose(std, [1.0, 0.0])

    def test_confidence_interval_bounds(self):
        draws = np.arange(101.0).reshape(-1, 1)
        assert_allclose(compute_confidence_interval(draws, 0.9), [[5.0, 95.0]])
        with pytest.raises(ParameterError):
            compute_confidence_interval(draws, 1.5)
