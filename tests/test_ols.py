# tests/test_ols.py
"""
Tests for OLS estimation with classical, White and HAC covariance.

The robust and HAC covariances are checked against statsmodels, which
implements the same sandwich without small-sample corrections.
"""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm
from numpy.testing import assert_allclose
from hypothesis import given, settings, strategies as st
from hypothesis.extra import numpy as hnp

from hacreg import OLS, fit_ols
from hacreg.core.exceptions import (
    DataError, DimensionMismatchError, InvalidBandwidthError, NotFittedError,
    ParameterError, RankDeficiencyError
)
from hacreg.models.regression.ols import least_squares, sandwich_hac


class TestFitOLS:
    """Tests for fit_ols."""

    def test_small_example(self, small_regression):
        result = fit_ols(small_regression["y"], small_regression["X"])
        assert_allclose(result.coefficients, [0.05, 1.99], atol=1e-10)
        assert abs(result.residuals.sum()) < 1e-10
        assert result.coefficients.shape == (2,)
        assert result.residuals.shape == (5,)
        assert isinstance(result.r2a, float)

    def test_recovers_coefficients(self, iid_regression):
        result = fit_ols(iid_regression["y"], iid_regression["X"])
        assert_allclose(result.coefficients, iid_regression["beta"], atol=0.2)

    def test_normal_equations(self, iid_regression):
        X = iid_regression["X"]
        result = fit_ols(iid_regression["y"], X)
        assert_allclose(X.T @ result.residuals, 0.0, atol=1e-8)
        assert_allclose(result.fitted_values + result.residuals, iid_regression["y"])

    @settings(max_examples=30, deadline=None)
    @given(
        data=hnp.arrays(np.float64, (30, 3),
                        elements=st.floats(-10, 10, allow_nan=False, allow_infinity=False)),
        y=hnp.arrays(np.float64, (30,),
                     elements=st.floats(-10, 10, allow_nan=False, allow_infinity=False)),
    )
    def test_normal_equations_property(self, data, y):
        X = np.column_stack([np.ones(30), data])
        # Keep X comfortably full rank
        sv = np.linalg.svd(X, compute_uv=False)
        if sv.min() < 1e-3 * sv.max():
            return
        result = fit_ols(y, X, cov_type=None)
        scale = max(1.0, float(np.abs(X).max() * np.abs(y).max()))
        assert_allclose(X.T @ result.residuals, 0.0, atol=1e-8 * scale * 30)

    def test_classical_covariance(self, iid_regression):
        y, X = iid_regression["y"], iid_regression["X"]
        result = fit_ols(y, X)
        T = X.shape[0]
        sigma2 = result.residuals @ result.residuals / T
        assert result.sigma2 == pytest.approx(sigma2)
        assert_allclose(result.covariance, sigma2 * np.linalg.inv(X.T @ X))

        sm_cov = sm.OLS(y, X).fit().cov_params()
        assert_allclose(result.covariance, sm_cov * (T - 2) / T)

    def test_robust_matches_statsmodels_hc0(self, iid_regression):
        y, X = iid_regression["y"], iid_regression["X"]
        result = fit_ols(y, X, cov_type="robust")
        expected = sm.OLS(y, X).fit(cov_type="HC0").cov_params()
        assert_allclose(result.covariance, expected, rtol=1e-8)

    @pytest.mark.parametrize("bandwidth", [1, 4, 10])
    def test_hac_matches_statsmodels(self, ar1_regression, bandwidth):
        y, X = ar1_regression["y"], ar1_regression["X"]
        result = fit_ols(y, X, cov_type="hac", bandwidth=bandwidth)
        expected = sm.OLS(y, X).fit(
            cov_type="HAC", cov_kwds={"maxlags": bandwidth, "use_correction": False}
        ).cov_params()
        assert_allclose(result.covariance, expected, rtol=1e-8)
        assert result.cov_type == "hac"
        assert result.bandwidth == bandwidth

    def test_hac_zero_bandwidth_is_robust(self, iid_regression):
        y, X = iid_regression["y"], iid_regression["X"]
        hac = fit_ols(y, X, cov_type="hac", bandwidth=0)
        robust = fit_ols(y, X, cov_type="robust")
        assert_allclose(hac.covariance, robust.covariance)

    def test_hac_larger_than_classical_with_autocorrelation(self, ar1_regression):
        y, X = ar1_regression["y"], ar1_regression["X"]
        classical = fit_ols(y, X)
        hac = fit_ols(y, X, cov_type="hac", bandwidth=12)
        assert hac.std_errors[1] > classical.std_errors[1]

    def test_adjusted_r2_and_durbin_watson(self, iid_regression):
        y, X = iid_regression["y"], iid_regression["X"]
        result = fit_ols(y, X)
        assert result.r2a == pytest.approx(1 - np.var(result.residuals) / np.var(y))
        u = result.residuals
        assert result.durbin_watson == pytest.approx(np.sum(np.diff(u) ** 2) / np.sum(u ** 2))

    def test_multiple_equations(self, system_regression):
        Y, X = system_regression["Y"], system_regression["X"]
        result = fit_ols(Y, X)
        assert result.coefficients.shape == (3, 2)
        assert result.residuals.shape == Y.shape
        assert result.covariance.shape == (6, 6)
        assert result.n_equations == 2
        for i in range(2):
            single = fit_ols(Y[:, i], X)
            assert_allclose(result.coefficients[:, i], single.coefficients)
            assert_allclose(result.covariance[3 * i:3 * i + 3, 3 * i:3 * i + 3], single.covariance)
        assert result.parameter_names[0] == "y0:x0"
        assert result.parameter_names[3] == "y1:x0"

    def test_pandas_labels(self, iid_regression):
        X = pd.DataFrame(iid_regression["X"], columns=["const", "x"])
        y = pd.Series(iid_regression["y"], name="y")
        result = fit_ols(y, X)
        assert result.variable_names == ["const", "x"]
        assert result.response_names == ["y"]
        df = result.to_dataframe()
        assert list(df.index) == ["const", "x"]
        assert "const" in result.summary()

    def test_no_covariance(self, small_regression):
        result = fit_ols(small_regression["y"], small_regression["X"], cov_type=None)
        assert result.covariance is None
        assert result.std_errors is None

    def test_rank_deficient(self):
        X = np.column_stack([np.ones(10), np.arange(10.0), 2 * np.arange(10.0)])
        with pytest.raises(RankDeficiencyError):
            fit_ols(np.arange(10.0), X)

    def test_fewer_observations_than_regressors(self):
        with pytest.raises(RankDeficiencyError):
            fit_ols(np.ones(2), np.eye(2, 3))

    def test_row_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            fit_ols(np.ones(5), np.ones((6, 1)))

    def test_invalid_arguments(self, small_regression):
        y, X = small_regression["y"], small_regression["X"]
        with pytest.raises(ParameterError):
            fit_ols(y, X, cov_type="hc3")
        with pytest.raises(InvalidBandwidthError):
            fit_ols(y, X, cov_type="hac", bandwidth=-2)
        with pytest.raises(DataError):
            fit_ols(np.array([1.0, np.nan, 2.0, 3.0, 4.0]), X)

    @pytest.mark.parametrize("cov_type", ["classical", "robust", "hac", None])
    def test_unknown_kernel_rejected_for_every_cov_type(self, small_regression, cov_type):
        with pytest.raises(ParameterError, match="kernel"):
            fit_ols(small_regression["y"], small_regression["X"], cov_type=cov_type, kernel="bogus")

    def test_kernel_name_is_normalized(self, ar1_regression):
        y, X = ar1_regression["y"], ar1_regression["X"]
        result = fit_ols(y, X, cov_type="hac", bandwidth=3, kernel="Parzen")
        assert result.kernel == "parzen"


class TestHelpers:
    """Tests for the least-squares and sandwich helpers."""

    def test_least_squares_matrix_response(self, system_regression):
        Y, X = system_regression["Y"], system_regression["X"]
        B = least_squares(X, Y)
        assert_allclose(B, np.linalg.lstsq(X, Y, rcond=None)[0])

    def test_sandwich_white_formula(self, iid_regression):
        X = iid_regression["X"]
        u = fit_ols(iid_regression["y"], X).residuals
        V, S0 = sandwich_hac(X, u, 0)
        XtX_inv = np.linalg.inv(X.T @ X)
        meat = (X * u[:, None]).T @ (X * u[:, None])
        assert_allclose(V, XtX_inv @ meat @ XtX_inv)
        assert_allclose(S0, meat / X.shape[0])


class TestOLSModel:
    """Tests for the OLS class."""

    def test_fit_with_constant(self, small_regression):
        model = OLS(include_constant=True)
        result = model.fit((small_regression["y"], np.arange(1.0, 6.0)))
        assert_allclose(result.coefficients, [0.05, 1.99], atol=1e-10)
        assert result.variable_names == ["const", "x0"]
        assert model.fitted
        assert_allclose(model.predict(np.array([6.0])), [0.05 + 1.99 * 6], atol=1e-10)

    def test_predict_before_fit(self):
        with pytest.raises(NotFittedError):
            OLS().predict(np.ones((2, 2)))

    def test_predict_wrong_columns(self, small_regression):
        model = OLS()
        model.fit((small_regression["y"], small_regression["X"]))
        with pytest.raises(DimensionMismatchError):
            model.predict(np.ones((2, 3)))

    def test_invalid_data(self):
        with pytest.raises(TypeError):
            OLS().fit([np.ones(3), np.ones(3)])

    def test_invalid_cov_type(self):
        with pytest.raises(ParameterError):
            OLS(cov_type="bogus")

    def test_invalid_kernel(self):
        with pytest.raises(ParameterError):
            OLS(kernel="bogus")

    def test_summary(self, iid_regression):
        model = OLS(cov_type="hac", bandwidth=3)
        assert "not fitted" in model.summary()
        model.fit((iid_regression["y"], iid_regression["X"]))
        text = model.summary()
        assert "hac (bartlett, bandwidth=3)" in text
        assert "Durbin-Watson" in text
