# hacreg/models/regression/sure.py
"""
Seemingly Unrelated Regressions with a shared regressor matrix.

n equations Y[:, i] = X b_i + u_i are estimated equation by equation with
OLS. With identical regressors this is the efficient system estimator, so
only the joint covariance of the stacked coefficients needs system-level
treatment: it is the HAC sandwich built from the moment conditions of all
equations at once, which keeps their cross-equation dependence. Linear
restrictions R vec(b) = a on the stacked coefficients are tested with a
Wald statistic.

Classes:
    SURE: System estimator with HAC covariance and Wald tests
    SystemOLSResult: Results of a system fit
    WaldTestResult: Outcome of a Wald test

Functions:
    fit_ols_system: Fit the system and its HAC covariance
    linear_hypothesis_test: Wald test of R b = a for given b and V
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Optional, Union

import numpy as np
from scipy import linalg, stats

from hacreg.core.base import RegressionModelBase
from hacreg.core.config import get_config
from hacreg.core.exceptions import SingularContrastError, raise_dimension_mismatch
from hacreg.core.results import ModelResult
from hacreg.core.types import ContrastMatrix, CovarianceMatrix, KernelType, RegressionData
from hacreg.core.validation import (
    as_float_array, validate_bandwidth, validate_kernel, validate_matrix
)
from hacreg.models.regression.ols import OLSResult, fit_ols, sandwich_hac
from hacreg.utils.matrix_ops import vec

# Set up module-level logger
logger = logging.getLogger("hacreg.models.regression.sure")


@dataclass
class WaldTestResult(ModelResult):
    """
    Outcome of a Wald test of R b = a.

    Attributes:
        statistic: W = (R b - a)' (R V R')^-1 (R b - a)
        df: Number of restrictions (rows of R)
        p_value: Upper tail probability of chi-square(df) at W
        restrictions: The contrast matrix R
        target: The hypothesized value a
    """

    statistic: float = 0.0
    df: int = 0
    p_value: float = 1.0
    restrictions: Optional[np.ndarray] = None
    target: Optional[np.ndarray] = None

    def summary(self) -> str:
        """Generate a text summary of the test."""
        header = "Wald Test\n"
        header += "=" * (len(header) - 1) + "\n"
        body = f"Statistic: {self.statistic:.6f}\n"
        body += f"Degrees of freedom: {self.df}\n"
        body += f"p-value: {self.p_value:.6f}\n"
        return header + body

    def __repr__(self) -> str:
        return (f"WaldTestResult(statistic={self.statistic:.6f}, df={self.df}, "
                f"p_value={self.p_value:.6f})")


def linear_hypothesis_test(params: np.ndarray,
                           covariance: CovarianceMatrix,
                           R: ContrastMatrix,
                           a: Optional[Union[np.ndarray, float]] = None) -> WaldTestResult:
    """
    Wald test of the linear restrictions R params = a.

    Args:
        params: Stacked coefficient vector of length p
        covariance: p x p covariance matrix of ``params``
        R: q x p contrast matrix (a length-p vector is one restriction)
        a: Hypothesized values, length q (defaults to zeros)

    Returns:
        WaldTestResult: Statistic, degrees of freedom q and chi-square p-value

    Raises:
        DimensionMismatchError: If R does not have p columns or a does not
            have q elements
        SingularContrastError: If R V R' has rank below q

    Examples:
        >>> import numpy as np
        >>> from hacreg.models.regression.sure import linear_hypothesis_test
        >>> res = linear_hypothesis_test(np.array([1.0, 2.0]), np.eye(2), np.array([[0.0, 1.0]]))
        >>> float(res.statistic)
        4.0
    """
    params = vec(np.asarray(params, dtype=np.float64))
    covariance = np.asarray(covariance, dtype=np.float64)
    p = params.shape[0]

    R_arr, _ = as_float_array(R, "R")
    if R_arr.ndim == 1:
        R_arr = R_arr.reshape(1, -1)
    if R_arr.ndim != 2 or R_arr.shape[1] != p:
        raise_dimension_mismatch(
            f"R must have {p} columns to match the stacked coefficients",
            array_name="R",
            expected_shape=f"(q, {p})",
            actual_shape=R_arr.shape
        )
    q = R_arr.shape[0]

    if a is None:
        a_arr = np.zeros(q)
    else:
        a_arr = np.atleast_1d(as_float_array(a, "a")[0])
        if a_arr.ndim != 1 or a_arr.shape[0] != q:
            raise_dimension_mismatch(
                f"a must have {q} elements, one per restriction",
                array_name="a",
                expected_shape=(q,),
                actual_shape=a_arr.shape
            )

    RVR = R_arr @ covariance @ R_arr.T
    rank = int(np.linalg.matrix_rank(RVR, tol=get_config("numerical", "rank_tolerance")))
    if rank < q:
        raise SingularContrastError(
            f"R V R' is singular (rank {rank} < {q} restrictions)",
            n_restrictions=q,
            rank=rank,
            details="Remove redundant restrictions from R."
        )

    diff = R_arr @ params - a_arr
    statistic = float(diff @ linalg.solve(RVR, diff, assume_a="sym"))
    p_value = float(stats.chi2.sf(statistic, q))

    logger.debug(f"Wald test with {q} restrictions: W={statistic:.6f}, p={p_value:.6f}")

    return WaldTestResult(
        model_name="Wald Test",
        statistic=statistic,
        df=q,
        p_value=p_value,
        restrictions=R_arr,
        target=a_arr,
    )


@dataclass
class SystemOLSResult(OLSResult):
    """
    Results of a system fit with a HAC covariance.

    Attributes:
        params: vec of the K x n coefficient matrix (all K coefficients of
            equation 1, then equation 2, ...)
        long_run_covariance: S0, the HAC long-run covariance of the stacked
            moment conditions
    """

    params: Optional[np.ndarray] = None
    long_run_covariance: Optional[np.ndarray] = None

    def wald_test(self, R: ContrastMatrix,
                  a: Optional[Union[np.ndarray, float]] = None) -> WaldTestResult:
        """
        Test R params = a using the HAC covariance of this fit.

        Args:
            R: q x nK contrast matrix
            a: Hypothesized values (defaults to zeros)

        Returns:
            WaldTestResult: The test outcome

        Raises:
            DimensionMismatchError: If R or a have the wrong size
            SingularContrastError: If R V R' is not invertible
        """
        return linear_hypothesis_test(self.params, self.covariance, R, a)

    def summary(self) -> str:
        base_summary = super().summary()
        if self.long_run_covariance is None:
            return base_summary
        return base_summary + f"Long-run covariance dimension: {self.long_run_covariance.shape[0]}\n"


def fit_ols_system(Y: Any,
                   X: Any,
                   bandwidth: int,
                   kernel: KernelType = "bartlett",
                   model_name: str = "SURE") -> SystemOLSResult:
    """
    Fit n equations sharing X and compute the HAC covariance of vec(b).

    The moment conditions X * u_i of all equations are stacked into
    G (T x nK) and

        S0 = hac_covariance(G, bandwidth, demean=False)
        V  = (I_n kron Q^-1) S0 (I_n kron Q^-1) / T,  Q = X'X / T

    Args:
        Y: T x n responses (a length-T vector is a single equation)
        X: T x K regressors shared by every equation
        bandwidth: HAC lag bandwidth
        kernel: HAC kernel
        model_name: Name stored on the result

    Returns:
        SystemOLSResult: The fit, V, S0 and the stacked coefficients

    Raises:
        RankDeficiencyError: If T < K or X is not of full column rank
        DimensionMismatchError: If Y and X have different numbers of rows
        InvalidBandwidthError: If bandwidth is negative or not an integer
        ParameterError: If kernel is not supported

    Examples:
        >>> import numpy as np
        >>> from hacreg import fit_ols_system
        >>> rng = np.random.default_rng(1)
        >>> X = np.column_stack([np.ones(100), rng.standard_normal(100)])
        >>> Y = X @ np.array([[1.0, 0.0], [0.5, 2.0]]) + rng.standard_normal((100, 2))
        >>> result = fit_ols_system(Y, X, bandwidth=3)
        >>> result.covariance.shape
        (4, 4)
    """
    bandwidth = validate_bandwidth(bandwidth)
    kernel = validate_kernel(kernel)
    base = fit_ols(Y, X, cov_type=None, model_name=model_name)

    X_arr, _ = validate_matrix(X, "X")
    V, S0 = sandwich_hac(X_arr, base.residuals, bandwidth, kernel)

    logger.debug(
        f"System fit with n={base.n_equations}, K={base.n_regressors}, "
        f"bandwidth={bandwidth}, kernel={kernel}"
    )

    values = {f.name: getattr(base, f.name) for f in fields(base)}
    values.update(
        covariance=V,
        cov_type="hac",
        bandwidth=bandwidth,
        kernel=kernel,
        params=vec(base.coefficients),
        long_run_covariance=S0,
    )
    return SystemOLSResult(**values)


class SURE(RegressionModelBase):
    """
    System of regressions sharing one regressor matrix, with HAC inference.

    Attributes:
        bandwidth: HAC lag bandwidth
        kernel: HAC kernel
    """

    def __init__(self, bandwidth: int = 0, kernel: KernelType = "bartlett", name: str = "SURE"):
        super().__init__(name=name)
        self.bandwidth = validate_bandwidth(bandwidth)
        self.kernel = validate_kernel(kernel)

    def fit(self, data: RegressionData, **kwargs: Any) -> SystemOLSResult:
        """
        Fit the system.

        Args:
            data: Tuple of (Y, X)

        Returns:
            SystemOLSResult: The estimation results
        """
        Y, X = self.validate_data(data)
        results = fit_ols_system(Y, X, self.bandwidth, kernel=self.kernel, model_name=self.name)

        self._coefficients = results.coefficients
        self._residuals = results.residuals
        self._fitted_values = results.fitted_values
        self._results = results
        self._fitted = True
        return results

    def wald_test(self, R: ContrastMatrix,
                  a: Optional[Union[np.ndarray, float]] = None) -> WaldTestResult:
        """Test R vec(b) = a on the fitted system.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("wald_test")
        return self._results.wald_test(R, a)

    def predict(self, X: Any) -> np.ndarray:
        """Predict every equation at new regressors.

        Raises:
            NotFittedError: If the model has not been fitted
            DimensionMismatchError: If X has the wrong number of columns
        """
        self._check_fitted("predict")
        X_arr, _ = validate_matrix(X, "X")
        if X_arr.shape[1] != self._coefficients.shape[0]:
            raise_dimension_mismatch(
                "Number of columns in X does not match the model",
                array_name="X",
                expected_shape=f"(n, {self._coefficients.shape[0]})",
                actual_shape=X_arr.shape
            )
        return X_arr @ self._coefficients

    def validate_data(self, data: RegressionData) -> RegressionData:
        """Check that data is a (Y, X) pair.

        Raises:
            TypeError: If data is not a (Y, X) pair
        """
        if not isinstance(data, tuple) or len(data) != 2:
            raise TypeError("Data must be a tuple of (Y, X)")
        return data
