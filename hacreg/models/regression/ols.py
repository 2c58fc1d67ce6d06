# hacreg/models/regression/ols.py
"""
Ordinary Least Squares (OLS) Regression Module

OLS estimation with a pluggable coefficient covariance: classical (i.i.d.
errors), White heteroskedasticity-robust, or Newey-West HAC. A response
matrix Y with n columns is treated as n equations sharing the regressors X,
each solved as an independent least-squares problem.

Coefficients always come from a direct least-squares solve of X b = Y.
The classical covariance uses the population residual variance u'u / T.

Classes:
    OLS: Ordinary Least Squares regression model
    OLSResult: Container for OLS regression results

Functions:
    fit_ols: Estimate coefficients, residuals, covariance and adjusted R^2
    least_squares: Solve X b = Y for one or more response columns
    sandwich_hac: HAC sandwich covariance of the stacked coefficients
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from scipy import linalg
import statsmodels.api as sm
from statsmodels.stats.stattools import durbin_watson as _durbin_watson

from hacreg.core.base import RegressionModelBase
from hacreg.core.exceptions import ParameterError, raise_dimension_mismatch
from hacreg.core.results import EstimationResult
from hacreg.core.types import (
    CoefficientArray, CovarianceMatrix, CovarianceType, KernelType, Matrix, RegressionData,
    RegressorMatrix, ResidualArray, ResponseData
)
from hacreg.core.validation import (
    validate_bandwidth, validate_full_rank, validate_kernel, validate_matrix,
    validate_regression_data
)
from hacreg.utils.covariance import hac_covariance
from hacreg.utils.matrix_ops import cross_product_inverse, sandwich_covariance

# Set up module-level logger
logger = logging.getLogger("hacreg.models.regression.ols")

COV_TYPES = ("classical", "robust", "hac")


@dataclass
class OLSResult(EstimationResult):
    """
    Results container for OLS regression.

    ``coefficients`` is (K,) for a 1-D response and K x n otherwise;
    ``residuals`` and ``fitted_values`` share the shape of the response.
    ``covariance`` is the K x K (or nK x nK) covariance of the coefficients
    stacked equation by equation, or None when no covariance was requested.

    Attributes:
        residuals: Residuals u = Y - X b
        fitted_values: Fitted values X b
        r2a: 1 - var(u) / var(Y), per equation
        sigma2: Residual variance u'u / T, per equation
        cov_type: Covariance estimator used ("classical", "robust", "hac" or None)
        bandwidth: Lag bandwidth used by the HAC estimator
        kernel: Kernel used by the HAC estimator
        n_obs: Number of observations T
        n_regressors: Number of regressors K
        n_equations: Number of equations n
        durbin_watson: Durbin-Watson statistic of the residuals, per equation
        variable_names: Names of the regressors
        response_names: Names of the response columns
    """

    residuals: Optional[np.ndarray] = None
    fitted_values: Optional[np.ndarray] = None
    r2a: Optional[Union[float, np.ndarray]] = None
    sigma2: Optional[Union[float, np.ndarray]] = None
    cov_type: Optional[str] = None
    bandwidth: int = 0
    kernel: str = "bartlett"
    n_obs: int = 0
    n_regressors: int = 0
    n_equations: int = 1
    durbin_watson: Optional[Union[float, np.ndarray]] = None
    variable_names: Optional[List[str]] = None
    response_names: Optional[List[str]] = None

    def summary(self) -> str:
        """Generate a text summary of the OLS regression results."""
        base_summary = super().summary()

        fit_stats = "Model Fit Statistics:\n"
        fit_stats += f"Observations: {self.n_obs}\n"
        fit_stats += f"Regressors: {self.n_regressors}\n"
        fit_stats += f"Equations: {self.n_equations}\n"
        cov_label = self.cov_type if self.cov_type is not None else "none"
        if self.cov_type == "hac":
            cov_label += f" ({self.kernel}, bandwidth={self.bandwidth})"
        fit_stats += f"Covariance: {cov_label}\n"

        for label, value in (("Adjusted R-squared", self.r2a),
                             ("Residual variance", self.sigma2),
                             ("Durbin-Watson", self.durbin_watson)):
            if value is None:
                continue
            values = np.atleast_1d(value)
            fit_stats += f"{label}: " + ", ".join(f"{v:.6f}" for v in values) + "\n"

        return base_summary + fit_stats + "\n"


def least_squares(X: Matrix, Y: np.ndarray) -> CoefficientArray:
    """
    Solve X b = Y in the least-squares sense.

    Args:
        X: T x K regressor matrix
        Y: Response, (T,) or T x n

    Returns:
        np.ndarray: Coefficients, (K,) or K x n
    """
    b, _, _, _ = linalg.lstsq(X, Y, check_finite=False)
    return b


def sandwich_hac(X: Matrix,
                 residuals: ResidualArray,
                 bandwidth: int,
                 kernel: KernelType = "bartlett") -> Tuple[CovarianceMatrix, CovarianceMatrix]:
    """
    HAC sandwich covariance of the stacked OLS coefficients.

    The moment conditions g_i = X * u_i (row-wise products) of the n
    equations are placed side by side in G (T x nK) and

        S0 = hac_covariance(G, bandwidth, demean=False)
        V  = (I_n kron Q^-1) S0 (I_n kron Q^-1) / T,  Q = X'X / T

    Bandwidth 0 gives the White heteroskedasticity-robust covariance.

    Args:
        X: T x K regressor matrix
        residuals: (T,) or T x n residual matrix
        bandwidth: Lag bandwidth for the long-run covariance
        kernel: HAC kernel

    Returns:
        Tuple[CovarianceMatrix, CovarianceMatrix]: (V, S0)
    """
    T, K = X.shape
    U = residuals.reshape(T, -1)
    n_equations = U.shape[1]

    G = np.hstack([X * U[:, [i]] for i in range(n_equations)])
    S0 = hac_covariance(G, bandwidth, kernel=kernel, demean=False)

    Q_inv = cross_product_inverse(X) * T
    V = sandwich_covariance(Q_inv, S0, n_equations, T)
    return V, S0


def _classical_covariance(X: Matrix, residuals: np.ndarray) -> Tuple[CovarianceMatrix, np.ndarray]:
    T = X.shape[0]
    U = residuals.reshape(T, -1)
    sigma = U.T @ U / T
    XtX_inv = cross_product_inverse(X)
    if sigma.shape[0] == 1:
        return sigma[0, 0] * XtX_inv, np.diag(sigma)
    return np.kron(sigma, XtX_inv), np.diag(sigma)


def _parameter_names(variable_names: List[str],
                     response_names: List[str],
                     n_equations: int) -> List[str]:
    if n_equations == 1:
        return list(variable_names)
    return [f"{eq}:{var}" for eq in response_names for var in variable_names]


def fit_ols(Y: ResponseData,
            X: RegressorMatrix,
            cov_type: Optional[CovarianceType] = "classical",
            bandwidth: int = 0,
            kernel: KernelType = "bartlett",
            model_name: str = "OLS Regression") -> OLSResult:
    """
    Estimate a linear regression by ordinary least squares.

    Args:
        Y: Response, (T,) for a single equation or T x n for n equations
           sharing X. NumPy arrays, Series and DataFrames are accepted.
        X: T x K regressor matrix (include a constant column yourself)
        cov_type: "classical" for (X'X)^-1 u'u/T, "robust" for the White
           sandwich, "hac" for the Newey-West sandwich, or None to skip
        bandwidth: Lag bandwidth for ``cov_type="hac"``
        kernel: Kernel for ``cov_type="hac"``
        model_name: Name stored on the result

    Returns:
        OLSResult: Coefficients, residuals, fitted values, covariance,
        adjusted R^2 and diagnostics

    Raises:
        RankDeficiencyError: If T < K or X is not of full column rank
        DimensionMismatchError: If Y and X have different numbers of rows
        ParameterError: If cov_type or kernel is not supported
        InvalidBandwidthError: If bandwidth is negative or not an integer
        DataError: If the inputs contain NaN or infinite values

    Examples:
        >>> import numpy as np
        >>> from hacreg import fit_ols
        >>> X = np.column_stack([np.ones(5), np.arange(1, 6)])
        >>> y = np.array([2.1, 3.9, 6.2, 7.8, 10.1])
        >>> result = fit_ols(y, X)
        >>> np.round(result.coefficients, 2)
        array([0.05, 1.99])
    """
    if cov_type is not None and cov_type not in COV_TYPES:
        raise ParameterError(
            f"cov_type must be one of {COV_TYPES} or None, got {cov_type!r}",
            param_name="cov_type",
            param_value=cov_type,
            constraint=f"one of {COV_TYPES} or None"
        )
    bandwidth = validate_bandwidth(bandwidth)
    kernel = validate_kernel(kernel)

    y, X_arr, y_names, x_names = validate_regression_data(Y, X)
    T, K = X_arr.shape
    validate_full_rank(X_arr)

    b = least_squares(X_arr, y)
    fitted = X_arr @ b
    u = y - fitted
    n_equations = 1 if y.ndim == 1 else y.shape[1]

    logger.debug(f"OLS fit with T={T}, K={K}, n={n_equations}, cov_type={cov_type}")

    covariance = None
    if cov_type == "classical":
        covariance, sigma2 = _classical_covariance(X_arr, u)
    else:
        U = u.reshape(T, -1)
        sigma2 = np.diag(U.T @ U / T)
        if cov_type == "robust":
            covariance, _ = sandwich_hac(X_arr, u, 0, kernel)
        elif cov_type == "hac":
            covariance, _ = sandwich_hac(X_arr, u, bandwidth, kernel)

    with np.errstate(divide="ignore", invalid="ignore"):
        r2a = 1.0 - np.var(u, axis=0) / np.var(y, axis=0)
        dw = _durbin_watson(u, axis=0)

    if y.ndim == 1:
        sigma2 = float(sigma2[0])
        r2a = float(r2a)
        dw = float(dw)

    variable_names = x_names if x_names is not None else [f"x{i}" for i in range(K)]
    response_names = y_names if y_names is not None else [f"y{i}" for i in range(n_equations)]

    return OLSResult(
        model_name=model_name,
        coefficients=b,
        covariance=covariance,
        parameter_names=_parameter_names(variable_names, response_names, n_equations),
        residuals=u,
        fitted_values=fitted,
        r2a=r2a,
        sigma2=sigma2,
        cov_type=cov_type,
        bandwidth=bandwidth,
        kernel=kernel,
        n_obs=T,
        n_regressors=K,
        n_equations=n_equations,
        durbin_watson=dw,
        variable_names=variable_names,
        response_names=response_names,
    )


class OLS(RegressionModelBase):
    """
    Ordinary Least Squares (OLS) regression model.

    Attributes:
        include_constant: Whether to prepend a constant column to X (X must
            not already contain one)
        cov_type: Covariance estimator ("classical", "robust", "hac" or None)
        bandwidth: Lag bandwidth for the HAC estimator
        kernel: Kernel for the HAC estimator
    """

    def __init__(self, include_constant: bool = False,
                 cov_type: Optional[CovarianceType] = "classical", bandwidth: int = 0,
                 kernel: KernelType = "bartlett", name: str = "OLS Regression"):
        """
        Initialize the OLS model.

        Args:
            include_constant: Whether to prepend a constant column to X
            cov_type: "classical", "robust", "hac" or None
            bandwidth: Lag bandwidth for ``cov_type="hac"``
            kernel: Kernel for ``cov_type="hac"``
            name: A descriptive name for the model

        Raises:
            ParameterError: If cov_type or kernel is not supported
            InvalidBandwidthError: If bandwidth is negative or not an integer
        """
        super().__init__(name=name)
        self.include_constant = include_constant

        if cov_type is not None and cov_type not in COV_TYPES:
            raise ParameterError(
                f"cov_type must be one of {COV_TYPES} or None, got {cov_type!r}",
                param_name="cov_type",
                param_value=cov_type,
                constraint=f"one of {COV_TYPES} or None"
            )
        self.cov_type = cov_type
        self.bandwidth = validate_bandwidth(bandwidth)
        self.kernel = validate_kernel(kernel)

    def _design(self, X: Any) -> Tuple[Matrix, Optional[List[str]]]:
        X_arr, names = validate_matrix(X, "X")
        if not self.include_constant:
            return X_arr, names

        # "add" so that a single prediction row still gets its constant
        X_const = sm.add_constant(X_arr, has_constant="add")
        if names is None:
            names = [f"x{i}" for i in range(X_arr.shape[1])]
        return X_const, ["const"] + names

    def fit(self, data: RegressionData, **kwargs: Any) -> OLSResult:
        """
        Fit the OLS model to the provided data.

        Args:
            data: Tuple of (y, X)
            **kwargs: Unused

        Returns:
            OLSResult: The model estimation results

        Examples:
            >>> import numpy as np
            >>> from hacreg.models.regression import OLS
            >>> model = OLS(include_constant=True)
            >>> result = model.fit((np.array([2.1, 3.9, 6.2, 7.8, 10.1]), np.arange(1.0, 6.0)))
            >>> np.round(result.coefficients, 2)
            array([0.05, 1.99])
        """
        y, X = self.validate_data(data)

        results = fit_ols(y, X, cov_type=self.cov_type, bandwidth=self.bandwidth,
                          kernel=self.kernel, model_name=self.name)

        self._coefficients = results.coefficients
        self._residuals = results.residuals
        self._fitted_values = results.fitted_values
        self._results = results
        self._fitted = True

        return results

    def predict(self, X: Union[np.ndarray, pd.DataFrame]) -> np.ndarray:
        """
        Generate predictions from the fitted model.

        Args:
            X: Regressors, without the constant when ``include_constant`` is set

        Returns:
            np.ndarray: Predicted values

        Raises:
            NotFittedError: If the model has not been fitted
            DimensionMismatchError: If X has the wrong number of columns
        """
        self._check_fitted("predict")

        X_arr, _ = self._design(X)
        coefficients = self._coefficients
        if X_arr.shape[1] != coefficients.shape[0]:
            raise_dimension_mismatch(
                "Number of columns in X does not match the model",
                array_name="X",
                expected_shape=f"(n, {coefficients.shape[0]})",
                actual_shape=X_arr.shape
            )

        return X_arr @ coefficients

    def validate_data(self, data: RegressionData) -> Tuple[Any, Any]:
        """
        Validate the input data and build the design matrix.

        Args:
            data: Tuple of (y, X)

        Returns:
            Tuple of the response and the design matrix as a DataFrame when
            names are available, otherwise as an array

        Raises:
            TypeError: If data is not a (y, X) pair
        """
        if not isinstance(data, tuple) or len(data) != 2:
            raise TypeError("Data must be a tuple of (y, X)")

        y, X = data
        X_design, names = self._design(X)
        if names is not None:
            X_design = pd.DataFrame(X_design, columns=names)
        return y, X_design
