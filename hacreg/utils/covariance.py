# hacreg/utils/covariance.py

"""
Covariance Estimation Module

Heteroskedasticity and autocorrelation consistent (HAC) long-run covariance
estimation for a set of moment conditions, plus the kernel weights it uses.

The estimator returns the long-run covariance of sqrt(T) times the sample
mean of the rows of G. Callers rescale: divide by T for the covariance of
the mean, multiply by T for the covariance of the sum.

Functions:
    hac_covariance: Newey-West style long-run covariance of moment conditions
    kernel_weights: Kernel weights applied to the sample autocovariances
"""

import logging
from typing import Union

import numpy as np

from hacreg.core.exceptions import raise_dimension_error, warn_numeric
from hacreg.core.types import CovarianceMatrix, Kernel, KernelType, MomentConditions, Vector
from hacreg.core.validation import (
    as_float_array, validate_bandwidth, validate_kernel, validate_numeric_array
)

# Set up module-level logger
logger = logging.getLogger("hacreg.utils.covariance")

SUPPORTED_KERNELS = tuple(k.value for k in Kernel)


def kernel_weights(bandwidth: int, kernel: KernelType = "bartlett") -> Vector:
    """
    Compute kernel weights for the autocovariances at lags 1..m.

    With q = s/(m+1), the Bartlett kernel gives w_s = 1 - q and the Parzen
    kernel gives 1 - 6q^2 + 6q^3 for q <= 1/2 and 2(1 - q)^3 otherwise.

    Args:
        bandwidth: Number of lags m (a non-negative integer)
        kernel: "bartlett" (default) or "parzen"

    Returns:
        Vector of weights for lags 1..m (empty when m = 0)

    Raises:
        InvalidBandwidthError: If bandwidth is negative or not an integer
        ParameterError: If kernel is not supported

    Examples:
        >>> from hacreg.utils.covariance import kernel_weights
        >>> kernel_weights(4)
        array([0.8, 0.6, 0.4, 0.2])
    """
    m = validate_bandwidth(bandwidth)

    name = validate_kernel(kernel)

    q = np.arange(1, m + 1, dtype=np.float64) / (m + 1)
    if name == "bartlett":
        return 1.0 - q

    return np.where(q <= 0.5, 1.0 - 6.0 * q**2 + 6.0 * q**3, 2.0 * (1.0 - q)**3)


def hac_covariance(G: MomentConditions,
                   bandwidth: int,
                   kernel: KernelType = "bartlett",
                   demean: bool = True) -> Union[CovarianceMatrix, float]:
    """
    Compute the HAC long-run covariance of a set of moment conditions.

    The estimator is

        S = Gamma_0 + sum_{s=1}^{m} w_s (Gamma_s + Gamma_s')

    with Gamma_s = g[s:]' g[:-s] / T, where g is G after optional column
    demeaning. The lag terms are accumulated in increasing order of s. The
    bandwidth is clamped to T - 1; bandwidth 0 gives the White (outer
    product) estimator g'g / T.

    Args:
        G: T x q matrix of moment conditions (a length-T vector is treated
           as a single condition)
        bandwidth: Number of lags m to include (non-negative integer)
        kernel: Kernel used to weight the autocovariances
        demean: Whether to subtract the column means of G first. Sandwich
           callers pass conditions with zero mean by construction and
           switch this off.

    Returns:
        The q x q long-run covariance of sqrt(T) times the mean of G's rows,
        or a float when G is one-dimensional

    Raises:
        InvalidBandwidthError: If bandwidth is negative or not an integer
        ParameterError: If kernel is not supported
        DimensionError: If G is not 1- or 2-dimensional or has no rows
        DataError: If G contains NaN or infinite values

    Examples:
        >>> import numpy as np
        >>> from hacreg.utils.covariance import hac_covariance
        >>> rng = np.random.default_rng(0)
        >>> S = hac_covariance(rng.standard_normal((200, 2)), bandwidth=4)
        >>> S.shape
        (2, 2)
    """
    m = validate_bandwidth(bandwidth)

    g, _ = as_float_array(G, "G")
    is_vector = g.ndim == 1
    if is_vector:
        g = g.reshape(-1, 1)

    if g.ndim != 2:
        raise_dimension_error(
            "G must be a 1D or 2D array",
            array_name="G",
            expected_shape="(T,) or (T, q)",
            actual_shape=g.shape
        )

    T = g.shape[0]
    if T == 0:
        raise_dimension_error(
            "G must have at least one row",
            array_name="G",
            expected_shape="(T >= 1, q)",
            actual_shape=g.shape
        )
    validate_numeric_array(g, "G")

    if m > T - 1:
        warn_numeric(
            f"Bandwidth {m} exceeds the largest available lag; using {T - 1}",
            operation="hac_covariance",
            issue="bandwidth clamped",
            value=m
        )
        logger.debug(f"Clamping bandwidth from {m} to {T - 1}")
        m = T - 1

    weights = kernel_weights(m, kernel)

    if demean:
        g = g - g.mean(axis=0)

    S = g.T @ g / T
    for s in range(1, m + 1):
        gamma = g[s:].T @ g[:-s] / T
        S += weights[s - 1] * (gamma + gamma.T)

    S = (S + S.T) / 2

    if is_vector:
        return float(S[0, 0])
    return S
