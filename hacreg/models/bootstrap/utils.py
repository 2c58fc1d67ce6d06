'''
Utility functions for the residual bootstrap.

Helpers shared by the bootstrap classes: turning a ``random_state`` into a
generator, validating an original fit (b, u, X), building block indices
from drawn starts, and summarizing a matrix of coefficient draws.
'''

import logging
from typing import Any, Optional, Tuple

import numpy as np

from hacreg.core.config import get_config
from hacreg.core.exceptions import (
    ParameterError, raise_dimension_error, raise_dimension_mismatch
)
from hacreg.core.types import BootstrapDraws, BootstrapIndices, IntegerGenerator, RandomState
from hacreg.core.validation import (
    as_float_array, validate_block_length, validate_full_rank, validate_numeric_array,
    validate_positive_integer
)
from hacreg.models.bootstrap._numba_core import expand_block_starts

# Set up module-level logger
logger = logging.getLogger("hacreg.models.bootstrap.utils")


def resolve_random_state(random_state: RandomState) -> IntegerGenerator:
    """
    Return the generator that all index draws of one run are taken from.

    Args:
        random_state: None (fresh entropy), an integer seed, a
            ``numpy.random.Generator``, or any object with an
            ``integers(low, high, size)`` method

    Returns:
        IntegerGenerator: The generator to draw from

    Raises:
        ParameterError: If random_state is none of the accepted kinds
    """
    if random_state is None:
        return np.random.default_rng()
    if isinstance(random_state, np.random.Generator):
        return random_state
    if isinstance(random_state, (int, np.integer)) and not isinstance(random_state, bool):
        if random_state < 0:
            raise ParameterError(
                "random_state seed must be non-negative",
                param_name="random_state",
                param_value=random_state,
                constraint="integer >= 0"
            )
        return np.random.default_rng(int(random_state))
    if isinstance(random_state, IntegerGenerator):
        logger.debug(f"Using caller-supplied generator {type(random_state).__name__}")
        return random_state

    raise ParameterError(
        "random_state must be None, an integer seed, a numpy.random.Generator "
        "or an object with an integers(low, high, size) method",
        param_name="random_state",
        param_value=type(random_state).__name__
    )


def validate_bootstrap_inputs(
    b: Any,
    u: Any,
    X: Any
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Check that coefficients, residuals and regressors describe one fit.

    Args:
        b: Coefficients, (K,) or K x n
        u: Residuals, (T,) or T x n
        X: T x K regressors

    Returns:
        Tuple of (B, U, X) with B as K x n and U as T x n

    Raises:
        DimensionError: If an input has the wrong number of dimensions
        DimensionMismatchError: If the shapes of b, u and X disagree
        DataError: If an input contains NaN or infinite values
        RankDeficiencyError: If T < K or X is not of full column rank
    """
    X_arr, _ = as_float_array(X, "X")
    if X_arr.ndim == 1:
        X_arr = X_arr.reshape(-1, 1)
    if X_arr.ndim != 2 or X_arr.shape[0] == 0:
        raise_dimension_error(
            "X must be a non-empty 2D array",
            array_name="X",
            expected_shape="(T, K)",
            actual_shape=X_arr.shape
        )
    T, K = X_arr.shape

    B, _ = as_float_array(b, "b")
    U, _ = as_float_array(u, "u")
    if B.ndim not in (1, 2):
        raise_dimension_error(
            "b must be a 1D or 2D array",
            array_name="b",
            expected_shape="(K,) or (K, n)",
            actual_shape=B.shape
        )
    if U.ndim not in (1, 2):
        raise_dimension_error(
            "u must be a 1D or 2D array",
            array_name="u",
            expected_shape="(T,) or (T, n)",
            actual_shape=U.shape
        )
    B = B.reshape(B.shape[0], -1)
    U = U.reshape(U.shape[0], -1)

    if B.shape[0] != K:
        raise_dimension_mismatch(
            f"b has {B.shape[0]} rows but X has {K} columns",
            array_name="b",
            expected_shape=f"({K}, n)",
            actual_shape=B.shape
        )
    if U.shape[0] != T:
        raise_dimension_mismatch(
            f"u has {U.shape[0]} rows but X has {T}",
            array_name="u",
            expected_shape=f"({T}, n)",
            actual_shape=U.shape
        )
    if U.shape[1] != B.shape[1]:
        raise_dimension_mismatch(
            f"b describes {B.shape[1]} equations but u has {U.shape[1]} columns",
            array_name="u",
            expected_shape=f"({T}, {B.shape[1]})",
            actual_shape=U.shape
        )

    validate_numeric_array(X_arr, "X")
    validate_numeric_array(B, "b")
    validate_numeric_array(U, "u")

    # X is fixed across draws, so one rank check covers every refit
    validate_full_rank(X_arr)
    return B, U, X_arr


def block_bootstrap_indices(
    starts: Any,
    block_length: int,
    data_length: int
) -> BootstrapIndices:
    """
    Build circular block bootstrap indices from block start positions.

    Each start s expands to s, s+1, ..., s+L-1 modulo T, the blocks are
    concatenated in order and the result is truncated to T indices.

    Args:
        starts: Start positions in [0, T), either one draw (n_blocks,) or
            several draws (n_draws, n_blocks)
        block_length: Block length L (positive integer)
        data_length: Number of observations T

    Returns:
        BootstrapIndices: (T,) for a single draw, (n_draws, T) otherwise

    Raises:
        InvalidBandwidthError: If block_length is not a positive integer
        ParameterError: If data_length is not positive or a start lies
            outside [0, T)
        DimensionError: If the blocks cannot cover T observations

    Examples:
        >>> import numpy as np
        >>> from hacreg.models.bootstrap.utils import block_bootstrap_indices
        >>> block_bootstrap_indices(np.array([3, 0]), 2, 4)
        array([3, 0, 0, 1])
    """
    L = validate_block_length(block_length)
    T = validate_positive_integer(data_length, "data_length")

    starts_arr = np.asarray(starts)
    single = starts_arr.ndim == 1
    starts_arr = np.atleast_2d(starts_arr).astype(np.int64)
    if starts_arr.ndim != 2:
        raise_dimension_error(
            "starts must be a 1D or 2D array",
            array_name="starts",
            expected_shape="(n_blocks,) or (n_draws, n_blocks)",
            actual_shape=starts_arr.shape
        )
    if starts_arr.shape[1] * L < T:
        raise_dimension_error(
            f"{starts_arr.shape[1]} blocks of length {L} cannot cover {T} observations",
            array_name="starts",
            expected_shape=f"(n_draws, >= {-(-T // L)})",
            actual_shape=starts_arr.shape
        )
    if starts_arr.size and (starts_arr.min() < 0 or starts_arr.max() >= T):
        raise ParameterError(
            f"Block starts must lie in [0, {T})",
            param_name="starts",
            param_value=(int(starts_arr.min()), int(starts_arr.max())),
            constraint=f"0 <= start < {T}"
        )

    indices = expand_block_starts(starts_arr, L, T)
    return indices[0] if single else indices


def summarize_draws(draws: BootstrapDraws) -> Tuple[np.ndarray, np.ndarray]:
    """Column means and population standard deviations (ddof=0) of the draws."""
    draws = np.asarray(draws, dtype=np.float64)
    if draws.ndim == 1:
        draws = draws.reshape(-1, 1)
    return draws.mean(axis=0), draws.std(axis=0, ddof=0)


def compute_confidence_interval(
    draws: BootstrapDraws,
    confidence_level: Optional[float] = None
) -> np.ndarray:
    """
    Percentile confidence intervals for every column of the draws.

    Args:
        draws: NSim x p matrix of bootstrap coefficients
        confidence_level: Coverage in (0, 1); defaults to the configured
            ``bootstrap.confidence_level``

    Returns:
        np.ndarray: p x 2 array of [lower, upper] bounds

    Raises:
        ParameterError: If confidence_level is not in (0, 1)
    """
    if confidence_level is None:
        confidence_level = get_config("bootstrap", "confidence_level")
    if not 0 < confidence_level < 1:
        raise ParameterError(
            "confidence_level must be between 0 and 1",
            param_name="confidence_level",
            param_value=confidence_level,
            constraint="0 < confidence_level < 1"
        )

    draws = np.asarray(draws, dtype=np.float64)
    if draws.ndim == 1:
        draws = draws.reshape(-1, 1)

    alpha = 1 - confidence_level
    lower = np.percentile(draws, 100 * alpha / 2, axis=0)
    upper = np.percentile(draws, 100 * (1 - alpha / 2), axis=0)
    return np.column_stack([lower, upper])
