# hacreg/core/validation.py

"""
Validation utilities for hacreg.

Input checks shared by the estimators and the resampling engine: conversion
of NumPy/pandas inputs to float arrays, rejection of NaN or infinite values,
shape agreement between Y, X, residuals and coefficients, bandwidth and block
length checks, kernel names, and the full-column-rank requirement on the
regressors.
"""

import numbers
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from hacreg.core.config import get_config
from hacreg.core.exceptions import (
    InvalidBandwidthError, ParameterError, RankDeficiencyError,
    raise_data_error, raise_dimension_error, raise_dimension_mismatch
)
from hacreg.core.types import ArrayLike, Kernel, KernelType, Matrix


def as_float_array(
    data: ArrayLike,
    array_name: str = "array"
) -> Tuple[np.ndarray, Optional[List[str]]]:
    """Convert NumPy or pandas input to a float64 array.

    Column labels are returned alongside the values when the input carries
    them (a DataFrame's columns or a named Series).

    Args:
        data: Array, Series or DataFrame
        array_name: Name of the input for error messages

    Returns:
        Tuple[np.ndarray, Optional[List[str]]]: The values and their labels

    Raises:
        TypeError: If data is None
        DataError: If data cannot be interpreted as numbers
    """
    if data is None:
        raise TypeError(f"{array_name} cannot be None")

    names = None
    if isinstance(data, pd.DataFrame):
        names = [str(c) for c in data.columns]
        values = data.to_numpy()
    elif isinstance(data, pd.Series):
        names = [str(data.name)] if data.name is not None else None
        values = data.to_numpy()
    else:
        values = data

    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise_data_error(
            f"{array_name} could not be converted to a float array",
            data_name=array_name,
            issue=str(e)
        )

    return array, names


def validate_numeric_array(
    array: np.ndarray,
    array_name: str = "array"
) -> np.ndarray:
    """Validate that an array contains only finite values.

    Args:
        array: Array to validate
        array_name: Name of the array for error messages

    Returns:
        np.ndarray: The validated array

    Raises:
        DataError: If array contains NaN or infinite values
    """
    if np.isnan(array).any():
        raise_data_error(
            f"{array_name} contains NaN values",
            data_name=array_name,
            issue="contains NaN values"
        )

    if np.isinf(array).any():
        raise_data_error(
            f"{array_name} contains infinite values",
            data_name=array_name,
            issue="contains infinite values"
        )

    return array


def validate_matrix(
    data: ArrayLike,
    array_name: str = "X",
    allow_vector: bool = True
) -> Tuple[Matrix, Optional[List[str]]]:
    """Validate a T x K matrix, promoting a 1-D input to a single column.

    Args:
        data: Matrix to validate
        array_name: Name of the matrix for error messages
        allow_vector: Whether a 1-D input is accepted as one column

    Returns:
        Tuple[Matrix, Optional[List[str]]]: The 2-D matrix and its column labels

    Raises:
        DimensionError: If the input is not 1-D or 2-D, or is empty
        DataError: If the input contains NaN or infinite values
    """
    array, names = as_float_array(data, array_name)

    if array.ndim == 1 and allow_vector:
        array = array.reshape(-1, 1)

    if array.ndim != 2:
        raise_dimension_error(
            f"{array_name} must be 2-dimensional, got {array.ndim} dimensions",
            array_name=array_name,
            expected_shape="2D matrix",
            actual_shape=array.shape
        )

    if array.shape[0] == 0 or array.shape[1] == 0:
        raise_dimension_error(
            f"{array_name} must not be empty",
            array_name=array_name,
            expected_shape="(T >= 1, K >= 1)",
            actual_shape=array.shape
        )

    validate_numeric_array(array, array_name)
    return array, names


def validate_response(
    data: ArrayLike,
    array_name: str = "y"
) -> Tuple[np.ndarray, Optional[List[str]]]:
    """Validate a response vector (T,) or matrix (T x n).

    The dimensionality of the input is preserved so that single-equation
    callers get 1-D outputs back.

    Raises:
        DimensionError: If the input has more than two dimensions or is empty
        DataError: If the input contains NaN or infinite values
    """
    array, names = as_float_array(data, array_name)

    if array.ndim not in (1, 2):
        raise_dimension_error(
            f"{array_name} must be 1- or 2-dimensional, got {array.ndim} dimensions",
            array_name=array_name,
            expected_shape="(T,) or (T, n)",
            actual_shape=array.shape
        )

    if array.size == 0:
        raise_dimension_error(
            f"{array_name} must not be empty",
            array_name=array_name,
            expected_shape="(T,) or (T, n)",
            actual_shape=array.shape
        )

    validate_numeric_array(array, array_name)
    return array, names


def validate_compatible_rows(
    arrays: Sequence[np.ndarray],
    array_names: Sequence[str]
) -> int:
    """Validate that arrays share the same number of rows.

    Args:
        arrays: Arrays to compare
        array_names: Names of the arrays for error messages

    Returns:
        int: The common number of rows

    Raises:
        DimensionMismatchError: If the row counts differ
    """
    n_rows = arrays[0].shape[0]
    for array, name in zip(arrays[1:], array_names[1:]):
        if array.shape[0] != n_rows:
            raise_dimension_mismatch(
                f"{name} has {array.shape[0]} rows, but {array_names[0]} has {n_rows}",
                array_name=name,
                expected_shape=f"({n_rows}, ...)",
                actual_shape=array.shape
            )
    return n_rows


def validate_regression_data(
    y: ArrayLike,
    X: ArrayLike
) -> Tuple[np.ndarray, Matrix, Optional[List[str]], Optional[List[str]]]:
    """Validate and convert a (y, X) pair.

    Args:
        y: Response, (T,) or (T, n)
        X: Regressors, (T, K) or (T,)

    Returns:
        Tuple: (y, X, response labels, regressor labels)

    Raises:
        DimensionMismatchError: If y and X have different numbers of rows
        DataError: If either input contains NaN or infinite values
    """
    y_arr, y_names = validate_response(y, "y")
    X_arr, x_names = validate_matrix(X, "X")
    validate_compatible_rows([X_arr, y_arr], ["X", "y"])
    return y_arr, X_arr, y_names, x_names


def validate_full_rank(X: Matrix, array_name: str = "X") -> int:
    """Require a regressor matrix with full column rank.

    The rank is computed with ``numpy.linalg.matrix_rank`` using the
    configured ``numerical.rank_tolerance``.

    Args:
        X: T x K regressor matrix
        array_name: Name of the matrix for error messages

    Returns:
        int: The rank, equal to K

    Raises:
        RankDeficiencyError: If T < K or the rank is below K
    """
    n_obs, n_columns = X.shape
    if n_obs < n_columns:
        raise RankDeficiencyError(
            f"{array_name} has fewer observations ({n_obs}) than regressors ({n_columns})",
            rank=None,
            n_columns=n_columns,
            n_obs=n_obs
        )

    tol = get_config("numerical", "rank_tolerance")
    rank = int(np.linalg.matrix_rank(X, tol=tol))
    if rank < n_columns:
        raise RankDeficiencyError(
            f"{array_name} is rank deficient (rank {rank} < {n_columns} columns)",
            rank=rank,
            n_columns=n_columns,
            n_obs=n_obs,
            details="Remove collinear regressors before estimating."
        )
    return rank


def _as_integer(value: Any) -> Optional[int]:
    """Return value as int when it is integral, otherwise None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    return None


def validate_bandwidth(value: Any, param_name: str = "bandwidth") -> int:
    """Validate a HAC lag bandwidth (a non-negative integer).

    Raises:
        InvalidBandwidthError: If the value is negative or not an integer
    """
    as_int = _as_integer(value)
    if as_int is None or as_int < 0:
        raise InvalidBandwidthError(
            f"{param_name} must be a non-negative integer, got {value!r}",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 0"
        )
    return as_int


def validate_block_length(value: Any, param_name: str = "block_length") -> int:
    """Validate a bootstrap block length (a positive integer).

    Raises:
        InvalidBandwidthError: If the value is below one or not an integer
    """
    as_int = _as_integer(value)
    if as_int is None or as_int < 1:
        raise InvalidBandwidthError(
            f"{param_name} must be a positive integer, got {value!r}",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 1"
        )
    return as_int


def validate_positive_integer(value: Any, param_name: str) -> int:
    """Validate a strictly positive integer parameter.

    Raises:
        ParameterError: If the value is not a positive integer
    """
    as_int = _as_integer(value)
    if as_int is None or as_int < 1:
        raise ParameterError(
            f"{param_name} must be a positive integer, got {value!r}",
            param_name=param_name,
            param_value=value,
            constraint="integer >= 1"
        )
    return as_int


def validate_kernel(value: Any, param_name: str = "kernel") -> KernelType:
    """Validate a HAC kernel name (case-insensitive) and return it in lower case.

    Raises:
        ParameterError: If the value does not name a supported kernel
    """
    name = value.lower() if isinstance(value, str) else value
    supported = tuple(k.value for k in Kernel)
    if name not in supported:
        raise ParameterError(
            f"Unknown kernel: {value!r}. Supported kernels are {', '.join(supported)}",
            param_name=param_name,
            param_value=value,
            constraint=f"one of {supported}"
        )
    return Kernel(name).value
