# hacreg/utils/matrix_ops.py

"""
Matrix Operations Module

Small linear-algebra helpers used by the estimators: symmetrization,
``vec``/``unvec`` under the column-major stacking used for system
coefficients, the cross-product inverse, and the sandwich product that turns
a long-run covariance into a coefficient covariance.
"""

import logging
from typing import Optional

import numpy as np
from scipy import linalg

from hacreg.core.config import get_config
from hacreg.core.exceptions import raise_dimension_error
from hacreg.core.types import CovarianceMatrix, Matrix, Vector

# Set up module-level logger
logger = logging.getLogger("hacreg.utils.matrix_ops")


def ensure_symmetric(matrix: Matrix, tol: Optional[float] = None) -> Matrix:
    """
    Ensure a matrix is symmetric by averaging with its transpose.

    If the matrix is already symmetric within ``tol`` it is returned
    unchanged.

    Args:
        matrix: Square matrix
        tol: Absolute tolerance for the symmetry check; defaults to the
            configured ``numerical.symmetry_tolerance``

    Returns:
        Symmetric matrix

    Raises:
        DimensionError: If the input matrix is not square

    Examples:
        >>> import numpy as np
        >>> from hacreg.utils.matrix_ops import ensure_symmetric
        >>> ensure_symmetric(np.array([[1.0, 2.0], [2.5, 3.0]]))
        array([[1.  , 2.25],
               [2.25, 3.  ]])
    """
    matrix = np.asarray(matrix)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name="matrix",
            expected_shape="(n, n)",
            actual_shape=matrix.shape
        )

    if tol is None:
        tol = get_config("numerical", "symmetry_tolerance")

    if np.array_equal(matrix, matrix.T):
        return matrix

    if not np.allclose(matrix, matrix.T, rtol=0.0, atol=tol):
        logger.debug("Symmetrizing a matrix that was asymmetric beyond tolerance")

    return (matrix + matrix.T) / 2


def vec(matrix: Matrix) -> Vector:
    """Stack the columns of a matrix into a vector (column-major).

    A K x n coefficient matrix becomes all K coefficients of equation 1,
    then those of equation 2, and so on. Vectors are returned unchanged.
    """
    matrix = np.asarray(matrix)
    if matrix.ndim == 1:
        return matrix
    return matrix.reshape(-1, order="F")


def unvec(vector: Vector, n_rows: int) -> Matrix:
    """Inverse of :func:`vec` for a matrix with ``n_rows`` rows."""
    vector = np.asarray(vector)
    if vector.size % n_rows != 0:
        raise_dimension_error(
            f"Vector of length {vector.size} cannot be reshaped to {n_rows} rows",
            array_name="vector",
            expected_shape=f"multiple of {n_rows}",
            actual_shape=vector.shape
        )
    return vector.reshape(n_rows, -1, order="F")


def cross_product_inverse(X: Matrix) -> Matrix:
    """Return (X'X)^-1 for a full-column-rank X.

    Used for covariance matrices only; coefficient estimates are always
    obtained from a least-squares solve.
    """
    XtX = X.T @ X
    return ensure_symmetric(linalg.inv(XtX, check_finite=False))


def sandwich_covariance(bread: Matrix, meat: Matrix, n_equations: int, n_obs: int) -> CovarianceMatrix:
    """
    Build (I_n kron B) S (I_n kron B) / T.

    Args:
        bread: K x K matrix B, here Q^-1 with Q = X'X / T
        meat: nK x nK long-run covariance S of the stacked moment conditions
        n_equations: Number of equations n
        n_obs: Number of observations T

    Returns:
        The nK x nK covariance matrix of the stacked coefficients

    Raises:
        DimensionError: If the meat does not match n * K
    """
    K = bread.shape[0]
    expected = n_equations * K
    if meat.shape != (expected, expected):
        raise_dimension_error(
            "Long-run covariance does not match the stacked coefficient vector",
            array_name="meat",
            expected_shape=(expected, expected),
            actual_shape=meat.shape
        )

    outer = np.kron(np.eye(n_equations), bread)
    return ensure_symmetric(outer @ meat @ outer / n_obs)
