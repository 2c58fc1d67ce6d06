# hacreg/core/types.py

"""
Core type annotations and custom types for hacreg.

Type aliases shared by the estimators, the HAC covariance estimator and the
resampling engine. They document intent (a residual matrix, a coefficient
vector, a draw matrix) rather than enforce shapes at runtime.
"""

from enum import Enum
from typing import Any, Literal, Protocol, Tuple, Union, runtime_checkable

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array

# Array inputs accepted at the public boundary
ArrayLike = Union[np.ndarray, pd.Series, pd.DataFrame]
RegressorMatrix = Union[np.ndarray, pd.DataFrame]  # T x K
ResponseData = Union[np.ndarray, pd.Series, pd.DataFrame]  # T or T x n

# Estimation outputs
CoefficientArray = np.ndarray  # (K,) or K x n
ResidualArray = np.ndarray  # (T,) or T x n
CovarianceMatrix = np.ndarray  # symmetric positive semi-definite
MomentConditions = np.ndarray  # T x q
ContrastMatrix = np.ndarray  # q x nK

# Resampling types
BootstrapIndices = np.ndarray  # n_bootstraps x data_length, 0-based
BootstrapDraws = np.ndarray  # n_bootstraps x K or n_bootstraps x nK
RegressionData = Tuple[ResponseData, RegressorMatrix]  # (y, X)

# Literal choices
CovarianceType = Literal["classical", "robust", "hac"]
KernelType = Literal["bartlett", "parzen"]
BootstrapType = Literal["iid", "block"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Kernel(Enum):
    """Enumeration of supported HAC weighting kernels."""
    BARTLETT = "bartlett"
    PARZEN = "parzen"


class BootstrapMethod(Enum):
    """Enumeration of supported residual bootstrap schemes."""
    IID = "iid"
    BLOCK = "block"


@runtime_checkable
class IntegerGenerator(Protocol):
    """Anything that can draw uniform integers the way numpy's Generator does.

    The resampling engine only ever calls ``integers(low, high, size=...)``,
    so a seeded ``numpy.random.Generator`` or a scripted test double both
    satisfy this protocol.
    """

    def integers(self, low: int, high: int, size: Any = None) -> np.ndarray:
        ...


RandomState = Union[None, int, np.random.Generator, IntegerGenerator]
