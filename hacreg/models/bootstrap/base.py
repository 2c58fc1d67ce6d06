# hacreg/models/bootstrap/base.py

"""
Abstract base class for the residual bootstrap.

The base class owns everything the resampling schemes share: parameter
validation, checking the original fit (b, u, X), serial index generation on
a single generator, the refit loop and the result container. Subclasses
only decide how the T indices of each draw are chosen.

Every draw forms y* = X b + u[idx] with the residual rows of all equations
gathered together, re-estimates OLS on (y*, X) and stores vec(b*) as one
row of the draw matrix.
"""

import abc
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from hacreg.core.base import ModelBase
from hacreg.core.config import get_config
from hacreg.core.exceptions import BootstrapError, ParameterError
from hacreg.core.results import ModelResult
from hacreg.core.types import (
    BootstrapDraws, BootstrapIndices, BootstrapType, IntegerGenerator, RandomState
)
from hacreg.core.validation import validate_block_length, validate_positive_integer
from hacreg.models.bootstrap.utils import (
    compute_confidence_interval, resolve_random_state, summarize_draws,
    validate_bootstrap_inputs
)
from hacreg.models.regression.ols import least_squares
from hacreg.utils.matrix_ops import vec

# Set up module-level logger
logger = logging.getLogger("hacreg.models.bootstrap.base")

BootstrapData = Tuple[Any, Any, Any]


@dataclass
class BootstrapParameters:
    """Parameters for the residual bootstrap.

    Attributes:
        n_bootstraps: Number of draws NSim
        block_length: Block length for the block bootstrap (None for i.i.d.)
        random_state: Seed, ``numpy.random.Generator`` or any object with an
            ``integers`` method
        n_jobs: Number of threads used for the refits
    """

    n_bootstraps: int = 1000
    block_length: Optional[int] = None
    random_state: RandomState = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        """Validate parameters after initialization.

        Raises:
            ParameterError: If n_bootstraps, n_jobs or random_state are invalid
            InvalidBandwidthError: If block_length is not a positive integer
        """
        self.n_bootstraps = validate_positive_integer(self.n_bootstraps, "n_bootstraps")
        self.n_jobs = validate_positive_integer(self.n_jobs, "n_jobs")

        if self.block_length is not None:
            self.block_length = validate_block_length(self.block_length)

        rs = self.random_state
        valid = (
            rs is None
            or isinstance(rs, np.random.Generator)
            or (isinstance(rs, (int, np.integer)) and not isinstance(rs, bool))
            or isinstance(rs, IntegerGenerator)
        )
        if not valid:
            raise ParameterError(
                "random_state must be an integer, a numpy.random.Generator or "
                "an object with an integers(low, high, size) method",
                param_name="random_state",
                param_value=type(rs).__name__
            )


@dataclass
class BootstrapResult(ModelResult):
    """Result container for the residual bootstrap.

    Attributes:
        draws: NSim x p matrix; row i is vec(b*) of draw i
        mean: Column means of the draws
        std: Column standard deviations of the draws (divided by NSim)
        original_coefficients: vec(b) of the fit that was resampled
        n_bootstraps: Number of draws
        block_length: Block length (None for the i.i.d. scheme)
        method: "iid" or "block"
        parameter_names: Names of the stacked coefficients
    """

    draws: Optional[np.ndarray] = None
    mean: Optional[np.ndarray] = None
    std: Optional[np.ndarray] = None
    original_coefficients: Optional[np.ndarray] = None
    n_bootstraps: int = 0
    block_length: Optional[int] = None
    method: BootstrapType = "iid"
    parameter_names: Optional[List[str]] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.draws is not None:
            if self.n_bootstraps == 0:
                self.n_bootstraps = self.draws.shape[0]
            if self.mean is None or self.std is None:
                self.mean, self.std = summarize_draws(self.draws)
        if self.parameter_names is None and self.draws is not None:
            self.parameter_names = [f"b{i}" for i in range(self.draws.shape[1])]

    def confidence_interval(self, level: Optional[float] = None) -> np.ndarray:
        """Percentile confidence intervals, one [lower, upper] row per coefficient.

        Args:
            level: Coverage; defaults to ``bootstrap.confidence_level``
        """
        if self.draws is None:
            raise BootstrapError(
                "No bootstrap draws available",
                bootstrap_type=self.method,
                issue="empty result"
            )
        return compute_confidence_interval(self.draws, level)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the draws as a DataFrame with one column per coefficient."""
        if self.draws is None:
            raise ValueError("Bootstrap draws are not available")
        return pd.DataFrame(self.draws, columns=self.parameter_names)

    def summary(self) -> str:
        """Generate a text summary of the bootstrap distribution."""
        header = f"{self.model_name}\n"
        header += "=" * (len(header) - 1) + "\n"
        header += f"Method: {self.method}"
        if self.block_length is not None:
            header += f" (block length {self.block_length})"
        header += f"\nDraws: {self.n_bootstraps}\n\n"

        if self.draws is None:
            return header

        ci = self.confidence_interval()
        level = get_config("bootstrap", "confidence_level")
        table = f"{'Parameter':<20} {'Original':>12} {'Mean':>12} {'Std':>12} "
        table += f"{'CI low':>12} {'CI high':>12}\n"
        table += "-" * 84 + "\n"
        for i, name in enumerate(self.parameter_names):
            original = (self.original_coefficients[i]
                        if self.original_coefficients is not None else np.nan)
            table += f"{name:<20} {original:>12.6f} {self.mean[i]:>12.6f} "
            table += f"{self.std[i]:>12.6f} {ci[i, 0]:>12.6f} {ci[i, 1]:>12.6f}\n"
        table += "-" * 84 + "\n"
        table += f"Percentile intervals at {level:.0%} coverage\n"
        return header + table

    def plot(self, bins: int = 50, figsize: Tuple[float, float] = (10, 6)) -> Any:
        """
        Plot histograms of the draws, one panel per coefficient.

        The original estimate is marked with a solid line and the percentile
        interval with dashed lines.

        Args:
            bins: Number of histogram bins
            figsize: Figure size

        Returns:
            matplotlib.figure.Figure: The figure
        """
        import matplotlib.pyplot as plt

        if self.draws is None:
            raise ValueError("Bootstrap draws are not available")

        n_params = self.draws.shape[1]
        n_cols = min(3, n_params)
        n_rows = int(np.ceil(n_params / n_cols))
        fig, axes = plt.subplots(n_rows, n_cols, figsize=figsize, squeeze=False)
        ci = self.confidence_interval()

        for i in range(n_params):
            ax = axes[i // n_cols, i % n_cols]
            ax.hist(self.draws[:, i], bins=bins, alpha=0.7)
            if self.original_coefficients is not None:
                ax.axvline(self.original_coefficients[i], color='r', linestyle='-',
                           label='Original')
            ax.axvline(ci[i, 0], color='g', linestyle='--', label='CI')
            ax.axvline(ci[i, 1], color='g', linestyle='--')
            ax.set_title(self.parameter_names[i])
            if i == 0:
                ax.legend()

        for j in range(n_params, n_rows * n_cols):
            axes[j // n_cols, j % n_cols].set_visible(False)

        plt.tight_layout()
        return fig

    def __repr__(self) -> str:
        return (f"BootstrapResult(method='{self.method}', n_bootstraps={self.n_bootstraps}, "
                f"block_length={self.block_length})")


class BootstrapBase(ModelBase):
    """Abstract base class for residual bootstrap schemes.

    Subclasses implement :meth:`generate_indices`. Index generation is
    serialized on one generator in draw order; only the refits may run on
    a thread pool, each writing its own row of the draw matrix.
    """

    method: BootstrapType = "iid"

    def __init__(
        self,
        n_bootstraps: Optional[int] = None,
        block_length: Optional[int] = None,
        random_state: RandomState = None,
        n_jobs: Optional[int] = None,
        name: str = "Bootstrap"
    ) -> None:
        """
        Initialize the bootstrap.

        Args:
            n_bootstraps: Number of draws; defaults to ``bootstrap.n_bootstraps``
            block_length: Block length for block schemes
            random_state: Seed, generator or object with ``integers``
            n_jobs: Refit threads; defaults to ``performance.max_workers``
            name: Name of the bootstrap method

        Raises:
            ParameterError: If parameters violate constraints
        """
        super().__init__(name=name)
        if n_bootstraps is None:
            n_bootstraps = get_config("bootstrap", "n_bootstraps")
        if n_jobs is None:
            n_jobs = get_config("performance", "max_workers")

        self._params = BootstrapParameters(
            n_bootstraps=n_bootstraps,
            block_length=block_length,
            random_state=random_state,
            n_jobs=n_jobs
        )
        self._indices: Optional[BootstrapIndices] = None

    @property
    def params(self) -> BootstrapParameters:
        """Get the bootstrap parameters."""
        return self._params

    @property
    def n_bootstraps(self) -> int:
        return self._params.n_bootstraps

    @property
    def bootstrap_indices(self) -> Optional[BootstrapIndices]:
        """Indices used by the last fit, shape (n_bootstraps, T)."""
        return self._indices

    @property
    def draws(self) -> BootstrapDraws:
        """Draw matrix of the last fit.

        Raises:
            NotFittedError: If the bootstrap has not been run
        """
        self._check_fitted("draws")
        return self._results.draws

    @abc.abstractmethod
    def generate_indices(
        self,
        data_length: int,
        n_bootstraps: int,
        generator: IntegerGenerator
    ) -> BootstrapIndices:
        """
        Generate the observation indices of every draw.

        Implementations draw from ``generator`` serially, draw 0 first.

        Args:
            data_length: Number of observations T
            n_bootstraps: Number of draws
            generator: Source of uniform integers

        Returns:
            BootstrapIndices: Integer array with shape (n_bootstraps, T),
            every entry in [0, T)
        """
        pass

    def validate_data(self, data: BootstrapData) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Check that data is a consistent (b, u, X) triple.

        Raises:
            TypeError: If data is not a (b, u, X) tuple
            DimensionMismatchError: If the shapes disagree
        """
        if not isinstance(data, tuple) or len(data) != 3:
            raise TypeError("Data must be a tuple of (b, u, X)")
        return validate_bootstrap_inputs(*data)

    def fit(self, data: BootstrapData, **kwargs: Any) -> BootstrapResult:
        """
        Run the bootstrap on an existing OLS fit.

        Args:
            data: Tuple (b, u, X) of coefficients (K,) or K x n, residuals
                (T,) or T x n, and the T x K regressors
            **kwargs: ``random_state`` or ``n_jobs`` to override the values
                given at construction for this run

        Returns:
            BootstrapResult: Draw matrix (n_bootstraps x nK) and summaries

        Raises:
            DimensionMismatchError: If b, u and X disagree
            BootstrapError: If the generated indices are malformed
        """
        B, U, X = self.validate_data(data)
        T = X.shape[0]
        n_sim = self._params.n_bootstraps
        n_jobs = validate_positive_integer(kwargs.get("n_jobs", self._params.n_jobs), "n_jobs")
        random_state = kwargs.get("random_state", self._params.random_state)

        generator = resolve_random_state(random_state)
        indices = np.asarray(self.generate_indices(T, n_sim, generator))
        if indices.shape != (n_sim, T):
            raise BootstrapError(
                f"Index matrix has shape {indices.shape}, expected {(n_sim, T)}",
                bootstrap_type=self.method,
                n_bootstraps=n_sim,
                issue="malformed indices"
            )
        if indices.min() < 0 or indices.max() >= T:
            raise BootstrapError(
                f"Bootstrap indices must lie in [0, {T})",
                bootstrap_type=self.method,
                n_bootstraps=n_sim,
                issue="index out of range"
            )

        draws = self._refit(B, U, X, indices, n_jobs)

        logger.debug(
            f"{self._name}: {n_sim} draws, T={T}, p={draws.shape[1]}, n_jobs={n_jobs}"
        )

        self._indices = indices
        self._results = BootstrapResult(
            model_name=self._name,
            draws=draws,
            original_coefficients=vec(B),
            n_bootstraps=n_sim,
            block_length=self._params.block_length,
            method=self.method,
            parameter_names=self._parameter_names(B),
        )
        self._fitted = True
        return self._results

    def _refit(self,
               B: np.ndarray,
               U: np.ndarray,
               X: np.ndarray,
               indices: BootstrapIndices,
               n_jobs: int) -> BootstrapDraws:
        fitted = X @ B
        n_sim = indices.shape[0]
        draws = np.empty((n_sim, B.size))

        def refit_one(i: int) -> None:
            y_star = fitted + U[indices[i]]
            draws[i] = vec(least_squares(X, y_star))

        if n_jobs == 1 or n_sim == 1:
            for i in range(n_sim):
                refit_one(i)
        else:
            with ThreadPoolExecutor(max_workers=n_jobs) as executor:
                # list() re-raises the first worker exception
                list(executor.map(refit_one, range(n_sim)))

        return draws

    @staticmethod
    def _parameter_names(B: np.ndarray) -> List[str]:
        K, n = B.shape
        if n == 1:
            return [f"b{k}" for k in range(K)]
        return [f"eq{i}:b{k}" for i in range(n) for k in range(K)]

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(n_bootstraps={self._params.n_bootstraps}, "
                f"block_length={self._params.block_length}, "
                f"random_state={self._params.random_state}, fitted={self._fitted})")
