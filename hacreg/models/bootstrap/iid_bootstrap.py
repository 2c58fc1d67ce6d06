"""
i.i.d. residual bootstrap.

Every draw resamples T residual rows uniformly with replacement, which is
appropriate when the errors are serially independent.
"""

import logging
from typing import Any, Optional

import numpy as np

from hacreg.core.types import BootstrapDraws, BootstrapIndices, BootstrapMethod, IntegerGenerator, RandomState
from hacreg.models.bootstrap.base import BootstrapBase

# Set up module-level logger
logger = logging.getLogger("hacreg.models.bootstrap.iid_bootstrap")


class IIDBootstrap(BootstrapBase):
    """
    Residual bootstrap with independently drawn observations.

    Examples:
        >>> import numpy as np
        >>> from hacreg import IIDBootstrap, fit_ols
        >>> rng = np.random.default_rng(0)
        >>> X = np.column_stack([np.ones(50), rng.standard_normal(50)])
        >>> fit = fit_ols(X @ np.array([1.0, 2.0]) + rng.standard_normal(50), X)
        >>> result = IIDBootstrap(n_bootstraps=200, random_state=1).fit(
        ...     (fit.coefficients, fit.residuals, X))
        >>> result.draws.shape
        (200, 2)
    """

    method = BootstrapMethod.IID.value

    def __init__(
        self,
        n_bootstraps: Optional[int] = None,
        random_state: RandomState = None,
        n_jobs: Optional[int] = None,
        name: str = "IID Bootstrap"
    ) -> None:
        super().__init__(
            n_bootstraps=n_bootstraps,
            random_state=random_state,
            n_jobs=n_jobs,
            name=name
        )

    def generate_indices(
        self,
        data_length: int,
        n_bootstraps: int,
        generator: IntegerGenerator
    ) -> BootstrapIndices:
        """Draw T indices uniformly on [0, T) for each draw, in draw order."""
        indices = np.empty((n_bootstraps, data_length), dtype=np.int64)
        for i in range(n_bootstraps):
            indices[i] = generator.integers(0, data_length, size=data_length)
        return indices


def bootstrap_iid(
    b: Any,
    u: Any,
    X: Any,
    n_sim: int,
    seed: RandomState = None,
    n_jobs: Optional[int] = None
) -> BootstrapDraws:
    """
    i.i.d. residual bootstrap of OLS coefficients.

    Args:
        b: Coefficients of the original fit, (K,) or K x n
        u: Residuals of the original fit, (T,) or T x n
        X: T x K regressors
        n_sim: Number of draws NSim
        seed: Seed, ``numpy.random.Generator`` or object with ``integers``
        n_jobs: Refit threads; defaults to ``performance.max_workers``

    Returns:
        BootstrapDraws: NSim x nK matrix; row i is vec(b*) of draw i

    Raises:
        ParameterError: If n_sim is not a positive integer
        DimensionMismatchError: If b, u and X disagree
    """
    bootstrap = IIDBootstrap(n_bootstraps=n_sim, random_state=seed, n_jobs=n_jobs)
    return bootstrap.fit((b, u, X)).draws
