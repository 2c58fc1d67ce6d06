"""
Circular block residual bootstrap.

Residuals are resampled in contiguous blocks of length L so that serial
dependence within a block survives. A draw takes ceil(T / L) uniform block
starts, expands every start s to s, ..., s+L-1 with wraparound at T,
concatenates the blocks and keeps the first T indices.

The expansion of starts into indices is Numba-compiled; the starts
themselves come from the caller's generator, one draw after another.
"""

import logging
from typing import Any, Optional

import numpy as np

from hacreg.core.exceptions import warn_numeric
from hacreg.core.types import BootstrapDraws, BootstrapIndices, BootstrapMethod, IntegerGenerator, RandomState
from hacreg.core.validation import validate_block_length
from hacreg.models.bootstrap.base import BootstrapBase
from hacreg.models.bootstrap.utils import block_bootstrap_indices

# Set up module-level logger
logger = logging.getLogger("hacreg.models.bootstrap.block_bootstrap")


class BlockBootstrap(BootstrapBase):
    """
    Block bootstrap for residuals with serial dependence.

    The block length may exceed the sample size; the single block then
    wraps around and is truncated to T indices.

    Attributes:
        block_length: Length L of each block
    """

    method = BootstrapMethod.BLOCK.value

    def __init__(
        self,
        block_length: int,
        n_bootstraps: Optional[int] = None,
        random_state: RandomState = None,
        n_jobs: Optional[int] = None,
        name: str = "Block Bootstrap"
    ) -> None:
        """
        Initialize the block bootstrap.

        Args:
            block_length: Length of each block (positive integer)
            n_bootstraps: Number of draws
            random_state: Seed, generator or object with ``integers``
            n_jobs: Refit threads
            name: Name of the bootstrap method

        Raises:
            InvalidBandwidthError: If block_length is below one or not an integer
            ParameterError: If other parameters violate constraints
        """
        super().__init__(
            n_bootstraps=n_bootstraps,
            block_length=validate_block_length(block_length),
            random_state=random_state,
            n_jobs=n_jobs,
            name=name
        )

    @property
    def block_length(self) -> int:
        return self.params.block_length

    def generate_indices(
        self,
        data_length: int,
        n_bootstraps: int,
        generator: IntegerGenerator
    ) -> BootstrapIndices:
        """
        Generate circular block indices for every draw.

        Args:
            data_length: Number of observations T
            n_bootstraps: Number of draws
            generator: Source of the block starts

        Returns:
            BootstrapIndices: Indices with shape (n_bootstraps, T)
        """
        block_length = self.block_length
        if block_length > data_length:
            warn_numeric(
                f"Block length {block_length} exceeds the sample size {data_length}; "
                "every draw is a single wrapped block",
                operation="block bootstrap",
                issue="block length longer than sample",
                value=block_length
            )

        n_blocks = -(-data_length // block_length)
        starts = np.empty((n_bootstraps, n_blocks), dtype=np.int64)
        for i in range(n_bootstraps):
            starts[i] = generator.integers(0, data_length, size=n_blocks)

        logger.debug(
            f"Block bootstrap with T={data_length}, L={block_length}, {n_blocks} blocks per draw"
        )
        return block_bootstrap_indices(starts, block_length, data_length)

    def __str__(self) -> str:
        return (f"BlockBootstrap(block_length={self.block_length}, "
                f"n_bootstraps={self.n_bootstraps}, fitted={self._fitted})")


def bootstrap_block(
    b: Any,
    u: Any,
    X: Any,
    block_size: int,
    n_sim: int,
    seed: RandomState = None,
    n_jobs: Optional[int] = None
) -> BootstrapDraws:
    """
    Circular block residual bootstrap of OLS coefficients.

    Args:
        b: Coefficients of the original fit, (K,) or K x n
        u: Residuals of the original fit, (T,) or T x n
        X: T x K regressors
        block_size: Block length L
        n_sim: Number of draws NSim
        seed: Seed, ``numpy.random.Generator`` or object with ``integers``
        n_jobs: Refit threads; defaults to ``performance.max_workers``

    Returns:
        BootstrapDraws: NSim x nK matrix; row i is vec(b*) of draw i

    Raises:
        InvalidBandwidthError: If block_size is below one or not an integer
        ParameterError: If n_sim is not a positive integer
        DimensionMismatchError: If b, u and X disagree

    Examples:
        >>> import numpy as np
        >>> from hacreg import bootstrap_block, fit_ols
        >>> X = np.column_stack([np.ones(5), np.arange(1, 6)])
        >>> fit = fit_ols(np.array([2.1, 3.9, 6.2, 7.8, 10.1]), X)
        >>> draws = bootstrap_block(fit.coefficients, fit.residuals, X, 2, 10, seed=0)
        >>> draws.shape
        (10, 2)
    """
    bootstrap = BlockBootstrap(block_size, n_bootstraps=n_sim, random_state=seed, n_jobs=n_jobs)
    return bootstrap.fit((b, u, X)).draws
