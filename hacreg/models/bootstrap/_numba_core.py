"""
Numba-accelerated core functions for the residual bootstrap.

The random draws themselves always happen in Python on the caller's
generator; the functions here only turn already-drawn block starts into
observation indices, which is the part that loops element by element.
"""

import numpy as np
from numba import jit


@jit(nopython=True, cache=True)
def expand_block_starts(
    starts: np.ndarray,
    block_length: int,
    data_length: int
) -> np.ndarray:
    """
    Expand block starts into circular block bootstrap indices.

    Row i of ``starts`` holds the nBlocks start positions of draw i. Each
    start s becomes s, s+1, ..., s+L-1 reduced modulo T, the blocks are laid
    out one after another and the sequence is cut at T entries.

    Args:
        starts: Integer array of shape (n_draws, n_blocks)
        block_length: Length L of each block
        data_length: Number of observations T

    Returns:
        np.ndarray: Indices with shape (n_draws, data_length)
    """
    n_draws = starts.shape[0]
    n_blocks = starts.shape[1]
    indices = np.empty((n_draws, data_length), dtype=np.int64)

    for i in range(n_draws):
        idx = 0
        for k in range(n_blocks):
            start = starts[i, k]
            for j in range(block_length):
                if idx >= data_length:
                    break
                # Circular wrapping
                indices[i, idx] = (start + j) % data_length
                idx += 1

    return indices
