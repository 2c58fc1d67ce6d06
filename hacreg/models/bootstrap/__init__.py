"""
hacreg bootstrap module

Residual bootstrap of OLS coefficients: i.i.d. resampling of residual rows
and the circular block bootstrap for serially dependent errors. Index
generation is serialized on one caller-supplied generator, so a fixed seed
reproduces the draw matrix exactly; the refits may run on a thread pool.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("hacreg.models.bootstrap")

from .base import BootstrapBase, BootstrapParameters, BootstrapResult
from .iid_bootstrap import IIDBootstrap, bootstrap_iid
from .block_bootstrap import BlockBootstrap, bootstrap_block
from .utils import (
    block_bootstrap_indices,
    compute_confidence_interval,
    resolve_random_state,
    summarize_draws,
)

__all__ = [
    "BootstrapBase",
    "BootstrapParameters",
    "BootstrapResult",
    "IIDBootstrap",
    "bootstrap_iid",
    "BlockBootstrap",
    "bootstrap_block",
    "block_bootstrap_indices",
    "compute_confidence_interval",
    "resolve_random_state",
    "summarize_draws",
]
