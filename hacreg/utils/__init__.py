"""
hacreg utilities

Numerical building blocks shared by the estimators: the HAC long-run
covariance with its kernel weights and small matrix helpers.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("hacreg.utils")

from .covariance import SUPPORTED_KERNELS, hac_covariance, kernel_weights
from .matrix_ops import (
    cross_product_inverse,
    ensure_symmetric,
    sandwich_covariance,
    unvec,
    vec,
)

__all__ = [
    "SUPPORTED_KERNELS",
    "hac_covariance",
    "kernel_weights",
    "cross_product_inverse",
    "ensure_symmetric",
    "sandwich_covariance",
    "unvec",
    "vec",
]
