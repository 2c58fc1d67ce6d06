"""
Regression estimators with classical, White and HAC coefficient covariance.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("hacreg.models.regression")

from .ols import OLS, OLSResult, fit_ols, least_squares, sandwich_hac
from .sure import SURE, SystemOLSResult, WaldTestResult, fit_ols_system, linear_hypothesis_test

__all__ = [
    "OLS",
    "OLSResult",
    "fit_ols",
    "least_squares",
    "sandwich_hac",
    "SURE",
    "SystemOLSResult",
    "WaldTestResult",
    "fit_ols_system",
    "linear_hypothesis_test",
]
