"""
hacreg Test Suite

Tests for the regression estimators, the HAC covariance estimator, the
residual bootstrap and the configuration and error layers.
"""

import os

# Version information for the test package
__version__ = "1.0.0"

SKIP_SLOW_TESTS = os.environ.get("SKIP_SLOW_TESTS", "false").lower() == "true"
