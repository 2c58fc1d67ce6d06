"""
hacreg models

Regression estimators (OLS and the shared-regressor SURE system) and the
residual bootstrap built on top of them.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("hacreg.models")

from . import regression
from . import bootstrap

__all__ = ["regression", "bootstrap"]
