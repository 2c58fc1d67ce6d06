# hacreg/__init__.py
"""
hacreg - HAC-robust regression inference

Least-squares estimation with inference that stays valid under
heteroskedastic and serially correlated errors:

- OLS with classical, White and Newey-West (HAC) coefficient covariance
- Seemingly unrelated regressions sharing one regressor matrix, with a
  joint HAC covariance and Wald tests of linear restrictions
- i.i.d. and circular block residual bootstrap of the coefficients

This module is the main entry point of the package.
"""

import logging
from typing import Union

# Set up package-wide logger; handlers are attached by the configuration
# manager from the logging section
logger = logging.getLogger("hacreg")

from .version import __version__, __license__, __title__, __description__, get_version_info

from . import core
from . import utils
from . import models

from .core.config import get_config, set_config, reset_config, save_config
from .core.exceptions import (
    HACRegError,
    ParameterError,
    InvalidBandwidthError,
    DimensionError,
    DimensionMismatchError,
    DataError,
    EstimationError,
    RankDeficiencyError,
    SingularContrastError,
    BootstrapError,
    ConfigurationError,
    NotFittedError,
    HACRegWarning,
    NumericWarning,
)
from .utils.covariance import hac_covariance, kernel_weights
from .models.regression import (
    OLS,
    OLSResult,
    SURE,
    SystemOLSResult,
    WaldTestResult,
    fit_ols,
    fit_ols_system,
    linear_hypothesis_test,
)
from .models.bootstrap import (
    BlockBootstrap,
    BootstrapResult,
    IIDBootstrap,
    block_bootstrap_indices,
    bootstrap_block,
    bootstrap_iid,
    summarize_draws,
)


def get_version() -> str:
    """
    Return the version of hacreg.

    Returns:
        str: Version string in format MAJOR.MINOR.PATCH
    """
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level for hacreg.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
    logger.info(f"Log level set to {logging.getLevelName(level)}")


__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # Estimation
    'fit_ols',
    'fit_ols_system',
    'hac_covariance',
    'kernel_weights',
    'linear_hypothesis_test',
    'OLS',
    'OLSResult',
    'SURE',
    'SystemOLSResult',
    'WaldTestResult',

    # Bootstrap
    'bootstrap_iid',
    'bootstrap_block',
    'block_bootstrap_indices',
    'summarize_draws',
    'IIDBootstrap',
    'BlockBootstrap',
    'BootstrapResult',

    # Configuration
    'get_config',
    'set_config',
    'reset_config',
    'save_config',

    # Exceptions
    'HACRegError',
    'ParameterError',
    'InvalidBandwidthError',
    'DimensionError',
    'DimensionMismatchError',
    'DataError',
    'EstimationError',
    'RankDeficiencyError',
    'SingularContrastError',
    'BootstrapError',
    'ConfigurationError',
    'NotFittedError',
    'HACRegWarning',
    'NumericWarning',

    # Public functions
    'get_version',
    'get_version_info',
    'set_log_level',

    # Version info
    '__version__',
    '__license__',
]

logger.debug(f"hacreg v{__version__} initialized")
