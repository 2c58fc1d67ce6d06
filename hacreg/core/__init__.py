"""
hacreg core module

Base classes, result containers, type definitions, validation utilities,
the exception hierarchy and configuration management shared by the
estimators and the resampling engine.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("hacreg.core")

from .exceptions import (
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
    warn_numeric,
)

from .config import (
    get_config,
    set_config,
    reset_config,
    save_config,
    get_config_manager,
)

from .base import ModelBase, RegressionModelBase

from .results import ModelResult, EstimationResult

from .validation import (
    as_float_array,
    validate_numeric_array,
    validate_matrix,
    validate_response,
    validate_regression_data,
    validate_compatible_rows,
    validate_full_rank,
    validate_bandwidth,
    validate_block_length,
    validate_positive_integer,
    validate_kernel,
)

__all__ = [
    # Exceptions
    "HACRegError",
    "ParameterError",
    "InvalidBandwidthError",
    "DimensionError",
    "DimensionMismatchError",
    "DataError",
    "EstimationError",
    "RankDeficiencyError",
    "SingularContrastError",
    "BootstrapError",
    "ConfigurationError",
    "NotFittedError",
    "HACRegWarning",
    "NumericWarning",
    "warn_numeric",

    # Configuration
    "get_config",
    "set_config",
    "reset_config",
    "save_config",
    "get_config_manager",

    # Base classes and results
    "ModelBase",
    "RegressionModelBase",
    "ModelResult",
    "EstimationResult",

    # Validation
    "as_float_array",
    "validate_numeric_array",
    "validate_matrix",
    "validate_response",
    "validate_regression_data",
    "validate_compatible_rows",
    "validate_full_rank",
    "validate_bandwidth",
    "validate_block_length",
    "validate_positive_integer",
    "validate_kernel",
]

logger.debug("hacreg core module initialized")
