'''
Custom exception classes for hacreg.

This module defines the exception hierarchy used throughout hacreg. Every
error raised by the estimators, the HAC covariance estimator and the
resampling engine derives from HACRegError, which renders a primary message,
optional details and a context dictionary into a single readable message.

The hierarchy separates caller errors (dimension mismatches, invalid
bandwidths, bad parameters) from estimation failures (rank deficiency,
singular contrasts). All of them are deterministic: nothing in hacreg
retries, so every exception is surfaced to the caller unchanged.
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np


class HACRegError(Exception):
    """Base exception class for all hacreg errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the HACRegError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        # Add caller information for better debugging
        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame  # Avoid reference cycles

        super().__init__(full_message)


class ParameterError(HACRegError):
    """Exception raised for invalid estimator or resampling parameters.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class InvalidBandwidthError(ParameterError):
    """Exception raised for a negative or non-integer lag bandwidth or block size."""


class DimensionError(HACRegError):
    """Exception raised for errors related to array dimensions.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class DimensionMismatchError(DimensionError):
    """Exception raised when the shapes of two related arrays disagree.

    Used when the row counts of Y, X and the residuals differ, when a
    coefficient vector does not match the columns of X, or when a contrast
    matrix does not match the stacked coefficient vector.
    """


class DataError(HACRegError):
    """Exception raised for input data that cannot be used.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class EstimationError(HACRegError):
    """Exception raised for errors during model estimation.

    Attributes:
        model_type: The type of model being estimated
        estimation_method: The estimation method being used
        issue: Description of the issue that occurred during estimation
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 estimation_method: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.estimation_method = estimation_method
        self.issue = issue

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if estimation_method:
            context_dict["Estimation Method"] = estimation_method
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class RankDeficiencyError(EstimationError):
    """Exception raised when the regressor matrix is not of full column rank.

    Attributes:
        rank: The numerical rank of the regressor matrix
        n_columns: The number of regressors
        n_obs: The number of observations
    """

    def __init__(self,
                 message: str,
                 rank: Optional[int] = None,
                 n_columns: Optional[int] = None,
                 n_obs: Optional[int] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.rank = rank
        self.n_columns = n_columns
        self.n_obs = n_obs

        context_dict = context or {}
        if rank is not None:
            context_dict["Rank"] = rank
        if n_columns is not None:
            context_dict["Columns"] = n_columns
        if n_obs is not None:
            context_dict["Observations"] = n_obs

        super().__init__(message, estimation_method="least squares",
                         issue="rank deficiency", details=details,
                         context=context_dict)


class SingularContrastError(HACRegError):
    """Exception raised when R V R' cannot be inverted in a Wald test.

    The underlying estimate stays valid; only the requested test fails.

    Attributes:
        n_restrictions: Number of rows in the contrast matrix
        rank: Numerical rank of R V R'
    """

    def __init__(self,
                 message: str,
                 n_restrictions: Optional[int] = None,
                 rank: Optional[int] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.n_restrictions = n_restrictions
        self.rank = rank

        context_dict = context or {}
        if n_restrictions is not None:
            context_dict["Restrictions"] = n_restrictions
        if rank is not None:
            context_dict["Rank"] = rank

        super().__init__(message, details, context_dict)


class BootstrapError(HACRegError):
    """Exception raised for errors in the resampling engine.

    Attributes:
        bootstrap_type: The type of bootstrap method
        n_bootstraps: The number of bootstrap replications
        issue: Description of the issue
    """

    def __init__(self,
                 message: str,
                 bootstrap_type: Optional[str] = None,
                 n_bootstraps: Optional[int] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.bootstrap_type = bootstrap_type
        self.n_bootstraps = n_bootstraps
        self.issue = issue

        context_dict = context or {}
        if bootstrap_type:
            context_dict["Bootstrap Type"] = bootstrap_type
        if n_bootstraps is not None:
            context_dict["Replications"] = n_bootstraps
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class ConfigurationError(HACRegError):
    """Exception raised for errors in configuration settings.

    Attributes:
        setting: The configuration setting that caused the error
        value: The invalid value
        issue: Description of the issue
    """

    def __init__(self,
                 message: str,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.setting = setting
        self.value = value
        self.issue = issue

        context_dict = context or {}
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class NotFittedError(HACRegError):
    """Exception raised when a model is used before it has been fitted."""

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.operation = operation

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if operation:
            context_dict["Operation"] = operation

        super().__init__(message, details, context_dict)


class HACRegWarning(Warning):
    """Base warning class for hacreg.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


class NumericWarning(HACRegWarning):
    """Warning for numerical conditions that are handled but worth knowing about."""

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if issue:
            context_dict["Issue"] = issue
        if value is not None:
            if isinstance(value, np.ndarray) and value.size > 10:
                context_dict["Value"] = f"Array with shape {value.shape}"
            else:
                context_dict["Value"] = value

        super().__init__(message, details, context_dict)


# Helper functions for raising exceptions with consistent formatting

def raise_dimension_error(message: str,
                          array_name: Optional[str] = None,
                          expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                          actual_shape: Optional[Tuple[int, ...]] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionError with consistent formatting.

    Raises:
        DimensionError: The formatted dimension error
    """
    raise DimensionError(message, array_name, expected_shape, actual_shape, details, context)


def raise_dimension_mismatch(message: str,
                             array_name: Optional[str] = None,
                             expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                             actual_shape: Optional[Tuple[int, ...]] = None,
                             details: Optional[str] = None,
                             context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionMismatchError with consistent formatting.

    Raises:
        DimensionMismatchError: The formatted dimension mismatch error
    """
    raise DimensionMismatchError(message, array_name, expected_shape, actual_shape, details, context)


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError with consistent formatting.

    Raises:
        DataError: The formatted data error
    """
    raise DataError(message, data_name, issue, details, context)


def raise_not_fitted_error(message: str,
                           model_type: Optional[str] = None,
                           operation: Optional[str] = None,
                           details: Optional[str] = None,
                           context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a NotFittedError with consistent formatting.

    Raises:
        NotFittedError: The formatted not fitted error
    """
    raise NotFittedError(message, model_type, operation, details, context)


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
    """Issue a NumericWarning with consistent formatting.

    Args:
        message: The primary warning message
        operation: The operation where the issue was detected
        issue: Description of the numerical issue
        value: The value that triggered the warning
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """
    warnings.warn(
        NumericWarning(message, operation, issue, value, details, context),
        stacklevel=2
    )
