'''
Abstract base classes for hacreg.

These classes fix the contract shared by the estimators: a name, a fitted
flag, stored results, ``fit``/``validate_data``/``summary``, and for
regression models access to coefficients, residuals and fitted values.
'''

import abc
from typing import Any, Generic, Optional, Tuple, TypeVar, cast

import numpy as np

from hacreg.core.exceptions import raise_not_fitted_error

# Type variables for generic base classes
T = TypeVar('T')  # Generic type for parameters
R = TypeVar('R')  # Generic type for results
D = TypeVar('D')  # Generic type for data


class ModelBase(abc.ABC, Generic[T, R, D]):
    """Abstract base class for all models in hacreg.

    Type Parameters:
        T: The parameter type for this model
        R: The result type for this model
        D: The data type this model accepts
    """

    def __init__(self, name: str = "Model"):
        """Initialize the model with a name.

        Args:
            name: A descriptive name for the model
        """
        self._name = name
        self._fitted = False
        self._results: Optional[R] = None

    @property
    def name(self) -> str:
        """Get the model name."""
        return self._name

    @property
    def fitted(self) -> bool:
        """Check if the model has been fitted."""
        return self._fitted

    @property
    def results(self) -> R:
        """Get the model estimation results.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("results")
        return cast(R, self._results)

    def _check_fitted(self, operation: str) -> None:
        if not self._fitted:
            raise_not_fitted_error(
                f"{self._name} has not been fitted. Call fit() first.",
                model_type=self.__class__.__name__,
                operation=operation
            )

    @abc.abstractmethod
    def fit(self, data: D, **kwargs: Any) -> R:
        """Fit the model to the provided data.

        Args:
            data: The data to fit the model to
            **kwargs: Additional keyword arguments for model fitting

        Returns:
            R: The model estimation results
        """
        pass

    @abc.abstractmethod
    def validate_data(self, data: D) -> Any:
        """Validate the input data for model fitting.

        Args:
            data: The data to validate
        """
        pass

    def summary(self) -> str:
        """Generate a text summary of the model."""
        if not self._fitted:
            return f"Model: {self._name} (not fitted)"

        if self._results is None:
            return f"Model: {self._name} (fitted, but no results available)"

        if hasattr(self._results, "summary") and callable(getattr(self._results, "summary")):
            return cast(Any, self._results).summary()

        return f"Model: {self._name} (fitted)"

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self._name}', fitted={self._fitted})"


class RegressionModelBase(ModelBase[T, R, Tuple[np.ndarray, np.ndarray]]):
    """Abstract base class for linear regression models.

    Adds access to coefficients, residuals and fitted values, and a
    ``predict`` method, to the common model contract.
    """

    def __init__(self, name: str = "RegressionModel"):
        super().__init__(name=name)
        self._coefficients: Optional[np.ndarray] = None
        self._residuals: Optional[np.ndarray] = None
        self._fitted_values: Optional[np.ndarray] = None

    @property
    def coefficients(self) -> np.ndarray:
        """Get the coefficients from the fitted model.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("coefficients")
        return cast(np.ndarray, self._coefficients)

    @property
    def residuals(self) -> np.ndarray:
        """Get the residuals from the fitted model.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("residuals")
        return cast(np.ndarray, self._residuals)

    @property
    def fitted_values(self) -> np.ndarray:
        """Get the fitted values from the fitted model.

        Raises:
            NotFittedError: If the model has not been fitted
        """
        self._check_fitted("fitted_values")
        return cast(np.ndarray, self._fitted_values)

    @abc.abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """Generate predictions from the fitted model.

        Args:
            X: Regressors for prediction

        Returns:
            np.ndarray: Predicted values
        """
        pass
