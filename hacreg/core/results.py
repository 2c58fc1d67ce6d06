'''
Standardized result containers for hacreg.

Dataclass-based result objects shared by the estimators. ``ModelResult``
provides serialization and display; ``EstimationResult`` adds a coefficient
table (estimate, standard error, t-statistic, asymptotic p-value) that the
regression results extend.
'''

import json
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd
from scipy import stats


def _jsonable(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (np.floating, np.integer)):
        return value.item()
    if isinstance(value, pd.DataFrame):
        return value.to_dict()
    if isinstance(value, pd.Series):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class ModelResult:
    """Base class for all model results.

    Attributes:
        model_name: Name of the model that generated the results
        creation_time: Timestamp when the result was created
        metadata: Additional metadata about the result
    """

    model_name: str = "Model"
    creation_time: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, dict):
            self.metadata = dict(self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a dictionary.

        Arrays become nested lists so the dictionary can be serialized.

        Returns:
            Dict[str, Any]: Dictionary representation of the result object
        """
        return {f.name: _jsonable(getattr(self, f.name)) for f in fields(self)}

    def to_json(self, path: Optional[Union[str, Path]] = None, **kwargs: Any) -> Optional[str]:
        """Convert the result object to JSON.

        Args:
            path: Path to save the JSON file (if None, returns the JSON string)
            **kwargs: Additional keyword arguments for json.dump/dumps

        Returns:
            Optional[str]: JSON string if path is None, None otherwise
        """
        result_dict = self.to_dict()

        if path is None:
            return json.dumps(result_dict, **kwargs)

        with open(path, 'w') as f:
            json.dump(result_dict, f, **kwargs)

        return None

    def summary(self) -> str:
        """Generate a text summary of the model results."""
        header = f"Model: {self.model_name}\n"
        header += "=" * (len(header) - 1) + "\n\n"

        metadata_str = ""
        if self.metadata:
            metadata_str = "Metadata:\n"
            for key, value in self.metadata.items():
                metadata_str += f"  {key}: {value}\n"
            metadata_str += "\n"

        return header + metadata_str

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model_name='{self.model_name}')"


@dataclass
class EstimationResult(ModelResult):
    """Base class for coefficient estimates with a covariance matrix.

    ``coefficients`` may be a vector or a K x n matrix; the table in
    ``summary`` and ``to_dataframe`` follows the column-major (equation by
    equation) stacking used for the covariance matrix.

    Attributes:
        coefficients: Estimated coefficients
        covariance: Estimated covariance of the stacked coefficients
        std_errors: Standard errors of the stacked coefficients
        t_stats: t-statistics of the stacked coefficients
        p_values: Two-sided asymptotic (normal) p-values
        parameter_names: Labels for the stacked coefficients
    """

    coefficients: Optional[np.ndarray] = None
    covariance: Optional[np.ndarray] = None
    std_errors: Optional[np.ndarray] = None
    t_stats: Optional[np.ndarray] = None
    p_values: Optional[np.ndarray] = None
    parameter_names: Optional[List[str]] = None

    def __post_init__(self) -> None:
        super().__post_init__()

        if self.covariance is not None and self.coefficients is not None:
            stacked = self.stacked_coefficients()
            variances = np.diag(self.covariance)
            if self.std_errors is None:
                self.std_errors = np.sqrt(np.maximum(variances, 0.0))
            if self.t_stats is None:
                with np.errstate(divide="ignore", invalid="ignore"):
                    self.t_stats = stacked / self.std_errors
            if self.p_values is None:
                self.p_values = 2 * stats.norm.sf(np.abs(self.t_stats))

    def stacked_coefficients(self) -> np.ndarray:
        """Return ``vec`` of the coefficients (column-major stacking)."""
        if self.coefficients is None:
            return np.empty(0)
        return np.asarray(self.coefficients).reshape(-1, order="F")

    def _table_names(self) -> List[str]:
        n_params = self.stacked_coefficients().shape[0]
        if self.parameter_names is not None and len(self.parameter_names) == n_params:
            return list(self.parameter_names)
        return [f"b{i}" for i in range(n_params)]

    def summary(self) -> str:
        """Generate a text summary with the coefficient table."""
        base_summary = super().summary()
        if self.coefficients is None:
            return base_summary

        stacked = self.stacked_coefficients()
        param_table = "Coefficient Estimates:\n"
        param_table += "-" * 80 + "\n"
        param_table += f"{'Parameter':<20} {'Estimate':<12} {'Std. Error':<12} "
        param_table += f"{'t-Stat':<12} {'p-Value':<12}\n"
        param_table += "-" * 80 + "\n"

        for i, name in enumerate(self._table_names()):
            param_table += f"{name:<20} {stacked[i]:<12.6f} "
            if self.std_errors is None:
                param_table += f"{'N/A':<12} {'N/A':<12} {'N/A':<12}\n"
                continue

            param_table += f"{self.std_errors[i]:<12.6f} {self.t_stats[i]:<12.6f} "
            p_value = self.p_values[i]
            param_table += f"{p_value:<12.6f}"
            if p_value < 0.01:
                param_table += " ***"
            elif p_value < 0.05:
                param_table += " **"
            elif p_value < 0.1:
                param_table += " *"
            param_table += "\n"

        param_table += "-" * 80 + "\n"
        param_table += "Significance codes: *** 0.01, ** 0.05, * 0.1\n\n"

        return base_summary + param_table

    def to_dataframe(self) -> pd.DataFrame:
        """Convert the coefficient table to a pandas DataFrame.

        Returns:
            pd.DataFrame: One row per stacked coefficient

        Raises:
            ValueError: If no coefficients are available
        """
        if self.coefficients is None:
            raise ValueError("Coefficients are not available")

        data: Dict[str, Any] = {"estimate": self.stacked_coefficients()}
        if self.std_errors is not None:
            data["std_error"] = self.std_errors
            data["t_stat"] = self.t_stats
            data["p_value"] = self.p_values

        return pd.DataFrame(data, index=self._table_names())
