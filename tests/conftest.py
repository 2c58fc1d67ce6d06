'''
Pytest configuration and fixtures for the hacreg test suite.

Provides seeded generators, regression datasets with i.i.d. and
autocorrelated errors, a scripted integer generator for the bootstrap and
hypothesis strategies shared across modules.
'''

from typing import Any, Dict

import numpy as np
import pytest
from hypothesis import strategies as st
from hypothesis.extra import numpy as hnp

from hacreg.core.config import reset_config


# ---- Configuration ----

@pytest.fixture(autouse=True)
def default_config():
    """Restore the default configuration after every test."""
    yield
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def small_regression() -> Dict[str, np.ndarray]:
    """Five observations on a constant and a linear trend."""
    X = np.column_stack([np.ones(5), np.arange(1.0, 6.0)])
    y = np.array([2.1, 3.9, 6.2, 7.8, 10.1])
    return {"y": y, "X": X}


@pytest.fixture
def iid_regression(rng) -> Dict[str, Any]:
    """y = 1 + 2 x + e with i.i.d. standard normal x and e, T = 400."""
    T = 400
    X = np.column_stack([np.ones(T), rng.standard_normal(T)])
    beta = np.array([1.0, 2.0])
    y = X @ beta + rng.standard_normal(T)
    return {"y": y, "X": X, "beta": beta}


def _ar1(rng: np.random.Generator, T: int, phi: float) -> np.ndarray:
    shocks = rng.standard_normal(T + 100)
    out = np.zeros(T + 100)
    for t in range(1, T + 100):
        out[t] = phi * out[t - 1] + shocks[t]
    return out[100:]


@pytest.fixture
def ar1_regression(rng) -> Dict[str, Any]:
    """Persistent AR(1) regressor and AR(1) errors, both with coefficient 0.9."""
    T = 400
    x = _ar1(rng, T, 0.9)
    u = _ar1(rng, T, 0.9)
    X = np.column_stack([np.ones(T), x])
    beta = np.array([0.5, 1.0])
    return {"y": X @ beta + u, "X": X, "beta": beta}


@pytest.fixture
def system_regression(rng) -> Dict[str, Any]:
    """Two equations sharing three regressors with correlated errors."""
    T = 300
    X = np.column_stack([np.ones(T), rng.standard_normal((T, 2))])
    B = np.array([[1.0, -0.5],
                  [0.5, 0.0],
                  [0.0, 2.0]])
    chol = np.linalg.cholesky(np.array([[1.0, 0.6], [0.6, 1.0]]))
    E = rng.standard_normal((T, 2)) @ chol.T
    return {"Y": X @ B + E, "X": X, "B": B}


class ScriptedGenerator:
    """Integer generator returning pre-set values, one call at a time."""

    def __init__(self, value: int = 0):
        self.value = value
        self.calls = []

    def integers(self, low, high, size=None):
        self.calls.append((low, high, size))
        return np.full(size, self.value, dtype=np.int64)


@pytest.fixture
def zero_generator() -> ScriptedGenerator:
    """Generator whose draws are always zero."""
    return ScriptedGenerator(0)


# ---- Hypothesis strategies ----

def moment_matrices(min_rows: int = 2, max_rows: int = 40, max_cols: int = 4):
    """Strategy for T x q matrices of moderate, finite values."""
    return st.tuples(
        st.integers(min_value=min_rows, max_value=max_rows),
        st.integers(min_value=1, max_value=max_cols),
    ).flatmap(
        lambda shape: hnp.arrays(
            np.float64,
            shape,
            elements=st.floats(-100, 100, allow_nan=False, allow_infinity=False),
        )
    )
