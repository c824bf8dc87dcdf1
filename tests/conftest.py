"""Pytest configuration and shared fixtures for qnopt tests.

This module provides:
- A deterministic numpy RNG fixture
- Resetting of the global debug switch between tests
"""

import os

import numpy as np
import pytest

from qnopt.diagnostics import is_debug_enabled, set_debug_enabled


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def restore_debug_mode():
    """Undo any debug-mode change a test makes."""
    original = is_debug_enabled()
    yield
    set_debug_enabled(original)


@pytest.fixture(scope="function")
def make_spd(rng: np.random.Generator):
    """Factory for random symmetric positive-definite matrices.

    The returned callable takes ``(n, cond=10.0)`` and produces a matrix with
    eigenvalues spread evenly over ``[1, cond]``.
    """

    def _make(n: int, cond: float = 10.0) -> np.ndarray:
        q, _ = np.linalg.qr(rng.standard_normal((n, n)))
        eigvals = np.linspace(1.0, cond, n)
        mat = (q * eigvals) @ q.T
        return 0.5 * (mat + mat.T)

    return _make
