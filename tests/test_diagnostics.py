"""Tests for debug mode and runtime invariant checks."""

import numpy as np
import pytest

from qnopt.diagnostics import (
    assert_finite,
    assert_wolfe_conditions,
    debug_context,
    is_debug_enabled,
    is_symmetric,
    set_debug_enabled,
)


def test_debug_mode_toggle_and_context() -> None:
    """Test debug mode toggling and context manager."""
    set_debug_enabled(False)
    assert not is_debug_enabled()

    with debug_context(True):
        assert is_debug_enabled()

    assert not is_debug_enabled()

    set_debug_enabled(True)
    with debug_context(False):
        assert not is_debug_enabled()
    assert is_debug_enabled()


def test_debug_context_nested() -> None:
    """Test nested debug contexts."""
    set_debug_enabled(False)
    with debug_context(True):
        with debug_context(False):
            assert not is_debug_enabled()
        assert is_debug_enabled()
    assert not is_debug_enabled()


def test_is_symmetric() -> None:
    assert is_symmetric(np.array([[1.0, 2.0], [2.0, 3.0]]))
    assert not is_symmetric(np.array([[1.0, 2.0], [0.0, 3.0]]))
    assert not is_symmetric(np.ones((2, 3)))


def test_assert_finite() -> None:
    assert_finite(np.array([1.0, -2.0]))
    with pytest.raises(ValueError, match="2 non-finite"):
        assert_finite(np.array([np.nan, 1.0, np.inf]), "direction")


def test_assert_wolfe_conditions() -> None:
    # phi(alpha) = (alpha - 1)^2 along p with phi(0) = 1, phi'(0) = -2
    assert_wolfe_conditions(1.0, -2.0, 0.0, 0.0, 1.0, c1=1e-4, c2=0.9)
    with pytest.raises(ValueError, match="Sufficient decrease"):
        assert_wolfe_conditions(1.0, -2.0, 1.0, 2.0, 2.0, c1=1e-4, c2=0.9)
    with pytest.raises(ValueError, match="Curvature"):
        assert_wolfe_conditions(1.0, -2.0, 0.99, -1.99, 0.005, c1=1e-4, c2=0.9)
