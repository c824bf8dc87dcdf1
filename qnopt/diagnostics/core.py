"""Runtime invariant checks used by the minimizers in debug mode."""

from __future__ import annotations

import numpy as np


def is_symmetric(matrix: np.ndarray, atol: float = 1e-12) -> bool:
    """
    Return True if a dense square matrix equals its transpose.

    Parameters
    ----------
    matrix:
        Dense array of shape (n, n).
    atol:
        Absolute tolerance for the element-wise comparison.
    """
    matrix = np.asarray(matrix)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    return bool(np.allclose(matrix, matrix.T, rtol=0.0, atol=atol))


def assert_finite(values: np.ndarray, name: str = "array") -> None:
    """
    Assert that every entry of ``values`` is finite.

    Raises
    ------
    ValueError
        If any entry is NaN or infinite.
    """
    values = np.asarray(values)
    if not np.all(np.isfinite(values)):
        bad = int(np.count_nonzero(~np.isfinite(values)))
        raise ValueError(f"{name} contains {bad} non-finite entries.")


def assert_wolfe_conditions(
    phi0: float,
    der0: float,
    phi_alpha: float,
    der_alpha: float,
    alpha: float,
    c1: float,
    c2: float,
    rtol: float = 1e-10,
) -> None:
    """
    Assert that a step length satisfies the strong Wolfe conditions.

    Parameters
    ----------
    phi0, der0:
        Energy and directional derivative at the start point.
    phi_alpha, der_alpha:
        Energy and directional derivative at ``alpha``.
    alpha:
        Accepted step length.
    c1, c2:
        Sufficient-decrease and curvature constants.
    rtol:
        Relative slack for round-off in the comparisons.

    Raises
    ------
    ValueError
        If either condition is violated.
    """
    slack = rtol * max(1.0, abs(phi0))
    if phi_alpha > phi0 + c1 * alpha * der0 + slack:
        raise ValueError(
            f"Sufficient decrease violated at alpha={alpha:.3e}: "
            f"f={phi_alpha:.6e} > {phi0 + c1 * alpha * der0:.6e}"
        )
    if abs(der_alpha) > c2 * abs(der0) * (1.0 + rtol):
        raise ValueError(
            f"Curvature condition violated at alpha={alpha:.3e}: "
            f"|g.p|={abs(der_alpha):.6e} > {c2 * abs(der0):.6e}"
        )


__all__ = ["is_symmetric", "assert_finite", "assert_wolfe_conditions"]
