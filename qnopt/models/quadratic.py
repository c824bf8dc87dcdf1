"""Quadratic energy ``0.5 x^T A x - b^T x``."""

from __future__ import annotations

from typing import Optional

import numpy as np


class QuadraticModel:
    """Quadratic objective with symmetric matrix ``A``.

    For positive-definite ``A`` the unique minimizer solves ``A x = b``.

    Attributes:
        A: Symmetric matrix, shape (n, n).
        b: Linear term, shape (n,).
        nfev: Number of evaluations performed.
    """

    def __init__(
        self,
        A: np.ndarray,
        b: Optional[np.ndarray] = None,
        x0: Optional[np.ndarray] = None,
    ):
        A = np.asarray(A, dtype=float)
        if A.ndim != 2 or A.shape[0] != A.shape[1]:
            raise ValueError(f"A must be square, got shape {A.shape}")
        if not np.allclose(A, A.T):
            raise ValueError("A must be symmetric")
        n = A.shape[0]
        self.A = A
        self.b = np.zeros(n) if b is None else np.asarray(b, dtype=float).reshape(-1)
        if self.b.shape != (n,):
            raise ValueError(f"b must have shape ({n},), got {self.b.shape}")
        self._x = np.zeros(n) if x0 is None else np.asarray(x0, dtype=float).reshape(-1).copy()
        if self._x.shape != (n,):
            raise ValueError(f"x0 must have shape ({n},), got {self._x.shape}")
        self._grad = np.zeros(n)
        self._energy = float("nan")
        self.nfev = 0

    def dimension(self) -> int:
        return self._x.size

    def current_parameters(self) -> np.ndarray:
        return self._x.copy()

    def current_gradient(self) -> np.ndarray:
        return self._grad.copy()

    def current_energy(self) -> float:
        return self._energy

    def set_parameters(self, x: np.ndarray) -> None:
        self._x = np.asarray(x, dtype=float).reshape(-1).copy()

    def evaluate(self) -> float:
        ax = self.A @ self._x
        self._energy = float(0.5 * self._x @ ax - self.b @ self._x)
        self._grad = ax - self.b
        self.nfev += 1
        return self._energy

    def minimizer(self) -> np.ndarray:
        """Exact minimizer, ``A^{-1} b``."""
        return np.linalg.solve(self.A, self.b)


__all__ = ["QuadraticModel"]
