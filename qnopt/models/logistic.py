"""Logistic regression fitted by BFGS.

The model is an :class:`~qnopt.optimize.ObjectiveModel` whose energy is the
negative log-likelihood of the samples, so fitting is a plain BFGS
minimization. Nested models (for example a null model and an alternative
with one extra covariate) can be compared with :func:`likelihood_ratio`.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ..logging import get_logger
from ..optimize import BFGS, BFGSConfig, OptimizeResult

logger = get_logger(__name__)


def _sigmoid(z: np.ndarray) -> np.ndarray:
    # exp(-log(1 + exp(-z))) stays finite for large |z|
    return np.exp(-np.logaddexp(0.0, -z))


class LogisticRegression:
    """Binary logistic regression ``P(y=1 | x) = sigmoid(w.x + c)``.

    Parameters are stored as one vector ``theta = [w_0, ..., w_{k-1}, c]``.

    Attributes:
        num_inputs: Number of covariates ``k``.
        l2: Ridge penalty ``0.5 * l2 * |w|^2`` added to the energy (the
            intercept is not penalized).
        result: Result of the last :meth:`learn` call.
    """

    def __init__(self, num_inputs: int, l2: float = 0.0):
        if num_inputs < 1:
            raise ValueError(f"num_inputs must be >= 1, got {num_inputs}")
        if l2 < 0:
            raise ValueError(f"l2 must be non-negative, got {l2}")
        self.num_inputs = int(num_inputs)
        self.l2 = float(l2)
        self.result: Optional[OptimizeResult] = None
        self._theta = np.zeros(self.num_inputs + 1)
        self._grad = np.zeros(self.num_inputs + 1)
        self._energy = float("nan")
        self._X: Optional[np.ndarray] = None
        self._y: Optional[np.ndarray] = None

    def set_samples(self, X: np.ndarray, y: np.ndarray) -> None:
        """Set the training samples.

        Args:
            X: Covariates, shape (n_samples, num_inputs).
            y: Binary outcomes (0/1 or booleans), shape (n_samples,).
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float).reshape(-1)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[1] != self.num_inputs:
            raise ValueError(f"X must have {self.num_inputs} columns, got {X.shape[1]}")
        if X.shape[0] != y.size:
            raise ValueError(f"X has {X.shape[0]} rows but y has {y.size} entries")
        if not np.all((y == 0) | (y == 1)):
            raise ValueError("y must contain only 0 and 1")
        self._X = X
        self._y = y

    @property
    def weights(self) -> np.ndarray:
        return self._theta[:-1].copy()

    @property
    def intercept(self) -> float:
        return float(self._theta[-1])

    # ObjectiveModel interface

    def dimension(self) -> int:
        return self._theta.size

    def current_parameters(self) -> np.ndarray:
        return self._theta.copy()

    def current_gradient(self) -> np.ndarray:
        return self._grad.copy()

    def current_energy(self) -> float:
        return self._energy

    def set_parameters(self, x: np.ndarray) -> None:
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.size != self._theta.size:
            raise ValueError(f"Expected {self._theta.size} parameters, got {x.size}")
        self._theta = x.copy()

    def evaluate(self) -> float:
        """Negative log-likelihood (plus penalty) and its gradient."""
        X, y = self._require_samples()
        w, c = self._theta[:-1], self._theta[-1]
        z = X @ w + c
        energy = float(np.sum(np.logaddexp(0.0, z) - y * z))
        residual = _sigmoid(z) - y
        grad = np.empty_like(self._theta)
        grad[:-1] = X.T @ residual
        grad[-1] = np.sum(residual)
        if self.l2 > 0:
            energy += 0.5 * self.l2 * float(w @ w)
            grad[:-1] += self.l2 * w
        self._energy = energy
        self._grad = grad
        return energy

    # Fitting and prediction

    def learn(self, config: Optional[BFGSConfig] = None) -> OptimizeResult:
        """Fit by BFGS starting from all-zero parameters."""
        self._require_samples()
        self._theta = np.zeros_like(self._theta)
        self.result = BFGS(self, config).run()
        if not self.result.success:
            logger.warning("Logistic regression did not converge: %s", self.result.message)
        return self.result

    def log_likelihood(self) -> float:
        """Log-likelihood of the samples at the current parameters (no penalty)."""
        X, y = self._require_samples()
        z = X @ self._theta[:-1] + self._theta[-1]
        return float(-np.sum(np.logaddexp(0.0, z) - y * z))

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, self.num_inputs)
        return _sigmoid(X @ self._theta[:-1] + self._theta[-1])

    def predict(self, X: np.ndarray, threshold: float = 0.5) -> np.ndarray:
        return (self.predict_proba(X) >= threshold).astype(int)

    def _require_samples(self) -> tuple[np.ndarray, np.ndarray]:
        if self._X is None or self._y is None:
            raise RuntimeError("set_samples() must be called first")
        return self._X, self._y

    def __repr__(self) -> str:
        return (
            f"LogisticRegression(num_inputs={self.num_inputs}, "
            f"weights={np.array2string(self.weights, precision=4)}, "
            f"intercept={self.intercept:.4f})"
        )


def likelihood_ratio(null: LogisticRegression, alt: LogisticRegression) -> float:
    """Likelihood-ratio statistic ``2 (LL_alt - LL_null)`` of two fitted models.

    Raises:
        ValueError: If the statistic is not finite.
    """
    statistic = 2.0 * (alt.log_likelihood() - null.log_likelihood())
    if not math.isfinite(statistic):
        raise ValueError(f"Likelihood ratio is not finite.\n\tnull: {null}\n\talt: {alt}")
    return statistic


__all__ = ["LogisticRegression", "likelihood_ratio"]
