"""Core interfaces shared by the minimizers.

The minimizers never evaluate a plain function directly. They drive an
:class:`ObjectiveModel`, an object that owns the current parameters and knows
how to recompute its energy and gradient after the parameters change. Plain
``fun``/``grad`` callables are adapted with :class:`ProblemModel`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol, runtime_checkable

import numpy as np

from .utils import approx_grad

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]

ATOL = 1e-14


@runtime_checkable
class ObjectiveModel(Protocol):
    """Energy function with mutable parameters.

    ``evaluate`` recomputes the energy and gradient at the current parameters
    and returns the energy. ``current_energy`` and ``current_gradient`` report
    the values of the last evaluation.
    """

    def dimension(self) -> int: ...

    def current_parameters(self) -> Array: ...

    def current_gradient(self) -> Array: ...

    def current_energy(self) -> float: ...

    def set_parameters(self, x: Array) -> None: ...

    def evaluate(self) -> float: ...


@dataclass(frozen=True)
class Problem:
    """Container describing an unconstrained minimization problem."""

    fun: Objective
    grad: Optional[Gradient] = None
    dim: Optional[int] = None


class ProblemModel:
    """Adapt a :class:`Problem` and a start point to :class:`ObjectiveModel`.

    Without an analytic gradient the central-difference approximation is
    used, at a cost of ``2 * n`` extra objective calls per evaluation.
    """

    def __init__(self, problem: Problem, x0: Array):
        x0 = np.asarray(x0, dtype=float).reshape(-1).copy()
        if problem.dim is not None and problem.dim != x0.size:
            raise ValueError(
                f"x0 has {x0.size} entries but the problem declares dim={problem.dim}"
            )
        self.problem = problem
        self._x = x0
        self._grad = np.zeros_like(x0)
        self._energy = float("nan")
        self.nfev = 0
        self.njev = 0

    def dimension(self) -> int:
        return self._x.size

    def current_parameters(self) -> Array:
        return self._x.copy()

    def current_gradient(self) -> Array:
        return self._grad.copy()

    def current_energy(self) -> float:
        return self._energy

    def set_parameters(self, x: Array) -> None:
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.size != self._x.size:
            raise ValueError(f"Expected {self._x.size} parameters, got {x.size}")
        self._x = x.copy()

    def evaluate(self) -> float:
        self._energy = float(self.problem.fun(self._x))
        self.nfev += 1
        if self.problem.grad is not None:
            self._grad = np.asarray(self.problem.grad(self._x), dtype=float).reshape(-1)
            self.njev += 1
        else:
            self._grad, evals = approx_grad(self.problem.fun, self._x, return_evals=True)
            self.nfev += int(evals)
        return self._energy


class Status(Enum):
    """Terminal state of a minimization run."""

    CONVERGED = "converged"
    MAX_ITER = "max_iter"
    CANCELLED = "cancelled"
    ABORTED = "aborted"


class FailureKind(Enum):
    """Recoverable failures of a single quasi-Newton iteration."""

    LINE_SEARCH = "line_search"
    DEGENERATE_CURVATURE = "degenerate_curvature"
    HESSIAN_INSTABILITY = "hessian_instability"


@dataclass(frozen=True)
class StepOutcome:
    """Result of one iteration: success, or the kind of recoverable failure."""

    ok: bool
    failure: Optional[FailureKind] = None
    message: str = ""

    @classmethod
    def success(cls) -> "StepOutcome":
        return cls(ok=True)

    @classmethod
    def failed(cls, kind: FailureKind, message: str) -> "StepOutcome":
        return cls(ok=False, failure=kind, message=message)


@dataclass
class OptimizeResult:
    """Standard result object returned by the minimizers in this package.

    Attributes:
        x: Final parameters (the best seen when the run was aborted).
        fun: Energy at ``x``.
        nit: Number of quasi-Newton iterations completed.
        success: True only when ``status`` is ``Status.CONVERGED``.
        status: Terminal state reached.
        message: Human-readable description of the outcome.
        grad_norm: Infinity norm of the gradient at ``x``.
        nfev: Number of model evaluations.
        n_kick_starts: Number of steepest-descent restarts performed.
        failure: Last recoverable failure, if any occurred.
        history: Parameters after each accepted step (when requested).
        energy_history: Energy after the warm-up and after each accepted step.
    """

    x: Array
    fun: float
    nit: int
    success: bool
    status: Status
    message: str
    grad_norm: float
    nfev: int
    n_kick_starts: int = 0
    failure: Optional[FailureKind] = None
    history: List[Array] = field(default_factory=list)
    energy_history: List[float] = field(default_factory=list)


def max_abs(vec: Array) -> float:
    """Infinity norm of a vector (0.0 for an empty vector)."""
    vec = np.asarray(vec)
    if vec.size == 0:
        return 0.0
    return float(np.max(np.abs(vec)))


def check_convergence(grad_norm: float, tol: float) -> bool:
    """Return True if the gradient infinity norm satisfies the tolerance."""
    return grad_norm <= max(tol, ATOL)


__all__ = [
    "ATOL",
    "Array",
    "FailureKind",
    "Gradient",
    "Objective",
    "ObjectiveModel",
    "OptimizeResult",
    "Problem",
    "ProblemModel",
    "Status",
    "StepOutcome",
    "check_convergence",
    "max_abs",
]
