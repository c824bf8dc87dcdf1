"""BFGS quasi-Newton minimizer with packed inverse Hessian and kick-start recovery.

Scheme of Nocedal & Wright, *Numerical Optimization* (1999), pp. 193-201.

At iteration k the search direction is ``P_k = -H_k G_k`` where ``H_k``
approximates the inverse Hessian and ``G_k`` is the gradient. A strong Wolfe
line search picks the step length, and ``H`` is then refreshed with the
rank-2 update

    H_{k+1} = (I - r S Y^T) H_k (I - r Y S^T) + r S S^T,   r = 1 / (Y^T S)

where ``S = X_{k+1} - X_k`` and ``Y = G_{k+1} - G_k``. ``H`` starts as the
identity and is stored as a packed upper triangle, ``n(n+1)/2`` doubles.

Every run starts with a few steepest-descent steps, since the first steps
from a bad geometry are where BFGS is least reliable. The same warm-up
(a "kick-start") is repeated, with ``H`` reset to the identity, whenever an
iteration fails: the line search finds no Wolfe point, the curvature
``Y^T S`` vanishes, or an entry of ``H`` grows past the allowed bound. Too
many kick-starts abort the run; that usually points at a fault in the energy
function rather than in the minimizer.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, List, Optional

import numpy as np

from ..diagnostics import assert_finite, is_debug_enabled
from ..logging import get_logger
from .config import BFGSConfig
from .core import (
    Array,
    FailureKind,
    ObjectiveModel,
    OptimizeResult,
    Problem,
    ProblemModel,
    Status,
    StepOutcome,
    check_convergence,
    max_abs,
)
from .errors import ConfigurationError, RecoveryExhaustedError
from .line_search import WolfeLineSearch
from .packed import PackedSymmetricMatrix
from .steepest_descent import SteepestDescent

logger = get_logger(__name__)


class BFGS:
    """
    Full-memory BFGS minimizer driving an :class:`ObjectiveModel`.

    The minimizer owns its inverse Hessian, working copies of the parameters
    and gradient, and its two line-search collaborators. Nothing is shared
    between instances, so independent minimizations may run side by side.

    Attributes:
        model: The objective being minimized.
        config: Minimization parameters.
        hessian: Packed inverse Hessian approximation (after ``initialize``).
        steepest_descent: Warm-up and recovery minimizer.
        line_search: Strong Wolfe line search.
        nit: Completed BFGS iterations.
        n_kick_starts: Recoveries performed so far.
        n_steepest_descent_steps: Steepest-descent steps taken in all warm-ups.
        status: Terminal status of the last ``run``, None while running.
        last_failure: Kind of the most recent recoverable failure.
        record_history: Keep the parameters after every accepted step.

    Example:
        >>> model = ProblemModel(Problem(fun=f, grad=g), x0)
        >>> result = BFGS(model, BFGSConfig(tolerance=1e-8)).run()
        >>> result.status
        <Status.CONVERGED: 'converged'>
    """

    def __init__(self, model: ObjectiveModel, config: Optional[BFGSConfig] = None):
        self.model = model
        self.config = config if config is not None else BFGSConfig()
        self.n = 0
        self.allowed_max_h = 0.0
        self.hessian: Optional[PackedSymmetricMatrix] = None
        self.steepest_descent: Optional[SteepestDescent] = None
        self.line_search: Optional[WolfeLineSearch] = None
        self.nit = 0
        self.n_kick_starts = 0
        self.n_steepest_descent_steps = 0
        self.status: Optional[Status] = None
        self.last_failure: Optional[FailureKind] = None
        self.record_history = False
        self._failure_message = ""
        self._initialized = False
        self._nfev = 0
        self._x: Array = np.zeros(0)
        self._g: Array = np.zeros(0)
        self._energy = float("nan")
        self._best_x: Array = np.zeros(0)
        self._best_energy = float("inf")
        self._history: List[Array] = []
        self._energy_history: List[float] = []

    @property
    def nfev(self) -> int:
        """Model evaluations used so far, line searches included."""
        total = self._nfev
        if self.steepest_descent is not None:
            total += self.steepest_descent.nfev
        if self.line_search is not None:
            total += self.line_search.nfev
        return total

    @property
    def converged(self) -> bool:
        return self.status is Status.CONVERGED

    @property
    def last_step_length(self) -> float:
        if self.line_search is None:
            return self.config.init_step_steepest_descent
        return self.line_search.last_step_length

    @property
    def parameters(self) -> Array:
        return self._x.copy()

    @property
    def gradient(self) -> Array:
        return self._g.copy()

    @property
    def energy(self) -> float:
        return self._energy

    def initialize(self) -> None:
        """
        Check the problem size, build the collaborators and kick-start.

        Raises:
            ConfigurationError: If the model has no variables or more than
                ``config.max_num_variables``. Raised before any evaluation.
        """
        n = int(self.model.dimension())
        if n > self.config.max_num_variables:
            raise ConfigurationError(
                f"The number of variables ({n}) exceeds the maximum this minimizer "
                f"can handle ({self.config.max_num_variables}). "
                "Use a limited-memory method for large-scale problems."
            )
        if n < 1:
            raise ConfigurationError("The model has no variables to minimize.")

        cfg = self.config
        self.n = n
        self.allowed_max_h = cfg.allowed_max_h(n)
        self.steepest_descent = SteepestDescent(
            self.model,
            num_steps=cfg.num_steps_steepest_descent,
            initial_step_length=cfg.init_step_steepest_descent,
            step_size_reduction=cfg.step_size_reduction,
            step_size_expansion=cfg.step_size_expansion,
        )
        self.line_search = WolfeLineSearch(
            self.model,
            c1=cfg.c1,
            c2=cfg.c2,
            extend_alpha_factor=cfg.extend_alpha_factor,
            max_num_evaluations=cfg.max_num_evaluations_wolfe_search,
        )
        self.hessian = PackedSymmetricMatrix(n)
        self.nit = 0
        self.n_kick_starts = 0
        self.n_steepest_descent_steps = 0
        self.status = None
        self.last_failure = None
        self._failure_message = ""
        self._nfev = 0
        self._best_energy = float("inf")
        self._history = []
        self._energy_history = []
        self._initialized = True
        self.kick_start()

    def kick_start(self) -> None:
        """Steepest-descent warm-up, then restart BFGS from the identity."""
        if not self._initialized:
            raise RuntimeError("initialize() must be called before kick_start()")
        logger.debug("Kick-start at iteration %d", self.nit)
        self.n_steepest_descent_steps += self.steepest_descent.run()
        logger.debug(
            "Steepest descent done, last step length %.3e", self.steepest_descent.last_step_length
        )
        self.hessian.set_identity()
        self.line_search.reset(self.steepest_descent.last_step_length)
        self._snapshot()

    def step(self) -> StepOutcome:
        """
        Perform one BFGS iteration.

        Returns:
            A successful outcome, or the kind of recoverable failure. After a
            line-search failure the model is back at the pre-step parameters.
        """
        if not self._initialized:
            raise RuntimeError("initialize() must be called before step()")

        # P = H (-G)
        direction = -self.hessian.matvec(self._g)
        if is_debug_enabled():
            assert_finite(direction, "search direction")

        rollback = self.model.current_parameters()
        search = self.line_search.find_step_length(direction)
        if not search.success:
            self.model.set_parameters(rollback)
            self.model.evaluate()
            self._nfev += 1
            return StepOutcome.failed(
                FailureKind.LINE_SEARCH, f"Line search failed: {search.message}"
            )

        x_new = self.model.current_parameters()
        g_new = self.model.current_gradient()
        s = x_new - self._x
        y = g_new - self._g
        self._advance(x_new, g_new, self.model.current_energy())

        curvature = float(np.dot(y, s))
        if curvature == 0.0:
            return StepOutcome.failed(
                FailureKind.DEGENERATE_CURVATURE,
                "Zero curvature (Y.S == 0); the inverse Hessian update is undefined",
            )
        curv = -1.0 / curvature

        # A = curv * H Y;  H += S A' + A S' + (curv * Y.A - curv) S S'
        a = curv * self.hessian.matvec(y)
        coef = curv * float(np.dot(y, a)) - curv
        max_h = self.hessian.rank_two_update(s, a, coef)
        if is_debug_enabled():
            assert_finite(self.hessian.data, "inverse Hessian")
        if not max_h <= self.allowed_max_h:
            return StepOutcome.failed(
                FailureKind.HESSIAN_INSTABILITY,
                f"The inverse Hessian is badly scaled (max |H| = {np.sqrt(max_h):.3e}) "
                "and is unreliable",
            )

        self.nit += 1
        return StepOutcome.success()

    def run(
        self,
        should_stop: Optional[Callable[[], bool]] = None,
        raise_on_abort: bool = False,
    ) -> OptimizeResult:
        """
        Iterate until convergence, step budget, cancellation or abort.

        Args:
            should_stop: Polled once per iteration, between complete
                iterations; returning True ends the run as ``CANCELLED``.
            raise_on_abort: Raise :class:`RecoveryExhaustedError` instead of
                returning an ``ABORTED`` result.

        Returns:
            OptimizeResult describing the terminal state. ``MAX_ITER`` and
            ``CANCELLED`` results carry the best point reached so far.
        """
        if not self._initialized:
            self.initialize()
        cfg = self.config
        self.status = None

        while self.status is None:
            if check_convergence(max_abs(self._g), cfg.tolerance):
                self.status = Status.CONVERGED
                break
            if self.nit >= cfg.max_steps:
                self.status = Status.MAX_ITER
                break
            if should_stop is not None and should_stop():
                self.status = Status.CANCELLED
                break

            outcome = self.step()
            if outcome.ok:
                logger.debug(
                    "Iteration %d: energy %.10g, max |grad| %.3e",
                    self.nit, self._energy, max_abs(self._g),
                )
                continue

            self.last_failure = outcome.failure
            self._failure_message = outcome.message
            if self.n_kick_starts >= cfg.max_num_kick_starts:
                logger.error(
                    "Aborting after %d kick-starts: %s", self.n_kick_starts, outcome.message
                )
                self._restore_best()
                self.status = Status.ABORTED
                break
            self.n_kick_starts += 1
            logger.warning(
                "Iteration %d failed (%s); kick-start %d of %d",
                self.nit, outcome.failure.value, self.n_kick_starts, cfg.max_num_kick_starts,
            )
            self.kick_start()

        result = self._result()
        logger.info("%s", result.message)
        if self.status is Status.ABORTED and raise_on_abort:
            raise RecoveryExhaustedError(result.message, result)
        return result

    def _snapshot(self) -> None:
        self._advance(
            self.model.current_parameters(),
            self.model.current_gradient(),
            self.model.current_energy(),
        )

    def _advance(self, x: Array, g: Array, energy: float) -> None:
        self._x = x
        self._g = g
        self._energy = float(energy)
        if self._energy < self._best_energy:
            self._best_energy = self._energy
            self._best_x = x.copy()
        self._energy_history.append(self._energy)
        if self.record_history:
            self._history.append(x.copy())

    def _restore_best(self) -> None:
        if self._best_energy < self._energy:
            self.model.set_parameters(self._best_x)
            self.model.evaluate()
            self._nfev += 1
            self._x = self.model.current_parameters()
            self._g = self.model.current_gradient()
            self._energy = self.model.current_energy()

    def _result(self) -> OptimizeResult:
        grad_norm = max_abs(self._g)
        if self.status is Status.CONVERGED:
            message = f"Converged after {self.nit} iterations (max |grad| = {grad_norm:.3e})"
        elif self.status is Status.MAX_ITER:
            message = f"Maximum iterations ({self.config.max_steps}) reached (max |grad| = {grad_norm:.3e})"
        elif self.status is Status.CANCELLED:
            message = f"Cancelled after {self.nit} iterations"
        else:
            message = (
                f"Aborted after {self.n_kick_starts} kick-starts; last failure "
                f"({self.last_failure.value}): {self._failure_message}"
            )
        return OptimizeResult(
            x=self._x.copy(),
            fun=self._energy,
            nit=self.nit,
            success=self.status is Status.CONVERGED,
            status=self.status,
            message=message,
            grad_norm=grad_norm,
            nfev=self.nfev,
            n_kick_starts=self.n_kick_starts,
            failure=self.last_failure,
            history=list(self._history),
            energy_history=list(self._energy_history),
        )


def bfgs(
    problem: Problem,
    x0: np.ndarray,
    config: Optional[BFGSConfig] = None,
    history: bool = False,
    should_stop: Optional[Callable[[], bool]] = None,
    **options,
) -> OptimizeResult:
    """
    Minimize ``problem.fun`` from ``x0`` with BFGS.

    Keyword ``options`` override fields of ``config`` (for example
    ``tolerance=1e-8`` or ``max_steps=200``).
    """
    config = config if config is not None else BFGSConfig()
    if options:
        config = dataclasses.replace(config, **options)
    minimizer = BFGS(ProblemModel(problem, x0), config)
    minimizer.record_history = history
    return minimizer.run(should_stop=should_stop)


__all__ = ["BFGS", "bfgs"]
