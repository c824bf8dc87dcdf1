"""Line-search routines following Nocedal & Wright, chapter 3.

Both searches work on an :class:`~qnopt.optimize.core.ObjectiveModel` that is
already evaluated at the start point. Every trial step length moves the model
and costs one evaluation. On success the model is left at the accepted point;
on failure the caller decides how to roll back.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..diagnostics import assert_wolfe_conditions, is_debug_enabled
from ..logging import get_logger
from .config import (
    DEFAULT_C1,
    DEFAULT_C2,
    DEFAULT_EXTEND_ALPHA_FACTOR,
    DEFAULT_INITIAL_STEP_LENGTH,
    DEFAULT_MAX_NUM_EVALUATIONS,
    DEFAULT_STEP_SIZE_REDUCTION,
)
from .core import Array, ObjectiveModel

logger = get_logger(__name__)

# Zoom gives up once the bracket is narrower than this (relative to alpha).
_MIN_BRACKET = 1e-14


@dataclass(frozen=True)
class LineSearchResult:
    """Outcome of a line search.

    Attributes:
        success: True if an acceptable step length was found.
        alpha: Accepted step length (the last trial on failure).
        fun: Energy at the model's current point.
        nfev: Model evaluations used by this search.
        message: Reason for failure, empty on success.
    """

    success: bool
    alpha: float
    fun: float
    nfev: int
    message: str = ""


def simple_step_length(
    model: ObjectiveModel,
    direction: Array,
    energy: float,
    step: float = DEFAULT_INITIAL_STEP_LENGTH,
    reduction: float = DEFAULT_STEP_SIZE_REDUCTION,
    max_tries: int = 60,
) -> LineSearchResult:
    """Backtrack along ``direction`` until the energy decreases.

    Tries ``step``, then ``step * reduction``, ... up to ``max_tries`` times.
    The only acceptance test is a strict decrease below ``energy``, so no
    curvature information is needed. When every trial fails the model is
    restored to the start point and re-evaluated.
    """
    if not (0 < reduction < 1):
        raise ValueError("reduction must lie in (0, 1)")
    x0 = model.current_parameters()
    direction = np.asarray(direction, dtype=float)
    nfev = 0
    for _ in range(max_tries):
        model.set_parameters(x0 + step * direction)
        trial = model.evaluate()
        nfev += 1
        if math.isfinite(trial) and trial < energy:
            return LineSearchResult(True, step, trial, nfev)
        step *= reduction
    model.set_parameters(x0)
    restored = model.evaluate()
    nfev += 1
    return LineSearchResult(
        False, step, restored, nfev, f"no decrease after {max_tries} reductions"
    )


class WolfeLineSearch:
    """
    Strong Wolfe line search with bracketing and zoom.

    An accepted step length ``alpha`` satisfies

    - sufficient decrease: ``f(x + alpha p) <= f(x) + c1 alpha g.p``
    - curvature: ``|g(x + alpha p).p| <= c2 |g.p|``

    The bracketing phase multiplies ``alpha`` by ``extend_alpha_factor`` until
    an interval containing acceptable points is found. The zoom phase then
    shrinks that interval with safeguarded cubic interpolation. Both phases
    share one budget of ``max_num_evaluations`` trial points; running out is
    reported as a failure, never as an unchecked step length.

    The first trial of a search comes from the step-length memory. ``reset``
    seeds it (with the last steepest-descent step after a warm-up); after each
    success it moves toward the unit step natural for quasi-Newton
    directions.

    Parameters
    ----------
    model:
        Objective model, evaluated at the start point before each search.
    c1, c2:
        Wolfe constants, ``0 < c1 < c2 < 1``.
    extend_alpha_factor:
        Bracketing expansion multiplier, ``> 1``.
    max_num_evaluations:
        Trial points allowed per search.
    initial_step_length:
        Memory used before the first ``reset``.
    """

    def __init__(
        self,
        model: ObjectiveModel,
        c1: float = DEFAULT_C1,
        c2: float = DEFAULT_C2,
        extend_alpha_factor: float = DEFAULT_EXTEND_ALPHA_FACTOR,
        max_num_evaluations: int = DEFAULT_MAX_NUM_EVALUATIONS,
        initial_step_length: float = DEFAULT_INITIAL_STEP_LENGTH,
    ):
        if not (0 < c1 < c2 < 1):
            raise ValueError("Require 0 < c1 < c2 < 1 for Wolfe conditions.")
        if extend_alpha_factor <= 1:
            raise ValueError("extend_alpha_factor must be > 1")
        if max_num_evaluations < 1:
            raise ValueError("max_num_evaluations must be >= 1")
        if initial_step_length <= 0:
            raise ValueError("initial_step_length must be positive")
        self.model = model
        self.c1 = c1
        self.c2 = c2
        self.extend_alpha_factor = extend_alpha_factor
        self.max_num_evaluations = int(max_num_evaluations)
        self.last_step_length = float(initial_step_length)
        self.nfev = 0
        self._next_step = float(initial_step_length)
        self._evaluations = 0
        self._x0: Array = np.zeros(0)
        self._direction: Array = np.zeros(0)

    def reset(self, step_length: float) -> None:
        """Seed the step-length memory used by the next search."""
        if not (math.isfinite(step_length) and step_length > 0):
            raise ValueError(f"step_length must be positive and finite, got {step_length}")
        self._next_step = float(step_length)

    @property
    def next_step_length(self) -> float:
        return self._next_step

    def find_step_length(
        self, direction: Array, initial_step: Optional[float] = None
    ) -> LineSearchResult:
        """
        Search along ``direction`` from the model's current point.

        Parameters
        ----------
        direction:
            Search direction ``p``; must satisfy ``g.p < 0``.
        initial_step:
            First trial step length. Defaults to the step-length memory.
        """
        self._x0 = self.model.current_parameters()
        self._direction = np.asarray(direction, dtype=float).reshape(-1)
        self._evaluations = 0
        phi0 = float(self.model.current_energy())
        der0 = float(np.dot(self.model.current_gradient(), self._direction))

        if not (math.isfinite(phi0) and math.isfinite(der0)):
            return self._fail(0.0, phi0, "non-finite energy or slope at the start point")
        if der0 >= 0:
            return self._fail(0.0, phi0, f"not a descent direction (g.p={der0:.3e})")

        alpha = float(initial_step) if initial_step is not None else self._next_step
        prev = (0.0, phi0, der0)

        while self._evaluations < self.max_num_evaluations:
            phi, der = self._trial(alpha)
            if (
                not (math.isfinite(phi) and math.isfinite(der))
                or phi > phi0 + self.c1 * alpha * der0
                or (prev[0] > 0 and phi >= prev[1])
            ):
                return self._zoom(prev, (alpha, phi, der), phi0, der0)
            if abs(der) <= -self.c2 * der0:
                return self._accept(alpha, phi, der, phi0, der0)
            if der >= 0:
                return self._zoom((alpha, phi, der), prev, phi0, der0)
            prev = (alpha, phi, der)
            alpha *= self.extend_alpha_factor

        return self._fail(
            alpha, self.model.current_energy(),
            f"evaluation budget ({self.max_num_evaluations}) exhausted while bracketing",
        )

    def _trial(self, alpha: float) -> tuple[float, float]:
        self.model.set_parameters(self._x0 + alpha * self._direction)
        phi = float(self.model.evaluate())
        self._evaluations += 1
        self.nfev += 1
        der = float(np.dot(self.model.current_gradient(), self._direction))
        return phi, der

    def _zoom(
        self,
        lo: tuple[float, float, float],
        hi: tuple[float, float, float],
        phi0: float,
        der0: float,
    ) -> LineSearchResult:
        """Zoom stage: ``lo`` satisfies sufficient decrease, ``hi`` bounds it."""
        alpha = hi[0]
        while self._evaluations < self.max_num_evaluations:
            width = abs(hi[0] - lo[0])
            if width <= _MIN_BRACKET * max(1.0, abs(lo[0]), abs(hi[0])):
                return self._fail(
                    alpha, self.model.current_energy(), "bracket collapsed during zoom"
                )
            alpha = _interpolate(lo, hi)
            phi, der = self._trial(alpha)
            if (
                not (math.isfinite(phi) and math.isfinite(der))
                or phi > phi0 + self.c1 * alpha * der0
                or phi >= lo[1]
            ):
                hi = (alpha, phi, der)
            else:
                if abs(der) <= -self.c2 * der0:
                    return self._accept(alpha, phi, der, phi0, der0)
                if der * (hi[0] - lo[0]) >= 0:
                    hi = lo
                lo = (alpha, phi, der)
        return self._fail(
            alpha, self.model.current_energy(),
            f"evaluation budget ({self.max_num_evaluations}) exhausted during zoom",
        )

    def _accept(
        self, alpha: float, phi: float, der: float, phi0: float, der0: float
    ) -> LineSearchResult:
        if is_debug_enabled():
            assert_wolfe_conditions(phi0, der0, phi, der, alpha, self.c1, self.c2)
        self.last_step_length = alpha
        grown = alpha * self.extend_alpha_factor
        self._next_step = 1.0 if grown >= 1.0 else grown
        return LineSearchResult(True, alpha, phi, self._evaluations)

    def _fail(self, alpha: float, fun: float, message: str) -> LineSearchResult:
        logger.debug("Wolfe line search failed: %s", message)
        return LineSearchResult(False, alpha, float(fun), self._evaluations, message)


def _interpolate(
    lo: tuple[float, float, float], hi: tuple[float, float, float]
) -> float:
    """Minimizer of the cubic through both bracket ends, safeguarded.

    Falls back to bisection when the cubic has no real minimizer, the data is
    not finite, or the minimizer lies within 10% of either end.
    """
    a_lo, f_lo, d_lo = lo
    a_hi, f_hi, d_hi = hi
    midpoint = 0.5 * (a_lo + a_hi)
    if not all(math.isfinite(v) for v in (f_lo, d_lo, f_hi, d_hi)):
        return midpoint
    d1 = d_lo + d_hi - 3.0 * (f_lo - f_hi) / (a_lo - a_hi)
    radicand = d1 * d1 - d_lo * d_hi
    if radicand < 0:
        return midpoint
    d2 = math.copysign(math.sqrt(radicand), a_hi - a_lo)
    denom = d_hi - d_lo + 2.0 * d2
    if denom == 0:
        return midpoint
    alpha = a_hi - (a_hi - a_lo) * (d_hi + d2 - d1) / denom
    low, high = min(a_lo, a_hi), max(a_lo, a_hi)
    margin = 0.1 * (high - low)
    if not (math.isfinite(alpha) and low + margin <= alpha <= high - margin):
        return midpoint
    return alpha


__all__ = ["LineSearchResult", "WolfeLineSearch", "simple_step_length"]
