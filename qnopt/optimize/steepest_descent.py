"""Steepest-descent warm-up and recovery steps.

Moves along the negative gradient with a decrease-only backtracking search.
It needs no curvature information, so it copes with poor starting points
(clashing atoms, saturated logistic terms) where a quasi-Newton step would
be unreliable. The BFGS minimizer runs it before the first iteration and
after every recoverable failure.
"""

from __future__ import annotations

import math

import numpy as np

from ..logging import get_logger
from .config import (
    DEFAULT_INITIAL_STEP_LENGTH,
    DEFAULT_NUM_STEPS_STEEPEST_DESCENT,
    DEFAULT_STEP_SIZE_EXPANSION,
    DEFAULT_STEP_SIZE_REDUCTION,
)
from .core import ObjectiveModel, max_abs
from .line_search import simple_step_length

logger = get_logger(__name__)


class SteepestDescent:
    """
    Fixed number of steepest-descent steps with adaptive step length.

    Each step tries the current step length along ``-gradient``. If the energy
    does not drop, the length is multiplied by ``step_size_reduction`` and
    retried. After a successful step the next initial guess is the accepted
    length times ``step_size_expansion``.

    Attributes:
        num_steps: Steps per run (at least 1).
        last_step_length: Last accepted step length; the initial step length
            when no step has been accepted yet.
        nfev: Model evaluations used over the lifetime of this object.

    Example:
        >>> sd = SteepestDescent(model, num_steps=20, initial_step_length=1e-3)
        >>> taken = sd.run()
        >>> seed = sd.last_step_length
    """

    def __init__(
        self,
        model: ObjectiveModel,
        num_steps: int = DEFAULT_NUM_STEPS_STEEPEST_DESCENT,
        initial_step_length: float = DEFAULT_INITIAL_STEP_LENGTH,
        step_size_reduction: float = DEFAULT_STEP_SIZE_REDUCTION,
        step_size_expansion: float = DEFAULT_STEP_SIZE_EXPANSION,
        max_num_reductions: int = 60,
    ) -> None:
        if initial_step_length <= 0:
            raise ValueError(
                f"initial_step_length must be positive, got {initial_step_length}"
            )
        if not (0 < step_size_reduction < 1):
            raise ValueError(
                f"step_size_reduction must lie in (0, 1), got {step_size_reduction}"
            )
        if step_size_expansion <= 0:
            raise ValueError(
                f"step_size_expansion must be positive, got {step_size_expansion}"
            )
        if max_num_reductions < 1:
            raise ValueError(
                f"max_num_reductions must be >= 1, got {max_num_reductions}"
            )

        self.model = model
        self.num_steps = max(1, int(num_steps))
        self.initial_step_length = float(initial_step_length)
        self.step_size_reduction = float(step_size_reduction)
        self.step_size_expansion = float(step_size_expansion)
        self.max_num_reductions = int(max_num_reductions)
        self.last_step_length = self.initial_step_length
        self.nfev = 0

    def run(self) -> int:
        """
        Take up to ``num_steps`` steps from the model's current parameters.

        The run ends early at a stationary point or when no decrease can be
        found; in the latter case the model stays at the last good point.
        The model is left evaluated at its final parameters.

        Returns:
            Number of steps actually taken.
        """
        step = self.initial_step_length
        self.last_step_length = step
        energy = self.model.evaluate()
        self.nfev += 1
        taken = 0

        for _ in range(self.num_steps):
            grad = self.model.current_gradient()
            if not (math.isfinite(energy) and np.all(np.isfinite(grad))):
                logger.debug("Steepest descent stopped: non-finite energy or gradient")
                break
            if max_abs(grad) == 0.0:
                break
            result = simple_step_length(
                self.model,
                -grad,
                energy,
                step=step,
                reduction=self.step_size_reduction,
                max_tries=self.max_num_reductions,
            )
            self.nfev += result.nfev
            if not result.success:
                logger.debug("Steepest descent stopped after %d steps: %s", taken, result.message)
                break
            energy = result.fun
            self.last_step_length = result.alpha
            step = result.alpha * self.step_size_expansion
            taken += 1

        return taken


__all__ = ["SteepestDescent"]
