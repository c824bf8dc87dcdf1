"""Configuration for the BFGS minimizer."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

MAX_NUM_VARIABLES = 3000

DEFAULT_TOLERANCE = 1e-6
DEFAULT_MAX_STEPS = 1000
DEFAULT_ALLOWED_MAX_H_FACTOR = 100.0
DEFAULT_MAX_NUM_KICK_STARTS = 3
DEFAULT_C1 = 1e-4
DEFAULT_C2 = 0.9
DEFAULT_MAX_NUM_EVALUATIONS = 10
DEFAULT_EXTEND_ALPHA_FACTOR = 3.0
DEFAULT_NUM_STEPS_STEEPEST_DESCENT = 50
DEFAULT_INITIAL_STEP_LENGTH = 1.0
DEFAULT_STEP_SIZE_REDUCTION = 0.5
DEFAULT_STEP_SIZE_EXPANSION = 2.0

# Option names as used in existing configuration files.
_OPTION_ALIASES = {
    "tolerance": "tolerance",
    "maxSteps": "max_steps",
    "allowedMaxHFactor": "allowed_max_h_factor",
    "maxNumKickStarts": "max_num_kick_starts",
    "c1": "c1",
    "c2": "c2",
    "maxNumEvaluationsWolfSearch": "max_num_evaluations_wolfe_search",
    "extendAlphaFactor": "extend_alpha_factor",
    "numStepsSteepestDescent": "num_steps_steepest_descent",
    "initStepSteepestDescent": "init_step_steepest_descent",
    "stepSizeReduction": "step_size_reduction",
    "stepSizeExpansion": "step_size_expansion",
    "maxNumVariables": "max_num_variables",
}


@dataclass(frozen=True)
class BFGSConfig:
    """
    Parameters of the BFGS minimizer and its two line searches.

    Args:
        tolerance: Stop when the largest gradient component magnitude drops
            below this value.
        max_steps: Maximal number of BFGS iterations.
        allowed_max_h_factor: Inverse Hessian entries larger than
            ``allowed_max_h_factor * n`` trigger a kick-start. Values in the
            range 10-100 work well; lower is more conservative.
        max_num_kick_starts: Kick-starts allowed before the run is aborted.
        c1: Sufficient-decrease constant of the Wolfe conditions.
        c2: Curvature constant of the Wolfe conditions, ``c1 < c2 < 1``.
        max_num_evaluations_wolfe_search: Trial step lengths allowed per Wolfe
            search, bracketing and zoom together.
        extend_alpha_factor: Multiplier applied to a step length that was too
            short during bracketing.
        num_steps_steepest_descent: Steepest-descent steps taken at start-up
            and at every kick-start. Values below 1 are raised to 1.
        init_step_steepest_descent: First step length tried by steepest
            descent. Use a small value (1e-4 or less) when huge gradients are
            expected in the first steps.
        step_size_reduction: Factor applied to a steepest-descent step that
            did not lower the energy.
        step_size_expansion: Factor applied to the last successful
            steepest-descent step to get the next initial guess.
        max_num_variables: Largest problem size accepted. The packed inverse
            Hessian needs ``n * (n + 1) / 2`` doubles.
    """

    tolerance: float = DEFAULT_TOLERANCE
    max_steps: int = DEFAULT_MAX_STEPS
    allowed_max_h_factor: float = DEFAULT_ALLOWED_MAX_H_FACTOR
    max_num_kick_starts: int = DEFAULT_MAX_NUM_KICK_STARTS
    c1: float = DEFAULT_C1
    c2: float = DEFAULT_C2
    max_num_evaluations_wolfe_search: int = DEFAULT_MAX_NUM_EVALUATIONS
    extend_alpha_factor: float = DEFAULT_EXTEND_ALPHA_FACTOR
    num_steps_steepest_descent: int = DEFAULT_NUM_STEPS_STEEPEST_DESCENT
    init_step_steepest_descent: float = DEFAULT_INITIAL_STEP_LENGTH
    step_size_reduction: float = DEFAULT_STEP_SIZE_REDUCTION
    step_size_expansion: float = DEFAULT_STEP_SIZE_EXPANSION
    max_num_variables: int = MAX_NUM_VARIABLES

    def __post_init__(self) -> None:
        if self.tolerance <= 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")
        if self.allowed_max_h_factor <= 0:
            raise ValueError(
                f"allowed_max_h_factor must be positive, got {self.allowed_max_h_factor}"
            )
        if self.max_num_kick_starts < 0:
            raise ValueError(
                f"max_num_kick_starts must be non-negative, got {self.max_num_kick_starts}"
            )
        if not (0 < self.c1 < self.c2 < 1):
            raise ValueError(
                f"Require 0 < c1 < c2 < 1, got c1={self.c1}, c2={self.c2}"
            )
        if self.max_num_evaluations_wolfe_search < 1:
            raise ValueError(
                "max_num_evaluations_wolfe_search must be >= 1, "
                f"got {self.max_num_evaluations_wolfe_search}"
            )
        if self.extend_alpha_factor <= 1:
            raise ValueError(
                f"extend_alpha_factor must be > 1, got {self.extend_alpha_factor}"
            )
        if self.init_step_steepest_descent <= 0:
            raise ValueError(
                "init_step_steepest_descent must be positive, "
                f"got {self.init_step_steepest_descent}"
            )
        if not (0 < self.step_size_reduction < 1):
            raise ValueError(
                f"step_size_reduction must lie in (0, 1), got {self.step_size_reduction}"
            )
        if self.step_size_expansion <= 0:
            raise ValueError(
                f"step_size_expansion must be positive, got {self.step_size_expansion}"
            )
        if self.max_num_variables < 1:
            raise ValueError(
                f"max_num_variables must be >= 1, got {self.max_num_variables}"
            )
        if self.num_steps_steepest_descent < 1:
            object.__setattr__(self, "num_steps_steepest_descent", 1)

    def allowed_max_h(self, n: int) -> float:
        """Threshold on the squared inverse Hessian entries for ``n`` variables."""
        bound = self.allowed_max_h_factor * n
        return bound * bound

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "BFGSConfig":
        """
        Build a config from a mapping of option names.

        Keys may be field names (``max_steps``) or the option names used in
        configuration files (``maxSteps``). Missing keys keep their defaults.

        Raises:
            ValueError: If a key is not a known option.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = key if key in known else _OPTION_ALIASES.get(key)
            if name is None:
                raise ValueError(f"Unknown BFGS option {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


__all__ = ["BFGSConfig", "MAX_NUM_VARIABLES"]
