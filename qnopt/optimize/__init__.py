"""BFGS minimization with packed inverse Hessian and kick-start recovery.

Example
-------
>>> import numpy as np
>>> from qnopt.optimize import Problem, bfgs
>>> def rosen(x):
...     return (1 - x[0])**2 + 100 * (x[1] - x[0]**2)**2
>>> def rosen_grad(x):
...     return np.array([
...         -2 * (1 - x[0]) - 400 * x[0] * (x[1] - x[0] ** 2),
...         200 * (x[1] - x[0] ** 2),
...     ])
>>> problem = Problem(fun=rosen, grad=rosen_grad, dim=2)
>>> res = bfgs(problem, np.array([-1.2, 1.0]), max_num_evaluations_wolfe_search=30)
>>> res.success
True
"""

from .config import MAX_NUM_VARIABLES, BFGSConfig
from .core import (
    ATOL,
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
from .errors import ConfigurationError, OptimizerError, RecoveryExhaustedError
from .line_search import LineSearchResult, WolfeLineSearch, simple_step_length
from .packed import PackedSymmetricMatrix, packed_size
from .quasi_newton import BFGS, bfgs
from .steepest_descent import SteepestDescent
from .utils import approx_grad

__all__ = [
    "ATOL",
    "BFGS",
    "BFGSConfig",
    "ConfigurationError",
    "FailureKind",
    "LineSearchResult",
    "MAX_NUM_VARIABLES",
    "ObjectiveModel",
    "OptimizeResult",
    "OptimizerError",
    "PackedSymmetricMatrix",
    "Problem",
    "ProblemModel",
    "RecoveryExhaustedError",
    "Status",
    "SteepestDescent",
    "StepOutcome",
    "WolfeLineSearch",
    "approx_grad",
    "bfgs",
    "check_convergence",
    "max_abs",
    "packed_size",
    "simple_step_length",
]
