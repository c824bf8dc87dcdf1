"""qnopt - BFGS minimization with packed inverse Hessian and kick-start recovery."""

__version__ = "0.1.0"

from .diagnostics import debug_context, is_debug_enabled, set_debug_enabled
from .logging import configure_logging, get_logger, set_log_level
from .models import LogisticRegression, QuadraticModel, likelihood_ratio
from .optimize import (
    BFGS,
    MAX_NUM_VARIABLES,
    BFGSConfig,
    ConfigurationError,
    FailureKind,
    ObjectiveModel,
    OptimizeResult,
    OptimizerError,
    PackedSymmetricMatrix,
    Problem,
    ProblemModel,
    RecoveryExhaustedError,
    Status,
    SteepestDescent,
    WolfeLineSearch,
    bfgs,
)

__all__ = [
    "BFGS",
    "BFGSConfig",
    "ConfigurationError",
    "FailureKind",
    "LogisticRegression",
    "MAX_NUM_VARIABLES",
    "ObjectiveModel",
    "OptimizeResult",
    "OptimizerError",
    "PackedSymmetricMatrix",
    "Problem",
    "ProblemModel",
    "QuadraticModel",
    "RecoveryExhaustedError",
    "Status",
    "SteepestDescent",
    "WolfeLineSearch",
    "__version__",
    "bfgs",
    "configure_logging",
    "debug_context",
    "get_logger",
    "is_debug_enabled",
    "likelihood_ratio",
    "set_debug_enabled",
    "set_log_level",
]
