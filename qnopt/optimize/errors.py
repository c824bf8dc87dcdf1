"""Exceptions for fatal optimizer conditions.

Recoverable per-iteration failures are reported as :class:`FailureKind`
values, not exceptions; see :mod:`qnopt.optimize.core`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .core import OptimizeResult


class OptimizerError(RuntimeError):
    """Base class for fatal optimizer errors."""


class ConfigurationError(OptimizerError, ValueError):
    """The problem cannot be handled with the given configuration."""


class RecoveryExhaustedError(OptimizerError):
    """Kick-start recovery was attempted too many times.

    Attributes:
        result: The aborted result, holding the best parameters seen and the
            last recoverable failure.
    """

    def __init__(self, message: str, result: "OptimizeResult") -> None:
        super().__init__(message)
        self.result = result


__all__ = ["OptimizerError", "ConfigurationError", "RecoveryExhaustedError"]
