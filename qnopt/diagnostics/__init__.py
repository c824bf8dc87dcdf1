"""Invariant checks and debug-mode switches for qnopt."""

from .core import assert_finite, assert_wolfe_conditions, is_symmetric
from .debug_mode import debug_context, is_debug_enabled, set_debug_enabled

__all__ = [
    "assert_finite",
    "assert_wolfe_conditions",
    "debug_context",
    "is_debug_enabled",
    "is_symmetric",
    "set_debug_enabled",
]
