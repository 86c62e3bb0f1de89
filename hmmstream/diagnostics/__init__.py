"""Diagnostics and debugging utilities for hmmstream."""

from .core import (
    assert_no_nan,
    assert_simplex,
    is_simplex,
)
from .debug_mode import (
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "is_simplex",
    "assert_simplex",
    "assert_no_nan",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
]
