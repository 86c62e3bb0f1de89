"""Debug switch for the running classifiers.

With debug mode on, every score a running statistic or classifier produces
is checked for NaN before it is committed, and a NaN raises
:class:`~hmmstream.errors.NumericAnomalyError` instead of silently losing
every comparison. The checks cost one pass over the score vector per push,
so they are off by default.

The initial value comes from the ``HMMSTREAM_DEBUG`` environment variable.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator

_DEBUG_ENV_VAR = "HMMSTREAM_DEBUG"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _flag_from_env() -> bool:
    return os.getenv(_DEBUG_ENV_VAR, "0").strip().lower() in _TRUTHY


_debug_enabled: bool = _flag_from_env()


def is_debug_enabled() -> bool:
    """
    Return whether NaN checks on running scores are active.

    Returns
    -------
    bool
        True when pushes and peeks raise on NaN scores.
    """
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    """
    Turn the NaN checks on or off for the whole process.

    Parameters
    ----------
    enabled:
        New value of the switch; overrides ``HMMSTREAM_DEBUG``.
    """
    global _debug_enabled
    _debug_enabled = bool(enabled)


@contextmanager
def debug_context(enabled: bool = True) -> Iterator[None]:
    """
    Run a block with the NaN checks switched to ``enabled``.

    The previous setting is restored on exit, including when the block
    raises, so a :class:`NumericAnomalyError` caught outside the block does
    not leave debug mode on.

    Example
    -------
    >>> with debug_context(True):
    ...     running.push(0)  # NaN scores raise NumericAnomalyError here
    """
    global _debug_enabled
    prev = _debug_enabled
    _debug_enabled = bool(enabled)
    try:
        yield
    finally:
        _debug_enabled = prev
