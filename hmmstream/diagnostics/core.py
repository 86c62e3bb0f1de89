"""Core diagnostic checks for probability vectors and log-likelihoods."""

from __future__ import annotations

from typing import Union

import numpy as np

from hmmstream.errors import NumericAnomalyError
from hmmstream.logging import get_logger

logger = get_logger(__name__)


def is_simplex(p: np.ndarray, atol: float = 1e-6) -> bool:
    """
    Check whether a vector is a probability simplex.

    Parameters
    ----------
    p:
        One-dimensional array of probabilities.
    atol:
        Absolute tolerance on the sum.

    Returns
    -------
    bool
        True if every entry is finite and non-negative and the entries
        sum to 1 within the tolerance.
    """
    p = np.asarray(p, dtype=float)
    if p.ndim != 1 or p.size == 0:
        return False
    if not np.all(np.isfinite(p)) or np.any(p < 0):
        return False
    return bool(abs(np.sum(p) - 1.0) <= atol)


def assert_simplex(p: np.ndarray, name: str = "probabilities", atol: float = 1e-6) -> None:
    """
    Assert that a vector is a probability simplex.

    Raises
    ------
    ValueError
        If ``p`` is not one-dimensional, has negative or non-finite entries,
        or does not sum to 1 within ``atol``.
    """
    p = np.asarray(p, dtype=float)
    if not is_simplex(p, atol=atol):
        raise ValueError(
            f"{name} must be a non-negative vector summing to 1 "
            f"(tolerance {atol}); got {p.tolist()}"
        )


def assert_no_nan(value: Union[float, np.ndarray], what: str = "log-likelihood") -> None:
    """
    Assert that a score (or array of scores) contains no NaN.

    ``-inf`` is a legitimate log-probability and passes the check.

    Raises
    ------
    NumericAnomalyError
        If any entry is NaN.
    """
    if np.any(np.isnan(value)):
        logger.error("NaN detected in %s: %r", what, value)
        raise NumericAnomalyError(
            f"NaN detected in {what}; check that the model's transition and "
            "emission rows are valid probability distributions."
        )
