"""Numerical utilities for log-domain probability arithmetic.

Provides a stable log-sum-exp and the small array helpers shared by the
batch HMM, the multiclass classifier and the running statistics.
"""

from typing import Optional

import numpy as np


def logsumexp(a: np.ndarray, axis: Optional[int] = None) -> np.ndarray:
    """Compute log-sum-exp in a numerically stable way.

    Computes log(sum(exp(a))) avoiding overflow/underflow by subtracting
    the maximum before exponentiating. Slices that are entirely ``-inf``
    (all probabilities zero) give ``-inf`` rather than NaN.

    Args:
        a: Input array of log-values.
        axis: Axis along which to compute. If None, flattens array.

    Returns:
        Log-sum-exp result, same shape as input (with axis removed if specified).

    Examples:
        >>> logsumexp(np.array([-10, -11, -12]))
        -9.59239...
        >>> logsumexp(np.array([-np.inf, -np.inf]))
        -inf
    """
    a = np.asarray(a, dtype=float)
    if axis is None:
        a_flat = a.ravel()
        if len(a_flat) == 0:
            return np.array(-np.inf)
        a_max = np.max(a_flat)
        if not np.isfinite(a_max):
            # -inf (nothing possible), +inf or NaN propagate unchanged
            return np.array(a_max)
        return a_max + np.log(np.sum(np.exp(a_flat - a_max)))
    else:
        a_max = np.max(a, axis=axis, keepdims=True)
        shift = np.where(np.isfinite(a_max), a_max, 0.0)
        with np.errstate(divide="ignore"):
            sum_exp = np.sum(np.exp(a - shift), axis=axis, keepdims=True)
            result = shift + np.log(sum_exp)
        return np.squeeze(result, axis=axis)


def log_add(a: float, b: float) -> float:
    """Return log(exp(a) + exp(b)) for two scalar log-values.

    Uses ``max(a, b) + log1p(exp(-|a - b|))``.

    Examples:
        >>> bool(np.isclose(log_add(np.log(0.25), np.log(0.5)), np.log(0.75)))
        True
    """
    if a == -np.inf:
        return b
    if b == -np.inf:
        return a
    if a < b:
        a, b = b, a
    return a + np.log1p(np.exp(b - a))


def safe_log(p: np.ndarray) -> np.ndarray:
    """Natural logarithm mapping zero probabilities to ``-inf`` silently."""
    with np.errstate(divide="ignore"):
        return np.log(np.asarray(p, dtype=float))


def ensure_1d(x: np.ndarray) -> np.ndarray:
    """Ensure array is 1D, raising error if not.

    Args:
        x: Input array.

    Returns:
        1D array.

    Raises:
        ValueError: If array has more than one dimension.
    """
    x = np.asarray(x)
    if x.ndim == 0:
        return x.reshape(1)
    if x.ndim > 1:
        raise ValueError(f"Expected 1D array, got shape {x.shape}")
    return x


def normalize_rows(m: np.ndarray) -> np.ndarray:
    """Scale every row of ``m`` to sum to one; all-zero rows are left as zeros."""
    m = np.asarray(m, dtype=float)
    row_sums = np.sum(m, axis=-1, keepdims=True)
    row_sums[row_sums == 0] = 1.0  # Avoid division by zero
    return m / row_sums
