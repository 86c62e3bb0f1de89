"""Text helpers for the I/O modules.

Encodes log-probabilities for JSON (which has no infinity literal) and
converts matrices to and from their default plain-text representation:
one row per line, columns separated by single spaces.
"""

from __future__ import annotations

import math
from typing import List, Optional, Union

import numpy as np

_NEG_INF = "-inf"


def encode_log_value(x: float) -> Union[float, str]:
    """
    Make a log-probability JSON-safe.

    Parameters
    ----------
    x : float
        Finite value or ``-inf``.

    Returns
    -------
    float or str
        ``x`` itself, or the string ``"-inf"``.

    Raises
    ------
    ValueError
        If ``x`` is NaN or ``+inf``, which are never valid log-probabilities.
    """
    x = float(x)
    if x == -math.inf:
        return _NEG_INF
    if not math.isfinite(x):
        raise ValueError(f"Cannot encode log-probability {x!r}.")
    return x


def decode_log_value(v: Union[float, int, str]) -> float:
    """
    Inverse of :func:`encode_log_value`.

    Raises
    ------
    ValueError
        If ``v`` is a string other than ``"-inf"`` or not a number.
    """
    if isinstance(v, str):
        if v.strip().lower() == _NEG_INF:
            return -math.inf
        raise ValueError(f"Unsupported log-probability string {v!r}; only '-inf' is allowed.")
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"Log-probability must be a number or '-inf', got {type(v).__name__}.")
    return float(v)


def encode_log_vector(values) -> List[Union[float, str]]:
    return [encode_log_value(x) for x in np.asarray(values, dtype=float).ravel()]


def decode_log_vector(values) -> np.ndarray:
    return np.array([decode_log_value(v) for v in values], dtype=float)


def _format_number(x: float, precision: Optional[int]) -> str:
    if math.isinf(x):
        return "-inf" if x < 0 else "inf"
    if precision is None:
        return repr(float(x))
    return f"{x:.{precision}f}"


def format_matrix(matrix: np.ndarray, precision: Optional[int] = None) -> str:
    """
    Render a 1-D or 2-D array as text.

    Rows are separated by newlines and columns by a single space. A 1-D
    array is rendered as a single row.

    Parameters
    ----------
    matrix : np.ndarray
        Array to render.
    precision : int, optional
        Number of decimals. If None, uses ``repr`` so that
        :func:`parse_matrix` recovers the exact values.

    Returns
    -------
    str
        Text representation.

    Raises
    ------
    ValueError
        If ``matrix`` has more than two dimensions.
    """
    m = np.asarray(matrix, dtype=float)
    if m.ndim == 1:
        m = m.reshape(1, -1)
    elif m.ndim != 2:
        raise ValueError(f"format_matrix expects a 1-D or 2-D array, got shape {m.shape}.")
    return "\n".join(" ".join(_format_number(x, precision) for x in row) for row in m)


def parse_matrix(s: str) -> np.ndarray:
    """
    Parse text produced by :func:`format_matrix` back into a 2-D array.

    Blank lines are ignored; columns may be separated by any whitespace.

    Parameters
    ----------
    s : str
        Matrix text.

    Returns
    -------
    np.ndarray
        Array of shape (rows, cols).

    Raises
    ------
    ValueError
        If the text is empty, a token is not a number, or rows differ in length.
    """
    rows = [line.split() for line in s.splitlines() if line.strip()]
    if not rows:
        raise ValueError("Empty string cannot be parsed as a matrix.")

    n_cols = len(rows[0])
    result = np.empty((len(rows), n_cols))
    for i, row in enumerate(rows):
        if len(row) != n_cols:
            raise ValueError(
                f"Row {i} has {len(row)} columns, expected {n_cols}."
            )
        for j, token in enumerate(row):
            try:
                result[i, j] = float(token)
            except ValueError:
                raise ValueError(f"Cannot parse '{token}' as a number in row {i}.")
    return result


__all__ = [
    "encode_log_value",
    "decode_log_value",
    "encode_log_vector",
    "decode_log_vector",
    "format_matrix",
    "parse_matrix",
]
