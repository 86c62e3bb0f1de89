"""Tests for log-domain numerical utilities."""

import numpy as np
import pytest

from hmmstream.probabilistic.utils import (
    ensure_1d,
    log_add,
    logsumexp,
    normalize_rows,
    safe_log,
)


def test_logsumexp_basic():
    """Test logsumexp with simple cases."""
    assert logsumexp(np.array([1.0])) == pytest.approx(1.0)

    result = logsumexp(np.array([1.0, 2.0]))
    assert result == pytest.approx(np.log(np.exp(1.0) + np.exp(2.0)))

    result = logsumexp(np.array([-10.0, -11.0, -12.0]))
    expected = np.log(np.exp(-10.0) + np.exp(-11.0) + np.exp(-12.0))
    assert result == pytest.approx(expected, rel=1e-10)

    a = np.array([[1.0, 2.0], [3.0, 4.0]])
    result = logsumexp(a, axis=0)
    assert result[0] == pytest.approx(np.log(np.exp(1.0) + np.exp(3.0)))
    assert result[1] == pytest.approx(np.log(np.exp(2.0) + np.exp(4.0)))


def test_logsumexp_no_underflow():
    """Values whose exponentials underflow to zero still sum correctly."""
    a = np.array([-2000.0, -2000.0])
    assert np.exp(a).sum() == 0.0
    assert logsumexp(a) == pytest.approx(-2000.0 + np.log(2.0))


def test_logsumexp_all_negative_infinity():
    assert logsumexp(np.array([-np.inf, -np.inf])) == -np.inf
    assert logsumexp(np.array([])) == -np.inf

    a = np.array([[-np.inf, 0.0], [-np.inf, 0.0]])
    result = logsumexp(a, axis=0)
    assert result[0] == -np.inf
    assert result[1] == pytest.approx(np.log(2.0))
    assert not np.any(np.isnan(result))


def test_logsumexp_propagates_nan():
    assert np.isnan(logsumexp(np.array([0.0, np.nan])))


def test_log_add():
    assert log_add(np.log(0.25), np.log(0.5)) == pytest.approx(np.log(0.75))
    assert log_add(-np.inf, -3.0) == -3.0
    assert log_add(-3.0, -np.inf) == -3.0
    assert log_add(-np.inf, -np.inf) == -np.inf
    assert log_add(-1000.0, -1000.0) == pytest.approx(-1000.0 + np.log(2.0))


def test_safe_log_maps_zero_to_negative_infinity():
    with np.errstate(all="raise"):
        result = safe_log(np.array([1.0, 0.0]))
    assert result[0] == 0.0
    assert result[1] == -np.inf


def test_normalize_rows():
    m = normalize_rows(np.array([[1.0, 3.0], [0.0, 0.0]]))
    assert np.allclose(m, [[0.25, 0.75], [0.0, 0.0]])
    v = normalize_rows(np.array([2.0, 6.0]))
    assert np.allclose(v, [0.25, 0.75])


def test_ensure_1d():
    assert ensure_1d(np.array(3)).shape == (1,)
    assert ensure_1d([1, 2]).shape == (2,)
    with pytest.raises(ValueError):
        ensure_1d(np.zeros((2, 2)))


