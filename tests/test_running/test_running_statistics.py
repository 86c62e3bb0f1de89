"""Tests for the running forward statistic of a single HMM."""

import numpy as np
import pytest

from hmmstream.diagnostics import debug_context
from hmmstream.errors import InvalidObservationError, NumericAnomalyError
from hmmstream.probabilistic.hmm import HiddenMarkovModel
from hmmstream.running.statistics import RunningMarkovStatistics


def test_fresh_statistic_is_empty_sequence(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    assert stat.n_observations == 0
    assert stat.log_forward == pytest.approx(0.0, abs=1e-12)
    assert np.allclose(stat.alpha, np.log([0.6, 0.4]))


def test_first_push_applies_start_and_emission(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    stat.push(0)
    assert np.allclose(stat.alpha, np.log([0.6 * 0.8, 0.4 * 0.6]))
    assert stat.log_forward == pytest.approx(np.log(0.72))
    assert stat.n_observations == 1


def test_push_matches_batch_forward(mostly_zeros_hmm, rng):
    """After n pushes the statistic equals the batch forward pass over n symbols."""
    _, obs = mostly_zeros_hmm.sample(40, rng=rng)
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    for t, o in enumerate(obs):
        stat.push(o)
        log_alpha, log_likelihood = mostly_zeros_hmm.forward(obs[: t + 1])
        assert np.allclose(stat.alpha, log_alpha[-1])
        assert stat.log_forward == pytest.approx(log_likelihood, rel=1e-10)


def test_peek_matches_following_push(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    for o in [1, 1, 0, 2, 1]:
        predicted = stat.peek(o)
        stat.push(o)
        assert stat.log_forward == pytest.approx(predicted, rel=1e-12)


def test_peek_is_relative_to_committed_state(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    stat.push(1)
    alpha_before = stat.alpha.copy()
    log_forward_before = stat.log_forward

    first = stat.peek(0)
    for o in [2, 1, 2, 0]:
        stat.peek(o)
    assert stat.peek(0) == first

    assert np.array_equal(stat.alpha, alpha_before)
    assert stat.log_forward == log_forward_before
    assert stat.n_observations == 1


def test_clear_resets_to_start_distribution(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    for o in [0, 1, 2]:
        stat.push(o)
    stat.clear()
    assert stat.n_observations == 0
    assert np.allclose(stat.alpha, mostly_zeros_hmm.log_start)
    assert stat.log_forward == pytest.approx(0.0, abs=1e-12)

    # The next push is treated as the first observation again
    stat.push(0)
    assert stat.log_forward == pytest.approx(np.log(0.72))


def test_invalid_observation_leaves_state_untouched(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    stat.push(1)
    alpha_before = stat.alpha.copy()
    with pytest.raises(InvalidObservationError):
        stat.push(3)
    with pytest.raises(InvalidObservationError):
        stat.peek(-1)
    assert np.array_equal(stat.alpha, alpha_before)
    assert stat.n_observations == 1


def test_alpha_view_is_read_only(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    with pytest.raises(ValueError):
        stat.alpha[0] = 0.0


def test_long_sequence_does_not_underflow():
    """10,000 observations with per-step probability 0.1 stay finite in log space."""
    hmm = HiddenMarkovModel(
        2,
        trans_mat=np.array([[0.5, 0.5], [0.5, 0.5]]),
        n_symbols=10,
    )
    stat = RunningMarkovStatistics(hmm)
    n = 10_000
    for t in range(n):
        stat.push(t % 10)

    assert np.prod(np.full(n, 0.1)) == 0.0
    assert np.isfinite(stat.log_forward)
    assert stat.log_forward == pytest.approx(n * np.log(0.1), rel=1e-9)


def test_impossible_observation_gives_negative_infinity():
    hmm = HiddenMarkovModel(1, emission_prob=np.array([[1.0, 0.0]]))
    stat = RunningMarkovStatistics(hmm)
    stat.push(1)
    assert stat.log_forward == -np.inf
    assert not np.isnan(stat.log_forward)
    # A dead sequence stays dead instead of turning into NaN
    stat.push(0)
    assert stat.log_forward == -np.inf


def _nan_model() -> HiddenMarkovModel:
    hmm = HiddenMarkovModel(2, n_symbols=2)
    hmm.log_emission = np.full((2, 2), np.nan)
    return hmm


def test_nan_propagates_outside_debug_mode():
    stat = RunningMarkovStatistics(_nan_model())
    stat.push(0)
    assert np.isnan(stat.log_forward)


def test_nan_raises_in_debug_mode():
    stat = RunningMarkovStatistics(_nan_model())
    with debug_context(True):
        with pytest.raises(NumericAnomalyError):
            stat.peek(0)
        with pytest.raises(NumericAnomalyError):
            stat.push(0)


def test_state_dict_round_trip(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    for o in [1, 0, 1]:
        stat.push(o)
    snapshot = stat.state_dict()

    resumed = RunningMarkovStatistics(mostly_ones_hmm)
    resumed.load_state_dict(snapshot)
    assert resumed.n_observations == 3
    assert resumed.peek(2) == pytest.approx(stat.peek(2))

    stat.push(2)
    resumed.push(2)
    assert resumed.log_forward == pytest.approx(stat.log_forward)


def test_load_state_dict_rejects_wrong_shape(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    with pytest.raises(ValueError):
        stat.load_state_dict({"alpha": [0.0], "log_forward": 0.0, "n_observations": 1})
    with pytest.raises(ValueError):
        stat.load_state_dict({"alpha": [0.0, 0.0], "log_forward": 0.0, "n_observations": -2})


def test_failed_debug_push_commits_nothing():
    stat = RunningMarkovStatistics(_nan_model())
    alpha_before = stat.alpha.copy()
    with debug_context(True):
        with pytest.raises(NumericAnomalyError):
            stat.push(0)
    assert stat.n_observations == 0
    assert np.array_equal(stat.alpha, alpha_before)
    assert stat.log_forward == pytest.approx(0.0, abs=1e-12)


def test_held_alpha_view_survives_push_and_peek(mostly_zeros_hmm):
    stat = RunningMarkovStatistics(mostly_zeros_hmm)
    stat.push(0)
    held = stat.alpha
    stat.push(1)
    after_push = held.copy()
    assert np.array_equal(after_push, stat.alpha)

    stat.peek(2)
    stat.peek(0)
    assert np.array_equal(held, after_push)


def test_prepare_stages_until_commit(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    stat.push(1)
    alpha_before = stat.alpha.copy()

    staged = stat.prepare(0)
    assert stat.n_observations == 1
    assert np.array_equal(stat.alpha, alpha_before)

    stat.commit()
    assert stat.n_observations == 2
    assert stat.log_forward == staged

    with pytest.raises(RuntimeError):
        stat.commit()


def test_peek_discards_staged_update(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    stat.prepare(1)
    stat.peek(0)
    with pytest.raises(RuntimeError):
        stat.commit()
    assert stat.n_observations == 0


def test_rejected_snapshot_leaves_statistic_untouched(mostly_ones_hmm):
    stat = RunningMarkovStatistics(mostly_ones_hmm)
    stat.push(1)
    before = stat.state_dict()
    with pytest.raises(ValueError):
        stat.validate_state_dict({"alpha": [0.0, 0.0, 0.0], "log_forward": 0.0, "n_observations": 4})
    with pytest.raises(ValueError):
        stat.load_state_dict({"alpha": [0.0, 0.0, 0.0], "log_forward": 0.0, "n_observations": 4})
    assert stat.state_dict() == before
