"""Pytest configuration and shared fixtures for hmmstream tests.

This module provides:
- A deterministic numpy RNG fixture
- Small discrete HMMs over the alphabet {0, 1, 2} and classifiers built from them
"""

import os

import numpy as np
import pytest

from hmmstream.diagnostics import set_debug_enabled
from hmmstream.probabilistic import HiddenMarkovClassifier, HiddenMarkovModel


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def reset_debug_mode():
    """Keep debug mode off unless a test turns it on explicitly."""
    set_debug_enabled(False)
    yield
    set_debug_enabled(False)


@pytest.fixture
def mostly_zeros_hmm() -> HiddenMarkovModel:
    """Two-state model that mostly emits symbol 0."""
    return HiddenMarkovModel(
        2,
        start_prob=np.array([0.6, 0.4]),
        trans_mat=np.array([[0.7, 0.3], [0.4, 0.6]]),
        emission_prob=np.array([[0.8, 0.15, 0.05], [0.6, 0.3, 0.1]]),
    )


@pytest.fixture
def mostly_ones_hmm() -> HiddenMarkovModel:
    """Two-state model that mostly emits symbol 1."""
    return HiddenMarkovModel(
        2,
        start_prob=np.array([0.5, 0.5]),
        trans_mat=np.array([[0.9, 0.1], [0.2, 0.8]]),
        emission_prob=np.array([[0.1, 0.8, 0.1], [0.15, 0.75, 0.1]]),
    )


@pytest.fixture
def background_hmm() -> HiddenMarkovModel:
    """Single-state model emitting every symbol with equal probability."""
    return HiddenMarkovModel(1, n_symbols=3)


@pytest.fixture
def two_class(mostly_zeros_hmm, mostly_ones_hmm) -> HiddenMarkovClassifier:
    return HiddenMarkovClassifier([mostly_zeros_hmm, mostly_ones_hmm], priors=[0.5, 0.5])


@pytest.fixture
def two_class_with_threshold(
    mostly_zeros_hmm, mostly_ones_hmm, background_hmm
) -> HiddenMarkovClassifier:
    return HiddenMarkovClassifier(
        [mostly_zeros_hmm, mostly_ones_hmm],
        priors=[0.5, 0.5],
        threshold=background_hmm,
        sensitivity=1.0,
    )
