"""Discrete-emission Hidden Markov Model (HMM) definition.

Holds the start, transition and emission tables of one HMM together with
their log-domain versions, and provides the batch forward algorithm used to
score a complete observation sequence. Models are read-only once built, so a
single instance may be shared by any number of running classifiers.

References:
    Rabiner, L. R. (1989). A tutorial on hidden Markov models and selected
    applications in speech recognition. Proceedings of the IEEE, 77(2), 257-286.
"""

from typing import Optional, Tuple

import numpy as np

from hmmstream.errors import InvalidObservationError

from .utils import ensure_1d, logsumexp, normalize_rows, safe_log


def _readonly(a: np.ndarray) -> np.ndarray:
    a.flags.writeable = False
    return a


def _check_probabilities(name: str, table: np.ndarray) -> None:
    if not np.all(np.isfinite(table)):
        raise ValueError(f"{name} must contain only finite values")
    if np.any(table < 0):
        raise ValueError(f"{name} must be non-negative")


class HiddenMarkovModel:
    """Hidden Markov Model over a finite alphabet of observation symbols.

    Attributes:
        n_states: Number of hidden states.
        n_symbols: Number of discrete observation symbols.
        start_prob: Initial state distribution, shape (n_states,).
        trans_mat: Transition matrix, shape (n_states, n_states).
        emission_prob: Emission probabilities, shape (n_states, n_symbols).
        log_start: Log of ``start_prob``; zero probabilities are ``-inf``.
        log_trans: Log of ``trans_mat``.
        log_emission: Log of ``emission_prob``.
    """

    def __init__(
        self,
        n_states: int,
        start_prob: Optional[np.ndarray] = None,
        trans_mat: Optional[np.ndarray] = None,
        emission_prob: Optional[np.ndarray] = None,
        n_symbols: Optional[int] = None,
    ):
        """Initialize HMM.

        Args:
            n_states: Number of hidden states.
            start_prob: Initial state probabilities, shape (n_states,). If None, uniform.
            trans_mat: Transition matrix, shape (n_states, n_states). If None, uniform.
            emission_prob: Emission probabilities, shape (n_states, n_symbols).
                If None, uniform over ``n_symbols`` symbols.
            n_symbols: Alphabet size, required only when ``emission_prob`` is None.

        Raises:
            ValueError: If a table has the wrong shape, holds negative or
                non-finite entries, or no alphabet size can be determined.
        """
        if n_states < 1:
            raise ValueError(f"n_states must be positive, got {n_states}")
        self.n_states = n_states

        if start_prob is not None:
            start_prob = np.asarray(start_prob, dtype=float)
            if start_prob.shape != (n_states,):
                raise ValueError(f"start_prob shape {start_prob.shape} != ({n_states},)")
            _check_probabilities("start_prob", start_prob)
            self.start_prob = normalize_rows(start_prob)
        else:
            self.start_prob = np.ones(n_states) / n_states

        if trans_mat is not None:
            trans_mat = np.asarray(trans_mat, dtype=float)
            if trans_mat.shape != (n_states, n_states):
                raise ValueError(f"trans_mat shape {trans_mat.shape} != ({n_states}, {n_states})")
            _check_probabilities("trans_mat", trans_mat)
            self.trans_mat = normalize_rows(trans_mat)
        else:
            self.trans_mat = np.ones((n_states, n_states)) / n_states

        if emission_prob is not None:
            emission_prob = np.asarray(emission_prob, dtype=float)
            if emission_prob.ndim != 2:
                raise ValueError("emission_prob must be 2D")
            if emission_prob.shape[0] != n_states:
                raise ValueError(f"emission_prob first dim {emission_prob.shape[0]} != {n_states}")
            if n_symbols is not None and emission_prob.shape[1] != n_symbols:
                raise ValueError(
                    f"emission_prob second dim {emission_prob.shape[1]} != {n_symbols}"
                )
            _check_probabilities("emission_prob", emission_prob)
            self.emission_prob = normalize_rows(emission_prob)
        else:
            if n_symbols is None or n_symbols < 1:
                raise ValueError("n_symbols is required when emission_prob is not given")
            self.emission_prob = np.ones((n_states, n_symbols)) / n_symbols
        self.n_symbols = self.emission_prob.shape[1]

        for table in (self.start_prob, self.trans_mat, self.emission_prob):
            _readonly(table)

        # Log-domain versions; impossible events stay at -inf
        self.log_start = _readonly(safe_log(self.start_prob))
        self.log_trans = _readonly(safe_log(self.trans_mat))
        self.log_emission = _readonly(safe_log(self.emission_prob))

    def __repr__(self) -> str:
        return f"HiddenMarkovModel(n_states={self.n_states}, n_symbols={self.n_symbols})"

    def validate_observation(self, observation) -> int:
        """Return ``observation`` as a symbol index, or raise.

        Raises:
            InvalidObservationError: If the observation is not an integer in
                ``[0, n_symbols)``. Booleans and floats with a fractional part
                are rejected as well.
        """
        if isinstance(observation, (bool, np.bool_)):
            raise InvalidObservationError(observation, self.n_symbols)
        if isinstance(observation, (int, np.integer)):
            symbol = int(observation)
        elif isinstance(observation, (float, np.floating)) and float(observation).is_integer():
            symbol = int(observation)
        else:
            raise InvalidObservationError(observation, self.n_symbols)
        if symbol < 0 or symbol >= self.n_symbols:
            raise InvalidObservationError(observation, self.n_symbols)
        return symbol

    def emission_loglik(self, state: int, observation: int) -> float:
        """Log-probability of emitting ``observation`` from ``state``.

        Returns ``-inf`` for emissions the model rules out.
        """
        return float(self.log_emission[state, self.validate_observation(observation)])

    def forward(self, obs_seq: np.ndarray) -> Tuple[np.ndarray, float]:
        """Forward algorithm: compute forward log-probabilities and log-likelihood.

        Args:
            obs_seq: Observation sequence, shape (T,).

        Returns:
            Tuple of (log_alpha, log_likelihood) where:
            - log_alpha: shape (T, n_states), log forward probabilities
            - log_likelihood: log P(obs_seq); 0.0 for an empty sequence
        """
        obs_seq = ensure_1d(obs_seq)
        T = len(obs_seq)
        log_alpha = np.zeros((T, self.n_states))
        if T == 0:
            return log_alpha, 0.0

        symbols = [self.validate_observation(o) for o in obs_seq]

        # Initialization: t=0
        log_alpha[0, :] = self.log_start + self.log_emission[:, symbols[0]]

        # Recursion: t = 1, ..., T-1
        for t in range(1, T):
            for s in range(self.n_states):
                log_probs = log_alpha[t - 1, :] + self.log_trans[:, s]
                log_alpha[t, s] = logsumexp(log_probs) + self.log_emission[s, symbols[t]]

        log_likelihood = float(logsumexp(log_alpha[T - 1, :]))

        return log_alpha, log_likelihood

    def score(self, obs_seq: np.ndarray) -> float:
        """Compute log-likelihood of observation sequence.

        Args:
            obs_seq: Observation sequence, shape (T,).

        Returns:
            Log-likelihood.
        """
        _, log_likelihood = self.forward(obs_seq)
        return log_likelihood

    def sample(
        self, length: int, rng: Optional[np.random.Generator] = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Sample state and observation sequences from the model.

        Args:
            length: Sequence length T.
            rng: Random number generator. If None, uses default_rng(0).

        Returns:
            Tuple of (states, observations) where both are shape (T,).
        """
        if rng is None:
            rng = np.random.default_rng(0)

        states = np.zeros(length, dtype=int)
        observations = np.zeros(length, dtype=int)
        if length == 0:
            return states, observations

        states[0] = rng.choice(self.n_states, p=self.start_prob)
        observations[0] = rng.choice(self.n_symbols, p=self.emission_prob[states[0], :])

        for t in range(1, length):
            states[t] = rng.choice(self.n_states, p=self.trans_mat[states[t - 1], :])
            observations[t] = rng.choice(self.n_symbols, p=self.emission_prob[states[t], :])

        return states, observations
