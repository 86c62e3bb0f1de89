"""Running forward statistic for a single HMM.

:class:`RunningMarkovStatistics` tracks the log forward probabilities of an
observation sequence that grows one symbol at a time. Only the current
forward vector is kept, so each update costs O(n_states^2) no matter how long
the sequence already is.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np

from hmmstream.diagnostics import assert_no_nan, is_debug_enabled
from hmmstream.logging import get_logger
from hmmstream.probabilistic.hmm import HiddenMarkovModel
from hmmstream.probabilistic.utils import logsumexp

logger = get_logger(__name__)


class RunningMarkovStatistics:
    """Incremental forward algorithm over one HMM.

    Attributes:
        model: The HMM being tracked. Never modified.
        log_forward: log P(observations so far); ``logsumexp(log_start)``
            (0.0 for a normalised model) before the first observation.
        n_observations: Number of observations pushed since the last clear.
    """

    def __init__(self, model: HiddenMarkovModel):
        self.model = model
        self._alpha = np.empty(model.n_states)
        self._scratch = np.empty(model.n_states)
        self._staged: Optional[float] = None
        self.log_forward = 0.0
        self.n_observations = 0
        self.clear()

    def __repr__(self) -> str:
        return (
            f"RunningMarkovStatistics(n_states={self.model.n_states}, "
            f"n_observations={self.n_observations}, log_forward={self.log_forward:.6g})"
        )

    @property
    def alpha(self) -> np.ndarray:
        """Read-only view of log P(state = s, observations so far)."""
        view = self._alpha.view()
        view.flags.writeable = False
        return view

    def validate(self, observation) -> int:
        """Check ``observation`` against the model alphabet without side effects.

        Raises:
            InvalidObservationError: If the symbol is outside the alphabet.
        """
        return self.model.validate_observation(observation)

    def _step(self, symbol: int, out: np.ndarray) -> float:
        """Write the forward vector after ``symbol`` into ``out``; return its total."""
        model = self.model
        if self.n_observations == 0:
            np.add(model.log_start, model.log_emission[:, symbol], out=out)
        else:
            # out[j] = logsumexp_i(alpha[i] + log_trans[i, j]) + log_emission[j, symbol]
            out[:] = logsumexp(self._alpha[:, np.newaxis] + model.log_trans, axis=0)
            out += model.log_emission[:, symbol]
        return float(logsumexp(out))

    def prepare(self, observation) -> float:
        """Stage the update for ``observation`` without committing it.

        The staged forward vector is applied by :meth:`commit`. A later
        :meth:`prepare` replaces whatever was staged; :meth:`peek` discards it.

        Returns:
            The staged ``log_forward``.

        Raises:
            InvalidObservationError: If the symbol is outside the alphabet.
        """
        symbol = self.validate(observation)
        self._staged = self._step(symbol, self._scratch)
        return self._staged

    def commit(self) -> None:
        """Apply the update staged by the last :meth:`prepare`."""
        if self._staged is None:
            raise RuntimeError("commit() called without a prepared observation")
        # ``alpha`` views always point at this buffer
        self._alpha[:] = self._scratch
        self.log_forward = self._staged
        self.n_observations += 1
        self._staged = None

    def push(self, observation) -> None:
        """Register the next observation of the sequence.

        Args:
            observation: Symbol index in ``[0, model.n_symbols)``.

        Raises:
            InvalidObservationError: If the symbol is outside the alphabet.
                The statistic is left unchanged.
            NumericAnomalyError: In debug mode, if the new log-forward is NaN.
                The statistic is left unchanged.
        """
        log_forward = self.prepare(observation)
        if is_debug_enabled():
            assert_no_nan(log_forward, what="running log-forward")
        self.commit()

    def peek(self, observation) -> float:
        """Log-likelihood the sequence would have if ``observation`` were pushed.

        The committed state is not modified, so successive peeks are each
        relative to the last :meth:`push`.

        Args:
            observation: Symbol index in ``[0, model.n_symbols)``.

        Returns:
            The hypothetical ``log_forward``.

        Raises:
            InvalidObservationError: If the symbol is outside the alphabet.
        """
        log_forward = self.prepare(observation)
        self._staged = None

        if is_debug_enabled():
            assert_no_nan(log_forward, what="peeked log-forward")
        return log_forward

    def clear(self) -> None:
        """Forget all observations; the next push starts a new sequence."""
        self._alpha[:] = self.model.log_start
        self.log_forward = float(logsumexp(self._alpha))
        self.n_observations = 0
        self._staged = None

    def state_dict(self) -> Dict[str, Any]:
        """Snapshot of the running state, enough to resume the sequence later."""
        return {
            "alpha": self._alpha.tolist(),
            "log_forward": self.log_forward,
            "n_observations": self.n_observations,
        }

    def validate_state_dict(self, state: Dict[str, Any]) -> Tuple[np.ndarray, float, int]:
        """Check a snapshot against this model without loading it.

        Returns:
            The parsed ``(alpha, log_forward, n_observations)``.

        Raises:
            ValueError: If the snapshot does not match the model's state count
                or holds a negative observation count.
        """
        alpha = np.asarray(state["alpha"], dtype=float)
        if alpha.shape != (self.model.n_states,):
            raise ValueError(f"alpha shape {alpha.shape} != ({self.model.n_states},)")
        n_observations = int(state["n_observations"])
        if n_observations < 0:
            raise ValueError(f"n_observations must be non-negative, got {n_observations}")
        return alpha, float(state["log_forward"]), n_observations

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """Restore a snapshot produced by :meth:`state_dict`.

        Raises:
            ValueError: If the snapshot does not match the model's state count.
                The statistic is left unchanged.
        """
        alpha, log_forward, n_observations = self.validate_state_dict(state)
        self._alpha[:] = alpha
        self.log_forward = log_forward
        self.n_observations = n_observations
        self._staged = None
        logger.debug("Restored running statistic at %d observations", n_observations)
