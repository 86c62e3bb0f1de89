"""Streaming multiclass classification with hidden Markov models.

:class:`RunningMarkovClassifier` keeps one :class:`RunningMarkovStatistics`
per class of a :class:`HiddenMarkovClassifier`, plus one for its threshold
model when it has one, and re-decides the label of the sequence after every
observation.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Tuple

import numpy as np

from hmmstream.diagnostics import assert_no_nan, is_debug_enabled
from hmmstream.errors import UninitializedModelError
from hmmstream.logging import get_logger
from hmmstream.probabilistic.classifier import REJECT, Decision, HiddenMarkovClassifier, select
from hmmstream.probabilistic.utils import logsumexp

from .statistics import RunningMarkovStatistics

logger = get_logger(__name__)


class RunningMarkovClassifier:
    """Online hidden Markov classifier.

    After each :meth:`push` the classifier exposes

    - ``responses[i] = log(prior_i) + log P(x_1..x_t | model_i)``,
    - ``threshold_score = log(sensitivity) + log P(x_1..x_t | threshold)``
      when the underlying classifier defines a threshold model,
    - ``classification``: the index of the largest response (lowest index on
      ties), or :data:`REJECT` when the threshold score is larger still.

    Scores are unnormalised; use :meth:`posteriors` for probabilities.

    Example:
        >>> running = RunningMarkovClassifier(classifier)
        >>> for symbol in stream:
        ...     running.push(symbol)
        ...     label = running.classification
    """

    def __init__(self, classifier: HiddenMarkovClassifier):
        """
        Args:
            classifier: The model owner providing class models, priors and
                the optional threshold model.

        Raises:
            UninitializedModelError: If ``classifier`` is None or has no classes.
        """
        if classifier is None or classifier.n_classes == 0:
            raise UninitializedModelError(
                "RunningMarkovClassifier requires a classifier with at least one class."
            )
        self.classifier = classifier
        self.models: Tuple[RunningMarkovStatistics, ...] = tuple(
            RunningMarkovStatistics(model) for model in classifier.models
        )
        self.threshold: Optional[RunningMarkovStatistics] = (
            RunningMarkovStatistics(classifier.threshold)
            if classifier.threshold is not None
            else None
        )

        self._responses = np.zeros(len(self.models))
        self._peek_responses = np.zeros(len(self.models))
        self.threshold_score = 0.0
        self.classification = REJECT
        self.clear()

        logger.debug(
            "Running classifier over %d classes%s",
            len(self.models),
            " with threshold model" if self.rejects else "",
        )

    @property
    def rejects(self) -> bool:
        """Whether a threshold model can reject sequences."""
        return self.threshold is not None

    @property
    def responses(self) -> np.ndarray:
        """Read-only view of the prior-weighted class scores."""
        view = self._responses.view()
        view.flags.writeable = False
        return view

    @property
    def n_observations(self) -> int:
        return self.models[0].n_observations

    @property
    def decision(self) -> Decision:
        """The committed classification with its winning score."""
        if self.classification == REJECT:
            if self.rejects:
                return Decision(REJECT, self.threshold_score)
            return Decision(REJECT, -np.inf)
        return Decision(self.classification, float(self._responses[self.classification]))

    def _validate(self, observation) -> None:
        # Every model checks the symbol before any statistic moves
        for stat in self.models:
            stat.validate(observation)
        if self.threshold is not None:
            self.threshold.validate(observation)

    def push(self, observation) -> None:
        """Register the next observation and update the classification.

        Args:
            observation: Symbol index valid for every class model and the
                threshold model.

        Raises:
            InvalidObservationError: If any model rejects the symbol; no
                statistic is modified in that case.
            NumericAnomalyError: In debug mode, if any score comes out NaN;
                nothing is committed in that case either.
        """
        self._validate(observation)

        # Stage every statistic first; commit only once all scores are known
        log_priors = self.classifier.log_priors
        scores = self._peek_responses
        for i, stat in enumerate(self.models):
            scores[i] = log_priors[i] + stat.prepare(observation)

        threshold_score = None
        if self.threshold is not None:
            threshold_score = self.classifier.log_sensitivity + self.threshold.prepare(observation)

        if is_debug_enabled():
            assert_no_nan(scores, what="class responses")
            if threshold_score is not None:
                assert_no_nan(threshold_score, what="threshold score")

        for stat in self.models:
            stat.commit()
        self._responses[:] = scores
        if self.threshold is not None:
            self.threshold.commit()
            self.threshold_score = threshold_score

        self.classification, _ = select(self._responses, threshold_score)

        if self.classification == REJECT and self.rejects:
            logger.debug(
                "Observation %d: threshold score %.6g rejects the sequence",
                self.n_observations,
                self.threshold_score,
            )

    def push_many(self, observations: Iterable) -> int:
        """Push observations in order and return the final classification."""
        for observation in observations:
            self.push(observation)
        return self.classification

    def peek(self, observation) -> Decision:
        """Classification the sequence would get if ``observation`` were pushed.

        Nothing is committed: statistics, ``responses``, ``threshold_score``
        and ``classification`` keep their current values.

        Args:
            observation: Symbol index valid for every model.

        Returns:
            Decision with the hypothetical label (or :data:`REJECT`) and the
            best combined log-likelihood. Unpacks as ``(label, score)``.

        Raises:
            InvalidObservationError: If any model rejects the symbol.
        """
        self._validate(observation)

        log_priors = self.classifier.log_priors
        scores = self._peek_responses
        for i, stat in enumerate(self.models):
            scores[i] = log_priors[i] + stat.peek(observation)

        threshold_score = None
        if self.threshold is not None:
            threshold_score = self.classifier.log_sensitivity + self.threshold.peek(observation)

        label, best = select(scores, threshold_score)
        return Decision(label, best)

    def clear(self) -> None:
        """Reset every statistic and start classifying a new sequence.

        Responses return to the prior-weighted log-likelihood of the empty
        sequence, which is ``log(prior_i)`` for normalised models.
        """
        log_priors = self.classifier.log_priors
        for i, stat in enumerate(self.models):
            stat.clear()
            self._responses[i] = log_priors[i] + stat.log_forward

        if self.threshold is not None:
            self.threshold.clear()
            self.threshold_score = self.classifier.log_sensitivity + self.threshold.log_forward
        else:
            self.threshold_score = 0.0

        self.classification = REJECT

    def posteriors(self) -> np.ndarray:
        """Normalised posterior probabilities of the committed scores.

        Returns:
            Array of shape (n_classes,), or (n_classes + 1,) with the
            threshold model's share in the last entry when :attr:`rejects`.
        """
        scores = self._responses
        if self.threshold is not None:
            scores = np.append(scores, self.threshold_score)
        log_z = logsumexp(scores)
        if not np.isfinite(log_z):
            return np.full(len(scores), np.nan)
        return np.exp(scores - log_z)

    def state_dict(self) -> Dict[str, Any]:
        """Snapshot of the session, restorable with :meth:`load_state_dict`."""
        return {
            "models": [stat.state_dict() for stat in self.models],
            "threshold": self.threshold.state_dict() if self.threshold is not None else None,
            "responses": self._responses.tolist(),
            "threshold_score": self.threshold_score,
            "classification": self.classification,
        }

    def load_state_dict(self, state: Dict[str, Any]) -> None:
        """Resume a session saved with :meth:`state_dict`.

        Raises:
            ValueError: If the snapshot was taken with a different number of
                classes or a different threshold configuration, or any entry
                does not fit its model. The session is left unchanged.
        """
        if len(state["models"]) != len(self.models):
            raise ValueError(
                f"Snapshot has {len(state['models'])} classes, classifier has {len(self.models)}"
            )
        if (state.get("threshold") is None) != (self.threshold is None):
            raise ValueError("Snapshot threshold configuration does not match the classifier")
        classification = int(state["classification"])
        if classification != REJECT and not 0 <= classification < len(self.models):
            raise ValueError(f"Invalid classification {classification} in snapshot")
        responses = np.asarray(state["responses"], dtype=float)
        if responses.shape != self._responses.shape:
            raise ValueError(f"responses shape {responses.shape} != {self._responses.shape}")
        for stat, stat_state in zip(self.models, state["models"]):
            stat.validate_state_dict(stat_state)
        if self.threshold is not None:
            self.threshold.validate_state_dict(state["threshold"])
        threshold_score = float(state["threshold_score"])

        for stat, stat_state in zip(self.models, state["models"]):
            stat.load_state_dict(stat_state)
        if self.threshold is not None:
            self.threshold.load_state_dict(state["threshold"])
        self._responses[:] = responses
        self.threshold_score = threshold_score
        self.classification = classification
