"""Multiclass sequence classifier built from one HMM per class.

A :class:`HiddenMarkovClassifier` owns the per-class models, their prior
probabilities and an optional threshold (background) model weighted by a
sensitivity factor. It classifies complete sequences in one call; the
streaming counterpart lives in :mod:`hmmstream.running`.

The decision rule, shared with the running classifier, is

    label = argmax_i  log(prior_i) + log P(x | model_i)

with ties resolved towards the lowest class index. When a threshold model
is present and ``log(sensitivity) + log P(x | threshold)`` is strictly
larger than every class score, the sequence is rejected and the label is
:data:`REJECT`.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

from hmmstream.diagnostics import assert_simplex
from hmmstream.errors import UninitializedModelError
from hmmstream.logging import get_logger

from .hmm import HiddenMarkovModel
from .utils import safe_log

logger = get_logger(__name__)

REJECT = -1
"""Label returned when the threshold model outscores every class."""


@dataclass(frozen=True)
class Decision:
    """A class label together with the score that selected it.

    Attributes:
        label: Winning class index, or :data:`REJECT`.
        log_likelihood: Prior-weighted log-likelihood of the winner (the
            threshold score when rejected).
    """

    label: int
    log_likelihood: float

    @property
    def rejected(self) -> bool:
        return self.label == REJECT

    def __iter__(self) -> Iterator:
        # Allows ``label, score = classifier.peek(x)``
        yield self.label
        yield self.log_likelihood


@runtime_checkable
class SingleInputClassifier(Protocol):
    """Anything that can classify one complete observation sequence."""

    def decide(self, sequence: Sequence[int]) -> Decision:
        ...


@runtime_checkable
class BatchInputClassifier(Protocol):
    """Anything that can classify many sequences, optionally into a buffer."""

    def decide_batch(
        self, sequences: Iterable[Sequence[int]], out: Optional[List[Decision]] = None
    ) -> List[Decision]:
        ...

    def scores_batch(
        self, sequences: Sequence[Sequence[int]], out: Optional[np.ndarray] = None
    ) -> np.ndarray:
        ...


def select(
    scores: np.ndarray, threshold_score: Optional[float] = None
) -> Tuple[int, float]:
    """Apply the shared decision rule to a vector of combined scores.

    Strict ``>`` comparisons mean the lowest index wins ties and NaN scores
    never win.

    Args:
        scores: Prior-weighted log-likelihood per class.
        threshold_score: Sensitivity-weighted threshold log-likelihood, or
            None when the classifier has no threshold model.

    Returns:
        Tuple of (label, best score). The label is :data:`REJECT` when no
        class beats ``-inf`` or the threshold wins.
    """
    label = REJECT
    best = -np.inf
    for i, score in enumerate(scores):
        if score > best:
            best = float(score)
            label = i
    if threshold_score is not None and threshold_score > best:
        best = float(threshold_score)
        label = REJECT
    return label, best


class HiddenMarkovClassifier:
    """Collection of per-class HMMs with priors and an optional threshold model.

    Attributes:
        models: Per-class models; the index of a model is its class label.
        priors: Class prior probabilities, shape (n_classes,).
        threshold: Optional background model used for rejection.
        sensitivity: Weight applied to the threshold model like a prior.
    """

    def __init__(
        self,
        models: Sequence[HiddenMarkovModel],
        priors: Optional[np.ndarray] = None,
        threshold: Optional[HiddenMarkovModel] = None,
        sensitivity: float = 1.0,
    ):
        """Initialize the classifier.

        Args:
            models: One HMM per class, in label order.
            priors: Prior probability of each class. If None, uniform.
            threshold: Optional threshold (background) model.
            sensitivity: Positive weight of the threshold model.

        Raises:
            UninitializedModelError: If ``models`` is empty.
            ValueError: If priors are not a probability simplex of the right
                length or sensitivity is not positive.
        """
        if models is None or len(models) == 0:
            raise UninitializedModelError("HiddenMarkovClassifier needs at least one class model.")
        self.models: Tuple[HiddenMarkovModel, ...] = tuple(models)
        n_classes = len(self.models)

        if priors is None:
            priors = np.ones(n_classes) / n_classes
        else:
            priors = np.asarray(priors, dtype=float)
            if priors.shape != (n_classes,):
                raise ValueError(f"priors shape {priors.shape} != ({n_classes},)")
            assert_simplex(priors, name="priors")
        self.priors = priors.copy()
        self.priors.flags.writeable = False

        if not sensitivity > 0:
            raise ValueError(f"sensitivity must be positive, got {sensitivity}")
        self.threshold: Optional[HiddenMarkovModel] = threshold
        self.sensitivity = float(sensitivity)

        self.log_priors = safe_log(self.priors)
        self.log_priors.flags.writeable = False
        self.log_sensitivity = float(np.log(self.sensitivity))

        logger.debug(
            "Built classifier with %d classes (threshold model: %s)",
            n_classes,
            "yes" if threshold is not None else "no",
        )

    @property
    def n_classes(self) -> int:
        return len(self.models)

    def __len__(self) -> int:
        return len(self.models)

    def __getitem__(self, label: int) -> HiddenMarkovModel:
        return self.models[label]

    def log_likelihoods(self, sequence: Sequence[int]) -> np.ndarray:
        """Prior-weighted log-likelihood of ``sequence`` under every class.

        Args:
            sequence: Observation sequence, shape (T,).

        Returns:
            Array of shape (n_classes,).
        """
        scores = np.empty(self.n_classes)
        for i, model in enumerate(self.models):
            scores[i] = self.log_priors[i] + model.score(sequence)
        return scores

    def threshold_log_likelihood(self, sequence: Sequence[int]) -> Optional[float]:
        """Sensitivity-weighted threshold score, or None without a threshold model."""
        if self.threshold is None:
            return None
        return self.log_sensitivity + self.threshold.score(sequence)

    def decide(self, sequence: Sequence[int]) -> Decision:
        """Classify one complete sequence.

        Args:
            sequence: Observation sequence, shape (T,).

        Returns:
            The winning :class:`Decision`.
        """
        label, best = select(
            self.log_likelihoods(sequence), self.threshold_log_likelihood(sequence)
        )
        return Decision(label, best)

    def decide_batch(
        self, sequences: Iterable[Sequence[int]], out: Optional[List[Decision]] = None
    ) -> List[Decision]:
        """Classify several sequences.

        Args:
            sequences: Observation sequences.
            out: Optional list to append decisions to instead of a new list.

        Returns:
            The list of decisions (``out`` itself when given).
        """
        if out is None:
            out = []
        for sequence in sequences:
            out.append(self.decide(sequence))
        return out

    def scores_batch(
        self, sequences: Sequence[Sequence[int]], out: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """Prior-weighted class scores for several sequences.

        Args:
            sequences: Observation sequences.
            out: Optional float buffer of shape at least
                (len(sequences), n_classes); rows beyond ``len(sequences)``
                are left untouched.

        Returns:
            Array of shape (len(sequences), n_classes); a view of ``out``
            when it was supplied.

        Raises:
            ValueError: If ``out`` is too small.
        """
        n = len(sequences)
        if out is None:
            out = np.empty((n, self.n_classes))
        elif out.ndim != 2 or out.shape[0] < n or out.shape[1] != self.n_classes:
            raise ValueError(
                f"out must have shape at least ({n}, {self.n_classes}), got {out.shape}"
            )
        for k, sequence in enumerate(sequences):
            out[k, :] = self.log_likelihoods(sequence)
        return out[:n]
