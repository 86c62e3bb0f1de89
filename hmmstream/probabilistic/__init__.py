"""Static HMM definitions and whole-sequence classification.

This module provides:
- Discrete-emission Hidden Markov Models with the batch forward algorithm
- A multiclass classifier made of one HMM per class, with priors and an
  optional threshold model for rejection
- Log-domain numerical helpers shared with the running classifiers
"""

from .classifier import (
    REJECT,
    BatchInputClassifier,
    Decision,
    HiddenMarkovClassifier,
    SingleInputClassifier,
    select,
)
from .hmm import HiddenMarkovModel
from .utils import ensure_1d, log_add, logsumexp, normalize_rows, safe_log

__all__ = [
    "HiddenMarkovModel",
    "HiddenMarkovClassifier",
    "Decision",
    "REJECT",
    "SingleInputClassifier",
    "BatchInputClassifier",
    "select",
    "logsumexp",
    "log_add",
    "safe_log",
    "normalize_rows",
    "ensure_1d",
]
