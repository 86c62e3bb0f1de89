"""Online (one observation at a time) HMM scoring and classification."""

from .classifier import RunningMarkovClassifier
from .statistics import RunningMarkovStatistics

__all__ = [
    "RunningMarkovStatistics",
    "RunningMarkovClassifier",
]
