"""Exception types raised by hmmstream."""

from __future__ import annotations


class HMMStreamError(Exception):
    """Base class for all hmmstream errors."""


class InvalidObservationError(HMMStreamError, ValueError):
    """An observation symbol lies outside a model's emission alphabet.

    Raised before any running state is mutated.
    """

    def __init__(self, observation: object, n_symbols: int):
        self.observation = observation
        self.n_symbols = n_symbols
        super().__init__(
            f"Observation {observation!r} is not a symbol in [0, {n_symbols})."
        )


class UninitializedModelError(HMMStreamError, ValueError):
    """A classifier was built without any class models."""


class NumericAnomalyError(HMMStreamError, ArithmeticError):
    """A log-likelihood became NaN.

    Only raised while debug mode is enabled; a NaN points at a malformed
    model definition rather than at the caller's input.
    """


__all__ = [
    "HMMStreamError",
    "InvalidObservationError",
    "UninitializedModelError",
    "NumericAnomalyError",
]
