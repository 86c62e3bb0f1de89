"""Example: Streaming sequence classification with hmmstream

Two gesture classes are modelled by small HMMs over a 3-symbol alphabet
(0 = left, 1 = right, 2 = idle). Symbols arrive one at a time; after each one
the running classifier reports its current guess, with a background model
rejecting input that looks like neither gesture.
"""

import numpy as np

from hmmstream import (
    REJECT,
    HiddenMarkovClassifier,
    HiddenMarkovModel,
    RunningMarkovClassifier,
    format_matrix,
)

LABELS = {0: "swipe-left", 1: "swipe-right", REJECT: "unknown"}


def build_classifier() -> HiddenMarkovClassifier:
    left = HiddenMarkovModel(
        n_states=2,
        start_prob=np.array([0.6, 0.4]),
        trans_mat=np.array([[0.7, 0.3], [0.4, 0.6]]),
        emission_prob=np.array([[0.8, 0.15, 0.05], [0.6, 0.3, 0.1]]),
    )
    right = HiddenMarkovModel(
        n_states=2,
        start_prob=np.array([0.5, 0.5]),
        trans_mat=np.array([[0.9, 0.1], [0.2, 0.8]]),
        emission_prob=np.array([[0.1, 0.8, 0.1], [0.15, 0.75, 0.1]]),
    )
    background = HiddenMarkovModel(n_states=1, n_symbols=3)
    return HiddenMarkovClassifier(
        [left, right], priors=np.array([0.5, 0.5]), threshold=background, sensitivity=1.0
    )


def stream(running: RunningMarkovClassifier, symbols) -> None:
    running.clear()
    for t, symbol in enumerate(symbols):
        label, score = running.peek(symbol)
        running.push(symbol)
        print(
            f"  t={t:2d} symbol={symbol} -> {LABELS[running.classification]:<12s}"
            f" (peeked {LABELS[label]}, score {score:.3f})"
        )


def main() -> None:
    classifier = build_classifier()
    print("Transition matrix of 'swipe-left':")
    print(format_matrix(classifier[0].trans_mat, precision=2))
    print()

    running = RunningMarkovClassifier(classifier)

    rng = np.random.default_rng(42)
    _, right_swipe = classifier[1].sample(8, rng=rng)
    print("Sampled swipe-right sequence:")
    stream(running, right_swipe)

    print("Idle sequence:")
    stream(running, [2, 2, 2, 2, 2])

    posteriors = running.posteriors()
    print(f"Final posteriors (left, right, background): {np.round(posteriors, 3)}")
    print(f"Final decision: {LABELS[running.classification]}")


if __name__ == "__main__":
    main()
