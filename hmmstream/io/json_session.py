"""JSON import and export of running classifier sessions.

Lets a caller stop feeding a sequence, persist where the classifier stands,
and resume later against the same :class:`HiddenMarkovClassifier`.

See schema.py for the file layout.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from hmmstream.logging import get_logger
from hmmstream.probabilistic.classifier import HiddenMarkovClassifier
from hmmstream.running import RunningMarkovClassifier

from .schema import SESSION_VERSION, validate_json_session
from .utils import decode_log_value, decode_log_vector, encode_log_value, encode_log_vector

logger = get_logger(__name__)


def _statistic_to_json(state: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "alpha": encode_log_vector(state["alpha"]),
        "log_forward": encode_log_value(state["log_forward"]),
        "n_observations": int(state["n_observations"]),
    }


def _statistic_from_json(obj: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "alpha": decode_log_vector(obj["alpha"]),
        "log_forward": decode_log_value(obj["log_forward"]),
        "n_observations": obj["n_observations"],
    }


def session_to_json(
    running: RunningMarkovClassifier, metadata: Optional[dict] = None
) -> dict:
    """
    Convert a running classifier's session to a JSON object.

    Parameters
    ----------
    running : RunningMarkovClassifier
        Session to export.
    metadata : dict, optional
        Optional JSON-serializable metadata.

    Returns
    -------
    dict
        JSON object following the schema in schema.py.

    Raises
    ------
    ValueError
        If a score is NaN or ``+inf``.
    """
    state = running.state_dict()
    result: Dict[str, Any] = {
        "version": SESSION_VERSION,
        "n_classes": len(state["models"]),
        "models": [_statistic_to_json(s) for s in state["models"]],
        "threshold": (
            _statistic_to_json(state["threshold"]) if state["threshold"] is not None else None
        ),
        "responses": encode_log_vector(state["responses"]),
        "threshold_score": encode_log_value(state["threshold_score"]),
        "classification": int(state["classification"]),
    }
    if metadata:
        result["metadata"] = metadata
    return result


def json_to_session(obj: dict, classifier: HiddenMarkovClassifier) -> RunningMarkovClassifier:
    """
    Rebuild a running classifier from a JSON session object.

    Parameters
    ----------
    obj : dict
        JSON object produced by :func:`session_to_json`.
    classifier : HiddenMarkovClassifier
        The model the session was recorded with.

    Returns
    -------
    RunningMarkovClassifier
        A classifier positioned exactly where the session left off.

    Raises
    ------
    ValueError
        If the object is malformed or does not fit ``classifier``.
    """
    validate_json_session(obj)

    running = RunningMarkovClassifier(classifier)
    running.load_state_dict(
        {
            "models": [_statistic_from_json(s) for s in obj["models"]],
            "threshold": (
                _statistic_from_json(obj["threshold"]) if obj["threshold"] is not None else None
            ),
            "responses": decode_log_vector(obj["responses"]),
            "threshold_score": decode_log_value(obj["threshold_score"]),
            "classification": obj["classification"],
        }
    )
    logger.debug("Resumed session at %d observations", running.n_observations)
    return running


def dump_json_session(
    running: RunningMarkovClassifier, path: str, metadata: Optional[dict] = None
) -> None:
    """
    Write a running classifier's session to a JSON file.

    Parameters
    ----------
    running : RunningMarkovClassifier
        Session to write.
    path : str
        Path to output JSON file.
    metadata : dict, optional
        Optional JSON-serializable metadata.
    """
    obj = session_to_json(running, metadata=metadata)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False, allow_nan=False)


def load_json_session(path: str, classifier: HiddenMarkovClassifier) -> RunningMarkovClassifier:
    """
    Load a running classifier session from a JSON file.

    Parameters
    ----------
    path : str
        Path to input JSON file.
    classifier : HiddenMarkovClassifier
        The model the session was recorded with.

    Returns
    -------
    RunningMarkovClassifier
        Resumed classifier.

    Raises
    ------
    ValueError
        If the file is not valid JSON or does not describe a valid session.
    FileNotFoundError
        If the file does not exist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"JSON session file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in file {path}: {e}")

    return json_to_session(obj, classifier)


__all__ = [
    "session_to_json",
    "json_to_session",
    "dump_json_session",
    "load_json_session",
]
