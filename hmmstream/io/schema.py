"""JSON schema definition and validation for running classifier sessions.

A session file captures everything a :class:`RunningMarkovClassifier`
needs to carry on classifying a sequence later; the HMM definitions
themselves are not included and must be supplied when loading.

Schema Structure:
    {
        "version": "hmmstream-session-1.0",
        "n_classes": <integer>,
        "models": [                        # one entry per class
            {
                "alpha": [<number | "-inf">, ...],
                "log_forward": <number | "-inf">,
                "n_observations": <integer>
            },
            ...
        ],
        "threshold": <model entry> | null,
        "responses": [<number | "-inf">, ...],
        "threshold_score": <number | "-inf">,
        "classification": <integer>,        # -1 when rejected
        "metadata": {...}                   # optional
    }
"""

from __future__ import annotations

from typing import Any, Dict

SESSION_VERSION = "hmmstream-session-1.0"


def json_session_schema() -> dict:
    """
    Return the structural schema (as a Python dict) for session files.

    Returns
    -------
    dict
        Schema description with field definitions and constraints.
    """
    statistic = {
        "alpha": {
            "type": "list",
            "description": "Log forward probability per state",
            "required": True,
            "items": {"type": "log-number"},
        },
        "log_forward": {
            "type": "log-number",
            "description": "Log-likelihood of the observations so far",
            "required": True,
        },
        "n_observations": {
            "type": "integer",
            "description": "Observations pushed since the last clear",
            "required": True,
            "min": 0,
        },
    }
    return {
        "version": {
            "type": "string",
            "description": f"Schema version identifier, '{SESSION_VERSION}'",
            "required": True,
        },
        "n_classes": {
            "type": "integer",
            "description": "Number of classes",
            "required": True,
            "min": 1,
        },
        "models": {
            "type": "list",
            "description": "Running statistic of each class model",
            "required": True,
            "items": statistic,
        },
        "threshold": {
            "type": "dict",
            "description": "Running statistic of the threshold model, or null",
            "required": True,
            "nullable": True,
            "fields": statistic,
        },
        "responses": {
            "type": "list",
            "description": "Prior-weighted class scores",
            "required": True,
            "items": {"type": "log-number"},
        },
        "threshold_score": {
            "type": "log-number",
            "description": "Sensitivity-weighted threshold score",
            "required": True,
        },
        "classification": {
            "type": "integer",
            "description": "Current label, -1 when rejected",
            "required": True,
            "min": -1,
        },
        "metadata": {
            "type": "dict",
            "description": "Optional metadata (producer, timestamp, notes, etc.)",
            "required": False,
        },
    }


def _is_log_number(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    return isinstance(v, (int, float)) or v == "-inf"


def _validate_statistic(stat: Any, where: str) -> None:
    if not isinstance(stat, dict):
        raise ValueError(f"{where} must be a dictionary object.")
    for field in ("alpha", "log_forward", "n_observations"):
        if field not in stat:
            raise ValueError(f"{where} missing required field '{field}'.")
    if not isinstance(stat["alpha"], list) or not stat["alpha"]:
        raise ValueError(f"{where}: field 'alpha' must be a non-empty list.")
    for j, v in enumerate(stat["alpha"]):
        if not _is_log_number(v):
            raise ValueError(f"{where}: alpha[{j}] must be a number or '-inf', got {v!r}.")
    if not _is_log_number(stat["log_forward"]):
        raise ValueError(f"{where}: field 'log_forward' must be a number or '-inf'.")
    n = stat["n_observations"]
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"{where}: field 'n_observations' must be a non-negative integer.")


def validate_json_session(obj: Dict[str, Any]) -> None:
    """
    Validate a session object against the schema.

    Raises
    ------
    ValueError
        If the object does not conform to the schema.
    """
    if not isinstance(obj, dict):
        raise ValueError("JSON session must be a dictionary object.")

    if obj.get("version") != SESSION_VERSION:
        raise ValueError(
            f"Unsupported session version {obj.get('version')!r}; expected '{SESSION_VERSION}'."
        )

    n_classes = obj.get("n_classes")
    if isinstance(n_classes, bool) or not isinstance(n_classes, int) or n_classes < 1:
        raise ValueError("Field 'n_classes' must be an integer >= 1.")

    models = obj.get("models")
    if not isinstance(models, list) or len(models) != n_classes:
        raise ValueError(f"Field 'models' must be a list of {n_classes} entries.")
    for i, stat in enumerate(models):
        _validate_statistic(stat, f"models[{i}]")

    if "threshold" not in obj:
        raise ValueError("JSON session missing required field 'threshold'.")
    if obj["threshold"] is not None:
        _validate_statistic(obj["threshold"], "threshold")

    responses = obj.get("responses")
    if not isinstance(responses, list) or len(responses) != n_classes:
        raise ValueError(f"Field 'responses' must be a list of {n_classes} entries.")
    for i, v in enumerate(responses):
        if not _is_log_number(v):
            raise ValueError(f"responses[{i}] must be a number or '-inf', got {v!r}.")

    if not _is_log_number(obj.get("threshold_score")):
        raise ValueError("Field 'threshold_score' must be a number or '-inf'.")

    label = obj.get("classification")
    if isinstance(label, bool) or not isinstance(label, int) or not -1 <= label < n_classes:
        raise ValueError(f"Field 'classification' must be an integer in [-1, {n_classes}).")

    if "metadata" in obj and not isinstance(obj["metadata"], dict):
        raise ValueError("Field 'metadata' must be a dictionary object.")


__all__ = [
    "SESSION_VERSION",
    "json_session_schema",
    "validate_json_session",
]
