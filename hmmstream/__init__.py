"""hmmstream - online multiclass sequence classification with hidden Markov models."""

__version__ = "0.1.0"

# Diagnostics
from .diagnostics import (
    assert_no_nan,
    assert_simplex,
    debug_context,
    is_debug_enabled,
    is_simplex,
    set_debug_enabled,
)

# Errors
from .errors import (
    HMMStreamError,
    InvalidObservationError,
    NumericAnomalyError,
    UninitializedModelError,
)

# I/O
from .io import (
    dump_json_session,
    format_matrix,
    json_to_session,
    load_json_session,
    parse_matrix,
    session_to_json,
)

# Logging
from .logging import configure_logging, get_logger, set_log_level

# Static models and whole-sequence classification
from .probabilistic import (
    REJECT,
    BatchInputClassifier,
    Decision,
    HiddenMarkovClassifier,
    HiddenMarkovModel,
    SingleInputClassifier,
    log_add,
    logsumexp,
)

# Streaming classification
from .running import RunningMarkovClassifier, RunningMarkovStatistics

__all__ = [
    "__version__",
    # Diagnostics
    "is_simplex",
    "assert_simplex",
    "assert_no_nan",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Errors
    "HMMStreamError",
    "InvalidObservationError",
    "UninitializedModelError",
    "NumericAnomalyError",
    # I/O
    "session_to_json",
    "json_to_session",
    "dump_json_session",
    "load_json_session",
    "format_matrix",
    "parse_matrix",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
    # Models
    "HiddenMarkovModel",
    "HiddenMarkovClassifier",
    "Decision",
    "REJECT",
    "SingleInputClassifier",
    "BatchInputClassifier",
    "logsumexp",
    "log_add",
    # Running
    "RunningMarkovStatistics",
    "RunningMarkovClassifier",
]
