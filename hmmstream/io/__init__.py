"""I/O helpers: JSON session snapshots and plain-text matrices."""

from .json_session import dump_json_session, json_to_session, load_json_session, session_to_json
from .schema import SESSION_VERSION, json_session_schema, validate_json_session
from .utils import format_matrix, parse_matrix

__all__ = [
    "session_to_json",
    "json_to_session",
    "dump_json_session",
    "load_json_session",
    "SESSION_VERSION",
    "json_session_schema",
    "validate_json_session",
    "format_matrix",
    "parse_matrix",
]
