"""Map raw PostgreSQL error messages to a stable error taxonomy."""

import logging
from typing import Callable, Optional

from .guards import GuardError

logger = logging.getLogger(__name__)

DATABASE_ERROR = "DATABASE_ERROR"

HINTS = {
    "SYNTAX_ERROR": "Check the SQL syntax near the position reported in the message; "
                    "quote identifiers that are reserved words or contain capitals",
    "PERMISSION_DENIED": "The database user lacks privileges for this object; "
                         "query a different table or ask an administrator for access",
    "DUPLICATE_KEY": "A row with the same unique key already exists; "
                     "use different key values or update the existing row instead",
    "FOREIGN_KEY_VIOLATION": "The referenced row does not exist or is still referenced; "
                             "check related tables with get_constraints",
    "RELATION_NOT_FOUND": "Check table name spelling and schema qualification, "
                          "use list_tables to see available tables",
    "COLUMN_NOT_FOUND": "Check column name spelling, use describe_table to see the table's columns",
    "TIMEOUT": "The statement took too long; add filters, paginate with page_size/offset, "
               "or inspect the plan with explain_query",
    DATABASE_ERROR: "Check the statement and try again; see the message for details",
}


def _has(*needles: str) -> Callable[[str], bool]:
    return lambda message: all(needle in message for needle in needles)


# First matching rule wins.
RULES: list[tuple[str, Callable[[str], bool]]] = [
    ("SYNTAX_ERROR", _has("syntax error")),
    ("PERMISSION_DENIED", _has("permission denied")),
    ("DUPLICATE_KEY", _has("duplicate key value")),
    ("FOREIGN_KEY_VIOLATION", _has("violates foreign key constraint")),
    ("RELATION_NOT_FOUND", lambda m: "relation" in m and "does not exist" in m and not m.startswith("column")),
    ("COLUMN_NOT_FOUND", _has("column", "does not exist")),
    ("TIMEOUT", lambda m: "timeout" in m or "canceling statement" in m),
]


def classify_error(message: Optional[str]) -> tuple[str, str]:
    """Return (error_kind, hint) for a backend error message."""
    text = (message or "").strip().lower()
    for kind, matches in RULES:
        if matches(text):
            return kind, HINTS[kind]
    return DATABASE_ERROR, HINTS[DATABASE_ERROR]


GUARD_HINTS = {
    "VALIDATION_ERROR": "Check the tool arguments against the tool's input schema and resubmit",
    "SAFETY_REJECTED": "Blocked operations cannot run through this server; in read-only mode use "
                       "SELECT, WITH or EXPLAIN, and give UPDATE/DELETE a specific WHERE clause",
    "PARAMETER_ERROR": "Pass parameters as strings, finite numbers, booleans or null, "
                       "in the order of the $1, $2, ... placeholders",
}


def failure(message: str, error_kind: str, hint: Optional[str] = None) -> dict:
    """Build the failure envelope returned by every tool."""
    return {"kind": "failure", "message": message, "error_kind": error_kind, "hint": hint}


def failure_from_exception(exc: Exception) -> dict:
    """Convert a guard violation or backend error into a failure envelope."""
    if isinstance(exc, GuardError):
        hint = GUARD_HINTS.get(exc.error_kind, HINTS.get(exc.error_kind))
        return failure(str(exc), exc.error_kind, hint)
    message = str(exc).strip() or type(exc).__name__
    kind, hint = classify_error(message)
    logger.warning(f"Database error ({kind}): {message}")
    return failure(message, kind, hint)
