"""Security guards for SQL statements.

The checks here are lexical: keyword and pattern matching on the statement
text, not a parser. A denylisted word inside a string literal or a comment is
still rejected, and that is accepted behaviour. The keyword and pattern lists
below are the compatibility contract for which statements pass.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class GuardError(ValueError):
    """Raised when guardrails are violated."""

    error_kind = "DATABASE_ERROR"


class InputValidationError(GuardError):
    """Tool arguments failed shape or bounds validation."""

    error_kind = "VALIDATION_ERROR"


class SafetyError(GuardError):
    """Statement rejected by the safety gate."""

    error_kind = "SAFETY_REJECTED"


class ParameterError(GuardError):
    """Query parameter has an unsupported type or value."""

    error_kind = "PARAMETER_ERROR"


class ConfigError(GuardError):
    """Environment configuration is missing or malformed."""

    error_kind = "CONFIG_ERROR"


DENIED_KEYWORDS = (
    "DROP",
    "CREATE",
    "ALTER",
    "TRUNCATE",
    "GRANT",
    "REVOKE",
    "VACUUM",
    "ANALYZE",
    "CLUSTER",
    "REINDEX",
    "COPY",
    "BACKUP",
    "RESTORE",
    "ATTACH",
    "DETACH",
    "PRAGMA",
)

READ_ONLY_PREFIXES = ("SELECT", "WITH", "EXPLAIN")

TRIVIAL_WHERE_PATTERNS = (
    "WHERE 1=1",
    "WHERE 1 = 1",
    "WHERE TRUE",
    "WHERE 1",
    "WHERE '1'='1'",
    'WHERE "1"="1"',
)

_DENIED_RE = re.compile(r"\b(" + "|".join(DENIED_KEYWORDS) + r")\b", re.IGNORECASE)
_WHERE_RE = re.compile(r"\bWHERE\b")


@dataclass(frozen=True)
class SafetyDecision:
    """Outcome of the safety gate for one statement."""

    allowed: bool
    reason: Optional[str] = None


def is_read_only_statement(statement: str) -> bool:
    """Return True if the statement starts with SELECT, WITH or EXPLAIN."""
    return statement.strip().upper().startswith(READ_ONLY_PREFIXES)


def find_denied_keyword(statement: str) -> Optional[str]:
    """Return the first denylisted keyword found as a whole word, if any."""
    match = _DENIED_RE.search(statement)
    if match:
        return match.group(1).upper()
    return None


def check_where_clause(statement: str) -> Optional[str]:
    """
    Check UPDATE/DELETE statements carry a non-trivial WHERE clause.

    The UPDATE/DELETE test is a plain substring match on the upper-cased
    text, so a column such as ``update_flag`` also triggers it.
    Returns a rejection reason, or None when the statement is acceptable.
    """
    upper_statement = statement.upper()
    if "UPDATE" not in upper_statement and "DELETE" not in upper_statement:
        return None

    if not _WHERE_RE.search(upper_statement):
        return "UPDATE and DELETE statements must include a WHERE clause"

    for pattern in TRIVIAL_WHERE_PATTERNS:
        if pattern in upper_statement:
            return f"UPDATE and DELETE statements must not use an always-true WHERE clause ({pattern})"

    return None


def evaluate(statement: str, read_only: bool) -> SafetyDecision:
    """Decide whether a statement may run under the given mode."""
    keyword = find_denied_keyword(statement)
    if keyword:
        return SafetyDecision(False, f"Operation not allowed: {keyword} statements are blocked")

    if read_only:
        if is_read_only_statement(statement):
            return SafetyDecision(True)
        return SafetyDecision(
            False,
            "Server is in read-only mode: only SELECT, WITH and EXPLAIN statements are allowed",
        )

    reason = check_where_clause(statement)
    if reason:
        return SafetyDecision(False, reason)
    return SafetyDecision(True)


def require_allowed(statement: str, read_only: bool) -> str:
    """
    Validate a statement against the safety gate.
    Raises SafetyError if rejected.
    Returns the statement unchanged.
    """
    decision = evaluate(statement, read_only)
    if not decision.allowed:
        logger.warning(f"Statement rejected: {decision.reason}")
        raise SafetyError(decision.reason)
    return statement
