"""Positional parameter substitution for ``$1``-style placeholders.

Parameters are not bound by the driver. Each value is escaped into a SQL
literal and written into the statement text, and the driver executes the
fully literal statement. The escaping in ``to_literal`` is therefore the whole
security contract of this path.
"""

import math
import re
from typing import Any, Optional, Sequence

from .guards import ParameterError

_PLACEHOLDER_RE = re.compile(r"\$(\d+)(?!\d)")


def check_parameters(parameters: Sequence[Any]) -> None:
    """
    Check every parameter is None, str, bool, int or finite float.
    Raises ParameterError naming the first bad position.
    """
    for index, value in enumerate(parameters, start=1):
        if value is None or isinstance(value, (str, bool)):
            continue
        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                raise ParameterError(f"Parameter ${index} must be a finite number, got: {value}")
            continue
        raise ParameterError(
            f"Parameter ${index} has unsupported type {type(value).__name__}; "
            "allowed types are string, number, boolean and null"
        )


def to_literal(value: Any) -> str:
    """Render a checked parameter as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        text = str(int(value)) if isinstance(value, int) else repr(float(value))
        # "x -$1" with -5 must not become the comment "x --5"
        return f"({text})" if text.startswith("-") else text
    escaped = value.replace("\x00", "").replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"


def substitute(statement: str, parameters: Optional[Sequence[Any]]) -> str:
    """
    Replace ``$1``, ``$2``, ... with escaped literals.

    ``$1`` never matches the prefix of ``$10``. Placeholders without a
    parameter are left as they are. The statement is scanned once, so text
    inserted for one placeholder is never rescanned for another.
    """
    if not parameters:
        return statement
    check_parameters(parameters)
    literals = [to_literal(value) for value in parameters]

    def _replace(match: re.Match) -> str:
        position = int(match.group(1))
        if 1 <= position <= len(literals):
            return literals[position - 1]
        return match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, statement)
