"""Query execution pipeline.

safety gate -> pagination (read-only statements) -> parameter substitution
-> execution -> result shaping. Every failure along the way comes back as a
failure envelope; nothing is retried.
"""

import logging

import psycopg2

from .config import ServerConfig
from .db import Database
from .errors import failure_from_exception
from .guards import GuardError, is_read_only_statement, require_allowed
from .pagination import rewrite
from .params import substitute
from .validation import ExplainInput, QueryInput

logger = logging.getLogger(__name__)

PLAN_COLUMN = "QUERY PLAN"


def run_query(db: Database, config: ServerConfig, request: QueryInput) -> dict:
    """
    Run a validated query request.

    Returns one of:
    - {"kind": "rows", "rows", "row_count", "pagination"} for SELECT/WITH/EXPLAIN
    - {"kind": "affected", "row_count"} for everything else
    - {"kind": "failure", "message", "error_kind", "hint"}
    """
    statement = request.statement
    window = None
    try:
        require_allowed(statement, config.read_only)
        # The original statement decides the result shape, not the rewritten text.
        read_only = is_read_only_statement(statement)
        final_statement = statement
        if read_only:
            window = rewrite(statement, config, request.page_size, request.offset)
            final_statement = window.statement
        final_statement = substitute(final_statement, request.parameters)
        result = db.execute(final_statement)
    except (GuardError, psycopg2.Error) as e:
        return failure_from_exception(e)

    if window is not None:
        row_count = len(result.rows)
        return {
            "kind": "rows",
            "rows": result.rows,
            "row_count": row_count,
            "pagination": {
                "has_more": window.has_more(row_count),
                "page_size": window.page_size,
                "offset": window.offset,
            },
        }

    logger.info(f"Write statement affected {max(result.rowcount, 0)} rows")
    return {"kind": "affected", "row_count": max(result.rowcount, 0)}


def build_explain(request: ExplainInput) -> str:
    """Wrap a statement in EXPLAIN with the requested options."""
    options = [
        f"ANALYZE {'TRUE' if request.analyze else 'FALSE'}",
        f"COSTS {'TRUE' if request.costs else 'FALSE'}",
    ]
    if request.buffers:
        options.append("BUFFERS TRUE")
    options.append(f"FORMAT {request.format.upper()}")
    return f"EXPLAIN ({', '.join(options)}) {request.statement}"


def explain_query(db: Database, config: ServerConfig, request: ExplainInput) -> dict:
    """
    Return the execution plan of a statement.

    The statement passes the safety gate first. The EXPLAIN runs in a
    transaction that is always rolled back, so ANALYZE of a write leaves no
    changes behind.
    """
    try:
        require_allowed(request.statement, config.read_only)
        result = db.execute(build_explain(request), rollback=True)
    except (GuardError, psycopg2.Error) as e:
        return failure_from_exception(e)

    values = [row.get(PLAN_COLUMN) for row in result.rows]
    if request.format == "json":
        plan = values[0] if values else []
    else:
        plan = "\n".join(str(value) for value in values)
    return {"kind": "plan", "format": request.format, "plan": plan}
