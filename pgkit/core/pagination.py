"""LIMIT/OFFSET rewriting for read-only statements."""

import re
from dataclasses import dataclass
from typing import Optional

from .config import ServerConfig

AGGREGATE_MARKERS = ("COUNT(", "SUM(", "AVG(", "MAX(", "MIN(")

_PAGINATED_RE = re.compile(r"\b(LIMIT|OFFSET)\b")


@dataclass(frozen=True)
class PageWindow:
    """Statement after pagination plus the page metadata reported to the caller."""

    statement: str
    page_size: int
    offset: int
    applied: bool = False

    def has_more(self, returned_rows: int) -> bool:
        # A full page is taken to mean more rows follow, even on the last page.
        return returned_rows == self.page_size


def is_single_row_aggregate(statement: str) -> bool:
    """Aggregate functions without GROUP BY return exactly one row."""
    upper_statement = statement.upper()
    has_aggregate = any(marker in upper_statement for marker in AGGREGATE_MARKERS)
    return has_aggregate and "GROUP BY" not in upper_statement


def effective_page_size(page_size: Optional[int], config: ServerConfig) -> int:
    """Default then clamp a requested page size to the configured maximum."""
    requested = page_size if page_size is not None else config.default_page_size
    return min(requested, config.max_page_size)


def rewrite(
    statement: str,
    config: ServerConfig,
    page_size: Optional[int] = None,
    offset: Optional[int] = None,
) -> PageWindow:
    """
    Append LIMIT/OFFSET to a read-only statement when appropriate.

    Statements that already mention LIMIT or OFFSET, and single-row
    aggregates, pass through unchanged.
    """
    upper_statement = statement.upper()
    if _PAGINATED_RE.search(upper_statement):
        reported_size = page_size if page_size is not None else config.default_page_size
        return PageWindow(statement, reported_size, offset or 0)

    size = effective_page_size(page_size, config)
    start = offset or 0

    if is_single_row_aggregate(statement):
        return PageWindow(statement, size, start)

    base = statement.rstrip().rstrip(";").rstrip()
    # A trailing -- comment would swallow the LIMIT clause
    if "--" in base.rsplit("\n", 1)[-1]:
        base += "\n"
    rewritten = base + f" LIMIT {size}"
    if start > 0:
        rewritten += f" OFFSET {start}"
    return PageWindow(rewritten, size, start, applied=True)
