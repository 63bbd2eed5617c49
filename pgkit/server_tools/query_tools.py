"""Query tools for MCP server."""

from typing import Annotated, Any, Optional, Union

from fastmcp import FastMCP
from pydantic import BeforeValidator, Field

from pgkit.core import query as query_ops
from pgkit.core.config import ServerConfig
from pgkit.core.db import Database
from pgkit.core.guards import GuardError
from pgkit.core.validation import ExplainInput, QueryInput, validate_input
from pgkit.server_models import (
    ExplainResponse,
    FailureResponse,
    QueryAffectedResponse,
    QueryResponse,
    QueryRowsResponse,
)
from pgkit.server_utils import _list_validator, failure_response


def register_query_tools(mcp: FastMCP, config: ServerConfig, db: Database):
    """Register query tools with MCP server."""
    # Arguments are typed loosely; the input models reject bad values as VALIDATION_ERROR.

    mode = "read-only: SELECT, WITH and EXPLAIN only" if config.read_only else "read-write"

    @mcp.tool(
        description=(
            "Execute a SQL statement with pagination and $1-style parameters "
            f"(server mode: {mode}). Read-only statements are paged, up to "
            f"{config.max_page_size} rows per page."
        )
    )
    def query(
        statement: Annotated[Any, Field(description="SQL statement; use $1, $2, ... for parameters")],
        parameters: Annotated[Optional[Any], BeforeValidator(_list_validator), Field(description="Optional list of parameters (string, number, boolean or null) matching $1, $2, ...")] = None,
        page_size: Annotated[Optional[Any], Field(description="Rows per page (1-500). Default: DEFAULT_PAGE_SIZE (100)")] = None,
        offset: Annotated[Optional[Any], Field(description="Rows to skip. Default: 0")] = None,
    ) -> QueryResponse:
        """
        Execute a SQL statement.

        **Return Value:**
        - `kind="rows"`: `rows`, `row_count` and `pagination` (`has_more`, `page_size`, `offset`)
        - `kind="affected"`: `row_count` for INSERT/UPDATE/DELETE
        - `kind="failure"`: `message`, `error_kind` and `hint`

        `has_more` is true whenever a full page comes back, including the last page
        when it happens to be exactly full.
        """
        try:
            request = validate_input(
                QueryInput, statement=statement, parameters=parameters, page_size=page_size, offset=offset
            )
        except GuardError as e:
            return failure_response(e)

        result = query_ops.run_query(db, config, request)
        if result["kind"] == "rows":
            return QueryRowsResponse(**result)
        if result["kind"] == "affected":
            return QueryAffectedResponse(**result)
        return FailureResponse(**result)

    @mcp.tool()
    def explain_query(
        statement: Annotated[Any, Field(description="SQL statement to explain")],
        analyze: Annotated[Optional[Any], Field(description="Run the statement and report actual timings (changes are rolled back). Default: false")] = None,
        buffers: Annotated[Optional[Any], Field(description="Include buffer usage (requires analyze on older servers). Default: false")] = None,
        costs: Annotated[Optional[Any], Field(description="Include cost estimates. Default: true")] = None,
        format: Annotated[Optional[Any], Field(description="Plan format: text, json, xml or yaml. Default: text")] = None,
    ) -> Union[ExplainResponse, FailureResponse]:
        """Get the execution plan (EXPLAIN) of a statement. The statement must pass the same safety checks as query."""
        try:
            request = validate_input(
                ExplainInput, statement=statement, analyze=analyze, buffers=buffers, costs=costs, format=format
            )
        except GuardError as e:
            return failure_response(e)

        result = query_ops.explain_query(db, config, request)
        if result["kind"] == "plan":
            return ExplainResponse(**result)
        return FailureResponse(**result)

