"""Catalog introspection tools for MCP server."""

from typing import Annotated, Any, Optional, Union

import psycopg2
from fastmcp import FastMCP
from pydantic import Field

from pgkit.core import catalog
from pgkit.core.db import Database
from pgkit.core.guards import GuardError
from pgkit.core.validation import (
    ListSchemasInput,
    OptionalSchemaInput,
    SchemaTableInput,
    TableInput,
    validate_input,
)
from pgkit.server_models import (
    ColumnInfo,
    ConstraintInfo,
    ConstraintsResponse,
    DescribeTableResponse,
    FailureResponse,
    FunctionInfo,
    FunctionListResponse,
    HealthResponse,
    IndexInfo,
    IndexListResponse,
    SchemaInfo,
    SchemaListResponse,
    TableInfo,
    TableListResponse,
    TableStats,
    TableStatsResponse,
    ViewInfo,
    ViewListResponse,
)
from pgkit.server_utils import failure_response

SchemaArg = Annotated[Any, Field(description="Schema name (letters, digits, underscore; max 63 chars)")]
OptionalSchemaArg = Annotated[Optional[Any], Field(description="Schema name. Default: public")]
TableArg = Annotated[Any, Field(description="Table name (letters, digits, underscore; max 63 chars)")]
OptionalTableArg = Annotated[Optional[Any], Field(description="Optional table name; all tables in the schema when omitted")]


def register_catalog_tools(mcp: FastMCP, db: Database):
    """Register catalog tools with MCP server."""
    # Arguments are typed loosely; the input models reject bad values as VALIDATION_ERROR.

    @mcp.tool()
    def describe_table(
        schema: SchemaArg,
        table: TableArg,
    ) -> Union[DescribeTableResponse, FailureResponse]:
        """Describe the columns of a table: name, data type, max length, nullability and default."""
        try:
            request = validate_input(TableInput, schema=schema, table=table)
            columns = catalog.describe_table(db, request.schema_name, request.table)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return DescribeTableResponse(
            schema=request.schema_name,
            table=request.table,
            columns=[ColumnInfo(**c) for c in columns],
            column_count=len(columns),
        )

    @mcp.tool()
    def get_constraints(
        schema: SchemaArg,
        table: TableArg,
    ) -> Union[ConstraintsResponse, FailureResponse]:
        """List PRIMARY KEY, FOREIGN KEY, UNIQUE and CHECK constraints of a table."""
        try:
            request = validate_input(TableInput, schema=schema, table=table)
            constraints = catalog.get_constraints(db, request.schema_name, request.table)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return ConstraintsResponse(
            schema=request.schema_name,
            table=request.table,
            constraints=[ConstraintInfo(**c) for c in constraints],
        )

    @mcp.tool()
    def list_tables(
        schema: OptionalSchemaArg = None,
    ) -> Union[TableListResponse, FailureResponse]:
        """List base tables and views in a schema."""
        try:
            request = validate_input(OptionalSchemaInput, schema=schema)
            schema_name = request.schema_name or catalog.DEFAULT_SCHEMA
            tables = catalog.list_tables(db, schema_name)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return TableListResponse(
            schema=schema_name,
            tables=[TableInfo(**t) for t in tables],
            table_count=len(tables),
        )

    @mcp.tool()
    def list_schemas(
        include_system_schemas: Annotated[Optional[Any], Field(description="Include pg_catalog, information_schema and pg_toast schemas. Default: false")] = None,
    ) -> Union[SchemaListResponse, FailureResponse]:
        """List schemas with their owners."""
        try:
            request = validate_input(ListSchemasInput, include_system_schemas=include_system_schemas)
            schemas = catalog.list_schemas(db, request.include_system_schemas)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return SchemaListResponse(
            schemas=[SchemaInfo(**s) for s in schemas],
            schema_count=len(schemas),
        )

    @mcp.tool()
    def list_indexes(
        schema: SchemaArg,
        table: OptionalTableArg = None,
    ) -> Union[IndexListResponse, FailureResponse]:
        """List indexes of a table, or of every table in a schema, with type, uniqueness and size."""
        try:
            request = validate_input(SchemaTableInput, schema=schema, table=table)
            indexes = catalog.list_indexes(db, request.schema_name, request.table)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return IndexListResponse(
            schema=request.schema_name,
            indexes=[IndexInfo(**i) for i in indexes],
            index_count=len(indexes),
        )

    @mcp.tool()
    def list_views(
        schema: OptionalSchemaArg = None,
    ) -> Union[ViewListResponse, FailureResponse]:
        """List views in a schema with their definitions."""
        try:
            request = validate_input(OptionalSchemaInput, schema=schema)
            schema_name = request.schema_name or catalog.DEFAULT_SCHEMA
            views = catalog.list_views(db, schema_name)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return ViewListResponse(
            schema=schema_name,
            views=[ViewInfo(**v) for v in views],
            view_count=len(views),
        )

    @mcp.tool()
    def list_functions(
        schema: OptionalSchemaArg = None,
    ) -> Union[FunctionListResponse, FailureResponse]:
        """List functions, procedures, aggregates and window functions in a schema."""
        try:
            request = validate_input(OptionalSchemaInput, schema=schema)
            schema_name = request.schema_name or catalog.DEFAULT_SCHEMA
            functions = catalog.list_functions(db, schema_name)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return FunctionListResponse(
            schema=schema_name,
            functions=[FunctionInfo(**f) for f in functions],
            function_count=len(functions),
        )

    @mcp.tool()
    def get_table_stats(
        schema: SchemaArg,
        table: OptionalTableArg = None,
    ) -> Union[TableStatsResponse, FailureResponse]:
        """Row estimates, on-disk sizes, scan counts and vacuum/analyze times from pg_stat_user_tables."""
        try:
            request = validate_input(SchemaTableInput, schema=schema, table=table)
            stats = catalog.get_table_stats(db, request.schema_name, request.table)
        except (GuardError, psycopg2.Error) as e:
            return failure_response(e)
        return TableStatsResponse(
            schema=request.schema_name,
            tables=[TableStats(**s) for s in stats],
            table_count=len(stats),
        )

    @mcp.tool()
    def health_check() -> HealthResponse:
        """Check that the database answers a trivial query."""
        return HealthResponse(**db.health_check())
