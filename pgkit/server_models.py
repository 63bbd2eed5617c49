"""Pydantic response models for MCP server tools."""

from datetime import datetime
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Shared
# ============================================================================

class FailureResponse(BaseModel):
    """Failure envelope returned instead of a tool's success payload."""
    kind: Literal["failure"] = "failure"
    message: str = Field(description="Error message")
    error_kind: str = Field(description="Error category, e.g. SAFETY_REJECTED, SYNTAX_ERROR")
    hint: Optional[str] = Field(default=None, description="Suggestion for correcting the request")


class SchemaScoped(BaseModel):
    """Base for entries carrying a schema name (serialized as 'schema')."""
    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    schema_name: str = Field(alias="schema", description="Schema name")


# ============================================================================
# Query Models
# ============================================================================

class Pagination(BaseModel):
    """Pagination metadata for read-only queries."""
    has_more: bool = Field(description="True when a full page was returned (more rows may follow)")
    page_size: int = Field(description="Page size used")
    offset: int = Field(description="Offset used")


class QueryRowsResponse(BaseModel):
    """Rows returned by a SELECT, WITH or EXPLAIN statement."""
    kind: Literal["rows"] = "rows"
    rows: list[dict[str, Any]] = Field(description="Result rows as column -> value mappings")
    row_count: int = Field(description="Number of rows returned")
    pagination: Pagination = Field(description="Pagination metadata")


class QueryAffectedResponse(BaseModel):
    """Outcome of a write statement."""
    kind: Literal["affected"] = "affected"
    row_count: int = Field(description="Number of rows affected")


class ExplainResponse(BaseModel):
    """Execution plan for a statement."""
    kind: Literal["plan"] = "plan"
    format: str = Field(description="Plan format: text, json, xml or yaml")
    plan: Union[str, list, dict] = Field(description="Plan text, or parsed plan for json format")


QueryResponse = Union[QueryRowsResponse, QueryAffectedResponse, FailureResponse]


# ============================================================================
# Catalog Models
# ============================================================================

class ColumnInfo(BaseModel):
    """Table column information."""
    name: str = Field(description="Column name")
    data_type: str = Field(description="Column data type")
    max_length: Optional[int] = Field(default=None, description="Maximum character length, if any")
    nullable: bool = Field(description="Whether column is nullable")
    default: Optional[str] = Field(default=None, description="Column default expression")


class DescribeTableResponse(SchemaScoped):
    """Response for describe_table."""
    kind: Literal["columns"] = "columns"
    table: str = Field(description="Table name")
    columns: list[ColumnInfo] = Field(description="Columns in ordinal order")
    column_count: int = Field(description="Number of columns")


class ConstraintInfo(BaseModel):
    """Table constraint information."""
    name: str = Field(description="Constraint name")
    type: str = Field(description="PRIMARY KEY, FOREIGN KEY, UNIQUE or CHECK")
    definition: str = Field(description="Constraint definition")


class ConstraintsResponse(SchemaScoped):
    """Response for get_constraints."""
    kind: Literal["constraints"] = "constraints"
    table: str = Field(description="Table name")
    constraints: list[ConstraintInfo] = Field(description="Constraints ordered by name")


class TableInfo(BaseModel):
    """Table or view name and type."""
    name: str = Field(description="Table name")
    type: str = Field(description="BASE TABLE or VIEW")


class TableListResponse(SchemaScoped):
    """Response for list_tables."""
    kind: Literal["tables"] = "tables"
    tables: list[TableInfo] = Field(description="Tables ordered by name")
    table_count: int = Field(description="Number of tables")


class SchemaInfo(BaseModel):
    """Schema name and owner."""
    name: str = Field(description="Schema name")
    owner: str = Field(description="Schema owner")


class SchemaListResponse(BaseModel):
    """Response for list_schemas."""
    kind: Literal["schemas"] = "schemas"
    schemas: list[SchemaInfo] = Field(description="Schemas ordered by name")
    schema_count: int = Field(description="Number of schemas")


class IndexInfo(SchemaScoped):
    """Index information."""
    table: str = Field(description="Table name")
    name: str = Field(description="Index name")
    type: str = Field(description="btree, hash, gin, gist, sp-gist, brin or unknown")
    unique: bool = Field(description="Whether the index is unique")
    primary: bool = Field(description="Whether the index backs the primary key")
    columns: str = Field(description="Indexed columns or expressions")
    definition: str = Field(description="CREATE INDEX definition")
    size_bytes: Optional[int] = Field(default=None, description="Index size in bytes")


class IndexListResponse(SchemaScoped):
    """Response for list_indexes."""
    kind: Literal["indexes"] = "indexes"
    indexes: list[IndexInfo] = Field(description="Indexes ordered by table and name")
    index_count: int = Field(description="Number of indexes")


class ViewInfo(SchemaScoped):
    """View information."""
    name: str = Field(description="View name")
    definition: Optional[str] = Field(default=None, description="View query")
    updatable: bool = Field(description="Whether the view is updatable")
    check_option: Optional[str] = Field(default=None, description="CHECK OPTION setting")


class ViewListResponse(SchemaScoped):
    """Response for list_views."""
    kind: Literal["views"] = "views"
    views: list[ViewInfo] = Field(description="Views ordered by name")
    view_count: int = Field(description="Number of views")


class FunctionInfo(SchemaScoped):
    """Function or procedure information."""
    name: str = Field(description="Function name")
    return_type: Optional[str] = Field(default=None, description="Return type")
    argument_types: str = Field(description="Argument list")
    kind: str = Field(description="function, procedure, aggregate or window")
    language: str = Field(description="Implementation language")
    is_aggregate: bool = Field(description="Whether this is an aggregate")
    is_window: bool = Field(description="Whether this is a window function")
    security: str = Field(description="definer or invoker")
    volatility: str = Field(description="immutable, stable or volatile")
    parallel_safety: str = Field(description="safe, restricted or unsafe")
    description: Optional[str] = Field(default=None, description="Comment on the function")


class FunctionListResponse(SchemaScoped):
    """Response for list_functions."""
    kind: Literal["functions"] = "functions"
    functions: list[FunctionInfo] = Field(description="Functions ordered by kind and name")
    function_count: int = Field(description="Number of functions")


class TableStats(SchemaScoped):
    """Size and activity statistics for one table."""
    table: str = Field(description="Table name")
    live_rows: Optional[int] = Field(default=None, description="Estimated live rows")
    dead_rows: Optional[int] = Field(default=None, description="Estimated dead rows")
    total_size_bytes: Optional[int] = Field(default=None, description="Table, indexes and TOAST size")
    table_size_bytes: Optional[int] = Field(default=None, description="Main table size")
    indexes_size_bytes: Optional[int] = Field(default=None, description="Size of all indexes")
    seq_scan: Optional[int] = Field(default=None, description="Sequential scans")
    idx_scan: Optional[int] = Field(default=None, description="Index scans")
    last_vacuum: Optional[datetime] = Field(default=None, description="Last manual vacuum")
    last_autovacuum: Optional[datetime] = Field(default=None, description="Last autovacuum")
    last_analyze: Optional[datetime] = Field(default=None, description="Last manual analyze")
    last_autoanalyze: Optional[datetime] = Field(default=None, description="Last autoanalyze")


class TableStatsResponse(SchemaScoped):
    """Response for get_table_stats."""
    kind: Literal["stats"] = "stats"
    tables: list[TableStats] = Field(description="Statistics per table")
    table_count: int = Field(description="Number of tables")


class HealthResponse(BaseModel):
    """Response for health_check."""
    healthy: bool = Field(description="Whether the database answered")
    error: Optional[str] = Field(default=None, description="Connection error, if unhealthy")
