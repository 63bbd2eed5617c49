"""Catalog introspection queries.

Fixed SQL with driver-bound parameters. These bypass the safety gate and the
pagination/substitution stages entirely. Literal ``%`` in the SQL is written
``%%`` because psycopg2 interpolates ``%s`` parameters.
"""

from typing import Optional

from .db import Database

DEFAULT_SCHEMA = "public"

DESCRIBE_TABLE_SQL = """
SELECT
    column_name,
    data_type,
    character_maximum_length,
    is_nullable,
    column_default
FROM information_schema.columns
WHERE table_schema = %s
  AND table_name = %s
ORDER BY ordinal_position
"""

CONSTRAINTS_SQL = """
SELECT
    c.conname AS constraint_name,
    CASE c.contype
        WHEN 'p' THEN 'PRIMARY KEY'
        WHEN 'f' THEN 'FOREIGN KEY'
        WHEN 'u' THEN 'UNIQUE'
        WHEN 'c' THEN 'CHECK'
        ELSE c.contype::text
    END AS constraint_type,
    pg_get_constraintdef(c.oid) AS constraint_definition
FROM pg_constraint c
JOIN pg_namespace n ON n.oid = c.connamespace
JOIN pg_class cl ON cl.oid = c.conrelid
WHERE n.nspname = %s
  AND cl.relname = %s
ORDER BY c.conname
"""

LIST_TABLES_SQL = """
SELECT table_name, table_type
FROM information_schema.tables
WHERE table_schema = %s
  AND table_type IN ('BASE TABLE', 'VIEW')
ORDER BY table_name
"""

LIST_VIEWS_SQL = """
SELECT
    table_schema AS schema_name,
    table_name AS view_name,
    view_definition,
    is_updatable,
    check_option
FROM information_schema.views
WHERE table_schema = %s
ORDER BY table_name
"""

LIST_SCHEMAS_SQL = """
SELECT schema_name, schema_owner
FROM information_schema.schemata
{where}
ORDER BY schema_name
"""

LIST_SCHEMAS_USER_FILTER = """
WHERE schema_name NOT IN ('pg_catalog', 'information_schema', 'pg_toast')
  AND schema_name !~ '^pg_(toast_)?temp_'
"""

LIST_INDEXES_SQL = """
SELECT
    schemaname AS schema_name,
    tablename AS table_name,
    indexname AS index_name,
    CASE
        WHEN indexdef LIKE '%%USING btree%%' THEN 'btree'
        WHEN indexdef LIKE '%%USING hash%%' THEN 'hash'
        WHEN indexdef LIKE '%%USING gin%%' THEN 'gin'
        WHEN indexdef LIKE '%%USING gist%%' THEN 'gist'
        WHEN indexdef LIKE '%%USING spgist%%' THEN 'sp-gist'
        WHEN indexdef LIKE '%%USING brin%%' THEN 'brin'
        ELSE 'unknown'
    END AS index_type,
    indexdef LIKE '%%UNIQUE%%' AS is_unique,
    indexname LIKE '%%\\_pkey' AS is_primary,
    regexp_replace(
        regexp_replace(indexdef, '.*\\((.*?)\\).*', '\\1'),
        ' COLLATE [^,)]+', '', 'g'
    ) AS columns,
    indexdef AS definition,
    pg_relation_size(quote_ident(schemaname) || '.' || quote_ident(indexname)) AS size_bytes
FROM pg_indexes
WHERE schemaname = %s
{table_filter}
ORDER BY tablename, indexname
"""

LIST_FUNCTIONS_SQL = """
SELECT
    n.nspname AS schema_name,
    p.proname AS function_name,
    pg_get_function_result(p.oid) AS return_type,
    pg_get_function_arguments(p.oid) AS argument_types,
    CASE p.prokind
        WHEN 'f' THEN 'function'
        WHEN 'p' THEN 'procedure'
        WHEN 'a' THEN 'aggregate'
        WHEN 'w' THEN 'window'
        ELSE 'unknown'
    END AS function_type,
    l.lanname AS language,
    p.prokind = 'a' AS is_aggregate,
    p.prokind = 'w' AS is_window,
    CASE WHEN p.prosecdef THEN 'definer' ELSE 'invoker' END AS security_type,
    CASE p.provolatile
        WHEN 'i' THEN 'immutable'
        WHEN 's' THEN 'stable'
        WHEN 'v' THEN 'volatile'
        ELSE 'unknown'
    END AS volatility,
    CASE p.proparallel
        WHEN 's' THEN 'safe'
        WHEN 'r' THEN 'restricted'
        WHEN 'u' THEN 'unsafe'
        ELSE 'unknown'
    END AS parallel_safety,
    obj_description(p.oid, 'pg_proc') AS description
FROM pg_proc p
JOIN pg_namespace n ON n.oid = p.pronamespace
JOIN pg_language l ON l.oid = p.prolang
WHERE n.nspname = %s
  AND p.prokind IN ('f', 'p', 'a', 'w')
ORDER BY function_type, function_name
"""

TABLE_STATS_SQL = """
SELECT
    s.schemaname AS schema_name,
    s.relname AS table_name,
    s.n_live_tup AS live_rows,
    s.n_dead_tup AS dead_rows,
    pg_total_relation_size(s.relid) AS total_size_bytes,
    pg_relation_size(s.relid) AS table_size_bytes,
    pg_indexes_size(s.relid) AS indexes_size_bytes,
    s.seq_scan,
    s.idx_scan,
    s.last_vacuum,
    s.last_autovacuum,
    s.last_analyze,
    s.last_autoanalyze
FROM pg_stat_user_tables s
WHERE s.schemaname = %s
{table_filter}
ORDER BY s.relname
"""


def describe_table(db: Database, schema: str, table: str) -> list[dict]:
    """Columns of a table in ordinal order."""
    rows = db.execute(DESCRIBE_TABLE_SQL, [schema, table]).rows
    return [
        {
            "name": row["column_name"],
            "data_type": row["data_type"],
            "max_length": row["character_maximum_length"],
            "nullable": row["is_nullable"] == "YES",
            "default": row["column_default"],
        }
        for row in rows
    ]


def get_constraints(db: Database, schema: str, table: str) -> list[dict]:
    rows = db.execute(CONSTRAINTS_SQL, [schema, table]).rows
    return [
        {
            "name": row["constraint_name"],
            "type": row["constraint_type"],
            "definition": row["constraint_definition"],
        }
        for row in rows
    ]


def list_tables(db: Database, schema: Optional[str] = None) -> list[dict]:
    rows = db.execute(LIST_TABLES_SQL, [schema or DEFAULT_SCHEMA]).rows
    return [{"name": row["table_name"], "type": row["table_type"]} for row in rows]


def list_views(db: Database, schema: Optional[str] = None) -> list[dict]:
    rows = db.execute(LIST_VIEWS_SQL, [schema or DEFAULT_SCHEMA]).rows
    return [
        {
            "schema": row["schema_name"],
            "name": row["view_name"],
            "definition": row["view_definition"],
            "updatable": row["is_updatable"] == "YES",
            "check_option": row["check_option"],
        }
        for row in rows
    ]


def list_schemas(db: Database, include_system_schemas: bool = False) -> list[dict]:
    """Schemas with owners; system schemas only when asked for."""
    where = "" if include_system_schemas else LIST_SCHEMAS_USER_FILTER
    rows = db.execute(LIST_SCHEMAS_SQL.format(where=where)).rows
    return [{"name": row["schema_name"], "owner": row["schema_owner"]} for row in rows]


def list_indexes(db: Database, schema: str, table: Optional[str] = None) -> list[dict]:
    """Indexes of one table, or of every table in the schema."""
    params = [schema]
    table_filter = ""
    if table:
        table_filter = "  AND tablename = %s"
        params.append(table)
    rows = db.execute(LIST_INDEXES_SQL.format(table_filter=table_filter), params).rows
    return [
        {
            "schema": row["schema_name"],
            "table": row["table_name"],
            "name": row["index_name"],
            "type": row["index_type"],
            "unique": bool(row["is_unique"]),
            "primary": bool(row["is_primary"]),
            "columns": row["columns"],
            "definition": row["definition"],
            "size_bytes": row["size_bytes"],
        }
        for row in rows
    ]


def list_functions(db: Database, schema: Optional[str] = None) -> list[dict]:
    rows = db.execute(LIST_FUNCTIONS_SQL, [schema or DEFAULT_SCHEMA]).rows
    return [
        {
            "schema": row["schema_name"],
            "name": row["function_name"],
            "return_type": row["return_type"],
            "argument_types": row["argument_types"],
            "kind": row["function_type"],
            "language": row["language"],
            "is_aggregate": bool(row["is_aggregate"]),
            "is_window": bool(row["is_window"]),
            "security": row["security_type"],
            "volatility": row["volatility"],
            "parallel_safety": row["parallel_safety"],
            "description": row["description"],
        }
        for row in rows
    ]


def get_table_stats(db: Database, schema: str, table: Optional[str] = None) -> list[dict]:
    """Size and activity statistics from pg_stat_user_tables."""
    params = [schema]
    table_filter = ""
    if table:
        table_filter = "  AND s.relname = %s"
        params.append(table)
    rows = db.execute(TABLE_STATS_SQL.format(table_filter=table_filter), params).rows
    return [
        {
            "schema": row["schema_name"],
            "table": row["table_name"],
            "live_rows": row["live_rows"],
            "dead_rows": row["dead_rows"],
            "total_size_bytes": row["total_size_bytes"],
            "table_size_bytes": row["table_size_bytes"],
            "indexes_size_bytes": row["indexes_size_bytes"],
            "seq_scan": row["seq_scan"],
            "idx_scan": row["idx_scan"],
            "last_vacuum": row["last_vacuum"],
            "last_autovacuum": row["last_autovacuum"],
            "last_analyze": row["last_analyze"],
            "last_autoanalyze": row["last_autoanalyze"],
        }
        for row in rows
    ]
