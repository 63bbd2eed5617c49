"""PostgreSQL connectivity handle.

``Database`` is constructed once by the server entry point and passed to the
tools that need it. It owns a psycopg2 connection pool, created on first use,
and ``close()`` drains it on shutdown. Statement timeouts are enforced by the
server through the ``statement_timeout`` session option.
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

import psycopg2
import psycopg2.pool
from psycopg2.extras import Range, RealDictCursor

from .config import ServerConfig
from .guards import GuardError

logger = logging.getLogger(__name__)

HEALTH_CHECK_SQL = "SELECT table_name FROM information_schema.tables LIMIT 1"


@dataclass
class ExecutionResult:
    """Rows (for statements that return any) and the backend row count."""
    rows: list[dict] = field(default_factory=list)
    rowcount: int = -1


def _jsonable(value: Any) -> Any:
    """Convert driver values pydantic cannot serialize: bytea and range types."""
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        return "\\x" + bytes(value).hex()
    if isinstance(value, Range):
        return {
            "lower": _jsonable(value.lower),
            "upper": _jsonable(value.upper),
            "bounds": ("[" if value.lower_inc else "(") + ("]" if value.upper_inc else ")"),
            "empty": value.isempty,
        }
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


class Database:
    """Pooled PostgreSQL access for one server process."""

    def __init__(self, config: ServerConfig):
        self.config = config
        self._pool: Optional[psycopg2.pool.ThreadedConnectionPool] = None
        self._lock = threading.Lock()
        self._last_used: dict[int, float] = {}
        self._closed = False

    def _get_pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        with self._lock:
            if self._closed:
                raise GuardError("Database handle is closed")
            if self._pool is None:
                self._pool = psycopg2.pool.ThreadedConnectionPool(
                    1, self.config.pool_max, **self.config.connect_kwargs()
                )
                logger.info(
                    f"Connection pool opened: {self.config.host}:{self.config.port}/{self.config.database} "
                    f"(max {self.config.pool_max})"
                )
            return self._pool

    def _is_stale(self, conn) -> bool:
        if conn.closed:
            return True
        last_used = self._last_used.get(id(conn))
        if last_used is None or self.config.idle_timeout_ms <= 0:
            return False
        return (time.monotonic() - last_used) * 1000 > self.config.idle_timeout_ms

    def _discard(self, pool, conn) -> None:
        self._last_used.pop(id(conn), None)
        pool.putconn(conn, close=True)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Check a connection out of the pool, replacing closed or idle ones."""
        pool = self._get_pool()
        conn = pool.getconn()
        if self._is_stale(conn):
            logger.debug("Recycling stale pooled connection")
            self._discard(pool, conn)
            conn = pool.getconn()

        broken = False
        try:
            yield conn
        except (psycopg2.InterfaceError, psycopg2.OperationalError):
            broken = True
            raise
        finally:
            if broken or conn.closed:
                self._discard(pool, conn)
            else:
                self._last_used[id(conn)] = time.monotonic()
                pool.putconn(conn)

    def execute(
        self,
        statement: str,
        params: Optional[Sequence[Any]] = None,
        rollback: bool = False,
    ) -> ExecutionResult:
        """
        Execute one statement and collect its rows.

        Statements run in autocommit mode. With ``rollback=True`` the
        statement runs inside a transaction that is always rolled back.
        ``params`` are driver-bound (``%s`` placeholders) and are only used
        by the fixed catalog queries.
        """
        logger.debug(f"Executing: {statement[:500]}")
        with self.connection() as conn:
            conn.autocommit = not rollback
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                    cursor.execute(statement, params)
                    rows = []
                    if cursor.description is not None:
                        rows = [
                            {key: _jsonable(value) for key, value in row.items()}
                            for row in cursor.fetchall()
                        ]
                    return ExecutionResult(rows=rows, rowcount=cursor.rowcount)
            finally:
                if rollback and not conn.closed:
                    conn.rollback()

    def health_check(self) -> dict:
        """Run a trivial catalog query. Returns {"healthy": bool, "error"?: str}."""
        try:
            self.execute(HEALTH_CHECK_SQL)
            return {"healthy": True}
        except (psycopg2.Error, GuardError) as e:
            logger.warning(f"Health check failed: {e}")
            return {"healthy": False, "error": str(e)}

    def close(self) -> None:
        """Close every pooled connection. The handle cannot be reused."""
        with self._lock:
            self._closed = True
            if self._pool is not None and not self._pool.closed:
                self._pool.closeall()
                logger.info("Connection pool closed")
            self._pool = None
            self._last_used.clear()
