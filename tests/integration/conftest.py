"""Pytest configuration for MCP protocol integration tests.

This module provides fixtures for true blackbox integration testing using
the full MCP protocol: starting a real pgkit server process and connecting
to it via the official MCP Python SDK client.

The server talks to the PostgreSQL test database (testuser/testpass@localhost/testdb,
overridable with PGKIT_TEST_* variables). Tests are skipped when it is not reachable.
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict

import psycopg2
import pytest
from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client


def _server_env() -> Dict[str, str]:
    env = os.environ.copy()
    env.update(
        DB_HOST=os.getenv("PGKIT_TEST_HOST", "localhost"),
        DB_PORT=os.getenv("PGKIT_TEST_PORT", "5432"),
        DB_USER=os.getenv("PGKIT_TEST_USER", "testuser"),
        DB_PASSWORD=os.getenv("PGKIT_TEST_PASSWORD", "testpass"),
        DB_NAME=os.getenv("PGKIT_TEST_DB", "testdb"),
        DB_SSL="false",
        READ_ONLY="true",
        LOG_LEVEL="WARNING",
    )
    return env


@pytest.fixture(scope="session")
def postgres_available():
    """Skip the session's protocol tests when PostgreSQL is not reachable."""
    env = _server_env()
    try:
        conn = psycopg2.connect(
            host=env["DB_HOST"],
            port=int(env["DB_PORT"]),
            user=env["DB_USER"],
            password=env["DB_PASSWORD"],
            dbname=env["DB_NAME"],
            connect_timeout=2,
        )
    except psycopg2.OperationalError:
        pytest.skip("PostgreSQL not available, skipping MCP protocol tests")
    conn.close()


@pytest.fixture(scope="session")
def mcp_client(postgres_available):
    """Create MCP client connected to a real pgkit server via stdio.

    This fixture provides a true blackbox test client that:
    - Starts `python -m pgkit.server` (session-scoped, reused)
    - Connects using the official MCP Python SDK
    - Returns each tool's JSON payload as a dict
    """
    class MCPTestClient:
        """Test client for calling MCP tools through full protocol."""

        def __init__(self):
            self._loop = asyncio.new_event_loop()
            self._session = None
            self._stdio_ctx = None
            self._session_ctx = None

        async def _ensure_session(self):
            """Ensure MCP session is initialized (lazy initialization)."""
            if self._session is not None:
                return self._session

            server_params = StdioServerParameters(
                command=sys.executable,
                args=["-m", "pgkit.server"],
                env=_server_env(),
            )
            self._stdio_ctx = stdio_client(server_params)
            read, write = await self._stdio_ctx.__aenter__()

            self._session_ctx = ClientSession(read, write)
            self._session = await self._session_ctx.__aenter__()
            await asyncio.wait_for(self._session.initialize(), timeout=10.0)
            return self._session

        def call_tool_sync(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
            """Call an MCP tool via full protocol.

            Tool-level failures come back as failure envelopes, so anything the
            protocol itself flags as an error is raised.
            """
            async def _call():
                session = await self._ensure_session()
                result = await asyncio.wait_for(session.call_tool(name, arguments), timeout=30.0)
                text = result.content[0].text if result.content else ""
                if result.isError:
                    raise RuntimeError(text)
                return json.loads(text)

            return self._loop.run_until_complete(_call())

        def cleanup(self):
            """Cleanup session and process."""
            if self._session_ctx is not None:
                self._loop.run_until_complete(self._session_ctx.__aexit__(None, None, None))
                self._session_ctx = None
                self._session = None
            if self._stdio_ctx is not None:
                self._loop.run_until_complete(self._stdio_ctx.__aexit__(None, None, None))
                self._stdio_ctx = None
            self._loop.close()

    client = MCPTestClient()
    yield client
    client.cleanup()
