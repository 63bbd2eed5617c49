"""Pytest configuration and fixtures."""

import pytest

from pgkit.core.config import ServerConfig
from pgkit.core.db import ExecutionResult, _jsonable

DB_ENV_VARS = (
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
    "DB_POOL_MAX",
    "DB_IDLE_TIMEOUT",
    "DB_CONNECTION_TIMEOUT",
    "DB_QUERY_TIMEOUT",
    "DB_SSL",
    "DB_SSL_REJECT_UNAUTHORIZED",
    "DB_SSL_CA_CERT",
    "DB_SSL_ALLOW_SELF_SIGNED",
    "READ_ONLY",
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
)


class FakeDatabase:
    """Stands in for Database: records statements and replays canned results."""

    def __init__(self):
        self.executed = []
        self.results = []
        self.error = None
        self.healthy = True

    def queue(self, rows=None, rowcount=None):
        """Queue the result of the next execute call, converted the way Database.execute converts rows."""
        rows = [{key: _jsonable(value) for key, value in row.items()} for row in rows or []]
        if rowcount is None:
            rowcount = len(rows)
        self.results.append(ExecutionResult(rows=rows, rowcount=rowcount))

    def execute(self, statement, params=None, rollback=False):
        self.executed.append({"statement": statement, "params": params, "rollback": rollback})
        if self.error is not None:
            raise self.error
        if self.results:
            return self.results.pop(0)
        return ExecutionResult()

    @property
    def last_statement(self):
        return self.executed[-1]["statement"]

    def health_check(self):
        if self.healthy:
            return {"healthy": True}
        return {"healthy": False, "error": "connection refused"}

    def close(self):
        pass


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every pgkit environment variable."""
    for name in DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mock_env(clean_env):
    """Set environment variables for testing."""
    def _set_env(**kwargs):
        for key, value in kwargs.items():
            clean_env.setenv(key, value)
    return _set_env


@pytest.fixture
def config():
    """Read-only config with small page sizes."""
    return ServerConfig(password="secret", default_page_size=100, max_page_size=500)


@pytest.fixture
def write_config():
    """Config with read-only mode off."""
    return ServerConfig(password="secret", read_only=False)


@pytest.fixture
def fake_db():
    """Fake database handle."""
    return FakeDatabase()
