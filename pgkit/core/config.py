"""Server configuration from environment.

Read once at process start by ``load_config()``; the resulting
``ServerConfig`` is immutable and passed explicitly to the pieces that need it.
"""

import math
import os
from dataclasses import dataclass
from typing import Optional

from .guards import ConfigError

HARD_MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide settings."""

    host: str = "127.0.0.1"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    database: str = "postgres"
    pool_max: int = 5
    idle_timeout_ms: int = 5000
    connection_timeout_ms: int = 10000
    query_timeout_ms: int = 30000
    ssl_mode: str = "verify-full"
    ssl_root_cert: Optional[str] = None
    read_only: bool = True
    max_page_size: int = HARD_MAX_PAGE_SIZE
    default_page_size: int = 100

    def connect_kwargs(self) -> dict:
        """Keyword arguments for ``psycopg2.connect``."""
        kwargs = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "dbname": self.database,
            "sslmode": self.ssl_mode,
            # libpq takes whole seconds
            "connect_timeout": max(1, math.ceil(self.connection_timeout_ms / 1000)),
            "options": f"-c statement_timeout={self.query_timeout_ms}",
            "application_name": "pgkit",
        }
        if self.read_only:
            # Writes hidden inside CTEs or extra statements fail at the server
            kwargs["options"] += " -c default_transaction_read_only=on"
        if self.ssl_root_cert:
            kwargs["sslrootcert"] = self.ssl_root_cert
        return kwargs


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got: {raw!r}")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be true or false, got: {raw!r}")


def get_ssl_mode() -> str:
    """Map the DB_SSL* environment variables to a libpq sslmode.

    DB_SSL=false disables SSL. Certificate verification is on unless
    DB_SSL_REJECT_UNAUTHORIZED=false or DB_SSL_ALLOW_SELF_SIGNED=true.
    """
    if os.getenv("DB_SSL", "").strip().lower() == "false":
        return "disable"
    verify = _get_bool("DB_SSL_REJECT_UNAUTHORIZED", True)
    if _get_bool("DB_SSL_ALLOW_SELF_SIGNED", False):
        verify = False
    return "verify-full" if verify else "require"


def load_config() -> ServerConfig:
    """Build ServerConfig from environment. Raises ConfigError on bad values."""
    password = os.getenv("DB_PASSWORD")
    if not password:
        raise ConfigError("DB_PASSWORD environment variable is required")

    max_page_size = _get_int("MAX_PAGE_SIZE", HARD_MAX_PAGE_SIZE)
    if not 1 <= max_page_size <= HARD_MAX_PAGE_SIZE:
        raise ConfigError(f"MAX_PAGE_SIZE must be between 1 and {HARD_MAX_PAGE_SIZE}, got: {max_page_size}")

    default_page_size = _get_int("DEFAULT_PAGE_SIZE", 100)
    if default_page_size < 1:
        raise ConfigError(f"DEFAULT_PAGE_SIZE must be positive, got: {default_page_size}")

    pool_max = _get_int("DB_POOL_MAX", 5)
    if pool_max < 1:
        raise ConfigError(f"DB_POOL_MAX must be positive, got: {pool_max}")

    return ServerConfig(
        host=os.getenv("DB_HOST", "127.0.0.1"),
        port=_get_int("DB_PORT", 5432),
        user=os.getenv("DB_USER", "postgres"),
        password=password,
        database=os.getenv("DB_NAME", "postgres"),
        pool_max=pool_max,
        idle_timeout_ms=_get_int("DB_IDLE_TIMEOUT", 5000),
        connection_timeout_ms=_get_int("DB_CONNECTION_TIMEOUT", 10000),
        query_timeout_ms=_get_int("DB_QUERY_TIMEOUT", 30000),
        ssl_mode=get_ssl_mode(),
        ssl_root_cert=os.getenv("DB_SSL_CA_CERT") or None,
        read_only=_get_bool("READ_ONLY", True),
        max_page_size=max_page_size,
        default_page_size=min(default_page_size, max_page_size),
    )
