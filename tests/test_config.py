"""Tests for configuration loading."""

import pytest

from pgkit.core.config import ServerConfig, get_ssl_mode, load_config
from pgkit.core.guards import ConfigError


def test_load_config_defaults(mock_env):
    """Test defaults with only the password set."""
    mock_env(DB_PASSWORD="secret")
    config = load_config()
    assert config.host == "127.0.0.1"
    assert config.port == 5432
    assert config.user == "postgres"
    assert config.database == "postgres"
    assert config.pool_max == 5
    assert config.idle_timeout_ms == 5000
    assert config.connection_timeout_ms == 10000
    assert config.query_timeout_ms == 30000
    assert config.ssl_mode == "verify-full"
    assert config.read_only is True
    assert config.max_page_size == 500
    assert config.default_page_size == 100


def test_load_config_requires_password(clean_env):
    """Test missing DB_PASSWORD is an error."""
    with pytest.raises(ConfigError, match="DB_PASSWORD"):
        load_config()


def test_load_config_env(mock_env):
    """Test values from env."""
    mock_env(
        DB_HOST="db.internal",
        DB_PORT="6543",
        DB_USER="reporter",
        DB_PASSWORD="secret",
        DB_NAME="analytics",
        DB_POOL_MAX="10",
        READ_ONLY="false",
        MAX_PAGE_SIZE="200",
        DEFAULT_PAGE_SIZE="50",
    )
    config = load_config()
    assert config.host == "db.internal"
    assert config.port == 6543
    assert config.user == "reporter"
    assert config.database == "analytics"
    assert config.pool_max == 10
    assert config.read_only is False
    assert config.max_page_size == 200
    assert config.default_page_size == 50


def test_load_config_bad_integer(mock_env):
    """Test malformed integers raise ConfigError."""
    mock_env(DB_PASSWORD="secret", DB_PORT="five")
    with pytest.raises(ConfigError, match="DB_PORT"):
        load_config()


def test_load_config_bad_bool(mock_env):
    """Test malformed booleans raise ConfigError."""
    mock_env(DB_PASSWORD="secret", READ_ONLY="maybe")
    with pytest.raises(ConfigError, match="READ_ONLY"):
        load_config()


def test_load_config_max_page_size_bounds(mock_env):
    """Test MAX_PAGE_SIZE cannot exceed 500."""
    mock_env(DB_PASSWORD="secret", MAX_PAGE_SIZE="1000")
    with pytest.raises(ConfigError, match="MAX_PAGE_SIZE"):
        load_config()


def test_load_config_default_clamped(mock_env):
    """Test DEFAULT_PAGE_SIZE is clamped to MAX_PAGE_SIZE."""
    mock_env(DB_PASSWORD="secret", MAX_PAGE_SIZE="20", DEFAULT_PAGE_SIZE="100")
    assert load_config().default_page_size == 20


def test_ssl_disabled(mock_env):
    """Test DB_SSL=false disables SSL."""
    mock_env(DB_SSL="false")
    assert get_ssl_mode() == "disable"


def test_ssl_no_verify(mock_env):
    """Test skipping certificate verification."""
    mock_env(DB_SSL_REJECT_UNAUTHORIZED="false")
    assert get_ssl_mode() == "require"


def test_ssl_self_signed(mock_env):
    """Test allowing self-signed certificates."""
    mock_env(DB_SSL_ALLOW_SELF_SIGNED="true")
    assert get_ssl_mode() == "require"


def test_ssl_default_verifies(clean_env):
    """Test certificates are verified by default."""
    assert get_ssl_mode() == "verify-full"


def test_connect_kwargs():
    """Test psycopg2 connection arguments."""
    config = ServerConfig(
        host="h",
        port=1,
        user="u",
        password="p",
        database="d",
        connection_timeout_ms=2500,
        query_timeout_ms=1000,
        ssl_mode="require",
        ssl_root_cert="/etc/ca.pem",
        read_only=False,
    )
    kwargs = config.connect_kwargs()
    assert kwargs["dbname"] == "d"
    assert kwargs["connect_timeout"] == 3
    assert kwargs["options"] == "-c statement_timeout=1000"
    assert kwargs["sslmode"] == "require"
    assert kwargs["sslrootcert"] == "/etc/ca.pem"


def test_connect_kwargs_without_ca():
    """Test sslrootcert is omitted when unset."""
    assert "sslrootcert" not in ServerConfig(password="p").connect_kwargs()


def test_connect_kwargs_read_only_session():
    """Test read-only mode makes every transaction read-only at the server."""
    kwargs = ServerConfig(password="p", query_timeout_ms=1000, read_only=True).connect_kwargs()
    assert kwargs["options"] == "-c statement_timeout=1000 -c default_transaction_read_only=on"


def test_connect_kwargs_write_mode_session():
    """Test write mode leaves transactions writable."""
    kwargs = ServerConfig(password="p", read_only=False).connect_kwargs()
    assert "default_transaction_read_only" not in kwargs["options"]
