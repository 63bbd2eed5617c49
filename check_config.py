#!/usr/bin/env python3
"""Check pgkit configuration and database availability."""

import os
import sys
from typing import Tuple

from dotenv import load_dotenv

SECRET_VARS = {"DB_PASSWORD"}


def check_env_var(name: str, required: bool = False) -> Tuple[bool, str]:
    """Check if environment variable is set."""
    value = os.getenv(name)
    if value:
        shown = "****" if name in SECRET_VARS else value[:50]
        return True, f"✓ {name}={shown}"
    elif required:
        return False, f"✗ {name} (REQUIRED - not set)"
    else:
        return False, f"○ {name} (optional - not set)"


def test_config() -> Tuple[bool, str]:
    """Validate the environment the way the server does at startup."""
    from pgkit.core.config import load_config
    from pgkit.core.guards import ConfigError

    try:
        config = load_config()
    except ConfigError as e:
        return False, f"✗ Config: {e}"
    mode = "read-only" if config.read_only else "read-write"
    return True, (
        f"✓ Config: {config.host}:{config.port}/{config.database} as {config.user} "
        f"({mode}, sslmode={config.ssl_mode}, pages {config.default_page_size}/{config.max_page_size})"
    )


def test_database() -> Tuple[bool, str]:
    """Test PostgreSQL connectivity with the server's health check."""
    from pgkit.core.config import load_config
    from pgkit.core.db import Database
    from pgkit.core.guards import ConfigError

    try:
        config = load_config()
    except ConfigError:
        return False, "✗ PostgreSQL: not configured"
    db = Database(config)
    try:
        health = db.health_check()
    finally:
        db.close()
    if health["healthy"]:
        return True, f"✓ PostgreSQL: {config.host}:{config.port}/{config.database} (connected)"
    return False, f"✗ PostgreSQL: {config.host}:{config.port} ({health['error'][:60]})"


def main():
    """Run all configuration checks."""
    load_dotenv()
    print("🔍 pgkit Configuration Check\n")
    print("=" * 60)

    print("\n🗄️ Connection:")
    print("-" * 60)
    connection_vars = [
        ("DB_HOST", False),
        ("DB_PORT", False),
        ("DB_USER", False),
        ("DB_PASSWORD", True),
        ("DB_NAME", False),
        ("DB_POOL_MAX", False),
        ("DB_IDLE_TIMEOUT", False),
        ("DB_CONNECTION_TIMEOUT", False),
        ("DB_QUERY_TIMEOUT", False),
    ]
    for name, required in connection_vars:
        status, msg = check_env_var(name, required)
        print(f"  {msg}")

    print("\n🔒 SSL:")
    print("-" * 60)
    ssl_vars = [
        ("DB_SSL", False),
        ("DB_SSL_REJECT_UNAUTHORIZED", False),
        ("DB_SSL_CA_CERT", False),
        ("DB_SSL_ALLOW_SELF_SIGNED", False),
    ]
    for name, required in ssl_vars:
        status, msg = check_env_var(name, required)
        print(f"  {msg}")

    print("\n📋 Server:")
    print("-" * 60)
    server_vars = [
        ("READ_ONLY", False),
        ("MAX_PAGE_SIZE", False),
        ("DEFAULT_PAGE_SIZE", False),
        ("LOG_LEVEL", False),
    ]
    for name, required in server_vars:
        status, msg = check_env_var(name, required)
        print(f"  {msg}")

    config_status, config_msg = test_config()
    print(f"  {config_msg}")

    db_status, db_msg = test_database()
    print(f"  {db_msg}")

    print("\n" + "=" * 60)
    print("\n📊 Summary:")
    print("-" * 60)
    if config_status and db_status:
        print("  ✓ Ready")
    else:
        print("  ✗ Not ready")
        print("\n💡 Quick Start:")
        print("-" * 60)
        print("    export DB_HOST=localhost")
        print("    export DB_USER=postgres")
        print("    export DB_PASSWORD=secret")
        print("    export DB_NAME=postgres")
        print("    export DB_SSL=false   # local servers without TLS")
    print()
    return 0 if config_status and db_status else 1


if __name__ == "__main__":
    sys.exit(main())
