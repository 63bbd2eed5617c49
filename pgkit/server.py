"""MCP server exposing PostgreSQL query and catalog tools."""

import logging
import os
import sys

from dotenv import load_dotenv
from fastmcp import FastMCP

from pgkit.core.config import ServerConfig, load_config
from pgkit.core.db import Database
from pgkit.core.guards import ConfigError
from pgkit.server_tools.catalog_tools import register_catalog_tools
from pgkit.server_tools.query_tools import register_query_tools

logger = logging.getLogger(__name__)


def create_server(config: ServerConfig, db: Database) -> FastMCP:
    """Build the MCP server with every tool bound to one config and database handle."""
    mcp = FastMCP("pgkit")
    register_query_tools(mcp, config, db)
    register_catalog_tools(mcp, db)
    return mcp


def main():
    """Entry point: load .env, configure logging, serve over stdio."""
    load_dotenv()
    # stdout carries the MCP protocol
    logging.basicConfig(
        stream=sys.stderr,
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(
        f"Starting pgkit for {config.user}@{config.host}:{config.port}/{config.database} "
        f"(read_only={config.read_only}, sslmode={config.ssl_mode})"
    )
    db = Database(config)
    mcp = create_server(config, db)
    try:
        mcp.run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
