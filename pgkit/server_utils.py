"""Utility functions for MCP server tools."""

import json
import logging

from pgkit.core.errors import failure_from_exception
from pgkit.server_models import FailureResponse

logger = logging.getLogger(__name__)


def _list_validator(value):
    """Pydantic validator to convert string (JSON array) to list.

    MCP clients sometimes send list arguments as JSON text. Anything that does
    not parse to a list is passed through for the input model to reject.
    """
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        if value.lower() == "null" or value == "":
            return None
        if "[object Object]" in value:
            logger.warning(f"Received unserialized object for list parameter: {value!r}")
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            return value
        if isinstance(parsed, list):
            return parsed
    return value


def failure_response(exc: Exception) -> FailureResponse:
    """Wrap a guard violation or database error in the failure envelope."""
    return FailureResponse(**failure_from_exception(exc))
