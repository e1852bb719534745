"""User-friendly error results for tool handlers."""

import logging

import pydantic
from fastmcp.tools import ToolResult

from boond_mcp.clients.resilience import (
    AuthError,
    CircuitOpenError,
    NotFoundError,
    TransientAPIError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def format_validation_errors(error: pydantic.ValidationError) -> str:
    """Render pydantic errors as ``field: message`` pairs."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "input"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


def get_user_message(error: Exception, operation: str, resource: str) -> str:
    """Map an exception to a user-friendly message.

    Args:
        error: The exception to translate.
        operation: What was being done, e.g. ``"retrieving"``.
        resource: Human name of the entity, e.g. ``"Candidate"``.

    Returns:
        A human-readable error message.
    """
    if isinstance(error, NotFoundError):
        return f"{resource} not found"
    if isinstance(error, pydantic.ValidationError):
        return f"Validation error: {format_validation_errors(error)}"
    if isinstance(error, ValidationError):
        return f"Validation error: {error}"
    if isinstance(error, AuthError):
        return (
            "BoondManager rejected the API token. "
            "Check BOOND_API_TOKEN and try again."
        )
    if isinstance(error, CircuitOpenError):
        return (
            "BoondManager is temporarily unavailable. "
            "Please try again in a few minutes."
        )
    if isinstance(error, TransientAPIError):
        return (
            f"There was a temporary issue {operation} {resource.lower()}: {error}. "
            "Please try again shortly."
        )
    return f"Error {operation} {resource.lower()}: {error}"


def handle_tool_error(error: Exception, operation: str, resource: str) -> ToolResult:
    """Log *error* and turn it into an error-flagged tool result."""
    if isinstance(error, (NotFoundError, ValidationError, pydantic.ValidationError)):
        logger.info("%s %s failed: %s", operation, resource, error)
    else:
        logger.exception("Tool error while %s %s", operation, resource.lower())
    return ToolResult(content=get_user_message(error, operation, resource), is_error=True)
