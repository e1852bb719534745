"""Tool-registration interceptor: sanitization and rate limiting for every tool.

Tool modules register handlers through a plain ``register(name, config,
handler)`` primitive. :func:`shape_registration` returns a primitive with the
same signature whose handlers are wrapped, so no tool module has to know
about either concern.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp import FastMCP
from fastmcp.tools import Tool, ToolResult
from pydantic import Field
from pydantic.json_schema import SkipJsonSchema

from boond_mcp.middleware.rate_limiter import DEFAULT_KEY, FixedWindowRateLimiter
from boond_mcp.middleware.sanitization import sanitize_input
from boond_mcp.models.shaping import RateLimitDecision, ToolConfig

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult] | ToolResult]
AsyncToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]
RegisterTool = Callable[[str, ToolConfig, ToolHandler], None]


async def invoke_handler(handler: ToolHandler, arguments: dict[str, Any]) -> ToolResult:
    """Call a sync or async handler and normalize its return value to a ToolResult."""
    result = handler(arguments)
    if inspect.isawaitable(result):
        result = await result
    if isinstance(result, ToolResult):
        return result
    return ToolResult(content=result)


# ── Rate-limit metadata ─────────────────────────────────────────────────────


def build_rate_limit_headers(decision: RateLimitDecision) -> dict[str, str]:
    """Header-style view of a decision, for transports that forward HTTP headers."""
    headers = {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at_seconds),
    }
    if decision.retry_after_seconds is not None:
        headers["Retry-After"] = str(decision.retry_after_seconds)
    return headers


def with_rate_limit_metadata(result: ToolResult, decision: RateLimitDecision) -> ToolResult:
    """Return a copy of *result* whose ``meta`` carries the quota state.

    Content and error flag are left untouched; existing meta keys survive.
    """
    rate_limit: dict[str, Any] = {
        "limit": decision.limit,
        "remaining": decision.remaining,
        "reset": decision.reset_at_seconds,
        "resetAtMs": decision.reset_at_ms,
    }
    if decision.retry_after_seconds is not None:
        rate_limit["retryAfter"] = decision.retry_after_seconds

    meta = {
        **(result.meta or {}),
        "rateLimit": rate_limit,
        "http.headers": build_rate_limit_headers(decision),
    }
    return ToolResult(
        content=result.content,
        structured_content=result.structured_content,
        meta=meta,
        is_error=result.is_error,
    )


def rate_limit_exceeded_result(decision: RateLimitDecision) -> ToolResult:
    wait_seconds = decision.retry_after_seconds or 1
    result = ToolResult(
        content=f"Rate limit exceeded. Try again in {wait_seconds} second(s).",
        is_error=True,
    )
    return with_rate_limit_metadata(result, decision)


# ── Handler wrappers ────────────────────────────────────────────────────────


def sanitize_tool_handler(handler: ToolHandler) -> AsyncToolHandler:
    """Wrap *handler* so it only ever sees sanitized arguments."""

    async def wrapped(arguments: dict[str, Any]) -> ToolResult:
        return await invoke_handler(handler, sanitize_input(arguments))

    return wrapped


def rate_limit_tool_handler(
    handler: ToolHandler,
    limiter: FixedWindowRateLimiter,
    key: str = DEFAULT_KEY,
) -> AsyncToolHandler:
    """Wrap *handler* so each call consumes one unit of *key*'s quota.

    A denied call never reaches *handler*; it gets an error result carrying
    the retry-after hint instead. A disabled limiter is bypassed entirely.
    """

    async def wrapped(arguments: dict[str, Any]) -> ToolResult:
        if not limiter.enabled:
            return await invoke_handler(handler, arguments)

        decision = limiter.consume(key)
        if not decision.allowed:
            return rate_limit_exceeded_result(decision)

        result = await invoke_handler(handler, arguments)
        return with_rate_limit_metadata(result, decision)

    return wrapped


def shape_tool_handler(
    handler: ToolHandler,
    limiter: FixedWindowRateLimiter,
    key: str = DEFAULT_KEY,
) -> AsyncToolHandler:
    """Sanitize arguments, then apply the rate limit, then run *handler*."""
    return sanitize_tool_handler(rate_limit_tool_handler(handler, limiter, key))


def shape_registration(
    register: RegisterTool,
    limiter: FixedWindowRateLimiter,
    key: str = DEFAULT_KEY,
) -> RegisterTool:
    """Return a registration primitive that shapes every handler it receives.

    All tools registered through the result share *limiter*, and therefore
    the single quota *key* unless callers build separate primitives.
    """

    def shaped_register(name: str, config: ToolConfig, handler: ToolHandler) -> None:
        register(name, config, shape_tool_handler(handler, limiter, key))

    return shaped_register


# ── FastMCP binding ─────────────────────────────────────────────────────────


class HandlerTool(Tool):
    """A FastMCP tool backed by a ``handler(arguments) -> ToolResult`` callable."""

    handler: SkipJsonSchema[Callable[..., Any]] = Field(exclude=True)

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        return await invoke_handler(self.handler, arguments or {})


def fastmcp_registrar(mcp: FastMCP) -> RegisterTool:
    """Adapt a FastMCP server to the ``register(name, config, handler)`` primitive."""

    def register(name: str, config: ToolConfig, handler: ToolHandler) -> None:
        mcp.add_tool(
            HandlerTool(
                name=name,
                description=config.description,
                parameters=config.input_schema,
                handler=handler,
            )
        )
        logger.debug("Registered tool %s", name)

    return register
