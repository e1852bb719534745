"""MCP tool reporting the state of the API response cache."""

from typing import Any

from fastmcp.tools import ToolResult

from boond_mcp.clients.cache import LRUCache
from boond_mcp.middleware.interceptor import RegisterTool
from boond_mcp.models.shaping import ToolConfig


def format_cache_stats(cache: LRUCache[str, Any]) -> str:
    stats = cache.get_stats()
    ttl = f"{cache.ttl_ms:g} ms" if cache.ttl_ms else "none"
    return "\n".join([
        "📊 API response cache",
        f"Entries: {stats.size}/{cache.get_max_size()}",
        f"TTL: {ttl}",
        f"Hits: {stats.hits}",
        f"Misses: {stats.misses}",
        f"Hit rate: {stats.hit_rate:.0%}",
        f"Evictions: {stats.evictions}",
        f"Expirations: {stats.expirations}",
    ])


def register_diagnostic_tools(register: RegisterTool, cache: LRUCache[str, Any]) -> None:
    """Register the cache statistics tool."""

    def cache_stats(arguments: dict[str, Any]) -> ToolResult:
        return ToolResult(content=format_cache_stats(cache))

    register(
        "boond_cache_stats",
        ToolConfig(description="Show hit/miss/eviction statistics of the API response cache"),
        cache_stats,
    )
