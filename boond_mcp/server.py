import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from boond_mcp.clients.boond import BoondClient
from boond_mcp.clients.cache import LRUCache
from boond_mcp.config import Settings, get_settings
from boond_mcp.middleware.interceptor import fastmcp_registrar, shape_registration
from boond_mcp.middleware.rate_limiter import FixedWindowRateLimiter
from boond_mcp.middleware.registry import ToolRegistry
from boond_mcp.tools.candidates import register_candidate_tools
from boond_mcp.tools.companies import register_company_tools
from boond_mcp.tools.diagnostics import register_diagnostic_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "boondmanager"


class BoondServer:
    """The MCP server and the shared instances its tools are built on.

    Everything is constructed once by :func:`build_server` and passed down
    explicitly; nothing here lives at module scope.
    """

    def __init__(
        self,
        mcp: FastMCP,
        limiter: FixedWindowRateLimiter,
        cache: LRUCache[str, Any],
        client: BoondClient,
        tools: ToolRegistry,
    ) -> None:
        self.mcp = mcp
        self.limiter = limiter
        self.cache = cache
        self.client = client
        self.tools = tools

    def close(self) -> None:
        """Release process-level resources (the cache sweep thread)."""
        self.cache.close()
        logger.info("BoondManager MCP server shut down")


def setup_logging(log_level: str, data_dir: Path) -> None:
    """Configure logging with file rotation and console output.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        data_dir: Base data directory; logs go to data_dir/logs/server.log.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler: exact type check avoids matching subclasses (FileHandler, etc.)
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        root_logger.addHandler(console)

    log_dir = data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    if not any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def build_server(settings: Settings) -> BoondServer:
    """Construct the limiter, cache and API client and register every tool.

    Tools reach FastMCP through the shaped registration primitive, so each
    call is sanitized and rate limited; the registry records the shaped
    handlers for in-process calls.
    """
    mcp = FastMCP(SERVER_NAME)
    limiter = FixedWindowRateLimiter(settings.rate_limit)
    cache: LRUCache[str, Any] = LRUCache(
        settings.cache_max_size, ttl_ms=settings.cache_ttl_ms or None
    )
    client = BoondClient(
        settings.boond_api_token,
        base_url=settings.boond_api_url,
        timeout=settings.boond_request_timeout,
        cache=cache,
    )
    tools = ToolRegistry()

    register = shape_registration(tools.recording(fastmcp_registrar(mcp)), limiter)
    if limiter.enabled:
        logger.info(
            "Rate limiting enabled: %d requests per %d ms",
            limiter.config.max_requests, limiter.config.window_ms,
        )
    else:
        logger.info("Rate limiting disabled")

    register_candidate_tools(register, client)
    register_company_tools(register, client)
    register_diagnostic_tools(register, cache)

    logger.info("Registered %d tools", len(tools))
    return BoondServer(mcp, limiter, cache, client, tools)


def initialize(settings: Settings | None = None) -> BoondServer:
    """Set up directories and logging, then build the server."""
    settings = settings or get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / "logs").mkdir(exist_ok=True)

    setup_logging(settings.log_level, settings.data_dir)

    if not settings.has_api_token:
        logger.warning("BOOND_API_TOKEN is not set; API calls will be rejected")

    server = build_server(settings)
    logger.info("BoondManager MCP server initialized")
    return server
