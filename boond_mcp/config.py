from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from boond_mcp.models.shaping import RateLimitConfig

DEFAULT_RATE_LIMIT_MAX_REQUESTS = 60
DEFAULT_RATE_LIMIT_WINDOW_MS = 60_000


def _positive_int_or(value: Any, fallback: int) -> int:
    """Parse a positive integer, falling back on anything missing or invalid."""
    if value is None or value == "":
        return fallback
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return fallback
    return parsed if parsed > 0 else fallback


class Settings(BaseSettings):
    """Application configuration loaded from environment variables and .env file.

    The rate-limit options never fail validation: a missing or malformed
    value silently falls back to its default, and only the literal string
    ``false`` (any case) disables limiting.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # BoondManager API
    boond_api_token: str = ""
    boond_api_url: str = "https://ui.boondmanager.com/api/1.0"
    boond_request_timeout: float = 30.0

    # Tool-call rate limiting
    mcp_rate_limit_enabled: bool = True
    mcp_rate_limit_max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS
    mcp_rate_limit_window_ms: int = DEFAULT_RATE_LIMIT_WINDOW_MS

    # API response cache (0 disables expiry)
    cache_max_size: int = 100
    cache_ttl_ms: int = Field(default=60_000, ge=0)

    # Transport
    mcp_transport: str = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8000

    # Paths & logging; default is <project_root>/data so it works
    # regardless of the process working directory.
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    log_level: str = "INFO"

    @field_validator("mcp_rate_limit_enabled", mode="before")
    @classmethod
    def _parse_enabled(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return True
        return str(value).strip().lower() != "false"

    @field_validator("mcp_rate_limit_max_requests", mode="before")
    @classmethod
    def _parse_max_requests(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_RATE_LIMIT_MAX_REQUESTS)

    @field_validator("mcp_rate_limit_window_ms", mode="before")
    @classmethod
    def _parse_window_ms(cls, value: Any) -> int:
        return _positive_int_or(value, DEFAULT_RATE_LIMIT_WINDOW_MS)

    @property
    def rate_limit(self) -> RateLimitConfig:
        return RateLimitConfig(
            max_requests=self.mcp_rate_limit_max_requests,
            window_ms=self.mcp_rate_limit_window_ms,
            enabled=self.mcp_rate_limit_enabled,
        )

    @property
    def has_api_token(self) -> bool:
        return bool(self.boond_api_token)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached Settings singleton. Created on first call."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached settings. Used in tests."""
    global _settings  # noqa: PLW0603
    _settings = None
