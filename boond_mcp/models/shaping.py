import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _empty_object_schema() -> dict[str, Any]:
    return {"type": "object", "properties": {}}


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(default=60, gt=0)
    window_ms: int = Field(default=60_000, gt=0)
    enabled: bool = True


class RateLimitDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: float
    retry_after_seconds: int | None = None

    @property
    def reset_at_seconds(self) -> int:
        """Reset time as integer Unix seconds, rounded up."""
        return math.ceil(self.reset_at_ms / 1000)


class CacheStats(BaseModel):
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total


class ToolConfig(BaseModel):
    """Description and JSON input schema of a registered tool."""

    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=_empty_object_schema)
