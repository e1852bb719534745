"""Fixed-window rate limiting for tool calls."""

import logging
import math
import time
from collections.abc import Callable

from boond_mcp.models.shaping import RateLimitConfig, RateLimitDecision

logger = logging.getLogger(__name__)

DEFAULT_KEY = "global"


def _now_ms() -> float:
    return time.time() * 1000


class _WindowState:
    __slots__ = ("window_start_ms", "request_count")

    def __init__(self, window_start_ms: float) -> None:
        self.window_start_ms = window_start_ms
        self.request_count = 0


class FixedWindowRateLimiter:
    """Per-key fixed-window request counter.

    Each key gets ``max_requests`` calls per ``window_ms``. A window starts on
    the first call for a key and is discarded wholesale once it has elapsed,
    so quota resets all at once rather than sliding. This allows bursts of up
    to twice the limit around a window boundary.

    Per-key state is never evicted; key cardinality is expected to stay small
    (one key unless callers pass their own).

    Args:
        config: Limits and the enabled flag.
        clock: Millisecond clock, injectable for tests. Defaults to wall time.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or _now_ms
        self._states: dict[str, _WindowState] = {}

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def consume(self, key: str = DEFAULT_KEY) -> RateLimitDecision:
        """Take one unit of quota for *key* and report the outcome."""
        now = self._clock()
        max_requests = self._config.max_requests
        window_ms = self._config.window_ms

        state = self._states.get(key)
        if state is None or now - state.window_start_ms >= window_ms:
            state = _WindowState(now)
            self._states[key] = state

        reset_at_ms = state.window_start_ms + window_ms

        if state.request_count >= max_requests:
            retry_after = max(1, math.ceil((reset_at_ms - now) / 1000))
            logger.warning(
                "Rate limit exceeded for key %r (%d/%d), retry after %ds",
                key, state.request_count, max_requests, retry_after,
            )
            return RateLimitDecision(
                allowed=False,
                limit=max_requests,
                remaining=0,
                reset_at_ms=reset_at_ms,
                retry_after_seconds=retry_after,
            )

        state.request_count += 1
        return RateLimitDecision(
            allowed=True,
            limit=max_requests,
            remaining=max_requests - state.request_count,
            reset_at_ms=reset_at_ms,
        )

    def tracked_keys(self) -> list[str]:
        return list(self._states)
