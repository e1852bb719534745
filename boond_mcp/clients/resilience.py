"""Resilience primitives: exception hierarchy, response classification, retry, circuit breaker."""

import logging
import time
from enum import StrEnum

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)


# ── Exception Hierarchy ──────────────────────────────────────────────────────


class APIError(Exception):
    """Base class for all BoondManager API errors.

    Args:
        message: Human-readable description.
        status_code: HTTP status, or 0 when no response was received.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientAPIError(APIError):
    """Retriable errors (429, 5xx, timeouts, network failures)."""


class PermanentAPIError(APIError):
    """Non-retriable errors (4xx)."""


class AuthError(PermanentAPIError):
    """Authentication failure (401)."""


class NotFoundError(PermanentAPIError):
    """Requested resource does not exist (404)."""


class ValidationError(PermanentAPIError):
    """Payload rejected by the API (400, 422)."""


class CircuitOpenError(APIError):
    """Circuit breaker is open, calls are being shed."""


TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


# ── Response Classification ──────────────────────────────────────────────────


def _error_detail(response: object, fallback: str) -> str:
    """Pull the ``message`` field out of a JSON error body, if there is one."""
    try:
        body = response.json()  # type: ignore[attr-defined]
    except Exception:  # noqa: BLE001
        return fallback
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return fallback


def classify_response(response: object) -> None:
    """Raise an appropriate error based on HTTP status code.

    Args:
        response: An object with a ``status_code`` attribute (e.g. httpx.Response).

    Raises:
        AuthError: On 401.
        NotFoundError: On 404.
        ValidationError: On 400, 422.
        PermanentAPIError: On other 4xx.
        TransientAPIError: On 429, 5xx.
    """
    status = getattr(response, "status_code", None)
    if status is None or 200 <= status < 400:
        return

    if status == 401:
        raise AuthError("Invalid API token or authentication failed", status)
    if status == 404:
        raise NotFoundError("Resource not found", status)
    if status == 400:
        raise ValidationError(_error_detail(response, "Bad request"), status)
    if status == 422:
        raise ValidationError(_error_detail(response, "Validation failed"), status)
    if status in TRANSIENT_STATUS_CODES or status >= 500:
        raise TransientAPIError(f"Server error: HTTP {status}", status)
    raise PermanentAPIError(f"Client error (HTTP {status})", status)


# ── Retry ─────────────────────────────────────────────────────────────────


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Tenacity ``before_sleep`` callback that logs each retry."""
    attempt = retry_state.attempt_number
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning("Retry attempt %d after error: %s", attempt, exc)


resilient_request = retry(
    retry=retry_if_exception_type(TransientAPIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    before_sleep=log_retry_attempt,
    reraise=True,
)
"""Tenacity decorator for retrying on ``TransientAPIError``."""


# ── Circuit Breaker ──────────────────────────────────────────────────────────


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Lightweight async circuit breaker.

    Only ``TransientAPIError`` counts as a failure: a 404 or a rejected
    payload says nothing about the health of the upstream service.

    Args:
        name: Human-readable name for logging.
        fail_max: Consecutive failures before opening.
        reset_timeout: Seconds to wait before trying again (half-open).
    """

    def __init__(
        self, name: str, fail_max: int = 5, reset_timeout: float = 60.0
    ) -> None:
        self.name = name
        self.fail_max = fail_max
        self.reset_timeout = reset_timeout

        self._state = CircuitState.CLOSED
        self._fail_count = 0
        self._last_failure_time: float = 0.0

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN:
            if time.monotonic() - self._last_failure_time >= self.reset_timeout:
                self._state = CircuitState.HALF_OPEN
        return self._state

    async def call_async(self, coro):  # type: ignore[no-untyped-def]
        """Execute *coro*, applying circuit-breaker logic.

        Raises:
            CircuitOpenError: If the circuit is OPEN.
        """
        current = self.state
        if current == CircuitState.OPEN:
            coro.close()
            raise CircuitOpenError(f"Circuit '{self.name}' is open")

        try:
            result = await coro
        except TransientAPIError:
            self._fail_count += 1
            self._last_failure_time = time.monotonic()
            if self._fail_count >= self.fail_max:
                self._state = CircuitState.OPEN
                logger.warning("Circuit '%s' opened after %d failures", self.name, self._fail_count)
            elif current == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning("Circuit '%s' re-opened on half-open failure", self.name)
            raise

        self._fail_count = 0
        self._state = CircuitState.CLOSED
        return result
