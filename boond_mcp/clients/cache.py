"""In-memory LRU cache with optional TTL expiration, eviction callbacks and stats."""

import logging
import threading
import time
import weakref
from collections import OrderedDict
from collections.abc import Callable, Hashable, Iterator
from typing import Any, Generic, NamedTuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from boond_mcp.models.enums import EvictionReason
from boond_mcp.models.shaping import CacheStats

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

EvictCallback = Callable[[Any, Any, EvictionReason], None]


def _now_ms() -> float:
    return time.time() * 1000


class CacheOptions(BaseModel):
    """Configuration record accepted by :meth:`LRUCache.from_options`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    max_size: int = 100
    ttl_ms: float | None = Field(default=None, ge=0)
    on_evict: EvictCallback | None = None


class _Entry(NamedTuple):
    value: Any
    expires_at: float | None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now > self.expires_at


class LRUCache(Generic[K, V]):
    """Bounded key/value store with LRU eviction and optional TTL.

    Recency is the iteration order of the backing ``OrderedDict``: the least
    recently used entry sits at the front, the most recently used at the end.

    When ``ttl_ms`` is set (and non-zero) every entry expires ``ttl_ms``
    milliseconds after insertion, and a daemon thread sweeps expired entries
    every ``ttl_ms / 2`` milliseconds so memory is reclaimed even for keys
    nobody reads again. Store and counters are guarded by a re-entrant lock
    because of that thread.

    Args:
        max_size: Maximum number of entries before eviction (must be >= 1).
        ttl_ms: Optional time-to-live in milliseconds.
        on_evict: Optional ``(key, value, reason)`` callback, invoked once per
            removed entry. Overwriting a key does not invoke it.
        clock: Millisecond clock, injectable for tests. Defaults to wall time.

    Raises:
        ValueError: If *max_size* is smaller than 1 or *ttl_ms* is negative.
    """

    def __init__(
        self,
        max_size: int = 100,
        *,
        ttl_ms: float | None = None,
        on_evict: EvictCallback | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"Cache max size must be at least 1, got {max_size}")
        if ttl_ms is not None and ttl_ms < 0:
            raise ValueError(f"Cache TTL must not be negative, got {ttl_ms}")
        self._max_size = max_size
        self._ttl_ms = ttl_ms or None
        self._on_evict = on_evict
        self._clock = clock or _now_ms

        self._store: OrderedDict[K, _Entry] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

        self._sweeper: threading.Thread | None = None
        self._stop_sweep: threading.Event | None = None
        self._closed = False

        self._start_sweeper()

    @classmethod
    def from_options(
        cls, options: CacheOptions, *, clock: Callable[[], float] | None = None
    ) -> "LRUCache[K, V]":
        """Build a cache from a :class:`CacheOptions` record."""
        return cls(
            options.max_size,
            ttl_ms=options.ttl_ms,
            on_evict=options.on_evict,
            clock=clock,
        )

    # ── Public API ───────────────────────────────────────────────────────────

    def get(self, key: K) -> V | None:
        """Return the cached value, or ``None`` when absent or expired.

        A hit promotes the entry to most recently used. An expired entry is
        deleted and counted both as an expiration and as a miss.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._store[key]
                self._expirations += 1
                self._misses += 1
                self._notify(key, entry.value, EvictionReason.TTL)
                return None

            self._store.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: K, value: V) -> None:
        """Store *value*, evicting the least recently used entry if full."""
        with self._lock:
            # Re-insertion always lands at the most recently used end
            self._store.pop(key, None)

            evicted = None
            if len(self._store) >= self._max_size:
                evicted = self._store.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted %r from cache (capacity)", evicted[0])

            expires_at = self._clock() + self._ttl_ms if self._ttl_ms else None
            self._store[key] = _Entry(value, expires_at)

            if self._sweeper is None:
                self._start_sweeper()

            # Notify only once the store is consistent
            if evicted is not None:
                oldest_key, oldest = evicted
                self._notify(oldest_key, oldest.value, EvictionReason.CAPACITY)

    def has(self, key: K) -> bool:
        """Raw existence check.

        Touches neither the statistics nor the recency order, and does not
        expire stale entries: an expired entry that has not been swept or
        read yet is still reported present.
        """
        with self._lock:
            return key in self._store

    def delete(self, key: K) -> bool:
        """Remove a specific key. Returns True if the key existed."""
        with self._lock:
            entry = self._store.pop(key, None)
            if entry is None:
                return False
            self._notify(key, entry.value, EvictionReason.MANUAL)
            return True

    def clear(self) -> None:
        """Remove all entries and reset every statistics counter.

        The sweep thread is stopped; it starts again on the next ``set``.
        """
        with self._lock:
            self._stop_sweeper()
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._expirations = 0

    def sweep(self) -> int:
        """Remove every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [
                (key, entry) for key, entry in self._store.items() if entry.is_expired(now)
            ]
            for key, _ in expired:
                del self._store[key]
            self._expirations += len(expired)
            for key, entry in expired:
                self._notify(key, entry.value, EvictionReason.TTL)
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def close(self) -> None:
        """Stop the sweep thread for good and release all entries."""
        with self._lock:
            self._closed = True
            self._stop_sweeper()
            self._store.clear()

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                size=len(self._store),
            )

    def get_max_size(self) -> int:
        return self._max_size

    def get_size(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._store)

    @property
    def ttl_ms(self) -> float | None:
        return self._ttl_ms

    @property
    def sweeping(self) -> bool:
        """Whether the background sweep thread is running."""
        return self._sweeper is not None and self._sweeper.is_alive()

    def __len__(self) -> int:
        return self.get_size()

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    # ── Internals ────────────────────────────────────────────────────────────

    def _notify(self, key: K, value: Any, reason: EvictionReason) -> None:
        if self._on_evict is not None:
            self._on_evict(key, value, reason)

    def _start_sweeper(self) -> None:
        if not self._ttl_ms or self._closed:
            return
        stop = threading.Event()
        interval = self._ttl_ms / 2 / 1000
        thread = threading.Thread(
            target=_run_sweeper,
            args=(weakref.ref(self), stop, interval),
            name="lru-cache-sweeper",
            daemon=True,
        )
        self._stop_sweep = stop
        self._sweeper = thread
        thread.start()

    def _stop_sweeper(self) -> None:
        if self._stop_sweep is not None:
            self._stop_sweep.set()
        self._stop_sweep = None
        self._sweeper = None


def _run_sweeper(
    cache_ref: "weakref.ReferenceType[LRUCache[Any, Any]]",
    stop: threading.Event,
    interval: float,
) -> None:
    """Sweep loop holding only a weak reference, so an unclosed cache can be collected."""
    while not stop.wait(interval):
        cache = cache_ref()
        if cache is None:
            return
        try:
            cache.sweep()
        except Exception:
            logger.exception("Cache sweep failed")
        del cache
