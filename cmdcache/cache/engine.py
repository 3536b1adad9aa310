"""In-memory TTL cache with LRU eviction, statistics and change events."""

import logging
import math
import threading
import time
from collections.abc import Callable

from cmdcache.cache.janitor import Janitor
from cmdcache.cache.notifier import EventHandler, EventNotifier
from cmdcache.cache.stats import StatsEngine
from cmdcache.cache.store import CacheEntry, EntryStore, estimate_value_size
from cmdcache.config import CacheSettings, load_settings
from cmdcache.models.enums import EventKind, EvictionReason
from cmdcache.models.events import (
    CleanupEvent,
    ClearEvent,
    EvictionEvent,
    GetEvent,
    SetEvent,
)
from cmdcache.models.stats import (
    CacheStats,
    MemoryUsage,
    RollingWindowStats,
    TimeBasedStats,
)

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class Cache:
    """TTL cache with optional LRU capacity, rolling/interval stats and events.

    Every operation, including janitor ticks, runs under one re-entrant lock,
    so operations never interleave and event handlers may call back into the
    cache. Runtime operations never raise.

    Args:
        settings: Fully resolved settings. When omitted they are built from
            defaults, ``CMDCACHE_*`` env vars and *options* (options win).
        clock: Callable returning the current time in epoch milliseconds.
        start_janitor: Start the background cleanup thread immediately.
        **options: Explicit CacheSettings fields.

    Raises:
        CacheConfigError: If the resolved configuration is invalid.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        *,
        clock: Callable[[], int] | None = None,
        start_janitor: bool = True,
        **options: object,
    ) -> None:
        if settings is None:
            settings = load_settings(**options)
        elif options:
            settings = load_settings(**{**settings.model_dump(), **options})

        self._settings = settings
        self._clock = clock or _now_ms
        self._lock = threading.RLock()
        self._store = EntryStore()
        self._stats = StatsEngine(
            window_size=settings.window_size,
            interval_duration_ms=settings.interval_duration_ms,
            now=self._clock(),
        )
        self._events = EventNotifier()
        self._janitor = Janitor(settings.cleanup_interval_ms, self.run_maintenance)
        self._destroyed = False

        if start_janitor:
            self._janitor.start()
        logger.info(
            "Cache created (max_keys=%s, cleanup every %d ms)",
            settings.max_keys if settings.max_keys is not None else "unlimited",
            settings.cleanup_interval_ms,
        )

    def __enter__(self) -> "Cache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.destroy()

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def size(self) -> int:
        """Current number of entries, expired ones included until swept."""
        return len(self._store)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def janitor(self) -> Janitor:
        return self._janitor

    # ── Events ────────────────────────────────────────────────────────────

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> Callable[[], None]:
        """Call *handler* with every event of *kind*. Returns an unsubscribe callable."""
        return self._events.subscribe(kind, handler)

    on = subscribe

    def unsubscribe(self, kind: EventKind | str, handler: EventHandler) -> bool:
        return self._events.unsubscribe(kind, handler)

    # ── Operations ────────────────────────────────────────────────────────

    def set(self, key: str, value: object, ttl_ms: int | None = None) -> None:
        """Store *value* under *key* for *ttl_ms* (defaults to settings.default_ttl_ms).

        Inserting a new key into a full cache first evicts the least recently
        used entry. Keys are stored as strings; fractional TTLs round up.
        """
        key = str(key)
        ttl = math.ceil(self._settings.default_ttl_ms if ttl_ms is None else ttl_ms)
        with self._lock:
            now = self._clock()
            max_keys = self._settings.max_keys
            event = SetEvent(
                key=key, value_size=estimate_value_size(value), ttl=ttl, timestamp=now
            )

            if key in self._store:
                self._store.order.remove(key)
            elif max_keys is not None and len(self._store) >= max_keys:
                oldest = self._store.pop_oldest()
                if oldest is not None:
                    self._stats.record_eviction(lru=True)
                    logger.debug("LRU evicted %s", oldest)
                    self._events.publish(
                        EvictionEvent(key=oldest, reason=EvictionReason.LRU, timestamp=now)
                    )

            self._store.put(key, CacheEntry(value, created_at=now, expires_at=now + ttl))
            self._events.publish(event)

    def get(self, key: str, default: object = None) -> object:
        """Return the live value for *key*, or *default* when absent or expired."""
        key = str(key)
        with self._lock:
            now = self._clock()
            entry = self._store.get(key)

            if entry is None:
                self._stats.record_miss(now)
                self._events.publish(GetEvent(key=key, hit=False, timestamp=now))
                return default

            if entry.is_expired(now):
                self._store.remove(key)
                self._stats.record_eviction()
                self._stats.record_miss(now)
                self._events.publish(
                    EvictionEvent(key=key, reason=EvictionReason.TTL, timestamp=now)
                )
                self._events.publish(GetEvent(key=key, hit=False, timestamp=now))
                return default

            self._store.touch(key, now)
            self._stats.record_hit(now)
            self._events.publish(GetEvent(key=key, hit=True, timestamp=now))
            return entry.value

    def has(self, key: str) -> bool:
        """True if *key* holds a live entry. Expired entries are evicted; no hit/miss."""
        key = str(key)
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False

            now = self._clock()
            if entry.is_expired(now):
                self._store.remove(key)
                self._stats.record_eviction()
                self._events.publish(
                    EvictionEvent(key=key, reason=EvictionReason.TTL, timestamp=now)
                )
                return False
            return True

    def delete(self, key: str) -> bool:
        """Remove *key* explicitly. Returns True if it existed."""
        key = str(key)
        with self._lock:
            if self._store.remove(key) is None:
                return False
            self._stats.record_eviction()
            self._events.publish(
                EvictionEvent(key=key, reason=EvictionReason.MANUAL, timestamp=self._clock())
            )
            return True

    def cleanup(self) -> int:
        """Sweep every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            evicted = self._store.expired_keys(now)
            for key in evicted:
                self._store.remove(key)
                self._events.publish(
                    EvictionEvent(key=key, reason=EvictionReason.TTL, timestamp=now)
                )

            if evicted:
                self._stats.record_eviction(count=len(evicted))
                logger.debug("Cleanup removed %d expired entries", len(evicted))
                self._events.publish(
                    CleanupEvent(evicted_count=len(evicted), evicted_keys=evicted, timestamp=now)
                )
            return len(evicted)

    def clear(self) -> int:
        """Remove all entries. Returns how many there were."""
        with self._lock:
            now = self._clock()
            cleared = self._store.clear()
            if cleared:
                self._stats.record_eviction(count=len(cleared))
                self._events.publish(
                    ClearEvent(keys_cleared=len(cleared), cleared_keys=cleared, timestamp=now)
                )
            return len(cleared)

    def rotate_intervals(self) -> bool:
        """Close the current stats interval if its duration has elapsed."""
        with self._lock:
            return self._stats.rotate(self._clock())

    def run_maintenance(self) -> None:
        """One janitor tick: sweep expired entries, then rotate stats intervals."""
        with self._lock:
            if self._destroyed:
                return
            self.cleanup()
            self.rotate_intervals()

    def destroy(self) -> None:
        """Stop the janitor and drop all entries and statistics. Idempotent."""
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True

        # A tick blocked on the lock finishes as a no-op; if the caller already
        # holds the lock (an event handler), joining would only time out
        self._janitor.stop(wait=not self._lock._is_owned())

        with self._lock:
            self.clear()
            self._stats.reset(self._clock())
        logger.info("Cache destroyed")

    # ── Statistics ────────────────────────────────────────────────────────

    def get_rolling_window_stats(self) -> RollingWindowStats:
        with self._lock:
            return self._stats.window.snapshot()

    def get_time_based_stats(self) -> TimeBasedStats:
        with self._lock:
            return self._stats.intervals.snapshot(self._clock())

    def get_memory_usage(self) -> MemoryUsage:
        with self._lock:
            return self._store.memory_usage()

    def get_stats(self) -> CacheStats:
        """Snapshot of every counter plus the resolved configuration."""
        with self._lock:
            totals = self._stats.totals
            return CacheStats(
                hits=totals.hits,
                misses=totals.misses,
                evictions=totals.evictions,
                lru_evictions=totals.lru_evictions,
                hit_rate=totals.hit_rate,
                size=len(self._store),
                max_keys=self._settings.max_keys,
                cleanup_interval_ms=self._settings.cleanup_interval_ms,
                memory=self._store.memory_usage(),
                rolling_window=self._stats.window.snapshot(),
                time_based=self._stats.intervals.snapshot(self._clock()),
                config=self._settings.model_dump(mode="json"),
            )
