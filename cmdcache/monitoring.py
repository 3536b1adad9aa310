"""Event-driven observers: log lines per event and an operation counter."""

import logging
from collections import deque
from collections.abc import Callable

from cmdcache.cache.engine import Cache
from cmdcache.models.enums import EventKind, EvictionReason
from cmdcache.models.events import (
    CleanupEvent,
    ClearEvent,
    EvictionEvent,
    GetEvent,
    SetEvent,
)

logger = logging.getLogger(__name__)

RECENT_OPERATIONS = 20


def attach_event_logging(
    cache: Cache,
    *,
    log_set: bool = True,
    log_get: bool = False,
    log_evictions: bool = True,
    log_cleanup: bool = True,
    log_clear: bool = True,
    log: logging.Logger | None = None,
) -> Callable[[], None]:
    """Log cache events. ``get`` is off by default because it is noisy.

    Returns:
        A callable that detaches every handler added here.
    """
    out = log or logger
    detachers: list[Callable[[], None]] = []

    if log_set:
        def _on_set(event: SetEvent) -> None:
            out.info("SET key=%r size=%dB ttl=%dms", event.key, event.value_size, event.ttl)

        detachers.append(cache.subscribe(EventKind.SET, _on_set))

    if log_get:
        def _on_get(event: GetEvent) -> None:
            out.debug("GET key=%r result=%s", event.key, "HIT" if event.hit else "MISS")

        detachers.append(cache.subscribe(EventKind.GET, _on_get))

    if log_evictions:
        def _on_eviction(event: EvictionEvent) -> None:
            out.info("EVICTION key=%r reason=%s", event.key, event.reason)

        detachers.append(cache.subscribe(EventKind.EVICTION, _on_eviction))

    if log_cleanup:
        def _on_cleanup(event: CleanupEvent) -> None:
            out.info("CLEANUP evicted %d expired entries", event.evicted_count)

        detachers.append(cache.subscribe(EventKind.CLEANUP, _on_cleanup))

    if log_clear:
        def _on_clear(event: ClearEvent) -> None:
            out.info("CLEAR removed %d entries", event.keys_cleared)

        detachers.append(cache.subscribe(EventKind.CLEAR, _on_clear))

    def detach() -> None:
        for undo in detachers:
            undo()
        detachers.clear()

    return detach


class CacheStatsCollector:
    """Counts cache operations from the event stream.

    Args:
        cache: Cache to observe; handlers are attached immediately.
    """

    def __init__(self, cache: Cache) -> None:
        self.reset()
        self._detachers = [
            cache.subscribe(EventKind.SET, self._on_set),
            cache.subscribe(EventKind.GET, self._on_get),
            cache.subscribe(EventKind.EVICTION, self._on_eviction),
            cache.subscribe(EventKind.CLEANUP, self._on_cleanup),
            cache.subscribe(EventKind.CLEAR, self._on_clear),
        ]

    def reset(self) -> None:
        self.sets = 0
        self.gets = 0
        self.hits = 0
        self.misses = 0
        self.evictions = {reason: 0 for reason in EvictionReason}
        self.cleanups = 0
        self.clears = 0
        self.recent_operations: deque[dict] = deque(maxlen=RECENT_OPERATIONS)

    def detach(self) -> None:
        for undo in self._detachers:
            undo()
        self._detachers = []

    def snapshot(self) -> dict:
        return {
            "operations": {
                "sets": self.sets,
                "gets": self.gets,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": {str(reason): n for reason, n in self.evictions.items()},
                "cleanups": self.cleanups,
                "clears": self.clears,
            },
            "recent_operations": list(self.recent_operations),
        }

    def _on_set(self, event: SetEvent) -> None:
        self.sets += 1
        self.recent_operations.append(
            {"type": "set", "key": event.key, "timestamp": event.timestamp}
        )

    def _on_get(self, event: GetEvent) -> None:
        self.gets += 1
        if event.hit:
            self.hits += 1
        else:
            self.misses += 1
        self.recent_operations.append(
            {"type": "hit" if event.hit else "miss", "key": event.key, "timestamp": event.timestamp}
        )

    def _on_eviction(self, event: EvictionEvent) -> None:
        self.evictions[event.reason] += 1
        self.recent_operations.append(
            {
                "type": "eviction",
                "key": event.key,
                "reason": str(event.reason),
                "timestamp": event.timestamp,
            }
        )

    def _on_cleanup(self, event: CleanupEvent) -> None:
        self.cleanups += 1
        self.recent_operations.append(
            {"type": "cleanup", "evicted_count": event.evicted_count, "timestamp": event.timestamp}
        )

    def _on_clear(self, event: ClearEvent) -> None:
        self.clears += 1
        self.recent_operations.append(
            {"type": "clear", "keys_cleared": event.keys_cleared, "timestamp": event.timestamp}
        )
