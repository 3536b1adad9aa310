"""Entry storage kept in lock-step with the access-order tracker."""

import json

from cmdcache.cache.access_order import AccessOrder
from cmdcache.models.stats import MemoryUsage

# Rough per-entry cost of the timestamps and bookkeeping
ENTRY_OVERHEAD_BYTES = 24


def estimate_value_size(value: object) -> int:
    """Approximate size of *value* in bytes: compact JSON length, 2 bytes per char.

    Values that cannot be serialized count as zero.
    """
    try:
        return len(json.dumps(value, ensure_ascii=False, separators=(",", ":"))) * 2
    except (TypeError, ValueError, RecursionError):
        return 0


class CacheEntry:
    """A stored value with its creation and absolute expiry times (epoch ms)."""

    __slots__ = ("value", "created_at", "expires_at")

    def __init__(self, value: object, created_at: int, expires_at: int) -> None:
        self.value = value
        self.created_at = created_at
        self.expires_at = expires_at

    def is_expired(self, now: int) -> bool:
        return now >= self.expires_at


class EntryStore:
    """Key → CacheEntry map whose key set always equals the access order's."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self.order = AccessOrder()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        """Insert or replace *key* and mark it most recently used."""
        self._entries[key] = entry
        self.order.touch(key, entry.created_at)

    def touch(self, key: str, now: int) -> None:
        if key in self._entries:
            self.order.touch(key, now)

    def remove(self, key: str) -> CacheEntry | None:
        entry = self._entries.pop(key, None)
        self.order.remove(key)
        return entry

    def pop_oldest(self) -> str | None:
        """Remove the least recently used key from both containers."""
        key = self.order.pop_oldest()
        if key is not None:
            self._entries.pop(key, None)
        return key

    def expired_keys(self, now: int) -> list[str]:
        return [key for key, entry in self._entries.items() if entry.is_expired(now)]

    def clear(self) -> list[str]:
        """Drop every entry. Returns the removed keys."""
        keys = list(self._entries)
        self._entries.clear()
        self.order.clear()
        return keys

    def memory_usage(self) -> MemoryUsage:
        total = 0
        for key, entry in self._entries.items():
            total += len(key) * 2
            total += estimate_value_size(entry.value)
            total += ENTRY_OVERHEAD_BYTES
        return MemoryUsage(
            bytes=total,
            kb=round(total / 1024, 2),
            mb=round(total / (1024 * 1024), 4),
        )
