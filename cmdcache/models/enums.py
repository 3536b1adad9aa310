from enum import StrEnum


class EventKind(StrEnum):
    SET = "set"
    GET = "get"
    EVICTION = "eviction"
    CLEAR = "clear"
    CLEANUP = "cleanup"


class EvictionReason(StrEnum):
    TTL = "ttl"
    LRU = "lru"
    MANUAL = "manual"


class Outcome(StrEnum):
    HIT = "hit"
    MISS = "miss"
