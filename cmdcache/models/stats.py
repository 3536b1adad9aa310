"""Read-only statistics snapshots returned by the cache accessors."""

from pydantic import BaseModel, ConfigDict

from cmdcache.models.enums import Outcome


class OperationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Outcome
    timestamp: int


class RollingWindowStats(BaseModel):
    window_size: int
    current_operations: int
    hits: int
    misses: int
    hit_rate: float  # percent, two decimals
    recent_operations: list[OperationRecord] = []


class TimeInterval(BaseModel):
    start_time: int
    end_time: int | None = None
    hits: int = 0
    misses: int = 0
    is_current: bool = False


class AggregateStats(BaseModel):
    total_hits: int
    total_misses: int
    hit_rate: float
    period_covered_ms: int


class TimeBasedStats(BaseModel):
    interval_duration_ms: int
    intervals: list[TimeInterval] = []
    aggregate: AggregateStats


class MemoryUsage(BaseModel):
    bytes: int
    kb: float
    mb: float


class CacheStats(BaseModel):
    hits: int
    misses: int
    evictions: int
    lru_evictions: int
    hit_rate: float
    size: int
    max_keys: int | None
    cleanup_interval_ms: int
    memory: MemoryUsage
    rolling_window: RollingWindowStats
    time_based: TimeBasedStats
    config: dict
