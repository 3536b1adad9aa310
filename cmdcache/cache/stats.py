"""Hit/miss statistics: lifetime counters, a rolling window and fixed intervals."""

import logging
from collections import deque

from cmdcache.models.enums import Outcome
from cmdcache.models.stats import (
    AggregateStats,
    OperationRecord,
    RollingWindowStats,
    TimeBasedStats,
    TimeInterval,
)

logger = logging.getLogger(__name__)

MAX_INTERVALS = 60
RECENT_OPERATIONS = 10
REPORTED_INTERVALS = 5


def hit_rate(hits: int, misses: int) -> float:
    """Hit percentage rounded to two decimals, 0.0 when nothing was recorded."""
    total = hits + misses
    if total == 0:
        return 0.0
    return round(hits / total * 100, 2)


class CumulativeStats:
    """Lifetime counters for one cache instance."""

    def __init__(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.lru_evictions = 0

    @property
    def hit_rate(self) -> float:
        return hit_rate(self.hits, self.misses)


class RollingWindow:
    """The last *size* hit/miss records with counters kept in sync.

    Args:
        size: Number of operations retained.
    """

    def __init__(self, size: int) -> None:
        self.size = size
        self._operations: deque[OperationRecord] = deque()
        self.hits = 0
        self.misses = 0
        self.hit_rate = 0.0

    def __len__(self) -> int:
        return len(self._operations)

    def record(self, outcome: Outcome, now: int) -> None:
        self._operations.append(OperationRecord(type=outcome, timestamp=now))
        self._count(outcome, 1)

        if len(self._operations) > self.size:
            dropped = self._operations.popleft()
            self._count(dropped.type, -1)

        self.hit_rate = hit_rate(self.hits, self.misses)

    def snapshot(self) -> RollingWindowStats:
        return RollingWindowStats(
            window_size=self.size,
            current_operations=len(self._operations),
            hits=self.hits,
            misses=self.misses,
            hit_rate=self.hit_rate,
            recent_operations=list(self._operations)[-RECENT_OPERATIONS:],
        )

    def _count(self, outcome: Outcome, delta: int) -> None:
        if outcome is Outcome.HIT:
            self.hits += delta
        else:
            self.misses += delta


class IntervalStats:
    """Fixed-duration hit/miss buckets with a bounded closed history.

    Args:
        duration_ms: Length of one interval.
        now: Start time of the first open interval.
    """

    def __init__(self, duration_ms: int, now: int) -> None:
        self.duration_ms = duration_ms
        self.history: deque[TimeInterval] = deque(maxlen=MAX_INTERVALS)
        self.current = TimeInterval(start_time=now)

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.HIT:
            self.current.hits += 1
        else:
            self.current.misses += 1

    def rotate(self, now: int) -> bool:
        """Close the open interval once its duration has elapsed."""
        if now - self.current.start_time < self.duration_ms:
            return False

        closed = self.current.model_copy(update={"end_time": now})
        self.history.append(closed)
        self.current = TimeInterval(start_time=now)
        logger.debug(
            "Rotated stats interval (%d hits, %d misses); %d retained",
            closed.hits, closed.misses, len(self.history),
        )
        return True

    def snapshot(self, now: int) -> TimeBasedStats:
        intervals = list(self.history)
        if self.current.hits > 0 or self.current.misses > 0:
            intervals.append(
                self.current.model_copy(update={"end_time": now, "is_current": True})
            )

        total_hits = sum(i.hits for i in intervals)
        total_misses = sum(i.misses for i in intervals)
        return TimeBasedStats(
            interval_duration_ms=self.duration_ms,
            intervals=intervals[-REPORTED_INTERVALS:],
            aggregate=AggregateStats(
                total_hits=total_hits,
                total_misses=total_misses,
                hit_rate=hit_rate(total_hits, total_misses),
                period_covered_ms=now - intervals[0].start_time if intervals else 0,
            ),
        )


class StatsEngine:
    """Owns every statistic the cache reports."""

    def __init__(self, *, window_size: int, interval_duration_ms: int, now: int) -> None:
        self._window_size = window_size
        self._interval_duration_ms = interval_duration_ms
        self.reset(now)

    def reset(self, now: int) -> None:
        self.totals = CumulativeStats()
        self.window = RollingWindow(self._window_size)
        self.intervals = IntervalStats(self._interval_duration_ms, now)

    def record_hit(self, now: int) -> None:
        self.totals.hits += 1
        self._record(Outcome.HIT, now)

    def record_miss(self, now: int) -> None:
        self.totals.misses += 1
        self._record(Outcome.MISS, now)

    def record_eviction(self, *, lru: bool = False, count: int = 1) -> None:
        self.totals.evictions += count
        if lru:
            self.totals.lru_evictions += count

    def rotate(self, now: int) -> bool:
        return self.intervals.rotate(now)

    def _record(self, outcome: Outcome, now: int) -> None:
        self.window.record(outcome, now)
        self.intervals.record(outcome)
