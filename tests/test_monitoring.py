"""Tests for cmdcache.monitoring — event logging and the stats collector."""

import logging

from cmdcache.models.enums import EventKind
from cmdcache.monitoring import RECENT_OPERATIONS, CacheStatsCollector, attach_event_logging


class TestAttachEventLogging:
    def test_logs_set_eviction_clear(self, make_cache, clock, caplog):
        cache = make_cache(max_keys=1)
        attach_event_logging(cache)
        with caplog.at_level(logging.INFO, logger="cmdcache.monitoring"):
            cache.set("a", "x", ttl_ms=100)
            cache.set("b", "y", ttl_ms=100)
            cache.clear()

        messages = [r.getMessage() for r in caplog.records]
        assert "SET key='a' size=6B ttl=100ms" in messages
        assert "EVICTION key='a' reason=lru" in messages
        assert "CLEAR removed 1 entries" in messages

    def test_logs_cleanup(self, cache, clock, caplog):
        attach_event_logging(cache)
        cache.set("a", 1, ttl_ms=1)
        clock.advance(5)
        with caplog.at_level(logging.INFO, logger="cmdcache.monitoring"):
            cache.cleanup()
        assert "CLEANUP evicted 1 expired entries" in caplog.messages

    def test_get_logging_off_by_default(self, cache):
        attach_event_logging(cache)
        assert cache._events.handler_count(EventKind.GET) == 0

    def test_get_logging_opt_in(self, cache, caplog):
        attach_event_logging(cache, log_get=True)
        with caplog.at_level(logging.DEBUG, logger="cmdcache.monitoring"):
            cache.get("missing")
        assert "GET key='missing' result=MISS" in caplog.messages

    def test_custom_logger(self, cache, caplog):
        custom = logging.getLogger("status.line")
        attach_event_logging(cache, log=custom)
        with caplog.at_level(logging.INFO, logger="status.line"):
            cache.set("k", 1)
        assert caplog.records[0].name == "status.line"

    def test_detach(self, cache):
        detach = attach_event_logging(cache, log_get=True)
        detach()
        for kind in EventKind:
            assert cache._events.handler_count(kind) == 0


class TestCacheStatsCollector:
    def test_counts_operations(self, make_cache, clock):
        cache = make_cache(max_keys=2)
        collector = CacheStatsCollector(cache)

        cache.set("a", 1, ttl_ms=10)
        cache.set("b", 2)
        cache.get("b")
        cache.get("zzz")
        cache.set("c", 3)  # lru evicts "a"
        cache.delete("b")
        clock.advance(20_000)
        cache.cleanup()  # "c" expired
        cache.set("d", 4)
        cache.clear()

        ops = collector.snapshot()["operations"]
        assert ops["sets"] == 4
        assert ops["gets"] == 2
        assert (ops["hits"], ops["misses"]) == (1, 1)
        assert ops["evictions"] == {"ttl": 1, "lru": 1, "manual": 1}
        assert ops["cleanups"] == 1
        assert ops["clears"] == 1

    def test_recent_operations_bounded(self, cache):
        collector = CacheStatsCollector(cache)
        for i in range(RECENT_OPERATIONS + 5):
            cache.set(f"k{i}", i)
        recent = collector.snapshot()["recent_operations"]
        assert len(recent) == RECENT_OPERATIONS
        assert recent[-1]["key"] == f"k{RECENT_OPERATIONS + 4}"
        assert recent[0]["type"] == "set"

    def test_records_eviction_reason(self, cache):
        collector = CacheStatsCollector(cache)
        cache.set("a", 1)
        cache.delete("a")
        last = collector.snapshot()["recent_operations"][-1]
        assert last["type"] == "eviction"
        assert last["reason"] == "manual"

    def test_reset(self, cache):
        collector = CacheStatsCollector(cache)
        cache.set("a", 1)
        collector.reset()
        snap = collector.snapshot()
        assert snap["operations"]["sets"] == 0
        assert snap["recent_operations"] == []

    def test_detach(self, cache):
        collector = CacheStatsCollector(cache)
        collector.detach()
        cache.set("a", 1)
        assert collector.sets == 0
