from cmdcache.models.enums import EventKind, EvictionReason, Outcome


class TestEventKind:
    def test_member_count(self):
        assert len(EventKind) == 5

    def test_is_str_enum(self):
        assert isinstance(EventKind.SET, str)

    def test_value_access(self):
        assert EventKind.SET.value == "set"
        assert EventKind.GET.value == "get"
        assert EventKind.EVICTION.value == "eviction"
        assert EventKind.CLEAR.value == "clear"
        assert EventKind.CLEANUP.value == "cleanup"

    def test_construction_from_value(self):
        assert EventKind("eviction") is EventKind.EVICTION


class TestEvictionReason:
    def test_member_count(self):
        assert len(EvictionReason) == 3

    def test_value_access(self):
        assert EvictionReason.TTL.value == "ttl"
        assert EvictionReason.LRU.value == "lru"
        assert EvictionReason.MANUAL.value == "manual"

    def test_str_behaviour(self):
        assert EvictionReason.LRU == "lru"
        assert f"{EvictionReason.TTL}" == "ttl"


class TestOutcome:
    def test_values(self):
        assert Outcome.HIT == "hit"
        assert Outcome.MISS == "miss"
