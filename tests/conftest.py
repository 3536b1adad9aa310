import os

import pytest

from cmdcache.cache.engine import Cache
from cmdcache.registry import destroy_cache


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Strip CMDCACHE_* vars and keep a stray .env file out of reach."""
    for name in list(os.environ):
        if name.startswith("CMDCACHE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield
    destroy_cache()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cache(clock):
    """Factory for caches on the fake clock without a janitor thread."""
    created: list[Cache] = []

    def _make(**options) -> Cache:
        cache = Cache(clock=clock, start_janitor=False, **options)
        created.append(cache)
        return cache

    yield _make
    for cache in created:
        cache.destroy()


@pytest.fixture
def cache(make_cache) -> Cache:
    return make_cache()
