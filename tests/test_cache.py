import asyncio

import pytest

from websearch.cache import ResultCache
from websearch.contracts import AggregatedResult

pytestmark = pytest.mark.unit


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


RESULT = AggregatedResult(text="Pope Francis.\n", links=["https://example.org/pope"])


def test_hit_within_lifetime():
    clock = FakeClock()
    cache = ResultCache(lifetime_seconds=60, clock=clock)

    asyncio.run(cache.set("current pope", RESULT))
    clock.advance(59_999)

    assert asyncio.run(cache.get("current pope")) == RESULT


def test_entry_expires_at_lifetime_and_is_evicted():
    clock = FakeClock()
    cache = ResultCache(lifetime_seconds=60, clock=clock)

    asyncio.run(cache.set("current pope", RESULT))
    clock.advance(60_000)

    # Expired entries stay until they are read
    assert len(cache) == 1
    assert asyncio.run(cache.get("current pope")) is None
    assert len(cache) == 0


def test_lifetime_override_per_read():
    clock = FakeClock()
    cache = ResultCache(lifetime_seconds=3600, clock=clock)

    asyncio.run(cache.set("q", RESULT))
    clock.advance(10_000)

    assert asyncio.run(cache.get("q", lifetime_seconds=5)) is None


def test_keys_are_prefixed_and_case_sensitive():
    cache = ResultCache(lifetime_seconds=60, clock=FakeClock())
    asyncio.run(cache.set("pope", RESULT))

    assert ResultCache.make_key("pope") == "query_pope"
    assert asyncio.run(cache.get("Pope")) is None
    assert asyncio.run(cache.get("pope")) == RESULT


def test_clear_removes_everything():
    cache = ResultCache(lifetime_seconds=60, clock=FakeClock())
    asyncio.run(cache.set("a", RESULT))
    asyncio.run(cache.set("b", RESULT))

    asyncio.run(cache.clear())

    assert len(cache) == 0
    assert asyncio.run(cache.get("a")) is None
