import pytest

from domain.hash_constants import EDGE_CACHE_CONTROL, EDGE_CACHE_MAX_AGE_SECONDS
from infrastructure.edge_cache import EdgeCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestEdgeCache:
    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def cache(self, clock):
        return EdgeCache(clock=clock)

    def test_freshness_window_is_seven_days(self, cache):
        assert cache.max_age_seconds == EDGE_CACHE_MAX_AGE_SECONDS == 7 * 24 * 60 * 60

    def test_cache_control_marks_immutable(self):
        assert EDGE_CACHE_CONTROL == "max-age=604800, s-maxage=604800, immutable"

    def test_miss_on_empty_cache(self, cache):
        assert cache.get("2cf24db") is None

    def test_hit_after_put(self, cache):
        cache.put("2cf24db", b"hello", "text/plain")

        cached = cache.get("2cf24db")
        assert cached.content == b"hello"
        assert cached.content_type == "text/plain"
        assert "2cf24db" in cache

    def test_fresh_until_just_before_window_ends(self, cache, clock):
        cache.put("2cf24db", b"hello", "text/plain")
        clock.now += EDGE_CACHE_MAX_AGE_SECONDS - 1
        assert cache.get("2cf24db") is not None

    def test_stale_entry_is_dropped(self, cache, clock):
        cache.put("2cf24db", b"hello", "text/plain")
        clock.now += EDGE_CACHE_MAX_AGE_SECONDS

        assert cache.get("2cf24db") is None
        assert len(cache) == 0

    def test_put_refreshes_entry(self, cache, clock):
        cache.put("2cf24db", b"hello", "text/plain")
        clock.now += EDGE_CACHE_MAX_AGE_SECONDS - 10
        cache.put("2cf24db", b"hello", "text/plain")
        clock.now += 20
        assert cache.get("2cf24db") is not None

    def test_oldest_entry_evicted_when_full(self, clock):
        cache = EdgeCache(max_entries=2, clock=clock)
        cache.put("aaaaaaa", b"a", "text/plain")
        cache.put("bbbbbbb", b"b", "text/plain")
        cache.put("ccccccc", b"c", "text/plain")

        assert len(cache) == 2
        assert cache.get("aaaaaaa") is None
        assert cache.get("bbbbbbb").content == b"b"
        assert cache.get("ccccccc").content == b"c"
