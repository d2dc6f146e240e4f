"""Tests for result cache"""

import pytest

from marginrisk.config import EngineConfig
from marginrisk.data.cache import ResultCache, make_key
from marginrisk.state.models import Position


@pytest.fixture
def positions():
    return [
        Position("0xa", 2000.0, 0.0, 0.0, 1000.0, 1.1),
        Position("0xb", 1300.0, 0.0, 0.0, 1000.0, 1.1),
    ]


class TestMakeKey:
    """Test cache key generation"""

    def test_stable(self, positions):
        assert make_key("analysis", positions, "ALL") == make_key("analysis", list(positions), "ALL")

    def test_parameter_changes_key(self, positions):
        assert make_key("analysis", positions, "ALL") != make_key("analysis", positions, "SUI")

    def test_position_changes_key(self, positions):
        changed = [positions[0], Position("0xb", 1200.0, 0.0, 0.0, 1000.0, 1.1)]
        assert make_key(positions) != make_key(changed)

    def test_config_changes_key(self, positions):
        assert make_key(positions, EngineConfig()) != make_key(positions, EngineConfig(sweep_step_pct=5))

    def test_hex_digest(self):
        key = make_key("x")
        assert len(key) == 64
        int(key, 16)


class TestResultCache:
    """Test suite for ResultCache"""

    def test_init(self):
        cache = ResultCache(max_entries=10)

        assert cache.max_entries == 10
        assert len(cache) == 0

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            ResultCache(max_entries=0)

    def test_set_and_get(self):
        cache = ResultCache()
        cache.set("key", {"value": 1})

        assert "key" in cache
        assert cache.get("key") == {"value": 1}

    def test_get_missing(self):
        assert ResultCache().get("missing") is None

    def test_hits_and_misses(self):
        cache = ResultCache()
        cache.set("key", 1)

        cache.get("key")
        cache.get("key")
        cache.get("other")

        info = cache.get_cache_info()
        assert info["hits"] == 2
        assert info["misses"] == 1
        assert info["num_entries"] == 1

    def test_lru_eviction(self):
        cache = ResultCache(max_entries=2)
        cache.set("a", 1)
        cache.set("b", 2)

        # Touch "a" so "b" becomes least recently used
        cache.get("a")
        cache.set("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert len(cache) == 2

    def test_clear_specific(self):
        cache = ResultCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.clear("a")

        assert "a" not in cache
        assert "b" in cache

    def test_clear_all(self):
        cache = ResultCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.clear()

        assert len(cache) == 0
