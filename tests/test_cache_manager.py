# tests/test_cache_manager.py
"""
Tests for infrastructure/cache_manager.py.

Covers:
- Registration, duplicate handling and size policy
- get/set/get_or_compute statistics
- LRU eviction and invalidation
- Singleton lifecycle
"""

import pytest

from infrastructure.cache_manager import (
    CacheManager,
    get_cache_manager,
    reset_cache_manager,
)

# ==================== FIXTURES ====================


@pytest.fixture
def cache_mgr():
    """Fixture: Manager with one small cache"""
    manager = get_cache_manager()
    manager.register_cache("test", maxsize=3)
    return manager


# ==================== TESTS ====================


class TestRegistration:
    """Tests for cache registration"""

    def test_duplicate_rejected(self, cache_mgr):
        """Test: Registering twice needs overwrite=True"""
        with pytest.raises(ValueError):
            cache_mgr.register_cache("test", maxsize=3)
        cache_mgr.register_cache("test", maxsize=5, overwrite=True)
        assert cache_mgr.get_stats("test")["maxsize"] == 5

    def test_invalid_maxsize(self, cache_mgr):
        """Test: maxsize must be positive"""
        with pytest.raises(ValueError):
            cache_mgr.register_cache("empty", maxsize=0)

    def test_ensure_cache_idempotent(self, cache_mgr):
        """Test: ensure_cache keeps an existing cache"""
        cache_mgr.set("test", "k", 1)
        cache_mgr.ensure_cache("test", maxsize=10)
        assert cache_mgr.get("test", "k") == 1
        assert cache_mgr.get_stats("test")["maxsize"] == 3

    def test_unknown_cache(self, cache_mgr):
        """Test: Operations on unregistered caches raise"""
        with pytest.raises(ValueError):
            cache_mgr.get("missing", "k")

    def test_unregister(self, cache_mgr):
        """Test: Cache and statistics removed"""
        cache_mgr.unregister_cache("test")
        assert "test" not in cache_mgr.list_caches()


class TestOperations:
    """Tests for cache reads and writes"""

    def test_hits_and_misses(self, cache_mgr):
        """Test: Statistics follow lookups"""
        assert cache_mgr.get("test", "a") is None
        cache_mgr.set("test", "a", 42)
        assert cache_mgr.get("test", "a") == 42
        stats = cache_mgr.get_stats("test")
        assert (stats["hits"], stats["misses"], stats["sets"]) == (1, 1, 1)
        assert stats["hit_rate"] == 0.5

    def test_get_or_compute(self, cache_mgr):
        """Test: compute_fn runs once per key"""
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache_mgr.get_or_compute("test", "k", compute) == "value"
        assert cache_mgr.get_or_compute("test", "k", compute) == "value"
        assert len(calls) == 1

    def test_lru_eviction(self, cache_mgr):
        """Test: Least recently used entry goes first"""
        for key in "abc":
            cache_mgr.set("test", key, key)
        cache_mgr.get("test", "a")
        cache_mgr.set("test", "d", "d")
        assert cache_mgr.get("test", "b") is None
        assert cache_mgr.get("test", "a") == "a"

    def test_invalidate(self, cache_mgr):
        """Test: Single key and whole cache"""
        cache_mgr.set("test", "a", 1)
        cache_mgr.set("test", "b", 2)
        assert cache_mgr.invalidate("test", "a") == 1
        assert cache_mgr.invalidate("test", "a") == 0
        assert cache_mgr.invalidate("test") == 1
        assert cache_mgr.get_stats("test")["size"] == 0


class TestSingleton:
    """Tests for the process-wide manager"""

    def test_same_instance(self):
        """Test: Constructor and accessor agree"""
        assert get_cache_manager() is CacheManager()

    def test_reset(self, cache_mgr):
        """Test: reset drops every cache"""
        reset_cache_manager()
        assert get_cache_manager().list_caches() == []
