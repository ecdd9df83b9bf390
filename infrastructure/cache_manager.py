"""
infrastructure/cache_manager.py

Centralized cache management for numcore.

Holds the memo tables that make repeated conversions cheap, most notably
the radix powers used by divide-and-conquer to_string/parse on large
BigInt values.

Features:
- Singleton CacheManager for process-wide coordination
- Named caches with a size policy (cachetools.LRUCache)
- Thread-safe operations with RLock protection
- Statistics tracking (hits, misses, hit rate)
- Invalidation (per-key or entire cache)

Usage:
    from infrastructure.cache_manager import get_cache_manager

    cache_mgr = get_cache_manager()
    cache_mgr.register_cache("radix_powers", maxsize=256)

    power = cache_mgr.get_or_compute("radix_powers", (10, 3), compute_fn)

Thread Safety:
- All public methods protected by RLock
- Reentrant lock allows nested calls
- get_or_compute runs compute_fn outside the lock; concurrent misses may
  compute the same value twice, the first stored value wins
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional

from cachetools import LRUCache

from component_15_logging_config import get_logger

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class CacheStatistics:
    """Statistics for a single cache."""

    cache_name: str
    hits: int = 0
    misses: int = 0
    sets: int = 0
    invalidations: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_requests(self) -> int:
        """Total cache requests (hits + misses)."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0-1.0)."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


@dataclass
class CachePolicy:
    """Configuration policy for a cache."""

    maxsize: int


_MISSING = object()


# ============================================================================
# Cache Manager (Singleton)
# ============================================================================


class CacheManager:
    """
    Centralized cache management system.

    Manages multiple named caches with individual policies and statistics.

    Attributes:
        caches: Dictionary of cache_name -> LRUCache
        policies: Dictionary of cache_name -> CachePolicy
        statistics: Dictionary of cache_name -> CacheStatistics
    """

    _instance: Optional["CacheManager"] = None
    _lock = threading.RLock()  # Class-level lock for singleton

    def __new__(cls) -> "CacheManager":
        """Singleton pattern: Only one CacheManager instance."""
        if cls._instance is None:
            with cls._lock:
                # Double-checked locking pattern
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize CacheManager (only once due to singleton)."""
        if self._initialized:
            return

        self.caches: Dict[str, LRUCache] = {}
        self.policies: Dict[str, CachePolicy] = {}
        self.statistics: Dict[str, CacheStatistics] = {}

        self._cache_lock = threading.RLock()

        self._initialized = True

        logger.info("CacheManager initialized (singleton)")

    def register_cache(self, name: str, maxsize: int, overwrite: bool = False) -> None:
        """
        Register a named cache.

        Args:
            name: Unique cache identifier (e.g., "radix_powers")
            maxsize: Maximum number of entries
            overwrite: If True, replace existing cache; if False, error on duplicate

        Raises:
            ValueError: If cache already exists and overwrite=False
            ValueError: If maxsize <= 0
        """
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")

        with self._cache_lock:
            existed = name in self.caches
            if existed and not overwrite:
                raise ValueError(
                    f"Cache '{name}' already registered. Use overwrite=True to replace."
                )

            self.caches[name] = LRUCache(maxsize=maxsize)
            self.policies[name] = CachePolicy(maxsize=maxsize)
            self.statistics[name] = CacheStatistics(cache_name=name)

            logger.info(
                "Cache %s: %s (maxsize=%d)",
                "replaced" if existed else "registered",
                name,
                maxsize,
            )

    def ensure_cache(self, name: str, maxsize: int) -> None:
        """Register a cache unless one with this name already exists."""
        with self._cache_lock:
            if name not in self.caches:
                self.register_cache(name, maxsize)

    def get(self, cache_name: str, key: Hashable) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value if found, None otherwise

        Raises:
            ValueError: If cache not registered
        """
        with self._cache_lock:
            cache, stats = self._lookup(cache_name)

            value = cache.get(key, _MISSING)
            if value is _MISSING:
                stats.misses += 1
                return None
            stats.hits += 1
            return value

    def set(self, cache_name: str, key: Hashable, value: Any) -> None:
        """
        Set value in cache.

        Raises:
            ValueError: If cache not registered
        """
        with self._cache_lock:
            cache, stats = self._lookup(cache_name)
            cache[key] = value
            stats.sets += 1

    def get_or_compute(
        self, cache_name: str, key: Hashable, compute_fn: Callable[[], Any]
    ) -> Any:
        """
        Return the cached value for key, computing and storing it on a miss.

        Raises:
            ValueError: If cache not registered
        """
        with self._cache_lock:
            cache, stats = self._lookup(cache_name)
            value = cache.get(key, _MISSING)
            if value is not _MISSING:
                stats.hits += 1
                return value
            stats.misses += 1

        value = compute_fn()

        with self._cache_lock:
            cache, stats = self._lookup(cache_name)
            existing = cache.get(key, _MISSING)
            if existing is not _MISSING:
                return existing
            cache[key] = value
            stats.sets += 1
            return value

    def invalidate(self, cache_name: str, key: Optional[Hashable] = None) -> int:
        """
        Invalidate cache entries.

        Args:
            cache_name: Name of the cache
            key: Specific key to invalidate, or None to clear entire cache

        Returns:
            Number of entries invalidated

        Raises:
            ValueError: If cache not registered
        """
        with self._cache_lock:
            cache, stats = self._lookup(cache_name)

            if key is not None:
                if key in cache:
                    del cache[key]
                    stats.invalidations += 1
                    return 1
                return 0

            count = len(cache)
            cache.clear()
            stats.invalidations += count
            logger.info("Cache CLEARED: %s (%d entries)", cache_name, count)
            return count

    def get_stats(self, cache_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Get cache statistics.

        Args:
            cache_name: Name of specific cache, or None for all caches

        Returns:
            Statistics dictionary (per cache: hits, misses, sets,
            invalidations, hit_rate, size, maxsize, created_at)

        Raises:
            ValueError: If specific cache not registered
        """
        with self._cache_lock:
            if cache_name is None:
                return {name: self.get_stats(name) for name in self.caches}

            cache, stats = self._lookup(cache_name)
            return {
                "cache_name": cache_name,
                "hits": stats.hits,
                "misses": stats.misses,
                "sets": stats.sets,
                "invalidations": stats.invalidations,
                "total_requests": stats.total_requests,
                "hit_rate": stats.hit_rate,
                "size": len(cache),
                "maxsize": self.policies[cache_name].maxsize,
                "created_at": stats.created_at.isoformat(),
            }

    def list_caches(self) -> List[str]:
        """Sorted list of registered cache names."""
        with self._cache_lock:
            return sorted(self.caches.keys())

    def unregister_cache(self, cache_name: str) -> None:
        """
        Unregister a cache (removes cache, policy, and statistics).

        Raises:
            ValueError: If cache not registered
        """
        with self._cache_lock:
            self._lookup(cache_name)
            del self.caches[cache_name]
            del self.policies[cache_name]
            del self.statistics[cache_name]

            logger.info("Cache unregistered: %s", cache_name)

    def _lookup(self, cache_name: str):
        if cache_name not in self.caches:
            raise ValueError(f"Cache '{cache_name}' not registered")
        return self.caches[cache_name], self.statistics[cache_name]


# ============================================================================
# Module-level Functions (Convenience API)
# ============================================================================

# Global singleton instance (initialized lazily)
_cache_manager_instance: Optional[CacheManager] = None
_instance_lock = threading.RLock()


def get_cache_manager() -> CacheManager:
    """
    Get the global CacheManager singleton instance.

    Thread-safe lazy initialization with double-checked locking.
    """
    global _cache_manager_instance

    if _cache_manager_instance is None:
        with _instance_lock:
            # Double-checked locking
            if _cache_manager_instance is None:
                _cache_manager_instance = CacheManager()

    return _cache_manager_instance


def reset_cache_manager() -> None:
    """
    Reset the global CacheManager singleton.

    WARNING: Only use for testing! This will clear all registered caches
    and statistics.
    """
    global _cache_manager_instance

    with _instance_lock:
        if _cache_manager_instance is not None:
            with _cache_manager_instance._cache_lock:
                _cache_manager_instance.caches.clear()
                _cache_manager_instance.policies.clear()
                _cache_manager_instance.statistics.clear()

            _cache_manager_instance = None
            CacheManager._instance = None
            logger.warning("CacheManager singleton reset (should only be used in tests)")
