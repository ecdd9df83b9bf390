"""
infrastructure/interner.py

Process-wide interner for BigInt magnitudes.

Deduplicates equal magnitudes behind one shared, reference-counted
WordBuffer so that many BigInt values holding the same large number share
a single storage object.

Features:
- Lazily created singleton (get_interner) with double-checked locking
- Insert-if-absent keyed by canonical magnitude bytes
- Reference count incremented on every hit, decremented when an owning
  BigInt is collected; entries are reclaimed at zero
- Statistics (hits, misses, reclaims, peak entries)

Thread Safety:
- The candidate WordBuffer and its byte key are built outside the lock
- The critical section is one dict lookup plus a counter update
- Two threads interning the same magnitude resolve to exactly one stored
  buffer: the loser discards its candidate and adopts the winner's

Usage:
    from infrastructure.interner import get_interner

    interner = get_interner()
    buffer, key = interner.acquire(words)
    ...
    interner.release(key)
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from component_15_logging_config import get_logger
from component_1_word_buffer import WordBuffer

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class InternerStatistics:
    """Statistics for the magnitude interner."""

    hits: int = 0
    misses: int = 0
    reclaims: int = 0
    peak_entries: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_requests(self) -> int:
        """Total acquire calls (hits + misses)."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Share of acquire calls served by an existing entry (0.0-1.0)."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


class InternedEntry:
    """One stored magnitude and the number of live owners."""

    __slots__ = ("buffer", "refs")

    def __init__(self, buffer: WordBuffer):
        self.buffer = buffer
        self.refs = 0


# ============================================================================
# Magnitude Interner
# ============================================================================


class MagnitudeInterner:
    """
    Reference-counted store of canonical magnitudes.

    Attributes:
        statistics: InternerStatistics for this interner
    """

    def __init__(self):
        self._entries: Dict[bytes, InternedEntry] = {}
        self._lock = threading.Lock()
        self.statistics = InternerStatistics()

        logger.info("MagnitudeInterner initialized")

    def acquire(self, words: Sequence[int]) -> Tuple[WordBuffer, bytes]:
        """
        Intern a magnitude and take one reference to it.

        Args:
            words: Little-endian magnitude words (trimmed or not)

        Returns:
            (shared WordBuffer, canonical byte key). The caller owns one
            reference and must call release(key) exactly once.
        """
        candidate = words if isinstance(words, WordBuffer) else WordBuffer(words)
        key = candidate.to_bytes()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = InternedEntry(candidate)
                self._entries[key] = entry
                self.statistics.misses += 1
                if len(self._entries) > self.statistics.peak_entries:
                    self.statistics.peak_entries = len(self._entries)
            else:
                self.statistics.hits += 1
            entry.refs += 1
            return entry.buffer, key

    def retain(self, key: bytes) -> None:
        """
        Take an additional reference to an existing entry.

        Raises:
            KeyError: If the key is not interned
        """
        with self._lock:
            self._entries[key].refs += 1

    def release(self, key: bytes) -> None:
        """
        Drop one reference; reclaim the entry when none remain.

        Releasing an unknown key is logged and ignored: it happens when
        reset_interner() replaced the store while values were still alive.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Release of unknown interner key (%d bytes)", len(key))
                return
            entry.refs -= 1
            if entry.refs <= 0:
                del self._entries[key]
                self.statistics.reclaims += 1

    def refcount(self, key: bytes) -> int:
        """Live reference count for a key (0 when not interned)."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.refs if entry is not None else 0

    def lookup(self, key: bytes) -> Optional[WordBuffer]:
        """Stored buffer for a key without taking a reference."""
        with self._lock:
            entry = self._entries.get(key)
            return entry.buffer if entry is not None else None

    def __contains__(self, key: bytes) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get interner statistics.

        Returns:
            Dictionary with entries, total_refs, hits, misses, reclaims,
            hit_rate, peak_entries, created_at
        """
        with self._lock:
            return {
                "entries": len(self._entries),
                "total_refs": sum(e.refs for e in self._entries.values()),
                "hits": self.statistics.hits,
                "misses": self.statistics.misses,
                "reclaims": self.statistics.reclaims,
                "hit_rate": self.statistics.hit_rate,
                "peak_entries": self.statistics.peak_entries,
                "created_at": self.statistics.created_at.isoformat(),
            }


# ============================================================================
# Module-level Functions (Convenience API)
# ============================================================================

# Global singleton instance (initialized lazily)
_interner_instance: Optional[MagnitudeInterner] = None
_instance_lock = threading.RLock()


def get_interner() -> MagnitudeInterner:
    """
    Get the process-wide MagnitudeInterner.

    Thread-safe lazy initialization with double-checked locking. The
    interner lives for the rest of the process; entries reclaim themselves.
    """
    global _interner_instance

    if _interner_instance is None:
        with _instance_lock:
            # Double-checked locking
            if _interner_instance is None:
                _interner_instance = MagnitudeInterner()

    return _interner_instance


def reset_interner() -> None:
    """
    Replace the process-wide interner with a fresh one.

    WARNING: Only use for testing! Values created before the reset release
    into the old store, which is simply dropped.
    """
    global _interner_instance

    with _instance_lock:
        _interner_instance = None
        logger.info("MagnitudeInterner reset")
