# tests/conftest.py
"""
Shared fixtures for the numcore test suite.

Every test starts from a clean process-wide state: default config (no
environment overrides), an empty cache manager and a fresh interner.
"""

import random

import pytest

from infrastructure.cache_manager import reset_cache_manager
from infrastructure.interner import reset_interner
from numcore_config import NumericConfig, reset_config, set_config

_NUMCORE_ENV = (
    "NUMCORE_KARATSUBA_THRESHOLD",
    "NUMCORE_DC_FORMAT_THRESHOLD",
    "NUMCORE_INTERN",
    "NUMCORE_INTERN_MIN_WORDS",
    "NUMCORE_STRICT_PARSE",
    "NUMCORE_RADIX_CACHE_SIZE",
)


@pytest.fixture(autouse=True)
def clean_numcore_state(monkeypatch):
    """Fixture: Default config, empty caches, fresh interner"""
    for key in _NUMCORE_ENV:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    reset_cache_manager()
    reset_interner()
    yield
    reset_config()
    reset_cache_manager()
    reset_interner()


@pytest.fixture
def small_thresholds():
    """Fixture: Karatsuba and divide-and-conquer paths on tiny operands"""
    config = NumericConfig(karatsuba_threshold=2, dc_format_threshold=2)
    set_config(config)
    return config


@pytest.fixture
def rng():
    """Fixture: Seeded random generator for property tests"""
    return random.Random(20240615)


@pytest.fixture
def random_int(rng):
    """Fixture: random_int(max_words, signed=True) drawing from the seeded rng"""

    def draw(max_words: int, signed: bool = True) -> int:
        words = rng.randint(0, max_words)
        value = rng.getrandbits(32 * words) if words else 0
        if signed and rng.random() < 0.5:
            value = -value
        return value

    return draw
