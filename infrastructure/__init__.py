"""
infrastructure package

Shared infrastructure components for numcore.
Provides capability interfaces, the process-wide magnitude interner and
cache management.

Modules:
    - interfaces: Capability interfaces for numeric types
    - interner: Reference-counted BigInt magnitude store
    - cache_manager: Centralized cache management system
"""

from infrastructure.cache_manager import CacheManager, get_cache_manager
from infrastructure.interfaces import (
    Addable,
    Comparable,
    Convertible,
    Divisible,
    Formattable,
    Multipliable,
    Negatable,
    Numeric,
    NumericResult,
    Subtractable,
)
from infrastructure.interner import MagnitudeInterner, get_interner

__all__ = [
    "Addable",
    "Subtractable",
    "Multipliable",
    "Divisible",
    "Negatable",
    "Comparable",
    "Formattable",
    "Convertible",
    "Numeric",
    "NumericResult",
    "MagnitudeInterner",
    "get_interner",
    "CacheManager",
    "get_cache_manager",
]
