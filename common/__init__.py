"""
Common utilities and constants for numcore.

This package provides limb geometry, algorithm thresholds and the shared
rounding contract used by the Fixed and Posit layers.
"""

from common.constants import *

__all__ = [
    # Limb Geometry
    "WORD_BITS",
    "WORD_BYTES",
    "WORD_BASE",
    "WORD_MASK",
    # Multiplication
    "DEFAULT_KARATSUBA_THRESHOLD",
    "MIN_KARATSUBA_THRESHOLD",
    # Radix Conversion
    "DIGITS",
    "MIN_RADIX",
    "MAX_RADIX",
    "DEFAULT_DC_FORMAT_THRESHOLD",
    # Interning
    "DEFAULT_INTERN_MIN_WORDS",
    # Caches
    "DEFAULT_RADIX_CACHE_SIZE",
    "RADIX_POWER_CACHE",
    # Fixed-Point Widening
    "NATIVE_WIDEN_LIMIT",
    # Posit Formatting
    "POSIT_NAR_TEXT",
    # Overflow Policy
    "CHECKED",
    "WRAPPING",
    "SATURATING",
    "OVERFLOW_POLICIES",
]
