"""
Centralized constants for the numcore numeric core.

This module provides a single source of truth for limb geometry, algorithm
thresholds and cache sizes used throughout the codebase.

Organization:
    - Limb Geometry: Word width and masks for the Word Buffer
    - Multiplication: Karatsuba dispatch threshold
    - Radix Conversion: Digit alphabet and divide-and-conquer threshold
    - Interning: Inline/interned storage boundary
    - Caches: Sizes for the radix power cache
    - Overflow Policy: Narrowing modes of FixedInt arithmetic

Usage:
    from common.constants import WORD_BITS, WORD_MASK

Note:
    Thresholds define defaults only. Runtime tuning goes through
    numcore_config.NumericConfig; limb geometry is fixed.
"""

# =============================================================================
# Limb Geometry
# =============================================================================

WORD_BITS: int = 32
"""
Width of one limb of a BigInt magnitude.

Rationale:
    Two limbs multiply into a 64-bit product, so schoolbook and Knuth
    division steps stay within the range a native double-width register
    would cover. Changing this value changes the canonical byte key used by
    the interner.

Used by:
    - component_1_word_buffer.py: Carry/borrow propagation
    - component_2_bigint_division.py: Normalization shift
"""

WORD_BYTES: int = WORD_BITS // 8

WORD_BASE: int = 1 << WORD_BITS

WORD_MASK: int = WORD_BASE - 1

# =============================================================================
# Multiplication
# =============================================================================

DEFAULT_KARATSUBA_THRESHOLD: int = 32
"""
Operand size (in words) at which multiplication switches to Karatsuba.

- Both operands < threshold: Schoolbook O(n*m)
- Smaller operand >= threshold: Karatsuba divide-and-conquer

Tuning:
    Lower values exercise Karatsuba on small inputs (used by tests to prove
    both paths agree); higher values favour the lower constant factor of the
    schoolbook loop.
"""

MIN_KARATSUBA_THRESHOLD: int = 2
"""Karatsuba needs at least two words per half to make progress."""

# =============================================================================
# Radix Conversion
# =============================================================================

DIGITS: str = "0123456789abcdefghijklmnopqrstuvwxyz"
"""Digit alphabet for radix 2..36 (parsing is case-insensitive)."""

MIN_RADIX: int = 2

MAX_RADIX: int = len(DIGITS)

DEFAULT_DC_FORMAT_THRESHOLD: int = 64
"""
Magnitude size (in words) above which to_string/parse split the number
recursively by cached radix powers instead of peeling one word-sized chunk
at a time.
"""

# =============================================================================
# Interning
# =============================================================================

DEFAULT_INTERN_MIN_WORDS: int = 2
"""
Magnitudes with fewer words are stored inline in the BigInt.

Rationale:
    Single-word values are cheaper to copy than to look up.
"""

# =============================================================================
# Caches
# =============================================================================

DEFAULT_RADIX_CACHE_SIZE: int = 256
"""Maximum number of cached radix powers (all radices combined)."""

RADIX_POWER_CACHE: str = "radix_powers"
"""Name of the CacheManager cache holding radix powers."""

# =============================================================================
# Fixed-Point Widening
# =============================================================================

NATIVE_WIDEN_LIMIT: int = 64
"""
Widest Fixed backing (bits) whose products and widened dividends are
computed with plain Python ints. Wider backings go through the BigInt
engine.
"""

# =============================================================================
# Posit Formatting
# =============================================================================

POSIT_NAR_TEXT: str = "NaR"
"""Text form of the posit Not-a-Real pattern."""

# =============================================================================
# Overflow Policy
# =============================================================================

CHECKED: str = "checked"
"""Out-of-range FixedInt results raise NumericOverflowError."""

WRAPPING: str = "wrapping"
"""Out-of-range FixedInt results are reduced modulo 2**bits."""

SATURATING: str = "saturating"
"""Out-of-range FixedInt results are clamped to the type's min or max."""

OVERFLOW_POLICIES = (CHECKED, WRAPPING, SATURATING)
