"""
component_2_bigint_multiplication.py

Magnitude multiplication for the BigInt engine.

Two algorithms with a size-based dispatch:
- Schoolbook O(n*m): one multiply_single row per word of the shorter
  operand, accumulated at its word offset
- Karatsuba O(n^1.585): split both operands at m words,
  a*b = z2*B^2m + ((a0+a1)(b0+b1) - z0 - z2)*B^m + z0

Both paths return the same canonical word list for the same inputs; the
test suite checks this across the threshold boundary.
"""

from typing import List, Optional, Sequence

from common.constants import MIN_KARATSUBA_THRESHOLD, WORD_BITS, WORD_MASK
from component_15_logging_config import PerformanceLogger, get_logger
from component_1_word_buffer import (
    add_with_carry,
    multiply_single,
    sub_with_borrow,
    trim,
)
from numcore_config import get_config

logger = get_logger(__name__)

# Operand size above which the top-level Karatsuba call is timed
_TIMED_KARATSUBA_WORDS = 512


def _add_at(acc: List[int], words: Sequence[int], offset: int) -> None:
    """acc += words << (offset words), in place; acc must be long enough."""
    carry = 0
    i = offset
    for w in words:
        t = acc[i] + w + carry
        acc[i] = t & WORD_MASK
        carry = t >> WORD_BITS
        i += 1
    while carry:
        t = acc[i] + carry
        acc[i] = t & WORD_MASK
        carry = t >> WORD_BITS
        i += 1


def multiply_schoolbook(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Quadratic product of two magnitudes, trimmed."""
    if not a or not b:
        return []
    if len(a) < len(b):
        a, b = b, a
    acc = [0] * (len(a) + len(b) + 1)
    for i, word in enumerate(b):
        if word == 0:
            continue
        row, carry = multiply_single(a, word)
        row.append(carry)
        _add_at(acc, row, i)
    return trim(acc)


def multiply_karatsuba(
    a: Sequence[int], b: Sequence[int], threshold: int = MIN_KARATSUBA_THRESHOLD
) -> List[int]:
    """
    Karatsuba product of two magnitudes, trimmed.

    Recursion falls back to schoolbook once the shorter operand has fewer
    than ``threshold`` words. Operands more than twice as long as the other
    are cut into slices of the shorter length first.
    """
    threshold = max(threshold, MIN_KARATSUBA_THRESHOLD)
    a, b = trim(a), trim(b)
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return []
    if len(b) < threshold:
        return multiply_schoolbook(a, b)
    if 2 * len(b) <= len(a):
        return _multiply_unbalanced(a, b, threshold)

    m = (len(a) + 1) // 2
    a0, a1 = trim(a[:m]), a[m:]
    b0, b1 = trim(b[:m]), b[m:]

    z0 = multiply_karatsuba(a0, b0, threshold)
    z2 = multiply_karatsuba(a1, b1, threshold)
    z1 = multiply_karatsuba(add_with_carry(a0, a1), add_with_carry(b0, b1), threshold)
    # (a0 + a1)(b0 + b1) >= z0 + z2, so neither subtraction borrows
    z1 = sub_with_borrow(z1, z0)[0]
    z1 = sub_with_borrow(z1, z2)[0]

    acc = [0] * (len(a) + len(b) + 2)
    _add_at(acc, z0, 0)
    _add_at(acc, trim(z1), m)
    _add_at(acc, z2, 2 * m)
    return trim(acc)


def _multiply_unbalanced(a: List[int], b: List[int], threshold: int) -> List[int]:
    step = len(b)
    acc = [0] * (len(a) + len(b) + 1)
    for offset in range(0, len(a), step):
        piece = trim(a[offset : offset + step])
        if piece:
            _add_at(acc, multiply_karatsuba(piece, b, threshold), offset)
    return trim(acc)


def multiply(
    a: Sequence[int], b: Sequence[int], threshold: Optional[int] = None
) -> List[int]:
    """
    Product of two magnitudes with algorithm selection.

    Args:
        a, b: Little-endian magnitudes
        threshold: Karatsuba threshold in words (default from NumericConfig)

    Returns:
        Trimmed product words
    """
    if threshold is None:
        threshold = get_config().karatsuba_threshold

    shorter = min(len(a), len(b))
    if shorter < threshold:
        return multiply_schoolbook(a, b)

    logger.debug(
        "multiply: karatsuba selected (%d x %d words, threshold=%d)",
        len(a),
        len(b),
        threshold,
    )
    if shorter >= _TIMED_KARATSUBA_WORDS:
        with PerformanceLogger(logger.logger, "karatsuba", words=shorter):
            return multiply_karatsuba(a, b, threshold)
    return multiply_karatsuba(a, b, threshold)
