"""
component_2_bigint_division.py

Magnitude long division for the BigInt engine.

- One-word divisors use short division (divide_single)
- Longer divisors use normalized long division (Knuth, TAOCP vol. 2,
  4.3.1 Algorithm D): shift so the divisor's top word has its high bit
  set, estimate each quotient word from the top two dividend words,
  correct the estimate with the divisor's second word, multiply-subtract,
  and add back on the rare overshoot

Signs are handled by the caller; everything here is magnitude only.
"""

from typing import List, Sequence, Tuple

from common.constants import WORD_BASE, WORD_BITS, WORD_MASK
from component_1_word_buffer import (
    compare,
    divide_single,
    shift_left,
    shift_right,
    trim,
)


def divmod_magnitude(
    dividend: Sequence[int], divisor: Sequence[int]
) -> Tuple[List[int], List[int]]:
    """
    Quotient and remainder of two magnitudes.

    Args:
        dividend: Little-endian words
        divisor: Little-endian words, non-zero

    Returns:
        (quotient, remainder), both trimmed, with
        dividend = quotient * divisor + remainder and remainder < divisor

    Raises:
        ZeroDivisionError: If divisor is zero (the BigInt engine checks
        first and raises DivideByZeroError instead)
    """
    u = trim(dividend)
    v = trim(divisor)
    if not v:
        raise ZeroDivisionError("magnitude division by zero")
    if compare(u, v) < 0:
        return [], u
    if len(v) == 1:
        q, r = divide_single(u, v[0])
        return trim(q), ([r] if r else [])
    return _algorithm_d(u, v)


def _algorithm_d(u: List[int], v: List[int]) -> Tuple[List[int], List[int]]:
    n = len(v)
    m = len(u) - n

    # D1: normalize
    s = WORD_BITS - v[-1].bit_length()
    vn = shift_left(v, s)[:n]
    un = shift_left(u, s)
    if len(un) == len(u):
        un.append(0)

    v_top = vn[n - 1]
    v_next = vn[n - 2]
    q = [0] * (m + 1)

    # D2-D7: one quotient word per step, most significant first
    for j in range(m, -1, -1):
        num = (un[j + n] << WORD_BITS) | un[j + n - 1]
        qhat, rhat = divmod(num, v_top)
        while qhat >= WORD_BASE or qhat * v_next > ((rhat << WORD_BITS) | un[j + n - 2]):
            qhat -= 1
            rhat += v_top
            if rhat >= WORD_BASE:
                break

        # D4: multiply and subtract
        borrow = 0
        carry = 0
        for i in range(n):
            p = qhat * vn[i] + carry
            carry = p >> WORD_BITS
            t = un[i + j] - (p & WORD_MASK) - borrow
            un[i + j] = t & WORD_MASK
            borrow = 1 if t < 0 else 0
        t = un[j + n] - carry - borrow
        un[j + n] = t & WORD_MASK

        # D6: add back
        if t < 0:
            qhat -= 1
            carry = 0
            for i in range(n):
                t = un[i + j] + vn[i] + carry
                un[i + j] = t & WORD_MASK
                carry = t >> WORD_BITS
            un[j + n] = (un[j + n] + carry) & WORD_MASK

        q[j] = qhat

    # D8: unnormalize
    r = shift_right(un[:n], s)
    return trim(q), trim(r)
