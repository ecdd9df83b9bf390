"""
component_2_bigint.py

BigInt: immutable arbitrary-precision signed integer.

A BigInt is a sign flag plus a canonical magnitude (trimmed little-endian
32-bit words held in a WordBuffer). Zero is the empty magnitude with a
positive sign. Every operation returns a new BigInt.

Storage:
- Magnitudes shorter than NumericConfig.intern_min_words are stored inline
- Longer magnitudes go through the process-wide MagnitudeInterner when
  NumericConfig.intern_magnitudes is set; equal magnitudes then share one
  WordBuffer, and a weakref finalizer releases the reference when the
  BigInt is collected

Division contract:
    div_rem, //, % and divmod() all truncate toward zero: the remainder
    takes the dividend's sign and |remainder| < |divisor|. This differs
    from Python's floor division on negative operands.

Usage:
    from component_2_bigint import BigInt

    a = BigInt.parse("123456789012345678901234567890")
    q, r = a.div_rem(BigInt(97))
    print(a.to_string(16))
"""

import math
import weakref
from fractions import Fraction
from typing import Any, Optional, Sequence, Tuple

from common.constants import WORD_BITS, WORD_MASK
from common.conversion import convert_exact, non_finite_error
from common.int_types import IntType
from common.rounding import round_fraction
from component_15_logging_config import get_logger
from component_1_word_buffer import (
    WordBuffer,
    add_with_carry,
    bit_length,
    compare,
    shift_left,
    shift_right,
    sub_with_borrow,
    trim,
)
from component_2_bigint_division import divmod_magnitude
from component_2_bigint_multiplication import multiply
from component_2_bigint_radix import format_magnitude, parse_signed
from infrastructure.interfaces import Numeric
from infrastructure.interner import get_interner
from numcore_config import get_config
from numcore_exceptions import (
    DivideByZeroError,
    NumericOverflowError,
    UnsupportedConversionError,
)

logger = get_logger(__name__)

_ONE = (1,)


# ============================================================================
# Signed magnitude helpers
# ============================================================================


def _signed_add(
    a_neg: bool, a: Sequence[int], b_neg: bool, b: Sequence[int]
) -> Tuple[bool, list]:
    """(sign, words) of a + b for signed magnitudes."""
    if a_neg == b_neg:
        return a_neg, add_with_carry(a, b)
    order = compare(a, b)
    if order == 0:
        return False, []
    if order > 0:
        diff, _ = sub_with_borrow(a, b)
        return a_neg, diff
    diff, _ = sub_with_borrow(b, a)
    return b_neg, diff


def _to_twos(negative: bool, words: Sequence[int], width: int) -> list:
    """Two's complement image of a signed magnitude over ``width`` words."""
    padded = list(words) + [0] * (width - len(words))
    if not negative:
        return padded
    less, _ = sub_with_borrow(padded, _ONE)
    return [w ^ WORD_MASK for w in less]


def _from_twos(words: Sequence[int]) -> Tuple[bool, list]:
    if not words or not words[-1] >> (WORD_BITS - 1):
        return False, list(words)
    inverted = [w ^ WORD_MASK for w in words]
    return True, add_with_carry(inverted, _ONE)


# ============================================================================
# BigInt
# ============================================================================


class BigInt(Numeric):
    """
    Arbitrary-precision signed integer.

    Construction:
        BigInt(42), BigInt("-ff", 16), BigInt(other_bigint)
        BigInt.parse(text, radix), BigInt.from_int(n),
        BigInt.from_fraction(q) (rounds half to even)
    """

    def __init__(self, value: Any = 0, radix: int = 10):
        if isinstance(value, BigInt):
            self._adopt(value, value._negative)
        elif isinstance(value, str):
            negative, words = parse_signed(value, radix)
            self._store(negative, words)
        elif isinstance(value, int):
            self._store(value < 0, WordBuffer.from_int(abs(value)).words)
        else:
            raise TypeError(
                f"BigInt() expects int, str or BigInt, got {type(value).__name__}"
            )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def _store(self, negative: bool, words: Sequence[int]) -> None:
        words = trim(words)
        self._negative = bool(negative) and bool(words)
        self._key: Optional[bytes] = None

        config = get_config()
        if config.intern_magnitudes and len(words) >= config.intern_min_words:
            interner = get_interner()
            self._buffer, self._key = interner.acquire(words)
            self._interner = interner
            weakref.finalize(self, interner.release, self._key)
        else:
            self._buffer = WordBuffer(words)

    def _adopt(self, source: "BigInt", negative: bool) -> None:
        """Share source's magnitude storage under a (possibly) new sign."""
        self._negative = bool(negative) and not source._buffer.is_zero()
        self._buffer = source._buffer
        self._key = source._key
        if self._key is not None:
            self._interner = source._interner
            self._interner.retain(self._key)
            weakref.finalize(self, self._interner.release, self._key)

    @classmethod
    def _make(cls, negative: bool, words: Sequence[int]) -> "BigInt":
        obj = cls.__new__(cls)
        obj._store(negative, words)
        return obj

    @classmethod
    def _from_parts(cls, negative: bool, words: Sequence[int]) -> "BigInt":
        """
        Build a BigInt without canonicalising the sign.

        Unsafe: allows a negative zero. Arithmetic and comparison still treat
        it as zero.
        """
        obj = cls.__new__(cls)
        obj._buffer = WordBuffer(words)
        obj._key = None
        obj._negative = bool(negative)
        return obj

    def _with_sign(self, negative: bool) -> "BigInt":
        obj = BigInt.__new__(BigInt)
        obj._adopt(self, negative)
        return obj

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str, radix: int = 10, strict: Optional[bool] = None) -> "BigInt":
        """
        Parse a signed literal in the given radix.

        Raises:
            ParseError: Empty input, bare sign, invalid digit or radix, or a
            redundant leading zero under strict parsing
        """
        negative, words = parse_signed(text, radix, strict)
        return cls._make(negative, words)

    @classmethod
    def from_int(cls, value: int) -> "BigInt":
        return cls._make(value < 0, WordBuffer.from_int(abs(value)).words)

    @classmethod
    def from_fraction(cls, value: Fraction) -> "BigInt":
        """Nearest integer to an exact rational, ties to even."""
        return cls.from_int(round_fraction(value))

    @classmethod
    def from_float(cls, value: float) -> "BigInt":
        """
        Nearest integer to a float, ties to even.

        Raises:
            NumericOverflowError: For NaN or infinity
        """
        if not math.isfinite(value):
            raise non_finite_error(value, "BigInt")
        return cls.from_fraction(Fraction(value))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def words(self) -> Tuple[int, ...]:
        """Magnitude words, little endian."""
        return self._buffer.words

    @property
    def is_negative(self) -> bool:
        return self._negative and not self._buffer.is_zero()

    @property
    def sign(self) -> int:
        if self._buffer.is_zero():
            return 0
        return -1 if self._negative else 1

    def is_zero(self) -> bool:
        return self._buffer.is_zero()

    def is_inline(self) -> bool:
        """True when the magnitude is stored privately (not interned)."""
        return self._key is None

    def is_interned(self) -> bool:
        return self._key is not None

    def bit_length(self) -> int:
        """Bits in the magnitude, like int.bit_length()."""
        return bit_length(self._buffer.words)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Any) -> "BigInt":
        other = _require(other, "add")
        negative, words = _signed_add(
            self.is_negative, self.words, other.is_negative, other.words
        )
        return BigInt._make(negative, words)

    def sub(self, other: Any) -> "BigInt":
        other = _require(other, "sub")
        negative, words = _signed_add(
            self.is_negative, self.words, not other.is_negative, other.words
        )
        return BigInt._make(negative, words)

    def mul(self, other: Any) -> "BigInt":
        other = _require(other, "mul")
        return BigInt._make(
            self.is_negative != other.is_negative, multiply(self.words, other.words)
        )

    def div_rem(self, other: Any) -> Tuple["BigInt", "BigInt"]:
        """
        Truncating division.

        Returns:
            (quotient, remainder) with self == quotient * other + remainder,
            remainder carrying self's sign and |remainder| < |other|

        Raises:
            DivideByZeroError: If other is zero
        """
        other = _require(other, "div_rem")
        if other.is_zero():
            raise DivideByZeroError("BigInt division by zero", operation="div_rem")
        q, r = divmod_magnitude(self.words, other.words)
        quotient = BigInt._make(self.is_negative != other.is_negative, q)
        remainder = BigInt._make(self.is_negative, r)
        return quotient, remainder

    def div(self, other: Any) -> "BigInt":
        """Truncating quotient."""
        return self.div_rem(other)[0]

    def rem(self, other: Any) -> "BigInt":
        """Truncating remainder (sign of self)."""
        return self.div_rem(other)[1]

    def neg(self) -> "BigInt":
        return self._with_sign(not self.is_negative)

    def abs(self) -> "BigInt":
        return self._with_sign(False)

    def pow(self, exponent: int) -> "BigInt":
        """
        self ** exponent by square-and-multiply.

        Raises:
            ValueError: If exponent is negative
        """
        exponent = int(exponent)
        if exponent < 0:
            raise ValueError(f"BigInt exponent must be >= 0, got {exponent}")
        result: Sequence[int] = _ONE
        base: Sequence[int] = self.words
        e = exponent
        while e:
            if e & 1:
                result = multiply(result, base)
            e >>= 1
            if e:
                base = multiply(base, base)
        return BigInt._make(self.is_negative and exponent & 1, result)

    def gcd(self, other: Any) -> "BigInt":
        """Greatest common divisor (non-negative); gcd(0, 0) == 0."""
        other = _require(other, "gcd")
        a, b = list(self.words), list(other.words)
        while b:
            _, r = divmod_magnitude(a, b)
            a, b = b, r
        return BigInt._make(False, a)

    def shift_left(self, bits: int) -> "BigInt":
        if bits < 0:
            return self.shift_right(-bits)
        return BigInt._make(self.is_negative, shift_left(self.words, bits))

    def shift_right(self, bits: int) -> "BigInt":
        """Arithmetic shift: rounds toward negative infinity like int >>."""
        if bits < 0:
            return self.shift_left(-bits)
        words = self.words
        shifted = trim(shift_right(words, bits))
        if self.is_negative and compare(shift_left(shifted, bits), words) != 0:
            shifted = add_with_carry(shifted, _ONE)
        return BigInt._make(self.is_negative, shifted)

    def _bitwise(self, other: Any, op) -> "BigInt":
        other = _require(other, "bitwise")
        width = max(len(self.words), len(other.words)) + 1
        a = _to_twos(self.is_negative, self.words, width)
        b = _to_twos(other.is_negative, other.words, width)
        negative, words = _from_twos([op(x, y) for x, y in zip(a, b)])
        return BigInt._make(negative, words)

    def invert(self) -> "BigInt":
        """~self == -self - 1"""
        return self.neg().sub(BigInt(1))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, other: Any) -> int:
        """Signed three-way comparison; any zero equals any zero."""
        other = _require(other, "compare")
        a_sign, b_sign = self.sign, other.sign
        if a_sign != b_sign:
            return -1 if a_sign < b_sign else 1
        order = compare(self.words, other.words)
        return -order if a_sign < 0 else order

    # ------------------------------------------------------------------
    # Conversion and formatting
    # ------------------------------------------------------------------

    def to_string(self, radix: int = 10) -> str:
        """
        Signed text in the given radix, lowercase digits, no prefix.

        Raises:
            ParseError: If radix is outside 2..36
        """
        text = format_magnitude(self.words, radix)
        return "-" + text if self.is_negative else text

    def to_int(self) -> int:
        value = self._buffer.to_int()
        return -value if self.is_negative else value

    def to_fraction(self) -> Fraction:
        return Fraction(self.to_int())

    def to_native(self, int_type) -> int:
        """
        Narrow into a fixed-width native integer type.

        Args:
            int_type: An IntType (e.g. I64, U32)

        Raises:
            NumericOverflowError: With side "above" or "below"
        """
        if self.compare(int_type.max_value) > 0:
            raise NumericOverflowError(
                f"BigInt exceeds {int_type.name} maximum",
                target=int_type.name,
                side=NumericOverflowError.ABOVE,
            )
        if self.compare(int_type.min_value) < 0:
            raise NumericOverflowError(
                f"BigInt is below {int_type.name} minimum",
                target=int_type.name,
                side=NumericOverflowError.BELOW,
            )
        return self.to_int()

    def approx_float(self) -> float:
        """Nearest float (ties to even); +-inf beyond the float range."""
        try:
            return float(self.to_int())
        except OverflowError:
            return float("-inf") if self.is_negative else float("inf")

    def try_convert(self, target: Any) -> Any:
        if isinstance(target, type) and issubclass(target, BigInt):
            return self
        if isinstance(target, IntType):
            return self.to_native(target)
        return convert_exact(self.to_fraction(), target, source="BigInt")

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def __add__(self, other):
        return self.add(other) if _coercible(other) else NotImplemented

    def __radd__(self, other):
        return BigInt(other).add(self) if _coercible(other) else NotImplemented

    def __sub__(self, other):
        return self.sub(other) if _coercible(other) else NotImplemented

    def __rsub__(self, other):
        return BigInt(other).sub(self) if _coercible(other) else NotImplemented

    def __mul__(self, other):
        return self.mul(other) if _coercible(other) else NotImplemented

    def __rmul__(self, other):
        return BigInt(other).mul(self) if _coercible(other) else NotImplemented

    def __floordiv__(self, other):
        return self.div(other) if _coercible(other) else NotImplemented

    def __rfloordiv__(self, other):
        return BigInt(other).div(self) if _coercible(other) else NotImplemented

    def __mod__(self, other):
        return self.rem(other) if _coercible(other) else NotImplemented

    def __rmod__(self, other):
        return BigInt(other).rem(self) if _coercible(other) else NotImplemented

    def __divmod__(self, other):
        return self.div_rem(other) if _coercible(other) else NotImplemented

    def __rdivmod__(self, other):
        return BigInt(other).div_rem(self) if _coercible(other) else NotImplemented

    def __pow__(self, exponent, modulo=None):
        if modulo is not None or not isinstance(exponent, (int, BigInt)):
            return NotImplemented
        return self.pow(int(exponent))

    def __lshift__(self, bits):
        return self.shift_left(int(bits)) if _coercible(bits) else NotImplemented

    def __rshift__(self, bits):
        return self.shift_right(int(bits)) if _coercible(bits) else NotImplemented

    def __and__(self, other):
        return self._bitwise(other, lambda x, y: x & y) if _coercible(other) else NotImplemented

    def __or__(self, other):
        return self._bitwise(other, lambda x, y: x | y) if _coercible(other) else NotImplemented

    def __xor__(self, other):
        return self._bitwise(other, lambda x, y: x ^ y) if _coercible(other) else NotImplemented

    __rand__ = __and__
    __ror__ = __or__
    __rxor__ = __xor__

    def __invert__(self):
        return self.invert()

    def __neg__(self):
        return self.neg()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __eq__(self, other) -> bool:
        if _coercible(other):
            return self.compare(other) == 0
        if isinstance(other, (float, Fraction)):
            return self.to_fraction() == other
        return NotImplemented

    def __lt__(self, other):
        return self.compare(other) < 0 if _coercible(other) else NotImplemented

    def __le__(self, other):
        return self.compare(other) <= 0 if _coercible(other) else NotImplemented

    def __gt__(self, other):
        return self.compare(other) > 0 if _coercible(other) else NotImplemented

    def __ge__(self, other):
        return self.compare(other) >= 0 if _coercible(other) else NotImplemented

    def __hash__(self) -> int:
        # Equal to hash(int(self)) so BigInt(5) and 5 share dict slots
        return hash(self.to_int())

    def __int__(self) -> int:
        return self.to_int()

    def __index__(self) -> int:
        return self.to_int()

    def __float__(self) -> float:
        return self.approx_float()

    def __format__(self, spec: str) -> str:
        radix = {"": 10, "d": 10, "x": 16, "o": 8, "b": 2}.get(spec)
        if radix is None:
            return format(self.to_int(), spec)
        return self.to_string(radix)

    def __str__(self) -> str:
        return self.to_string(10)

    def __repr__(self) -> str:
        return f"BigInt('{self.to_string(10)}')"


def _coercible(value: Any) -> bool:
    return isinstance(value, (BigInt, int))


def _require(value: Any, operation: str) -> BigInt:
    if isinstance(value, BigInt):
        return value
    if isinstance(value, int):
        return BigInt.from_int(value)
    raise UnsupportedConversionError(
        f"BigInt.{operation} needs an integer operand, got {type(value).__name__}",
        source=type(value).__name__,
        target="BigInt",
    )
