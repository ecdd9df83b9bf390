"""
component_7_fixed_int.py

Fixed-width integers: values of one IntType (U32, I64, IntType(24), ...)
with an explicit overflow policy per operation.

Types are built once with fixed_int_type(backing) and cached, so
fixed_int_type(U32) always returns the same class. Mixing two different
FixedInt types in one operation is a TypeError; Python ints and BigInt
operands are narrowed into the type first (checked).

Operation families:
- add/sub/mul/neg/abs/pow and the operators: checked, an out-of-range
  result raises NumericOverflowError with its side
- wrapping_*: result reduced modulo 2**bits (two's complement)
- saturating_*: result clamped to min_value/max_value
- overflowing_*: (wrapped result, overflowed flag)
- widening_mul: (low, high) halves of the double-width product
- div/rem/div_rem truncate toward zero; a zero divisor raises
  DivideByZeroError; MIN / -1 on a signed type overflows
- &, |, ^, ~ act on the two's complement bits and never overflow
- Shifts drop the bits moved out; a shift by bits or more raises

Usage:
    from common.int_types import U8
    from component_7_fixed_int import fixed_int_type

    Byte = fixed_int_type(U8)
    Byte(200).wrapping_add(100)      # 44
    Byte(200).saturating_add(100)    # 255
    Byte(200) + 100                  # NumericOverflowError(side="above")
"""

import threading
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Dict, Tuple, Type

from common.constants import CHECKED, OVERFLOW_POLICIES, SATURATING, WRAPPING
from common.conversion import (
    compare_exact,
    convert_exact,
    is_nan,
    non_finite_error,
    to_exact,
)
from common.int_types import IntType
from component_15_logging_config import get_logger
from component_2_bigint import BigInt
from infrastructure.interfaces import Numeric
from numcore_exceptions import (
    DivideByZeroError,
    InvalidBitWidthError,
    NumericOverflowError,
    UnsupportedConversionError,
)

logger = get_logger(__name__)


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


class FixedInt(Numeric):
    """
    Base class of every fixed_int_type(); not used directly.

    Class attributes (set by fixed_int_type):
        BACKING: IntType giving the width and signedness
    """

    BACKING: IntType = None

    __slots__ = ("_value",)

    def __init__(self, value: Any = 0):
        cls = type(self)
        if cls.BACKING is None:
            raise TypeError("use fixed_int_type(backing) to create a FixedInt type")
        exact = to_exact(value)
        if exact is None:
            raise non_finite_error(float(value), cls.__name__)
        self._value = cls.BACKING.from_fraction(exact)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def _make(cls, value: int) -> "FixedInt":
        obj = cls.__new__(cls)
        obj._value = value
        return obj

    @classmethod
    def _narrow(cls, raw: int, operation: str, policy: str = CHECKED) -> "FixedInt":
        if policy == CHECKED:
            return cls._make(cls.BACKING.check(raw, f"{cls.__name__}.{operation} result"))
        if policy == WRAPPING:
            return cls._make(cls.BACKING.wrap(raw))
        if policy == SATURATING:
            return cls._make(cls.BACKING.saturate(raw))
        raise ValueError(f"overflow policy must be one of {OVERFLOW_POLICIES}, got {policy!r}")

    @classmethod
    def from_int(cls, value: int, policy: str = CHECKED) -> "FixedInt":
        """
        Narrow a Python int (or BigInt) into the type.

        Args:
            value: Integer to narrow
            policy: "checked" (raise), "wrapping" or "saturating"

        Raises:
            NumericOverflowError: If value does not fit under "checked"
        """
        return cls._narrow(int(value), "from_int", policy)

    @classmethod
    def wrapping(cls, value: int) -> "FixedInt":
        return cls.from_int(value, WRAPPING)

    @classmethod
    def saturating(cls, value: int) -> "FixedInt":
        return cls.from_int(value, SATURATING)

    @classmethod
    def from_fraction(cls, value: Fraction) -> "FixedInt":
        """Nearest integer, ties to even, range checked."""
        return cls._make(cls.BACKING.from_fraction(value))

    @classmethod
    def from_bytes(cls, data: bytes, byteorder: str = "little") -> "FixedInt":
        """
        Read exactly byte_width() bytes.

        Raises:
            InvalidBitWidthError: If the width is not whole bytes or the
                                  length does not match
        """
        width = cls.byte_width()
        if len(data) != width:
            raise InvalidBitWidthError(
                f"{cls.__name__} needs {width} bytes, got {len(data)}",
                parameter="data",
            )
        return cls._make(int.from_bytes(data, byteorder, signed=cls.BACKING.signed))

    @classmethod
    def byte_width(cls) -> int:
        bits = cls.BACKING.bits
        if bits % 8:
            raise InvalidBitWidthError(
                f"{cls.__name__} is {bits} bits, not a whole number of bytes",
                parameter="bits",
            )
        return bits // 8

    @classmethod
    def min_value(cls) -> "FixedInt":
        return cls._make(cls.BACKING.min_value)

    @classmethod
    def max_value(cls) -> "FixedInt":
        return cls._make(cls.BACKING.max_value)

    @classmethod
    def zero(cls) -> "FixedInt":
        return cls._make(0)

    @classmethod
    def one(cls) -> "FixedInt":
        return cls._make(1)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def value(self) -> int:
        return self._value

    def bits(self) -> int:
        """Two's complement bit pattern as a non-negative int."""
        return self._value & ((1 << self.BACKING.bits) - 1)

    def is_zero(self) -> bool:
        return self._value == 0

    def _other(self, other: Any, operation: str) -> "FixedInt":
        cls = type(self)
        if type(other) is cls:
            return other
        if isinstance(other, FixedInt):
            raise TypeError(
                f"cannot {operation} {cls.__name__} and {type(other).__name__}"
            )
        if isinstance(other, (int, BigInt)):
            return cls.from_int(int(other))
        raise UnsupportedConversionError(
            f"{cls.__name__}.{operation} needs a {cls.__name__} or integer operand",
            source=type(other).__name__,
            target=cls.__name__,
        )

    def _combine(
        self, other: Any, operation: str, fn: Callable[[int, int], int], policy: str
    ) -> "FixedInt":
        other = self._other(other, operation)
        return self._narrow(fn(self._value, other._value), operation, policy)

    def _overflowing(
        self, other: Any, operation: str, fn: Callable[[int, int], int]
    ) -> Tuple["FixedInt", bool]:
        other = self._other(other, operation)
        raw = fn(self._value, other._value)
        wrapped = self.BACKING.wrap(raw)
        return self._make(wrapped), wrapped != raw

    # ------------------------------------------------------------------
    # Checked arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Any) -> "FixedInt":
        return self._combine(other, "add", lambda a, b: a + b, CHECKED)

    def sub(self, other: Any) -> "FixedInt":
        return self._combine(other, "sub", lambda a, b: a - b, CHECKED)

    def mul(self, other: Any) -> "FixedInt":
        return self._combine(other, "mul", lambda a, b: a * b, CHECKED)

    def div_rem(self, other: Any) -> Tuple["FixedInt", "FixedInt"]:
        """
        Truncating division.

        Returns:
            (quotient, remainder), remainder carrying self's sign

        Raises:
            DivideByZeroError: If other is zero
            NumericOverflowError: For MIN / -1 on a signed type
        """
        other = self._other(other, "div_rem")
        if other._value == 0:
            raise DivideByZeroError(
                f"{type(self).__name__} division by zero", operation="div_rem"
            )
        quotient = _truncating_div(self._value, other._value)
        remainder = self._value - quotient * other._value
        return self._narrow(quotient, "div"), self._make(remainder)

    def div(self, other: Any) -> "FixedInt":
        """Truncating quotient."""
        return self.div_rem(other)[0]

    def rem(self, other: Any) -> "FixedInt":
        """Truncating remainder (sign of self)."""
        return self.div_rem(other)[1]

    def neg(self) -> "FixedInt":
        return self._narrow(-self._value, "neg")

    def abs(self) -> "FixedInt":
        return self._narrow(abs(self._value), "abs")

    def pow(self, exponent: int, policy: str = CHECKED) -> "FixedInt":
        """
        self ** exponent under the given overflow policy.

        Raises:
            ValueError: If exponent is negative
            NumericOverflowError: If the power does not fit under "checked"
        """
        exponent = int(exponent)
        if exponent < 0:
            raise ValueError(f"negative exponent {exponent}")
        bits = self.BACKING.bits
        if policy == WRAPPING:
            return self._make(self.BACKING.wrap(pow(self._value, exponent, 1 << bits)))
        if abs(self._value) > 1 and exponent >= bits:
            # |base| >= 2 puts the power beyond 2**bits; skip computing it
            negative = self._value < 0 and exponent % 2 == 1
            raw = -(1 << bits) if negative else 1 << bits
        else:
            raw = self._value**exponent
        return self._narrow(raw, "pow", policy)

    # ------------------------------------------------------------------
    # Wrapping, saturating and overflowing families
    # ------------------------------------------------------------------

    def wrapping_add(self, other: Any) -> "FixedInt":
        return self._combine(other, "wrapping_add", lambda a, b: a + b, WRAPPING)

    def wrapping_sub(self, other: Any) -> "FixedInt":
        return self._combine(other, "wrapping_sub", lambda a, b: a - b, WRAPPING)

    def wrapping_mul(self, other: Any) -> "FixedInt":
        return self._combine(other, "wrapping_mul", lambda a, b: a * b, WRAPPING)

    def wrapping_neg(self) -> "FixedInt":
        return self._make(self.BACKING.wrap(-self._value))

    def saturating_add(self, other: Any) -> "FixedInt":
        return self._combine(other, "saturating_add", lambda a, b: a + b, SATURATING)

    def saturating_sub(self, other: Any) -> "FixedInt":
        return self._combine(other, "saturating_sub", lambda a, b: a - b, SATURATING)

    def saturating_mul(self, other: Any) -> "FixedInt":
        return self._combine(other, "saturating_mul", lambda a, b: a * b, SATURATING)

    def overflowing_add(self, other: Any) -> Tuple["FixedInt", bool]:
        return self._overflowing(other, "overflowing_add", lambda a, b: a + b)

    def overflowing_sub(self, other: Any) -> Tuple["FixedInt", bool]:
        return self._overflowing(other, "overflowing_sub", lambda a, b: a - b)

    def overflowing_mul(self, other: Any) -> Tuple["FixedInt", bool]:
        return self._overflowing(other, "overflowing_mul", lambda a, b: a * b)

    def widening_mul(self, other: Any) -> Tuple["FixedInt", "FixedInt"]:
        """
        Full product as (low, high) halves.

        low holds the wrapped low bits; high is the product shifted right
        by bits (arithmetic for signed types), so
        high * 2**bits + low.bits() == self * other.
        """
        other = self._other(other, "widening_mul")
        product = self._value * other._value
        bits = self.BACKING.bits
        return self._make(self.BACKING.wrap(product)), self._make(product >> bits)

    # ------------------------------------------------------------------
    # Bitwise operations and shifts
    # ------------------------------------------------------------------

    def invert(self) -> "FixedInt":
        return self._make(self.BACKING.wrap(~self._value))

    def bit_and(self, other: Any) -> "FixedInt":
        return self._combine(other, "and", lambda a, b: a & b, WRAPPING)

    def bit_or(self, other: Any) -> "FixedInt":
        return self._combine(other, "or", lambda a, b: a | b, WRAPPING)

    def bit_xor(self, other: Any) -> "FixedInt":
        return self._combine(other, "xor", lambda a, b: a ^ b, WRAPPING)

    def _shift_amount(self, bits: int, operation: str) -> int:
        bits = int(bits)
        if bits < 0:
            raise ValueError(f"negative shift count {bits}")
        if bits >= self.BACKING.bits:
            raise NumericOverflowError(
                f"{type(self).__name__}.{operation} by {bits} bits",
                target=type(self).__name__,
            )
        return bits

    def shift_left(self, bits: int) -> "FixedInt":
        bits = self._shift_amount(bits, "shift_left")
        return self._make(self.BACKING.wrap(self._value << bits))

    def shift_right(self, bits: int) -> "FixedInt":
        """Arithmetic shift for signed types, logical for unsigned."""
        bits = self._shift_amount(bits, "shift_right")
        return self._make(self._value >> bits)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, other: Any) -> int:
        """
        Three-way comparison by value against any FixedInt type, int,
        BigInt, Fraction, float or Decimal.
        """
        if isinstance(other, (FixedInt, int, BigInt)):
            right = int(other)
            return (self._value > right) - (self._value < right)
        if not isinstance(other, _ORDERED_TYPES):
            raise UnsupportedConversionError(
                f"{type(self).__name__}.compare needs a number, got {type(other).__name__}",
                source=type(other).__name__,
                target=type(self).__name__,
            )
        return compare_exact(Fraction(self._value), other, type(self).__name__)

    # ------------------------------------------------------------------
    # Conversion and formatting
    # ------------------------------------------------------------------

    def to_int(self) -> int:
        return self._value

    def to_fraction(self) -> Fraction:
        return Fraction(self._value)

    def to_bigint(self) -> BigInt:
        return BigInt.from_int(self._value)

    def try_convert(self, target: Any) -> Any:
        if target is type(self):
            return self
        if isinstance(target, IntType):
            return target.check(self._value, type(self).__name__)
        return convert_exact(self.to_fraction(), target, source=type(self).__name__)

    def to_string(self, radix: int = 10) -> str:
        """
        Signed text in the given radix (2..36), lowercase, no prefix.

        Raises:
            ParseError: If radix is outside 2..36
        """
        return self.to_bigint().to_string(radix)

    def to_bytes(self, byteorder: str = "little") -> bytes:
        return self._value.to_bytes(self.byte_width(), byteorder, signed=self.BACKING.signed)

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def _binary(self, other, method):
        if isinstance(other, (FixedInt, int, BigInt)):
            return method(other)
        return NotImplemented

    def _reflected(self, other, operation):
        if isinstance(other, (int, BigInt)):
            return getattr(self._other(other, operation), operation)(self)
        return NotImplemented

    def __add__(self, other):
        return self._binary(other, self.add)

    def __radd__(self, other):
        return self._binary(other, self.add)

    def __sub__(self, other):
        return self._binary(other, self.sub)

    def __rsub__(self, other):
        return self._reflected(other, "sub")

    def __mul__(self, other):
        return self._binary(other, self.mul)

    def __rmul__(self, other):
        return self._binary(other, self.mul)

    def __floordiv__(self, other):
        return self._binary(other, self.div)

    def __rfloordiv__(self, other):
        return self._reflected(other, "div")

    def __mod__(self, other):
        return self._binary(other, self.rem)

    def __rmod__(self, other):
        return self._reflected(other, "rem")

    def __divmod__(self, other):
        return self._binary(other, self.div_rem)

    def __rdivmod__(self, other):
        return self._reflected(other, "div_rem")

    def __pow__(self, exponent, modulo=None):
        if modulo is not None or not isinstance(exponent, (int, BigInt)):
            return NotImplemented
        return self.pow(int(exponent))

    def __lshift__(self, bits):
        return self.shift_left(bits) if isinstance(bits, (int, BigInt)) else NotImplemented

    def __rshift__(self, bits):
        return self.shift_right(bits) if isinstance(bits, (int, BigInt)) else NotImplemented

    def __and__(self, other):
        return self._binary(other, self.bit_and)

    def __or__(self, other):
        return self._binary(other, self.bit_or)

    def __xor__(self, other):
        return self._binary(other, self.bit_xor)

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
        return self._value != 0

    def __eq__(self, other) -> bool:
        if isinstance(other, (FixedInt, int, BigInt)):
            return self._value == int(other)
        if isinstance(other, (Fraction, float, Decimal)):
            return self.to_fraction() == to_exact(other)
        return NotImplemented

    def _order(self, other, accept):
        if not isinstance(other, _ORDERED_TYPES):
            return NotImplemented
        if is_nan(other):
            return False
        return accept(self.compare(other))

    def __lt__(self, other):
        return self._order(other, lambda c: c < 0)

    def __le__(self, other):
        return self._order(other, lambda c: c <= 0)

    def __gt__(self, other):
        return self._order(other, lambda c: c > 0)

    def __ge__(self, other):
        return self._order(other, lambda c: c >= 0)

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __float__(self) -> float:
        return float(self._value)

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"


_ORDERED_TYPES = (FixedInt, int, BigInt, Fraction, float, Decimal)


# ============================================================================
# Type factory
# ============================================================================

_types: Dict[IntType, Type[FixedInt]] = {}
_types_lock = threading.Lock()


def fixed_int_type(backing: IntType) -> Type[FixedInt]:
    """
    The FixedInt class for a width and signedness.

    Args:
        backing: IntType (U8, I64, IntType(24, signed=False), ...)

    Raises:
        InvalidBitWidthError: If backing is not an IntType
    """
    if not isinstance(backing, IntType):
        raise InvalidBitWidthError(
            f"backing must be an IntType, got {type(backing).__name__}",
            parameter="backing",
        )
    with _types_lock:
        cls = _types.get(backing)
        if cls is None:
            cls_name = f"FixedInt_{backing.name}"
            namespace = {"BACKING": backing, "__slots__": ()}
            cls = type(FixedInt)(cls_name, (FixedInt,), namespace)
            _types[backing] = cls
            logger.debug("FixedInt type created: %s", cls_name)
    return cls
