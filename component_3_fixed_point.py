"""
component_3_fixed_point.py

Fixed-point numbers: a backing integer of configurable width read as
raw / 2**frac_bits.

Types are built once with fixed_type(backing, frac_bits) and cached, so
fixed_type(I32, 16) always returns the same class. The backing width and
scale are type parameters; mixing two different Fixed types in one
operation is a TypeError.

Arithmetic policy:
- add/sub/neg/abs are exact; a result outside the backing range raises
  NumericOverflowError (no wrap-around)
- mul: raw_a * raw_b in a widened intermediate, shifted right by frac_bits
  with round-half-to-even, then narrowed with an overflow check
- div: (raw_a << frac_bits) / raw_b rounded half to even; DivideByZeroError
  on a zero divisor
- Widened intermediates are plain Python ints for backings up to
  NATIVE_WIDEN_LIMIT bits and BigInt values above that

Usage:
    from component_3_fixed_point import I32, fixed_type

    Q16 = fixed_type(I32, 16)
    assert Q16.from_float(1.5) * Q16.from_float(2.0) == Q16.from_float(3.0)
"""

import math
import threading
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, Optional, Tuple, Type

from common.constants import NATIVE_WIDEN_LIMIT
from common.conversion import (
    compare_exact,
    convert_exact,
    is_nan,
    non_finite_error,
    to_exact,
)
from common.int_types import I8, I16, I32, I64, I128, U8, U16, U32, U64, U128, IntType
from common.rounding import (
    exact_decimal,
    format_decimal,
    round_div,
    round_fraction,
    round_shift_right,
)
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

__all__ = [
    "Fixed",
    "fixed_type",
    "IntType",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
]


# ============================================================================
# Widened intermediates
# ============================================================================


def _bigint_round_shift_right(value: BigInt, shift: int) -> BigInt:
    """BigInt version of round_shift_right (half to even, floor based)."""
    if shift <= 0:
        return value << -shift
    quotient = value >> shift
    remainder = value - (quotient << shift)
    half = BigInt(1) << (shift - 1)
    order = remainder.compare(half)
    if order > 0 or (order == 0 and quotient.words and quotient.words[0] & 1):
        quotient = quotient + 1
    return quotient


def _bigint_round_div(numerator: BigInt, denominator: BigInt) -> BigInt:
    """BigInt version of round_div on top of truncating div_rem."""
    quotient, remainder = numerator.div_rem(denominator)
    order = (remainder.abs() << 1).compare(denominator.abs())
    if order > 0 or (order == 0 and quotient.words and quotient.words[0] & 1):
        step = -1 if numerator.is_negative != denominator.is_negative else 1
        quotient = quotient + step
    return quotient


def _scaled_product(a: int, b: int, shift: int, wide: bool) -> int:
    if not wide:
        return round_shift_right(a * b, shift)
    return _bigint_round_shift_right(BigInt(a) * BigInt(b), shift).to_int()


def _scaled_quotient(a: int, b: int, shift: int, wide: bool) -> int:
    if not wide:
        return round_div(a << shift, b)
    return _bigint_round_div(BigInt(a) << shift, BigInt(b)).to_int()


# ============================================================================
# Fixed
# ============================================================================


class Fixed(Numeric):
    """
    Base class of every fixed_type(); not used directly.

    Class attributes (set by fixed_type):
        BACKING: IntType holding raw
        FRAC_BITS: Number of fraction bits N
    """

    BACKING: IntType = None
    FRAC_BITS: int = 0

    __slots__ = ("_raw",)

    def __init__(self, value: Any = 0):
        if type(self).BACKING is None:
            raise TypeError("use fixed_type(backing, frac_bits) to create a Fixed type")
        if isinstance(value, float):
            raw = self._raw_from_float(value)
        else:
            exact = to_exact(value)
            if exact is None:
                raise NumericOverflowError(
                    f"{type(value).__name__} is not a real number",
                    target=type(self).__name__,
                )
            raw = self._raw_from_fraction(exact)
        self._raw = raw

    # ------------------------------------------------------------------
    # Type parameters
    # ------------------------------------------------------------------

    @classmethod
    def scale(cls) -> int:
        return 1 << cls.FRAC_BITS

    @classmethod
    def _check_raw(cls, raw: int, operation: str) -> int:
        backing = cls.BACKING
        if raw > backing.max_value:
            raise NumericOverflowError(
                f"{cls.__name__}.{operation} result above range",
                target=cls.__name__,
                side=NumericOverflowError.ABOVE,
            )
        if raw < backing.min_value:
            raise NumericOverflowError(
                f"{cls.__name__}.{operation} result below range",
                target=cls.__name__,
                side=NumericOverflowError.BELOW,
            )
        return raw

    @classmethod
    def _wide(cls) -> bool:
        return cls.BACKING.bits > NATIVE_WIDEN_LIMIT

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_raw(cls, raw: int) -> "Fixed":
        """
        Wrap a backing integer as-is.

        Raises:
            NumericOverflowError: If raw does not fit the backing type
        """
        obj = cls.__new__(cls)
        obj._raw = cls._check_raw(int(raw), "from_raw")
        return obj

    @classmethod
    def _raw_from_fraction(cls, value: Fraction) -> int:
        return cls._check_raw(round_fraction(value * cls.scale()), "from_fraction")

    @classmethod
    def _raw_from_float(cls, value: float) -> int:
        if not math.isfinite(value):
            raise non_finite_error(value, cls.__name__)
        return cls._raw_from_fraction(Fraction(value))

    @classmethod
    def from_fraction(cls, value: Fraction) -> "Fixed":
        """Nearest representable value, ties to even."""
        return cls.from_raw(cls._raw_from_fraction(value))

    @classmethod
    def from_float(cls, value: float) -> "Fixed":
        """
        Raises:
            NumericOverflowError: Out of range, NaN or infinity
        """
        return cls.from_raw(cls._raw_from_float(value))

    @classmethod
    def from_int(cls, value: int) -> "Fixed":
        return cls.from_raw(cls._check_raw(int(value) << cls.FRAC_BITS, "from_int"))

    @classmethod
    def from_bigint(cls, value: BigInt) -> "Fixed":
        shifted = value << cls.FRAC_BITS
        shifted.to_native(cls.BACKING)
        return cls.from_raw(shifted.to_int())

    @classmethod
    def min_value(cls) -> "Fixed":
        return cls.from_raw(cls.BACKING.min_value)

    @classmethod
    def max_value(cls) -> "Fixed":
        return cls.from_raw(cls.BACKING.max_value)

    @classmethod
    def epsilon(cls) -> "Fixed":
        """Smallest positive value (raw 1)."""
        return cls.from_raw(1)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def raw(self) -> int:
        return self._raw

    def _other(self, other: Any, operation: str) -> "Fixed":
        cls = type(self)
        if type(other) is cls:
            return other
        if isinstance(other, Fixed):
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

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Any) -> "Fixed":
        other = self._other(other, "add")
        return self.from_raw(self._check_raw(self._raw + other._raw, "add"))

    def sub(self, other: Any) -> "Fixed":
        other = self._other(other, "sub")
        return self.from_raw(self._check_raw(self._raw - other._raw, "sub"))

    def mul(self, other: Any) -> "Fixed":
        other = self._other(other, "mul")
        raw = _scaled_product(self._raw, other._raw, self.FRAC_BITS, self._wide())
        return self.from_raw(self._check_raw(raw, "mul"))

    def div(self, other: Any) -> "Fixed":
        """
        Raises:
            DivideByZeroError: If other is zero
            NumericOverflowError: If the quotient does not fit
        """
        other = self._other(other, "div")
        if other._raw == 0:
            raise DivideByZeroError(
                f"{type(self).__name__} division by zero", operation="div"
            )
        raw = _scaled_quotient(self._raw, other._raw, self.FRAC_BITS, self._wide())
        return self.from_raw(self._check_raw(raw, "div"))

    def rem(self, other: Any) -> "Fixed":
        """
        Truncating remainder: self - trunc(self / other) * other, exact,
        with the sign of self.

        Raises:
            DivideByZeroError: If other is zero
        """
        other = self._other(other, "rem")
        if other._raw == 0:
            raise DivideByZeroError(
                f"{type(self).__name__} remainder by zero", operation="rem"
            )
        raw = abs(self._raw) % abs(other._raw)
        return self.from_raw(-raw if self._raw < 0 else raw)

    def neg(self) -> "Fixed":
        return self.from_raw(self._check_raw(-self._raw, "neg"))

    def abs(self) -> "Fixed":
        return self.neg() if self._raw < 0 else self

    def floor(self) -> "Fixed":
        n = self.FRAC_BITS
        return self.from_raw(self._check_raw((self._raw >> n) << n, "floor"))

    def ceil(self) -> "Fixed":
        n = self.FRAC_BITS
        return self.from_raw(self._check_raw(-((-self._raw) >> n) << n, "ceil"))

    def round(self) -> "Fixed":
        """Nearest integer value, ties to even."""
        n = self.FRAC_BITS
        return self.from_raw(self._check_raw(round_shift_right(self._raw, n) << n, "round"))

    def trunc(self) -> "Fixed":
        return self.floor() if self._raw >= 0 else self.ceil()

    def fract(self) -> "Fixed":
        """self - floor(self), always in [0, 1)."""
        return self.from_raw(self._check_raw(self._raw & (self.scale() - 1), "fract"))

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, other: Any) -> int:
        """
        Three-way comparison by exact value.

        Accepts any Fixed type, int, BigInt, Fraction, float and Decimal.
        Infinities order beyond every Fixed value.

        Raises:
            UnsupportedConversionError: For NaN or non-numeric operands
        """
        if type(other) is type(self):
            return (self._raw > other._raw) - (self._raw < other._raw)
        if not isinstance(other, _ORDERED_TYPES):
            raise UnsupportedConversionError(
                f"{type(self).__name__}.compare needs a number, got {type(other).__name__}",
                source=type(other).__name__,
                target=type(self).__name__,
            )
        return compare_exact(self.to_fraction(), other, type(self).__name__)

    # ------------------------------------------------------------------
    # Conversion and formatting
    # ------------------------------------------------------------------

    def to_fraction(self) -> Fraction:
        return Fraction(self._raw, self.scale())

    def to_float(self) -> float:
        return self._raw / self.scale()

    def to_bigint(self) -> BigInt:
        """Nearest integer as a BigInt, ties to even."""
        return BigInt.from_int(round_shift_right(self._raw, self.FRAC_BITS))

    def try_convert(self, target: Any) -> Any:
        if target is type(self):
            return self
        if isinstance(target, IntType):
            return target.from_fraction(self.to_fraction())
        return convert_exact(self.to_fraction(), target, source=type(self).__name__)

    def to_string(self, precision: Optional[int] = None) -> str:
        """
        Decimal text.

        Args:
            precision: Digits after the point (rounded half to even), or
                       None for the shortest exact form
        """
        if precision is None:
            return exact_decimal(self.to_fraction())
        return format_decimal(self.to_fraction(), precision)

    def to_bits(self) -> str:
        """Backing bits in two's complement with a '.' before the fraction."""
        bits = self.BACKING.bits
        text = format(self._raw & ((1 << bits) - 1), f"0{bits}b")
        n = self.FRAC_BITS
        if n == 0:
            return text
        return f"{text[: bits - n] or '0'}.{text[bits - n :]}"

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def _binary(self, other, method):
        if isinstance(other, (Fixed, int, BigInt)):
            return method(other)
        return NotImplemented

    def __add__(self, other):
        return self._binary(other, self.add)

    def __radd__(self, other):
        return self._binary(other, self.add)

    def __sub__(self, other):
        return self._binary(other, self.sub)

    def __rsub__(self, other):
        return self._binary(other, lambda o: self._other(o, "sub").sub(self))

    def __mul__(self, other):
        return self._binary(other, self.mul)

    def __rmul__(self, other):
        return self._binary(other, self.mul)

    def __truediv__(self, other):
        return self._binary(other, self.div)

    def __rtruediv__(self, other):
        return self._binary(other, lambda o: self._other(o, "div").div(self))

    def __mod__(self, other):
        return self._binary(other, self.rem)

    def __rmod__(self, other):
        return self._binary(other, lambda o: self._other(o, "rem").rem(self))

    def __neg__(self):
        return self.neg()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __bool__(self) -> bool:
        return self._raw != 0

    def __eq__(self, other) -> bool:
        if type(other) is type(self):
            return self._raw == other._raw
        if isinstance(other, (Fixed, int, Fraction, BigInt, Decimal)):
            return self.to_fraction() == to_exact(other)
        if isinstance(other, float):
            return self.to_fraction() == other
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
        return hash(self.to_fraction())

    def __float__(self) -> float:
        return self.to_float()

    def __int__(self) -> int:
        return int(self.to_fraction())

    def __trunc__(self) -> int:
        return int(self.to_fraction())

    def __floor__(self) -> int:
        return self._raw >> self.FRAC_BITS

    def __ceil__(self) -> int:
        return -((-self._raw) >> self.FRAC_BITS)

    def __round__(self, ndigits=None):
        if ndigits is None:
            return round_shift_right(self._raw, self.FRAC_BITS)
        return self.from_fraction(Fraction(round(self.to_fraction(), ndigits)))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_string()}')"


# Operands compare() and the ordering operators accept
_ORDERED_TYPES = (Fixed, int, BigInt, Fraction, float, Decimal)


# ============================================================================
# Type factory
# ============================================================================

_types: Dict[Tuple[IntType, int], Type[Fixed]] = {}
_types_lock = threading.Lock()


def fixed_type(backing: IntType, frac_bits: int) -> Type[Fixed]:
    """
    The Fixed class for a backing type and fraction width.

    Args:
        backing: IntType holding the raw value (I32, U64, IntType(24), ...)
        frac_bits: Fraction bits N, 0 <= N <= backing.bits

    Raises:
        InvalidBitWidthError: If frac_bits is negative or wider than backing
    """
    if not isinstance(backing, IntType):
        raise InvalidBitWidthError(
            f"backing must be an IntType, got {type(backing).__name__}",
            parameter="backing",
        )
    if not isinstance(frac_bits, int) or not 0 <= frac_bits <= backing.bits:
        raise InvalidBitWidthError(
            f"frac_bits must be in 0..{backing.bits} for {backing.name}, got {frac_bits!r}",
            parameter="frac_bits",
        )

    key = (backing, frac_bits)
    with _types_lock:
        cls = _types.get(key)
        if cls is None:
            name = f"Fixed_{backing.name}_{frac_bits}"
            namespace = {"BACKING": backing, "FRAC_BITS": frac_bits, "__slots__": ()}
            cls = type(Fixed)(name, (Fixed,), namespace)
            _types[key] = cls
            logger.debug("Fixed type created: %s", name)
    return cls
