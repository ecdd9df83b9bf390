"""
component_4_posit.py

Posit values and the quire accumulator.

posit_type(nbits, es) returns a cached Posit class for those parameters.
Values wrap one pattern. Arithmetic is exact on the decoded rationals,
followed by a single round-to-nearest-even encode, so every result is the
correctly rounded posit.

NaR handling:
- Any operation with a NaR operand returns NaR
- x / 0 returns NaR
- NaR is never raised; it compares equal to itself and below every real

Quire:
    Exact accumulator for sums and dot products of posits of one type.
    Rounds once, in to_posit().

Usage:
    from component_4_posit import posit_type

    P16 = posit_type(16, 1)
    x = P16.from_float(0.1)
    print(x.to_string(6), x.bits())
"""

import math
import threading
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, Iterable, Optional, Tuple, Type

from common.constants import POSIT_NAR_TEXT
from common.conversion import convert_exact, to_exact
from common.rounding import exact_decimal, format_decimal
from component_15_logging_config import get_logger
from component_4_posit_codec import DecodedPosit, PositFormat, decode, encode, to_fraction
from infrastructure.interfaces import Numeric
logger = get_logger(__name__)

# Operands mixed into posit arithmetic through their exact value
_OPERAND_TYPES = (Numeric, int, float, Fraction, Decimal)


class Posit(Numeric):
    """
    Base class of every posit_type(); not used directly.

    Class attributes (set by posit_type):
        FORMAT: PositFormat (nbits, es)
    """

    FORMAT: PositFormat = None

    __slots__ = ("_bits",)

    def __init__(self, value: Any = 0):
        fmt = type(self).FORMAT
        if fmt is None:
            raise TypeError("use posit_type(nbits, es) to create a Posit type")
        self._bits = encode(fmt, to_exact(value))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_bits(cls, pattern: int) -> "Posit":
        """Wrap an explicit bit pattern (masked to nbits)."""
        obj = cls.__new__(cls)
        obj._bits = int(pattern) & cls.FORMAT.mask
        return obj

    @classmethod
    def from_fraction(cls, value: Optional[Fraction]) -> "Posit":
        return cls.from_bits(encode(cls.FORMAT, value))

    @classmethod
    def from_float(cls, value: float) -> "Posit":
        """NaN and infinities map to NaR."""
        return cls.from_bits(encode(cls.FORMAT, to_exact(float(value))))

    @classmethod
    def from_int(cls, value: int) -> "Posit":
        return cls.from_bits(encode(cls.FORMAT, Fraction(int(value))))

    @classmethod
    def zero(cls) -> "Posit":
        return cls.from_bits(0)

    @classmethod
    def nar(cls) -> "Posit":
        return cls.from_bits(cls.FORMAT.nar)

    @classmethod
    def maxpos(cls) -> "Posit":
        return cls.from_bits(cls.FORMAT.maxpos)

    @classmethod
    def minpos(cls) -> "Posit":
        return cls.from_bits(cls.FORMAT.minpos)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def bits(self) -> int:
        return self._bits

    def is_nar(self) -> bool:
        return self._bits == self.FORMAT.nar

    def is_zero(self) -> bool:
        return self._bits == 0

    def decode(self) -> DecodedPosit:
        return decode(self.FORMAT, self._bits)

    def next_up(self) -> "Posit":
        """Next pattern in posit order (wraps from maxpos to NaR)."""
        return self.from_bits(self._bits + 1)

    def next_down(self) -> "Posit":
        return self.from_bits(self._bits - 1)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def _operand(self, other: Any, operation: str) -> Optional[Fraction]:
        if isinstance(other, Posit):
            if type(other) is not type(self):
                raise TypeError(
                    f"cannot {operation} {type(self).__name__} and {type(other).__name__}"
                )
            return other.to_fraction()
        return to_exact(other)

    def _apply(self, other: Any, operation: str, fn) -> "Posit":
        right = self._operand(other, operation)
        left = self.to_fraction()
        if left is None or right is None:
            return self.nar()
        return self.from_fraction(fn(left, right))

    def add(self, other: Any) -> "Posit":
        return self._apply(other, "add", lambda a, b: a + b)

    def sub(self, other: Any) -> "Posit":
        return self._apply(other, "sub", lambda a, b: a - b)

    def mul(self, other: Any) -> "Posit":
        return self._apply(other, "mul", lambda a, b: a * b)

    def _quotient(self, left: Optional[Fraction], right: Optional[Fraction]) -> "Posit":
        if left is None or right is None or right == 0:
            return self.nar()
        return self.from_fraction(left / right)

    def div(self, other: Any) -> "Posit":
        """x / 0 is NaR."""
        return self._quotient(self.to_fraction(), self._operand(other, "div"))

    def _rdiv(self, other: Any) -> "Posit":
        return self._quotient(self._operand(other, "div"), self.to_fraction())

    def neg(self) -> "Posit":
        # Two's complement negation; NaR and zero map to themselves
        return self.from_bits(-self._bits)

    def abs(self) -> "Posit":
        return self.neg() if self._bits & self.FORMAT.sign_bit and not self.is_nar() else self

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare(self, other: Any) -> int:
        """Order of the patterns as signed integers; NaR is the minimum."""
        if isinstance(other, Posit) and type(other) is type(self):
            a = self.FORMAT.to_signed(self._bits)
            b = self.FORMAT.to_signed(other._bits)
            return (a > b) - (a < b)
        right = self._operand(other, "compare")
        left = self.to_fraction()
        if left is None or right is None:
            return (right is None) - (left is None)
        return (left > right) - (left < right)

    # ------------------------------------------------------------------
    # Conversion and formatting
    # ------------------------------------------------------------------

    def to_fraction(self) -> Optional[Fraction]:
        """Exact value; None for NaR."""
        return to_fraction(self.FORMAT, self._bits)

    def to_float(self) -> float:
        return convert_exact(self.to_fraction(), float, source=type(self).__name__)

    def try_convert(self, target: Any) -> Any:
        """
        Convert to another representation; NaR becomes NaR for posit
        targets, NaN for float and NumericOverflowError otherwise.
        """
        if target is type(self):
            return self
        return convert_exact(self.to_fraction(), target, source=type(self).__name__)

    def to_string(self, precision: Optional[int] = None) -> str:
        """
        Decimal text; "NaR" for NaR.

        Args:
            precision: Digits after the point (rounded half to even), or
                       None for the shortest form that reads back to
                       the same posit (the float repr when a float holds
                       the value closely enough, the exact decimal otherwise)
        """
        value = self.to_fraction()
        if value is None:
            return POSIT_NAR_TEXT
        if precision is not None:
            return format_decimal(value, precision)
        text = self._float_text(value)
        return text if text is not None else exact_decimal(value)

    def _float_text(self, value: Fraction) -> Optional[str]:
        # Large es pushes the range past float; such values need exact text
        if self.FORMAT.nbits > 64:
            return None
        try:
            approx = float(value)
        except OverflowError:
            return None
        if math.isinf(approx) or (approx == 0.0 and value != 0):
            return None
        if encode(self.FORMAT, Fraction(approx)) != self._bits:
            return None
        return repr(approx)

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def _binary(self, other, method):
        if isinstance(other, _OPERAND_TYPES):
            return method(other)
        return NotImplemented

    def __add__(self, other):
        return self._binary(other, self.add)

    def __radd__(self, other):
        return self._binary(other, self.add)

    def __sub__(self, other):
        return self._binary(other, self.sub)

    def __rsub__(self, other):
        return self._binary(other, lambda o: self.neg().add(o))

    def __mul__(self, other):
        return self._binary(other, self.mul)

    def __rmul__(self, other):
        return self._binary(other, self.mul)

    def __truediv__(self, other):
        return self._binary(other, self.div)

    def __rtruediv__(self, other):
        return self._binary(other, self._rdiv)

    def __neg__(self):
        return self.neg()

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    def __bool__(self) -> bool:
        return self._bits != 0

    def __eq__(self, other) -> bool:
        if isinstance(other, Posit):
            return type(other) is type(self) and self._bits == other._bits
        if isinstance(other, _OPERAND_TYPES):
            value, right = self.to_fraction(), to_exact(other)
            return value is not None and right is not None and value == right
        return NotImplemented

    def __lt__(self, other):
        return self._binary(other, lambda o: self.compare(o) < 0)

    def __le__(self, other):
        return self._binary(other, lambda o: self.compare(o) <= 0)

    def __gt__(self, other):
        return self._binary(other, lambda o: self.compare(o) > 0)

    def __ge__(self, other):
        return self._binary(other, lambda o: self.compare(o) >= 0)

    def __hash__(self) -> int:
        value = self.to_fraction()
        if value is None:
            return hash((self.FORMAT, self._bits))
        return hash(value)

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(0x{self._bits:0{(self.FORMAT.nbits + 3) // 4}x})"


# ============================================================================
# Quire
# ============================================================================


class Quire:
    """
    Exact accumulator for one posit type.

    Example:
        q = Quire(P16)
        for a, b in zip(xs, ys):
            q.add_product(a, b)
        dot = q.to_posit()
    """

    def __init__(self, posit_cls: Type[Posit]):
        self.posit_cls = posit_cls
        self._sum = Fraction(0)
        self._nar = False

    def _value(self, value: Posit) -> Optional[Fraction]:
        if not isinstance(value, self.posit_cls):
            raise TypeError(
                f"quire for {self.posit_cls.__name__} cannot take {type(value).__name__}"
            )
        return value.to_fraction()

    def add(self, value: Posit) -> "Quire":
        v = self._value(value)
        if v is None:
            self._nar = True
        elif not self._nar:
            self._sum += v
        return self

    def sub(self, value: Posit) -> "Quire":
        v = self._value(value)
        if v is None:
            self._nar = True
        elif not self._nar:
            self._sum -= v
        return self

    def add_product(self, a: Posit, b: Posit) -> "Quire":
        """Fused multiply-add: q += a * b without intermediate rounding."""
        left, right = self._value(a), self._value(b)
        if left is None or right is None:
            self._nar = True
        elif not self._nar:
            self._sum += left * right
        return self

    def clear(self) -> None:
        self._sum = Fraction(0)
        self._nar = False

    def is_nar(self) -> bool:
        return self._nar

    def to_fraction(self) -> Optional[Fraction]:
        return None if self._nar else self._sum

    def to_posit(self) -> Posit:
        return self.posit_cls.from_fraction(self.to_fraction())


def fused_dot(xs: Iterable[Posit], ys: Iterable[Posit]) -> Posit:
    """Dot product of two posit sequences with a single rounding."""
    quire = None
    for a, b in zip(xs, ys):
        if quire is None:
            quire = Quire(type(a))
        quire.add_product(a, b)
    if quire is None:
        raise ValueError("fused_dot needs at least one pair")
    return quire.to_posit()


# ============================================================================
# Type factory
# ============================================================================

_types: Dict[Tuple[int, int], Type[Posit]] = {}
_types_lock = threading.Lock()


def posit_type(nbits: int, es: int) -> Type[Posit]:
    """
    The Posit class for a width and exponent size.

    Args:
        nbits: Total bits (>= 2)
        es: Exponent field width; required, there is no default

    Raises:
        InvalidBitWidthError: If the parameters are invalid
    """
    fmt = PositFormat(nbits, es)
    key = (nbits, es)
    with _types_lock:
        cls = _types.get(key)
        if cls is None:
            name = f"Posit{nbits}_{es}"
            namespace = {"FORMAT": fmt, "__slots__": ()}
            cls = type(Posit)(name, (Posit,), namespace)
            _types[key] = cls
            logger.debug("Posit type created: %s (useed=%d)", name, fmt.useed)
    return cls
