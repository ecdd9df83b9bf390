"""
component_6_ratio.py

Ratio: an exact rational as a reduced pair of BigInt values.

Invariants:
- gcd(numerator, denominator) == 1
- denominator > 0
- zero is 0/1

This is deliberately a simple integer pair: no continued fractions or
approximation helpers.
"""

from fractions import Fraction
from typing import Any

from common.conversion import convert_exact, to_exact
from component_2_bigint import BigInt
from infrastructure.interfaces import Numeric
from numcore_exceptions import DivideByZeroError, UnsupportedConversionError


class Ratio(Numeric):
    """
    Exact rational number over BigInt.

    Example:
        Ratio(1, 3) + Ratio(1, 6) == Ratio(1, 2)
    """

    def __init__(self, numerator: Any = 0, denominator: Any = 1):
        num = numerator if isinstance(numerator, BigInt) else BigInt(numerator)
        den = denominator if isinstance(denominator, BigInt) else BigInt(denominator)
        if den.is_zero():
            raise DivideByZeroError("Ratio with zero denominator", operation="Ratio")
        if den.is_negative:
            num, den = -num, -den
        g = num.gcd(den)
        if g != 1:
            num, den = num.div(g), den.div(g)
        self._num = num
        self._den = den

    @classmethod
    def from_fraction(cls, value: Fraction) -> "Ratio":
        return cls(value.numerator, value.denominator)

    @property
    def numerator(self) -> BigInt:
        return self._num

    @property
    def denominator(self) -> BigInt:
        return self._den

    def _other(self, other: Any, operation: str) -> "Ratio":
        if isinstance(other, Ratio):
            return other
        if isinstance(other, (int, BigInt)):
            return Ratio(other)
        if isinstance(other, Fraction):
            return Ratio.from_fraction(other)
        raise UnsupportedConversionError(
            f"Ratio.{operation} needs an exact operand, got {type(other).__name__}",
            source=type(other).__name__,
            target="Ratio",
        )

    def add(self, other: Any) -> "Ratio":
        o = self._other(other, "add")
        return Ratio(self._num * o._den + o._num * self._den, self._den * o._den)

    def sub(self, other: Any) -> "Ratio":
        o = self._other(other, "sub")
        return Ratio(self._num * o._den - o._num * self._den, self._den * o._den)

    def mul(self, other: Any) -> "Ratio":
        o = self._other(other, "mul")
        return Ratio(self._num * o._num, self._den * o._den)

    def div(self, other: Any) -> "Ratio":
        """
        Raises:
            DivideByZeroError: If other is zero
        """
        o = self._other(other, "div")
        if o._num.is_zero():
            raise DivideByZeroError("Ratio division by zero", operation="div")
        return Ratio(self._num * o._den, self._den * o._num)

    def neg(self) -> "Ratio":
        return Ratio(-self._num, self._den)

    def abs(self) -> "Ratio":
        return self.neg() if self._num.is_negative else self

    def reciprocal(self) -> "Ratio":
        return Ratio(1).div(self)

    def compare(self, other: Any) -> int:
        o = self._other(other, "compare")
        return (self._num * o._den).compare(o._num * self._den)

    def to_fraction(self) -> Fraction:
        return Fraction(self._num.to_int(), self._den.to_int())

    def to_string(self, radix: int = 10) -> str:
        """'n/d', or just 'n' for integers."""
        if self._den == 1:
            return self._num.to_string(radix)
        return f"{self._num.to_string(radix)}/{self._den.to_string(radix)}"

    def try_convert(self, target: Any) -> Any:
        if target is Ratio:
            return self
        return convert_exact(self.to_fraction(), target, source="Ratio")

    def _binary(self, other, method):
        if isinstance(other, (Ratio, int, BigInt, Fraction)):
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

    def __neg__(self):
        return self.neg()

    def __abs__(self):
        return self.abs()

    def __bool__(self) -> bool:
        return not self._num.is_zero()

    def __eq__(self, other) -> bool:
        if isinstance(other, Ratio):
            return self._num == other._num and self._den == other._den
        if isinstance(other, (int, BigInt, Fraction, float)):
            return self.to_fraction() == to_exact(other)
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
        return hash(self.to_fraction())

    def __float__(self) -> float:
        return convert_exact(self.to_fraction(), float, source="Ratio")

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Ratio({self._num}, {self._den})"
