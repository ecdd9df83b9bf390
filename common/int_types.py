"""
Native fixed-width integer types for numcore.

An IntType describes a machine integer (width and signedness). It is the
backing type of Fixed and FixedInt classes and the target of
BigInt.to_native(). It knows the range and the three ways of narrowing
into it: check (raise), wrap (modulo 2**bits) and saturate (clamp).

Usage:
    from common.int_types import I32, U64

    I32.check(2**31)            # raises NumericOverflowError(side="above")
    U64.from_fraction(Fraction(7, 2))   # 4 (half to even)
"""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import Optional

from common.rounding import round_fraction
from numcore_exceptions import InvalidBitWidthError, NumericOverflowError


@dataclass(frozen=True)
class IntType:
    """
    A native integer width.

    Attributes:
        bits: Width in bits (>= 1)
        signed: Two's complement when True, unsigned otherwise
        name: Display name, e.g. "i32"
    """

    bits: int
    signed: bool = True
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.bits, int) or self.bits < 1:
            raise InvalidBitWidthError(
                f"integer width must be a positive int, got {self.bits!r}",
                parameter="bits",
            )
        if self.name is None:
            object.__setattr__(self, "name", f"{'i' if self.signed else 'u'}{self.bits}")

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    def contains(self, value: int) -> bool:
        return self.min_value <= value <= self.max_value

    def check(self, value: int, source: str = "value") -> int:
        """
        Return value unchanged if it fits, else raise.

        Raises:
            NumericOverflowError: With side "above" or "below"
        """
        if value > self.max_value:
            raise NumericOverflowError(
                f"{source} exceeds {self.name} maximum {self.max_value}",
                target=self.name,
                side=NumericOverflowError.ABOVE,
            )
        if value < self.min_value:
            raise NumericOverflowError(
                f"{source} is below {self.name} minimum {self.min_value}",
                target=self.name,
                side=NumericOverflowError.BELOW,
            )
        return value

    def from_fraction(self, value: Fraction) -> int:
        """Nearest integer (ties to even), range checked."""
        return self.check(round_fraction(value))

    def wrap(self, value: int) -> int:
        """Reduce modulo 2**bits into range (two's complement when signed)."""
        value &= (1 << self.bits) - 1
        if self.signed and value > self.max_value:
            value -= 1 << self.bits
        return value

    def saturate(self, value: int) -> int:
        """Clamp into [min_value, max_value]."""
        return max(self.min_value, min(self.max_value, value))

    def __str__(self) -> str:
        return self.name


I8 = IntType(8, True)
I16 = IntType(16, True)
I32 = IntType(32, True)
I64 = IntType(64, True)
I128 = IntType(128, True)
U8 = IntType(8, False)
U16 = IntType(16, False)
U32 = IntType(32, False)
U64 = IntType(64, False)
U128 = IntType(128, False)

