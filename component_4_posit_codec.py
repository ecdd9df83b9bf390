"""
component_4_posit_codec.py

Bit-level posit codec: exact rationals <-> posit bit patterns.

Pattern layout (nbits wide, most significant bit first):

    sign | regime run + terminator | up to ES exponent bits | fraction

- Negative values are the two's complement of the positive pattern
- A regime run of r ones means k = r - 1, a run of r zeros means k = -r;
  the terminator is absent when the run reaches the last bit
- Exponent bits cut off by the end of the pattern read as zeros
- value = useed**k * 2**e * (1 + f / 2**F), useed = 2**(2**ES)
- 0...0 is zero and 10...0 is NaR (Not a Real)

Encoding rounds the infinitely precise pattern half to even and never
produces zero or NaR from a non-zero real: magnitudes saturate at minpos
and maxpos.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Optional

from numcore_exceptions import InvalidBitWidthError


@dataclass(frozen=True)
class PositFormat:
    """
    Posit type parameters.

    Attributes:
        nbits: Total width (>= 2)
        es: Exponent field width (>= 0, < nbits)
    """

    nbits: int
    es: int

    def __post_init__(self):
        if not isinstance(self.nbits, int) or self.nbits < 2:
            raise InvalidBitWidthError(
                f"posit nbits must be an int >= 2, got {self.nbits!r}", parameter="nbits"
            )
        if not isinstance(self.es, int) or not 0 <= self.es < self.nbits:
            raise InvalidBitWidthError(
                f"posit es must be in 0..{self.nbits - 1}, got {self.es!r}", parameter="es"
            )

    @property
    def mask(self) -> int:
        return (1 << self.nbits) - 1

    @property
    def sign_bit(self) -> int:
        return 1 << (self.nbits - 1)

    @property
    def nar(self) -> int:
        return self.sign_bit

    @property
    def maxpos(self) -> int:
        return self.sign_bit - 1

    @property
    def minpos(self) -> int:
        return 1

    @property
    def useed(self) -> int:
        return 1 << (1 << self.es)

    @property
    def max_scale(self) -> int:
        """log2(maxpos) = (nbits - 2) * 2**es"""
        return (self.nbits - 2) << self.es

    @property
    def min_scale(self) -> int:
        return -self.max_scale

    def to_signed(self, pattern: int) -> int:
        """Pattern read as a two's complement integer (the posit order)."""
        pattern &= self.mask
        return pattern - (1 << self.nbits) if pattern & self.sign_bit else pattern

    @property
    def name(self) -> str:
        return f"posit{self.nbits}_{self.es}"


@dataclass(frozen=True)
class DecodedPosit:
    """
    Fields of a decoded pattern.

    For zero and NaR only the flag is meaningful. Otherwise the magnitude
    is 2**(regime * 2**es + exponent) * (1 + fraction / 2**fraction_bits).
    """

    negative: bool = False
    regime: int = 0
    exponent: int = 0
    fraction: int = 0
    fraction_bits: int = 0
    is_zero: bool = False
    is_nar: bool = False

    def scale(self, es: int) -> int:
        return (self.regime << es) + self.exponent


def decode(fmt: PositFormat, pattern: int) -> DecodedPosit:
    pattern &= fmt.mask
    if pattern == 0:
        return DecodedPosit(is_zero=True)
    if pattern == fmt.nar:
        return DecodedPosit(is_nar=True)

    negative = bool(pattern & fmt.sign_bit)
    if negative:
        pattern = -pattern & fmt.mask

    remaining = fmt.nbits - 1
    first = (pattern >> (remaining - 1)) & 1
    run = 0
    while run < remaining and (pattern >> (remaining - 1 - run)) & 1 == first:
        run += 1
    remaining -= run
    if remaining:
        remaining -= 1  # terminator
    regime = run - 1 if first else -run

    taken = min(fmt.es, remaining)
    exponent = (pattern >> (remaining - taken)) & ((1 << taken) - 1)
    exponent <<= fmt.es - taken
    remaining -= taken

    fraction = pattern & ((1 << remaining) - 1)
    return DecodedPosit(
        negative=negative,
        regime=regime,
        exponent=exponent,
        fraction=fraction,
        fraction_bits=remaining,
    )


def to_fraction(fmt: PositFormat, pattern: int) -> Optional[Fraction]:
    """Exact value of a pattern; None for NaR."""
    fields = decode(fmt, pattern)
    if fields.is_nar:
        return None
    if fields.is_zero:
        return Fraction(0)
    significand = (1 << fields.fraction_bits) + fields.fraction
    shift = fields.scale(fmt.es) - fields.fraction_bits
    value = Fraction(significand << shift) if shift >= 0 else Fraction(significand, 1 << -shift)
    return -value if fields.negative else value


def _floor_log2(value: Fraction) -> int:
    n, d = value.numerator, value.denominator
    scale = n.bit_length() - d.bit_length()
    below = n < (d << scale) if scale >= 0 else (n << -scale) < d
    return scale - 1 if below else scale


def encode(fmt: PositFormat, value: Optional[Fraction]) -> int:
    """
    Nearest posit pattern to an exact rational.

    Args:
        value: Exact value, or None for NaR

    Returns:
        nbits-wide pattern
    """
    if value is None:
        return fmt.nar
    if value == 0:
        return 0

    negative = value < 0
    magnitude = -value if negative else value
    scale = _floor_log2(magnitude)

    if scale >= fmt.max_scale:
        pattern = fmt.maxpos
    elif scale < fmt.min_scale:
        pattern = fmt.minpos
    else:
        pattern = _round_pattern(fmt, magnitude, scale)

    return -pattern & fmt.mask if negative else pattern


def _round_pattern(fmt: PositFormat, magnitude: Fraction, scale: int) -> int:
    avail = fmt.nbits - 1
    regime, exponent = scale >> fmt.es, scale & ((1 << fmt.es) - 1)

    if regime >= 0:
        bits, length = ((1 << (regime + 1)) - 1) << 1, regime + 2
    else:
        bits, length = 1, 1 - regime

    bits = (bits << fmt.es) | exponent
    length += fmt.es

    # Fraction to avail + 2 bits plus a sticky flag: more than any rounding
    # decision below can look at
    precision = avail + 2
    normalized = magnitude / (Fraction(2) ** scale) - 1
    scaled = normalized * (1 << precision)
    fraction = scaled.numerator // scaled.denominator
    sticky = fraction != scaled

    bits = (bits << precision) | fraction
    length += precision

    shift = length - avail
    pattern = bits >> shift
    rest = bits & ((1 << shift) - 1)
    half = 1 << (shift - 1)
    if rest > half or (rest == half and (sticky or pattern & 1)):
        pattern += 1

    if pattern > fmt.maxpos:
        return fmt.maxpos
    return max(pattern, fmt.minpos)
