"""
Shared rounding contract for numcore.

Every lossy conversion in the Fixed and Posit layers rounds half to even
(banker's rounding) on exact integer or rational inputs. Keeping the
primitives here guarantees the two layers round identically.

Usage:
    from common.rounding import round_shift_right, round_div

    raw = round_shift_right(raw_a * raw_b, frac_bits)
"""

from fractions import Fraction


def round_shift_right(value: int, shift: int) -> int:
    """
    Arithmetic shift right by ``shift`` bits, rounding half to even.

    Works for negative values: the shifted-out bits are taken relative to
    floor(value / 2**shift), so ties go to the even neighbour on both sides
    of zero.
    """
    if shift <= 0:
        return value << -shift
    quotient = value >> shift
    remainder = value - (quotient << shift)
    half = 1 << (shift - 1)
    if remainder > half or (remainder == half and quotient & 1):
        quotient += 1
    return quotient


def round_div(numerator: int, denominator: int) -> int:
    """
    Integer quotient numerator / denominator rounded half to even.

    Raises:
        ZeroDivisionError: If denominator is zero
    """
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    quotient, remainder = divmod(numerator, denominator)
    twice = remainder * 2
    if twice > denominator or (twice == denominator and quotient & 1):
        quotient += 1
    return quotient


def round_fraction(value: Fraction) -> int:
    """Nearest integer to an exact rational, ties to even."""
    return round_div(value.numerator, value.denominator)


def format_decimal(value: Fraction, precision: int) -> str:
    """
    Render an exact rational as a decimal string with ``precision`` digits
    after the point, rounding half to even.

    Examples:
        format_decimal(Fraction(3, 2), 2) -> "1.50"
        format_decimal(Fraction(-1, 8), 2) -> "-0.12"
        format_decimal(Fraction(5, 2), 0) -> "2"
    """
    if precision < 0:
        raise ValueError(f"precision must be >= 0, got {precision}")

    scaled = round_div(value.numerator * 10**precision, value.denominator)
    sign = "-" if scaled < 0 else ""
    digits = str(abs(scaled))

    if precision == 0:
        return f"{sign}{digits}"

    digits = digits.rjust(precision + 1, "0")
    return f"{sign}{digits[:-precision]}.{digits[-precision:]}"


def exact_decimal(value: Fraction) -> str:
    """
    Shortest exact decimal form of a dyadic rational (denominator 2**k).

    A denominator of 2**k needs exactly k decimal places, so no rounding
    happens. At least one digit is kept after the point.

    Raises:
        ValueError: If the denominator is not a power of two
    """
    denominator = value.denominator
    if denominator & (denominator - 1):
        raise ValueError(f"{value} has no finite binary expansion")
    places = max(denominator.bit_length() - 1, 1)
    text = format_decimal(value, places).rstrip("0")
    return text + "0" if text.endswith(".") else text
