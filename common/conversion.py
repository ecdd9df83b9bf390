"""
Exact conversion contract shared by every numcore value type.

Each value type can produce an exact rational (to_fraction(); None stands
for the posit NaR) and each target type can be built from one
(from_fraction(), which applies the target's own rounding and overflow
policy). try_convert between any pair is therefore:

    target.from_fraction(source.to_fraction())

plus the handful of Python builtins (int, float, Fraction) handled here.
"""

import math
from decimal import Decimal
from fractions import Fraction
from typing import Any, Optional

from common.rounding import round_fraction
from numcore_exceptions import NumericOverflowError, UnsupportedConversionError


def type_name(obj: Any) -> str:
    """Readable name for a value or a target type."""
    if isinstance(obj, type):
        return obj.__name__
    name = getattr(obj, "name", None)
    if isinstance(name, str):
        return name
    return type(obj).__name__


def to_exact(value: Any) -> Optional[Fraction]:
    """
    Exact rational value of a supported input.

    Returns:
        Fraction, or None for "not a real" inputs (posit NaR, NaN, +-inf)

    Raises:
        UnsupportedConversionError: For types with no numeric meaning
    """
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return Fraction(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        return Fraction(value)
    to_fraction = getattr(value, "to_fraction", None)
    if callable(to_fraction):
        return to_fraction()
    raise UnsupportedConversionError(
        f"cannot interpret {type(value).__name__} as a number",
        source=type(value).__name__,
    )


def convert_exact(exact: Optional[Fraction], target: Any, source: str = "value") -> Any:
    """
    Build a target value from an exact rational.

    Args:
        exact: Value to convert; None means NaR
        target: int, float, Fraction, an IntType, or a numcore class
                exposing from_fraction()
        source: Name of the source type for error messages

    Raises:
        NumericOverflowError: Value does not fit, or NaR into a type that
                              has no NaR
        UnsupportedConversionError: Target is not a numeric type
    """
    target_name = type_name(target)

    if exact is None:
        nar = getattr(target, "nar", None)
        if callable(nar):
            return nar()
        if target is float:
            return math.nan
        raise NumericOverflowError(
            f"{source} is not a real number and cannot become {target_name}",
            target=target_name,
        )

    if target is Fraction:
        return exact
    if target is int:
        return round_fraction(exact)
    if target is float:
        try:
            return float(exact)
        except OverflowError as e:
            raise NumericOverflowError(
                f"{source} is outside the float range",
                target="float",
                side=NumericOverflowError.ABOVE if exact > 0 else NumericOverflowError.BELOW,
                original_exception=e,
            ) from e

    from_fraction = getattr(target, "from_fraction", None)
    if not callable(from_fraction):
        raise UnsupportedConversionError(
            f"no conversion from {source} to {target_name}",
            source=source,
            target=target_name,
        )
    return from_fraction(exact)


def non_finite_error(value: float, target: str) -> NumericOverflowError:
    """Overflow error for a NaN or infinite input; NaN has no side."""
    if math.isnan(value):
        side = None
    elif value > 0:
        side = NumericOverflowError.ABOVE
    else:
        side = NumericOverflowError.BELOW
    return NumericOverflowError(f"cannot convert {value} to {target}", target=target, side=side)


def is_nan(value: Any) -> bool:
    """True for float and Decimal NaNs."""
    if isinstance(value, float):
        return math.isnan(value)
    return isinstance(value, Decimal) and value.is_nan()


def compare_exact(left: Fraction, other: Any, source: str = "value") -> int:
    """
    Three-way comparison of an exact value against any to_exact() input.

    Infinities order beyond every finite value.

    Raises:
        UnsupportedConversionError: For NaN, NaR and non-numeric operands
    """
    right = to_exact(other)
    if right is None:
        if isinstance(other, (float, Decimal)) and not is_nan(other):
            return -1 if other > 0 else 1
        raise UnsupportedConversionError(
            f"{source} cannot be ordered against {other!r}",
            source=type_name(other),
            target=source,
        )
    return (left > right) - (left < right)
