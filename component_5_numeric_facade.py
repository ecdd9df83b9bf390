"""
component_5_numeric_facade.py

Numeric façade: one entry point for add, sub, mul, div, neg, compare,
to_string and try_convert across BigInt, FixedInt, Fixed, Posit and
Ratio.

The façade holds no numeric state and computes nothing itself. It looks
up the capability an operation needs (infrastructure.interfaces), checks
the left operand provides it and calls the operand's own method, so every
overflow, rounding and error rule is the concrete type's.

Two calling styles:
- Module functions (add, div, try_convert, ...) raise the concrete
  type's exceptions
- NumericFacade.attempt(...) returns a NumericResult instead of raising
  numcore errors

Usage:
    from component_5_numeric_facade import NumericFacade, add, try_convert

    total = add(BigInt(2), 3)
    facade = NumericFacade()
    result = facade.attempt("div", Q16(1), Q16(0))
    if not result.success:
        print(result.error)
"""

import threading
from typing import Any, Dict, List

from common.conversion import convert_exact, to_exact, type_name
from component_15_logging_config import get_logger
from infrastructure.interfaces import (
    CAPABILITIES,
    Comparable,
    Convertible,
    NumericResult,
    get_capabilities,
)
from numcore_exceptions import NumcoreException

logger = get_logger(__name__)


def _dispatch(operation: str, value: Any, *args: Any, **kwargs: Any) -> Any:
    iface = CAPABILITIES[operation]
    if not isinstance(value, iface):
        raise TypeError(
            f"{type(value).__name__} does not support {operation} "
            f"(missing {iface.__name__})"
        )
    return getattr(value, operation)(*args, **kwargs)


def add(a: Any, b: Any) -> Any:
    return _dispatch("add", a, b)


def sub(a: Any, b: Any) -> Any:
    return _dispatch("sub", a, b)


def mul(a: Any, b: Any) -> Any:
    return _dispatch("mul", a, b)


def div(a: Any, b: Any) -> Any:
    """Division under a's contract (see Divisible.div)."""
    return _dispatch("div", a, b)


def neg(a: Any) -> Any:
    return _dispatch("neg", a)


def compare(a: Any, b: Any) -> int:
    """
    Three-way comparison.

    Values of one family use their own compare(); otherwise both sides
    are compared as exact rationals, with NaR below every real.
    """
    if isinstance(a, Comparable) and (type(b) is type(a) or isinstance(b, int)):
        return a.compare(b)
    left, right = to_exact(a), to_exact(b)
    if left is None or right is None:
        return (right is None) - (left is None)
    return (left > right) - (left < right)


def to_string(value: Any, *args: Any, **kwargs: Any) -> str:
    return _dispatch("to_string", value, *args, **kwargs)


def try_convert(value: Any, target: Any) -> Any:
    """
    Convert value into target.

    Args:
        value: A numcore value or a Python int/float/Fraction/Decimal
        target: int, float, Fraction, an IntType, BigInt, Ratio or a
                FixedInt/Fixed/Posit class

    Raises:
        NumericOverflowError: Value does not fit the target
        UnsupportedConversionError: No mapping exists
    """
    if isinstance(value, Convertible):
        return value.try_convert(target)
    return convert_exact(to_exact(value), target, source=type_name(value))


class NumericFacade:
    """
    Explicit-result façade with per-operation statistics.

    Thread-safe: the only mutable state is the statistics table, guarded
    by a lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._stats: Dict[str, Dict[str, int]] = {}

    _OPERATIONS = {
        "add": add,
        "sub": sub,
        "mul": mul,
        "div": div,
        "neg": neg,
        "compare": compare,
        "to_string": to_string,
        "try_convert": try_convert,
    }

    def attempt(self, operation: str, *args: Any, **kwargs: Any) -> NumericResult:
        """
        Run an operation and capture numcore errors as a failed result.

        Programming errors (TypeError for unsupported operands, unknown
        operation names) still raise.

        Raises:
            ValueError: If operation is unknown
        """
        fn = self._OPERATIONS.get(operation)
        if fn is None:
            raise ValueError(f"unknown operation {operation!r}")

        metadata = {"operand_types": [type_name(a) for a in args]}
        try:
            value = fn(*args, **kwargs)
        except NumcoreException as e:
            logger.debug("Facade %s failed: %s", operation, e)
            self._record(operation, success=False)
            return NumericResult(
                success=False, error=e, operation=operation, metadata=metadata
            )

        self._record(operation, success=True)
        return NumericResult(
            success=True, value=value, operation=operation, metadata=metadata
        )

    def capabilities(self, value: Any) -> List[str]:
        return get_capabilities(value)

    def _record(self, operation: str, success: bool) -> None:
        with self._lock:
            entry = self._stats.setdefault(operation, {"success": 0, "failure": 0})
            entry["success" if success else "failure"] += 1

    def get_stats(self) -> Dict[str, Dict[str, int]]:
        with self._lock:
            return {op: dict(counts) for op, counts in self._stats.items()}

