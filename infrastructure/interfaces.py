"""
infrastructure/interfaces.py

Capability interfaces for all numeric types in numcore.

Each capability is a small abstract base class with one required
operation. A concrete type (BigInt, Fixed, Posit, Ratio) opts into the
capabilities it supports; generic algorithms check for the capability
they need instead of for a concrete type. Numeric bundles the full set.

Interface Contract:
    - Operations never mutate their operands; they return new values
    - Errors follow the concrete type's policy (DivideByZeroError,
      NumericOverflowError, ...); posit NaR is returned, never raised
    - compare() returns -1, 0 or 1

Usage:
    from infrastructure.interfaces import Addable, Numeric

    def total(values):
        acc = values[0]
        for v in values[1:]:
            acc = acc.add(v)
        return acc

    if isinstance(x, Numeric):
        print(x.to_string())
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class NumericResult:
    """
    Explicit success/failure container for façade operations.

    Attributes:
        success: Whether the operation produced a value
        value: The result (None on failure)
        error: The exception that stopped the operation (None on success)
        operation: Name of the dispatched operation
        metadata: Additional information (operand types, ...)

    Example:
        result = facade.attempt("div", a, b)
        if not result.success:
            print(f"{result.operation} failed: {result.error}")
    """

    success: bool
    value: Any = None
    error: Optional[Exception] = None
    operation: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """A result is either a value or an error."""
        if self.success and self.error is not None:
            raise ValueError("successful NumericResult cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("failed NumericResult must carry an error")

    def unwrap(self) -> Any:
        """Return the value, re-raising the stored error on failure."""
        if not self.success:
            raise self.error
        return self.value


class Addable(ABC):
    @abstractmethod
    def add(self, other: Any) -> Any:
        """self + other"""


class Subtractable(ABC):
    @abstractmethod
    def sub(self, other: Any) -> Any:
        """self - other"""


class Multipliable(ABC):
    @abstractmethod
    def mul(self, other: Any) -> Any:
        """self * other"""


class Divisible(ABC):
    @abstractmethod
    def div(self, other: Any) -> Any:
        """
        self / other under the type's division contract.

        BigInt and FixedInt truncate, Fixed rounds half to even, Posit
        rounds to the nearest posit (x / 0 is NaR), Ratio is exact.
        """


class Negatable(ABC):
    @abstractmethod
    def neg(self) -> Any:
        """-self"""


class Comparable(ABC):
    @abstractmethod
    def compare(self, other: Any) -> int:
        """
        Three-way comparison.

        Returns:
            -1 if self < other, 0 if equal, 1 if self > other
        """


class Formattable(ABC):
    @abstractmethod
    def to_string(self, *args: Any, **kwargs: Any) -> str:
        """
        Text form of the value.

        BigInt and FixedInt take a radix; Fixed and Posit take a decimal
        precision.
        """


class Convertible(ABC):
    @abstractmethod
    def try_convert(self, target: Any) -> Any:
        """
        Convert to another representation.

        Args:
            target: int, float, Fraction, an IntType or a numcore class

        Raises:
            NumericOverflowError: If the value does not fit the target
            UnsupportedConversionError: If no mapping exists
        """


class Numeric(
    Addable,
    Subtractable,
    Multipliable,
    Divisible,
    Negatable,
    Comparable,
    Formattable,
    Convertible,
):
    """
    Full capability set shared by BigInt, FixedInt, Fixed, Posit and Ratio.

    Subclasses only implement the abstract operations; everything else
    about them (storage, rounding, error policy) is their own.
    """


CAPABILITIES = {
    "add": Addable,
    "sub": Subtractable,
    "mul": Multipliable,
    "div": Divisible,
    "neg": Negatable,
    "compare": Comparable,
    "to_string": Formattable,
    "try_convert": Convertible,
}
"""Operation name -> capability interface required to dispatch it."""


def get_capabilities(value: Any) -> List[str]:
    """Names of the operations a value supports."""
    return [name for name, iface in CAPABILITIES.items() if isinstance(value, iface)]


def supports_capability(value: Any, capability: str) -> bool:
    """
    Check if a value supports a specific operation.

    Example:
        if supports_capability(x, "div"):
            q = x.div(y)
    """
    iface = CAPABILITIES.get(capability)
    return iface is not None and isinstance(value, iface)
