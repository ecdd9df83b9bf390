"""
numcore_exceptions.py

Central exception hierarchy for the numcore numeric core.
Defines the error kinds surfaced by BigInt, Fixed, Posit and the façade.

Exception hierarchy:
    NumcoreException (base)
    ├── ArithmeticException
    │   ├── DivideByZeroError      (also ZeroDivisionError)
    │   └── NumericOverflowError   (also OverflowError)
    ├── FormatException
    │   ├── ParseError             (also ValueError)
    │   └── InvalidBitWidthError   (also ValueError)
    ├── ConversionException
    │   └── UnsupportedConversionError (also TypeError)
    └── ConfigurationException
        └── InvalidConfigError

NaR (Not-a-Real) is NOT part of this hierarchy: it is an in-band posit
value and propagates through arithmetic instead of being raised.

Usage:
    from numcore_exceptions import DivideByZeroError, NumericOverflowError

    try:
        q, r = a.div_rem(b)
    except DivideByZeroError as e:
        logger.error("Division failed: %s", e)
        logger.error("Context: %s", e.context)
"""

from typing import Any, Dict, Optional


class NumcoreException(Exception):
    """
    Base exception for all numcore-specific errors.

    All numcore exceptions support:
    - Detailed error messages
    - Contextual information (dict)
    - Original exception chaining (via 'from')
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# ARITHMETIC EXCEPTIONS
# ============================================================================


class ArithmeticException(NumcoreException):
    """Base exception for failed arithmetic results."""


class DivideByZeroError(ArithmeticException, ZeroDivisionError):
    """
    Integer, fixed-point or ratio division/remainder with a zero divisor.

    Posit division by zero does not raise; it yields NaR.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["operation"] = operation
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class NumericOverflowError(ArithmeticException, OverflowError):
    """
    A conversion or narrowing arithmetic result does not fit the target width.

    Attributes:
        side: "above" when the value exceeds the maximum, "below" when it
              is smaller than the minimum, None when unknown (e.g. NaN input)
    """

    ABOVE = "above"
    BELOW = "below"

    def __init__(
        self,
        message: str,
        target: Optional[str] = None,
        side: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["target"] = target
        context["side"] = side
        kwargs["context"] = context
        super().__init__(message, **kwargs)
        self.side = side


# ============================================================================
# FORMAT EXCEPTIONS
# ============================================================================


class FormatException(NumcoreException):
    """Base exception for malformed input and malformed type parameters."""


class ParseError(FormatException, ValueError):
    """
    Malformed input to a string-parsing constructor.

    Causes:
    - Empty string or a bare sign
    - Digit not valid for the requested radix
    - Radix outside 2..36
    - Redundant leading zeros under strict parsing
    """

    def __init__(
        self,
        message: str,
        text: Optional[str] = None,
        radix: Optional[int] = None,
        position: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["text"] = text
        context["radix"] = radix
        if position is not None:
            context["position"] = position
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class InvalidBitWidthError(FormatException, ValueError):
    """A Fixed/Posit/IntType parameter violates its width invariant."""

    def __init__(self, message: str, parameter: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["parameter"] = parameter
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONVERSION EXCEPTIONS
# ============================================================================


class ConversionException(NumcoreException):
    """Base exception for conversions between numeric representations."""


class UnsupportedConversionError(ConversionException, TypeError):
    """No meaningful mapping exists between the source and target types."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        target: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["source"] = source
        context["target"] = target
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(NumcoreException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException, ValueError):
    """
    Invalid configuration value.

    Causes:
    - Karatsuba threshold below the minimum split size
    - Non-integer environment override
    """

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["config_key"] = config_key
        kwargs["context"] = context
        super().__init__(message, **kwargs)

