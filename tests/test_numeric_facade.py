# tests/test_numeric_facade.py
"""
Tests for the Numeric façade (component_5) and the capability interfaces.

Covers:
- Dispatch to the concrete type's own operation and error policy
- Cross-family compare with NaR lowest
- try_convert for every family pair that has a mapping
- NumericFacade.attempt explicit results and statistics
- Capability discovery
"""

from decimal import Decimal
from fractions import Fraction

import pytest

from common.int_types import I32, U8
from component_2_bigint import BigInt
from component_3_fixed_point import fixed_type
from component_4_posit import posit_type
from component_5_numeric_facade import (
    NumericFacade,
    add,
    compare,
    div,
    mul,
    neg,
    sub,
    to_string,
    try_convert,
)
from component_6_ratio import Ratio
from infrastructure.interfaces import (
    CAPABILITIES,
    Addable,
    Numeric,
    NumericResult,
    supports_capability,
)
from numcore_exceptions import (
    DivideByZeroError,
    NumericOverflowError,
    UnsupportedConversionError,
)

# ==================== FIXTURES ====================


@pytest.fixture
def q16():
    """Fixture: Q15.16 type"""
    return fixed_type(I32, 16)


@pytest.fixture
def p16():
    """Fixture: posit16, es=1"""
    return posit_type(16, 1)


@pytest.fixture
def facade():
    """Fixture: Fresh façade with empty statistics"""
    return NumericFacade()


# ==================== TESTS ====================


class TestDispatch:
    """Tests for the module-level operations"""

    def test_arithmetic_dispatch(self, q16):
        """Test: Each family keeps its own result type"""
        assert add(BigInt(2), 3) == 5
        assert isinstance(add(BigInt(2), 3), BigInt)
        assert sub(q16.from_float(1.5), q16.from_int(1)) == 0.5
        assert mul(Ratio(1, 3), 3) == 1
        assert neg(Ratio(1, 2)) == Ratio(-1, 2)

    def test_div_contracts(self, q16, p16):
        """Test: Truncating, rounding and NaR division"""
        assert div(BigInt(-7), 2) == -3
        assert div(q16.from_int(1), q16.from_int(4)) == 0.25
        assert div(p16.from_int(1), 0).is_nar()
        with pytest.raises(DivideByZeroError):
            div(q16.from_int(1), q16.from_int(0))

    def test_missing_capability(self):
        """Test: Plain Python values are not dispatched"""
        with pytest.raises(TypeError):
            add(1, 2)

    def test_to_string_arguments(self, q16):
        """Test: Arguments reach the type's to_string"""
        assert to_string(BigInt(255), 16) == "ff"
        assert to_string(q16.from_float(1.5), precision=2) == "1.50"
        assert to_string(Ratio(1, 2)) == "1/2"


class TestCompare:
    """Tests for cross-family comparison"""

    def test_same_family(self, q16):
        """Test: Native compare"""
        assert compare(BigInt(3), BigInt(4)) == -1
        assert compare(q16.from_int(2), 2) == 0

    def test_cross_family(self, q16, p16):
        """Test: Exact comparison between families"""
        assert compare(BigInt(3), q16.from_float(2.5)) == 1
        assert compare(Ratio(1, 3), q16.from_float(0.25)) == 1
        assert compare(p16.from_float(0.5), Ratio(1, 2)) == 0
        assert compare(q16.from_float(1.5), Fraction(3, 2)) == 0

    def test_nar_lowest(self, p16):
        """Test: NaR below every real"""
        assert compare(p16.nar(), BigInt(-(10**30))) == -1
        assert compare(BigInt(0), p16.nar()) == 1
        assert compare(p16.nar(), posit_type(8, 0).nar()) == 0


class TestTryConvert:
    """Tests for conversions between families"""

    def test_bigint_to_native(self):
        """Test: Range checked narrowing with side"""
        assert try_convert(BigInt(200), U8) == 200
        with pytest.raises(NumericOverflowError) as exc_info:
            try_convert(BigInt(300), U8)
        assert exc_info.value.side == NumericOverflowError.ABOVE

    def test_fixed_to_bigint(self, q16):
        """Test: Nearest integer, ties to even"""
        assert try_convert(q16.from_float(2.5), BigInt) == 2
        assert try_convert(q16.from_float(3.5), BigInt) == 4

    def test_posit_to_fixed(self, p16, q16):
        """Test: Posit value lands on the Q16 grid"""
        assert try_convert(p16.from_float(1.5), q16).raw == 3 << 15

    def test_nar_to_fixed(self, p16, q16):
        """Test: NaR has no fixed-point value"""
        with pytest.raises(NumericOverflowError):
            try_convert(p16.nar(), q16)

    def test_bigint_to_posit_saturates(self, p16):
        """Test: Huge integers saturate at maxpos"""
        assert try_convert(BigInt(10**40), p16) == p16.maxpos()

    def test_ratio_round_trip(self, q16):
        """Test: Ratio to fixed and back"""
        value = try_convert(Ratio(3, 4), q16)
        assert try_convert(value, Ratio) == Ratio(3, 4)

    def test_native_sources(self, q16):
        """Test: int, float and Decimal inputs"""
        assert try_convert(5, q16) == 5
        assert try_convert(Decimal("1.25"), q16) == 1.25
        assert try_convert(2.5, BigInt) == 2

    def test_unsupported(self):
        """Test: No mapping to or from text"""
        with pytest.raises(UnsupportedConversionError):
            try_convert("12", int)
        with pytest.raises(UnsupportedConversionError):
            try_convert(BigInt(12), str)


class TestNumericFacade:
    """Tests for explicit results"""

    def test_success_result(self, facade):
        """Test: Value wrapped with metadata"""
        result = facade.attempt("add", BigInt(2), BigInt(3))
        assert result.success
        assert result.value == 5
        assert result.operation == "add"
        assert result.metadata["operand_types"] == ["BigInt", "BigInt"]
        assert result.unwrap() == 5

    def test_divide_by_zero_captured(self, facade, q16):
        """Test: numcore errors become failed results"""
        result = facade.attempt("div", q16.from_int(1), q16.from_int(0))
        assert not result.success
        assert isinstance(result.error, DivideByZeroError)
        with pytest.raises(DivideByZeroError):
            result.unwrap()

    def test_overflow_captured(self, facade):
        """Test: Conversion overflow is a failed result"""
        result = facade.attempt("try_convert", BigInt(-1), U8)
        assert not result.success
        assert result.error.side == NumericOverflowError.BELOW

    def test_nar_is_a_value(self, facade, p16):
        """Test: Posit x / 0 succeeds with NaR"""
        result = facade.attempt("div", p16.from_int(1), p16.zero())
        assert result.success
        assert result.value.is_nar()

    def test_programming_errors_raise(self, facade):
        """Test: Unknown operations and unsupported operands"""
        with pytest.raises(ValueError):
            facade.attempt("sqrt", BigInt(4))
        with pytest.raises(TypeError):
            facade.attempt("add", 1, 2)

    def test_statistics(self, facade, q16):
        """Test: Success and failure counts per operation"""
        facade.attempt("div", BigInt(6), BigInt(3))
        facade.attempt("div", BigInt(6), BigInt(0))
        facade.attempt("neg", q16.from_int(1))
        stats = facade.get_stats()
        assert stats["div"] == {"success": 1, "failure": 1}
        assert stats["neg"] == {"success": 1, "failure": 0}

    def test_result_invariant(self):
        """Test: A result is a value or an error"""
        with pytest.raises(ValueError):
            NumericResult(success=True, error=RuntimeError("x"))
        with pytest.raises(ValueError):
            NumericResult(success=False)


class TestCapabilities:
    """Tests for capability discovery"""

    def test_all_families_numeric(self, q16, p16):
        """Test: Every family provides the full set"""
        for value in (BigInt(1), q16.from_int(1), p16.from_int(1), Ratio(1, 2)):
            assert isinstance(value, Numeric)
            assert NumericFacade().capabilities(value) == list(CAPABILITIES)

    def test_supports_capability(self):
        """Test: Lookup by operation name"""
        assert supports_capability(BigInt(1), "div")
        assert not supports_capability(1, "div")
        assert not supports_capability(BigInt(1), "sqrt")

    def test_partial_capability(self):
        """Test: A type may opt into a single capability"""

        class Counter(Addable):
            def __init__(self, n):
                self.n = n

            def add(self, other):
                return Counter(self.n + other.n)

        assert add(Counter(1), Counter(2)).n == 3
        with pytest.raises(TypeError):
            neg(Counter(1))
        assert NumericFacade().capabilities(Counter(0)) == ["add"]
