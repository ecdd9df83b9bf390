# tests/test_bigint.py
"""
Tests for the BigInt engine (component_2).

Covers:
- Signed add/sub/mul against Python int
- Truncating div_rem contract and DivideByZeroError
- Comparison, including an unsafely built negative zero
- Native conversions with overflow side
- pow, gcd, shifts and two's complement bitwise operators
- Python protocol interop (int(), hash, format, operators with int)
"""

from fractions import Fraction

import pytest

from common.int_types import I8, I64, U8, U64
from component_2_bigint import BigInt
from numcore_exceptions import (
    DivideByZeroError,
    NumericOverflowError,
    UnsupportedConversionError,
)


def trunc_divmod(a: int, b: int):
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q, a - q * b


# ==================== FIXTURES ====================


@pytest.fixture
def big():
    """Fixture: A multi-word positive value"""
    return BigInt(3**150)


# ==================== TESTS ====================


class TestConstruction:
    """Tests for BigInt construction and canonical form"""

    def test_from_int_round_trip(self):
        """Test: int -> BigInt -> int"""
        for value in (0, 1, -1, 2**32, -(2**32) + 1, 3**200, -(7**90)):
            assert int(BigInt(value)) == value

    def test_zero_is_canonical(self):
        """Test: Zero has an empty magnitude and positive sign"""
        zero = BigInt(5) - BigInt(5)
        assert zero.words == ()
        assert zero.sign == 0
        assert not zero.is_negative

    def test_from_string(self):
        """Test: String constructor uses the radix"""
        assert BigInt("-ff", 16) == -255

    def test_copy_shares_value(self, big):
        """Test: BigInt(BigInt) copies the value"""
        assert BigInt(big) == big

    def test_rejects_float(self):
        """Test: Floats need from_float"""
        with pytest.raises(TypeError):
            BigInt(1.5)

    def test_from_float_rounds_half_even(self):
        """Test: from_float ties go to even"""
        assert BigInt.from_float(2.5) == 2
        assert BigInt.from_float(-3.5) == -4

    def test_from_float_non_finite(self):
        """Test: NaN and inf overflow"""
        with pytest.raises(NumericOverflowError) as exc_info:
            BigInt.from_float(float("inf"))
        assert exc_info.value.side == NumericOverflowError.ABOVE
        with pytest.raises(NumericOverflowError):
            BigInt.from_float(float("nan"))

    def test_from_fraction(self):
        """Test: Nearest integer of a rational"""
        assert BigInt.from_fraction(Fraction(7, 2)) == 4
        assert BigInt.from_fraction(Fraction(-7, 3)) == -2


class TestArithmetic:
    """Tests for signed arithmetic against Python int"""

    def test_add_sub_random(self, random_int):
        """Test: add/sub match int for mixed signs and sizes"""
        for _ in range(200):
            a, b = random_int(6), random_int(6)
            assert int(BigInt(a) + BigInt(b)) == a + b
            assert int(BigInt(a) - BigInt(b)) == a - b

    def test_add_unlike_signs_larger_wins(self):
        """Test: Sign follows the larger magnitude"""
        assert BigInt(-(2**64)) + BigInt(1) == -(2**64) + 1
        assert BigInt(2**64) + BigInt(-(2**65)) == -(2**64)

    def test_mul_random(self, random_int):
        """Test: mul matches int"""
        for _ in range(100):
            a, b = random_int(8), random_int(8)
            assert int(BigInt(a) * BigInt(b)) == a * b

    def test_add_mul_commutative_associative(self, random_int):
        """Test: Algebraic laws hold"""
        for _ in range(50):
            a, b, c = (BigInt(random_int(5)) for _ in range(3))
            assert a + b == b + a
            assert a * b == b * a
            assert (a + b) + c == a + (b + c)
            assert (a * b) * c == a * (b * c)

    def test_operators_with_int(self):
        """Test: int on either side"""
        assert BigInt(10) + 5 == 15
        assert 5 - BigInt(10) == -5
        assert 3 * BigInt(7) == 21

    def test_neg_abs(self, big):
        """Test: Negation and absolute value"""
        assert -(-big) == big
        assert abs(-big) == big
        assert (-big).is_negative

    def test_non_integer_operand(self):
        """Test: Unsupported operand types raise"""
        with pytest.raises(UnsupportedConversionError):
            BigInt(1).add(1.5)
        with pytest.raises(TypeError):
            BigInt(1) + 1.5


class TestDivision:
    """Tests for truncating div_rem"""

    def test_div_rem_identity_random(self, random_int):
        """Test: a == q*b + r and |r| < |b|, r has a's sign"""
        for _ in range(200):
            a = random_int(8)
            b = random_int(4) or 7
            q, r = BigInt(a).div_rem(BigInt(b))
            assert q * b + r == a
            assert abs(int(r)) < abs(b)
            assert int(r) == 0 or (int(r) < 0) == (a < 0)
            assert (int(q), int(r)) == trunc_divmod(a, b)

    @pytest.mark.parametrize(
        "a,b", [(7, 2), (-7, 2), (7, -2), (-7, -2), (2**100, -(2**40) - 1)]
    )
    def test_truncating_signs(self, a, b):
        """Test: Quotient rounds toward zero"""
        q, r = divmod(BigInt(a), BigInt(b))
        assert (int(q), int(r)) == trunc_divmod(a, b)
        assert BigInt(a) // b == trunc_divmod(a, b)[0]
        assert BigInt(a) % b == trunc_divmod(a, b)[1]

    def test_knuth_add_back_case(self):
        """Test: Divisor pattern that needs the D6 add-back step"""
        a = 0x7FFF800000000000_0000000000000000
        b = 0x800000000000_0000000000000001
        q, r = BigInt(a).div_rem(BigInt(b))
        assert (int(q), int(r)) == divmod(a, b)

    def test_divide_by_zero(self, big):
        """Test: Zero divisor raises DivideByZeroError"""
        with pytest.raises(DivideByZeroError):
            big.div_rem(BigInt(0))
        with pytest.raises(ZeroDivisionError):
            big // 0

    def test_small_dividend(self):
        """Test: |a| < |b| gives q = 0, r = a"""
        q, r = BigInt(-5).div_rem(BigInt(2**70))
        assert q == 0
        assert r == -5


class TestComparison:
    """Tests for compare and ordering"""

    def test_total_order(self):
        """Test: Signed ordering"""
        values = [BigInt(v) for v in (-(2**70), -1, 0, 1, 2**32, 2**70)]
        for i, a in enumerate(values):
            for j, b in enumerate(values):
                expected = (i > j) - (i < j)
                assert a.compare(b) == expected

    def test_negative_zero_equals_zero(self):
        """Test: Unsafely built negative zero still equals zero"""
        negative_zero = BigInt._from_parts(True, [])
        assert negative_zero.compare(BigInt(0)) == 0
        assert negative_zero == 0
        assert not negative_zero.is_negative
        assert negative_zero.to_string() == "0"

    def test_unsafe_untrimmed_magnitude(self):
        """Test: Untrimmed unsafe parts compare by value"""
        assert BigInt._from_parts(False, [5, 0, 0]) == BigInt(5)

    def test_equality_with_float_and_fraction(self):
        """Test: Exact cross-type equality"""
        assert BigInt(4) == 4.0
        assert BigInt(4) == Fraction(8, 2)
        assert BigInt(4) != 4.5

    def test_hash_matches_int(self):
        """Test: BigInt and int share dict slots"""
        assert hash(BigInt(2**80)) == hash(2**80)
        assert {BigInt(3): "x"}[3] == "x"


class TestConversions:
    """Tests for native conversions"""

    def test_to_native_fits(self):
        """Test: Values within range convert"""
        assert BigInt(-128).to_native(I8) == -128
        assert BigInt(2**64 - 1).to_native(U64) == 2**64 - 1

    def test_to_native_above(self):
        """Test: Overflow above reports side"""
        with pytest.raises(NumericOverflowError) as exc_info:
            BigInt(128).to_native(I8)
        assert exc_info.value.side == NumericOverflowError.ABOVE

    def test_to_native_below(self):
        """Test: Overflow below reports side"""
        with pytest.raises(NumericOverflowError) as exc_info:
            BigInt(-1).to_native(U8)
        assert exc_info.value.side == NumericOverflowError.BELOW

    def test_try_convert_targets(self):
        """Test: try_convert to int types, float and Fraction"""
        value = BigInt(2**40)
        assert value.try_convert(I64) == 2**40
        assert value.try_convert(float) == float(2**40)
        assert value.try_convert(Fraction) == Fraction(2**40)
        assert value.try_convert(BigInt) is value

    def test_approx_float(self):
        """Test: Nearest float, infinity beyond range"""
        assert BigInt(2**53 + 1).approx_float() == float(2**53)
        assert BigInt(-(10**400)).approx_float() == float("-inf")

    def test_format_specs(self):
        """Test: hex/bin/format"""
        value = BigInt(255)
        assert hex(value) == "0xff"
        assert bin(value) == "0b11111111"
        assert f"{value:x}" == "ff"
        assert f"{-value}" == "-255"
        assert repr(value) == "BigInt('255')"


class TestPowShiftBitwise:
    """Tests for pow, gcd, shifts and bitwise operators"""

    def test_pow(self):
        """Test: Square and multiply"""
        assert BigInt(3) ** 100 == 3**100
        assert BigInt(-2) ** 65 == (-2) ** 65
        assert BigInt(12345) ** 0 == 1

    def test_pow_negative_exponent(self):
        """Test: Negative exponent rejected"""
        with pytest.raises(ValueError):
            BigInt(2).pow(-1)

    def test_gcd(self):
        """Test: Euclid on magnitudes"""
        a = 2**64 * 3**20
        b = 2**40 * 3**30 * 5
        assert BigInt(a).gcd(BigInt(-b)) == 2**40 * 3**20
        assert BigInt(0).gcd(0) == 0

    @pytest.mark.parametrize("value", [0, 1, -1, 2**70 + 5, -(2**70) - 5, -(2**64)])
    @pytest.mark.parametrize("bits", [0, 1, 31, 32, 65])
    def test_shifts_match_int(self, value, bits):
        """Test: << and >> agree with int (floor for negatives)"""
        assert int(BigInt(value) << bits) == value << bits
        assert int(BigInt(value) >> bits) == value >> bits

    def test_bitwise_random(self, random_int):
        """Test: & | ^ ~ agree with int two's complement"""
        for _ in range(100):
            a, b = random_int(4), random_int(4)
            assert int(BigInt(a) & BigInt(b)) == a & b
            assert int(BigInt(a) | BigInt(b)) == a | b
            assert int(BigInt(a) ^ BigInt(b)) == a ^ b
            assert int(~BigInt(a)) == ~a

    def test_bit_length(self):
        """Test: Bits of the magnitude"""
        assert BigInt(-(2**100)).bit_length() == 101
        assert BigInt(0).bit_length() == 0
