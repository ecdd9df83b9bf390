# tests/test_word_buffer.py
"""
Tests for the Word Buffer (component_1).

Covers:
- Carry propagation in add_with_carry
- Borrow reporting in sub_with_borrow
- Comparison that ignores top zero words
- Shifts across word boundaries
- Single-word multiply/divide
- WordBuffer canonical form and byte keys
"""

import pytest

from common.constants import WORD_BITS, WORD_MASK
from component_1_word_buffer import (
    WordBuffer,
    add_with_carry,
    bit_length,
    compare,
    divide_single,
    multiply_add_single,
    multiply_single,
    shift_left,
    shift_right,
    sub_with_borrow,
    trim,
)


def to_int(words):
    return sum(w << (WORD_BITS * i) for i, w in enumerate(words))


class TestAddSub:
    """Tests for carry/borrow primitives"""

    def test_add_carries_into_new_word(self):
        """Test: All-ones plus one grows by one word"""
        result = add_with_carry([WORD_MASK, WORD_MASK], [1])
        assert result == [0, 0, 1]

    def test_add_without_carry_keeps_length(self):
        """Test: No carry, length of the longer operand"""
        assert add_with_carry([1, 2], [3]) == [4, 2]

    def test_add_is_commutative_on_lengths(self):
        """Test: Operand order does not matter"""
        assert add_with_carry([5], [WORD_MASK, 7]) == add_with_carry([WORD_MASK, 7], [5])

    def test_sub_borrows_across_words(self):
        """Test: Borrow ripples through a zero word"""
        diff, borrow = sub_with_borrow([0, 0, 1], [1])
        assert diff == [WORD_MASK, WORD_MASK, 0]
        assert borrow == 0

    def test_sub_reports_final_borrow(self):
        """Test: b > a leaves borrow 1"""
        _, borrow = sub_with_borrow([1], [2])
        assert borrow == 1

    def test_sub_does_not_trim(self):
        """Test: Top zero words stay for the caller to trim"""
        diff, _ = sub_with_borrow([5, 1], [4, 1])
        assert diff == [1, 0]
        assert trim(diff) == [1]


class TestCompare:
    """Tests for magnitude comparison"""

    def test_compare_ignores_top_zeros(self):
        """Test: [1, 0, 0] equals [1]"""
        assert compare([1, 0, 0], [1]) == 0

    def test_compare_by_length(self):
        """Test: More significant words win"""
        assert compare([0, 1], [WORD_MASK]) == 1
        assert compare([WORD_MASK], [0, 1]) == -1

    def test_compare_top_word_first(self):
        """Test: Word-by-word from the most significant"""
        assert compare([9, 2], [1, 3]) == -1

    def test_compare_empty(self):
        """Test: Zero equals zero"""
        assert compare([], [0]) == 0


class TestShifts:
    """Tests for bit shifts"""

    @pytest.mark.parametrize("bits", [0, 1, 31, 32, 33, 64, 95])
    def test_shift_left_matches_int(self, bits):
        """Test: shift_left agrees with int <<"""
        words = [0x89ABCDEF, 0x01234567]
        assert to_int(shift_left(words, bits)) == to_int(words) << bits

    @pytest.mark.parametrize("bits", [0, 1, 31, 32, 33, 63, 64, 100])
    def test_shift_right_matches_int(self, bits):
        """Test: shift_right agrees with int >>"""
        words = [0x89ABCDEF, 0x01234567]
        assert to_int(shift_right(words, bits)) == to_int(words) >> bits

    def test_shift_left_length(self):
        """Test: Output has len + bits // 32 + 1 words for partial shifts"""
        assert len(shift_left([1, 1], 40)) == 2 + 1 + 1

    def test_negative_shift_rejected(self):
        """Test: Negative shift is a ValueError"""
        with pytest.raises(ValueError):
            shift_left([1], -1)


class TestSingleWord:
    """Tests for single-word multiply and divide"""

    def test_multiply_single_returns_carry(self):
        """Test: Carry word out of the top"""
        product, carry = multiply_single([WORD_MASK, WORD_MASK], 2)
        assert to_int(product) + (carry << (2 * WORD_BITS)) == to_int([WORD_MASK, WORD_MASK]) * 2
        assert carry == 1

    def test_multiply_add_single(self):
        """Test: words * w + addend"""
        assert to_int(multiply_add_single([7, 1], 10, 3)) == to_int([7, 1]) * 10 + 3

    def test_divide_single(self):
        """Test: Quotient and remainder of short division"""
        words = [0xDEADBEEF, 0x12345678, 0x9]
        q, r = divide_single(words, 1000)
        assert to_int(q) == to_int(words) // 1000
        assert r == to_int(words) % 1000

    def test_divide_single_by_zero(self):
        """Test: Zero word divisor raises ZeroDivisionError"""
        with pytest.raises(ZeroDivisionError):
            divide_single([1], 0)

    def test_bit_length(self):
        """Test: Bit length of a trimmed magnitude"""
        assert bit_length([]) == 0
        assert bit_length([0, 1]) == 33


class TestWordBuffer:
    """Tests for the immutable WordBuffer"""

    def test_buffer_is_trimmed(self):
        """Test: Construction trims top zeros"""
        assert WordBuffer([3, 0, 0]).words == (3,)

    def test_zero_is_empty(self):
        """Test: Zero is the empty magnitude"""
        assert WordBuffer.from_int(0).is_zero()
        assert len(WordBuffer([0])) == 0

    def test_int_round_trip(self):
        """Test: from_int / to_int"""
        value = 2**100 + 12345
        assert WordBuffer.from_int(value).to_int() == value

    def test_bytes_key_round_trip(self):
        """Test: Canonical bytes identify the magnitude"""
        buffer = WordBuffer.from_int(2**70 + 1)
        assert WordBuffer.from_bytes(buffer.to_bytes()) == buffer
        assert len(buffer.to_bytes()) == 3 * 4

    def test_equal_buffers_hash_equal(self):
        """Test: Value equality and hashing"""
        assert WordBuffer([1, 2]) == WordBuffer([1, 2, 0])
        assert hash(WordBuffer([1, 2])) == hash(WordBuffer([1, 2, 0]))

    def test_negative_rejected(self):
        """Test: Magnitudes only"""
        with pytest.raises(ValueError):
            WordBuffer.from_int(-1)
