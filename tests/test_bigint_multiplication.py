# tests/test_bigint_multiplication.py
"""
Tests for BigInt multiplication strategies (component_2).

Covers:
- Schoolbook and Karatsuba give bit-identical words
- Operand sizes straddling the threshold, including unbalanced operands
- multiply() dispatch honours NumericConfig.karatsuba_threshold
- Results are canonical (trimmed)
"""

import pytest

from common.constants import WORD_BITS, WORD_MASK
from component_1_word_buffer import WordBuffer
from component_2_bigint import BigInt
from component_2_bigint_multiplication import (
    multiply,
    multiply_karatsuba,
    multiply_schoolbook,
)
from numcore_config import NumericConfig, set_config


def words_of(value: int):
    return list(WordBuffer.from_int(value).words)


def to_int(words):
    return sum(w << (WORD_BITS * i) for i, w in enumerate(words))


class TestAlgorithmEquivalence:
    """Tests for schoolbook vs Karatsuba"""

    @pytest.mark.parametrize("threshold", [2, 3, 4, 8])
    def test_bit_identical_across_threshold(self, rng, threshold):
        """Test: Same words for sizes around the threshold"""
        for size_a in range(max(threshold - 2, 1), threshold + 4):
            for size_b in range(max(threshold - 2, 1), threshold + 4):
                a = [rng.getrandbits(WORD_BITS) for _ in range(size_a)]
                b = [rng.getrandbits(WORD_BITS) for _ in range(size_b)]
                a[-1] |= 1
                b[-1] |= 1
                school = multiply_schoolbook(a, b)
                karatsuba = multiply_karatsuba(a, b, threshold)
                assert school == karatsuba
                assert to_int(school) == to_int(a) * to_int(b)

    def test_unbalanced_operands(self, rng):
        """Test: Long times short slices the long operand"""
        a = [rng.getrandbits(WORD_BITS) | 1 for _ in range(37)]
        b = [rng.getrandbits(WORD_BITS) | 1 for _ in range(5)]
        assert multiply_karatsuba(a, b, 2) == multiply_schoolbook(a, b)

    def test_all_ones_operands(self):
        """Test: Maximal carries in every partial product"""
        a = [WORD_MASK] * 17
        b = [WORD_MASK] * 16
        assert multiply_karatsuba(a, b, 2) == multiply_schoolbook(a, b)
        assert to_int(multiply_schoolbook(a, b)) == to_int(a) * to_int(b)

    @pytest.mark.parametrize(
        "a,b",
        [
            ([0, 0, 0, 1], [0, 0, 0, 1]),
            ([1, 0, 0, 0, 1], [1, 1, 1]),
            ([WORD_MASK, WORD_MASK, 0, WORD_MASK, 1, WORD_MASK], [WORD_MASK, WORD_MASK, 0, 1]),
        ],
        ids=["zero-low-halves", "empty-high-half", "carrying-half-sums"],
    )
    def test_middle_term_edge_halves(self, a, b):
        """Test: Middle term stays exact when a partial product is empty or the half sums carry"""
        assert multiply_karatsuba(a, b, 2) == multiply_schoolbook(a, b)
        assert to_int(multiply_karatsuba(a, b, 2)) == to_int(a) * to_int(b)

    def test_zero_operand(self):
        """Test: Zero gives the empty magnitude"""
        assert multiply_schoolbook([], [1, 2]) == []
        assert multiply_karatsuba([0, 0], [1, 2, 3], 2) == []

    def test_results_trimmed(self):
        """Test: No top zero words"""
        product = multiply_karatsuba([1, 0, 0, 0], [2, 0, 0, 0], 2)
        assert product == [2]


class TestDispatch:
    """Tests for threshold-based dispatch"""

    def test_multiply_uses_config_threshold(self, rng):
        """Test: Config threshold reaches multiply()"""
        set_config(NumericConfig(karatsuba_threshold=4))
        a = [rng.getrandbits(WORD_BITS) for _ in range(9)]
        b = [rng.getrandbits(WORD_BITS) for _ in range(9)]
        assert multiply(a, b) == multiply_schoolbook(a, b)

    def test_explicit_threshold(self, rng):
        """Test: Explicit threshold overrides config"""
        a = [rng.getrandbits(WORD_BITS) for _ in range(6)]
        assert multiply(a, a, threshold=2) == multiply_schoolbook(a, a)

    def test_bigint_products_independent_of_threshold(self, random_int):
        """Test: BigInt results do not depend on the strategy"""
        pairs = [(random_int(12), random_int(12)) for _ in range(30)]
        set_config(NumericConfig(karatsuba_threshold=2))
        low = [BigInt(a) * BigInt(b) for a, b in pairs]
        set_config(NumericConfig(karatsuba_threshold=64))
        high = [BigInt(a) * BigInt(b) for a, b in pairs]
        assert [x.words for x in low] == [x.words for x in high]
        assert [int(x) for x in low] == [a * b for a, b in pairs]

    @pytest.mark.slow
    def test_large_karatsuba_product(self, rng):
        """Test: 600-word operands take the timed Karatsuba path"""
        a = rng.getrandbits(600 * WORD_BITS) | 1
        b = rng.getrandbits(600 * WORD_BITS) | 1
        assert to_int(multiply(words_of(a), words_of(b))) == a * b
