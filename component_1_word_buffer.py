"""
component_1_word_buffer.py

Word Buffer: limb-level storage and primitives for BigInt magnitudes.

A magnitude is an ordered sequence of WORD_BITS-wide unsigned words in
little-endian limb order (index 0 is the least significant word).

The primitives operate on plain lists/tuples of words and propagate
carry/borrow across word boundaries by masking to WORD_BITS and shifting
the overflow down. They never trim: an addition may return one more word
than its longest input and a subtraction or shift may leave zero words at
the top. Restoring canonical form is the BigInt engine's job (see trim()).
"""

from typing import Iterable, Iterator, List, Sequence, Tuple

from common.constants import WORD_BITS, WORD_BYTES, WORD_MASK

Words = Sequence[int]


def trim(words: Words) -> List[int]:
    """Drop most-significant zero words; zero becomes the empty list."""
    end = len(words)
    while end and words[end - 1] == 0:
        end -= 1
    return list(words[:end])


def add_with_carry(a: Words, b: Words) -> List[int]:
    """
    a + b.

    Returns:
        max(len(a), len(b)) words, plus one more when the top word carries
    """
    if len(a) < len(b):
        a, b = b, a
    out = []
    carry = 0
    for i in range(len(b)):
        s = a[i] + b[i] + carry
        out.append(s & WORD_MASK)
        carry = s >> WORD_BITS
    for i in range(len(b), len(a)):
        s = a[i] + carry
        out.append(s & WORD_MASK)
        carry = s >> WORD_BITS
    if carry:
        out.append(carry)
    return out


def sub_with_borrow(a: Words, b: Words) -> Tuple[List[int], int]:
    """
    a - b over max(len(a), len(b)) words.

    Returns:
        (difference words, final borrow). A borrow of 1 means b > a and the
        words hold the two's complement wrap-around of the difference.
    """
    n = max(len(a), len(b))
    out = []
    borrow = 0
    for i in range(n):
        d = (a[i] if i < len(a) else 0) - (b[i] if i < len(b) else 0) - borrow
        if d < 0:
            d += WORD_MASK + 1
            borrow = 1
        else:
            borrow = 0
        out.append(d)
    return out, borrow


def compare(a: Words, b: Words) -> int:
    """
    Compare two magnitudes.

    Zero words at the top are ignored, so untrimmed intermediates compare
    correctly.

    Returns:
        -1, 0 or 1
    """
    la = len(a)
    while la and a[la - 1] == 0:
        la -= 1
    lb = len(b)
    while lb and b[lb - 1] == 0:
        lb -= 1
    if la != lb:
        return -1 if la < lb else 1
    for i in range(la - 1, -1, -1):
        if a[i] != b[i]:
            return -1 if a[i] < b[i] else 1
    return 0


def shift_left(words: Words, bits: int) -> List[int]:
    """
    words << bits.

    Returns:
        len(words) + bits // WORD_BITS words, plus one for the bits pushed
        out of the top word (which may be zero)
    """
    if bits < 0:
        raise ValueError(f"shift must be non-negative, got {bits}")
    word_shift, bit_shift = divmod(bits, WORD_BITS)
    out = [0] * word_shift
    if bit_shift == 0:
        out.extend(words)
        return out
    carry = 0
    back = WORD_BITS - bit_shift
    for w in words:
        out.append(((w << bit_shift) & WORD_MASK) | carry)
        carry = w >> back
    out.append(carry)
    return out


def shift_right(words: Words, bits: int) -> List[int]:
    """
    words >> bits (logical, on the magnitude).

    Returns:
        max(0, len(words) - bits // WORD_BITS) words
    """
    if bits < 0:
        raise ValueError(f"shift must be non-negative, got {bits}")
    word_shift, bit_shift = divmod(bits, WORD_BITS)
    if word_shift >= len(words):
        return []
    src = words[word_shift:]
    if bit_shift == 0:
        return list(src)
    back = WORD_BITS - bit_shift
    out = []
    for i in range(len(src)):
        hi = src[i + 1] if i + 1 < len(src) else 0
        out.append((src[i] >> bit_shift) | ((hi << back) & WORD_MASK))
    return out


def multiply_single(words: Words, word: int) -> Tuple[List[int], int]:
    """
    words * word for a single word multiplier.

    Returns:
        (len(words) product words, carry word out of the top)
    """
    out = []
    carry = 0
    for w in words:
        p = w * word + carry
        out.append(p & WORD_MASK)
        carry = p >> WORD_BITS
    return out, carry


def multiply_add_single(words: Words, word: int, addend: int) -> List[int]:
    """words * word + addend, with the carry appended when non-zero."""
    out = []
    carry = addend
    for w in words:
        p = w * word + carry
        out.append(p & WORD_MASK)
        carry = p >> WORD_BITS
    if carry:
        out.append(carry)
    return out


def divide_single(words: Words, word: int) -> Tuple[List[int], int]:
    """
    Short division of a magnitude by one non-zero word.

    Returns:
        (quotient words of the same length, remainder word)
    """
    if word == 0:
        raise ZeroDivisionError("divide_single by zero word")
    out = [0] * len(words)
    rem = 0
    for i in range(len(words) - 1, -1, -1):
        cur = (rem << WORD_BITS) | words[i]
        out[i], rem = divmod(cur, word)
    return out, rem


def bit_length(words: Words) -> int:
    """Number of significant bits of a trimmed magnitude."""
    if not words:
        return 0
    return (len(words) - 1) * WORD_BITS + words[-1].bit_length()


class WordBuffer:
    """
    Immutable, canonical magnitude storage.

    A WordBuffer always holds a trimmed word tuple. It is the unit the
    interner deduplicates: equal magnitudes can share one WordBuffer.
    """

    __slots__ = ("_words", "__weakref__")

    def __init__(self, words: Iterable[int] = ()):
        self._words: Tuple[int, ...] = tuple(trim(list(words)))

    @classmethod
    def from_int(cls, value: int) -> "WordBuffer":
        """Split a non-negative Python int into words."""
        if value < 0:
            raise ValueError("WordBuffer holds magnitudes only")
        if value == 0:
            return cls()
        nbytes = (value.bit_length() + 7) // 8
        nbytes += -nbytes % WORD_BYTES
        return cls.from_bytes(value.to_bytes(nbytes, "little"))

    @classmethod
    def from_bytes(cls, data: bytes) -> "WordBuffer":
        """Inverse of to_bytes(); a short final word is zero-extended."""
        words = [
            int.from_bytes(data[i : i + WORD_BYTES], "little")
            for i in range(0, len(data), WORD_BYTES)
        ]
        return cls(words)

    @property
    def words(self) -> Tuple[int, ...]:
        return self._words

    def to_bytes(self) -> bytes:
        """Canonical little-endian byte form (the interner key)."""
        return b"".join(w.to_bytes(WORD_BYTES, "little") for w in self._words)

    def to_int(self) -> int:
        return int.from_bytes(self.to_bytes(), "little")

    def bit_length(self) -> int:
        return bit_length(self._words)

    def is_zero(self) -> bool:
        return not self._words

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, index):
        return self._words[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._words)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WordBuffer):
            return NotImplemented
        return self._words == other._words

    def __hash__(self) -> int:
        return hash(self._words)

    def __repr__(self) -> str:
        return f"WordBuffer({[hex(w) for w in self._words]})"
