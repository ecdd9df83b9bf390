"""
component_2_bigint_radix.py

Radix conversion (parse / format) for BigInt magnitudes.

Small magnitudes are converted one "chunk" at a time, where a chunk is the
largest power of the radix that fits in a word: formatting peels chunks off
with short division, parsing folds chunks in with multiply_add_single.

Magnitudes above NumericConfig.dc_format_threshold words are split
recursively by radix^(chunk_digits * 2^k). Those powers are memoised in the
CacheManager's radix power cache.

Parsing policy:
- Optional leading '+' or '-'
- Digits are case-insensitive, radix 2..36
- No whitespace, separators or prefixes ("0x") are accepted
- Leading zeros are accepted unless strict parsing is requested
"""

from typing import List, Optional, Sequence, Tuple

from common.constants import DIGITS, MAX_RADIX, MIN_RADIX, RADIX_POWER_CACHE, WORD_MASK
from component_15_logging_config import PerformanceLogger, get_logger
from component_1_word_buffer import (
    add_with_carry,
    compare,
    divide_single,
    multiply_add_single,
    trim,
)
from component_2_bigint_division import divmod_magnitude
from component_2_bigint_multiplication import multiply
from infrastructure.cache_manager import get_cache_manager
from numcore_config import get_config
from numcore_exceptions import ParseError

logger = get_logger(__name__)

_DIGIT_VALUES = {c: i for i, c in enumerate(DIGITS)}
_DIGIT_VALUES.update({c.upper(): i for i, c in enumerate(DIGITS)})


def check_radix(radix: int, text: Optional[str] = None) -> None:
    """
    Raises:
        ParseError: If radix is not an int in 2..36
    """
    if not isinstance(radix, int) or not MIN_RADIX <= radix <= MAX_RADIX:
        raise ParseError(
            f"radix must be in {MIN_RADIX}..{MAX_RADIX}, got {radix!r}",
            text=text,
            radix=radix,
        )


def chunk_geometry(radix: int) -> Tuple[int, int]:
    """(digits per chunk, radix ** digits) for the largest chunk below one word."""
    digits = 1
    base = radix
    while base * radix <= WORD_MASK:
        base *= radix
        digits += 1
    return digits, base


def radix_power(radix: int, level: int) -> Tuple[int, ...]:
    """
    radix ** (chunk_digits * 2**level) as a word tuple, memoised.

    Level 0 is the single-word chunk base; each level squares the previous.
    """
    cache_mgr = get_cache_manager()
    cache_mgr.ensure_cache(RADIX_POWER_CACHE, get_config().radix_cache_size)

    def compute() -> Tuple[int, ...]:
        if level == 0:
            return (chunk_geometry(radix)[1],)
        prev = radix_power(radix, level - 1)
        return tuple(multiply(prev, prev))

    return cache_mgr.get_or_compute(RADIX_POWER_CACHE, (radix, level), compute)


# ============================================================================
# Formatting
# ============================================================================


def format_magnitude(words: Sequence[int], radix: int = 10) -> str:
    """
    Render a magnitude in the given radix (lowercase digits, no sign).

    Raises:
        ParseError: If the radix is invalid
    """
    check_radix(radix)
    words = trim(words)
    if not words:
        return "0"

    threshold = get_config().dc_format_threshold
    if len(words) > threshold:
        with PerformanceLogger(logger.logger, "format_dc", words=len(words), radix=radix):
            return _format_dc(words, radix, threshold).lstrip("0") or "0"
    return _format_chunks(words, radix)


def _format_chunks(words: List[int], radix: int, pad_to: int = 0) -> str:
    chunk_digits, chunk_base = chunk_geometry(radix)
    chunks = []
    rest = words
    while rest:
        rest, rem = divide_single(rest, chunk_base)
        rest = trim(rest)
        chunks.append(rem)

    parts = [_chunk_to_digits(rem, radix, chunk_digits) for rem in reversed(chunks)]
    text = "".join(parts).lstrip("0") or "0"
    if pad_to:
        text = text.rjust(pad_to, "0")
    return text


def _chunk_to_digits(value: int, radix: int, width: int) -> str:
    out = []
    for _ in range(width):
        value, d = divmod(value, radix)
        out.append(DIGITS[d])
    return "".join(reversed(out))


def _format_dc(words: List[int], radix: int, threshold: int, pad_to: int = 0) -> str:
    if len(words) <= threshold:
        if not words:
            return "0" * pad_to
        return _format_chunks(words, radix, pad_to)

    chunk_digits = chunk_geometry(radix)[0]
    level = 0
    while True:
        nxt = radix_power(radix, level + 1)
        if 2 * len(nxt) - 1 > len(words):
            break
        level += 1
    power = radix_power(radix, level)
    if compare(words, power) < 0:
        return _format_chunks(words, radix, pad_to)

    low_digits = chunk_digits * (1 << level)
    high, low = divmod_magnitude(words, power)
    high_text = _format_dc(high, radix, threshold, max(pad_to - low_digits, 0))
    low_text = _format_dc(low, radix, threshold, low_digits)
    return high_text + low_text


# ============================================================================
# Parsing
# ============================================================================


def parse_signed(
    text: str, radix: int = 10, strict: Optional[bool] = None
) -> Tuple[bool, List[int]]:
    """
    Parse a signed integer literal.

    Args:
        text: Literal, e.g. "-ff"
        radix: 2..36
        strict: Reject redundant leading zeros (default from NumericConfig)

    Returns:
        (negative, trimmed magnitude words)

    Raises:
        ParseError: Empty input, bare sign, invalid digit or radix, or a
        leading zero under strict parsing
    """
    if not isinstance(text, str):
        raise ParseError(f"expected str, got {type(text).__name__}", text=None, radix=radix)
    check_radix(radix, text)
    if strict is None:
        strict = get_config().strict_parse

    if not text:
        raise ParseError("empty string", text=text, radix=radix)

    negative = False
    body = text
    if body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]
    if not body:
        raise ParseError("sign without digits", text=text, radix=radix)

    offset = len(text) - len(body)
    values = []
    for i, ch in enumerate(body):
        d = _DIGIT_VALUES.get(ch)
        if d is None or d >= radix:
            raise ParseError(
                f"invalid digit {ch!r} for radix {radix}",
                text=text,
                radix=radix,
                position=offset + i,
            )
        values.append(d)

    if strict and len(values) > 1 and values[0] == 0:
        raise ParseError(
            "redundant leading zero (strict parsing)", text=text, radix=radix, position=offset
        )

    words = parse_digits(values, radix)
    return negative and bool(words), words


def parse_digits(values: Sequence[int], radix: int) -> List[int]:
    """Fold validated digit values (most significant first) into words."""
    chunk_digits, _ = chunk_geometry(radix)
    threshold = get_config().dc_format_threshold
    if len(values) > threshold * chunk_digits:
        return _parse_dc(values, radix, threshold * chunk_digits)
    return _parse_chunks(values, radix)


def _parse_chunks(values: Sequence[int], radix: int) -> List[int]:
    chunk_digits, chunk_base = chunk_geometry(radix)
    words: List[int] = []
    # The leading chunk absorbs the remainder so later chunks are full width
    width = len(values) % chunk_digits or chunk_digits
    start = 0
    while start < len(values):
        acc = 0
        for d in values[start : start + width]:
            acc = acc * radix + d
        scale = chunk_base if width == chunk_digits else radix**width
        words = multiply_add_single(words, scale, acc)
        start += width
        width = chunk_digits
    return trim(words)


def _parse_dc(values: Sequence[int], radix: int, digit_threshold: int) -> List[int]:
    if len(values) <= digit_threshold:
        return _parse_chunks(values, radix)

    chunk_digits = chunk_geometry(radix)[0]
    level = 0
    while chunk_digits * (1 << (level + 1)) < len(values):
        level += 1
    low_digits = chunk_digits * (1 << level)

    high = _parse_dc(values[: len(values) - low_digits], radix, digit_threshold)
    low = _parse_dc(values[len(values) - low_digits :], radix, digit_threshold)
    power = radix_power(radix, level)
    return trim(add_with_carry(multiply(high, power), low))
