"""
numcore_config.py

Runtime configuration for numcore.

Only algorithm tuning knobs live here (multiplication/formatting thresholds,
interning policy, parse strictness, cache sizes). Type parameters such as
the limb width, Fixed widths and Posit widths are fixed when a type is
defined and are deliberately not configurable at runtime.

Environment overrides (read once, when get_config() first builds the
singleton):
    NUMCORE_KARATSUBA_THRESHOLD   int, words
    NUMCORE_DC_FORMAT_THRESHOLD   int, words
    NUMCORE_INTERN                1/0, true/false, yes/no, on/off
    NUMCORE_INTERN_MIN_WORDS      int, words
    NUMCORE_STRICT_PARSE          1/0, true/false, yes/no, on/off
    NUMCORE_RADIX_CACHE_SIZE      int, entries

Usage:
    from numcore_config import get_config

    config = get_config()
    if len(a) >= config.karatsuba_threshold:
        ...
"""

import os
import threading
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from common.constants import (
    DEFAULT_DC_FORMAT_THRESHOLD,
    DEFAULT_INTERN_MIN_WORDS,
    DEFAULT_KARATSUBA_THRESHOLD,
    DEFAULT_RADIX_CACHE_SIZE,
    MIN_KARATSUBA_THRESHOLD,
)
from component_15_logging_config import get_logger
from numcore_exceptions import InvalidConfigError

logger = get_logger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class NumericConfig:
    """Configuration for the BigInt engine, radix conversion and the interner"""

    # Multiplication strategy
    karatsuba_threshold: int = DEFAULT_KARATSUBA_THRESHOLD  # words per operand

    # Radix conversion: divide-and-conquer above this many words
    dc_format_threshold: int = DEFAULT_DC_FORMAT_THRESHOLD

    # Interning of BigInt magnitudes
    intern_magnitudes: bool = True
    intern_min_words: int = DEFAULT_INTERN_MIN_WORDS  # shorter magnitudes stay inline

    # Parsing policy: reject "007" when True
    strict_parse: bool = False

    # Radix power cache
    radix_cache_size: int = DEFAULT_RADIX_CACHE_SIZE

    def __post_init__(self):
        """Validate configuration"""
        if self.karatsuba_threshold < MIN_KARATSUBA_THRESHOLD:
            raise InvalidConfigError(
                f"karatsuba_threshold must be >= {MIN_KARATSUBA_THRESHOLD}, "
                f"got {self.karatsuba_threshold}",
                config_key="karatsuba_threshold",
            )
        if self.dc_format_threshold < 2:
            raise InvalidConfigError(
                f"dc_format_threshold must be >= 2, got {self.dc_format_threshold}",
                config_key="dc_format_threshold",
            )
        if self.intern_min_words < 1:
            raise InvalidConfigError(
                f"intern_min_words must be >= 1, got {self.intern_min_words}",
                config_key="intern_min_words",
            )
        if self.radix_cache_size < 1:
            raise InvalidConfigError(
                f"radix_cache_size must be >= 1, got {self.radix_cache_size}",
                config_key="radix_cache_size",
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "NumericConfig":
        """
        Build a config from defaults plus NUMCORE_* environment overrides.

        Raises:
            InvalidConfigError: If an override cannot be parsed
        """
        environ = os.environ if environ is None else environ
        overrides = {}

        int_keys = {
            "NUMCORE_KARATSUBA_THRESHOLD": "karatsuba_threshold",
            "NUMCORE_DC_FORMAT_THRESHOLD": "dc_format_threshold",
            "NUMCORE_INTERN_MIN_WORDS": "intern_min_words",
            "NUMCORE_RADIX_CACHE_SIZE": "radix_cache_size",
        }
        bool_keys = {
            "NUMCORE_INTERN": "intern_magnitudes",
            "NUMCORE_STRICT_PARSE": "strict_parse",
        }

        for env_key, field_name in int_keys.items():
            raw = environ.get(env_key, "").strip()
            if not raw:
                continue
            try:
                overrides[field_name] = int(raw)
            except ValueError as e:
                raise InvalidConfigError(
                    f"{env_key} must be an integer, got {raw!r}",
                    config_key=env_key,
                    original_exception=e,
                ) from e

        for env_key, field_name in bool_keys.items():
            raw = environ.get(env_key, "").strip().lower()
            if not raw:
                continue
            if raw in _TRUE_VALUES:
                overrides[field_name] = True
            elif raw in _FALSE_VALUES:
                overrides[field_name] = False
            else:
                raise InvalidConfigError(
                    f"{env_key} must be a boolean flag, got {raw!r}",
                    config_key=env_key,
                )

        if overrides:
            logger.info("Config overrides from environment: %s", overrides)
        return cls(**overrides)

    def with_overrides(self, **changes) -> "NumericConfig":
        """Return a copy with the given fields replaced (validated again)."""
        return replace(self, **changes)


# Global singleton instance (initialized lazily)
_config_instance: Optional[NumericConfig] = None
_config_lock = threading.RLock()


def get_config() -> NumericConfig:
    """
    Get the process-wide NumericConfig.

    Thread-safe lazy initialization with double-checked locking.
    """
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = NumericConfig.from_env()
                logger.info(
                    "NumericConfig initialized: karatsuba_threshold=%d, "
                    "intern_magnitudes=%s, strict_parse=%s",
                    _config_instance.karatsuba_threshold,
                    _config_instance.intern_magnitudes,
                    _config_instance.strict_parse,
                )

    return _config_instance


def set_config(config: NumericConfig) -> NumericConfig:
    """
    Replace the process-wide config and return the previous one.

    Values already constructed keep whatever storage they were built with.
    """
    global _config_instance

    with _config_lock:
        previous = _config_instance if _config_instance is not None else get_config()
        _config_instance = config
        logger.info("NumericConfig replaced: %s", config)
        return previous


def reset_config() -> None:
    """
    Drop the config singleton so the next get_config() re-reads the environment.

    WARNING: Only use for testing!
    """
    global _config_instance

    with _config_lock:
        _config_instance = None
