# tests/test_config.py
"""
Tests for numcore_config.

Covers:
- Defaults and validation
- NUMCORE_* environment overrides (valid and invalid)
- set_config / reset_config singleton handling
"""

import pytest

from common.constants import (
    DEFAULT_DC_FORMAT_THRESHOLD,
    DEFAULT_INTERN_MIN_WORDS,
    DEFAULT_KARATSUBA_THRESHOLD,
)
from numcore_config import NumericConfig, get_config, reset_config, set_config
from numcore_exceptions import InvalidConfigError


class TestDefaults:
    """Tests for default values and validation"""

    def test_defaults(self):
        """Test: Documented defaults"""
        config = NumericConfig()
        assert config.karatsuba_threshold == DEFAULT_KARATSUBA_THRESHOLD == 32
        assert config.dc_format_threshold == DEFAULT_DC_FORMAT_THRESHOLD
        assert config.intern_magnitudes is True
        assert config.intern_min_words == DEFAULT_INTERN_MIN_WORDS
        assert config.strict_parse is False

    @pytest.mark.parametrize(
        "field,value",
        [
            ("karatsuba_threshold", 1),
            ("dc_format_threshold", 1),
            ("intern_min_words", 0),
            ("radix_cache_size", 0),
        ],
    )
    def test_invalid_values(self, field, value):
        """Test: Out-of-range knobs raise InvalidConfigError"""
        with pytest.raises(InvalidConfigError) as exc_info:
            NumericConfig(**{field: value})
        assert exc_info.value.context["config_key"] == field

    def test_minimum_karatsuba_threshold(self):
        """Test: 2 is the smallest split size"""
        assert NumericConfig(karatsuba_threshold=2).karatsuba_threshold == 2

    def test_with_overrides_validates(self):
        """Test: Copies are validated again"""
        config = NumericConfig().with_overrides(strict_parse=True)
        assert config.strict_parse
        with pytest.raises(InvalidConfigError):
            config.with_overrides(karatsuba_threshold=0)


class TestEnvironment:
    """Tests for NUMCORE_* overrides"""

    def test_from_env_mapping(self):
        """Test: Integer and boolean overrides"""
        config = NumericConfig.from_env(
            {
                "NUMCORE_KARATSUBA_THRESHOLD": "8",
                "NUMCORE_INTERN": "off",
                "NUMCORE_STRICT_PARSE": "Yes",
            }
        )
        assert config.karatsuba_threshold == 8
        assert config.intern_magnitudes is False
        assert config.strict_parse is True

    def test_blank_values_ignored(self):
        """Test: Empty strings keep defaults"""
        assert NumericConfig.from_env({"NUMCORE_KARATSUBA_THRESHOLD": " "}) == NumericConfig()

    def test_non_integer(self):
        """Test: Unparseable integer override"""
        with pytest.raises(InvalidConfigError) as exc_info:
            NumericConfig.from_env({"NUMCORE_INTERN_MIN_WORDS": "two"})
        assert exc_info.value.context["config_key"] == "NUMCORE_INTERN_MIN_WORDS"
        assert isinstance(exc_info.value.original_exception, ValueError)

    def test_bad_flag(self):
        """Test: Unknown boolean spelling"""
        with pytest.raises(InvalidConfigError):
            NumericConfig.from_env({"NUMCORE_INTERN": "maybe"})

    def test_get_config_reads_environment(self, monkeypatch):
        """Test: The singleton is built from os.environ"""
        monkeypatch.setenv("NUMCORE_DC_FORMAT_THRESHOLD", "5")
        reset_config()
        assert get_config().dc_format_threshold == 5


class TestSingleton:
    """Tests for the process-wide config"""

    def test_get_config_cached(self):
        """Test: Same instance until replaced"""
        assert get_config() is get_config()

    def test_set_config_returns_previous(self):
        """Test: set_config swaps and hands back the old config"""
        original = get_config()
        custom = NumericConfig(karatsuba_threshold=4)
        previous = set_config(custom)
        assert previous is original
        assert get_config() is custom

    def test_reset_config(self):
        """Test: reset drops overrides"""
        set_config(NumericConfig(strict_parse=True))
        reset_config()
        assert get_config().strict_parse is False
