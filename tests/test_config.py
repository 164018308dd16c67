"""
Tests for StampConfig validation.
"""

import pytest
from reportlab.lib.pagesizes import A4, letter

from stamp_toolkit.config import OverflowPolicy, StampConfig


class TestStampConfig:
    """Tests for StampConfig dataclass."""

    def test_defaults(self):
        config = StampConfig()

        assert config.overflow_policy is OverflowPolicy.WARN
        assert config.default_page_size == pytest.approx(A4)

    def test_page_size_is_stored_as_floats(self):
        config = StampConfig(default_page_size=(100, 200))

        assert config.default_page_size == (100.0, 200.0)
        assert all(isinstance(v, float) for v in config.default_page_size)

    def test_accepts_reportlab_page_sizes(self):
        assert StampConfig(default_page_size=letter).default_page_size == pytest.approx(letter)

    def test_is_immutable(self):
        config = StampConfig()

        with pytest.raises(AttributeError):
            config.overflow_policy = OverflowPolicy.RAISE

    def test_when_policy_is_a_string_then_raises(self):
        with pytest.raises(ValueError, match="OverflowPolicy"):
            StampConfig(overflow_policy="raise")

    @pytest.mark.parametrize("size", [(0, 100), (100, -1), (100,), (1, 2, 3)])
    def test_when_page_size_invalid_then_raises(self, size):
        with pytest.raises(ValueError):
            StampConfig(default_page_size=size)
