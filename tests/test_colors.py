"""Tests for typeclassic.ui.colors – color blending and constants."""

from __future__ import annotations

import pytest

from typeclassic.ui.colors import STATUS_STYLES, PracticeColors, accuracy_color, blend_hex


# ===========================================================================
# PracticeColors / STATUS_STYLES
# ===========================================================================

class TestPracticeColors:
    @pytest.mark.parametrize("name", ["BG", "CARD_BG", "CORRECT", "INCORRECT", "PENDING", "TEXT_PRIMARY"])
    def test_is_hex(self, name):
        value = getattr(PracticeColors, name)
        assert value.startswith("#")
        assert len(value) == 7

    def test_every_status_styled(self):
        assert set(STATUS_STYLES) == {"correct", "incorrect", "current", "pending"}


# ===========================================================================
# blend_hex
# ===========================================================================

class TestBlendHex:
    def test_t_zero_returns_a(self):
        assert blend_hex("#FF0000", "#0000FF", 0.0) == "#FF0000"

    def test_t_one_returns_b(self):
        assert blend_hex("#FF0000", "#0000FF", 1.0) == "#0000FF"

    def test_quarter_blend(self):
        # 0 + (255 - 0) * 0.25 = 63.75 -> 63
        assert blend_hex("#000000", "#FF0000", 0.25) == "#3F0000"

    def test_clamped(self):
        assert blend_hex("#FF0000", "#0000FF", -1.0) == "#FF0000"
        assert blend_hex("#FF0000", "#0000FF", 2.0) == "#0000FF"

    def test_invalid_input_returns_a(self):
        assert blend_hex("red", "#0000FF", 0.5) == "red"
        assert blend_hex("#GG0000", "#0000FF", 0.5) == "#GG0000"


# ===========================================================================
# accuracy_color
# ===========================================================================

class TestAccuracyColor:
    def test_perfect_is_correct_color(self):
        assert accuracy_color(100.0) == PracticeColors.CORRECT.upper()

    def test_low_is_incorrect_color(self):
        assert accuracy_color(80.0) == PracticeColors.INCORRECT.upper()
        assert accuracy_color(10.0) == PracticeColors.INCORRECT.upper()

    def test_in_between(self):
        color = accuracy_color(90.0)
        assert color not in (PracticeColors.CORRECT.upper(), PracticeColors.INCORRECT.upper())
