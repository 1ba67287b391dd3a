"""Tests for color parsing and dark/light classification."""

from __future__ import annotations

import pytest

from darkmode_detection.color import classify, is_dark_color, is_dark_luminance, is_light_color, luminance


def test_near_black_hex_is_dark():
    result = classify("#121212")
    assert result is not None
    assert result.is_dark is True


def test_white_hex_is_light():
    result = classify("#ffffff")
    assert result is not None
    assert result.is_dark is False
    assert result.luminance == pytest.approx(1.0)


def test_mid_gray_is_light():
    result = classify("#808080")
    assert result is not None
    assert result.is_dark is False


def test_exact_threshold_counts_as_light():
    assert is_dark_luminance(0.5) is False
    assert is_dark_luminance(0.4999) is True


def test_rgb_notation_is_parsed():
    assert classify("rgb(18, 18, 18)").is_dark is True
    assert classify("rgb(250,250,250)").is_dark is False
    assert luminance("rgb(255, 0, 0)") == pytest.approx(0.299)


def test_uppercase_hex_is_accepted():
    assert classify("#1E1E1E").is_dark is True


@pytest.mark.parametrize(
    "value",
    ["", None, "black", "#fff", "#12345", "rgba(0, 0, 0, 0.5)", "hsl(0, 0%, 10%)", "rgb(300, 0, 0)", "#gggggg"],
)
def test_unsupported_notations_are_indeterminate(value):
    assert classify(value) is None
    assert is_dark_color(value) is False
    assert is_light_color(value) is False
