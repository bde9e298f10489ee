"""
Tests for colour and unit helpers.
"""

import pytest

from theme_amender.color_math import (
    SHADE_KEYS,
    adjust_lightness,
    adjust_saturation,
    clamp,
    color_family_from_word,
    contrast_palette,
    format_number,
    hex_to_hsl,
    hex_to_rgb,
    hex_to_rgba_string,
    hsl_to_hex,
    is_hex,
    palette_from_hex,
    palette_from_hue,
    parse_percent,
    parse_px,
    round_half_up,
    shift_hue,
    to_px,
    transform_palette,
)


class TestNumericHelpers:
    """Tests for clamping, rounding and unit parsing."""

    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2

    def test_round_half_up(self):
        """Halves round up, unlike Python's banker's rounding."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(13.56) == 14
        assert round_half_up(13.4) == 13

    def test_parse_px(self):
        assert parse_px("16px") == 16.0
        assert parse_px(" 12.5 px ") == 12.5
        assert parse_px(8) == 8.0
        assert parse_px("1rem") is None
        assert parse_px(None) is None
        assert parse_px(True) is None

    def test_to_px(self):
        assert to_px(13.56) == "14px"
        assert to_px(0) == "0px"

    def test_parse_percent(self):
        assert parse_percent("15%") == pytest.approx(0.15)
        assert parse_percent("15") is None

    def test_format_number(self):
        """Float noise and trailing zeros are stripped."""
        assert format_number(1.2000000001) == "1.2"
        assert format_number(2.0) == "2"
        assert format_number(1.375) == "1.375"
        assert format_number(1.42) == "1.42"


class TestHexHsl:
    """Tests for hex / RGB / HSL conversion."""

    def test_is_hex(self):
        assert is_hex("#abc")
        assert is_hex("#A1B2C3")
        assert not is_hex("#abcd")
        assert not is_hex("abc123")
        assert not is_hex(None)

    def test_short_hex_expands(self):
        assert hex_to_rgb("#fff") == (255, 255, 255)

    def test_primary_colours(self):
        assert hex_to_hsl("#ff0000") == (0.0, 100.0, 50.0)
        assert hsl_to_hex(120, 100, 50) == "#00ff00"
        assert hsl_to_hex(240, 100, 50) == "#0000ff"

    def test_gray_has_no_saturation(self):
        H, S, L = hex_to_hsl("#808080")
        assert S == 0.0
        assert L == pytest.approx(50.2, abs=0.1)

    def test_output_is_lowercase(self):
        assert hsl_to_hex(210, 65, 58) == hsl_to_hex(210, 65, 58).lower()

    def test_round_trip_is_stable(self):
        hex_val = "#336699"
        assert hsl_to_hex(*hex_to_hsl(hex_val)) == hex_val

    def test_hue_wraps(self):
        assert shift_hue("#ff0000", 360) == "#ff0000"
        assert hsl_to_hex(-120, 100, 50) == hsl_to_hex(240, 100, 50)

    def test_lightness_clamps(self):
        assert adjust_lightness("#ffffff", 20) == "#ffffff"
        assert adjust_lightness("#000000", -20) == "#000000"

    def test_saturation_clamps(self):
        assert adjust_saturation("#ff0000", 50) == "#ff0000"
        H, S, _ = hex_to_hsl(adjust_saturation("#ff0000", -200))
        assert S == 0.0

    def test_rgba_string(self):
        assert hex_to_rgba_string("#000000", 0.5) == "rgba(0, 0, 0, 0.500)"
        assert hex_to_rgba_string("#ffffff", 2) == "rgba(255, 255, 255, 1.000)"


class TestPalettes:
    """Tests for palette generation and transforms."""

    def test_family_aliases(self):
        assert color_family_from_word("Navy") == "blue"
        assert color_family_from_word("lavender") == "purple"
        assert color_family_from_word("grey") == "gray"
        assert color_family_from_word("warmer") is None

    def test_palette_from_hue_is_complete(self):
        palette = palette_from_hue("blue")
        assert list(palette) == SHADE_KEYS
        assert all(is_hex(v) for v in palette.values())

    def test_palette_gets_darker(self):
        palette = palette_from_hue("green")
        lightness = [hex_to_hsl(palette[k])[2] for k in SHADE_KEYS]
        assert lightness == sorted(lightness, reverse=True)

    def test_saturation_is_clamped(self):
        low = palette_from_hue("blue", saturation=5)
        assert low == palette_from_hue("blue", saturation=35)

    def test_palette_from_hex_keeps_hue(self):
        palette = palette_from_hex("#336699")
        H, _, _ = hex_to_hsl(palette["500"])
        assert H == pytest.approx(210, abs=2)

    def test_transform_palette_skips_non_hex(self):
        out = transform_palette({"500": "#336699", "note": "n/a"}, lambda h, _k: "#000000")
        assert out == {"500": "#000000", "note": "n/a"}

    def test_contrast_spreads_lightness(self):
        palette = palette_from_hue("blue")
        spread = contrast_palette(palette, 4)
        assert hex_to_hsl(spread["100"])[2] > hex_to_hsl(palette["100"])[2]
        assert hex_to_hsl(spread["800"])[2] < hex_to_hsl(palette["800"])[2]
