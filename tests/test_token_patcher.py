"""
Tests for applying typed operations to a token document.
"""

import copy

import pytest

from theme_amender.color_math import (
    FONTSIZE_RANGES,
    LINEHEIGHT_RANGES,
    RADII_RANGES,
    SHADE_KEYS,
    SPACING_RANGES,
    hex_to_hsl,
    hex_to_rgba_string,
    is_hex,
    parse_px,
)
from theme_amender.instruction_parser import parse_instructions
from theme_amender.json_patch import apply_patch
from theme_amender.operations import (
    OPERATION_KINDS,
    AnimationDurationScale,
    AnimationDurationSet,
    AnimationEasingSet,
    BordersWidthSet,
    BreakpointsScale,
    FontSizeAdjust,
    FontSizeScaleAll,
    FontWeightSet,
    GradientFromPalette,
    LineHeightScale,
    LineHeightSet,
    OverlayOpacityScale,
    OverlayOpacitySet,
    PaletteReplaceByHex,
    PaletteReplaceWithList,
    RadiiPreset,
    RadiiScale,
    ShadeSetHex,
    SpacingScale,
)
from theme_amender.token_patcher import HANDLERS, apply_operations, tweak_shadow

INSTRUCTIONS = [
    "make brand colors warmer and increase spacing slightly",
    "set accent shade 500 to #336699",
    "compact",
    "blue and gray theme",
    "make corners pill shaped",
    "make shadows softer",
    "increase contrast",
    "make the overlay 60% opacity",
    "set tablet breakpoint to 800px",
]


class TestDispatch:
    def test_every_kind_has_a_handler(self):
        assert set(HANDLERS) == set(OPERATION_KINDS)
        assert len(OPERATION_KINDS) == 34


class TestScenarios:
    """Reference instructions applied to the baseline theme."""

    def test_single_shade_hex_is_one_replace(self, baseline):
        result = apply_operations(baseline, parse_instructions("set accent shade 500 to #336699"))
        assert result.diff == [{"op": "replace", "path": "/colors/accent/500", "value": "#336699"}]

    def test_compact(self, baseline):
        result = apply_operations(baseline, parse_instructions("compact"))

        assert result.tokens["spacing"] == {
            "xs": "3px", "sm": "7px", "md": "14px", "lg": "20px",
            "xl": "28px", "2xl": "41px", "3xl": "56px",
        }
        assert result.tokens["lineHeights"] == {
            "none": "1", "tight": "1.17", "snug": "1.3",
            "normal": "1.42", "relaxed": "1.545", "loose": "1.92",
        }
        touched = {change["path"].split("/")[1] for change in result.diff}
        assert touched == {"spacing", "lineHeights"}

    def test_blue_and_gray_theme(self, baseline):
        result = apply_operations(baseline, parse_instructions("blue and gray theme"))
        colors = result.tokens["colors"]
        assert colors["brand"] == colors["accent"]
        assert colors["neutral"] != baseline["colors"]["neutral"]
        assert colors["success"] == baseline["colors"]["success"]


class TestProperties:
    """Invariants that hold for every supported instruction."""

    @pytest.mark.parametrize("instruction", INSTRUCTIONS)
    def test_diff_reproduces_result(self, baseline, instruction):
        result = apply_operations(baseline, parse_instructions(instruction))
        assert apply_patch(baseline, result.diff) == result.tokens

    @pytest.mark.parametrize("instruction", INSTRUCTIONS)
    def test_input_is_not_mutated(self, baseline, instruction):
        before = copy.deepcopy(baseline)
        apply_operations(baseline, parse_instructions(instruction))
        assert baseline == before

    @pytest.mark.parametrize("instruction", INSTRUCTIONS)
    def test_deterministic(self, baseline, instruction):
        first = apply_operations(baseline, parse_instructions(instruction))
        second = apply_operations(baseline, parse_instructions(instruction))
        assert first.tokens == second.tokens
        assert first.diff == second.diff

    @pytest.mark.parametrize("instruction", INSTRUCTIONS)
    def test_palettes_stay_complete(self, baseline, instruction):
        result = apply_operations(baseline, parse_instructions(instruction))
        for name, palette in result.tokens["colors"].items():
            if isinstance(palette, dict):
                assert list(palette) == SHADE_KEYS, name
                assert all(is_hex(v) for v in palette.values()), name

    @pytest.mark.parametrize("direction", ["increase", "decrease"])
    def test_ranges_hold_under_repeated_scaling(self, baseline, direction):
        ops = [
            SpacingScale(direction=direction, magnitude="strong"),
            RadiiScale(direction=direction, magnitude="strong"),
            FontSizeScaleAll(direction="larger" if direction == "increase" else "smaller", magnitude="strong"),
            LineHeightScale(direction="looser" if direction == "increase" else "tighter", magnitude="strong"),
        ]
        tokens = baseline
        for _ in range(10):
            tokens = apply_operations(tokens, ops).tokens

        for table, section in [
            (SPACING_RANGES, "spacing"),
            (RADII_RANGES, "radii"),
            (FONTSIZE_RANGES, "fontSizes"),
        ]:
            for key, (lo, hi) in table.items():
                assert lo <= parse_px(tokens[section][key]) <= hi, f"{section}.{key}"
        for key, (lo, hi) in LINEHEIGHT_RANGES.items():
            assert lo <= float(tokens["lineHeights"][key]) <= hi, key
        for key in ("none", "normal", "loose"):
            assert 1.0 <= float(tokens["lineHeights"][key]) <= 2.0, key


class TestColorHandlers:
    @pytest.mark.parametrize("hex_value, bound", [("#808080", 35), ("#ff0000", 90)])
    def test_replace_by_hex_clamps_saturation(self, baseline, hex_value, bound):
        result = apply_operations(baseline, [PaletteReplaceByHex(targets=["brand"], hex=hex_value)])
        _, saturation, _ = hex_to_hsl(result.tokens["colors"]["brand"]["500"])
        assert abs(saturation - bound) < 2

    def test_gradient_with_missing_shade_is_noop(self, baseline):
        del baseline["colors"]["brand"]["600"]
        result = apply_operations(baseline, [GradientFromPalette(key="primary")])
        assert result.diff == []

    def test_gradient_from_palette(self, baseline):
        brand = baseline["colors"]["brand"]
        result = apply_operations(baseline, [GradientFromPalette(key="primary", angle_deg=90)])
        assert result.tokens["gradients"]["primary"] == f"linear-gradient(90deg, {brand['400']}, {brand['600']})"

    def test_shade_set_on_missing_palette_is_noop(self, baseline):
        del baseline["colors"]["info"]
        result = apply_operations(baseline, [ShadeSetHex(targets=["info"], shade="500", hex="#123456")])
        assert "info" not in result.tokens["colors"]
        assert result.diff == []

    def test_replace_with_short_list_keeps_existing_shades(self, baseline):
        hexes = ["#000001", "#000002", "#000003"]
        result = apply_operations(baseline, [PaletteReplaceWithList(targets=["brand"], hexes=hexes)])
        brand = result.tokens["colors"]["brand"]
        assert [brand["50"], brand["100"], brand["200"]] == hexes
        assert brand["900"] == baseline["colors"]["brand"]["900"]


class TestNumericHandlers:
    def test_radii_scale_leaves_fixed_tokens(self, baseline):
        result = apply_operations(baseline, [RadiiScale(direction="increase", magnitude="moderate")])
        radii = result.tokens["radii"]
        assert radii["none"] == "0px"
        assert radii["full"] == "9999px"
        assert radii["md"] == "9px"

    def test_pill_uses_range_maximum(self, baseline):
        radii = apply_operations(baseline, [RadiiPreset(preset="pill")]).tokens["radii"]
        assert radii["sm"] == "6px"
        assert radii["2xl"] == "32px"
        assert radii["full"] == "9999px"

    def test_square_uses_range_minimum(self, baseline):
        radii = apply_operations(baseline, [RadiiPreset(preset="square")]).tokens["radii"]
        assert radii["sm"] == "2px"
        assert radii["lg"] == "10px"

    def test_font_size_set_is_clamped(self, baseline):
        result = apply_operations(baseline, [FontSizeAdjust(keys=["xl"], by_px=100)])
        assert result.tokens["fontSizes"]["xl"] == "24px"

    def test_font_weight_rounds_to_hundreds(self, baseline):
        result = apply_operations(baseline, [FontWeightSet(key="medium", value=450)])
        assert result.tokens["fontWeights"]["medium"] == "500"

    def test_line_height_set_is_clamped(self, baseline):
        result = apply_operations(baseline, [LineHeightSet(key="tight", value=1.0)])
        assert result.tokens["lineHeights"]["tight"] == "1.1"

    @pytest.mark.parametrize("overlay", [None, "transparent", "var(--overlay)"])
    def test_overlay_scale_starts_from_half_when_unreadable(self, baseline, overlay):
        if overlay is None:
            del baseline["backgrounds"]["overlay"]
        else:
            baseline["backgrounds"]["overlay"] = overlay
        result = apply_operations(baseline, [OverlayOpacityScale(direction="increase", magnitude="moderate")])
        expected = hex_to_rgba_string(baseline["colors"]["neutral"]["900"], 0.5 + 0.10)
        assert result.tokens["backgrounds"]["overlay"] == expected

    def test_overlay_set(self, baseline):
        result = apply_operations(baseline, [OverlayOpacitySet(opacity=0.6)])
        expected = hex_to_rgba_string(baseline["colors"]["neutral"]["900"], 0.6)
        assert result.tokens["backgrounds"]["overlay"] == expected

    def test_border_width_is_clamped(self, baseline):
        result = apply_operations(baseline, [BordersWidthSet(which="thick", px=20)])
        assert result.tokens["borders"]["widths"]["thick"] == "8px"

    def test_breakpoints_have_a_floor(self, baseline):
        result = apply_operations(baseline, [BreakpointsScale(by_px=-1000)])
        breakpoints = result.tokens["breakpoints"]
        assert all(parse_px(v) >= 320 for v in breakpoints.values())
        assert {breakpoints[k] for k in ("sm", "md", "lg", "xl")} == {"320px"}
        assert breakpoints["2xl"] == "536px"

    def test_durations_have_a_floor(self, baseline):
        result = apply_operations(baseline, [AnimationDurationSet(key="fast", ms=10)])
        assert result.tokens["animations"]["duration"]["fast"] == "50ms"

    def test_faster_animations(self, baseline):
        result = apply_operations(baseline, [AnimationDurationScale(direction="faster", magnitude="strong")])
        assert result.tokens["animations"]["duration"]["fast"] == "115ms"

    def test_easing_sets_default(self, baseline):
        result = apply_operations(baseline, [AnimationEasingSet(easing="ease-in")])
        easing = result.tokens["animations"]["easing"]
        assert easing["default"] == "ease-in"
        assert easing["easeOut"] == "ease-out"

    def test_missing_section_is_skipped(self, baseline):
        del baseline["spacing"]
        result = apply_operations(baseline, [SpacingScale(direction="increase", magnitude="slight")])
        assert "spacing" not in result.tokens
        assert result.diff == []


class TestShadows:
    def test_softer_single_layer(self):
        assert tweak_shadow("0 4px 6px rgba(0, 0, 0, 0.1)", "softer") == "0 4px 5px rgba(0, 0, 0, 0.08)"

    def test_stronger_multi_layer(self):
        value = "0 1px 2px rgba(0, 0, 0, 0.05), 0 1px 3px rgba(0, 0, 0, 0.2)"
        assert tweak_shadow(value, "stronger") == "0 1px 2px rgba(0, 0, 0, 0.06), 0 1px 4px rgba(0, 0, 0, 0.25)"

    def test_unparseable_layer_is_kept(self):
        assert tweak_shadow("none", "stronger") == "none"

    def test_color_without_alpha_is_kept(self):
        assert tweak_shadow("0 0 10px #000", "stronger") == "0 0 12px #000"
