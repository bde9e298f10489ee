"""
token_patcher.py - Apply typed operations to a design-token document.

    result = apply_operations(tokens, parse_instructions("compact"))
    result.tokens   # new document, input untouched
    result.diff     # RFC 6902 style list computed from before → after

The document is deep-copied once per call and every handler edits that copy
in place, left to right. Handlers are best effort: a palette or section
that is missing is skipped, never raised on. Numeric results are clamped into
the range tables from color_math.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from . import json_patch
from .color_math import (
    BREAKPOINT_KEYS,
    FONTSIZE_DEFAULT_RANGE,
    FONTSIZE_RANGES,
    LINEHEIGHT_DEFAULT_RANGE,
    LINEHEIGHT_RANGES,
    RADII_DEFAULT_RANGE,
    RADII_RANGES,
    SHADE_KEYS,
    SPACING_DEFAULT_RANGE,
    SPACING_RANGES,
    adjust_lightness,
    adjust_saturation,
    clamp,
    contrast_palette,
    format_number,
    hex_to_rgba_string,
    is_hex,
    palette_from_hex,
    palette_from_hue,
    parse_px,
    round_half_up,
    shift_hue,
    to_px,
    transform_palette,
)
from .operations import (
    FAMILY_SATURATION,
    FONT_SIZE_STEP,
    HUE_SHIFT_DEG,
    LIGHTNESS_DELTA,
    LINE_HEIGHT_DELTA,
    OPERATION_KINDS,
    OVERLAY_DELTA,
    OVERLAY_DELTA_DEFAULT,
    SCALE_FACTOR,
    LineHeightScale,
    Operation,
    SpacingScale,
)

logger = logging.getLogger(__name__)

Tokens = Dict[str, Any]
Handler = Callable[[Tokens, Any], None]


@dataclass
class PatchResult:
    tokens: Tokens
    diff: List[dict] = field(default_factory=list)


# ── Document helpers ──────────────────────────────────────────────────────────

def _section(doc: Tokens, *path: str) -> Optional[dict]:
    """Existing mapping at `path`, or None."""
    cur: Any = doc
    for key in path:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur if isinstance(cur, dict) else None


def _ensure(doc: Tokens, *path: str) -> dict:
    """Mapping at `path`, creating empty ones along the way."""
    cur = doc
    for key in path:
        if not isinstance(cur.get(key), dict):
            cur[key] = {}
        cur = cur[key]
    return cur


def _neutral_900(doc: Tokens) -> str:
    neutral = _section(doc, "colors", "neutral") or {}
    base = neutral.get("900")
    return base if is_hex(base) else "#000000"


# ── Colors ────────────────────────────────────────────────────────────────────

def _palette_replace_by_family(doc: Tokens, op) -> None:
    if op.saturation is None:
        sat = None
    elif isinstance(op.saturation, str):
        sat = FAMILY_SATURATION[op.saturation]
    else:
        sat = float(op.saturation)
    colors = _ensure(doc, "colors")
    for target in op.targets:
        colors[target] = palette_from_hue(op.to, sat)


def _palette_replace_by_hex(doc: Tokens, op) -> None:
    if not is_hex(op.hex):
        return
    colors = _ensure(doc, "colors")
    for target in op.targets:
        colors[target] = palette_from_hex(op.hex)


def _palette_replace_with_list(doc: Tokens, op) -> None:
    colors = _ensure(doc, "colors")
    for target in op.targets:
        existing = colors.get(target) if isinstance(colors.get(target), dict) else {}
        scale: Dict[str, str] = {}
        for i, key in enumerate(SHADE_KEYS):
            candidate = op.hexes[i] if i < len(op.hexes) else None
            if is_hex(candidate):
                scale[key] = candidate
            else:
                scale[key] = existing.get(key) if is_hex(existing.get(key)) else "#000000"
        colors[target] = scale


def _transform_targets(doc: Tokens, targets: List[str], fn: Callable[[dict], dict]) -> None:
    colors = _section(doc, "colors")
    if colors is None:
        return
    for target in targets:
        palette = colors.get(target)
        if isinstance(palette, dict):
            colors[target] = fn(palette)


def _palette_saturation(doc: Tokens, op) -> None:
    delta = LIGHTNESS_DELTA[op.magnitude] / 2 * (1 if op.direction == "increase" else -1)
    _transform_targets(doc, op.targets, lambda p: transform_palette(p, lambda h, _k: adjust_saturation(h, delta)))


def _palette_hue_shift(doc: Tokens, op) -> None:
    degrees = HUE_SHIFT_DEG[op.shift] if isinstance(op.shift, str) else float(op.shift)
    _transform_targets(doc, op.targets, lambda p: transform_palette(p, lambda h, _k: shift_hue(h, degrees)))


def _palette_contrast(doc: Tokens, op) -> None:
    delta = LIGHTNESS_DELTA[op.magnitude] / 2
    _transform_targets(doc, op.targets, lambda p: contrast_palette(p, delta))


def _shade_adjust(doc: Tokens, op) -> None:
    delta = LIGHTNESS_DELTA[op.magnitude] * (1 if op.direction == "lighter" else -1)
    colors = _section(doc, "colors") or {}
    for target in op.targets:
        palette = colors.get(target)
        if isinstance(palette, dict) and is_hex(palette.get(op.shade)):
            palette[op.shade] = adjust_lightness(palette[op.shade], delta)


def _shade_set_hex(doc: Tokens, op) -> None:
    if not is_hex(op.hex):
        return
    colors = _section(doc, "colors") or {}
    for target in op.targets:
        # a lone shade would leave an incomplete palette, so missing palettes are skipped
        palette = colors.get(target)
        if isinstance(palette, dict):
            palette[op.shade] = op.hex


# ── Gradients / overlay ───────────────────────────────────────────────────────

def _gradient_set(doc: Tokens, op) -> None:
    _ensure(doc, "gradients")[op.key] = op.value


def _gradient_from_palette(doc: Tokens, op) -> None:
    palette = _section(doc, "colors", op.palette) or {}
    c1, c2 = palette.get(op.from_shade), palette.get(op.to_shade)
    if not c1 or not c2:
        return
    if op.type == "radial":
        value = f"radial-gradient(circle, {c1}, {c2})"
    else:
        angle = format_number(op.angle_deg) if op.angle_deg is not None else "45"
        value = f"linear-gradient({angle}deg, {c1}, {c2})"
    _ensure(doc, "gradients")[op.key] = value


_RGBA_ALPHA_RE = re.compile(r"rgba\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*,\s*(\d*\.?\d+)\s*\)", re.IGNORECASE)


def _overlay_alpha(value: Any) -> Optional[float]:
    m = _RGBA_ALPHA_RE.search(value) if isinstance(value, str) else None
    return float(m.group(1)) if m else None


def _overlay_opacity_set(doc: Tokens, op) -> None:
    base = _neutral_900(doc)
    _ensure(doc, "backgrounds")["overlay"] = hex_to_rgba_string(base, op.opacity)


def _overlay_opacity_scale(doc: Tokens, op) -> None:
    base = _neutral_900(doc)
    backgrounds = _ensure(doc, "backgrounds")
    alpha = _overlay_alpha(backgrounds.get("overlay"))
    if op.by_percent is not None:
        delta = op.by_percent / 100
    elif op.magnitude:
        delta = OVERLAY_DELTA[op.magnitude]
    else:
        delta = OVERLAY_DELTA_DEFAULT
    sign = 1 if op.direction == "increase" else -1
    backgrounds["overlay"] = hex_to_rgba_string(base, clamp((0.5 if alpha is None else alpha) + sign * delta, 0, 1))


# ── Spacing / radii ───────────────────────────────────────────────────────────

def _scale_section(section: dict, keys: List[str], scale: float, ranges: dict, default_range) -> None:
    for key in keys:
        n = parse_px(section.get(key))
        if n is None:
            continue
        lo, hi = ranges.get(key, default_range)
        section[key] = to_px(clamp(n * scale, lo, hi))


def _adjust_keys(section: dict, keys: List[str], by_px, set_px, ranges: dict, default_range) -> None:
    for key in keys:
        if not section.get(key):
            continue
        lo, hi = ranges.get(key, default_range)
        if set_px is not None:
            section[key] = to_px(clamp(set_px, lo, hi))
        elif by_px is not None:
            cur = parse_px(section[key]) or 0
            section[key] = to_px(clamp(cur + by_px, lo, hi))


def _spacing_scale(doc: Tokens, op) -> None:
    spacing = _section(doc, "spacing")
    if spacing is None:
        return
    factor = op.factor if op.factor else SCALE_FACTOR[op.magnitude or "slight"]
    scale = factor if op.direction == "increase" else 1 / factor
    _scale_section(spacing, list(spacing), scale, SPACING_RANGES, SPACING_DEFAULT_RANGE)


def _spacing_adjust_keys(doc: Tokens, op) -> None:
    spacing = _section(doc, "spacing")
    if spacing is not None:
        _adjust_keys(spacing, op.keys, op.by_px, op.set_px, SPACING_RANGES, SPACING_DEFAULT_RANGE)


def _radii_scale(doc: Tokens, op) -> None:
    radii = _section(doc, "radii")
    if radii is None:
        return
    factor = SCALE_FACTOR[op.magnitude] if isinstance(op.magnitude, str) else float(op.magnitude)
    if factor <= 0:
        return
    scale = factor if op.direction == "increase" else 1 / factor
    # none / full are fixed tokens, only the ranged keys scale
    _scale_section(radii, [k for k in radii if k in RADII_RANGES], scale, RADII_RANGES, RADII_DEFAULT_RANGE)


def _radii_adjust_keys(doc: Tokens, op) -> None:
    radii = _section(doc, "radii")
    if radii is not None:
        _adjust_keys(radii, op.keys, op.by_px, op.set_px, RADII_RANGES, RADII_DEFAULT_RANGE)


def _radii_preset(doc: Tokens, op) -> None:
    radii = _section(doc, "radii")
    if radii is None:
        return
    for key, (lo, hi) in RADII_RANGES.items():
        radii[key] = to_px(hi if op.preset == "pill" else lo)


# ── Typography ────────────────────────────────────────────────────────────────

def _font_family_set(doc: Tokens, op) -> None:
    _ensure(doc, "fonts")[op.part] = op.family.strip()


def _font_size_scale_all(doc: Tokens, op) -> None:
    sizes = _section(doc, "fontSizes")
    if sizes is None:
        return
    factor = 1 + op.by_percent / 100 if op.by_percent else SCALE_FACTOR[op.magnitude or "slight"]
    scale = factor if op.direction == "larger" else 1 / factor
    _scale_section(sizes, list(sizes), scale, FONTSIZE_RANGES, FONTSIZE_DEFAULT_RANGE)


def _font_size_adjust(doc: Tokens, op) -> None:
    sizes = _section(doc, "fontSizes")
    if sizes is None:
        return
    if op.set_px is not None or op.by_px is not None:
        _adjust_keys(sizes, op.keys, op.by_px, op.set_px, FONTSIZE_RANGES, FONTSIZE_DEFAULT_RANGE)
        return
    step = FONT_SIZE_STEP[op.magnitude or "slight"] * (1 if op.direction == "larger" else -1)
    _adjust_keys(sizes, op.keys, step, None, FONTSIZE_RANGES, FONTSIZE_DEFAULT_RANGE)


def _font_weight_set(doc: Tokens, op) -> None:
    weight = int(clamp(round_half_up(op.value / 100) * 100, 100, 900))
    _ensure(doc, "fontWeights")[op.key] = str(weight)


def _line_height_range(key: str):
    if key in LINEHEIGHT_RANGES:
        return LINEHEIGHT_RANGES[key]
    if key in ("normal", "none", "loose"):
        return LINEHEIGHT_DEFAULT_RANGE
    return None


def _line_height_scale(doc: Tokens, op) -> None:
    heights = _section(doc, "lineHeights")
    if heights is None:
        return
    delta = op.by if op.by is not None else LINE_HEIGHT_DELTA[op.magnitude or "slight"]
    sign = 1 if op.direction == "looser" else -1
    for key, raw in list(heights.items()):
        bounds = _line_height_range(key)
        if bounds is None:
            continue
        try:
            cur = float(raw)
        except (TypeError, ValueError):
            continue
        heights[key] = format_number(clamp(cur + sign * delta, *bounds))


def _line_height_set(doc: Tokens, op) -> None:
    heights = _section(doc, "lineHeights")
    if heights is None:
        return
    heights[op.key] = format_number(clamp(op.value, *LINEHEIGHT_RANGES[op.key]))


# ── Shadows ───────────────────────────────────────────────────────────────────

_LENGTH_TOKEN_RE = re.compile(r"^(-?\d*\.?\d+)(px)?$", re.IGNORECASE)
_COLOR_ALPHA_RE = re.compile(
    r"rgba?\(\s*[\d.]+\s*,\s*[\d.]+\s*,\s*[\d.]+\s*,\s*([\d.]+)\s*\)", re.IGNORECASE
)


def _split_top_level(value: str, is_sep: Callable[[str], bool]) -> List[str]:
    """Split on separators that are not inside parentheses."""
    parts: List[str] = []
    buf: List[str] = []
    depth = 0
    for ch in value:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        if depth == 0 and is_sep(ch):
            parts.append("".join(buf))
            buf = []
            continue
        buf.append(ch)
    parts.append("".join(buf))
    return parts


def _tweak_shadow_layer(layer: str, stronger: bool) -> str:
    tokens = [t for t in _split_top_level(layer.strip(), str.isspace) if t]
    lengths = [i for i, t in enumerate(tokens) if _LENGTH_TOKEN_RE.match(t)]
    if len(lengths) < 3:
        return layer.strip()

    factor = 1.2 if stronger else 0.85
    blur_i = lengths[2]
    blur = float(_LENGTH_TOKEN_RE.match(tokens[blur_i]).group(1))
    tokens[blur_i] = f"{max(0, round_half_up(blur * factor))}px"
    if len(lengths) > 3:
        spread_i = lengths[3]
        spread = float(_LENGTH_TOKEN_RE.match(tokens[spread_i]).group(1))
        tokens[spread_i] = f"{round_half_up(spread * factor)}px"

    for i, tok in enumerate(tokens):
        m = _COLOR_ALPHA_RE.search(tok)
        if m:
            alpha = clamp(float(m.group(1)) * (1.25 if stronger else 0.8), 0.03, 0.35)
            tokens[i] = f"{tok[:m.start(1)]}{alpha:.2f}{tok[m.end(1):]}"
            break
    return " ".join(tokens)


def tweak_shadow(value: str, direction: str) -> str:
    """Scale blur/spread and rgba alpha of every layer in a box-shadow value."""
    stronger = direction == "stronger"
    layers = _split_top_level(value, lambda ch: ch == ",")
    return ", ".join(_tweak_shadow_layer(layer, stronger) for layer in layers)


def _shadows_strength(doc: Tokens, op) -> None:
    shadows = _section(doc, "shadows")
    if shadows is None:
        return
    for key, value in list(shadows.items()):
        if isinstance(value, str):
            shadows[key] = tweak_shadow(value, op.direction)


def _shadows_strength_keys(doc: Tokens, op) -> None:
    shadows = _section(doc, "shadows")
    if shadows is None:
        return
    for key in op.keys:
        if isinstance(shadows.get(key), str):
            shadows[key] = tweak_shadow(shadows[key], op.direction)


# ── Borders ───────────────────────────────────────────────────────────────────

BORDER_WIDTH_RANGE = (0, 8)


def _borders_width_scale(doc: Tokens, op) -> None:
    widths = _section(doc, "borders", "widths")
    if widths is None:
        return
    delta = 1 if op.direction == "thicker" else -1
    for key, raw in list(widths.items()):
        widths[key] = to_px(clamp((parse_px(raw) or 0) + delta, *BORDER_WIDTH_RANGE))


def _borders_width_set(doc: Tokens, op) -> None:
    widths = _section(doc, "borders", "widths")
    if widths is not None:
        widths[op.which] = to_px(clamp(op.px, *BORDER_WIDTH_RANGE))


def _borders_style_set(doc: Tokens, op) -> None:
    styles = _section(doc, "borders", "styles")
    if styles is not None:
        styles["default"] = op.style


# ── Animations / breakpoints ──────────────────────────────────────────────────

MIN_DURATION_MS = 50
MIN_BREAKPOINT_PX = 320
_MS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)
_BREAKPOINT_PX_RE = re.compile(r"(\d+)\s*px", re.IGNORECASE)


def _animation_duration_scale(doc: Tokens, op) -> None:
    durations = _section(doc, "animations", "duration")
    if durations is None:
        return
    if op.by_percent:
        factor = 1 + op.by_percent / 100
    else:
        factor = SCALE_FACTOR[op.magnitude] if op.magnitude else SCALE_FACTOR["slight"]
    scale = 1 / factor if op.direction == "faster" else factor
    for key in ("fast", "normal", "slow"):
        m = _MS_RE.search(str(durations.get(key, "")))
        if m:
            durations[key] = f"{max(MIN_DURATION_MS, round_half_up(float(m.group(1)) * scale))}ms"


def _animation_duration_set(doc: Tokens, op) -> None:
    _ensure(doc, "animations", "duration")[op.key] = f"{max(MIN_DURATION_MS, round_half_up(op.ms))}ms"


def _animation_easing_set(doc: Tokens, op) -> None:
    _ensure(doc, "animations", "easing")["default"] = op.easing


def _breakpoints_scale(doc: Tokens, op) -> None:
    breakpoints = _section(doc, "breakpoints")
    if breakpoints is None:
        return
    for key in BREAKPOINT_KEYS:
        m = _BREAKPOINT_PX_RE.search(str(breakpoints.get(key, "")))
        if m:
            breakpoints[key] = f"{max(MIN_BREAKPOINT_PX, round_half_up(int(m.group(1)) + op.by_px))}px"


def _breakpoints_set(doc: Tokens, op) -> None:
    _ensure(doc, "breakpoints")[op.key] = f"{max(MIN_BREAKPOINT_PX, round_half_up(op.px))}px"


# ── Density presets ───────────────────────────────────────────────────────────

DENSITY_PRESETS = {
    "compact": (SpacingScale(direction="decrease", magnitude="moderate"),
                LineHeightScale(direction="tighter", magnitude="slight")),
    "cozy": (SpacingScale(direction="decrease", magnitude="slight"),
             LineHeightScale(direction="tighter", magnitude="slight")),
    "comfortable": (SpacingScale(direction="increase", magnitude="slight"),
                    LineHeightScale(direction="looser", magnitude="slight")),
    "spacious": (SpacingScale(direction="increase", magnitude="moderate"),
                 LineHeightScale(direction="looser", magnitude="moderate")),
}


def _density_preset(doc: Tokens, op) -> None:
    spacing_op, line_height_op = DENSITY_PRESETS[op.level]
    _spacing_scale(doc, spacing_op)
    _line_height_scale(doc, line_height_op)


# ── Dispatch ──────────────────────────────────────────────────────────────────

HANDLERS: Dict[str, Handler] = {
    "palette_replace_by_family": _palette_replace_by_family,
    "palette_replace_by_hex": _palette_replace_by_hex,
    "palette_replace_with_list": _palette_replace_with_list,
    "palette_saturation": _palette_saturation,
    "palette_hue_shift": _palette_hue_shift,
    "palette_contrast": _palette_contrast,
    "shade_adjust": _shade_adjust,
    "shade_set_hex": _shade_set_hex,
    "gradient_set": _gradient_set,
    "gradient_from_palette": _gradient_from_palette,
    "overlay_opacity_set": _overlay_opacity_set,
    "overlay_opacity_scale": _overlay_opacity_scale,
    "spacing_scale": _spacing_scale,
    "spacing_adjust_keys": _spacing_adjust_keys,
    "radii_scale": _radii_scale,
    "radii_adjust_keys": _radii_adjust_keys,
    "radii_preset": _radii_preset,
    "font_family_set": _font_family_set,
    "font_size_scale_all": _font_size_scale_all,
    "font_size_adjust": _font_size_adjust,
    "font_weight_set": _font_weight_set,
    "line_height_scale": _line_height_scale,
    "line_height_set": _line_height_set,
    "shadows_strength": _shadows_strength,
    "shadows_strength_keys": _shadows_strength_keys,
    "borders_width_scale": _borders_width_scale,
    "borders_width_set": _borders_width_set,
    "borders_style_set": _borders_style_set,
    "animation_duration_scale": _animation_duration_scale,
    "animation_duration_set": _animation_duration_set,
    "animation_easing_set": _animation_easing_set,
    "breakpoints_scale": _breakpoints_scale,
    "breakpoints_set": _breakpoints_set,
    "density_preset": _density_preset,
}

_unhandled = set(OPERATION_KINDS) - set(HANDLERS)
if _unhandled:
    raise RuntimeError(f"No patch handler for operation kind(s): {', '.join(sorted(_unhandled))}")


def apply_operations(document: Tokens, ops: List[Operation]) -> PatchResult:
    """Apply `ops` in order to a copy of `document`; diff is before → after."""
    working = copy.deepcopy(document)
    for op in ops:
        HANDLERS[op.kind](working, op)
    diff = json_patch.compare(document, working)
    logger.debug(f"Applied {len(ops)} operation(s), {len(diff)} change(s)")
    return PatchResult(tokens=working, diff=diff)
