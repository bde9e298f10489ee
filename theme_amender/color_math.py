"""
color_math.py - Pure colour and unit helpers shared by the parser and patcher.

Everything here is side-effect free:
  - hex ↔ HSL conversion (H: 0–360, S/L: 0–100)
  - clamped lightness / saturation / hue adjustments
  - ten-shade palette generation from a hue family or a base hex
  - px / percent / number parsing
  - per-key range tables that every mutating operation clamps into

Usage:
    from theme_amender.color_math import palette_from_hue, adjust_lightness

    blues = palette_from_hue("blue")
    # → {"50": "#hex", "100": "#hex", ..., "900": "#hex"}
"""

from __future__ import annotations

import math
import re
from typing import Callable, Dict, Optional, Tuple, Union

# ── Shade scale ───────────────────────────────────────────────────────────────

SHADE_KEYS = ["50", "100", "200", "300", "400", "500", "600", "700", "800", "900"]

# Target HSL lightness per shade for generated palettes
LIGHTNESS_LADDER: Dict[str, float] = {
    "50": 97, "100": 94, "200": 88, "300": 80, "400": 70,
    "500": 58, "600": 50, "700": 42, "800": 34, "900": 26,
}

DEFAULT_SATURATION = 65
SATURATION_BOUNDS = (35, 90)

FAMILY_HUES: Dict[str, float] = {
    "red": 0, "orange": 24, "amber": 45, "yellow": 52, "lime": 90,
    "green": 140, "teal": 170, "cyan": 190, "blue": 210, "indigo": 230,
    "violet": 260, "purple": 280, "fuchsia": 300, "pink": 330, "rose": 350,
    "brown": 20, "slate": 215, "gray": 210, "neutral": 210,
}

COLOR_ALIASES: Dict[str, str] = {
    "purple": "purple", "violet": "violet", "lilac": "purple", "lavender": "purple", "plum": "purple",
    "indigo": "indigo", "blue": "blue", "navy": "blue", "azure": "blue", "cobalt": "blue",
    "sapphire": "blue", "sky": "blue",
    "cyan": "cyan", "teal": "teal", "turquoise": "teal", "aqua": "teal", "aquamarine": "teal",
    "green": "green", "emerald": "green", "forest": "green", "olive": "green", "mint": "green",
    "seafoam": "green",
    "lime": "lime", "chartreuse": "lime",
    "yellow": "yellow", "amber": "amber", "orange": "orange", "peach": "orange",
    "coral": "orange", "apricot": "orange",
    "red": "red", "crimson": "red", "maroon": "red", "burgundy": "red",
    "pink": "pink", "fuchsia": "fuchsia", "magenta": "fuchsia", "rose": "rose",
    "brown": "brown", "tan": "brown", "khaki": "brown", "sand": "brown",
    "slate": "slate", "charcoal": "slate", "graphite": "slate",
    "grey": "gray", "gray": "gray", "neutral": "neutral",
}

# ── Range tables ──────────────────────────────────────────────────────────────
# [min, max] per scale key. Mutations on these keys always clamp into range.

SPACING_RANGES: Dict[str, Tuple[float, float]] = {
    "xs": (2, 8), "sm": (6, 12), "md": (12, 20), "lg": (20, 32),
    "xl": (28, 40), "2xl": (40, 56), "3xl": (56, 80),
}
SPACING_DEFAULT_RANGE = (2, 80)

RADII_RANGES: Dict[str, Tuple[float, float]] = {
    "sm": (2, 6), "md": (6, 12), "lg": (10, 18), "xl": (14, 24), "2xl": (20, 32),
}
RADII_DEFAULT_RANGE = (0, 32)

FONTSIZE_RANGES: Dict[str, Tuple[float, float]] = {
    "xs": (10, 14), "sm": (12, 16), "md": (14, 18), "lg": (16, 22), "xl": (18, 24),
    "2xl": (22, 28), "3xl": (26, 36), "4xl": (32, 42), "5xl": (42, 54), "6xl": (54, 72),
}
FONTSIZE_DEFAULT_RANGE = (10, 72)

LINEHEIGHT_RANGES: Dict[str, Tuple[float, float]] = {
    "tight": (1.1, 1.3), "snug": (1.3, 1.4), "relaxed": (1.5, 1.7),
}
# normal / none / loose have no table entry but are still kept inside [1, 2]
LINEHEIGHT_DEFAULT_RANGE = (1.0, 2.0)

BREAKPOINT_KEYS = ["sm", "md", "lg", "xl", "2xl"]

_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_PX_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*px\s*$", re.IGNORECASE)
_PERCENT_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*%\s*$")


# ── Numeric helpers ───────────────────────────────────────────────────────────

def clamp(n: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, n))


def round_half_up(n: float) -> int:
    """Round .5 away from zero on the positive side (CSS-style, not banker's)."""
    return int(math.floor(n + 0.5))


def parse_px(value: Union[str, int, float, None]) -> Optional[float]:
    """Accept a bare number or a "<n>px" string; anything else → None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    m = _PX_RE.match(str(value))
    return float(m.group(1)) if m else None


def to_px(n: float) -> str:
    return f"{round_half_up(n)}px"


def parse_percent(s: str) -> Optional[float]:
    """'15%' → 0.15"""
    m = _PERCENT_RE.match(s or "")
    return float(m.group(1)) / 100 if m else None


def format_number(n: float) -> str:
    """Shortest decimal form without float noise: 1.2000000001 → '1.2', 2.0 → '2'."""
    text = f"{round(n, 4):.4f}".rstrip("0").rstrip(".")
    return text or "0"


# ── Hex / RGB / HSL ───────────────────────────────────────────────────────────

def is_hex(value: object) -> bool:
    return isinstance(value, str) and bool(_HEX_RE.match(value))


def hex_to_rgb(hex_str: str) -> Tuple[int, int, int]:
    h = hex_str.lstrip("#")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def rgb_to_hex(r: float, g: float, b: float) -> str:
    def _hx(n: float) -> str:
        return f"{int(clamp(round_half_up(n), 0, 255)):02x}"
    return f"#{_hx(r)}{_hx(g)}{_hx(b)}"


def hex_to_hsl(hex_str: str) -> Tuple[float, float, float]:
    """hex → (H 0–360, S 0–100, L 0–100)"""
    r, g, b = (c / 255 for c in hex_to_rgb(hex_str))
    mx, mn = max(r, g, b), min(r, g, b)
    L = (mx + mn) / 2
    if mx == mn:
        return 0.0, 0.0, L * 100

    d = mx - mn
    S = d / (2 - mx - mn) if L > 0.5 else d / (mx + mn)
    if mx == r:
        H = (g - b) / d + (6 if g < b else 0)
    elif mx == g:
        H = (b - r) / d + 2
    else:
        H = (r - g) / d + 4
    return H * 60, S * 100, L * 100


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_hex(H: float, S: float, L: float) -> str:
    """(H, S 0–100, L 0–100) → lowercase #rrggbb. Hue wraps, S/L clamp."""
    h = (H % 360) / 360
    s = clamp(S, 0, 100) / 100
    l = clamp(L, 0, 100) / 100

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_rgb(p, q, h + 1 / 3)
        g = _hue_to_rgb(p, q, h)
        b = _hue_to_rgb(p, q, h - 1 / 3)
    return rgb_to_hex(r * 255, g * 255, b * 255)


def adjust_lightness(hex_str: str, delta: float) -> str:
    H, S, L = hex_to_hsl(hex_str)
    return hsl_to_hex(H, S, clamp(L + delta, 0, 100))


def adjust_saturation(hex_str: str, delta: float) -> str:
    H, S, L = hex_to_hsl(hex_str)
    return hsl_to_hex(H, clamp(S + delta, 0, 100), L)


def shift_hue(hex_str: str, delta_deg: float) -> str:
    H, S, L = hex_to_hsl(hex_str)
    return hsl_to_hex(H + delta_deg, S, L)


def hex_to_rgba_string(hex_str: str, alpha: float) -> str:
    r, g, b = hex_to_rgb(hex_str)
    return f"rgba({r}, {g}, {b}, {clamp(alpha, 0, 1):.3f})"


# ── Palettes ──────────────────────────────────────────────────────────────────

def color_family_from_word(word: str) -> Optional[str]:
    """'lavender' → 'purple', 'navy' → 'blue'; unknown words → None."""
    return COLOR_ALIASES.get((word or "").strip().lower())


def _ladder(hue: float, saturation: float) -> Dict[str, str]:
    return {k: hsl_to_hex(hue, saturation, L) for k, L in LIGHTNESS_LADDER.items()}


def palette_from_hue(family: str, saturation: Optional[float] = None) -> Dict[str, str]:
    """Ten-shade palette for a hue family on the fixed lightness ladder."""
    hue = FAMILY_HUES.get(family, 210)
    sat = clamp(DEFAULT_SATURATION if saturation is None else saturation, *SATURATION_BOUNDS)
    return _ladder(hue, sat)


def palette_from_hex(hex_str: str) -> Dict[str, str]:
    """Ten-shade palette keeping the hue and (clamped) saturation of a base colour."""
    H, S, _ = hex_to_hsl(hex_str)
    return _ladder(H, clamp(S, *SATURATION_BOUNDS))


def transform_palette(
    scale: Dict[str, str],
    fn: Callable[[str, str], str],
) -> Dict[str, str]:
    """Apply fn(hex, key) to every valid-hex shade; anything else passes through."""
    return {k: fn(v, k) if is_hex(v) else v for k, v in scale.items()}


def contrast_palette(scale: Dict[str, str], delta_l: float) -> Dict[str, str]:
    """Shades ≤500 get lighter, shades >500 get darker, by |delta_l|."""
    step = abs(delta_l)

    def _spread(hex_str: str, key: str) -> str:
        try:
            light_side = int(key) <= 500
        except ValueError:
            return hex_str
        return adjust_lightness(hex_str, step if light_side else -step)

    return transform_palette(scale, _spread)
