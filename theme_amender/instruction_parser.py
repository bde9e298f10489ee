"""
instruction_parser.py - Turn free-form theme instructions into typed operations.

    parse_instructions("make brand colors warmer and increase spacing slightly")
    # → [PaletteHueShift(targets=['brand'], shift='warmer'),
    #    SpacingScale(direction='increase', magnitude='slight')]

Pipeline:
  1. segment()      - split on sentence terminators, connectives, and a guarded " and "
  2. parse_clause() - run the ordered CLASSIFIERS table; the first one that
                      yields operations wins, so a clause never mixes categories
  3. concatenate    - results keep source order across clauses

The parser never raises. An empty list means "nothing recognised", and the
caller is expected to fall back to the assisted path.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from .color_math import color_family_from_word, is_hex
from .operations import (
    ALL_PALETTES,
    STATUS_PALETTES,
    AnimationDurationScale,
    AnimationDurationSet,
    AnimationEasingSet,
    BordersStyleSet,
    BordersWidthScale,
    BordersWidthSet,
    BreakpointsScale,
    BreakpointsSet,
    DensityPreset,
    FontFamilySet,
    FontSizeAdjust,
    FontSizeScaleAll,
    FontWeightSet,
    GradientFromPalette,
    GradientSet,
    LineHeightScale,
    LineHeightSet,
    Operation,
    OverlayOpacityScale,
    OverlayOpacitySet,
    PaletteContrast,
    PaletteHueShift,
    PaletteReplaceByFamily,
    PaletteReplaceByHex,
    PaletteReplaceWithList,
    PaletteSaturation,
    RadiiAdjustKeys,
    RadiiPreset,
    RadiiScale,
    ShadeAdjust,
    ShadeSetHex,
    ShadowsStrength,
    ShadowsStrengthKeys,
    SpacingAdjustKeys,
    SpacingScale,
)

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

# ── Vocabulary ────────────────────────────────────────────────────────────────

# Checked in order; the first word present decides the magnitude.
MAGNITUDE_WORDS: List[Tuple[str, str]] = [
    ("slightly", "slight"), ("slight", "slight"), ("a_little", "slight"), ("a_bit", "slight"),
    ("somewhat", "moderate"), ("moderately", "moderate"),
    ("noticeably", "moderate"), ("noticeable", "moderate"),
    ("significantly", "strong"), ("strongly", "strong"), ("very", "strong"), ("a_lot", "strong"),
]

TARGET_WORDS: Dict[str, str] = {
    "brand": "brand", "primary": "brand",
    "accent": "accent", "secondary": "accent",
    "neutral": "neutral", "gray": "neutral", "grey": "neutral",
    "success": "success", "ok": "success", "positive": "success",
    "warning": "warning", "caution": "warning",
    "error": "error", "danger": "error", "critical": "error", "negative": "error",
    "info": "info", "informational": "info", "notice": "info",
}

TARGET_GROUPS: Dict[str, List[str]] = {
    "notifications": STATUS_PALETTES,
    "statuses": STATUS_PALETTES,
    "alerts": STATUS_PALETTES,
    "all": ALL_PALETTES,
    "allcolors": ALL_PALETTES,
}

BREAKPOINT_ALIASES: Dict[str, str] = {
    "mobile": "sm", "phone": "sm", "handset": "sm",
    "tablet": "md", "tab": "md",
    "laptop": "lg", "desktop": "lg",
    "large": "xl", "wide": "xl",
    "ultrawide": "2xl",
}

SPACING_KEYS = ["xs", "sm", "md", "lg", "xl", "2xl", "3xl"]
RADII_KEYS = ["sm", "md", "lg", "xl", "2xl"]
FONT_SIZE_KEYS = ["xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl"]
SHADOW_KEYS = ["xs", "sm", "md", "lg", "xl", "2xl"]

_SHADE = r"(50|100|200|300|400|500|600|700|800|900)"
_TARGET_ALT = r"(brand|primary|accent|secondary|neutral|gray|grey|success|warning|error|danger|info)"
_TARGET_OR_GROUP_ALT = (
    r"(brand|primary|accent|secondary|neutral|gray|grey|success|warning|error|danger|info"
    r"|notifications|alerts|statuses|all)"
)

# Targets that cannot double as a colour family ("gray", "neutral" can).
_EXPLICIT_TARGET_RE = re.compile(
    r"\b(brand|primary|accent|secondary|success|positive|warning|caution|error|danger"
    r"|critical|negative|info|informational|notice|notifications|statuses|alerts)\b",
    _I,
)
_GENERIC_COLOR_REF_RE = re.compile(r"\b(colou?rs?|palettes?|it|theme|everything)\b", _I)

# ── Segmentation ──────────────────────────────────────────────────────────────

_SENTENCE_SPLIT = re.compile(r"(?<=[.;])\s+")
_CONNECTIVE_SPLIT = re.compile(r"\s+(?:also|plus|as well as|as well|then)\s+", _I)
_AND_SPLIT = re.compile(r"\s+and\s+", _I)
_EDIT_KEYWORD = re.compile(
    r"(colou?r|palette|spacing|radius|radii|corner|font|size|line|height|shadow|border"
    r"|animation|easing|breakpoint|gradient|overlay|opacity"
    r"|warm|cool|lighter|darker|saturat|vibrant|muted|pastel|contrast|hue)",
    _I,
)


def segment(text: str) -> List[str]:
    """
    Split an instruction into independently classifiable clauses.

    " and " only splits when the text on both sides mentions an edit keyword,
    so "brand and accent colors" stays whole while
    "make it warmer and increase spacing" becomes two clauses.
    """
    parts: List[str] = []
    for sentence in _SENTENCE_SPLIT.split(text or ""):
        for mid in _CONNECTIVE_SPLIT.split(sentence):
            tokens = _AND_SPLIT.split(mid)
            buf = [tokens[0]]
            for cur in tokens[1:]:
                if _EDIT_KEYWORD.search(buf[-1]) and _EDIT_KEYWORD.search(cur):
                    parts.append(" and ".join(buf))
                    buf = [cur]
                else:
                    buf.append(cur)
            parts.append(" and ".join(buf))
    return [p.strip() for p in parts if p.strip()]


# ── Extraction helpers ────────────────────────────────────────────────────────

def normalise(text: str) -> str:
    text = re.sub(r"\ba little\b", " a_little ", text, flags=_I)
    text = re.sub(r"\ba bit\b", " a_bit ", text, flags=_I)
    text = re.sub(r"\ba lot\b", " a_lot ", text, flags=_I)
    return re.sub(r"\s+", " ", text).strip()


def magnitude(text: str) -> str:
    for word, mag in MAGNITUDE_WORDS:
        if re.search(rf"\b{word}\b", text, _I):
            return mag
    return "slight"


def resolve_targets(text: str) -> Optional[List[str]]:
    """
    Palette names mentioned in `text`: direct keywords first, then named groups.
    Returns None when nothing is named so each category can apply its own default.
    """
    found: List[str] = []
    for word, target in TARGET_WORDS.items():
        if target not in found and re.search(rf"\b{word}\b", text, _I):
            found.append(target)
    if found:
        return found

    for word, group in TARGET_GROUPS.items():
        if re.search(rf"\b{word}\b", text, _I):
            return list(group)
    return None


def extract_families(text: str) -> List[str]:
    """Distinct colour families named in `text`, in order of appearance."""
    out: List[str] = []
    for tok in re.split(r"[^a-z]+", text.lower()):
        fam = color_family_from_word(tok) if tok else None
        if fam and fam not in out:
            out.append(fam)
    return out


def _first(pattern: str, text: str, group: int = 1) -> Optional[str]:
    m = re.search(pattern, text, _I)
    return m.group(group) if m else None


def _parse_shade(text: str) -> Optional[str]:
    return _first(rf"\b{_SHADE}\b", text)


def _parse_percent(text: str) -> Optional[float]:
    value = _first(r"(-?\d+(?:\.\d+)?)\s*%", text)
    return float(value) / 100 if value is not None else None


def _parse_px(text: str) -> Optional[float]:
    value = _first(r"(-?\d+(?:\.\d+)?)\s*px\b", text)
    return float(value) if value is not None else None


def _parse_by_px(text: str) -> Optional[float]:
    value = _first(r"(?:\bby|\bplus|\+)\s*(-?\d+(?:\.\d+)?)\s*px\b", text)
    return float(value) if value is not None else None


def _parse_number(text: str) -> Optional[float]:
    value = _first(r"(-?\d+(?:\.\d+)?)", text)
    return float(value) if value is not None else None


def _parse_keys(text: str, keys: List[str]) -> List[str]:
    return [k for k in keys if re.search(rf"\b{k}\b", text, _I)]


_DECREASE_WORDS = r"\b(decrease|reduce|less|lower|shrink|smaller|tighter|tighten|narrower)\b"
_INCREASE_WORDS = r"\b(increase|more|roomier|looser|loosen|bigger|larger|raise|grow|wider)\b"


def _signed(value: float, text: str) -> float:
    """Pixel deltas take their sign from direction words, not from the number."""
    if re.search(_DECREASE_WORDS, text, _I):
        return -abs(value)
    return value


# ── Classifiers (order is the contract) ──────────────────────────────────────

def _density(text: str) -> List[Operation]:
    if re.search(r"\b(compact|denser|dense)\b", text, _I):
        return [DensityPreset(level="compact")]
    if re.search(r"\bcozy\b", text, _I):
        return [DensityPreset(level="cozy")]
    if re.search(r"\bcomfortable\b", text, _I):
        return [DensityPreset(level="comfortable")]
    if re.search(r"\b(spacious|roomier|airy)\b", text, _I):
        return [DensityPreset(level="spacious")]
    return []


def _family_theme(text: str) -> List[Operation]:
    """'blue and gray theme' → neutral=gray, brand+accent=blue."""
    if not re.search(r"(theme|scheme|palette)", text, _I):
        return []
    if _EXPLICIT_TARGET_RE.search(text):
        return []

    fams = extract_families(text)
    neutrals = [f for f in fams if f in ("gray", "slate", "neutral")]
    chromatic = [f for f in fams if f not in ("gray", "slate", "neutral")]
    # "the neutral palette" names a target, not a family for brand and accent
    if not chromatic:
        return []

    if len(fams) >= 2:
        if neutrals and chromatic:
            return [
                PaletteReplaceByFamily(targets=["neutral"], to=neutrals[0]),
                PaletteReplaceByFamily(targets=["brand", "accent"], to=chromatic[0]),
            ]
        if not neutrals:
            return [
                PaletteReplaceByFamily(targets=["brand"], to=fams[0]),
                PaletteReplaceByFamily(targets=["accent"], to=fams[1]),
            ]
    elif len(fams) == 1:
        return [PaletteReplaceByFamily(targets=["brand", "accent"], to=fams[0])]
    return []


def _gradient(text: str) -> List[Operation]:
    if not re.search(r"gradient", text, _I):
        return []
    key = None
    for candidate in ("primary", "secondary", "accent", "neutral"):
        if re.search(rf"\b{candidate}\b", text, _I):
            key = candidate
            break
    if key is None:
        return []

    explicit = re.search(
        r"((?:linear|radial)-gradient\((?:[^()]|\([^()]*\))*\))", text, _I
    )
    if explicit:
        return [GradientSet(key=key, value=explicit.group(1))]

    if re.search(r"vertical|top\s*to\s*bottom|to\s*bottom", text, _I):
        angle: Optional[float] = 180
    elif re.search(r"horizontal|left\s*to\s*right|to\s*right", text, _I):
        angle = 90
    else:
        deg = _first(r"(-?\d+(?:\.\d+)?)\s*deg", text)
        angle = float(deg) if deg is not None else None

    palette = (resolve_targets(text) or ["brand"])[0]
    from_shade = _parse_shade(text) or "400"
    to_shade = _first(rf"\b{_SHADE}\b.*?(?:to|-|→)\s*{_SHADE}\b", text, group=2) or "600"
    return [GradientFromPalette(
        key=key,
        type="radial" if re.search(r"radial", text, _I) else "linear",
        angle_deg=angle,
        palette=palette,
        from_shade=from_shade,
        to_shade=to_shade,
    )]


def _overlay(text: str) -> List[Operation]:
    if not (re.search(r"\boverlay\b", text, _I) and re.search(r"opacity|opaque|transparen", text, _I)):
        return []

    if re.search(r"more\s+transparent|\b(decrease|reduce|lower|less|lighter|weaker|fade)\b", text, _I):
        direction: Optional[str] = "decrease"
    elif re.search(r"\b(increase|more|stronger|darker|raise|boost|heavier)\b", text, _I):
        direction = "increase"
    else:
        direction = None

    pct = _parse_percent(text)
    if pct is not None:
        if direction:
            return [OverlayOpacityScale(direction=direction, by_percent=abs(pct * 100))]
        return [OverlayOpacitySet(opacity=max(0.0, min(1.0, pct)))]

    val = _parse_number(text)
    if val is not None and val <= 1.0:
        return [OverlayOpacitySet(opacity=max(0.0, min(1.0, val)))]
    if val is not None and 1.0 < val <= 100.0:
        return [OverlayOpacitySet(opacity=max(0.0, min(1.0, val / 100)))]

    if direction:
        return [OverlayOpacityScale(direction=direction, magnitude=magnitude(text))]
    return []


def _palette_replace(text: str) -> List[Operation]:
    if not (
        re.search(r"\b(update|change|switch|set|make)\b", text, _I)
        and re.search(rf"\b{_TARGET_OR_GROUP_ALT}\b|\ball colou?rs\b", text, _I)
    ):
        return []
    targets = resolve_targets(text) or ["brand"]

    if "#" in text:
        hexes = re.findall(r"#[0-9a-f]{3,6}", text, _I)
        if len(hexes) == 10:
            return [PaletteReplaceWithList(targets=targets, hexes=hexes)]
        # "accent shade 500 to #hex" is a single-shade edit, handled further down
        if hexes and is_hex(hexes[0]) and _parse_shade(text) is None:
            return [PaletteReplaceByHex(targets=targets, hex=hexes[0])]

    named = re.search(
        rf"\b(?:make|set|change|update|switch)\s+(?:the\s+)?{_TARGET_ALT}(?:\s+(?:and|&)\s+(?:the\s+)?{_TARGET_ALT})*\s+"
        r"(?:colou?rs?|palettes?)\s+(?:to\s+)?([a-z-]+)",
        text, _I,
    )
    if named:
        fam = color_family_from_word(named.groups()[-1])
        if fam:
            return [PaletteReplaceByFamily(targets=targets, to=fam)]

    to_word = _first(r"\b(?:to|as|towards)\s+([a-z-]+)\b", text)
    if to_word:
        fam = color_family_from_word(to_word)
        if fam:
            return [PaletteReplaceByFamily(targets=targets, to=fam)]
    return []


def _shade_set_hex(text: str) -> List[Operation]:
    m = re.search(
        rf"\b(set|make|update|change)\b.*?\b{_TARGET_ALT}\b.*\b{_SHADE}\b.*?\b(to|as)\s*(#[0-9a-f]{{3,6}})",
        text, _I,
    )
    if not m or not is_hex(m.group(5)):
        return []
    targets = resolve_targets(text[: m.start(3)]) or ["brand"]
    return [ShadeSetHex(targets=targets, shade=m.group(3), hex=m.group(5))]


def _shade_adjust(text: str) -> List[Operation]:
    m = re.search(rf"\b{_TARGET_OR_GROUP_ALT}\b.*?\b{_SHADE}\b.*?\b(lighter|darker)\b", text, _I)
    if not m:
        return []
    targets = resolve_targets(text[: m.start(2)]) or ["brand"]
    return [ShadeAdjust(
        targets=targets,
        shade=m.group(2),
        direction=m.group(3).lower(),
        magnitude=magnitude(text),
    )]


_SATURATION_DOWN = (
    r"desaturate|muted|pastel|washed\s*out|less\s+saturated|less\s+vibrant"
    r"|(?:reduce|decrease|lower)\s+(?:the\s+)?saturation"
)
_SATURATION_UP = (
    r"\bsaturate\b|vibrant|more\s+saturated|(?:increase|boost|raise)\s+(?:the\s+)?saturation"
)


def _saturation(text: str) -> List[Operation]:
    if re.search(_SATURATION_DOWN, text, _I):
        direction = "decrease"
    elif re.search(_SATURATION_UP, text, _I):
        direction = "increase"
    else:
        return []
    return [PaletteSaturation(
        targets=resolve_targets(text) or ["accent"],
        direction=direction,
        magnitude=magnitude(text),
    )]


def _hue_shift(text: str) -> List[Operation]:
    if not re.search(r"warmer|cooler|shift\s*(?:the\s+)?hue", text, _I):
        return []
    if not (re.search(rf"\b{_TARGET_OR_GROUP_ALT}\b", text, _I) or _GENERIC_COLOR_REF_RE.search(text)):
        return []

    targets = resolve_targets(text) or ["brand"]
    degrees = _first(r"shift\s*(?:the\s+)?hue\s*(?:by\s*)?(-?\d+)", text)
    if degrees is not None:
        return [PaletteHueShift(targets=targets, shift=float(degrees))]
    if re.search(r"warmer", text, _I):
        return [PaletteHueShift(targets=targets, shift="warmer")]
    if re.search(r"cooler", text, _I):
        return [PaletteHueShift(targets=targets, shift="cooler")]
    return []


def _contrast(text: str) -> List[Operation]:
    if not re.search(r"\b(increase|boost|raise|higher|more)\b.*?\bcontrast\b", text, _I):
        return []
    return [PaletteContrast(targets=resolve_targets(text) or ["neutral"], magnitude=magnitude(text))]


def _spacing(text: str) -> List[Operation]:
    if not re.search(r"spacing|\bgaps?\b|gutters?|whitespace|white\s*space|density", text, _I):
        return []

    keys = _parse_keys(text, SPACING_KEYS)
    if keys:
        by_px = _parse_by_px(text)
        if by_px is not None:
            return [SpacingAdjustKeys(keys=keys, by_px=_signed(by_px, text))]
        set_px = _parse_px(text)
        if set_px is not None:
            return [SpacingAdjustKeys(keys=keys, set_px=set_px)]

    pct = _parse_percent(text)
    if pct is not None:
        if re.search(_DECREASE_WORDS, text, _I):
            direction = "decrease"
        elif re.search(_INCREASE_WORDS, text, _I):
            direction = "increase"
        else:
            direction = "increase" if pct >= 0 else "decrease"
        return [SpacingScale(direction=direction, factor=1 + abs(pct))]

    if re.search(r"\b(increase|more|roomier|looser|bigger|larger)\b", text, _I):
        return [SpacingScale(direction="increase", magnitude=magnitude(text))]
    if re.search(r"\b(decrease|reduce|less|tighter|smaller|shrink)\b", text, _I):
        return [SpacingScale(direction="decrease", magnitude=magnitude(text))]
    return []


def _radii(text: str) -> List[Operation]:
    if not re.search(r"radius|radii|corners?|rounded|\bpill\b|square|sharp(er)?", text, _I):
        return []
    if re.search(r"\bpill\b", text, _I):
        return [RadiiPreset(preset="pill")]
    if re.search(r"\bsquare\b|\bsharp(er)?\b", text, _I):
        return [RadiiPreset(preset="square")]

    keys = _parse_keys(text, RADII_KEYS)
    if keys:
        by_px = _parse_by_px(text)
        if by_px is not None:
            return [RadiiAdjustKeys(keys=keys, by_px=_signed(by_px, text))]
        set_px = _parse_px(text)
        if set_px is not None:
            return [RadiiAdjustKeys(keys=keys, set_px=set_px)]

    if re.search(r"\b(increase|more|rounder|bigger|larger)\b", text, _I):
        return [RadiiScale(direction="increase", magnitude=magnitude(text))]
    if re.search(r"\b(decrease|less|reduce|smaller)\b", text, _I):
        return [RadiiScale(direction="decrease", magnitude=magnitude(text))]
    return []


_FONT_PART_ALIASES: List[Tuple[str, str]] = [
    ("heading", r"(?:headings?|titles?)"),
    ("body", r"(?:body(?:\s+text)?)"),
    ("mono", r"(?:mono(?:space)?|code)"),
    ("display", r"(?:display)"),
]
_FAMILY_CHARS = r"[A-Za-z0-9 ,'-]"
_NOT_A_FAMILY = {"the", "a", "an", "my", "our", "its", "this", "that"}


def _font_family(text: str) -> List[Operation]:
    for part, alias in _FONT_PART_ALIASES:
        if not re.search(rf"\b{alias}\b", text, _I):
            continue
        m = re.search(
            rf"\b(?:use|set|make)\s+({_FAMILY_CHARS}+?)\s+"
            rf"(?:for\s+(?:the\s+)?{alias}|as\s+(?:the\s+)?{alias}|{alias}\s+font)\b",
            text, _I,
        ) or re.search(
            rf"\b{alias}\s+(?:font|typeface)s?\s+(?:to|as)\s+({_FAMILY_CHARS}+)",
            text, _I,
        )
        if m:
            family = m.group(1).strip(" ,'-")
            if family and family.lower() not in _NOT_A_FAMILY:
                return [FontFamilySet(part=part, family=family)]
    return []


def _fonts(text: str) -> List[Operation]:
    if not re.search(r"font|typeface|typography", text, _I):
        return []

    family_ops = _font_family(text)
    if family_ops:
        return family_ops

    keys = _parse_keys(text, FONT_SIZE_KEYS)
    if keys:
        by_px = _parse_by_px(text)
        if by_px is not None:
            return [FontSizeAdjust(keys=keys, by_px=_signed(by_px, text))]
        set_px = _parse_px(text)
        if set_px is not None:
            return [FontSizeAdjust(keys=keys, set_px=set_px)]
        if re.search(r"larger|bigger|increase|upsize", text, _I):
            direction = "larger"
        elif re.search(r"smaller|decrease|reduce|downsize", text, _I):
            direction = "smaller"
        else:
            direction = "larger"
        pct = _parse_percent(text)
        if pct is not None:
            return [FontSizeScaleAll(direction=direction, by_percent=abs(pct * 100))]
        return [FontSizeAdjust(keys=keys, direction=direction, magnitude=magnitude(text))]

    if re.search(r"larger|bigger|smaller|decrease|increase|reduce", text, _I):
        direction = "larger" if re.search(r"larger|bigger|increase", text, _I) else "smaller"
        pct = _parse_percent(text)
        if pct:
            return [FontSizeScaleAll(direction=direction, by_percent=abs(pct * 100))]
        return [FontSizeScaleAll(direction=direction, magnitude=magnitude(text))]

    weight = re.search(
        r"\b(hairline|thin|light|normal|medium|semibold|bold|extrabold|black)\b.*?(\d{3})", text, _I
    )
    if weight:
        return [FontWeightSet(key=weight.group(1).lower(), value=int(weight.group(2)))]
    return []


def _line_height(text: str) -> List[Operation]:
    if not re.search(r"line[-\s]?heights?|leading|looser|tighter|relaxed|snug|\btight\b", text, _I):
        return []

    if re.search(r"\bset\b", text, _I):
        key = _first(r"\b(tight|snug|relaxed)\b", text)
        value = _first(r"(\d+(?:\.\d+)?)\b", text)
        if key and value:
            return [LineHeightSet(key=key.lower(), value=float(value))]

    looser = re.search(r"looser|loosen|relaxed|more\s+space|increase|taller", text, _I)
    by = _parse_percent(text)
    return [LineHeightScale(
        direction="looser" if looser else "tighter",
        magnitude=None if by else magnitude(text),
        by=by if by else None,
    )]


def _shadows(text: str) -> List[Operation]:
    if not re.search(r"shadow|elevation|depth", text, _I):
        return []
    stronger = re.search(r"stronger|deeper|more\s+pronounced|heavier|darker|bigger|increase", text, _I)
    direction = "stronger" if stronger else "softer"
    keys = _parse_keys(text, SHADOW_KEYS)
    if keys:
        return [ShadowsStrengthKeys(keys=keys, direction=direction)]
    return [ShadowsStrength(direction=direction)]


def _borders(text: str) -> List[Operation]:
    if not re.search(r"border", text, _I):
        return []
    if re.search(r"thicker|heavier|wider|stronger", text, _I):
        return [BordersWidthScale(direction="thicker")]
    if re.search(r"thinner|lighter|narrower|softer", text, _I):
        return [BordersWidthScale(direction="thinner")]

    ops: List[Operation] = []
    thin = _first(r"\bthin\b.*?(\d+(?:\.\d+)?)\s*px", text)
    if thin is not None:
        ops.append(BordersWidthSet(which="thin", px=float(thin)))
    thick = _first(r"\bthick\b.*?(\d+(?:\.\d+)?)\s*px", text)
    if thick is not None:
        ops.append(BordersWidthSet(which="thick", px=float(thick)))
    style = _first(r"\b(solid|dashed|dotted|double|groove|ridge|inset|outset)\b", text)
    if style:
        ops.append(BordersStyleSet(style=style.lower()))
    return ops


def _animations(text: str) -> List[Operation]:
    if not re.search(r"animation|transition|motion", text, _I):
        return []

    pct = _parse_percent(text)
    if re.search(r"snappy|snappier|faster|quicker|speed\s*up", text, _I):
        if pct:
            return [AnimationDurationScale(direction="faster", by_percent=abs(pct * 100))]
        return [AnimationDurationScale(direction="faster", magnitude=magnitude(text))]
    if re.search(r"slower|slow\s*down|more\s+gentle|calmer", text, _I):
        if pct:
            return [AnimationDurationScale(direction="slower", by_percent=abs(pct * 100))]
        return [AnimationDurationScale(direction="slower", magnitude=magnitude(text))]

    set_ms = re.search(
        r"\b(fast|normal|slow)\b\s*(?:animations?\s*)?(?:duration\s*)?(?:to|=)\s*(\d+)\s*ms", text, _I
    )
    if set_ms:
        return [AnimationDurationSet(key=set_ms.group(1).lower(), ms=float(set_ms.group(2)))]

    easing = _first(r"\b(linear|ease-in-out|ease-in|ease-out|ease)\b", text)
    if easing:
        return [AnimationEasingSet(easing=easing.lower())]
    return []


def _breakpoints(text: str) -> List[Operation]:
    if not re.search(r"breakpoints?|mobile|tablet|desktop|laptop|ultrawide|\b2xl\b", text, _I):
        return []

    grow = _first(r"\b(?:increase|bump|raise|add|widen)\b.*?(\d+)\s*px", text)
    if grow is not None:
        return [BreakpointsScale(by_px=float(grow))]
    shrink = _first(r"\b(?:decrease|reduce|lower|shrink|narrow)\b.*?(\d+)\s*px", text)
    if shrink is not None:
        return [BreakpointsScale(by_px=-float(shrink))]

    ops: List[Operation] = []
    pairs = re.finditer(
        r"\b(sm|md|lg|xl|2xl|mobile|phone|tablet|desktop|laptop|ultrawide)\b.*?(?:to|=)\s*(\d+)\s*px",
        text, _I,
    )
    for m in pairs:
        raw = m.group(1).lower()
        ops.append(BreakpointsSet(key=BREAKPOINT_ALIASES.get(raw, raw), px=float(m.group(2))))
    return ops


CLASSIFIERS: List[Tuple[str, Callable[[str], List[Operation]]]] = [
    ("density", _density),
    ("family_theme", _family_theme),
    ("gradient", _gradient),
    ("overlay", _overlay),
    ("palette_replace", _palette_replace),
    ("shade_set_hex", _shade_set_hex),
    ("shade_adjust", _shade_adjust),
    ("saturation", _saturation),
    ("hue_shift", _hue_shift),
    ("contrast", _contrast),
    ("spacing", _spacing),
    ("radii", _radii),
    ("fonts", _fonts),
    ("line_height", _line_height),
    ("shadows", _shadows),
    ("borders", _borders),
    ("animations", _animations),
    ("breakpoints", _breakpoints),
]


# ── Public API ────────────────────────────────────────────────────────────────

def parse_clause(clause: str) -> List[Operation]:
    """Classify a single clause. The first classifier that yields operations wins."""
    text = normalise(clause)
    for name, classify in CLASSIFIERS:
        try:
            ops = classify(text)
        except ValueError as e:
            # pydantic ValidationError is a ValueError: an odd extraction, not a crash
            logger.warning(f"Classifier {name} rejected clause {clause!r}: {e}")
            continue
        if ops:
            logger.debug(f"Clause {clause!r} → {name} ({len(ops)} op(s))")
            return ops
    return []


def parse_instructions(instruction: str) -> List[Operation]:
    ops: List[Operation] = []
    for clause in segment(instruction):
        ops.extend(parse_clause(clause))
    return ops
