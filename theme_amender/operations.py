"""
operations.py - Closed vocabulary of typed theme edits.

Every instruction the parser understands becomes one of the models below.
Each carries a literal `kind` tag, and `Operation` is the discriminated union
over all of them, so the patcher can dispatch exhaustively on `op.kind`.

Magnitude words map through fixed tables (see the bottom of this module) to
concrete numeric deltas / factors. Operations are plain data: nothing here
touches a token document.
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field

Magnitude = Literal["slight", "moderate", "strong"]
TargetPalette = Literal["brand", "accent", "neutral", "success", "warning", "error", "info"]
ShadeKey = Literal["50", "100", "200", "300", "400", "500", "600", "700", "800", "900"]
GradientKey = Literal["primary", "secondary", "accent", "neutral"]
SpacingKey = Literal["xs", "sm", "md", "lg", "xl", "2xl", "3xl"]
RadiusKey = Literal["sm", "md", "lg", "xl", "2xl"]
FontSizeKey = Literal["xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl"]
FontWeightKey = Literal[
    "hairline", "thin", "light", "normal", "medium", "semibold", "bold", "extrabold", "black"
]
ShadowKey = Literal["xs", "sm", "md", "lg", "xl", "2xl"]
BorderStyle = Literal["solid", "dashed", "dotted", "double", "groove", "ridge", "inset", "outset"]
EasingName = Literal["linear", "ease", "ease-in", "ease-out", "ease-in-out"]
BreakpointKey = Literal["sm", "md", "lg", "xl", "2xl"]

ALL_PALETTES: List[str] = list(get_args(TargetPalette))
STATUS_PALETTES: List[str] = ["success", "warning", "error", "info"]


class _Op(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# ── Colors ────────────────────────────────────────────────────────────────────

class PaletteReplaceByFamily(_Op):
    kind: Literal["palette_replace_by_family"] = "palette_replace_by_family"
    targets: List[TargetPalette]
    to: str = Field(description="Canonical hue family, e.g. 'blue'")
    saturation: Optional[Union[Magnitude, float]] = None


class PaletteReplaceByHex(_Op):
    kind: Literal["palette_replace_by_hex"] = "palette_replace_by_hex"
    targets: List[TargetPalette]
    hex: str


class PaletteReplaceWithList(_Op):
    kind: Literal["palette_replace_with_list"] = "palette_replace_with_list"
    targets: List[TargetPalette]
    hexes: List[str] = Field(description="Ten colours, assigned to shades 50→900 in order")


class PaletteSaturation(_Op):
    kind: Literal["palette_saturation"] = "palette_saturation"
    targets: List[TargetPalette]
    direction: Literal["increase", "decrease"]
    magnitude: Magnitude = "slight"


class PaletteHueShift(_Op):
    kind: Literal["palette_hue_shift"] = "palette_hue_shift"
    targets: List[TargetPalette]
    shift: Union[Literal["warmer", "cooler"], float]


class PaletteContrast(_Op):
    kind: Literal["palette_contrast"] = "palette_contrast"
    targets: List[TargetPalette]
    magnitude: Magnitude = "slight"


class ShadeAdjust(_Op):
    kind: Literal["shade_adjust"] = "shade_adjust"
    targets: List[TargetPalette]
    shade: ShadeKey
    direction: Literal["lighter", "darker"]
    magnitude: Magnitude = "slight"


class ShadeSetHex(_Op):
    kind: Literal["shade_set_hex"] = "shade_set_hex"
    targets: List[TargetPalette]
    shade: ShadeKey
    hex: str


# ── Gradients / overlay ───────────────────────────────────────────────────────

class GradientSet(_Op):
    kind: Literal["gradient_set"] = "gradient_set"
    key: GradientKey
    value: str


class GradientFromPalette(_Op):
    kind: Literal["gradient_from_palette"] = "gradient_from_palette"
    key: GradientKey
    type: Literal["linear", "radial"] = "linear"
    angle_deg: Optional[float] = None
    palette: TargetPalette = "brand"
    from_shade: ShadeKey = "400"
    to_shade: ShadeKey = "600"


class OverlayOpacitySet(_Op):
    kind: Literal["overlay_opacity_set"] = "overlay_opacity_set"
    opacity: float = Field(ge=0, le=1)


class OverlayOpacityScale(_Op):
    kind: Literal["overlay_opacity_scale"] = "overlay_opacity_scale"
    direction: Literal["increase", "decrease"]
    by_percent: Optional[float] = None
    magnitude: Optional[Magnitude] = None


# ── Spacing / radii ───────────────────────────────────────────────────────────

class SpacingScale(_Op):
    kind: Literal["spacing_scale"] = "spacing_scale"
    direction: Literal["increase", "decrease"]
    factor: Optional[float] = Field(default=None, gt=0)
    magnitude: Optional[Magnitude] = None


class SpacingAdjustKeys(_Op):
    kind: Literal["spacing_adjust_keys"] = "spacing_adjust_keys"
    keys: List[SpacingKey]
    by_px: Optional[float] = None
    set_px: Optional[float] = None


class RadiiScale(_Op):
    kind: Literal["radii_scale"] = "radii_scale"
    direction: Literal["increase", "decrease"]
    magnitude: Union[Magnitude, float] = "slight"


class RadiiAdjustKeys(_Op):
    kind: Literal["radii_adjust_keys"] = "radii_adjust_keys"
    keys: List[RadiusKey]
    by_px: Optional[float] = None
    set_px: Optional[float] = None


class RadiiPreset(_Op):
    kind: Literal["radii_preset"] = "radii_preset"
    preset: Literal["pill", "square"]


# ── Typography ────────────────────────────────────────────────────────────────

class FontFamilySet(_Op):
    kind: Literal["font_family_set"] = "font_family_set"
    part: Literal["heading", "body", "mono", "display"]
    family: str


class FontSizeScaleAll(_Op):
    kind: Literal["font_size_scale_all"] = "font_size_scale_all"
    direction: Literal["larger", "smaller"]
    magnitude: Optional[Magnitude] = None
    by_percent: Optional[float] = None


class FontSizeAdjust(_Op):
    kind: Literal["font_size_adjust"] = "font_size_adjust"
    keys: List[FontSizeKey]
    direction: Optional[Literal["larger", "smaller"]] = None
    magnitude: Optional[Magnitude] = None
    by_px: Optional[float] = None
    set_px: Optional[float] = None


class FontWeightSet(_Op):
    kind: Literal["font_weight_set"] = "font_weight_set"
    key: FontWeightKey
    value: int


class LineHeightScale(_Op):
    kind: Literal["line_height_scale"] = "line_height_scale"
    direction: Literal["looser", "tighter"]
    magnitude: Optional[Magnitude] = None
    by: Optional[float] = None


class LineHeightSet(_Op):
    kind: Literal["line_height_set"] = "line_height_set"
    key: Literal["tight", "snug", "relaxed"]
    value: float


# ── Shadows / borders ─────────────────────────────────────────────────────────

class ShadowsStrength(_Op):
    kind: Literal["shadows_strength"] = "shadows_strength"
    direction: Literal["stronger", "softer"]


class ShadowsStrengthKeys(_Op):
    kind: Literal["shadows_strength_keys"] = "shadows_strength_keys"
    keys: List[ShadowKey]
    direction: Literal["stronger", "softer"]


class BordersWidthScale(_Op):
    kind: Literal["borders_width_scale"] = "borders_width_scale"
    direction: Literal["thicker", "thinner"]


class BordersWidthSet(_Op):
    kind: Literal["borders_width_set"] = "borders_width_set"
    which: Literal["thin", "thick"]
    px: float


class BordersStyleSet(_Op):
    kind: Literal["borders_style_set"] = "borders_style_set"
    style: BorderStyle


# ── Animations / breakpoints ──────────────────────────────────────────────────

class AnimationDurationScale(_Op):
    kind: Literal["animation_duration_scale"] = "animation_duration_scale"
    direction: Literal["faster", "slower"]
    magnitude: Optional[Magnitude] = None
    by_percent: Optional[float] = None


class AnimationDurationSet(_Op):
    kind: Literal["animation_duration_set"] = "animation_duration_set"
    key: Literal["fast", "normal", "slow"]
    ms: float


class AnimationEasingSet(_Op):
    kind: Literal["animation_easing_set"] = "animation_easing_set"
    easing: EasingName


class BreakpointsScale(_Op):
    kind: Literal["breakpoints_scale"] = "breakpoints_scale"
    by_px: float


class BreakpointsSet(_Op):
    kind: Literal["breakpoints_set"] = "breakpoints_set"
    key: BreakpointKey
    px: float


# ── Composite ─────────────────────────────────────────────────────────────────

class DensityPreset(_Op):
    kind: Literal["density_preset"] = "density_preset"
    level: Literal["compact", "cozy", "comfortable", "spacious"]


Operation = Annotated[
    Union[
        PaletteReplaceByFamily, PaletteReplaceByHex, PaletteReplaceWithList,
        PaletteSaturation, PaletteHueShift, PaletteContrast, ShadeAdjust, ShadeSetHex,
        GradientSet, GradientFromPalette,
        OverlayOpacitySet, OverlayOpacityScale,
        SpacingScale, SpacingAdjustKeys,
        RadiiScale, RadiiAdjustKeys, RadiiPreset,
        FontFamilySet, FontSizeScaleAll, FontSizeAdjust, FontWeightSet,
        LineHeightScale, LineHeightSet,
        ShadowsStrength, ShadowsStrengthKeys,
        BordersWidthScale, BordersWidthSet, BordersStyleSet,
        AnimationDurationScale, AnimationDurationSet, AnimationEasingSet,
        BreakpointsScale, BreakpointsSet,
        DensityPreset,
    ],
    Field(discriminator="kind"),
]

OPERATION_MODELS = get_args(get_args(Operation)[0])
OPERATION_KINDS: List[str] = [m.model_fields["kind"].default for m in OPERATION_MODELS]


def dump_operations(ops: list) -> List[dict]:
    return [op.model_dump(exclude_none=True) for op in ops]


# ── Magnitude tables ──────────────────────────────────────────────────────────

LIGHTNESS_DELTA: Dict[str, float] = {"slight": 4, "moderate": 8, "strong": 12}
SCALE_FACTOR: Dict[str, float] = {"slight": 1.10, "moderate": 1.18, "strong": 1.30}
LINE_HEIGHT_DELTA: Dict[str, float] = {"slight": 0.08, "moderate": 0.12, "strong": 0.20}
OVERLAY_DELTA: Dict[str, float] = {"slight": 0.05, "moderate": 0.10, "strong": 0.15}
OVERLAY_DELTA_DEFAULT = 0.08
FONT_SIZE_STEP: Dict[str, float] = {"slight": 2, "moderate": 4, "strong": 6}
FAMILY_SATURATION: Dict[str, float] = {"slight": 55, "moderate": 65, "strong": 75}
HUE_SHIFT_DEG: Dict[str, float] = {"warmer": -8, "cooler": 8}
