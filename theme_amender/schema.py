"""
schema.py - Structural validation for design-token documents.

A valid document has a `colors` section with a complete `brand` palette.
Every other palette that is present must also carry all ten shades
(50–900) as 3- or 6-digit hex. Other sections are optional mappings,
and unknown keys pass through untouched.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    field_validator,
    model_validator,
)

HexColor = Annotated[str, StringConstraints(pattern=r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")]


class TokenSchemaError(ValueError):
    """Raised when a document does not satisfy the token schema."""

    def __init__(self, message: str, errors: Optional[List[dict]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


# ── Pydantic schema ───────────────────────────────────────────────────────────

class Palette(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    s50: HexColor = Field(alias="50")
    s100: HexColor = Field(alias="100")
    s200: HexColor = Field(alias="200")
    s300: HexColor = Field(alias="300")
    s400: HexColor = Field(alias="400")
    s500: HexColor = Field(alias="500")
    s600: HexColor = Field(alias="600")
    s700: HexColor = Field(alias="700")
    s800: HexColor = Field(alias="800")
    s900: HexColor = Field(alias="900")


class Colors(BaseModel):
    model_config = ConfigDict(extra="allow")

    brand: Palette
    accent: Optional[Palette] = None
    neutral: Optional[Palette] = None
    success: Optional[Palette] = None
    warning: Optional[Palette] = None
    error: Optional[Palette] = None
    info: Optional[Palette] = None

    @model_validator(mode="after")
    def _check_extra_palettes(self) -> "Colors":
        # scalar colours (black, white, ...) are fine; nested mappings must be full palettes
        for name, value in (self.model_extra or {}).items():
            if isinstance(value, dict):
                try:
                    Palette.model_validate(value)
                except ValidationError as e:
                    raise ValueError(f"colors.{name} is not a complete palette") from e
            elif not isinstance(value, str):
                raise ValueError(f"colors.{name} must be a colour string or a palette")
        return self


class Borders(BaseModel):
    model_config = ConfigDict(extra="allow")

    widths: Optional[Dict[str, Any]] = None
    styles: Optional[Dict[str, Any]] = None


class Animations(BaseModel):
    model_config = ConfigDict(extra="allow")

    duration: Optional[Dict[str, Any]] = None
    easing: Optional[Dict[str, Any]] = None


class ThemeTokens(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    colors: Colors
    spacing: Optional[Dict[str, Any]] = None
    radii: Optional[Dict[str, Any]] = None
    fonts: Optional[Dict[str, str]] = None
    font_sizes: Optional[Dict[str, Any]] = Field(default=None, alias="fontSizes")
    font_weights: Optional[Dict[str, Any]] = Field(default=None, alias="fontWeights")
    line_heights: Optional[Dict[str, Any]] = Field(default=None, alias="lineHeights")
    shadows: Optional[Dict[str, Any]] = None
    borders: Optional[Borders] = None
    gradients: Optional[Dict[str, Any]] = None
    backgrounds: Optional[Dict[str, Any]] = None
    animations: Optional[Animations] = None
    breakpoints: Optional[Dict[str, Any]] = None

    @field_validator("fonts")
    @classmethod
    def _fonts_not_blank(cls, v: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if v is not None:
            blank = [k for k, family in v.items() if not family.strip()]
            if blank:
                raise ValueError(f"empty font family for: {', '.join(blank)}")
        return v


# ── Public API ────────────────────────────────────────────────────────────────

def _format_errors(e: ValidationError) -> str:
    parts = []
    for err in e.errors()[:5]:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc or '<root>'}: {err.get('msg')}")
    more = len(e.errors()) - len(parts)
    if more > 0:
        parts.append(f"... and {more} more")
    return "; ".join(parts)


def validate_tokens(document: Any) -> ThemeTokens:
    """Validate `document`; raise TokenSchemaError with a readable summary on failure."""
    if not isinstance(document, dict):
        raise TokenSchemaError("Token document must be a JSON object")
    try:
        return ThemeTokens.model_validate(document)
    except ValidationError as e:
        raise TokenSchemaError(f"Invalid token document: {_format_errors(e)}", e.errors()) from e


def is_valid_tokens(document: Any) -> bool:
    try:
        validate_tokens(document)
    except TokenSchemaError:
        return False
    return True
