"""
defaults.py - Baseline token document.

Every value sits at the preferred point of its range, so a freshly initialised
theme can be amended in either direction.
"""

from __future__ import annotations

from typing import Any, Dict

from .color_math import hex_to_rgba_string, palette_from_hue

PALETTE_FAMILIES = {
    "brand": "blue",
    "accent": "violet",
    "neutral": "slate",
    "success": "green",
    "warning": "amber",
    "error": "red",
    "info": "cyan",
}


def default_theme() -> Dict[str, Any]:
    """A complete, schema-valid token document. Returns a fresh dict on every call."""
    colors: Dict[str, Any] = {name: palette_from_hue(family) for name, family in PALETTE_FAMILIES.items()}
    colors["black"] = "#000000"
    colors["white"] = "#ffffff"

    brand, accent, neutral = colors["brand"], colors["accent"], colors["neutral"]

    return {
        "colors": colors,
        "spacing": {
            "xs": "4px", "sm": "8px", "md": "16px", "lg": "24px",
            "xl": "32px", "2xl": "48px", "3xl": "64px",
        },
        "radii": {
            "none": "0px", "sm": "4px", "md": "8px", "lg": "12px",
            "xl": "16px", "2xl": "24px", "full": "9999px",
        },
        "fonts": {
            "heading": "Inter",
            "body": "Inter",
            "mono": "JetBrains Mono",
            "display": "Playfair Display",
        },
        "fontSizes": {
            "xs": "12px", "sm": "14px", "md": "16px", "lg": "18px", "xl": "20px",
            "2xl": "24px", "3xl": "30px", "4xl": "36px", "5xl": "48px", "6xl": "60px",
        },
        "fontWeights": {
            "hairline": "100", "thin": "200", "light": "300", "normal": "400", "medium": "500",
            "semibold": "600", "bold": "700", "extrabold": "800", "black": "900",
        },
        "lineHeights": {
            "none": "1", "tight": "1.25", "snug": "1.375",
            "normal": "1.5", "relaxed": "1.625", "loose": "2",
        },
        "shadows": {
            "xs": "0 1px 2px rgba(0, 0, 0, 0.05)",
            "sm": "0 1px 3px rgba(0, 0, 0, 0.1)",
            "md": "0 4px 6px rgba(0, 0, 0, 0.1)",
            "lg": "0 10px 15px rgba(0, 0, 0, 0.1)",
            "xl": "0 20px 25px rgba(0, 0, 0, 0.1)",
            "2xl": "0 25px 50px rgba(0, 0, 0, 0.25)",
            "inner": "inset 0 2px 4px rgba(0, 0, 0, 0.06)",
            "outline": "0 0 0 3px rgba(66, 153, 225, 0.5)",
        },
        "borders": {
            "widths": {"none": "0px", "thin": "1px", "thick": "3px"},
            "styles": {
                "solid": "solid", "dashed": "dashed", "dotted": "dotted", "double": "double",
                "groove": "groove", "ridge": "ridge", "inset": "inset", "outset": "outset",
            },
        },
        "gradients": {
            "primary": f"linear-gradient(135deg, {brand['400']}, {brand['600']})",
            "secondary": f"linear-gradient(135deg, {accent['400']}, {accent['600']})",
            "accent": f"linear-gradient(135deg, {colors['info']['400']}, {colors['success']['500']})",
            "neutral": f"linear-gradient(180deg, {neutral['50']}, {neutral['200']})",
        },
        "backgrounds": {
            "primary": hex_to_rgba_string(brand["50"], 0.95),
            "secondary": hex_to_rgba_string(neutral["50"], 0.95),
            "tertiary": hex_to_rgba_string(neutral["100"], 0.9),
            "overlay": hex_to_rgba_string(neutral["900"], 0.5),
        },
        "animations": {
            "duration": {"fast": "150ms", "normal": "300ms", "slow": "500ms"},
            "easing": {
                "linear": "linear", "ease": "ease", "easeIn": "ease-in",
                "easeOut": "ease-out", "easeInOut": "ease-in-out",
            },
        },
        "breakpoints": {
            "sm": "640px", "md": "768px", "lg": "1024px", "xl": "1280px", "2xl": "1536px",
        },
    }
