"""
swatches.py - Before / after palette grid for amendment previews.

Layout:
  - Header row with the shade stops 50 → 900
  - Two rows per changed palette: "before" then "after"
  - Hex value printed on each swatch, shade 500 outlined
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .color_math import SHADE_KEYS, hex_to_rgb, is_hex

Palette = Dict[str, str]


def _load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont:
    candidates = (
        [
            "/System/Library/Fonts/HelveticaNeue.ttc",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
        ] if bold else [
            "/System/Library/Fonts/HelveticaNeue.ttc",
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
        ]
    )
    for path in candidates:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default()


def _brightness(rgb: Tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def _palettes(colors: Dict[str, object]) -> Dict[str, Palette]:
    return {name: value for name, value in (colors or {}).items() if isinstance(value, dict)}


def changed_palettes(before: Dict[str, object], after: Dict[str, object]) -> List[Tuple[str, Palette, Palette]]:
    """(name, before, after) for every palette whose shades differ."""
    old, new = _palettes(before), _palettes(after)
    rows = []
    for name in list(new) + [n for n in old if n not in new]:
        if old.get(name) != new.get(name):
            rows.append((name, old.get(name, {}), new.get(name, {})))
    return rows


def render_palette_diff(
    before: Dict[str, object],
    after: Dict[str, object],
    width: int = 1600,
    row_height: int = 72,
    header_height: int = 44,
) -> Image.Image:
    """
    Render changed palettes as a before/after grid.

    Args:
        before, after: the `colors` sections of the two documents
    Returns:
        PIL Image (RGB). With no palette changes, every `after` palette is drawn once.
    """
    rows: List[Tuple[str, Palette]] = []
    for name, old, new in changed_palettes(before, after):
        rows.append((f"{name} (before)", old))
        rows.append((f"{name} (after)", new))
    if not rows:
        rows = list(_palettes(after).items())

    n_stops  = len(SHADE_KEYS)
    NAME_COL = 180
    GAP      = 2
    BG       = (12, 12, 16)
    total_h  = header_height + max(len(rows), 1) * (row_height + GAP)

    img  = Image.new("RGB", (width, total_h), BG)
    draw = ImageDraw.Draw(img)

    swatch_w = (width - NAME_COL - (n_stops - 1) * GAP) // n_stops

    font_hdr  = _load_font(16, bold=True)
    font_stop = _load_font(13)
    font_hex  = _load_font(11)
    font_name = _load_font(13, bold=True)

    draw.text((8, 12), "PALETTES", fill=(70, 70, 85), font=font_hdr)
    for si, stop in enumerate(SHADE_KEYS):
        sx = NAME_COL + si * (swatch_w + GAP)
        bb = draw.textbbox((0, 0), stop, font=font_stop)
        draw.text((sx + (swatch_w - (bb[2] - bb[0])) // 2, (header_height - 16) // 2),
                  stop, fill=(80, 80, 95), font=font_stop)

    for row_i, (label, shades) in enumerate(rows):
        row_y = header_height + row_i * (row_height + GAP)
        draw.rectangle([0, row_y, NAME_COL - 1, row_y + row_height - 1], fill=(20, 20, 26))
        draw.text((10, row_y + row_height // 2 - 8), label, fill=(200, 200, 210), font=font_name)

        for si, stop in enumerate(SHADE_KEYS):
            sx = NAME_COL + si * (swatch_w + GAP)
            hex_val = shades.get(stop)
            if not is_hex(hex_val):
                # missing shade: hatched cell
                draw.rectangle([sx, row_y, sx + swatch_w - 1, row_y + row_height - 1], outline=(60, 60, 72))
                draw.line([(sx, row_y), (sx + swatch_w - 1, row_y + row_height - 1)], fill=(60, 60, 72))
                continue

            rgb = hex_to_rgb(hex_val)
            br = _brightness(rgb)
            draw.rectangle([sx, row_y, sx + swatch_w - 1, row_y + row_height - 1], fill=rgb)
            if stop == "500":
                draw.rectangle(
                    [sx + 2, row_y + 2, sx + swatch_w - 3, row_y + row_height - 3],
                    outline=(255, 255, 255) if br < 128 else (0, 0, 0),
                    width=2,
                )
            hex_label = hex_val.upper()
            bb = draw.textbbox((0, 0), hex_label, font=font_hex)
            draw.text(
                (sx + (swatch_w - (bb[2] - bb[0])) // 2, row_y + row_height - 18),
                hex_label,
                fill=(255, 255, 255) if br < 145 else (20, 20, 20),
                font=font_hex,
            )

    return img


def save_palette_diff(
    before: Dict[str, object],
    after: Dict[str, object],
    output_path: Union[str, Path],
) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    render_palette_diff(before, after).save(str(output_path), format="PNG")
    return output_path
