"""
scope.py - Allow-lists for the assisted fallback path.

The fallback may only touch document paths listed here. Paths come either
from explicit scope tags supplied by the caller, or from keyword detection on
the instruction. When nothing is detected the list falls back to brand + accent
colours, never to the whole document.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, List, Literal

from .instruction_parser import extract_families, resolve_targets
from .json_patch import split_pointer

logger = logging.getLogger(__name__)

ScopeTag = Literal[
    "notifications", "spacing", "radii", "brandColors", "accentColors", "neutralColors",
    "colors", "typography", "layout", "shadows", "borders", "animations", "gradients",
    "backgrounds", "breakpoints",
]

TYPOGRAPHY_PATHS = ["/fonts", "/fontSizes", "/fontWeights", "/lineHeights"]

SCOPE_PATHS: Dict[str, List[str]] = {
    "notifications": ["/colors/success", "/colors/warning", "/colors/error", "/colors/info"],
    "spacing": ["/spacing"],
    "radii": ["/radii"],
    "brandColors": ["/colors/brand"],
    "accentColors": ["/colors/accent"],
    "neutralColors": ["/colors/neutral"],
    "colors": ["/colors"],
    "typography": TYPOGRAPHY_PATHS,
    "layout": ["/breakpoints"],
    "shadows": ["/shadows"],
    "borders": ["/borders"],
    "animations": ["/animations"],
    "gradients": ["/gradients"],
    "backgrounds": ["/backgrounds"],
    "breakpoints": ["/breakpoints"],
}

DEFAULT_ALLOWED_PATHS = ["/colors/brand", "/colors/accent"]

# Section keyword → paths, in the order sections are reported.
_SECTION_KEYWORDS = [
    (r"spacing|\bgaps?\b|gutters?|padding|margins?|whitespace|white\s*space|density|compact|spacious",
     ["/spacing"]),
    (r"radius|radii|corners?|rounded|\bpill\b", ["/radii"]),
    (r"fonts?|typeface|typography|heading|line[-\s]?height|leading|text\s+size", TYPOGRAPHY_PATHS),
    (r"shadows?|elevation|depth", ["/shadows"]),
    (r"borders?", ["/borders"]),
    (r"animations?|transitions?|motion|easing|duration", ["/animations"]),
    (r"breakpoints?|mobile|tablet|desktop|layout|responsive", ["/breakpoints"]),
    (r"gradients?", ["/gradients"]),
    (r"backgrounds?|overlay", ["/backgrounds"]),
]
_COLOR_KEYWORDS = re.compile(
    r"colou?rs?|palettes?|\bhues?\b|warm|cool|saturat|vibrant|muted|pastel|contrast|shades?|tints?"
    r"|\b(brand|primary|accent|secondary|neutral|success|warning|error|danger|info"
    r"|notifications|alerts|statuses)\b",
    re.IGNORECASE,
)


def _unique(paths: List[str]) -> List[str]:
    out: List[str] = []
    for p in paths:
        if p not in out:
            out.append(p)
    return out


def resolve_scope(tags: List[str]) -> List[str]:
    """Scope tags → allow-listed JSON pointer prefixes."""
    paths: List[str] = []
    for tag in tags:
        if tag not in SCOPE_PATHS:
            raise ValueError(f"Unknown scope tag: {tag}")
        paths.extend(SCOPE_PATHS[tag])
    resolved = _unique(paths)
    logger.debug(f"Scope {tags} → {resolved}")
    return resolved


def detect_sections(instruction: str) -> List[str]:
    """Keyword-detect the sections an instruction is about; default to brand + accent."""
    text = instruction or ""
    paths: List[str] = []

    if _COLOR_KEYWORDS.search(text) or extract_families(text):
        targets = resolve_targets(text) or ["brand", "accent"]
        paths.extend(f"/colors/{t}" for t in targets)

    for pattern, section_paths in _SECTION_KEYWORDS:
        if re.search(pattern, text, re.IGNORECASE):
            paths.extend(section_paths)

    if not paths:
        logger.info(f"No section detected in {instruction!r}; using default allow-list")
        return list(DEFAULT_ALLOWED_PATHS)
    return _unique(paths)


# ── Subtrees ──────────────────────────────────────────────────────────────────

def pick_subtree(tokens: Dict[str, Any], prefixes: List[str]) -> Dict[str, Any]:
    """Copy of only the parts of `tokens` at `prefixes`, keeping their nesting."""
    out: Dict[str, Any] = {}
    for prefix in prefixes:
        parts = split_pointer(prefix)
        src: Any = tokens
        for key in parts:
            if isinstance(src, dict) and key in src:
                src = src[key]
            else:
                logger.debug(f"Skipping missing path {prefix}")
                src = None
                break
        if src is None or not parts:
            continue

        cur = out
        for key in parts[:-1]:
            cur = cur.setdefault(key, {})
        cur[parts[-1]] = copy.deepcopy(src)
    return out


def apply_subtree(tokens: Dict[str, Any], prefixes: List[str], subtree: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge `subtree` back into a copy of `tokens`, path by path.

    Only values at the allow-listed prefixes are taken from `subtree`; anything
    else it carries is ignored.
    """
    out = copy.deepcopy(tokens)
    for prefix in prefixes:
        parts = split_pointer(prefix)
        if not parts:
            continue
        dst = out
        src: Any = subtree
        for key in parts[:-1]:
            if not isinstance(dst.get(key), dict):
                dst[key] = {}
            dst = dst[key]
            src = src.get(key) if isinstance(src, dict) else None
        last = parts[-1]
        if isinstance(src, dict) and last in src:
            dst[last] = copy.deepcopy(src[last])
        else:
            logger.debug(f"Regenerated subtree has no value for {prefix}")
    return out
