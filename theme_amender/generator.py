"""
generator.py - Gemini-backed fallback generator.

Used only when the deterministic parser finds nothing to do. Three calls:

  regenerate(instruction, subtree)                      → same-keyed subtree
  propose_patch(instruction, allowed_paths, context)    → raw JSON Patch (untrusted)
  generate_theme(description)                           → full token document

Nothing returned here is trusted: the amender validates every patch against
its allow-list and every document against the token schema.
"""

from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Optional, Protocol

from google import genai
from google.genai import types

from .schema import validate_tokens

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class GeneratorError(RuntimeError):
    """The model call failed or returned something that is not JSON."""


class FallbackGenerator(Protocol):
    def regenerate(self, instruction: str, subtree: Dict[str, Any]) -> Dict[str, Any]: ...

    def propose_patch(self, instruction: str, allowed_paths: List[str], context: Dict[str, Any]) -> Any: ...


# ── Prompts ───────────────────────────────────────────────────────────────────

REGEN_PROMPT = """You edit design-token JSON.

Instruction: {instruction}

Current subtree:
{subtree}

Return ONLY valid JSON with exactly the same keys as the current subtree, with
values changed to satisfy the instruction. Colour palettes keep all ten shades
(50, 100, 200, 300, 400, 500, 600, 700, 800, 900) as hex strings. No prose."""

PATCH_PROMPT = """You are a JSON Patch expert.

Instruction: {instruction}
{multi_value_note}
Allowed prefixes: {allowed}
Context:
{context}

Return ONLY a valid RFC 6902 JSON Patch array. Each operation has:
  - "op": one of "replace", "add", "remove"
  - "path": a JSON pointer that equals or starts with one of the allowed prefixes
  - "value": required for replace and add
When a colour palette changes, replace the WHOLE palette (all ten shades 50-900).

Examples:
[{{"op":"replace","path":"/colors/accent","value":{{"50":"#e6f7e6","100":"#ccefcc","200":"#b3e7b3","300":"#99df99","400":"#80d780","500":"#66cf66","600":"#4dc74d","700":"#33bf33","800":"#1ab71a","900":"#00af00"}}}}]
[{{"op":"replace","path":"/fontSizes/xl","value":"22px"}},{{"op":"replace","path":"/fontSizes/2xl","value":"26px"}}]"""

MULTI_VALUE_NOTE = """
This instruction mentions MULTIPLE values. Create a separate operation for EACH one.
"""

GENERATE_PROMPT = """You are an expert UI designer. Create a complete design-token theme for:
"{description}"

Return ONLY valid JSON with these sections and ranges (px unless noted):
  colors: brand, accent, neutral, success, warning, error, info, each with shades
          50, 100, 200, 300, 400, 500, 600, 700, 800, 900 as 6-digit hex, light to dark
  spacing: xs 2-8 (prefer 4), sm 6-12 (8), md 12-20 (16), lg 20-32 (24),
           xl 28-40 (32), 2xl 40-56 (48), 3xl 56-80 (64)
  radii: none "0px", sm 2-6 (4), md 6-12 (8), lg 10-18 (12), xl 14-24 (16),
         2xl 20-32 (24), full "9999px"
  fonts: heading, body (modern sans-serif), mono (monospace), display (serif)
  fontSizes: xs 10-14 (12), sm 12-16 (14), md 14-18 (16), lg 16-22 (18), xl 18-24 (20),
             2xl 22-28 (24), 3xl 26-36 (30), 4xl 32-42 (36), 5xl 42-54 (48), 6xl 54-72 (60)
  fontWeights: hairline "100" through black "900"
  lineHeights (unitless): none "1", tight 1.1-1.3, snug 1.3-1.4, normal "1.5",
                          relaxed 1.5-1.7, loose "2"
  shadows: xs, sm, md, lg, xl, 2xl, inner, outline as CSS box-shadow strings
  borders: widths {{none, thin 1-2, thick 2-4}}, styles {{solid, dashed, dotted, double}}
  gradients: primary, secondary, accent, neutral as CSS linear-gradient strings
  backgrounds: primary, secondary, tertiary, overlay (rgba, overlay alpha 0.4-0.7)
  animations: duration {{fast 100-200ms, normal 250-400ms, slow 400-700ms}}, easing map
  breakpoints: sm 600-680 (640), md 720-800 (768), lg 960-1080 (1024),
               xl 1200-1360 (1280), 2xl 1440-1600 (1536)

Stay inside the ranges. Make it cohesive and fitting for the description."""

_MULTI_VALUE_RE = re.compile(r"\band\b|&|,|\bplus\b|\+", re.IGNORECASE)


# ── Gemini generator ──────────────────────────────────────────────────────────

def extract_json(text: Optional[str]) -> Any:
    """Parse a model reply, tolerating a ```json fence around it."""
    raw = (text or "").strip()
    if not raw:
        raise GeneratorError("Empty model response")
    if raw.startswith("```"):
        raw = raw.split("```")[1]
        if raw.startswith("json"):
            raw = raw[4:]
        raw = raw.strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise GeneratorError(f"Model response is not valid JSON: {e}") from e


class GeminiThemeGenerator:
    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL, client: Any = None):
        self.model = model
        if client is not None:
            self.client = client
            return
        api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not api_key:
            raise GeneratorError("GEMINI_API_KEY not set")
        self.client = genai.Client(api_key=api_key)

    def _generate_json(self, prompt: str, temperature: float) -> Any:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=temperature,
            ),
        )
        return extract_json(response.text)

    def regenerate(self, instruction: str, subtree: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f"Regenerating {list(subtree)} for: {instruction!r}")
        prompt = REGEN_PROMPT.format(instruction=instruction, subtree=json.dumps(subtree, indent=2))
        result = self._generate_json(prompt, temperature=0.7)
        if not isinstance(result, dict):
            raise GeneratorError(f"Regenerated subtree must be an object, got {type(result).__name__}")
        return result

    def propose_patch(self, instruction: str, allowed_paths: List[str], context: Dict[str, Any]) -> Any:
        logger.info(f"Requesting patch within {allowed_paths} for: {instruction!r}")
        prompt = PATCH_PROMPT.format(
            instruction=instruction,
            multi_value_note=MULTI_VALUE_NOTE if _MULTI_VALUE_RE.search(instruction) else "",
            allowed=json.dumps(allowed_paths),
            context=json.dumps(context),
        )
        return self._generate_json(prompt, temperature=0.2)

    def generate_theme(self, description: str) -> Dict[str, Any]:
        """Full token document from a free-text description; schema-validated."""
        logger.info(f"Generating theme for: {description!r}")
        result = self._generate_json(GENERATE_PROMPT.format(description=description), temperature=0.9)
        if not isinstance(result, dict):
            raise GeneratorError("Generated theme must be a JSON object")
        validate_tokens(result)
        return result
