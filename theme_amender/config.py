"""
config.py - Environment-driven settings.

Values come from the process environment, optionally seeded from a .env file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CACHE_TTL = 3600.0
DEFAULT_STORE_DIR = "themes"


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name}={raw!r} must be positive, using {default}")
        return default
    return value


@dataclass(frozen=True)
class AmenderSettings:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT
    cache_ttl: float = DEFAULT_CACHE_TTL
    store_dir: Path = Path(DEFAULT_STORE_DIR)

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "AmenderSettings":
        if load_env_file:
            load_dotenv()
        return cls(
            api_key=os.environ.get("GEMINI_API_KEY", ""),
            model=os.environ.get("THEME_AMENDER_MODEL") or DEFAULT_MODEL,
            timeout=_float_env("THEME_AMENDER_TIMEOUT", DEFAULT_TIMEOUT),
            cache_ttl=_float_env("THEME_AMENDER_CACHE_TTL", DEFAULT_CACHE_TTL),
            store_dir=Path(os.environ.get("THEME_AMENDER_STORE_DIR") or DEFAULT_STORE_DIR),
        )
