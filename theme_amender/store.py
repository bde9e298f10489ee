"""
store.py - Theme persistence.

Two stores share the same two-call surface (get / save):
  InMemoryThemeStore: dict-backed, used by tests and embedding callers
  JsonThemeStore:     one <id>.json per theme in a directory, used by the CLI
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

from .schema import validate_tokens

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class ThemeNotFoundError(LookupError):
    pass


class ThemeStore(Protocol):
    def get(self, document_id: str) -> Dict[str, Any]: ...

    def save(self, document_id: str, tokens: Dict[str, Any]) -> Dict[str, Any]: ...


class InMemoryThemeStore:
    def __init__(self, themes: Optional[Dict[str, Dict[str, Any]]] = None):
        self._themes: Dict[str, Dict[str, Any]] = copy.deepcopy(themes or {})
        self.saves = 0

    def get(self, document_id: str) -> Dict[str, Any]:
        if document_id not in self._themes:
            raise ThemeNotFoundError(f"Theme not found: {document_id}")
        return copy.deepcopy(self._themes[document_id])

    def save(self, document_id: str, tokens: Dict[str, Any]) -> Dict[str, Any]:
        self._themes[document_id] = copy.deepcopy(tokens)
        self.saves += 1
        return copy.deepcopy(tokens)

    def list_ids(self) -> List[str]:
        return sorted(self._themes)


class JsonThemeStore:
    """Directory of <id>.json files. Writes are atomic and validated."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, document_id: str) -> Path:
        if not _ID_RE.match(document_id) or document_id.startswith("."):
            raise ValueError(f"Invalid theme id: {document_id!r}")
        return self.directory / f"{document_id}.json"

    def get(self, document_id: str) -> Dict[str, Any]:
        path = self._path(document_id)
        if not path.exists():
            raise ThemeNotFoundError(f"Theme not found: {document_id} ({path})")
        return json.loads(path.read_text(encoding="utf-8"))

    def save(self, document_id: str, tokens: Dict[str, Any]) -> Dict[str, Any]:
        path = self._path(document_id)
        validate_tokens(tokens)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{document_id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(tokens, f, indent=2)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.info(f"Saved theme {document_id} → {path}")
        return copy.deepcopy(tokens)

    def list_ids(self) -> List[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
