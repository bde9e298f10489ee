"""
amender.py - Amendment orchestrator.

Turns one free-text instruction into a validated new token document:

    amender = ThemeAmender(store, generator=GeminiThemeGenerator())
    result = amender.amend({"document_id": "acme", "instruction": "compact", "dry_run": True})
    result.diff      # what would change
    result.preview   # True, nothing was saved

Order of attempts:
  1. Cache: a non-dry-run request reuses the tokens of an earlier identical
     request (same id, same document content, same instruction).
  2. Parser: deterministic operations, applied by the token patcher.
  3. Fallback generator, restricted to an allow-list of document paths:
     regen (rewrite the allowed subtrees) or patch (guarded JSON Patch).

Whatever path produced them, the new tokens are schema-validated before they
are cached, previewed or saved. Any failure raises AmendmentRejected and
leaves both cache and store untouched.
"""

from __future__ import annotations

import hashlib
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import json_patch
from .cache import AmendmentCache, CacheKey
from .generator import FallbackGenerator
from .instruction_parser import parse_instructions
from .operations import dump_operations
from .schema import TokenSchemaError, validate_tokens
from .scope import ScopeTag, apply_subtree, detect_sections, pick_subtree, resolve_scope
from .store import ThemeStore
from .token_patcher import apply_operations

logger = logging.getLogger(__name__)
audit = logging.getLogger("theme_amender.audit")

DEFAULT_TIMEOUT = 60.0

Stage = Literal["generator", "timeout", "patch", "regen", "schema"]
Source = Literal["parser", "regen", "patch", "cache"]


class AmendmentRejected(Exception):
    """The amendment could not be produced safely. Nothing was cached or saved."""

    def __init__(self, reason: str, stage: Stage):
        super().__init__(f"[{stage}] {reason}")
        self.reason = reason
        self.stage = stage


class AmendThemeInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    document_id: str = Field(min_length=1)
    instruction: str
    scope: Optional[List[ScopeTag]] = Field(default=None, description="Restrict the fallback to these sections")
    mode: Literal["auto", "regen", "patch"] = "auto"
    dry_run: bool = False

    @field_validator("instruction")
    @classmethod
    def _instruction_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("instruction must not be empty")
        return v


@dataclass
class AmendmentResult:
    document: Dict[str, Any]
    tokens: Dict[str, Any]
    diff: List[dict]
    preview: bool
    source: Source
    operations: List[dict] = field(default_factory=list)
    allowed_paths: List[str] = field(default_factory=list)


def fingerprint(document: Any) -> str:
    """sha256 of canonical JSON: key order and whitespace never change it."""
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class ThemeAmender:
    def __init__(
        self,
        store: ThemeStore,
        generator: Optional[FallbackGenerator] = None,
        cache: Optional[AmendmentCache] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.store = store
        self.generator = generator
        self.cache = cache if cache is not None else AmendmentCache()
        self.timeout = timeout

    # ── Public ────────────────────────────────────────────────────────────────

    def amend(self, request: Union[AmendThemeInput, Dict[str, Any]]) -> AmendmentResult:
        if not isinstance(request, AmendThemeInput):
            request = AmendThemeInput.model_validate(request)

        document = self.store.get(request.document_id)
        key: CacheKey = (request.document_id, fingerprint(document), request.instruction)

        with self.cache.hold(key):
            try:
                return self._amend_locked(request, document, key)
            except AmendmentRejected as e:
                audit.warning(
                    f"theme.amend.rejected id={request.document_id} stage={e.stage} reason={e.reason}",
                    extra={"event": "theme.amend.rejected", "document_id": request.document_id, "stage": e.stage},
                )
                raise

    # ── Internals ─────────────────────────────────────────────────────────────

    def _amend_locked(self, request: AmendThemeInput, document: Dict[str, Any], key: CacheKey) -> AmendmentResult:
        if not request.dry_run:
            hit = self.cache.get(key)
            if hit is not None:
                logger.info(f"Reusing cached amendment for {request.document_id}")
                return self._finish(request, document, hit.tokens, hit.diff, "cache", [], [])

        ops = parse_instructions(request.instruction)
        if ops:
            logger.info(f"Parsed {len(ops)} operation(s) from {request.instruction!r}")
            next_tokens = apply_operations(document, ops).tokens
            source, allowed = "parser", []
        else:
            allowed = resolve_scope(request.scope) if request.scope else detect_sections(request.instruction)
            source = self._strategy(request)
            logger.info(f"No deterministic match, falling back to {source} within {allowed}")
            if source == "regen":
                next_tokens = self._regen(request.instruction, document, allowed)
            else:
                next_tokens = self._patch(request.instruction, document, allowed)

        try:
            validate_tokens(next_tokens)
        except TokenSchemaError as e:
            raise AmendmentRejected(str(e), stage="schema") from e

        diff = json_patch.compare(document, next_tokens)
        self.cache.put(key, next_tokens, diff)
        return self._finish(request, document, next_tokens, diff, source, dump_operations(ops), allowed)

    def _finish(
        self,
        request: AmendThemeInput,
        document: Dict[str, Any],
        tokens: Dict[str, Any],
        diff: List[dict],
        source: str,
        operations: List[dict],
        allowed: List[str],
    ) -> AmendmentResult:
        if request.dry_run:
            audit.info(
                f"theme.amend.preview id={request.document_id} changes={len(diff)} source={source}",
                extra={"event": "theme.amend.preview", "document_id": request.document_id, "changes": len(diff)},
            )
            return AmendmentResult(document, tokens, diff, True, source, operations, allowed)

        saved = self.store.save(request.document_id, tokens)
        audit.info(
            f"theme.amend id={request.document_id} changes={len(diff)} source={source}",
            extra={"event": "theme.amend", "document_id": request.document_id, "changes": len(diff)},
        )
        return AmendmentResult(saved, tokens, diff, False, source, operations, allowed)

    @staticmethod
    def _strategy(request: AmendThemeInput) -> Source:
        if request.mode != "auto":
            return request.mode
        return "regen" if request.scope else "patch"

    def _call_generator(self, method: str, *args: Any) -> Any:
        if self.generator is None:
            raise AmendmentRejected("No fallback generator configured", stage="generator")

        # Not a `with` block: leaving it would wait for a call that already timed out.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="theme-fallback")
        try:
            future = executor.submit(getattr(self.generator, method), *args)
            return future.result(timeout=self.timeout)
        except FuturesTimeout as e:
            raise AmendmentRejected(f"Fallback generator timed out after {self.timeout:g}s", stage="timeout") from e
        except Exception as e:
            raise AmendmentRejected(f"Fallback generator failed: {e}", stage="generator") from e
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _regen(self, instruction: str, document: Dict[str, Any], allowed: List[str]) -> Dict[str, Any]:
        subtree = pick_subtree(document, allowed)
        regenerated = self._call_generator("regenerate", instruction, subtree)
        if not isinstance(regenerated, dict):
            raise AmendmentRejected("Regenerated subtree is not a JSON object", stage="regen")
        return apply_subtree(document, allowed, regenerated)

    def _patch(self, instruction: str, document: Dict[str, Any], allowed: List[str]) -> Dict[str, Any]:
        context = pick_subtree(document, allowed)
        raw = self._call_generator("propose_patch", instruction, allowed, context)
        try:
            ops = json_patch.validate_patch(json_patch.normalise_patch(raw), allowed)
            return json_patch.apply_patch(document, ops)
        except json_patch.PatchError as e:
            raise AmendmentRejected(str(e), stage="patch") from e
