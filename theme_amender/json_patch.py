"""
json_patch.py - RFC 6902 style structural diff and guarded patch application.

    diff = compare(before, after)              # [{"op": "replace", "path": "/spacing/md", "value": "18px"}, ...]
    after_again = apply_patch(before, diff)    # == after

Only the three operations the amender needs are supported: add, replace,
remove. Untrusted patches (from the assisted fallback) go through
normalise_patch() and validate_patch() before apply_patch() ever sees them.
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, List, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator


class PatchError(ValueError):
    """A patch is malformed, reaches outside its allow-list, or cannot be applied."""


class PatchOperation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    op: Literal["replace", "add", "remove"]
    path: str
    value: Any = None

    @model_validator(mode="after")
    def _check_shape(self) -> "PatchOperation":
        if not self.path.startswith("/"):
            raise ValueError(f"path must start with '/': {self.path!r}")
        if self.op != "remove" and "value" not in self.model_fields_set:
            raise ValueError(f"{self.op} at {self.path} is missing a value")
        return self

    def as_dict(self) -> dict:
        out = {"op": self.op, "path": self.path}
        if self.op != "remove":
            out["value"] = self.value
        return out


# ── JSON pointer ──────────────────────────────────────────────────────────────

def escape_token(key: Any) -> str:
    return str(key).replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def join_pointer(parts: Iterable[Any]) -> str:
    return "".join(f"/{escape_token(p)}" for p in parts)


def split_pointer(path: str) -> List[str]:
    if path == "":
        return []
    if not path.startswith("/"):
        raise PatchError(f"Invalid JSON pointer: {path!r}")
    return [unescape_token(t) for t in path[1:].split("/")]


# ── Diff ──────────────────────────────────────────────────────────────────────

def _changed(a: Any, b: Any) -> bool:
    return type(a) is not type(b) or a != b


def _diff(a: Any, b: Any, path: str, out: List[dict]) -> None:
    if isinstance(a, dict) and isinstance(b, dict):
        for key, old in a.items():
            sub = f"{path}/{escape_token(key)}"
            if key not in b:
                out.append({"op": "remove", "path": sub})
            else:
                _diff(old, b[key], sub, out)
        for key, new in b.items():
            if key not in a:
                out.append({"op": "add", "path": f"{path}/{escape_token(key)}", "value": copy.deepcopy(new)})
        return

    if isinstance(a, list) and isinstance(b, list):
        common = min(len(a), len(b))
        for i in range(common):
            _diff(a[i], b[i], f"{path}/{i}", out)
        for i in reversed(range(common, len(a))):
            out.append({"op": "remove", "path": f"{path}/{i}"})
        for i in range(common, len(b)):
            out.append({"op": "add", "path": f"{path}/{i}", "value": copy.deepcopy(b[i])})
        return

    if _changed(a, b):
        out.append({"op": "replace", "path": path, "value": copy.deepcopy(b)})


def compare(before: Any, after: Any) -> List[dict]:
    """Ordered add/replace/remove operations that turn `before` into `after`."""
    out: List[dict] = []
    _diff(before, after, "", out)
    return out


# ── Apply ─────────────────────────────────────────────────────────────────────

def _list_index(token: str, size: int, allow_end: bool) -> int:
    if allow_end and token == "-":
        return size
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        raise PatchError(f"Invalid array index: {token!r}")
    idx = int(token)
    if idx > size or (idx == size and not allow_end):
        raise PatchError(f"Array index out of range: {idx}")
    return idx


def _apply_one(doc: Any, op: dict) -> Any:
    parts = split_pointer(op["path"])
    kind = op["op"]

    if not parts:
        if kind == "remove":
            raise PatchError("Cannot remove the document root")
        return copy.deepcopy(op["value"])

    parent = doc
    for token in parts[:-1]:
        if isinstance(parent, dict) and token in parent:
            parent = parent[token]
        elif isinstance(parent, list):
            parent = parent[_list_index(token, len(parent), allow_end=False)]
        else:
            raise PatchError(f"Path not found: {op['path']}")

    last = parts[-1]
    if isinstance(parent, dict):
        if kind == "remove":
            if last not in parent:
                raise PatchError(f"Cannot remove missing key: {op['path']}")
            del parent[last]
        else:
            # replace on a missing key behaves like add
            parent[last] = copy.deepcopy(op["value"])
    elif isinstance(parent, list):
        if kind == "add":
            parent.insert(_list_index(last, len(parent), allow_end=True), copy.deepcopy(op["value"]))
        elif kind == "replace":
            parent[_list_index(last, len(parent), allow_end=False)] = copy.deepcopy(op["value"])
        else:
            del parent[_list_index(last, len(parent), allow_end=False)]
    else:
        raise PatchError(f"Parent of {op['path']} is not a container")
    return doc


def apply_patch(document: Any, patch: List[dict]) -> Any:
    """
    Apply `patch` to a deep copy of `document` and return the copy.

    All-or-nothing: the input is never touched, so a PatchError halfway
    through leaves the caller with exactly what it had.
    """
    doc = copy.deepcopy(document)
    for op in patch:
        doc = _apply_one(doc, op)
    return doc


# ── Untrusted patches ─────────────────────────────────────────────────────────

def normalise_patch(raw: Any) -> List[Any]:
    """Accept a bare array, {"patch": [...]}, {"operations": [...]}, or a single op."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        if isinstance(raw.get("patch"), list):
            return raw["patch"]
        if isinstance(raw.get("operations"), list):
            return raw["operations"]
        if "op" in raw:
            return [raw]
    raise PatchError("Patch must be a JSON array of operations")


def is_allowed(path: str, allowed_prefixes: Iterable[str]) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in allowed_prefixes)


def validate_patch(raw_ops: List[Any], allowed_prefixes: List[str]) -> List[dict]:
    """
    Validate every operation; a single bad one rejects the whole patch.

    Raises PatchError naming the first offending operation.
    """
    cleaned: List[dict] = []
    for i, raw in enumerate(raw_ops):
        if not isinstance(raw, dict):
            raise PatchError(f"Operation {i} is not an object")
        try:
            op = PatchOperation.model_validate(raw)
        except ValidationError as e:
            reason = e.errors()[0].get("msg", str(e))
            raise PatchError(f"Operation {i} is invalid: {reason}") from e
        if not is_allowed(op.path, allowed_prefixes):
            raise PatchError(f"Forbidden path {op.path} (allowed: {', '.join(allowed_prefixes)})")
        cleaned.append(op.as_dict())
    return cleaned
