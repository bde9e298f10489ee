"""
cache.py - In-process amendment cache with lazy TTL eviction.

Entries are keyed by (document id, content fingerprint, instruction text).
Expired entries are swept on the next write, not on a timer. Each key also
owns a lock so concurrent amendments of the same key run one at a time.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, str]

DEFAULT_TTL_SECONDS = 3600.0


@dataclass
class CacheEntry:
    tokens: Dict[str, Any]
    diff: List[dict]
    timestamp: float = field(default=0.0)


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class AmendmentCache:
    """Thread-safe TTL cache. Callers get deep copies; stored entries are never shared."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}
        self._locks: Dict[CacheKey, _KeyLock] = {}
        self._mutex = threading.Lock()

    def __len__(self) -> int:
        with self._mutex:
            return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_seconds

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        with self._mutex:
            entry = self._entries.get(key)
            if entry is None or self._expired(entry, self._clock()):
                return None
            return CacheEntry(copy.deepcopy(entry.tokens), copy.deepcopy(entry.diff), entry.timestamp)

    def put(self, key: CacheKey, tokens: Dict[str, Any], diff: List[dict]) -> None:
        with self._mutex:
            self._entries[key] = CacheEntry(copy.deepcopy(tokens), copy.deepcopy(diff), self._clock())
        self.sweep()

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were evicted."""
        with self._mutex:
            now = self._clock()
            stale = [k for k, e in self._entries.items() if self._expired(e, now)]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug(f"Evicted {len(stale)} expired amendment(s)")
        return len(stale)

    def lock_for(self, key: CacheKey) -> threading.Lock:
        """The lock for `key`; the same object for as long as anyone holds or waits on it."""
        with self._mutex:
            return self._slot(key).lock

    @contextmanager
    def hold(self, key: CacheKey) -> Iterator[None]:
        """Run the body with the key's lock held. The lock is dropped when its last user leaves."""
        with self._mutex:
            slot = self._slot(key)
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._mutex:
                slot.users -= 1
                if slot.users == 0 and self._locks.get(key) is slot:
                    del self._locks[key]

    def _slot(self, key: CacheKey) -> _KeyLock:
        slot = self._locks.get(key)
        if slot is None:
            slot = self._locks[key] = _KeyLock()
        return slot

    def clear(self) -> None:
        with self._mutex:
            self._entries.clear()
