# refap/runtime/cache.py
"""
Response cache for per-request analysis results.

Entries expire lazily: a read older than the TTL is a miss and drops the entry.
Capacity is bounded; inserting into a full cache evicts the entry that was
inserted first (insertion order, not last access).
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

from refap.shared.normalize import normalize

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_CAPACITY = 1000
_KEY_SEP = "|"  # never survives normalize()


@dataclass
class CacheEntry:
    key: str
    payload: Any
    inserted_at: float


class ResponseCache:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def make_key(question: str, history: Optional[str] = None) -> str:
        return normalize(question) + _KEY_SEP + normalize(history or "")

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.inserted_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return entry.payload

    def set(self, key: str, payload: Any) -> None:
        with self._lock:
            # last write wins and counts as a fresh insertion
            self._entries.pop(key, None)
            while len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(key=key, payload=payload, inserted_at=self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
