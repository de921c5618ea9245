"""Bounded response cache for provider-backed narration.

Responsibilities:
- Build stable cache keys from provider/model/operation and normalized input.
- Reuse narration for repeated identical chunks within a session.
- Track hit/miss counters for log summaries.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from hashlib import sha256
import json
import threading
from typing import Any


def _normalize_identity_value(value: Any) -> Any:
    """Normalize identity payload values for stable cache key hashing."""

    if isinstance(value, str):
        return " ".join(value.split())
    if isinstance(value, list | tuple):
        return [_normalize_identity_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalize_identity_value(item) for key, item in value.items()}
    return value


@dataclass(slots=True)
class ResponseCache:
    """In-memory least-recently-used cache of narration responses."""

    max_entries: int = 256
    hits: int = 0
    misses: int = 0
    _entries: OrderedDict[str, str] = field(default_factory=OrderedDict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @staticmethod
    def make_key(*, provider: str, model: str, operation: str, input_identity: Any) -> str:
        """Build a cache key with a hash of the normalized input identity."""

        canonical_identity = json.dumps(
            _normalize_identity_value(input_identity),
            sort_keys=True,
            ensure_ascii=True,
            separators=(",", ":"),
        )
        identity_hash = sha256(canonical_identity.encode("utf-8")).hexdigest()
        return (
            f"response:{provider.strip().lower()}:{model.strip()}:"
            f"{operation.strip().lower()}:{identity_hash}"
        )

    def get(self, cache_key: str) -> str | None:
        """Return a cached response and update hit/miss counters."""

        with self._lock:
            if cache_key in self._entries:
                self._entries.move_to_end(cache_key)
                self.hits += 1
                return self._entries[cache_key]
            self.misses += 1
            return None

    def set(self, cache_key: str, value: str) -> None:
        """Store a response, evicting the least recently used entry when full."""

        with self._lock:
            self._entries[cache_key] = value
            self._entries.move_to_end(cache_key)
            while len(self._entries) > max(1, self.max_entries):
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        return len(self._entries)
