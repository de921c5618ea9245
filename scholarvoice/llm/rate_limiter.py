"""Request pacing for provider calls.

Responsibilities:
- Enforce a minimum interval between requests sharing a key.
- Stay safe when provider calls run on worker threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
from time import monotonic, sleep
from typing import Callable


@dataclass(slots=True)
class RateLimiter:
    """Per-key minimum-interval limiter shared by provider clients."""

    min_interval_seconds: float = 0.25
    clock: Callable[[], float] = monotonic
    sleeper: Callable[[float], None] = sleep
    _next_allowed_at: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def acquire(self, key: str) -> float:
        """Block until `key` may issue a request; return the seconds waited."""

        if self.min_interval_seconds <= 0.0:
            return 0.0
        with self._lock:
            now = self.clock()
            wait_seconds = max(0.0, self._next_allowed_at.get(key, 0.0) - now)
            self._next_allowed_at[key] = now + wait_seconds + self.min_interval_seconds
        if wait_seconds > 0.0:
            self.sleeper(wait_seconds)
        return wait_seconds
