"""Run events published to presentation layers.

Responsibilities:
- Define immutable progress, log, store, and pointer events.
- Fan events out to subscribers through a synchronous event bus.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from ..models.datatypes import PipelineProgress, Segment


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Orchestrator position within a run; `progress` is `None` once processing ends."""

    run_id: int
    progress: PipelineProgress | None


@dataclass(frozen=True, slots=True)
class LogEvent:
    """One human-readable run log line."""

    message: str
    level: str = "info"
    timestamp: datetime = field(default_factory=datetime.now)

    def render(self) -> str:
        """Return the message prefixed with a wall-clock timestamp."""

        return f"[{self.timestamp:%H:%M:%S}] {self.message}"


@dataclass(frozen=True, slots=True)
class StoreEvent:
    """Immutable snapshot of the segment list after a store write."""

    run_id: int
    segments: tuple[Segment, ...]


@dataclass(frozen=True, slots=True)
class PointerEvent:
    """Playback pointer change."""

    pointer: int | None
    previous: int | None


RunEvent = Union[ProgressEvent, LogEvent, StoreEvent, PointerEvent]
EventHandler = Callable[[RunEvent], None]


class RunEventBus:
    """Deliver run events to subscribers in subscription order."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler and return a callable that unsubscribes it."""

        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: RunEvent) -> None:
        """Deliver one event to every current subscriber."""

        for handler in tuple(self._handlers):
            handler(event)
