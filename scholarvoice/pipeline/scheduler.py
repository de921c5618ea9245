"""Playback pointer state machine.

Responsibilities:
- Own the index of the segment the listener should hear.
- Advance on finished events and wait on segments that are not ready yet.
- Publish pointer changes as events.
"""

from __future__ import annotations

from ..models.datatypes import Segment, SegmentStatus
from .events import PointerEvent
from .store import SegmentStore


class PlaybackScheduler:
    """Decide which segment is audible, independent of pipeline progress.

    The pointer advances strictly by one on each finished event, even onto a
    segment that is pending, processing, or failed. Such a segment leaves the
    pointer waiting until the listener selects another one; it is never skipped
    automatically.
    """

    def __init__(self, store: SegmentStore) -> None:
        """Initialize an idle scheduler observing `store`."""

        self.store = store
        self._pointer: int | None = None

    @property
    def pointer(self) -> int | None:
        """Return the current playback index, or `None` when idle."""

        return self._pointer

    @property
    def is_waiting(self) -> bool:
        """Return whether the pointer rests on a segment without playable audio."""

        if self._pointer is None:
            return False
        return self.store.get(self._pointer).status is not SegmentStatus.SUCCESS

    def select(self, index: int) -> int:
        """Point playback at `index` unconditionally."""

        if not 0 <= index < len(self.store):
            raise ValueError(
                f"Cannot select segment {index}; the run has {len(self.store)} segments."
            )
        self._move(index)
        return index

    def on_segment_finished(self, index: int) -> int | None:
        """Advance past the segment that just finished playing.

        Finished events for any index other than the pointer are stale and
        leave the pointer unchanged.
        """

        if self._pointer is None or index != self._pointer:
            return self._pointer
        following = index + 1
        self._move(following if following < len(self.store) else None)
        return self._pointer

    def auto_start(self, index: int) -> None:
        """Start playback at `index`, replacing any earlier selection."""

        self._move(index)

    def audible_segment(self) -> Segment | None:
        """Return the pointed-to segment when its audio is ready."""

        if self._pointer is None:
            return None
        segment = self.store.get(self._pointer)
        return segment if segment.status is SegmentStatus.SUCCESS else None

    def reset(self) -> None:
        """Return to idle, as at the start of a new run."""

        self._move(None)

    def _move(self, pointer: int | None) -> None:
        previous = self._pointer
        if pointer == previous:
            return
        self._pointer = pointer
        self.store.event_bus.publish(PointerEvent(pointer=pointer, previous=previous))
