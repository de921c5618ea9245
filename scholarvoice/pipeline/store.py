"""Segment store for the current run.

Responsibilities:
- Hold the single ordered segment list of the current run.
- Apply lifecycle transitions by whole-record replacement.
- Reject writes from superseded runs and release audio they carry.
- Publish immutable snapshots after every write.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from ..errors import SegmentTransitionError
from ..models.datatypes import AudioResource, Segment, SegmentStatus, TextChunk
from .events import RunEventBus, StoreEvent


class SegmentStore:
    """Single-writer store of segment records keyed by run id."""

    def __init__(self, event_bus: RunEventBus | None = None) -> None:
        """Initialize an empty store publishing to `event_bus`."""

        self.event_bus = event_bus if event_bus is not None else RunEventBus()
        self._run_id = 0
        self._segments: list[Segment] = []
        self._populated = False

    @property
    def run_id(self) -> int:
        """Return the id of the current run (0 before the first run)."""

        return self._run_id

    def __len__(self) -> int:
        return len(self._segments)

    def open_run(self) -> int:
        """Discard the previous run, release its audio, and return a new run id."""

        self._release_all()
        self._run_id += 1
        self._segments = []
        self._populated = False
        self._publish()
        return self._run_id

    def discard(self) -> None:
        """Drop the current list and invalidate any in-flight writer."""

        self._release_all()
        self._run_id += 1
        self._segments = []
        self._populated = True
        self._publish()

    def is_current(self, run_id: int) -> bool:
        """Return whether `run_id` still owns the store."""

        return run_id == self._run_id

    def populate(self, run_id: int, chunks: Sequence[TextChunk]) -> tuple[Segment, ...] | None:
        """Create one pending segment per chunk, in order."""

        if not self.is_current(run_id):
            return None
        if self._populated:
            raise SegmentTransitionError(f"Run {run_id} already holds a segment list.")
        self._segments = [
            Segment(
                id=f"seg-{position}",
                position=position,
                original_text=chunk.text,
                title=chunk.title,
            )
            for position, chunk in enumerate(chunks)
        ]
        self._populated = True
        return self._publish()

    def mark_processing(self, run_id: int, index: int) -> Segment | None:
        """Move a pending segment to `processing`."""

        if not self.is_current(run_id):
            return None
        segment = self._require(index, SegmentStatus.PENDING, "start processing")
        return self._replace(index, replace(segment, status=SegmentStatus.PROCESSING))

    def record_translation(self, run_id: int, index: int, text: str) -> Segment | None:
        """Record narration text on a processing segment, exactly once."""

        if not self.is_current(run_id):
            return None
        segment = self._require(index, SegmentStatus.PROCESSING, "record narration")
        if segment.translated_text is not None:
            raise SegmentTransitionError(f"Segment `{segment.id}` already has narration text.")
        return self._replace(index, replace(segment, translated_text=text))

    def mark_success(self, run_id: int, index: int, audio: AudioResource) -> Segment | None:
        """Complete a narrated segment with its audio resource.

        A stale or illegal write releases `audio`, since no record will own it.
        """

        if not self.is_current(run_id):
            audio.release()
            return None
        try:
            segment = self._require(index, SegmentStatus.PROCESSING, "complete")
            if segment.translated_text is None:
                raise SegmentTransitionError(
                    f"Segment `{segment.id}` cannot succeed without narration text."
                )
        except (SegmentTransitionError, IndexError):
            audio.release()
            raise
        return self._replace(
            index,
            replace(segment, audio=audio, status=SegmentStatus.SUCCESS, error=None),
        )

    def mark_error(self, run_id: int, index: int, error: str) -> Segment | None:
        """Fail a processing segment with a description."""

        if not self.is_current(run_id):
            return None
        segment = self._require(index, SegmentStatus.PROCESSING, "fail")
        return self._replace(index, replace(segment, status=SegmentStatus.ERROR, error=error))

    def snapshot(self) -> tuple[Segment, ...]:
        """Return an immutable view of the current segment list."""

        return tuple(self._segments)

    def get(self, index: int) -> Segment:
        """Return the segment at `index`, raising `IndexError` when out of range."""

        if not 0 <= index < len(self._segments):
            raise IndexError(f"Segment index {index} is out of range.")
        return self._segments[index]

    def _require(self, index: int, expected: SegmentStatus, action: str) -> Segment:
        segment = self.get(index)
        if segment.status is not expected:
            raise SegmentTransitionError(
                f"Cannot {action} segment `{segment.id}` in status `{segment.status.value}`."
            )
        return segment

    def _replace(self, index: int, segment: Segment) -> Segment:
        self._segments[index] = segment
        self._publish()
        return segment

    def _release_all(self) -> None:
        for segment in self._segments:
            if segment.audio is not None:
                segment.audio.release()

    def _publish(self) -> tuple[Segment, ...]:
        snapshot = self.snapshot()
        self.event_bus.publish(StoreEvent(run_id=self._run_id, segments=snapshot))
        return snapshot
