"""Listening session controller.

Responsibilities:
- Accept presentation inputs: start run, select segment, segment finished.
- Own the in-flight run task and cancel it when a new run starts.
"""

from __future__ import annotations

import asyncio
import contextlib

from ..models.datatypes import DocumentInput, ReadingMode, Segment
from .events import RunEventBus
from .orchestrator import SegmentPipeline
from .scheduler import PlaybackScheduler
from .store import SegmentStore


class ListeningSession:
    """Single-listener facade over one pipeline, store, and scheduler."""

    def __init__(self, pipeline: SegmentPipeline) -> None:
        """Initialize a session around a configured pipeline."""

        self.pipeline = pipeline
        self._task: asyncio.Task[tuple[Segment, ...]] | None = None

    @property
    def store(self) -> SegmentStore:
        return self.pipeline.store

    @property
    def scheduler(self) -> PlaybackScheduler:
        return self.pipeline.scheduler

    @property
    def event_bus(self) -> RunEventBus:
        return self.pipeline.event_bus

    @property
    def is_running(self) -> bool:
        """Return whether a run task is still in flight."""

        return self._task is not None and not self._task.done()

    def start_run(
        self,
        document: DocumentInput,
        mode: ReadingMode | str = ReadingMode.LITERAL,
    ) -> asyncio.Task[tuple[Segment, ...]]:
        """Cancel any in-flight run and schedule a new one on the running loop."""

        self.cancel()
        self._task = asyncio.get_running_loop().create_task(
            self.pipeline.run_document(document, mode)
        )
        self._task.add_done_callback(_retrieve_outcome)
        return self._task

    async def run(
        self,
        document: DocumentInput,
        mode: ReadingMode | str = ReadingMode.LITERAL,
    ) -> tuple[Segment, ...]:
        """Start a run and wait for its final snapshot."""

        return await self.start_run(document, mode)

    def select_segment(self, index: int) -> int:
        """Point playback at a segment chosen by the listener."""

        return self.scheduler.select(index)

    def segment_finished(self, index: int) -> int | None:
        """Report that playback of `index` ended and return the new pointer."""

        return self.scheduler.on_segment_finished(index)

    def audible_segment(self) -> Segment | None:
        """Return the segment whose audio should be playing, if ready."""

        return self.scheduler.audible_segment()

    def cancel(self) -> None:
        """Cancel the in-flight run task, if any."""

        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def close(self) -> None:
        """Cancel any run, release all audio, and return to idle."""

        task = self._task
        self.cancel()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(task, return_exceptions=True)
        self._task = None
        self.store.discard()
        self.scheduler.reset()


def _retrieve_outcome(task: asyncio.Task[tuple[Segment, ...]]) -> None:
    # Marks a failure as retrieved even when the task is replaced before anyone awaits it.
    if not task.cancelled():
        task.exception()
