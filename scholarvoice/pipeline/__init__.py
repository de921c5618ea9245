"""Segment pipeline, store, playback scheduling, and session control."""

from .events import LogEvent, PointerEvent, ProgressEvent, RunEventBus, StoreEvent
from .orchestrator import MAX_DOCUMENT_CHARS, PODCAST_SEGMENT_TITLE, SegmentPipeline
from .scheduler import PlaybackScheduler
from .session import ListeningSession
from .store import SegmentStore

__all__ = [
    "ListeningSession",
    "LogEvent",
    "MAX_DOCUMENT_CHARS",
    "PODCAST_SEGMENT_TITLE",
    "PlaybackScheduler",
    "PointerEvent",
    "ProgressEvent",
    "RunEventBus",
    "SegmentPipeline",
    "SegmentStore",
    "StoreEvent",
]
