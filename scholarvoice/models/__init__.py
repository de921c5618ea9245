"""Shared typed data models for ScholarVoice.

This package contains dataclasses used across pipeline modules to avoid
cross-module coupling and circular imports.
"""

from .datatypes import (
    AudioResource,
    DocumentInput,
    PipelineProgress,
    ReadingMode,
    Segment,
    SegmentStatus,
    TextChunk,
)

__all__ = [
    "AudioResource",
    "DocumentInput",
    "PipelineProgress",
    "ReadingMode",
    "Segment",
    "SegmentStatus",
    "TextChunk",
]
