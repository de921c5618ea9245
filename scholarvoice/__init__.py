"""Top-level package for ScholarVoice.

This package turns long academic documents into narrated audio, either as
translated, header-aware segments or as a single podcast-style summary. The
main entry points are `SegmentPipeline` and `ListeningSession`.
"""

from .pipeline import ListeningSession, SegmentPipeline

__all__ = ["ListeningSession", "SegmentPipeline", "__version__"]

__version__ = "0.1.0"
