"""Text segmentation components.

This package provides the deterministic header-aware segmenter that turns
extracted documents into narration chunks.
"""

from .segmenter import DEFAULT_TARGET_CHARS, DocumentSection, SemanticSegmenter, semantic_split
from .slug import slugify_segment_title

__all__ = [
    "DEFAULT_TARGET_CHARS",
    "DocumentSection",
    "SemanticSegmenter",
    "semantic_split",
    "slugify_segment_title",
]
