"""Input/output components for ScholarVoice.

This package contains document extraction and artifact storage used by the
pipeline and the CLI.
"""

from .document_extractor import DocumentTextExtractor, TextExtractor
from .storage import ArtifactStore

__all__ = ["ArtifactStore", "DocumentTextExtractor", "TextExtractor"]
