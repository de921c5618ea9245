"""Domain exceptions for pipeline, collaborator, and CLI diagnostics."""

from __future__ import annotations


class PipelineStageError(RuntimeError):
    """Raised when a document-level pipeline stage fails and the run must abort."""

    def __init__(
        self,
        *,
        stage: str,
        detail: str,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped pipeline error."""

        super().__init__(detail)
        self.stage = stage
        self.detail = detail
        self.hint = hint


class ExtractionError(RuntimeError):
    """Raised when plain text cannot be extracted from a source document."""


class NarrationError(RuntimeError):
    """Raised when translation or podcast script writing fails for a text."""


class SynthesisError(RuntimeError):
    """Raised when speech synthesis returns no usable audio samples."""


class AudioDecodeError(RuntimeError):
    """Raised when raw PCM samples cannot be decoded into a playable container."""


class SegmentTransitionError(RuntimeError):
    """Raised when a segment lifecycle transition violates the status order."""
