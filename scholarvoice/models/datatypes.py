"""Core datatypes shared across ScholarVoice modules.

Responsibilities:
- Represent immutable records exchanged between segmentation, pipeline, and
  playback components.
- Provide explicit typing for segment lifecycle state and owned audio handles.

Key types:
- `ReadingMode`, `DocumentInput`, `TextChunk`, `SegmentStatus`, `Segment`,
  `PipelineProgress`, and `AudioResource`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import mimetypes
from pathlib import Path


class ReadingMode(str, Enum):
    """Narration mode selected for one run."""

    LITERAL = "literal"
    PODCAST = "podcast"


class SegmentStatus(str, Enum):
    """Lifecycle status of one segment."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition may follow this status."""

        return self in (SegmentStatus.SUCCESS, SegmentStatus.ERROR)


_SUFFIX_MIME_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
}


@dataclass(frozen=True, slots=True)
class DocumentInput:
    """Intake payload delivered to the text extraction collaborator.

    Attributes:
        name: Display name of the document (file name or label).
        mime_type: MIME type used to pick an extraction strategy.
        text: Inline plain text for pasted documents.
        path: Filesystem path for file-based documents.
    """

    name: str
    mime_type: str
    text: str | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path) -> DocumentInput:
        """Build a file-based document input with a MIME type guessed from its suffix."""

        suffix = path.suffix.lower()
        mime_type = _SUFFIX_MIME_TYPES.get(suffix)
        if mime_type is None:
            mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(name=path.name, mime_type=mime_type, path=path)

    @classmethod
    def from_text(cls, text: str, name: str = "pasted-text") -> DocumentInput:
        """Build an inline plain-text document input."""

        return cls(name=name, mime_type="text/plain", text=text)


@dataclass(frozen=True, slots=True)
class TextChunk:
    """A bounded unit of source text produced by the segmenter.

    Attributes:
        title: Section label, optionally suffixed with `(Part n)`.
        text: Chunk content drawn verbatim from the source document.
    """

    title: str
    text: str


@dataclass(slots=True)
class AudioResource:
    """Owned, file-backed WAV artifact for one synthesized segment.

    Attributes:
        path: WAV file location.
        sample_rate_hz: Encoded sample rate.
        duration_seconds: Playback duration.
    """

    path: Path
    sample_rate_hz: int
    duration_seconds: float
    _released: bool = field(default=False, repr=False)

    @property
    def released(self) -> bool:
        """Return whether the underlying file has been released."""

        return self._released

    def read_bytes(self) -> bytes:
        """Return encoded WAV bytes for playback."""

        if self._released:
            raise RuntimeError(f"Audio resource `{self.path}` was already released.")
        return self.path.read_bytes()

    def release(self) -> None:
        """Delete the backing file; repeated calls are no-ops."""

        if self._released:
            return
        self._released = True
        self.path.unlink(missing_ok=True)


@dataclass(frozen=True, slots=True)
class Segment:
    """A text chunk plus its pipeline and playback lifecycle state.

    Records are immutable; the segment store replaces them wholesale on every
    transition so each observed snapshot is internally consistent.
    """

    id: str
    position: int
    original_text: str
    title: str | None = None
    translated_text: str | None = None
    audio: AudioResource | None = None
    status: SegmentStatus = SegmentStatus.PENDING
    error: str | None = None

    @property
    def display_title(self) -> str:
        """Return the segment title, falling back to its 1-based position."""

        return self.title or f"Segment {self.position + 1}"


@dataclass(frozen=True, slots=True)
class PipelineProgress:
    """Position of the orchestrator within the current run (1-based)."""

    current: int
    total: int
