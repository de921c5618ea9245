"""Owned audio resource allocation.

Responsibilities:
- Persist encoded WAV payloads as per-run, per-segment files.
- Hand out `AudioResource` handles whose lifetime the segment store controls.
"""

from __future__ import annotations

from pathlib import Path

from ..io.storage import ArtifactStore
from ..models.datatypes import AudioResource
from ..text.slug import slugify_segment_title
from .wav import wav_duration_seconds


class AudioLibrary:
    """Allocate file-backed audio resources beneath one root directory."""

    def __init__(self, root: Path) -> None:
        """Initialize the library with an output root for WAV files."""

        self.store = ArtifactStore(root)

    @property
    def root(self) -> Path:
        """Return the directory holding allocated audio files."""

        return self.store.root

    def allocate(
        self,
        *,
        run_id: int,
        position: int,
        title: str,
        wav_bytes: bytes,
        sample_rate_hz: int,
    ) -> AudioResource:
        """Write one segment WAV and return its owned resource handle."""

        duration = wav_duration_seconds(wav_bytes)
        relative = Path(
            f"run-{run_id:03d}/{position + 1:03d}_{slugify_segment_title(title)}.wav"
        )
        path = self.store.save_audio(relative, wav_bytes)
        return AudioResource(
            path=path,
            sample_rate_hz=sample_rate_hz,
            duration_seconds=duration,
        )
