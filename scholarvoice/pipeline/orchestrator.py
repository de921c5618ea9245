"""Segment pipeline orchestration for ScholarVoice.

Responsibilities:
- Turn one document into an ordered segment list for the selected reading mode.
- Drive every segment sequentially through narrate, synthesize, and encode.
- Record outcomes in the segment store and publish progress and log events.

Key types:
- `SegmentPipeline`: orchestration facade over the store and collaborators.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING

from ..audio.library import AudioLibrary
from ..audio.wav import DEFAULT_SAMPLE_RATE_HZ, decode_and_encode
from ..errors import NarrationError, PipelineStageError
from ..io.document_extractor import DocumentTextExtractor, TextExtractor
from ..llm.narrators import Narrator
from ..llm.openai_client import OpenAIProviderError
from ..models.datatypes import (
    DocumentInput,
    PipelineProgress,
    ReadingMode,
    Segment,
    SegmentStatus,
    TextChunk,
)
from ..text.segmenter import DEFAULT_TARGET_CHARS, SemanticSegmenter
from ..tts.synthesizer import SpeechSynthesizer
from .events import LogEvent, ProgressEvent, RunEventBus
from .scheduler import PlaybackScheduler
from .store import SegmentStore
from .telemetry import PipelineTelemetryMixin

if TYPE_CHECKING:
    from ..telemetry.logger import RunLogger

MAX_DOCUMENT_CHARS = 50000
PODCAST_SEGMENT_TITLE = "Podcast Summary"


class SegmentPipeline(PipelineTelemetryMixin):
    """Sequential narrate/synthesize/encode pipeline over one segment store."""

    def __init__(
        self,
        *,
        store: SegmentStore,
        scheduler: PlaybackScheduler,
        narrators: Mapping[ReadingMode, Narrator],
        synthesizer: SpeechSynthesizer,
        audio_library: AudioLibrary,
        extractor: TextExtractor | None = None,
        segmenter: SemanticSegmenter | None = None,
        run_logger: RunLogger | None = None,
        target_chars: int = DEFAULT_TARGET_CHARS,
        max_document_chars: int = MAX_DOCUMENT_CHARS,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        encoder: Callable[[bytes, int], bytes] = decode_and_encode,
    ) -> None:
        """Initialize the pipeline with its store, scheduler, and collaborators."""

        self.store = store
        self.scheduler = scheduler
        self.narrators = dict(narrators)
        self.synthesizer = synthesizer
        self.audio_library = audio_library
        self.extractor = extractor if extractor is not None else DocumentTextExtractor()
        self.segmenter = segmenter if segmenter is not None else SemanticSegmenter()
        self.target_chars = target_chars
        self.max_document_chars = max_document_chars
        self.sample_rate_hz = sample_rate_hz
        self.encoder = encoder
        self._run_logger = run_logger

    @property
    def event_bus(self) -> RunEventBus:
        """Return the event bus shared with the store and scheduler."""

        return self.store.event_bus

    async def run_document(
        self,
        document: DocumentInput,
        mode: ReadingMode | str = ReadingMode.LITERAL,
    ) -> tuple[Segment, ...]:
        """Process one document end to end and return the final segment snapshot.

        Raises:
            PipelineStageError: If extraction fails or no segment can be built.
                The store is left empty for the run in that case.
        """

        mode = ReadingMode(mode)
        run_id = self._open_run()
        try:
            self._log(run_id, f"Extracting raw text from `{document.name}`...")
            text = await self._run_stage("extract", lambda: self._extract(document))
            text = self._apply_ceiling(run_id, text)
            if mode is ReadingMode.PODCAST:
                self._log(run_id, "Generating podcast script...")
            else:
                self._log(run_id, "Analyzing structure and splitting into segments...")
            chunks = await self._run_stage("segment", lambda: self._build_chunks(text, mode))
        except PipelineStageError as exc:
            self._fail_run(run_id, exc)
            raise

        if mode is ReadingMode.LITERAL:
            self._log(run_id, f"Created {len(chunks)} logical segments.")
        return await self._process(run_id, chunks, mode)

    async def run(
        self,
        chunks: Sequence[TextChunk],
        mode: ReadingMode | str = ReadingMode.LITERAL,
    ) -> tuple[Segment, ...]:
        """Process pre-built chunks as a new run and return the final snapshot."""

        mode = ReadingMode(mode)
        run_id = self._open_run()
        if not chunks:
            exc = PipelineStageError(
                stage="segment",
                detail="No segments to process.",
                hint="Provide at least one non-empty text chunk.",
            )
            self._fail_run(run_id, exc)
            raise exc
        return await self._process(run_id, list(chunks), mode)

    def _open_run(self) -> int:
        run_id = self.store.open_run()
        self.scheduler.reset()
        return run_id

    def _extract(self, document: DocumentInput) -> str:
        """Extract document text, converting failures into a document-fatal error."""

        try:
            return self.extractor.extract(document)
        except PipelineStageError:
            raise
        except Exception as exc:
            raise PipelineStageError(
                stage="extract",
                detail=str(exc),
                hint="Verify the input exists and is a text-based PDF, TXT, or MD file.",
            ) from exc

    def _apply_ceiling(self, run_id: int, text: str) -> str:
        """Truncate text beyond the document ceiling, logging a warning."""

        if len(text) <= self.max_document_chars:
            return text
        self._log(
            run_id,
            f"Text length {len(text)} exceeds safety limit. "
            f"Truncating to {self.max_document_chars} chars.",
            level="warning",
        )
        return text[: self.max_document_chars]

    def _build_chunks(self, text: str, mode: ReadingMode) -> list[TextChunk]:
        """Build segment chunks for the reading mode."""

        if mode is ReadingMode.PODCAST:
            chunks = [TextChunk(title=PODCAST_SEGMENT_TITLE, text=text)] if text.strip() else []
        else:
            chunks = self.segmenter.segment(text, self.target_chars)
        if not chunks:
            raise PipelineStageError(
                stage="segment",
                detail="Segmentation produced no segments.",
                hint="Verify the document contains readable text.",
            )
        return chunks

    async def _process(
        self,
        run_id: int,
        chunks: list[TextChunk],
        mode: ReadingMode,
    ) -> tuple[Segment, ...]:
        """Process populated segments in order; return `()` if the run was superseded."""

        narrator = self.narrators.get(mode)
        if narrator is None:
            exc = PipelineStageError(
                stage="narrate",
                detail=f"No narrator is configured for `{mode.value}` mode.",
                hint="Configure a narration provider for the selected mode.",
            )
            self._fail_run(run_id, exc)
            raise exc
        if self.store.populate(run_id, chunks) is None:
            return ()

        total = len(chunks)
        try:
            for position in range(total):
                if not self.store.is_current(run_id):
                    return ()
                await self._process_segment(run_id, position, total, narrator)
            if not self.store.is_current(run_id):
                return ()
            snapshot = self.store.snapshot()
            ready = sum(1 for segment in snapshot if segment.status is SegmentStatus.SUCCESS)
            self._log(
                run_id,
                f"All segments processed. ({ready} ready, {total - ready} failed)",
            )
            return snapshot
        finally:
            self._publish_progress(run_id, None)

    async def _process_segment(
        self,
        run_id: int,
        position: int,
        total: int,
        narrator: Narrator,
    ) -> None:
        """Drive one segment to a terminal status; failures stay segment-local."""

        segment = self.store.mark_processing(run_id, position)
        if segment is None:
            return
        self._publish_progress(run_id, PipelineProgress(current=position + 1, total=total))
        title = segment.display_title

        try:
            narration = await asyncio.to_thread(narrator.narrate, segment.original_text)
            narration = narration.strip() if narration else ""
            if not narration:
                raise NarrationError("Narration output was empty.")
        except Exception as exc:
            self._fail_segment(run_id, position, title, "narrate", exc)
            return
        if self.store.record_translation(run_id, position, narration) is None:
            return

        stage = "synthesize"
        try:
            pcm = await asyncio.to_thread(self.synthesizer.synthesize, narration)
            stage = "decode"
            wav_bytes = await asyncio.to_thread(self.encoder, pcm, self.sample_rate_hz)
        except Exception as exc:
            self._fail_segment(run_id, position, title, stage, exc)
            return

        if not self.store.is_current(run_id):
            return
        try:
            audio = self.audio_library.allocate(
                run_id=run_id,
                position=position,
                title=title,
                wav_bytes=wav_bytes,
                sample_rate_hz=self.sample_rate_hz,
            )
        except Exception as exc:
            self._fail_segment(run_id, position, title, "decode", exc)
            return
        if self.store.mark_success(run_id, position, audio) is None:
            return

        self._log(run_id, f'"{title}" Ready.')
        if position == 0:
            self.scheduler.auto_start(0)

    def _fail_segment(
        self,
        run_id: int,
        position: int,
        title: str,
        stage: str,
        exc: Exception,
    ) -> None:
        """Record a segment-local failure and log it."""

        detail = self._segment_error_detail(stage, exc)
        if self.store.mark_error(run_id, position, detail) is None:
            return
        self._log(run_id, f'"{title}" Failed: {detail}', level="error")

    def _fail_run(self, run_id: int, exc: PipelineStageError) -> None:
        """Log a document-fatal failure and clear progress."""

        self._log(run_id, f"Critical Error: {exc.detail}", level="critical")
        self._publish_progress(run_id, None)

    @staticmethod
    def _segment_error_detail(stage: str, exc: Exception) -> str:
        """Build a concise segment error description for a collaborator failure."""

        if isinstance(exc, OpenAIProviderError):
            mapping = {
                "invalid_api_key": "Provider authentication failed for OpenAI API credentials.",
                "insufficient_quota": "Provider quota is insufficient for this OpenAI request.",
                "invalid_model": "Provider rejected the configured model for this request.",
                "timeout": "Provider request timed out before completion.",
                "transport": "Provider request failed due to a transport/network error.",
            }
            return mapping.get(exc.failure_kind, str(exc))
        message = str(exc).strip()
        return message or f"{stage.capitalize()} failed ({type(exc).__name__})."

    def _publish_progress(self, run_id: int, progress: PipelineProgress | None) -> None:
        if self.store.is_current(run_id):
            self.event_bus.publish(ProgressEvent(run_id=run_id, progress=progress))

    def _log(self, run_id: int, message: str, level: str = "info") -> None:
        if self.store.is_current(run_id):
            self.event_bus.publish(LogEvent(message=message, level=level))
