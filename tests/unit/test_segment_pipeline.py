"""Unit tests for sequential segment pipeline orchestration."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from scholarvoice.errors import PipelineStageError
from scholarvoice.models.datatypes import DocumentInput, ReadingMode, SegmentStatus, TextChunk
from scholarvoice.pipeline import PODCAST_SEGMENT_TITLE, StoreEvent
from scholarvoice.text.segmenter import SemanticSegmenter
from tests.pipeline_doubles import BlankNarrator, FakeNarrator, FakeSynthesizer, build_pipeline


class RecordingSegmenter(SemanticSegmenter):
    """Segmenter that remembers the text it was asked to split."""

    def __init__(self) -> None:
        self.received: list[str] = []

    def segment(self, document: str, target_chars: int = 3500) -> list[TextChunk]:
        self.received.append(document)
        return super().segment(document, target_chars)


def test_all_segments_succeed_in_order(tmp_path: Path, academic_document: str) -> None:
    """A clean run should finish every segment and auto-start playback at zero."""

    pipeline, recorder = build_pipeline(tmp_path)

    segments = asyncio.run(pipeline.run_document(DocumentInput.from_text(academic_document)))

    assert [segment.title for segment in segments] == [
        "Start of Document",
        "Abstract",
        "Introduction",
        "Results",
    ]
    assert all(segment.status is SegmentStatus.SUCCESS for segment in segments)
    assert all(segment.audio is not None and segment.audio.path.exists() for segment in segments)
    assert segments[1].translated_text == f"narrated: {segments[1].original_text}"
    assert recorder.progress() == [(1, 4), (2, 4), (3, 4), (4, 4), None]
    assert recorder.pointers() == [0]
    assert pipeline.scheduler.audible_segment() is segments[0]

    messages = [event.message for event in recorder.logs()]
    assert messages[0] == "Extracting raw text from `pasted-text`..."
    assert "Created 4 logical segments." in messages
    assert '"Abstract" Ready.' in messages
    assert messages[-1] == "All segments processed. (4 ready, 0 failed)"


def test_narration_failure_stays_segment_local(tmp_path: Path, academic_document: str) -> None:
    """One failed segment must not stop later segments from being processed."""

    narrator = FakeNarrator(fail_marker="Prior work")
    pipeline, recorder = build_pipeline(tmp_path, narrator=narrator)

    segments = asyncio.run(pipeline.run_document(DocumentInput.from_text(academic_document)))

    statuses = [segment.status for segment in segments]
    assert all(status.is_terminal for status in statuses)
    assert statuses == [
        SegmentStatus.SUCCESS,
        SegmentStatus.SUCCESS,
        SegmentStatus.ERROR,
        SegmentStatus.SUCCESS,
    ]
    failed = segments[2]
    assert failed.translated_text is None
    assert failed.audio is None
    assert failed.error == "Translation service unavailable."
    assert len(narrator.calls) == 4
    assert '"Introduction" Failed: Translation service unavailable.' in [
        event.message for event in recorder.logs() if event.level == "error"
    ]
    assert recorder.logs()[-1].message == "All segments processed. (3 ready, 1 failed)"


def test_synthesis_failure_keeps_narration_text(tmp_path: Path, academic_document: str) -> None:
    """A speech failure records the error but keeps the narration already produced."""

    pipeline, _ = build_pipeline(
        tmp_path,
        synthesizer=FakeSynthesizer(fail_marker="completion rates"),
    )

    segments = asyncio.run(pipeline.run_document(DocumentInput.from_text(academic_document)))

    last = segments[-1]
    assert last.status is SegmentStatus.ERROR
    assert last.error == "No audio data received."
    assert last.translated_text is not None
    assert last.audio is None


def test_blank_narration_counts_as_failure(tmp_path: Path) -> None:
    """Whitespace-only narration must never reach speech synthesis."""

    synthesizer = FakeSynthesizer()
    pipeline, _ = build_pipeline(tmp_path, narrator=BlankNarrator(), synthesizer=synthesizer)

    segments = asyncio.run(pipeline.run([TextChunk(title="Abstract", text="Some text.")]))

    assert segments[0].status is SegmentStatus.ERROR
    assert segments[0].error == "Narration output was empty."
    assert synthesizer.calls == []
    assert pipeline.scheduler.pointer is None


def test_podcast_mode_produces_single_summary_segment(
    tmp_path: Path,
    academic_document: str,
) -> None:
    """Podcast mode narrates the whole document as one segment."""

    pipeline, recorder = build_pipeline(tmp_path)

    segments = asyncio.run(
        pipeline.run_document(DocumentInput.from_text(academic_document), ReadingMode.PODCAST)
    )

    assert len(segments) == 1
    assert segments[0].title == PODCAST_SEGMENT_TITLE
    assert segments[0].original_text == academic_document
    assert segments[0].translated_text.startswith("podcast: ")
    assert segments[0].status is SegmentStatus.SUCCESS
    messages = [event.message for event in recorder.logs()]
    assert "Generating podcast script..." in messages
    assert not any(message.startswith("Created") for message in messages)


def test_extraction_failure_is_document_fatal(tmp_path: Path) -> None:
    """A missing document should abort the run before any segment exists."""

    pipeline, recorder = build_pipeline(tmp_path)
    document = DocumentInput.from_path(tmp_path / "missing.pdf")

    with pytest.raises(PipelineStageError) as exc_info:
        asyncio.run(pipeline.run_document(document))

    assert exc_info.value.stage == "extract"
    assert "missing.pdf" in exc_info.value.detail
    assert pipeline.store.snapshot() == ()
    critical = [event for event in recorder.logs() if event.level == "critical"]
    assert len(critical) == 1
    assert critical[0].message.startswith("Critical Error: ")
    assert recorder.progress() == [None]


def test_oversized_document_is_truncated_with_warning(tmp_path: Path) -> None:
    """Text beyond the ceiling is cut before segmentation."""

    segmenter = RecordingSegmenter()
    pipeline, recorder = build_pipeline(tmp_path, segmenter=segmenter)
    document = DocumentInput.from_text("word " * 12000 + "tail")

    asyncio.run(pipeline.run_document(document))

    assert len(segmenter.received) == 1
    assert len(segmenter.received[0]) == 50000
    warnings = [event.message for event in recorder.logs() if event.level == "warning"]
    assert warnings == ["Text length 60004 exceeds safety limit. Truncating to 50000 chars."]


def test_first_success_reclaims_pointer_from_early_selection(tmp_path: Path) -> None:
    """Segment zero finishing moves playback back to it after an early pick."""

    pipeline, recorder = build_pipeline(tmp_path)

    def select_second_once_populated(event: object) -> None:
        if (
            isinstance(event, StoreEvent)
            and event.segments
            and pipeline.scheduler.pointer is None
            and all(segment.status is SegmentStatus.PENDING for segment in event.segments)
        ):
            pipeline.scheduler.select(1)

    pipeline.event_bus.subscribe(select_second_once_populated)

    asyncio.run(
        pipeline.run([TextChunk(title="A", text="one"), TextChunk(title="B", text="two")])
    )

    assert pipeline.scheduler.pointer == 0
    assert recorder.pointers() == [1, 0]



def test_pointer_advances_onto_unready_segment_and_waits(tmp_path: Path) -> None:
    """The pointer never skips a failed segment on its own."""

    pipeline, _ = build_pipeline(tmp_path, narrator=FakeNarrator(fail_marker="broken"))
    chunks = [
        TextChunk(title="One", text="fine"),
        TextChunk(title="Two", text="broken"),
        TextChunk(title="Three", text="fine again"),
    ]

    asyncio.run(pipeline.run(chunks))

    assert pipeline.scheduler.pointer == 0
    assert pipeline.scheduler.on_segment_finished(0) == 1
    assert pipeline.scheduler.is_waiting is True
    assert pipeline.scheduler.audible_segment() is None


def test_empty_chunk_list_is_rejected(tmp_path: Path) -> None:
    """Processing nothing is a document-level error."""

    pipeline, recorder = build_pipeline(tmp_path)

    with pytest.raises(PipelineStageError) as exc_info:
        asyncio.run(pipeline.run([]))

    assert exc_info.value.stage == "segment"
    assert recorder.logs()[-1].level == "critical"


def test_new_run_releases_previous_audio(tmp_path: Path) -> None:
    """Starting another run deletes audio files owned by the previous run."""

    pipeline, _ = build_pipeline(tmp_path)
    first = asyncio.run(pipeline.run([TextChunk(title="One", text="alpha")]))
    first_path = first[0].audio.path

    second = asyncio.run(pipeline.run([TextChunk(title="One", text="beta")]))

    assert first[0].audio.released is True
    assert not first_path.exists()
    assert second[0].audio.path.exists()
    assert second[0].audio.path != first_path
