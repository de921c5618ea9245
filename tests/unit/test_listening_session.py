"""Unit tests for listening session run control and stale-run isolation."""

from __future__ import annotations

import asyncio
import gc
from pathlib import Path

from scholarvoice.models.datatypes import DocumentInput, SegmentStatus, TextChunk
from scholarvoice.pipeline import ListeningSession
from tests.pipeline_doubles import GatedNarrator, build_pipeline


def test_new_run_cancels_in_flight_run(tmp_path: Path) -> None:
    """Starting a second run supersedes the first without mixing their segments."""

    narrator = GatedNarrator(gate_marker="slow paper")
    pipeline, _ = build_pipeline(tmp_path, narrator=narrator)
    session = ListeningSession(pipeline)

    async def scenario() -> tuple[asyncio.Task, tuple]:
        first = session.start_run(DocumentInput.from_text("A slow paper body."))
        await asyncio.to_thread(narrator.started.wait, 5)
        second = session.start_run(DocumentInput.from_text("A quick note."))
        narrator.release.set()
        result = await second
        await asyncio.gather(first, return_exceptions=True)
        return first, result

    first, segments = asyncio.run(scenario())

    assert first.cancelled() is True
    assert session.is_running is False
    assert [segment.original_text for segment in segments] == ["A quick note."]
    assert segments[0].status is SegmentStatus.SUCCESS
    assert session.store.snapshot() == segments


def test_superseded_run_writes_are_discarded(tmp_path: Path) -> None:
    """A run overtaken by a newer one returns nothing and leaves no audio behind."""

    narrator = GatedNarrator(gate_marker="gate")
    pipeline, _ = build_pipeline(tmp_path, narrator=narrator)

    async def scenario() -> tuple[tuple, tuple]:
        stale = asyncio.create_task(pipeline.run([TextChunk(title="Old", text="gate text")]))
        await asyncio.to_thread(narrator.started.wait, 5)
        fresh = await pipeline.run(
            [TextChunk(title="New", text="first"), TextChunk(title="Next", text="second")]
        )
        narrator.release.set()
        return await stale, fresh

    stale_result, fresh_result = asyncio.run(scenario())

    assert stale_result == ()
    assert [segment.title for segment in pipeline.store.snapshot()] == ["New", "Next"]
    assert all(segment.status is SegmentStatus.SUCCESS for segment in fresh_result)
    assert not list((tmp_path / "audio" / "run-001").glob("*.wav"))
    assert pipeline.scheduler.pointer == 0


def test_listener_inputs_pass_through_to_scheduler(tmp_path: Path) -> None:
    """Selection and finished events drive the playback pointer."""

    pipeline, _ = build_pipeline(tmp_path)
    session = ListeningSession(pipeline)

    segments = asyncio.run(
        session.run(DocumentInput.from_text("Abstract\n\nOne.\n\nResults\n\nTwo."))
    )

    assert len(segments) == 2
    assert session.audible_segment() is segments[0]
    assert session.segment_finished(0) == 1
    assert session.audible_segment() is segments[1]
    assert session.select_segment(0) == 0
    assert session.segment_finished(1) == 0


def test_close_releases_audio_and_resets(tmp_path: Path) -> None:
    """Closing the session deletes owned audio and idles the pointer."""

    pipeline, _ = build_pipeline(tmp_path)
    session = ListeningSession(pipeline)

    async def scenario() -> tuple:
        segments = await session.run(DocumentInput.from_text("Abstract\n\nShort body."))
        await session.close()
        return segments

    segments = asyncio.run(scenario())

    assert segments[0].audio is not None
    assert segments[0].audio.released is True
    assert not segments[0].audio.path.exists()
    assert session.store.snapshot() == ()
    assert session.scheduler.pointer is None


def test_replaced_failed_run_does_not_report_unretrieved_exception(tmp_path: Path) -> None:
    """A failed run that nobody awaited is dropped quietly when a new run starts."""

    pipeline, _ = build_pipeline(tmp_path)
    session = ListeningSession(pipeline)
    reported: list[dict] = []

    async def scenario() -> tuple:
        asyncio.get_running_loop().set_exception_handler(
            lambda _loop, context: reported.append(context)
        )
        failed = session.start_run(DocumentInput.from_path(tmp_path / "missing.pdf"))
        await asyncio.wait([failed])
        assert failed.done()
        del failed
        segments = await session.run(DocumentInput.from_text("Abstract\n\nShort body."))
        gc.collect()
        return segments

    segments = asyncio.run(scenario())

    assert segments[0].status is SegmentStatus.SUCCESS
    assert reported == []
