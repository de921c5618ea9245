"""Unit tests for loguru-backed run logging."""

from __future__ import annotations

from datetime import datetime
import io

from scholarvoice.models.datatypes import PipelineProgress
from scholarvoice.pipeline import LogEvent, PointerEvent, ProgressEvent
from scholarvoice.telemetry.logger import RunLogger


def test_phase_lines_are_deterministic_and_sanitized() -> None:
    """Stage events should render as stable key/value phase lines."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.log_stage_start("extract")
    run_logger.log_stage_complete("extract")
    run_logger.log_stage_failure("segment", "Pipeline Stage Error")

    assert sink.getvalue().splitlines() == [
        "[phase] level=INFO stage=extract event=start",
        "[phase] level=INFO stage=extract event=complete",
        "[phase] level=ERROR stage=segment event=failure error_type=Pipeline_Stage_Error",
    ]


def test_run_events_are_forwarded_with_timestamps() -> None:
    """Log events keep their timestamp prefix; progress is summarized; others ignored."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.on_event(
        LogEvent(
            message='"Abstract" Ready.',
            timestamp=datetime(2024, 5, 1, 9, 3, 7),
        )
    )
    run_logger.on_event(ProgressEvent(run_id=1, progress=PipelineProgress(current=2, total=5)))
    run_logger.on_event(ProgressEvent(run_id=1, progress=None))
    run_logger.on_event(PointerEvent(pointer=0, previous=None))

    assert sink.getvalue().splitlines() == [
        '[09:03:07] "Abstract" Ready.',
        "[progress] 2/5",
    ]


def test_critical_events_are_emitted() -> None:
    """Document-fatal messages use the critical level and still reach the sink."""

    sink = io.StringIO()
    run_logger = RunLogger(sink=sink)

    run_logger.on_event(LogEvent(message="Critical Error: boom", level="critical"))

    assert "Critical Error: boom" in sink.getvalue()
