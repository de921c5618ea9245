"""Structured run logging utilities.

Responsibilities:
- Emit concise, deterministic phase-level runtime logs through `loguru`.
- Forward run log and progress events to the same sink.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger

from ..pipeline.events import LogEvent, ProgressEvent, RunEvent


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit phase and run-event logs for CLI-observable pipeline activity."""

    _EVENT_LEVELS = {
        "info": "INFO",
        "warning": "WARNING",
        "error": "ERROR",
        "critical": "CRITICAL",
    }

    def __init__(self, sink: TextIO | None = None) -> None:
        """Initialize logger sink and configure plain message formatting."""

        self._sink = sink or sys.stdout
        logger.remove()
        logger.add(self._sink, format="{message}", level="INFO", colorize=False)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        """Emit one structured phase log line."""

        logger.log(
            level,
            f"[phase] level={level} stage={stage} event={event}{_format_context(context)}",
        )

    def log_stage_start(self, stage: str) -> None:
        """Emit a stage-start runtime event."""

        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str) -> None:
        """Emit a stage-complete runtime event."""

        self._emit("INFO", "complete", stage)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure runtime event without sensitive payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def on_event(self, event: RunEvent) -> None:
        """Write log and progress events; other events are ignored."""

        if isinstance(event, LogEvent):
            logger.log(self._EVENT_LEVELS.get(event.level, "INFO"), event.render())
        elif isinstance(event, ProgressEvent) and event.progress is not None:
            logger.info(f"[progress] {event.progress.current}/{event.progress.total}")
