"""Stage telemetry helper methods for the segment pipeline.

Responsibilities:
- Emit document-level stage start/complete/failure events.
- Run blocking stage actions off the event loop with consistent telemetry hooks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TypeVar

_StageResult = TypeVar("_StageResult")


class PipelineTelemetryMixin:
    """Provide stage-telemetry helper methods."""

    def _on_stage_start(self, stage_name: str) -> None:
        """Emit a stage-start event to the structured logger."""

        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)

    def _on_stage_complete(self, stage_name: str) -> None:
        """Emit a stage-complete event to the structured logger."""

        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)

    def _on_stage_failure(self, stage_name: str, exc: Exception) -> None:
        """Emit a stage-failure event with sanitized exception metadata."""

        if self._run_logger is not None:
            self._run_logger.log_stage_failure(stage_name, type(exc).__name__)

    async def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named blocking stage in a worker thread with telemetry events."""

        self._on_stage_start(stage_name)
        try:
            result = await asyncio.to_thread(action)
        except Exception as exc:
            self._on_stage_failure(stage_name, exc)
            raise
        self._on_stage_complete(stage_name)
        return result
