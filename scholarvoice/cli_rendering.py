"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
segment previews, and per-segment run summaries.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from .errors import PipelineStageError
from .models.datatypes import Segment, SegmentStatus, TextChunk

_STATUS_COLORS = {
    SegmentStatus.SUCCESS: typer.colors.GREEN,
    SegmentStatus.ERROR: typer.colors.RED,
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, PipelineStageError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_chunk_preview(chunks: list[TextChunk]) -> None:
    """Print compact segment index/title/length rows for a segmentation preview."""

    for index, chunk in enumerate(chunks, start=1):
        typer.echo(f"{index}. {chunk.title} ({len(chunk.text)} chars)")
    typer.echo(f"Segments: {len(chunks)}")


def echo_segment_summary(segments: tuple[Segment, ...]) -> None:
    """Print one status row per segment and the success/error totals."""

    for segment in segments:
        line = f"{segment.position + 1}. [{segment.status.value}] {segment.display_title}"
        if segment.status is SegmentStatus.SUCCESS and segment.audio is not None:
            line += f" -> {segment.audio.path} ({segment.audio.duration_seconds:.1f}s)"
        elif segment.error:
            line += f": {segment.error}"
        typer.secho(line, fg=_STATUS_COLORS.get(segment.status))

    ready = sum(1 for segment in segments if segment.status is SegmentStatus.SUCCESS)
    typer.echo(f"Ready: {ready}/{len(segments)}")
