"""Command-line interface for ScholarVoice.

Responsibilities:
- Expose user-facing commands for listening runs, segmentation previews, and
  credential management.
- Convert CLI arguments into `ScholarvoiceConfig` and drive a listening session.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_chunk_preview, echo_segment_summary, exit_with_command_error
from .config import ConfigLoader, ProviderRuntimeConfig, RuntimeConfigSources, ScholarvoiceConfig
from .credentials import create_credential_store, persist_api_key
from .errors import ExtractionError, PipelineStageError
from .io.document_extractor import DocumentTextExtractor
from .io.storage import ArtifactStore
from .models.datatypes import DocumentInput, ReadingMode, Segment
from .parsing import normalize_optional_string, parse_reading_mode
from .pipeline.orchestrator import MAX_DOCUMENT_CHARS
from .pipeline.session import ListeningSession
from .runtime import build_listening_session, resolve_runtime_config, validate_config
from .telemetry.logger import RunLogger
from .text.segmenter import DEFAULT_TARGET_CHARS, SemanticSegmenter

app = typer.Typer(
    name="scholarvoice",
    no_args_is_help=True,
    help="ScholarVoice CLI: listen to academic documents as narrated audio.",
)


def _load_yaml_config(config_path: Path | None) -> ScholarvoiceConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify the config path and file permissions.",
        ) from exc


def _resolve_command_base_config(
    config_file: Path | None,
    document: Path | None,
    out: Path | None,
    mode: str | None,
    language: str | None,
    target_chars: int | None,
) -> ScholarvoiceConfig:
    """Resolve effective command config from YAML defaults and explicit CLI overrides."""

    loaded_config = _load_yaml_config(config_file)

    if loaded_config is None:
        if document is None:
            raise PipelineStageError(
                stage="config",
                detail="Input document path is required when `--config` is not provided.",
                hint="Pass `<document>` or use `--config <path.yaml>` with `input_document`.",
            )
        loaded_config = ScholarvoiceConfig(input_document=document, output_dir=Path("out"))

    if document is not None:
        loaded_config.input_document = document
    if out is not None:
        loaded_config.output_dir = out
    if language is not None:
        loaded_config.target_language = language
    if target_chars is not None:
        loaded_config.segment_target_chars = target_chars
    if mode is not None:
        try:
            loaded_config.mode = parse_reading_mode(mode)
        except ValueError as exc:
            raise PipelineStageError(
                stage="config",
                detail=str(exc),
                hint="Use `--mode literal` or `--mode podcast`.",
            ) from exc
    return loaded_config


_RUNTIME_OVERRIDE_KEYS = ("model_narrate", "model_tts", "tts_voice", "api_key")


def _prompt_hidden_api_key(label: str) -> str | None:
    """Ask for an API key without echoing it; blank input yields `None`."""

    return normalize_optional_string(
        typer.prompt(label, default="", hide_input=True, show_default=False)
    )


def _runtime_sources(
    overrides: dict[str, str | None],
    *,
    prompt_api_key: bool,
    store_api_key: bool,
) -> RuntimeConfigSources:
    """Collect narrator and speech settings from CLI, keyring, and environment.

    A key typed for this run (via `--api-key` or the hidden prompt) is written
    to the keyring unless `store_api_key` is off.
    """

    cli_values: dict[str, str] = {}
    for key in _RUNTIME_OVERRIDE_KEYS:
        value = normalize_optional_string(overrides.get(key))
        if value is not None:
            cli_values[key] = value
    if prompt_api_key and "api_key" not in cli_values:
        prompted = _prompt_hidden_api_key("OpenAI API key (hidden; leave blank to skip)")
        if prompted is not None:
            cli_values["api_key"] = prompted

    credential_store = create_credential_store()
    stored_api_key = credential_store.get_api_key()
    if store_api_key and "api_key" in cli_values:
        persist_api_key(
            credential_store,
            cli_values["api_key"],
            hint=(
                "Install and configure a keyring backend, or rerun with "
                "`--no-store-api-key` for one-off usage."
            ),
        )
        typer.echo("Stored API key in secure credential storage.")

    return RuntimeConfigSources(
        cli=cli_values,
        secure={} if stored_api_key is None else {"api_key": stored_api_key},
        env=os.environ,
    )



async def _listen(
    session: ListeningSession,
    document: DocumentInput,
    mode: ReadingMode,
) -> tuple[Segment, ...]:
    """Run one document through the session and return its final segments."""

    return await session.run(document, mode)


def _segments_summary_payload(
    config: ScholarvoiceConfig,
    runtime: ProviderRuntimeConfig,
    segments: tuple[Segment, ...],
) -> dict[str, object]:
    """Build the non-secret JSON summary written next to segment audio."""

    return {
        "document": str(config.input_document),
        "mode": config.mode.value,
        "target_language": config.target_language,
        "providers": runtime.as_summary_metadata(),
        "segments": [
            {
                "id": segment.id,
                "position": segment.position,
                "title": segment.display_title,
                "status": segment.status.value,
                "original_chars": len(segment.original_text),
                "translated_text": segment.translated_text,
                "audio_path": str(segment.audio.path) if segment.audio is not None else None,
                "duration_seconds": (
                    round(segment.audio.duration_seconds, 3)
                    if segment.audio is not None
                    else None
                ),
                "error": segment.error,
            }
            for segment in segments
        ],
    }


@app.command("read")
def read_command(
    document: Annotated[
        Path | None,
        typer.Argument(
            help="Path to a PDF, TXT, or MD document. Required unless provided by `--config`.",
        ),
    ] = None,
    mode: Annotated[
        str | None,
        typer.Option("--mode", help="Reading mode: `literal` or `podcast`."),
    ] = None,
    out: Annotated[
        Path | None,
        typer.Option("--out", help="Output directory (overrides config file value)."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with command defaults."),
    ] = None,
    language: Annotated[
        str | None,
        typer.Option("--language", help="Spoken target language code, e.g. `zh`."),
    ] = None,
    target_chars: Annotated[
        int | None,
        typer.Option("--target-chars", min=1, help="Target segment size in characters."),
    ] = None,
    model_narrate: Annotated[
        str | None,
        typer.Option("--model-narrate", help="Narration (translation/script) model override."),
    ] = None,
    model_tts: Annotated[
        str | None,
        typer.Option("--model-tts", help="TTS model id override."),
    ] = None,
    tts_voice: Annotated[
        str | None,
        typer.Option("--tts-voice", help="TTS voice id override."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Provider API key override. Prefer `--prompt-api-key` to avoid shell history.",
        ),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option(
            "--prompt-api-key",
            help="Prompt for API key with hidden input (never echoed).",
        ),
    ] = False,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist CLI-entered API key to secure credential storage.",
        ),
    ] = True,
) -> None:
    """Narrate a document segment by segment, or as one podcast summary."""

    try:
        runtime_sources = _runtime_sources(
            {
                "model_narrate": model_narrate,
                "model_tts": model_tts,
                "tts_voice": tts_voice,
                "api_key": api_key,
            },
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
        )
        config = _resolve_command_base_config(
            config_file=config_file,
            document=document,
            out=out,
            mode=mode,
            language=language,
            target_chars=target_chars,
        )
        config.runtime_sources = runtime_sources

        validate_config(config)
        runtime = resolve_runtime_config(config)
        session = build_listening_session(config, runtime, run_logger=RunLogger())
        segments = asyncio.run(
            _listen(session, DocumentInput.from_path(config.input_document), config.mode)
        )
        summary_path = ArtifactStore(config.output_dir).save_json(
            Path("segments.json"),
            _segments_summary_payload(config, runtime, segments),
        )
    except Exception as exc:
        exit_with_command_error("read", exc)

    echo_segment_summary(segments)
    pointer = session.scheduler.pointer
    if pointer is not None:
        typer.echo(f"Playback starts at: {segments[pointer].display_title}")
    typer.echo(f"Summary: {summary_path}")


@app.command("segments")
def segments_command(
    document: Annotated[Path, typer.Argument(help="Path to a PDF, TXT, or MD document.")],
    target_chars: Annotated[
        int,
        typer.Option("--target-chars", min=1, help="Target segment size in characters."),
    ] = DEFAULT_TARGET_CHARS,
    max_chars: Annotated[
        int,
        typer.Option("--max-chars", min=1, help="Ceiling applied to extracted text."),
    ] = MAX_DOCUMENT_CHARS,
) -> None:
    """Preview how a document would be split into segments, without provider calls."""

    try:
        try:
            text = DocumentTextExtractor().extract(DocumentInput.from_path(document))
        except ExtractionError as exc:
            raise PipelineStageError(
                stage="extract",
                detail=str(exc),
                hint="Verify the input exists and is a text-based PDF, TXT, or MD file.",
            ) from exc
        if len(text) > max_chars:
            typer.echo(f"Text length {len(text)} exceeds limit; truncating to {max_chars} chars.")
            text = text[:max_chars]
        chunks = SemanticSegmenter().segment(text, target_chars)
    except Exception as exc:
        exit_with_command_error("segments", exc)

    echo_chunk_preview(chunks)


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            PipelineStageError(
                stage="credentials",
                detail="`--set-api-key` and `--clear-api-key` cannot be used together.",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = _prompt_hidden_api_key("OpenAI API key (hidden input)")
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                PipelineStageError(
                    stage="credentials",
                    detail="No API key entered.",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            persist_api_key(
                credential_store,
                prompted_api_key,
                hint="Install and configure a keyring backend and retry.",
            )
        except PipelineStageError as exc:
            exit_with_command_error("credentials", exc)

        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        removed = credential_store.clear_api_key()
        if removed:
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    availability = "available" if credential_store.is_available() else "unavailable"
    has_stored_key = credential_store.get_api_key() is not None
    status = "present" if has_stored_key else "not set"
    typer.echo(f"Secure credential storage: {availability}")
    typer.echo(f"Stored OpenAI API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
