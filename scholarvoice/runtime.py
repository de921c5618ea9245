"""Runtime configuration and session assembly helpers.

Responsibilities:
- Validate configuration and resolve provider runtime values with precedence rules.
- Assemble a listening session from configured providers and collaborators.
"""

from __future__ import annotations

import os

from .audio.library import AudioLibrary
from .config import ProviderRuntimeConfig, RuntimeConfigSources, ScholarvoiceConfig
from .errors import PipelineStageError
from .llm.cache import ResponseCache
from .llm.rate_limiter import RateLimiter
from .models.datatypes import ReadingMode
from .pipeline.orchestrator import SegmentPipeline
from .pipeline.scheduler import PlaybackScheduler
from .pipeline.session import ListeningSession
from .pipeline.store import SegmentStore
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger
from .tts.voices import VoiceProfile


def validate_config(config: ScholarvoiceConfig) -> None:
    """Validate top-level configuration and map failures to a stage-aware error."""

    try:
        config.validate()
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint="Update mode/provider/model options and rerun the command.",
        ) from exc


def resolve_runtime_config(config: ScholarvoiceConfig) -> ProviderRuntimeConfig:
    """Resolve runtime provider settings with deterministic source precedence."""

    try:
        env_source = config.runtime_sources.env or os.environ
        runtime_sources = RuntimeConfigSources(
            cli=config.runtime_sources.cli,
            secure=config.runtime_sources.secure,
            env=env_source,
        )
        return config.resolved_provider_runtime(runtime_sources)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=str(exc),
            hint=(
                "Set supported provider IDs and non-empty model/voice values in "
                "CLI options or `SCHOLARVOICE_*` environment variables."
            ),
        ) from exc


def build_listening_session(
    config: ScholarvoiceConfig,
    runtime: ProviderRuntimeConfig,
    run_logger: RunLogger | None = None,
) -> ListeningSession:
    """Create a session whose pipeline uses the configured providers."""

    rate_limiter = RateLimiter()
    response_cache = ResponseCache()
    narrators = {
        mode: ProviderFactory.create_narrator(
            provider_id=runtime.narrator_provider,
            mode=mode,
            model=runtime.narrate_model,
            target_language=config.target_language,
            api_key=runtime.api_key,
            response_cache=response_cache,
            rate_limiter=rate_limiter,
        )
        for mode in ReadingMode
    }
    synthesizer = ProviderFactory.create_speech_synthesizer(
        provider_id=runtime.tts_provider,
        model=runtime.tts_model,
        voice=VoiceProfile(provider_voice_id=runtime.tts_voice, language=config.target_language),
        api_key=runtime.api_key,
        rate_limiter=rate_limiter,
    )

    store = SegmentStore()
    if run_logger is not None:
        store.event_bus.subscribe(run_logger.on_event)
    pipeline = SegmentPipeline(
        store=store,
        scheduler=PlaybackScheduler(store),
        narrators=narrators,
        synthesizer=synthesizer,
        audio_library=AudioLibrary(config.output_dir / "audio"),
        run_logger=run_logger,
        target_chars=config.segment_target_chars,
        max_document_chars=config.max_document_chars,
        sample_rate_hz=config.sample_rate_hz,
    )
    return ListeningSession(pipeline)
