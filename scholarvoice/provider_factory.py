"""Provider factory helpers for narration and speech stages.

Responsibilities:
- Resolve provider identifiers to concrete stage implementations.
- Keep orchestration independent from concrete provider class construction.

Notes:
- Only `openai` is implemented at the moment.
"""

from __future__ import annotations

from .llm.cache import ResponseCache
from .llm.narrators import Narrator, OpenAITranslator, PodcastScriptWriter
from .llm.rate_limiter import RateLimiter
from .models.datatypes import ReadingMode
from .tts.synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .tts.voices import VoiceProfile


class ProviderFactory:
    """Factory for provider-backed stage clients used by the pipeline."""

    @staticmethod
    def create_narrator(
        provider_id: str,
        mode: ReadingMode,
        model: str,
        target_language: str,
        api_key: str | None = None,
        response_cache: ResponseCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> Narrator:
        """Create the narrator for a reading mode and provider identifier."""

        if provider_id != "openai":
            raise ValueError(f"Unsupported narrator provider `{provider_id}`.")
        narrator_class = PodcastScriptWriter if mode is ReadingMode.PODCAST else OpenAITranslator
        return narrator_class(
            model=model,
            target_language=target_language,
            provider_id=provider_id,
            api_key=api_key,
            response_cache=response_cache,
            rate_limiter=rate_limiter,
        )

    @staticmethod
    def create_speech_synthesizer(
        provider_id: str,
        model: str,
        voice: VoiceProfile,
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> SpeechSynthesizer:
        """Create a speech synthesizer for a configured provider identifier."""

        if provider_id == "openai":
            return OpenAISpeechSynthesizer(
                voice=voice,
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                rate_limiter=rate_limiter,
            )
        raise ValueError(f"Unsupported TTS provider `{provider_id}`.")
