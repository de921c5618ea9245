"""Narration interfaces and provider integrations.

Responsibilities:
- Define a protocol turning source text into narration text.
- Provide OpenAI-backed literal translation and podcast script writing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from ..errors import NarrationError
from .cache import ResponseCache
from .openai_client import OpenAIChatClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter


class Narrator(Protocol):
    """Protocol for narration providers."""

    def narrate(self, text: str) -> str:
        """Return narration text for one segment's source text."""


class _OpenAINarrator(ABC):
    """Shared OpenAI chat-completions narration with response caching."""

    operation = "narrate"
    temperature = 0.0

    def __init__(
        self,
        model: str = "gpt-4.1-mini",
        target_language: str = "zh",
        provider_id: str = "openai",
        api_key: str | None = None,
        response_cache: ResponseCache | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize narrator settings and OpenAI client dependencies."""

        self.model = model
        self.target_language = target_language
        self.provider_id = provider_id
        self.cache = response_cache if response_cache is not None else ResponseCache()
        self.client = OpenAIChatClient(api_key=api_key, rate_limiter=rate_limiter)
        self.prompts = PromptLibrary()

    def narrate(self, text: str) -> str:
        """Narrate one text, reusing a cached response for identical input."""

        cache_key = self.cache.make_key(
            provider=self.provider_id,
            model=self.model,
            operation=self.operation,
            input_identity={"target_language": self.target_language, "source_text": text},
        )
        narration = self.cache.get(cache_key)
        if narration is None:
            narration = self.client.chat_completion_text(
                model=self.model,
                system_prompt=self._system_prompt(),
                user_prompt=self._user_prompt(text),
                temperature=self.temperature,
            ).strip()
            if not narration:
                raise NarrationError(f"{self.operation.capitalize()} output was empty.")
            self.cache.set(cache_key, narration)
        return narration

    @abstractmethod
    def _system_prompt(self) -> str:
        """Return the system prompt for this narration style."""

    @abstractmethod
    def _user_prompt(self, text: str) -> str:
        """Return the user prompt wrapping one source text."""

    @property
    def cache_hits(self) -> int:
        """Return narration cache hit count."""

        return self.cache.hits

    @property
    def cache_misses(self) -> int:
        """Return narration cache miss count."""

        return self.cache.misses


class OpenAITranslator(_OpenAINarrator):
    """Literal-mode narrator translating academic text into spoken prose."""

    operation = "translate"

    def _system_prompt(self) -> str:
        return self.prompts.translation_system_prompt(self.target_language)

    def _user_prompt(self, text: str) -> str:
        return self.prompts.translation_user_prompt(text)


class PodcastScriptWriter(_OpenAINarrator):
    """Podcast-mode narrator condensing a whole document into a host script."""

    operation = "podcast"
    temperature = 0.7

    def _system_prompt(self) -> str:
        return self.prompts.podcast_system_prompt(self.target_language)

    def _user_prompt(self, text: str) -> str:
        return self.prompts.podcast_user_prompt(text)
