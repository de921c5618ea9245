"""Narration provider components.

This package contains the OpenAI REST client, prompt templates, response
caching, request pacing, and the translation and podcast narrators.
"""

from .cache import ResponseCache
from .narrators import Narrator, OpenAITranslator, PodcastScriptWriter
from .openai_client import OpenAIChatClient, OpenAIProviderError, OpenAISpeechClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter

__all__ = [
    "Narrator",
    "OpenAIChatClient",
    "OpenAIProviderError",
    "OpenAISpeechClient",
    "OpenAITranslator",
    "PodcastScriptWriter",
    "PromptLibrary",
    "RateLimiter",
    "ResponseCache",
]
