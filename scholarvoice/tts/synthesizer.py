"""Speech synthesizer interfaces and OpenAI-backed implementation.

Responsibilities:
- Define a protocol for text-to-raw-PCM speech synthesis.
- Provide OpenAI-backed synthesis, splitting long narration into request-sized
  pieces and concatenating their samples.
"""

from __future__ import annotations

import re
from typing import Protocol

from ..errors import SynthesisError
from ..llm.openai_client import OpenAISpeechClient
from ..llm.rate_limiter import RateLimiter
from .voices import VoiceProfile


class SpeechSynthesizer(Protocol):
    """Protocol for speech provider implementations."""

    def synthesize(self, text: str) -> bytes:
        """Return raw 16-bit little-endian mono PCM for narration text."""


class OpenAISpeechSynthesizer:
    """OpenAI-backed synthesizer returning raw 24 kHz PCM16LE samples."""

    MAX_INPUT_CHARS = 4000
    _SENTENCE_END_RE = re.compile(r"(?<=[.!?。！？])\s*")

    def __init__(
        self,
        voice: VoiceProfile,
        model: str = "gpt-4o-mini-tts",
        provider_id: str = "openai",
        api_key: str | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize OpenAI-backed speech synthesizer settings."""

        self.voice = voice
        self.model = model
        self.provider_id = provider_id
        self.client = OpenAISpeechClient(api_key=api_key, rate_limiter=rate_limiter)

    def synthesize(self, text: str) -> bytes:
        """Synthesize narration and return concatenated PCM samples."""

        pieces = self.request_pieces(text)
        if not pieces:
            raise SynthesisError("Nothing to synthesize: narration text is empty.")

        pcm = bytearray()
        for piece in pieces:
            pcm.extend(
                self.client.synthesize_pcm(
                    model=self.model,
                    voice=self.voice.provider_voice_id,
                    text=piece,
                    speed=self.voice.clamped_rate,
                    instructions=self.voice.instructions,
                )
            )
        if not pcm:
            raise SynthesisError("No audio data received.")
        return bytes(pcm)

    def request_pieces(self, text: str) -> list[str]:
        """Split text on sentence ends into pieces within the request input limit."""

        stripped = text.strip()
        if len(stripped) <= self.MAX_INPUT_CHARS:
            return [stripped] if stripped else []

        pieces: list[str] = []
        current = ""
        for sentence in self._SENTENCE_END_RE.split(stripped):
            while len(sentence) > self.MAX_INPUT_CHARS:
                if current:
                    pieces.append(current)
                    current = ""
                pieces.append(sentence[: self.MAX_INPUT_CHARS])
                sentence = sentence[self.MAX_INPUT_CHARS :]
            candidate = f"{current} {sentence}".strip() if current else sentence
            if len(candidate) > self.MAX_INPUT_CHARS:
                pieces.append(current)
                current = sentence
            else:
                current = candidate
        if current.strip():
            pieces.append(current.strip())
        return [piece for piece in pieces if piece.strip()]
