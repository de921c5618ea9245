"""Voice profile models for synthesis configuration.

Responsibilities:
- Represent provider voice identities and speaking rate.
- Decouple pipeline logic from provider-specific naming.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by speech providers.

    Attributes:
        provider_voice_id: Provider-native voice identifier.
        language: Short language code of the narration.
        speaking_rate: Relative speaking rate multiplier, clamped to `[0.25, 4.0]`.
        instructions: Optional delivery instructions for instruction-aware models.
    """

    provider_voice_id: str
    language: str
    speaking_rate: float = 1.0
    instructions: str | None = None

    @property
    def clamped_rate(self) -> float:
        """Return the speaking rate within the provider-accepted range."""

        return max(0.25, min(4.0, self.speaking_rate))
