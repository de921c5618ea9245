"""Speech synthesis components."""

from .synthesizer import OpenAISpeechSynthesizer, SpeechSynthesizer
from .voices import VoiceProfile

__all__ = ["OpenAISpeechSynthesizer", "SpeechSynthesizer", "VoiceProfile"]
