"""Audio decoding, container encoding, and resource ownership."""

from .library import AudioLibrary
from .wav import DEFAULT_SAMPLE_RATE_HZ, decode_and_encode, encode_wav, pcm16_to_float

__all__ = [
    "AudioLibrary",
    "DEFAULT_SAMPLE_RATE_HZ",
    "decode_and_encode",
    "encode_wav",
    "pcm16_to_float",
]
