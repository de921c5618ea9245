"""PCM decoding and WAV container encoding.

Responsibilities:
- Decode raw 16-bit signed little-endian PCM into normalized float samples.
- Encode float samples into a mono 16-bit WAV container at a given sample rate.
"""

from __future__ import annotations

from array import array
import io
import sys
import wave

from ..errors import AudioDecodeError

DEFAULT_SAMPLE_RATE_HZ = 24000
_PCM16_SCALE = 32768.0


def pcm16_to_float(pcm: bytes) -> array:
    """Decode PCM16LE bytes into float samples in `[-1.0, 1.0]`.

    Raises:
        AudioDecodeError: If the payload is empty or not a whole number of samples.
    """

    if not pcm:
        raise AudioDecodeError("Synthesized audio payload is empty.")
    if len(pcm) % 2 != 0:
        raise AudioDecodeError(
            f"PCM16 payload has odd byte length {len(pcm)}; expected whole 16-bit samples."
        )

    samples = array("h")
    samples.frombytes(pcm)
    if sys.byteorder == "big":
        samples.byteswap()
    return array("f", (sample / _PCM16_SCALE for sample in samples))


def float_to_pcm16(samples: array) -> bytes:
    """Quantize float samples into PCM16LE bytes, clamping out-of-range values."""

    quantized = array("h")
    for sample in samples:
        value = int(max(-1.0, min(1.0, sample)) * _PCM16_SCALE)
        quantized.append(min(value, 0x7FFF))
    if sys.byteorder == "big":
        quantized.byteswap()
    return quantized.tobytes()


def encode_wav(samples: array, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> bytes:
    """Encode float samples into a mono 16-bit WAV container."""

    if sample_rate_hz <= 0:
        raise AudioDecodeError(f"Invalid WAV sample rate: {sample_rate_hz}.")

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate_hz)
        wav_file.writeframes(float_to_pcm16(samples))
    return buffer.getvalue()


def decode_and_encode(pcm: bytes, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> bytes:
    """Turn raw synthesized PCM16LE samples into playable WAV bytes."""

    return encode_wav(pcm16_to_float(pcm), sample_rate_hz)


def wav_duration_seconds(wav_bytes: bytes) -> float:
    """Return the duration of a WAV payload in seconds."""

    try:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
            frame_count = wav_file.getnframes()
            sample_rate = wav_file.getframerate()
    except (wave.Error, EOFError) as exc:
        raise AudioDecodeError("Encoded audio is not a readable WAV payload.") from exc
    if sample_rate <= 0:
        raise AudioDecodeError("Encoded audio has an invalid WAV sample rate.")
    return frame_count / float(sample_rate)
