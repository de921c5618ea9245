"""Unit tests for narration providers, response caching, pacing, and speech synthesis."""

from __future__ import annotations

import pytest

from scholarvoice.errors import NarrationError, SynthesisError
from scholarvoice.llm.cache import ResponseCache
from scholarvoice.llm.narrators import OpenAITranslator, PodcastScriptWriter, _OpenAINarrator
from scholarvoice.llm.openai_client import OpenAIChatClient, OpenAISpeechClient
from scholarvoice.llm.prompts import PromptLibrary, language_name
from scholarvoice.llm.rate_limiter import RateLimiter
from scholarvoice.tts.synthesizer import OpenAISpeechSynthesizer
from scholarvoice.tts.voices import VoiceProfile


class _ChatRecorder:
    """Chat-completions stand-in recording calls and returning a fixed reply."""

    def __init__(self, reply: str = "译文") -> None:
        self.reply = reply
        self.calls: list[dict[str, object]] = []

    def __call__(self, **kwargs: object) -> str:
        self.calls.append(kwargs)
        return self.reply


def test_translator_caches_identical_segments(monkeypatch: pytest.MonkeyPatch) -> None:
    """Repeated source text should reuse the cached narration."""

    recorder = _ChatRecorder()
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", recorder)
    translator = OpenAITranslator(api_key="key")

    first = translator.narrate("Autonomy matters (Deci, 2020).")
    second = translator.narrate("Autonomy   matters (Deci, 2020).")

    assert first == second == "译文"
    assert len(recorder.calls) == 1
    assert translator.cache_hits == 1
    assert translator.cache_misses == 1
    call = recorder.calls[0]
    assert call["temperature"] == 0.0
    assert "spoken Chinese" in str(call["system_prompt"])
    assert call["user_prompt"] == "Autonomy matters (Deci, 2020)."


def test_podcast_writer_uses_host_prompt(monkeypatch: pytest.MonkeyPatch) -> None:
    """Podcast narration should use the host prompt and a livelier temperature."""

    recorder = _ChatRecorder("大家好！")
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", recorder)
    writer = PodcastScriptWriter(api_key="key", target_language="cs")

    assert writer.narrate("Whole paper.") == "大家好！"
    call = recorder.calls[0]
    assert call["temperature"] == 0.7
    assert "ScholarBot" in str(call["system_prompt"])
    assert "Czech" in str(call["system_prompt"])
    assert str(call["user_prompt"]).endswith("Whole paper.")


def test_translation_and_podcast_cache_entries_are_separate(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """The same text narrated by different operations must not share a cache entry."""

    recorder = _ChatRecorder()
    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", recorder)
    cache = ResponseCache()

    OpenAITranslator(api_key="key", response_cache=cache).narrate("Same text.")
    PodcastScriptWriter(api_key="key", response_cache=cache).narrate("Same text.")

    assert len(recorder.calls) == 2
    assert len(cache) == 2


def test_blank_provider_reply_is_a_narration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """Whitespace replies are failures and never cached."""

    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _ChatRecorder("   "))
    translator = OpenAITranslator(api_key="key")

    with pytest.raises(NarrationError):
        translator.narrate("Text.")
    assert len(translator.cache) == 0


def test_narration_styles_must_define_both_prompts() -> None:
    """A narration style without a user prompt cannot be constructed."""

    class SystemPromptOnly(_OpenAINarrator):
        def _system_prompt(self) -> str:
            return "system"

    with pytest.raises(TypeError):
        _OpenAINarrator(api_key="key")
    with pytest.raises(TypeError):
        SystemPromptOnly(api_key="key")



def test_response_cache_evicts_least_recently_used() -> None:
    """The cache should stay bounded and keep recently read entries."""

    cache = ResponseCache(max_entries=2)
    cache.set("a", "1")
    cache.set("b", "2")
    assert cache.get("a") == "1"
    cache.set("c", "3")

    assert cache.get("b") is None
    assert cache.get("a") == "1"
    assert cache.get("c") == "3"
    assert len(cache) == 2


def test_rate_limiter_spaces_requests_per_key() -> None:
    """Back-to-back acquisitions on one key wait for the minimum interval."""

    now = [100.0]
    sleeps: list[float] = []

    def _sleep(seconds: float) -> None:
        sleeps.append(seconds)
        now[0] += seconds

    limiter = RateLimiter(min_interval_seconds=0.5, clock=lambda: now[0], sleeper=_sleep)

    assert limiter.acquire("openai:/audio/speech:m") == 0.0
    assert limiter.acquire("openai:/audio/speech:m") == pytest.approx(0.5)
    assert limiter.acquire("openai:/chat/completions:m") == 0.0
    assert sleeps == [pytest.approx(0.5)]


def test_language_names_fall_back_to_code() -> None:
    """Unknown language codes are passed through unchanged."""

    assert language_name("ZH") == "Chinese"
    assert language_name("pt") == "pt"
    assert "spoken pt" in PromptLibrary().translation_system_prompt("pt")


def test_synthesizer_concatenates_pieces_for_long_narration(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Long narration is split under the request limit and PCM is concatenated."""

    requests_seen: list[dict[str, object]] = []

    def _mock_synthesize(_client: OpenAISpeechClient, **kwargs: object) -> bytes:
        requests_seen.append(kwargs)
        return b"\x01\x00"

    monkeypatch.setattr(OpenAISpeechClient, "synthesize_pcm", _mock_synthesize)
    synthesizer = OpenAISpeechSynthesizer(
        VoiceProfile(provider_voice_id="nova", language="zh", speaking_rate=9.0),
        api_key="key",
    )
    narration = " ".join(f"Sentence number {index} is here." for index in range(400))

    pcm = synthesizer.synthesize(narration)

    pieces = [str(request["text"]) for request in requests_seen]
    assert len(pieces) > 1
    assert all(len(piece) <= OpenAISpeechSynthesizer.MAX_INPUT_CHARS for piece in pieces)
    assert " ".join(pieces) == narration
    assert pcm == b"\x01\x00" * len(pieces)
    assert {request["voice"] for request in requests_seen} == {"nova"}
    assert {request["speed"] for request in requests_seen} == {4.0}


def test_request_pieces_hard_splits_runs_without_sentence_ends() -> None:
    """A single unbroken run of text is cut at the request limit."""

    synthesizer = OpenAISpeechSynthesizer(VoiceProfile("alloy", "zh"), api_key="key")

    pieces = synthesizer.request_pieces("字" * 9000)

    assert [len(piece) for piece in pieces] == [4000, 4000, 1000]


def test_synthesizer_rejects_empty_narration() -> None:
    """Blank narration cannot be synthesized."""

    synthesizer = OpenAISpeechSynthesizer(VoiceProfile("alloy", "zh"), api_key="key")

    with pytest.raises(SynthesisError):
        synthesizer.synthesize("  \n ")
