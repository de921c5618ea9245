"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from scholarvoice.llm.openai_client import (
    OpenAIChatClient,
    OpenAIProviderError,
    OpenAISpeechClient,
)
from tests.provider_doubles import MOCKED_NARRATION, QUOTA_FAILURE_MARKER, FakeCredentialStore


@pytest.fixture
def credential_store() -> FakeCredentialStore:
    """Provide the credential store shared by one CLI invocation."""

    return FakeCredentialStore()


@pytest.fixture(autouse=True)
def _isolate_provider_runtime(
    monkeypatch: pytest.MonkeyPatch,
    credential_store: FakeCredentialStore,
) -> None:
    """Mock OpenAI calls and credential storage to avoid network/key requirements."""

    def _mock_chat_completion(self, **kwargs: object) -> str:
        """Return deterministic narration, failing segments that carry the quota marker."""

        _ = self
        if QUOTA_FAILURE_MARKER in str(kwargs.get("user_prompt", "")):
            raise OpenAIProviderError(
                "OpenAI quota is insufficient for this request (HTTP 429).",
                failure_kind="insufficient_quota",
                status_code=429,
            )
        return MOCKED_NARRATION

    def _mock_synthesize_pcm(self, **kwargs: object) -> bytes:
        """Return 0.1 seconds of silent 24 kHz PCM16LE samples."""

        _ = self
        _ = kwargs
        return b"\x00\x00" * 2400

    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_pcm", _mock_synthesize_pcm)
    monkeypatch.setattr("scholarvoice.cli.create_credential_store", lambda: credential_store)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-integration-placeholder")


@pytest.fixture
def paper_path(tmp_path: Path, academic_document: str) -> Path:
    """Write the shared academic document to a text file."""

    path = tmp_path / "paper.txt"
    path.write_text(academic_document, encoding="utf-8")
    return path
