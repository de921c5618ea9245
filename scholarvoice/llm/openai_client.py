"""OpenAI HTTP client utilities for narration and speech stages.

Responsibilities:
- Send minimal chat-completions and speech requests to OpenAI's REST API.
- Pace requests through a shared rate limiter.
- Raise classified provider exceptions for segment-level error descriptions.
"""

from __future__ import annotations

import re
from typing import Any

import requests

from .rate_limiter import RateLimiter

_OPENAI_BASE_URL = "https://api.openai.com/v1"
_MESSAGE_LIMIT = 180
_SECRET_PATTERNS = (
    (re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b"), "[redacted-key]"),
    (re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}"), "Bearer [redacted-token]"),
)


class OpenAIProviderError(RuntimeError):
    """Raised when an OpenAI provider request fails or returns malformed output.

    `failure_kind` is one of `invalid_api_key`, `insufficient_quota`,
    `invalid_model`, `timeout`, `transport`, `http_error`, or `unknown`.
    """

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


def _sanitize(text: str) -> str:
    """Collapse whitespace, mask key-like tokens, and cap length for display."""

    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    text = " ".join(text.split())
    if len(text) > _MESSAGE_LIMIT:
        return text[: _MESSAGE_LIMIT - 3] + "..."
    return text


def _failure_kind(status_code: int, message: str, code: str) -> str:
    lowered = message.lower()
    if status_code == 401 or "api key" in lowered:
        return "invalid_api_key"
    if code == "insufficient_quota" or (status_code == 429 and "quota" in lowered):
        return "insufficient_quota"
    if code == "model_not_found" or (
        "model" in lowered and ("not found" in lowered or "does not exist" in lowered)
    ):
        return "invalid_model"
    if status_code in (408, 504) or "timed out" in lowered:
        return "timeout"
    return "http_error"


def _error_from_response(response: requests.Response) -> OpenAIProviderError:
    """Build a provider error from an OpenAI error response."""

    status_code = response.status_code
    try:
        body = response.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = str(error.get("message") or "")
        code = str(error.get("code") or "")
    else:
        message = bytes(response.content or b"").decode("utf-8", errors="replace")
        code = ""

    message = _sanitize(message)
    detail = f"OpenAI request failed (HTTP {status_code})"
    return OpenAIProviderError(
        f"{detail}: {message}" if message else f"{detail}.",
        failure_kind=_failure_kind(status_code, message, code.lower()),
        status_code=status_code,
        provider_code=code or None,
    )


class _OpenAIBaseClient:
    """Holds the key, endpoint, and pacing shared by the stage clients."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = _OPENAI_BASE_URL,
        timeout_seconds: float = 120.0,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.api_key = (api_key or "").strip()
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()

    def _post(self, endpoint_path: str, payload: dict[str, Any]) -> requests.Response:
        """POST `payload` after pacing, raising `OpenAIProviderError` on any failure."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY`, use `--api-key`, or "
                "store one with `scholarvoice credentials --set-api-key`.",
                failure_kind="invalid_api_key",
            )

        self.rate_limiter.acquire(f"openai:{endpoint_path}:{payload['model']}")
        try:
            response = requests.post(
                f"{self.base_url}{endpoint_path}",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as exc:
            raise OpenAIProviderError("OpenAI request timed out.", failure_kind="timeout") from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {_sanitize(str(exc))}",
                failure_kind="transport",
            ) from exc

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response


class OpenAIChatClient(_OpenAIBaseClient):
    """Chat-completions client returning the first assistant message."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
    ) -> str:
        response = self._post(
            "/chat/completions",
            {
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "temperature": temperature,
            },
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise OpenAIProviderError("OpenAI returned invalid JSON payload.") from exc

        try:
            content = payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise OpenAIProviderError(
                "OpenAI response has no `choices[0].message.content`."
            ) from exc
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            raise OpenAIProviderError("OpenAI response message content is empty.")
        return text


class OpenAISpeechClient(_OpenAIBaseClient):
    """Speech client returning raw 24 kHz mono PCM16LE samples."""

    def synthesize_pcm(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        speed: float = 1.0,
        instructions: str | None = None,
    ) -> bytes:
        payload: dict[str, Any] = {
            "model": model,
            "voice": voice,
            "input": text,
            "response_format": "pcm",
            "speed": speed,
        }
        if instructions:
            payload["instructions"] = instructions
        audio = bytes(self._post("/audio/speech", payload).content)
        if not audio:
            raise OpenAIProviderError("OpenAI speech response is empty.")
        return audio
