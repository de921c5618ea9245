"""Configuration model and loaders for ScholarVoice.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for runtime provider/model settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `ScholarvoiceConfig`: normalized runtime settings for a listening run.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `ScholarvoiceConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .audio.wav import DEFAULT_SAMPLE_RATE_HZ
from .models.datatypes import ReadingMode
from .parsing import normalize_optional_string, parse_positive_int, parse_reading_mode
from .pipeline.orchestrator import MAX_DOCUMENT_CHARS
from .text.segmenter import DEFAULT_TARGET_CHARS

_DEFAULT_NARRATE_MODEL = "gpt-4.1-mini"
_DEFAULT_TTS_MODEL = "gpt-4o-mini-tts"
_DEFAULT_TTS_VOICE = "alloy"
_DEFAULT_TARGET_LANGUAGE = "zh"
_SUPPORTED_PROVIDER_IDS = frozenset({"openai"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved runtime provider and model identifiers for one run.

    Attributes:
        narrator_provider: Provider identifier for the narration stage.
        tts_provider: Provider identifier for the speech stage.
        narrate_model: Chat model used for translation or podcast scripts.
        tts_model: Speech model identifier.
        tts_voice: Speech voice identifier.
        api_key: Optional provider API key (resolved but never written to artifacts).
    """

    narrator_provider: str
    tts_provider: str
    narrate_model: str
    tts_model: str
    tts_voice: str
    api_key: str | None = None

    def as_summary_metadata(self) -> dict[str, str]:
        """Return non-secret runtime metadata safe to persist in run summaries."""

        return {
            "provider_narrator": self.narrator_provider,
            "provider_tts": self.tts_provider,
            "model_narrate": self.narrate_model,
            "model_tts": self.tts_model,
            "tts_voice": self.tts_voice,
        }


@dataclass(slots=True)
class ScholarvoiceConfig:
    """Runtime configuration for one listening run.

    Attributes:
        input_document: Path to the source PDF, TXT, or MD document.
        output_dir: Output directory for segment audio and the run summary.
        mode: Reading mode, literal segment narration or a podcast summary.
        target_language: Spoken target language code, defaulting to Chinese (`zh`).
        provider_narrator: Narration provider identifier.
        provider_tts: Speech provider identifier.
        model_narrate: Narration model identifier.
        model_tts: Speech model identifier.
        tts_voice: Speech voice identifier.
        api_key: Optional API key for provider calls.
        segment_target_chars: Target segment size in characters.
        max_document_chars: Ceiling applied to extracted text before segmentation.
        sample_rate_hz: Sample rate of synthesized PCM and encoded WAV output.
        runtime_sources: Optional runtime source overrides injected by CLI.
        extra: Additional metadata for future extensions.
    """

    input_document: Path
    output_dir: Path
    mode: ReadingMode = ReadingMode.LITERAL
    target_language: str = _DEFAULT_TARGET_LANGUAGE
    provider_narrator: str = "openai"
    provider_tts: str = "openai"
    model_narrate: str = _DEFAULT_NARRATE_MODEL
    model_tts: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    api_key: str | None = None
    segment_target_chars: int = DEFAULT_TARGET_CHARS
    max_document_chars: int = MAX_DOCUMENT_CHARS
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate runtime configuration values before a run."""

        self.mode = parse_reading_mode(self.mode)
        self._validate_provider_id(self.provider_narrator, "provider_narrator")
        self._validate_provider_id(self.provider_tts, "provider_tts")
        self._require_non_empty(self.target_language, "target_language")
        self._require_non_empty(self.model_narrate, "model_narrate")
        self._require_non_empty(self.model_tts, "model_tts")
        self._require_non_empty(self.tts_voice, "tts_voice")
        for field_name in ("segment_target_chars", "max_document_chars", "sample_rate_hz"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"`{field_name}` must be a positive integer.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider and model settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        resolved = ProviderRuntimeConfig(
            narrator_provider=self._resolve_runtime_value(
                key="provider_narrator",
                env_key="SCHOLARVOICE_PROVIDER_NARRATOR",
                default_value=self.provider_narrator,
                sources=resolved_sources,
            ),
            tts_provider=self._resolve_runtime_value(
                key="provider_tts",
                env_key="SCHOLARVOICE_PROVIDER_TTS",
                default_value=self.provider_tts,
                sources=resolved_sources,
            ),
            narrate_model=self._resolve_runtime_value(
                key="model_narrate",
                env_key="SCHOLARVOICE_MODEL_NARRATE",
                default_value=self.model_narrate,
                sources=resolved_sources,
            ),
            tts_model=self._resolve_runtime_value(
                key="model_tts",
                env_key="SCHOLARVOICE_MODEL_TTS",
                default_value=self.model_tts,
                sources=resolved_sources,
            ),
            tts_voice=self._resolve_runtime_value(
                key="tts_voice",
                env_key="SCHOLARVOICE_TTS_VOICE",
                default_value=self.tts_voice,
                sources=resolved_sources,
            ),
            api_key=self._resolve_optional_runtime_value(
                key="api_key",
                env_key="OPENAI_API_KEY",
                default_value=self.api_key,
                sources=resolved_sources,
            ),
        )
        self._validate_provider_id(resolved.narrator_provider, "provider_narrator")
        self._validate_provider_id(resolved.tts_provider, "provider_tts")
        self._require_non_empty(resolved.narrate_model, "model_narrate")
        self._require_non_empty(resolved.tts_model, "model_tts")
        self._require_non_empty(resolved.tts_voice, "tts_voice")
        return resolved

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        """Resolve a required runtime value from sources in precedence order."""

        value = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return value

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _validate_provider_id(provider_id: str, field_name: str) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `{field_name}` value `{provider_id}`; supported: {supported}."
            )

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that runtime string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `ScholarvoiceConfig` from external sources."""

    _REQUIRED_YAML_KEYS = frozenset({"input_document", "output_dir"})
    _STRING_KEYS = (
        "target_language",
        "provider_narrator",
        "provider_tts",
        "model_narrate",
        "model_tts",
        "tts_voice",
        "api_key",
    )
    _INT_KEYS = ("segment_target_chars", "max_document_chars", "sample_rate_hz")
    _SUPPORTED_YAML_KEYS = frozenset(
        {"input_document", "output_dir", "mode", "extra", *_STRING_KEYS, *_INT_KEYS}
    )
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "SCHOLARVOICE_PROVIDER_NARRATOR",
            "SCHOLARVOICE_PROVIDER_TTS",
            "SCHOLARVOICE_MODEL_NARRATE",
            "SCHOLARVOICE_MODEL_TTS",
            "SCHOLARVOICE_TTS_VOICE",
            "OPENAI_API_KEY",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> ScholarvoiceConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> ScholarvoiceConfig:
        """Create a validated config from `SCHOLARVOICE_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        payload: dict[str, Any] = {}
        env_keys = ("input_document", "output_dir", "mode", *ConfigLoader._STRING_KEYS)
        for key in (*env_keys, *ConfigLoader._INT_KEYS):
            env_key = "OPENAI_API_KEY" if key == "api_key" else f"SCHOLARVOICE_{key.upper()}"
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        if "input_document" not in payload:
            raise ValueError("Environment variable `SCHOLARVOICE_INPUT_DOCUMENT` is required.")
        payload.setdefault("output_dir", "out")

        config = ConfigLoader._build_config_from_mapping(payload, source_label="Environment")
        config.runtime_sources = RuntimeConfigSources(
            env={
                key: value
                for key, value in env_map.items()
                if key in ConfigLoader._RUNTIME_ENV_KEYS
                and normalize_optional_string(value) is not None
            }
        )
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> ScholarvoiceConfig:
        """Build a validated config from a normalized mapping payload."""

        ConfigLoader._validate_keys(payload, source_label)

        values: dict[str, Any] = {
            "input_document": ConfigLoader._required_path(payload, "input_document", source_label),
            "output_dir": ConfigLoader._required_path(payload, "output_dir", source_label),
        }
        if "mode" in payload:
            try:
                values["mode"] = parse_reading_mode(payload["mode"])
            except ValueError as exc:
                raise ValueError(f"{source_label}: {exc}") from exc
        for key in ConfigLoader._STRING_KEYS:
            value = normalize_optional_string(payload.get(key))
            if value is not None:
                values[key] = value
        for key in ConfigLoader._INT_KEYS:
            if key in payload and payload[key] is not None:
                try:
                    values[key] = parse_positive_int(payload[key], key)
                except ValueError as exc:
                    raise ValueError(f"{source_label} field {exc}") from exc
        values["extra"] = ConfigLoader._optional_string_map(payload, "extra", source_label)

        config = ScholarvoiceConfig(**values)
        config.validate()
        return config

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Validate supported and required config keys."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        missing = sorted(
            key for key in ConfigLoader._REQUIRED_YAML_KEYS if key not in payload
        )
        if missing:
            key_list = ", ".join(missing)
            raise ValueError(f"{source_label} is missing required key(s): {key_list}.")

    @staticmethod
    def _required_path(payload: Mapping[str, Any], key: str, source_label: str) -> Path:
        """Read a required non-empty path-like field from a payload."""

        value = normalize_optional_string(payload.get(key))
        if value is None:
            raise ValueError(f"{source_label} requires non-empty `{key}`.")
        return Path(value)

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
