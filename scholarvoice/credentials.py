"""Secure credential storage helpers for the ScholarVoice CLI.

Responsibilities:
- Persist provider API keys in an OS-backed secure credential store.
- Provide read/write/delete operations for provider credentials.
- Map secure-storage failures to credentials-stage errors.
- Avoid logging or exposing secret values in diagnostics.

Key types:
- `CredentialStore`: interface for provider credential persistence.
- `KeyringCredentialStore`: keyring-backed secure credential storage.
"""

from __future__ import annotations

from dataclasses import dataclass

import keyring
from keyring.errors import KeyringError, NoKeyringError, PasswordDeleteError

from .errors import PipelineStageError

_DEFAULT_SERVICE_NAME = "scholarvoice"


class CredentialStore:
    """Interface for secure provider credential operations."""

    def is_available(self) -> bool:
        """Return whether secure credential operations are available."""

        raise NotImplementedError

    def get_api_key(self) -> str | None:
        """Load the stored API key from secure storage, when available."""

        raise NotImplementedError

    def set_api_key(self, api_key: str) -> None:
        """Persist an API key in secure storage."""

        raise NotImplementedError

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""

        raise NotImplementedError


@dataclass(slots=True)
class KeyringCredentialStore(CredentialStore):
    """Secure credential store backed by the `keyring` package.

    Keys are stored per provider under the `<provider>_api_key` account.
    """

    service_name: str = _DEFAULT_SERVICE_NAME
    provider_id: str = "openai"

    @property
    def account_name(self) -> str:
        """Return the keyring account name for the configured provider."""

        return f"{self.provider_id}_api_key"

    def is_available(self) -> bool:
        """Return whether a usable keyring backend is configured."""

        try:
            backend = keyring.get_keyring()
        except KeyringError:
            return False
        return getattr(backend, "priority", 0) > 0

    def get_api_key(self) -> str | None:
        """Get a normalized API key from keyring, returning `None` when missing."""

        try:
            value = keyring.get_password(self.service_name, self.account_name)
        except KeyringError:
            return None
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        return normalized

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key in keyring or raise when unavailable."""

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        try:
            keyring.set_password(self.service_name, self.account_name, normalized)
        except NoKeyringError as exc:
            raise RuntimeError(
                "Secure credential storage is unavailable because no keyring backend "
                "is configured on this system."
            ) from exc

    def clear_api_key(self) -> bool:
        """Remove the stored API key from keyring and report if one was present."""

        if self.get_api_key() is None:
            return False
        try:
            keyring.delete_password(self.service_name, self.account_name)
        except PasswordDeleteError:
            return False
        return True


def create_credential_store(provider_id: str = "openai") -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore(provider_id=provider_id)


def persist_api_key(credential_store: CredentialStore, api_key: str, *, hint: str) -> None:
    """Store `api_key`, reporting any backend failure as a credentials-stage error."""

    try:
        credential_store.set_api_key(api_key)
    except Exception as exc:
        raise PipelineStageError(
            stage="credentials",
            detail=f"Failed to store API key securely: {exc}",
            hint=hint,
        ) from exc
