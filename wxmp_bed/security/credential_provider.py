"""Secret lookup for the AppID/AppSecret pair."""

from __future__ import annotations

from abc import ABC, abstractmethod
from os import environ
from typing import Any, Iterable, Mapping


class SecretNotFoundError(KeyError):
    """Raised when a secret cannot be resolved."""


class SecretProvider(ABC):
    """Abstract secret lookup contract."""

    @abstractmethod
    def get_secret(self, key: str) -> str:
        """Return the secret associated with ``key``."""


class EnvSecretProvider(SecretProvider):
    """Reads ``app_id`` style keys from ``WXMP_APP_ID`` style variables."""

    def __init__(self, prefix: str = "WXMP_", env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else environ
        self._prefix = prefix

    def get_secret(self, key: str) -> str:
        name = f"{self._prefix}{key}".upper().replace(".", "_")
        value = self._env.get(name)
        if not value:
            raise SecretNotFoundError(name)
        return value


class MappingSecretProvider(SecretProvider):
    """Reads secrets from an already-parsed config section."""

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self._mapping = mapping

    def get_secret(self, key: str) -> str:
        value = self._mapping.get(key)
        if value is None or str(value).strip() == "":
            raise SecretNotFoundError(key)
        return str(value).strip()


class ChainedSecretProvider(SecretProvider):
    """Tries multiple providers until one returns a secret."""

    def __init__(self, providers: Iterable[SecretProvider]) -> None:
        self._providers = tuple(providers)

    def get_secret(self, key: str) -> str:
        for provider in self._providers:
            try:
                return provider.get_secret(key)
            except SecretNotFoundError:
                continue
        raise SecretNotFoundError(key)


__all__ = [
    "ChainedSecretProvider",
    "EnvSecretProvider",
    "MappingSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
]
