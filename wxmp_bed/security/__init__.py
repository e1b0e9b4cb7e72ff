"""Security utilities package."""

from __future__ import annotations

from .credential_provider import (
    ChainedSecretProvider,
    EnvSecretProvider,
    MappingSecretProvider,
    SecretNotFoundError,
    SecretProvider,
)

__all__ = [
    "ChainedSecretProvider",
    "EnvSecretProvider",
    "MappingSecretProvider",
    "SecretNotFoundError",
    "SecretProvider",
]
