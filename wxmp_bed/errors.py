"""Error taxonomy shared by the uploader, token provider and plugin hooks."""

from __future__ import annotations

import json
from typing import Any, Mapping


class WxmpError(RuntimeError):
    """Base class for failures surfaced to the batch boundary."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | 详情: {detail_repr}"

    @property
    def message(self) -> str:
        """Message without the serialised details."""
        return super().__str__()


class ConfigurationError(WxmpError):
    """Required configuration is missing or malformed."""


class AuthorizationError(WxmpError):
    """The access-token endpoint rejected the request or returned no token."""


class ValidationError(WxmpError):
    """An image exceeds the configured size ceiling."""

    def __init__(self, size_mb: float, limit_mb: float) -> None:
        super().__init__(
            f"图片大小 {size_mb:.2f}MB 超过限制 {limit_mb:g}MB",
            details={"size_mb": round(size_mb, 2), "limit_mb": limit_mb},
        )
        self.size_mb = size_mb
        self.limit_mb = limit_mb


class UploadError(WxmpError):
    """The media endpoint rejected the upload or returned no URL."""


class PostProcessingWarning(UserWarning):
    """A CDN rewrite could not be applied; the original URL is kept."""


__all__ = [
    "AuthorizationError",
    "ConfigurationError",
    "PostProcessingWarning",
    "UploadError",
    "ValidationError",
    "WxmpError",
]
