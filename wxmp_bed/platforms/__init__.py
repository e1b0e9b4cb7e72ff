"""Platform integration package."""

from __future__ import annotations

from .base import MediaUploader, UploadItem

__all__ = [
    "MediaUploader",
    "UploadItem",
]
