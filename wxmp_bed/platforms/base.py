"""Base contracts for image hosting platforms."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

_BYTES_PER_MB = 1024 * 1024


@dataclass(slots=True)
class UploadItem:
    """One image in a batch, mutated in place as it moves through the stages."""

    buffer: bytes
    file_name: str
    extension: str | None = None
    img_url: str | None = None
    full_result: dict[str, Any] | None = None
    markdown: str | None = None

    @classmethod
    def from_path(cls, path: Path) -> "UploadItem":
        extension = path.suffix.lstrip(".").lower() or None
        return cls(buffer=path.read_bytes(), file_name=path.name, extension=extension)

    @property
    def size_mb(self) -> float:
        return len(self.buffer) / _BYTES_PER_MB

    @property
    def content_type(self) -> str:
        ext = (self.extension or "").lstrip(".").lower()
        return f"image/{ext}" if ext else "image/jpeg"


class MediaUploader(Protocol):
    """Uploads a batch of images to a remote platform."""

    def upload_batch(self, items: Sequence[UploadItem]) -> Sequence[UploadItem]:
        """Upload ``items`` in order, setting ``img_url`` on each."""
