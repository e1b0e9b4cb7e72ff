"""CDN rewriting and Markdown rendering for uploaded images."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import urlsplit

from ..errors import PostProcessingWarning
from ..platforms import UploadItem
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


def apply_cdn_prefix(url: str, cdn_prefix: str) -> str:
    """Swap scheme and host of ``url`` for ``cdn_prefix``, keeping path and query.

    Raises :class:`ValueError` when ``url`` is not an absolute URL.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"not an absolute URL: {url!r}")
    query = f"?{parts.query}" if parts.query else ""
    return f"{cdn_prefix.rstrip('/')}{parts.path or '/'}{query}"


def render_markdown(url: str) -> str:
    return f"![]({url})"


def finalize(items: Iterable[UploadItem], cdn_prefix: str | None = None) -> None:
    """Rewrite uploaded URLs and attach Markdown embeds. Never raises."""
    for item in items:
        if not item.img_url:
            continue
        try:
            final_url = item.img_url
            if cdn_prefix:
                try:
                    final_url = apply_cdn_prefix(item.img_url, cdn_prefix)
                except ValueError as exc:
                    LOGGER.warning(
                        "CDN前缀应用失败，使用原始URL",
                        extra={
                            "event": "wechat.cdn.skipped",
                            "category": PostProcessingWarning.__name__,
                            "url": item.img_url,
                            "reason": str(exc),
                        },
                    )
            item.img_url = final_url
            item.markdown = render_markdown(final_url)
        except Exception:  # pragma: no cover - batch outcome is already decided
            LOGGER.exception(
                "上传后处理失败",
                extra={"event": "wechat.finalize.failed", "file": item.file_name},
            )
