"""Service layer exports."""

from __future__ import annotations

from .post_processing import apply_cdn_prefix, finalize, render_markdown

__all__ = ["apply_cdn_prefix", "finalize", "render_markdown"]
