"""WeChat Official Account image host."""

from __future__ import annotations

__version__ = "0.3.0"
