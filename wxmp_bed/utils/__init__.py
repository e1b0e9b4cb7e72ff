"""Utility exports."""

from .logging import configure_logging, get_logger, redact_token

__all__ = [
    "configure_logging",
    "get_logger",
    "redact_token",
]
