"""WeChat platform adapters."""

from __future__ import annotations

from .api import AccessTokenResponse, WeChatApiClient
from .credentials import WeChatCredentialStore, WeChatToken, WeChatTokenProvider
from .media import WeChatMediaUploader

__all__ = [
    "AccessTokenResponse",
    "WeChatApiClient",
    "WeChatCredentialStore",
    "WeChatMediaUploader",
    "WeChatToken",
    "WeChatTokenProvider",
]
