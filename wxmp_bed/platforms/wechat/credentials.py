"""Access-token caching for WeChat integrations."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ...errors import AuthorizationError
from ...utils.logging import get_logger
from .api import WeChatApiClient

LOGGER = get_logger(__name__)

Clock = Callable[[], float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


@dataclass(frozen=True, slots=True)
class WeChatToken:
    """An access token together with its issue time and lifetime, both in ms."""

    value: str
    issued_at: float
    valid_for: float

    def is_valid(self, now: float) -> bool:
        return now - self.issued_at < self.valid_for

    def remaining(self, now: float) -> float:
        return max(0.0, self.valid_for - (now - self.issued_at))


class WeChatCredentialStore:
    """Holds at most one cached token; replaced whole, never patched.

    The cached token is dropped when it expires (``now - issued_at >= valid_for``)
    or when :meth:`invalidate` is called.
    """

    def __init__(self) -> None:
        self._token: Optional[WeChatToken] = None

    @property
    def token(self) -> Optional[WeChatToken]:
        return self._token

    def current(self, now: float) -> Optional[WeChatToken]:
        """Return the cached token when it is still valid at ``now``."""
        token = self._token
        if token is None or not token.is_valid(now):
            return None
        return token

    def replace(self, token: WeChatToken) -> None:
        self._token = token

    def invalidate(self) -> None:
        self._token = None


class WeChatTokenProvider:
    """Returns a valid access token, refreshing through the API only when needed."""

    def __init__(
        self,
        api_client: WeChatApiClient,
        *,
        store: WeChatCredentialStore | None = None,
        clock: Clock = _monotonic_ms,
    ) -> None:
        self._api_client = api_client
        self._store = store if store is not None else WeChatCredentialStore()
        self._clock = clock
        self._refresh_lock = threading.Lock()

    @property
    def store(self) -> WeChatCredentialStore:
        return self._store

    def get_token(
        self,
        app_id: str,
        app_secret: str,
        *,
        force_refresh: bool = False,
        timeout: float | None = None,
    ) -> str:
        return self.get_credential(
            app_id, app_secret, force_refresh=force_refresh, timeout=timeout
        ).value

    def get_credential(
        self,
        app_id: str,
        app_secret: str,
        *,
        force_refresh: bool = False,
        timeout: float | None = None,
    ) -> WeChatToken:
        """Return the cached credential or fetch a new one."""
        if not force_refresh:
            cached = self._store.current(self._clock())
            if cached is not None:
                return cached

        with self._refresh_lock:
            # Another batch may have refreshed while this one waited.
            if not force_refresh:
                cached = self._store.current(self._clock())
                if cached is not None:
                    return cached
            return self._refresh(app_id, app_secret, timeout)

    def remaining(self) -> float:
        """Milliseconds left on the cached token, 0 when there is none."""
        token = self._store.token
        return token.remaining(self._clock()) if token is not None else 0.0

    def invalidate(self) -> None:
        self._store.invalidate()

    def _refresh(
        self, app_id: str, app_secret: str, timeout: float | None
    ) -> WeChatToken:
        try:
            response = self._api_client.fetch_access_token(
                app_id, app_secret, timeout=timeout
            )
        except AuthorizationError:
            LOGGER.warning(
                "获取 access_token 失败",
                extra={"event": "wechat.token.failed", "app_id": app_id},
            )
            raise

        token = WeChatToken(
            value=response.token,
            issued_at=self._clock(),
            valid_for=response.expires_in * 1000,
        )
        self._store.replace(token)
        LOGGER.info(
            "access_token 已刷新",
            extra={"event": "wechat.token.refreshed", "expires_in": response.expires_in},
        )
        return token
