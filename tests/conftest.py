from __future__ import annotations

import json
from typing import Any

import pytest
import requests


class FakeResponse:
    def __init__(self, payload: Any = None, *, status: int = 200, text: str | None = None) -> None:
        self._payload = payload
        self.status_code = status
        self.text = text if text is not None else json.dumps(payload)

    def json(self) -> Any:
        if self._payload is None:
            raise json.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class FakeSession:
    """Returns queued responses and records every call."""

    def __init__(self, *, get: list[Any] | None = None, post: list[Any] | None = None) -> None:
        self._get = list(get or [])
        self._post = list(post or [])
        self.get_calls: list[dict[str, Any]] = []
        self.post_calls: list[dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.get_calls.append({"url": url, **kwargs})
        return self._next(self._get)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.post_calls.append({"url": url, **kwargs})
        return self._next(self._post)

    @staticmethod
    def _next(queue: list[Any]) -> FakeResponse:
        if not queue:
            raise AssertionError("unexpected HTTP call")
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, FakeResponse):
            return item
        return FakeResponse(item)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("WXMP_APP_ID", "WXMP_APP_SECRET", "WXMP_CONFIG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def token_payload(token: str = "TOKEN_1", expires_in: int = 7200) -> dict[str, Any]:
    return {"access_token": token, "expires_in": expires_in}

