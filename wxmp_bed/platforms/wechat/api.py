"""WeChat API helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import requests

from ...errors import AuthorizationError, UploadError, WxmpError
from ...utils.logging import get_logger, redact_token

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class AccessTokenResponse:
    """Parsed access token response."""

    token: str
    expires_in: int


class WeChatApiClient:
    """Minimal client for the two WeChat endpoints the image host needs."""

    _TOKEN_URL = "https://api.weixin.qq.com/cgi-bin/token"
    _UPLOAD_URL = "https://api.weixin.qq.com/cgi-bin/media/uploadimg"

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch_access_token(
        self, app_id: str, app_secret: str, *, timeout: float | None = None
    ) -> AccessTokenResponse:
        """Retrieve a fresh access token from WeChat."""
        params = {
            "grant_type": "client_credential",
            "appid": app_id,
            "secret": app_secret,
        }
        try:
            response = self._session.get(
                self._TOKEN_URL, params=params, timeout=timeout or self._timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise AuthorizationError(
                "无法连接至微信服务器", details={"reason": str(exc)}
            ) from exc

        data = self._decode(response, AuthorizationError)

        errcode = data.get("errcode")
        if errcode not in (0, None):
            raise AuthorizationError(
                f"获取Token失败: {data.get('errmsg')}",
                details={"errcode": errcode, "errmsg": data.get("errmsg")},
            )

        token = data.get("access_token") or ""
        if not token:
            raise AuthorizationError("empty token", details={"response": data})

        expires_in = data.get("expires_in")
        try:
            expires_seconds = int(expires_in)
        except (TypeError, ValueError) as exc:
            raise AuthorizationError(
                "expires_in 字段格式不正确", details={"expires_in": expires_in}
            ) from exc

        return AccessTokenResponse(token=token, expires_in=expires_seconds)

    def upload_image(
        self,
        access_token: str,
        *,
        file_name: str,
        content: bytes,
        content_type: str,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Upload one image and return the decoded response containing ``url``."""
        files = {"media": (file_name, content, content_type)}
        try:
            response = self._session.post(
                self._UPLOAD_URL,
                params={"access_token": access_token},
                files=files,
                data={"type": "image"},
                timeout=timeout or self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UploadError(
                "上传图片失败",
                details={"file": file_name, "reason": redact_token(str(exc))},
            ) from exc

        data = self._decode(response, UploadError)
        LOGGER.info(
            "微信图床上传响应",
            extra={"event": "wechat.upload.response", "file": file_name, "response": data},
        )

        errcode = data.get("errcode")
        if errcode not in (0, None):
            raise UploadError(
                f"上传失败: {data.get('errmsg')}",
                details={"file": file_name, "errcode": errcode, "errmsg": data.get("errmsg")},
            )
        if not data.get("url"):
            raise UploadError("empty url", details={"file": file_name, "response": data})
        return data

    @staticmethod
    def _decode(response: requests.Response, error_cls: type[WxmpError]) -> dict[str, Any]:
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise error_cls(
                "解析微信响应失败", details={"response": response.text[:200]}
            ) from exc
        if not isinstance(data, dict):
            raise error_cls("解析微信响应失败", details={"response": str(data)[:200]})
        return data
