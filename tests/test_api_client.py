from __future__ import annotations

import pytest
import requests

from conftest import FakeResponse, FakeSession, token_payload
from wxmp_bed.errors import AuthorizationError, UploadError
from wxmp_bed.platforms.wechat import WeChatApiClient


def test_fetch_access_token_sends_client_credential_query() -> None:
    session = FakeSession(get=[token_payload("TOKEN", 7200)])
    client = WeChatApiClient(timeout=5, session=session)

    response = client.fetch_access_token("APPID", "SECRET")

    assert response.token == "TOKEN"
    assert response.expires_in == 7200
    call = session.get_calls[0]
    assert call["url"] == "https://api.weixin.qq.com/cgi-bin/token"
    assert call["params"] == {
        "grant_type": "client_credential",
        "appid": "APPID",
        "secret": "SECRET",
    }
    assert call["timeout"] == 5


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"errcode": 40125, "errmsg": "invalid appsecret"}, "invalid appsecret"),
        ({"expires_in": 7200}, "empty token"),
        ({"access_token": "T", "expires_in": "soon"}, "expires_in"),
    ],
)
def test_fetch_access_token_rejects_bad_payloads(payload: dict, message: str) -> None:
    client = WeChatApiClient(session=FakeSession(get=[payload]))
    with pytest.raises(AuthorizationError, match=message):
        client.fetch_access_token("APPID", "SECRET")


def test_fetch_access_token_accepts_zero_errcode() -> None:
    payload = {"errcode": 0, "access_token": "T", "expires_in": 7200}
    client = WeChatApiClient(session=FakeSession(get=[payload]))
    assert client.fetch_access_token("APPID", "SECRET").token == "T"


def test_transport_failure_becomes_authorization_error() -> None:
    session = FakeSession(get=[requests.ConnectionError("boom")])
    client = WeChatApiClient(session=session)
    with pytest.raises(AuthorizationError) as excinfo:
        client.fetch_access_token("APPID", "SECRET")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_upload_image_posts_multipart_form() -> None:
    session = FakeSession(post=[{"url": "https://mmbiz.qpic.cn/abc.jpg"}])
    client = WeChatApiClient(session=session)

    data = client.upload_image(
        "TOKEN", file_name="a.png", content=b"\x89PNG", content_type="image/png"
    )

    assert data["url"] == "https://mmbiz.qpic.cn/abc.jpg"
    call = session.post_calls[0]
    assert call["url"] == "https://api.weixin.qq.com/cgi-bin/media/uploadimg"
    assert call["params"] == {"access_token": "TOKEN"}
    assert call["files"] == {"media": ("a.png", b"\x89PNG", "image/png")}
    assert call["data"] == {"type": "image"}


def test_upload_image_reports_remote_error() -> None:
    session = FakeSession(post=[{"errcode": 40005, "errmsg": "invalid file type"}])
    client = WeChatApiClient(session=session)
    with pytest.raises(UploadError, match="invalid file type"):
        client.upload_image("T", file_name="a.gif", content=b"", content_type="image/gif")


def test_upload_image_rejects_non_json_body() -> None:
    session = FakeSession(post=[FakeResponse(None, text="<html>bad gateway</html>")])
    client = WeChatApiClient(session=session)
    with pytest.raises(UploadError, match="解析微信响应失败"):
        client.upload_image("T", file_name="a.jpg", content=b"", content_type="image/jpeg")


def test_upload_http_error_is_wrapped() -> None:
    session = FakeSession(post=[FakeResponse({}, status=502)])
    client = WeChatApiClient(session=session)
    with pytest.raises(UploadError, match="上传图片失败"):
        client.upload_image("T", file_name="a.jpg", content=b"", content_type="image/jpeg")
