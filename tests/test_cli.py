"""Tests for the wxmp command line."""

from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeSession, token_payload
from wxmp_bed.app import cli
from wxmp_bed.platforms.wechat import WeChatApiClient
from wxmp_bed.plugin import WxmpPlugin


def _write_config(path: Path, cdn: str = "") -> Path:
    path.write_text(
        f'[wxmp]\napp_id = "APPID"\napp_secret = "SECRET"\ncdn_prefix = "{cdn}"\n',
        encoding="utf-8",
    )
    return path


def _patch_client(monkeypatch: pytest.MonkeyPatch, session: FakeSession) -> None:
    monkeypatch.setattr(
        cli, "WeChatApiClient", lambda timeout=30.0: WeChatApiClient(timeout=timeout, session=session)
    )


def test_prompt_fields_uses_defaults_and_secret_reader() -> None:
    answers = iter(["APPID", "", "https://cdn.example.com"])
    secrets = iter(["SECRET"])

    result = cli.prompt_fields(
        WxmpPlugin(api_client=WeChatApiClient(session=FakeSession())).config(),
        ask=lambda _: next(answers),
        ask_secret=lambda _: next(secrets),
    )

    assert result == {
        "appId": "APPID",
        "appSecret": "SECRET",
        "imageMaxSize": "5",
        "cdnPrefix": "https://cdn.example.com",
    }


def test_prompt_fields_repeats_required_question() -> None:
    answers = iter(["", "", "APPID", "", ""])
    secrets = iter(["", "SECRET"])

    result = cli.prompt_fields(
        WxmpPlugin(api_client=WeChatApiClient(session=FakeSession())).config(),
        ask=lambda _: next(answers),
        ask_secret=lambda _: next(secrets),
    )

    assert result["appId"] == "APPID"
    assert result["appSecret"] == "SECRET"


def test_upload_command_prints_markdown(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _write_config(tmp_path / "wxmp.toml", cdn="https://cdn.example.com")
    image = tmp_path / "abc.jpg"
    image.write_bytes(b"jpeg")
    session = FakeSession(
        get=[token_payload()], post=[{"url": "https://mmbiz.qpic.cn/abc.jpg?x=1"}]
    )
    _patch_client(monkeypatch, session)

    code = cli.main(["--config", str(config), "--log-plain", "upload", str(image)])

    assert code == 0
    assert capsys.readouterr().out.strip() == "![](https://cdn.example.com/abc.jpg?x=1)"


def test_upload_command_reports_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _write_config(tmp_path / "wxmp.toml")
    image = tmp_path / "abc.jpg"
    image.write_bytes(b"jpeg")
    session = FakeSession(get=[{"errcode": 40001, "errmsg": "invalid credential"}])
    _patch_client(monkeypatch, session)

    code = cli.main(["--config", str(config), "--log-plain", "upload", str(image)])

    assert code == 1
    assert "微信图床错误" in capsys.readouterr().err


def test_token_command(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _write_config(tmp_path / "wxmp.toml")
    _patch_client(monkeypatch, FakeSession(get=[token_payload("TOKEN", 7200)]))

    code = cli.main(["--config", str(config), "--log-plain", "token"])

    out = capsys.readouterr().out
    assert code == 0
    assert "access_token: TOKEN" in out
    assert "remaining: 7200 s" in out


def test_config_command_writes_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "wxmp.toml"
    answers = iter(["APPID", "8", ""])
    monkeypatch.setattr("builtins.input", lambda _: next(answers))
    monkeypatch.setattr(cli.getpass, "getpass", lambda _: "SECRET")

    code = cli.main(["--config", str(path), "--log-plain", "config"])

    assert code == 0
    text = path.read_text(encoding="utf-8")
    assert 'app_id = "APPID"' in text
    assert 'app_secret = "SECRET"' in text
    assert 'image_max_size = "8"' in text


def test_no_command_prints_help() -> None:
    assert cli.main(["--log-plain"]) == 1
