"""Command-line interface for the WeChat image host."""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path
from typing import Callable, Sequence

from ..errors import WxmpError
from ..platforms import UploadItem
from ..platforms.wechat import WeChatApiClient, WeChatTokenProvider
from ..plugin import (
    PLUGIN_ID,
    CollectingNotificationSink,
    ConfigField,
    PluginContext,
    PluginHost,
    WxmpPlugin,
)
from ..settings import config_path, load_config, read_section, save_config
from ..utils.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)

Prompt = Callable[[str], str]


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(structured=not args.log_plain)

    handler: Callable[[argparse.Namespace], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return 1
    return handler(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wxmp", description="WeChat Official Account image host")
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )

    subparsers = parser.add_subparsers(dest="command")

    config_parser = subparsers.add_parser("config", help="Prompt for and save uploader settings")
    config_parser.set_defaults(handler=_handle_config)

    token_parser = subparsers.add_parser("token", help="Fetch and display an access token")
    token_parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore the cached token and request a new one",
    )
    token_parser.set_defaults(handler=_handle_token)

    upload_parser = subparsers.add_parser("upload", help="Upload images and print Markdown")
    upload_parser.add_argument("files", nargs="+", type=Path, help="Image files to upload")
    upload_parser.add_argument(
        "--format",
        choices=("markdown", "json"),
        default="markdown",
        help="Output format for upload results",
    )
    upload_parser.set_defaults(handler=_handle_upload)

    return parser


def prompt_fields(
    fields: Sequence[ConfigField],
    *,
    current: dict[str, object] | None = None,
    ask: Prompt | None = None,
    ask_secret: Prompt | None = None,
) -> dict[str, str]:
    """Ask for each schema field; empty answers fall back to current or default values."""
    ask = ask or input
    ask_secret = ask_secret or getpass.getpass
    current = current or {}
    answers: dict[str, str] = {}
    for field in fields:
        existing = current.get(field.name)
        fallback = str(existing) if existing not in (None, "") else (field.default or "")
        label = field.alias or field.message
        shown = "***" if field.type == "password" and fallback else fallback
        question = f"{label} [{shown}]: " if shown else f"{label}: "
        reader = ask_secret if field.type == "password" else ask
        while True:
            value = reader(question).strip() or fallback
            if value or not field.required:
                break
            print(f"{field.name} 为必填项", file=sys.stderr)
        answers[field.name] = value
    return answers


def _handle_config(args: argparse.Namespace) -> int:
    path = config_path(args.config)
    try:
        existing = read_section(path)
    except WxmpError as exc:
        LOGGER.warning("Ignoring unreadable config", extra={"event": "cli.config", "reason": str(exc)})
        existing = {}
    current = {
        "appId": existing.get("app_id"),
        "appSecret": existing.get("app_secret"),
        "imageMaxSize": existing.get("image_max_size"),
        "cdnPrefix": existing.get("cdn_prefix"),
    }
    answers = prompt_fields(WxmpPlugin().config(), current=current)
    values: dict[str, object] = dict(answers)
    if "timeout" in existing:
        values["timeout"] = existing["timeout"]
    save_config(values, path)
    print(f"配置已保存至 {path}")
    return 0


def _handle_token(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
        provider = WeChatTokenProvider(WeChatApiClient(timeout=config.timeout))
        token = provider.get_credential(
            config.app_id, config.app_secret, force_refresh=args.force_refresh
        )
    except WxmpError as exc:
        print(f"获取 access_token 失败：{exc}", file=sys.stderr)
        return 1

    print("access_token:", token.value)
    print("remaining:", round(provider.remaining() / 1000), "s")
    return 0


def _handle_upload(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except WxmpError as exc:
        print(f"配置错误：{exc}", file=sys.stderr)
        return 1

    items: list[UploadItem] = []
    for path in args.files:
        if not path.is_file():
            print(f"未找到图片文件: {path}", file=sys.stderr)
            return 1
        items.append(UploadItem.from_path(path))

    plugin = WxmpPlugin(api_client=WeChatApiClient(timeout=config.timeout))
    host = PluginHost()
    host.use(plugin)

    sink = CollectingNotificationSink()
    section = {
        "appId": config.app_id,
        "appSecret": config.app_secret,
        "imageMaxSize": config.image_max_size,
        "cdnPrefix": config.cdn_prefix or "",
    }
    ctx = PluginContext(output=items, configs={PLUGIN_ID: section}, notifier=sink)

    success = host.upload(PLUGIN_ID, ctx)
    for notification in sink.notifications:
        print(f"{notification.title}: {notification.body}", file=sys.stderr)

    _print_results(items, args.format)
    return 0 if success else 1


def _print_results(items: Sequence[UploadItem], output_format: str) -> None:
    if output_format == "json":
        payload = [
            {"file": item.file_name, "url": item.img_url, "markdown": item.markdown}
            for item in items
            if item.img_url
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return
    for item in items:
        if item.img_url:
            print(item.markdown or item.img_url)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
