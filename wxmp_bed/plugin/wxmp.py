"""The WeChat Official Account uploader exposed to a plugin host."""

from __future__ import annotations

from ..errors import ConfigurationError, WxmpError
from ..platforms.wechat import WeChatApiClient, WeChatMediaUploader, WeChatTokenProvider
from ..services import finalize
from ..settings import build_config, normalize_keys, parse_prefix
from ..utils.logging import get_logger
from .base import ConfigField, PluginContext, PluginHost, UploaderRegistration

LOGGER = get_logger(__name__)

PLUGIN_ID = "wxmp"
UPLOADER_NAME = "微信公众号图床"
NOTIFICATION_TITLE = "微信图床错误"


class WxmpPlugin:
    """Owns one token provider for its whole lifetime and shares it across batches."""

    plugin_id = PLUGIN_ID

    def __init__(
        self,
        *,
        api_client: WeChatApiClient | None = None,
        token_provider: WeChatTokenProvider | None = None,
    ) -> None:
        self._api_client = api_client or WeChatApiClient()
        self._tokens = token_provider or WeChatTokenProvider(self._api_client)

    def config(self) -> list[ConfigField]:
        return [
            ConfigField(name="appId", type="input", message="微信公众号AppID", required=True),
            ConfigField(
                name="appSecret", type="password", message="微信公众号AppSecret", required=True
            ),
            ConfigField(
                name="imageMaxSize",
                type="input",
                message="图片大小限制（MB，微信上限为10MB）",
                default="5",
            ),
            ConfigField(
                name="cdnPrefix",
                type="input",
                alias="CDN前缀",
                message="CDN地址（用于解决防盗链问题，如：https://your-cdn.com）",
                default="",
            ),
        ]

    def register(self, host: PluginHost) -> None:
        host.register_uploader(
            PLUGIN_ID,
            UploaderRegistration(name=UPLOADER_NAME, handle=self.handle_upload, config=self.config),
        )
        host.register_after_upload(PLUGIN_ID, self.handle_after_upload)

    def handle_upload(self, ctx: PluginContext) -> bool:
        """Upload ``ctx.output``; report failures and return ``False`` instead of raising."""
        try:
            section = ctx.get_config(PLUGIN_ID)
            if section is None:
                raise ConfigurationError("未获取到微信图床配置")
            config = build_config(section)
            uploader = WeChatMediaUploader(self._tokens, self._api_client, config)
            uploader.upload_batch(ctx.output)
        except WxmpError as exc:
            LOGGER.error(
                "微信图床上传失败",
                exc_info=exc,
                extra={"event": "wechat.upload.failed", "details": exc.details},
            )
            ctx.emit_notification(NOTIFICATION_TITLE, exc.message or "未知错误")
            return False
        except Exception:
            LOGGER.exception("微信图床上传失败", extra={"event": "wechat.upload.failed"})
            ctx.emit_notification(NOTIFICATION_TITLE, "未知错误")
            return False
        return True

    def handle_after_upload(self, ctx: PluginContext) -> bool:
        section = ctx.get_config(PLUGIN_ID) or {}
        cdn_prefix = parse_prefix(normalize_keys(section).get("cdn_prefix"))
        LOGGER.info("微信图床上传完成", extra={"event": "wechat.finalize.start"})
        finalize(ctx.output, cdn_prefix)
        return True
