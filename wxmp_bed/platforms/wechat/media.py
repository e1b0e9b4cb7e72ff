"""WeChat image upload implementation."""

from __future__ import annotations

from typing import Sequence

from ...errors import ConfigurationError, ValidationError
from ...settings import UploaderConfig
from ...utils.logging import get_logger
from ..base import MediaUploader, UploadItem
from .api import WeChatApiClient
from .credentials import WeChatTokenProvider

LOGGER = get_logger(__name__)


class WeChatMediaUploader(MediaUploader):
    """Uploads images to the WeChat ``uploadimg`` endpoint, one at a time, in order."""

    def __init__(
        self,
        token_provider: WeChatTokenProvider,
        api_client: WeChatApiClient,
        config: UploaderConfig,
    ) -> None:
        self._tokens = token_provider
        self._api_client = api_client
        self._config = config

    def upload_batch(self, items: Sequence[UploadItem]) -> Sequence[UploadItem]:
        """Upload every item or raise on the first failure.

        Items uploaded before the failure keep their ``img_url``; nothing is
        rolled back.
        """
        if not self._config.app_id or not self._config.app_secret:
            raise ConfigurationError("未获取到微信图床配置 appId/appSecret")

        for item in items:
            self._upload_single(item)
        return items

    def _upload_single(self, item: UploadItem) -> None:
        size_mb = item.size_mb
        if size_mb > self._config.image_max_size:
            raise ValidationError(size_mb, self._config.image_max_size)

        token = self._tokens.get_token(
            self._config.app_id, self._config.app_secret, timeout=self._config.timeout
        )

        LOGGER.info(
            "upload %s",
            item.file_name,
            extra={
                "event": "wechat.upload.start",
                "extension": item.extension,
                "bytes": len(item.buffer),
            },
        )
        data = self._api_client.upload_image(
            token,
            file_name=item.file_name,
            content=item.buffer,
            content_type=item.content_type,
            timeout=self._config.timeout,
        )
        item.img_url = data["url"]
        item.full_result = data
