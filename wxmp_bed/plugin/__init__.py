"""Plugin surface for image-upload orchestrators."""

from __future__ import annotations

from .base import (
    BeforeTransformHook,
    BeforeUploadHook,
    CollectingNotificationSink,
    ConfigField,
    LoggingNotificationSink,
    Notification,
    NotificationSink,
    PluginContext,
    PluginHost,
    Transformer,
    UploaderRegistration,
)
from .wxmp import PLUGIN_ID, WxmpPlugin

__all__ = [
    "BeforeTransformHook",
    "BeforeUploadHook",
    "CollectingNotificationSink",
    "ConfigField",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "PLUGIN_ID",
    "PluginContext",
    "PluginHost",
    "Transformer",
    "UploaderRegistration",
    "WxmpPlugin",
]
