"""Host-side contracts: batch context, notifications and the plugin registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from ..platforms import UploadItem
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ConfigField:
    """One prompt in an uploader's configuration schema."""

    name: str
    type: str
    message: str
    required: bool = False
    default: str | None = None
    alias: str | None = None


@dataclass(slots=True)
class Notification:
    title: str
    body: str


class NotificationSink(Protocol):
    def notify(self, notification: Notification) -> None:
        """Deliver a human-readable event to the operator."""


class LoggingNotificationSink:
    """Default sink: writes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        LOGGER.error(
            notification.body,
            extra={"event": "notification", "title": notification.title},
        )


class CollectingNotificationSink:
    """Keeps notifications in memory; used by the CLI to print them."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)


@dataclass(slots=True)
class PluginContext:
    """State of one batch as seen by plugin hooks."""

    output: list[UploadItem]
    configs: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    notifier: NotificationSink = field(default_factory=LoggingNotificationSink)

    def get_config(self, plugin_id: str) -> Mapping[str, Any] | None:
        return self.configs.get(plugin_id)

    def emit_notification(self, title: str, body: str) -> None:
        self.notifier.notify(Notification(title=title, body=body))


Hook = Callable[[PluginContext], bool]


@dataclass(slots=True)
class UploaderRegistration:
    name: str
    handle: Hook
    config: Callable[[], list[ConfigField]]


@runtime_checkable
class Transformer(Protocol):
    """Optional: turns raw input into :class:`UploadItem` objects."""

    def transform(self, ctx: PluginContext) -> None: ...


@runtime_checkable
class BeforeTransformHook(Protocol):
    """Optional: runs before any transformer."""

    def before_transform(self, ctx: PluginContext) -> None: ...


@runtime_checkable
class BeforeUploadHook(Protocol):
    """Optional: runs after transformation, before the uploader."""

    def before_upload(self, ctx: PluginContext) -> None: ...


class Plugin(Protocol):
    plugin_id: str

    def register(self, host: "PluginHost") -> None: ...


class PluginHost:
    """Registry of uploaders and hooks, and the orchestrator that runs a batch."""

    def __init__(self) -> None:
        self._uploaders: dict[str, UploaderRegistration] = {}
        self._after_upload: dict[str, Hook] = {}
        self._transformers: dict[str, Transformer] = {}
        self._before_transform: dict[str, BeforeTransformHook] = {}
        self._before_upload: dict[str, BeforeUploadHook] = {}

    @property
    def after_upload_hooks(self) -> Mapping[str, Hook]:
        return dict(self._after_upload)

    @property
    def extension_points(self) -> dict[str, list[str]]:
        return {
            "transformer": sorted(self._transformers),
            "before_transform": sorted(self._before_transform),
            "before_upload": sorted(self._before_upload),
        }

    def use(self, plugin: Plugin) -> None:
        """Let ``plugin`` register itself, then pick up any optional capabilities."""
        plugin.register(self)
        key = plugin.plugin_id.lower()
        if isinstance(plugin, Transformer):
            self._transformers[key] = plugin
        if isinstance(plugin, BeforeTransformHook):
            self._before_transform[key] = plugin
        if isinstance(plugin, BeforeUploadHook):
            self._before_upload[key] = plugin

    def register_uploader(self, plugin_id: str, registration: UploaderRegistration) -> None:
        self._uploaders[plugin_id.lower()] = registration

    def register_after_upload(self, plugin_id: str, hook: Hook) -> None:
        self._after_upload[plugin_id.lower()] = hook

    def uploader(self, plugin_id: str) -> UploaderRegistration:
        key = plugin_id.lower()
        try:
            return self._uploaders[key]
        except KeyError as exc:
            raise ValueError(f"Unsupported uploader: {plugin_id}") from exc

    def upload(self, plugin_id: str, ctx: PluginContext) -> bool:
        """Run one batch through the hooks and the selected uploader."""
        registration = self.uploader(plugin_id)
        for hook in self._before_transform.values():
            hook.before_transform(ctx)
        for transformer in self._transformers.values():
            transformer.transform(ctx)
        for hook in self._before_upload.values():
            hook.before_upload(ctx)

        success = registration.handle(ctx)
        if not success:
            return False
        for after in self._after_upload.values():
            after(ctx)
        return True
