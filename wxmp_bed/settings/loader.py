"""Helpers for loading and saving uploader configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

try:  # pragma: no cover - Python 3.11+ includes tomllib
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older versions
    import tomli as tomllib  # type: ignore[no-redef]

from ..errors import ConfigurationError
from ..security import (
    ChainedSecretProvider,
    EnvSecretProvider,
    MappingSecretProvider,
    SecretNotFoundError,
)

DEFAULT_CONFIG_NAME = "wxmp.toml"
CONFIG_ENV_VAR = "WXMP_CONFIG"
CONFIG_SECTION = "wxmp"
DEFAULT_IMAGE_MAX_SIZE = 5.0
DEFAULT_TIMEOUT = 30.0

# Keys as they appear in the plugin schema (camelCase) mapped to TOML keys.
_KEY_ALIASES = {
    "appId": "app_id",
    "appSecret": "app_secret",
    "imageMaxSize": "image_max_size",
    "cdnPrefix": "cdn_prefix",
}


@dataclass(frozen=True, slots=True)
class UploaderConfig:
    """Operator-supplied settings, immutable for the process lifetime."""

    app_id: str
    app_secret: str
    image_max_size: float = DEFAULT_IMAGE_MAX_SIZE
    cdn_prefix: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    def as_dict(self) -> dict[str, Any]:
        """Return a serialisable view with the secret masked."""

        return {
            "app_id": self.app_id,
            "app_secret": "***" if self.app_secret else "",
            "image_max_size": self.image_max_size,
            "cdn_prefix": self.cdn_prefix,
            "timeout": self.timeout,
        }


def normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Accept both ``appId`` and ``app_id`` spellings."""
    return {_KEY_ALIASES.get(str(key), str(key)): value for key, value in data.items()}


def _parse_float(name: str, value: Any, *, default: float) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            f"配置项 {name} 必须是数字", details={name: value}
        ) from exc
    if parsed <= 0:
        raise ConfigurationError(f"配置项 {name} 必须大于 0", details={name: value})
    return parsed


def parse_prefix(value: Any) -> str | None:
    if value is None:
        return None
    prefix = str(value).strip().rstrip("/")
    return prefix or None


def build_config(
    section: Mapping[str, Any],
    *,
    env: Mapping[str, str] | None = None,
) -> UploaderConfig:
    """Resolve a config section into an :class:`UploaderConfig`.

    Environment variables (``WXMP_APP_ID``/``WXMP_APP_SECRET``) take precedence
    over values from the section.
    """

    data = normalize_keys(section)
    secrets = ChainedSecretProvider(
        (EnvSecretProvider(env=env), MappingSecretProvider(data))
    )

    resolved: dict[str, str] = {}
    for key in ("app_id", "app_secret"):
        try:
            resolved[key] = secrets.get_secret(key)
        except SecretNotFoundError as exc:
            raise ConfigurationError(
                f"缺少配置项 {key}，无法初始化微信公众号凭证",
                details={"key": key, "env": f"WXMP_{key.upper()}"},
            ) from exc

    return UploaderConfig(
        app_id=resolved["app_id"],
        app_secret=resolved["app_secret"],
        image_max_size=_parse_float(
            "image_max_size", data.get("image_max_size"), default=DEFAULT_IMAGE_MAX_SIZE
        ),
        cdn_prefix=parse_prefix(data.get("cdn_prefix")),
        timeout=_parse_float("timeout", data.get("timeout"), default=DEFAULT_TIMEOUT),
    )


def config_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    if explicit:
        return Path(explicit)
    env_value = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_value) if env_value else Path.cwd() / DEFAULT_CONFIG_NAME


def read_section(path: Path) -> dict[str, Any]:
    """Return the ``[wxmp]`` table, or an empty mapping when the file is absent."""

    if not path.exists():
        return {}
    try:
        with path.open("rb") as fp:
            data = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            "配置文件格式错误", details={"path": str(path), "reason": str(exc)}
        ) from exc
    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"配置文件中的 [{CONFIG_SECTION}] 必须是表", details={"path": str(path)}
        )
    return section


def load_config(
    config_file: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> UploaderConfig:
    path = config_path(config_file)
    if config_file and not path.exists():
        raise ConfigurationError("未找到配置文件", details={"path": str(path)})
    return build_config(read_section(path), env=env)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _emit_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return _quote(str(value))


def save_config(values: Mapping[str, Any], path: Path) -> Path:
    """Write ``values`` as the ``[wxmp]`` table of ``path``."""

    data = normalize_keys(values)
    lines = [f"[{CONFIG_SECTION}]"]
    for key, value in data.items():
        if value is None:
            continue
        lines.append(f"{key} = {_emit_value(value)}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    if os.name != "nt":  # the file holds the AppSecret
        os.chmod(path, 0o600)
    return path
