"""Settings package exports."""

from .loader import (
    CONFIG_ENV_VAR,
    DEFAULT_IMAGE_MAX_SIZE,
    UploaderConfig,
    build_config,
    config_path,
    load_config,
    normalize_keys,
    parse_prefix,
    read_section,
    save_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_IMAGE_MAX_SIZE",
    "UploaderConfig",
    "build_config",
    "config_path",
    "load_config",
    "normalize_keys",
    "parse_prefix",
    "read_section",
    "save_config",
]
