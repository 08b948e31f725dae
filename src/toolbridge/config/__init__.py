"""Configuration for tool wrapping and plugin runs."""

from toolbridge.config.errors import ConfigError
from toolbridge.config.runtime import (
    DEFAULT_BLOCK_REASON,
    DEFAULT_PLUGIN_LANE,
    Config,
    HookFailureMode,
)

__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_BLOCK_REASON",
    "DEFAULT_PLUGIN_LANE",
    "HookFailureMode",
]
