"""Configuration loading (files + environment)."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from toolbridge.config.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolbridge.adapter import ToolDefinition, ToolDefinitionContext
    from toolbridge.hooks.gateway import HookGateway
    from toolbridge.runtime.agent import AgentCommand, PluginAgentRuntime
    from toolbridge.tools.base import AgentTool

DEFAULT_BLOCK_REASON = "Tool call blocked by plugin"
DEFAULT_PLUGIN_LANE = "plugin"


class HookFailureMode(StrEnum):
    """What a wrapped tool does when the before_tool_call hook itself fails."""

    OPEN = "open"  # log and execute the tool anyway
    CLOSED = "closed"  # return a blocked result


@dataclass(slots=True)
class Config:
    """Resolved toolbridge config."""

    tool_aliases: dict[str, str] = field(default_factory=dict)
    hook_failure_mode: HookFailureMode = HookFailureMode.OPEN
    default_block_reason: str = DEFAULT_BLOCK_REASON
    plugin_lane: str = DEFAULT_PLUGIN_LANE
    log_level: str = "WARNING"

    @classmethod
    def load(cls) -> Config:
        """Load config from files and environment variables.

        Priority (highest to lowest):
        1. Environment variables (TOOLBRIDGE_*)
        2. Project config (.toolbridge/config.toml or .toolbridge/config.yaml)
        3. Global config (~/.toolbridge/config.toml or ~/.toolbridge/config.yaml)
        4. Defaults
        """
        config_data: dict[str, Any] = {}

        global_config_dir = Path.home() / ".toolbridge"
        config_data = cls._merge_config(config_data, cls._load_config_file(global_config_dir))

        project_config_dir = Path.cwd() / ".toolbridge"
        config_data = cls._merge_config(config_data, cls._load_config_file(project_config_dir))

        config_data = cls._apply_env_vars(config_data)
        return cls._from_dict(config_data)

    def alias_table(self) -> dict[str, str]:
        """Default tool aliases merged with configured ones."""
        from toolbridge.tools.policy import build_alias_table

        return build_alias_table(self.tool_aliases)

    def build_tool_definitions(
        self,
        tools: Sequence[AgentTool],
        ctx: ToolDefinitionContext | None = None,
        gateway: HookGateway | None = None,
    ) -> list[ToolDefinition]:
        """Wrap tools for the execution engine using these settings."""
        from toolbridge.adapter import to_tool_definitions

        return to_tool_definitions(
            tools,
            ctx,
            gateway=gateway,
            aliases=self.alias_table(),
            failure_mode=self.hook_failure_mode,
            default_block_reason=self.default_block_reason,
        )

    def plugin_runtime(self, agent_command: AgentCommand) -> PluginAgentRuntime:
        """Agent runtime for plugins, defaulting runs to the configured lane."""
        from toolbridge.runtime.agent import PluginAgentRuntime

        return PluginAgentRuntime(agent_command, default_lane=self.plugin_lane)

    @classmethod
    def _load_config_file(cls, config_dir: Path) -> dict[str, Any]:
        """Load config from a directory (TOML or YAML)."""
        toml_path = config_dir / "config.toml"
        yaml_path = config_dir / "config.yaml"
        yml_path = config_dir / "config.yml"

        try:
            if toml_path.exists():
                with open(toml_path, "rb") as f:
                    return tomllib.load(f)
            if yaml_path.exists():
                with open(yaml_path) as f:
                    return yaml.safe_load(f) or {}
            if yml_path.exists():
                with open(yml_path) as f:
                    return yaml.safe_load(f) or {}
        except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Invalid config file in {config_dir}: {e}") from e

        return {}

    @classmethod
    def _merge_config(cls, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two config dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    @classmethod
    def _apply_env_vars(cls, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply TOOLBRIDGE_* environment variables."""
        env_mappings = {
            "TOOLBRIDGE_HOOK_FAILURE_MODE": "hook_failure_mode",
            "TOOLBRIDGE_BLOCK_REASON": "default_block_reason",
            "TOOLBRIDGE_PLUGIN_LANE": "plugin_lane",
            "TOOLBRIDGE_LOG_LEVEL": "log_level",
        }

        for env_var, config_key in env_mappings.items():
            if value := os.environ.get(env_var):
                config_data[config_key] = value

        return config_data

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from dictionary."""
        aliases = data.get("tool_aliases") or {}
        if not isinstance(aliases, dict):
            raise ConfigError("tool_aliases must be a table of alias = name")

        mode = str(data.get("hook_failure_mode", HookFailureMode.OPEN)).lower()
        try:
            hook_failure_mode = HookFailureMode(mode)
        except ValueError as e:
            raise ConfigError(
                f"Invalid hook_failure_mode '{mode}' (expected 'open' or 'closed')"
            ) from e

        config = cls(
            tool_aliases={str(k): str(v) for k, v in aliases.items()},
            hook_failure_mode=hook_failure_mode,
            default_block_reason=data.get("default_block_reason") or DEFAULT_BLOCK_REASON,
            plugin_lane=data.get("plugin_lane") or DEFAULT_PLUGIN_LANE,
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )
        # Fail fast on alias chains
        config.alias_table()
        return config
