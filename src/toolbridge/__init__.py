"""toolbridge - hook-intercepted tool adapters and plugin-triggered agent runs."""

__version__ = "0.1.0"

from toolbridge.adapter import (
    ToolDefinition,
    ToolDefinitionContext,
    to_client_tool_definitions,
    to_tool_definitions,
)
from toolbridge.config import Config, HookFailureMode
from toolbridge.hooks import HookGateway, HookRunner
from toolbridge.runtime import PluginAgentRunParams, PluginAgentRunResult, run_plugin_agent_turn
from toolbridge.tools import AgentTool, ToolResult, normalize_tool_name

__all__ = [
    "AgentTool",
    "Config",
    "HookFailureMode",
    "HookGateway",
    "HookRunner",
    "PluginAgentRunParams",
    "PluginAgentRunResult",
    "ToolDefinition",
    "ToolDefinitionContext",
    "ToolResult",
    "normalize_tool_name",
    "run_plugin_agent_turn",
    "to_client_tool_definitions",
    "to_tool_definitions",
]
