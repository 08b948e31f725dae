"""Runtime services exposed to plugins."""

from toolbridge.runtime.agent import (
    PLUGIN_LANE,
    AgentCommand,
    AgentCommandOpts,
    AgentCommandResult,
    PluginAgentRunParams,
    PluginAgentRunResult,
    PluginAgentRunUsage,
    PluginAgentRuntime,
    run_plugin_agent_turn,
)

__all__ = [
    "AgentCommand",
    "AgentCommandOpts",
    "AgentCommandResult",
    "PLUGIN_LANE",
    "PluginAgentRunParams",
    "PluginAgentRunResult",
    "PluginAgentRunUsage",
    "PluginAgentRuntime",
    "run_plugin_agent_turn",
]
