"""Hook system for intercepting tool calls and agent lifecycle events.

Hooks can:
- Block tool calls before they run
- Replace tool call parameters
- Observe the end of an agent run (e.g. to launch a forked run)
"""

from toolbridge.hooks.gateway import HookDispatcher, HookGateway, HookVerdict
from toolbridge.hooks.global_runner import (
    get_global_hook_runner,
    initialize_global_hook_runner,
    reset_global_hook_runner,
)
from toolbridge.hooks.runner import HookError, HookRunner
from toolbridge.hooks.types import (
    AgentEndEvent,
    AgentHookContext,
    BeforeToolCallEvent,
    BeforeToolCallResult,
    HookName,
    ToolHookContext,
)

__all__ = [
    "AgentEndEvent",
    "AgentHookContext",
    "BeforeToolCallEvent",
    "BeforeToolCallResult",
    "HookDispatcher",
    "HookError",
    "HookGateway",
    "HookName",
    "HookRunner",
    "HookVerdict",
    "ToolHookContext",
    "get_global_hook_runner",
    "initialize_global_hook_runner",
    "reset_global_hook_runner",
]
