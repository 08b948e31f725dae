"""Hook event types and handler results."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class HookName(StrEnum):
    """Lifecycle points hooks can attach to."""

    BEFORE_TOOL_CALL = "before_tool_call"
    AGENT_END = "agent_end"


# --- Tool Hook Events ---


@dataclass(slots=True)
class BeforeToolCallEvent:
    """Fired before tool execution - hooks can block or replace params."""

    tool_name: str = ""
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ToolHookContext:
    """Who is calling the tool, for policy attribution."""

    tool_name: str = ""
    agent_id: str | None = None
    session_key: str | None = None


@dataclass(slots=True)
class BeforeToolCallResult:
    """Return from a before_tool_call handler.

    ``params`` replaces the call parameters entirely when set.
    """

    params: dict[str, Any] | None = None
    block: bool = False
    block_reason: str | None = None


# --- Agent Lifecycle Events ---


@dataclass(slots=True)
class AgentEndEvent:
    """Fired when an agent run finishes, with the full conversation.

    ``messages`` are the engine's transcript entries, passed through untouched.
    """

    messages: list[Any] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    duration_ms: int | None = None


@dataclass(slots=True)
class AgentHookContext:
    agent_id: str | None = None
    session_key: str | None = None


HookHandler = Callable[[Any, Any], Any]


@dataclass(slots=True)
class HookRegistration:
    """A handler attached to a hook point by a plugin."""

    hook_name: HookName
    handler: HookHandler
    plugin_id: str = "anonymous"
    priority: int = 0
