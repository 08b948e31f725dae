"""Adapt agent tools to the execution engine's tool definition convention.

Agent tools are called as ``execute(tool_call_id, params, signal, on_update)``;
the engine calls ``execute(tool_call_id, params, on_update, ctx, signal)``.
The wrappers here translate between the two, run before_tool_call hooks, and
turn failures into result envelopes.
"""

from __future__ import annotations

import logging
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

from toolbridge.config import DEFAULT_BLOCK_REASON, HookFailureMode
from toolbridge.hooks.gateway import HookGateway
from toolbridge.hooks.types import HookName, ToolHookContext
from toolbridge.tools.base import is_abort_error
from toolbridge.tools.common import blocked_result, error_result, pending_result
from toolbridge.tools.policy import normalize_tool_name

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Mapping, Sequence

    from toolbridge.tools.base import AgentTool, ToolUpdateCallback
    from toolbridge.tools.common import ToolResult

logger = logging.getLogger(__name__)

HOOK_FAILURE_REASON = "before_tool_call hook failed"
CLIENT_DELEGATION_MESSAGE = "Tool execution delegated to client"


@dataclass(slots=True)
class ToolDefinitionContext:
    """Session attribution passed to hooks for every wrapped call."""

    session_key: str | None = None
    agent_id: str | None = None


@dataclass(slots=True)
class ToolErrorDescription:
    message: str
    stack: str | None = None


def describe_tool_execution_error(err: BaseException) -> ToolErrorDescription:
    """Split an exception into a user-facing message and a diagnostic trace."""
    message = str(err)
    if not message.strip():
        message = type(err).__name__
    stack = "".join(traceback.format_exception(err)).rstrip() or None
    return ToolErrorDescription(message=message, stack=stack)


class ToolDefinition(ABC):
    """A tool in the execution engine's calling convention."""

    name: str
    label: str
    description: str
    parameters: Any

    @abstractmethod
    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        on_update: ToolUpdateCallback | None = None,
        ctx: Any = None,
        signal: asyncio.Event | None = None,
    ) -> ToolResult: ...


class HookedToolDefinition(ToolDefinition):
    """Wraps an agent tool with hook interception and error envelopes."""

    def __init__(
        self,
        tool: AgentTool,
        ctx: ToolDefinitionContext | None = None,
        *,
        gateway: HookGateway | None = None,
        aliases: Mapping[str, str] | None = None,
        failure_mode: HookFailureMode = HookFailureMode.OPEN,
        default_block_reason: str = DEFAULT_BLOCK_REASON,
    ) -> None:
        self.tool = tool
        self.name = tool.name or "tool"
        self.label = tool.label or self.name
        self.description = tool.description or ""
        self.parameters = tool.parameters
        self.normalized_name = normalize_tool_name(self.name, aliases)
        self._ctx = ctx or ToolDefinitionContext()
        self._gateway = gateway or HookGateway()
        self._failure_mode = failure_mode
        self._default_block_reason = default_block_reason

    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        on_update: ToolUpdateCallback | None = None,
        ctx: Any = None,
        signal: asyncio.Event | None = None,
    ) -> ToolResult:
        name = self.normalized_name

        try:
            if self._gateway.has_hooks(HookName.BEFORE_TOOL_CALL):
                verdict = await self._gateway.before_tool_call(
                    name,
                    params,
                    ToolHookContext(
                        tool_name=name,
                        agent_id=self._ctx.agent_id,
                        session_key=self._ctx.session_key,
                    ),
                )
                if verdict.action == "block":
                    reason = verdict.reason or self._default_block_reason
                    logger.warning("[tools] %s blocked: %s", name, reason)
                    return blocked_result(name, reason)
                if verdict.action == "mutate" and verdict.params is not None:
                    params = verdict.params
        except Exception as hook_err:
            logger.warning("[tools] before_tool_call hook failed: %s", hook_err)
            if self._failure_mode == HookFailureMode.CLOSED:
                return blocked_result(name, HOOK_FAILURE_REASON)

        try:
            return await self.tool.execute(tool_call_id, params, signal, on_update)
        except Exception as err:
            if (signal is not None and signal.is_set()) or is_abort_error(err):
                raise
            described = describe_tool_execution_error(err)
            if described.stack and described.stack != described.message:
                logger.debug("tools: %s failed stack:\n%s", name, described.stack)
            logger.error("[tools] %s failed: %s", name, described.message)
            return error_result(name, described.message)


def to_tool_definitions(
    tools: Sequence[AgentTool],
    ctx: ToolDefinitionContext | None = None,
    *,
    gateway: HookGateway | None = None,
    aliases: Mapping[str, str] | None = None,
    failure_mode: HookFailureMode = HookFailureMode.OPEN,
    default_block_reason: str = DEFAULT_BLOCK_REASON,
) -> list[ToolDefinition]:
    """Wrap agent tools for the execution engine.

    Args:
        tools: Tools to wrap; lookup by the engine uses their raw names
        ctx: Session attribution passed to hooks
        gateway: Hook gateway (defaults to one backed by the global runner)
        aliases: Tool alias table used for hook targeting and envelopes
        failure_mode: Behavior when the before_tool_call hook itself fails
        default_block_reason: Reason used when a hook blocks without one

    Returns:
        One tool definition per tool, in order
    """
    gateway = gateway or HookGateway()
    return [
        HookedToolDefinition(
            tool,
            ctx,
            gateway=gateway,
            aliases=aliases,
            failure_mode=failure_mode,
            default_block_reason=default_block_reason,
        )
        for tool in tools
    ]


# --- Client-delegated tools ---


class ClientToolFunction(BaseModel):
    name: str = Field(min_length=1)
    description: str | None = None
    parameters: Any = None


class ClientToolDefinition(BaseModel):
    """Hosted tool declared by a remote client (OpenResponses function tool)."""

    type: Literal["function"] = "function"
    function: ClientToolFunction


class DelegatedToolDefinition(ToolDefinition):
    """Tool whose execution happens on the client.

    Calls never run locally and never pass through hooks; the client that
    actually runs the tool owns any interception.
    """

    def __init__(
        self,
        tool: ClientToolDefinition,
        on_client_tool_call: Callable[[str, dict[str, Any]], None] | None = None,
    ) -> None:
        func = tool.function
        self.name = func.name
        self.label = func.name
        self.description = func.description or ""
        self.parameters = func.parameters
        self._on_client_tool_call = on_client_tool_call

    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        on_update: ToolUpdateCallback | None = None,
        ctx: Any = None,
        signal: asyncio.Event | None = None,
    ) -> ToolResult:
        if self._on_client_tool_call is not None:
            self._on_client_tool_call(self.name, params)
        return pending_result(self.name, CLIENT_DELEGATION_MESSAGE)


def to_client_tool_definitions(
    tools: Sequence[ClientToolDefinition | Mapping[str, Any]],
    on_client_tool_call: Callable[[str, dict[str, Any]], None] | None = None,
) -> list[ToolDefinition]:
    """Wrap client-hosted tools so calls return a pending result."""
    return [
        DelegatedToolDefinition(
            tool
            if isinstance(tool, ClientToolDefinition)
            else ClientToolDefinition.model_validate(tool),
            on_client_tool_call,
        )
        for tool in tools
    ]
