"""Split tools into the engine's built-in and custom tool lists."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from toolbridge.adapter import ToolDefinition, ToolDefinitionContext, to_tool_definitions

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolbridge.hooks.gateway import HookGateway
    from toolbridge.tools.base import AgentTool


@dataclass(slots=True)
class SdkToolSplit:
    built_in_tools: list[AgentTool] = field(default_factory=list)
    custom_tools: list[ToolDefinition] = field(default_factory=list)


def split_sdk_tools(
    tools: Sequence[AgentTool],
    *,
    sandbox_enabled: bool,
    ctx: ToolDefinitionContext | None = None,
    gateway: HookGateway | None = None,
) -> SdkToolSplit:
    """Route every tool through the custom tool path.

    Built-in engine tools would bypass hook interception, so none are used
    regardless of provider or sandboxing.
    """
    return SdkToolSplit(
        built_in_tools=[],
        custom_tools=to_tool_definitions(tools, ctx, gateway=gateway),
    )
