"""Tool system components."""

from toolbridge.tools.base import AbortError, AgentTool, BaseTool, FunctionTool, ToolError
from toolbridge.tools.bash import BashTool
from toolbridge.tools.common import (
    TextContent,
    ToolResult,
    ToolStatus,
    json_result,
    text_result,
)
from toolbridge.tools.policy import TOOL_NAME_ALIASES, normalize_tool_name

__all__ = [
    "AbortError",
    "AgentTool",
    "BaseTool",
    "BashTool",
    "FunctionTool",
    "TOOL_NAME_ALIASES",
    "TextContent",
    "ToolError",
    "ToolResult",
    "ToolStatus",
    "json_result",
    "normalize_tool_name",
    "text_result",
]
