"""Tool result types and envelope builders."""

import json
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ToolStatus(StrEnum):
    """Non-success statuses carried in a result envelope.

    Success has no status of its own: any payload without one of these
    values is a successful result.
    """

    ERROR = "error"
    BLOCKED = "blocked"
    PENDING = "pending"


class TextContent(BaseModel):
    """A model-visible text block."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Result of a tool execution: text for the model plus structured details."""

    content: list[TextContent] = Field(default_factory=list)
    details: Any = None

    @property
    def text(self) -> str:
        """Concatenated text of all content blocks."""
        return "\n".join(block.text for block in self.content)


def json_result(payload: Any) -> ToolResult:
    """Build a result whose details are the payload and whose text is its JSON."""
    return ToolResult(
        content=[TextContent(text=json.dumps(payload, indent=2, default=str))],
        details=payload,
    )


def text_result(text: str, details: Any = None) -> ToolResult:
    """Build a plain text result."""
    return ToolResult(content=[TextContent(text=text)], details=details)


def error_result(tool: str, message: str) -> ToolResult:
    return json_result({"status": ToolStatus.ERROR.value, "tool": tool, "error": message})


def blocked_result(tool: str, reason: str) -> ToolResult:
    return json_result({"status": ToolStatus.BLOCKED.value, "tool": tool, "error": reason})


def pending_result(tool: str, message: str) -> ToolResult:
    return json_result({"status": ToolStatus.PENDING.value, "tool": tool, "message": message})


def result_status(result: ToolResult) -> ToolStatus | None:
    """Return the envelope status of a result, or None for a successful result."""
    details = result.details
    if not isinstance(details, dict):
        return None
    try:
        return ToolStatus(details.get("status"))
    except ValueError:
        return None
