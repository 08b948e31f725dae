"""Capability protocol: the calling convention tools are written against."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from toolbridge.tools.common import ToolResult, text_result

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    ToolUpdateCallback = Callable[[ToolResult], None]
    ToolFunction = Callable[
        [str, dict[str, Any], asyncio.Event | None, ToolUpdateCallback | None],
        Awaitable[ToolResult],
    ]


class ToolError(Exception):
    """Raised by tools to signal an execution error."""


class AbortError(Exception):
    """Raised by tools that stopped because their cancellation signal fired."""


def is_abort_error(err: BaseException) -> bool:
    """Check whether an exception represents cancellation rather than a fault.

    Errors from other libraries are recognized by class name.
    """
    return isinstance(err, (AbortError, asyncio.CancelledError)) or (
        type(err).__name__ == "AbortError"
    )


class AgentTool(ABC):
    """A named, schema-described operation an agent turn may invoke.

    Tools are read-only after construction. ``parameters`` is an opaque schema
    value that adapters forward without interpreting.
    """

    name: str
    description: str = ""
    parameters: Any = None
    label: str | None = None

    @property
    def display_label(self) -> str:
        return self.label or self.name

    @abstractmethod
    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        signal: asyncio.Event | None = None,
        on_update: ToolUpdateCallback | None = None,
    ) -> ToolResult:
        """Execute the tool.

        Args:
            tool_call_id: Identifier of the model's tool call
            params: Raw call parameters
            signal: Cancellation signal; set means the call should stop
            on_update: Optional callback for partial results

        Returns:
            The tool result
        """
        ...


P = TypeVar("P", bound=BaseModel)


class BaseTool(AgentTool, Generic[P]):
    """Base implementation for tools with typed parameters.

    Type parameter P is the Pydantic model for tool parameters.
    """

    parameters: type[P]

    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        signal: asyncio.Event | None = None,
        on_update: ToolUpdateCallback | None = None,
    ) -> ToolResult:
        validated = self.parameters.model_validate(params)
        result = await self.run(validated, signal, on_update)
        if isinstance(result, str):
            return text_result(result)
        return result

    @abstractmethod
    async def run(
        self,
        params: P,
        signal: asyncio.Event | None,
        on_update: ToolUpdateCallback | None,
    ) -> ToolResult | str:
        """Run the tool with validated parameters."""
        ...


class FunctionTool(AgentTool):
    """Tool backed by a plain async function with the execute signature."""

    def __init__(
        self,
        name: str,
        fn: ToolFunction,
        *,
        description: str = "",
        parameters: Any = None,
        label: str | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self.label = label
        self._fn = fn

    async def execute(
        self,
        tool_call_id: str,
        params: dict[str, Any],
        signal: asyncio.Event | None = None,
        on_update: ToolUpdateCallback | None = None,
    ) -> ToolResult:
        return await self._fn(tool_call_id, params, signal, on_update)
