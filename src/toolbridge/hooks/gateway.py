"""Gateway between wrapped tools and the (possibly absent) hook dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Protocol

from toolbridge.hooks.global_runner import get_global_hook_runner
from toolbridge.hooks.types import BeforeToolCallEvent, HookName, ToolHookContext

if TYPE_CHECKING:
    from collections.abc import Callable

    from toolbridge.hooks.types import BeforeToolCallResult


class HookDispatcher(Protocol):
    """What the gateway needs from a hook runner."""

    def has_hooks(self, hook_name: HookName | str) -> bool: ...

    async def run_before_tool_call(
        self, event: BeforeToolCallEvent, ctx: ToolHookContext
    ) -> BeforeToolCallResult | None: ...


@dataclass(frozen=True, slots=True)
class HookVerdict:
    """Interpreted outcome of the before_tool_call hooks for one call."""

    action: Literal["allow", "block", "mutate"] = "allow"
    reason: str | None = None
    params: dict[str, Any] | None = None

    @classmethod
    def allow(cls) -> HookVerdict:
        return cls()

    @classmethod
    def block(cls, reason: str | None = None) -> HookVerdict:
        return cls(action="block", reason=reason)

    @classmethod
    def mutate(cls, params: dict[str, Any]) -> HookVerdict:
        return cls(action="mutate", params=params)


class HookGateway:
    """Queries and invokes the hook dispatcher on behalf of wrapped tools.

    The dispatcher is looked up through ``get_runner`` on every call, so a
    runner installed after tools were wrapped is still seen. Errors raised by
    the dispatcher propagate; callers decide how to degrade.
    """

    def __init__(self, get_runner: Callable[[], HookDispatcher | None] = get_global_hook_runner):
        self._get_runner = get_runner

    def has_hooks(self, hook_name: HookName | str) -> bool:
        runner = self._get_runner()
        if runner is None:
            return False
        return bool(runner.has_hooks(hook_name))

    async def before_tool_call(
        self,
        tool_name: str,
        params: dict[str, Any],
        ctx: ToolHookContext,
    ) -> HookVerdict:
        runner = self._get_runner()
        if runner is None:
            return HookVerdict.allow()

        result = await runner.run_before_tool_call(
            BeforeToolCallEvent(tool_name=tool_name, params=params), ctx
        )
        if result is None:
            return HookVerdict.allow()
        if result.block:
            return HookVerdict.block(result.block_reason)
        if result.params is not None:
            return HookVerdict.mutate(result.params)
        return HookVerdict.allow()
