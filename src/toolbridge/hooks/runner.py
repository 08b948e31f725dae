"""Hook runner that invokes registered handlers and merges their results."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any

from toolbridge.hooks.types import (
    AgentEndEvent,
    AgentHookContext,
    BeforeToolCallEvent,
    BeforeToolCallResult,
    HookName,
    HookRegistration,
    ToolHookContext,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from toolbridge.hooks.types import HookHandler

logger = logging.getLogger(__name__)


class HookError(Exception):
    """Raised when a hook handler fails and the runner does not catch errors."""

    def __init__(self, hook_name: str, plugin_id: str, cause: BaseException) -> None:
        super().__init__(f"{hook_name} handler from {plugin_id} failed: {cause}")
        self.hook_name = hook_name
        self.plugin_id = plugin_id


class HookRunner:
    """Runs plugin hooks for tool calls and agent lifecycle events.

    The runner:
    - Holds handlers registered per hook point
    - Calls modifying hooks sequentially, highest priority first
    - Calls informational hooks concurrently
    - Handles async and sync handlers uniformly
    """

    def __init__(self, *, catch_errors: bool = True) -> None:
        self.catch_errors = catch_errors
        self._registrations: dict[HookName, list[HookRegistration]] = {}

    def register(
        self,
        hook_name: HookName | str,
        handler: HookHandler,
        *,
        plugin_id: str = "anonymous",
        priority: int = 0,
    ) -> Callable[[], None]:
        """Attach a handler to a hook point.

        Args:
            hook_name: One of the HookName values
            handler: Async or sync function receiving (event, context)
            plugin_id: Owner of the handler, used in logs
            priority: Higher priorities run first

        Returns:
            Unsubscribe function
        """
        name = HookName(hook_name)
        registration = HookRegistration(
            hook_name=name, handler=handler, plugin_id=plugin_id, priority=priority
        )
        self._registrations.setdefault(name, []).append(registration)

        def unsubscribe() -> None:
            registrations = self._registrations.get(name, [])
            if registration in registrations:
                registrations.remove(registration)

        return unsubscribe

    def has_hooks(self, hook_name: HookName | str) -> bool:
        return self.get_hook_count(hook_name) > 0

    def get_hook_count(self, hook_name: HookName | str) -> int:
        try:
            name = HookName(hook_name)
        except ValueError:
            return 0
        return len(self._registrations.get(name, []))

    def _ordered(self, hook_name: HookName) -> list[HookRegistration]:
        # sorted() is stable, so ties keep registration order
        return sorted(
            self._registrations.get(hook_name, []),
            key=lambda r: r.priority,
            reverse=True,
        )

    async def _call_handler(self, registration: HookRegistration, event: Any, ctx: Any) -> Any:
        """Call a handler, handling both async and sync functions."""
        result = registration.handler(event, ctx)
        if inspect.isawaitable(result):
            return await result
        return result

    def _handle_error(self, registration: HookRegistration, err: Exception) -> None:
        if not self.catch_errors:
            raise HookError(registration.hook_name.value, registration.plugin_id, err) from err
        logger.error(
            "[hooks] %s handler from %s failed: %s",
            registration.hook_name.value,
            registration.plugin_id,
            err,
        )

    async def run_before_tool_call(
        self, event: BeforeToolCallEvent, ctx: ToolHookContext
    ) -> BeforeToolCallResult | None:
        """Run before_tool_call handlers - returns the merged verdict.

        The first blocking result stops later handlers. Replacement params
        accumulate: each handler sees the params produced so far and the last
        replacement wins.
        """
        merged: BeforeToolCallResult | None = None
        current = event

        for registration in self._ordered(HookName.BEFORE_TOOL_CALL):
            try:
                result = await self._call_handler(registration, current, ctx)
            except Exception as err:
                self._handle_error(registration, err)
                continue

            if not isinstance(result, BeforeToolCallResult):
                continue
            if result.block:
                return BeforeToolCallResult(block=True, block_reason=result.block_reason)
            if result.params is not None:
                merged = BeforeToolCallResult(params=result.params)
                current = BeforeToolCallEvent(tool_name=event.tool_name, params=result.params)

        return merged

    async def run_agent_end(self, event: AgentEndEvent, ctx: AgentHookContext) -> None:
        """Run agent_end handlers concurrently.

        These events are informational - handlers cannot modify behavior.
        """
        registrations = self._ordered(HookName.AGENT_END)
        if not registrations:
            return

        results = await asyncio.gather(
            *(self._call_handler(r, event, ctx) for r in registrations),
            return_exceptions=True,
        )
        for registration, result in zip(registrations, results, strict=True):
            if isinstance(result, Exception):
                self._handle_error(registration, result)
            elif isinstance(result, BaseException):
                raise result
