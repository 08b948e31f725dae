"""Behavior tests for wrapping agent tools as hooked tool definitions."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from toolbridge.adapter import (
    HOOK_FAILURE_REASON,
    ToolDefinitionContext,
    describe_tool_execution_error,
    to_tool_definitions,
)
from toolbridge.config import HookFailureMode
from toolbridge.hooks import (
    BeforeToolCallResult,
    HookGateway,
    HookName,
    HookRunner,
    initialize_global_hook_runner,
)
from toolbridge.tools.base import AbortError
from toolbridge.tools.common import json_result
from tests.test_doubles.hook_dispatcher_fake import HookDispatcherFake
from tests.test_doubles.tool_spy import ToolSpy


def gateway_for(dispatcher) -> HookGateway:
    return HookGateway(lambda: dispatcher)


class CustomAbortError(Exception):
    pass


CustomAbortError.__name__ = "AbortError"


@pytest.mark.asyncio
async def test_wraps_tool_errors_into_error_envelope_without_traceback():
    tool = ToolSpy("boom", error=RuntimeError("nope"))

    defs = to_tool_definitions([tool])
    result = await defs[0].execute("call1", {})

    assert result.details == {"status": "error", "tool": "boom", "error": "nope"}
    serialized = json.dumps(result.details)
    assert "Traceback" not in serialized
    assert 'File "' not in serialized
    assert "Traceback" not in result.text


@pytest.mark.asyncio
async def test_normalizes_exec_tool_aliases_in_error_results():
    tool = ToolSpy("bash", error=RuntimeError("nope"))

    defs = to_tool_definitions([tool])
    result = await defs[0].execute("call2", {})

    assert result.details == {"status": "error", "tool": "exec", "error": "nope"}


@pytest.mark.asyncio
async def test_error_stack_goes_to_debug_log_only(caplog):
    tool = ToolSpy("boom", error=ValueError("bad input"))
    defs = to_tool_definitions([tool])

    with caplog.at_level(logging.DEBUG, logger="toolbridge"):
        result = await defs[0].execute("call1", {})

    debug_records = [r for r in caplog.records if r.levelno == logging.DEBUG]
    error_records = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert any("Traceback" in r.getMessage() for r in debug_records)
    assert [r.getMessage() for r in error_records] == ["[tools] boom failed: bad input"]
    assert "Traceback" not in result.text


@pytest.mark.asyncio
async def test_blank_error_message_falls_back_to_exception_type():
    tool = ToolSpy("boom", error=KeyError())

    defs = to_tool_definitions([tool])
    result = await defs[0].execute("call1", {})

    assert result.details["error"] == "KeyError"


@pytest.mark.asyncio
async def test_definition_metadata_forwards_tool_fields():
    schema = {"type": "object", "properties": {"q": {"type": "string"}}}
    tool = ToolSpy("Search", label=None, description="", parameters=schema)

    definition = to_tool_definitions([tool])[0]

    assert definition.name == "Search"
    assert definition.label == "Search"
    assert definition.description == ""
    assert definition.parameters is schema


@pytest.mark.asyncio
async def test_empty_tool_name_falls_back_to_tool():
    definition = to_tool_definitions([ToolSpy("", label=None)])[0]

    assert definition.name == "tool"
    assert definition.label == "tool"


@pytest.mark.asyncio
async def test_without_hooks_result_is_returned_unchanged():
    expected = json_result({"rows": [1, 2, 3]})
    tool = ToolSpy("query", result=expected)
    dispatcher = HookDispatcherFake(registered=False)

    defs = to_tool_definitions([tool], gateway=gateway_for(dispatcher))
    result = await defs[0].execute("call1", {"sql": "select 1"})

    assert result is expected
    assert dispatcher.calls == []
    assert tool.calls[0]["params"] == {"sql": "select 1"}


@pytest.mark.asyncio
async def test_absent_global_runner_executes_tool():
    tool = ToolSpy()

    defs = to_tool_definitions([tool])
    result = await defs[0].execute("call1", {"foo": "bar"})

    assert result.details == {"success": True}
    assert len(tool.calls) == 1


@pytest.mark.asyncio
async def test_translates_argument_order_for_underlying_tool():
    tool = ToolSpy()
    signal = asyncio.Event()
    updates = []

    defs = to_tool_definitions([tool])
    await defs[0].execute("call9", {"a": 1}, updates.append, object(), signal)

    call = tool.calls[0]
    assert call["tool_call_id"] == "call9"
    assert call["params"] == {"a": 1}
    assert call["signal"] is signal
    assert call["on_update"] == updates.append


class TestBeforeToolCallHook:
    @pytest.mark.asyncio
    async def test_blocks_tool_execution_when_hook_returns_block(self):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(
            BeforeToolCallResult(block=True, block_reason="Not allowed for this session")
        )

        defs = to_tool_definitions(
            [tool],
            ToolDefinitionContext(session_key="test:session"),
            gateway=gateway_for(dispatcher),
        )
        result = await defs[0].execute("call1", {"foo": "bar"})

        assert result.details == {
            "status": "blocked",
            "tool": "mytool",
            "error": "Not allowed for this session",
        }
        assert tool.calls == []
        assert dispatcher.calls == [
            {
                "tool_name": "mytool",
                "params": {"foo": "bar"},
                "agent_id": None,
                "session_key": "test:session",
                "ctx_tool_name": "mytool",
            }
        ]

    @pytest.mark.asyncio
    async def test_block_without_reason_uses_default_reason(self):
        dispatcher = HookDispatcherFake(BeforeToolCallResult(block=True))

        defs = to_tool_definitions([ToolSpy()], gateway=gateway_for(dispatcher))
        result = await defs[0].execute("call1", {})

        assert result.details["error"] == "Tool call blocked by plugin"

    @pytest.mark.asyncio
    async def test_block_reason_default_is_configurable(self):
        dispatcher = HookDispatcherFake(BeforeToolCallResult(block=True, block_reason=""))

        defs = to_tool_definitions(
            [ToolSpy()],
            gateway=gateway_for(dispatcher),
            default_block_reason="policy says no",
        )
        result = await defs[0].execute("call1", {})

        assert result.details["error"] == "policy says no"

    @pytest.mark.asyncio
    async def test_hook_sees_normalized_name_and_agent_context(self):
        dispatcher = HookDispatcherFake()

        defs = to_tool_definitions(
            [ToolSpy("Bash")],
            ToolDefinitionContext(session_key="s1", agent_id="main"),
            gateway=gateway_for(dispatcher),
        )
        await defs[0].execute("call1", {"command": "ls"})

        assert dispatcher.calls[0]["tool_name"] == "exec"
        assert dispatcher.calls[0]["ctx_tool_name"] == "exec"
        assert dispatcher.calls[0]["agent_id"] == "main"

    @pytest.mark.asyncio
    async def test_allows_execution_when_hook_does_not_block(self):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(None)

        defs = to_tool_definitions([tool], gateway=gateway_for(dispatcher))
        result = await defs[0].execute("call1", {"foo": "bar"})

        assert result.details == {"success": True}
        assert tool.calls[0]["params"] == {"foo": "bar"}

    @pytest.mark.asyncio
    async def test_replaces_params_when_hook_returns_new_params(self):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(BeforeToolCallResult(params={"foo": "modified"}))

        defs = to_tool_definitions([tool], gateway=gateway_for(dispatcher))
        await defs[0].execute("call1", {"foo": "original", "extra": 1})

        # Full substitution, not a merge
        assert tool.calls[0]["params"] == {"foo": "modified"}

    @pytest.mark.asyncio
    async def test_continues_execution_when_hook_throws(self, caplog):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(error=RuntimeError("Hook crashed"))

        defs = to_tool_definitions([tool], gateway=gateway_for(dispatcher))
        with caplog.at_level(logging.WARNING, logger="toolbridge"):
            result = await defs[0].execute("call1", {"foo": "bar"})

        assert result.details == {"success": True}
        assert tool.calls[0]["params"] == {"foo": "bar"}
        assert "before_tool_call hook failed: Hook crashed" in caplog.text

    @pytest.mark.asyncio
    async def test_continues_execution_when_has_hooks_throws(self):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(has_hooks_error=RuntimeError("registry gone"))

        defs = to_tool_definitions([tool], gateway=gateway_for(dispatcher))
        result = await defs[0].execute("call1", {"foo": "bar"})

        assert result.details == {"success": True}
        assert dispatcher.calls == []

    @pytest.mark.asyncio
    async def test_fail_closed_mode_blocks_when_hook_throws(self):
        tool = ToolSpy()
        dispatcher = HookDispatcherFake(error=RuntimeError("Hook crashed"))

        defs = to_tool_definitions(
            [tool],
            gateway=gateway_for(dispatcher),
            failure_mode=HookFailureMode.CLOSED,
        )
        result = await defs[0].execute("call1", {})

        assert result.details == {
            "status": "blocked",
            "tool": "mytool",
            "error": HOOK_FAILURE_REASON,
        }
        assert tool.calls == []

    @pytest.mark.asyncio
    async def test_uses_global_runner_installed_after_wrapping(self):
        tool = ToolSpy()
        defs = to_tool_definitions([tool])

        runner = HookRunner()
        runner.register(
            HookName.BEFORE_TOOL_CALL,
            lambda _event, _ctx: BeforeToolCallResult(block=True, block_reason="late"),
        )
        initialize_global_hook_runner(runner)

        result = await defs[0].execute("call1", {})

        assert result.details["status"] == "blocked"
        assert result.details["error"] == "late"
        assert tool.calls == []


class TestCancellation:
    @pytest.mark.asyncio
    async def test_reraises_when_signal_already_aborted(self):
        signal = asyncio.Event()
        signal.set()
        tool = ToolSpy(error=RuntimeError("interrupted"))

        defs = to_tool_definitions([tool])
        with pytest.raises(RuntimeError, match="interrupted"):
            await defs[0].execute("call1", {}, None, None, signal)

    @pytest.mark.asyncio
    async def test_reraises_abort_errors(self):
        tool = ToolSpy(error=AbortError("stopped"))

        defs = to_tool_definitions([tool])
        with pytest.raises(AbortError):
            await defs[0].execute("call1", {})

    @pytest.mark.asyncio
    async def test_reraises_foreign_errors_named_abort_error(self):
        tool = ToolSpy(error=CustomAbortError("stopped"))

        defs = to_tool_definitions([tool])
        with pytest.raises(CustomAbortError):
            await defs[0].execute("call1", {})

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self):
        tool = ToolSpy(error=asyncio.CancelledError())

        defs = to_tool_definitions([tool])
        with pytest.raises(asyncio.CancelledError):
            await defs[0].execute("call1", {})

    @pytest.mark.asyncio
    async def test_unset_signal_still_produces_error_envelope(self):
        tool = ToolSpy(error=RuntimeError("nope"))

        defs = to_tool_definitions([tool])
        result = await defs[0].execute("call1", {}, None, None, asyncio.Event())

        assert result.details["status"] == "error"


def test_describe_tool_execution_error_separates_message_and_stack():
    try:
        raise ValueError("broken")
    except ValueError as err:
        described = describe_tool_execution_error(err)

    assert described.message == "broken"
    assert described.stack is not None
    assert described.stack.startswith("Traceback")
    assert "ValueError: broken" in described.stack
