"""Plugin-triggered agent runs.

Lets plugins (typically from an agent_end hook) start a new, isolated agent
turn. Passing the parent conversation as ``initial_messages`` forks its
context: the same message prefix reaches the model API, so the prompt cache
is reused instead of reloading the session transcript.
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from toolbridge.config import DEFAULT_PLUGIN_LANE

logger = logging.getLogger(__name__)

# Plugin runs are queued on their own lane so they are rate-limited apart
# from user-initiated runs.
PLUGIN_LANE = DEFAULT_PLUGIN_LANE


class _CamelModel(BaseModel):
    """Accepts snake_case or camelCase keys; dumps camelCase with by_alias."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Plugin-facing request/result ---


class PluginAgentRunParams(_CamelModel):
    """Request for a plugin-triggered agent run."""

    prompt: str = Field(min_length=1)
    # Prior turn messages, forwarded as-is; replaces loading the session
    # transcript for this run only
    initial_messages: list[Any] | None = None
    session_key: str | None = None
    model: str | None = None
    thinking: str | None = None  # e.g. "low", "high"; not checked here
    deliver: bool | None = None
    lane: str | None = None
    timeout_ms: float | None = Field(default=None, ge=0)
    agent_id: str | None = None


class PluginAgentRunUsage(_CamelModel):
    """Token usage for a run, as reported by the engine."""

    input: int | None = None
    output: int | None = None
    cache_read: int | None = None
    cache_write: int | None = None
    total_tokens: int | None = None


class PluginAgentRunResult(_CamelModel):
    ok: bool
    run_id: str
    error: str | None = None
    response_texts: list[str] | None = None
    usage: PluginAgentRunUsage | None = None


# --- Engine invocation shapes ---


class AgentCommandOpts(_CamelModel):
    """Arguments for one turn of the agent command engine."""

    message: str
    session_key: str | None = None
    model: str | None = None
    thinking: str | None = None
    deliver: bool | None = None
    lane: str
    timeout: str | None = None  # whole seconds
    agent_id: str | None = None
    initial_messages: list[Any] | None = None
    run_id: str


class ReplyPayload(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    text: Any = None


class AgentUsage(_CamelModel):
    input: int | None = None
    output: int | None = None
    cache_read: int | None = None
    cache_write: int | None = None
    total: int | None = None


class AgentMeta(_CamelModel):
    usage: AgentUsage | None = None


class AgentRunMeta(_CamelModel):
    agent_meta: AgentMeta | None = None


class AgentCommandResult(_CamelModel):
    payloads: list[ReplyPayload] | None = None
    meta: AgentRunMeta | None = None


AgentCommand = Callable[
    [AgentCommandOpts], Awaitable[AgentCommandResult | Mapping[str, Any] | None]
]


def timeout_seconds(timeout_ms: float | None) -> str | None:
    """Convert a millisecond timeout to whole seconds, rounding up."""
    if not timeout_ms:
        return None
    return str(math.ceil(timeout_ms / 1000))


def build_agent_command_opts(
    params: PluginAgentRunParams,
    run_id: str,
    *,
    default_lane: str = PLUGIN_LANE,
) -> AgentCommandOpts:
    return AgentCommandOpts(
        message=params.prompt,
        session_key=params.session_key,
        model=params.model,
        thinking=params.thinking,
        deliver=params.deliver,
        lane=params.lane or default_lane,
        timeout=timeout_seconds(params.timeout_ms),
        agent_id=params.agent_id,
        initial_messages=params.initial_messages,
        run_id=run_id,
    )


def extract_response_texts(result: AgentCommandResult) -> list[str] | None:
    """Non-empty string texts from the engine payloads, in order."""
    if result.payloads is None:
        return None
    return [p.text for p in result.payloads if isinstance(p.text, str) and p.text]


def extract_usage(result: AgentCommandResult) -> PluginAgentRunUsage | None:
    usage = result.meta.agent_meta.usage if result.meta and result.meta.agent_meta else None
    if usage is None:
        return None
    return PluginAgentRunUsage(
        input=usage.input,
        output=usage.output,
        cache_read=usage.cache_read,
        cache_write=usage.cache_write,
        total_tokens=usage.total,
    )


def _format_error(err: BaseException) -> str:
    message = str(err)
    return f"{type(err).__name__}: {message}" if message else type(err).__name__


async def run_plugin_agent_turn(
    params: PluginAgentRunParams | Mapping[str, Any],
    agent_command: AgentCommand,
    *,
    default_lane: str = PLUGIN_LANE,
) -> PluginAgentRunResult:
    """Trigger an agent run from within a plugin.

    Never raises for run failures: they come back as ``ok=False`` with the
    error text. Task cancellation still propagates.

    Args:
        params: Run request (model or mapping with snake_case/camelCase keys)
        agent_command: Turn-execution engine entry point
        default_lane: Lane used when the request does not name one

    Returns:
        Result with the run id, response texts and token usage
    """
    run_id = str(uuid.uuid4())

    try:
        if not isinstance(params, PluginAgentRunParams):
            params = PluginAgentRunParams.model_validate(params)

        opts = build_agent_command_opts(params, run_id, default_lane=default_lane)
        logger.debug(
            "plugin agent run %s starting (lane=%s, forked=%s)",
            run_id,
            opts.lane,
            opts.initial_messages is not None,
        )

        raw = await agent_command(opts)

        if raw is None:
            result = AgentCommandResult()
        elif isinstance(raw, AgentCommandResult):
            result = raw
        else:
            result = AgentCommandResult.model_validate(raw)
    except Exception as err:
        logger.warning("plugin agent run %s failed: %s", run_id, err)
        return PluginAgentRunResult(ok=False, run_id=run_id, error=_format_error(err))

    return PluginAgentRunResult(
        ok=True,
        run_id=run_id,
        response_texts=extract_response_texts(result),
        usage=extract_usage(result),
    )


@dataclass(slots=True)
class PluginAgentRuntime:
    """Agent namespace handed to plugins: binds the engine and default lane."""

    agent_command: AgentCommand
    default_lane: str = PLUGIN_LANE

    async def run(self, params: PluginAgentRunParams | Mapping[str, Any]) -> PluginAgentRunResult:
        return await run_plugin_agent_turn(
            params, self.agent_command, default_lane=self.default_lane
        )
