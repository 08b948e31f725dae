"""CLI entry point using Typer."""

import asyncio
import json
import uuid
from typing import Annotated, Any

import typer

from toolbridge.adapter import ToolDefinitionContext
from toolbridge.config import Config, ConfigError
from toolbridge.hooks import BeforeToolCallResult, HookGateway, HookName, HookRunner
from toolbridge.log import configure_logging
from toolbridge.tools import AgentTool, BashTool, normalize_tool_name
from toolbridge.tools.common import ToolResult, result_status

app = typer.Typer(
    name="toolbridge",
    help="Run tools through hook interception and inspect tool name policy",
    no_args_is_help=True,
)

BUILTIN_TOOLS: dict[str, type[AgentTool]] = {
    "bash": BashTool,
}


def main() -> None:
    """Entry point for the CLI."""
    app()


def _load_config() -> Config:
    try:
        return Config.load()
    except ConfigError as err:
        typer.echo(f"Config error: {err}", err=True)
        raise typer.Exit(1) from err


def _parse_json_object(value: str, option: str) -> dict[str, Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as err:
        typer.echo(f"Invalid JSON for {option}: {err}", err=True)
        raise typer.Exit(1) from err
    if not isinstance(parsed, dict):
        typer.echo(f"{option} must be a JSON object", err=True)
        raise typer.Exit(1)
    return parsed


@app.command()
def normalize(
    name: Annotated[str, typer.Argument(help="Raw tool name")],
) -> None:
    """Print the canonical name hooks and results use for a tool."""
    config = _load_config()
    typer.echo(normalize_tool_name(name, config.alias_table()))


@app.command()
def tools() -> None:
    """List built-in tools with their canonical names."""
    config = _load_config()
    aliases = config.alias_table()
    for name, tool_cls in BUILTIN_TOOLS.items():
        tool = tool_cls()
        typer.echo(f"{name}\t{normalize_tool_name(name, aliases)}\t{tool.display_label}")


@app.command()
def call(
    tool: Annotated[str, typer.Argument(help="Built-in tool name")],
    params: Annotated[str, typer.Option("-p", "--params", help="Tool params as JSON")] = "{}",
    deny: Annotated[
        list[str] | None,
        typer.Option("--deny", help="Block calls to this tool (any alias)"),
    ] = None,
    reason: Annotated[
        str | None, typer.Option("--reason", help="Reason reported for --deny")
    ] = None,
    rewrite: Annotated[
        str | None,
        typer.Option("--rewrite", help="Replace the call params with this JSON"),
    ] = None,
    session_key: Annotated[str | None, typer.Option("--session-key")] = None,
    agent_id: Annotated[str | None, typer.Option("--agent-id")] = None,
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Debug logging")] = False,
) -> None:
    """Run a built-in tool through the hooked adapter and print its result."""
    config = _load_config()
    configure_logging("DEBUG" if verbose else config.log_level)

    tool_cls = BUILTIN_TOOLS.get(tool)
    if tool_cls is None:
        typer.echo(f"Unknown tool: {tool}", err=True)
        typer.echo(f"Available: {', '.join(BUILTIN_TOOLS)}", err=True)
        raise typer.Exit(1)

    call_params = _parse_json_object(params, "--params")
    rewrite_params = _parse_json_object(rewrite, "--rewrite") if rewrite else None

    aliases = config.alias_table()
    runner = HookRunner()
    denied = {normalize_tool_name(name, aliases) for name in deny or []}
    if denied:

        def deny_handler(event, _ctx):
            if event.tool_name in denied:
                return BeforeToolCallResult(block=True, block_reason=reason)
            return None

        runner.register(HookName.BEFORE_TOOL_CALL, deny_handler, plugin_id="cli-deny")

    if rewrite_params is not None:
        runner.register(
            HookName.BEFORE_TOOL_CALL,
            lambda _event, _ctx: BeforeToolCallResult(params=rewrite_params),
            plugin_id="cli-rewrite",
        )

    definitions = config.build_tool_definitions(
        [tool_cls()],
        ToolDefinitionContext(session_key=session_key, agent_id=agent_id),
        gateway=HookGateway(lambda: runner),
    )
    result = asyncio.run(definitions[0].execute(f"cli-{uuid.uuid4().hex[:12]}", call_params))
    _print_result(result)

    if result_status(result) is not None:
        raise typer.Exit(1)


def _print_result(result: ToolResult) -> None:
    if result.details is not None and result_status(result) is not None:
        typer.echo(json.dumps(result.details, indent=2))
    else:
        typer.echo(result.text)
