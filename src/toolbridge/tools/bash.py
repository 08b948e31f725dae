"""Execute shell commands tool."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from toolbridge.tools.base import AbortError, BaseTool, ToolError
from toolbridge.tools.common import text_result

if TYPE_CHECKING:
    from toolbridge.tools.base import ToolUpdateCallback


class BashParams(BaseModel):
    """Parameters for bash tool."""

    command: str = Field(description="The shell command to execute")
    cwd: str | None = Field(default=None, description="Working directory for the command")
    timeout: int = Field(default=120, description="Timeout in seconds (max 600)")


class BashTool(BaseTool[BashParams]):
    """Execute shell commands."""

    name = "bash"
    label = "Bash"
    description = (
        "Execute a shell command. "
        "Returns stdout and stderr. "
        "Use cwd to set working directory. "
        "Commands timeout after 120 seconds by default (max 600)."
    )
    parameters = BashParams

    async def run(
        self,
        params: BashParams,
        signal: asyncio.Event | None,
        on_update: ToolUpdateCallback | None,
    ) -> str:
        """Execute the bash command."""
        if signal is not None and signal.is_set():
            raise AbortError("Command aborted before start")

        timeout = min(max(params.timeout, 1), 600)

        cwd = Path(params.cwd).expanduser() if params.cwd else Path.cwd()
        if not cwd.exists():
            raise ToolError(f"Working directory not found: {cwd}")

        try:
            process = await asyncio.create_subprocess_shell(
                params.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as e:
            raise ToolError(f"Error executing command: {e}") from e

        if on_update is not None:
            on_update(text_result(f"Started: {params.command}", {"pid": process.pid}))

        stdout, stderr = await self._communicate(process, timeout, signal)

        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        result_parts = []

        if stdout_text:
            # Truncate very long output
            if len(stdout_text) > 30000:
                stdout_text = stdout_text[:30000] + "\n\n[Output truncated at 30000 chars]"
            result_parts.append(stdout_text)

        if stderr_text:
            if len(stderr_text) > 10000:
                stderr_text = stderr_text[:10000] + "\n\n[Stderr truncated at 10000 chars]"
            result_parts.append(f"[stderr]\n{stderr_text}")

        if process.returncode != 0:
            result_parts.append(f"\n[Exit code: {process.returncode}]")

        if not result_parts:
            return f"Command completed with exit code {process.returncode}"

        return "\n".join(result_parts)

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        timeout: int,
        signal: asyncio.Event | None,
    ) -> tuple[bytes, bytes]:
        """Wait for the process, killing it on timeout or cancellation."""
        communicate = asyncio.ensure_future(process.communicate())
        waiters: set[asyncio.Future] = {communicate}
        aborted: asyncio.Future | None = None
        if signal is not None:
            aborted = asyncio.ensure_future(signal.wait())
            waiters.add(aborted)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            await asyncio.shield(self._kill(process, communicate))
            raise
        finally:
            if aborted is not None and not aborted.done():
                aborted.cancel()

        if communicate in done:
            return communicate.result()

        await self._kill(process, communicate)
        if aborted is not None and aborted in done:
            raise AbortError("Command aborted")
        raise ToolError(f"Command timed out after {timeout} seconds")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process, communicate: asyncio.Future) -> None:
        """Kill the process and reap it along with its pending output reader."""
        if process.returncode is None:
            process.kill()
        communicate.cancel()
        await asyncio.gather(communicate, return_exceptions=True)
        await process.wait()
