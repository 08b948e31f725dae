"""Process-wide hook runner slot.

The host initializes it once at startup; everything else only reads it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from toolbridge.hooks.runner import HookRunner

_global_runner: HookRunner | None = None


def initialize_global_hook_runner(runner: HookRunner) -> None:
    global _global_runner
    _global_runner = runner


def get_global_hook_runner() -> HookRunner | None:
    """Return the process-wide runner, or None if the host never set one."""
    return _global_runner


def reset_global_hook_runner() -> None:
    global _global_runner
    _global_runner = None

