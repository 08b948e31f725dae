"""Tool name normalization used for hook targeting and result envelopes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from toolbridge.config.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Several names refer to the same capability; hooks and logs see one name.
TOOL_NAME_ALIASES: dict[str, str] = {
    "bash": "exec",
    "apply-patch": "apply_patch",
}


def build_alias_table(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge extra aliases over the defaults.

    Raises:
        ConfigError: If an alias points at another alias. Chains would make
            normalization non-idempotent.
    """
    table = dict(TOOL_NAME_ALIASES)
    for alias, target in (extra or {}).items():
        table[alias.strip().lower()] = target.strip().lower()

    for alias, target in table.items():
        if target in table and table[target] != target:
            raise ConfigError(f"Tool alias '{alias}' points at another alias '{target}'")
    return table


def normalize_tool_name(name: str, aliases: Mapping[str, str] | None = None) -> str:
    """Map a raw tool name to its canonical identifier.

    Names without an alias come back trimmed and lowercased.
    """
    normalized = name.strip().lower()
    table = TOOL_NAME_ALIASES if aliases is None else aliases
    return table.get(normalized, normalized)
