"""
L4 Execution — Shell startup-file lines.

Builds the export/activation lines and appends them through the
filesystem adapter, which skips lines already present.
"""

from __future__ import annotations

from devsetup.adapters.registry import AdapterRegistry
from devsetup.core.models.action import Action, Receipt
from devsetup.core.models.environment import HostEnvironment


def path_export_line(directory: str) -> str:
    """POSIX line that prepends *directory* to PATH."""
    return f'export PATH="{directory}:$PATH"'


def ensure_line(
    registry: AdapterRegistry,
    env: HostEnvironment,
    line: str,
    *,
    action_id: str,
    step: str = "",
    backup: bool = False,
) -> Receipt:
    """Append *line* to the startup file unless it is already there.

    ``receipt.metadata["added"]`` tells the caller whether it wrote.
    """
    return registry.execute(Action(
        id=action_id,
        adapter="filesystem",
        label=f"append to {env.startup_file}: {line}",
        step=step,
        params={
            "operation": "append_line",
            "path": str(env.startup_file),
            "line": line,
            "backup": backup,
        },
    ))


def ensure_path_entry(
    registry: AdapterRegistry,
    env: HostEnvironment,
    directory: str,
    *,
    action_id: str,
    step: str = "",
    backup: bool = False,
) -> Receipt:
    return ensure_line(
        registry, env, path_export_line(directory),
        action_id=action_id, step=step, backup=backup,
    )
