"""
L0 Data — Tool catalog and step table.

``VERIFY_CATALOG`` drives the verification pass; ``STEP_TITLES`` fixes
the order and display names of the installer steps.
"""

from __future__ import annotations

from pydantic import BaseModel


class ToolSpec(BaseModel):
    """An executable to verify and its display label."""

    executable: str
    label: str
    version_args: tuple[str, ...] = ("--version",)


VERIFY_CATALOG: list[ToolSpec] = [
    ToolSpec(executable="brew", label="Homebrew"),
    ToolSpec(executable="wget", label="wget"),
    ToolSpec(executable="curl", label="curl"),
    ToolSpec(executable="git", label="Git"),
    ToolSpec(executable="node", label="Node.js"),
    ToolSpec(executable="npm", label="npm"),
    ToolSpec(executable="python3", label="Python"),
    ToolSpec(executable="code", label="VS Code"),
]

# Ordered: the orchestrator runs steps in exactly this sequence.
STEP_TITLES: dict[str, str] = {
    "developer_tools": "Xcode Command Line Tools",
    "homebrew": "Homebrew",
    "packages": "Development tools (git, node, python, etc.)",
    "editor": "Visual Studio Code",
    "assistant": "Claude Code",
    "git_identity": "Git configuration",
    "path_fixup": "Claude Code PATH",
}

STEP_NAMES: list[str] = list(STEP_TITLES)
