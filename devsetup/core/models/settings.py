"""
SetupSettings — the typed view of ``devsetup.yml``.

Every field has a default so a missing config file is a valid,
fully-specified configuration.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

DEFAULT_PACKAGES = ["wget", "curl", "git", "node", "python@3.12"]


class RunMode(str, Enum):
    """What happens after a step fails."""

    BEST_EFFORT = "best-effort"     # count it, keep going
    FAIL_FAST = "fail-fast"         # stop the run


class HomebrewSettings(BaseModel):
    install_url: str = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


class EditorSettings(BaseModel):
    cask: str = "visual-studio-code"
    app_path: str = "/Applications/Visual Studio Code.app"
    command: str = "code"
    label: str = "VS Code"


class AssistantSettings(BaseModel):
    install_url: str = "https://claude.ai/install.sh"
    bin_dir: str = "~/.local/bin"
    executable: str = "claude"
    label: str = "Claude Code"


class GitSettings(BaseModel):
    # Email default when no account address can be detected.
    # Empty string means "keep asking until the operator types one".
    placeholder_email: str = "you@example.com"


class SetupSettings(BaseModel):
    """Root settings model."""

    mode: RunMode = RunMode.BEST_EFFORT
    packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    backup_startup_file: bool = True

    homebrew: HomebrewSettings = Field(default_factory=HomebrewSettings)
    editor: EditorSettings = Field(default_factory=EditorSettings)
    assistant: AssistantSettings = Field(default_factory=AssistantSettings)
    git: GitSettings = Field(default_factory=GitSettings)

    @field_validator("packages")
    @classmethod
    def _packages_not_blank(cls, v: list[str]) -> list[str]:
        cleaned = [p.strip() for p in v]
        if any(not p for p in cleaned):
            raise ValueError("package names must be non-empty")
        # keep order, drop duplicates
        return list(dict.fromkeys(cleaned))
