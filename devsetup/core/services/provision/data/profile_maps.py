"""
L0 Data — Shell startup-file mappings.

Maps each supported shell to the file its interactive sessions source.
bash uses the login profile because Terminal.app opens login shells.
"""

from __future__ import annotations

from devsetup.core.models.environment import ShellKind

STARTUP_FILES: dict[ShellKind, str] = {
    ShellKind.ZSH: ".zshrc",
    ShellKind.BASH: ".bash_profile",
}

# Used when $SHELL is unset or names neither zsh nor bash.
DEFAULT_SHELL = ShellKind.ZSH
