"""
Host environment — the facts the Detector produces once per run.

The environment is immutable.  A step that makes new binaries reachable
(Homebrew, the assistant CLI) reports ``path_additions`` and the
orchestrator derives a new environment with ``with_path()``.  Nothing
evaluates shell snippets into the running process.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ArchitectureClass(str, Enum):
    """CPU family of the host."""

    APPLE_SILICON = "apple_silicon"
    INTEL = "intel"


class ShellKind(str, Enum):
    """Interactive shell whose startup file receives PATH lines."""

    ZSH = "zsh"
    BASH = "bash"


# Homebrew install prefix per architecture.
BREW_PREFIXES: dict[ArchitectureClass, str] = {
    ArchitectureClass.APPLE_SILICON: "/opt/homebrew",
    ArchitectureClass.INTEL: "/usr/local",
}


class HostEnvironment(BaseModel):
    """Architecture, shell and search-path facts for one run."""

    model_config = ConfigDict(frozen=True)

    arch: ArchitectureClass
    shell: ShellKind
    home: Path
    startup_file: Path
    base_path: str = ""
    extra_path: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def brew_prefix(self) -> str:
        return BREW_PREFIXES[self.arch]

    @property
    def brew_bin(self) -> str:
        """Absolute path of the brew executable for this architecture."""
        return f"{self.brew_prefix}/bin/brew"

    @property
    def brew_activation_line(self) -> str:
        """Startup-file line that puts Homebrew on PATH."""
        return f'eval "$({self.brew_bin} shellenv)"'

    @property
    def search_path(self) -> str:
        """PATH value for child processes and executable lookups.

        Directories added during the run come first, mirroring
        ``export PATH="<dir>:$PATH"``.
        """
        parts = [p for p in self.extra_path if p]
        if self.base_path:
            parts.append(self.base_path)
        return os.pathsep.join(parts)

    def with_path(self, *dirs: str) -> HostEnvironment:
        """Return a copy with *dirs* prepended to the search path."""
        added: list[str] = []
        for d in dirs:
            if d and d not in self.extra_path and d not in added:
                added.append(d)
        return self.model_copy(update={"extra_path": tuple(added) + self.extra_path})

    def child_env(self) -> dict[str, str]:
        """Process environment for commands launched during the run."""
        env = os.environ.copy()
        env["HOME"] = str(self.home)
        env["PATH"] = self.search_path
        return env

    def to_dict(self) -> dict:
        return {
            "arch": self.arch.value,
            "shell": self.shell.value,
            "home": str(self.home),
            "startup_file": str(self.startup_file),
            "brew_prefix": self.brew_prefix,
            "brew_activation_line": self.brew_activation_line,
            "extra_path": list(self.extra_path),
        }
