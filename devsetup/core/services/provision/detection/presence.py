"""
L3 Detection — Presence checks.

Read-only boolean probes used by every installer step before it acts:
is an executable on the search path, is a package registered with
Homebrew, does a path exist.  No retries, no side effects.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from devsetup.core.models.environment import HostEnvironment

logger = logging.getLogger(__name__)


class PresenceChecker:
    """Presence predicates bound to one HostEnvironment.

    Lookups use the environment's search path, so a checker built from
    ``env.with_path(...)`` sees binaries installed earlier in the run.
    """

    def __init__(self, env: HostEnvironment):
        self.env = env

    def rebind(self, env: HostEnvironment) -> PresenceChecker:
        """Return a checker for an updated environment."""
        return type(self)(env)

    # ── Executables ─────────────────────────────────────────────

    def which(self, name: str) -> str | None:
        """Resolve *name* like ``command -v`` against the search path."""
        return shutil.which(name, path=self.env.search_path or None)

    def command_exists(self, name: str) -> bool:
        return self.which(name) is not None

    def brew_executable(self) -> str | None:
        """brew on the search path, else at the architecture's prefix."""
        found = self.which("brew")
        if found:
            return found
        if Path(self.env.brew_bin).is_file():
            return self.env.brew_bin
        return None

    def brew_available(self) -> bool:
        return self.brew_executable() is not None

    # ── Filesystem ──────────────────────────────────────────────

    def path_exists(self, path: str | Path) -> bool:
        return Path(path).expanduser().exists()

    # ── Package registry ────────────────────────────────────────

    def package_installed(self, name: str, cask: bool = False) -> bool:
        """Whether Homebrew's local database lists *name*.

        Runs ``brew list [--cask] --versions NAME``.  A missing brew,
        a timeout, or a non-zero exit all mean "not installed".
        """
        brew = self.brew_executable()
        if brew is None:
            return False

        cmd = [brew, "list"]
        if cask:
            cmd.append("--cask")
        cmd += ["--versions", name]

        try:
            r = subprocess.run(
                cmd,
                capture_output=True, text=True, timeout=30,  # brew is slow
                env=self.env.child_env(),
            )
        except subprocess.TimeoutExpired:
            logger.warning("Timeout checking brew package %s", name)
            return False
        except OSError as exc:
            logger.warning("OS error checking brew package %s: %s", name, exc)
            return False
        return r.returncode == 0 and bool(r.stdout.strip())

    # ── Developer tools ─────────────────────────────────────────

    def developer_tools_installed(self) -> bool:
        """``xcode-select -p`` exits 0 once the CLT are installed."""
        try:
            r = subprocess.run(
                ["xcode-select", "-p"],
                capture_output=True, text=True, timeout=10,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError):
            return False
        return r.returncode == 0
