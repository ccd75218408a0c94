"""
L3 Detection — Host environment.

Produces the architecture class and shell kind once per run.  These
probes never raise; unknown values fall back to the macOS defaults
(Intel prefix for unknown CPUs, zsh for unknown shells).  The only side
effect is creating the shell startup file when it is missing.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path

from devsetup.core.models.environment import (
    ArchitectureClass,
    HostEnvironment,
    ShellKind,
)
from devsetup.core.services.provision.data.profile_maps import (
    DEFAULT_SHELL,
    STARTUP_FILES,
)

logger = logging.getLogger(__name__)

_APPLE_SILICON_MACHINES = ("arm64", "aarch64")


def detect_architecture(machine: str | None = None) -> ArchitectureClass:
    """Classify the CPU from ``uname -m`` (``platform.machine()``)."""
    if machine is None:
        machine = platform.machine()
    if machine.strip().lower() in _APPLE_SILICON_MACHINES:
        return ArchitectureClass.APPLE_SILICON
    return ArchitectureClass.INTEL


def detect_shell(shell_env: str | None = None) -> ShellKind:
    """Classify the login shell from ``$SHELL`` by substring."""
    if shell_env is None:
        shell_env = os.environ.get("SHELL", "")
    if "zsh" in shell_env:
        return ShellKind.ZSH
    if "bash" in shell_env:
        return ShellKind.BASH
    logger.debug("Unrecognised shell %r, defaulting to %s", shell_env, DEFAULT_SHELL.value)
    return DEFAULT_SHELL


def startup_file_for(shell: ShellKind, home: Path) -> Path:
    return home / STARTUP_FILES[shell]


def ensure_startup_file(path: Path) -> bool:
    """Create *path* (empty) if missing.  Returns True when created."""
    if path.exists():
        return False
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
    except OSError as exc:
        # Later appends report the failure through their receipts.
        logger.warning("Cannot create %s: %s", path, exc)
        return False
    logger.info("Created startup file %s", path)
    return True


def detect_environment(
    *,
    home: Path | None = None,
    shell_env: str | None = None,
    machine: str | None = None,
    path_env: str | None = None,
    create_startup_file: bool = True,
) -> HostEnvironment:
    """Run every environment probe and return the typed result.

    All arguments default to the live process state; tests pass
    explicit values.
    """
    if home is None:
        home = Path(os.environ.get("HOME") or Path.home())
    if path_env is None:
        path_env = os.environ.get("PATH", "")

    arch = detect_architecture(machine)
    shell = detect_shell(shell_env)
    startup_file = startup_file_for(shell, home)

    if create_startup_file:
        ensure_startup_file(startup_file)

    env = HostEnvironment(
        arch=arch,
        shell=shell,
        home=home,
        startup_file=startup_file,
        base_path=path_env,
    )
    logger.info(
        "Detected arch=%s shell=%s startup_file=%s",
        arch.value, shell.value, startup_file,
    )
    return env
