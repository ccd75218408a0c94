"""
L3 Detection — Tool versions and the verification pass.

Read-only probes: resolve each catalog executable, run ``--version``
and keep the first line.  The assistant CLI is checked by file path
because the running process may not see its PATH entry yet.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional

from devsetup.core.models.outcome import ToolCheck
from devsetup.core.models.settings import AssistantSettings
from devsetup.core.services.provision.data.catalog import VERIFY_CATALOG, ToolSpec
from devsetup.core.services.provision.detection.presence import PresenceChecker

logger = logging.getLogger(__name__)

VersionReader = Callable[[str, tuple[str, ...]], Optional[str]]


def get_version_line(
    executable: str,
    args: tuple[str, ...] = ("--version",),
    env: dict[str, str] | None = None,
) -> str | None:
    """First non-empty line of ``<executable> --version``.

    Some tools print their version on stderr, so stdout is read first
    and stderr second.
    """
    try:
        result = subprocess.run(
            [executable, *args],
            capture_output=True, text=True, timeout=15, env=env,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as exc:
        logger.debug("Version probe failed for %s: %s", executable, exc)
        return None

    for stream in (result.stdout, result.stderr):
        for line in (stream or "").splitlines():
            if line.strip():
                return line.strip()
    return None


def assistant_binary(home: Path, assistant: AssistantSettings) -> Path:
    """Absolute path where the assistant installer drops its binary."""
    return resolve_bin_dir(home, assistant.bin_dir) / assistant.executable


def resolve_bin_dir(home: Path, bin_dir: str) -> Path:
    """Expand a leading ``~`` against *home* rather than the process HOME."""
    if bin_dir == "~":
        return home
    if bin_dir.startswith("~/"):
        return home / bin_dir[2:]
    return Path(bin_dir)


def verify_installations(
    presence: PresenceChecker,
    assistant: AssistantSettings,
    *,
    catalog: list[ToolSpec] | None = None,
    version_reader: VersionReader | None = None,
) -> list[ToolCheck]:
    """Check every catalog tool plus the assistant CLI.

    Returns:
        One ToolCheck per entry, in catalog order, assistant last.
    """
    env = presence.env
    if version_reader is None:
        child_env = env.child_env()

        def version_reader(exe: str, args: tuple[str, ...]) -> str | None:
            return get_version_line(exe, args, env=child_env)

    checks: list[ToolCheck] = []
    for spec in catalog if catalog is not None else VERIFY_CATALOG:
        location = presence.which(spec.executable)
        if location is None:
            checks.append(ToolCheck(label=spec.label, executable=spec.executable))
            continue
        checks.append(ToolCheck(
            label=spec.label,
            executable=spec.executable,
            present=True,
            version=version_reader(location, spec.version_args),
            location=location,
        ))

    binary = assistant_binary(env.home, assistant)
    checks.append(ToolCheck(
        label=assistant.label,
        executable=assistant.executable,
        present=presence.path_exists(binary),
        location=str(binary),
        warn_only=True,
    ))
    return checks
