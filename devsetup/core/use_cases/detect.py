"""
Detect use case — report environment facts without installing anything.
"""

from __future__ import annotations

from dataclasses import dataclass

from devsetup.core.models.environment import HostEnvironment
from devsetup.core.services.provision.detection.environment import detect_environment
from devsetup.core.services.provision.detection.presence import PresenceChecker


@dataclass
class DetectResult:
    env: HostEnvironment
    brew_on_path: bool = False
    brew_at_prefix: bool = False
    developer_tools: bool = False
    startup_file_exists: bool = False

    def to_dict(self) -> dict:
        data = self.env.to_dict()
        data.update({
            "brew_on_path": self.brew_on_path,
            "brew_at_prefix": self.brew_at_prefix,
            "developer_tools": self.developer_tools,
            "startup_file_exists": self.startup_file_exists,
        })
        return data


def run_detect(env: HostEnvironment | None = None) -> DetectResult:
    """Probe the host.  Read-only: the startup file is not created."""
    if env is None:
        env = detect_environment(create_startup_file=False)
    presence = PresenceChecker(env)
    return DetectResult(
        env=env,
        brew_on_path=presence.command_exists("brew"),
        brew_at_prefix=presence.path_exists(env.brew_bin),
        developer_tools=presence.developer_tools_installed(),
        startup_file_exists=env.startup_file.exists(),
    )
