"""
Verify use case — the verification pass on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from devsetup.core.config.loader import ConfigError, load_settings
from devsetup.core.models.environment import HostEnvironment
from devsetup.core.models.outcome import ToolCheck
from devsetup.core.services.provision.detection.environment import detect_environment
from devsetup.core.services.provision.detection.presence import PresenceChecker
from devsetup.core.services.provision.detection.tool_version import verify_installations


@dataclass
class VerifyResult:
    checks: list[ToolCheck] = field(default_factory=list)
    error: str | None = None

    @property
    def missing(self) -> list[ToolCheck]:
        return [c for c in self.checks if not c.present and not c.warn_only]

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "checks": [c.model_dump(mode="json") for c in self.checks],
            "missing": len(self.missing),
        }


def run_verify(
    config_path: Path | None = None,
    env: HostEnvironment | None = None,
) -> VerifyResult:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        return VerifyResult(error=str(e))

    if env is None:
        env = detect_environment(create_startup_file=False)
    # brew may be installed but not yet activated in this shell
    env = env.with_path(f"{env.brew_prefix}/bin")
    checks = verify_installations(PresenceChecker(env), settings.assistant)
    return VerifyResult(checks=checks)
