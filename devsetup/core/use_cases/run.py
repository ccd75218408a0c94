"""
Run use case — the full setup flow from CLI intent to report.

Loads settings, detects the host, wires the adapters, the operator and
the identity hints, then hands everything to the orchestrator.
"""

from __future__ import annotations

import logging
import platform
from dataclasses import dataclass
from pathlib import Path

from devsetup.adapters.registry import AdapterRegistry
from devsetup.core.config.loader import ConfigError, load_settings
from devsetup.core.models.environment import HostEnvironment
from devsetup.core.models.outcome import RunReport
from devsetup.core.models.settings import RunMode, SetupSettings
from devsetup.core.services.provision.detection.environment import detect_environment
from devsetup.core.services.provision.detection.identity import (
    IdentityHints,
    MacIdentityHints,
    NullIdentityHints,
)
from devsetup.core.services.provision.execution.operator import Operator
from devsetup.core.services.provision.execution.step_executors import Notifier
from devsetup.core.services.provision.orchestration.orchestrator import run_setup

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of a setup run."""

    report: RunReport | None = None
    env: HostEnvironment | None = None
    settings: SetupSettings | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result: dict = {}
        if self.env:
            result["environment"] = self.env.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def default_registry(dry_run: bool = False) -> AdapterRegistry:
    """Registry with the real shell, git and filesystem adapters."""
    from devsetup.adapters.shell.command import ShellCommandAdapter
    from devsetup.adapters.shell.filesystem import FilesystemAdapter
    from devsetup.adapters.vcs.git import GitAdapter

    registry = AdapterRegistry(dry_run=dry_run)
    registry.register(ShellCommandAdapter())
    registry.register(FilesystemAdapter())
    registry.register(GitAdapter())
    return registry


def default_hints() -> IdentityHints:
    """macOS lookups on a Mac, nothing elsewhere."""
    if platform.system() == "Darwin":
        return MacIdentityHints()
    return NullIdentityHints()


def run_provisioning(
    operator: Operator,
    *,
    config_path: Path | None = None,
    mode: RunMode | None = None,
    only: list[str] | None = None,
    dry_run: bool = False,
    notify: Notifier | None = None,
    registry: AdapterRegistry | None = None,
    hints: IdentityHints | None = None,
    env: HostEnvironment | None = None,
    unattended: bool = False,
    reserve_stdout: bool = False,
) -> RunResult:
    """Detect, install, verify.

    Args:
        operator: Answers prompts (console or scripted).
        config_path: Explicit devsetup.yml.
        mode: Overrides the configured run mode.
        only: Restrict to these steps.
        dry_run: Validate and report without changing anything.
        notify: Progress sink.
        registry: Pre-configured registry (tests).
        hints: Identity hint provider (tests).
        env: Pre-detected environment (tests).
        unattended: Answers are scripted; installers must not prompt.
        reserve_stdout: stdout carries a report; installer output goes to stderr.
    """
    result = RunResult()

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result
    result.settings = settings

    if env is None:
        # Under dry-run nothing may be written, the startup file included.
        env = detect_environment(create_startup_file=not dry_run)
    result.env = env

    if registry is None:
        registry = default_registry(dry_run=dry_run)

    try:
        result.report = run_setup(
            env,
            settings,
            registry,
            operator,
            hints=hints or default_hints(),
            mode=mode,
            only=only,
            notify=notify,
            unattended=unattended,
            reserve_stdout=reserve_stdout,
        )
    except ValueError as e:
        result.error = str(e)
    return result
