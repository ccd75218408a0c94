"""
L5 Orchestration — The setup run.

Runs the installer steps strictly in order, folds each step's PATH
additions into a new environment, applies the run mode, then runs the
verification pass.  The returned RunReport is everything the Reporter
needs; nothing is printed here.
"""

from __future__ import annotations

import logging
from typing import Callable

from devsetup.adapters.registry import AdapterRegistry
from devsetup.core.models.environment import HostEnvironment
from devsetup.core.models.outcome import RunReport, StepOutcome
from devsetup.core.models.settings import RunMode, SetupSettings
from devsetup.core.services.provision.data.catalog import STEP_NAMES, STEP_TITLES
from devsetup.core.services.provision.detection.identity import (
    IdentityHints,
    NullIdentityHints,
)
from devsetup.core.services.provision.detection.presence import PresenceChecker
from devsetup.core.services.provision.detection.tool_version import (
    VersionReader,
    verify_installations,
)
from devsetup.core.services.provision.execution.operator import Operator
from devsetup.core.services.provision.execution.step_executors import (
    STEP_EXECUTORS,
    Notifier,
    StepContext,
    log_notifier,
)

logger = logging.getLogger(__name__)


def select_steps(only: list[str] | tuple[str, ...] | None) -> list[str]:
    """Validate ``--only`` names and return them in run order.

    Raises:
        ValueError: On an unknown step name.
    """
    if not only:
        return list(STEP_NAMES)
    unknown = [name for name in only if name not in STEP_EXECUTORS]
    if unknown:
        raise ValueError(
            f"Unknown step(s): {', '.join(unknown)}. Valid: {', '.join(STEP_NAMES)}"
        )
    return [name for name in STEP_NAMES if name in only]


def run_setup(
    env: HostEnvironment,
    settings: SetupSettings,
    registry: AdapterRegistry,
    operator: Operator,
    *,
    hints: IdentityHints | None = None,
    mode: RunMode | None = None,
    only: list[str] | tuple[str, ...] | None = None,
    notify: Notifier | None = None,
    presence_factory: Callable[[HostEnvironment], PresenceChecker] = PresenceChecker,
    verify: bool = True,
    version_reader: VersionReader | None = None,
    unattended: bool = False,
    reserve_stdout: bool = False,
) -> RunReport:
    """Execute the full setup flow.

    Args:
        env: Detector output; replaced by value as steps add PATH entries.
        settings: Loaded configuration.
        registry: Adapter registry (real, dry-run, or mocked).
        operator: Source of answers for blocking prompts.
        hints: Identity hint provider for the git step.
        mode: Overrides ``settings.mode``.
        only: Restrict the run to these step names.
        notify: Progress sink ``(level, message)``.
        presence_factory: Builds the presence checker for an environment.
        verify: Run the verification pass after the steps.
        version_reader: Override for version probing (tests).
        unattended: No one is at the terminal; installers run non-interactive.
        reserve_stdout: Keep child installer output off stdout.

    Returns:
        RunReport with one outcome per selected step.
    """
    mode = mode or settings.mode
    notify = notify or log_notifier
    hints = hints or NullIdentityHints()
    selected = select_steps(only)

    report = RunReport(
        mode=mode,
        startup_file=str(env.startup_file),
        dry_run=registry.dry_run,
    )
    presence = presence_factory(env)
    total = len(selected)

    for index, name in enumerate(selected, start=1):
        title = STEP_TITLES[name]

        if report.aborted:
            report.outcomes.append(StepOutcome(
                step=name, title=title, status="not_run",
                message=f"not run: aborted at {report.aborted_at}",
            ))
            continue

        notify("info", f"[{index}/{total}] {title}")
        ctx = StepContext(
            env=env,
            settings=settings,
            registry=registry,
            presence=presence,
            operator=operator,
            hints=hints,
            mode=mode,
            notify=notify,
            unattended=unattended,
            reserve_stdout=reserve_stdout,
        )

        try:
            outcome = STEP_EXECUTORS[name](ctx)
        except Exception as exc:
            # Steps handle expected failures; this is the last line for bugs.
            logger.exception("Step %s raised", name)
            notify("error", f"{title} failed unexpectedly: {exc}")
            outcome = StepOutcome.failure(name, f"unexpected error: {exc}")

        outcome.title = title
        report.outcomes.append(outcome)
        logger.info("step %s → %s %s", name, outcome.status, outcome.message)

        if outcome.path_additions:
            env = env.with_path(*outcome.path_additions)
            presence = presence.rebind(env)

        if outcome.failed and mode == RunMode.FAIL_FAST:
            report.aborted_at = name
            notify("error", f"Stopping: {title} failed (fail-fast mode)")

    if verify and not report.aborted:
        notify("info", "Verifying installations...")
        report.checks = verify_installations(
            presence,
            settings.assistant,
            version_reader=version_reader,
        )

    return report
