"""
L4 Execution — The seven installer steps.

Each step follows the same contract::

    present already?  → notify info, return skipped
    otherwise         → run the install action(s), return ok or failed

Steps never raise for expected failures and never touch the process
environment; PATH changes are reported as ``path_additions``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from devsetup.adapters.registry import AdapterRegistry
from devsetup.core.models.action import Action, Receipt
from devsetup.core.models.environment import HostEnvironment
from devsetup.core.models.outcome import StepOutcome
from devsetup.core.models.settings import RunMode, SetupSettings
from devsetup.core.services.provision.detection.identity import (
    IdentityHints,
    NullIdentityHints,
)
from devsetup.core.services.provision.detection.presence import PresenceChecker
from devsetup.core.services.provision.detection.tool_version import resolve_bin_dir
from devsetup.core.services.provision.execution.operator import (
    Operator,
    OperatorError,
)
from devsetup.core.services.provision.execution.shell_profile import (
    ensure_line,
    ensure_path_entry,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_notifier(level: str, message: str) -> None:
    """Default sink: progress lines become log records."""
    logger.log(_LOG_LEVELS.get(level, logging.INFO), message)


@dataclass
class StepContext:
    """Everything a step may read or call."""

    env: HostEnvironment
    settings: SetupSettings
    registry: AdapterRegistry
    presence: PresenceChecker
    operator: Operator
    hints: IdentityHints = field(default_factory=NullIdentityHints)
    mode: RunMode = RunMode.BEST_EFFORT
    notify: Notifier = log_notifier
    unattended: bool = False
    reserve_stdout: bool = False

    @property
    def fail_fast(self) -> bool:
        return self.mode == RunMode.FAIL_FAST

    @property
    def dry_run(self) -> bool:
        return self.registry.dry_run

    def run(self, action: Action) -> Receipt:
        """Dispatch with this run's PATH.

        Unattended runs export ``NONINTERACTIVE=1`` so installers that
        honour it (Homebrew's) skip their confirmation prompt.  When stdout
        is reserved for a report, interactive children write to stderr.
        """
        env = self.env.child_env()
        if self.unattended:
            env["NONINTERACTIVE"] = "1"
        if self.reserve_stdout and action.params.get("interactive"):
            action = action.model_copy(
                update={"params": {**action.params, "stdout_to_stderr": True}},
            )
        return self.registry.execute(action, env=env)

    def brew(self) -> str | None:
        """The brew to invoke; under dry-run, where it would be installed."""
        found = self.presence.brew_executable()
        if found is None and self.dry_run:
            return self.env.brew_bin
        return found


def _suffix(receipt: Receipt) -> str:
    return " [dry-run]" if receipt.skipped else ""


# ── a. Developer command-line tools ─────────────────────────────

def install_developer_tools(ctx: StepContext) -> StepOutcome:
    step = "developer_tools"
    if ctx.presence.developer_tools_installed():
        ctx.notify("info", "Xcode Command Line Tools already installed")
        return StepOutcome.skipped(step, "already installed")

    ctx.notify("info", "Installing Xcode Command Line Tools...")
    receipt = ctx.run(Action(
        id="developer_tools:install",
        adapter="shell",
        label="xcode-select --install",
        step=step,
        params={"argv": ["xcode-select", "--install"], "timeout": 60},
    ))
    if receipt.failed:
        ctx.notify("error", f"Xcode Command Line Tools installer failed: {receipt.error}")
        return StepOutcome.failure(step, f"xcode-select --install failed: {receipt.error}")
    if receipt.skipped:
        return StepOutcome.ok(step, receipt.output)

    # The installer is a GUI dialog; completion cannot be observed.
    ctx.notify("warning", "Please complete the Xcode Tools installation in the popup window")
    ctx.operator.pause("Press Enter when installation is complete...")
    ctx.notify("success", "Xcode Command Line Tools installed")
    return StepOutcome.ok(step, "installed")


# ── b. Package manager ──────────────────────────────────────────

def install_homebrew(ctx: StepContext) -> StepOutcome:
    step = "homebrew"
    env = ctx.env
    brew_dirs = [f"{env.brew_prefix}/bin", f"{env.brew_prefix}/sbin"]

    if ctx.presence.command_exists("brew"):
        ctx.notify("info", "Homebrew already installed")
        return StepOutcome.skipped(step, "already installed")

    if ctx.presence.path_exists(env.brew_bin):
        # Installed, but the startup file never activated it.
        ctx.notify("info", f"Homebrew found at {env.brew_bin} but not on PATH")
        receipt = ensure_line(
            ctx.registry, env, env.brew_activation_line,
            action_id="homebrew:activate", step=step,
            backup=ctx.settings.backup_startup_file,
        )
        if receipt.failed:
            ctx.notify("error", f"Could not update {env.startup_file}: {receipt.error}")
            return StepOutcome.failure(step, f"activation line not written: {receipt.error}")
        if receipt.metadata.get("added"):
            ctx.notify("success", f"Added Homebrew activation to {env.startup_file}")
        return StepOutcome.skipped(step, "already installed", path_additions=brew_dirs)

    ctx.notify("info", "Installing Homebrew...")
    url = ctx.settings.homebrew.install_url
    receipt = ctx.run(Action(
        id="homebrew:install",
        adapter="shell",
        label="Homebrew bootstrap script",
        step=step,
        params={
            "command": f'/bin/bash -c "$(curl -fsSL {url})"',
            "interactive": True,
        },
    ))
    if receipt.failed:
        ctx.notify("error", f"Homebrew installation failed: {receipt.error}")
        return StepOutcome.failure(step, f"Homebrew installer failed: {receipt.error}")

    activation = ensure_line(
        ctx.registry, env, env.brew_activation_line,
        action_id="homebrew:activate", step=step,
        backup=ctx.settings.backup_startup_file,
    )
    if activation.failed:
        ctx.notify("error", f"Could not update {env.startup_file}: {activation.error}")
        return StepOutcome.failure(
            step,
            f"Homebrew installed but activation line not written: {activation.error}",
            path_additions=brew_dirs,
        )

    ctx.notify("success", f"Homebrew installed{_suffix(receipt)}")
    return StepOutcome.ok(step, f"installed{_suffix(receipt)}", path_additions=brew_dirs)


# ── c. CLI package batch ────────────────────────────────────────

def install_packages(ctx: StepContext) -> StepOutcome:
    step = "packages"
    ctx.notify("info", "Installing development tools...")

    brew = ctx.brew()
    if brew is None:
        ctx.notify("error", "Homebrew is not available; cannot install packages")
        return StepOutcome.failure(step, "Homebrew is not available")

    installed: list[str] = []
    errors: list[str] = []

    for pkg in ctx.settings.packages:
        if ctx.presence.package_installed(pkg):
            ctx.notify("info", f"{pkg} already installed")
            continue

        ctx.notify("info", f"Installing {pkg}...")
        receipt = ctx.run(Action(
            id=f"packages:install:{pkg}",
            adapter="shell",
            label=f"brew install {pkg}",
            step=step,
            params={"argv": [brew, "install", pkg]},
        ))
        if receipt.failed:
            ctx.notify("error", f"Failed to install {pkg}: {receipt.error}")
            errors.append(f"{pkg}: {receipt.error}")
            if ctx.fail_fast:
                break
            continue

        ctx.notify("success", f"{pkg} installed{_suffix(receipt)}")
        installed.append(pkg)

    if errors:
        return StepOutcome.failure(
            step,
            f"{len(errors)} package(s) failed to install",
            errors=errors,
        )
    if not installed:
        return StepOutcome.skipped(step, "all packages already installed")
    return StepOutcome.ok(step, f"installed: {', '.join(installed)}")


# ── d. Editor application ───────────────────────────────────────

def install_editor(ctx: StepContext) -> StepOutcome:
    step = "editor"
    editor = ctx.settings.editor

    if ctx.presence.path_exists(editor.app_path):
        ctx.notify("info", f"{editor.label} already installed at {editor.app_path}")
        return StepOutcome.skipped(step, "application bundle present")
    if ctx.presence.command_exists(editor.command):
        ctx.notify("info", f"{editor.label} already installed ({editor.command} command available)")
        return StepOutcome.skipped(step, f"{editor.command} on PATH")

    brew = ctx.brew()
    if brew is None:
        ctx.notify("error", f"Homebrew is not available; cannot install {editor.label}")
        return StepOutcome.failure(step, "Homebrew is not available")

    if ctx.presence.package_installed(editor.cask, cask=True):
        ctx.notify(
            "warning",
            f"Homebrew lists {editor.cask} as installed but {editor.app_path} is missing",
        )
        if not ctx.operator.confirm(f"Force a reinstall of {editor.label}?", default=True):
            ctx.notify("warning", f"Skipping {editor.label} reinstall")
            return StepOutcome.skipped(step, "reinstall declined by operator")
        action_id, verb = "editor:reinstall", "reinstall"
    else:
        action_id, verb = "editor:install", "install"

    ctx.notify("info", f"Installing {editor.label}...")
    receipt = ctx.run(Action(
        id=action_id,
        adapter="shell",
        label=f"brew {verb} --cask {editor.cask}",
        step=step,
        params={"argv": [brew, verb, "--cask", editor.cask]},
    ))
    if receipt.failed:
        ctx.notify("error", f"{editor.label} installation failed: {receipt.error}")
        return StepOutcome.failure(step, f"brew {verb} --cask {editor.cask} failed: {receipt.error}")

    ctx.notify("success", f"{editor.label} installed{_suffix(receipt)}")
    return StepOutcome.ok(step, f"{verb}ed{_suffix(receipt)}")


# ── e. Assistant CLI ────────────────────────────────────────────

def install_assistant(ctx: StepContext) -> StepOutcome:
    """Always re-runs the installer; it is idempotent on its own."""
    step = "assistant"
    assistant = ctx.settings.assistant
    ctx.notify("info", f"Installing {assistant.label}...")

    receipt = ctx.run(Action(
        id="assistant:install",
        adapter="shell",
        label=f"{assistant.label} install script",
        step=step,
        params={
            "command": f"set -o pipefail; curl -fsSL {assistant.install_url} | bash",
            "interactive": True,
        },
    ))
    if receipt.failed:
        ctx.notify("error", f"{assistant.label} installation failed: {receipt.error}")
        return StepOutcome.failure(step, f"{assistant.label} installer failed: {receipt.error}")

    bin_dir = str(resolve_bin_dir(ctx.env.home, assistant.bin_dir))
    path_receipt = ensure_path_entry(
        ctx.registry, ctx.env, bin_dir,
        action_id="assistant:path", step=step,
        backup=ctx.settings.backup_startup_file,
    )
    if path_receipt.failed:
        ctx.notify("error", f"Could not update {ctx.env.startup_file}: {path_receipt.error}")
        return StepOutcome.failure(step, f"PATH entry not written: {path_receipt.error}")
    _report_path_append(ctx, path_receipt, bin_dir)

    ctx.notify("success", f"{assistant.label} installed{_suffix(receipt)}")
    return StepOutcome.ok(step, f"installed{_suffix(receipt)}", path_additions=[bin_dir])


# ── f. Git identity ─────────────────────────────────────────────

def _git_get(ctx: StepContext, key: str) -> Receipt:
    return ctx.run(Action(
        id=f"git:get:{key}",
        adapter="git",
        label=f"git config --global {key}",
        step="git_identity",
        params={"operation": "config_get", "key": key},
        read_only=True,
    ))


def _git_set(ctx: StepContext, key: str, value: str) -> Receipt:
    return ctx.run(Action(
        id=f"git:set:{key}",
        adapter="git",
        label=f"git config --global {key} {value!r}",
        step="git_identity",
        params={"operation": "config_set", "key": key, "value": value},
    ))


def _ask_required(ctx: StepContext, prompt: str, suggestion: str | None, empty_msg: str) -> str:
    if suggestion:
        return ctx.operator.ask(prompt, default=suggestion)
    while True:
        value = ctx.operator.ask(prompt)
        if value:
            return value
        ctx.notify("error", empty_msg)


def configure_git_identity(ctx: StepContext) -> StepOutcome:
    step = "git_identity"
    ctx.notify("info", "Configuring Git...")

    name_r = _git_get(ctx, "user.name")
    email_r = _git_get(ctx, "user.email")
    for r in (name_r, email_r):
        if r.failed:
            ctx.notify("error", f"Cannot read git configuration: {r.error}")
            return StepOutcome.failure(step, f"cannot read git configuration: {r.error}")

    current_name = name_r.output.strip()
    current_email = email_r.output.strip()

    if current_name and current_email:
        ctx.notify("info", "Git already configured")
        ctx.notify("info", f"  Name: {current_name}")
        ctx.notify("info", f"  Email: {current_email}")
        if not ctx.operator.confirm("Do you want to change these settings?", default=False):
            return StepOutcome.skipped(step, "identity unchanged")

    suggested_name = ctx.hints.suggest_name() or current_name or None
    suggested_email = ctx.hints.suggest_email() or current_email or None

    placeholder = ctx.settings.git.placeholder_email
    if not suggested_email and placeholder:
        suggested_email = placeholder

    ctx.notify("warning", "Git configuration needed")
    try:
        name = _ask_required(ctx, "Enter your name", suggested_name, "Name cannot be empty")
        email = _ask_required(ctx, "Enter your email", suggested_email, "Email cannot be empty")
    except OperatorError as exc:
        ctx.notify("error", str(exc))
        return StepOutcome.failure(step, f"no identity supplied: {exc}")

    for key, value in (("user.name", name), ("user.email", email)):
        receipt = _git_set(ctx, key, value)
        if receipt.failed:
            ctx.notify("error", f"Failed to set {key}: {receipt.error}")
            return StepOutcome.failure(step, f"git config --global {key} failed: {receipt.error}")

    ctx.notify("success", "Git configured")
    ctx.notify("info", f"  Name: {name}")
    ctx.notify("info", f"  Email: {email}")
    if placeholder and email == placeholder:
        ctx.notify(
            "warning",
            f"Using placeholder email {placeholder}; "
            "set a real one with: git config --global user.email <address>",
        )
    return StepOutcome.ok(step, f"{name} <{email}>")


# ── g. PATH fixup ───────────────────────────────────────────────

def fix_assistant_path(ctx: StepContext) -> StepOutcome:
    """Safety net for step (e): the bin dir must be on PATH exactly once."""
    step = "path_fixup"
    ctx.notify("info", f"Fixing {ctx.settings.assistant.label} PATH...")
    bin_dir = str(resolve_bin_dir(ctx.env.home, ctx.settings.assistant.bin_dir))

    receipt = ensure_path_entry(
        ctx.registry, ctx.env, bin_dir,
        action_id="path_fixup:path", step=step,
        backup=ctx.settings.backup_startup_file,
    )
    if receipt.failed:
        ctx.notify("error", f"Could not update {ctx.env.startup_file}: {receipt.error}")
        return StepOutcome.failure(step, f"PATH entry not written: {receipt.error}")

    _report_path_append(ctx, receipt, bin_dir)
    if receipt.metadata.get("added") or receipt.skipped:
        return StepOutcome.ok(step, f"added {bin_dir}{_suffix(receipt)}", path_additions=[bin_dir])
    return StepOutcome.skipped(step, f"{bin_dir} already in PATH", path_additions=[bin_dir])


def _report_path_append(ctx: StepContext, receipt: Receipt, directory: str) -> None:
    if receipt.skipped:
        ctx.notify("info", f"[dry-run] would add {directory} to PATH in {ctx.env.startup_file}")
    elif receipt.metadata.get("added"):
        ctx.notify("success", f"Added {directory} to PATH in {ctx.env.startup_file}")
    else:
        ctx.notify("info", f"{directory} already in PATH")


# ── Step table ──────────────────────────────────────────────────

StepFn = Callable[[StepContext], StepOutcome]

STEP_EXECUTORS: dict[str, StepFn] = {
    "developer_tools": install_developer_tools,
    "homebrew": install_homebrew,
    "packages": install_packages,
    "editor": install_editor,
    "assistant": install_assistant,
    "git_identity": configure_git_identity,
    "path_fixup": fix_assistant_path,
}
