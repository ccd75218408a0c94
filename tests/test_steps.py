"""
Tests for the installer steps — one step at a time, mocked installers.
"""

from pathlib import Path

import pytest

from devsetup.adapters.registry import AdapterRegistry
from devsetup.core.models.environment import HostEnvironment
from devsetup.core.models.settings import GitSettings, RunMode, SetupSettings
from devsetup.core.services.provision.detection.identity import StaticIdentityHints
from devsetup.core.services.provision.execution.operator import ScriptedOperator
from devsetup.core.services.provision.execution.shell_profile import path_export_line
from devsetup.core.services.provision.execution.step_executors import (
    StepContext,
    configure_git_identity,
    fix_assistant_path,
    install_assistant,
    install_developer_tools,
    install_editor,
    install_homebrew,
    install_packages,
)
from tests.simulated_host import SimulatedPresence

EDITOR_APP = "/Applications/Visual Studio Code.app"


def _ctx(
    env: HostEnvironment,
    registry: AdapterRegistry,
    presence: SimulatedPresence | None = None,
    *,
    answers: list[str] | None = None,
    settings: SetupSettings | None = None,
    hints=None,
    mode: RunMode = RunMode.BEST_EFFORT,
    unattended: bool = False,
    reserve_stdout: bool = False,
) -> StepContext:
    notes: list[tuple[str, str]] = []
    ctx = StepContext(
        env=env,
        settings=settings or SetupSettings(),
        registry=registry,
        presence=presence or SimulatedPresence(env),
        operator=ScriptedOperator(answers),
        mode=mode,
        notify=lambda level, msg: notes.append((level, msg)),
        unattended=unattended,
        reserve_stdout=reserve_stdout,
    )
    if hints is not None:
        ctx.hints = hints
    ctx.notes = notes
    return ctx


class TestDeveloperTools:
    def test_present_skips(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, developer_tools=True))
        outcome = install_developer_tools(ctx)
        assert outcome.status == "skipped"
        assert shell_mock.call_count == 0

    def test_missing_installs_and_waits(self, env, registry, shell_mock):
        ctx = _ctx(env, registry)
        outcome = install_developer_tools(ctx)
        assert outcome.status == "ok"
        assert shell_mock.called_ids == ["developer_tools:install"]
        assert ctx.operator.prompts == ["Press Enter when installation is complete..."]

    def test_installer_failure(self, env, registry, shell_mock):
        shell_mock.set_failure("developer_tools:install", "already requested")
        ctx = _ctx(env, registry)
        outcome = install_developer_tools(ctx)
        assert outcome.failed
        assert ctx.operator.prompts == []


class TestHomebrew:
    def test_on_path_skips(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, commands={"brew"}))
        assert install_homebrew(ctx).status == "skipped"
        assert shell_mock.call_count == 0
        assert env.startup_file.read_text() == ""

    def test_installed_but_not_activated(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, paths={env.brew_bin}))
        outcome = install_homebrew(ctx)
        assert outcome.status == "skipped"
        assert shell_mock.call_count == 0
        assert outcome.path_additions == ["/opt/homebrew/bin", "/opt/homebrew/sbin"]
        assert env.brew_activation_line in env.startup_file.read_text()

    def test_fresh_install(self, env, registry, shell_mock):
        outcome = install_homebrew(_ctx(env, registry))
        assert outcome.status == "ok"
        assert shell_mock.called_ids == ["homebrew:install"]
        params = shell_mock.call_log[0].action.params
        assert params["interactive"] is True
        assert "install.sh" in params["command"]
        assert env.startup_file.read_text().count(env.brew_activation_line) == 1

    def test_intel_activation_line(self, intel_bash_env, registry):
        intel_bash_env.startup_file.touch()
        install_homebrew(_ctx(intel_bash_env, registry))
        content = intel_bash_env.startup_file.read_text()
        assert 'eval "$(/usr/local/bin/brew shellenv)"' in content

    def test_install_failure(self, env, registry, shell_mock):
        shell_mock.set_failure("homebrew:install", "curl: (6) Could not resolve host")
        outcome = install_homebrew(_ctx(env, registry))
        assert outcome.failed
        assert "Could not resolve host" in outcome.message
        assert env.startup_file.read_text() == ""

    def test_unattended_install_is_noninteractive(self, env, registry, shell_mock):
        install_homebrew(_ctx(env, registry, unattended=True))
        assert shell_mock.call_log[0].env["NONINTERACTIVE"] == "1"

    def test_attended_install_keeps_prompts(self, env, registry, shell_mock, monkeypatch):
        monkeypatch.delenv("NONINTERACTIVE", raising=False)
        install_homebrew(_ctx(env, registry))
        assert "NONINTERACTIVE" not in shell_mock.call_log[0].env


class TestPackages:
    def _presence(self, env, packages=()):
        return SimulatedPresence(env, commands={"brew"}, packages=packages)

    def test_only_missing_installed(self, env, registry, shell_mock):
        presence = self._presence(env, packages={"wget", "curl", "git"})
        outcome = install_packages(_ctx(env, registry, presence))
        assert outcome.status == "ok"
        assert shell_mock.called_ids == ["packages:install:node", "packages:install:python@3.12"]
        assert shell_mock.call_log[0].action.params["argv"] == ["/simulated/bin/brew", "install", "node"]

    def test_all_present_skips(self, env, registry, shell_mock):
        presence = self._presence(env, packages={"wget", "curl", "git", "node", "python@3.12"})
        assert install_packages(_ctx(env, registry, presence)).status == "skipped"
        assert shell_mock.call_count == 0

    def test_no_brew_fails(self, env, registry):
        assert install_packages(_ctx(env, registry)).failed

    def test_best_effort_continues_past_failure(self, env, registry, shell_mock):
        shell_mock.set_failure("packages:install:git", "No available formula")
        outcome = install_packages(_ctx(env, registry, self._presence(env)))
        assert outcome.failed
        assert outcome.errors == ["git: No available formula"]
        assert "packages:install:python@3.12" in shell_mock.called_ids

    def test_fail_fast_stops_at_failure(self, env, registry, shell_mock):
        shell_mock.set_failure("packages:install:git", "No available formula")
        outcome = install_packages(_ctx(env, registry, self._presence(env), mode=RunMode.FAIL_FAST))
        assert outcome.failed
        assert shell_mock.called_ids[-1] == "packages:install:git"
        assert "packages:install:node" not in shell_mock.called_ids


class TestEditor:
    def test_app_bundle_present(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, commands={"brew"}, paths={EDITOR_APP}))
        assert install_editor(ctx).status == "skipped"
        assert shell_mock.call_count == 0

    def test_command_present(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, commands={"brew", "code"}))
        assert install_editor(ctx).status == "skipped"
        assert shell_mock.call_count == 0

    def test_fresh_install(self, env, registry, shell_mock):
        outcome = install_editor(_ctx(env, registry, SimulatedPresence(env, commands={"brew"})))
        assert outcome.status == "ok"
        assert shell_mock.call_log[0].action.params["argv"][1:] == [
            "install", "--cask", "visual-studio-code",
        ]

    def test_registered_but_missing_reinstalls_on_confirm(self, env, registry, shell_mock):
        presence = SimulatedPresence(env, commands={"brew"}, casks={"visual-studio-code"})
        ctx = _ctx(env, registry, presence, answers=["y"])
        outcome = install_editor(ctx)
        assert outcome.status == "ok"
        assert shell_mock.called_ids == ["editor:reinstall"]
        assert shell_mock.call_log[0].action.params["argv"][1] == "reinstall"

    def test_reinstall_declined(self, env, registry, shell_mock):
        presence = SimulatedPresence(env, commands={"brew"}, casks={"visual-studio-code"})
        outcome = install_editor(_ctx(env, registry, presence, answers=["n"]))
        assert outcome.status == "skipped"
        assert shell_mock.call_count == 0


class TestAssistant:
    def test_installs_and_adds_path(self, env, registry, shell_mock, home: Path):
        outcome = install_assistant(_ctx(env, registry))
        bin_dir = str(home / ".local/bin")
        assert outcome.status == "ok"
        assert outcome.path_additions == [bin_dir]
        assert shell_mock.called_ids == ["assistant:install"]
        assert "claude.ai/install.sh" in shell_mock.call_log[0].action.params["command"]
        assert env.startup_file.read_text().count(path_export_line(bin_dir)) == 1

    def test_failure_leaves_startup_file(self, env, registry, shell_mock):
        shell_mock.set_failure("assistant:install")
        assert install_assistant(_ctx(env, registry)).failed
        assert env.startup_file.read_text() == ""

    def test_reserved_stdout_redirects_installer(self, env, registry, shell_mock):
        install_assistant(_ctx(env, registry, reserve_stdout=True))
        params = shell_mock.call_log[0].action.params
        assert params["interactive"] is True
        assert params["stdout_to_stderr"] is True

    def test_captured_commands_untouched_by_reserved_stdout(self, env, registry, shell_mock):
        ctx = _ctx(env, registry, SimulatedPresence(env, commands={"brew"}), reserve_stdout=True)
        install_packages(ctx)
        assert shell_mock.call_count > 0
        for call in shell_mock.call_log:
            assert "stdout_to_stderr" not in call.action.params


class TestPathFixup:
    def test_adds_once(self, env, registry, home: Path):
        first = fix_assistant_path(_ctx(env, registry))
        second = fix_assistant_path(_ctx(env, registry))
        line = path_export_line(str(home / ".local/bin"))
        assert first.status == "ok"
        assert second.status == "skipped"
        assert env.startup_file.read_text().count(line) == 1

    def test_dry_run_writes_nothing(self, env, dry_registry):
        outcome = fix_assistant_path(_ctx(env, dry_registry))
        assert outcome.status == "ok"
        assert "dry-run" in outcome.message
        assert env.startup_file.read_text() == ""


class TestGitIdentity:
    def _set_calls(self, git_mock):
        return {
            c.action.params["key"]: c.action.params["value"]
            for c in git_mock.call_log
            if c.action.params["operation"] == "config_set"
        }

    def test_existing_no_change(self, env, registry, git_mock):
        git_mock.set_output("git:get:user.name", "Jane Doe")
        git_mock.set_output("git:get:user.email", "jane@example.org")
        ctx = _ctx(env, registry, answers=[""])
        outcome = configure_git_identity(ctx)
        assert outcome.status == "skipped"
        assert self._set_calls(git_mock) == {}
        assert ctx.operator.prompts == ["Do you want to change these settings?"]

    def test_existing_change(self, env, registry, git_mock):
        git_mock.set_output("git:get:user.name", "Jane Doe")
        git_mock.set_output("git:get:user.email", "jane@example.org")
        ctx = _ctx(env, registry, answers=["y", "", "jane@work.example"])
        outcome = configure_git_identity(ctx)
        assert outcome.status == "ok"
        assert self._set_calls(git_mock) == {
            "user.name": "Jane Doe",
            "user.email": "jane@work.example",
        }

    def test_hints_preferred(self, env, registry, git_mock):
        ctx = _ctx(env, registry, hints=StaticIdentityHints("Jane Appleseed", "jane@icloud.com"))
        configure_git_identity(ctx)
        assert self._set_calls(git_mock) == {
            "user.name": "Jane Appleseed",
            "user.email": "jane@icloud.com",
        }

    def test_placeholder_email(self, env, registry, git_mock):
        ctx = _ctx(env, registry, hints=StaticIdentityHints(name="Jane"))
        outcome = configure_git_identity(ctx)
        assert outcome.status == "ok"
        assert self._set_calls(git_mock)["user.email"] == "you@example.com"
        assert any(level == "warning" and "placeholder" in msg for level, msg in ctx.notes)

    def test_empty_answers_reprompt(self, env, registry, git_mock):
        settings = SetupSettings(git=GitSettings(placeholder_email=""))
        ctx = _ctx(env, registry, answers=["", "  ", "Jane", "", "jane@example.org"], settings=settings)
        outcome = configure_git_identity(ctx)
        assert outcome.status == "ok"
        assert ("error", "Name cannot be empty") in ctx.notes
        assert ("error", "Email cannot be empty") in ctx.notes
        assert self._set_calls(git_mock) == {"user.name": "Jane", "user.email": "jane@example.org"}

    def test_no_answer_available_fails(self, env, registry, git_mock):
        settings = SetupSettings(git=GitSettings(placeholder_email=""))
        outcome = configure_git_identity(_ctx(env, registry, settings=settings))
        assert outcome.failed
        assert self._set_calls(git_mock) == {}

    def test_git_missing_fails(self, env, registry, git_mock):
        git_mock.set_failure("git:get:user.name", "git is not installed")
        outcome = configure_git_identity(_ctx(env, registry))
        assert outcome.failed
        assert "git is not installed" in outcome.message

    def test_dry_run_reads_but_does_not_write(self, env, dry_registry, git_mock):
        ctx = _ctx(env, dry_registry, hints=StaticIdentityHints("Jane", "jane@example.org"))
        assert configure_git_identity(ctx).status == "ok"
        assert git_mock.called_ids == ["git:get:user.name", "git:get:user.email"]
