"""
devsetup — CLI entrypoint.

Usage:
    devsetup                    # full setup, interactive
    devsetup run --dry-run
    devsetup run --mode fail-fast --only packages --only editor
    devsetup detect --json
    devsetup verify
    devsetup config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from devsetup import __version__
from devsetup.core.models.settings import RunMode
from devsetup.core.observability.logging_config import setup_logging
from devsetup.core.services.provision.data.catalog import STEP_NAMES, STEP_TITLES


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="devsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to devsetup.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Set up a macOS developer workstation.

    With no command, runs the full setup interactively.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("DEVSETUP_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("DEVSETUP_LOG_FILE"),
        log_file_level=os.environ.get("DEVSETUP_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.option(
    "--mode",
    type=click.Choice([m.value for m in RunMode]),
    default=None,
    help="Failure policy (default: from config, else best-effort).",
)
@click.option(
    "--only",
    "only",
    multiple=True,
    type=click.Choice(STEP_NAMES),
    help="Run only this step (repeatable).",
)
@click.option("--dry-run", is_flag=True, help="Report what would change without changing it.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept every default without prompting.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    mode: str | None = None,
    only: tuple[str, ...] = (),
    dry_run: bool = False,
    assume_yes: bool = False,
    as_json: bool = False,
) -> None:
    """Run the setup steps, verify, and print a summary.

    Examples:

        devsetup run

        devsetup run --mode fail-fast

        devsetup run --only git_identity --only path_fixup

        devsetup run --dry-run --yes
    """
    from devsetup.core.services.provision.execution.operator import (
        ConsoleOperator,
        ScriptedOperator,
    )
    from devsetup.core.use_cases.run import run_provisioning
    from devsetup.ui.cli.console import (
        console_notifier,
        render_banner,
        render_summary,
        render_verification,
    )

    # JSON output must stay parseable; prompts and progress would break it.
    unattended = assume_yes or as_json
    operator = ScriptedOperator() if unattended else ConsoleOperator()
    quiet = ctx.obj.get("quiet", False)

    if not as_json and not quiet:
        render_banner("Installs developer tools, the editor, and the assistant CLI", dry_run)

    result = run_provisioning(
        operator,
        config_path=ctx.obj.get("config_path"),
        mode=RunMode(mode) if mode else None,
        only=list(only) if only else None,
        dry_run=dry_run,
        notify=None if (as_json or quiet) else console_notifier,
        unattended=unattended,
        reserve_stdout=as_json,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error or (result.report and result.report.failed > 0):
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None  # guaranteed after error check above

    render_verification(report.checks)
    render_summary(report)

    if report.failed > 0:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect(as_json: bool) -> None:
    """Show detected architecture, shell, and startup file."""
    from devsetup.core.use_cases.detect import run_detect

    result = run_detect()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    env = result.env
    click.secho("\n🔍 Environment", fg="cyan", bold=True)
    click.echo(f"   Architecture:  {env.arch.value}")
    click.echo(f"   Brew prefix:   {env.brew_prefix}")
    click.echo(f"   Shell:         {env.shell.value}")
    marker = "" if result.startup_file_exists else " (will be created)"
    click.echo(f"   Startup file:  {env.startup_file}{marker}")
    click.echo()

    for label, present in (
        ("Xcode Command Line Tools", result.developer_tools),
        ("Homebrew on PATH", result.brew_on_path),
        (f"Homebrew at {env.brew_bin}", result.brew_at_prefix),
    ):
        if present:
            click.secho(f"   ✓ {label}", fg="green")
        else:
            click.secho(f"   ✗ {label}", fg="red")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def verify(ctx: click.Context, as_json: bool) -> None:
    """Check every tool and print its version."""
    from devsetup.core.use_cases.verify import run_verify
    from devsetup.ui.cli.console import render_verification

    result = run_verify(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error or result.missing else 0)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    render_verification(result.checks)
    click.echo()
    if result.missing:
        click.secho(f"   {len(result.missing)} tool(s) missing", fg="yellow", bold=True)
        click.echo()
        sys.exit(1)


@cli.command()
def steps() -> None:
    """List the setup steps in run order."""
    for index, name in enumerate(STEP_NAMES, start=1):
        click.echo(f"  {index}. {name:<16} {STEP_TITLES[name]}")


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate devsetup.yml configuration."""
    from devsetup.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.settings is not None  # guaranteed when valid
        settings = result.settings
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   File: {result.path or '(defaults)'}")
        click.echo(f"   Mode: {settings.mode.value}")
        click.echo(f"   Packages: {', '.join(settings.packages) or '(none)'}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)

    click.echo()


if __name__ == "__main__":
    cli()
