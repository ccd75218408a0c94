"""
Console rendering — progress lines, verification table, final summary.

Everything the operator reads goes through click.secho here; the core
layers only hand over ``(level, message)`` pairs and a RunReport.
"""

from __future__ import annotations

import click

from devsetup.core.models.outcome import RunReport, ToolCheck

LEVEL_STYLES: dict[str, tuple[str, str]] = {
    "info": ("ℹ️ ", "blue"),
    "success": ("✅", "green"),
    "warning": ("⚠️ ", "yellow"),
    "error": ("❌", "red"),
}


def console_notifier(level: str, message: str) -> None:
    icon, color = LEVEL_STYLES.get(level, ("  ", "white"))
    click.secho(f"{icon} {message}", fg=color, err=(level == "error"))


def render_banner(env_label: str, dry_run: bool = False) -> None:
    click.echo()
    click.secho("🚀 Developer workstation setup", fg="cyan", bold=True)
    click.echo(f"   {env_label}")
    if dry_run:
        click.secho("   Mode: dry-run (nothing will be changed)", fg="yellow")
    click.echo()


def render_verification(checks: list[ToolCheck]) -> None:
    if not checks:
        return
    click.echo()
    click.secho("🔍 Verification", fg="cyan", bold=True)
    for check in checks:
        if check.present:
            version = check.version or "installed"
            click.secho(f"   ✓ {check.label}", fg="green", nl=False)
            click.echo(f": {version}")
        elif check.warn_only:
            click.secho(f"   ⚠ {check.label}", fg="yellow", nl=False)
            click.echo(": not found yet (open a new terminal)")
        else:
            click.secho(f"   ✗ {check.label}", fg="red", nl=False)
            click.echo(": not found")


def render_summary(report: RunReport) -> None:
    """Closing banner and next-step instructions."""
    click.echo()
    if report.aborted:
        click.secho(
            f"❌ Setup stopped at {report.aborted_at}; installation may be incomplete",
            fg="red",
            bold=True,
        )
        _render_failed_steps(report)
        not_run = [o.title or o.step for o in report.outcomes if o.status == "not_run"]
        if not_run:
            click.echo(f"   Not run: {', '.join(not_run)}")
    elif report.failed == 0:
        click.secho("Installation complete! 🎉", fg="green", bold=True)
    else:
        click.secho(
            f"⚠️  Installation completed with {report.failed} error(s)",
            fg="yellow",
            bold=True,
        )
        _render_failed_steps(report)
        click.secho("   Some components may need manual installation", fg="yellow")

    click.echo(
        f"   Steps: {report.succeeded} ok, {report.skipped} skipped, {report.failed} failed"
    )

    click.echo()
    click.secho("Next steps:", bold=True)
    click.echo("   1. Reload your shell configuration:")
    click.secho(f"      source {report.startup_file}", fg="cyan")
    click.echo("   2. Try the assistant CLI:")
    click.secho("      claude --help", fg="cyan")
    click.echo("   Or simply open a new terminal window")
    click.echo()


def _render_failed_steps(report: RunReport) -> None:
    for outcome in report.failed_steps:
        click.echo(f"   • {outcome.title or outcome.step}: {outcome.message}")
        for err in outcome.errors:
            if err != outcome.message:
                click.echo(f"       {err}")
