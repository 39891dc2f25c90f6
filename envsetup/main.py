"""
envsetup - CLI entrypoint.

Usage:
    python -m envsetup.main --help
    envsetup install
    envsetup install --require python=3.11 --require uv --dry-run
    envsetup check --json
    envsetup detect

Exit codes: 0 all satisfied, 1 something left unsatisfied, 2 invalid
input or configuration, 130 cancelled.
"""

from __future__ import annotations

import json
import signal
import sys
from pathlib import Path

import click

from envsetup import __version__
from envsetup.core.observability.logging_config import level_from_flags, setup_logging

EXIT_INVALID = 2

_STATUS_STYLE = {
    "satisfied": ("✓", "green"),
    "planned": ("…", "yellow"),
    "exhausted": ("✗", "red"),
    "cancelled": ("⊘", "yellow"),
}


@click.group()
@click.version_option(version=__version__, prog_name="envsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write full-detail logs to this file.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to envsetup.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    log_file: str | None,
    config_path: str | None,
) -> None:
    """envsetup - detect and install Python, Node.js and uv."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=level_from_flags(verbose=verbose, quiet=quiet, debug=debug),
        log_file=log_file,
        log_file_level="DEBUG" if log_file else None,
        quiet_third_party=not debug,
    )


def _echo_report(result, *, verbose: bool, quiet: bool) -> None:
    """Human-readable rendering of an InstallResult."""
    report = result.report
    if report is None:
        click.secho("   No requirements were resolved.", fg="yellow")
        return

    if not quiet:
        manager = result.manager or "none detected"
        mode_label = "[dry-run] " if report.dry_run else ""
        click.secho(f"\n⚡ {mode_label}envsetup ({result.os_family}, {manager})", fg="cyan", bold=True)
        for warning in result.warnings:
            click.secho(f"   ⚠️  {warning}", fg="yellow")
        click.echo()

    for outcome in report.outcomes:
        summary = outcome.summary()
        symbol, color = _STATUS_STYLE.get(summary["status"], ("•", "white"))
        click.secho(f"   {symbol} {outcome.requirement.describe()}", fg=color, nl=False)
        if summary["version"]:
            click.echo(f"  {summary['version']} → {summary['command_path']}")
        elif outcome.probe is not None and outcome.probe.found:
            click.echo(f"  unknown version → {outcome.probe.command_path}")
        else:
            click.echo(f"  ({summary['status']})")

        if outcome.attempts and (verbose or summary["status"] != "satisfied"):
            for attempt in outcome.attempts:
                click.echo(f"     │ {attempt.describe()}")
        if verbose:
            for warning in outcome.warnings:
                click.secho(f"     │ {warning}", fg="yellow")
        if outcome.diagnostic:
            click.echo()
            for line in outcome.diagnostic.splitlines():
                click.echo(f"     {line}")
            click.echo()

    if quiet:
        return
    click.echo()
    total = len(report.outcomes)
    satisfied = sum(1 for o in report.outcomes if o.state == "satisfied")
    color = "green" if report.exit_code == 0 else "yellow" if report.dry_run else "red"
    click.secho(f"   Result: {satisfied}/{total} satisfied", fg=color, bold=True)
    click.echo()


def _finish(result, as_json: bool, ctx: click.Context) -> None:
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(result.exit_code)

    _echo_report(result, verbose=ctx.obj.get("verbose", False), quiet=ctx.obj.get("quiet", False))
    sys.exit(result.exit_code)


@cli.command()
@click.option(
    "--require",
    "-r",
    "requirements",
    multiple=True,
    metavar="TOOL[=SPEC]",
    help="Requirement, e.g. python=3.10, node=16:22, python==3.12.4, uv. Repeatable.",
)
@click.option("--dry-run", is_flag=True, help="Probe and plan, but install nothing.")
@click.option(
    "--no-persist-path",
    is_flag=True,
    help="Only change PATH for this run; leave shell profiles / registry alone.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    requirements: tuple[str, ...],
    dry_run: bool,
    no_persist_path: bool,
    as_json: bool,
) -> None:
    """Install whatever is missing or too old.

    Examples:

        envsetup install

        envsetup install --require python=3.11 --require node=18

        envsetup install --dry-run --json
    """
    from envsetup.core.reliability.cancellation import CancellationToken
    from envsetup.core.use_cases.install import run_install

    token = CancellationToken()

    def _on_sigint(signum, frame) -> None:
        token.cancel("interrupted by user")
        click.secho(
            "\n⊘ Cancelling after the current step (the running command is not killed)...",
            fg="yellow",
            err=True,
        )

    previous = signal.signal(signal.SIGINT, _on_sigint)
    try:
        result = run_install(
            requirements,
            config_path=ctx.obj.get("config_path"),
            dry_run=dry_run,
            persist_path=False if no_persist_path else None,
            cancel=token,
        )
    finally:
        signal.signal(signal.SIGINT, previous)

    _finish(result, as_json, ctx)


@cli.command()
@click.option(
    "--require",
    "-r",
    "requirements",
    multiple=True,
    metavar="TOOL[=SPEC]",
    help="Requirement to check. Repeatable.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, requirements: tuple[str, ...], as_json: bool) -> None:
    """Probe only: exit 0 when every requirement is already satisfied."""
    from envsetup.core.use_cases.install import run_check

    result = run_check(requirements, config_path=ctx.obj.get("config_path"))
    _finish(result, as_json, ctx)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Show the OS, the package manager that would be used, and fallbacks."""
    from envsetup.core.use_cases.detect import run_detect

    result = run_detect()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    platform = result.platform
    distro = platform.get("distro") or {}
    click.secho(f"\n🔍 {distro.get('name') or platform['system']}", fg="cyan", bold=True)
    click.echo(f"   OS family: {platform['os_family']} ({platform['machine']})")
    if platform.get("is_root"):
        click.echo("   Running as root")

    if result.primary:
        click.secho(f"   Package manager: {result.primary}", fg="green")
    else:
        click.secho(f"   ❌ {result.error}", fg="red")

    fallbacks = ", ".join(result.secondaries) if result.secondaries else "none"
    click.echo(f"   Fallback managers: {fallbacks}")

    if ctx.obj.get("verbose"):
        click.echo()
        for name, info in result.managers.items():
            mark = "✓" if info["available"] else "·"
            click.echo(f"     {mark} {info['label']}")
    click.echo()

    if result.error:
        sys.exit(1)


if __name__ == "__main__":
    cli()
