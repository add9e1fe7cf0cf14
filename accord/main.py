"""
accord — CLI entrypoint.

Usage:
    accord apply site.yml
    accord apply --dry-run site.yml
    accord check site.yml
    accord detect --json
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from accord import __version__
from accord.core.config.loader import load_settings
from accord.core.errors import ConfigError, ExitCode
from accord.core.models.settings import RUN_LEVELS, Settings
from accord.core.observability.logging_config import resolve_run_level, setup_logging
from accord.core.observability.reporter import RunReporter, color_enabled


@click.group()
@click.version_option(version=__version__, prog_name="accord")
def cli() -> None:
    """accord — converge this host to a declared state."""


def _load_settings_or_exit(config_path: str | None, as_json: bool) -> Settings:
    try:
        return load_settings(Path(config_path) if config_path else None)
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e), "exit_code": int(e.exit_code)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(e.exit_code)


def _configure_logging(level: str, settings: Settings) -> None:
    try:
        setup_logging(
            level=level,
            log_file=settings.log_file,
            log_file_level=settings.log_file_level,
        )
    except OSError as e:
        click.secho(f"❌ Cannot open log file: {e}", fg="red")
        sys.exit(ExitCode.GENERAL_ERROR)


@cli.command()
@click.argument("manifest", type=click.Path(dir_okay=False))
@click.option("--dry-run", "-n", is_flag=True, help="Show what would change, change nothing.")
@click.option(
    "--log-level",
    type=click.Choice(RUN_LEVELS, case_sensitive=False),
    default=None,
    help="Output verbosity (default: verbose).",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Settings file (default: $ACCORD_CONFIG or /etc/accord/config.yml).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def apply(
    manifest: str,
    dry_run: bool,
    log_level: str | None,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Converge this host to the state declared in MANIFEST.

    Exit codes: 0 success, 1 general error, 2 manifest error,
    3 permission denied, 4 resource failure.
    """
    from accord.core.use_cases.apply import run_apply

    settings = _load_settings_or_exit(config_path, as_json)
    level = resolve_run_level(log_level, settings.log_level)
    _configure_logging(level, settings)

    reporter = None if as_json else RunReporter(level, color=color_enabled(settings.color))
    result = run_apply(
        Path(manifest),
        dry_run=dry_run,
        log_level=level,
        reporter=reporter,
        settings=settings,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")

    sys.exit(result.exit_code)


@cli.command()
@click.argument("manifest", type=click.Path(dir_okay=False))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def check(manifest: str, as_json: bool) -> None:
    """Validate MANIFEST without touching the host."""
    from accord.core.use_cases.check import check_manifest

    result = check_manifest(Path(manifest))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if not result.valid:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(result.exit_code)

    click.secho(f"✅ {manifest} is valid", fg="green", bold=True)
    for section, count in result.counts.items():
        if count:
            click.echo(f"   {section}: {count}")
    click.echo(f"   total: {result.total}")


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Settings file with capability overrides.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def detect(config_path: str | None, as_json: bool) -> None:
    """Show the detected OS family, package manager and init system."""
    from accord.core.use_cases.detect import run_detect

    result = run_detect(config_path=Path(config_path) if config_path else None)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(ExitCode.GENERAL_ERROR if result.error else ExitCode.SUCCESS)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(ExitCode.GENERAL_ERROR)

    caps = result.capabilities
    assert caps is not None  # guaranteed after error check above

    click.secho("\n🔍 Host capabilities", fg="cyan", bold=True)
    click.echo(f"   OS family:       {caps.os_family.value}")
    click.echo(f"   Package manager: {caps.package_manager.value if caps.package_manager else '—'}")
    click.echo(f"   Init system:     {caps.init_system.value if caps.init_system else '—'}")
    if result.overrides:
        pinned = ", ".join(f"{k}={v}" for k, v in result.overrides.items())
        click.secho(f"   Pinned by {result.settings_source}: {pinned}", fg="yellow")

    click.echo()
    for family, status in result.backends.items():
        if status["available"]:
            click.secho(f"   ✓ {family} ", fg="green", nl=False)
            click.echo(f"→ {status['backend']}")
        else:
            click.secho(f"   ✗ {family} ", fg="red", nl=False)
            click.echo(f"({status['reason']})")
    click.echo()


if __name__ == "__main__":
    cli()
