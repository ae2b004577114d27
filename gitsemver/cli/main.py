"""git-semver CLI - Main application entry point.

Commands:
    next      Print the next version (patch bump by default)
    history   Print the commits since the highest version tag
    highest   Print the highest version tag
    tags      List version tags
    validate  Check a version string
    version   Print the tool version

Repository options (--repo, --config, --prefix, --below, --rc) are shared by
the repository commands. Values from .git-semver.yaml apply unless a flag
overrides them.
"""

from __future__ import annotations

from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from rich.markup import escape

from gitsemver import __version__
from gitsemver.cli.console import (
    ErrorRenderer,
    get_console,
    set_verbose_mode,
    version_table,
    versions_table,
)
from gitsemver.core.config import Settings, load_settings
from gitsemver.core.exceptions import VersionError
from gitsemver.core.git import SemverRepository, open_repository
from gitsemver.core.logging import configure_logging, get_logger
from gitsemver.core.semver import parse_tolerant, parse_version

logger = get_logger(__name__)


def _handle_cli_error(e: Exception, operation_name: str) -> None:
    """Render an error panel and log the failure.

    Args:
        e: The exception that occurred
        operation_name: Human-readable operation name
    """
    ErrorRenderer.render(e, context=f"While {operation_name}")
    logger.debug(f"[{operation_name}] {type(e).__name__}: {e}")


def safe_cli_command(
    operation_name: str,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to wrap CLI commands with user-friendly error handling.

    Args:
        operation_name: Human-readable operation name for error context

    Returns:
        Decorator function that wraps the command with error handling
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except (typer.Exit, typer.Abort):
                raise
            except Exception as e:
                _handle_cli_error(e, operation_name)
                raise typer.Exit(code=1)

        return wrapper

    return decorator


app = typer.Typer(
    name="git-semver",
    help="A tool for bumping semantic versions based on git tags.",
    add_completion=False,
)

# Shared repository options
RepoOption = typer.Option(Path("./"), "--repo", "-r", help="Path to git repository")
ConfigOption = typer.Option(
    None, "--config", "-c", help="Config file (default: <repo>/.git-semver.yaml)"
)
PrefixOption = typer.Option(None, "--prefix", help="Only consider tags with this prefix")
BelowOption = typer.Option(None, "--below", help="Only look at tags below version")
RcOption = typer.Option(
    None,
    "--rc/--no-rc",
    help="Include release candidate tags",
)


def _open(settings: Settings) -> SemverRepository:
    return open_repository(settings.repo, settings.to_scan_config())


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Log debug output and show tracebacks"
    ),
) -> None:
    """git-semver - semantic versions from git tags."""
    configure_logging(level="DEBUG" if debug else "WARNING")
    set_verbose_mode(debug)

    if version:
        typer.echo(f"git-semver {__version__}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("next")
@safe_cli_command("computing the next version")
def next_command(
    repo: Path = RepoOption,
    config: Optional[Path] = ConfigOption,
    prefix: Optional[str] = PrefixOption,
    below: Optional[str] = BelowOption,
    major: bool = typer.Option(False, "--major", help="Bump major version"),
    minor: bool = typer.Option(False, "--minor", help="Bump minor version"),
    patch: bool = typer.Option(True, "--patch/--no-patch", help="Bump patch version"),
    rc: Optional[bool] = typer.Option(
        None,
        "--rc/--no-rc",
        help="Bump rc version. Will bump other version if an rc does not already exist.",
    ),
    snapshot: bool = typer.Option(False, "--snapshot", help="Set snapshot version"),
) -> None:
    """Print the next version.

    Examples:
        git-semver next --prefix v
        git-semver next --prefix v --minor
        git-semver next --prefix v --rc
    """
    settings = load_settings(config, repo, prefix=prefix, below=below, include_rc=rc)
    repository = _open(settings)

    next_version = repository.increment(
        major=major,
        minor=minor,
        patch=patch,
        snapshot=snapshot,
        release_candidate=settings.include_rc,
    )
    typer.echo(str(next_version))


@app.command("history")
@safe_cli_command("rendering history")
def history_command(
    repo: Path = RepoOption,
    config: Optional[Path] = ConfigOption,
    prefix: Optional[str] = PrefixOption,
    below: Optional[str] = BelowOption,
    rc: Optional[bool] = RcOption,
    msg_prefix: Optional[str] = typer.Option(
        None, "--msg-prefix", help="Use a prefix for the messages"
    ),
) -> None:
    """Print history since last tag."""
    settings = load_settings(
        config, repo, prefix=prefix, below=below, include_rc=rc, msg_prefix=msg_prefix
    )
    repository = _open(settings)
    typer.echo(repository.history(settings.msg_prefix), nl=False)


@app.command("highest")
@safe_cli_command("resolving the highest version")
def highest_command(
    repo: Path = RepoOption,
    config: Optional[Path] = ConfigOption,
    prefix: Optional[str] = PrefixOption,
    below: Optional[str] = BelowOption,
    rc: Optional[bool] = RcOption,
    details: bool = typer.Option(
        False, "--details", "-d", help="Show version components"
    ),
) -> None:
    """Print the highest version tag."""
    settings = load_settings(config, repo, prefix=prefix, below=below, include_rc=rc)
    highest = _open(settings).highest

    if details:
        get_console().print(version_table(highest, title="Highest Version"))
    else:
        typer.echo(str(highest))


@app.command("tags")
@safe_cli_command("listing version tags")
def tags_command(
    repo: Path = RepoOption,
    config: Optional[Path] = ConfigOption,
    prefix: Optional[str] = PrefixOption,
    below: Optional[str] = BelowOption,
    rc: Optional[bool] = RcOption,
) -> None:
    """List version tags with the configured prefix, greatest first."""
    settings = load_settings(config, repo, prefix=prefix, below=below, include_rc=rc)
    repository = _open(settings)

    versions = repository.versions
    if not versions:
        get_console().print("[yellow]No version tags found[/yellow]")
        return
    get_console().print(versions_table(versions, repository.highest))


@app.command("validate")
def validate_command(
    version_string: str = typer.Argument(..., help="Version string to validate"),
    tolerant: bool = typer.Option(
        False, "--tolerant", "-t", help="Accept short forms and leading zeroes"
    ),
) -> None:
    """Validate a version string."""
    parser = parse_tolerant if tolerant else parse_version
    console = get_console()

    try:
        parsed = parser(version_string)
    except VersionError as e:
        console.print(f"[red]Invalid version string: {escape(version_string)}[/red]")
        console.print(f"  {escape(str(e))}")
        console.print(escape("Expected format: [PREFIX]MAJOR.MINOR.PATCH[-prerelease][+build]"))
        raise typer.Exit(1)

    console.print(f"[green]Valid version: {escape(str(parsed))}[/green]")
    console.print(version_table(parsed, title="Version Components"))


@app.command("version")
def version_command() -> None:
    """Print version."""
    typer.echo(f"Version: {__version__}")


def cli_main() -> None:
    """Console script entry point."""
    app()
