"""Console output helpers.

Command results go to stdout with plain typer.echo so they can be captured
by scripts. Everything decorative (tables, error panels) goes through the
rich consoles defined here; errors are written to stderr.
"""

from __future__ import annotations

import traceback
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gitsemver.core.semver import Version

# Shared console instances
_console: Console | None = None
_error_console: Console | None = None

# Verbose mode flag (set by CLI --debug flag)
_verbose_mode: bool = False


def get_console() -> Console:
    """Get shared stdout console instance (lazy-loaded)."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def get_error_console() -> Console:
    """Get shared stderr console instance (lazy-loaded)."""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def set_verbose_mode(enabled: bool) -> None:
    """Enable or disable tracebacks in error panels."""
    global _verbose_mode
    _verbose_mode = enabled


def is_verbose_mode() -> bool:
    return _verbose_mode


def version_table(version: Version, title: str = "Version") -> Table:
    """Build a component table for a version.

    Args:
        version: Version to display.
        title: Table title.

    Returns:
        Rich Table with one row per non-empty component.
    """
    table = Table(title=title)
    table.add_column("Component", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", str(version))
    if version.prefix:
        table.add_row("Prefix", version.prefix)
    table.add_row("Major", str(version.major))
    table.add_row("Minor", str(version.minor))
    table.add_row("Patch", str(version.patch))

    if version.prerelease:
        table.add_row("Prerelease", version.prerelease_string)
    if version.build:
        table.add_row("Build Metadata", ".".join(version.build))

    return table


def versions_table(versions: List[Version], highest: Version) -> Table:
    """Build a table of version tags, marking the highest one."""
    table = Table(title="Version Tags")
    table.add_column("Tag", style="cyan")
    table.add_column("Prerelease", style="yellow")
    table.add_column("Highest", style="green")

    for version in versions:
        table.add_row(
            str(version),
            "yes" if version.is_prerelease else "",
            "*" if version == highest else "",
        )
    return table


class ErrorRenderer:
    """Renders errors with "Why" and "How to fix" sections on stderr.

    Example
    -------
        try:
            repo = SemverRepository.open(path, config)
        except GitSemverError as e:
            ErrorRenderer.render(e)
            raise typer.Exit(1)
    """

    @staticmethod
    def render(
        exc: BaseException,
        context: str = "",
        show_traceback: Optional[bool] = None,
    ) -> None:
        """Render an exception as a helpful error panel.

        Args:
            exc: Exception to render
            context: Optional context message (e.g., "While computing next version")
            show_traceback: Override for verbose mode (None = use global setting)
        """
        from gitsemver.core.exceptions import get_error_info, get_root_cause

        console = get_error_console()

        error_info = get_error_info(exc)
        root_cause = get_root_cause(exc)
        root_message = str(root_cause) if root_cause is not exc else None

        content = ErrorRenderer._build_error_content(
            message=str(exc),
            context=context,
            why=error_info["why_it_happened"],
            how_to_fix=error_info["how_to_fix"],
            root_message=root_message,
        )

        panel = Panel(
            content,
            title=f"[bold red]Error: {error_info['error_code']}[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
        console.print(panel)

        should_show_traceback = (
            show_traceback if show_traceback is not None else is_verbose_mode()
        )
        if should_show_traceback:
            tb_text = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
            console.print()
            console.print("[dim]--- Traceback (--debug mode) ---[/dim]")
            console.print(Text(tb_text, style="dim"))

    @staticmethod
    def _build_error_content(
        message: str,
        context: str,
        why: str,
        how_to_fix: List[str],
        root_message: Optional[str],
    ) -> Text:
        text = Text()

        if context:
            text.append(f"{context}\n", style="dim")
            text.append("\n")

        text.append(message, style="bold red")
        text.append("\n\n")

        if root_message and root_message != message:
            text.append("Root cause: ", style="bold yellow")
            text.append(root_message, style="yellow")
            text.append("\n\n")

        text.append("Why it happened:\n", style="bold cyan")
        text.append(f"  {why}\n", style="cyan")
        text.append("\n")

        text.append("How to fix:\n", style="bold green")
        for fix in how_to_fix:
            text.append(f"  - {fix}\n", style="green")

        return text
