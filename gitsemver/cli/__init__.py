"""Command-line interface for git-semver."""

from gitsemver.cli.main import app, cli_main

__all__ = ["app", "cli_main"]
