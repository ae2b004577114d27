"""
Tests for console helpers and the ErrorRenderer.

Organization
------------
- TestTables: version_table and versions_table
- TestErrorRenderer: error panels on stderr
- TestVerboseMode: traceback toggle
"""

import pytest

from gitsemver.cli.console import (
    ErrorRenderer,
    is_verbose_mode,
    set_verbose_mode,
    version_table,
    versions_table,
)
from gitsemver.core.exceptions import GitCommandError, TagNotFoundError
from gitsemver.core.semver import parse_version


class TestTables:
    """Tests for table builders."""

    def test_version_table_rows(self) -> None:
        """Test only present components get a row."""
        table = version_table(parse_version("v1.2.3-rc1"), title="Next")

        assert table.title == "Next"
        assert table.row_count == 6

    def test_version_table_without_prefix(self) -> None:
        """Test a bare version has no prefix, prerelease or build rows."""
        assert version_table(parse_version("1.2.3")).row_count == 4

    def test_versions_table(self) -> None:
        """Test one row per version."""
        versions = [parse_version("v0.0.2"), parse_version("v0.0.1")]

        assert versions_table(versions, versions[0]).row_count == 2


class TestErrorRenderer:
    """Tests for ErrorRenderer.render."""

    def test_render_package_error(self, capsys: pytest.CaptureFixture) -> None:
        """Test the panel shows code, message and fixes."""
        ErrorRenderer.render(TagNotFoundError("v1.0.0"), context="While testing")

        err = capsys.readouterr().err
        assert "GS-GIT-002" in err
        assert "tag v1.0.0 not found" in err
        assert "How to fix" in err
        assert "While testing" in err

    def test_render_root_cause(self, capsys: pytest.CaptureFixture) -> None:
        """Test a chained cause is shown."""
        try:
            try:
                raise OSError("no such binary")
            except OSError as inner:
                raise GitCommandError("git failed") from inner
        except GitCommandError as exc:
            ErrorRenderer.render(exc, show_traceback=False)

        err = capsys.readouterr().err
        assert "Root cause" in err
        assert "no such binary" in err
        assert "Traceback" not in err

    def test_render_traceback(self, capsys: pytest.CaptureFixture) -> None:
        """Test tracebacks are shown on request."""
        try:
            raise ValueError("boom")
        except ValueError as exc:
            ErrorRenderer.render(exc, show_traceback=True)

        err = capsys.readouterr().err
        assert "GS-ERR-999" in err
        assert "Traceback" in err


class TestVerboseMode:
    """Tests for verbose mode toggle."""

    def test_toggle(self) -> None:
        """Test the flag can be set and cleared."""
        set_verbose_mode(True)
        assert is_verbose_mode() is True

        set_verbose_mode(False)
        assert is_verbose_mode() is False
