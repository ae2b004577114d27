"""
Tests for the git-semver command line.

Test Strategy
-------------
- Invoke the Typer app through typer.testing.CliRunner
- Swap the repository opener for one backed by FakeBackend so output is exact
- One integration test runs against a real repository

Organization
------------
- TestRootCommand: --version, help and the version command
- TestNext: next version output and flags
- TestQueries: highest, tags and history
- TestValidate: validate command
- TestConfigFile: .git-semver.yaml handling
- TestErrors: error panels and exit codes
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from gitsemver import __version__
from gitsemver.cli import main as cli_main_module
from gitsemver.cli.main import app
from gitsemver.core.git import SemverRepository
from tests.fixtures.backend import FakeBackend
from tests.fixtures.git import GitRepoBuilder

runner = CliRunner()


@pytest.fixture
def use_backend(monkeypatch: pytest.MonkeyPatch):
    """Route repository commands to an in-memory backend."""

    def install(backend: FakeBackend) -> FakeBackend:
        def fake_open(path, config=None):
            return SemverRepository.open(path, config, backend=backend)

        monkeypatch.setattr(cli_main_module, "open_repository", fake_open)
        return backend

    return install


class TestRootCommand:
    """Tests for top-level options and the version command."""

    def test_version_flag(self) -> None:
        """Test --version prints the tool version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.output == f"git-semver {__version__}\n"

    def test_version_command(self) -> None:
        """Test the version command prints the tool version."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert result.output == f"Version: {__version__}\n"

    def test_help_without_command(self) -> None:
        """Test running without a command shows help."""
        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "next" in result.output
        assert "history" in result.output


class TestNext:
    """Tests for the next command."""

    @pytest.mark.parametrize(
        "args, expected",
        [
            ([], "v0.0.3"),
            (["--no-patch"], "v0.0.2"),
            (["--minor"], "v0.1.0"),
            (["--major"], "v1.0.0"),
            (["--rc"], "v0.0.3-rc2"),
            (["--snapshot"], "v0.0.3-snapshot-cf85392"),
        ],
    )
    def test_next(
        self, use_backend, sample_backend: FakeBackend, args: list, expected: str
    ) -> None:
        """Test flag combinations against tags v0.0.1, v0.0.2, v0.0.3-rc1."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["next", "--prefix", "v", *args])

        assert result.exit_code == 0, result.output
        assert result.output == f"{expected}\n"

    def test_rc_starts_new_series(self, use_backend, rc_backend: FakeBackend) -> None:
        """Test --rc on a final release starts rc1 after the patch bump."""
        use_backend(rc_backend)

        result = runner.invoke(app, ["next", "--prefix", "v", "--rc"])

        assert result.output == "v0.3.1-rc1\n"

    def test_below(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test --below limits the base version."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["next", "--prefix", "v", "--below", "v0.0.2"])

        assert result.output == "v0.0.2\n"


class TestQueries:
    """Tests for highest, tags and history."""

    def test_highest(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test highest prints the bare version."""
        use_backend(sample_backend)

        assert runner.invoke(app, ["highest", "--prefix", "v"]).output == "v0.0.2\n"

    def test_highest_with_rc(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test --rc lets release candidates win."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["highest", "--prefix", "v", "--rc"])

        assert result.output == "v0.0.3-rc1\n"

    def test_highest_details(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test --details renders a component table."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["highest", "--prefix", "v", "--details"])

        assert result.exit_code == 0
        assert "Highest Version" in result.output
        assert "Patch" in result.output

    def test_tags(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test tags lists every version tag."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["tags", "--prefix", "v"])

        assert result.exit_code == 0
        for tag in ("v0.0.1", "v0.0.2", "v0.0.3-rc1"):
            assert tag in result.output

    def test_tags_empty(self, use_backend) -> None:
        """Test a repository without version tags says so."""
        use_backend(FakeBackend())

        result = runner.invoke(app, ["tags", "--prefix", "v"])

        assert result.exit_code == 0
        assert "No version tags found" in result.output

    def test_history(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test history prints entries since the highest tag."""
        use_backend(sample_backend)
        head, fix = sample_backend.commits[3], sample_backend.commits[2]

        result = runner.invoke(app, ["history", "--prefix", "v", "--msg-prefix", "  "])

        assert result.exit_code == 0
        assert result.output == (
            f"  * {head.short_hash} Document history output\n  \n"
            f"  * {fix.short_hash} Fix release candidate bump\n  \n"
        )


class TestValidate:
    """Tests for the validate command."""

    def test_valid(self) -> None:
        """Test a valid version is accepted and shown."""
        result = runner.invoke(app, ["validate", "v1.2.3-rc1"])

        assert result.exit_code == 0
        assert "Valid version: v1.2.3-rc1" in result.output

    def test_invalid(self) -> None:
        """Test a short form is rejected by the strict grammar."""
        result = runner.invoke(app, ["validate", "1.2"])

        assert result.exit_code == 1
        assert "Invalid version string: 1.2" in result.output
        assert "no Major.Minor.Patch elements found" in result.output

    def test_tolerant(self) -> None:
        """Test --tolerant pads short forms."""
        result = runner.invoke(app, ["validate", "--tolerant", "1.2"])

        assert result.exit_code == 0
        assert "Valid version: 1.2.0" in result.output


class TestConfigFile:
    """Tests for reading .git-semver.yaml from the repository."""

    def test_prefix_from_file(
        self, use_backend, sample_backend: FakeBackend, tmp_path: Path
    ) -> None:
        """Test the file prefix applies without a flag."""
        use_backend(sample_backend)
        (tmp_path / ".git-semver.yaml").write_text("prefix: v\nrc: true\n")

        result = runner.invoke(app, ["highest", "--repo", str(tmp_path)])

        assert result.output == "v0.0.3-rc1\n"

    def test_flag_overrides_file(
        self, use_backend, sample_backend: FakeBackend, tmp_path: Path
    ) -> None:
        """Test --no-rc beats rc: true in the file."""
        use_backend(sample_backend)
        (tmp_path / ".git-semver.yaml").write_text("prefix: v\nrc: true\n")

        result = runner.invoke(app, ["highest", "--repo", str(tmp_path), "--no-rc"])

        assert result.output == "v0.0.2\n"


class TestErrors:
    """Tests for error rendering and exit codes."""

    def test_missing_repository(self, tmp_path: Path) -> None:
        """Test a missing repository exits 1 with its error code."""
        result = runner.invoke(app, ["highest", "--repo", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "GS-GIT-001" in result.output

    def test_missing_config(self, tmp_path: Path) -> None:
        """Test a missing --config file exits 1 with its error code."""
        result = runner.invoke(
            app, ["next", "--config", str(tmp_path / "missing.yaml")]
        )

        assert result.exit_code == 1
        assert "GS-CFG-001" in result.output

    def test_invalid_below(self, use_backend, sample_backend: FakeBackend) -> None:
        """Test a malformed --below value is reported."""
        use_backend(sample_backend)

        result = runner.invoke(app, ["next", "--below", "v1"])

        assert result.exit_code == 1
        assert "GS-VER-001" in result.output


@pytest.mark.integration
class TestOnRealRepository:
    """Tests for the CLI against a repository built with git."""

    def test_next_and_history(self, git_repo: GitRepoBuilder) -> None:
        """Test next and history read the repository given with --repo."""
        git_repo.commit("Initial commit")
        git_repo.tag("v1.4.0")
        git_repo.commit("Add feature")

        next_result = runner.invoke(
            app, ["next", "--repo", str(git_repo.path), "--prefix", "v", "--minor"]
        )
        history_result = runner.invoke(
            app, ["history", "--repo", str(git_repo.path), "--prefix", "v"]
        )

        assert next_result.output == "v1.5.0\n"
        assert history_result.output.startswith("* ")
        assert "Add feature" in history_result.output
        assert "Initial commit" not in history_result.output
