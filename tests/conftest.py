"""
Shared pytest fixtures and configuration for git-semver tests.

This file is automatically discovered by pytest and provides fixtures
that can be used across all test files.

Fixture Organization
--------------------
- **sample_backend**: In-memory history tagged v0.0.1, v0.0.2, v0.0.3-rc1
- **rc_backend**: In-memory history tagged v0.0.1, v0.0.2, v0.3.0
- **git_repo**: Real repository built with the git executable
- **reset_logging**: Restores the default logging configuration
"""

import shutil
from pathlib import Path
from typing import Generator

import pytest

from gitsemver.core.logging import configure_logging
from tests.fixtures.backend import FakeBackend, make_commit
from tests.fixtures.git import GitRepoBuilder

# HEAD of the sample histories; snapshot versions use its first seven characters
SAMPLE_HEAD_HASH = "cf853924d1a8e3c26b0fa5d4fd4e4a1a7b4c6e21"


def _tagged_history(tags: list) -> FakeBackend:
    """Three tagged commits plus an untagged HEAD, oldest first."""
    commits = [
        make_commit("Initial commit\n"),
        make_commit("Add version parsing (#3)\n"),
        make_commit("Fix release candidate bump\n"),
        make_commit("Document history output\n", commit_hash=SAMPLE_HEAD_HASH),
    ]
    tag_map = {name: commits[index].hash for index, name in enumerate(tags)}
    return FakeBackend(commits=commits, tags=tag_map)


# ============================================================================
# Backend Fixtures
# ============================================================================


@pytest.fixture
def sample_backend() -> FakeBackend:
    """History whose newest tag is a release candidate."""
    return _tagged_history(["v0.0.1", "v0.0.2", "v0.0.3-rc1"])


@pytest.fixture
def rc_backend() -> FakeBackend:
    """History whose newest tag is a final release."""
    return _tagged_history(["v0.0.1", "v0.0.2", "v0.3.0"])


# ============================================================================
# Git Repository Fixtures
# ============================================================================


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """Empty repository in a temporary directory.

    Skipped when the git executable is not installed.

    Example:
        def test_tags(git_repo):
            git_repo.commit("Initial commit")
            git_repo.tag("v0.0.1")
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitRepoBuilder(tmp_path / "repo")


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture
def reset_logging() -> Generator[None, None, None]:
    """Restore default logging after a test changes it."""
    yield
    configure_logging(level="WARNING")
