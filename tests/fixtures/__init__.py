"""
Fixture modules for git-semver tests.

Modules
-------
- backend: In-memory RepositoryBackend with a linear history
- git: Helpers that build real repositories with the git executable
"""

from tests.fixtures.backend import FakeBackend, make_commit

__all__ = ["FakeBackend", "make_commit"]
