"""Git Backend.

The scanner needs only a small capability surface from version control:

- list tags with the commit they point at
- resolve a tag name or HEAD to a commit
- walk commits reachable from a commit, most recent first
- read the configured remotes

RepositoryBackend describes that surface. GitBackend implements it by running
the git executable, so no object storage or ref parsing happens in Python.
Tests substitute in-memory implementations.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Protocol, Tuple, Union

from gitsemver.core.exceptions import (
    GitCommandError,
    HeadNotFoundError,
    RepositoryNotFoundError,
    TagNotFoundError,
)
from gitsemver.core.logging import get_logger

logger = get_logger(__name__)

TAG_REF_PREFIX = "refs/tags/"
SHORT_HASH_LENGTH = 7
LOG_READ_SIZE = 8192

# %00 separates fields; %(*objectname) is the peeled commit of annotated tags
TAG_FORMAT = "%(refname)%00%(objectname)%00%(*objectname)"
LOG_FORMAT = "%H%n%B"


@dataclass(frozen=True)
class Commit:
    """A commit as seen by the scanner. Equality is by hash only."""

    hash: str
    message: str = field(default="", compare=False)

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]


@dataclass(frozen=True)
class Remote:
    """A configured remote and its URLs in configuration order."""

    name: str
    urls: Tuple[str, ...] = ()


class RepositoryBackend(Protocol):
    """Read-only version control operations used by the scanner."""

    def tags(self) -> List[Tuple[str, str]]:
        """Return (ref name, target commit hash) for every tag."""
        ...

    def resolve_tag(self, name: str) -> Commit:
        """Resolve a tag name (without refs/tags/) to its commit."""
        ...

    def head(self) -> Commit:
        """Return the commit HEAD points at."""
        ...

    def log(self, start: str) -> Iterator[Commit]:
        """Yield commits reachable from start, most recent first."""
        ...

    def remotes(self) -> List[Remote]:
        """Return configured remotes in configuration order."""
        ...


class GitBackend:
    """RepositoryBackend backed by the git executable.

    Args:
        path: Root directory of the working tree.
        git_executable: Name or path of the git binary.

    Raises:
        RepositoryNotFoundError: If path is not the root of a git working tree.
    """

    def __init__(self, path: Union[str, Path], git_executable: str = "git") -> None:
        self._display_path = str(path)
        self._path = Path(path)
        self._git = git_executable

        if not self._path.is_dir():
            raise RepositoryNotFoundError(self._display_path)

        # Only the root of a working tree opens; subdirectories and bare
        # repositories are rejected
        result = self._run(["rev-parse", "--show-toplevel"], check=False)
        if result.returncode != 0:
            raise RepositoryNotFoundError(self._display_path)
        toplevel = result.stdout.strip()
        if not toplevel or Path(toplevel).resolve() != self._path.resolve():
            raise RepositoryNotFoundError(self._display_path)

        logger.debug("Opened repository", path=self._display_path)

    @property
    def path(self) -> Path:
        return self._path

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a git command in the repository and capture its output."""
        command = [self._git, *args]
        try:
            result = subprocess.run(
                command,
                cwd=self._path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise GitCommandError(
                f"run {' '.join(command)}: {e}", command=command
            ) from e

        if check and result.returncode != 0:
            raise GitCommandError(
                f"{' '.join(command)}: {result.stderr.strip()}",
                command=command,
                stderr=result.stderr,
            )
        return result

    def _resolve(self, revision: str) -> str:
        """Return the commit hash for revision, or "" if it does not resolve."""
        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"], check=False
        )
        if result.returncode != 0:
            return ""
        return result.stdout.strip()

    def _commit(self, commit_hash: str) -> Commit:
        commits = self.log(commit_hash)
        try:
            return next(commits)
        finally:
            commits.close()

    def tags(self) -> List[Tuple[str, str]]:
        result = self._run(["for-each-ref", f"--format={TAG_FORMAT}", TAG_REF_PREFIX])

        tags: List[Tuple[str, str]] = []
        for line in result.stdout.splitlines():
            if not line:
                continue
            name, object_hash, peeled_hash = line.split("\0")
            tags.append((name, peeled_hash or object_hash))
        return tags

    def resolve_tag(self, name: str) -> Commit:
        commit_hash = self._resolve(f"{TAG_REF_PREFIX}{name}")
        if not commit_hash:
            raise TagNotFoundError(name)
        return self._commit(commit_hash)

    def head(self) -> Commit:
        commit_hash = self._resolve("HEAD")
        if not commit_hash:
            raise HeadNotFoundError()
        return self._commit(commit_hash)

    def log(self, start: str) -> Iterator[Commit]:
        """Stream `git log` from start.

        Each call starts a new git process. Commits are parsed as they
        arrive, and the process is killed if the consumer stops early.
        """
        command = [self._git, "log", "-z", f"--format={LOG_FORMAT}", start, "--"]
        try:
            process = subprocess.Popen(
                command,
                cwd=self._path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise GitCommandError(f"run {' '.join(command)}: {e}", command=command) from e

        try:
            buffer = b""
            while True:
                chunk = process.stdout.read(LOG_READ_SIZE)
                if not chunk:
                    break
                buffer += chunk
                *records, buffer = buffer.split(b"\0")
                for record in records:
                    yield _parse_log_record(record)

            if buffer.strip():
                yield _parse_log_record(buffer)

            stderr = process.stderr.read().decode("utf-8", errors="replace")
            if process.wait() != 0:
                raise GitCommandError(
                    f"get log from {start}: {stderr.strip()}",
                    command=command,
                    stderr=stderr,
                )
        finally:
            if process.poll() is None:
                process.kill()
            process.stdout.close()
            process.stderr.close()
            process.wait()

    def remotes(self) -> List[Remote]:
        result = self._run(
            ["config", "--get-regexp", r"^remote\..*\.url$"], check=False
        )
        # git config exits 1 when nothing matches
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise GitCommandError(
                f"list remotes: {result.stderr.strip()}", stderr=result.stderr
            )

        urls: Dict[str, List[str]] = {}
        for line in result.stdout.splitlines():
            key, _, url = line.partition(" ")
            name = key[len("remote.") : -len(".url")]
            urls.setdefault(name, []).append(url)

        return [Remote(name=name, urls=tuple(values)) for name, values in urls.items()]


def _parse_log_record(record: bytes) -> Commit:
    text = record.decode("utf-8", errors="replace").lstrip("\n")
    commit_hash, _, message = text.partition("\n")
    return Commit(hash=commit_hash, message=message)
