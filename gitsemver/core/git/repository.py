"""Repository Scanner.

Reduces the tags of a repository to the single highest semantic version,
computes the next version from it and renders the commit history since that
version was tagged.

    repo = SemverRepository.open("./", ScanConfig(prefix="v"))
    repo.highest                                  # v0.0.2
    repo.increment(minor=True)                    # v0.1.0
    repo.increment(release_candidate=True)        # v0.0.2-rc1
    print(repo.history(line_prefix="  "))

Tag selection
-------------
1. Strip refs/tags/ and parse strictly; unparseable tags and tags with a
   different prefix are skipped (repositories carry unrelated tags).
2. Tags sharing a release key (prefix + MAJOR.MINOR.PATCH) are deduplicated,
   keeping the greatest. This only decides which Version represents that
   key in ``versions``; it does not gate the highest version.
3. Prerelease tags count only when release candidates are included and the
   first identifier starts with "rc".
4. Versions at or above ``below`` are skipped.
5. The rest fold to the greatest version, starting from prefix + 0.0.0.
"""

from __future__ import annotations

import itertools
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from gitsemver.core.config import ScanConfig
from gitsemver.core.exceptions import TagNotFoundError, VersionGrammarError
from gitsemver.core.git.backend import (
    TAG_REF_PREFIX,
    Commit,
    GitBackend,
    RepositoryBackend,
)
from gitsemver.core.logging import get_logger
from gitsemver.core.semver import (
    PreReleaseIdentifier,
    Version,
    new_prerelease_identifier,
    parse_version,
)

logger = get_logger(__name__)

RELEASE_CANDIDATE_PREFIX = "rc"
SNAPSHOT_PREFIX = "snapshot-"

# "(#12)" at the end of a line or of the text
PR_NUMBER_PATTERN = re.compile(r"\(#([0-9]+)\)(\Z|\n)")
SSH_HOST_AND_PATH_PATTERN = re.compile(r"git@(.+):(.*)\.git")
GITHUB_URL_PREFIXES = ("git@github.com", "https://github.com")


def parse_tag_ref(ref: str) -> Version:
    """Parse a tag ref such as "refs/tags/v1.2.3".

    Raises:
        VersionGrammarError: If the tag name is not a version.
    """
    return parse_version(ref.replace(TAG_REF_PREFIX, "", 1))


def _counts_as_release(version: Version, config: ScanConfig) -> bool:
    if version.prerelease:
        if not config.include_rc:
            return False
        if not str(version.prerelease[0]).startswith(RELEASE_CANDIDATE_PREFIX):
            return False
    if config.below is not None and version.gte(config.below):
        return False
    return True


def reduce_tags(
    refs: List[Tuple[str, str]], config: ScanConfig
) -> Tuple[Version, Dict[str, Version]]:
    """Reduce tag refs to the highest version under config.

    Args:
        refs: (ref name, commit hash) pairs.
        config: Prefix, bound and release-candidate constraints.

    Returns:
        Tuple of (highest version, release key -> deduplicated version).
    """
    highest = Version(prefix=config.prefix)
    versions: Dict[str, Version] = {}

    for ref, _ in refs:
        try:
            version = parse_tag_ref(ref)
        except VersionGrammarError as e:
            logger.debug("Skipping tag", tag=ref, reason=str(e))
            continue

        if version.prefix != config.prefix:
            logger.debug("Skipping tag with other prefix", tag=ref)
            continue

        key = version.release_key
        known = versions.get(key)
        if known is None or version.gt(known):
            versions[key] = version

        if not _counts_as_release(version, config):
            continue
        if version.gt(highest):
            highest = version

    return highest, versions


def _next_release_candidate(
    prerelease: Tuple[PreReleaseIdentifier, ...],
) -> Tuple[Tuple[PreReleaseIdentifier, ...], bool]:
    """Continue an existing rc series or start a new one.

    Returns:
        Tuple of (new prerelease sequence, whether an existing series continued).
    """
    for index, identifier in enumerate(prerelease):
        if identifier.is_numeric or not identifier.text.startswith(RELEASE_CANDIDATE_PREFIX):
            continue

        digits = identifier.text[len(RELEASE_CANDIDATE_PREFIX) :]
        if not digits.isascii() or not digits.isdigit():
            raise VersionGrammarError(
                f'parse rc number: invalid release candidate identifier "{identifier.text}"'
            )
        bumped = new_prerelease_identifier(f"{RELEASE_CANDIDATE_PREFIX}{int(digits) + 1}")
        return prerelease[:index] + (bumped,) + prerelease[index + 1 :], True

    return (new_prerelease_identifier(f"{RELEASE_CANDIDATE_PREFIX}1"),), False


def github_base_url(remote_url: str) -> Optional[str]:
    """Return the HTTPS base URL of a GitHub remote, or None for other hosts."""
    if not remote_url.startswith(GITHUB_URL_PREFIXES):
        return None
    return SSH_HOST_AND_PATH_PATTERN.sub(r"https://\1/\2", remote_url)


def insert_pull_request_url(message: str, remote_url: Optional[str]) -> str:
    """Link GitHub pull request references in a commit message.

    "(#12)" at the end of a line becomes "[(#12)](<repo url>/pull/12)".
    Messages are returned unchanged for non-GitHub or missing remotes.
    """
    if not remote_url:
        return message
    base_url = github_base_url(remote_url)
    if base_url is None:
        return message

    return PR_NUMBER_PATTERN.sub(
        lambda m: f"[(#{m.group(1)})]({base_url}/pull/{m.group(1)}){m.group(2)}",
        message,
    )


def format_history_entry(commit: Commit, line_prefix: str = "") -> str:
    """Format one commit as a history entry.

    The first line is "<prefix>* <short hash> <subject>"; continuation lines
    are indented by two spaces and every line carries the prefix. Entries end
    with a blank line.
    """
    message = commit.message.removesuffix("\n").replace("\n", "\n  ")
    entry = f"{line_prefix}* {commit.short_hash} {message}\n"
    if line_prefix:
        entry = entry.replace("\n", f"\n{line_prefix}")
    return entry + "\n"


class SemverRepository:
    """Highest-version view of a repository.

    Use SemverRepository.open() (or open_repository()) rather than the
    constructor. The resolved highest version never changes after opening.
    """

    def __init__(
        self,
        backend: RepositoryBackend,
        config: ScanConfig,
        highest: Version,
        versions: Dict[str, Version],
    ) -> None:
        self._backend = backend
        self._config = config
        self._highest = highest
        self._versions = dict(versions)

    @classmethod
    def open(
        cls,
        path: Union[str, Path] = "./",
        config: Optional[ScanConfig] = None,
        backend: Optional[RepositoryBackend] = None,
    ) -> "SemverRepository":
        """Open a repository and resolve its highest version.

        Args:
            path: Repository directory (ignored when backend is given).
            config: Scan constraints; defaults to no prefix, no bound, no rc.
            backend: Alternative RepositoryBackend.

        Raises:
            RepositoryNotFoundError: If path is not a git repository.
        """
        config = config or ScanConfig()
        if backend is None:
            backend = GitBackend(path)

        highest, versions = reduce_tags(backend.tags(), config)
        logger.debug(
            "Resolved highest version",
            highest=str(highest),
            tags=len(versions),
            prefix=config.prefix,
        )
        return cls(backend, config, highest, versions)

    @property
    def highest(self) -> Version:
        return self._highest

    @property
    def config(self) -> ScanConfig:
        return self._config

    @property
    def versions(self) -> List[Version]:
        """Deduplicated version tags with the configured prefix, greatest first."""
        return sorted(self._versions.values(), reverse=True)

    def increment(
        self,
        major: bool = False,
        minor: bool = False,
        patch: bool = False,
        snapshot: bool = False,
        release_candidate: bool = False,
    ) -> Version:
        """Compute the next version from the highest one.

        Steps run in a fixed order, and later steps may override earlier ones:

        1. release_candidate: continue an existing "rcN" identifier as
           "rcN+1" and drop the numeric bumps, or start "rc1". Starting a new
           series keeps the numeric bumps, so major + rc on 1.2.3 gives
           2.0.0-rc1.
        2. patch, then minor, then major.
        3. snapshot: replace the prerelease with "snapshot-<short HEAD hash>".

        Nothing is tagged or written.

        Raises:
            VersionOverflowError: If a bumped component would overflow.
            VersionGrammarError: If an existing rc identifier has no number.
            HeadNotFoundError: If snapshot is requested and HEAD is unresolvable.
        """
        version = self._highest
        candidate: Optional[Tuple[PreReleaseIdentifier, ...]] = None

        if release_candidate:
            candidate, continued = _next_release_candidate(version.prerelease)
            if continued:
                major = minor = patch = False
            version = version.with_prerelease(candidate)

        if patch:
            version = version.increment_patch()
        if minor:
            version = version.increment_minor()
        if major:
            version = version.increment_major()

        # Numeric bumps clear the prerelease; the rc from step 1 survives them
        if candidate is not None:
            version = version.with_prerelease(candidate)

        if snapshot:
            head = self._backend.head()
            version = version.with_prerelease(
                (new_prerelease_identifier(f"{SNAPSHOT_PREFIX}{head.short_hash}"),)
            )

        logger.debug("Incremented version", base=str(self._highest), result=str(version))
        return version

    def _boundary_commit(self) -> Optional[Commit]:
        """Most recent commit of the highest tag's history, if the tag exists."""
        tag = str(self._highest)
        try:
            tagged = self._backend.resolve_tag(tag)
        except TagNotFoundError:
            logger.warning(f"Tag {tag} not found, including the entire history")
            return None

        commits = self._backend.log(tagged.hash)
        try:
            return next(commits, None)
        finally:
            commits.close()

    def history(self, line_prefix: str = "") -> str:
        """Render commits since the highest tag.

        Args:
            line_prefix: Text put in front of every line.

        Returns:
            Concatenated entries, newest first. GitHub pull request references
            are turned into links when the first remote is on GitHub.

        Raises:
            HeadNotFoundError: If HEAD does not resolve.
        """
        head = self._backend.head()
        boundary = self._boundary_commit()
        if boundary is not None:
            logger.debug("History boundary", commit=boundary.short_hash)

        remote_url = self._first_remote_url()

        commits = self._backend.log(head.hash)
        try:
            unreleased = itertools.takewhile(lambda c: c != boundary, commits)
            entries = [format_history_entry(commit, line_prefix) for commit in unreleased]
        finally:
            commits.close()

        return "".join(insert_pull_request_url(entry, remote_url) for entry in entries)

    def _first_remote_url(self) -> Optional[str]:
        remotes = self._backend.remotes()
        if not remotes or not remotes[0].urls:
            return None
        return remotes[0].urls[0]


def open_repository(
    path: Union[str, Path] = "./",
    config: Optional[ScanConfig] = None,
    backend: Optional[RepositoryBackend] = None,
) -> SemverRepository:
    """Factory function to open a SemverRepository.

    Args:
        path: Repository directory.
        config: Scan constraints.
        backend: Alternative RepositoryBackend.

    Returns:
        Opened SemverRepository.
    """
    return SemverRepository.open(path, config, backend)
