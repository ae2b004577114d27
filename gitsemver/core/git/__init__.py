"""Git access and the repository scanner.

Tags are reduced to the highest semantic version; the next version and the
history since the last release are computed from it.
"""

from gitsemver.core.git.backend import (
    Commit,
    GitBackend,
    Remote,
    RepositoryBackend,
)
from gitsemver.core.git.repository import (
    SemverRepository,
    format_history_entry,
    insert_pull_request_url,
    open_repository,
    parse_tag_ref,
    reduce_tags,
)

__all__ = [
    "Commit",
    "GitBackend",
    "Remote",
    "RepositoryBackend",
    "SemverRepository",
    "format_history_entry",
    "insert_pull_request_url",
    "open_repository",
    "parse_tag_ref",
    "reduce_tags",
]
