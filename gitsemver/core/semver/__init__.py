"""Semantic Version Model.

Strict and tolerant parsing, SemVer precedence and pure increments for
prefixed version strings such as "v1.2.3-rc1".
"""

from gitsemver.core.semver.version import (
    MAX_VERSION_NUMBER,
    PreReleaseIdentifier,
    Version,
    new_build_identifier,
    new_prerelease_identifier,
    parse_tolerant,
    parse_version,
)

__all__ = [
    "MAX_VERSION_NUMBER",
    "PreReleaseIdentifier",
    "Version",
    "new_build_identifier",
    "new_prerelease_identifier",
    "parse_tolerant",
    "parse_version",
]
