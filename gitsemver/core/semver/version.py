"""Semantic Version Model.

Parses, orders, validates, formats and increments version values of the form

    [prefix]MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]

where the prefix is any run of non-digit characters (a tag convention such
as "v"). Values are immutable: every increment returns a new Version, so one
parsed value can safely serve as the base for several hypothetical bumps.

Ordering follows SemVer 2.0.0 precedence. Build metadata and prefix never
take part in ordering, but equality also requires them to match:

    >>> parse_version("1.2.3+a").compare(parse_version("1.2.3+b"))
    0
    >>> parse_version("1.2.3+a").equals(parse_version("1.2.3+b"))
    False

Grammar errors carry stable, component-specific messages such as
'major number must not contain leading zeroes "01"'.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Tuple

from gitsemver.core.exceptions import (
    VersionConstraintError,
    VersionGrammarError,
    VersionOverflowError,
)

# Version numbers are unsigned 64-bit values
MAX_VERSION_NUMBER = 2**64 - 1

NUMBERS = frozenset(string.digits)
ALPHANUM = frozenset(string.ascii_letters + string.digits + "-")


def _contains_only(value: str, allowed: frozenset) -> bool:
    return all(char in allowed for char in value)


def _has_leading_zeroes(value: str) -> bool:
    return len(value) > 1 and value[0] == "0"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _cmp(a: Any, b: Any) -> int:
    if a == b:
        return 0
    return -1 if a < b else 1


@dataclass(frozen=True)
class PreReleaseIdentifier:
    """One dot-separated segment of a prerelease tag.

    Numeric identifiers use ``number``; all others use ``text``.
    """

    text: str = ""
    number: int = 0
    is_numeric: bool = False

    def compare(self, other: PreReleaseIdentifier) -> int:
        """Compare two identifiers.

        Numeric identifiers compare by value, text identifiers by code point,
        and a numeric identifier always orders below a text one.

        Returns:
            -1, 0 or 1.
        """
        if self.is_numeric and other.is_numeric:
            return _cmp(self.number, other.number)
        if self.is_numeric:
            return -1
        if other.is_numeric:
            return 1
        return _cmp(self.text, other.text)

    def __str__(self) -> str:
        if self.is_numeric:
            return str(self.number)
        return self.text


def new_prerelease_identifier(value: str) -> PreReleaseIdentifier:
    """Parse a single prerelease identifier.

    Args:
        value: Identifier text, e.g. "rc1" or "4".

    Returns:
        PreReleaseIdentifier.

    Raises:
        VersionGrammarError: If the identifier is empty, has a leading zero
            (numeric) or contains characters outside [0-9A-Za-z-].
    """
    if len(value) == 0:
        raise VersionGrammarError("prerelease is empty")

    if _contains_only(value, NUMBERS):
        if _has_leading_zeroes(value):
            raise VersionGrammarError(
                f"numeric PreRelease version must not contain leading zeroes {_quote(value)}"
            )
        number = int(value)
        if number > MAX_VERSION_NUMBER:
            raise VersionGrammarError(
                f"numeric PreRelease version out of range {_quote(value)}"
            )
        return PreReleaseIdentifier(number=number, is_numeric=True)

    if _contains_only(value, ALPHANUM):
        return PreReleaseIdentifier(text=value)

    raise VersionGrammarError(f"invalid character(s) found in prerelease {_quote(value)}")


def new_build_identifier(value: str) -> str:
    """Validate a single build metadata identifier.

    Raises:
        VersionGrammarError: If the identifier is empty or has invalid characters.
    """
    if len(value) == 0:
        raise VersionGrammarError("buildversion is empty")
    if not _contains_only(value, ALPHANUM):
        raise VersionGrammarError(
            f"invalid character(s) found in build meta data {_quote(value)}"
        )
    return value


@dataclass(frozen=True)
class Version:
    """Immutable semantic version with an optional prefix.

    Lists passed for ``prerelease`` or ``build`` are stored as tuples.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    prerelease: Tuple[PreReleaseIdentifier, ...] = ()
    build: Tuple[str, ...] = ()
    prefix: str = ""

    def __post_init__(self) -> None:
        assert self.major >= 0, "major must be non-negative"
        assert self.minor >= 0, "minor must be non-negative"
        assert self.patch >= 0, "patch must be non-negative"
        object.__setattr__(self, "prerelease", tuple(self.prerelease))
        object.__setattr__(self, "build", tuple(self.build))

    def __str__(self) -> str:
        """Format as version string (e.g., "v1.2.3-rc1+build5")."""
        version = f"{self.release_key}"
        if self.prerelease:
            version += f"-{self.prerelease_string}"
        if self.build:
            version += "+" + ".".join(self.build)
        return version

    @property
    def release_key(self) -> str:
        """Prefix plus MAJOR.MINOR.PATCH, without prerelease or build."""
        return f"{self.prefix}{self.major}.{self.minor}.{self.patch}"

    @property
    def prerelease_string(self) -> str:
        return ".".join(str(identifier) for identifier in self.prerelease)

    @property
    def is_prerelease(self) -> bool:
        return len(self.prerelease) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "prefix": self.prefix,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "prerelease": self.prerelease_string or None,
            "build_metadata": ".".join(self.build) or None,
            "string": str(self),
        }

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def compare(self, other: Version) -> int:
        """Compare precedence with another version.

        Major, minor and patch compare numerically. A final release is greater
        than any prerelease of the same triple; prereleases compare identifier
        by identifier and a shorter sequence with an equal head is lesser.
        Build metadata and prefix are ignored.

        Returns:
            -1 if self < other, 0 if equal, 1 if self > other.
        """
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if mine != theirs:
                return _cmp(mine, theirs)

        if not self.prerelease and not other.prerelease:
            return 0
        if not self.prerelease:
            return 1
        if not other.prerelease:
            return -1

        for mine_id, theirs_id in zip(self.prerelease, other.prerelease):
            result = mine_id.compare(theirs_id)
            if result != 0:
                return result

        return _cmp(len(self.prerelease), len(other.prerelease))

    def equals(self, other: Version) -> bool:
        """Equal precedence plus identical build metadata and prefix."""
        return (
            self.compare(other) == 0
            and self.build == other.build
            and self.prefix == other.prefix
        )

    def ne(self, other: Version) -> bool:
        return not self.equals(other)

    def gt(self, other: Version) -> bool:
        return self.compare(other) == 1

    def gte(self, other: Version) -> bool:
        return self.compare(other) >= 0

    def lt(self, other: Version) -> bool:
        return self.compare(other) == -1

    def lte(self, other: Version) -> bool:
        return self.compare(other) <= 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.lt(other)

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.lte(other)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.gt(other)

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.gte(other)

    # ------------------------------------------------------------------
    # Increments
    # ------------------------------------------------------------------

    def increment_major(self) -> Version:
        """Return a copy with major + 1, minor and patch reset and no prerelease."""
        _check_overflow("major", self.major)
        return replace(self, major=self.major + 1, minor=0, patch=0, prerelease=())

    def increment_minor(self) -> Version:
        """Return a copy with minor + 1, patch reset and no prerelease."""
        _check_overflow("minor", self.minor)
        return replace(self, minor=self.minor + 1, patch=0, prerelease=())

    def increment_patch(self) -> Version:
        """Return a copy with patch + 1 and no prerelease."""
        _check_overflow("patch", self.patch)
        return replace(self, patch=self.patch + 1, prerelease=())

    def with_prerelease(self, prerelease: Iterable[PreReleaseIdentifier]) -> Version:
        """Return a copy whose prerelease sequence is replaced."""
        return replace(self, prerelease=tuple(prerelease))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Check prerelease and build identifiers of a hand-built version.

        Raises:
            VersionGrammarError: On the first empty or invalid identifier.
        """
        for identifier in self.prerelease:
            if identifier.is_numeric:
                continue
            if len(identifier.text) == 0:
                raise VersionGrammarError(
                    f"prerelease can not be empty {_quote(identifier.text)}"
                )
            if not _contains_only(identifier.text, ALPHANUM):
                raise VersionGrammarError(
                    f"invalid character(s) found in prerelease {_quote(identifier.text)}"
                )

        for build in self.build:
            if len(build) == 0:
                raise VersionGrammarError(f"build meta data can not be empty {_quote(build)}")
            if not _contains_only(build, ALPHANUM):
                raise VersionGrammarError(
                    f"invalid character(s) found in build meta data {_quote(build)}"
                )


def _check_overflow(component: str, value: int) -> None:
    if value >= MAX_VERSION_NUMBER:
        raise VersionOverflowError(f"{component} number overflow {_quote(str(value))}")


def _split_prefix(text: str) -> Tuple[str, str]:
    """Split off the leading run of non-digit characters."""
    for index, char in enumerate(text):
        if char in NUMBERS:
            return text[:index], text[index:]
    return text, ""


def _parse_number(value: str, component: str) -> int:
    if len(value) == 0 or not _contains_only(value, NUMBERS):
        raise VersionGrammarError(
            f"invalid character(s) found in {component} number {_quote(value)}"
        )
    if _has_leading_zeroes(value):
        raise VersionGrammarError(
            f"{component} number must not contain leading zeroes {_quote(value)}"
        )
    number = int(value)
    if number > MAX_VERSION_NUMBER:
        raise VersionGrammarError(f"{component} number out of range {_quote(value)}")
    return number


def parse_version(text: str) -> Version:
    """Parse a version string strictly.

    Args:
        text: Version string, e.g. "v1.2.3-rc1+build5".

    Returns:
        Parsed Version.

    Raises:
        VersionGrammarError: With a message naming the failing component.
    """
    if len(text) == 0:
        raise VersionGrammarError("version string empty")

    prefix, rest = _split_prefix(text)
    parts = rest.split(".", 2)
    if len(parts) != 3:
        raise VersionGrammarError("no Major.Minor.Patch elements found")

    major = _parse_number(parts[0], "major")
    minor = _parse_number(parts[1], "minor")

    patch_str = parts[2]
    build: List[str] = []
    prerelease: List[str] = []

    build_index = patch_str.find("+")
    if build_index != -1:
        build = patch_str[build_index + 1 :].split(".")
        patch_str = patch_str[:build_index]

    pre_index = patch_str.find("-")
    if pre_index != -1:
        prerelease = patch_str[pre_index + 1 :].split(".")
        patch_str = patch_str[:pre_index]

    patch = _parse_number(patch_str, "patch")

    identifiers = [new_prerelease_identifier(part) for part in prerelease]

    for part in build:
        if len(part) == 0:
            raise VersionGrammarError("build meta data is empty")
        if not _contains_only(part, ALPHANUM):
            raise VersionGrammarError(
                f"invalid character(s) found in build meta data {_quote(part)}"
            )

    return Version(
        major=major,
        minor=minor,
        patch=patch,
        prerelease=tuple(identifiers),
        build=tuple(build),
        prefix=prefix,
    )


def parse_tolerant(text: str) -> Version:
    """Parse a version string, accepting common sloppy forms.

    Surrounding whitespace is trimmed, leading zeroes are removed and the
    short forms MAJOR and MAJOR.MINOR are padded with zeroes.

    Raises:
        VersionConstraintError: For a short form carrying prerelease or build.
        VersionGrammarError: For anything the strict parser rejects.
    """
    text = text.strip()
    prefix, rest = _split_prefix(text)
    if len(rest) == 0:
        return parse_version(text)

    parts = rest.split(".", 2)
    for index, part in enumerate(parts):
        if len(part) > 1:
            part = part.lstrip("0")
            if len(part) == 0 or part[0] not in NUMBERS:
                part = "0" + part
            parts[index] = part

    if len(parts) < 3:
        if "+" in parts[-1] or "-" in parts[-1]:
            raise VersionConstraintError(
                "short version cannot contain PreRelease/Build meta data"
            )
        parts.extend(["0"] * (3 - len(parts)))

    return parse_version(prefix + ".".join(parts))
