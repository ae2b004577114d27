"""
Centralized Exception Hierarchy for git-semver.

All exceptions raised by the package inherit from GitSemverError, so the CLI
can render any of them the same way.

Each exception includes:
- error_code: Unique identifier (e.g., "GS-VER-001")
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue

Usage
-----
    from gitsemver.core.exceptions import GitSemverError, VersionGrammarError

    try:
        version = parse_version(text)
    except VersionGrammarError as e:
        logger.error(f"Invalid version: {e}")

Exception Hierarchy
-------------------
    GitSemverError (base)
    ├── VersionError
    │   ├── VersionGrammarError
    │   ├── VersionConstraintError
    │   └── VersionOverflowError
    ├── NotFoundError
    │   ├── RepositoryNotFoundError
    │   ├── TagNotFoundError
    │   └── HeadNotFoundError
    ├── GitCommandError
    └── ConfigError
        ├── ConfigNotFoundError
        └── ConfigValidationError

Tags that fail to parse while scanning a repository are not errors; the
scanner skips them.
"""

from typing import Any, Dict, List, Optional


def get_root_cause(exc: BaseException) -> BaseException:
    """Extract the root cause from a chain of exceptions.

    Follows nested __cause__ and __context__ attributes to find
    the original error that started the chain.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        # Prefer explicit cause over implicit context
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class GitSemverError(Exception):
    """
    Base exception for all git-semver errors.

    Example
    -------
        try:
            repo = SemverRepository.open(path, config)
        except GitSemverError as e:
            print(f"{e.error_code}: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    # Default error info - subclasses should override
    error_code: str = "GS-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize GitSemverError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "GS-GIT-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(message)

        # Override class defaults if provided
        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Version Exceptions
# ============================================================================


class VersionError(GitSemverError):
    """Base exception for version model errors."""

    error_code = "GS-VER-000"
    why_it_happened = "A version value could not be built or changed"


class VersionGrammarError(VersionError, ValueError):
    """
    Raised when a string does not follow the version grammar.

    The message names the component and the offending value, e.g.
    'major number must not contain leading zeroes "01"'.
    """

    error_code = "GS-VER-001"
    why_it_happened = (
        "The text is not a MAJOR.MINOR.PATCH[-prerelease][+build] version, "
        "optionally preceded by a non-numeric prefix"
    )
    how_to_fix = [
        "Write numeric components without leading zeroes (1.2.3, not 01.02.03)",
        "Use only [0-9A-Za-z-] in prerelease and build identifiers",
        "Use 'git-semver validate --tolerant' to accept short forms like 1.2",
    ]


class VersionConstraintError(VersionError, ValueError):
    """
    Raised when tolerant parsing is given a short form with metadata.

    Example
    -------
        parse_tolerant("1.0-alpha1")
        # Raises: VersionConstraintError("short version cannot contain ...")
    """

    error_code = "GS-VER-002"
    why_it_happened = (
        "Short versions (MAJOR or MAJOR.MINOR) cannot carry prerelease or "
        "build metadata"
    )
    how_to_fix = [
        "Write all three components when adding metadata (1.0.0-alpha1)",
    ]


class VersionOverflowError(VersionError, OverflowError):
    """Raised when an increment would exceed the largest version number."""

    error_code = "GS-VER-003"
    why_it_happened = "Version numbers are limited to unsigned 64-bit values"
    how_to_fix = ["Check the highest tag in the repository for a bogus value"]


# ============================================================================
# Repository Exceptions
# ============================================================================


class NotFoundError(GitSemverError, LookupError):
    """
    Base exception for missing repository objects.

    These indicate a missing precondition and are never retried.
    """

    error_code = "GS-GIT-000"
    why_it_happened = "A git object required by the operation does not exist"


class RepositoryNotFoundError(NotFoundError):
    """Raised when the given path is not a git repository."""

    error_code = "GS-GIT-001"
    why_it_happened = "The path does not point into a git working tree"
    how_to_fix = [
        "Pass the repository directory with --repo",
        "Run 'git status' in that directory to confirm it is a repository",
    ]

    def __init__(self, path: str, **kwargs: Any) -> None:
        self.path = path
        super().__init__(f"open git repo {path}: repository does not exist", **kwargs)


class TagNotFoundError(NotFoundError):
    """Raised when a tag name cannot be resolved to a commit."""

    error_code = "GS-GIT-002"
    why_it_happened = "No tag with that name exists in the repository"
    how_to_fix = [
        "List tags with 'git tag'",
        "Fetch tags from the remote with 'git fetch --tags'",
    ]

    def __init__(self, tag: str, **kwargs: Any) -> None:
        self.tag = tag
        super().__init__(f"tag {tag} not found", **kwargs)


class HeadNotFoundError(NotFoundError):
    """Raised when HEAD does not point to a commit (e.g. empty repository)."""

    error_code = "GS-GIT-003"
    why_it_happened = "HEAD does not resolve to a commit"
    how_to_fix = [
        "Create at least one commit",
        "Check out a branch or commit",
    ]

    def __init__(self, message: str = "get repo head: reference not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class GitCommandError(GitSemverError):
    """
    Raised when the git executable fails unexpectedly.

    Attributes:
        command: The git command line that failed
        stderr: Captured standard error, if any
    """

    error_code = "GS-GIT-004"
    why_it_happened = "A git command exited with an error"
    how_to_fix = [
        "Check that git is installed and on PATH: git --version",
        "Run the command shown above by hand to see the full output",
    ]

    def __init__(
        self, message: str, command: Optional[List[str]] = None, stderr: str = "", **kwargs: Any
    ) -> None:
        self.command = command or []
        self.stderr = stderr
        super().__init__(message, **kwargs)


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(GitSemverError):
    """Base exception for configuration errors."""

    error_code = "GS-CFG-000"
    why_it_happened = "The configuration could not be loaded"


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""

    error_code = "GS-CFG-001"
    why_it_happened = "The configuration file passed with --config does not exist"
    how_to_fix = [
        "Check the path passed with --config",
        "Omit --config to use .git-semver.yaml in the repository root",
    ]


class ConfigValidationError(ConfigError):
    """
    Raised when a configuration file is malformed.

    Attributes:
        field_name: The offending key, if known
    """

    error_code = "GS-CFG-002"
    why_it_happened = "The configuration file is not valid YAML or has unknown keys"
    how_to_fix = [
        "Validate YAML syntax: yamllint .git-semver.yaml",
        "Allowed keys: prefix, below, rc, msg_prefix",
    ]

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs: Any) -> None:
        self.field_name = field_name
        super().__init__(message, **kwargs)


def get_error_info(exc: BaseException) -> Dict[str, Any]:
    """Get helpful error information for any exception.

    Args:
        exc: Exception to get info for

    Returns:
        Dictionary with error_code, why_it_happened, how_to_fix
    """
    if isinstance(exc, GitSemverError):
        return {
            "error_code": exc.error_code,
            "why_it_happened": exc.why_it_happened,
            "how_to_fix": exc.how_to_fix,
        }

    return {
        "error_code": "GS-ERR-999",
        "why_it_happened": f"An unexpected {type(exc).__name__} occurred",
        "how_to_fix": ["Run with --debug for the full traceback"],
    }
