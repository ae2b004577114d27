"""
Tests for the exception hierarchy.

Organization
------------
- TestHierarchy: base classes and builtin compatibility
- TestMessages: constructor-built messages
- TestErrorInfo: get_error_info and get_root_cause
"""

import pytest

from gitsemver.core.exceptions import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    GitCommandError,
    GitSemverError,
    HeadNotFoundError,
    NotFoundError,
    RepositoryNotFoundError,
    TagNotFoundError,
    VersionConstraintError,
    VersionError,
    VersionGrammarError,
    VersionOverflowError,
    get_error_info,
    get_root_cause,
)


class TestHierarchy:
    """Tests for exception base classes."""

    @pytest.mark.parametrize(
        "exc_class, bases",
        [
            (VersionGrammarError, (VersionError, ValueError)),
            (VersionConstraintError, (VersionError, ValueError)),
            (VersionOverflowError, (VersionError, OverflowError)),
            (RepositoryNotFoundError, (NotFoundError, LookupError)),
            (TagNotFoundError, (NotFoundError, LookupError)),
            (HeadNotFoundError, (NotFoundError, LookupError)),
            (ConfigNotFoundError, (ConfigError,)),
            (ConfigValidationError, (ConfigError,)),
            (GitCommandError, (GitSemverError,)),
        ],
    )
    def test_bases(self, exc_class: type, bases: tuple) -> None:
        """Test each exception is catchable by its family and builtin."""
        assert issubclass(exc_class, GitSemverError)
        for base in bases:
            assert issubclass(exc_class, base)

    def test_error_codes_unique(self) -> None:
        """Test leaf exceptions carry distinct codes."""
        leaves = [
            VersionGrammarError,
            VersionConstraintError,
            VersionOverflowError,
            RepositoryNotFoundError,
            TagNotFoundError,
            HeadNotFoundError,
            GitCommandError,
            ConfigNotFoundError,
            ConfigValidationError,
        ]

        codes = [cls.error_code for cls in leaves]
        assert len(set(codes)) == len(codes)


class TestMessages:
    """Tests for messages built by the exception constructors."""

    def test_repository_not_found(self) -> None:
        """Test the path is kept and formatted."""
        exc = RepositoryNotFoundError("/tmp/nowhere")

        assert str(exc) == "open git repo /tmp/nowhere: repository does not exist"
        assert exc.path == "/tmp/nowhere"

    def test_tag_not_found(self) -> None:
        """Test the tag name is kept and formatted."""
        exc = TagNotFoundError("v1.0.0")

        assert str(exc) == "tag v1.0.0 not found"
        assert exc.tag == "v1.0.0"

    def test_head_not_found_default(self) -> None:
        """Test the default HEAD message."""
        assert str(HeadNotFoundError()) == "get repo head: reference not found"

    def test_git_command_error(self) -> None:
        """Test command and stderr are kept."""
        exc = GitCommandError("git log: fatal", command=["git", "log"], stderr="fatal")

        assert exc.command == ["git", "log"]
        assert exc.stderr == "fatal"
        assert exc.user_message == "git log: fatal"

    def test_overrides(self) -> None:
        """Test class defaults can be overridden per instance."""
        exc = ConfigValidationError(
            "bad", field_name="rc", error_code="GS-CFG-099", how_to_fix=["Fix rc"]
        )

        assert exc.error_code == "GS-CFG-099"
        assert exc.how_to_fix == ["Fix rc"]
        assert exc.field_name == "rc"
        assert ConfigValidationError.error_code == "GS-CFG-002"


class TestErrorInfo:
    """Tests for get_error_info and get_root_cause."""

    def test_package_error(self) -> None:
        """Test package errors report their own info."""
        info = get_error_info(TagNotFoundError("v1.0.0"))

        assert info["error_code"] == "GS-GIT-002"
        assert info["how_to_fix"] == TagNotFoundError.how_to_fix

    def test_foreign_error(self) -> None:
        """Test other exceptions get the generic code."""
        info = get_error_info(KeyError("x"))

        assert info["error_code"] == "GS-ERR-999"
        assert "KeyError" in info["why_it_happened"]

    def test_root_cause_follows_chain(self) -> None:
        """Test the innermost cause is returned."""
        try:
            try:
                raise OSError("disk")
            except OSError as inner:
                raise GitCommandError("git failed") from inner
        except GitCommandError as outer:
            root = outer.get_root_cause()

        assert isinstance(root, OSError)
        assert str(root) == "disk"

    def test_root_cause_of_plain_exception(self) -> None:
        """Test an exception without a chain is its own root cause."""
        exc = ValueError("x")

        assert get_root_cause(exc) is exc
