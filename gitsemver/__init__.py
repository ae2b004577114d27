"""git-semver - Semantic versions from git tags.

Computes the next semantic version from the tags of a git repository and
renders the commit history since the last release.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
