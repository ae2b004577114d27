"""
Configuration for git-semver.

Two layers:

    .git-semver.yaml (optional)  +  CLI flags
               ↓
    load_settings() → Settings
               ↓
    Settings.to_scan_config() → ScanConfig → SemverRepository.open()

ScanConfig is the immutable value the scanner is opened with. Settings holds
everything a command invocation needs, including where the repository is.
Both are built once at the entry point and passed down; there is no global
settings registry.

Config File
-----------
    # .git-semver.yaml
    prefix: v
    below: ${RELEASE_CEILING:}
    rc: false
    msg_prefix: "  "

String values may reference environment variables with ${VAR_NAME} or
${VAR_NAME:default}. Empty strings for ``below`` mean "no bound".
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gitsemver.core.exceptions import ConfigNotFoundError, ConfigValidationError
from gitsemver.core.logging import get_logger
from gitsemver.core.semver import Version, parse_version

logger = get_logger(__name__)

CONFIG_FILE_NAME = ".git-semver.yaml"

# YAML key -> Settings field
_FILE_KEYS = {
    "prefix": "prefix",
    "below": "below",
    "rc": "include_rc",
    "msg_prefix": "msg_prefix",
}

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


@dataclass(frozen=True)
class ScanConfig:
    """Constraints used when reducing tags to the highest version.

    Attributes:
        prefix: Tags must start with exactly this prefix to be considered.
        below: Versions greater than or equal to this bound are ignored.
        include_rc: Let tags whose first prerelease identifier starts with
            "rc" take part in the highest version.
    """

    prefix: str = ""
    below: Optional[Version] = None
    include_rc: bool = False


@dataclass
class Settings:
    """Resolved settings for one CLI invocation."""

    repo: Path = Path(".")
    prefix: str = ""
    below: Optional[str] = None
    include_rc: bool = False
    msg_prefix: str = ""

    def to_scan_config(self) -> ScanConfig:
        """Build the scanner configuration.

        Raises:
            VersionGrammarError: If ``below`` is not a valid version.
        """
        below = parse_version(self.below) if self.below else None
        return ScanConfig(prefix=self.prefix, below=below, include_rc=self.include_rc)


def expand_env_vars(value: Any) -> Any:
    """Recursively expand environment variables in config values.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):

        def replace_env_var(match: re.Match) -> str:
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return _ENV_PATTERN.sub(replace_env_var, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read and validate a YAML config file into Settings field values."""
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"parse config {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"config {path}: top level must be a mapping")

    values: Dict[str, Any] = {}
    for key, value in expand_env_vars(raw).items():
        if key not in _FILE_KEYS:
            raise ConfigValidationError(
                f"config {path}: unknown key {key!r}", field_name=str(key)
            )
        field_name = _FILE_KEYS[key]
        values[field_name] = _coerce(field_name, value, path)
    return values


def _coerce(field_name: str, value: Any, path: Path) -> Any:
    if field_name == "include_rc":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise ConfigValidationError(
            f"config {path}: rc must be true or false", field_name="rc"
        )
    if value is None:
        return None if field_name == "below" else ""
    if field_name == "below":
        return str(value) or None
    return str(value)


def load_settings(
    config_path: Optional[Path] = None,
    repo: Optional[Path] = None,
    **overrides: Any,
) -> Settings:
    """Load settings from the config file and apply CLI overrides.

    Args:
        config_path: Explicit config file; must exist when given.
        repo: Repository directory; its .git-semver.yaml is read when no
            explicit config_path is given.
        **overrides: Settings fields; None values are ignored.

    Returns:
        Resolved Settings.

    Raises:
        ConfigNotFoundError: If config_path does not exist.
        ConfigValidationError: If the file is malformed.
    """
    repo_path = Path(repo) if repo is not None else Path(".")
    values: Dict[str, Any] = {}

    if config_path is not None:
        if not config_path.is_file():
            raise ConfigNotFoundError(f"config file {config_path} does not exist")
        values.update(_read_config_file(config_path))
    else:
        default_path = repo_path / CONFIG_FILE_NAME
        if default_path.is_file():
            logger.debug("Reading config file", path=str(default_path))
            values.update(_read_config_file(default_path))

    known = {f.name for f in fields(Settings)}
    for name, value in overrides.items():
        if name not in known:
            raise TypeError(f"unknown setting {name!r}")
        if value is not None:
            values[name] = value

    values["repo"] = repo_path
    return Settings(**values)
