"""Typed settings loading.

Settings come from an optional TOML file:

    [branch]
    repo_path = "https://gerrit.wikimedia.org/r/mediawiki"
    branch_prefix = "wmf/"
    dry_run = false
    strategy = "git"
    version_file = "includes/Defines.php"
    version_identifier = "$wgVersion"

    [gerrit]
    url = "https://gerrit.wikimedia.org/r"
    user = "releng-bot"

Command line options override file values. Values left unset in both fall
back to the defaults of the selected branch style.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_table

__all__ = [
    "ConfigError",
    "Settings",
    "StrategyName",
    "load_settings",
]

StrategyName = Literal["git", "gerrit"]
_STRATEGIES: tuple[StrategyName, ...] = ("git", "gerrit")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Settings or manifest could not be loaded."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Settings:
    """Tool settings; None means "use the branch style default"."""

    repo_path: str | None = None
    branch_prefix: str | None = None
    dry_run: bool = False
    strategy: StrategyName = "git"
    version_file: str = "includes/DefaultSettings.php"
    version_identifier: str = "$wgVersion"
    gerrit_url: str | None = None
    gerrit_user: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Settings:
        branch: StrDict = get_table(data, "branch") or {}
        gerrit: StrDict = get_table(data, "gerrit") or {}

        strategy = get_str(branch, "strategy") or "git"
        if strategy not in _STRATEGIES:
            raise ValueError(f"unknown strategy '{strategy}' (expected git or gerrit)")

        # An explicit empty prefix is meaningful, so it is not read via get_str.
        prefix = branch.get("branch_prefix")
        if prefix is not None and not isinstance(prefix, str):
            raise ValueError("branch_prefix must be a string")

        return cls(
            repo_path=get_str(branch, "repo_path"),
            branch_prefix=prefix,
            dry_run=get_bool(branch, "dry_run") or False,
            strategy="gerrit" if strategy == "gerrit" else "git",
            version_file=get_str(branch, "version_file") or "includes/DefaultSettings.php",
            version_identifier=get_str(branch, "version_identifier") or "$wgVersion",
            gerrit_url=get_str(gerrit, "url"),
            gerrit_user=get_str(gerrit, "user"),
        )


def load_settings(path: Path | None) -> Result[Settings, ConfigError]:
    """Load settings from a TOML file; no path means defaults."""
    if path is None:
        return Ok(Settings())

    try:
        data_obj: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"settings file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"error reading settings: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("settings root must be a TOML table", path=path))

    try:
        return Ok(Settings.from_dict(data))
    except ValueError as e:
        return Err(ConfigError(f"invalid settings: {e}", path=path))
