"""Repository manifest: which repositories get the new branch.

The manifest is a JSON (or TOML) document:

    {
        "extensions": ["extensions/Cite", "skins/Vector", "vendor"],
        "submodules": {"extensions/VisualEditor": ["lib/ve"]},
        "special_extensions": {"extensions/Wikibase": "wmf/stable"}
    }

Names are repository paths relative to the repository root URL. The loaded
RepositorySet is read-only for the duration of a run.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from .config import ConfigError
from .result import Err, Ok, Result
from .structured import StrDict, as_obj_list, as_str_dict, as_str_list, get_table

__all__ = [
    "RepositorySet",
    "RepositorySpec",
    "load_manifest",
    "parse_manifest",
]


@dataclass(frozen=True, slots=True)
class RepositorySpec:
    """A repository taking part in a branch run.

    Attributes:
        name: Path of the repository below the repository root (e.g. "extensions/Cite")
        remote_path: Full clone URL
        default_branch: Branch the repository is cloned at before branching
    """

    name: str
    remote_path: str
    default_branch: str = "master"

    @property
    def dir_name(self) -> str:
        """Directory name used for the working copy (last path component)."""
        return PurePosixPath(self.name).name


def _empty_submodules() -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class RepositorySet:
    """All repositories of a run, in declaration order."""

    core: RepositorySpec
    repositories: tuple[RepositorySpec, ...] = ()
    special: tuple[RepositorySpec, ...] = ()
    submodules: Mapping[str, tuple[str, ...]] = field(default_factory=_empty_submodules)

    def names(self) -> list[str]:
        """Dependent repository names in declaration order."""
        return [repo.name for repo in self.repositories]

    def submodules_of(self, name: str) -> tuple[str, ...]:
        return self.submodules.get(name, ())

    def attached(self) -> tuple[RepositorySpec, ...]:
        """Repositories attached to the core branch as submodules."""
        return self.repositories + self.special


def _repo(repo_path: str, name: str, branch: str) -> RepositorySpec:
    return RepositorySpec(
        name=name,
        remote_path=f"{repo_path.rstrip('/')}/{name}",
        default_branch=branch,
    )


def parse_manifest(
    data: StrDict,
    *,
    repo_path: str,
    default_branch: str = "master",
    core_name: str = "core",
    path: Path | None = None,
) -> Result[RepositorySet, ConfigError]:
    """Build a RepositorySet from parsed manifest data."""
    raw_names = data.get("extensions", [])
    names = as_str_list(raw_names) if as_obj_list(raw_names) is not None else None
    if names is None:
        return Err(ConfigError("manifest 'extensions' must be a list of strings", path=path))

    if len(set(names)) != len(names):
        return Err(ConfigError("manifest 'extensions' contains duplicates", path=path))

    submodules: dict[str, tuple[str, ...]] = {}
    raw_submodules = data.get("submodules")
    if raw_submodules is not None:
        table = as_str_dict(raw_submodules)
        if table is None:
            return Err(ConfigError("manifest 'submodules' must be a table", path=path))
        for repo_name, value in table.items():
            subs = as_str_list(value)
            if subs is None:
                return Err(
                    ConfigError(
                        f"manifest submodules for '{repo_name}' must be strings",
                        path=path,
                    )
                )
            submodules[repo_name] = tuple(subs)

    special: list[RepositorySpec] = []
    special_table = get_table(data, "special_extensions")
    if data.get("special_extensions") is not None and special_table is None:
        return Err(ConfigError("manifest 'special_extensions' must be a table", path=path))
    for repo_name, branch in (special_table or {}).items():
        if not isinstance(branch, str) or not branch.strip():
            return Err(
                ConfigError(
                    f"special extension '{repo_name}' needs a source branch",
                    path=path,
                )
            )
        special.append(_repo(repo_path, repo_name, branch.strip()))

    return Ok(
        RepositorySet(
            core=_repo(repo_path, core_name, default_branch),
            repositories=tuple(_repo(repo_path, n, default_branch) for n in names),
            special=tuple(special),
            submodules=MappingProxyType(submodules),
        )
    )


def load_manifest(
    path: Path,
    *,
    repo_path: str,
    default_branch: str = "master",
    core_name: str = "core",
) -> Result[RepositorySet, ConfigError]:
    """Load a manifest file (`.json` or `.toml`).

    A missing file yields an empty manifest: only the core repository is
    branched.
    """
    if not path.exists():
        return Ok(RepositorySet(core=_repo(repo_path, core_name, default_branch)))

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(ConfigError(f"cannot read manifest: {e}", path=path))

    try:
        if path.suffix == ".toml":
            data_obj: object = tomllib.loads(text)
        else:
            data_obj = json.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        return Err(ConfigError(f"invalid manifest syntax: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("manifest root must be an object", path=path))

    return parse_manifest(
        data,
        repo_path=repo_path,
        default_branch=default_branch,
        core_name=core_name,
        path=path,
    )
