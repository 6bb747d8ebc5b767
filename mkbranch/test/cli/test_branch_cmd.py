from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer

from mkbranch.cli.context import CLIContext
from mkbranch.core.config import Settings
from mkbranch.core.errors import ErrorCode
from mkbranch.output.console import MockConsole
from mkbranch.test._git_helpers import git, git_identity, init_remote_repo, requires_git

NEW = "1.40.0-wmf.1"
SETTINGS = "<?php\n$wgVersion = '1.40.0-alpha';\n"


def _ctx(tmp_path: Path, settings: Settings | None = None) -> CLIContext:
    return CLIContext(
        settings=settings or Settings(),
        console=MockConsole(),
        config_dir=tmp_path,
    )


def _patch_context(monkeypatch: pytest.MonkeyPatch, ctx: CLIContext) -> None:
    import mkbranch.cli.commands.branch_cmd as branch_cmd

    def fake_build_context(_config: Path | None = None) -> CLIContext:
        return ctx

    monkeypatch.setattr(branch_cmd, "build_context", fake_build_context)


def _run_branch(tmp_path: Path, style_name: str = "wmf", **overrides: object) -> None:
    import mkbranch.cli.commands.branch_cmd as branch_cmd

    args: dict[str, object] = {
        "style_name": style_name,
        "new": NEW,
        "old": "master",
        "branch_from": "master",
        "branch_prefix": "",
        "path": None,
        "continue_from": None,
        "manifest": None,
        "config": None,
        "strategy": None,
        "gerrit_url": None,
        "gerrit_user": None,
        "gerrit_password": None,
        "work_dir": tmp_path / "build",
        "branch_dir": None,
        "dry_run": False,
        "noisy": False,
    }
    args.update(overrides)
    branch_cmd.branch(**args)  # type: ignore[arg-type]


def test_unknown_style_is_a_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = _ctx(tmp_path)
    _patch_context(monkeypatch, ctx)

    with pytest.raises(typer.Exit) as exc:
        _run_branch(tmp_path, "nightly")

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("error: nightly is not a known branch style")
    assert ctx.console.find("hint: Available: tarball, wmf")


def test_tarball_needs_a_branch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_context(monkeypatch, _ctx(tmp_path))

    with pytest.raises(typer.Exit) as exc:
        _run_branch(tmp_path, "tarball")

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_unknown_resume_marker_is_a_user_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    ctx = _ctx(tmp_path)
    _patch_context(monkeypatch, ctx)
    manifest = tmp_path / "config.json"
    manifest.write_text(json.dumps({"extensions": ["extensions/Cite"]}), encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        _run_branch(tmp_path, continue_from="Math")

    assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("could not find 'Math'")
    assert not (tmp_path / "build").exists()


def test_invalid_manifest_is_a_config_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _patch_context(monkeypatch, _ctx(tmp_path))
    manifest = tmp_path / "config.json"
    manifest.write_text('{"extensions": "Cite"}', encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        _run_branch(tmp_path)

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)


def test_gerrit_strategy_without_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import mkbranch.cli.commands.branch_cmd as branch_cmd

    ctx = _ctx(tmp_path)
    _patch_context(monkeypatch, ctx)

    class FakeOrchestrator:
        def __init__(self, **kwargs: object) -> None:
            strategy = kwargs["strategy"]
            assert isinstance(strategy, branch_cmd.GerritBranchStrategy)
            self._strategy = strategy

        def execute(self) -> object:
            from mkbranch.services.model import BranchTarget

            return self._strategy.ensure_branch(
                BranchTarget(repo_dir=tmp_path, branch=NEW, base_ref="master")
            )

    monkeypatch.setattr(branch_cmd, "BranchOrchestrator", FakeOrchestrator)

    with pytest.raises(typer.Exit) as exc:
        _run_branch(tmp_path, strategy=branch_cmd.Strategy.gerrit)

    assert exc.value.exit_code == int(ErrorCode.CONFIG_ERROR)
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("--gerrit-url")



def _local_remotes(tmp_path: Path) -> tuple[Path, Path]:
    """Core and extA remotes reachable under one repository root; returns (root, core seed)."""
    _, seed = init_remote_repo(tmp_path, "core", files={"includes/DefaultSettings.php": SETTINGS})
    init_remote_repo(tmp_path, "extA")
    remotes = tmp_path / "remotes"
    for name in ("core", "extA"):
        (remotes / name).symlink_to(remotes / f"{name}.git", target_is_directory=True)
    return remotes, seed


@requires_git
def test_branches_extension_and_core(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    git_identity(monkeypatch)
    remotes, _ = _local_remotes(tmp_path)

    ctx = _ctx(tmp_path, Settings(repo_path=remotes.as_uri()))
    _patch_context(monkeypatch, ctx)
    (tmp_path / "config.json").write_text(json.dumps({"extensions": ["extA"]}), encoding="utf-8")

    _run_branch(tmp_path)

    core = remotes / "core.git"
    ext = remotes / "extA.git"
    assert git(ext, "branch", "--list", NEW).strip().endswith(NEW)
    settings = git(core, "show", f"{NEW}:includes/DefaultSettings.php")
    assert f"$wgVersion = '{NEW}';" in settings
    gitmodules = git(core, "show", f"{NEW}:.gitmodules")
    assert "path = extA" in gitmodules
    assert f"branch = {NEW}" in gitmodules
    assert git(core, "log", "-1", "--format=%s", NEW) == f"Creating new WMF {NEW} branch"

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find(f"OK {NEW}: 1 repositories branched, 0 skipped")


@requires_git
def test_dry_run_leaves_remotes_alone(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    git_identity(monkeypatch)
    remotes, _ = _local_remotes(tmp_path)
    ctx = _ctx(tmp_path, Settings(repo_path=remotes.as_uri()))
    _patch_context(monkeypatch, ctx)
    (tmp_path / "config.json").write_text(json.dumps({"extensions": ["extA"]}), encoding="utf-8")

    _run_branch(tmp_path, dry_run=True)

    assert git(remotes / "extA.git", "branch", "--list", NEW) == ""
    assert git(remotes / "core.git", "branch", "--list", NEW) == ""
    core = tmp_path / "build" / "wmf"
    assert not (core / ".gitmodules").exists()
    assert git(core, "log", "-1", "--format=%s") == "init"

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find(f"[dry-run] git submodule add -f -b {NEW}")
    assert ctx.console.find("[dry-run] git commit -a -q -m")
    assert ctx.console.find(f"OK {NEW}: 1 repositories branched, 0 skipped")


@requires_git
def test_reuses_branch_already_on_core_remote(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    git_identity(monkeypatch)
    remotes, seed = _local_remotes(tmp_path)
    git(seed, "push", "-q", "origin", f"master:refs/heads/{NEW}")
    ctx = _ctx(tmp_path, Settings(repo_path=remotes.as_uri()))
    _patch_context(monkeypatch, ctx)
    (tmp_path / "config.json").write_text(json.dumps({"extensions": []}), encoding="utf-8")

    _run_branch(tmp_path)

    core = remotes / "core.git"
    settings = git(core, "show", f"{NEW}:includes/DefaultSettings.php")
    assert f"$wgVersion = '{NEW}';" in settings
    assert git(core, "log", "-1", "--format=%s", NEW) == f"Creating new WMF {NEW} branch"

    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("core: use-existing-remote")
