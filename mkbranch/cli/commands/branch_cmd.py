"""Branch command - create a release branch across all repositories."""

from __future__ import annotations

import os
from enum import StrEnum
from pathlib import Path

import typer

from mkbranch.cli.commands._helpers import exit_on_error
from mkbranch.cli.context import CLIContext, build_context
from mkbranch.core.errors import ErrorCode
from mkbranch.core.manifest import load_manifest
from mkbranch.gerrit.http import RealHttpClient
from mkbranch.gerrit.service import RemoteBranchService
from mkbranch.git.mutator import RepositoryMutator
from mkbranch.git.probe import RepositoryProbe
from mkbranch.platform.dirstack import DirStack
from mkbranch.platform.runner import ProcessRunner
from mkbranch.services.model import RunConfig
from mkbranch.services.orchestrator import BranchOrchestrator, BranchReport
from mkbranch.services.resume import apply_resume_marker
from mkbranch.services.strategy import BranchStrategy, GerritBranchStrategy, GitBranchStrategy
from mkbranch.services.styles import StyleOptions, create_style


class Strategy(StrEnum):
    git = "git"
    gerrit = "gerrit"


def branch(
    style_name: str = typer.Argument(..., metavar="STYLE", help="Branch style (see `styles`)"),
    new: str = typer.Option(..., "--new", "-n", help="New version, e.g. 1.40.0-wmf.1"),
    old: str = typer.Option("master", "--old", "-o", help="Version to branch from"),
    branch_from: str = typer.Option(
        "master",
        "--branch-from",
        help="Ref used as is when --old equals it",
    ),
    branch_prefix: str | None = typer.Option(
        None,
        "--branch-prefix",
        help="Branch name prefix (style default when omitted)",
    ),
    path: str | None = typer.Option(
        None,
        "--path",
        "-p",
        help="Clone the core repository from here (default: <repo path>/core)",
    ),
    continue_from: str | None = typer.Option(
        None,
        "--continue-from",
        help="Skip every repository up to and including this one",
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        help="Repository manifest (default: the style's file next to --config)",
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Settings file (TOML)"),
    strategy: Strategy | None = typer.Option(
        None,
        "--strategy",
        help="How dependent repositories get the branch (git | gerrit)",
    ),
    gerrit_url: str | None = typer.Option(None, "--gerrit-url", help="Review server root URL"),
    gerrit_user: str | None = typer.Option(
        None, "--gerrit-user", envvar="GERRIT_USER", help="Review server user"
    ),
    gerrit_password: str | None = typer.Option(
        None,
        "--gerrit-password",
        envvar="GERRIT_PASSWORD",
        help="Review server HTTP password",
    ),
    work_dir: Path | None = typer.Option(None, "--work-dir", help="Build directory"),
    branch_dir: str | None = typer.Option(
        None,
        "--branch-dir",
        help="Directory of the core clone inside the build directory",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log pushes instead of pushing"),
    noisy: bool = typer.Option(False, "--noisy", help="Let git print progress"),
) -> None:
    """Create a new release branch in every repository, then in core."""
    ctx = build_context(config)
    settings = ctx.settings
    console = ctx.console

    options = StyleOptions(
        work_dir=work_dir.expanduser().resolve() if work_dir is not None else None,
        repo_path=settings.repo_path,
        branch_prefix=branch_prefix if branch_prefix is not None else settings.branch_prefix,
        branch_dir=branch_dir,
    )
    style = exit_on_error(create_style(style_name, options), ctx)

    manifest_path = manifest or style.manifest_path(ctx.config_dir)
    repos = exit_on_error(
        load_manifest(manifest_path, repo_path=style.repo_path(), default_branch=branch_from),
        ctx,
        ErrorCode.CONFIG_ERROR,
    )
    skip = exit_on_error(
        apply_resume_marker([repo.name for repo in repos.attached()], continue_from),
        ctx,
    )

    run_config = RunConfig(
        old_version=old,
        branch_prefix=style.branch_prefix(),
        new_version=new,
        source_path=path or repos.core.remote_path,
        branch_from=branch_from,
        dry_run=dry_run or settings.dry_run,
    )

    runner = ProcessRunner(console=console, dry_run=run_config.dry_run, noisy=noisy)
    probe = RepositoryProbe(runner)
    mutator = RepositoryMutator(runner, probe, console)
    chosen = _build_strategy(
        Strategy(strategy or settings.strategy),
        ctx,
        probe=probe,
        mutator=mutator,
        dry_run=run_config.dry_run,
        gerrit_url=gerrit_url or settings.gerrit_url,
        gerrit_user=gerrit_user or settings.gerrit_user,
        gerrit_password=gerrit_password,
    )

    mode = " (dry-run)" if run_config.dry_run else ""
    console.header(f"{style.description}: {run_config.new_branch}{mode}")
    console.print(f"build directory: {style.work_dir()}")
    if skip:
        console.print(f"resuming after {continue_from} ({len(skip)} skipped)")

    orchestrator = BranchOrchestrator(
        config=run_config,
        repos=repos,
        style=style,
        probe=probe,
        mutator=mutator,
        strategy=chosen,
        console=console,
        dirs=DirStack(style.work_dir(), console=console),
        skip=skip,
        version_file=settings.version_file,
        version_identifier=settings.version_identifier,
    )
    report = exit_on_error(orchestrator.execute(), ctx)
    _print_report(ctx, report, run_config)


def _build_strategy(
    name: Strategy,
    ctx: CLIContext,
    *,
    probe: RepositoryProbe,
    mutator: RepositoryMutator,
    dry_run: bool,
    gerrit_url: str | None,
    gerrit_user: str | None,
    gerrit_password: str | None,
) -> BranchStrategy:
    if name == Strategy.git:
        return GitBranchStrategy(probe=probe, mutator=mutator, console=ctx.console)

    http = RealHttpClient(
        username=gerrit_user or os.environ.get("USER"),
        password=gerrit_password,
    )
    service = RemoteBranchService(http=http, read_only=dry_run, base_url=gerrit_url)
    return GerritBranchStrategy(probe=probe, service=service, console=ctx.console)


def _print_report(ctx: CLIContext, report: BranchReport, run_config: RunConfig) -> None:
    console = ctx.console
    console.success(
        f"{run_config.new_branch}: {len(report.branched)} repositories branched, "
        f"{len(report.skipped)} skipped"
    )
    if report.decision is not None:
        console.print(f"core: {report.decision}")
    if not report.version_updated:
        console.warning(f"version already at {run_config.new_version}, nothing committed")
