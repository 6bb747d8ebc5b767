"""Branch run: every dependent repository first, then the core repository.

Repositories are processed strictly one after another. Every descent into a
working copy goes through DirStack.enter(), so the stack depth after a
repository step equals the depth before it, whether the step succeeded or
returned an Err.

The first Err ends the run. Nothing already cloned, branched or pushed is
undone; a later run can pick up with `continue_from`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.manifest import RepositorySet, RepositorySpec
from mkbranch.core.result import Err, Ok, Result
from mkbranch.git.mutator import RepositoryMutator
from mkbranch.git.probe import RepositoryProbe, parse_porcelain
from mkbranch.output.console import ConsoleProtocol
from mkbranch.platform.dirstack import DirStack
from mkbranch.services.decision import BranchDecision, BranchFacts, decide_branch_action
from mkbranch.services.model import BranchTarget, RunConfig
from mkbranch.services.strategy import BranchStrategy
from mkbranch.services.styles import BranchStyle
from mkbranch.services.version import DEFAULT_IDENTIFIER, fix_version

__all__ = ["BranchOrchestrator", "BranchReport"]

DEFAULT_VERSION_FILE = "includes/DefaultSettings.php"

_MAX_LISTED_CHANGES = 10


@dataclass(slots=True)
class BranchReport:
    """What a run did, for the final summary.

    Attributes:
        branched: Dependent repositories given the new branch
        skipped: Dependent repositories skipped because of the resume marker
        decision: How the core repository got the new branch
        version_updated: False when the version marker already carried the new version
    """

    branched: list[str]
    skipped: list[str]
    decision: BranchDecision | None = None
    version_updated: bool = False


class BranchOrchestrator:
    def __init__(
        self,
        *,
        config: RunConfig,
        repos: RepositorySet,
        style: BranchStyle,
        probe: RepositoryProbe,
        mutator: RepositoryMutator,
        strategy: BranchStrategy,
        console: ConsoleProtocol,
        dirs: DirStack | None = None,
        skip: frozenset[str] = frozenset(),
        version_file: str = DEFAULT_VERSION_FILE,
        version_identifier: str = DEFAULT_IDENTIFIER,
    ) -> None:
        self._config = config
        self._repos = repos
        self._style = style
        self._probe = probe
        self._mutator = mutator
        self._strategy = strategy
        self._console = console
        self._dirs = dirs or DirStack(style.work_dir(), console=console)
        self._skip = skip
        self._version_file = version_file
        self._version_identifier = version_identifier
        self._report = BranchReport(branched=[], skipped=[])

    @property
    def dirs(self) -> DirStack:
        return self._dirs

    @property
    def report(self) -> BranchReport:
        return self._report

    def execute(self) -> Result[BranchReport, BranchError]:
        """Set up the build directory, branch every repository, then the core."""
        setup = self._style.setup_build_directory(self._mutator)
        if isinstance(setup, Err):
            return setup

        for repo in self._repos.repositories:
            result = self.branch_repo(repo)
            if isinstance(result, Err):
                return result

        for repo in self._repos.special:
            result = self.branch_repo(repo, repo.default_branch)
            if isinstance(result, Err):
                return result

        core = self.branch()
        if isinstance(core, Err):
            return core
        return Ok(self._report)

    def branch_repo(
        self,
        repo: RepositorySpec,
        branch: str | None = None,
    ) -> Result[None, BranchError]:
        """Give one dependent repository (and its submodules) the new branch."""
        if repo.name in self._skip:
            self._console.info(f"skipping {repo.name}, already branched")
            self._report.skipped.append(repo.name)
            return Ok(None)

        source = branch or repo.default_branch
        new_branch = self._config.new_branch
        self._console.header(f"{repo.name} ({source} -> {new_branch})")

        with self._dirs.enter(repo.dir_name) as repo_dir:
            cloned = self._mutator.clone_or_update(repo_dir, repo.remote_path, source)
            if isinstance(cloned, Err):
                return cloned

            for sub in self._repos.submodules_of(repo.name):
                result = self._branch_submodule(repo, repo_dir, sub)
                if isinstance(result, Err):
                    return result

            result = self._strategy.ensure_branch(
                BranchTarget(repo_dir=repo_dir, branch=new_branch, base_ref=source)
            )
            if isinstance(result, Err):
                return result

        self._report.branched.append(repo.name)
        return Ok(None)

    def _branch_submodule(
        self,
        repo: RepositorySpec,
        repo_dir: Path,
        path: str,
    ) -> Result[None, BranchError]:
        declared = self._probe.submodule_url(repo_dir, path)
        if isinstance(declared, Err):
            return declared
        if declared.value is None:
            return Err(
                BranchError(
                    kind="submodule_failed",
                    message=f"{path} is not a submodule of {repo.name}",
                    hint="Check the submodules listed for it in the manifest",
                )
            )

        init = self._mutator.init_submodule(repo_dir, path)
        if isinstance(init, Err):
            return init

        with self._dirs.enter(path) as sub_dir:
            return self._strategy.ensure_branch(
                BranchTarget(repo_dir=sub_dir, branch=self._config.new_branch, base_ref="HEAD")
            )

    def branch(self) -> Result[None, BranchError]:
        """Create the new branch of the core repository and attach everything to it."""
        config = self._config
        canonical = self._repos.core.remote_path
        source = config.source_branch
        new_branch = config.new_branch
        self._console.header(f"{self._repos.core.name} ({source} -> {new_branch})")

        with self._dirs.enter(self._style.branch_dir()) as core_dir:
            cloned = self._mutator.clone_or_update(
                core_dir, config.source_path, source, aliases=(canonical,)
            )
            if isinstance(cloned, Err):
                return cloned

            if config.source_path != canonical:
                repointed = self._mutator.set_remote_url(core_dir, "origin", canonical)
                if isinstance(repointed, Err):
                    return repointed

            checked = self._report_state(core_dir, f"origin/{source}")
            if isinstance(checked, Err):
                return checked

            decided = self._use_new_branch(core_dir, canonical)
            if isinstance(decided, Err):
                return decided

            attached = self._attach_submodules(core_dir)
            if isinstance(attached, Err):
                return attached

            updated = fix_version(
                core_dir / self._version_file,
                config.new_version,
                identifier=self._version_identifier,
            )
            if isinstance(updated, Err):
                return updated

            if updated.value:
                self._report.version_updated = True
                committed = self._mutator.commit_all(
                    core_dir,
                    f"Creating new {self._style.commit_label} {config.new_version} branch",
                )
                if isinstance(committed, Err):
                    return committed
            else:
                self._console.warning(
                    f"{self._version_file} already at {config.new_version}, skipping commit"
                )

            return self._mutator.push(core_dir, "origin", new_branch)

    def _report_state(self, repo_dir: Path, reference: str) -> Result[None, BranchError]:
        changes = self._probe.working_tree_changes(repo_dir)
        if isinstance(changes, Err):
            return changes
        entries = parse_porcelain(changes.value)
        if entries:
            self._console.warning(f"{repo_dir} has {len(entries)} uncommitted change(s)")
            for entry in entries[:_MAX_LISTED_CHANGES]:
                self._console.warning(f"  {entry.pretty_xy()} {entry.path}")

        divergence = self._probe.divergence_log(repo_dir, reference)
        if isinstance(divergence, Err):
            return divergence
        if divergence.value:
            count = len(divergence.value.splitlines())
            self._console.warning(f"HEAD is {count} commit(s) behind {reference}")
        return Ok(None)

    def _use_new_branch(self, core_dir: Path, canonical: str) -> Result[None, BranchError]:
        config = self._config
        new_branch = config.new_branch

        facts = self._probe_facts(core_dir, canonical, new_branch)
        if isinstance(facts, Err):
            return facts

        decision = decide_branch_action(facts.value, new_branch)
        self._report.decision = decision
        self._console.debug(f"core branch decision: {decision}")

        match decision:
            case BranchDecision.USE_EXISTING_REMOTE:
                self._console.info(f"reusing remote branch {new_branch}")
                return self._mutator.checkout_remote(core_dir, new_branch)
            case BranchDecision.CONTINUE_LOCAL_TRACKING_REMOTE:
                return self._mutator.pull(core_dir)
            case BranchDecision.SWITCH_TO_LOCAL_TRACKING_REMOTE:
                checkout = self._mutator.checkout_existing(core_dir, new_branch)
                if isinstance(checkout, Err):
                    return checkout
                return self._mutator.pull(core_dir)
            case BranchDecision.CREATE_FROM_BASE:
                created = self._mutator.checkout_new(
                    core_dir, new_branch, f"origin/{config.source_branch}"
                )
                if isinstance(created, Err):
                    return created
                if config.source_path != canonical:
                    return self._mutator.set_remote_url(core_dir, "origin", config.source_path)
                return Ok(None)
            case BranchDecision.NO_ACTION_NEEDED:
                self._console.warning(
                    f"local branch {new_branch} exists but does not track origin/{new_branch}"
                )
                if facts.value.on_branch(new_branch):
                    return Ok(None)
                return self._mutator.checkout_existing(core_dir, new_branch)

    def _probe_facts(
        self,
        core_dir: Path,
        canonical: str,
        new_branch: str,
    ) -> Result[BranchFacts, BranchError]:
        local = self._probe.local_branches(core_dir)
        if isinstance(local, Err):
            return local
        remote = self._probe.remote_has_branch(canonical, new_branch, cwd=core_dir)
        if isinstance(remote, Err):
            return remote
        current = self._probe.current_branch(core_dir)
        if isinstance(current, Err):
            return current

        has_local = new_branch in local.value
        tracking = ""
        if has_local:
            upstream = self._probe.tracking_branch_of(core_dir, new_branch)
            if isinstance(upstream, Err):
                return upstream
            tracking = upstream.value

        return Ok(
            BranchFacts(
                has_local=has_local,
                has_remote=remote.value,
                current_branch=current.value,
                tracking=tracking,
            )
        )

    def _attach_submodules(self, core_dir: Path) -> Result[None, BranchError]:
        new_branch = self._config.new_branch
        for repo in self._repos.attached():
            if (core_dir / repo.name / ".git").exists():
                self._console.info(f"{repo.name} is already attached")
                continue
            added = self._mutator.add_submodule(core_dir, new_branch, repo.remote_path, repo.name)
            if isinstance(added, Err):
                return added
        return Ok(None)
