"""How the core clone gets onto the new branch.

The decision is a pure function of four probed facts, evaluated in a fixed
order: reuse an existing remote branch before creating a duplicate, continue
in place before switching, and create from the base reference only when no
local branch exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["BranchDecision", "BranchFacts", "decide_branch_action"]


class BranchDecision(Enum):
    USE_EXISTING_REMOTE = "use-existing-remote"
    CONTINUE_LOCAL_TRACKING_REMOTE = "continue-local-tracking-remote"
    SWITCH_TO_LOCAL_TRACKING_REMOTE = "switch-to-local-tracking-remote"
    CREATE_FROM_BASE = "create-from-base"
    NO_ACTION_NEEDED = "no-action-needed"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class BranchFacts:
    """What the probes found out about the new branch.

    Attributes:
        has_local: A local branch with the new name exists
        has_remote: The remote has a branch with the new name
        current_branch: Checked-out branch ("" when detached)
        tracking: Upstream of the local branch ("" when none)
    """

    has_local: bool
    has_remote: bool
    current_branch: str
    tracking: str

    def on_branch(self, branch: str) -> bool:
        return self.current_branch == branch

    def tracks(self, branch: str, remote: str = "origin") -> bool:
        return self.has_local and self.tracking == f"{remote}/{branch}"


def decide_branch_action(
    facts: BranchFacts,
    branch: str,
    *,
    remote: str = "origin",
) -> BranchDecision:
    if facts.has_remote and not facts.has_local:
        return BranchDecision.USE_EXISTING_REMOTE
    if facts.on_branch(branch) and facts.tracks(branch, remote):
        return BranchDecision.CONTINUE_LOCAL_TRACKING_REMOTE
    if facts.tracks(branch, remote):
        return BranchDecision.SWITCH_TO_LOCAL_TRACKING_REMOTE
    if not facts.has_local:
        return BranchDecision.CREATE_FROM_BASE
    # A local branch exists but does not track its remote twin (e.g. a
    # previous run created it and failed before pushing).
    return BranchDecision.NO_ACTION_NEEDED
