"""Branch run services.

The orchestrator drives a run; decision, version, resume and styles hold the
rules it applies, strategies decide how a dependent repository gets its
branch.
"""

from mkbranch.services.decision import BranchDecision, BranchFacts, decide_branch_action
from mkbranch.services.model import BranchTarget, RunConfig
from mkbranch.services.orchestrator import BranchOrchestrator, BranchReport
from mkbranch.services.resume import apply_resume_marker
from mkbranch.services.strategy import (
    BranchStrategy,
    GerritBranchStrategy,
    GitBranchStrategy,
    gerrit_project_name,
)
from mkbranch.services.styles import (
    STYLE_DESCRIPTIONS,
    STYLES,
    BranchStyle,
    StyleOptions,
    TarballStyle,
    WmfStyle,
    create_style,
)
from mkbranch.services.version import fix_version

__all__ = [
    # Run model
    "RunConfig",
    "BranchTarget",
    "BranchReport",
    "BranchOrchestrator",
    # Rules
    "BranchDecision",
    "BranchFacts",
    "decide_branch_action",
    "apply_resume_marker",
    "fix_version",
    # Strategies
    "BranchStrategy",
    "GitBranchStrategy",
    "GerritBranchStrategy",
    "gerrit_project_name",
    # Styles
    "BranchStyle",
    "StyleOptions",
    "WmfStyle",
    "TarballStyle",
    "STYLES",
    "STYLE_DESCRIPTIONS",
    "create_style",
]
