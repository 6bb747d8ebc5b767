"""Tests for services/decision.py."""

from __future__ import annotations

import pytest

from mkbranch.services.decision import BranchDecision, BranchFacts, decide_branch_action

NEW = "wmf/1.40.0-wmf.1"
D = BranchDecision


def _facts(*, local: bool, remote: bool, on_branch: bool, tracks: bool) -> BranchFacts:
    return BranchFacts(
        has_local=local,
        has_remote=remote,
        current_branch=NEW if on_branch else "master",
        tracking=f"origin/{NEW}" if tracks else "",
    )


class TestDecisionTable:
    """All combinations of (has_local, has_remote, on_branch, tracks) that can occur."""

    @pytest.mark.parametrize(
        ("local", "remote", "on_branch", "tracks", "expected"),
        [
            # no local branch: tracking and on-branch are impossible
            (False, True, False, False, D.USE_EXISTING_REMOTE),
            (False, False, False, False, D.CREATE_FROM_BASE),
            # local branch that tracks origin
            (True, True, True, True, D.CONTINUE_LOCAL_TRACKING_REMOTE),
            (True, True, False, True, D.SWITCH_TO_LOCAL_TRACKING_REMOTE),
            (True, False, True, True, D.CONTINUE_LOCAL_TRACKING_REMOTE),
            (True, False, False, True, D.SWITCH_TO_LOCAL_TRACKING_REMOTE),
            # local branch without upstream
            (True, True, True, False, D.NO_ACTION_NEEDED),
            (True, False, False, False, D.NO_ACTION_NEEDED),
        ],
    )
    def test_combination(
        self,
        local: bool,
        remote: bool,
        on_branch: bool,
        tracks: bool,
        expected: BranchDecision,
    ) -> None:
        facts = _facts(local=local, remote=remote, on_branch=on_branch, tracks=tracks)
        assert decide_branch_action(facts, NEW) is expected


class TestPrecedence:
    def test_remote_wins_over_create(self) -> None:
        facts = BranchFacts(has_local=False, has_remote=True, current_branch="", tracking="")
        assert decide_branch_action(facts, NEW) is D.USE_EXISTING_REMOTE

    def test_tracking_other_remote_does_not_count(self) -> None:
        facts = BranchFacts(
            has_local=True,
            has_remote=True,
            current_branch=NEW,
            tracking=f"upstream/{NEW}",
        )
        assert decide_branch_action(facts, NEW) is D.NO_ACTION_NEEDED
        assert decide_branch_action(facts, NEW, remote="upstream") is (
            D.CONTINUE_LOCAL_TRACKING_REMOTE
        )

    def test_str(self) -> None:
        assert str(D.CREATE_FROM_BASE) == "create-from-base"
