"""Tests for services/resume.py."""

from __future__ import annotations

import pytest

from mkbranch.core.result import Err, Ok
from mkbranch.services.resume import apply_resume_marker

NAMES = ["extensions/Cite", "extensions/Echo", "skins/Vector", "vendor"]


class TestApplyResumeMarker:
    @pytest.mark.parametrize("marker", [None, ""])
    def test_empty_marker_is_full_run(self, marker: str | None) -> None:
        assert apply_resume_marker(NAMES, marker) == Ok(frozenset())

    @pytest.mark.parametrize("k", range(len(NAMES)))
    def test_marker_at_k_skips_first_k_plus_one(self, k: int) -> None:
        result = apply_resume_marker(NAMES, NAMES[k])

        assert result == Ok(frozenset(NAMES[: k + 1]))
        assert isinstance(result, Ok)
        for later in NAMES[k + 1 :]:
            assert later not in result.value

    def test_basename_matches(self) -> None:
        assert apply_resume_marker(NAMES, "Echo") == Ok(
            frozenset({"extensions/Cite", "extensions/Echo"})
        )

    def test_first_match_wins(self) -> None:
        names = ["extensions/Foo", "skins/Foo"]
        assert apply_resume_marker(names, "Foo") == Ok(frozenset({"extensions/Foo"}))

    def test_missing_marker(self) -> None:
        result = apply_resume_marker(NAMES, "Nope")

        assert isinstance(result, Err)
        assert result.error.kind == "resume_marker_not_found"
        assert "'Nope'" in result.error.message

    def test_empty_list(self) -> None:
        result = apply_resume_marker([], "Cite")
        assert isinstance(result, Err)
