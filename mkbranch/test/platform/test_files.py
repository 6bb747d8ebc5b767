"""Tests for mkbranch.platform.files module."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from mkbranch.platform.files import atomic_write_text, reset_directory


class TestAtomicWriteText:
    def test_creates_file(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "file.txt"
        atomic_write_text(path, "hello\n")
        assert path.read_text(encoding="utf-8") == "hello\n"

    def test_replaces_without_leftovers(self, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("old", encoding="utf-8")

        atomic_write_text(path, "new")

        assert path.read_text(encoding="utf-8") == "new"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_preserves_mode(self, tmp_path: Path) -> None:
        path = tmp_path / "script.sh"
        path.write_text("#!/bin/sh\n", encoding="utf-8")
        path.chmod(0o755)

        atomic_write_text(path, "#!/bin/sh\necho hi\n")

        assert stat.S_IMODE(path.stat().st_mode) == 0o755


class TestResetDirectory:
    def test_creates_missing(self, tmp_path: Path) -> None:
        target = tmp_path / "build"
        reset_directory(target)
        assert target.is_dir()

    def test_empties_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "build"
        (target / "Cite" / ".git").mkdir(parents=True)
        (target / "stale.txt").write_text("x", encoding="utf-8")

        reset_directory(target)

        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_replaces_file(self, tmp_path: Path) -> None:
        target = tmp_path / "build"
        target.write_text("not a dir", encoding="utf-8")

        reset_directory(target)

        assert target.is_dir()
