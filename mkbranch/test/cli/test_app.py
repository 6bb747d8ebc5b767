from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from mkbranch import __version__
from mkbranch.cli.app import app
from mkbranch.cli.context import CLIContext
from mkbranch.core.config import Settings
from mkbranch.output.console import MockConsole

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_branch_requires_new_version() -> None:
    result = runner.invoke(app, ["branch", "wmf"])
    assert result.exit_code != 0


def test_styles_lists_every_style(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import mkbranch.cli.commands.styles_cmd as styles_cmd

    console = MockConsole()
    ctx = CLIContext(settings=Settings(), console=console, config_dir=tmp_path)
    monkeypatch.setattr(styles_cmd, "build_context", lambda: ctx)

    styles_cmd.styles()

    assert [m.split()[0] for m in console.messages] == ["tarball", "wmf"]
