"""Scripted git executor for orchestration tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from mkbranch.core.result import Err, Ok, Result
from mkbranch.output.console import MockConsole
from mkbranch.platform.process import CommandResult, ProcessError
from mkbranch.platform.runner import ProcessRunner

Effect: TypeAlias = Callable[[list[str], Path], None]


@dataclass(frozen=True, slots=True)
class Call:
    cmd: tuple[str, ...]
    cwd: Path


@dataclass(slots=True)
class _Rule:
    prefix: tuple[str, ...]
    stdout: str
    returncode: int
    effect: Effect | None
    cwd: Path | None
    times: int | None


class FakeGit:
    """Executor that records every command and answers from rules.

    Rules match on a command prefix (and optionally the cwd); the most
    recently added matching rule wins. Unmatched commands succeed with no
    output.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._rules: list[_Rule] = []

    def on(
        self,
        *prefix: str,
        stdout: str = "",
        returncode: int = 0,
        effect: Effect | None = None,
        cwd: Path | None = None,
        times: int | None = None,
    ) -> None:
        self._rules.insert(0, _Rule(prefix, stdout, returncode, effect, cwd, times))

    def __call__(self, cmd: list[str], cwd: Path) -> Result[CommandResult, ProcessError]:
        self.calls.append(Call(tuple(cmd), cwd))
        for rule in self._rules:
            if tuple(cmd[: len(rule.prefix)]) != rule.prefix:
                continue
            if rule.cwd is not None and rule.cwd != cwd:
                continue
            if rule.times is not None:
                if rule.times == 0:
                    continue
                rule.times -= 1
            if rule.effect is not None:
                rule.effect(cmd, cwd)
            if rule.returncode != 0:
                return Err(ProcessError(tuple(cmd), rule.returncode, rule.stdout, "fatal: scripted"))
            return Ok(CommandResult(tuple(cmd), 0, rule.stdout, ""))
        return Ok(CommandResult(tuple(cmd), 0, "", ""))

    def commands(self, *subcommands: str) -> list[tuple[str, ...]]:
        """Recorded git commands whose subcommand is one of `subcommands`."""
        return [c.cmd for c in self.calls if len(c.cmd) > 1 and c.cmd[1] in subcommands]

    def calls_for(self, *subcommands: str) -> list[Call]:
        return [c for c in self.calls if len(c.cmd) > 1 and c.cmd[1] in subcommands]


def runner_for(fake: FakeGit, console: MockConsole, *, dry_run: bool = False) -> ProcessRunner:
    return ProcessRunner(
        console=console,
        dry_run=dry_run,
        max_attempts=2,
        executor=fake,
        sleep=lambda _: None,
    )


def make_clone(files: dict[str, str] | None = None) -> Effect:
    """Effect for `git clone`: create the destination (and some files)."""

    def effect(cmd: list[str], cwd: Path) -> None:
        dest = cwd / cmd[-1]
        dest.mkdir(parents=True, exist_ok=True)
        for rel, content in (files or {}).items():
            path = dest / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

    return effect
