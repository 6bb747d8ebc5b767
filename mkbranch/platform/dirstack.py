"""Scoped working-directory stack.

The process working directory is never changed. Instead, code that descends
into a repository or submodule enters it through DirStack.enter(), a context
manager, and passes `current` as the explicit cwd of every command. Leaving
the block pops the entry again, whether the block returned normally, returned
an Err early, or raised.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from mkbranch.output.console import ConsoleProtocol

__all__ = ["DirStack"]


class DirStack:
    def __init__(self, root: Path, *, console: ConsoleProtocol | None = None) -> None:
        self._stack: list[Path] = [root]
        self._console = console

    @property
    def root(self) -> Path:
        return self._stack[0]

    @property
    def current(self) -> Path:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        """Number of entries above the root."""
        return len(self._stack) - 1

    def push(self, path: Path | str) -> Path:
        target = Path(path)
        if not target.is_absolute():
            target = self.current / target
        self._stack.append(target)
        if self._console is not None:
            self._console.debug(f"cd {target}")
        return target

    def pop(self) -> Path:
        if len(self._stack) == 1:
            raise RuntimeError("directory stack underflow: cannot pop the root")
        self._stack.pop()
        return self.current

    @contextmanager
    def enter(self, path: Path | str) -> Iterator[Path]:
        """Descend into `path` (relative to current) for the duration of the block."""
        target = self.push(path)
        try:
            yield target
        finally:
            self.pop()
