"""Styles command - list the available branch styles."""

from __future__ import annotations

from mkbranch.cli.context import build_context
from mkbranch.services.styles import STYLE_DESCRIPTIONS


def styles() -> None:
    """List branch styles."""
    ctx = build_context()
    for name in sorted(STYLE_DESCRIPTIONS):
        ctx.console.print(f"{name:<10} {STYLE_DESCRIPTIONS[name]}")
