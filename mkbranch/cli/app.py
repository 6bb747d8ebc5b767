from __future__ import annotations

import typer

from mkbranch import __version__
from mkbranch.cli.commands.branch_cmd import branch
from mkbranch.cli.commands.styles_cmd import styles


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(branch)
app.command()(styles)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Create release branches across a core repository and its dependents."""


def main() -> None:
    app()
