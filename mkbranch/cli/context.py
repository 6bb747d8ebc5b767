from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from mkbranch.core.config import Settings, load_settings
from mkbranch.core.errors import ErrorCode
from mkbranch.core.result import Err
from mkbranch.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    settings: Settings
    console: ConsoleProtocol
    config_dir: Path


def build_context(config_path: Path | None = None) -> CLIContext:
    """Load settings once; manifests are looked up next to the settings file."""
    settings_result = load_settings(config_path)
    if isinstance(settings_result, Err):
        typer.echo(f"error: {settings_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    config_dir = config_path.parent if config_path is not None else Path.cwd()
    return CLIContext(
        settings=settings_result.value,
        console=RichConsole(),
        config_dir=config_dir,
    )
