"""Shared utilities for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from cert_preflight.utils.config import PreflightConfig

# Report output goes to stdout, everything else to stderr
console = Console()
err_console = Console(stderr=True)

EXIT_PASSED = 0
EXIT_NOT_PASSED = 1
EXIT_FATAL = 2


def get_config(ctx: typer.Context) -> PreflightConfig:
    """Get the configuration loaded by the top-level callback."""
    obj = ctx.obj or {}
    config = obj.get("config")
    if config is None:
        config = PreflightConfig()
    return config


def fail(message: str, code: int = EXIT_FATAL) -> NoReturn:
    """Print an error message and exit.

    Raises:
        typer.Exit: Always
    """
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code)


def level_style(level: str) -> str:
    """Get Rich style for a check level."""
    styles = {
        "good": "green",
        "best": "blue",
        "optional": "dim",
    }
    return styles.get(level.lower(), "white")
