"""Main CLI entry point for cert-preflight."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from cert_preflight.cli import check
from cert_preflight.cli.utils import console, fail, level_style

app = typer.Typer(
    name="cert-preflight",
    help="Certification checks for container images and operator bundles.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register subcommands
app.add_typer(check.app, name="check")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
) -> None:
    """
    cert-preflight: certification checks for container images and operator bundles.

    - [bold]check container[/bold]: Run the container checks against an image
    - [bold]check operator[/bold]: Deploy an operator bundle through OLM
    - [bold]list-checks[/bold]: Show the available checks
    """
    from cert_preflight.utils.config import load_config
    from cert_preflight.utils.errors import ConfigurationError
    from cert_preflight.utils.logging import configure_logging

    try:
        settings = load_config(config)
    except ConfigurationError as e:
        fail(e.message)

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "WARNING"
    else:
        level = settings.logging.level

    try:
        configure_logging(level=level, structured=settings.logging.structured, log_file=settings.logging.file)
    except (AttributeError, OSError) as e:
        fail(f"Invalid logging configuration: {e}")

    ctx.obj = {"config": settings, "verbose": verbose}


@app.command("list-checks")
def list_checks(ctx: typer.Context) -> None:
    """Show the checks each battery runs."""
    from cert_preflight.checks.registry import get_default_registry
    from cert_preflight.cluster.memory import InMemoryClusterClient
    from cert_preflight.core.olm import DeployableByOlmCheck

    batteries = [
        ("container", get_default_registry().checks),
        ("operator", [DeployableByOlmCheck(InMemoryClusterClient())]),
    ]

    table = Table(title="Checks")
    table.add_column("Battery", style="dim")
    table.add_column("Check", style="bold")
    table.add_column("Level")
    table.add_column("Description")

    for battery, checks in batteries:
        for c in checks:
            level = c.metadata.level.value
            style = level_style(level)
            table.add_row(battery, c.name, f"[{style}]{level}[/{style}]", c.metadata.description)

    console.print(table)


@app.command()
def version() -> None:
    """Show the cert-preflight version."""
    from cert_preflight import __version__

    console.print(f"cert-preflight version {__version__}")


if __name__ == "__main__":
    app()
