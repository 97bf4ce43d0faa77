"""Terminal renderer for cert-preflight output."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cert_preflight.models.check import Result, Results
from cert_preflight.renderers.base import BaseRenderer, OutputFormat, RenderContext


class TerminalRenderer(BaseRenderer):
    """Renderer for rich terminal output.

    Example:
        renderer = TerminalRenderer()
        renderer.render(results, RenderContext())
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the terminal renderer.

        Args:
            console: Rich console to use. Creates a new one if None.
        """
        self._console = console or Console()

    @property
    def format(self) -> OutputFormat:
        return OutputFormat.TERMINAL

    def render(self, results: Results, context: RenderContext) -> str:
        """Print results to the console.

        Returns:
            Empty string (output is printed to console)
        """
        self._console.print()

        status = (
            "[bold green]PASSED[/bold green]" if results.passed_overall else "[bold red]FAILED[/bold red]"
        )
        header = f"[bold]Image:[/bold] {results.tested_image}\n[bold]Status:[/bold] {status}"
        if results.certification_hash:
            header += f"\n[bold]Certification hash:[/bold] {results.certification_hash}"
        self._console.print(Panel(header, title="Preflight Report"))

        self._console.print()
        table = Table(title="Summary", show_header=False)
        table.add_column("Metric", style="bold")
        table.add_column("Count")
        table.add_row("Total Checks", str(results.total))
        table.add_row("Passed", f"[green]{len(results.passed)}[/green]")
        table.add_row("Failed", f"[red]{len(results.failed)}[/red]")
        table.add_row("Errors", f"[yellow]{len(results.errored)}[/yellow]")
        self._console.print(table)

        for title, style, bucket in (
            ("Passed", "green", results.passed),
            ("Failed", "red", results.failed),
            ("Errors", "yellow", results.errored),
        ):
            if bucket:
                self._console.print()
                self._console.print(self._outcome_table(title, style, bucket, context))

        return ""

    def render_to_file(self, results: Results, context: RenderContext) -> None:
        """Capture the terminal output and write it to a file."""
        if context.output_path is None:
            raise ValueError("output_path must be set in context for file rendering")

        file_console = Console(record=True, force_terminal=context.color)
        original_console = self._console
        self._console = file_console

        try:
            self.render(results, context)
            output = file_console.export_text(styles=context.color)
            context.output_path.write_text(output)
        finally:
            self._console = original_console

    @staticmethod
    def _outcome_table(title: str, style: str, bucket: list[Result], context: RenderContext) -> Table:
        table = Table(title=title, title_style=f"bold {style}")
        table.add_column("Check", style="bold")
        table.add_column("Elapsed", justify="right")
        table.add_column("Description")
        if title != "Passed":
            table.add_column("Help")
        if title == "Errors" and context.verbose:
            table.add_column("Error", style="dim")

        for result in bucket:
            row = [
                result.name,
                f"{result.elapsed_ms:.0f}ms",
                result.check.metadata.description,
            ]
            if title != "Passed":
                help_text = result.check.help_text
                row.append(
                    f"{help_text.message}\n[dim]{help_text.suggestion}[/dim]"
                    if title == "Failed" and help_text.suggestion
                    else help_text.message
                )
            if title == "Errors" and context.verbose:
                row.append(result.error or "")
            table.add_row(*row)

        return table
