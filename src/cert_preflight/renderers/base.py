"""Base renderer protocol and types."""

from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from cert_preflight.models.check import Results


class OutputFormat(str, Enum):
    """Supported output formats."""

    JSON = "json"
    TERMINAL = "terminal"


class RenderContext(BaseModel):
    """Context for rendering operations."""

    model_config = {"frozen": True}

    format: OutputFormat = Field(default=OutputFormat.TERMINAL, description="Output format")
    output_path: Path | None = Field(default=None, description="Output file path")
    verbose: bool = Field(default=False, description="Verbose output")
    color: bool = Field(default=True, description="Enable color output (terminal only)")

    # Formatting options
    indent: int = Field(default=2, description="JSON indentation")


@runtime_checkable
class Renderer(Protocol):
    """Protocol for results renderers.

    Example:
        class CountRenderer:
            @property
            def format(self) -> OutputFormat:
                return OutputFormat.TERMINAL

            def render(self, results: Results, context: RenderContext) -> str:
                return f"{len(results.passed)}/{results.total} passed"

            def render_to_file(self, results: Results, context: RenderContext) -> None:
                context.output_path.write_text(self.render(results, context))
    """

    @property
    def format(self) -> OutputFormat:
        """The output format this renderer produces."""
        ...

    def render(self, results: Results, context: RenderContext) -> str:
        """Render results to a string."""
        ...

    def render_to_file(self, results: Results, context: RenderContext) -> None:
        """Render results directly to a file.

        Raises:
            ValueError: If context.output_path is not set
        """
        ...


class BaseRenderer:
    """Base implementation with common functionality.

    Subclasses implement the format property and render.
    """

    def render_to_file(self, results: Results, context: RenderContext) -> None:
        if context.output_path is None:
            raise ValueError("output_path must be set in context for file rendering")

        content = self.render(results, context)
        context.output_path.write_text(content, encoding="utf-8")

    def render(self, results: Results, context: RenderContext) -> str:
        raise NotImplementedError
