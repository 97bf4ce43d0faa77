"""Output renderers for cert-preflight."""

from cert_preflight.renderers.base import BaseRenderer, OutputFormat, RenderContext, Renderer
from cert_preflight.renderers.json import JSONRenderer, UserResponse, build_user_response
from cert_preflight.renderers.terminal import TerminalRenderer


def get_renderer(format: OutputFormat) -> Renderer:
    """Get the renderer for an output format."""
    if format == OutputFormat.JSON:
        return JSONRenderer()
    return TerminalRenderer()


__all__ = [
    "BaseRenderer",
    "JSONRenderer",
    "OutputFormat",
    "RenderContext",
    "Renderer",
    "TerminalRenderer",
    "UserResponse",
    "build_user_response",
    "get_renderer",
]
