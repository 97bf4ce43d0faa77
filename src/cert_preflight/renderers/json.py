"""JSON renderer producing the user-facing results document."""

from __future__ import annotations

import json

from pydantic import BaseModel, Field

from cert_preflight import __version__
from cert_preflight.models.check import Result, Results
from cert_preflight.renderers.base import BaseRenderer, OutputFormat, RenderContext

TEST_LIBRARY_NAME = "cert-preflight"


class CheckExecutionInfo(BaseModel):
    """One check as the user sees it. Unset fields are omitted."""

    model_config = {"frozen": True}

    name: str
    elapsed_time: float = Field(description="Milliseconds spent in the check")
    description: str | None = None
    help: str | None = None
    suggestion: str | None = None
    knowledgebase_url: str | None = None
    check_url: str | None = None


class ResultsText(BaseModel):
    model_config = {"frozen": True}

    passed: list[CheckExecutionInfo] = Field(default_factory=list)
    failed: list[CheckExecutionInfo] = Field(default_factory=list)
    errors: list[CheckExecutionInfo] = Field(default_factory=list)


class LibraryInfo(BaseModel):
    model_config = {"frozen": True}

    name: str = TEST_LIBRARY_NAME
    version: str = __version__


class UserResponse(BaseModel):
    """The results document written for users and CI systems."""

    model_config = {"frozen": True}

    image: str
    passed: bool
    certification_hash: str | None = None
    test_library: LibraryInfo = Field(default_factory=LibraryInfo)
    results: ResultsText = Field(default_factory=ResultsText)


def _elapsed(result: Result) -> float:
    return float(int(result.elapsed_ms))


def _passed_info(result: Result) -> CheckExecutionInfo:
    return CheckExecutionInfo(
        name=result.name,
        elapsed_time=_elapsed(result),
        description=result.check.metadata.description,
    )


def _failed_info(result: Result) -> CheckExecutionInfo:
    metadata = result.check.metadata
    help_text = result.check.help_text
    return CheckExecutionInfo(
        name=result.name,
        elapsed_time=_elapsed(result),
        description=metadata.description,
        help=help_text.message or None,
        suggestion=help_text.suggestion or None,
        knowledgebase_url=metadata.knowledge_base_url or None,
        check_url=metadata.check_url or None,
    )


def _errored_info(result: Result) -> CheckExecutionInfo:
    return CheckExecutionInfo(
        name=result.name,
        elapsed_time=_elapsed(result),
        description=result.check.metadata.description,
        help=result.check.help_text.message or None,
    )


def build_user_response(results: Results) -> UserResponse:
    """Convert engine results into the user-facing document."""
    return UserResponse(
        image=results.tested_image,
        passed=results.passed_overall,
        certification_hash=results.certification_hash or None,
        results=ResultsText(
            passed=[_passed_info(r) for r in results.passed],
            failed=[_failed_info(r) for r in results.failed],
            errors=[_errored_info(r) for r in results.errored],
        ),
    )


class JSONRenderer(BaseRenderer):
    """Renderer for JSON output format.

    Example:
        renderer = JSONRenderer()
        json_str = renderer.render(results, RenderContext(format=OutputFormat.JSON))
    """

    @property
    def format(self) -> OutputFormat:
        return OutputFormat.JSON

    def render(self, results: Results, context: RenderContext) -> str:
        """Render results to a JSON string.

        Args:
            results: Engine results
            context: Rendering context with options

        Returns:
            JSON string
        """
        data = build_user_response(results).model_dump(mode="json", exclude_none=True)
        return json.dumps(
            data,
            indent=context.indent if context.indent else None,
            ensure_ascii=False,
        )
