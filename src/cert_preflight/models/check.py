"""Check metadata and result models."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CheckLevel(str, Enum):
    """Enforcement level of a check."""

    GOOD = "good"
    BEST = "best"
    OPTIONAL = "optional"


class CheckMetadata(BaseModel):
    """Descriptive information about a check."""

    model_config = {"frozen": True}

    description: str = Field(description="What the check verifies")
    level: CheckLevel = Field(default=CheckLevel.GOOD, description="Enforcement level")
    knowledge_base_url: str | None = Field(default=None, description="Knowledge base article")
    check_url: str | None = Field(default=None, description="Check documentation")


class HelpText(BaseModel):
    """Help shown to the user when a check does not pass."""

    model_config = {"frozen": True}

    message: str = Field(description="Why the check matters")
    suggestion: str = Field(default="", description="How to fix the problem")


class Outcome(str, Enum):
    """Classification of a single check execution."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    ERRORED = "ERROR"


class Result(BaseModel):
    """Outcome of one executed check."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    check: Any = Field(description="The executed check")
    elapsed: timedelta = Field(description="Time spent in validate")
    error: str | None = Field(default=None, description="Error text for errored checks")

    @property
    def name(self) -> str:
        return self.check.name

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed.total_seconds() * 1000


class Results(BaseModel):
    """Aggregated outcome of a certification run.

    The three outcome lists are disjoint and hold one entry per executed
    check, in execution order.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    tested_image: str = Field(description="Image that was tested")
    passed: list[Result] = Field(default_factory=list)
    failed: list[Result] = Field(default_factory=list)
    errored: list[Result] = Field(default_factory=list)
    passed_overall: bool = Field(description="True when nothing failed or errored")
    certification_hash: str | None = Field(default=None, description="Bundle content hash")

    @property
    def total(self) -> int:
        return len(self.passed) + len(self.failed) + len(self.errored)

    def outcome_of(self, name: str) -> Outcome | None:
        """Get the classification of a check by name."""
        for outcome, bucket in (
            (Outcome.PASSED, self.passed),
            (Outcome.FAILED, self.failed),
            (Outcome.ERRORED, self.errored),
        ):
            if any(r.name == name for r in bucket):
                return outcome
        return None
