"""Operator deployment data models."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class OperatorData(BaseModel):
    """What is needed to deploy one operator bundle through OLM."""

    model_config = {"frozen": True}

    catalog_image: str = Field(description="Index image containing the bundle")
    channel: str = Field(description="Subscription channel")
    package_name: str = Field(description="Operator package name")
    app: str = Field(description="Name used for the created OLM resources")
    install_namespace: str = Field(description="Namespace the operator is installed in")


class CatalogSourceData(BaseModel):
    model_config = {"frozen": True}

    name: str
    image: str


class OperatorGroupData(BaseModel):
    model_config = {"frozen": True}

    name: str
    target_namespaces: list[str] = Field(default_factory=list)


class SubscriptionData(BaseModel):
    model_config = {"frozen": True}

    name: str
    channel: str
    catalog_source: str
    catalog_source_namespace: str
    package: str


class ReadinessOutcome(Generic[T]):
    """Terminal result of one readiness poll: a value or an error, never both."""

    __slots__ = ("_value", "_error")

    def __init__(self, value: Any = None, error: BaseException | None = None) -> None:
        self._value = value
        self._error = error

    @classmethod
    def ready(cls, value: T) -> "ReadinessOutcome[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, error: BaseException) -> "ReadinessOutcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self._error is None

    @property
    def value(self) -> T:
        if self._error is not None:
            raise ValueError("outcome holds an error, not a value")
        return self._value

    @property
    def error(self) -> BaseException | None:
        return self._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"ReadinessOutcome(error={self._error!r})"
        return f"ReadinessOutcome(value={self._value!r})"
