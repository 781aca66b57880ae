"""Provenance-tagged results returned by the resilient client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class BackendResult(Generic[T]):
    """Data that came back from the real service."""

    data: T
    kind: Literal["backend"] = "backend"

    @property
    def source(self) -> str:
        return self.kind

    @property
    def error(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class DemoResult(Generic[T]):
    """
    Synthesized substitute data.

    `reason` says why no real data is shown; `error` carries the last failure
    message when a real attempt was made.
    """

    data: T
    reason: str
    error: Optional[str] = None
    status_code: Optional[int] = None
    kind: Literal["demo"] = "demo"

    @property
    def source(self) -> str:
        return self.kind


ServiceResult = Union[BackendResult[T], DemoResult[T]]
