"""
Requirement models - what the engine has been asked to satisfy.

A ``VersionRequirement`` is built once from CLI / config input and never
changes afterwards.  Invalid construction (negative components, an
inverted window) raises immediately: that is a caller bug, not a
runtime condition.
"""

from __future__ import annotations

from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, model_validator


class ToolId(StrEnum):
    """The tools the engine knows how to resolve."""

    PYTHON = "python"   # runtime A
    NODE = "node"       # runtime B
    UV = "uv"           # package resolver


class Version(NamedTuple):
    """A (major, minor, patch) triple; tuple ordering is the version order."""

    major: int
    minor: int = 0
    patch: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


class VersionRequirement(BaseModel):
    """A tool plus an optional inclusive version window."""

    model_config = ConfigDict(frozen=True)

    tool: ToolId
    minimum: Version | None = None
    maximum: Version | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> VersionRequirement:
        for label, bound in (("minimum", self.minimum), ("maximum", self.maximum)):
            if bound is not None and any(part < 0 for part in bound):
                raise ValueError(f"{label} version components must be non-negative: {bound}")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.maximum < self.minimum
        ):
            raise ValueError(
                f"maximum {self.maximum} is lower than minimum {self.minimum}"
            )
        return self

    @property
    def is_unconstrained(self) -> bool:
        return self.minimum is None and self.maximum is None

    @property
    def is_pinned(self) -> bool:
        return self.minimum is not None and self.minimum == self.maximum

    def describe(self) -> str:
        """Human-readable form, e.g. ``python >= 3.10.0``."""
        if self.is_unconstrained:
            return f"{self.tool.value} (any version)"
        if self.is_pinned:
            return f"{self.tool.value} == {self.minimum}"
        parts = []
        if self.minimum is not None:
            parts.append(f">= {self.minimum}")
        if self.maximum is not None:
            parts.append(f"<= {self.maximum}")
        return f"{self.tool.value} {', '.join(parts)}"
