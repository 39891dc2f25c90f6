"""
InstallAttempt - one recorded try at satisfying a requirement.

Every attempt is kept, successful or not, so that an exhausted
requirement can be finished by hand from the report alone.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from envsetup.core.models.probe import ProbeResult
from envsetup.core.models.recipe import Strategy
from envsetup.core.models.requirement import ToolId


class PlannedStrategy(BaseModel):
    """One candidate action produced by the planner, before it runs."""

    model_config = ConfigDict(frozen=True)

    strategy: Strategy
    manager: str | None = None
    packages: tuple[str, ...] = ()
    url: str | None = None
    label: str = ""

    def describe(self) -> str:
        if self.url:
            return f"{self.strategy.value}: {self.url}"
        pkgs = " ".join(self.packages)
        return f"{self.strategy.value} ({self.manager}): {pkgs}"


class InstallAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    tool: ToolId
    strategy: Strategy
    manager: str | None = None
    packages: tuple[str, ...] = ()
    url: str | None = None
    ok: bool = False
    exit_status: int | None = None
    error_kind: str | None = None     # InstallError | VerificationError | ...
    reason: str = ""
    hint: str | None = None
    dry_run: bool = False
    duration_ms: int = 0
    probe: ProbeResult | None = None
    warnings: tuple[str, ...] = Field(default_factory=tuple)

    @classmethod
    def from_plan(cls, tool: ToolId, planned: PlannedStrategy, **kwargs) -> InstallAttempt:
        return cls(
            tool=tool,
            strategy=planned.strategy,
            manager=planned.manager,
            packages=planned.packages,
            url=planned.url,
            **kwargs,
        )

    def describe(self) -> str:
        """One-line, user-facing summary of what was tried and what happened."""
        target = self.url or " ".join(self.packages) or "-"
        via = f" via {self.manager}" if self.manager else ""
        if self.dry_run:
            return f"[dry-run] would try {self.strategy.value}{via}: {target}"
        status = "ok" if self.ok else "failed"
        exit_label = f" (exit {self.exit_status})" if self.exit_status is not None else ""
        line = f"{self.strategy.value}{via}: {target} -> {status}{exit_label}"
        if self.reason and not self.ok:
            line += f": {self.reason}"
        return line

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "manager": self.manager,
            "packages": list(self.packages),
            "url": self.url,
            "ok": self.ok,
            "exit_status": self.exit_status,
            "error_kind": self.error_kind,
            "reason": self.reason,
            "hint": self.hint,
            "dry_run": self.dry_run,
            "duration_ms": self.duration_ms,
            "probe": self.probe.to_dict() if self.probe else None,
            "warnings": list(self.warnings),
        }
